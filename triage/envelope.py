from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any


def _meta(start_ts: float) -> dict[str, Any]:
    return {
        "version": "1.0",
        "ts": datetime.now(timezone.utc).isoformat(),
        "latency_ms": int((time.perf_counter() - start_ts) * 1000),
    }


def ok_payload(item_id: str, data: dict[str, Any], start_ts: float) -> dict[str, Any]:
    return {
        "id": item_id,
        "ok": True,
        "data": data,
        "error": None,
        "meta": _meta(start_ts),
    }


def error_payload(
    item_id: str,
    error: dict[str, Any],
    start_ts: float,
    data: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return {
        "id": item_id,
        "ok": False,
        "data": data or {},
        "error": error,
        "meta": _meta(start_ts),
    }
