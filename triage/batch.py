"""Non-interactive bulk triage.

Each item is triaged independently on the background path, which is the only
path that can route a routine band to the ``batch`` priority. One bad item
never fails the whole batch: it comes back as an error envelope.
"""

from __future__ import annotations

import time
import uuid
from collections import Counter
from datetime import datetime
from typing import Any, Mapping, Sequence

from triage.config.logger import get_logger
from triage.config.settings import settings
from triage.engine import run_triage
from triage.envelope import error_payload, ok_payload
from triage.errors import InvalidInputError
from triage.rules.taxonomy import SystemLoad

logger = get_logger(__name__)


def new_batch_id() -> str:
    return f"batch-{uuid.uuid4().hex[:12]}"


def validate_batch(items: Any) -> Sequence[Mapping[str, Any]]:
    if not isinstance(items, Sequence) or isinstance(items, (str, bytes)):
        raise InvalidInputError("Requests array is required", field="requests")
    if not items:
        raise InvalidInputError("At least one request is required", field="requests")
    if len(items) > settings.BATCH_MAX_REQUESTS:
        raise InvalidInputError(
            f"Batch size limited to {settings.BATCH_MAX_REQUESTS} requests",
            field="requests",
            details={"count": len(items), "max": settings.BATCH_MAX_REQUESTS},
        )
    return items


def triage_batch(
    items: Sequence[Mapping[str, Any]],
    *,
    batch_id: str | None = None,
    system_load: SystemLoad = "normal",
    now: datetime | None = None,
) -> dict[str, Any]:
    validate_batch(items)
    batch_id = (batch_id or "").strip() or new_batch_id()
    logger.info("[batch] start id=%s count=%s load=%s", batch_id, len(items), system_load)

    results: list[dict[str, Any]] = []
    priorities: Counter[str] = Counter()
    for index, item in enumerate(items, start=1):
        item_id = f"{batch_id}-{index}"
        start_ts = time.perf_counter()
        if not isinstance(item, Mapping):
            err = InvalidInputError("Request must be an object", field=f"requests[{index - 1}]")
            results.append(error_payload(item_id, err.to_dict(), start_ts))
            continue
        try:
            result = run_triage(
                item.get("text"),
                item.get("patient_key"),
                background=True,
                system_load=system_load,
                now=now,
            )
        except InvalidInputError as exc:
            logger.info("[batch] item %s rejected: %s", item_id, exc.message)
            results.append(error_payload(item_id, exc.to_dict(), start_ts))
            continue
        if result.routing is not None:
            priorities[result.routing.priority] += 1
        results.append(ok_payload(item_id, result.model_dump(mode="json"), start_ts))

    succeeded = sum(1 for r in results if r["ok"])
    summary = {
        "batch_id": batch_id,
        "total": len(results),
        "succeeded": succeeded,
        "failed": len(results) - succeeded,
        "by_priority": dict(priorities),
        "results": results,
    }
    logger.info(
        "[batch] done id=%s succeeded=%s failed=%s",
        batch_id,
        summary["succeeded"],
        summary["failed"],
    )
    return summary
