"""Risk band to operational priority mapping."""

from __future__ import annotations

from typing import Literal

from triage.config.logger import get_logger
from triage.models import OpsPriority, RiskBand, TestCategory

logger = get_logger(__name__)

SystemLoad = Literal["normal", "high"]

DEFAULT_PRIORITY_BY_RISK: dict[str, str] = {
    "immediate": "immediate",
    "urgent": "urgent",
    "routine": "routine",
}

SUGGESTED_RISK_BY_TEST: dict[str, str] = {
    "emergency": "immediate",
    "urgent": "urgent",
    "routine": "routine",
    "edge-case": "routine",
}

# Pairs allowed besides the identity mapping.
_ALLOWED_OVERRIDES = {
    ("routine", "batch"),
    ("urgent", "immediate"),
}


def compute_priority(
    band: RiskBand,
    *,
    background: bool = False,
    system_load: SystemLoad = "normal",
) -> OpsPriority:
    """Derive the ops priority for a band.

    The interactive path calls this with no overrides and always gets the
    identity mapping. Only the background path can produce ``batch``.

    ``system_load="high"`` routes an ``urgent`` band to ``immediate``. This is
    the one case where priority and band differ upward; only batch callers
    pass it, and ``priority_is_consistent`` accepts the pair.
    """
    if band == "routine" and background:
        return "batch"
    if band == "urgent" and system_load == "high":
        return "immediate"
    return DEFAULT_PRIORITY_BY_RISK[band]  # type: ignore[return-value]


def priority_is_consistent(band: str, priority: str) -> bool:
    if DEFAULT_PRIORITY_BY_RISK.get(band) == priority:
        return True
    return (band, priority) in _ALLOWED_OVERRIDES


def suggested_band(test_category: TestCategory) -> RiskBand:
    return SUGGESTED_RISK_BY_TEST[test_category]  # type: ignore[return-value]


def check_test_category(band: RiskBand, test_category: TestCategory | None) -> bool:
    """Warn when a test tag implying 'immediate' rides on a lower band."""
    if not test_category:
        return True
    if suggested_band(test_category) == "immediate" and band != "immediate":
        logger.warning(
            "[taxonomy] test tag '%s' usually implies 'immediate' risk; got '%s'",
            test_category,
            band,
        )
        return False
    return True
