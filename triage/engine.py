"""Single entry point for the presentation layer.

    from triage.engine import triage

    result = triage("Severe chest pain for 20 minutes with sweating", "P001")
    payload = result.model_dump(mode="json")
"""

from datetime import datetime
from typing import Any

from triage.config.logger import get_logger
from triage.config.settings import settings
from triage.errors import InvalidInputError
from triage.graph.builder import get_graph_app
from triage.models import TriageResult
from triage.rules.classifier import normalize_text
from triage.rules.taxonomy import SystemLoad

logger = get_logger(__name__)


def validate_text(text: Any) -> str:
    """Return the normalised text or raise InvalidInputError."""
    if text is None:
        raise InvalidInputError("Symptom description is required")
    if not isinstance(text, str):
        raise InvalidInputError(
            "Symptom description must be text",
            details={"type": type(text).__name__},
        )
    normalized = normalize_text(text)
    if not normalized:
        raise InvalidInputError("Symptom description is empty")
    if len(normalized) > settings.SYMPTOM_TEXT_MAX_CHARS:
        raise InvalidInputError(
            "Symptom description is too long",
            details={"chars": len(normalized), "max_chars": settings.SYMPTOM_TEXT_MAX_CHARS},
        )
    return normalized


def validate_patient_key(patient_key: Any) -> str | None:
    """Keys are optional; when given they must be text."""
    if patient_key is not None and not isinstance(patient_key, str):
        raise InvalidInputError(
            "Patient key must be text",
            field="patient_key",
            details={"type": type(patient_key).__name__},
        )
    return patient_key


def run_triage(
    text: str,
    patient_key: str | None = None,
    *,
    background: bool = False,
    system_load: SystemLoad = "normal",
    now: datetime | None = None,
) -> TriageResult:
    normalized = validate_text(text)
    patient_key = validate_patient_key(patient_key)
    logger.info(
        "[triage] start chars=%s patient=%s background=%s",
        len(normalized),
        patient_key or "-",
        background,
    )
    final_state = get_graph_app().invoke(
        {
            "text": text,
            "patient_key": patient_key,
            "background": background,
            "system_load": system_load,
            "now": now,
        }
    )
    return final_state["result"]


def triage(text: str, patient_key: str | None = None, *, now: datetime | None = None) -> TriageResult:
    """Interactive triage: identity band-to-priority routing, never ``batch``."""
    return run_triage(text, patient_key, now=now)
