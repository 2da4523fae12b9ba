from datetime import datetime
from typing import TypedDict

from triage.models import CarePlan, Classification, Rationale, TriageResult
from triage.rules.taxonomy import SystemLoad


class TriageState(TypedDict, total=False):
    # Input
    text: str
    patient_key: str | None
    background: bool  # True only on the batch path
    system_load: SystemLoad
    now: datetime | None

    # Shared classification, computed once
    classification: Classification

    # Independent branches
    care_plan: CarePlan
    rationale: Rationale

    # Output
    result: TriageResult
