"""Structured models shared by the directory, the rule synthesizers and the facade."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from triage.errors import ConsistencyError

RiskBand = Literal["immediate", "urgent", "routine"]
OpsPriority = Literal["immediate", "urgent", "routine", "batch"]
TestCategory = Literal["emergency", "urgent", "routine", "edge-case"]
Archetype = Literal["cardiac", "headache", "musculoskeletal", "none"]
CitationType = Literal["guideline", "decision-rule", "classification", "protocol"]

# Higher = more severe.
BAND_SEVERITY: dict[str, int] = {"routine": 0, "urgent": 1, "immediate": 2}


class Patient(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    age: Optional[int] = Field(default=None, ge=0, le=120)
    gender: Optional[Literal["male", "female", "other"]] = None
    archetype: Archetype = "none"
    registered: bool = True

    @property
    def label(self) -> str:
        if not self.registered:
            return self.name
        parts = [self.name]
        if self.age is not None:
            parts.append(f"{self.age}y")
        if self.gender:
            parts.append(self.gender.capitalize())
        return ", ".join(parts)


class TimelineEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: str = Field(description="Human-readable relative timestamp, e.g. 'Yesterday 14:10'.")
    note: str = Field(description="Free-text clinical note for that point in time.")


class Citation(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    authors: Optional[tuple[str, ...]] = None
    journal: Optional[str] = None
    year: Optional[int] = None
    relevance: Optional[str] = None
    url: Optional[str] = None
    type: CitationType = "guideline"


class RationaleProfile(BaseModel):
    """Canned narrative for a patient's condition archetype."""

    model_config = ConfigDict(frozen=True)

    archetype: Archetype
    summary: str
    reasoning: tuple[str, ...]
    evidence: tuple[str, ...]
    citations: tuple[Citation, ...] = ()


class PatientRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    patient: Patient
    timeline: tuple[TimelineEntry, ...] = ()
    profile: RationaleProfile


class Classification(BaseModel):
    model_config = ConfigDict(frozen=True)

    rule_id: str
    band: RiskBand
    probability: float = Field(ge=0.0, le=1.0)
    explanations: tuple[str, ...] = Field(min_length=1)
    archetype: Archetype = "none"
    test_category: TestCategory


class RiskAssessment(BaseModel):
    band: RiskBand
    probability: float = Field(
        ge=0.0,
        le=1.0,
        description="Probability that the presentation needs urgent care.",
    )
    explanations: list[str] = Field(
        min_length=1,
        description="Evidentiary indicators that justify the band.",
    )


class RoutingMeta(BaseModel):
    priority: OpsPriority
    test_category: Optional[TestCategory] = Field(
        default=None,
        description="Diagnostic display tag only; never used for scoring.",
    )


class CarePlan(BaseModel):
    severity: RiskBand = Field(description="Band this disposition was authored for.")
    disposition: str
    primary_recommendation: str
    actions: list[str] = Field(min_length=1)
    timeframe: Optional[str] = None
    follow_up: Optional[list[str]] = None
    warnings: Optional[list[str]] = None
    confidence: float = Field(ge=0.0, le=1.0)


class Rationale(BaseModel):
    summary: str
    reasoning: list[str] = Field(min_length=1)
    evidence: list[str] = Field(min_length=1)
    citations: list[Citation] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)
    model_used: str = Field(description="Attribution label of the rule set that produced this.")
    timestamp: datetime


class PatientRef(BaseModel):
    key: str
    label: str
    registered: bool


class TriageResult(BaseModel):
    risk: RiskAssessment
    care_plan: CarePlan
    rationale: Rationale
    routing: Optional[RoutingMeta] = None
    patient: PatientRef
    matched_rule: str

    def check_consistency(self) -> "TriageResult":
        """Raise ConsistencyError unless band, plan and routing agree."""
        # Local import keeps models.py a leaf module.
        from triage.rules.taxonomy import priority_is_consistent

        band = self.risk.band
        if self.care_plan.severity != band:
            raise ConsistencyError(
                "Care plan severity does not match risk band",
                details={"band": band, "plan_severity": self.care_plan.severity},
            )
        if self.routing is not None and not priority_is_consistent(band, self.routing.priority):
            raise ConsistencyError(
                "Routing priority does not match risk band",
                details={"band": band, "priority": self.routing.priority},
            )
        return self
