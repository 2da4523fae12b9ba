from typing import Literal

from pydantic import BaseModel, Field


class TriageRequest(BaseModel):
    text: str | None = None
    patient_key: str | None = None


class BatchTriageRequest(BaseModel):
    batch_id: str | None = None
    requests: list[TriageRequest] = Field(default_factory=list)
    system_load: Literal["normal", "high"] = "normal"


class ErrorBody(BaseModel):
    code: str
    message: str
    details: dict = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    error: ErrorBody


class PatientItem(BaseModel):
    key: str
    label: str
    name: str
    age: int | None = None
    gender: str | None = None
    registered: bool


class PatientListResponse(BaseModel):
    patients: list[PatientItem]


class TimelineItem(BaseModel):
    time: str
    note: str


class TimelineResponse(BaseModel):
    key: str
    label: str
    registered: bool
    timeline: list[TimelineItem]
