"""Static, read-only patient directory."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from triage.models import Citation, Patient, PatientRecord, RationaleProfile, TimelineEntry

UNREGISTERED_KEY = "UNREG"

UNREGISTERED_PATIENT = Patient(
    key=UNREGISTERED_KEY,
    name="Unregistered Patient",
    archetype="none",
    registered=False,
)

UNREGISTERED_PROFILE = RationaleProfile(
    archetype="none",
    summary=(
        "This unregistered patient requires comprehensive clinical assessment as no "
        "previous medical history is available. Initial triage focuses on symptom "
        "severity and immediate risk stratification."
    ),
    reasoning=(
        "No medical history available for risk stratification context",
        "Clinical assessment must rely solely on presenting symptoms",
        "Safety-first approach required due to unknown background",
        "Comprehensive history taking essential for proper evaluation",
    ),
    evidence=(
        "Unknown medical history - Limits risk assessment accuracy",
        "No baseline comparison - Symptoms must be evaluated independently",
        "Medication history unknown - Potential drug interactions unclear",
        "Previous treatments unknown - May affect current presentation",
    ),
    citations=(
        Citation(
            title="Emergency Medicine Assessment Guidelines",
            url="https://www.rcpch.ac.uk/resources/emergency-care",
            relevance="Structured assessment when no prior record is available",
            type="protocol",
        ),
        Citation(
            title="Triage Without History Protocol",
            url="https://www.emergency-medicine.org/",
            relevance="Safety-first triage for patients with unknown background",
            type="protocol",
        ),
    ),
)

_CARDIAC_PROFILE = RationaleProfile(
    archetype="cardiac",
    summary=(
        "Recorded history shows chest discomfort progressing to severe pain, which "
        "together with autonomic symptoms suggests acute coronary syndrome requiring "
        "immediate evaluation."
    ),
    reasoning=(
        "Chest pain duration >15 minutes raises concern for ACS",
        "Associated autonomic symptoms (diaphoresis, nausea) support cardiac etiology",
        "Previous troponin normal but clinical deterioration noted",
    ),
    evidence=(
        "Timeline shows progression from mild to severe symptoms",
        "Single normal troponin does not exclude evolving myocardial injury",
    ),
    citations=(
        Citation(
            title="2020 ESC Guidelines for ACS",
            authors=("Collet JP", "Thiele H", "Barbato E"),
            journal="European Heart Journal",
            year=2021,
            url="https://academic.oup.com/eurheartj/article/42/14/1289/6274647",
            relevance="Serial troponin strategy after an initial normal result",
        ),
    ),
)

_HEADACHE_PROFILE = RationaleProfile(
    archetype="headache",
    summary=(
        "Recorded history shows progressive headaches over 3 days, now accompanied by "
        "nausea and photophobia, suggesting migraine or tension headache with "
        "secondary features."
    ),
    reasoning=(
        "Progressive headache over 3 days indicates worsening condition",
        "Nausea and photophobia are concerning secondary symptoms",
        "Work-related stress may be contributing factor",
        "Sleep disturbance suggests significant impact on daily functioning",
    ),
    evidence=(
        "3-day progression - Suggests evolving neurological condition",
        "Photophobia - Classic sign of migraine or meningeal irritation",
        "Sleep disruption - Indicates moderate to severe headache impact",
        "Work stress correlation - Common trigger for tension headaches",
    ),
    citations=(
        Citation(
            title="International Headache Society Classification",
            url="https://ichd-3.org/",
            relevance="Diagnostic criteria for migraine and tension-type headache",
            type="classification",
        ),
    ),
)

_MSK_PROFILE = RationaleProfile(
    archetype="musculoskeletal",
    summary=(
        "Recorded history shows a week-old ankle injury from a fall during walking; "
        "ongoing discomfort with weight bearing suggests possible ligament strain or "
        "minor fracture."
    ),
    reasoning=(
        "Mechanism of injury (fall during walk) suggests moderate force trauma",
        "Weight-bearing difficulty indicates structural involvement",
        "One week duration suggests healing complications",
    ),
    evidence=(
        "Fall mechanism - Sufficient force for ligamentous injury",
        "Timeline progression - Slower healing than expected for simple sprain",
    ),
    citations=(
        Citation(
            title="NICE Fracture Guidelines",
            journal="NICE guideline NG38",
            year=2016,
            url="https://www.nice.org.uk/guidance/ng38",
            relevance="Imaging thresholds when recovery is slower than expected",
        ),
    ),
)

_RECORDS = (
    PatientRecord(
        patient=Patient(key="P001", name="John Carter", age=45, gender="male", archetype="cardiac"),
        timeline=(
            TimelineEntry(time="Yesterday 14:10", note="Mild chest discomfort; troponin normal."),
            TimelineEntry(time="Today 08:55", note="Severe pain; GTN given; ECG pending."),
        ),
        profile=_CARDIAC_PROFILE,
    ),
    PatientRecord(
        patient=Patient(key="P002", name="Sarah Wilson", age=32, gender="female", archetype="headache"),
        timeline=(
            TimelineEntry(time="3 days ago", note="Headaches started; stress at work."),
            TimelineEntry(time="Yesterday", note="Pain worsening; affecting sleep quality."),
            TimelineEntry(time="Today 09:30", note="Nausea and photophobia reported."),
        ),
        profile=_HEADACHE_PROFILE,
    ),
    PatientRecord(
        patient=Patient(key="P003", name="Michael Chen", age=67, gender="male", archetype="musculoskeletal"),
        timeline=(
            TimelineEntry(time="Last week", note="Ankle twisted during morning walk."),
            TimelineEntry(time="3 days ago", note="Swelling reduced; mobility improving."),
            TimelineEntry(time="Today", note="Still some discomfort when weight bearing."),
        ),
        profile=_MSK_PROFILE,
    ),
)

UNREGISTERED_RECORD = PatientRecord(
    patient=UNREGISTERED_PATIENT,
    timeline=(),
    profile=UNREGISTERED_PROFILE,
)

DIRECTORY: Mapping[str, PatientRecord] = MappingProxyType(
    {record.patient.key: record for record in _RECORDS}
)


def _normalize_key(patient_key: str | None) -> str:
    return (patient_key or "").strip().upper()


def lookup(patient_key: str | None) -> PatientRecord:
    """Resolve a key to its record; anything unknown is the unregistered sentinel."""
    return DIRECTORY.get(_normalize_key(patient_key), UNREGISTERED_RECORD)


def is_registered(patient_key: str | None) -> bool:
    return _normalize_key(patient_key) in DIRECTORY


def timeline_for(patient_key: str | None) -> tuple[TimelineEntry, ...]:
    return lookup(patient_key).timeline


def list_patients(include_unregistered: bool = True) -> list[dict]:
    """Picker rows: key, label and identity fields, in directory order."""
    patients = [record.patient for record in _RECORDS]
    if include_unregistered:
        patients.append(UNREGISTERED_PATIENT)
    return [
        {
            "key": p.key,
            "label": p.label,
            "name": p.name,
            "age": p.age,
            "gender": p.gender,
            "registered": p.registered,
        }
        for p in patients
    ]
