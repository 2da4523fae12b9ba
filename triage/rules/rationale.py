"""Patient-aware clinical rationale built from the matched rule and the directory."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Iterable, Mapping

from triage.config.logger import get_logger
from triage.config.settings import settings
from triage.directory.patients import lookup
from triage.errors import UnmappedRuleError
from triage.models import Citation, PatientRecord, Rationale, RiskBand
from triage.rules.classifier import rule_for

logger = get_logger(__name__)


@dataclass(frozen=True)
class RuleNarrative:
    summary: str
    reasoning: tuple[str, ...]
    evidence: tuple[str, ...]
    citations: tuple[Citation, ...] = ()


_NICE_CHEST_PAIN = Citation(
    title="NICE CG95 Chest pain of recent onset",
    journal="NICE clinical guideline CG95",
    year=2016,
    url="https://www.nice.org.uk/guidance/cg95",
    relevance="Immediate referral for acute chest pain with autonomic features",
)
_AHA_CHEST_PAIN = Citation(
    title="AHA/ACC Chest Pain Guidelines",
    authors=("Gulati M", "Levy PD", "Mukherjee D"),
    journal="Circulation",
    year=2021,
    url="https://www.ahajournals.org/doi/10.1161/CIR.0000000000001030",
    relevance="Risk pathways for acute chest pain",
)
_NICE_HEADACHE = Citation(
    title="NICE Headache Guidelines",
    journal="NICE clinical guideline CG150",
    year=2021,
    url="https://www.nice.org.uk/guidance/cg150",
    relevance="Red-flag features and primary care management of headache",
)
_OTTAWA = Citation(
    title="Ottawa Ankle Rules",
    authors=("Stiell IG",),
    url="https://www.mdcalc.com/ottawa-ankle-rule",
    relevance="Decides when ankle injuries need X-ray",
    type="decision-rule",
)
_NICE_FRACTURES = Citation(
    title="NICE Fracture Guidelines",
    journal="NICE guideline NG38",
    year=2016,
    url="https://www.nice.org.uk/guidance/ng38",
    relevance="Imaging and referral for suspected fractures",
)
_TRIAGE_PROTOCOL = Citation(
    title="Manchester Triage System",
    relevance="Default to a higher priority when the presentation is unclear",
    type="protocol",
)

NARRATIVES: Mapping[str, RuleNarrative] = MappingProxyType({
    "chest_pain": RuleNarrative(
        summary=(
            "Severe chest pain with autonomic symptoms suggests acute coronary syndrome "
            "requiring immediate evaluation."
        ),
        reasoning=(
            "Chest pain is a primary red-flag presentation",
            "Autonomic symptoms (diaphoresis, nausea) support a cardiac cause",
            "ACS cannot be excluded without ECG and troponin",
        ),
        evidence=(
            "Severe chest pain >15min - High risk feature for STEMI/NSTEMI",
            "Diaphoresis + nausea - Autonomic response typical of cardiac ischemia",
        ),
        citations=(_NICE_CHEST_PAIN, _AHA_CHEST_PAIN),
    ),
    "breathing_difficulty": RuleNarrative(
        summary="Breathing difficulty indicates possible respiratory or airway compromise.",
        reasoning=(
            "Respiratory distress can deteriorate rapidly",
            "Oxygenation must be assessed without delay",
        ),
        evidence=("Reported breathing difficulty - Red flag for hypoxia",),
        citations=(
            Citation(
                title="NICE NG51 Sepsis: recognition, diagnosis and early management",
                url="https://www.nice.org.uk/guidance/ng51",
                relevance="Respiratory rate and oxygen saturation as high-risk criteria",
            ),
        ),
    ),
    "stroke_signs": RuleNarrative(
        summary="Focal neurological symptoms are consistent with an acute stroke until proven otherwise.",
        reasoning=(
            "FAST features (face, arm, speech) are present",
            "Outcome depends on time to reperfusion therapy",
        ),
        evidence=("Focal neurological deficit - Possible acute stroke",),
        citations=(
            Citation(
                title="NICE NG128 Stroke and TIA in over 16s",
                url="https://www.nice.org.uk/guidance/ng128",
                relevance="Immediate admission pathway for suspected stroke",
            ),
        ),
    ),
    "anaphylaxis": RuleNarrative(
        summary="Airway swelling after a possible allergen exposure suggests anaphylaxis.",
        reasoning=(
            "Airway involvement defines a life-threatening reaction",
            "Adrenaline is first-line treatment",
        ),
        evidence=("Throat or tongue swelling - Airway compromise risk",),
        citations=(
            Citation(
                title="Emergency treatment of anaphylaxis",
                journal="Resuscitation Council UK",
                year=2021,
                url="https://www.resus.org.uk/library/additional-guidance/guidance-anaphylaxis",
                relevance="Adrenaline dosing and escalation",
                type="protocol",
            ),
        ),
    ),
    "thunderclap_headache": RuleNarrative(
        summary="A sudden or severe headache carries red flags for an intracranial cause.",
        reasoning=(
            "Sudden-onset severe headache may indicate subarachnoid haemorrhage",
            "Associated neck stiffness or visual change raises concern for meningitis or raised pressure",
        ),
        evidence=("Severe or thunderclap headache - Red flag feature",),
        citations=(_NICE_HEADACHE,),
    ),
    "mental_health_crisis": RuleNarrative(
        summary="Reported suicidal intent, self-harm or overdose is an immediate risk to life.",
        reasoning=(
            "Expressed intent or overdose requires same-hour crisis assessment",
            "Physical harm from ingestion may not be apparent yet",
        ),
        evidence=("Self-reported risk to life - Immediate safeguarding needed",),
        citations=(
            Citation(
                title="NICE NG225 Self-harm: assessment, management and preventing recurrence",
                url="https://www.nice.org.uk/guidance/ng225",
                relevance="Emergency assessment after self-harm",
            ),
        ),
    ),
    "major_trauma": RuleNarrative(
        summary="Major trauma, uncontrolled bleeding or loss of consciousness requires emergency care.",
        reasoning=(
            "Loss of consciousness or heavy bleeding indicates possible haemodynamic compromise",
            "Occult injuries must be excluded by a trauma team",
        ),
        evidence=("Mechanism or signs of major trauma reported",),
        citations=(
            Citation(
                title="NICE NG39 Major trauma: assessment and initial management",
                url="https://www.nice.org.uk/guidance/ng39",
                relevance="Pre-hospital and emergency trauma pathway",
            ),
        ),
    ),
    "suspected_fracture": RuleNarrative(
        summary="Inability to bear weight or visible deformity suggests a possible fracture.",
        reasoning=(
            "Inability to bear weight meets Ottawa criteria for imaging",
            "Deformity or severe pain needs same-day X-ray",
        ),
        evidence=("Unable to weight bear - Imaging indicated",),
        citations=(_OTTAWA, _NICE_FRACTURES),
    ),
    "high_fever": RuleNarrative(
        summary="High or persistent fever needs same-day review to exclude serious infection.",
        reasoning=(
            "Persistent fever may indicate bacterial infection",
            "Rash or rigors raise concern for sepsis",
        ),
        evidence=("High or prolonged fever reported",),
        citations=(
            Citation(
                title="NICE NG51 Sepsis: recognition, diagnosis and early management",
                url="https://www.nice.org.uk/guidance/ng51",
                relevance="Risk stratification of febrile adults",
            ),
        ),
    ),
    "abdominal_pain": RuleNarrative(
        summary="Abdominal pain needs same-day assessment to exclude a surgical cause.",
        reasoning=(
            "Appendicitis, obstruction and other surgical causes present with abdominal pain",
            "Examination is required to judge severity",
        ),
        evidence=("Abdominal pain reported - Surgical causes not yet excluded",),
        citations=(
            Citation(
                title="NICE CKS Abdominal pain - acute",
                url="https://cks.nice.org.uk/",
                relevance="Primary care assessment of acute abdominal pain",
            ),
        ),
    ),
    "persistent_vomiting": RuleNarrative(
        summary="Ongoing vomiting risks dehydration and needs same-day review.",
        reasoning=(
            "Inability to keep fluids down leads to dehydration",
            "Blood in vomit indicates possible GI bleeding",
        ),
        evidence=("Vomiting reported - Hydration status unknown",),
        citations=(
            Citation(
                title="NICE CKS Nausea and vomiting in adults",
                url="https://cks.nice.org.uk/",
                relevance="Assessment of dehydration and red flags",
            ),
        ),
    ),
    "mild_headache": RuleNarrative(
        summary="A mild headache without red-flag features can be managed in primary care.",
        reasoning=(
            "No sudden onset, neck stiffness or neurological signs reported",
            "Short duration and mild severity suggest a primary headache",
        ),
        evidence=("Mild headache of short duration - Low risk features",),
        citations=(_NICE_HEADACHE,),
    ),
    "ankle_sprain": RuleNarrative(
        summary="A twisting ankle injury with preserved weight bearing is consistent with a sprain.",
        reasoning=(
            "Able to weight bear - Ottawa ankle rules not met",
            "Inversion mechanism typical of lateral ligament sprain",
        ),
        evidence=("Walking preserved after injury - Fracture unlikely",),
        citations=(_OTTAWA,),
    ),
    "soft_tissue_injury": RuleNarrative(
        summary="A minor sprain, strain or bruise without red-flag features can be managed with self-care.",
        reasoning=(
            "No deformity, numbness or inability to use the limb reported",
            "Most soft-tissue injuries improve within two weeks",
        ),
        evidence=("Minor soft-tissue injury reported - Low risk features",),
        citations=(
            Citation(
                title="NICE CKS Sprains and strains",
                url="https://cks.nice.org.uk/",
                relevance="Self-care and escalation advice for soft-tissue injuries",
            ),
        ),
    ),
    "common_cold": RuleNarrative(
        summary="Upper respiratory symptoms are consistent with a self-limiting viral illness.",
        reasoning=("Symptoms limited to the upper airway", "No breathing difficulty or high fever reported"),
        evidence=("Coryzal symptoms - Self-limiting course expected",),
        citations=(
            Citation(
                title="NICE CKS Common cold",
                url="https://cks.nice.org.uk/",
                relevance="Self-care advice for upper respiratory tract infection",
            ),
        ),
    ),
    "general_assessment": RuleNarrative(
        summary=(
            "The described symptoms did not match a specific presentation, so they are "
            "triaged conservatively as urgent."
        ),
        reasoning=(
            "No specific red-flag or low-risk pattern identified",
            "Unclassified symptoms are not assumed to be routine",
        ),
        evidence=("Non-specific symptoms - Severity cannot be established from text alone",),
        citations=(_TRIAGE_PROTOCOL,),
    ),
})

FALLBACK_NARRATIVES: Mapping[str, RuleNarrative] = MappingProxyType({
    "immediate": RuleNarrative(
        summary="Features of this presentation require immediate emergency assessment.",
        reasoning=("Red-flag features identified", "Emergency evaluation recommended"),
        evidence=("Immediate-risk pattern matched",),
        citations=(_TRIAGE_PROTOCOL,),
    ),
    "urgent": RuleNarrative(
        summary="This presentation needs urgent clinical assessment.",
        reasoning=("Severity cannot be fully established", "Urgent review recommended for safety"),
        evidence=("Urgent-risk pattern matched",),
        citations=(_TRIAGE_PROTOCOL,),
    ),
    "routine": RuleNarrative(
        summary="This presentation can be managed through routine care.",
        reasoning=("No red-flag features identified", "Routine care with safety-netting recommended"),
        evidence=("Routine-risk pattern matched",),
        citations=(_TRIAGE_PROTOCOL,),
    ),
})


def narrative_for(rule_id: str) -> RuleNarrative:
    narrative = NARRATIVES.get(rule_id)
    if narrative is None:
        raise UnmappedRuleError(rule_id, component="rationale")
    return narrative


def _merge_citations(base: list[Citation], extra: Iterable[Citation]) -> list[Citation]:
    titles = {c.title for c in base}
    merged = list(base)
    for citation in extra:
        if citation.title not in titles:
            merged.append(citation)
            titles.add(citation.title)
    return merged


def _patient_layer(
    record: PatientRecord,
    rule_archetype: str,
    summary: str,
    reasoning: list[str],
    evidence: list[str],
    citations: list[Citation],
) -> tuple[str, list[Citation], float]:
    patient = record.patient
    profile = record.profile

    if not patient.registered:
        reasoning.extend(profile.reasoning)
        evidence.extend(profile.evidence)
        citations = _merge_citations(citations, profile.citations)
        return f"{summary} {profile.summary}", citations, settings.rationale_confidence(False)

    evidence.extend(f"History ({entry.time}): {entry.note}" for entry in record.timeline)
    if rule_archetype != "none" and rule_archetype == profile.archetype:
        reasoning.extend(profile.reasoning)
        evidence.extend(profile.evidence)
        citations = _merge_citations(citations, profile.citations)
        summary = f"{summary} {profile.summary}"
    else:
        reasoning.append(
            f"Recorded {profile.archetype} history for {patient.name} reviewed; "
            "not directly related to this presentation"
        )
        summary = f"{summary} Recorded history for {patient.label} was reviewed."

    return summary, citations, settings.rationale_confidence(True)


def build_rationale(
    rule_id: str,
    patient_key: str | None,
    *,
    band: RiskBand | None = None,
    now: datetime | None = None,
) -> Rationale:
    """Combine the rule narrative with the patient's history and profile."""
    rule = rule_for(rule_id)
    try:
        narrative = narrative_for(rule_id)
    except UnmappedRuleError as exc:
        fallback_band = band or (rule.band if rule else "urgent")
        logger.warning(
            "[rationale] configuration defect: %s; using %s fallback narrative",
            exc.message,
            fallback_band,
        )
        narrative = FALLBACK_NARRATIVES[fallback_band]

    record = lookup(patient_key)
    reasoning = list(narrative.reasoning)
    evidence = list(narrative.evidence)
    summary, citations, confidence = _patient_layer(
        record,
        rule.archetype if rule else "none",
        narrative.summary,
        reasoning,
        evidence,
        list(narrative.citations),
    )

    return Rationale(
        summary=summary,
        reasoning=reasoning,
        evidence=evidence,
        citations=citations,
        confidence=confidence,
        model_used=settings.RULESET_LABEL,
        timestamp=now or datetime.now(timezone.utc),
    )
