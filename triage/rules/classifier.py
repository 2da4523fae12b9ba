"""Keyword/phrase symptom classifier.

Rules are evaluated top-down, most severe band first, and the first rule whose
phrases appear in the normalised text wins. Text that matches nothing falls
through to ``general_assessment``, which is ``urgent`` and never ``routine``.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field
from typing import Optional

from triage.config.logger import get_logger
from triage.errors import InvalidInputError
from triage.models import BAND_SEVERITY, Archetype, Classification, RiskBand, TestCategory

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")
_APOSTROPHES = str.maketrans({"’": "'", "‘": "'", "ʼ": "'"})

DEFAULT_RULE_ID = "general_assessment"


@dataclass(frozen=True)
class SymptomRule:
    rule_id: str
    band: RiskBand
    phrases: tuple[str, ...]
    probability: float
    explanations: tuple[str, ...]
    archetype: Archetype = "none"
    test_category: TestCategory = "routine"
    pattern: Optional[re.Pattern] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.phrases:
            alternatives = "|".join(re.escape(p) for p in sorted(self.phrases, key=len, reverse=True))
            object.__setattr__(self, "pattern", re.compile(rf"(?<!\w)(?:{alternatives})(?!\w)"))

    def matches(self, normalized: str) -> bool:
        return bool(self.pattern and self.pattern.search(normalized))

    def classification(self) -> Classification:
        return Classification(
            rule_id=self.rule_id,
            band=self.band,
            probability=self.probability,
            explanations=self.explanations,
            archetype=self.archetype,
            test_category=self.test_category,
        )


RULES: tuple[SymptomRule, ...] = (
    # ── immediate ────────────────────────────────────────────────────────
    SymptomRule(
        rule_id="chest_pain",
        band="immediate",
        phrases=(
            "chest pain",
            "chest pains",
            "chest tightness",
            "tight chest",
            "crushing chest",
            "pain in my chest",
            "pressure in my chest",
            "chest pressure",
        ),
        probability=0.92,
        explanations=(
            "Chest pain reported - possible acute coronary syndrome",
            "Pain lasting over 15 minutes is a red-flag feature",
            "Autonomic symptoms (sweating, nausea) raise cardiac risk",
        ),
        archetype="cardiac",
        test_category="emergency",
    ),
    SymptomRule(
        rule_id="breathing_difficulty",
        band="immediate",
        phrases=(
            "difficulty breathing",
            "can't breathe",
            "cannot breathe",
            "struggling to breathe",
            "shortness of breath",
            "short of breath",
            "gasping for air",
            "blue lips",
        ),
        probability=0.9,
        explanations=(
            "Breathing difficulty reported - possible airway or respiratory compromise",
            "Respiratory distress requires immediate assessment",
        ),
        test_category="emergency",
    ),
    SymptomRule(
        rule_id="stroke_signs",
        band="immediate",
        phrases=(
            "face drooping",
            "facial droop",
            "slurred speech",
            "arm weakness",
            "weakness on one side",
            "numbness on one side",
            "sudden confusion",
        ),
        probability=0.93,
        explanations=(
            "Focal neurological signs reported - possible stroke",
            "Time-critical pathway: treatment window depends on symptom onset",
        ),
        test_category="emergency",
    ),
    SymptomRule(
        rule_id="anaphylaxis",
        band="immediate",
        phrases=(
            "anaphylaxis",
            "anaphylactic",
            "throat swelling",
            "throat is closing",
            "swollen tongue",
            "tongue swelling",
            "severe allergic reaction",
        ),
        probability=0.94,
        explanations=(
            "Features of anaphylaxis reported",
            "Airway swelling can progress within minutes",
        ),
        test_category="emergency",
    ),
    SymptomRule(
        rule_id="thunderclap_headache",
        band="immediate",
        phrases=(
            "worst headache",
            "thunderclap headache",
            "sudden severe headache",
            "severe headache",
            "headache with stiff neck",
            "headache with vision changes",
        ),
        probability=0.88,
        explanations=(
            "Sudden or severe headache reported - red flag for intracranial cause",
            "Possible subarachnoid haemorrhage or meningitis must be excluded",
        ),
        archetype="headache",
        test_category="emergency",
    ),
    SymptomRule(
        rule_id="mental_health_crisis",
        band="immediate",
        phrases=(
            "suicidal",
            "kill myself",
            "end my life",
            "self harm",
            "self-harm",
            "overdose",
            "overdosed",
        ),
        probability=0.95,
        explanations=(
            "Risk to life reported (suicidal ideation, self-harm or overdose)",
            "Requires immediate crisis assessment",
        ),
        test_category="emergency",
    ),
    SymptomRule(
        rule_id="major_trauma",
        band="immediate",
        phrases=(
            "severe trauma",
            "heavy bleeding",
            "severe bleeding",
            "won't stop bleeding",
            "unconscious",
            "passed out",
            "collapsed",
            "head injury",
        ),
        probability=0.91,
        explanations=(
            "Major trauma, uncontrolled bleeding or loss of consciousness reported",
            "Haemodynamic or neurological compromise cannot be excluded",
        ),
        archetype="none",
        test_category="emergency",
    ),
    # ── urgent ───────────────────────────────────────────────────────────
    SymptomRule(
        rule_id="suspected_fracture",
        band="urgent",
        phrases=(
            "can't walk",
            "cannot walk",
            "unable to walk",
            "can't bear weight",
            "cannot bear weight",
            "unable to bear weight",
            "bone sticking out",
            "deformed",
            "broken bone",
            "fracture",
            "fractured",
        ),
        probability=0.7,
        explanations=(
            "Inability to bear weight or deformity reported",
            "Meets imaging criteria for possible fracture (Ottawa rules)",
        ),
        archetype="musculoskeletal",
        test_category="urgent",
    ),
    SymptomRule(
        rule_id="high_fever",
        band="urgent",
        phrases=(
            "high fever",
            "high temperature",
            "fever and rash",
            "fever with rash",
            "fever for 3 days",
            "fever for three days",
            "rigors",
            "shaking chills",
        ),
        probability=0.68,
        explanations=(
            "High or persistent fever reported",
            "Possible systemic infection needs same-day review",
        ),
        test_category="urgent",
    ),
    SymptomRule(
        rule_id="abdominal_pain",
        band="urgent",
        phrases=(
            "abdominal pain",
            "stomach pain",
            "belly pain",
            "pain in my stomach",
            "pain in my abdomen",
            "tummy pain",
        ),
        probability=0.66,
        explanations=(
            "Abdominal pain reported",
            "Surgical causes (appendicitis, obstruction) need same-day exclusion",
        ),
        test_category="urgent",
    ),
    SymptomRule(
        rule_id="persistent_vomiting",
        band="urgent",
        phrases=(
            "vomiting",
            "throwing up",
            "can't keep fluids down",
            "cannot keep fluids down",
            "blood in vomit",
        ),
        probability=0.62,
        explanations=(
            "Vomiting reported - risk of dehydration",
            "Fluid intake and red flags need same-day review",
        ),
        test_category="urgent",
    ),
    # ── routine ──────────────────────────────────────────────────────────
    SymptomRule(
        rule_id="mild_headache",
        band="routine",
        phrases=(
            "mild headache",
            "headache",
            "headaches",
            "tension headache",
            "migraine",
        ),
        probability=0.18,
        explanations=(
            "Headache without reported red-flag features",
            "Short duration and mild severity support primary care management",
        ),
        archetype="headache",
        test_category="routine",
    ),
    SymptomRule(
        rule_id="ankle_sprain",
        band="routine",
        phrases=(
            "twisted my ankle",
            "twisted ankle",
            "rolled my ankle",
            "sprained my ankle",
            "sprained ankle",
            "ankle sprain",
        ),
        probability=0.12,
        explanations=(
            "Soft-tissue ankle injury reported",
            "Able to weight bear - Ottawa ankle rules not met",
        ),
        archetype="musculoskeletal",
        test_category="routine",
    ),
    SymptomRule(
        rule_id="soft_tissue_injury",
        band="routine",
        phrases=(
            "sprain",
            "sprained",
            "strained",
            "pulled muscle",
            "pulled a muscle",
            "bruised",
        ),
        probability=0.1,
        explanations=(
            "Minor sprain, strain or bruise reported",
            "Minor soft-tissue injuries usually settle with self-care",
        ),
        archetype="musculoskeletal",
        test_category="routine",
    ),
    SymptomRule(
        rule_id="common_cold",
        band="routine",
        phrases=(
            "runny nose",
            "blocked nose",
            "stuffy nose",
            "common cold",
            "head cold",
            "sneezing",
            "mild cough",
        ),
        probability=0.08,
        explanations=(
            "Upper respiratory symptoms consistent with a self-limiting viral illness",
        ),
        test_category="routine",
    ),
)

DEFAULT_RULE = SymptomRule(
    rule_id=DEFAULT_RULE_ID,
    band="urgent",
    phrases=(),
    probability=0.75,
    explanations=(
        "No specific rule matched the described symptoms",
        "Unclassified presentation defaults to urgent for patient safety",
        "Clinical assessment needed to establish severity",
    ),
    test_category="urgent",
)

_RULES_BY_ID: dict[str, SymptomRule] = {rule.rule_id: rule for rule in (*RULES, DEFAULT_RULE)}


def assert_rule_table(rules: tuple[SymptomRule, ...] = RULES) -> None:
    """Rules must be unique and ordered by non-increasing severity."""
    seen: set[str] = set()
    previous = max(BAND_SEVERITY.values())
    for rule in rules:
        if rule.rule_id in seen or rule.rule_id == DEFAULT_RULE_ID:
            raise ValueError(f"Duplicate rule id: {rule.rule_id}")
        seen.add(rule.rule_id)
        severity = BAND_SEVERITY[rule.band]
        if severity > previous:
            raise ValueError(f"Rule '{rule.rule_id}' is more severe than the rule before it")
        previous = severity
        if not rule.phrases:
            raise ValueError(f"Rule '{rule.rule_id}' has no trigger phrases")


assert_rule_table()


def normalize_text(text: str | None) -> str:
    normalized = unicodedata.normalize("NFKC", text or "").translate(_APOSTROPHES)
    return _WHITESPACE.sub(" ", normalized.casefold()).strip()


def rule_for(rule_id: str) -> SymptomRule | None:
    return _RULES_BY_ID.get(rule_id)


def match_rule(normalized: str) -> SymptomRule:
    for rule in RULES:
        if rule.matches(normalized):
            return rule
    return DEFAULT_RULE


def classify(text: str | None) -> Classification:
    normalized = normalize_text(text)
    if not normalized:
        raise InvalidInputError("Symptom description is empty")

    rule = match_rule(normalized)
    if rule is DEFAULT_RULE:
        logger.info("[classifier] no rule matched (chars=%s), default=%s", len(normalized), rule.rule_id)
    else:
        logger.debug("[classifier] matched rule=%s band=%s", rule.rule_id, rule.band)
    return rule.classification()
