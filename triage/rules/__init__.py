"""Deterministic triage rules: classifier, care plans, rationale and routing."""

from triage.rules.care_plans import build_plan
from triage.rules.classifier import RULES, classify, normalize_text, rule_for
from triage.rules.rationale import build_rationale
from triage.rules.taxonomy import compute_priority, priority_is_consistent

__all__ = [
    "RULES",
    "build_plan",
    "build_rationale",
    "classify",
    "compute_priority",
    "normalize_text",
    "priority_is_consistent",
    "rule_for",
]
