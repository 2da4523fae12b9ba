import logging

import pytest

from triage.errors import UnmappedRuleError
from triage.rules import care_plans
from triage.rules.care_plans import (
    AUTHORED_PLANS,
    FALLBACK_PLANS,
    authored_plan,
    build_plan,
    fallback_plan,
)
from triage.rules.classifier import DEFAULT_RULE, RULES


@pytest.mark.parametrize("rule", [*RULES, DEFAULT_RULE], ids=lambda r: r.rule_id)
def test_every_rule_has_a_plan_matching_its_band(rule):
    plan = authored_plan(rule.band, rule.rule_id)
    assert plan.severity == rule.band
    assert plan.actions
    assert 0.0 <= plan.confidence <= 1.0


def test_chest_pain_plan():
    plan = build_plan("immediate", "chest_pain")
    assert plan.disposition == "Go to Emergency Department now"
    assert plan.follow_up == ["ECG on arrival", "Serial troponin"]
    assert "Call 999 if syncope or worsening" in plan.warnings


def test_general_assessment_plan_asks_for_review_within_24_hours():
    plan = build_plan("urgent", "general_assessment")
    assert plan.severity == "urgent"
    assert any("within 24 hours" in item for item in plan.follow_up)


def test_unknown_rule_falls_back_to_band_plan(caplog):
    with caplog.at_level(logging.WARNING, logger="triage"):
        plan = build_plan("routine", "not_a_rule")
    assert plan == fallback_plan("routine")
    assert plan.severity == "routine"
    assert "configuration defect" in caplog.text


def test_severity_mismatch_is_treated_as_unmapped():
    with pytest.raises(UnmappedRuleError) as excinfo:
        authored_plan("routine", "chest_pain")
    assert excinfo.value.details["plan_severity"] == "immediate"
    assert build_plan("routine", "chest_pain").severity == "routine"


def test_fallback_plans_cover_every_band():
    for band in ("immediate", "urgent", "routine"):
        plan = fallback_plan(band)
        assert plan.severity == band
        assert plan.confidence == pytest.approx(0.4)


def test_returned_plans_do_not_share_authored_lists():
    plan = build_plan("immediate", "chest_pain")
    plan.actions.append("tampered")
    assert "tampered" not in AUTHORED_PLANS["chest_pain"]["actions"]
    assert "tampered" not in build_plan("immediate", "chest_pain").actions


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        care_plans.AUTHORED_PLANS["new"] = {}  # type: ignore[index]
    with pytest.raises(TypeError):
        FALLBACK_PLANS["urgent"] = {}  # type: ignore[index]
