import pytest

from triage.errors import InvalidInputError
from triage.models import BAND_SEVERITY
from triage.rules import classifier
from triage.rules.classifier import (
    DEFAULT_RULE_ID,
    RULES,
    SymptomRule,
    assert_rule_table,
    classify,
    normalize_text,
)


def test_normalize_text_collapses_case_and_whitespace():
    assert normalize_text("  Severe   CHEST\tpain \n") == "severe chest pain"
    assert normalize_text("I can’t breathe") == "i can't breathe"
    assert normalize_text(None) == ""


@pytest.mark.parametrize(
    "text, rule_id, band",
    [
        ("Severe chest pain for 20 minutes with sweating", "chest_pain", "immediate"),
        ("my dad says he can't breathe properly", "breathing_difficulty", "immediate"),
        ("her face drooping and slurred speech", "stroke_signs", "immediate"),
        ("worst headache of my life, came on suddenly", "thunderclap_headache", "immediate"),
        ("I fell and think it's fractured", "suspected_fracture", "urgent"),
        ("high fever since last night", "high_fever", "urgent"),
        ("I have a mild headache for 2 hours", "mild_headache", "routine"),
        ("I twisted my ankle playing football, can still walk", "ankle_sprain", "routine"),
        ("runny nose and sneezing", "common_cold", "routine"),
    ],
)
def test_classify_matches_expected_rule(text, rule_id, band):
    result = classify(text)
    assert result.rule_id == rule_id
    assert result.band == band
    assert 0.0 <= result.probability <= 1.0
    assert result.explanations


def test_more_severe_rule_wins_when_several_match():
    # Both a routine headache phrase and an immediate chest pain phrase.
    result = classify("headache and chest pain since this morning")
    assert result.rule_id == "chest_pain"
    assert result.band == "immediate"


def test_cannot_walk_escalates_ankle_injury():
    result = classify("I twisted my ankle and now I cannot walk")
    assert result.rule_id == "suspected_fracture"
    assert result.band == "urgent"


def test_phrases_match_on_word_boundaries_only():
    # "sprainers" contains "sprain" but must not count as a match.
    assert classify("sprained wrist").rule_id == "soft_tissue_injury"
    assert classify("sprainers everywhere").rule_id == DEFAULT_RULE_ID


def test_unmatched_text_defaults_to_urgent():
    result = classify("I have been feeling unwell with general fatigue")
    assert result.rule_id == DEFAULT_RULE_ID
    assert result.band == "urgent"
    assert result.band != "routine"


@pytest.mark.parametrize("text", ["", "   ", "\n\t", None])
def test_classify_rejects_empty_text(text):
    with pytest.raises(InvalidInputError) as excinfo:
        classify(text)
    assert excinfo.value.code == "INVALID_INPUT"


def test_rule_table_ordered_by_severity():
    severities = [BAND_SEVERITY[rule.band] for rule in RULES]
    assert severities == sorted(severities, reverse=True)
    assert len({rule.rule_id for rule in RULES}) == len(RULES)


def test_assert_rule_table_rejects_out_of_order_rules():
    routine = SymptomRule("a", "routine", ("aaa",), 0.1, ("x",))
    immediate = SymptomRule("b", "immediate", ("bbb",), 0.9, ("y",))
    with pytest.raises(ValueError):
        assert_rule_table((routine, immediate))


def test_assert_rule_table_rejects_duplicates():
    rule = SymptomRule("a", "routine", ("aaa",), 0.1, ("x",))
    with pytest.raises(ValueError):
        assert_rule_table((rule, rule))


def test_rule_for_knows_default_rule():
    assert classifier.rule_for(DEFAULT_RULE_ID).band == "urgent"
    assert classifier.rule_for("nope") is None


def test_non_ankle_sprain_gets_neutral_explanations():
    result = classify("I sprained my wrist")
    assert result.rule_id == "soft_tissue_injury"
    assert result.band == "routine"
    assert not any("ankle" in line.lower() for line in result.explanations)
    assert classify("I sprained my ankle yesterday").rule_id == "ankle_sprain"
