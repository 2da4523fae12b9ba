import logging
from datetime import datetime, timezone

import pytest

from triage.config.settings import settings
from triage.rules.classifier import DEFAULT_RULE, RULES
from triage.rules.rationale import FALLBACK_NARRATIVES, NARRATIVES, build_rationale

NOW = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


def test_every_rule_has_a_narrative():
    for rule in (*RULES, DEFAULT_RULE):
        assert rule.rule_id in NARRATIVES


def test_registered_patient_history_is_cited():
    rationale = build_rationale("chest_pain", "P001", now=NOW)
    assert "History (Yesterday 14:10): Mild chest discomfort; troponin normal." in rationale.evidence
    assert "Previous troponin normal but clinical deterioration noted" in rationale.reasoning
    assert rationale.confidence == pytest.approx(0.92)
    assert rationale.model_used == settings.RULESET_LABEL
    assert rationale.timestamp == NOW


def test_unrelated_history_is_reviewed_but_not_merged():
    rationale = build_rationale("chest_pain", "P003", now=NOW)
    assert any(line.startswith("History (") for line in rationale.evidence)
    assert any("not directly related" in line for line in rationale.reasoning)
    assert "Weight-bearing difficulty indicates structural involvement" not in rationale.reasoning


def test_unregistered_patient_gets_safety_first_rationale():
    rationale = build_rationale("chest_pain", None, now=NOW)
    assert not any(line.startswith("History (") for line in rationale.evidence)
    assert "Safety-first approach required due to unknown background" in rationale.reasoning
    assert rationale.confidence == pytest.approx(settings.RATIONALE_CONFIDENCE_UNREGISTERED)
    titles = [c.title for c in rationale.citations]
    assert "Triage Without History Protocol" in titles


def test_unregistered_confidence_is_lower_than_registered():
    registered = build_rationale("mild_headache", "P002", now=NOW)
    unregistered = build_rationale("mild_headache", "UNKNOWN", now=NOW)
    assert unregistered.confidence < registered.confidence


def test_citations_are_not_duplicated():
    rationale = build_rationale("suspected_fracture", "P003", now=NOW)
    titles = [c.title for c in rationale.citations]
    assert len(titles) == len(set(titles))
    assert "NICE Fracture Guidelines" in titles


def test_unknown_rule_uses_band_fallback(caplog):
    with caplog.at_level(logging.WARNING, logger="triage"):
        rationale = build_rationale("not_a_rule", None, band="immediate", now=NOW)
    assert rationale.summary.startswith(FALLBACK_NARRATIVES["immediate"].summary)
    assert "configuration defect" in caplog.text


def test_timestamp_defaults_to_utc_now():
    rationale = build_rationale("common_cold", None)
    assert rationale.timestamp.tzinfo is not None


def test_unregistered_confidence_is_configurable(monkeypatch):
    monkeypatch.setattr(settings, "RATIONALE_CONFIDENCE_UNREGISTERED", 0.3)
    rationale = build_rationale("common_cold", None, now=NOW)
    assert rationale.confidence == pytest.approx(0.3)


def test_registered_confidence_follows_settings(monkeypatch):
    monkeypatch.setattr(settings, "RATIONALE_CONFIDENCE_REGISTERED", 0.5)
    for key in ("P001", "P002", "P003"):
        assert build_rationale("chest_pain", key, now=NOW).confidence == pytest.approx(0.5)
