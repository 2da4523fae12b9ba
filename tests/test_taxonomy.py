import logging

import pytest

from triage.rules.taxonomy import (
    check_test_category,
    compute_priority,
    priority_is_consistent,
    suggested_band,
)


@pytest.mark.parametrize("band", ["immediate", "urgent", "routine"])
def test_interactive_priority_is_identity(band):
    assert compute_priority(band) == band


def test_only_background_routine_becomes_batch():
    assert compute_priority("routine", background=True) == "batch"
    assert compute_priority("urgent", background=True) == "urgent"
    assert compute_priority("immediate", background=True) == "immediate"


def test_high_load_escalates_urgent():
    assert compute_priority("urgent", system_load="high") == "immediate"
    assert compute_priority("routine", system_load="high") == "routine"


@pytest.mark.parametrize(
    "band, priority, expected",
    [
        ("immediate", "immediate", True),
        ("urgent", "urgent", True),
        ("routine", "routine", True),
        ("routine", "batch", True),
        ("urgent", "immediate", True),
        ("immediate", "batch", False),
        ("immediate", "routine", False),
        ("urgent", "batch", False),
        ("routine", "urgent", False),
    ],
)
def test_priority_consistency(band, priority, expected):
    assert priority_is_consistent(band, priority) is expected


def test_suggested_band_for_test_tags():
    assert suggested_band("emergency") == "immediate"
    assert suggested_band("edge-case") == "routine"


def test_emergency_tag_on_lower_band_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="triage"):
        assert check_test_category("urgent", "emergency") is False
    assert "usually implies 'immediate'" in caplog.text
    assert check_test_category("immediate", "emergency") is True
    assert check_test_category("routine", None) is True
