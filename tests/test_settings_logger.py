import logging

import pytest
from pydantic import ValidationError

from triage.config import logger as logger_module
from triage.config.logger import get_logger, log_stage
from triage.config.settings import Settings, settings
from triage.errors import InvalidInputError, UnmappedRuleError


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    config = Settings(_env_file=None)
    assert config.RULESET_LABEL == "rule-based-triage/1.0"
    assert config.RATIONALE_CONFIDENCE_UNREGISTERED < config.RATIONALE_CONFIDENCE_REGISTERED
    assert config.is_production() is False


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("APP_ENV", " Production ")
    monkeypatch.setenv("BATCH_MAX_REQUESTS", "5")
    config = Settings(_env_file=None)
    assert config.is_production() is True
    assert config.BATCH_MAX_REQUESTS == 5


def test_rationale_confidence_is_clamped():
    config = Settings(
        _env_file=None,
        RATIONALE_CONFIDENCE_REGISTERED=1.7,
        RATIONALE_CONFIDENCE_UNREGISTERED=-0.2,
    )
    assert config.rationale_confidence(True) == 1.0
    assert config.rationale_confidence(False) == 0.0


def test_get_logger_names():
    assert get_logger().name == "triage"
    assert get_logger("triage.rules").name == "triage.rules"
    assert get_logger("api.main").name == "triage.api.main"


def test_log_stage_truncates(monkeypatch, caplog):
    log = get_logger("triage.tests")
    with caplog.at_level(logging.INFO, logger="triage"):
        log_stage(log, "model", {"band": "urgent"})
        monkeypatch.setattr(settings, "LOG_TRUNCATE", 10)
        log_stage(log, "stage", "x" * 25)
        log_stage(log, "empty", None)
    assert "[stage] output: xxxxxxxxxx ...[truncated 15 chars]" in caplog.text
    assert "[empty] output: [EMPTY]" in caplog.text
    assert '{"band": "urgent"}' in caplog.text


def test_file_handler_added_once(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "LOG_DIR", str(tmp_path))
    base = logging.getLogger("triage")
    before = list(base.handlers)
    try:
        logger_module.attach_file_handler(base)
        logger_module.attach_file_handler(base)
        added = [h for h in base.handlers if h not in before]
        assert len(added) == 1
        assert (tmp_path / settings.LOG_FILE_NAME).exists()
    finally:
        for handler in base.handlers[:]:
            if handler not in before:
                base.removeHandler(handler)
                handler.close()


def test_error_payloads():
    err = InvalidInputError("Symptom description is empty")
    assert err.to_dict() == {
        "code": "INVALID_INPUT",
        "message": "Symptom description is empty",
        "details": {"field": "text"},
    }
    unmapped = UnmappedRuleError("x", component="care_plan")
    assert unmapped.code == "UNMAPPED_RULE"
    assert "care_plan" in unmapped.message
    with pytest.raises(InvalidInputError):
        raise err


@pytest.mark.parametrize("unregistered", [0.8, 0.92, 1.5])
def test_unregistered_confidence_must_be_lower(unregistered):
    with pytest.raises(ValidationError):
        Settings(
            _env_file=None,
            RATIONALE_CONFIDENCE_REGISTERED=0.92,
            RATIONALE_CONFIDENCE_UNREGISTERED=unregistered,
        )
