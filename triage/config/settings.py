"""
Application-wide settings using pydantic-settings.
All runtime env access in triage/ should go through this module.
"""

from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[2]
ENV_PATH = PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    LOG_FILE_ENABLED: bool = False
    LOG_DIR: str = "./logs"
    LOG_FILE_NAME: str = "triage.debug.log"
    LOG_FILE_WHEN: str = "midnight"
    LOG_FILE_INTERVAL: int = 1
    LOG_FILE_BACKUP_COUNT: int = 7
    LOG_FILE_ENCODING: str = "utf-8"
    LOG_FILE_LEVEL: str = "DEBUG"
    LOG_TRUNCATE: int = 600

    # Runtime
    APP_ENV: str = "development"

    # Rule set
    RULESET_LABEL: str = "rule-based-triage/1.0"
    RATIONALE_CONFIDENCE_REGISTERED: float = 0.92
    RATIONALE_CONFIDENCE_UNREGISTERED: float = 0.45

    # Input limits
    SYMPTOM_TEXT_MAX_CHARS: int = 4000
    BATCH_MAX_REQUESTS: int = 100

    model_config = SettingsConfigDict(
        env_file=ENV_PATH,
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def _check_confidence_order(self) -> "Settings":
        if self.rationale_confidence(False) >= self.rationale_confidence(True):
            raise ValueError(
                "RATIONALE_CONFIDENCE_UNREGISTERED must be lower than "
                "RATIONALE_CONFIDENCE_REGISTERED"
            )
        return self

    def is_production(self) -> bool:
        return (self.APP_ENV or "").strip().lower() == "production"

    def rationale_confidence(self, registered: bool) -> float:
        value = (
            self.RATIONALE_CONFIDENCE_REGISTERED
            if registered
            else self.RATIONALE_CONFIDENCE_UNREGISTERED
        )
        return max(0.0, min(1.0, float(value)))


settings = Settings()
