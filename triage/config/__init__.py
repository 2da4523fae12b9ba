"""Configuration exports."""

from triage.config.logger import configure_logging, get_logger, log_stage
from triage.config.settings import Settings, settings

__all__ = [
    "Settings",
    "settings",
    "configure_logging",
    "get_logger",
    "log_stage",
]
