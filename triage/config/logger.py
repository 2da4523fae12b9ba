"""Logging setup shared by the engine and the HTTP boundary.

Everything hangs off a single ``triage`` logger. Symptom text is never passed
to a logger verbatim; callers log its length or the matched rule instead.
"""

import json
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel

from triage.config.settings import settings

_BASE_LOGGER_NAME = "triage"
_FILE_HANDLER_ATTR = "_triage_file_handler"
_DEFAULT_BACKUP_COUNT = 7
_configured = False


def _level(name: str, fallback: int) -> tuple[int, bool]:
    """Map a level name to its number; the flag is False when it was unknown."""
    value = getattr(logging, (name or "").strip().upper(), None)
    if isinstance(value, int):
        return value, True
    return fallback, False


def _build_file_handler(base: logging.Logger) -> Optional[logging.Handler]:
    file_level, valid = _level(settings.LOG_FILE_LEVEL, logging.DEBUG)
    if not valid:
        base.warning("[logger] unknown LOG_FILE_LEVEL %r, using DEBUG", settings.LOG_FILE_LEVEL)

    backups = settings.LOG_FILE_BACKUP_COUNT
    if backups < 0:
        base.warning("[logger] negative LOG_FILE_BACKUP_COUNT %s, using %s", backups, _DEFAULT_BACKUP_COUNT)
        backups = _DEFAULT_BACKUP_COUNT

    directory = Path(settings.LOG_DIR)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        handler = TimedRotatingFileHandler(
            filename=str(directory / settings.LOG_FILE_NAME),
            when=settings.LOG_FILE_WHEN,
            interval=settings.LOG_FILE_INTERVAL,
            backupCount=backups,
            encoding=settings.LOG_FILE_ENCODING,
        )
    except OSError as exc:
        base.warning("[logger] file logging disabled, cannot write to %s: %s", directory, exc)
        return None

    handler.setLevel(file_level)
    handler.setFormatter(logging.Formatter(settings.LOG_FORMAT))
    setattr(handler, _FILE_HANDLER_ATTR, True)
    return handler


def attach_file_handler(base: logging.Logger) -> None:
    """Add the rotating file handler unless one is already attached."""
    if any(getattr(h, _FILE_HANDLER_ATTR, False) for h in base.handlers):
        return
    handler = _build_file_handler(base)
    if handler is not None:
        base.addHandler(handler)


def configure_logging() -> None:
    global _configured
    if _configured:
        return

    base = logging.getLogger(_BASE_LOGGER_NAME)
    level, valid = _level(settings.LOG_LEVEL, logging.INFO)
    if not base.handlers:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(settings.LOG_FORMAT))
        base.addHandler(console)
    base.setLevel(level)
    if not valid:
        base.warning("[logger] unknown LOG_LEVEL %r, using INFO", settings.LOG_LEVEL)

    if settings.LOG_FILE_ENABLED:
        attach_file_handler(base)

    _configured = True


def get_logger(name: str | None = None) -> logging.Logger:
    """Loggers outside the ``triage.`` namespace become children of it."""
    configure_logging()
    if not name or name == _BASE_LOGGER_NAME:
        return logging.getLogger(_BASE_LOGGER_NAME)
    if name.startswith(_BASE_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(_BASE_LOGGER_NAME).getChild(name)


def _render(content: Any) -> str:
    if content is None:
        return ""
    if isinstance(content, BaseModel):
        content = content.model_dump(mode="json")
    if isinstance(content, (dict, list)):
        try:
            return json.dumps(content, ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            return str(content)
    return str(content)


def _clip(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]} ...[truncated {len(text) - limit} chars]"


def log_stage(logger: logging.Logger, stage: str, content: Any, level: int = logging.INFO) -> None:
    """Log one pipeline stage's output, clipped to ``LOG_TRUNCATE`` chars."""
    text = _render(content)
    logger.log(level, "[%s] output: %s", stage, _clip(text, settings.LOG_TRUNCATE) if text else "[EMPTY]")
