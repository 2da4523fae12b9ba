"""Read-only patient directory exports."""

from triage.directory.patients import (
    DIRECTORY,
    UNREGISTERED_KEY,
    UNREGISTERED_RECORD,
    is_registered,
    list_patients,
    lookup,
    timeline_for,
)

__all__ = [
    "DIRECTORY",
    "UNREGISTERED_KEY",
    "UNREGISTERED_RECORD",
    "is_registered",
    "list_patients",
    "lookup",
    "timeline_for",
]
