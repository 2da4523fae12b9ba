"""
Triage error hierarchy.

Only ``InvalidInputError`` is meant to reach callers. ``UnmappedRuleError``
is raised and recovered inside the synthesizers, ``ConsistencyError`` guards
the result invariants.
"""
from typing import Any, Dict, Optional


class TriageError(Exception):
    """Base exception for all triage engine errors."""

    def __init__(
        self,
        message: str,
        code: str = "TRIAGE_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidInputError(TriageError):
    """Symptom text (or a batch of them) cannot be triaged."""

    def __init__(
        self,
        message: str,
        field: str = "text",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="INVALID_INPUT",
            details={"field": field, **(details or {})},
        )
        self.field = field


class UnmappedRuleError(TriageError):
    """A matched rule id has no authored plan or rationale entry."""

    def __init__(
        self,
        rule_id: str,
        component: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=f"No {component} entry authored for rule '{rule_id}'",
            code="UNMAPPED_RULE",
            details={"rule_id": rule_id, "component": component, **(details or {})},
        )
        self.rule_id = rule_id
        self.component = component


class ConsistencyError(TriageError):
    """Risk band, plan severity and routing priority disagree."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="CONSISTENCY_ERROR", details=details)
