"""
Error taxonomy for recurrence expansion.

Every failure the engine reports derives from ExpansionError and carries:
- a stable machine-readable code
- a human-readable message
- optional structured details
- the HTTP status the API layer answers with
"""

from typing import Any, Dict, Optional


class ExpansionError(Exception):
    """Base exception for recurrence engine errors"""

    code = "EXPANSION_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(ExpansionError):
    """Malformed rule, event or override parameters."""

    code = "VALIDATION_ERROR"
    status_code = 422


class NotFoundError(ExpansionError):
    """Referenced event, rule or override does not exist."""

    code = "NOT_FOUND"
    status_code = 404


class NoRecurrenceRuleError(ExpansionError):
    """Event exists but is not recurring."""

    code = "NO_RECURRENCE_RULE"
    status_code = 409


class ConflictError(ExpansionError):
    """A second override for the same event and date."""

    code = "CONFLICT"
    status_code = 409


class RangeError(ExpansionError):
    """Query start lies after query end."""

    code = "INVALID_RANGE"
    status_code = 400


class InvalidTimestampError(ExpansionError):
    """Input could not be parsed as a date or date-time."""

    code = "INVALID_TIMESTAMP"
    status_code = 400


class OverflowGuardError(ExpansionError):
    """Candidate computation exceeded the iteration cap."""

    code = "ITERATION_LIMIT"
    status_code = 422
