"""Recurrence Validator."""
from datetime import datetime
from typing import Dict, Any

from recurrence_engine.domain.rule import Frequency, collect_rule_errors
from recurrence_engine.errors import ValidationError


class RecurrenceValidator:
    """Validate recurrence rule and exception payloads before they are stored."""

    @staticmethod
    def validate_rule_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate a recurrence rule payload.

        Args:
            payload: Rule fields (frequency, interval, days_of_week,
                day_of_month, month_of_year, end_date, end_occurrences)

        Returns:
            Dict with validation result
        """
        result = {
            "valid": True,
            "errors": [],
            "warnings": []
        }

        if not payload.get("frequency"):
            result["valid"] = False
            result["errors"].append("Frequency is required")
            return result

        errors = collect_rule_errors(
            payload.get("frequency"),
            payload.get("interval", 1),
            payload.get("days_of_week"),
            payload.get("day_of_month"),
            payload.get("month_of_year"),
            payload.get("end_date"),
            payload.get("end_occurrences"),
        )
        if errors:
            result["valid"] = False
            result["errors"].extend(errors)
            return result

        frequency = Frequency.parse(payload["frequency"])

        # Fields the frequency does not use are stored but ignored
        if payload.get("days_of_week") and frequency is not Frequency.WEEKLY:
            result["warnings"].append("days_of_week is only used by weekly rules")
        if payload.get("day_of_month") is not None and frequency not in (Frequency.MONTHLY, Frequency.YEARLY):
            result["warnings"].append("day_of_month is only used by monthly and yearly rules")
        if payload.get("month_of_year") is not None and frequency is not Frequency.YEARLY:
            result["warnings"].append("month_of_year is only used by yearly rules")

        day_of_month = payload.get("day_of_month")
        if day_of_month is not None and day_of_month > 28 and frequency in (Frequency.MONTHLY, Frequency.YEARLY):
            result["warnings"].append(
                f"Day {day_of_month} does not exist in every month; shorter months follow the month overflow policy"
            )

        return result

    @staticmethod
    def validate_exception_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate an occurrence exception payload.

        Args:
            payload: Exception fields (original_date, is_cancelled, modified_*)

        Returns:
            Dict with validation result
        """
        result = {
            "valid": True,
            "errors": [],
            "warnings": []
        }

        if payload.get("original_date") is None:
            result["valid"] = False
            result["errors"].append("original_date is required")
            return result

        if "is_cancelled" in payload and not isinstance(payload["is_cancelled"], bool):
            result["valid"] = False
            result["errors"].append("is_cancelled must be true or false")

        start = payload.get("modified_start_time")
        end = payload.get("modified_end_time")
        if isinstance(start, datetime) and isinstance(end, datetime):
            try:
                if end < start:
                    result["valid"] = False
                    result["errors"].append("modified_end_time must not be before modified_start_time")
            except TypeError:
                result["valid"] = False
                result["errors"].append("modified_start_time and modified_end_time must both carry a time zone or neither")

        modified = [
            name for name in (
                "modified_title",
                "modified_description",
                "modified_start_time",
                "modified_end_time",
                "modified_location",
            )
            if payload.get(name) is not None
        ]
        if payload.get("is_cancelled") and modified:
            result["warnings"].append(
                f"Cancelled exception ignores modified fields: {', '.join(modified)}"
            )

        return result

    @staticmethod
    def raise_for(result: Dict[str, Any], message: str) -> None:
        """Raise ValidationError carrying the errors of an invalid result."""
        if not result["valid"]:
            raise ValidationError(message, details={"errors": result["errors"]})
