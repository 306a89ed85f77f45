"""Recurrence rule value types."""
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum, IntEnum
from typing import Any, FrozenSet, Iterable, List, Optional, Union

from recurrence_engine.errors import ValidationError


class Frequency(str, Enum):
    """Repetition unit of a rule."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"

    @classmethod
    def parse(cls, value: Any) -> "Frequency":
        """Accept an enum member or a case-insensitive name ("annually" means yearly)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            name = value.strip().upper()
            if name == "ANNUALLY":
                return cls.YEARLY
            try:
                return cls(name)
            except ValueError:
                pass
        raise ValidationError(
            f"Frequency must be one of: daily, weekly, monthly, yearly, got: {value!r}",
            details={"field": "frequency"},
        )


class Weekday(IntEnum):
    """Weekday codes as stored on rules (0=Sunday..6=Saturday)."""

    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @classmethod
    def of(cls, day: date) -> "Weekday":
        return cls(day.isoweekday() % 7)


@dataclass(frozen=True)
class NoEnd:
    """Open-ended rule."""


@dataclass(frozen=True)
class EndDate:
    """Stop after this instant (a plain date means the end of that day)."""

    until: Union[datetime, date]


@dataclass(frozen=True)
class EndOccurrences:
    """Stop after ``count`` occurrences counted from the anchor."""

    count: int

    def __post_init__(self):
        if not _is_int(self.count) or self.count < 1:
            raise ValidationError(
                "end_occurrences must be a positive integer",
                details={"field": "end_occurrences", "value": self.count},
            )


EndCondition = Union[NoEnd, EndDate, EndOccurrences]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def collect_rule_errors(
    frequency: Any,
    interval: Any = 1,
    days_of_week: Optional[Iterable[Any]] = None,
    day_of_month: Any = None,
    month_of_year: Any = None,
    end_date: Any = None,
    end_occurrences: Any = None,
) -> List[str]:
    """Every reason the given fields cannot form a rule (empty when valid)."""
    errors = []

    parsed_frequency = None
    try:
        parsed_frequency = Frequency.parse(frequency)
    except ValidationError as e:
        errors.append(e.message)

    if not _is_int(interval) or interval < 1:
        errors.append(f"Interval must be a positive integer, got: {interval!r}")

    days = list(days_of_week) if days_of_week is not None else []
    for day in days:
        if not _is_int(day) or not 0 <= day <= 6:
            errors.append(f"Days of week must be integers 0 (Sunday) to 6 (Saturday), got: {day!r}")
    if parsed_frequency is Frequency.WEEKLY and not days:
        errors.append("Weekly rules require at least one day of week")

    if day_of_month is not None and (not _is_int(day_of_month) or not 1 <= day_of_month <= 31):
        errors.append(f"Day of month must be between 1 and 31, got: {day_of_month!r}")

    if month_of_year is not None and (not _is_int(month_of_year) or not 1 <= month_of_year <= 12):
        errors.append(f"Month of year must be between 1 and 12, got: {month_of_year!r}")

    if end_date is not None and end_occurrences is not None:
        errors.append("A rule cannot have both an end date and an occurrence count")
    if end_date is not None and not isinstance(end_date, (date, datetime)):
        errors.append(f"End date must be a date or datetime, got: {end_date!r}")
    if end_occurrences is not None and (not _is_int(end_occurrences) or end_occurrences < 1):
        errors.append(f"Occurrence count must be a positive integer, got: {end_occurrences!r}")

    return errors


@dataclass(frozen=True)
class RecurrenceRule:
    """
    Immutable repetition pattern.

    Construction validates every field, so an instance is always usable by
    the generator. ``days_of_week`` only matters for weekly rules,
    ``day_of_month`` for monthly and yearly rules and ``month_of_year`` for
    yearly rules; unset day/month fields fall back to the anchor's.
    """

    frequency: Frequency
    interval: int = 1
    days_of_week: FrozenSet[int] = field(default_factory=frozenset)
    day_of_month: Optional[int] = None
    month_of_year: Optional[int] = None
    end_condition: EndCondition = NoEnd()

    def __post_init__(self):
        if not isinstance(self.end_condition, (NoEnd, EndDate, EndOccurrences)):
            raise ValidationError(
                f"Unsupported end condition: {self.end_condition!r}",
                details={"field": "end_condition"},
            )

        errors = collect_rule_errors(
            self.frequency,
            self.interval,
            self.days_of_week,
            self.day_of_month,
            self.month_of_year,
            end_date=self.end_date,
        )
        if errors:
            raise ValidationError("Invalid recurrence rule", details={"errors": errors})

        object.__setattr__(self, "frequency", Frequency.parse(self.frequency))
        object.__setattr__(self, "days_of_week", frozenset(self.days_of_week or ()))

    @classmethod
    def from_fields(
        cls,
        frequency: Any,
        interval: int = 1,
        days_of_week: Optional[Iterable[int]] = None,
        day_of_month: Optional[int] = None,
        month_of_year: Optional[int] = None,
        end_date: Optional[Union[datetime, date]] = None,
        end_occurrences: Optional[int] = None,
    ) -> "RecurrenceRule":
        """Build a rule from flat storage-style fields."""
        errors = collect_rule_errors(
            frequency, interval, days_of_week, day_of_month, month_of_year, end_date, end_occurrences
        )
        if errors:
            raise ValidationError("Invalid recurrence rule", details={"errors": errors})

        if end_date is not None:
            end_condition = EndDate(end_date)
        elif end_occurrences is not None:
            end_condition = EndOccurrences(end_occurrences)
        else:
            end_condition = NoEnd()

        return cls(
            frequency=Frequency.parse(frequency),
            interval=interval,
            days_of_week=frozenset(days_of_week or ()),
            day_of_month=day_of_month,
            month_of_year=month_of_year,
            end_condition=end_condition,
        )

    @property
    def end_date(self) -> Optional[Union[datetime, date]]:
        if isinstance(self.end_condition, EndDate):
            return self.end_condition.until
        return None

    @property
    def end_occurrences(self) -> Optional[int]:
        if isinstance(self.end_condition, EndOccurrences):
            return self.end_condition.count
        return None

    @property
    def sorted_days(self) -> List[int]:
        return sorted(self.days_of_week)
