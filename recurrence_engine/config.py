"""Engine configuration for the recurrence expansion service."""
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Mapping, Optional
import os

import pytz
from dotenv import load_dotenv

from recurrence_engine.errors import ValidationError

# Load environment variables from a local .env when present
load_dotenv()

DEFAULT_TIMEZONE = "UTC"
DEFAULT_MAX_ITERATIONS = 100_000


class MonthOverflowPolicy(str, Enum):
    """What to do when a target day does not exist in a month (e.g. Feb 30)."""

    CLAMP = "clamp"  # use the last day of the month
    SKIP = "skip"  # the period produces no occurrence


@dataclass(frozen=True)
class ExpansionSettings:
    """Settings shared by the generator, merger and facade."""

    timezone_name: str = DEFAULT_TIMEZONE
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    month_overflow: MonthOverflowPolicy = MonthOverflowPolicy.CLAMP

    def __post_init__(self):
        try:
            pytz.timezone(self.timezone_name)
        except pytz.UnknownTimeZoneError:
            raise ValidationError(
                f"Unknown time zone: {self.timezone_name}",
                details={"field": "timezone_name"},
            )

        if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, int) or self.max_iterations < 1:
            raise ValidationError(
                "max_iterations must be a positive integer",
                details={"field": "max_iterations", "value": self.max_iterations},
            )

        try:
            object.__setattr__(self, "month_overflow", MonthOverflowPolicy(self.month_overflow))
        except ValueError:
            raise ValidationError(
                f"month_overflow must be one of: clamp, skip, got: {self.month_overflow}",
                details={"field": "month_overflow"},
            )

    @property
    def timezone(self):
        """pytz zone used for wall-clock arithmetic and date keys."""
        return pytz.timezone(self.timezone_name)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ExpansionSettings":
        """Build settings from RECURRENCE_* environment variables."""
        env = os.environ if environ is None else environ

        raw_iterations = env.get("RECURRENCE_MAX_ITERATIONS", str(DEFAULT_MAX_ITERATIONS))
        try:
            max_iterations = int(raw_iterations)
        except ValueError:
            raise ValidationError(
                f"RECURRENCE_MAX_ITERATIONS must be an integer, got: {raw_iterations}",
                details={"field": "RECURRENCE_MAX_ITERATIONS"},
            )

        return cls(
            timezone_name=env.get("RECURRENCE_TIMEZONE", DEFAULT_TIMEZONE),
            max_iterations=max_iterations,
            month_overflow=env.get("RECURRENCE_MONTH_OVERFLOW", MonthOverflowPolicy.CLAMP.value).lower(),
        )


@lru_cache(maxsize=1)
def get_settings() -> ExpansionSettings:
    """Process-wide settings, read once from the environment."""
    return ExpansionSettings.from_env()
