"""
Occurrence Generator

Computes the candidate start instants of a recurrence rule inside a query
window. Arithmetic happens on wall-clock time in the engine time zone, so an
event at 09:00 stays at 09:00 across DST changes.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, date, datetime, timedelta
from typing import Iterator, Optional

import pytz

from recurrence_engine.config import ExpansionSettings, MonthOverflowPolicy, get_settings
from recurrence_engine.domain.rule import Frequency, RecurrenceRule, Weekday
from recurrence_engine.errors import OverflowGuardError
from recurrence_engine.utils.time_utils import day_bounds, localize_wall_clock, to_engine_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """A computed start instant before overrides are applied."""

    index: int  # position in the candidate sequence
    start: datetime  # aware, engine time zone

    @property
    def date_key(self) -> date:
        return self.start.date()


class CandidateSequence:
    """Restartable view over the candidates of one (rule, anchor, range)."""

    def __init__(self, generator: "OccurrenceGenerator", rule: RecurrenceRule,
                 anchor: datetime, query_start: datetime, query_end: datetime):
        self._generator = generator
        self.rule = rule
        self.anchor = anchor
        self.query_start = query_start
        self.query_end = query_end

    def __iter__(self) -> Iterator[Candidate]:
        return self._generator._iter_candidates(self.rule, self.anchor, self.query_start, self.query_end)


class OccurrenceGenerator:
    """Candidate generator for daily, weekly, monthly and yearly rules."""

    def __init__(self, settings: Optional[ExpansionSettings] = None):
        self.settings = settings or get_settings()
        self.timezone = self.settings.timezone
        self.max_iterations = self.settings.max_iterations
        self.month_overflow = self.settings.month_overflow

    def generate(self, rule: RecurrenceRule, anchor: datetime,
                 query_start: datetime, query_end: datetime) -> CandidateSequence:
        """
        Candidates of ``rule`` anchored at ``anchor`` within the inclusive range.

        Args:
            rule: Validated recurrence rule
            anchor: Start of the base event
            query_start: Earliest start to emit
            query_end: Latest start to emit

        Returns:
            Lazy sequence; each iteration recomputes from the anchor.
            Iterating raises OverflowGuardError when the iteration cap is hit.
        """
        return CandidateSequence(self, rule, anchor, query_start, query_end)

    def _iter_candidates(self, rule: RecurrenceRule, anchor: datetime,
                         query_start: datetime, query_end: datetime) -> Iterator[Candidate]:
        tz = self.timezone
        wall_anchor = to_engine_time(anchor, tz).replace(tzinfo=None)
        start = to_engine_time(query_start, tz)
        end = to_engine_time(query_end, tz)
        until = self._resolve_until(rule)
        limit = rule.end_occurrences

        # Count-limited rules must walk from the anchor; others may skip ahead.
        first_period = 0
        if limit is None:
            first_period = self._first_period(rule, wall_anchor, start.replace(tzinfo=None))

        produced = 0
        for step, wall in enumerate(self._wall_candidates(rule, wall_anchor, first_period), start=1):
            if step > self.max_iterations:
                logger.error(
                    "Recurrence expansion exceeded %d iterations (frequency=%s, interval=%d)",
                    self.max_iterations,
                    rule.frequency.value,
                    rule.interval,
                )
                raise OverflowGuardError(
                    f"Recurrence expansion exceeded {self.max_iterations} iterations",
                    details={"max_iterations": self.max_iterations},
                )

            # Period without a candidate (before the anchor, or skipped overflow day)
            if wall is None:
                continue

            try:
                candidate_start = localize_wall_clock(wall, tz)
            except OverflowError:
                return
            if candidate_start > end:
                return
            if until is not None and candidate_start > until:
                return
            if limit is not None and produced >= limit:
                return

            produced += 1
            if candidate_start < start:
                continue

            yield Candidate(index=produced - 1, start=candidate_start)

    def _resolve_until(self, rule: RecurrenceRule) -> Optional[datetime]:
        until = rule.end_date
        if until is None:
            return None
        try:
            if isinstance(until, datetime):
                return to_engine_time(until, self.timezone)
            return day_bounds(until, self.timezone, end_of_day=True)
        except OverflowError:
            # Shifting into the engine zone left the representable range
            if until.year == MINYEAR:
                return pytz.utc.localize(datetime.min)
            return None

    def _first_period(self, rule: RecurrenceRule, anchor: datetime, start: datetime) -> int:
        """Period index shortly before ``start``; one period of slack absorbs time-of-day offsets."""
        if start <= anchor:
            return 0

        if rule.frequency is Frequency.DAILY:
            elapsed = (start.date() - anchor.date()).days
        elif rule.frequency is Frequency.WEEKLY:
            elapsed = (_week_start(start.date()) - _week_start(anchor.date())).days // 7
        elif rule.frequency is Frequency.MONTHLY:
            elapsed = (start.year - anchor.year) * 12 + start.month - anchor.month
        else:
            elapsed = start.year - anchor.year

        return max(0, elapsed // rule.interval - 1)

    def _wall_candidates(self, rule: RecurrenceRule, anchor: datetime,
                         first_period: int) -> Iterator[Optional[datetime]]:
        if rule.frequency is Frequency.DAILY:
            return self._daily(rule, anchor, first_period)
        if rule.frequency is Frequency.WEEKLY:
            return self._weekly(rule, anchor, first_period)
        if rule.frequency is Frequency.MONTHLY:
            return self._monthly(rule, anchor, first_period)
        return self._yearly(rule, anchor, first_period)

    # The streams below end once a date leaves the representable range;
    # such a date lies after any valid query end.

    def _daily(self, rule: RecurrenceRule, anchor: datetime, period: int) -> Iterator[Optional[datetime]]:
        while True:
            try:
                wall = anchor + timedelta(days=period * rule.interval)
            except OverflowError:
                return
            yield wall
            period += 1

    def _weekly(self, rule: RecurrenceRule, anchor: datetime, period: int) -> Iterator[Optional[datetime]]:
        anchor_day = anchor.date()
        anchor_week = _week_start(anchor_day)
        time_of_day = anchor.time()
        days = rule.sorted_days

        while True:
            for code in days:
                try:
                    day = anchor_week + timedelta(weeks=period * rule.interval, days=code)
                except OverflowError:
                    return
                if day < anchor_day:
                    yield None
                else:
                    yield datetime.combine(day, time_of_day)
            period += 1

    def _monthly(self, rule: RecurrenceRule, anchor: datetime, period: int) -> Iterator[Optional[datetime]]:
        day_of_month = rule.day_of_month or anchor.day

        while True:
            months = anchor.month - 1 + period * rule.interval
            year = anchor.year + months // 12
            if year > MAXYEAR:
                return
            yield self._on_day(year, months % 12 + 1, day_of_month, anchor)
            period += 1

    def _yearly(self, rule: RecurrenceRule, anchor: datetime, period: int) -> Iterator[Optional[datetime]]:
        month = rule.month_of_year or anchor.month
        day_of_month = rule.day_of_month or anchor.day

        while True:
            year = anchor.year + period * rule.interval
            if year > MAXYEAR:
                return
            yield self._on_day(year, month, day_of_month, anchor)
            period += 1

    def _on_day(self, year: int, month: int, day_of_month: int, anchor: datetime) -> Optional[datetime]:
        """Wall-clock candidate on ``day_of_month``, applying the month overflow policy."""
        last_day = calendar.monthrange(year, month)[1]
        if day_of_month > last_day:
            if self.month_overflow is MonthOverflowPolicy.SKIP:
                return None
            day_of_month = last_day

        day = date(year, month, day_of_month)
        if day < anchor.date():
            return None
        return datetime.combine(day, anchor.time())


def _week_start(day: date) -> date:
    """Sunday on or before ``day``."""
    return day - timedelta(days=Weekday.of(day))
