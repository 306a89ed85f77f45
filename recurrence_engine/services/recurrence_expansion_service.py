"""
Recurrence Expansion Service

Expands one recurring event into the occurrences inside a query window:
loads the event, rule and overrides once, then runs the generator and the
merger. Read-only and idempotent.
"""

import logging
from typing import List, Optional

from recurrence_engine.config import ExpansionSettings, get_settings
from recurrence_engine.domain.event import Occurrence
from recurrence_engine.errors import NoRecurrenceRuleError, OverflowGuardError, RangeError
from recurrence_engine.schemas.occurrence import OccurrenceResponse
from recurrence_engine.services.exception_merger import ExceptionMerger
from recurrence_engine.services.occurrence_generator import OccurrenceGenerator
from recurrence_engine.services.repository import EventRepository
from recurrence_engine.utils.logger import get_logger
from recurrence_engine.utils.time_utils import TimestampInput, parse_timestamp

logger = logging.getLogger(__name__)
expansion_logger = get_logger("recurrence_engine.expansion")


class RecurrenceExpansionService:
    """Facade over generator, merger and repository."""

    def __init__(self, repository: EventRepository, settings: Optional[ExpansionSettings] = None):
        self.repository = repository
        self.settings = settings or get_settings()
        self.generator = OccurrenceGenerator(self.settings)

    def expand(self, event_id: int, query_start: TimestampInput, query_end: TimestampInput) -> List[Occurrence]:
        """
        Occurrences of an event whose start lies in ``[query_start, query_end]``.

        Args:
            event_id: Recurring event to expand
            query_start: Window start (date-only means start of day)
            query_end: Window end, inclusive (date-only means end of day)

        Returns:
            Ordered occurrences; empty when nothing falls in the window

        Raises:
            InvalidTimestampError: If a bound cannot be parsed
            RangeError: If query_start is after query_end
            NotFoundError: If the event does not exist
            NoRecurrenceRuleError: If the event has no rule
            OverflowGuardError: If the iteration cap is exceeded
        """
        tz = self.settings.timezone
        start = parse_timestamp(query_start, tz)
        end = parse_timestamp(query_end, tz, end_of_day=True)
        if start > end:
            raise RangeError(
                "Query start must not be after query end",
                details={"start": start.isoformat(), "end": end.isoformat()},
            )

        event, rule = self.repository.get_event_with_rule(event_id)
        if rule is None:
            raise NoRecurrenceRuleError(
                f"Event {event_id} has no recurrence rule",
                details={"event_id": event_id},
            )
        overrides = self.repository.get_exceptions(event_id)

        candidates = self.generator.generate(rule, event.start, start, end)
        merger = ExceptionMerger(overrides, tz)
        try:
            merged = merger.merge(event, candidates)
        except OverflowGuardError:
            expansion_logger.error(
                "Expansion aborted by iteration cap",
                event_id=event_id,
                start=start,
                end=end,
                max_iterations=self.settings.max_iterations,
            )
            raise

        occurrences = []
        for occurrence in merged:
            if start <= occurrence.start <= end:
                occurrences.append(occurrence)
            else:
                logger.debug(
                    "Exception moved occurrence of event %s on %s outside the window",
                    event_id,
                    occurrence.original_date,
                )

        expansion_logger.info(
            "Expanded recurring event",
            event_id=event_id,
            frequency=rule.frequency.value,
            start=start,
            end=end,
            exceptions=len(overrides),
            occurrences=len(occurrences),
        )
        return occurrences


def expand_recurring_events(
    repository: EventRepository,
    event_id: int,
    start: TimestampInput,
    end: TimestampInput,
    settings: Optional[ExpansionSettings] = None,
) -> List[OccurrenceResponse]:
    """Expand an event and serialize each occurrence as an OccurrenceResponse."""
    service = RecurrenceExpansionService(repository, settings)
    return [OccurrenceResponse.from_occurrence(o) for o in service.expand(event_id, start, end)]
