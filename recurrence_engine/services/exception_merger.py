"""
Exception Merger

Turns candidates into occurrences, applying per-date overrides:
- cancelled overrides drop their candidate
- modified overrides replace individual fields of one occurrence
- candidates without an override copy the base event
"""

from datetime import date
from typing import Iterable, List, Mapping, Optional

import pytz

from recurrence_engine.domain.event import BaseEvent, Occurrence, OccurrenceOverride
from recurrence_engine.services.occurrence_generator import Candidate
from recurrence_engine.utils.time_utils import to_engine_time


class ExceptionMerger:
    """Merges an event's overrides into its candidate list."""

    def __init__(self, overrides: Mapping[date, OccurrenceOverride], timezone=pytz.utc):
        self.overrides = overrides
        self.timezone = timezone

    def merge(self, event: BaseEvent, candidates: Iterable[Candidate]) -> List[Occurrence]:
        """
        Materialize every surviving candidate.

        Args:
            event: Base event supplying default fields and the duration
            candidates: Candidates for this event, any order

        Returns:
            Occurrences ordered by start, then event id, then candidate index
        """
        occurrences = []
        for candidate in candidates:
            occurrence = self.materialize(event, candidate)
            if occurrence is not None:
                occurrences.append(occurrence)

        occurrences.sort(key=lambda o: o.sort_key)
        return occurrences

    def materialize(self, event: BaseEvent, candidate: Candidate) -> Optional[Occurrence]:
        """Occurrence for one candidate, or None when its date is cancelled."""
        override = self.overrides.get(candidate.date_key)

        if override is None:
            return self._build(event, candidate, candidate.start, self._shift(candidate.start, event))

        if override.is_cancelled:
            return None

        start = candidate.start
        end = self._shift(candidate.start, event)
        if override.modified_start_time is not None:
            start = to_engine_time(override.modified_start_time, self.timezone)
            end = self._shift(start, event)
        if override.modified_end_time is not None:
            end = to_engine_time(override.modified_end_time, self.timezone)

        return self._build(
            event,
            candidate,
            start,
            end,
            title=_pick(override.modified_title, event.title),
            description=_pick(override.modified_description, event.description),
            location=_pick(override.modified_location, event.location),
        )

    def _shift(self, start, event: BaseEvent):
        """End instant one event duration after ``start``, with the offset valid at that instant."""
        return self.timezone.normalize(start + event.duration)

    @staticmethod
    def _build(event: BaseEvent, candidate: Candidate, start, end, **fields) -> Occurrence:
        return Occurrence(
            event_id=event.id,
            title=fields.get("title", event.title),
            start=start,
            end=end,
            is_all_day=event.is_all_day,
            description=fields.get("description", event.description),
            location=fields.get("location", event.location),
            priority=event.priority,
            category_id=event.category_id,
            original_date=candidate.date_key,
            candidate_index=candidate.index,
        )


def _pick(modified, original):
    return original if modified is None else modified
