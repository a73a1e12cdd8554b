"""
Forward search for the next free movie night slot.

This is the heart of the scheduler: a week-by-week scan of the slot
template against a single snapshot of the guild's scheduled events.
"""

import logging
from typing import Callable, List, Optional, Sequence, Tuple

import pendulum
from pendulum import DateTime

from .conflict_detector import ConflictDetector
from .exceptions import NoSlotFound
from .guild import GuildProtocol
from .models import Channel, Movie, ScheduledEvent, SchedulingPolicy, WeeklySlot
from .time_resolver import TimeResolver

logger = logging.getLogger(__name__)

Clock = Callable[[], DateTime]


class SlotSearch:
    """
    Finds the next usable slot for a movie.

    Algorithm:
    1. Read "now" once as the search base
    2. Read the guild's scheduled events and meeting channel once
    3. Resolve every admissible template slot against the base and try the
       candidates earliest first (template order breaks ties)
    4. If the whole pass is blocked, move the base forward exactly one week
    5. Give up with NoSlotFound after ``max_search_weeks`` passes
    """

    def __init__(
        self,
        policy: SchedulingPolicy,
        clock: Optional[Clock] = None,
        conflict_detector: Optional[ConflictDetector] = None,
    ):
        self.policy = policy
        self.resolver = TimeResolver(policy.timezone)
        self.conflict_detector = conflict_detector or ConflictDetector(policy)
        self._clock = clock or (lambda: pendulum.now(policy.timezone))

    def find_next_available_slot(
        self,
        runtime: int,
        movie: Movie,
        guild: GuildProtocol,
    ) -> DateTime:
        """
        Return the start of the first free slot for ``movie``.

        Args:
            runtime: Runtime in minutes, 0 if unknown
            movie: Movie to schedule
            guild: Chat server holding the meeting channel

        Raises:
            ValueError: If runtime is negative
            ChatPlatformUnavailable: If the scheduled events cannot be listed
            NoSlotFound: If no slot is free within the week cap
        """
        if runtime < 0:
            raise ValueError(f"Runtime must not be negative, got {runtime}")

        search_base = self._clock().in_timezone(self.policy.timezone)
        events = list(guild.scheduled_events())
        channel = self.conflict_detector.meeting_channel(guild)

        weeks = 0
        while self.policy.max_search_weeks is None or weeks < self.policy.max_search_weeks:
            start = self._first_free_in_pass(runtime, movie, channel, events, search_base)
            if start is not None:
                logger.info(
                    "Found slot %s for '%s' after %d blocked week(s)",
                    start.to_iso8601_string(), movie.title, weeks
                )
                return start

            search_base = search_base.add(weeks=1)
            weeks += 1

        raise NoSlotFound(weeks=weeks, title=movie.title)

    def candidates(self, runtime: int, search_base: DateTime) -> List[Tuple[DateTime, WeeklySlot]]:
        """
        Concrete starts of one pass, earliest first.

        Slots that forbid long movies are left out for long runtimes.
        """
        resolved: List[Tuple[DateTime, WeeklySlot]] = []

        for slot in self.policy.slots:
            if self.policy.is_long(runtime) and not slot.long_allowed:
                continue
            start = self.resolver.next_occurrence(slot.day, slot.time, search_base)
            resolved.append((start, slot))

        # sorted() is stable, so equal instants keep template order
        return sorted(resolved, key=lambda item: item[0])

    def event_end(self, start: DateTime, runtime: int) -> DateTime:
        """End of the reservation: runtime plus buffer."""
        return start.add(minutes=runtime + self.policy.buffer_minutes)

    def _first_free_in_pass(
        self,
        runtime: int,
        movie: Movie,
        channel: Optional[Channel],
        events: Sequence[ScheduledEvent],
        search_base: DateTime,
    ) -> Optional[DateTime]:
        for start, slot in self.candidates(runtime, search_base):
            end = self.event_end(start, runtime)
            if not self.conflict_detector.conflicts(events, channel, movie, start, end):
                return start
            logger.debug("Slot %s on %s is blocked", slot, start.to_date_string())
        return None
