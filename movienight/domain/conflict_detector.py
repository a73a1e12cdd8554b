"""
Decides whether a candidate slot can be booked in the meeting channel.

Any doubt resolves to "blocked": a missing channel, a duplicate movie night
or a touching interval all make the slot unusable.
"""

import logging
from typing import Optional, Sequence

from pendulum import Date, DateTime

from .exceptions import MeetingChannelMissing
from .guild import GuildProtocol, find_meeting_channel
from .models import Channel, Movie, ScheduledEvent, SchedulingPolicy, TimeRange

logger = logging.getLogger(__name__)


class ConflictDetector:
    """
    Checks a candidate interval against a snapshot of scheduled events.
    """

    def __init__(self, policy: SchedulingPolicy):
        self.policy = policy

    def meeting_channel(self, guild: GuildProtocol) -> Optional[Channel]:
        """Look up the meeting channel; None (logged) if the guild lacks it."""
        try:
            return find_meeting_channel(
                guild.voice_channels(), self.policy.meeting_channel_name
            )
        except MeetingChannelMissing as e:
            logger.error("%s; refusing to schedule", e)
            return None

    def conflicts(
        self,
        events: Sequence[ScheduledEvent],
        channel: Optional[Channel],
        movie: Movie,
        start: DateTime,
        end: DateTime,
    ) -> bool:
        """
        Return True if the slot ``[start, end]`` is unusable for ``movie``.

        Args:
            events: Snapshot of the guild's scheduled events
            channel: The meeting channel, None if the guild has none
            movie: Movie to be scheduled
            start: Candidate start instant
            end: Candidate end instant (runtime plus buffer)
        """
        if channel is None:
            return True

        candidate = TimeRange(start=start, end=end)
        event_name = self.policy.event_name(movie)

        for event in events:
            # Events of other channels never block
            if event.channel_id is None or event.channel_id != channel.id:
                continue

            if event.name == event_name and self._duplicate_blocks(event, start):
                logger.debug("Slot %s blocked by duplicate event: %s", start, event.name)
                return True

            booked = event.time_range(self.policy.default_event_duration_hours)
            if candidate.overlaps(booked):
                logger.debug("Slot %s blocked by existing event: %s", start, event.name)
                return True

        return False

    def _duplicate_blocks(self, event: ScheduledEvent, start: DateTime) -> bool:
        if self.policy.duplicate_scope == "forever":
            return True
        return self.week_of(event.start) == self.week_of(start)

    def week_of(self, instant: DateTime) -> Date:
        """First day (Sunday) of the week containing ``instant`` in the scheduling zone."""
        local_date = instant.in_timezone(self.policy.timezone).date()
        return local_date.subtract(days=(local_date.weekday() + 1) % 7)
