"""
Publishing and cancelling movie night events on the chat platform.

Publishing never fails the watchlist operation that triggered it: a missing
channel or a platform error is logged and the movie simply stays without an
event id.
"""

import logging
from typing import Optional

from pendulum import DateTime

from ..domain.exceptions import ChatPlatformUnavailable, MeetingChannelMissing
from ..domain.guild import GuildProtocol, find_meeting_channel
from ..domain.models import Movie, ScheduledEvent, SchedulingPolicy

logger = logging.getLogger(__name__)


class EventPublisher:
    """Creates scheduled events in the meeting channel and deletes them again."""

    def __init__(self, policy: SchedulingPolicy):
        self.policy = policy

    def create_event(
        self,
        guild: GuildProtocol,
        movie: Movie,
        start: DateTime,
        end: DateTime,
    ) -> Optional[ScheduledEvent]:
        """
        Create the movie night event and attach its id to ``movie``.

        The caller is responsible for re-persisting the watchlist afterwards.

        Returns:
            The created event, or None if nothing was published
        """
        try:
            channel = find_meeting_channel(
                guild.voice_channels(), self.policy.meeting_channel_name
            )
        except (MeetingChannelMissing, ChatPlatformUnavailable) as e:
            logger.error("Cannot publish event for '%s': %s", movie.title, e)
            return None

        try:
            event = guild.create_scheduled_event(
                name=self.policy.event_name(movie),
                channel=channel,
                start=start,
                end=end,
                description=self.policy.event_description(movie),
            )
        except ChatPlatformUnavailable as e:
            logger.error("Failed to create event for '%s': %s", movie.title, e)
            return None

        movie.scheduled_event_id = event.id
        logger.info("Created event for: %s (id %s)", movie.title, event.id)
        return event

    def cancel_event(self, guild: GuildProtocol, movie: Movie) -> bool:
        """
        Delete the movie's scheduled event, if it has one.

        Returns:
            True if an event was deleted, False if there was nothing to delete
            or the platform refused
        """
        if movie.scheduled_event_id is None:
            return False

        try:
            guild.delete_scheduled_event(movie.scheduled_event_id)
        except ChatPlatformUnavailable as e:
            logger.error(
                "Failed to delete event %s for '%s': %s",
                movie.scheduled_event_id, movie.title, e
            )
            return False

        logger.info("Deleted event %s for: %s", movie.scheduled_event_id, movie.title)
        movie.scheduled_event_id = None
        return True
