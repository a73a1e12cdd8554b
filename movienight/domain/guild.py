"""
Port to the chat platform.

The scheduling core only needs a handful of guild operations; the Discord
REST adapter and the offline mock both satisfy this protocol.
"""

from __future__ import annotations

from typing import List, Protocol, Sequence

from pendulum import DateTime

from .exceptions import MeetingChannelMissing
from .models import Channel, ScheduledEvent


class GuildProtocol(Protocol):
    """Protocol describing the chat server behaviour needed by the scheduler."""

    def voice_channels(self) -> List[Channel]:
        """Return the voice/meeting channels of the server."""

    def scheduled_events(self) -> List[ScheduledEvent]:
        """Return the currently scheduled events of the server."""

    def create_scheduled_event(
        self,
        name: str,
        channel: Channel,
        start: DateTime,
        end: DateTime,
        description: str,
    ) -> ScheduledEvent:
        """Create an event and return it with its platform id."""

    def delete_scheduled_event(self, event_id: int) -> None:
        """Delete the event with the given id."""


def find_meeting_channel(channels: Sequence[Channel], name: str) -> Channel:
    """
    Locate the meeting channel by its exact name (emoji included).

    Raises:
        MeetingChannelMissing: If no channel carries that name
    """
    for channel in channels:
        if channel.name == name:
            return channel
    raise MeetingChannelMissing(f"Could not find '{name}' voice channel")
