"""
Mock chat server for running without a Discord bot token.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from pendulum import DateTime

from ..domain.exceptions import ChatPlatformUnavailable
from ..domain.models import MEETING_CHANNEL_NAME, Channel, ScheduledEvent, to_datetime

logger = logging.getLogger(__name__)

DEFAULT_MOCK_CHANNELS = (
    Channel(id="100", name=MEETING_CHANNEL_NAME),
    Channel(id="200", name="General"),
)


class MockGuild:
    """
    In-memory guild that simulates Discord's scheduled-event API.

    When a data file is given, events are loaded from it and every change is
    written back, so consecutive CLI runs see each other's events.

    File format:
    {
        "channels": [{"id": "100", "name": "🍿movie-theatre"}],
        "events": [
            {
                "id": 1,
                "name": "Movie Night - Dune",
                "channel_id": "100",
                "start": "2024-01-07T18:30:00-05:00",
                "end": null
            }
        ]
    }
    """

    def __init__(
        self,
        data_file: Optional[Path] = None,
        channels: Optional[Sequence[Channel]] = None,
        events: Optional[Sequence[ScheduledEvent]] = None,
    ):
        """
        Initialize the mock guild.

        Args:
            data_file: Optional JSON file to load from and save to
            channels: Channels to use instead of the defaults
            events: Events to start with instead of the file's
        """
        self.data_file = Path(data_file) if data_file else None
        self.channels: List[Channel] = list(channels if channels is not None else DEFAULT_MOCK_CHANNELS)
        self.events: List[ScheduledEvent] = list(events or [])
        self.fail_listing = False
        self.fail_creation = False
        self.fail_deletion = False
        self.listing_calls = 0
        self.channel_calls = 0

        if self.data_file and events is None:
            self._load()

    def voice_channels(self) -> List[Channel]:
        self.channel_calls += 1
        return list(self.channels)

    def scheduled_events(self) -> List[ScheduledEvent]:
        self.listing_calls += 1
        if self.fail_listing:
            raise ChatPlatformUnavailable("Mock guild: listing scheduled events failed")
        return list(self.events)

    def create_scheduled_event(
        self,
        name: str,
        channel: Channel,
        start: DateTime,
        end: DateTime,
        description: str,
    ) -> ScheduledEvent:
        if self.fail_creation:
            raise ChatPlatformUnavailable("Mock guild: creating scheduled event failed")

        event = ScheduledEvent(
            name=name,
            start=start,
            end=end,
            channel_id=channel.id,
            id=self._next_id(),
            description=description,
        )
        self.events.append(event)
        self._save()
        return event

    def delete_scheduled_event(self, event_id: int) -> None:
        if self.fail_deletion:
            raise ChatPlatformUnavailable("Mock guild: deleting scheduled event failed")

        remaining = [event for event in self.events if event.id != event_id]
        if len(remaining) == len(self.events):
            raise ChatPlatformUnavailable(f"Mock guild: unknown scheduled event {event_id}")

        self.events = remaining
        self._save()

    def _next_id(self) -> int:
        ids = [event.id for event in self.events if event.id is not None]
        return max(ids, default=0) + 1

    def _load(self) -> None:
        """Load channels and events from the data file, if it exists."""
        if not self.data_file or not self.data_file.exists():
            return

        with open(self.data_file, "r", encoding="utf-8") as f:
            data = json.load(f)

        if data.get("channels"):
            self.channels = [
                Channel(id=str(item["id"]), name=item["name"]) for item in data["channels"]
            ]

        for item in data.get("events", []):
            channel_id = item.get("channel_id")
            event_id = item.get("id")
            try:
                self.events.append(
                    ScheduledEvent(
                        name=item["name"],
                        start=to_datetime(item["start"]),
                        end=to_datetime(item["end"]) if item.get("end") else None,
                        channel_id=str(channel_id) if channel_id is not None else None,
                        id=int(event_id) if event_id is not None else None,
                        description=item.get("description", ""),
                    )
                )
            except (KeyError, ValueError) as e:
                logger.warning("Skipping invalid mock event %s: %s", item, e)
                continue

    def _save(self) -> None:
        if not self.data_file:
            return

        data: Dict[str, Any] = {
            "channels": [{"id": c.id, "name": c.name} for c in self.channels],
            "events": [
                {
                    "id": event.id,
                    "name": event.name,
                    "channel_id": event.channel_id,
                    "start": event.start.to_iso8601_string(),
                    "end": event.end.to_iso8601_string() if event.end else None,
                    "description": event.description,
                }
                for event in self.events
            ],
        }
        with open(self.data_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
