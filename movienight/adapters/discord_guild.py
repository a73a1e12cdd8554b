"""
Discord REST API adapter for a single guild (chat server).
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from pendulum import DateTime

from ..domain.exceptions import ChatPlatformUnavailable
from ..domain.models import Channel, ScheduledEvent, to_datetime

logger = logging.getLogger(__name__)


class DiscordGuild:
    """
    Guild client for Discord's scheduled-event endpoints.

    Channel listings are cached per instance; scheduled events are always
    fetched fresh.
    """

    API_ENDPOINT = "https://discord.com/api/v10"

    # Channel types that can host a scheduled event
    VOICE_CHANNEL_TYPES = {2: 2, 13: 1}  # channel type -> event entity type
    GUILD_ONLY_PRIVACY = 2

    def __init__(self, token: str, guild_id: str, session: Optional[requests.Session] = None):
        """
        Initialize the Discord guild client.

        Args:
            token: Bot token
            guild_id: Snowflake id of the guild
            session: Optional requests session
        """
        self.guild_id = guild_id
        self.session = session or requests.Session()
        self.headers = {
            "Authorization": f"Bot {token}",
            "Content-Type": "application/json"
        }
        self._channels: Optional[List[Channel]] = None
        self._channel_types: Dict[str, int] = {}

    def voice_channels(self) -> List[Channel]:
        """Voice and stage channels of the guild."""
        if self._channels is None:
            data = self._request("GET", f"/guilds/{self.guild_id}/channels")

            channels: List[Channel] = []
            for item in data or []:
                if item.get("type") not in self.VOICE_CHANNEL_TYPES:
                    continue
                channel = Channel(id=str(item["id"]), name=item.get("name", ""))
                self._channel_types[channel.id] = item["type"]
                channels.append(channel)

            self._channels = channels

        return self._channels

    def scheduled_events(self) -> List[ScheduledEvent]:
        """
        Scheduled events of the guild.

        Response format:
        [
            {
                "id": "1190000000000000000",
                "name": "Movie Night - Dune",
                "channel_id": "1180000000000000000",
                "scheduled_start_time": "2024-01-07T23:30:00+00:00",
                "scheduled_end_time": null
            }
        ]
        """
        data = self._request("GET", f"/guilds/{self.guild_id}/scheduled-events")

        events: List[ScheduledEvent] = []
        for item in data or []:
            try:
                events.append(self._parse_event(item))
            except (KeyError, TypeError, ValueError) as e:
                # An unreadable event cannot be checked for conflicts
                raise ChatPlatformUnavailable(f"Could not parse scheduled event: {e}") from e

        logger.debug("Fetched %d scheduled event(s) for guild %s", len(events), self.guild_id)
        return events

    def create_scheduled_event(
        self,
        name: str,
        channel: Channel,
        start: DateTime,
        end: DateTime,
        description: str,
    ) -> ScheduledEvent:
        """Create a guild-only event in a voice or stage channel."""
        channel_type = self._channel_types.get(channel.id, 2)
        payload = {
            "name": name,
            "channel_id": channel.id,
            "privacy_level": self.GUILD_ONLY_PRIVACY,
            "entity_type": self.VOICE_CHANNEL_TYPES.get(channel_type, 2),
            "scheduled_start_time": start.in_timezone("UTC").to_iso8601_string(),
            "scheduled_end_time": end.in_timezone("UTC").to_iso8601_string(),
            "description": description,
        }

        data = self._request("POST", f"/guilds/{self.guild_id}/scheduled-events", json=payload)

        try:
            return self._parse_event(data)
        except (KeyError, TypeError, ValueError) as e:
            raise ChatPlatformUnavailable(f"Unexpected response creating '{name}': {e}") from e

    def delete_scheduled_event(self, event_id: int) -> None:
        self._request("DELETE", f"/guilds/{self.guild_id}/scheduled-events/{event_id}")

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.API_ENDPOINT}{path}"

        try:
            response = self.session.request(
                method,
                url,
                headers=self.headers,
                json=json,
                timeout=30
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise ChatPlatformUnavailable(f"Discord {method} {path} failed: {e}") from e

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise ChatPlatformUnavailable(f"Discord returned invalid JSON for {path}: {e}") from e

    @staticmethod
    def _parse_event(item: Dict[str, Any]) -> ScheduledEvent:
        end = item.get("scheduled_end_time")
        channel_id = item.get("channel_id")
        return ScheduledEvent(
            name=item["name"],
            start=to_datetime(item["scheduled_start_time"]),
            end=to_datetime(end) if end else None,
            channel_id=str(channel_id) if channel_id is not None else None,
            id=int(item["id"]),
            description=item.get("description") or "",
        )
