"""
Application service that finds a slot and publishes the event for it.

Search and publish run under one process-wide lock, so two add-movie
requests handled by the same process cannot pick the same slot.
"""

from __future__ import annotations

import threading
from typing import Optional

from ..domain.guild import GuildProtocol
from ..domain.models import Movie, ScheduledEvent, SchedulingPolicy, TimeRange
from ..domain.slot_search import SlotSearch
from .event_publisher import EventPublisher

_schedule_lock = threading.Lock()


class MovieScheduler:
    """
    Orchestrates slot search and event publishing.

    Both collaborators can be injected, which lets tests pin the clock of
    the search or swap the publisher.
    """

    def __init__(
        self,
        policy: SchedulingPolicy,
        slot_search: Optional[SlotSearch] = None,
        publisher: Optional[EventPublisher] = None,
    ) -> None:
        self.policy = policy
        self._slot_search = slot_search or SlotSearch(policy)
        self._publisher = publisher or EventPublisher(policy)

    def schedule_movie(self, movie: Movie, guild: GuildProtocol) -> Optional[ScheduledEvent]:
        """
        Book the next free slot for ``movie``.

        Raises:
            NoSlotFound: If the search exhausts its week cap
            ChatPlatformUnavailable: If scheduled events cannot be listed
        """
        with _schedule_lock:
            slot = self._find_slot(movie.runtime_minutes, movie, guild)
            return self._publisher.create_event(guild, movie, slot.start, slot.end)

    def preview_slot(self, runtime: int, movie: Movie, guild: GuildProtocol) -> TimeRange:
        """Return the slot ``schedule_movie`` would book, without publishing."""
        with _schedule_lock:
            return self._find_slot(runtime, movie, guild)

    def cancel_movie_event(self, movie: Movie, guild: GuildProtocol) -> bool:
        """Delete the movie's event before it leaves the watchlist."""
        return self._publisher.cancel_event(guild, movie)

    def _find_slot(self, runtime: int, movie: Movie, guild: GuildProtocol) -> TimeRange:
        start = self._slot_search.find_next_available_slot(runtime, movie, guild)
        return TimeRange(start=start, end=self._slot_search.event_end(start, runtime))
