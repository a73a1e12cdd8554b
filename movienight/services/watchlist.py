"""
Watchlist operations: adding, removing, matching and paging movies.

Adding a movie persists it first, then tries to schedule it; removing a
movie cancels its event before the record disappears.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Tuple

from ..adapters.movie_storage import MovieStorage
from ..domain.exceptions import ChatPlatformUnavailable, MovieNotFound, NoSlotFound
from ..domain.guild import GuildProtocol
from ..domain.models import Movie, MovieCandidate, ScheduledEvent
from .movie_scheduler import MovieScheduler

logger = logging.getLogger(__name__)

PAGE_SIZE = 5


class MetadataClientProtocol(Protocol):
    """Protocol describing the movie metadata lookups needed by the watchlist."""

    def search_movies(self, query: str, year: Optional[int] = None) -> List[MovieCandidate]:
        """Return search hits for a title."""

    def get_movie(self, tmdb_id: int) -> Movie:
        """Return the full movie, runtime included."""


@dataclass
class AddResult:
    """Outcome of adding a movie: the stored entry and its event, if any."""
    movie: Movie
    event: Optional[ScheduledEvent] = None
    error: Optional[str] = None


@dataclass
class WatchlistPage:
    """
    One page of the watchlist.

    Page 0 only carries ``next_up``; later pages carry ``entries`` as
    ``(position, movie)`` pairs with 1-based positions.
    """
    number: int
    total_pages: int
    next_up: Optional[Movie] = None
    entries: List[Tuple[int, Movie]] = field(default_factory=list)


class WatchlistService:
    """
    Coordinates metadata lookups, persistence and scheduling.

    Scheduling is optional: without a guild the watchlist still works, it
    just never creates events.
    """

    def __init__(
        self,
        storage: MovieStorage,
        metadata: MetadataClientProtocol,
        scheduler: Optional[MovieScheduler] = None,
        guild: Optional[GuildProtocol] = None,
    ) -> None:
        self._storage = storage
        self._metadata = metadata
        self._scheduler = scheduler
        self._guild = guild

    @property
    def movies(self) -> List[Movie]:
        return self._storage.movies

    def search(self, title: str, year: Optional[int] = None) -> List[MovieCandidate]:
        """
        Look up a title in the metadata service.

        Raises:
            MovieNotFound: If the service knows no such movie
        """
        candidates = self._metadata.search_movies(title, year)
        if not candidates:
            raise MovieNotFound(f"No movies found with the name '{title}'")
        return candidates

    def add_candidate(self, candidate: MovieCandidate) -> AddResult:
        """Resolve the chosen search hit and add it to the watchlist."""
        movie = self._metadata.get_movie(candidate.tmdb_id)
        return self.add_movie(movie)

    def add_movie(self, movie: Movie) -> AddResult:
        """
        Persist ``movie`` and schedule it when a guild is attached.

        Scheduling problems are reported in the result; the movie stays on
        the list either way.
        """
        self._storage.add(movie)
        logger.info("Added %s to the watchlist", movie.display_name())

        if self._scheduler is None or self._guild is None:
            return AddResult(movie=movie)

        try:
            event = self._scheduler.schedule_movie(movie, self._guild)
        except (NoSlotFound, ChatPlatformUnavailable) as e:
            logger.error("Could not schedule '%s': %s", movie.title, e)
            return AddResult(movie=movie, error=str(e))

        if event is not None:
            # Persist the event id written back by the publisher
            self._storage.save()

        return AddResult(movie=movie, event=event)

    def find_matches(self, query: str) -> List[Tuple[int, Movie]]:
        """Case-insensitive substring matches as ``(index, movie)`` pairs."""
        needle = query.lower()
        return [
            (index, movie)
            for index, movie in enumerate(self._storage.movies)
            if needle in movie.title.lower()
        ]

    def remove(self, index: int) -> Movie:
        """
        Remove the movie at ``index``, cancelling its event first.

        A failed cancellation is logged and does not block the removal.

        Raises:
            MovieNotFound: If the index is out of range
        """
        movies = self._storage.movies
        if not 0 <= index < len(movies):
            raise MovieNotFound("That movie no longer exists.")

        movie = movies[index]
        if self._scheduler is not None and self._guild is not None:
            self._scheduler.cancel_movie_event(movie, self._guild)
        elif movie.scheduled_event_id is not None:
            logger.warning(
                "No chat server attached; event %s of '%s' is left in place",
                movie.scheduled_event_id, movie.title
            )

        self._storage.remove(movie)
        logger.info("Removed %s from the watchlist", movie.display_name())
        return movie

    def total_pages(self) -> int:
        """The first page shows only the next movie, the rest PAGE_SIZE each."""
        count = len(self._storage.movies)
        if count == 0:
            return 1
        return max(1, math.ceil((count - 1) / PAGE_SIZE) + 1)

    def page(self, number: int) -> WatchlistPage:
        """Return a page of the watchlist; out-of-range numbers are clamped."""
        movies = self._storage.movies
        total = self.total_pages()
        number = min(max(number, 0), total - 1)

        if not movies:
            return WatchlistPage(number=number, total_pages=total)

        if number == 0:
            return WatchlistPage(number=0, total_pages=total, next_up=movies[0])

        start = 1 + (number - 1) * PAGE_SIZE
        end = min(start + PAGE_SIZE, len(movies))
        entries = [(i + 1, movies[i]) for i in range(start, end)]
        return WatchlistPage(number=number, total_pages=total, entries=entries)
