"""
Domain models for the movie night watchlist and its weekly schedule.
"""

from dataclasses import dataclass
from datetime import time
from typing import Any, Dict, Optional, Tuple

import pendulum
from pendulum import DateTime


BUFFER_MINUTES = 15
MAX_WEEKDAY_RUNTIME = 150
DEFAULT_EVENT_DURATION_HOURS = 3
SCHEDULING_ZONE = "America/Toronto"
MEETING_CHANNEL_NAME = "🍿movie-theatre"
EVENT_TITLE_PREFIX = "Movie Night - "
DEFAULT_MAX_SEARCH_WEEKS = 52

WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


@dataclass
class Movie:
    """
    A watchlist entry.

    The scheduler reads title, year and runtime and writes
    ``scheduled_event_id`` back once an event has been published.
    A runtime of 0 means the metadata service did not know it.
    """
    title: str
    year: int = 0
    poster_url: Optional[str] = None
    runtime_minutes: int = 0
    scheduled_event_id: Optional[int] = None

    def __post_init__(self):
        if not self.title or not self.title.strip():
            raise ValueError("Movie title must not be empty")
        if self.runtime_minutes < 0:
            raise ValueError(f"Runtime must not be negative, got {self.runtime_minutes}")

    def display_name(self) -> str:
        """Format as ``Title (Year)``."""
        return f"{self.title} ({self.year})"

    def to_record(self) -> Dict[str, Any]:
        """Convert to the persisted JSON record."""
        record: Dict[str, Any] = {
            "title": self.title,
            "year": self.year,
            "posterURL": self.poster_url,
            "runtimeMinutes": self.runtime_minutes,
        }
        if self.scheduled_event_id is not None:
            record["scheduledEventId"] = self.scheduled_event_id
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Movie":
        """Build a movie from a persisted JSON record."""
        event_id = record.get("scheduledEventId")
        return cls(
            title=record["title"],
            year=int(record.get("year") or 0),
            poster_url=record.get("posterURL"),
            runtime_minutes=int(record.get("runtimeMinutes") or 0),
            scheduled_event_id=int(event_id) if event_id is not None else None,
        )


@dataclass(frozen=True)
class MovieCandidate:
    """A search hit from the metadata service, before runtime is known."""
    tmdb_id: int
    title: str
    year: int = 0
    poster_url: Optional[str] = None

    def display_name(self) -> str:
        return f"{self.title} ({self.year})"


@dataclass(frozen=True)
class WeeklySlot:
    """
    One entry of the weekly slot template.

    ``day`` uses 0=Monday .. 6=Sunday, matching ``DateTime.day_of_week``.
    """
    day: int
    time: time
    long_allowed: bool = False

    def __post_init__(self):
        if self.day not in range(7):
            raise ValueError(f"Day must be between 0 and 6, got {self.day}")

    def __str__(self) -> str:
        policy = "long allowed" if self.long_allowed else "long not allowed"
        return f"{WEEKDAY_NAMES[self.day].capitalize()} {self.time.strftime('%H:%M')} ({policy})"


# Order is priority: the early Sunday slot is the main slot for long films.
DEFAULT_SLOT_TEMPLATE: Tuple[WeeklySlot, ...] = (
    WeeklySlot(day=6, time=time(18, 30), long_allowed=True),
    WeeklySlot(day=6, time=time(21, 0), long_allowed=False),
    WeeklySlot(day=1, time=time(19, 45), long_allowed=False),
    WeeklySlot(day=3, time=time(19, 45), long_allowed=False),
)


@dataclass(frozen=True)
class Channel:
    """A voice or meeting channel of the chat server."""
    id: str
    name: str


@dataclass(frozen=True)
class ScheduledEvent:
    """
    Snapshot of a scheduled event on the chat platform.

    ``end`` and ``channel_id`` may be absent; ``id`` is only known for
    events that exist on the platform.
    """
    name: str
    start: DateTime
    end: Optional[DateTime] = None
    channel_id: Optional[str] = None
    id: Optional[int] = None
    description: str = ""

    def effective_end(self, default_hours: int = DEFAULT_EVENT_DURATION_HOURS) -> DateTime:
        """End instant, assuming ``default_hours`` when the platform has none."""
        if self.end is None:
            return self.start.add(hours=default_hours)
        return self.end

    def time_range(self, default_hours: int = DEFAULT_EVENT_DURATION_HOURS) -> "TimeRange":
        return TimeRange(start=self.start, end=self.effective_end(default_hours))


@dataclass(frozen=True)
class TimeRange:
    """
    Immutable closed interval ``[start, end]``.

    Invariant: start must not be after end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Start time {self.start} must not be after end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """
        Closed-interval overlap: touching at a single instant counts.
        """
        return not (self.end < other.start or self.start > other.end)

    def in_timezone(self, tz: str) -> "TimeRange":
        return TimeRange(start=self.start.in_timezone(tz), end=self.end.in_timezone(tz))

    def __str__(self) -> str:
        return f"{self.start.format('ddd DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class SchedulingPolicy:
    """
    Process-wide scheduling settings.

    ``duplicate_scope`` decides how far an existing event with the same name
    blocks: ``"week"`` only within its Sunday-started week, ``"forever"``
    everywhere. ``max_search_weeks=None`` lets the search run unbounded.
    """
    timezone: str = SCHEDULING_ZONE
    meeting_channel_name: str = MEETING_CHANNEL_NAME
    buffer_minutes: int = BUFFER_MINUTES
    max_weekday_runtime: int = MAX_WEEKDAY_RUNTIME
    default_event_duration_hours: int = DEFAULT_EVENT_DURATION_HOURS
    event_title_prefix: str = EVENT_TITLE_PREFIX
    max_search_weeks: Optional[int] = DEFAULT_MAX_SEARCH_WEEKS
    duplicate_scope: str = "week"
    slots: Tuple[WeeklySlot, ...] = DEFAULT_SLOT_TEMPLATE

    def event_name(self, movie: Movie) -> str:
        return f"{self.event_title_prefix}{movie.title}"

    def event_description(self, movie: Movie) -> str:
        return f"Movie Night: {movie.title} ({movie.year})"

    def is_long(self, runtime: int) -> bool:
        """Long movies only fit slots that allow them."""
        return runtime > self.max_weekday_runtime


def parse_weekday(value: str) -> int:
    """Map a weekday name (``"sunday"``, ``"Sun"``) to 0=Monday .. 6=Sunday."""
    key = value.strip().lower()
    for index, name in enumerate(WEEKDAY_NAMES):
        if key == name or (len(key) >= 3 and name.startswith(key)):
            return index
    raise ValueError(f"Unknown weekday: '{value}'")


def to_datetime(value: Any, tz: str = "UTC") -> DateTime:
    """Parse an ISO 8601 string into a timezone-aware pendulum DateTime."""
    parsed = pendulum.parse(value, tz=tz)
    if not isinstance(parsed, DateTime):
        raise ValueError(f"Could not parse datetime: {value}")
    return parsed
