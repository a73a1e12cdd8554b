"""
Domain layer - Scheduling rules without any platform dependencies.
"""

from .conflict_detector import ConflictDetector
from .guild import GuildProtocol, find_meeting_channel
from .models import (
    Channel,
    Movie,
    MovieCandidate,
    ScheduledEvent,
    SchedulingPolicy,
    TimeRange,
    WeeklySlot,
)
from .slot_search import SlotSearch
from .time_resolver import TimeResolver

__all__ = [
    "Channel",
    "ConflictDetector",
    "GuildProtocol",
    "Movie",
    "MovieCandidate",
    "ScheduledEvent",
    "SchedulingPolicy",
    "SlotSearch",
    "TimeRange",
    "TimeResolver",
    "WeeklySlot",
    "find_meeting_channel",
]
