"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .event_publisher import EventPublisher
from .movie_scheduler import MovieScheduler
from .watchlist import AddResult, MetadataClientProtocol, WatchlistPage, WatchlistService

__all__ = [
    "AddResult",
    "EventPublisher",
    "MetadataClientProtocol",
    "MovieScheduler",
    "WatchlistPage",
    "WatchlistService",
]
