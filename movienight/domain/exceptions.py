"""
Domain-specific exception hierarchy for the movie night bot.
"""


class MovieNightError(Exception):
    """Base class for all application-level errors."""


class MeetingChannelMissing(MovieNightError):
    """Raised when the meeting channel cannot be located in the guild."""


class ChatPlatformUnavailable(MovieNightError):
    """Raised when the chat platform cannot list, create or delete events."""


class NoSlotFound(MovieNightError):
    """Raised when the forward slot search exceeds its week cap."""

    def __init__(self, weeks: int, title: str):
        super().__init__(
            f"No free movie night slot for '{title}' within the next {weeks} week(s)"
        )
        self.weeks = weeks
        self.title = title


class MetadataServiceError(MovieNightError):
    """Raised when movie metadata cannot be fetched or parsed."""


class MovieNotFound(MovieNightError):
    """Raised when a lookup in the metadata service or watchlist finds nothing."""


class WatchlistStorageError(MovieNightError):
    """Raised when the persisted watchlist cannot be read."""
