"""
Adapters layer - External integrations (Discord, TMDb, JSON files).
"""

from .discord_guild import DiscordGuild
from .mock_guild import MockGuild
from .movie_storage import MovieStorage
from .tmdb_client import TMDbClient

__all__ = ["DiscordGuild", "MockGuild", "MovieStorage", "TMDbClient"]
