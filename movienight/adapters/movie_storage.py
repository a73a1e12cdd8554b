"""
JSON file persistence for the watchlist.
"""

import json
import logging
import threading
from pathlib import Path
from typing import List

from ..domain.exceptions import WatchlistStorageError
from ..domain.models import Movie

logger = logging.getLogger(__name__)

DEFAULT_WATCHLIST_PATH = Path("movies.json")


class MovieStorage:
    """
    Ordered list of movies, loaded on construction and written back on change.

    List order is the user-visible "next up" order.
    """

    def __init__(self, path: Path = DEFAULT_WATCHLIST_PATH):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._movies: List[Movie] = self._load()

    @property
    def movies(self) -> List[Movie]:
        return self._movies

    def add(self, movie: Movie) -> None:
        """Append a movie and save."""
        self._movies.append(movie)
        self.save()

    def remove(self, movie: Movie) -> None:
        """Remove a movie (by identity first, then equality) and save."""
        for index, stored in enumerate(self._movies):
            if stored is movie:
                del self._movies[index]
                break
        else:
            self._movies.remove(movie)
        self.save()

    def save(self) -> None:
        """Write the current list to disk."""
        with self._lock:
            records = [movie.to_record() for movie in self._movies]
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
            tmp_path.replace(self.path)
        logger.debug("Saved %d movie(s) to %s", len(records), self.path)

    def _load(self) -> List[Movie]:
        """
        Load the movie list from the JSON file.

        A missing or empty file yields an empty list.

        Raises:
            WatchlistStorageError: If the file is not a JSON list of movie records
        """
        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                content = f.read()
        except OSError as exc:
            raise WatchlistStorageError(f"Cannot read {self.path}: {exc}") from exc

        if not content.strip():
            return []

        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise WatchlistStorageError(f"Invalid JSON in {self.path}: {exc}") from exc

        if not isinstance(data, list):
            raise WatchlistStorageError(f"{self.path} must contain a list of movies")

        try:
            movies = [Movie.from_record(record) for record in data]
        except (KeyError, TypeError, ValueError) as exc:
            raise WatchlistStorageError(f"Invalid movie record in {self.path}: {exc}") from exc

        logger.debug("Loaded %d movie(s) from %s", len(movies), self.path)
        return movies
