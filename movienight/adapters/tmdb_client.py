"""
The Movie Database (TMDb) API client for resolving titles.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from ..domain.exceptions import MetadataServiceError
from ..domain.models import Movie, MovieCandidate

logger = logging.getLogger(__name__)


class TMDbClient:
    """
    Client for the TMDb v3 REST API.

    Uses ``/search/movie`` to find candidates and ``/movie/{id}`` for the
    runtime, which search results do not include.
    """

    API_ENDPOINT = "https://api.themoviedb.org/3"
    POSTER_BASE_URL = "https://image.tmdb.org/t/p/w500"
    MAX_RESULTS = 25

    def __init__(self, api_key: str, session: Optional[requests.Session] = None):
        """
        Initialize the TMDb client.

        Args:
            api_key: TMDb v3 API key
            session: Optional requests session (shared connection pool)
        """
        self.api_key = api_key
        self.session = session or requests.Session()

    def search_movies(self, query: str, year: Optional[int] = None) -> List[MovieCandidate]:
        """
        Search movies by title.

        Args:
            query: Title or part of it
            year: Optional release year filter

        Returns:
            Up to MAX_RESULTS candidates in TMDb's relevance order

        Raises:
            MetadataServiceError: If the API call fails
        """
        params: Dict[str, Any] = {"query": query}
        if year is not None:
            params["year"] = year

        data = self._get("/search/movie", params)

        candidates: List[MovieCandidate] = []
        for result in data.get("results", [])[: self.MAX_RESULTS]:
            try:
                candidates.append(self._parse_candidate(result))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping unparsable search result: %s", e)
                continue

        return candidates

    def get_movie(self, tmdb_id: int) -> Movie:
        """
        Fetch a movie with its runtime.

        Raises:
            MetadataServiceError: If the API call fails or the payload is unusable
        """
        data = self._get(f"/movie/{tmdb_id}", {})

        try:
            candidate = self._parse_candidate(data)
        except (KeyError, TypeError, ValueError) as e:
            raise MetadataServiceError(f"Unexpected movie payload for id {tmdb_id}: {e}") from e

        return Movie(
            title=candidate.title,
            year=candidate.year,
            poster_url=candidate.poster_url,
            runtime_minutes=self._parse_runtime(data.get("runtime")),
        )

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.API_ENDPOINT}{path}"

        try:
            response = self.session.get(
                url,
                params={"api_key": self.api_key, **params},
                timeout=10
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise MetadataServiceError(f"Failed to query TMDb {path}: {e}") from e
        except ValueError as e:
            raise MetadataServiceError(f"TMDb returned invalid JSON for {path}: {e}") from e

        if not isinstance(data, dict):
            raise MetadataServiceError(f"TMDb returned an unexpected payload for {path}")

        return data

    def _parse_candidate(self, result: Dict[str, Any]) -> MovieCandidate:
        """
        Map a TMDb movie object onto a candidate.

        Example payload:
        {
            "id": 438631,
            "title": "Dune",
            "release_date": "2021-09-15",
            "poster_path": "/d5NXSklXo0qyIYkgV94XAgMIckC.jpg"
        }
        """
        poster_path = result.get("poster_path")
        return MovieCandidate(
            tmdb_id=int(result["id"]),
            title=result["title"],
            year=self._parse_year(result.get("release_date")),
            poster_url=f"{self.POSTER_BASE_URL}{poster_path}" if poster_path else None,
        )

    @staticmethod
    def _parse_year(release_date: Optional[str]) -> int:
        if not release_date or len(release_date) < 4:
            return 0
        try:
            return int(release_date[:4])
        except ValueError:
            return 0

    @staticmethod
    def _parse_runtime(runtime: Any) -> int:
        if not isinstance(runtime, int) or runtime < 0:
            return 0
        return runtime
