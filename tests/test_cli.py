"""
Tests for the Typer CLI, run offline with the mock guild.
"""

import json

import pytest
from typer.testing import CliRunner

from movienight.adapters.mock_guild import MockGuild
from movienight.adapters.movie_storage import MovieStorage
from movienight.cli import app as cli_module
from movienight.domain.models import Movie, MovieCandidate

runner = CliRunner()


class StubTMDbClient:
    """Stands in for TMDbClient inside the CLI."""

    def __init__(self, api_key: str, session=None):
        self.api_key = api_key

    def search_movies(self, query, year=None):
        if query == "Nothing":
            return []
        return [MovieCandidate(tmdb_id=348, title="Alien", year=1979)]

    def get_movie(self, tmdb_id):
        return Movie(title="Alien", year=1979, runtime_minutes=117)


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    monkeypatch.delenv("DISCORD_TOKEN", raising=False)
    monkeypatch.delenv("DISCORD_GUILD_ID", raising=False)
    path = tmp_path / "config.yaml"
    path.write_text(
        "tmdb:\n"
        "  api_key: test-key\n"
        f"watchlist_path: {tmp_path / 'movies.json'}\n"
        f"mock_guild_path: {tmp_path / 'mock_guild.json'}\n",
        encoding="utf-8",
    )
    return path


def test_list_empty(config_file):
    result = runner.invoke(cli_module.app, ["list", "--config", str(config_file)])

    assert result.exit_code == 0
    assert "currently empty" in result.output


def test_list_shows_next_up_and_pages(config_file, tmp_path):
    storage = MovieStorage(tmp_path / "movies.json")
    storage.add(Movie(title="Alien", year=1979))
    storage.add(Movie(title="Heat", year=1995))

    first = runner.invoke(cli_module.app, ["list", "--config", str(config_file)])
    second = runner.invoke(cli_module.app, ["list", "--page", "2", "--config", str(config_file)])

    assert first.exit_code == 0
    assert "Next Up: Alien (1979)" in first.output
    assert "Page 1 of 2" in first.output
    assert second.exit_code == 0
    assert "Heat" in second.output
    assert "Page 2 of 2" in second.output


def test_add_schedules_in_mock_guild(config_file, tmp_path, monkeypatch):
    monkeypatch.setattr(cli_module, "TMDbClient", StubTMDbClient)

    result = runner.invoke(cli_module.app, ["add", "Alien", "--mock", "--config", str(config_file)])

    assert result.exit_code == 0, result.output
    assert "Added" in result.output
    assert "Movie night" in result.output
    movie = MovieStorage(tmp_path / "movies.json").movies[0]
    events = json.loads((tmp_path / "mock_guild.json").read_text(encoding="utf-8"))["events"]
    assert events[0]["name"] == "Movie Night - Alien"
    assert movie.scheduled_event_id == events[0]["id"]


def test_add_unknown_title_fails(config_file, monkeypatch):
    monkeypatch.setattr(cli_module, "TMDbClient", StubTMDbClient)

    result = runner.invoke(cli_module.app, ["add", "Nothing", "--mock", "--config", str(config_file)])

    assert result.exit_code == 1
    assert "No movies found" in result.output


def test_remove_cancels_mock_event(config_file, tmp_path, monkeypatch):
    monkeypatch.setattr(cli_module, "TMDbClient", StubTMDbClient)
    runner.invoke(cli_module.app, ["add", "Alien", "--mock", "--config", str(config_file)])

    result = runner.invoke(cli_module.app, ["remove", "ali", "--mock", "--config", str(config_file)])

    assert result.exit_code == 0, result.output
    assert "Removed" in result.output
    assert MovieStorage(tmp_path / "movies.json").movies == []
    assert MockGuild(data_file=tmp_path / "mock_guild.json").events == []


def test_remove_asks_when_several_match(config_file, tmp_path):
    storage = MovieStorage(tmp_path / "movies.json")
    storage.add(Movie(title="Alien", year=1979))
    storage.add(Movie(title="Aliens", year=1986))

    result = runner.invoke(
        cli_module.app, ["remove", "alien", "--mock", "--config", str(config_file)], input="2\n"
    )

    assert result.exit_code == 0, result.output
    assert [m.title for m in MovieStorage(tmp_path / "movies.json").movies] == ["Alien"]


def test_next_slot_preview(config_file, tmp_path):
    result = runner.invoke(
        cli_module.app, ["next-slot", "--runtime", "200", "--mock", "--config", str(config_file)]
    )

    assert result.exit_code == 0, result.output
    assert "Next free slot" in result.output
    assert "Sun" in result.output
    assert not (tmp_path / "mock_guild.json").exists()


def test_slots_table(config_file):
    result = runner.invoke(cli_module.app, ["slots", "--config", str(config_file)])

    assert result.exit_code == 0
    assert "Sunday 18:30" in result.output


def test_missing_config_fails(tmp_path):
    result = runner.invoke(cli_module.app, ["list", "--config", str(tmp_path / "nope.yaml")])

    assert result.exit_code == 1
    assert "Config file not found" in result.output
