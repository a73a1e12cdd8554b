"""
Tests for YAML configuration loading.
"""

from datetime import time

import pytest

from movienight.config import AppConfig, SchedulingConfig
from movienight.domain.models import DEFAULT_SLOT_TEMPLATE, WeeklySlot


def _write(tmp_path, text: str):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestSchedulingConfig:
    """Tests for SchedulingConfig."""

    def test_defaults_match_compiled_template(self):
        policy = SchedulingConfig().to_policy()

        assert policy.slots == DEFAULT_SLOT_TEMPLATE
        assert policy.timezone == "America/Toronto"
        assert policy.meeting_channel_name == "🍿movie-theatre"
        assert policy.buffer_minutes == 15
        assert policy.max_weekday_runtime == 150
        assert policy.max_search_weeks == 52

    def test_unknown_timezone_raises(self):
        with pytest.raises(ValueError, match="Unknown timezone"):
            SchedulingConfig(timezone="Mars/Olympus_Mons")

    def test_empty_slot_list_raises(self):
        with pytest.raises(ValueError, match="At least one slot"):
            SchedulingConfig(slots=[])

    def test_duplicate_slot_raises(self):
        with pytest.raises(ValueError, match="Duplicate slot"):
            SchedulingConfig(slots=[
                {"day": "friday", "time": "20:00"},
                {"day": "Fri", "time": "20:00"},
            ])

    def test_bad_slot_time_raises(self):
        with pytest.raises(ValueError, match="HH:MM"):
            SchedulingConfig(slots=[{"day": "friday", "time": "late"}])

    def test_unbounded_search_allowed(self):
        assert SchedulingConfig(max_search_weeks=None).to_policy().max_search_weeks is None


class TestAppConfig:
    """Tests for AppConfig."""

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "nope.yaml")

    def test_invalid_yaml_raises(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(_write(tmp_path, "scheduling: [unclosed"))

    def test_non_mapping_root_raises(self, tmp_path):
        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(_write(tmp_path, "- just\n- a list\n"))

    def test_custom_slots_keep_order(self, tmp_path):
        path = _write(tmp_path, """
scheduling:
  timezone: Europe/Berlin
  duplicate_scope: forever
  slots:
    - {day: friday, time: "20:15", long_allowed: true}
    - {day: Wed, time: "19:00"}
""")

        policy = AppConfig.load_from_yaml(path).scheduling.to_policy()

        assert policy.timezone == "Europe/Berlin"
        assert policy.duplicate_scope == "forever"
        assert policy.slots == (
            WeeklySlot(day=4, time=time(20, 15), long_allowed=True),
            WeeklySlot(day=2, time=time(19, 0), long_allowed=False),
        )

    def test_secrets_fall_back_to_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DISCORD_TOKEN", "env-token")
        monkeypatch.setenv("DISCORD_GUILD_ID", "123")
        monkeypatch.setenv("TMDB_KEY", "env-key")

        config = AppConfig.load_from_yaml(_write(tmp_path, "watchlist_path: list.json\n"))

        assert config.discord.token == "env-token"
        assert config.discord.is_configured()
        assert config.tmdb.api_key == "env-key"
        assert str(config.watchlist_path) == "list.json"

    def test_file_values_win_over_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TMDB_KEY", "env-key")

        config = AppConfig.load_from_yaml(_write(tmp_path, "tmdb:\n  api_key: file-key\n"))

        assert config.tmdb.api_key == "file-key"
