"""
Configuration management using Pydantic models loaded from YAML.
"""

import os
from datetime import time
from pathlib import Path
from typing import List, Literal, Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import (
    BUFFER_MINUTES,
    DEFAULT_EVENT_DURATION_HOURS,
    DEFAULT_MAX_SEARCH_WEEKS,
    DEFAULT_SLOT_TEMPLATE,
    EVENT_TITLE_PREFIX,
    MAX_WEEKDAY_RUNTIME,
    MEETING_CHANNEL_NAME,
    SCHEDULING_ZONE,
    WEEKDAY_NAMES,
    SchedulingPolicy,
    WeeklySlot,
    parse_weekday,
)


class SlotConfig(BaseModel):
    """One weekly slot, e.g. ``{day: sunday, time: "18:30", long_allowed: true}``."""
    day: str
    time: str
    long_allowed: bool = False

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        """Normalize the weekday name."""
        return WEEKDAY_NAMES[parse_weekday(value)]

    @field_validator("time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        """Validate HH:MM format."""
        try:
            parsed = time.fromisoformat(value.strip())
        except ValueError as exc:
            raise ValueError(f"Slot time must be HH:MM, got '{value}'") from exc
        return parsed.strftime("%H:%M")

    def to_slot(self) -> WeeklySlot:
        return WeeklySlot(
            day=parse_weekday(self.day),
            time=time.fromisoformat(self.time),
            long_allowed=self.long_allowed,
        )


def _default_slots() -> List[SlotConfig]:
    return [
        SlotConfig(
            day=WEEKDAY_NAMES[slot.day],
            time=slot.time.strftime("%H:%M"),
            long_allowed=slot.long_allowed,
        )
        for slot in DEFAULT_SLOT_TEMPLATE
    ]


class SchedulingConfig(BaseModel):
    """Weekly slot template and booking rules."""
    timezone: str = SCHEDULING_ZONE
    meeting_channel_name: str = MEETING_CHANNEL_NAME
    buffer_minutes: int = BUFFER_MINUTES
    max_weekday_runtime: int = MAX_WEEKDAY_RUNTIME
    default_event_duration_hours: int = DEFAULT_EVENT_DURATION_HOURS
    event_title_prefix: str = EVENT_TITLE_PREFIX
    max_search_weeks: Optional[int] = DEFAULT_MAX_SEARCH_WEEKS  # None = unbounded
    duplicate_scope: Literal["week", "forever"] = "week"
    slots: List[SlotConfig] = Field(default_factory=_default_slots)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the zone is known to the tz database."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: '{value}'") from exc
        return value

    @field_validator("buffer_minutes", "max_weekday_runtime")
    @classmethod
    def validate_minutes(cls, value: int) -> int:
        if value < 0:
            raise ValueError(f"Minutes must not be negative, got {value}")
        return value

    @field_validator("default_event_duration_hours")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure the assumed event length is positive."""
        if value <= 0:
            raise ValueError("default_event_duration_hours must be greater than zero")
        return value

    @field_validator("max_search_weeks")
    @classmethod
    def validate_max_search_weeks(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            raise ValueError("max_search_weeks must be greater than zero (or null for unbounded)")
        return value

    @field_validator("meeting_channel_name")
    @classmethod
    def validate_channel_name(cls, value: str) -> str:
        if not value:
            raise ValueError("meeting_channel_name must not be empty")
        return value

    @model_validator(mode="after")
    def validate_slots(self) -> "SchedulingConfig":
        """A template needs at least one slot, and duplicates make no sense."""
        if not self.slots:
            raise ValueError("At least one slot must be configured")
        seen: set[tuple[str, str]] = set()
        for slot in self.slots:
            key = (slot.day, slot.time)
            if key in seen:
                raise ValueError(f"Duplicate slot: {slot.day} {slot.time}")
            seen.add(key)
        return self

    def to_policy(self) -> SchedulingPolicy:
        """Build the domain policy; slot order is preserved."""
        return SchedulingPolicy(
            timezone=self.timezone,
            meeting_channel_name=self.meeting_channel_name,
            buffer_minutes=self.buffer_minutes,
            max_weekday_runtime=self.max_weekday_runtime,
            default_event_duration_hours=self.default_event_duration_hours,
            event_title_prefix=self.event_title_prefix,
            max_search_weeks=self.max_search_weeks,
            duplicate_scope=self.duplicate_scope,
            slots=tuple(slot.to_slot() for slot in self.slots),
        )


class DiscordConfig(BaseModel):
    """Discord bot credentials."""
    token: str = ""
    guild_id: str = ""

    def is_configured(self) -> bool:
        return bool(self.token and self.guild_id)


class TMDbConfig(BaseModel):
    """TMDb API credentials."""
    api_key: str = ""


class AppConfig(BaseModel):
    """Application configuration."""
    discord: DiscordConfig = Field(default_factory=DiscordConfig)
    tmdb: TMDbConfig = Field(default_factory=TMDbConfig)
    watchlist_path: Path = Path("movies.json")
    mock_guild_path: Path = Path("mock_guild.json")
    scheduling: SchedulingConfig = Field(default_factory=SchedulingConfig)

    @model_validator(mode="after")
    def apply_environment(self) -> "AppConfig":
        """Secrets may come from the environment instead of the file."""
        if not self.discord.token:
            self.discord.token = os.getenv("DISCORD_TOKEN", "")
        if not self.discord.guild_id:
            self.discord.guild_id = os.getenv("DISCORD_GUILD_ID", "")
        if not self.tmdb.api_key:
            self.tmdb.api_key = os.getenv("TMDB_KEY", "")
        return self

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of movienight/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
