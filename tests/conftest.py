"""
Shared fixtures: a fixed clock on Monday 2024-01-01 10:00 in Toronto and a
mock guild that owns the meeting channel.
"""

import pendulum
import pytest

from movienight.adapters.mock_guild import MockGuild
from movienight.domain.models import MEETING_CHANNEL_NAME, Channel, SchedulingPolicy

TZ = "America/Toronto"
MEETING_CHANNEL = Channel(id="100", name=MEETING_CHANNEL_NAME)
OTHER_CHANNEL = Channel(id="200", name="General")


def at(text: str) -> pendulum.DateTime:
    """Parse a local Toronto time like ``2024-01-02 19:45``."""
    return pendulum.parse(text, tz=TZ)


@pytest.fixture
def policy() -> SchedulingPolicy:
    return SchedulingPolicy()


@pytest.fixture
def monday_clock():
    return lambda: at("2024-01-01 10:00")


@pytest.fixture
def guild() -> MockGuild:
    return MockGuild(channels=[MEETING_CHANNEL, OTHER_CHANNEL])
