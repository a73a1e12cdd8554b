"""
Tests for the slot conflict detector.
"""

import pendulum
import pytest

from conftest import MEETING_CHANNEL, OTHER_CHANNEL, at
from movienight.adapters.mock_guild import MockGuild
from movienight.domain.conflict_detector import ConflictDetector
from movienight.domain.models import Movie, ScheduledEvent, SchedulingPolicy


def _event(name, start, end=None, channel_id=MEETING_CHANNEL.id):
    return ScheduledEvent(
        name=name,
        start=at(start),
        end=at(end) if end else None,
        channel_id=channel_id,
    )


TUESDAY_SHOW = _event("Movie Night - Heat", "2024-01-02 19:00", "2024-01-02 21:30")


class TestConflictDetector:
    """Tests for ConflictDetector.conflicts."""

    def test_empty_calendar_is_free(self, policy):
        detector = ConflictDetector(policy)

        assert not detector.conflicts(
            [], MEETING_CHANNEL, Movie(title="Dune"), at("2024-01-02 19:45"), at("2024-01-02 22:05")
        )

    def test_missing_meeting_channel_blocks(self, policy, caplog):
        """Without the channel nothing may be booked."""
        detector = ConflictDetector(policy)
        guild = MockGuild(channels=[OTHER_CHANNEL])

        channel = detector.meeting_channel(guild)
        blocked = detector.conflicts(
            [], channel, Movie(title="Dune"), at("2024-01-02 19:45"), at("2024-01-02 22:05")
        )

        assert channel is None
        assert blocked
        assert "Could not find" in caplog.text

    def test_meeting_channel_is_found_by_name(self, policy, guild):
        assert ConflictDetector(policy).meeting_channel(guild) == MEETING_CHANNEL

    @pytest.mark.parametrize(
        "start, end, expected",
        [
            ("2024-01-02 19:45", "2024-01-02 22:00", True),   # starts inside
            ("2024-01-02 17:00", "2024-01-02 19:30", True),   # ends inside
            ("2024-01-02 18:00", "2024-01-02 23:00", True),   # contains it
            ("2024-01-02 17:00", "2024-01-02 19:00", True),   # ends exactly at its start
            ("2024-01-02 21:30", "2024-01-02 23:00", True),   # starts exactly at its end
            ("2024-01-02 16:00", "2024-01-02 18:59", False),  # before
            ("2024-01-02 21:31", "2024-01-02 23:00", False),  # after
        ],
    )
    def test_overlap_is_closed_interval(self, policy, start, end, expected):
        detector = ConflictDetector(policy)

        assert detector.conflicts(
            [TUESDAY_SHOW], MEETING_CHANNEL, Movie(title="Dune"), at(start), at(end)
        ) is expected

    def test_missing_end_assumes_three_hours(self, policy):
        detector = ConflictDetector(policy)
        events = [_event("Game Night", "2024-01-02 19:00")]
        movie = Movie(title="Dune")

        assert detector.conflicts(events, MEETING_CHANNEL, movie, at("2024-01-02 21:59"), at("2024-01-02 23:00"))
        assert not detector.conflicts(events, MEETING_CHANNEL, movie, at("2024-01-02 22:01"), at("2024-01-02 23:00"))

    def test_events_in_other_channels_are_ignored(self, policy):
        detector = ConflictDetector(policy)
        events = [
            _event("Raid", "2024-01-02 19:00", "2024-01-02 23:00", channel_id=OTHER_CHANNEL.id),
            _event("Stage talk", "2024-01-02 19:00", "2024-01-02 23:00", channel_id=None),
        ]

        assert not detector.conflicts(
            events, MEETING_CHANNEL, Movie(title="Dune"), at("2024-01-02 19:45"), at("2024-01-02 22:05")
        )

    def test_duplicate_in_same_week_blocks(self, policy):
        """A same-named event blocks its week even without overlap."""
        detector = ConflictDetector(policy)
        events = [_event("Movie Night - Dune", "2024-01-07 18:30", "2024-01-07 21:20")]

        # Saturday 2024-01-13 belongs to the week starting Sunday 2024-01-07
        assert detector.conflicts(
            events, MEETING_CHANNEL, Movie(title="Dune"), at("2024-01-13 19:45"), at("2024-01-13 22:30")
        )

    def test_duplicate_in_other_week_does_not_block(self, policy):
        detector = ConflictDetector(policy)
        events = [_event("Movie Night - Dune", "2024-01-07 18:30", "2024-01-07 21:20")]

        assert not detector.conflicts(
            events, MEETING_CHANNEL, Movie(title="Dune"), at("2024-01-04 19:45"), at("2024-01-04 22:30")
        )

    def test_duplicate_forever_scope_blocks_everything(self):
        detector = ConflictDetector(SchedulingPolicy(duplicate_scope="forever"))
        events = [_event("Movie Night - Dune", "2024-01-07 18:30", "2024-01-07 21:20")]

        assert detector.conflicts(
            events, MEETING_CHANNEL, Movie(title="Dune"), at("2024-03-05 19:45"), at("2024-03-05 22:30")
        )

    def test_duplicate_match_is_exact(self, policy):
        """Only the exact event name counts as a duplicate."""
        detector = ConflictDetector(policy)
        events = [_event("Movie Night - Dune: Part Two", "2024-01-07 18:30", "2024-01-07 21:20")]

        assert not detector.conflicts(
            events, MEETING_CHANNEL, Movie(title="Dune"), at("2024-01-09 19:45"), at("2024-01-09 22:30")
        )

    def test_duplicate_in_other_channel_is_ignored(self, policy):
        detector = ConflictDetector(policy)
        events = [
            _event("Movie Night - Dune", "2024-01-07 18:30", "2024-01-07 21:20", channel_id=OTHER_CHANNEL.id)
        ]

        assert not detector.conflicts(
            events, MEETING_CHANNEL, Movie(title="Dune"), at("2024-01-09 19:45"), at("2024-01-09 22:30")
        )

    def test_week_starts_on_sunday(self, policy):
        detector = ConflictDetector(policy)

        assert detector.week_of(at("2024-01-07 18:30")) == pendulum.date(2024, 1, 7)
        assert detector.week_of(at("2024-01-13 23:59")) == pendulum.date(2024, 1, 7)
        assert detector.week_of(at("2024-01-01 10:00")) == pendulum.date(2023, 12, 31)

    def test_week_uses_scheduling_zone(self, policy):
        """Saturday 23:00 in Toronto is already Sunday in UTC."""
        detector = ConflictDetector(policy)
        saturday_night_utc = at("2024-01-13 23:00").in_timezone("UTC")

        assert detector.week_of(saturday_night_utc) == pendulum.date(2024, 1, 7)
