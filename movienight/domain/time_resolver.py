"""
Resolution of abstract weekly slots into concrete instants.
"""

from datetime import time

import pendulum
from pendulum import DateTime

from .models import SCHEDULING_ZONE


class TimeResolver:
    """
    Maps ``(weekday, local time)`` onto the next matching instant in a fixed zone.

    All arithmetic happens on the zone's wall clock, so a slot keeps its local
    time across DST changes.
    """

    def __init__(self, timezone: str = SCHEDULING_ZONE):
        self.timezone = timezone

    def next_occurrence(self, day: int, local_time: time, base: DateTime) -> DateTime:
        """
        Earliest instant on ``day`` at ``local_time`` that is not before ``base``.

        Args:
            day: Weekday, 0=Monday .. 6=Sunday
            local_time: Wall-clock time in the scheduling zone
            base: Search base; an instant equal to it is accepted

        Returns:
            Timezone-aware DateTime in the scheduling zone
        """
        base = base.in_timezone(self.timezone)
        date = base.date()

        while date.weekday() != day:
            date = date.add(days=1)

        # Nonexistent local times (spring forward) are shifted by pendulum.
        candidate = pendulum.datetime(
            date.year,
            date.month,
            date.day,
            local_time.hour,
            local_time.minute,
            local_time.second,
            tz=self.timezone,
        )

        # This week's time already passed
        if candidate < base:
            candidate = candidate.add(weeks=1)

        return candidate
