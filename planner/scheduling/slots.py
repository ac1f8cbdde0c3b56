"""
Time Slot Generator — expands productivity windows into concrete one-hour
slots across the scheduling horizon, skipping the past and anything that
collides with an existing calendar event.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta
from typing import Dict, List, Sequence

from .models import CalendarEvent, ProductivityWindow, TimeOfDay, TimeSlot

SLOT_LENGTH = timedelta(hours=1)
WEEKEND = (5, 6)


class TimeSlotGenerator:

    def __init__(
        self,
        windows: Sequence[ProductivityWindow],
        events: Sequence[CalendarEvent] = (),
        horizon_days: int = 7,
        skip_weekends: bool = False,
    ):
        self._windows = list(windows)
        self._events = list(events)
        self._horizon_days = horizon_days
        self._skip_weekends = skip_weekends

    def generate(self, now: datetime) -> List[TimeSlot]:
        # keyed by start time so overlapping windows never yield the same hour twice
        slots: Dict[datetime, TimeSlot] = {}

        for offset in range(self._horizon_days):
            day = now.date() + timedelta(days=offset)
            weekday = day.weekday()
            if self._skip_weekends and weekday in WEEKEND:
                continue

            for window in self._windows:
                if window.day_of_week is not None and window.day_of_week != weekday:
                    continue
                for hour in range(window.start_hour, window.end_hour):
                    start = datetime.combine(day, time(hour))
                    end = start + SLOT_LENGTH
                    if end < now or start in slots:
                        continue
                    if self.is_busy(start, end):
                        continue
                    slots[start] = TimeSlot(
                        start=start,
                        end=end,
                        efficiency=window.efficiency,
                        time_of_day=TimeOfDay.for_hour(hour),
                    )

        ordered = sorted(slots.values(), key=lambda s: s.start)
        return sorted(ordered, key=lambda s: s.efficiency, reverse=True)

    def is_busy(self, start: datetime, end: datetime) -> bool:
        return any(event.overlaps(start, end) for event in self._events)
