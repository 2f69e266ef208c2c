from __future__ import annotations

from datetime import date
from enum import Enum


class DayOfWeek(str, Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @property
    def weekday_index(self) -> int:
        """Position in the week, matching ``date.weekday()`` (Monday is 0)."""
        return DAY_ORDER.index(self)

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @classmethod
    def of(cls, value: date) -> "DayOfWeek":
        return DAY_ORDER[value.weekday()]


DAY_ORDER: list[DayOfWeek] = list(DayOfWeek)
WORKING_DAYS: list[DayOfWeek] = DAY_ORDER[:5]


class TimeSlot(str, Enum):
    CA1 = "CA1"
    CA2 = "CA2"
    CA3 = "CA3"
    CA4 = "CA4"
    CA5 = "CA5"

    @property
    def display_name(self) -> str:
        return f"Ca {self.value[2:]}"

    @property
    def start_time(self) -> str:
        return TIME_SLOT_WINDOWS[self][0]

    @property
    def end_time(self) -> str:
        return TIME_SLOT_WINDOWS[self][1]

    @property
    def time_range(self) -> str:
        return f"{self.start_time} - {self.end_time}"

    @property
    def full_display(self) -> str:
        return f"{self.display_name} ({self.time_range})"


TIME_SLOT_WINDOWS: dict[TimeSlot, tuple[str, str]] = {
    TimeSlot.CA1: ("06:45", "09:15"),
    TimeSlot.CA2: ("09:25", "11:55"),
    TimeSlot.CA3: ("12:10", "14:40"),
    TimeSlot.CA4: ("14:50", "17:20"),
    TimeSlot.CA5: ("17:30", "20:00"),
}
SLOT_ORDER: list[TimeSlot] = list(TimeSlot)
