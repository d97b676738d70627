from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from bela360.application.utils.time_utils import to_minutes


class DayOfWeek(str, Enum):
    SUNDAY = "SUNDAY"
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"

    @classmethod
    def from_date(cls, day: date) -> "DayOfWeek":
        # Sunday=0 ... Saturday=6
        return _BY_INDEX[(day.weekday() + 1) % 7]


_BY_INDEX = (
    DayOfWeek.SUNDAY,
    DayOfWeek.MONDAY,
    DayOfWeek.TUESDAY,
    DayOfWeek.WEDNESDAY,
    DayOfWeek.THURSDAY,
    DayOfWeek.FRIDAY,
    DayOfWeek.SATURDAY,
)


@dataclass(frozen=True)
class WorkingHours:
    business_id: str
    day_of_week: DayOfWeek
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    professional_id: str | None = None  # None = business default
    break_start: str | None = None
    break_end: str | None = None
    is_active: bool = True

    def __post_init__(self) -> None:
        start, end = to_minutes(self.start_time), to_minutes(self.end_time)
        if start >= end:
            raise ValueError(f"start_time {self.start_time} must be before end_time {self.end_time}")
        if (self.break_start is None) != (self.break_end is None):
            raise ValueError("break_start and break_end must be given together")
        if self.break_start is not None and self.break_end is not None:
            b_start, b_end = to_minutes(self.break_start), to_minutes(self.break_end)
            if b_start >= b_end:
                raise ValueError(f"break_start {self.break_start} must be before break_end {self.break_end}")
            if not (start <= b_start < end and start <= b_end <= end):
                raise ValueError("break must fall within working hours")

    @property
    def has_break(self) -> bool:
        return self.break_start is not None and self.break_end is not None

    @property
    def is_default(self) -> bool:
        return self.professional_id is None
