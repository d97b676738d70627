from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AvailableSlot:
    time: str  # HH:MM
    label: str


@dataclass(frozen=True)
class AvailableDate:
    date: str  # YYYY-MM-DD
    label: str  # "DD/MM (DayName)"
    day_name: str
