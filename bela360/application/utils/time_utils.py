from __future__ import annotations

import re
from datetime import date, datetime, time

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

# Sunday first, matching DayOfWeek ordering.
PT_DAY_NAMES = ("Domingo", "Segunda", "Terça", "Quarta", "Quinta", "Sexta", "Sábado")


class InvalidTimeFormat(ValueError):
    """Raised when a clock time is not a valid HH:MM string."""


def parse_hhmm(value: str) -> tuple[int, int]:
    match = _HHMM_RE.match(value.strip()) if value else None
    if not match:
        raise InvalidTimeFormat(f"Invalid time {value!r}, expected HH:MM")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise InvalidTimeFormat(f"Invalid time {value!r}, expected HH:MM")
    return hour, minute


def to_minutes(value: str) -> int:
    """Minutes since midnight for an HH:MM string."""
    hour, minute = parse_hhmm(value)
    return hour * 60 + minute


def format_hhmm(minutes: int) -> str:
    hour, minute = divmod(minutes, 60)
    return f"{hour:02d}:{minute:02d}"


def combine(day: date, hhmm: str) -> datetime:
    hour, minute = parse_hhmm(hhmm)
    return datetime.combine(day, time(hour=hour, minute=minute))


def pt_day_name(day: date) -> str:
    # date.weekday() is Monday=0; shift to Sunday=0.
    return PT_DAY_NAMES[(day.weekday() + 1) % 7]


def pt_date_label(day: date) -> str:
    return f"{day.day:02d}/{day.month:02d} ({pt_day_name(day)})"
