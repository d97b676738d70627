from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class AppointmentStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


# Only these statuses occupy a professional's time.
BLOCKING_STATUSES: tuple[AppointmentStatus, ...] = (
    AppointmentStatus.PENDING,
    AppointmentStatus.CONFIRMED,
)


@dataclass(frozen=True)
class Appointment:
    id: str
    business_id: str
    client_id: str
    professional_id: str
    service_id: str
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus = AppointmentStatus.PENDING

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return intervals_conflict(start, end, self.start_time, self.end_time)


@dataclass(frozen=True)
class NewAppointment:
    business_id: str
    client_id: str
    professional_id: str
    service_id: str
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus = AppointmentStatus.PENDING


def intervals_conflict(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    """True if [start, end) touches [other_start, other_end) in any of the three overlap cases."""
    starts_during = other_start <= start < other_end
    ends_during = other_start < end <= other_end
    contains = start <= other_start and end >= other_end
    return starts_during or ends_during or contains
