from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from bela360.domain.entities.appointment import (
    BLOCKING_STATUSES,
    Appointment,
    AppointmentStatus,
    NewAppointment,
)


@dataclass(frozen=True)
class AppointmentQuery:
    professional_id: str
    range_start: datetime  # inclusive, compared against start_time
    range_end: datetime  # inclusive, compared against start_time
    statuses: tuple[AppointmentStatus, ...] = BLOCKING_STATUSES
    exclude_id: str | None = None


class AppointmentRepositoryPort(ABC):
    @abstractmethod
    def find(self, query: AppointmentQuery) -> list[Appointment]:
        """Appointments of the professional starting within the range, ordered by start_time."""
        raise NotImplementedError

    @abstractmethod
    def create_if_free(self, appointment: NewAppointment) -> Appointment:
        """
        Insert the appointment unless it overlaps a blocking appointment of the same
        professional. The check and the insert are atomic.
        Raises AppointmentConflictError on overlap, RepositoryError on storage failure.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, appointment_id: str) -> Appointment | None:
        raise NotImplementedError
