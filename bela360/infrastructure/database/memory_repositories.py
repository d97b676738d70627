from __future__ import annotations

import logging
import threading
import uuid

from bela360.application.exceptions import AppointmentConflictError
from bela360.application.ports.appointment_repository import AppointmentQuery, AppointmentRepositoryPort
from bela360.application.ports.service_repository import ServiceRepositoryPort
from bela360.application.ports.working_hours_repository import WorkingHoursQuery, WorkingHoursRepositoryPort
from bela360.domain.entities.appointment import BLOCKING_STATUSES, Appointment, NewAppointment
from bela360.domain.entities.service import Service
from bela360.domain.entities.working_hours import WorkingHours


class MemoryServiceRepository(ServiceRepositoryPort):
    def __init__(self, services: list[Service] | None = None) -> None:
        self._services: dict[str, Service] = {s.id: s for s in services or []}

    def add(self, service: Service) -> None:
        self._services[service.id] = service

    def get(self, service_id: str) -> Service | None:
        return self._services.get(service_id)


class MemoryWorkingHoursRepository(WorkingHoursRepositoryPort):
    def __init__(self, rows: list[WorkingHours] | None = None) -> None:
        self._rows: list[WorkingHours] = list(rows or [])

    def add(self, row: WorkingHours) -> None:
        self._rows.append(row)

    def find_for_day(self, query: WorkingHoursQuery) -> list[WorkingHours]:
        matches = [
            row
            for row in self._rows
            if row.business_id == query.business_id
            and row.day_of_week == query.day_of_week
            and row.is_active
            and row.professional_id in (query.professional_id, None)
        ]
        # Professional-specific first; sort is stable.
        return sorted(matches, key=lambda row: row.is_default)


class MemoryAppointmentRepository(AppointmentRepositoryPort):
    def __init__(self) -> None:
        self._appointments: dict[str, Appointment] = {}
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def add(self, appointment: Appointment) -> None:
        """Insert without conflict checks, for seeding."""
        with self._lock:
            self._appointments[appointment.id] = appointment

    def find(self, query: AppointmentQuery) -> list[Appointment]:
        with self._lock:
            return self._find_unlocked(query)

    def create_if_free(self, appointment: NewAppointment) -> Appointment:
        with self._lock:
            existing = [
                a
                for a in self._appointments.values()
                if a.professional_id == appointment.professional_id and a.status in BLOCKING_STATUSES
            ]
            if any(a.overlaps(appointment.start_time, appointment.end_time) for a in existing):
                raise AppointmentConflictError(
                    f"Professional {appointment.professional_id} is busy at {appointment.start_time.isoformat()}"
                )
            created = Appointment(
                id=str(uuid.uuid4()),
                business_id=appointment.business_id,
                client_id=appointment.client_id,
                professional_id=appointment.professional_id,
                service_id=appointment.service_id,
                start_time=appointment.start_time,
                end_time=appointment.end_time,
                status=appointment.status,
            )
            self._appointments[created.id] = created

        self._logger.info(
            "Memory appointment created",
            extra={"appointment_id": created.id, "professional_id": created.professional_id},
        )
        return created

    def get(self, appointment_id: str) -> Appointment | None:
        with self._lock:
            return self._appointments.get(appointment_id)

    def _find_unlocked(self, query: AppointmentQuery) -> list[Appointment]:
        matches = [
            a
            for a in self._appointments.values()
            if a.professional_id == query.professional_id
            and query.range_start <= a.start_time <= query.range_end
            and a.status in query.statuses
            and a.id != query.exclude_id
        ]
        return sorted(matches, key=lambda a: a.start_time)
