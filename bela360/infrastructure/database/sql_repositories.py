from __future__ import annotations

import logging

from sqlalchemy import case
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from bela360.application.exceptions import AppointmentConflictError, RepositoryError
from bela360.application.ports.appointment_repository import AppointmentQuery, AppointmentRepositoryPort
from bela360.application.ports.service_repository import ServiceRepositoryPort
from bela360.application.ports.working_hours_repository import WorkingHoursQuery, WorkingHoursRepositoryPort
from bela360.domain.entities.appointment import (
    BLOCKING_STATUSES,
    Appointment,
    AppointmentStatus,
    NewAppointment,
)
from bela360.domain.entities.service import Service
from bela360.domain.entities.working_hours import DayOfWeek, WorkingHours
from bela360.infrastructure.database.models import AppointmentModel, ServiceModel, WorkingHoursModel
from bela360.infrastructure.database.session import SQLITE_BEGIN_IMMEDIATE

# Postgres SQLSTATE for serialization_failure.
_SERIALIZATION_FAILURE = "40001"


class SqlServiceRepository(ServiceRepositoryPort):
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def get(self, service_id: str) -> Service | None:
        try:
            with self._session_factory() as session:
                row = session.get(ServiceModel, service_id)
                if row is None:
                    return None
                return Service(id=row.id, business_id=row.business_id, duration=row.duration, name=row.name)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to load service {service_id}") from e

    def add(self, service: Service) -> None:
        try:
            with self._session_factory.begin() as session:
                session.add(
                    ServiceModel(
                        id=service.id,
                        business_id=service.business_id,
                        name=service.name,
                        duration=service.duration,
                    )
                )
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to save service {service.id}") from e


class SqlWorkingHoursRepository(WorkingHoursRepositoryPort):
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def find_for_day(self, query: WorkingHoursQuery) -> list[WorkingHours]:
        try:
            with self._session_factory() as session:
                rows = (
                    session.query(WorkingHoursModel)
                    .filter(
                        WorkingHoursModel.business_id == query.business_id,
                        WorkingHoursModel.day_of_week == query.day_of_week.value,
                        WorkingHoursModel.is_active.is_(True),
                        (WorkingHoursModel.professional_id == query.professional_id)
                        | (WorkingHoursModel.professional_id.is_(None)),
                    )
                    .order_by(case((WorkingHoursModel.professional_id.is_(None), 1), else_=0))
                    .all()
                )
                return [_to_working_hours(row) for row in rows]
        except SQLAlchemyError as e:
            raise RepositoryError("Failed to load working hours") from e

    def add(self, row: WorkingHours) -> None:
        try:
            with self._session_factory.begin() as session:
                session.add(
                    WorkingHoursModel(
                        business_id=row.business_id,
                        professional_id=row.professional_id,
                        day_of_week=row.day_of_week.value,
                        start_time=row.start_time,
                        end_time=row.end_time,
                        break_start=row.break_start,
                        break_end=row.break_end,
                        is_active=row.is_active,
                    )
                )
        except SQLAlchemyError as e:
            raise RepositoryError("Failed to save working hours") from e


class SqlAppointmentRepository(AppointmentRepositoryPort):
    def __init__(self, session_factory: sessionmaker, isolation_level: str | None = "SERIALIZABLE") -> None:
        self._session_factory = session_factory
        self._isolation_level = isolation_level
        self._logger = logging.getLogger(__name__)

    def find(self, query: AppointmentQuery) -> list[Appointment]:
        try:
            with self._session_factory() as session:
                q = session.query(AppointmentModel).filter(
                    AppointmentModel.professional_id == query.professional_id,
                    AppointmentModel.start_time >= query.range_start,
                    AppointmentModel.start_time <= query.range_end,
                    AppointmentModel.status.in_([s.value for s in query.statuses]),
                )
                if query.exclude_id:
                    q = q.filter(AppointmentModel.id != query.exclude_id)
                return [_to_appointment(row) for row in q.order_by(AppointmentModel.start_time).all()]
        except SQLAlchemyError as e:
            raise RepositoryError("Failed to load appointments") from e

    def create_if_free(self, appointment: NewAppointment) -> Appointment:
        try:
            with self._session_factory() as session:
                with session.begin():
                    session.connection(execution_options=self._lock_options(session))
                    conflict = (
                        session.query(AppointmentModel.id)
                        .filter(
                            AppointmentModel.professional_id == appointment.professional_id,
                            AppointmentModel.status.in_([s.value for s in BLOCKING_STATUSES]),
                            AppointmentModel.start_time < appointment.end_time,
                            AppointmentModel.end_time > appointment.start_time,
                        )
                        .first()
                    )
                    if conflict is not None:
                        raise AppointmentConflictError(
                            f"Professional {appointment.professional_id} is busy at "
                            f"{appointment.start_time.isoformat()}"
                        )
                    row = AppointmentModel(
                        business_id=appointment.business_id,
                        client_id=appointment.client_id,
                        professional_id=appointment.professional_id,
                        service_id=appointment.service_id,
                        start_time=appointment.start_time,
                        end_time=appointment.end_time,
                        status=appointment.status.value,
                    )
                    session.add(row)
                    session.flush()
                    created = _to_appointment(row)
        except OperationalError as e:
            if getattr(e.orig, "pgcode", None) == _SERIALIZATION_FAILURE:
                raise AppointmentConflictError("Concurrent booking for the same professional") from e
            raise RepositoryError("Failed to create appointment") from e
        except SQLAlchemyError as e:
            raise RepositoryError("Failed to create appointment") from e

        self._logger.info(
            "Appointment row inserted",
            extra={"appointment_id": created.id, "professional_id": created.professional_id},
        )
        return created

    def _lock_options(self, session) -> dict:
        if session.get_bind().dialect.name == "sqlite":
            return {SQLITE_BEGIN_IMMEDIATE: True}
        if self._isolation_level:
            return {"isolation_level": self._isolation_level}
        return {}

    def get(self, appointment_id: str) -> Appointment | None:
        try:
            with self._session_factory() as session:
                row = session.get(AppointmentModel, appointment_id)
                return _to_appointment(row) if row is not None else None
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to load appointment {appointment_id}") from e


def _to_working_hours(row: WorkingHoursModel) -> WorkingHours:
    return WorkingHours(
        business_id=row.business_id,
        professional_id=row.professional_id,
        day_of_week=DayOfWeek(row.day_of_week),
        start_time=row.start_time,
        end_time=row.end_time,
        break_start=row.break_start,
        break_end=row.break_end,
        is_active=row.is_active,
    )


def _to_appointment(row: AppointmentModel) -> Appointment:
    return Appointment(
        id=row.id,
        business_id=row.business_id,
        client_id=row.client_id,
        professional_id=row.professional_id,
        service_id=row.service_id,
        start_time=row.start_time,
        end_time=row.end_time,
        status=AppointmentStatus(row.status),
    )
