from __future__ import annotations

from datetime import datetime

import pytest

from bela360.application.exceptions import (
    AppointmentConflictError,
    BookingFailed,
    RepositoryError,
    ServiceNotFound,
    SlotUnavailable,
)
from bela360.application.ports.appointment_repository import AppointmentRepositoryPort
from bela360.application.use_cases.availability import AvailabilityEngine
from bela360.application.utils.time_utils import InvalidTimeFormat
from bela360.domain.entities.appointment import Appointment, AppointmentStatus

from conftest import BUSINESS_ID, EARLY_MONDAY, MONDAY, PROFESSIONAL_ID, SERVICE_ID


class ConflictingAppointmentRepository(AppointmentRepositoryPort):
    """Sees no bookings on read, but another request wins the insert."""

    def __init__(self, error: Exception) -> None:
        self._error = error
        self.create_calls = 0

    def find(self, query):
        return []

    def create_if_free(self, appointment):
        self.create_calls += 1
        raise self._error

    def get(self, appointment_id):
        return None


class UnreadableAppointmentRepository(ConflictingAppointmentRepository):
    """Reads fail before the insert is ever attempted."""

    def __init__(self) -> None:
        super().__init__(AssertionError("create_if_free must not be reached"))

    def find(self, query):
        raise RepositoryError("connection reset")


class BrokenServiceRepository:
    def get(self, service_id):
        raise RepositoryError("database is down")


def _commit(engine, time="10:00", service_id=SERVICE_ID, client_id="client-1"):
    return engine.commit_booking(BUSINESS_ID, client_id, PROFESSIONAL_ID, service_id, MONDAY, time, now=EARLY_MONDAY)


def test_commit_creates_pending_appointment(engine, appointments):
    appointment_id = _commit(engine)

    created = appointments.get(appointment_id)
    assert created is not None
    assert created.status == AppointmentStatus.PENDING
    assert created.start_time == datetime(2030, 1, 7, 10, 0)
    assert created.end_time == datetime(2030, 1, 7, 11, 0)
    assert created.client_id == "client-1"


def test_committed_slot_disappears_from_next_query(engine):
    _commit(engine, "10:00")
    times = [s.time for s in engine.compute_available_slots(BUSINESS_ID, PROFESSIONAL_ID, SERVICE_ID, MONDAY, now=EARLY_MONDAY)]
    assert "10:00" not in times
    assert "09:30" not in times
    assert "10:30" not in times
    assert "09:00" in times
    assert "11:00" in times


def test_commit_rejects_stale_slot(engine, appointments):
    offered = [s.time for s in engine.compute_available_slots(BUSINESS_ID, PROFESSIONAL_ID, SERVICE_ID, MONDAY, now=EARLY_MONDAY)]
    assert "15:00" in offered

    appointments.add(
        Appointment(
            id="apt-other",
            business_id=BUSINESS_ID,
            client_id="client-2",
            professional_id=PROFESSIONAL_ID,
            service_id=SERVICE_ID,
            start_time=datetime(2030, 1, 7, 15, 0),
            end_time=datetime(2030, 1, 7, 16, 0),
            status=AppointmentStatus.CONFIRMED,
        )
    )

    with pytest.raises(SlotUnavailable):
        _commit(engine, "15:00")


def test_second_booking_of_same_slot_fails(engine):
    _commit(engine, "16:00", client_id="client-1")
    with pytest.raises(SlotUnavailable):
        _commit(engine, "16:00", client_id="client-2")


def test_commit_off_grid_time_is_unavailable(engine):
    with pytest.raises(SlotUnavailable):
        _commit(engine, "10:15")


def test_commit_unknown_service(engine, appointments):
    with pytest.raises(ServiceNotFound):
        _commit(engine, service_id="missing")


def test_commit_rejects_malformed_time(engine):
    with pytest.raises(InvalidTimeFormat):
        _commit(engine, "25:00")


def test_storage_conflict_is_reported_as_unavailable(services, working_hours):
    repo = ConflictingAppointmentRepository(AppointmentConflictError("busy"))
    engine = AvailabilityEngine(services, working_hours, repo)

    with pytest.raises(SlotUnavailable):
        _commit(engine, "10:00")
    assert repo.create_calls == 1


def test_storage_failure_is_reported_as_booking_failed(services, working_hours):
    repo = ConflictingAppointmentRepository(RepositoryError("disk full"))
    engine = AvailabilityEngine(services, working_hours, repo)

    with pytest.raises(BookingFailed) as exc_info:
        _commit(engine, "10:00")
    assert isinstance(exc_info.value.__cause__, RepositoryError)


def test_read_failure_degrades_to_no_slots(working_hours, appointments):
    engine = AvailabilityEngine(BrokenServiceRepository(), working_hours, appointments)
    assert engine.compute_available_slots(BUSINESS_ID, PROFESSIONAL_ID, SERVICE_ID, MONDAY, now=EARLY_MONDAY) == []


def test_commit_with_broken_service_lookup_fails(working_hours, appointments):
    engine = AvailabilityEngine(BrokenServiceRepository(), working_hours, appointments)
    with pytest.raises(BookingFailed):
        _commit(engine, "10:00")


def test_commit_accepts_single_digit_hour(engine, appointments):
    appointment_id = _commit(engine, "9:00")

    created = appointments.get(appointment_id)
    assert created.start_time == datetime(2030, 1, 7, 9, 0)
    assert created.end_time == datetime(2030, 1, 7, 10, 0)


def test_commit_with_unreadable_appointments_fails(services, working_hours):
    repo = UnreadableAppointmentRepository()
    engine = AvailabilityEngine(services, working_hours, repo)

    with pytest.raises(BookingFailed) as exc_info:
        _commit(engine, "10:00")
    assert isinstance(exc_info.value.__cause__, RepositoryError)
    assert repo.create_calls == 0
