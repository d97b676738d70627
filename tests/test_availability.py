"""
Tests for slot and date computation.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from bela360.application.use_cases.availability import AvailabilityEngine
from bela360.domain.entities.appointment import Appointment, AppointmentStatus
from bela360.domain.entities.service import Service
from bela360.domain.entities.working_hours import DayOfWeek, WorkingHours

from conftest import BUSINESS_ID, EARLY_MONDAY, MONDAY, PROFESSIONAL_ID, SERVICE_ID


def _book(appointments, start: str, end: str, status=AppointmentStatus.CONFIRMED, professional_id=PROFESSIONAL_ID, day=MONDAY):
    h1, m1 = map(int, start.split(":"))
    h2, m2 = map(int, end.split(":"))
    appointments.add(
        Appointment(
            id=f"apt-{start}-{status.value}",
            business_id=BUSINESS_ID,
            client_id="client-1",
            professional_id=professional_id,
            service_id=SERVICE_ID,
            start_time=datetime.combine(day, datetime.min.time()).replace(hour=h1, minute=m1),
            end_time=datetime.combine(day, datetime.min.time()).replace(hour=h2, minute=m2),
            status=status,
        )
    )


def _times(engine, day=MONDAY, now=EARLY_MONDAY, service_id=SERVICE_ID):
    return [s.time for s in engine.compute_available_slots(BUSINESS_ID, PROFESSIONAL_ID, service_id, day, now=now)]


def test_day_with_break_and_existing_appointment(engine, appointments):
    _book(appointments, "14:00", "15:00")

    assert _times(engine) == [
        "09:00", "09:30", "10:00", "10:30", "11:00",
        "13:00",
        "15:00", "15:30", "16:00", "16:30", "17:00",
    ]


def test_slot_labels_match_times(engine):
    slots = engine.compute_available_slots(BUSINESS_ID, PROFESSIONAL_ID, SERVICE_ID, MONDAY, now=EARLY_MONDAY)
    assert slots
    assert all(slot.label == slot.time for slot in slots)


def test_unknown_service_has_no_slots(engine):
    assert _times(engine, service_id="missing") == []


def test_day_without_working_hours_has_no_slots(engine):
    assert _times(engine, day=MONDAY + timedelta(days=1)) == []


def test_cancelled_and_completed_appointments_do_not_block(engine, appointments):
    _book(appointments, "09:00", "10:00", status=AppointmentStatus.CANCELLED)
    _book(appointments, "10:00", "11:00", status=AppointmentStatus.COMPLETED)
    _book(appointments, "15:00", "16:00", status=AppointmentStatus.PENDING)

    times = _times(engine)
    assert "09:00" in times
    assert "10:00" in times
    assert "15:00" not in times
    assert "14:30" not in times


def test_other_professionals_appointments_do_not_block(engine, appointments):
    _book(appointments, "09:00", "10:00", professional_id="pro-2")
    assert "09:00" in _times(engine)


def test_past_slots_are_excluded_today(engine):
    times = _times(engine, now=datetime(2030, 1, 7, 10, 15))
    assert times[0] == "10:30"


def test_past_filter_does_not_apply_to_future_dates(engine):
    times = _times(engine, day=MONDAY + timedelta(days=7), now=datetime(2030, 1, 7, 17, 59))
    assert times[0] == "09:00"


def test_professional_hours_take_precedence(engine, working_hours):
    working_hours.add(
        WorkingHours(
            business_id=BUSINESS_ID,
            professional_id=PROFESSIONAL_ID,
            day_of_week=DayOfWeek.MONDAY,
            start_time="10:00",
            end_time="14:00",
        )
    )

    assert _times(engine) == ["10:00", "10:30", "11:00", "11:30", "12:00", "12:30", "13:00"]


def test_inactive_professional_hours_fall_back_to_default(engine, working_hours):
    working_hours.add(
        WorkingHours(
            business_id=BUSINESS_ID,
            professional_id=PROFESSIONAL_ID,
            day_of_week=DayOfWeek.MONDAY,
            start_time="10:00",
            end_time="14:00",
            is_active=False,
        )
    )

    assert _times(engine)[0] == "09:00"


def test_slots_never_touch_break_or_bookings_and_fit_in_hours(services, engine, appointments):
    _book(appointments, "14:00", "15:00")
    _book(appointments, "16:15", "16:45")
    booked = [(datetime(2030, 1, 7, 14, 0), datetime(2030, 1, 7, 15, 0)), (datetime(2030, 1, 7, 16, 15), datetime(2030, 1, 7, 16, 45))]
    break_start, break_end = datetime(2030, 1, 7, 12, 0), datetime(2030, 1, 7, 13, 0)
    closing = datetime(2030, 1, 7, 18, 0)

    for duration in (15, 30, 45, 60, 90, 150, 240):
        services.add(Service(id=f"svc-{duration}", business_id=BUSINESS_ID, duration=duration))
        for slot in engine.compute_available_slots(BUSINESS_ID, PROFESSIONAL_ID, f"svc-{duration}", MONDAY, now=EARLY_MONDAY):
            start = datetime.combine(MONDAY, datetime.strptime(slot.time, "%H:%M").time())
            end = start + timedelta(minutes=duration)
            assert not (start < break_end and end > break_start), (duration, slot.time)
            assert all(not (start < b_end and end > b_start) for b_start, b_end in booked), (duration, slot.time)
            assert end <= closing, (duration, slot.time)


def test_service_longer_than_working_day_has_no_slots(services, engine):
    services.add(Service(id="svc-long", business_id=BUSINESS_ID, duration=600))
    assert _times(engine, service_id="svc-long") == []


def test_requery_is_stable(engine, appointments):
    _book(appointments, "10:00", "11:00")
    first = engine.compute_available_slots(BUSINESS_ID, PROFESSIONAL_ID, SERVICE_ID, MONDAY, now=EARLY_MONDAY)
    second = engine.compute_available_slots(BUSINESS_ID, PROFESSIONAL_ID, SERVICE_ID, MONDAY, now=EARLY_MONDAY)
    assert first == second


def test_available_dates_skip_closed_days(engine):
    dates = engine.compute_available_dates(BUSINESS_ID, PROFESSIONAL_ID, SERVICE_ID, days_ahead=14, now=EARLY_MONDAY)

    assert [d.date for d in dates] == ["2030-01-07", "2030-01-14"]
    assert dates[0].day_name == "Segunda"
    assert dates[0].label == "07/01 (Segunda)"


def test_available_dates_skip_fully_booked_day(engine, appointments):
    for hour in range(9, 18):
        _book(appointments, f"{hour:02d}:00", f"{hour + 1:02d}:00")

    dates = engine.compute_available_dates(BUSINESS_ID, PROFESSIONAL_ID, SERVICE_ID, days_ahead=8, now=EARLY_MONDAY)
    assert [d.date for d in dates] == ["2030-01-14"]


def test_available_dates_start_from_explicit_today(engine):
    dates = engine.compute_available_dates(
        BUSINESS_ID, PROFESSIONAL_ID, SERVICE_ID, days_ahead=3, today=date(2030, 1, 13), now=EARLY_MONDAY
    )
    assert [d.date for d in dates] == ["2030-01-14"]


def test_available_dates_days_ahead_is_capped(services, working_hours, appointments):
    engine = AvailabilityEngine(services, working_hours, appointments, max_days_ahead=5)
    dates = engine.compute_available_dates(BUSINESS_ID, PROFESSIONAL_ID, SERVICE_ID, days_ahead=365, now=EARLY_MONDAY)
    assert [d.date for d in dates] == ["2030-01-07"]


def test_available_dates_zero_days(engine):
    assert engine.compute_available_dates(BUSINESS_ID, PROFESSIONAL_ID, SERVICE_ID, days_ahead=0, now=EARLY_MONDAY) == []


def test_has_conflict(engine, appointments):
    _book(appointments, "14:00", "15:00")
    assert engine.has_conflict(PROFESSIONAL_ID, datetime(2030, 1, 7, 14, 30), datetime(2030, 1, 7, 15, 30))
    assert not engine.has_conflict(PROFESSIONAL_ID, datetime(2030, 1, 7, 15, 0), datetime(2030, 1, 7, 16, 0))
    assert not engine.has_conflict(
        PROFESSIONAL_ID, datetime(2030, 1, 7, 14, 0), datetime(2030, 1, 7, 15, 0), exclude_id="apt-14:00-CONFIRMED"
    )


def test_has_conflict_with_booking_from_previous_evening(engine, appointments):
    appointments.add(
        Appointment(
            id="apt-overnight",
            business_id=BUSINESS_ID,
            client_id="client-1",
            professional_id=PROFESSIONAL_ID,
            service_id=SERVICE_ID,
            start_time=datetime(2030, 1, 6, 23, 0),
            end_time=datetime(2030, 1, 7, 1, 0),
            status=AppointmentStatus.CONFIRMED,
        )
    )

    assert engine.has_conflict(PROFESSIONAL_ID, datetime(2030, 1, 7, 0, 30), datetime(2030, 1, 7, 1, 30))
    assert not engine.has_conflict(PROFESSIONAL_ID, datetime(2030, 1, 7, 1, 0), datetime(2030, 1, 7, 2, 0))
