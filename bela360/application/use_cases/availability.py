from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta

from bela360.application.exceptions import (
    AppointmentConflictError,
    BookingFailed,
    RepositoryError,
    ServiceNotFound,
    SlotUnavailable,
)
from bela360.application.ports.appointment_repository import AppointmentQuery, AppointmentRepositoryPort
from bela360.application.ports.service_repository import ServiceRepositoryPort
from bela360.application.ports.working_hours_repository import WorkingHoursQuery, WorkingHoursRepositoryPort
from bela360.application.utils.time_utils import (
    combine,
    format_hhmm,
    pt_date_label,
    pt_day_name,
    to_minutes,
)
from bela360.domain.entities.appointment import BLOCKING_STATUSES, Appointment, NewAppointment
from bela360.domain.entities.available_slot import AvailableDate, AvailableSlot
from bela360.domain.entities.working_hours import DayOfWeek, WorkingHours


class AvailabilityEngine:
    """
    Computes bookable slots for a professional and commits new appointments.

    All datetimes are naive and expressed in the business's local time. Every
    query takes an explicit ``now``; passing None uses the system clock.
    """

    def __init__(
        self,
        services: ServiceRepositoryPort,
        working_hours: WorkingHoursRepositoryPort,
        appointments: AppointmentRepositoryPort,
        slot_interval_minutes: int = 30,
        max_days_ahead: int = 60,
    ) -> None:
        if slot_interval_minutes < 1:
            raise ValueError("slot_interval_minutes must be positive")
        self._services = services
        self._working_hours = working_hours
        self._appointments = appointments
        self._slot_interval = slot_interval_minutes
        self._max_days_ahead = max_days_ahead
        self._logger = logging.getLogger(__name__)

    def compute_available_slots(
        self,
        business_id: str,
        professional_id: str,
        service_id: str,
        date: date,
        now: datetime | None = None,
    ) -> list[AvailableSlot]:
        if now is None:
            now = datetime.now()

        try:
            return self._compute_slots(business_id, professional_id, service_id, date, now)
        except RepositoryError as e:
            self._logger.warning(
                "Slot query failed, reporting no availability",
                extra={
                    "business_id": business_id,
                    "professional_id": professional_id,
                    "service_id": service_id,
                    "error": str(e),
                },
            )
            return []

    def compute_available_dates(
        self,
        business_id: str,
        professional_id: str,
        service_id: str,
        days_ahead: int = 14,
        today: date | None = None,
        now: datetime | None = None,
    ) -> list[AvailableDate]:
        if now is None:
            now = datetime.now()
        if today is None:
            today = now.date()

        if days_ahead > self._max_days_ahead:
            self._logger.info(
                "days_ahead=%s above limit, clamping to %s",
                days_ahead,
                self._max_days_ahead,
                extra={"business_id": business_id, "professional_id": professional_id},
            )
            days_ahead = self._max_days_ahead

        result: list[AvailableDate] = []
        for offset in range(max(days_ahead, 0)):
            day = today + timedelta(days=offset)
            slots = self.compute_available_slots(business_id, professional_id, service_id, day, now=now)
            if slots:
                result.append(
                    AvailableDate(
                        date=day.isoformat(),
                        label=pt_date_label(day),
                        day_name=pt_day_name(day),
                    )
                )
        return result

    def commit_booking(
        self,
        business_id: str,
        client_id: str,
        professional_id: str,
        service_id: str,
        date: date,
        time: str,
        now: datetime | None = None,
    ) -> str:
        """Create a PENDING appointment for the slot. Returns the appointment id."""
        if now is None:
            now = datetime.now()

        time = format_hhmm(to_minutes(time))
        extra = {
            "business_id": business_id,
            "professional_id": professional_id,
            "service_id": service_id,
        }

        try:
            service = self._services.get(service_id)
        except RepositoryError as e:
            self._logger.error("Error loading service", extra={**extra, "error": str(e)})
            raise BookingFailed("Could not load service") from e
        if service is None:
            raise ServiceNotFound(f"Service {service_id} not found")

        start = combine(date, time)
        end = start + timedelta(minutes=service.duration)

        try:
            slots = self._compute_slots(business_id, professional_id, service_id, date, now)
        except RepositoryError as e:
            self._logger.error("Error re-checking availability", extra={**extra, "error": str(e)})
            raise BookingFailed("Could not verify availability") from e
        if not any(slot.time == time for slot in slots):
            self._logger.info("Requested slot no longer available", extra={**extra, "time": time})
            raise SlotUnavailable(f"{date.isoformat()} {time} is not available")

        try:
            appointment = self._appointments.create_if_free(
                NewAppointment(
                    business_id=business_id,
                    client_id=client_id,
                    professional_id=professional_id,
                    service_id=service_id,
                    start_time=start,
                    end_time=end,
                )
            )
        except AppointmentConflictError as e:
            self._logger.info("Slot taken concurrently", extra={**extra, "time": time})
            raise SlotUnavailable(f"{date.isoformat()} {time} is not available") from e
        except Exception as e:
            self._logger.error("Error creating appointment", extra={**extra, "error": str(e)})
            raise BookingFailed("Could not create appointment") from e

        self._logger.info("Appointment created", extra={**extra, "appointment_id": appointment.id})
        return appointment.id

    def has_conflict(
        self,
        professional_id: str,
        start: datetime,
        end: datetime,
        exclude_id: str | None = None,
    ) -> bool:
        appointments = self._appointments.find(
            AppointmentQuery(
                professional_id=professional_id,
                # One day back catches bookings that start the evening before and run past midnight.
                range_start=start - timedelta(days=1),
                range_end=end,
                statuses=BLOCKING_STATUSES,
                exclude_id=exclude_id,
            )
        )
        return any(a.overlaps(start, end) for a in appointments)

    def _compute_slots(
        self,
        business_id: str,
        professional_id: str,
        service_id: str,
        day: date,
        now: datetime,
    ) -> list[AvailableSlot]:
        service = self._services.get(service_id)
        if service is None:
            self._logger.debug("Service not found", extra={"service_id": service_id})
            return []

        hours = self._resolve_working_hours(business_id, professional_id, DayOfWeek.from_date(day))
        if hours is None:
            return []

        booked = self._appointments.find(
            AppointmentQuery(
                professional_id=professional_id,
                range_start=datetime.combine(day, time.min),
                range_end=datetime.combine(day, time.max),
                statuses=BLOCKING_STATUSES,
            )
        )

        return [
            AvailableSlot(time=format_hhmm(minute), label=format_hhmm(minute))
            for minute in self._candidate_minutes(hours)
            if self._is_bookable(minute, service.duration, hours, day, booked, now)
        ]

    def _resolve_working_hours(
        self,
        business_id: str,
        professional_id: str,
        day_of_week: DayOfWeek,
    ) -> WorkingHours | None:
        candidates = self._working_hours.find_for_day(
            WorkingHoursQuery(
                business_id=business_id,
                professional_id=professional_id,
                day_of_week=day_of_week,
            )
        )
        active = [c for c in candidates if c.is_active]
        for row in active:
            if row.professional_id == professional_id:
                return row
        for row in active:
            if row.is_default:
                return row
        return None

    def _candidate_minutes(self, hours: WorkingHours) -> range:
        return range(to_minutes(hours.start_time), to_minutes(hours.end_time), self._slot_interval)

    def _is_bookable(
        self,
        start_minute: int,
        duration: int,
        hours: WorkingHours,
        day: date,
        booked: list[Appointment],
        now: datetime,
    ) -> bool:
        end_minute = start_minute + duration

        if hours.has_break:
            break_start = to_minutes(hours.break_start)
            break_end = to_minutes(hours.break_end)
            starts_in_break = break_start <= start_minute < break_end
            ends_in_break = break_start < end_minute <= break_end
            spans_break = start_minute <= break_start and end_minute >= break_end
            if starts_in_break or ends_in_break or spans_break:
                return False

        start = datetime.combine(day, time.min) + timedelta(minutes=start_minute)
        end = start + timedelta(minutes=duration)
        if any(a.overlaps(start, end) for a in booked):
            return False

        if start < now:
            return False

        # Slot must end inside working hours, not merely start inside them.
        return end_minute <= to_minutes(hours.end_time)
