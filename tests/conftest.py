from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from bela360.application.use_cases.availability import AvailabilityEngine
from bela360.domain.entities.service import Service
from bela360.domain.entities.working_hours import DayOfWeek, WorkingHours
from bela360.infrastructure.database.memory_repositories import (
    MemoryAppointmentRepository,
    MemoryServiceRepository,
    MemoryWorkingHoursRepository,
)
from bela360.infrastructure.store.kv_conversation_store import KeyValueConversationStore
from bela360.infrastructure.store.memory_store import MemoryKeyValueStore

BUSINESS_ID = "biz-1"
PROFESSIONAL_ID = "pro-1"
SERVICE_ID = "svc-cut"

# 2030-01-07 is a Monday.
MONDAY = date(2030, 1, 7)
EARLY_MONDAY = datetime(2030, 1, 7, 6, 0)


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def services() -> MemoryServiceRepository:
    return MemoryServiceRepository([Service(id=SERVICE_ID, business_id=BUSINESS_ID, duration=60, name="Corte")])


@pytest.fixture
def working_hours() -> MemoryWorkingHoursRepository:
    return MemoryWorkingHoursRepository(
        [
            WorkingHours(
                business_id=BUSINESS_ID,
                day_of_week=DayOfWeek.MONDAY,
                start_time="09:00",
                end_time="18:00",
                break_start="12:00",
                break_end="13:00",
            )
        ]
    )


@pytest.fixture
def appointments() -> MemoryAppointmentRepository:
    return MemoryAppointmentRepository()


@pytest.fixture
def engine(services, working_hours, appointments) -> AvailabilityEngine:
    return AvailabilityEngine(services=services, working_hours=working_hours, appointments=appointments)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2030, 1, 7, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def kv(clock) -> MemoryKeyValueStore:
    return MemoryKeyValueStore(clock=clock)


@pytest.fixture
def conversation_store(kv, clock) -> KeyValueConversationStore:
    return KeyValueConversationStore(kv=kv, clock=clock)
