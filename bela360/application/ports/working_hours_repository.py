from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from bela360.domain.entities.working_hours import DayOfWeek, WorkingHours


@dataclass(frozen=True)
class WorkingHoursQuery:
    business_id: str
    professional_id: str
    day_of_week: DayOfWeek


class WorkingHoursRepositoryPort(ABC):
    @abstractmethod
    def find_for_day(self, query: WorkingHoursQuery) -> list[WorkingHours]:
        """
        Active rows for the business on that weekday that apply to the professional:
        the professional's own rows plus business defaults (professional_id=None).
        Professional-specific rows come first.
        """
        raise NotImplementedError
