from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any, Mapping


class ConversationStep(str, Enum):
    INITIAL = "initial"
    SELECTING_SERVICE = "selecting_service"
    SELECTING_PROFESSIONAL = "selecting_professional"
    SELECTING_DATE = "selecting_date"
    SELECTING_TIME = "selecting_time"
    CONFIRMING_BOOKING = "confirming_booking"
    COMPLETED = "completed"


@dataclass(frozen=True)
class BookingDraft:
    service_id: str | None = None
    service_name: str | None = None
    professional_id: str | None = None
    professional_name: str | None = None
    date: str | None = None  # YYYY-MM-DD
    time: str | None = None  # HH:MM
    appointment_id: str | None = None

    def merged(self, partial: Mapping[str, Any] | None) -> "BookingDraft":
        """Shallow merge: keys present in partial overwrite, the rest are kept."""
        if not partial:
            return self
        known = {f.name for f in fields(self)}
        unknown = set(partial) - known
        if unknown:
            raise ValueError(f"Unknown booking draft fields: {sorted(unknown)}")
        return replace(self, **dict(partial))


@dataclass(frozen=True)
class ConversationState:
    step: ConversationStep
    last_message_at: datetime
    expires_at: datetime
    data: BookingDraft = field(default_factory=BookingDraft)

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at < now
