from __future__ import annotations

from datetime import date as Date, datetime

from pydantic import BaseModel, Field

from bela360.domain.entities.conversation_state import ConversationStep


class SlotSchema(BaseModel):
    time: str
    label: str


class SlotsResponseSchema(BaseModel):
    date: Date
    slots: list[SlotSchema]


class AvailableDateSchema(BaseModel):
    date: str
    label: str
    day_name: str


class DatesResponseSchema(BaseModel):
    dates: list[AvailableDateSchema]


class CreateAppointmentRequestSchema(BaseModel):
    business_id: str
    client_id: str
    professional_id: str
    service_id: str
    date: Date
    time: str = Field(pattern=r"^\d{1,2}:\d{2}$")


class CreateAppointmentResponseSchema(BaseModel):
    appointment_id: str


class BookingDraftSchema(BaseModel):
    service_id: str | None = None
    service_name: str | None = None
    professional_id: str | None = None
    professional_name: str | None = None
    date: str | None = None
    time: str | None = None
    appointment_id: str | None = None


class SetConversationRequestSchema(BaseModel):
    step: ConversationStep
    data: BookingDraftSchema = Field(default_factory=BookingDraftSchema)


class UpdateConversationRequestSchema(BaseModel):
    data: BookingDraftSchema


class ConversationStateSchema(BaseModel):
    step: ConversationStep
    data: BookingDraftSchema
    last_message_at: datetime
    expires_at: datetime


class ConflictResponseSchema(BaseModel):
    professional_id: str
    start: datetime
    end: datetime
    conflict: bool
