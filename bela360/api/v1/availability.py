from datetime import date as Date, datetime

from fastapi import APIRouter, Depends, Query

from bela360.api.v1.schemas import (
    AvailableDateSchema,
    DatesResponseSchema,
    SlotSchema,
    SlotsResponseSchema,
)
from bela360.application.use_cases.availability import AvailabilityEngine
from bela360.core.config import settings
from bela360.wiring.dependencies import get_availability_engine, get_business_now

router = APIRouter(prefix="/availability")


@router.get("/slots", response_model=SlotsResponseSchema)
def get_slots(
    business_id: str,
    professional_id: str,
    service_id: str,
    date: Date,
    engine: AvailabilityEngine = Depends(get_availability_engine),
    now: datetime = Depends(get_business_now),
):
    slots = engine.compute_available_slots(business_id, professional_id, service_id, date, now=now)
    return SlotsResponseSchema(date=date, slots=[SlotSchema(time=s.time, label=s.label) for s in slots])


@router.get("/dates", response_model=DatesResponseSchema)
def get_dates(
    business_id: str,
    professional_id: str,
    service_id: str,
    days_ahead: int = Query(settings.AVAILABLE_DATES_DEFAULT_DAYS, ge=1),
    engine: AvailabilityEngine = Depends(get_availability_engine),
    now: datetime = Depends(get_business_now),
):
    dates = engine.compute_available_dates(business_id, professional_id, service_id, days_ahead=days_ahead, now=now)
    return DatesResponseSchema(
        dates=[AvailableDateSchema(date=d.date, label=d.label, day_name=d.day_name) for d in dates]
    )
