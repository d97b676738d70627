from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status

from bela360.api.v1.schemas import (
    ConflictResponseSchema,
    CreateAppointmentRequestSchema,
    CreateAppointmentResponseSchema,
)
from bela360.application.exceptions import BookingFailed, RepositoryError, ServiceNotFound, SlotUnavailable
from bela360.application.use_cases.availability import AvailabilityEngine
from bela360.application.utils.time_utils import InvalidTimeFormat
from bela360.wiring.dependencies import get_availability_engine, get_business_now

router = APIRouter(prefix="/appointments")


@router.post("", response_model=CreateAppointmentResponseSchema, status_code=status.HTTP_201_CREATED)
def create_appointment(
    req: CreateAppointmentRequestSchema,
    engine: AvailabilityEngine = Depends(get_availability_engine),
    now: datetime = Depends(get_business_now),
):
    try:
        appointment_id = engine.commit_booking(
            business_id=req.business_id,
            client_id=req.client_id,
            professional_id=req.professional_id,
            service_id=req.service_id,
            date=req.date,
            time=req.time,
            now=now,
        )
    except InvalidTimeFormat as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ServiceNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SlotUnavailable as e:
        raise HTTPException(status_code=409, detail=str(e))
    except BookingFailed as e:
        raise HTTPException(status_code=503, detail=str(e))

    return CreateAppointmentResponseSchema(appointment_id=appointment_id)


@router.get("/conflicts", response_model=ConflictResponseSchema)
def check_conflict(
    professional_id: str,
    start: datetime,
    end: datetime,
    exclude_id: str | None = None,
    engine: AvailabilityEngine = Depends(get_availability_engine),
):
    """Pre-check a manually entered time range before saving it."""
    if end <= start:
        raise HTTPException(status_code=400, detail="end must be after start")
    try:
        conflict = engine.has_conflict(professional_id, start, end, exclude_id=exclude_id)
    except RepositoryError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return ConflictResponseSchema(professional_id=professional_id, start=start, end=end, conflict=conflict)
