# pyright: reportMissingTypeStubs=false
"""
Appointment API endpoints.

Customers book and cancel; business owners approve, complete and cancel
appointments of the businesses they own.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from core.database import get_db
from core.constants import MAX_NOTES_LENGTH
from auth.dependencies import ActorContext, get_current_actor, require_customer
from services import BookingService, BookingFlow
from utils.datetime_utils import parse_date_string
from api.responses import AppointmentResponse, AppointmentListResponse

logger = logging.getLogger(__name__)

router = APIRouter()


class AppointmentCreateRequest(BaseModel):
    """Request model for booking an appointment."""
    business_id: int
    appointment_date: str  # Format: "YYYY-MM-DD"
    slot_id: Optional[uuid.UUID] = None
    notes: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)
    flow: BookingFlow = BookingFlow.SLOT_SELECTION


class AppointmentStatusUpdateRequest(BaseModel):
    status: str


@router.post("", summary="Book an appointment", status_code=status.HTTP_201_CREATED)
async def create_appointment(
    request: AppointmentCreateRequest,
    actor: ActorContext = Depends(require_customer),
    db: Session = Depends(get_db)
) -> AppointmentResponse:
    """
    Book an appointment for the authenticated customer.

    Slot selection books a specific slot and is approved immediately;
    business selection books against the business's day and waits for
    the owner's approval.
    """
    try:
        appointment_date = parse_date_string(request.appointment_date)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid date format (use YYYY-MM-DD)"
        )

    appointment = BookingService.create_booking(
        db,
        business_id=request.business_id,
        customer_id=actor.user_id,
        appointment_date=appointment_date,
        slot_id=request.slot_id,
        notes=request.notes,
        flow=request.flow,
    )
    item = BookingService.get_appointment(db, appointment.id, actor)
    return AppointmentResponse.model_validate(item)


@router.get("", summary="List my appointments")
async def list_appointments(
    actor: ActorContext = Depends(get_current_actor),
    db: Session = Depends(get_db)
) -> AppointmentListResponse:
    items = BookingService.list_appointments(db, actor)
    return AppointmentListResponse(
        appointments=[AppointmentResponse.model_validate(item) for item in items]
    )


@router.get("/{appointment_id}", summary="Get an appointment")
async def get_appointment(
    appointment_id: uuid.UUID,
    actor: ActorContext = Depends(get_current_actor),
    db: Session = Depends(get_db)
) -> AppointmentResponse:
    item = BookingService.get_appointment(db, appointment_id, actor)
    return AppointmentResponse.model_validate(item)


@router.patch("/{appointment_id}/status", summary="Change an appointment's status")
async def update_appointment_status(
    appointment_id: uuid.UUID,
    request: AppointmentStatusUpdateRequest,
    actor: ActorContext = Depends(get_current_actor),
    db: Session = Depends(get_db)
) -> AppointmentResponse:
    BookingService.update_appointment_status(db, appointment_id, request.status, actor)
    item = BookingService.get_appointment(db, appointment_id, actor)
    return AppointmentResponse.model_validate(item)
