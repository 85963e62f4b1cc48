# pyright: reportMissingTypeStubs=false
"""
Business scheduling API endpoints.

Owner endpoints (operating hours, slot templates, per-day slot availability,
day-level availability) require the business_owner role and ownership of the
business. The bookable-slots endpoint is public.
"""

import logging
import uuid
from datetime import date as date_type
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from core.database import get_db
from core.constants import DEFAULT_SLOT_CAPACITY, DEFAULT_MAX_APPOINTMENTS_PER_DAY, MAX_SLOT_NAME_LENGTH
from auth.dependencies import ActorContext, require_business_owner, ensure_business_owner
from services import (
    OperatingHoursService, SlotTemplateService, SlotAvailabilityService,
    CustomerSlotService, DayAvailabilityService,
)
from services.scheduling_types import DisplaySlot, OperatingHoursEntry, OwnerDayView
from utils.business_queries import get_business_or_404
from utils.datetime_utils import parse_date_string, parse_time_string, utc_now
from api.responses import (
    OperatingHoursResponse, OperatingHoursListResponse, SlotTemplateResponse, SlotTemplateListResponse,
    DisplaySlotResponse, OwnerDayResponse, SaveDaySlotsResponse, CustomerSlotResponse, CustomerDayResponse,
    DayAvailabilityResponse, DayAvailabilityListResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ===== Request Models =====

class OperatingHoursEntryRequest(BaseModel):
    """One weekday of operating hours."""
    day_of_week: int  # 0=Sunday ... 6=Saturday
    open_time: Optional[str] = None  # Format: "HH:MM"
    close_time: Optional[str] = None  # Format: "HH:MM"
    is_closed: bool = False

    @field_validator('open_time', 'close_time')
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            parse_time_string(v)
        return v

    def to_entry(self) -> OperatingHoursEntry:
        return OperatingHoursEntry(
            day_of_week=self.day_of_week,
            open_time=parse_time_string(self.open_time) if self.open_time else None,
            close_time=parse_time_string(self.close_time) if self.close_time else None,
            is_closed=self.is_closed,
        )


class OperatingHoursUpdateRequest(BaseModel):
    operating_hours: List[OperatingHoursEntryRequest]


class SlotTemplateCreateRequest(BaseModel):
    start_time: str  # Format: "HH:MM"
    end_time: str  # Format: "HH:MM"
    slot_name: Optional[str] = Field(default=None, max_length=MAX_SLOT_NAME_LENGTH)
    max_concurrent_appointments: int = DEFAULT_SLOT_CAPACITY

    @field_validator('start_time', 'end_time')
    @classmethod
    def validate_time(cls, v: str) -> str:
        parse_time_string(v)
        return v


class SlotTemplateUpdateRequest(BaseModel):
    slot_name: Optional[str] = Field(default=None, max_length=MAX_SLOT_NAME_LENGTH)
    max_concurrent_appointments: Optional[int] = None
    is_active: Optional[bool] = None


class DaySlotRequest(BaseModel):
    """A slot of the owner's edited day. Drafts are sent with ``id`` null."""
    id: Optional[uuid.UUID] = None
    slot_name: str = Field(max_length=MAX_SLOT_NAME_LENGTH)
    start_time: str  # Format: "HH:MM"
    end_time: str  # Format: "HH:MM"
    max_appointments: int = DEFAULT_SLOT_CAPACITY
    is_available: bool = True

    @field_validator('start_time', 'end_time')
    @classmethod
    def validate_time(cls, v: str) -> str:
        parse_time_string(v)
        return v

    def to_display_slot(self) -> DisplaySlot:
        start = parse_time_string(self.start_time)
        end = parse_time_string(self.end_time)
        return DisplaySlot(
            id=self.id,
            slot_name=self.slot_name,
            start_time=start,
            end_time=end,
            duration_minutes=0,  # derived from the times when stored
            max_appointments=self.max_appointments,
            is_available=self.is_available,
            is_new_template=self.id is None,
        )


class SaveDaySlotsRequest(BaseModel):
    slots: List[DaySlotRequest]


class DayAvailabilityRequest(BaseModel):
    is_open: bool = True
    max_appointments_per_day: int = DEFAULT_MAX_APPOINTMENTS_PER_DAY


# ===== Helpers =====

def _parse_path_date(date: str) -> date_type:
    try:
        return parse_date_string(date)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid date format (use YYYY-MM-DD)"
        )


def _owner_day_response(view: OwnerDayView) -> OwnerDayResponse:
    return OwnerDayResponse(
        date=view.date,
        slots=[DisplaySlotResponse.model_validate(slot) for slot in view.slots],
        empty_reason=view.empty_reason,
    )


# ===== Operating Hours =====

@router.get("/{business_id}/operating-hours", summary="Get weekly operating hours")
async def get_operating_hours(
    business_id: int,
    actor: ActorContext = Depends(require_business_owner),
    db: Session = Depends(get_db)
) -> OperatingHoursListResponse:
    ensure_business_owner(db, business_id, actor)
    rows = OperatingHoursService.get_operating_hours(db, business_id)
    return OperatingHoursListResponse(
        operating_hours=[OperatingHoursResponse.model_validate(row) for row in rows]
    )


@router.put("/{business_id}/operating-hours", summary="Create or replace weekly operating hours")
async def update_operating_hours(
    business_id: int,
    request: OperatingHoursUpdateRequest,
    actor: ActorContext = Depends(require_business_owner),
    db: Session = Depends(get_db)
) -> OperatingHoursListResponse:
    ensure_business_owner(db, business_id, actor)
    rows = OperatingHoursService.upsert_operating_hours(
        db, business_id, [entry.to_entry() for entry in request.operating_hours]
    )
    return OperatingHoursListResponse(
        operating_hours=[OperatingHoursResponse.model_validate(row) for row in rows]
    )


# ===== Slot Templates =====

@router.get("/{business_id}/slot-templates", summary="List slot templates")
async def list_slot_templates(
    business_id: int,
    include_inactive: bool = Query(False),
    actor: ActorContext = Depends(require_business_owner),
    db: Session = Depends(get_db)
) -> SlotTemplateListResponse:
    ensure_business_owner(db, business_id, actor)
    templates = SlotTemplateService.list_slot_templates(db, business_id, include_inactive=include_inactive)
    return SlotTemplateListResponse(
        slot_templates=[SlotTemplateResponse.model_validate(t) for t in templates]
    )


@router.post("/{business_id}/slot-templates", summary="Create a slot template", status_code=status.HTTP_201_CREATED)
async def create_slot_template(
    business_id: int,
    request: SlotTemplateCreateRequest,
    actor: ActorContext = Depends(require_business_owner),
    db: Session = Depends(get_db)
) -> SlotTemplateResponse:
    ensure_business_owner(db, business_id, actor)
    template = SlotTemplateService.create_slot_template(
        db,
        business_id,
        start_time=parse_time_string(request.start_time),
        end_time=parse_time_string(request.end_time),
        slot_name=request.slot_name,
        max_concurrent_appointments=request.max_concurrent_appointments,
    )
    return SlotTemplateResponse.model_validate(template)


@router.patch("/{business_id}/slot-templates/{slot_id}", summary="Update a slot template")
async def update_slot_template(
    business_id: int,
    slot_id: uuid.UUID,
    request: SlotTemplateUpdateRequest,
    actor: ActorContext = Depends(require_business_owner),
    db: Session = Depends(get_db)
) -> SlotTemplateResponse:
    ensure_business_owner(db, business_id, actor)
    template = SlotTemplateService.update_slot_template(
        db,
        business_id,
        slot_id,
        max_concurrent_appointments=request.max_concurrent_appointments,
        is_active=request.is_active,
        slot_name=request.slot_name,
    )
    return SlotTemplateResponse.model_validate(template)


# ===== Per-day Slot Availability =====

@router.get("/{business_id}/days/{date}/slots", summary="Owner view of a day's slots")
async def get_day_slots(
    business_id: int,
    date: str,
    actor: ActorContext = Depends(require_business_owner),
    db: Session = Depends(get_db)
) -> OwnerDayResponse:
    target_date = _parse_path_date(date)
    ensure_business_owner(db, business_id, actor)
    view = SlotAvailabilityService.load_day_slots(db, business_id, target_date)
    return _owner_day_response(view)


@router.put("/{business_id}/days/{date}/slots", summary="Save a day's slot availability")
async def save_day_slots(
    business_id: int,
    date: str,
    request: SaveDaySlotsRequest,
    actor: ActorContext = Depends(require_business_owner),
    db: Session = Depends(get_db)
) -> SaveDaySlotsResponse:
    target_date = _parse_path_date(date)
    ensure_business_owner(db, business_id, actor)
    result = SlotAvailabilityService.save_day_slots(
        db, business_id, target_date, [slot.to_display_slot() for slot in request.slots]
    )
    view = SlotAvailabilityService.load_day_slots(db, business_id, target_date)
    return SaveDaySlotsResponse(
        date=target_date,
        created_template_ids=result.created_template_ids,
        skipped_slot_names=result.skipped_slot_names,
        slots=[DisplaySlotResponse.model_validate(slot) for slot in view.slots],
    )


@router.get("/{business_id}/days/{date}/bookable-slots", summary="Customer view of a day's bookable slots")
async def get_bookable_slots(
    business_id: int,
    date: str,
    db: Session = Depends(get_db)
) -> CustomerDayResponse:
    target_date = _parse_path_date(date)
    get_business_or_404(db, business_id)
    view = CustomerSlotService.get_bookable_slots(db, business_id, target_date)
    return CustomerDayResponse(
        date=view.date,
        slots=[CustomerSlotResponse.model_validate(slot) for slot in view.slots],
        empty_reason=view.empty_reason,
    )


# ===== Day-level Availability =====

@router.get("/{business_id}/day-availability", summary="List day-level availability")
async def list_day_availability(
    business_id: int,
    from_date: Optional[str] = Query(None, description="YYYY-MM-DD, defaults to today"),
    actor: ActorContext = Depends(require_business_owner),
    db: Session = Depends(get_db)
) -> DayAvailabilityListResponse:
    start = _parse_path_date(from_date) if from_date else utc_now().date()
    ensure_business_owner(db, business_id, actor)
    rows = DayAvailabilityService.list_day_availability(db, business_id, start)
    return DayAvailabilityListResponse(days=[DayAvailabilityResponse.model_validate(row) for row in rows])


@router.put("/{business_id}/day-availability/{date}", summary="Open or close a day")
async def set_day_availability(
    business_id: int,
    date: str,
    request: DayAvailabilityRequest,
    actor: ActorContext = Depends(require_business_owner),
    db: Session = Depends(get_db)
) -> DayAvailabilityResponse:
    target_date = _parse_path_date(date)
    ensure_business_owner(db, business_id, actor)
    row = DayAvailabilityService.set_day_availability(
        db, business_id, target_date,
        is_open=request.is_open,
        max_appointments_per_day=request.max_appointments_per_day,
    )
    return DayAvailabilityResponse.model_validate(row)
