"""
Shared response models for API endpoints.

This module contains Pydantic response models that are shared across
multiple API endpoints to ensure consistency and reduce duplication.
"""

import uuid
from datetime import date, time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class OperatingHoursResponse(BaseModel):
    """Response model for one weekday of operating hours."""
    model_config = ConfigDict(from_attributes=True)

    day_of_week: int  # 0=Sunday ... 6=Saturday
    day_name: str
    open_time: Optional[time] = None
    close_time: Optional[time] = None
    is_closed: bool


class OperatingHoursListResponse(BaseModel):
    operating_hours: List[OperatingHoursResponse]


class SlotTemplateResponse(BaseModel):
    """Response model for a persisted slot template."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    business_id: int
    slot_name: str
    start_time: time
    end_time: time
    duration_minutes: int
    max_concurrent_appointments: int
    is_active: bool


class SlotTemplateListResponse(BaseModel):
    slot_templates: List[SlotTemplateResponse]


class DisplaySlotResponse(BaseModel):
    """A slot in the owner's day view. ``id`` is null for unsaved drafts."""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[uuid.UUID] = None
    slot_name: str  # e.g. "09:00 - 10:00"
    start_time: time
    end_time: time
    duration_minutes: int
    max_appointments: int
    current_appointments: int
    is_available: bool
    is_new_template: bool


class OwnerDayResponse(BaseModel):
    """Response model for the owner's day view."""
    date: date
    slots: List[DisplaySlotResponse]
    empty_reason: Optional[str] = None


class SaveDaySlotsResponse(BaseModel):
    """Response model for an owner save, with the day as stored."""
    date: date
    created_template_ids: List[uuid.UUID]
    skipped_slot_names: List[str]
    slots: List[DisplaySlotResponse]


class CustomerSlotResponse(BaseModel):
    """A slot in the customer's day view."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    slot_name: str
    start_time: time
    end_time: time
    duration_minutes: int
    max_appointments: int
    current_appointments: int
    is_bookable: bool
    reason_not_bookable: Optional[str] = None


class CustomerDayResponse(BaseModel):
    """Response model for the customer's bookable-slots view."""
    date: date
    slots: List[CustomerSlotResponse]
    empty_reason: Optional[str] = None


class DayAvailabilityResponse(BaseModel):
    """Response model for day-level availability."""
    model_config = ConfigDict(from_attributes=True)

    date: date
    is_open: bool
    max_appointments_per_day: int
    current_appointments_count: int


class DayAvailabilityListResponse(BaseModel):
    days: List[DayAvailabilityResponse]


class AppointmentResponse(BaseModel):
    """Response model for appointment information."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    business_id: int
    business_name: Optional[str] = None
    customer_id: str
    appointment_date: date
    appointment_time: time
    status: str
    slot_id: Optional[uuid.UUID] = None
    slot_name: Optional[str] = None
    notes: Optional[str] = None


class AppointmentListResponse(BaseModel):
    """Response model for listing appointments."""
    appointments: List[AppointmentResponse]
