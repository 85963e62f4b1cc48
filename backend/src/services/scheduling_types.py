"""
Result types shared by the scheduling services.

These are plain dataclasses so the services stay independent of the HTTP
layer; the API converts them into pydantic response models.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import date, time
from typing import List, Optional

from core.constants import DEFAULT_SLOT_CAPACITY


@dataclass
class DisplaySlot:
    """A slot of one day as shown to the business owner."""
    slot_name: str
    start_time: time
    end_time: time
    duration_minutes: int
    id: Optional[uuid.UUID] = None  # None for a synthesized draft
    max_appointments: int = DEFAULT_SLOT_CAPACITY
    current_appointments: int = 0
    is_available: bool = True
    is_new_template: bool = False

    def with_availability(self, is_available: bool) -> "DisplaySlot":
        """Copy of this slot with a different availability flag."""
        return replace(self, is_available=is_available)


@dataclass
class SlotGenerationResult:
    """Base slots of a day, and why there are none when the list is empty."""
    slots: List[DisplaySlot] = field(default_factory=list)
    empty_reason: Optional[str] = None


@dataclass
class OwnerDayView:
    date: date
    slots: List[DisplaySlot] = field(default_factory=list)
    empty_reason: Optional[str] = None


@dataclass
class SaveDaySlotsResult:
    """Outcome of an owner save."""
    date: date
    created_template_ids: List[uuid.UUID] = field(default_factory=list)
    saved_slot_ids: List[uuid.UUID] = field(default_factory=list)
    skipped_slot_names: List[str] = field(default_factory=list)


@dataclass
class CustomerDisplaySlot:
    """A persisted slot of one day as shown to a customer."""
    id: uuid.UUID
    slot_name: str
    start_time: time
    end_time: time
    duration_minutes: int
    max_appointments: int
    current_appointments: int
    is_bookable: bool
    reason_not_bookable: Optional[str] = None


@dataclass
class CustomerDayView:
    date: date
    slots: List[CustomerDisplaySlot] = field(default_factory=list)
    empty_reason: Optional[str] = None

    @property
    def bookable_slots(self) -> List[CustomerDisplaySlot]:
        return [slot for slot in self.slots if slot.is_bookable]


@dataclass
class OperatingHoursEntry:
    """One weekday of an operating-hours write."""
    day_of_week: int  # 0=Sunday ... 6=Saturday
    open_time: Optional[time] = None
    close_time: Optional[time] = None
    is_closed: bool = False


@dataclass
class AppointmentListItem:
    """An appointment joined with its business and slot, decoded at the query boundary."""
    id: uuid.UUID
    business_id: int
    business_name: str
    customer_id: str
    appointment_date: date
    appointment_time: time
    status: str
    slot_id: Optional[uuid.UUID] = None
    slot_name: Optional[str] = None
    notes: Optional[str] = None
