"""
Services package for shared business logic.

This package contains service classes that encapsulate the scheduling
logic shared across the owner and customer API endpoints.
"""

from .operating_hours_service import OperatingHoursService
from .slot_template_service import SlotTemplateService
from .slot_availability_service import SlotAvailabilityService
from .customer_slot_service import CustomerSlotService
from .day_availability_service import DayAvailabilityService
from .booking_service import BookingService, BookingFlow

__all__ = [
    "OperatingHoursService",
    "SlotTemplateService",
    "SlotAvailabilityService",
    "CustomerSlotService",
    "DayAvailabilityService",
    "BookingService",
    "BookingFlow",
]
