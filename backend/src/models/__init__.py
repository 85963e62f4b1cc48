# Package initialization
# Import all models to ensure relationships are properly established
from .business import Business
from .operating_hours import OperatingHours
from .slot_template import SlotTemplate
from .daily_slot_availability import DailySlotAvailability
from .business_day_availability import BusinessDayAvailability
from .appointment import Appointment

__all__ = [
    "Business",
    "OperatingHours",
    "SlotTemplate",
    "DailySlotAvailability",
    "BusinessDayAvailability",
    "Appointment",
]
