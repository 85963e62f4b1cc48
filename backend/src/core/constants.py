"""Application constants and configuration values."""

from datetime import time

from core.config import FRONTEND_URL

# Database field lengths
MAX_STRING_LENGTH = 255
MAX_SLOT_NAME_LENGTH = 100
MAX_NOTES_LENGTH = 500

# Database connection settings
DB_POOL_RECYCLE_SECONDS = 300  # 5 minutes

# CORS origins for development and production
_CORS_ORIGINS_RAW = [
    "http://localhost:8081",      # Expo dev server
    "http://localhost:19006",     # Expo web
    FRONTEND_URL,
]

# Filter out None values and empty strings to avoid CORS errors
CORS_ORIGINS = [origin for origin in _CORS_ORIGINS_RAW if origin and origin.strip()]

# Roles carried in identity tokens
ROLE_CUSTOMER = "customer"
ROLE_BUSINESS_OWNER = "business_owner"

# Appointment statuses
STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"
STATUS_REJECTED = "rejected"  # Legacy value, never written by this service
APPOINTMENT_STATUSES = [STATUS_PENDING, STATUS_APPROVED, STATUS_COMPLETED, STATUS_CANCELLED]

# Appointments in these statuses don't hold their time
INACTIVE_APPOINTMENT_STATUSES = [STATUS_CANCELLED, STATUS_REJECTED]

# Allowed status transitions; statuses without an entry are terminal
APPOINTMENT_STATUS_TRANSITIONS = {
    STATUS_PENDING: {STATUS_APPROVED, STATUS_CANCELLED},
    STATUS_APPROVED: {STATUS_COMPLETED, STATUS_CANCELLED},
}

# Booking flows
BOOKING_FLOW_SLOT_SELECTION = "slot_selection"
BOOKING_FLOW_BUSINESS_SELECTION = "business_selection"

# Slot generation
DEFAULT_SLOT_CAPACITY = 1
DEFAULT_MAX_APPOINTMENTS_PER_DAY = 5

# Business-selection bookings without a chosen slot fall back to this time
DEFAULT_APPOINTMENT_TIME = time(9, 0)

# Empty-state reasons for the owner day view
REASON_NO_OPERATING_HOURS = "No operating hours are configured for this day."
REASON_DAY_CLOSED = "The business is marked closed on this day."
REASON_INCOMPLETE_HOURS = "Operating hours for this day are incomplete (missing opening or closing time)."
REASON_NO_SLOTS_FIT = (
    "No time slots fit within the operating hours for this day "
    "(check that the opening time is before the closing time)."
)
REASON_HOURS_LOOKUP_FAILED = "Operating hours could not be loaded. Please try again later."

# Customer view reasons
REASON_NO_ACTIVE_SLOTS = "This business has no active time slots."
REASON_SLOT_NOT_OPENED = "Business has not opened this slot for this date."
REASON_SLOT_CLOSED = "Business marked this time closed."
REASON_SLOT_FULL = "Slot full."

# Day-level availability reasons
REASON_DAY_NOT_PUBLISHED = "No availability has been published for this day."
REASON_DAY_MARKED_CLOSED = "This day is marked closed."
REASON_DAY_FULL = "The maximum number of appointments for this day has been reached."

# Booking conflict message
BOOKING_CONFLICT_MESSAGE = "This time is already booked. Please choose another time."
