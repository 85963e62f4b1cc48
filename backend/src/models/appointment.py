"""
Appointment model representing a customer's reservation with a business.

The natural key of an active appointment is (business_id, appointment_date,
appointment_time). A partial unique index over that key, limited to
statuses that hold their time, is the storage-level guard against double
booking; the booking service also checks it before inserting.
"""

import uuid
from datetime import date as date_type, time, datetime
from typing import Optional
from sqlalchemy import String, Date, Time, TIMESTAMP, ForeignKey, Index, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from core.database import Base
from core.constants import MAX_NOTES_LENGTH, STATUS_PENDING, BOOKING_FLOW_SLOT_SELECTION

# Keep in sync with INACTIVE_APPOINTMENT_STATUSES
_ACTIVE_APPOINTMENT_PREDICATE = text("status NOT IN ('cancelled', 'rejected')")


class Appointment(Base):
    """
    A customer's booking of a business at a date and time.

    Status lifecycle: pending -> approved/cancelled, approved ->
    completed/cancelled. completed and cancelled are terminal.
    """

    __tablename__ = "appointments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"))

    customer_id: Mapped[str] = mapped_column(String(64), index=True)
    """Identity-provider user id of the customer."""

    appointment_date: Mapped[date_type] = mapped_column(Date)

    appointment_time_slot_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("appointment_time_slots.id"), nullable=True
    )
    """Slot template the appointment was booked against, if any."""

    appointment_time: Mapped[time] = mapped_column(Time)
    """Start time, denormalized from the slot for display and sorting."""

    status: Mapped[str] = mapped_column(String(20), default=STATUS_PENDING)
    """One of 'pending', 'approved', 'completed', 'cancelled'."""

    booking_flow: Mapped[str] = mapped_column(String(30), default=BOOKING_FLOW_SLOT_SELECTION)
    """How the customer booked: 'slot_selection' or 'business_selection'.

    Decides which capacity counters a cancellation releases.
    """

    notes: Mapped[Optional[str]] = mapped_column(String(MAX_NOTES_LENGTH), nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    business = relationship("Business", back_populates="appointments")
    slot_template = relationship("SlotTemplate")

    __table_args__ = (
        Index(
            'uq_appointments_active_business_date_time',
            'business_id', 'appointment_date', 'appointment_time',
            unique=True,
            postgresql_where=_ACTIVE_APPOINTMENT_PREDICATE,
            sqlite_where=_ACTIVE_APPOINTMENT_PREDICATE,
        ),
        Index('idx_appointments_business_date', 'business_id', 'appointment_date'),
        Index('idx_appointments_status', 'status'),
    )

    def __repr__(self) -> str:
        return (
            f"<Appointment(id={self.id}, business_id={self.business_id}, "
            f"{self.appointment_date} {self.appointment_time}, status='{self.status}')>"
        )
