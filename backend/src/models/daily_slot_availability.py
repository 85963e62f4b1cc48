"""
Daily slot availability model.

Per-date override and tracking row layered on top of a slot template: the
owner's open/closed choice for that date, the capacity for that date, and
the live booking count.
"""

import uuid
from datetime import date as date_type, datetime
from typing import Optional
from sqlalchemy import Boolean, Date, TIMESTAMP, ForeignKey, Uuid, UniqueConstraint, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from core.database import Base
from core.constants import DEFAULT_SLOT_CAPACITY


class DailySlotAvailability(Base):
    """
    Openness, capacity and booking count of one slot template on one date.

    Exactly one row per (business_id, slot_id, date). Written by the owner
    (availability and capacity) and by booking creation/cancellation (the
    count), always through conditional updates or upserts that keep
    ``0 <= current_appointments_in_slot <= max_appointments_in_slot``.
    """

    __tablename__ = "daily_slot_availability"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"))
    slot_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("appointment_time_slots.id"))
    date: Mapped[date_type] = mapped_column(Date)

    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    """Owner override of openness for this date."""

    max_appointments_in_slot: Mapped[int] = mapped_column(default=DEFAULT_SLOT_CAPACITY)
    """Capacity for this date (defaults to the template's capacity)."""

    current_appointments_in_slot: Mapped[int] = mapped_column(default=0, server_default="0")
    """Number of active appointments holding this slot on this date."""

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    slot = relationship("SlotTemplate", back_populates="daily_availability")

    __table_args__ = (
        UniqueConstraint('business_id', 'slot_id', 'date', name='uq_daily_slot_availability_business_slot_date'),
        CheckConstraint(
            'current_appointments_in_slot >= 0 AND current_appointments_in_slot <= max_appointments_in_slot',
            name='ck_daily_slot_availability_capacity',
        ),
        Index('idx_daily_slot_availability_business_date', 'business_id', 'date'),
    )

    @property
    def is_full(self) -> bool:
        return (self.current_appointments_in_slot or 0) >= self.max_appointments_in_slot

    def __repr__(self) -> str:
        return (
            f"<DailySlotAvailability(slot_id={self.slot_id}, date={self.date}, "
            f"available={self.is_available}, {self.current_appointments_in_slot}/{self.max_appointments_in_slot})>"
        )
