"""
Slot template model ("appointment_time_slots").

A slot template is a named, fixed time-of-day interval with a capacity
ceiling, defined once per business and reused across dates.
"""

import uuid
from datetime import time, datetime
from typing import Optional
from sqlalchemy import String, Boolean, Time, TIMESTAMP, ForeignKey, Index, Uuid, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from core.database import Base
from core.constants import MAX_SLOT_NAME_LENGTH, DEFAULT_SLOT_CAPACITY


class SlotTemplate(Base):
    """
    A persisted bookable interval of a business's day.

    Templates created from synthesized drafts receive the UUID chosen for the
    draft before insert, so the draft and the stored row share one identity.
    """

    __tablename__ = "appointment_time_slots"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"))

    slot_name: Mapped[str] = mapped_column(String(MAX_SLOT_NAME_LENGTH))
    """Display label, e.g. "09:00 - 10:00"."""

    start_time: Mapped[time] = mapped_column(Time)
    end_time: Mapped[time] = mapped_column(Time)

    duration_minutes: Mapped[int] = mapped_column()
    """Always end_time - start_time in minutes."""

    max_concurrent_appointments: Mapped[int] = mapped_column(default=DEFAULT_SLOT_CAPACITY)
    """Capacity ceiling used when a date has no capacity override."""

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    business = relationship("Business", back_populates="slot_templates")
    daily_availability = relationship("DailySlotAvailability", back_populates="slot")

    __table_args__ = (
        Index('idx_slot_templates_business_active_start', 'business_id', 'is_active', 'start_time'),
        CheckConstraint('start_time < end_time', name='ck_slot_templates_time_order'),
        CheckConstraint('max_concurrent_appointments >= 1', name='ck_slot_templates_capacity'),
    )

    def __repr__(self) -> str:
        return f"<SlotTemplate(id={self.id}, business_id={self.business_id}, '{self.slot_name}')>"
