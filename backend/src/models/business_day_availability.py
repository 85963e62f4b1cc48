"""
Day-level business availability ("business_availability").

Lets an owner open or close a whole calendar date and cap the number of
appointments taken that day. Used by the business-selection booking flow.
"""

from datetime import date as date_type, datetime
from typing import Optional
from sqlalchemy import Boolean, Date, TIMESTAMP, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from core.database import Base
from core.constants import DEFAULT_MAX_APPOINTMENTS_PER_DAY


class BusinessDayAvailability(Base):
    """Whether a business takes appointments on a date, and how many."""

    __tablename__ = "business_availability"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"))
    date: Mapped[date_type] = mapped_column(Date)

    is_open: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    max_appointments_per_day: Mapped[int] = mapped_column(default=DEFAULT_MAX_APPOINTMENTS_PER_DAY)
    current_appointments_count: Mapped[int] = mapped_column(default=0, server_default="0")

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint('business_id', 'date', name='uq_business_availability_business_date'),
        CheckConstraint(
            'current_appointments_count >= 0 AND current_appointments_count <= max_appointments_per_day',
            name='ck_business_availability_capacity',
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<BusinessDayAvailability(business_id={self.business_id}, date={self.date}, open={self.is_open}, "
            f"{self.current_appointments_count}/{self.max_appointments_per_day})>"
        )
