"""
Operating hours model for a business's recurring weekly schedule.

One row per business per weekday. These rows are the template that slot
synthesis reads when a business has not defined explicit slot templates.
"""

from datetime import time, datetime
from typing import Optional
from sqlalchemy import Boolean, Time, TIMESTAMP, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from core.database import Base


class OperatingHours(Base):
    """
    Opening and closing time of a business for one day of the week.

    Invariant: when ``is_closed`` is false, both times are set and
    ``open_time < close_time``. Rows are overwritten by upsert on
    ``(business_id, day_of_week)`` and never deleted.
    """

    __tablename__ = "business_operating_hours"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"))
    """Reference to the business."""

    day_of_week: Mapped[int] = mapped_column()
    """Day of the week (0=Sunday, 1=Monday, ..., 6=Saturday)."""

    open_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    close_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)

    is_closed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    """True when the business does not operate on this weekday."""

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    business = relationship("Business", back_populates="operating_hours")

    __table_args__ = (
        UniqueConstraint('business_id', 'day_of_week', name='uq_operating_hours_business_day'),
    )

    @property
    def day_name(self) -> str:
        """Get the day name for display."""
        days = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']
        return days[self.day_of_week]

    @property
    def has_complete_hours(self) -> bool:
        """Whether both opening and closing time are set."""
        return self.open_time is not None and self.close_time is not None

    def __repr__(self) -> str:
        state = "closed" if self.is_closed else f"{self.open_time}-{self.close_time}"
        return f"<OperatingHours(business_id={self.business_id}, day={self.day_name}, {state})>"
