"""
Business model representing a service provider listed on the marketplace.

Only the fields the scheduling core needs are kept here: who owns the
business (for authorization) and its display name (for appointment lists).
Listing details, photos and location live in the external profile store.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from core.database import Base
from core.constants import MAX_STRING_LENGTH


class Business(Base):
    """A business whose owner publishes bookable time slots."""

    __tablename__ = "businesses"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the business."""

    owner_id: Mapped[str] = mapped_column(String(64), index=True)
    """Identity-provider user id of the business owner."""

    name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH))
    """Display name of the business."""

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    operating_hours = relationship("OperatingHours", back_populates="business")
    slot_templates = relationship("SlotTemplate", back_populates="business")
    appointments = relationship("Appointment", back_populates="business")

    def __repr__(self) -> str:
        return f"<Business(id={self.id}, name='{self.name}', owner_id='{self.owner_id}')>"
