"""
Customer bookable-slots resolver.

Customers only ever see persisted, active slot templates. A slot is bookable
on a date only if the owner has opened it for that date (a daily
availability row exists), left it available, and it still has capacity.
"""

import logging
from datetime import date as date_type
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.constants import (
    REASON_NO_ACTIVE_SLOTS, REASON_SLOT_NOT_OPENED, REASON_SLOT_CLOSED, REASON_SLOT_FULL,
)
from models import DailySlotAvailability
from services.scheduling_types import CustomerDayView, CustomerDisplaySlot
from services.slot_template_service import SlotTemplateService

logger = logging.getLogger(__name__)


def slot_unbookable_reason(row: Optional[DailySlotAvailability]) -> Optional[str]:
    """
    Reason a slot can't be booked on a date, or None if it can.

    Args:
        row: The slot's daily availability row for the date, if any
    """
    if row is None:
        return REASON_SLOT_NOT_OPENED
    if not row.is_available:
        return REASON_SLOT_CLOSED
    if row.is_full:
        return REASON_SLOT_FULL
    return None


class CustomerSlotService:
    """Service class for the customer view of a business's day."""

    @staticmethod
    def get_bookable_slots(db: Session, business_id: int, target_date: date_type) -> CustomerDayView:
        """
        Resolve which slots a customer may reserve on a date.

        Every active template is returned with ``is_bookable`` and, when not
        bookable, the reason. Owner drafts are never included.

        Args:
            db: Database session
            business_id: Business ID
            target_date: Date being viewed

        Returns:
            CustomerDayView ordered by start time

        Raises:
            HTTPException: 500 if the slots can't be loaded
        """
        try:
            templates = SlotTemplateService.list_slot_templates(db, business_id)
            if not templates:
                return CustomerDayView(date=target_date, empty_reason=REASON_NO_ACTIVE_SLOTS)

            rows = db.query(DailySlotAvailability).filter(
                DailySlotAvailability.business_id == business_id,
                DailySlotAvailability.date == target_date,
                DailySlotAvailability.slot_id.in_([t.id for t in templates])
            ).all()
        except SQLAlchemyError as e:
            logger.exception(f"Failed to load bookable slots for business {business_id} on {target_date}: {e}")
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to load available slots"
            )

        rows_by_slot = {row.slot_id: row for row in rows}
        slots = []
        for template in templates:
            row = rows_by_slot.get(template.id)
            reason = slot_unbookable_reason(row)
            slots.append(CustomerDisplaySlot(
                id=template.id,
                slot_name=template.slot_name,
                start_time=template.start_time,
                end_time=template.end_time,
                duration_minutes=template.duration_minutes,
                max_appointments=row.max_appointments_in_slot if row else template.max_concurrent_appointments,
                current_appointments=(row.current_appointments_in_slot or 0) if row else 0,
                is_bookable=reason is None,
                reason_not_bookable=reason,
            ))

        return CustomerDayView(date=target_date, slots=slots)
