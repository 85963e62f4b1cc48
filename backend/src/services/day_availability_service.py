"""
Day-level business availability service.

A business can open or close a whole date and cap how many appointments it
takes that day. The business-selection booking flow reserves against this
cap instead of (or in addition to) a slot.
"""

import logging
from datetime import date as date_type
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.constants import (
    DEFAULT_MAX_APPOINTMENTS_PER_DAY,
    REASON_DAY_NOT_PUBLISHED, REASON_DAY_MARKED_CLOSED, REASON_DAY_FULL,
)
from models import BusinessDayAvailability
from utils.query_helpers import upsert_rows

logger = logging.getLogger(__name__)


def check_day_bookable(row: Optional[BusinessDayAvailability]) -> Optional[str]:
    """Reason a day can't take another appointment, or None if it can."""
    if row is None:
        return REASON_DAY_NOT_PUBLISHED
    if not row.is_open:
        return REASON_DAY_MARKED_CLOSED
    if (row.current_appointments_count or 0) >= row.max_appointments_per_day:
        return REASON_DAY_FULL
    return None


class DayAvailabilityService:
    """Service class for day-level availability operations."""

    @staticmethod
    def get_day_availability(db: Session, business_id: int, target_date: date_type) -> Optional[BusinessDayAvailability]:
        return db.query(BusinessDayAvailability).filter(
            BusinessDayAvailability.business_id == business_id,
            BusinessDayAvailability.date == target_date
        ).first()

    @staticmethod
    def list_day_availability(db: Session, business_id: int, from_date: date_type) -> List[BusinessDayAvailability]:
        """List a business's day rows on or after ``from_date``, earliest first."""
        return db.query(BusinessDayAvailability).filter(
            BusinessDayAvailability.business_id == business_id,
            BusinessDayAvailability.date >= from_date
        ).order_by(BusinessDayAvailability.date).all()

    @staticmethod
    def set_day_availability(
        db: Session,
        business_id: int,
        target_date: date_type,
        is_open: bool,
        max_appointments_per_day: int = DEFAULT_MAX_APPOINTMENTS_PER_DAY
    ) -> BusinessDayAvailability:
        """
        Open or close a date and set its appointment cap.

        The live appointment count is preserved across updates.

        Args:
            db: Database session
            business_id: Business ID
            target_date: Date to configure
            is_open: Whether the business takes appointments that day
            max_appointments_per_day: Daily cap

        Returns:
            The stored BusinessDayAvailability row

        Raises:
            HTTPException: 400 on a cap below 1, 409 if the cap is below the
                appointments already taken, 500 if the write fails
        """
        if max_appointments_per_day < 1:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="max_appointments_per_day must be at least 1"
            )

        existing = DayAvailabilityService.get_day_availability(db, business_id, target_date)
        current = (existing.current_appointments_count or 0) if existing else 0
        if max_appointments_per_day < current:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"The daily maximum can't be lower than the {current} appointment(s) already booked"
            )

        try:
            upsert_rows(
                db, BusinessDayAvailability,
                [{
                    "business_id": business_id,
                    "date": target_date,
                    "is_open": is_open,
                    "max_appointments_per_day": max_appointments_per_day,
                    "current_appointments_count": 0,
                }],
                conflict_columns=["business_id", "date"],
                update_columns=["is_open", "max_appointments_per_day"],
            )
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Day availability update for business {business_id} on {target_date} conflicted: {e}")
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Appointments were booked while saving. Please reload and try again."
            )
        except SQLAlchemyError as e:
            logger.exception(f"Failed to save day availability for business {business_id} on {target_date}: {e}")
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to save day availability"
            )

        logger.info(
            f"Set day availability for business {business_id} on {target_date}: "
            f"open={is_open}, max={max_appointments_per_day}"
        )
        db.expire_all()
        return DayAvailabilityService.get_day_availability(db, business_id, target_date)  # type: ignore[return-value]
