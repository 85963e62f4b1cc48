"""
Operating hours service.

Reads and writes a business's recurring weekly schedule. Each weekday is one
row keyed on (business_id, day_of_week); writes are upserts so re-sending a
schedule is idempotent.
"""

import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import OperatingHours
from services.scheduling_types import OperatingHoursEntry
from utils.query_helpers import upsert_rows

logger = logging.getLogger(__name__)


class OperatingHoursService:
    """Service class for operating hours operations."""

    @staticmethod
    def get_operating_hours(db: Session, business_id: int) -> List[OperatingHours]:
        """Get all weekday rows of a business, Sunday first."""
        return db.query(OperatingHours).filter(
            OperatingHours.business_id == business_id
        ).order_by(OperatingHours.day_of_week).all()

    @staticmethod
    def get_hours_for_weekday(db: Session, business_id: int, day_of_week: int) -> Optional[OperatingHours]:
        """Get the row for one weekday (0=Sunday), or None if not configured."""
        return db.query(OperatingHours).filter(
            OperatingHours.business_id == business_id,
            OperatingHours.day_of_week == day_of_week
        ).first()

    @staticmethod
    def validate_entries(entries: List[OperatingHoursEntry]) -> None:
        """
        Validate an operating-hours write before anything is stored.

        Raises:
            HTTPException: 400 on an out-of-range weekday, a duplicate weekday,
                or an open day without a valid open < close window
        """
        seen_days = set()
        for entry in entries:
            if entry.day_of_week < 0 or entry.day_of_week > 6:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Invalid day_of_week {entry.day_of_week} (expected 0-6, Sunday=0)"
                )
            if entry.day_of_week in seen_days:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Duplicate day_of_week {entry.day_of_week}"
                )
            seen_days.add(entry.day_of_week)

            if entry.is_closed:
                continue
            if entry.open_time is None or entry.close_time is None:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Open days need both open_time and close_time (day_of_week {entry.day_of_week})"
                )
            if entry.open_time >= entry.close_time:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"open_time must be before close_time (day_of_week {entry.day_of_week})"
                )

    @staticmethod
    def upsert_operating_hours(
        db: Session,
        business_id: int,
        entries: List[OperatingHoursEntry]
    ) -> List[OperatingHours]:
        """
        Create or replace weekday rows for a business.

        Weekdays not present in ``entries`` are left untouched.

        Args:
            db: Database session
            business_id: Business ID
            entries: Weekday entries to write

        Returns:
            All weekday rows of the business after the write

        Raises:
            HTTPException: 400 on invalid entries, 500 if the write fails
        """
        OperatingHoursService.validate_entries(entries)

        rows = [
            {
                "business_id": business_id,
                "day_of_week": entry.day_of_week,
                # Closed days may keep their times for display; they're ignored by slot generation
                "open_time": entry.open_time,
                "close_time": entry.close_time,
                "is_closed": entry.is_closed,
            }
            for entry in entries
        ]

        try:
            upsert_rows(
                db, OperatingHours, rows,
                conflict_columns=["business_id", "day_of_week"],
                update_columns=["open_time", "close_time", "is_closed"],
            )
            db.commit()
        except SQLAlchemyError as e:
            logger.exception(f"Failed to save operating hours for business {business_id}: {e}")
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to save operating hours"
            )

        logger.info(f"Saved operating hours for business {business_id}: {len(rows)} weekday(s)")
        # Core upsert bypasses the identity map
        db.expire_all()
        return OperatingHoursService.get_operating_hours(db, business_id)
