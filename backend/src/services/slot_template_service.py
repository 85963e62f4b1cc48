"""
Slot template service.

Produces the base slots of a business for a given date and manages the
persisted slot templates themselves.

Base slots come from one of two sources:
- the business's active slot templates, when any exist (always preferred);
- otherwise, drafts synthesized from the operating hours of the date's
  weekday by walking from opening time in fixed-duration steps.

Drafts are not stored here. They carry ``id = None`` and
``is_new_template = True`` until the owner saves the day.
"""

import logging
from datetime import date as date_type, time
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.config import DEFAULT_SLOT_DURATION_MINUTES
from core.constants import (
    DEFAULT_SLOT_CAPACITY,
    REASON_NO_OPERATING_HOURS, REASON_DAY_CLOSED, REASON_INCOMPLETE_HOURS,
    REASON_NO_SLOTS_FIT, REASON_HOURS_LOOKUP_FAILED,
)
from models import SlotTemplate
from services.operating_hours_service import OperatingHoursService
from services.scheduling_types import DisplaySlot, SlotGenerationResult
from utils.datetime_utils import add_minutes, format_slot_label, minutes_between, sunday_based_weekday

logger = logging.getLogger(__name__)


def synthesize_slots(open_time: time, close_time: time, duration_minutes: int) -> List[DisplaySlot]:
    """
    Split an operating window into consecutive fixed-length draft slots.

    A trailing interval shorter than ``duration_minutes`` is dropped, so no
    slot ends after ``close_time``. An empty or inverted window yields [].

    Args:
        open_time: Opening time
        close_time: Closing time
        duration_minutes: Length of every slot

    Returns:
        Draft slots in ascending start order

    Raises:
        ValueError: If duration_minutes is not positive
    """
    if duration_minutes <= 0:
        raise ValueError(f"Slot duration must be positive, got {duration_minutes}")

    slots: List[DisplaySlot] = []
    start = open_time
    while True:
        end = add_minutes(start, duration_minutes)
        if end is None or end > close_time:
            break
        slots.append(DisplaySlot(
            slot_name=format_slot_label(start, end),
            start_time=start,
            end_time=end,
            duration_minutes=duration_minutes,
            id=None,
            max_appointments=DEFAULT_SLOT_CAPACITY,
            is_new_template=True,
        ))
        start = end
    return slots


def template_to_display_slot(template: SlotTemplate) -> DisplaySlot:
    """Convert a persisted template into a display slot with default daily state."""
    return DisplaySlot(
        slot_name=template.slot_name,
        start_time=template.start_time,
        end_time=template.end_time,
        duration_minutes=template.duration_minutes,
        id=template.id,
        max_appointments=template.max_concurrent_appointments or DEFAULT_SLOT_CAPACITY,
        is_new_template=False,
    )


class SlotTemplateService:
    """
    Service class for slot template operations.

    Contains the slot generation algorithm and owner template management.
    """

    @staticmethod
    def list_slot_templates(db: Session, business_id: int, include_inactive: bool = False) -> List[SlotTemplate]:
        """
        List a business's slot templates ordered by start time.

        Args:
            db: Database session
            business_id: Business ID
            include_inactive: Also return deactivated templates

        Returns:
            List of SlotTemplate rows
        """
        query = db.query(SlotTemplate).filter(SlotTemplate.business_id == business_id)
        if not include_inactive:
            query = query.filter(SlotTemplate.is_active == True)
        return query.order_by(SlotTemplate.start_time, SlotTemplate.slot_name).all()

    @staticmethod
    def get_template_for_business(db: Session, business_id: int, slot_id) -> Optional[SlotTemplate]:
        """Get a template by id, only if it belongs to the business."""
        return db.query(SlotTemplate).filter(
            SlotTemplate.id == slot_id,
            SlotTemplate.business_id == business_id
        ).first()

    @staticmethod
    def find_active_template(db: Session, business_id: int, slot_name: str, start_time: time) -> Optional[SlotTemplate]:
        """Find the active template with this name and start time, if one exists."""
        return db.query(SlotTemplate).filter(
            SlotTemplate.business_id == business_id,
            SlotTemplate.slot_name == slot_name,
            SlotTemplate.start_time == start_time,
            SlotTemplate.is_active == True
        ).first()

    @staticmethod
    def generate_slots_for_date(
        db: Session,
        business_id: int,
        target_date: date_type,
        duration_minutes: int = DEFAULT_SLOT_DURATION_MINUTES
    ) -> SlotGenerationResult:
        """
        Produce the ordered base slots of a business for a date.

        Explicit active templates win over operating hours. Missing or
        unusable operating hours are not errors: the result is empty and
        ``empty_reason`` says why.

        Args:
            db: Database session
            business_id: Business ID
            target_date: Date to generate slots for
            duration_minutes: Length of synthesized slots

        Returns:
            SlotGenerationResult with slots ascending by start time
        """
        templates = SlotTemplateService.list_slot_templates(db, business_id)
        if templates:
            return SlotGenerationResult(slots=[template_to_display_slot(t) for t in templates])

        day_of_week = sunday_based_weekday(target_date)
        try:
            hours = OperatingHoursService.get_hours_for_weekday(db, business_id, day_of_week)
        except SQLAlchemyError as e:
            logger.exception(f"Failed to load operating hours for business {business_id}, day {day_of_week}: {e}")
            db.rollback()
            return SlotGenerationResult(empty_reason=REASON_HOURS_LOOKUP_FAILED)

        if hours is None:
            return SlotGenerationResult(empty_reason=REASON_NO_OPERATING_HOURS)
        if hours.is_closed:
            return SlotGenerationResult(empty_reason=REASON_DAY_CLOSED)
        if not hours.has_complete_hours:
            return SlotGenerationResult(empty_reason=REASON_INCOMPLETE_HOURS)

        slots = synthesize_slots(hours.open_time, hours.close_time, duration_minutes)
        if not slots:
            return SlotGenerationResult(empty_reason=REASON_NO_SLOTS_FIT)
        return SlotGenerationResult(slots=slots)

    @staticmethod
    def create_slot_template(
        db: Session,
        business_id: int,
        start_time: time,
        end_time: time,
        slot_name: Optional[str] = None,
        max_concurrent_appointments: int = DEFAULT_SLOT_CAPACITY
    ) -> SlotTemplate:
        """
        Create a slot template for a business.

        ``duration_minutes`` is always derived from the times.

        Args:
            db: Database session
            business_id: Business ID
            start_time: Start of the slot
            end_time: End of the slot
            slot_name: Display label (defaults to "HH:MM - HH:MM")
            max_concurrent_appointments: Default capacity per date

        Returns:
            Created SlotTemplate

        Raises:
            HTTPException: 400 on invalid times or capacity, 409 if an active
                template with the same name exists
        """
        if start_time >= end_time:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="start_time must be before end_time"
            )
        if max_concurrent_appointments < 1:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="max_concurrent_appointments must be at least 1"
            )

        name = slot_name or format_slot_label(start_time, end_time)
        SlotTemplateService._ensure_name_available(db, business_id, name)

        template = SlotTemplate(
            business_id=business_id,
            slot_name=name,
            start_time=start_time,
            end_time=end_time,
            duration_minutes=minutes_between(start_time, end_time),
            max_concurrent_appointments=max_concurrent_appointments,
            is_active=True,
        )

        try:
            db.add(template)
            db.commit()
            db.refresh(template)
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Slot template insert rejected for business {business_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Slot template conflicts with an existing one"
            )
        except SQLAlchemyError as e:
            logger.exception(f"Failed to create slot template for business {business_id}: {e}")
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create slot template"
            )

        logger.info(f"Created slot template {template.id} '{name}' for business {business_id}")
        return template

    @staticmethod
    def update_slot_template(
        db: Session,
        business_id: int,
        slot_id,
        max_concurrent_appointments: Optional[int] = None,
        is_active: Optional[bool] = None,
        slot_name: Optional[str] = None
    ) -> SlotTemplate:
        """
        Update capacity, activation or label of a slot template.

        Raises:
            HTTPException: 404 if the template doesn't belong to the business,
                400 on invalid capacity, 409 on a duplicate active name
        """
        template = SlotTemplateService.get_template_for_business(db, business_id, slot_id)
        if not template:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Slot template not found"
            )

        if max_concurrent_appointments is not None:
            if max_concurrent_appointments < 1:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="max_concurrent_appointments must be at least 1"
                )
            template.max_concurrent_appointments = max_concurrent_appointments

        if slot_name is not None and slot_name != template.slot_name:
            SlotTemplateService._ensure_name_available(db, business_id, slot_name, exclude_id=template.id)
            template.slot_name = slot_name

        if is_active is not None:
            template.is_active = is_active

        try:
            db.commit()
            db.refresh(template)
        except SQLAlchemyError as e:
            logger.exception(f"Failed to update slot template {slot_id}: {e}")
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to update slot template"
            )

        logger.info(f"Updated slot template {template.id} for business {business_id}")
        return template

    @staticmethod
    def _ensure_name_available(db: Session, business_id: int, slot_name: str, exclude_id=None) -> None:
        query = db.query(SlotTemplate).filter(
            SlotTemplate.business_id == business_id,
            SlotTemplate.slot_name == slot_name,
            SlotTemplate.is_active == True
        )
        if exclude_id is not None:
            query = query.filter(SlotTemplate.id != exclude_id)
        if query.first():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"An active slot named '{slot_name}' already exists"
            )
