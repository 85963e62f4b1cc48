"""
Daily availability reconciler for the business owner.

Loading a day merges the base slots (templates or synthesized drafts) with
the per-date DailySlotAvailability rows. Saving a day first materializes any
drafts as templates and then upserts one daily row per slot. Both phases
share one transaction, so a failed save leaves nothing behind.
"""

import logging
import uuid
from datetime import date as date_type
from typing import Dict, List, Tuple

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.config import DEFAULT_SLOT_DURATION_MINUTES
from core.constants import DEFAULT_SLOT_CAPACITY
from models import SlotTemplate, DailySlotAvailability
from services.scheduling_types import DisplaySlot, OwnerDayView, SaveDaySlotsResult
from services.slot_template_service import SlotTemplateService
from utils.datetime_utils import minutes_between
from utils.query_helpers import upsert_rows

logger = logging.getLogger(__name__)


class SlotAvailabilityService:
    """
    Service class for the owner's per-day slot availability.

    Contains the load/toggle/save cycle of the owner day view.
    """

    @staticmethod
    def load_day_slots(
        db: Session,
        business_id: int,
        target_date: date_type,
        duration_minutes: int = DEFAULT_SLOT_DURATION_MINUTES
    ) -> OwnerDayView:
        """
        Load the owner's view of a day.

        A daily row, when present, overrides the template's defaults. Slots
        without a row are shown available with the template's capacity and
        zero bookings.

        Args:
            db: Database session
            business_id: Business ID
            target_date: Date being edited
            duration_minutes: Length of synthesized draft slots

        Returns:
            OwnerDayView with slots ordered by start time

        Raises:
            HTTPException: 500 if daily rows can't be loaded
        """
        generated = SlotTemplateService.generate_slots_for_date(db, business_id, target_date, duration_minutes)
        if not generated.slots:
            return OwnerDayView(date=target_date, empty_reason=generated.empty_reason)

        persisted_ids = [slot.id for slot in generated.slots if slot.id is not None]
        rows_by_slot: Dict[uuid.UUID, DailySlotAvailability] = {}
        if persisted_ids:
            try:
                rows = db.query(DailySlotAvailability).filter(
                    DailySlotAvailability.business_id == business_id,
                    DailySlotAvailability.date == target_date,
                    DailySlotAvailability.slot_id.in_(persisted_ids)
                ).all()
            except SQLAlchemyError as e:
                logger.exception(f"Failed to load daily availability for business {business_id} on {target_date}: {e}")
                db.rollback()
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Failed to load slot availability"
                )
            rows_by_slot = {row.slot_id: row for row in rows}

        slots = []
        for slot in generated.slots:
            row = rows_by_slot.get(slot.id) if slot.id is not None else None
            if row is None:
                slots.append(slot)
                continue
            slots.append(DisplaySlot(
                slot_name=slot.slot_name,
                start_time=slot.start_time,
                end_time=slot.end_time,
                duration_minutes=slot.duration_minutes,
                id=slot.id,
                max_appointments=row.max_appointments_in_slot or slot.max_appointments or DEFAULT_SLOT_CAPACITY,
                current_appointments=row.current_appointments_in_slot or 0,
                is_available=row.is_available,
                is_new_template=False,
            ))

        return OwnerDayView(date=target_date, slots=slots)

    @staticmethod
    def toggle_slot_availability(slots: List[DisplaySlot], slot_name: str) -> List[DisplaySlot]:
        """
        Flip the availability of the slot named ``slot_name``.

        Pure: returns a new list and writes nothing. Unknown names leave the
        list unchanged.
        """
        return [
            slot.with_availability(not slot.is_available) if slot.slot_name == slot_name else slot
            for slot in slots
        ]

    @staticmethod
    def save_day_slots(
        db: Session,
        business_id: int,
        target_date: date_type,
        slots: List[DisplaySlot]
    ) -> SaveDaySlotsResult:
        """
        Persist the owner's edits for a day.

        Drafts (slots without an id) become templates first. Each draft gets
        its UUID before insert so its daily row is written against exactly
        that template; a draft matching an existing active template by name
        and start time reuses it instead. Daily rows are then upserted on
        (business_id, slot_id, date) with availability and capacity; the
        live booking count is never overwritten.

        Args:
            db: Database session
            business_id: Business ID
            target_date: Date being saved
            slots: The full edited day, as returned by load_day_slots

        Returns:
            SaveDaySlotsResult listing created templates, saved slots and skipped slots

        Raises:
            HTTPException: 400 on invalid slots, 409 if a draft reuses an active
                slot name or a capacity is below the bookings already taken,
                500 if the write fails
        """
        for slot in slots:
            if slot.max_appointments < 1:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Capacity of '{slot.slot_name}' must be at least 1"
                )
            if slot.start_time >= slot.end_time:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Slot '{slot.slot_name}' must start before it ends"
                )

        result = SaveDaySlotsResult(date=target_date)

        try:
            resolved = SlotAvailabilityService._resolve_slot_ids(db, business_id, slots, result)
            SlotAvailabilityService._check_capacity_against_bookings(db, business_id, target_date, resolved)

            # Drafts must exist before their daily rows reference them
            db.flush()

            rows = [
                {
                    "id": uuid.uuid4(),
                    "business_id": business_id,
                    "slot_id": slot_id,
                    "date": target_date,
                    "is_available": slot.is_available,
                    "max_appointments_in_slot": slot.max_appointments,
                    "current_appointments_in_slot": 0,
                }
                for slot_id, slot in resolved
            ]
            upsert_rows(
                db, DailySlotAvailability, rows,
                conflict_columns=["business_id", "slot_id", "date"],
                update_columns=["is_available", "max_appointments_in_slot"],
            )
            db.commit()
        except HTTPException:
            db.rollback()
            raise
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Save of {target_date} for business {business_id} conflicted with a concurrent write: {e}")
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Slots changed while saving. Please reload and try again."
            )
        except SQLAlchemyError as e:
            logger.exception(f"Failed to save slots for business {business_id} on {target_date}: {e}")
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to save slot availability"
            )

        # Core upsert bypasses the identity map
        db.expire_all()
        result.saved_slot_ids = [slot_id for slot_id, _ in resolved]
        logger.info(
            f"Saved {len(resolved)} slot(s) for business {business_id} on {target_date} "
            f"({len(result.created_template_ids)} new template(s), {len(result.skipped_slot_names)} skipped)"
        )
        return result

    @staticmethod
    def _resolve_slot_ids(
        db: Session,
        business_id: int,
        slots: List[DisplaySlot],
        result: SaveDaySlotsResult
    ) -> List[Tuple[uuid.UUID, DisplaySlot]]:
        """Map every slot to a template id of the business, adding templates for drafts."""
        resolved: List[Tuple[uuid.UUID, DisplaySlot]] = []
        drafts_by_key: Dict[tuple, uuid.UUID] = {}
        draft_names = set()
        seen_ids = set()

        for slot in slots:
            if slot.id is not None:
                template = SlotTemplateService.get_template_for_business(db, business_id, slot.id)
                if template is None:
                    logger.warning(f"Skipping slot '{slot.slot_name}': template {slot.id} not found for business {business_id}")
                    result.skipped_slot_names.append(slot.slot_name)
                    continue
                slot_id = template.id
            else:
                key = (slot.slot_name, slot.start_time)
                if key in drafts_by_key:
                    slot_id = drafts_by_key[key]
                else:
                    existing = SlotTemplateService.find_active_template(db, business_id, slot.slot_name, slot.start_time)
                    if existing is not None:
                        slot_id = existing.id
                    else:
                        # Pending drafts are not visible to the name query
                        if slot.slot_name in draft_names:
                            raise HTTPException(
                                status_code=status.HTTP_409_CONFLICT,
                                detail=f"An active slot named '{slot.slot_name}' already exists"
                            )
                        SlotTemplateService._ensure_name_available(db, business_id, slot.slot_name)
                        draft_names.add(slot.slot_name)
                        slot_id = uuid.uuid4()
                        db.add(SlotTemplate(
                            id=slot_id,
                            business_id=business_id,
                            slot_name=slot.slot_name,
                            start_time=slot.start_time,
                            end_time=slot.end_time,
                            duration_minutes=minutes_between(slot.start_time, slot.end_time),
                            max_concurrent_appointments=slot.max_appointments,
                            is_active=True,
                        ))
                        result.created_template_ids.append(slot_id)
                    drafts_by_key[key] = slot_id

            if slot_id in seen_ids:
                # Last edit of a slot sent twice wins
                resolved = [(sid, s) for sid, s in resolved if sid != slot_id]
            seen_ids.add(slot_id)
            resolved.append((slot_id, slot))

        return resolved

    @staticmethod
    def _check_capacity_against_bookings(
        db: Session,
        business_id: int,
        target_date: date_type,
        resolved: List[Tuple[uuid.UUID, DisplaySlot]]
    ) -> None:
        if not resolved:
            return
        rows = db.query(DailySlotAvailability).filter(
            DailySlotAvailability.business_id == business_id,
            DailySlotAvailability.date == target_date,
            DailySlotAvailability.slot_id.in_([slot_id for slot_id, _ in resolved])
        ).all()
        current_by_slot = {row.slot_id: row.current_appointments_in_slot or 0 for row in rows}

        for slot_id, slot in resolved:
            current = current_by_slot.get(slot_id, 0)
            if slot.max_appointments < current:
                logger.warning(
                    f"Rejected capacity {slot.max_appointments} for '{slot.slot_name}' on {target_date}: "
                    f"{current} appointment(s) already booked"
                )
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=(
                        f"Capacity of '{slot.slot_name}' can't be lower than the "
                        f"{current} appointment(s) already booked"
                    )
                )
