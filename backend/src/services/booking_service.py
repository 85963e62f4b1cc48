"""
Booking service for appointment creation and status changes.

Booking creation runs as one transaction:
1. resolve the business and (optionally) the slot template;
2. reject the request if an active appointment already holds the same
   business/date/time;
3. reserve capacity with a conditional UPDATE that only succeeds while the
   counter is below its maximum;
4. insert the appointment.

A failure at any step rolls back the whole transaction, so counters and
appointments never drift apart. The partial unique index on appointments
catches a concurrent writer that passed step 2 at the same moment.
"""

import enum
import logging
import uuid
from datetime import date as date_type
from typing import List, Optional, TYPE_CHECKING

from fastapi import HTTPException, status
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from core.constants import (
    STATUS_PENDING, STATUS_APPROVED, STATUS_CANCELLED,
    APPOINTMENT_STATUSES, INACTIVE_APPOINTMENT_STATUSES, APPOINTMENT_STATUS_TRANSITIONS,
    BOOKING_FLOW_SLOT_SELECTION, BOOKING_FLOW_BUSINESS_SELECTION,
    DEFAULT_APPOINTMENT_TIME, BOOKING_CONFLICT_MESSAGE, REASON_SLOT_FULL, REASON_DAY_FULL,
)
from models import Appointment, Business, BusinessDayAvailability, DailySlotAvailability
from services.customer_slot_service import slot_unbookable_reason
from services.day_availability_service import check_day_bookable
from services.scheduling_types import AppointmentListItem
from services.slot_template_service import SlotTemplateService
from utils.business_queries import get_business_or_404

if TYPE_CHECKING:
    from auth.dependencies import ActorContext

logger = logging.getLogger(__name__)


class BookingFlow(str, enum.Enum):
    """How a customer reached the booking."""
    SLOT_SELECTION = BOOKING_FLOW_SLOT_SELECTION  # picked a specific slot
    BUSINESS_SELECTION = BOOKING_FLOW_BUSINESS_SELECTION  # picked a business and a date

    @property
    def initial_status(self) -> str:
        return STATUS_APPROVED if self is BookingFlow.SLOT_SELECTION else STATUS_PENDING


def _to_list_item(appointment: Appointment) -> AppointmentListItem:
    return AppointmentListItem(
        id=appointment.id,
        business_id=appointment.business_id,
        business_name=appointment.business.name,
        customer_id=appointment.customer_id,
        appointment_date=appointment.appointment_date,
        appointment_time=appointment.appointment_time,
        status=appointment.status,
        slot_id=appointment.appointment_time_slot_id,
        slot_name=appointment.slot_template.slot_name if appointment.slot_template else None,
        notes=appointment.notes,
    )


class BookingService:
    """
    Service class for booking operations.

    Contains booking creation, the appointment status state machine and
    appointment listing.
    """

    @staticmethod
    def create_booking(
        db: Session,
        business_id: int,
        customer_id: str,
        appointment_date: date_type,
        slot_id: Optional[uuid.UUID] = None,
        notes: Optional[str] = None,
        flow: BookingFlow = BookingFlow.SLOT_SELECTION
    ) -> Appointment:
        """
        Create an appointment and reserve its capacity atomically.

        Args:
            db: Database session
            business_id: Business ID
            customer_id: Customer's user id
            appointment_date: Date of the appointment
            slot_id: Slot template to book (required for slot selection)
            notes: Optional customer notes
            flow: Booking flow, decides which counters are reserved and the initial status

        Returns:
            Created Appointment

        Raises:
            HTTPException: 400 if a slot is required but missing, 404 if the
                business or slot doesn't exist, 409 if the time is taken or no
                capacity is left, 500 if the write fails
        """
        get_business_or_404(db, business_id)

        if flow is BookingFlow.SLOT_SELECTION and slot_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A time slot is required for this booking"
            )

        template = None
        if slot_id is not None:
            template = SlotTemplateService.get_template_for_business(db, business_id, slot_id)
            if template is None or not template.is_active:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Time slot not found"
                )

        appointment_time = template.start_time if template else DEFAULT_APPOINTMENT_TIME

        try:
            if BookingService._has_conflict(db, business_id, appointment_date, appointment_time):
                logger.warning(
                    f"Booking conflict for business {business_id} at {appointment_date} {appointment_time}"
                )
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=BOOKING_CONFLICT_MESSAGE
                )

            if flow is BookingFlow.SLOT_SELECTION:
                BookingService._reserve_slot(db, business_id, template.id, appointment_date)
            else:
                BookingService._reserve_day(db, business_id, appointment_date)
                if template is not None:
                    BookingService._reserve_slot(
                        db, business_id, template.id, appointment_date, tolerate_missing=True
                    )

            appointment = Appointment(
                id=uuid.uuid4(),
                business_id=business_id,
                customer_id=customer_id,
                appointment_date=appointment_date,
                appointment_time_slot_id=template.id if template else None,
                appointment_time=appointment_time,
                status=flow.initial_status,
                booking_flow=flow.value,
                notes=notes,
            )
            db.add(appointment)
            db.commit()
            # Counters were updated with Core statements
            db.expire_all()
            db.refresh(appointment)
        except HTTPException:
            db.rollback()
            raise
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Concurrent booking for business {business_id} at {appointment_date} {appointment_time}: {e}")
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=BOOKING_CONFLICT_MESSAGE
            )
        except SQLAlchemyError as e:
            logger.exception(f"Failed to create booking for business {business_id}: {e}")
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create appointment"
            )

        logger.info(
            f"Created appointment {appointment.id} for customer {customer_id} at business {business_id} "
            f"on {appointment_date} {appointment_time} ({flow.value}, {appointment.status})"
        )
        return appointment

    @staticmethod
    def update_appointment_status(
        db: Session,
        appointment_id: uuid.UUID,
        new_status: str,
        actor: "ActorContext"
    ) -> Appointment:
        """
        Move an appointment through its status lifecycle.

        The owner of the appointment's business may make any allowed
        transition; the customer who booked it may only cancel. Requesting
        the current status changes nothing. Cancelling releases the capacity
        the booking reserved.

        Args:
            db: Database session
            appointment_id: Appointment ID
            new_status: Target status
            actor: Authenticated actor

        Returns:
            The updated Appointment

        Raises:
            HTTPException: 400 on an unknown status or a disallowed transition,
                403 if the actor may not make the change, 404 if the
                appointment doesn't exist, 409 if it is being modified concurrently
        """
        if new_status not in APPOINTMENT_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown appointment status '{new_status}'"
            )

        try:
            appointment = db.query(Appointment).options(
                joinedload(Appointment.business)
            ).filter(
                Appointment.id == appointment_id
            ).with_for_update(of=Appointment, nowait=True).first()
        except OperationalError:
            # Lock held by another transaction
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="This appointment is being modified. Please try again shortly."
            )

        if not appointment:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Appointment not found"
            )

        is_owner = actor.owns(appointment.business)
        is_booking_customer = actor.is_customer() and appointment.customer_id == actor.user_id
        if not (is_owner or is_booking_customer):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can't change this appointment"
            )

        if appointment.status == new_status:
            return appointment

        allowed = APPOINTMENT_STATUS_TRANSITIONS.get(appointment.status, set())
        if new_status not in allowed:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Can't change an appointment from '{appointment.status}' to '{new_status}'"
            )

        if not is_owner and new_status != STATUS_CANCELLED:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Customers can only cancel appointments"
            )

        previous_status = appointment.status
        try:
            appointment.status = new_status
            if new_status == STATUS_CANCELLED:
                BookingService._release_capacity(db, appointment)
            db.commit()
            db.expire_all()
            db.refresh(appointment)
        except SQLAlchemyError as e:
            logger.exception(f"Failed to update appointment {appointment_id} status: {e}")
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to update appointment"
            )

        logger.info(
            f"Appointment {appointment_id}: {previous_status} -> {new_status} by {actor.role} {actor.user_id}"
        )
        return appointment

    @staticmethod
    def list_appointments(db: Session, actor: "ActorContext") -> List[AppointmentListItem]:
        """
        List the appointments an actor can see, newest date first.

        Customers see their own appointments; business owners see the
        appointments of every business they own.
        """
        query = db.query(Appointment).options(
            joinedload(Appointment.business),
            joinedload(Appointment.slot_template)
        )
        if actor.is_business_owner():
            query = query.join(Business, Appointment.business_id == Business.id).filter(
                Business.owner_id == actor.user_id
            )
        else:
            query = query.filter(Appointment.customer_id == actor.user_id)

        appointments = query.order_by(
            Appointment.appointment_date.desc(),
            Appointment.appointment_time.desc()
        ).all()
        return [_to_list_item(appointment) for appointment in appointments]

    @staticmethod
    def get_appointment(db: Session, appointment_id: uuid.UUID, actor: "ActorContext") -> AppointmentListItem:
        """
        Get one appointment visible to the actor.

        Raises:
            HTTPException: 404 if it doesn't exist or belongs to someone else
        """
        appointment = db.query(Appointment).options(
            joinedload(Appointment.business),
            joinedload(Appointment.slot_template)
        ).filter(Appointment.id == appointment_id).first()

        if appointment is not None:
            if actor.owns(appointment.business):
                return _to_list_item(appointment)
            if actor.is_customer() and appointment.customer_id == actor.user_id:
                return _to_list_item(appointment)

        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appointment not found"
        )

    @staticmethod
    def _has_conflict(db: Session, business_id: int, appointment_date: date_type, appointment_time) -> bool:
        return db.query(Appointment.id).filter(
            Appointment.business_id == business_id,
            Appointment.appointment_date == appointment_date,
            Appointment.appointment_time == appointment_time,
            Appointment.status.notin_(INACTIVE_APPOINTMENT_STATUSES)
        ).first() is not None

    @staticmethod
    def _reserve_slot(
        db: Session,
        business_id: int,
        slot_id: uuid.UUID,
        appointment_date: date_type,
        tolerate_missing: bool = False
    ) -> bool:
        """
        Take one unit of a slot's capacity for a date.

        Returns:
            True if reserved, False if the slot has no daily row and
            ``tolerate_missing`` is set

        Raises:
            HTTPException: 409 with the reason the slot can't be booked
        """
        result = db.execute(
            update(DailySlotAvailability)
            .where(
                DailySlotAvailability.business_id == business_id,
                DailySlotAvailability.slot_id == slot_id,
                DailySlotAvailability.date == appointment_date,
                DailySlotAvailability.is_available == True,
                DailySlotAvailability.current_appointments_in_slot < DailySlotAvailability.max_appointments_in_slot
            )
            .values(current_appointments_in_slot=DailySlotAvailability.current_appointments_in_slot + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return True

        row = db.query(DailySlotAvailability).populate_existing().filter(
            DailySlotAvailability.business_id == business_id,
            DailySlotAvailability.slot_id == slot_id,
            DailySlotAvailability.date == appointment_date
        ).first()
        if row is None and tolerate_missing:
            logger.warning(
                f"Slot {slot_id} has no daily availability on {appointment_date}; "
                f"booking against the day only"
            )
            return False

        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=slot_unbookable_reason(row) or REASON_SLOT_FULL
        )

    @staticmethod
    def _reserve_day(db: Session, business_id: int, appointment_date: date_type) -> None:
        """
        Take one unit of a business's daily cap.

        Raises:
            HTTPException: 409 with the reason the day can't be booked
        """
        result = db.execute(
            update(BusinessDayAvailability)
            .where(
                BusinessDayAvailability.business_id == business_id,
                BusinessDayAvailability.date == appointment_date,
                BusinessDayAvailability.is_open == True,
                BusinessDayAvailability.current_appointments_count < BusinessDayAvailability.max_appointments_per_day
            )
            .values(current_appointments_count=BusinessDayAvailability.current_appointments_count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return

        row = db.query(BusinessDayAvailability).populate_existing().filter(
            BusinessDayAvailability.business_id == business_id,
            BusinessDayAvailability.date == appointment_date
        ).first()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=check_day_bookable(row) or REASON_DAY_FULL
        )

    @staticmethod
    def _release_capacity(db: Session, appointment: Appointment) -> None:
        """Give back the capacity a booking reserved; counters never go below zero."""
        if appointment.appointment_time_slot_id is not None:
            db.execute(
                update(DailySlotAvailability)
                .where(
                    DailySlotAvailability.business_id == appointment.business_id,
                    DailySlotAvailability.slot_id == appointment.appointment_time_slot_id,
                    DailySlotAvailability.date == appointment.appointment_date,
                    DailySlotAvailability.current_appointments_in_slot > 0
                )
                .values(current_appointments_in_slot=DailySlotAvailability.current_appointments_in_slot - 1)
                .execution_options(synchronize_session=False)
            )

        if appointment.booking_flow == BOOKING_FLOW_BUSINESS_SELECTION:
            db.execute(
                update(BusinessDayAvailability)
                .where(
                    BusinessDayAvailability.business_id == appointment.business_id,
                    BusinessDayAvailability.date == appointment.appointment_date,
                    BusinessDayAvailability.current_appointments_count > 0
                )
                .values(current_appointments_count=BusinessDayAvailability.current_appointments_count - 1)
                .execution_options(synchronize_session=False)
            )
