"""
End-to-end scheduling scenario across the services.

An owner with Monday-Friday 09:00-17:00 hours opens a Monday, closes the
lunch hour, and a customer books the 10:00 slot.
"""

from core.constants import REASON_SLOT_CLOSED, REASON_SLOT_FULL, STATUS_APPROVED
from services.booking_service import BookingService
from services.customer_slot_service import CustomerSlotService
from services.slot_availability_service import SlotAvailabilityService
from tests.conftest import MONDAY, CUSTOMER_ID


def test_owner_opens_day_and_customer_books(db_session, weekday_business):
    business_id = weekday_business.id

    # Owner loads an unsaved Monday: eight hourly drafts
    view = SlotAvailabilityService.load_day_slots(db_session, business_id, MONDAY)
    assert [slot.slot_name for slot in view.slots] == [
        "09:00 - 10:00", "10:00 - 11:00", "11:00 - 12:00", "12:00 - 13:00",
        "13:00 - 14:00", "14:00 - 15:00", "15:00 - 16:00", "16:00 - 17:00",
    ]

    # Close lunch and save
    edited = SlotAvailabilityService.toggle_slot_availability(view.slots, "13:00 - 14:00")
    SlotAvailabilityService.save_day_slots(db_session, business_id, MONDAY, edited)

    # Customer sees seven bookable slots; lunch is closed
    customer_view = CustomerSlotService.get_bookable_slots(db_session, business_id, MONDAY)
    assert len(customer_view.slots) == 8
    assert len(customer_view.bookable_slots) == 7
    lunch = next(slot for slot in customer_view.slots if slot.slot_name == "13:00 - 14:00")
    assert lunch.reason_not_bookable == REASON_SLOT_CLOSED

    # Customer books 10:00
    ten = next(slot for slot in customer_view.slots if slot.slot_name == "10:00 - 11:00")
    appointment = BookingService.create_booking(db_session, business_id, CUSTOMER_ID, MONDAY, slot_id=ten.id)
    assert appointment.status == STATUS_APPROVED

    # 10:00 is now 1/1 and no longer bookable, for customers and in the owner view
    db_session.expire_all()
    customer_view = CustomerSlotService.get_bookable_slots(db_session, business_id, MONDAY)
    ten = next(slot for slot in customer_view.slots if slot.slot_name == "10:00 - 11:00")
    assert ten.current_appointments == 1
    assert ten.max_appointments == 1
    assert ten.reason_not_bookable == REASON_SLOT_FULL
    assert len(customer_view.bookable_slots) == 6

    owner_view = SlotAvailabilityService.load_day_slots(db_session, business_id, MONDAY)
    owner_ten = next(slot for slot in owner_view.slots if slot.slot_name == "10:00 - 11:00")
    assert owner_ten.current_appointments == 1
