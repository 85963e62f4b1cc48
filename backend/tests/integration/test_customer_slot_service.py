"""
Integration tests for the customer's view of bookable slots.
"""

from datetime import time

from core.constants import (
    REASON_NO_ACTIVE_SLOTS, REASON_SLOT_NOT_OPENED, REASON_SLOT_CLOSED, REASON_SLOT_FULL,
)
from models import DailySlotAvailability
from services.customer_slot_service import CustomerSlotService, slot_unbookable_reason
from services.slot_template_service import SlotTemplateService
from tests.conftest import MONDAY


def _open(db_session, business_id, template, is_available=True, max_appointments=1, current=0):
    db_session.add(DailySlotAvailability(
        business_id=business_id, slot_id=template.id, date=MONDAY,
        is_available=is_available, max_appointments_in_slot=max_appointments,
        current_appointments_in_slot=current
    ))
    db_session.commit()


class TestGetBookableSlots:

    def test_drafts_are_never_shown(self, db_session, weekday_business):
        view = CustomerSlotService.get_bookable_slots(db_session, weekday_business.id, MONDAY)

        assert view.slots == []
        assert view.empty_reason == REASON_NO_ACTIVE_SLOTS

    def test_reason_for_each_state(self, db_session, business):
        not_opened = SlotTemplateService.create_slot_template(db_session, business.id, time(9, 0), time(10, 0))
        closed = SlotTemplateService.create_slot_template(db_session, business.id, time(10, 0), time(11, 0))
        full = SlotTemplateService.create_slot_template(db_session, business.id, time(11, 0), time(12, 0))
        free = SlotTemplateService.create_slot_template(db_session, business.id, time(12, 0), time(13, 0))
        _open(db_session, business.id, closed, is_available=False)
        _open(db_session, business.id, full, max_appointments=2, current=2)
        _open(db_session, business.id, free, max_appointments=2, current=1)

        view = CustomerSlotService.get_bookable_slots(db_session, business.id, MONDAY)
        by_id = {slot.id: slot for slot in view.slots}

        assert by_id[not_opened.id].reason_not_bookable == REASON_SLOT_NOT_OPENED
        assert by_id[closed.id].reason_not_bookable == REASON_SLOT_CLOSED
        assert by_id[full.id].reason_not_bookable == REASON_SLOT_FULL
        assert by_id[free.id].is_bookable is True
        assert by_id[free.id].reason_not_bookable is None
        assert by_id[free.id].current_appointments == 1
        assert view.bookable_slots == [by_id[free.id]]

    def test_slots_ordered_by_start_time(self, db_session, business):
        SlotTemplateService.create_slot_template(db_session, business.id, time(15, 0), time(16, 0))
        SlotTemplateService.create_slot_template(db_session, business.id, time(8, 0), time(9, 0))

        view = CustomerSlotService.get_bookable_slots(db_session, business.id, MONDAY)

        assert [slot.start_time for slot in view.slots] == [time(8, 0), time(15, 0)]

    def test_inactive_templates_hidden(self, db_session, business):
        template = SlotTemplateService.create_slot_template(db_session, business.id, time(9, 0), time(10, 0))
        _open(db_session, business.id, template)
        SlotTemplateService.update_slot_template(db_session, business.id, template.id, is_active=False)

        view = CustomerSlotService.get_bookable_slots(db_session, business.id, MONDAY)

        assert view.slots == []
        assert view.empty_reason == REASON_NO_ACTIVE_SLOTS


class TestSlotUnbookableReason:

    def test_unflushed_row_counts_as_empty(self):
        row = DailySlotAvailability(is_available=True, max_appointments_in_slot=1)

        assert row.current_appointments_in_slot is None
        assert row.is_full is False
        assert slot_unbookable_reason(row) is None

    def test_full_row(self):
        row = DailySlotAvailability(is_available=True, max_appointments_in_slot=2, current_appointments_in_slot=2)

        assert row.is_full is True
        assert slot_unbookable_reason(row) == REASON_SLOT_FULL

    def test_closed_reported_before_full(self):
        row = DailySlotAvailability(is_available=False, max_appointments_in_slot=1, current_appointments_in_slot=1)

        assert slot_unbookable_reason(row) == REASON_SLOT_CLOSED
