"""
Integration tests for day-level availability.
"""

import pytest
from datetime import timedelta
from fastapi import HTTPException

from core.constants import REASON_DAY_NOT_PUBLISHED, REASON_DAY_MARKED_CLOSED, REASON_DAY_FULL
from services.day_availability_service import DayAvailabilityService, check_day_bookable
from tests.conftest import MONDAY


class TestSetDayAvailability:

    def test_creates_row_with_zero_count(self, db_session, business):
        row = DayAvailabilityService.set_day_availability(
            db_session, business.id, MONDAY, is_open=True, max_appointments_per_day=3
        )

        assert row.is_open is True
        assert row.max_appointments_per_day == 3
        assert row.current_appointments_count == 0

    def test_update_preserves_live_count(self, db_session, business):
        row = DayAvailabilityService.set_day_availability(db_session, business.id, MONDAY, is_open=True)
        row.current_appointments_count = 2
        db_session.commit()

        updated = DayAvailabilityService.set_day_availability(
            db_session, business.id, MONDAY, is_open=False, max_appointments_per_day=4
        )

        assert updated.is_open is False
        assert updated.max_appointments_per_day == 4
        assert updated.current_appointments_count == 2

    def test_cap_below_live_count_conflicts(self, db_session, business):
        row = DayAvailabilityService.set_day_availability(db_session, business.id, MONDAY, is_open=True)
        row.current_appointments_count = 3
        db_session.commit()

        with pytest.raises(HTTPException) as exc_info:
            DayAvailabilityService.set_day_availability(
                db_session, business.id, MONDAY, is_open=True, max_appointments_per_day=2
            )
        assert exc_info.value.status_code == 409

    def test_cap_below_one_rejected(self, db_session, business):
        with pytest.raises(HTTPException) as exc_info:
            DayAvailabilityService.set_day_availability(
                db_session, business.id, MONDAY, is_open=True, max_appointments_per_day=0
            )
        assert exc_info.value.status_code == 400
        assert DayAvailabilityService.get_day_availability(db_session, business.id, MONDAY) is None

    def test_list_from_date(self, db_session, business):
        for offset in (2, 0, 1):
            DayAvailabilityService.set_day_availability(
                db_session, business.id, MONDAY + timedelta(days=offset), is_open=True
            )

        rows = DayAvailabilityService.list_day_availability(db_session, business.id, MONDAY + timedelta(days=1))

        assert [row.date for row in rows] == [MONDAY + timedelta(days=1), MONDAY + timedelta(days=2)]


class TestCheckDayBookable:

    def test_reasons(self, db_session, business):
        assert check_day_bookable(None) == REASON_DAY_NOT_PUBLISHED

        row = DayAvailabilityService.set_day_availability(
            db_session, business.id, MONDAY, is_open=False, max_appointments_per_day=1
        )
        assert check_day_bookable(row) == REASON_DAY_MARKED_CLOSED

        row = DayAvailabilityService.set_day_availability(
            db_session, business.id, MONDAY, is_open=True, max_appointments_per_day=1
        )
        assert check_day_bookable(row) is None

        row.current_appointments_count = 1
        assert check_day_bookable(row) == REASON_DAY_FULL
