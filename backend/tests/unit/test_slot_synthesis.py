"""
Unit tests for slot synthesis and the owner's availability toggle.

Both are pure functions and need no database.
"""

import pytest
from datetime import time

from services.scheduling_types import DisplaySlot
from services.slot_availability_service import SlotAvailabilityService
from services.slot_template_service import synthesize_slots


class TestSynthesizeSlots:
    """Test splitting an operating window into fixed-length slots."""

    def test_full_day_of_hourly_slots(self):
        slots = synthesize_slots(time(9, 0), time(17, 0), 60)

        assert len(slots) == 8
        assert slots[0].slot_name == "09:00 - 10:00"
        assert slots[-1].slot_name == "16:00 - 17:00"
        for slot in slots:
            assert slot.id is None
            assert slot.is_new_template is True
            assert slot.max_appointments == 1
            assert slot.duration_minutes == 60
            assert slot.is_available is True

    def test_slots_are_contiguous_and_ascending(self):
        slots = synthesize_slots(time(8, 0), time(12, 0), 45)

        for previous, current in zip(slots, slots[1:]):
            assert previous.end_time == current.start_time
            assert previous.start_time < current.start_time

    def test_trailing_partial_slot_is_dropped(self):
        slots = synthesize_slots(time(9, 0), time(11, 30), 60)

        assert [s.slot_name for s in slots] == ["09:00 - 10:00", "10:00 - 11:00"]
        assert all(s.end_time <= time(11, 30) for s in slots)

    def test_window_shorter_than_duration_yields_nothing(self):
        assert synthesize_slots(time(9, 0), time(9, 30), 60) == []

    def test_inverted_window_yields_nothing(self):
        assert synthesize_slots(time(17, 0), time(9, 0), 60) == []

    def test_equal_open_and_close_yields_nothing(self):
        assert synthesize_slots(time(9, 0), time(9, 0), 30) == []

    def test_window_ending_at_midnight_boundary(self):
        slots = synthesize_slots(time(22, 0), time(23, 59), 60)

        assert [s.slot_name for s in slots] == ["22:00 - 23:00"]

    @pytest.mark.parametrize("duration", [0, -30])
    def test_non_positive_duration_rejected(self, duration):
        with pytest.raises(ValueError):
            synthesize_slots(time(9, 0), time(17, 0), duration)

    @pytest.mark.parametrize("open_hour,close_hour,duration,expected", [
        (9, 17, 60, 8),
        (9, 17, 30, 16),
        (9, 17, 90, 5),
        (0, 23, 120, 11),
    ])
    def test_slot_count_is_floor_of_window_over_duration(self, open_hour, close_hour, duration, expected):
        slots = synthesize_slots(time(open_hour, 0), time(close_hour, 0), duration)
        assert len(slots) == expected


class TestToggleSlotAvailability:
    """Test flipping a slot's availability without touching storage."""

    def _slots(self):
        return synthesize_slots(time(9, 0), time(12, 0), 60)

    def test_toggle_flips_only_named_slot(self):
        slots = self._slots()

        toggled = SlotAvailabilityService.toggle_slot_availability(slots, "10:00 - 11:00")

        assert [s.is_available for s in toggled] == [True, False, True]

    def test_toggle_returns_new_list_and_leaves_input_untouched(self):
        slots = self._slots()

        toggled = SlotAvailabilityService.toggle_slot_availability(slots, "09:00 - 10:00")

        assert toggled is not slots
        assert slots[0].is_available is True
        assert toggled[0] is not slots[0]

    def test_toggle_twice_restores_availability(self):
        slots = self._slots()

        once = SlotAvailabilityService.toggle_slot_availability(slots, "11:00 - 12:00")
        twice = SlotAvailabilityService.toggle_slot_availability(once, "11:00 - 12:00")

        assert [s.is_available for s in twice] == [True, True, True]

    def test_toggle_unknown_name_changes_nothing(self):
        slots = self._slots()

        toggled = SlotAvailabilityService.toggle_slot_availability(slots, "18:00 - 19:00")

        assert toggled == slots

    def test_toggle_keeps_other_fields(self):
        slot = DisplaySlot(
            slot_name="Morning", start_time=time(9, 0), end_time=time(12, 0),
            duration_minutes=180, max_appointments=3, current_appointments=2,
        )

        toggled = SlotAvailabilityService.toggle_slot_availability([slot], "Morning")[0]

        assert toggled.is_available is False
        assert toggled.max_appointments == 3
        assert toggled.current_appointments == 2
        assert toggled.duration_minutes == 180
