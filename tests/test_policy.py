from datetime import datetime

import pytest

from core.models import LATE, PRESENT
from core.policy import derive_status, is_attendance_window_open


def test_no_deadline_is_always_open():
    assert is_attendance_window_open('', datetime(2024, 1, 1, 23, 59))
    assert is_attendance_window_open(None)


def test_before_deadline_is_open():
    assert is_attendance_window_open('10:30', datetime(2024, 1, 1, 10, 29, 59))


def test_exactly_at_deadline_is_open():
    assert is_attendance_window_open('10:30', datetime(2024, 1, 1, 10, 30, 0, 0))


def test_after_deadline_has_no_grace():
    assert not is_attendance_window_open('10:30', datetime(2024, 1, 1, 10, 30, 0, 1))


@pytest.mark.parametrize('deadline', ['1030', 'ab:cd', '25:00', '10:60'])
def test_malformed_deadline_raises(deadline):
    with pytest.raises(ValueError):
        is_attendance_window_open(deadline, datetime(2024, 1, 1, 9, 0))


def test_status_is_present_under_current_policy():
    late_now = datetime(2024, 1, 1, 11, 0)
    assert derive_status('10:30', late_now) == PRESENT


def test_late_marking_marks_late_after_deadline():
    assert derive_status('10:30', datetime(2024, 1, 1, 11, 0), late_marking=True) == LATE
    assert derive_status('10:30', datetime(2024, 1, 1, 10, 0), late_marking=True) == PRESENT
