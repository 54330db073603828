"""
Attendance window / deadline policy

The window check and late marking are switched off by default
(ATTENDANCE_WINDOW_ENFORCED, LATE_MARKING_ENABLED): any successful match is
recorded as present.
"""
from datetime import datetime

from core.models import LATE, PRESENT


def parse_deadline(deadline):
    """Parse 'HH:MM' into (hours, minutes)"""
    try:
        hours, minutes = (int(part) for part in deadline.strip().split(':'))
    except (AttributeError, ValueError):
        raise ValueError(f"Deadline must be HH:MM, got {deadline!r}") from None
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"Deadline out of range: {deadline!r}")
    return hours, minutes


def is_attendance_window_open(deadline, now=None):
    """
    True while the current local time is at or before today's deadline

    No deadline means the window is always open. '10:30' closes at
    10:30:00.000 with no grace period.
    """
    if not deadline:
        return True

    now = now or datetime.now()
    hours, minutes = parse_deadline(deadline)
    cutoff = now.replace(hour=hours, minute=minutes, second=0, microsecond=0)
    return now <= cutoff


def derive_status(deadline, now=None, late_marking=False):
    """Attendance status for a successful match"""
    if late_marking and not is_attendance_window_open(deadline, now):
        return LATE
    return PRESENT
