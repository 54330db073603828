"""
Attendance recording: append the event, then update per-subject counters
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.models import (
    PRESENT, STATUSES, AttendanceDelta, AttendanceEvent, SubjectCounters,
)

logger = logging.getLogger(__name__)


@dataclass
class RecordResult:
    event: AttendanceEvent
    counters: Optional[SubjectCounters] = None
    counters_error: Optional[str] = None


class AttendanceRecorder:
    """Writes attendance events and keeps subject counters in step"""

    def __init__(self, event_store, counters_store, clock=None):
        self.event_store = event_store
        self.counters_store = counters_store
        self.clock = clock or (lambda: datetime.now().astimezone())

    def record(self, identity, subject=None, status=PRESENT) -> RecordResult:
        """
        Record one attendance event

        The event append is the primary write and its StoreError propagates.
        Counter updates run afterwards and only log on failure, so a caller
        never sees an error once the event is stored.
        """
        if status not in STATUSES:
            raise ValueError(f"Unknown attendance status: {status!r}")

        subject = (subject or '').strip() or None
        event = AttendanceEvent(identity, self.clock(), subject, status)
        self.event_store.append(event)
        logger.info("Attendance marked for %s (subject=%s, status=%s)", identity, subject, status)

        result = RecordResult(event)
        if subject is None:
            return result

        delta = AttendanceDelta.for_status(status)
        try:
            result.counters = self.counters_store.apply_delta(identity, subject, delta)
        except Exception as e:
            logger.exception("Counters update failed for %s/%s", identity, subject)
            result.counters_error = str(e)
        return result
