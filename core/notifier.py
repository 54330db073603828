"""
Low-attendance evaluation and notification dispatch
"""
import logging
from dataclasses import dataclass

from config import settings, thresholds
from core.errors import NotificationError
from core.models import Recipient
from core.senders import build_senders

logger = logging.getLogger(__name__)

LEVEL_OK = 'ok'
LEVEL_LOW = 'low'
LEVEL_CRITICAL = 'critical'


@dataclass
class NotificationDecision:
    identity: str
    subject: str
    percentage: float
    level: str

    @property
    def should_notify(self):
        return self.level != LEVEL_OK


class LowAttendanceNotifier:
    """Turns attendance percentages into guardian alerts and escalations"""

    def __init__(self, guardian_senders=None, critical_senders=None,
                 low_threshold=None, critical_threshold=None):
        self.low_threshold = (thresholds.LOW_ATTENDANCE_THRESHOLD
                              if low_threshold is None else low_threshold)
        self.critical_threshold = (thresholds.CRITICAL_ATTENDANCE_THRESHOLD
                                   if critical_threshold is None else critical_threshold)
        if self.critical_threshold > self.low_threshold:
            raise ValueError(
                f"Critical threshold {self.critical_threshold} is above "
                f"low-attendance threshold {self.low_threshold}"
            )

        self.guardian_senders = guardian_senders or {}
        self.critical_senders = critical_senders or {}

    @classmethod
    def from_settings(cls):
        return cls(
            guardian_senders=build_senders(settings.LOW_ATTENDANCE_CHANNELS),
            critical_senders=build_senders(settings.CRITICAL_ATTENDANCE_CHANNELS),
        )

    def evaluate(self, identity, subject, present_count, total_classes_held):
        """
        Compute the attendance percentage and alert level

        Returns None when no classes have been held yet.
        """
        if total_classes_held is None or total_classes_held <= 0:
            return None

        pct = present_count / total_classes_held * 100
        if pct < self.critical_threshold:
            level = LEVEL_CRITICAL
        elif pct < self.low_threshold:
            level = LEVEL_LOW
        else:
            level = LEVEL_OK
        return NotificationDecision(identity, subject, pct, level)

    def notify(self, decision, contact):
        """
        Send the notifications a decision calls for

        Returns the channel names that delivered. Failures are logged and
        skipped.
        """
        if decision is None or not decision.should_notify or contact is None:
            return []

        guardian = Recipient(email=contact.parent_email, phone=contact.parent_phone)
        sent = self._dispatch(self.guardian_senders, decision, [guardian])

        if decision.level == LEVEL_CRITICAL:
            student = Recipient(email=contact.email, phone=contact.phone)
            sent += self._dispatch(self.critical_senders, decision, [student, guardian])

        return sent

    def _dispatch(self, senders, decision, recipients):
        sent = []
        for channel, sender in senders.items():
            for recipient in recipients:
                try:
                    if sender.send(decision.identity, decision.subject,
                                   decision.percentage, recipient):
                        sent.append(channel)
                except NotificationError:
                    logger.exception("%s notification failed for %s/%s",
                                     channel, decision.identity, decision.subject)
        return sent
