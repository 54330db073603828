"""
Recognition session: owns the roster cache and runs
frame -> embedding -> match -> record -> notify
"""
import logging
import math
import threading
from dataclasses import dataclass, field
from typing import List, Optional

from config import settings, thresholds
from core.errors import EnrollmentError, StoreError
from core.export import events_to_csv
from core.matcher import FaceMatcher
from core.models import LATE, group_by_identity
from core.notifier import LowAttendanceNotifier
from core.policy import derive_status, is_attendance_window_open, parse_deadline
from core.recorder import AttendanceRecorder

logger = logging.getLogger(__name__)

NO_FACE = 'no_face'
NO_ROSTER = 'no_roster'
UNKNOWN_FACE = 'unknown'
WINDOW_CLOSED = 'window_closed'
RECORDED = 'recorded'


@dataclass
class RecognitionOutcome:
    status: str
    message: str
    identity: Optional[str] = None
    distance: Optional[float] = None
    attendance_status: Optional[str] = None
    subject: Optional[str] = None
    counters: Optional[dict] = None
    percentage: Optional[float] = None
    notifications: List[str] = field(default_factory=list)

    @property
    def recorded(self):
        return self.status == RECORDED


@dataclass
class EnrollmentReport:
    name: str
    stored: int = 0
    warnings: List[str] = field(default_factory=list)


class RecognitionSession:
    """One camera, one recognition at a time"""

    def __init__(self, provider, stores, notifier=None, match_threshold=None,
                 window_enforced=None, late_marking=None, clock=None):
        self.provider = provider
        self.stores = stores
        self.notifier = notifier or LowAttendanceNotifier()
        self.match_threshold = (thresholds.MATCH_THRESHOLD
                                if match_threshold is None else match_threshold)
        self.window_enforced = (settings.ATTENDANCE_WINDOW_ENFORCED
                                if window_enforced is None else window_enforced)
        self.late_marking = (settings.LATE_MARKING_ENABLED
                             if late_marking is None else late_marking)
        self.clock = clock
        self.recorder = AttendanceRecorder(stores.events, stores.counters, clock=clock)

        self.labeled = []
        self.matcher = FaceMatcher([], self.match_threshold)
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, provider=None):
        from core.embedder import FaceEmbeddingProvider
        from database import open_stores

        session = cls(
            provider=provider or FaceEmbeddingProvider(),
            stores=open_stores(),
            notifier=LowAttendanceNotifier.from_settings(),
        )
        session.reload_roster()
        return session

    # ---------------------------------------------------------
    # ROSTER
    # ---------------------------------------------------------
    def reload_roster(self):
        """Re-read the roster; returns the number of identities"""
        try:
            pairs = self.stores.roster.list_embeddings()
        except StoreError:
            logger.exception("Error loading roster, continuing with an empty one")
            pairs = []

        labeled = group_by_identity(pairs)
        self.matcher = FaceMatcher(labeled, self.match_threshold)
        self.labeled = labeled
        logger.info("Roster loaded: %d identities, %d embeddings", len(labeled), len(pairs))
        return len(labeled)

    def identities(self):
        return [entry.identity for entry in self.labeled]

    def enroll(self, name, frames, contact=None):
        """
        Enroll one identity from one or more frames

        The first frame must yield a stored sample, otherwise EnrollmentError.
        Later samples that fail are reported as warnings.
        """
        name = (name or '').strip()
        if not name:
            raise EnrollmentError("Please enter a name")
        if not frames:
            raise EnrollmentError("No images supplied")

        report = EnrollmentReport(name)
        with self._lock:
            for idx, frame in enumerate(frames):
                detection = self.provider.detect(frame)
                if detection is None:
                    if idx == 0:
                        raise EnrollmentError(
                            "No face detected! Please ensure your face is clearly visible in the camera."
                        )
                    report.warnings.append(f"No face detected in sample {idx + 1}, skipped")
                    continue

                try:
                    self.stores.roster.add_embedding(name, detection.embedding,
                                                     contact if idx == 0 else None)
                except StoreError as e:
                    if idx == 0:
                        raise EnrollmentError(f"Error registering face: {e}") from e
                    logger.warning("Sample %d for %s failed to save: %s", idx + 1, name, e)
                    report.warnings.append(f"Sample {idx + 1} failed to save: {e}")
                    continue
                report.stored += 1

        if report.warnings:
            logger.warning("Enrolled %s with partial coverage: %s", name, '; '.join(report.warnings))
        self.reload_roster()
        return report

    # ---------------------------------------------------------
    # RECOGNITION PIPELINE
    # ---------------------------------------------------------
    def recognize(self, frame, subject='', lecture_time=''):
        """
        Recognize a face and mark attendance

        StoreError from the attendance write propagates. Nothing after the
        write can fail the call. A malformed lecture_time raises ValueError
        before anything is read or written when a window policy is active.
        """
        subject = (subject or '').strip()
        lecture_time = (lecture_time or '').strip()
        if lecture_time and (self.window_enforced or self.late_marking):
            parse_deadline(lecture_time)

        with self._lock:
            detection = self.provider.detect(frame)
            if detection is None:
                return RecognitionOutcome(NO_FACE, "No face detected, please try again.")

            if not self.labeled:
                return RecognitionOutcome(NO_ROSTER, "No registered faces found in the system.")

            result = self.matcher.find_best_match(detection.embedding)
            if not result.is_known:
                return RecognitionOutcome(UNKNOWN_FACE, "Face not recognized. Please register first.",
                                          distance=result.distance)

            now = self.clock() if self.clock else None
            if self.window_enforced and not is_attendance_window_open(lecture_time, now):
                return RecognitionOutcome(
                    WINDOW_CLOSED,
                    "Attendance window is closed. Attendance can only be marked within the allowed time window.",
                    identity=result.label, distance=result.distance,
                )

            status = derive_status(lecture_time, now, late_marking=self.late_marking)
            record = self.recorder.record(result.label, subject, status)

            outcome = RecognitionOutcome(
                RECORDED,
                f"Attendance marked for {result.label}" + (' (Late)' if status == LATE else ''),
                identity=result.label,
                distance=result.distance,
                attendance_status=status,
                subject=subject or None,
                counters=record.counters.to_dict() if record.counters else None,
            )
            if record.counters is not None:
                self._evaluate_attendance(outcome, record.counters.present)
            return outcome

    def _evaluate_attendance(self, outcome, present_count):
        try:
            total = self.stores.classes_held.get(outcome.subject)
            decision = self.notifier.evaluate(outcome.identity, outcome.subject, present_count, total or 0)
            if decision is None:
                return
            outcome.percentage = decision.percentage
            if decision.should_notify:
                contact = self.stores.roster.get_contact(outcome.identity)
                outcome.notifications = self.notifier.notify(decision, contact)
        except Exception:
            logger.exception("Stats/notifications update failed for %s/%s",
                             outcome.identity, outcome.subject)

    # ---------------------------------------------------------
    # CLASSES HELD / STATS / EXPORT
    # ---------------------------------------------------------
    def save_classes_held(self, subject, total):
        subject = (subject or '').strip()
        if not subject:
            raise ValueError("Enter a Subject before saving total classes held.")
        try:
            total = float(total)
        except (TypeError, ValueError):
            raise ValueError("Enter a valid positive number for Classes Held.") from None
        if not math.isfinite(total) or total <= 0 or total != int(total):
            raise ValueError("Enter a valid positive number for Classes Held.")

        self.stores.classes_held.put(subject, int(total))
        logger.info("Saved total classes held for %s: %d", subject, int(total))
        return int(total)

    def classes_held(self):
        return self.stores.classes_held.all()

    def stats(self):
        return {
            name: {subject: counters.to_dict() for subject, counters in subjects.items()}
            for name, subjects in self.stores.counters.all().items()
        }

    def export_csv(self):
        """CSV of the attendance log, or None when there is nothing to export"""
        events = self.stores.events.list_events()
        if not events:
            return None
        return events_to_csv(events)
