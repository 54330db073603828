"""
Core modules for Face Attendance Tracker

core.embedder (MediaPipe + face_recognition) is imported on demand so the
matching and recording pipeline works without the vision stack installed.
"""

from .errors import (
    AcquisitionError, AttendanceError, EnrollmentError, NotificationError, StoreError,
)
from .matcher import FaceMatcher, MatchResult, match
from .notifier import LowAttendanceNotifier, NotificationDecision
from .policy import derive_status, is_attendance_window_open
from .recorder import AttendanceRecorder, RecordResult
from .session import EnrollmentReport, RecognitionOutcome, RecognitionSession

__all__ = [
    'AttendanceError',
    'AcquisitionError',
    'StoreError',
    'EnrollmentError',
    'NotificationError',
    'FaceMatcher',
    'MatchResult',
    'match',
    'LowAttendanceNotifier',
    'NotificationDecision',
    'derive_status',
    'is_attendance_window_open',
    'AttendanceRecorder',
    'RecordResult',
    'RecognitionSession',
    'RecognitionOutcome',
    'EnrollmentReport',
]
