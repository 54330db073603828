"""
Exceptions raised by the attendance pipeline
"""


class AttendanceError(Exception):
    """Base class for attendance tracker errors"""


class AcquisitionError(AttendanceError):
    """Camera frame or face model unavailable"""


class StoreError(AttendanceError):
    """A datastore read or write failed"""


class EnrollmentError(AttendanceError):
    """Enrollment could not store its first sample"""


class NotificationError(AttendanceError):
    """A notification could not be delivered"""
