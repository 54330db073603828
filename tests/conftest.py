from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from core.errors import AcquisitionError
from core.models import Contact
from core.notifier import LowAttendanceNotifier
from core.session import RecognitionSession
from database import AttendanceLogger, ClassesHeldDB, EmbeddingDB, StatsDB, Stores


def vec(offset=0.0, axis=0):
    """128-d embedding at distance |offset| from the origin along one axis"""
    v = np.zeros(128, dtype=np.float32)
    v[axis] = offset
    return v


class FakeDetection:
    def __init__(self, embedding):
        self.embedding = embedding
        self.box = (0, 0, 10, 10)
        self.score = 0.99
        self.landmarks = {}


class FakeProvider:
    """Frames are embeddings already; None means no face in the frame"""

    def __init__(self, images=None):
        self.images = images or {}

    def load_image(self, data):
        if data not in self.images:
            raise AcquisitionError("Could not decode image")
        return self.images[data]

    def detect(self, frame):
        if frame is None:
            return None
        return FakeDetection(np.asarray(frame, dtype=np.float32))


class RecordingSender:
    def __init__(self, result=True, error=None):
        self.calls = []
        self.result = result
        self.error = error

    def send(self, identity, subject, pct, recipient):
        self.calls.append((identity, subject, pct, recipient))
        if self.error is not None:
            raise self.error
        return self.result


class SteppingClock:
    """Each call is one second after the previous one"""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        current = self.now
        self.now += timedelta(seconds=1)
        return current


@pytest.fixture
def stores(tmp_path):
    return Stores(
        roster=EmbeddingDB(str(tmp_path / 'roster.json')),
        events=AttendanceLogger(str(tmp_path / 'attendance.csv')),
        counters=StatsDB(str(tmp_path / 'stats.json')),
        classes_held=ClassesHeldDB(str(tmp_path / 'stats.json')),
    )


@pytest.fixture
def guardian_sender():
    return RecordingSender()


@pytest.fixture
def critical_sender():
    return RecordingSender()


@pytest.fixture
def notifier(guardian_sender, critical_sender):
    return LowAttendanceNotifier(
        guardian_senders={'email': guardian_sender},
        critical_senders={'sms': critical_sender},
        low_threshold=75,
        critical_threshold=50,
    )


@pytest.fixture
def alice_contact():
    return Contact(email='alice@example.com', phone='+15550001',
                   parent_email='parent@example.com', parent_phone='+15550002')


@pytest.fixture
def session(stores, notifier, alice_contact):
    stores.roster.add_embedding('Alice', vec(0.0), alice_contact)
    stores.roster.add_embedding('Bob', vec(5.0))
    sess = RecognitionSession(FakeProvider(), stores, notifier=notifier,
                              match_threshold=0.6, window_enforced=False,
                              late_marking=False, clock=SteppingClock())
    sess.reload_roster()
    return sess
