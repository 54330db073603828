"""
Local attendance counters and classes-held totals

Both live in one JSON file:
    {"stats": {name: {subject: {"present": n, "late": n, "absent": n}}},
     "classes_held": {subject: n}}
"""
import os
import threading

from config import settings
from core.errors import StoreError
from core.models import SubjectCounters
from database.embedding_db import _read_json, _write_json

_locks = {}
_locks_guard = threading.Lock()


def _lock_for(path):
    key = os.path.abspath(path)
    with _locks_guard:
        if key not in _locks:
            _locks[key] = threading.RLock()
        return _locks[key]


class _JsonSection:
    section = None

    def __init__(self, db_path=None):
        self.db_path = db_path or settings.STATS_DB_PATH
        self._lock = _lock_for(self.db_path)

    def _load(self):
        try:
            data = _read_json(self.db_path)
        except (OSError, ValueError) as e:
            raise StoreError(f"Error loading {self.db_path}: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"Error loading {self.db_path}: expected a JSON object")
        data.setdefault('stats', {})
        data.setdefault('classes_held', {})
        return data

    def _save(self, data):
        try:
            _write_json(self.db_path, data)
        except OSError as e:
            raise StoreError(f"Error saving {self.db_path}: {e}") from e

    def clear(self):
        with self._lock:
            data = self._load()
            data[self.section] = {}
            self._save(data)


class StatsDB(_JsonSection):
    section = 'stats'

    def get(self, name, subject):
        record = self._load()['stats'].get(name, {}).get(subject)
        return None if record is None else SubjectCounters.from_dict(record)

    def put(self, name, subject, counters):
        with self._lock:
            data = self._load()
            data['stats'].setdefault(name, {})[subject] = counters.to_dict()
            self._save(data)

    def apply_delta(self, name, subject, delta):
        with self._lock:
            data = self._load()
            per_subject = data['stats'].setdefault(name, {})
            counters = SubjectCounters.from_dict(per_subject.get(subject)).apply(delta)
            per_subject[subject] = counters.to_dict()
            self._save(data)
        return counters

    def all(self):
        return {
            name: {subject: SubjectCounters.from_dict(c) for subject, c in subjects.items()}
            for name, subjects in self._load()['stats'].items()
        }


class ClassesHeldDB(_JsonSection):
    section = 'classes_held'

    def get(self, subject):
        value = self._load()['classes_held'].get(subject)
        return None if value is None else int(value)

    def put(self, subject, total):
        with self._lock:
            data = self._load()
            data['classes_held'][subject] = int(total)
            self._save(data)

    def all(self):
        return {subject: int(n or 0) for subject, n in self._load()['classes_held'].items()}
