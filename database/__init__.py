"""
Database modules for Face Attendance Tracker
"""
from collections import namedtuple

from config import settings

from .attendance_log import AttendanceLogger
from .embedding_db import EmbeddingDB
from .stats_db import ClassesHeldDB, StatsDB

Stores = namedtuple('Stores', ['roster', 'events', 'counters', 'classes_held'])


def open_stores(backend=None):
    """Build the roster, event, counters and classes-held stores"""
    backend = (backend or settings.STORE_BACKEND).lower()

    if backend == 'local':
        return Stores(
            roster=EmbeddingDB(),
            events=AttendanceLogger(),
            counters=StatsDB(),
            classes_held=ClassesHeldDB(),
        )

    if backend == 'supabase':
        from .supabase_db import (
            SupabaseAttendanceLog, SupabaseClassesHeld, SupabaseRoster,
            SupabaseStats, init_supabase,
        )

        client = init_supabase()
        return Stores(
            roster=SupabaseRoster(client),
            events=SupabaseAttendanceLog(client),
            counters=SupabaseStats(client),
            classes_held=SupabaseClassesHeld(client),
        )

    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")


__all__ = [
    'EmbeddingDB',
    'AttendanceLogger',
    'StatsDB',
    'ClassesHeldDB',
    'Stores',
    'open_stores',
]
