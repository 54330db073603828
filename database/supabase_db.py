"""
Supabase-backed stores

Tables (see sql/schema.sql):
    students(name, face_descriptor, email, phone_number, parent_email, parent_phone)
    attendance(student_name, subject, status, created_at)
    attendance_stats(student_name, subject, present_count, late_count, absent_count)
    classes_held(subject, total_classes)
"""
import logging
from datetime import datetime, timezone

import httpx
import numpy as np
from postgrest.exceptions import APIError
from supabase import Client, create_client

from config import settings
from core.errors import StoreError
from core.models import AttendanceEvent, Contact, SubjectCounters

logger = logging.getLogger(__name__)

PAGE_SIZE = 1000  # PostgREST default max rows per request

_client = None


def init_supabase() -> Client:
    global _client
    if _client is None:
        if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
            raise StoreError("SUPABASE_URL / SUPABASE_KEY not set")
        _client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    return _client


def _execute(query, operation):
    try:
        return query.execute()
    except (APIError, httpx.HTTPError, ValueError) as e:
        logger.error("Supabase %s failed: %s", operation, e)
        raise StoreError(f"{operation} failed: {e}") from e


def _select_all(build_query, operation):
    """Page through a select; build_query() must return a fresh query"""
    rows = []
    start = 0
    while True:
        res = _execute(build_query().range(start, start + PAGE_SIZE - 1), operation)
        page = res.data or []
        rows.extend(page)
        if len(page) < PAGE_SIZE:
            return rows
        start += PAGE_SIZE


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


class _SupabaseStore:
    def __init__(self, client=None):
        self.client = client or init_supabase()


class SupabaseRoster(_SupabaseStore):
    table = 'students'

    def list_embeddings(self):
        rows = _select_all(
            lambda: self.client.table(self.table).select('name, face_descriptor').order('id'),
            'load students',
        )
        pairs = []
        for row in rows:
            descriptor = row.get('face_descriptor')
            if not descriptor:
                continue
            pairs.append((row['name'], np.asarray(descriptor, dtype=np.float32)))
        return pairs

    def add_embedding(self, name, embedding, contact=None):
        record = {
            'name': name,
            'face_descriptor': [float(v) for v in embedding],
        }
        if contact is not None and not contact.is_empty:
            record.update({
                'email': contact.email,
                'phone_number': contact.phone,
                'parent_email': contact.parent_email,
                'parent_phone': contact.parent_phone,
            })
        _execute(self.client.table(self.table).insert([record]), f"register {name}")

    def get_contact(self, name):
        res = _execute(
            self.client.table(self.table)
            .select('email, phone_number, parent_email, parent_phone')
            .eq('name', name)
            .order('id'),
            f"load contact for {name}",
        )
        if not res.data:
            return None
        for row in res.data:
            contact = Contact.from_dict(row)
            if not contact.is_empty:
                return contact
        return Contact.from_dict(res.data[0])

    def list_identities(self):
        rows = _select_all(
            lambda: self.client.table(self.table).select('name').order('id'),
            'list students',
        )
        return list(dict.fromkeys(row['name'] for row in rows))


class SupabaseAttendanceLog(_SupabaseStore):
    table = 'attendance'

    def __init__(self, client=None, include_details=None):
        super().__init__(client)
        self.include_details = (settings.EVENT_DETAILS_ENABLED
                                if include_details is None else include_details)

    def append(self, event):
        record = {
            'student_name': event.identity,
            'created_at': event.timestamp.isoformat(),
        }
        if self.include_details:
            record['subject'] = event.subject
            record['status'] = event.status
        _execute(self.client.table(self.table).insert([record]), f"mark attendance for {event.identity}")

    def list_events(self):
        rows = _select_all(
            lambda: self.client.table(self.table).select('*').order('created_at', desc=True),
            'load attendance',
        )
        return [
            AttendanceEvent(
                identity=row['student_name'],
                timestamp=datetime.fromisoformat(row['created_at']),
                subject=row.get('subject'),
                status=row.get('status'),
            )
            for row in rows
        ]


def _counters_from_row(row):
    return SubjectCounters(
        present=row.get('present_count') or 0,
        late=row.get('late_count') or 0,
        absent=row.get('absent_count') or 0,
    )


class SupabaseStats(_SupabaseStore):
    table = 'attendance_stats'
    delta_function = 'apply_attendance_delta'

    def get(self, name, subject):
        res = _execute(
            self.client.table(self.table).select('*')
            .eq('student_name', name).eq('subject', subject).limit(1),
            f"load stats for {name}/{subject}",
        )
        return _counters_from_row(res.data[0]) if res.data else None

    def put(self, name, subject, counters):
        _execute(
            self.client.table(self.table).upsert({
                'student_name': name,
                'subject': subject,
                'present_count': counters.present,
                'late_count': counters.late,
                'absent_count': counters.absent,
                'last_updated': _now_iso(),
            }, on_conflict='student_name,subject'),
            f"save stats for {name}/{subject}",
        )

    def apply_delta(self, name, subject, delta):
        """Atomic server-side increment; returns the updated counters"""
        res = _execute(
            self.client.rpc(self.delta_function, {
                'p_student_name': name,
                'p_subject': subject,
                'p_present': delta.present,
                'p_late': delta.late,
                'p_absent': delta.absent,
            }),
            f"update stats for {name}/{subject}",
        )
        rows = res.data if isinstance(res.data, list) else [res.data]
        if not rows or rows[0] is None:
            raise StoreError(f"{self.delta_function} returned no row for {name}/{subject}")
        return _counters_from_row(rows[0])

    def all(self):
        rows = _select_all(lambda: self.client.table(self.table).select('*'), 'load stats')
        stats = {}
        for row in rows:
            stats.setdefault(row['student_name'], {})[row['subject']] = _counters_from_row(row)
        return stats


class SupabaseClassesHeld(_SupabaseStore):
    table = 'classes_held'

    def get(self, subject):
        res = _execute(
            self.client.table(self.table).select('total_classes').eq('subject', subject).limit(1),
            f"load classes held for {subject}",
        )
        if not res.data:
            return None
        return int(res.data[0].get('total_classes') or 0)

    def put(self, subject, total):
        _execute(
            self.client.table(self.table).upsert({
                'subject': subject,
                'total_classes': int(total),
                'last_updated': _now_iso(),
            }, on_conflict='subject'),
            f"save classes held for {subject}",
        )

    def all(self):
        rows = _select_all(
            lambda: self.client.table(self.table).select('subject, total_classes'),
            'load classes held',
        )
        return {row['subject']: int(row.get('total_classes') or 0) for row in rows}
