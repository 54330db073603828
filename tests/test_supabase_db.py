from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from postgrest.exceptions import APIError

from core.errors import StoreError
from core.models import AttendanceDelta, AttendanceEvent, Contact, SubjectCounters
from database import supabase_db
from database.supabase_db import (
    SupabaseAttendanceLog, SupabaseClassesHeld, SupabaseRoster, SupabaseStats,
)


def response(data):
    res = MagicMock()
    res.data = data
    return res


@pytest.fixture
def client():
    return MagicMock()


def test_event_insert_is_minimal_by_default(client):
    log = SupabaseAttendanceLog(client, include_details=False)
    ts = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)
    log.append(AttendanceEvent('Alice', ts, 'Math', 'present'))

    client.table.assert_called_with('attendance')
    client.table.return_value.insert.assert_called_once_with(
        [{'student_name': 'Alice', 'created_at': ts.isoformat()}]
    )


def test_event_insert_with_details(client):
    log = SupabaseAttendanceLog(client, include_details=True)
    ts = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)
    log.append(AttendanceEvent('Alice', ts, 'Math', 'late'))

    record = client.table.return_value.insert.call_args[0][0][0]
    assert record['subject'] == 'Math'
    assert record['status'] == 'late'


def test_api_error_becomes_store_error(client):
    client.table.return_value.insert.return_value.execute.side_effect = APIError(
        {'message': 'relation "attendance" does not exist', 'code': '42P01'}
    )
    with pytest.raises(StoreError):
        SupabaseAttendanceLog(client).append(
            AttendanceEvent('Alice', datetime.now(timezone.utc)))


def test_apply_delta_uses_atomic_rpc(client):
    client.rpc.return_value.execute.return_value = response([
        {'student_name': 'Alice', 'subject': 'Math',
         'present_count': 4, 'late_count': 1, 'absent_count': 0},
    ])

    counters = SupabaseStats(client).apply_delta('Alice', 'Math', AttendanceDelta.for_status('late'))

    client.rpc.assert_called_once_with('apply_attendance_delta', {
        'p_student_name': 'Alice', 'p_subject': 'Math',
        'p_present': 1, 'p_late': 1, 'p_absent': 0,
    })
    assert counters == SubjectCounters(present=4, late=1, absent=0)


def test_apply_delta_without_row_is_an_error(client):
    client.rpc.return_value.execute.return_value = response([])
    with pytest.raises(StoreError):
        SupabaseStats(client).apply_delta('Alice', 'Math', AttendanceDelta(present=1))


def test_stats_put_upserts_on_name_and_subject(client):
    SupabaseStats(client).put('Alice', 'Math', SubjectCounters(present=3))

    args, kwargs = client.table.return_value.upsert.call_args
    assert args[0]['present_count'] == 3
    assert args[0]['late_count'] == 0
    assert kwargs == {'on_conflict': 'student_name,subject'}


def test_stats_get_missing_row_is_none(client):
    query = client.table.return_value.select.return_value.eq.return_value.eq.return_value.limit
    query.return_value.execute.return_value = response([])
    assert SupabaseStats(client).get('Alice', 'Math') is None


def test_classes_held_upsert_on_subject(client):
    SupabaseClassesHeld(client).put('Math', 5)
    args, kwargs = client.table.return_value.upsert.call_args
    assert args[0]['total_classes'] == 5
    assert kwargs == {'on_conflict': 'subject'}


def test_roster_pages_through_all_rows(client, monkeypatch):
    monkeypatch.setattr(supabase_db, 'PAGE_SIZE', 2)
    ranged = client.table.return_value.select.return_value.order.return_value.range
    ranged.return_value.execute.side_effect = [
        response([{'name': 'Alice', 'face_descriptor': [0.0] * 128},
                  {'name': 'Alice', 'face_descriptor': [0.1] * 128}]),
        response([{'name': 'Bob', 'face_descriptor': [0.2] * 128}]),
    ]

    pairs = SupabaseRoster(client).list_embeddings()

    assert [name for name, _ in pairs] == ['Alice', 'Alice', 'Bob']
    assert ranged.call_args_list[1][0] == (2, 3)


def test_roster_contact_lookup(client):
    query = client.table.return_value.select.return_value.eq.return_value.order
    query.return_value.execute.return_value = response([
        {'email': None, 'phone_number': None, 'parent_email': None, 'parent_phone': None},
        {'email': 'a@x', 'phone_number': '+1', 'parent_email': 'p@x', 'parent_phone': None},
    ])

    contact = SupabaseRoster(client).get_contact('Alice')
    assert contact.phone == '+1'
    assert contact.parent_email == 'p@x'
    query.assert_called_once_with('id')


def test_sample_without_contact_inserts_no_contact_columns(client):
    SupabaseRoster(client).add_embedding('Alice', [0.0, 1.0], Contact())

    record = client.table.return_value.insert.call_args[0][0][0]
    assert record == {'name': 'Alice', 'face_descriptor': [0.0, 1.0]}


def test_undecodable_response_becomes_store_error(client):
    client.rpc.return_value.execute.side_effect = ValueError("Expecting value")

    with pytest.raises(StoreError):
        SupabaseStats(client).apply_delta('Alice', 'Math', AttendanceDelta(present=1))
