import threading
from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from conftest import vec
from core.errors import StoreError
from core.models import AttendanceDelta, AttendanceEvent, Contact, SubjectCounters


def test_roster_keeps_every_sample_and_contact(stores, alice_contact):
    stores.roster.add_embedding('Alice', vec(0.0), alice_contact)
    stores.roster.add_embedding('Alice', vec(0.2))
    stores.roster.add_embedding('Bob', vec(1.0))

    pairs = stores.roster.list_embeddings()
    assert [name for name, _ in pairs] == ['Alice', 'Alice', 'Bob']
    assert np.allclose(pairs[1][1], vec(0.2))
    assert stores.roster.get_contact('Alice') == alice_contact
    assert stores.roster.get_contact('Bob') == Contact()
    assert stores.roster.get_contact('Carol') is None
    assert stores.roster.list_identities() == ['Alice', 'Bob']


def test_attendance_log_lists_newest_first(stores):
    t0 = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)
    stores.events.append(AttendanceEvent('Alice', t0, 'Math', 'present'))
    stores.events.append(AttendanceEvent('Bob', t0 + timedelta(minutes=5)))

    events = stores.events.list_events()
    assert [e.identity for e in events] == ['Bob', 'Alice']
    assert events[1].subject == 'Math'
    assert events[1].timestamp == t0


def test_stats_put_overwrites_and_delta_accumulates(stores):
    stores.counters.put('Alice', 'Math', SubjectCounters(present=5, late=1, absent=2))
    updated = stores.counters.apply_delta('Alice', 'Math', AttendanceDelta.for_status('late'))

    assert updated == SubjectCounters(present=6, late=2, absent=2)
    assert stores.counters.all() == {'Alice': {'Math': updated}}


def test_concurrent_deltas_are_not_lost(stores):
    def worker():
        for _ in range(10):
            stores.counters.apply_delta('Alice', 'Math', AttendanceDelta(present=1))

    threads = [threading.Thread(target=worker) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert stores.counters.get('Alice', 'Math').present == 50


def test_classes_held_is_overwritten_not_accumulated(stores):
    stores.classes_held.put('Math', 4)
    stores.classes_held.put('Math', 5)
    assert stores.classes_held.get('Math') == 5
    assert stores.classes_held.get('Physics') is None


def test_stats_and_classes_held_share_one_file(stores):
    stores.classes_held.put('Math', 4)
    stores.counters.apply_delta('Alice', 'Math', AttendanceDelta(present=1))
    assert stores.classes_held.all() == {'Math': 4}

    stores.counters.clear()
    assert stores.counters.all() == {}
    assert stores.classes_held.all() == {'Math': 4}


def test_later_sample_without_contact_keeps_contact(stores, alice_contact):
    stores.roster.add_embedding('Alice', vec(0.0), alice_contact)
    stores.roster.add_embedding('Alice', vec(0.2), Contact())
    stores.roster.add_embedding('Alice', vec(0.3), Contact(phone='+15559999'))

    contact = stores.roster.get_contact('Alice')
    assert contact.parent_email == 'parent@example.com'
    assert contact.parent_phone == '+15550002'
    assert contact.phone == '+15559999'


def test_stores_reject_json_that_is_not_an_object(stores, tmp_path):
    (tmp_path / 'stats.json').write_text('[]', encoding='utf-8')
    (tmp_path / 'roster.json').write_text('[1, 2]', encoding='utf-8')

    with pytest.raises(StoreError):
        stores.counters.all()
    with pytest.raises(StoreError):
        stores.classes_held.get('Math')
    with pytest.raises(StoreError):
        stores.roster.list_embeddings()
