from __future__ import annotations

import pytest

from tests.helpers.store_helpers import make_deadline, make_lecture


# ---- schedule ----
def test_create_and_read_lecture(store, frozen_clock):
    lec = store.create_lecture_event(make_lecture())
    assert lec.id.startswith("lecture-")
    assert lec.created_at == "2026-03-02T09:00:00.000Z"
    assert store.get_schedule_event_by_id(lec.id) == lec
    assert store.get_schedule_events() == [lec]


def test_schedule_lists_newest_first(store):
    a = store.create_lecture_event(make_lecture(title="A"))
    b = store.create_lecture_event(make_lecture(title="B"))
    c = store.create_lecture_event(make_lecture(title="C"))
    assert [e.id for e in store.get_schedule_events()] == [c.id, b.id, a.id]


def test_missing_lecture_reads_as_none(store):
    assert store.get_schedule_event_by_id("lecture-missing") is None


def test_update_lecture_merges_fields(store):
    lec = store.create_lecture_event(make_lecture())
    upd = store.update_schedule_event(lec.id, {"duration_minutes": 45, "workload": "low"})
    assert upd.id == lec.id
    assert upd.created_at == lec.created_at
    assert upd.title == lec.title
    assert upd.duration_minutes == 45
    assert upd.workload.value == "low"
    assert store.get_schedule_event_by_id(lec.id) == upd


@pytest.mark.parametrize("patch", [{}, {"duration_minutes": 0}, {"title": ""}, {"workload": "insane"}, {"room": "B12"}])
def test_invalid_lecture_update_changes_nothing(store, patch):
    from companion.core.errors import ValidationError

    lec = store.create_lecture_event(make_lecture())
    with pytest.raises(ValidationError):
        store.update_schedule_event(lec.id, patch)
    assert store.get_schedule_event_by_id(lec.id) == lec


@pytest.mark.parametrize(
    "draft",
    [make_lecture(title="  "), make_lecture(duration_minutes=-5), make_lecture(duration_minutes=2000), {"title": "x"}],
)
def test_invalid_lecture_draft_is_rejected(store, draft):
    from companion.core.errors import ValidationError

    with pytest.raises(ValidationError):
        store.create_lecture_event(draft)
    assert store.get_schedule_events() == []


def test_delete_lecture(store):
    from companion.core.errors import NotFoundError

    lec = store.create_lecture_event(make_lecture())
    store.delete_schedule_event(lec.id)
    assert store.get_schedule_event_by_id(lec.id) is None
    with pytest.raises(NotFoundError):
        store.delete_schedule_event(lec.id)


def test_update_missing_lecture_is_not_found(store):
    from companion.core.errors import NotFoundError

    with pytest.raises(NotFoundError) as ei:
        store.update_schedule_event("lecture-missing", {"title": "x"})
    assert ei.value.code == "not_found"


# ---- deadlines ----
def test_deadline_lifecycle(store):
    from companion.core.errors import NotFoundError

    dl = store.create_deadline(make_deadline())
    assert dl.id.startswith("deadline-")
    assert dl.completed is False
    assert store.get_deadline_by_id(dl.id) == dl

    done = store.update_deadline(dl.id, {"completed": True})
    assert done.completed is True
    assert done.task == dl.task
    assert store.get_deadlines() == [done]

    store.delete_deadline(dl.id)
    assert store.get_deadlines() == []
    assert store.get_deadline_by_id(dl.id) is None
    with pytest.raises(NotFoundError):
        store.update_deadline(dl.id, {"completed": False})
    with pytest.raises(NotFoundError):
        store.delete_deadline(dl.id)


def test_deadlines_newest_first(store):
    first = store.create_deadline(make_deadline(task="one"))
    second = store.create_deadline(make_deadline(task="two"))
    assert [d.id for d in store.get_deadlines()] == [second.id, first.id]


@pytest.mark.parametrize("draft", [make_deadline(course=""), make_deadline(priority="someday"), make_deadline(task="x" * 301)])
def test_invalid_deadline_draft_is_rejected(store, draft):
    from companion.core.errors import ValidationError

    with pytest.raises(ValidationError):
        store.create_deadline(draft)


def test_empty_deadline_patch_is_rejected(store):
    from companion.core.errors import ValidationError

    dl = store.create_deadline(make_deadline())
    with pytest.raises(ValidationError):
        store.update_deadline(dl.id, {})


# ---- journal ----
def test_journal_entries_newest_first_with_limit(store):
    entries = [store.record_journal_entry(f"entry {i}", ["day"] if i % 2 else None) for i in range(5)]
    assert store.get_journal_entries() == list(reversed(entries))
    assert [e.content for e in store.get_journal_entries(limit=2)] == ["entry 4", "entry 3"]
    assert store.get_journal_entries(limit=50) == list(reversed(entries))
    assert entries[1].tags == ["day"]
    assert entries[0].tags == []


@pytest.mark.parametrize("limit", [0, -3])
def test_journal_limit_must_be_positive(store, limit):
    from companion.core.errors import ValidationError

    with pytest.raises(ValidationError):
        store.get_journal_entries(limit=limit)


@pytest.mark.parametrize("content", ["", "   ", "\n\t"])
def test_blank_journal_entry_is_rejected(store, content):
    from companion.core.errors import ValidationError

    with pytest.raises(ValidationError):
        store.record_journal_entry(content)
    assert store.get_journal_entries() == []


@pytest.mark.parametrize("tags", ["study", {"a": 1}, ["ok", 3]])
def test_malformed_journal_tags_are_rejected(store, tags):
    from companion.core.errors import ValidationError

    with pytest.raises(ValidationError):
        store.record_journal_entry("Long day.", tags)
    assert store.get_journal_entries() == []


def test_reads_are_not_cached(db_path):
    from companion.core.runtime_store import RuntimeStore

    with RuntimeStore(db_path) as a, RuntimeStore(db_path) as b:
        dl = a.create_deadline(make_deadline())
        assert b.get_deadline_by_id(dl.id) == dl
        b.update_deadline(dl.id, {"completed": True})
        assert a.get_deadline_by_id(dl.id).completed is True
