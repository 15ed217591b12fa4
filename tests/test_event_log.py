from __future__ import annotations

import pytest

from tests.helpers.store_helpers import make_event


def test_events_are_newest_first(store):
    store.record_event(make_event(id="a"))
    store.record_event(make_event(id="b"))
    store.record_event(make_event(id="c"))
    assert [e.id for e in store.get_snapshot().events] == ["c", "b", "a"]


def test_log_is_capped_and_evicts_oldest(store):
    from companion.core.runtime_store import MAX_EVENTS

    for i in range(MAX_EVENTS + 5):
        store.record_event(make_event(id=f"ev-{i}"))
    events = store.get_snapshot().events
    assert len(events) == MAX_EVENTS == 100
    assert events[0].id == f"ev-{MAX_EVENTS + 4}"
    assert events[-1].id == "ev-5"


def test_recording_updates_the_source_agent(store, frozen_clock):
    from companion.core.models import AgentStatus

    store.mark_agent_running("assignment-tracker")
    ev = store.record_event(make_event("assignment-tracker", "assignment.deadline", id="d1", priority="high"))
    by_name = {s.name.value: s for s in store.get_snapshot().agent_states}
    st = by_name["assignment-tracker"]
    assert st.status == AgentStatus.idle
    assert st.last_event.id == ev.id == "d1"


@pytest.mark.parametrize(
    "bad",
    [
        make_event(id=""),
        make_event(source="weather"),
        make_event(priority="urgent"),
        {k: v for k, v in make_event().items() if k != "event_type"},
        make_event(payload={"blob": {1, 2}}),
        "not-an-event",
    ],
)
def test_invalid_event_leaves_log_and_registry_untouched(store, bad):
    from companion.core.errors import InvalidEventError

    store.record_event(make_event(id="keep"))
    before = store.get_snapshot()
    with pytest.raises(InvalidEventError) as ei:
        store.record_event(bad)
    assert ei.value.code == "invalid_event"
    after = store.get_snapshot()
    assert after.events == before.events
    assert after.agent_states == before.agent_states


def test_event_log_without_facade():
    from companion.core.runtime_store.agents import AgentStateRegistry
    from companion.core.runtime_store.feeds import EventLog

    log = EventLog(AgentStateRegistry(), capacity=3)
    for i in range(5):
        log.record(make_event(id=f"e{i}", event_type="food.nudge" if i % 2 else "notes.saved"))
    assert len(log) == 3
    assert [e.id for e in log.all()] == ["e4", "e3", "e2"]
    assert log.count("food.nudge") == 1
    assert log.count() == 3
