from __future__ import annotations

import pytest

from tests.helpers.store_helpers import make_event


def test_all_agents_start_idle_in_fixed_order():
    from companion.core.models import AGENT_NAMES, AgentStatus
    from companion.core.runtime_store.agents import AgentStateRegistry

    reg = AgentStateRegistry()
    states = reg.all()
    assert [s.name for s in states] == AGENT_NAMES
    assert all(s.status == AgentStatus.idle and s.last_run_at is None and s.last_event is None for s in states)


def test_mark_running_then_error(frozen_clock):
    from companion.core.models import AgentStatus
    from companion.core.runtime_store.agents import AgentStateRegistry

    reg = AgentStateRegistry()
    st = reg.mark_running("notes")
    assert st.status == AgentStatus.running
    assert st.last_run_at == "2026-03-02T09:00:00.000Z"

    st = reg.mark_error("notes")
    assert st.status == AgentStatus.error
    assert st.last_run_at == "2026-03-02T09:00:01.000Z"
    # only the named agent changed
    others = [s for s in reg.all() if s.name.value != "notes"]
    assert len(others) == 6
    assert all(s.status == AgentStatus.idle and s.last_run_at is None for s in others)


def test_record_event_returns_agent_to_idle_with_store_clock(frozen_clock):
    from companion.core.models import AgentEvent, AgentStatus
    from companion.core.runtime_store.agents import AgentStateRegistry

    reg = AgentStateRegistry()
    reg.mark_error("food-tracking")
    ev = AgentEvent.model_validate(make_event("food-tracking", "food.nudge"))
    st = reg.record_event(ev)
    assert st.status == AgentStatus.idle
    assert st.last_event == ev
    # receipt time, not the event's own timestamp
    assert st.last_run_at == "2026-03-02T09:00:01.000Z"
    assert st.last_run_at != ev.timestamp
    others = [s for s in reg.all() if s.name.value != "food-tracking"]
    assert all(s.status == AgentStatus.idle and s.last_run_at is None and s.last_event is None for s in others)


def test_unknown_agent_is_rejected_without_changes():
    from companion.core.errors import UnknownAgentError
    from companion.core.runtime_store.agents import AgentStateRegistry

    reg = AgentStateRegistry()
    before = reg.all()
    with pytest.raises(UnknownAgentError) as ei:
        reg.mark_running("weather")
    assert ei.value.code == "unknown_agent"
    with pytest.raises(UnknownAgentError):
        reg.get("weather")
    assert reg.all() == before


def test_returned_states_are_copies():
    from companion.core.models import AgentStatus
    from companion.core.runtime_store.agents import AgentStateRegistry

    reg = AgentStateRegistry()
    st = reg.get("orchestrator")
    st.status = AgentStatus.error
    assert reg.get("orchestrator").status == AgentStatus.idle


def test_facade_marks_agents(store):
    from companion.core.errors import UnknownAgentError
    from companion.core.models import AgentStatus

    assert store.mark_agent_running("video-editor").status == AgentStatus.running
    assert store.mark_agent_error("video-editor").status == AgentStatus.error
    with pytest.raises(UnknownAgentError):
        store.mark_agent_error("nope")
    snap = store.get_snapshot()
    by_name = {s.name.value: s for s in snap.agent_states}
    assert by_name["video-editor"].status == AgentStatus.error
