from __future__ import annotations

from typing import Any, Dict, List

from companion.core import clock
from companion.core.errors import UnknownAgentError
from companion.core.models import AGENT_NAMES, AgentEvent, AgentName, AgentState, AgentStatus


def resolve_agent(name: Any) -> AgentName:
    try:
        return AgentName(getattr(name, "value", name))
    except ValueError:
        raise UnknownAgentError(f"Unknown agent: {name!r}.", agent=str(name)) from None


class AgentStateRegistry:
    """
    One AgentState per known agent, created up front and never removed.
    Transient: a new registry always starts with every agent idle.

    idle --mark_running--> running --record_event--> idle
    idle|running --mark_error--> error (left only by mark_running / record_event)
    """

    def __init__(self) -> None:
        self._states: Dict[AgentName, AgentState] = {name: AgentState(name=name) for name in AGENT_NAMES}

    def mark_running(self, name: Any) -> AgentState:
        return self._update(name, status=AgentStatus.running, last_run_at=clock.now_iso())

    def mark_error(self, name: Any) -> AgentState:
        return self._update(name, status=AgentStatus.error, last_run_at=clock.now_iso())

    def record_event(self, event: AgentEvent) -> AgentState:
        return self._update(event.source, status=AgentStatus.idle, last_run_at=clock.now_iso(), last_event=event)

    def get(self, name: Any) -> AgentState:
        return self._states[resolve_agent(name)].model_copy(deep=True)

    def all(self) -> List[AgentState]:
        return [self._states[name].model_copy(deep=True) for name in AGENT_NAMES]

    def _update(self, name: Any, **changes: Any) -> AgentState:
        key = resolve_agent(name)
        # replace, don't mutate: copies already handed out stay valid
        self._states[key] = self._states[key].model_copy(update=changes)
        return self._states[key].model_copy(deep=True)
