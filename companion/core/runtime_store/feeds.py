from __future__ import annotations

from collections import deque
from typing import Any, Deque, List, Optional

from pydantic import ValidationError as PydanticValidationError

from companion.core import clock
from companion.core.errors import InvalidEventError, InvalidNotificationError, format_issues
from companion.core.models import AgentEvent, Notification, NotificationDraft
from companion.core.runtime_store.agents import AgentStateRegistry

MAX_EVENTS = 100
MAX_NOTIFICATIONS = 40


def coerce_event(event: Any) -> AgentEvent:
    if isinstance(event, AgentEvent):
        return event
    try:
        return AgentEvent.model_validate(event)
    except PydanticValidationError as e:
        raise InvalidEventError("Event is missing required fields or names an unknown agent.", issues=format_issues(e)) from e


def coerce_notification_draft(draft: Any) -> NotificationDraft:
    if isinstance(draft, NotificationDraft):
        return draft
    if isinstance(draft, Notification):
        draft = draft.model_dump()
    try:
        return NotificationDraft.model_validate(draft)
    except PydanticValidationError as e:
        raise InvalidNotificationError("Notification is missing required fields.", issues=format_issues(e)) from e


class EventLog:
    """Newest-first, capped operational event log. appendleft on a bounded deque evicts the oldest."""

    def __init__(self, registry: AgentStateRegistry, *, capacity: int = MAX_EVENTS):
        self.registry = registry
        self._items: Deque[AgentEvent] = deque(maxlen=int(capacity))

    def record(self, event: Any) -> AgentEvent:
        # own copy: later edits to the caller's payload must not reach the log
        ev = coerce_event(event).model_copy(deep=True)
        self._items.appendleft(ev)
        self.registry.record_event(ev)
        return ev.model_copy(deep=True)

    def all(self) -> List[AgentEvent]:
        return [ev.model_copy(deep=True) for ev in self._items]

    def count(self, event_type: Optional[str] = None) -> int:
        if event_type is None:
            return len(self._items)
        return sum(1 for ev in self._items if ev.event_type == event_type)

    def __len__(self) -> int:
        return len(self._items)


class NotificationFeed:
    def __init__(self, *, capacity: int = MAX_NOTIFICATIONS):
        self._items: Deque[Notification] = deque(maxlen=int(capacity))

    def push(self, draft: Any) -> Notification:
        d = coerce_notification_draft(draft)
        full = Notification(id=clock.make_id("notif"), timestamp=clock.now_iso(), **d.model_dump())
        self._items.appendleft(full)
        return full

    def all(self) -> List[Notification]:
        return [n.model_copy(deep=True) for n in self._items]

    def __len__(self) -> int:
        return len(self._items)
