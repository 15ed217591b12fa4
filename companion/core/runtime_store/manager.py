from __future__ import annotations

import threading
import uuid
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from companion.core import clock
from companion.core.config import StoreConfig
from companion.core.errors import CompanionError, ValidationError, format_issues
from companion.core.models import (
    AgentEvent,
    AgentState,
    DashboardSnapshot,
    Deadline,
    JournalEntry,
    LectureEvent,
    Notification,
    NotificationPreferences,
    NotificationPreferencesPatch,
    UserContext,
    UserContextPatch,
)
from companion.core.ops_log import OpsLogger
from companion.core.persistence import DurableEntityStore, PersistenceGateway
from companion.core.runtime_store.agents import AgentStateRegistry
from companion.core.runtime_store.feeds import EventLog, NotificationFeed
from companion.core.runtime_store.summary import compute_summary


def _patch(model: Any, patch: Any, what: str) -> Dict[str, Any]:
    if isinstance(patch, model):
        p = patch
    else:
        try:
            p = model.model_validate(patch or {})
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid {what}.", issues=format_issues(e)) from e
    return p.model_dump(exclude_none=True)


class RuntimeStore:
    """
    Single authority for the assistant's runtime state.

    Two tiers behind one lock:
    - transient: agent states, event log, notification feed (reset on every start)
    - durable: context, preferences, schedule, deadlines, journal (SQLite, write-through)

    Every public method is one critical section; nothing yields the lock half way.
    """

    def __init__(self, path: Optional[str] = None, *, ops: Optional[OpsLogger] = None, logger=None):
        self.ops = ops
        self.logger = logger
        self._lock = threading.RLock()

        self.gateway = PersistenceGateway(path, logger=logger)
        try:
            self.gateway.migrate()
            self.entities = DurableEntityStore(self.gateway)
            # seed singletons so a fresh file always has them
            self.entities.get_user_context()
            self.entities.get_notification_preferences()
        except CompanionError:
            self.gateway.close()
            raise

        self.agents = AgentStateRegistry()
        self.events = EventLog(self.agents)
        self.notifications = NotificationFeed()

    @classmethod
    def from_config(cls, cfg: StoreConfig, *, ops: Optional[OpsLogger] = None, logger=None) -> "RuntimeStore":
        return cls(cfg.db_path, ops=ops, logger=logger)

    # ---- lifecycle ----
    def close(self) -> None:
        with self._lock:
            self.gateway.close()

    def __enter__(self) -> "RuntimeStore":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ---- transient: agents + telemetry ----
    def mark_agent_running(self, name: Any) -> AgentState:
        with self._lock:
            return self.agents.mark_running(name)

    def mark_agent_error(self, name: Any) -> AgentState:
        with self._lock:
            return self.agents.mark_error(name)

    def record_event(self, event: Any) -> AgentEvent:
        with self._lock:
            return self.events.record(event)

    def push_notification(self, draft: Any) -> Notification:
        with self._lock:
            return self.notifications.push(draft)

    # ---- durable singletons ----
    def get_user_context(self) -> UserContext:
        with self._lock:
            return self.entities.get_user_context()

    def set_user_context(self, patch: Any) -> UserContext:
        def _apply() -> UserContext:
            changes = _patch(UserContextPatch, patch, "context update")
            merged = self.entities.get_user_context().model_dump()
            merged.update(changes)
            try:
                nxt = UserContext.model_validate(merged)
            except PydanticValidationError as e:
                raise ValidationError("Invalid context update.", issues=format_issues(e)) from e
            return self.entities.save_user_context(nxt)

        return self._mutate("context.update", _apply)

    def get_notification_preferences(self) -> NotificationPreferences:
        with self._lock:
            return self.entities.get_notification_preferences()

    def set_notification_preferences(self, patch: Any) -> NotificationPreferences:
        def _apply() -> NotificationPreferences:
            changes = _patch(NotificationPreferencesPatch, patch, "preferences update")
            merged = self.entities.get_notification_preferences().model_dump()
            # nested sections merge key by key; a partial patch never resets siblings
            merged["quiet_hours"].update(changes.pop("quiet_hours", {}))
            merged["category_toggles"].update(changes.pop("category_toggles", {}))
            merged.update(changes)
            try:
                nxt = NotificationPreferences.model_validate(merged)
            except PydanticValidationError as e:
                raise ValidationError("Invalid preferences update.", issues=format_issues(e)) from e
            return self.entities.save_notification_preferences(nxt)

        return self._mutate("preferences.update", _apply)

    # ---- schedule ----
    def create_lecture_event(self, draft: Any) -> LectureEvent:
        return self._mutate("schedule.create", lambda: self.entities.create_lecture_event(draft))

    def get_schedule_events(self) -> List[LectureEvent]:
        with self._lock:
            return self.entities.list_schedule_events()

    def get_schedule_event_by_id(self, event_id: str) -> Optional[LectureEvent]:
        with self._lock:
            return self.entities.get_schedule_event(event_id)

    def update_schedule_event(self, event_id: str, patch: Any) -> LectureEvent:
        return self._mutate("schedule.update", lambda: self.entities.update_schedule_event(event_id, patch), target_id=event_id)

    def delete_schedule_event(self, event_id: str) -> None:
        self._mutate("schedule.delete", lambda: self.entities.delete_schedule_event(event_id), target_id=event_id)

    # ---- deadlines ----
    def create_deadline(self, draft: Any) -> Deadline:
        return self._mutate("deadline.create", lambda: self.entities.create_deadline(draft))

    def get_deadlines(self) -> List[Deadline]:
        with self._lock:
            return self.entities.list_deadlines()

    def get_deadline_by_id(self, deadline_id: str) -> Optional[Deadline]:
        with self._lock:
            return self.entities.get_deadline(deadline_id)

    def update_deadline(self, deadline_id: str, patch: Any) -> Deadline:
        return self._mutate("deadline.update", lambda: self.entities.update_deadline(deadline_id, patch), target_id=deadline_id)

    def delete_deadline(self, deadline_id: str) -> None:
        self._mutate("deadline.delete", lambda: self.entities.delete_deadline(deadline_id), target_id=deadline_id)

    # ---- journal ----
    def record_journal_entry(self, content: str, tags: Optional[List[str]] = None) -> JournalEntry:
        return self._mutate("journal.create", lambda: self.entities.record_journal_entry(content, tags))

    def get_journal_entries(self, limit: Optional[int] = None) -> List[JournalEntry]:
        with self._lock:
            return self.entities.list_journal_entries(limit)

    # ---- read side ----
    def get_snapshot(self) -> DashboardSnapshot:
        with self._lock:
            events = self.events.all()
            return DashboardSnapshot(
                generated_at=clock.now_iso(),
                agent_states=self.agents.all(),
                events=events,
                notifications=self.notifications.all(),
                summary=compute_summary(events, self.entities.get_user_context()),
            )

    # ---- internals ----
    def _mutate(self, action: str, fn: Callable[[], Any], *, target_id: Optional[str] = None) -> Any:
        event = f"runtime_store.{action}"
        trace_id = uuid.uuid4().hex
        with self._lock:
            try:
                result = fn()
            except CompanionError as e:
                if self.logger:
                    self.logger.warning(f"{event} failed: {e}")
                self._ops_log(trace_id, event, "failed", {"id": target_id, "code": e.code})
                raise
            self._ops_log(trace_id, event, "ok", {"id": target_id or getattr(result, "id", None)})
            return result

    def _ops_log(self, trace_id: str, event: str, outcome: str, details: Dict[str, Any]) -> None:
        if self.ops is None:
            return
        self.ops.log(trace_id=trace_id, event=event, outcome=outcome, details={k: v for k, v in details.items() if v is not None})
