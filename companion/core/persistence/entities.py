from __future__ import annotations

import json
import sqlite3
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError as PydanticValidationError

from companion.core import clock
from companion.core.errors import NotFoundError, ValidationError, format_issues
from companion.core.models import (
    Deadline,
    DeadlineDraft,
    DeadlinePatch,
    JournalEntry,
    LectureEvent,
    LectureEventDraft,
    LectureEventPatch,
    NotificationPreferences,
    UserContext,
)
from companion.core.persistence.gateway import PersistenceGateway

SINGLETON_ID = "default"


def _coerce(model: type[BaseModel], data: Any, what: str) -> Any:
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {what}.", issues=format_issues(e)) from e


class DurableEntityStore:
    """
    CRUD over the durable entity tables. Nothing is cached: every read hits the
    database, so what callers see is always what was committed.
    """

    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway

    # ---- schedule events ----
    def create_lecture_event(self, draft: Any) -> LectureEvent:
        d = _coerce(LectureEventDraft, draft, "schedule entry")
        ev = LectureEvent(id=clock.make_id("lecture"), created_at=clock.now_iso(), **d.model_dump())
        self.gateway.execute(
            "INSERT INTO schedule_events(id, title, start_time, duration_minutes, workload, created_at) VALUES (?, ?, ?, ?, ?, ?)",
            (ev.id, ev.title, ev.start_time, int(ev.duration_minutes), ev.workload.value, ev.created_at),
        )
        return ev

    def list_schedule_events(self) -> List[LectureEvent]:
        rows = self.gateway.query("SELECT * FROM schedule_events ORDER BY rowid DESC")
        return [self._lecture_from_row(r) for r in rows]

    def get_schedule_event(self, event_id: str) -> Optional[LectureEvent]:
        row = self.gateway.query_one("SELECT * FROM schedule_events WHERE id=?", (str(event_id),))
        return self._lecture_from_row(row) if row else None

    def update_schedule_event(self, event_id: str, patch: Any) -> LectureEvent:
        p = _coerce(LectureEventPatch, patch, "schedule update")
        changes = p.model_dump(exclude_none=True)
        if not changes:
            raise ValidationError("At least one field is required.")
        with self.gateway.transaction() as conn:
            row = conn.execute("SELECT * FROM schedule_events WHERE id=?", (str(event_id),)).fetchone()
            if row is None:
                raise NotFoundError("Schedule entry not found.", id=str(event_id))
            merged = self._lecture_from_row(row).model_dump()
            merged.update(changes)
            nxt = _coerce(LectureEvent, merged, "schedule entry")
            conn.execute(
                "UPDATE schedule_events SET title=?, start_time=?, duration_minutes=?, workload=? WHERE id=?",
                (nxt.title, nxt.start_time, int(nxt.duration_minutes), nxt.workload.value, nxt.id),
            )
        return nxt

    def delete_schedule_event(self, event_id: str) -> None:
        if self.gateway.execute("DELETE FROM schedule_events WHERE id=?", (str(event_id),)) == 0:
            raise NotFoundError("Schedule entry not found.", id=str(event_id))

    # ---- deadlines ----
    def create_deadline(self, draft: Any) -> Deadline:
        d = _coerce(DeadlineDraft, draft, "deadline")
        dl = Deadline(id=clock.make_id("deadline"), created_at=clock.now_iso(), **d.model_dump())
        self.gateway.execute(
            "INSERT INTO deadlines(id, course, task, due_date, priority, completed, created_at) VALUES (?, ?, ?, ?, ?, ?, ?)",
            (dl.id, dl.course, dl.task, dl.due_date, dl.priority.value, 1 if dl.completed else 0, dl.created_at),
        )
        return dl

    def list_deadlines(self) -> List[Deadline]:
        rows = self.gateway.query("SELECT * FROM deadlines ORDER BY rowid DESC")
        return [self._deadline_from_row(r) for r in rows]

    def get_deadline(self, deadline_id: str) -> Optional[Deadline]:
        row = self.gateway.query_one("SELECT * FROM deadlines WHERE id=?", (str(deadline_id),))
        return self._deadline_from_row(row) if row else None

    def update_deadline(self, deadline_id: str, patch: Any) -> Deadline:
        p = _coerce(DeadlinePatch, patch, "deadline update")
        changes = p.model_dump(exclude_none=True)
        if not changes:
            raise ValidationError("At least one field is required.")
        with self.gateway.transaction() as conn:
            row = conn.execute("SELECT * FROM deadlines WHERE id=?", (str(deadline_id),)).fetchone()
            if row is None:
                raise NotFoundError("Deadline not found.", id=str(deadline_id))
            merged = self._deadline_from_row(row).model_dump()
            merged.update(changes)
            nxt = _coerce(Deadline, merged, "deadline")
            conn.execute(
                "UPDATE deadlines SET course=?, task=?, due_date=?, priority=?, completed=? WHERE id=?",
                (nxt.course, nxt.task, nxt.due_date, nxt.priority.value, 1 if nxt.completed else 0, nxt.id),
            )
        return nxt

    def delete_deadline(self, deadline_id: str) -> None:
        if self.gateway.execute("DELETE FROM deadlines WHERE id=?", (str(deadline_id),)) == 0:
            raise NotFoundError("Deadline not found.", id=str(deadline_id))

    # ---- journal ----
    def record_journal_entry(self, content: str, tags: Optional[List[str]] = None) -> JournalEntry:
        entry = _coerce(
            JournalEntry,
            {"id": clock.make_id("journal"), "content": content, "tags": [] if tags is None else tags, "timestamp": clock.now_iso()},
            "journal entry",
        )
        self.gateway.execute(
            "INSERT INTO journal_entries(id, content, tags_json, created_at) VALUES (?, ?, ?, ?)",
            (entry.id, entry.content, json.dumps(entry.tags, ensure_ascii=False), entry.timestamp),
        )
        return entry

    def list_journal_entries(self, limit: Optional[int] = None) -> List[JournalEntry]:
        if limit is None:
            rows = self.gateway.query("SELECT * FROM journal_entries ORDER BY rowid DESC")
        else:
            if int(limit) <= 0:
                raise ValidationError("Limit must be a positive integer.", limit=limit)
            rows = self.gateway.query("SELECT * FROM journal_entries ORDER BY rowid DESC LIMIT ?", (int(limit),))
        return [
            JournalEntry(id=r["id"], content=r["content"], tags=json.loads(r["tags_json"] or "[]"), timestamp=r["created_at"])
            for r in rows
        ]

    # ---- singletons ----
    def get_user_context(self) -> UserContext:
        row = self.gateway.query_one("SELECT * FROM user_context WHERE id=?", (SINGLETON_ID,))
        if row is None:
            return self.save_user_context(UserContext())
        return UserContext(stress_level=row["stress_level"], energy_level=row["energy_level"], mode=row["mode"])

    def save_user_context(self, ctx: UserContext) -> UserContext:
        self.gateway.execute(
            "INSERT INTO user_context(id, stress_level, energy_level, mode, updated_at) VALUES (?, ?, ?, ?, ?) "
            "ON CONFLICT(id) DO UPDATE SET stress_level=excluded.stress_level, energy_level=excluded.energy_level, "
            "mode=excluded.mode, updated_at=excluded.updated_at",
            (SINGLETON_ID, ctx.stress_level.value, ctx.energy_level.value, ctx.mode, clock.now_iso()),
        )
        return ctx

    def get_notification_preferences(self) -> NotificationPreferences:
        row = self.gateway.query_one("SELECT * FROM notification_preferences WHERE id=?", (SINGLETON_ID,))
        if row is None:
            return self.save_notification_preferences(NotificationPreferences())
        # Rows written before a new agent existed lack its key; model defaults fill it in.
        toggles: Dict[str, bool] = NotificationPreferences().model_dump(mode="json")["category_toggles"]
        toggles.update(json.loads(row["category_toggles_json"] or "{}"))
        return NotificationPreferences.model_validate(
            {
                "quiet_hours": {
                    "enabled": bool(row["quiet_enabled"]),
                    "start_hour": int(row["quiet_start_hour"]),
                    "end_hour": int(row["quiet_end_hour"]),
                },
                "minimum_priority": row["minimum_priority"],
                "allow_critical_in_quiet_hours": bool(row["allow_critical_in_quiet_hours"]),
                "category_toggles": toggles,
            }
        )

    def save_notification_preferences(self, prefs: NotificationPreferences) -> NotificationPreferences:
        toggles = prefs.model_dump(mode="json")["category_toggles"]
        self.gateway.execute(
            "INSERT INTO notification_preferences(id, quiet_enabled, quiet_start_hour, quiet_end_hour, minimum_priority, "
            "allow_critical_in_quiet_hours, category_toggles_json, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?) "
            "ON CONFLICT(id) DO UPDATE SET quiet_enabled=excluded.quiet_enabled, quiet_start_hour=excluded.quiet_start_hour, "
            "quiet_end_hour=excluded.quiet_end_hour, minimum_priority=excluded.minimum_priority, "
            "allow_critical_in_quiet_hours=excluded.allow_critical_in_quiet_hours, "
            "category_toggles_json=excluded.category_toggles_json, updated_at=excluded.updated_at",
            (
                SINGLETON_ID,
                1 if prefs.quiet_hours.enabled else 0,
                int(prefs.quiet_hours.start_hour),
                int(prefs.quiet_hours.end_hour),
                prefs.minimum_priority.value,
                1 if prefs.allow_critical_in_quiet_hours else 0,
                json.dumps(toggles, ensure_ascii=False, sort_keys=True),
                clock.now_iso(),
            ),
        )
        return prefs

    # ---- row mapping ----
    @staticmethod
    def _lecture_from_row(row: sqlite3.Row) -> LectureEvent:
        return LectureEvent(
            id=row["id"],
            title=row["title"],
            start_time=row["start_time"],
            duration_minutes=int(row["duration_minutes"]),
            workload=row["workload"],
            created_at=row["created_at"],
        )

    @staticmethod
    def _deadline_from_row(row: sqlite3.Row) -> Deadline:
        return Deadline(
            id=row["id"],
            course=row["course"],
            task=row["task"],
            due_date=row["due_date"],
            priority=row["priority"],
            completed=bool(row["completed"]),
            created_at=row["created_at"],
        )
