"""
Persistence smoke verification script.

Opens a store on a throwaway file, writes one of each durable entity plus some
agent telemetry, closes it, reopens the same file and checks that:
- every durable entity came back unchanged
- agent states, the event log and the notification feed started empty

Usage:
  python scripts/verify_persistence.py

Exit codes: 0 ok, 2 a check failed, 3 unexpected error.
"""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def main() -> int:
    try:
        os.chdir(_repo_root())
        from companion.core.runtime_store import RuntimeStore

        with tempfile.TemporaryDirectory() as td:
            db = str(Path(td) / "companion.db")

            with RuntimeStore(db) as first:
                first.set_user_context({"mode": "focus", "stress_level": "high"})
                first.set_notification_preferences({"quiet_hours": {"enabled": True}})
                lecture = first.create_lecture_event({"title": "Algorithms", "start_time": "2026-03-02T09:00:00Z", "duration_minutes": 90, "workload": "high"})
                deadline = first.create_deadline({"course": "Algorithms", "task": "Problem set 3", "due_date": "2026-03-09T23:59:00Z", "priority": "high"})
                entry = first.record_journal_entry("Long day, good progress.", ["study"])
                first.mark_agent_running("notes")
                first.record_event({"id": "e1", "source": "assignment-tracker", "event_type": "assignment.deadline", "priority": "high", "timestamp": "2026-03-02T09:00:00Z"})
                first.push_notification({"title": "Heads up", "message": "Deadline soon", "priority": "high", "source": "assignment-tracker"})

            with RuntimeStore(db) as second:
                ctx = second.get_user_context()
                assert ctx.mode == "focus" and ctx.stress_level.value == "high", "Expected context to survive restart"
                assert second.get_notification_preferences().quiet_hours.enabled is True, "Expected preferences to survive restart"
                assert second.get_schedule_event_by_id(lecture.id) == lecture, "Expected schedule entry to survive restart"
                assert second.get_deadline_by_id(deadline.id) == deadline, "Expected deadline to survive restart"
                assert second.get_journal_entries() == [entry], "Expected journal to survive restart"

                snap = second.get_snapshot()
                assert snap.events == [] and snap.notifications == [], "Expected telemetry to start empty"
                assert all(s.status.value == "idle" and s.last_run_at is None for s in snap.agent_states), "Expected agents to start idle"
                assert snap.summary.pending_deadlines == 0, "Expected summary to ignore durable deadlines"

        return 0
    except AssertionError:
        return 2
    except Exception:
        return 3


if __name__ == "__main__":
    sys.exit(main())
