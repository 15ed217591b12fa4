from __future__ import annotations

from typing import Iterable

from companion.core.models import AgentEvent, DashboardSummary, UserContext

FOCUS_BY_MODE = {
    "focus": "Deep work + assignment completion",
    "recovery": "Light planning + recovery tasks",
}
DEFAULT_FOCUS = "Balanced schedule with deadlines first"

DEADLINE_EVENT = "assignment.deadline"
FOOD_NUDGE_EVENT = "food.nudge"
DIGEST_READY_EVENT = "video.digest-ready"


def compute_summary(events: Iterable[AgentEvent], context: UserContext) -> DashboardSummary:
    """Derive the dashboard summary from the current event log; nothing here is stored."""
    deadlines = 0
    nudges = 0
    digest_ready = False
    for ev in events:
        if ev.event_type == DEADLINE_EVENT:
            deadlines += 1
        elif ev.event_type == FOOD_NUDGE_EVENT:
            nudges += 1
        elif ev.event_type == DIGEST_READY_EVENT:
            digest_ready = True
    return DashboardSummary(
        today_focus=FOCUS_BY_MODE.get(context.mode, DEFAULT_FOCUS),
        pending_deadlines=deadlines,
        meal_compliance=max(10, 100 - nudges * 8),
        digest_ready=digest_ready,
    )
