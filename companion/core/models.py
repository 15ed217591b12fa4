from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AgentName(str, Enum):
    notes = "notes"
    lecture_plan = "lecture-plan"
    assignment_tracker = "assignment-tracker"
    food_tracking = "food-tracking"
    social_highlights = "social-highlights"
    video_editor = "video-editor"
    orchestrator = "orchestrator"


# Snapshot order; closed set.
AGENT_NAMES: List[AgentName] = list(AgentName)


class AgentStatus(str, Enum):
    idle = "idle"
    running = "running"
    error = "error"


class Priority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class Level(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


def _non_empty(v: str, what: str) -> str:
    v = str(v or "").strip()
    if not v:
        raise ValueError(f"{what} required")
    return v


# ---- telemetry (transient) ----
class AgentEvent(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    source: AgentName
    event_type: str
    priority: Priority
    timestamp: str
    payload: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("id", "event_type", "timestamp")
    @classmethod
    def _required(cls, v: str, info) -> str:
        return _non_empty(v, info.field_name)

    @field_validator("payload")
    @classmethod
    def _jsonable(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        # Opaque to the store; it only has to survive a JSON round trip for the API.
        try:
            json.dumps(v, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise ValueError("payload must be JSON-serializable") from e
        return v


class AgentState(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: AgentName
    status: AgentStatus = AgentStatus.idle
    last_run_at: Optional[str] = None
    last_event: Optional[AgentEvent] = None


class NotificationDraft(BaseModel):
    # id/timestamp from callers are dropped, never trusted
    model_config = ConfigDict(extra="ignore")

    title: str
    message: str
    priority: Priority
    source: AgentName

    @field_validator("title", "message")
    @classmethod
    def _required(cls, v: str, info) -> str:
        return _non_empty(v, info.field_name)


class Notification(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    title: str
    message: str
    priority: Priority
    source: AgentName
    timestamp: str


# ---- durable singletons ----
class UserContext(BaseModel):
    model_config = ConfigDict(extra="forbid")

    stress_level: Level = Level.medium
    energy_level: Level = Level.medium
    mode: str = "balanced"

    @field_validator("mode")
    @classmethod
    def _mode(cls, v: str) -> str:
        return _non_empty(v, "mode")


class UserContextPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    stress_level: Optional[Level] = None
    energy_level: Optional[Level] = None
    mode: Optional[str] = None


class QuietHours(BaseModel):
    model_config = ConfigDict(extra="forbid")

    enabled: bool = False
    start_hour: int = Field(default=22, ge=0, le=23)
    end_hour: int = Field(default=7, ge=0, le=23)


class QuietHoursPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    enabled: Optional[bool] = None
    start_hour: Optional[int] = Field(default=None, ge=0, le=23)
    end_hour: Optional[int] = Field(default=None, ge=0, le=23)


def _all_categories_on() -> Dict[AgentName, bool]:
    return {name: True for name in AGENT_NAMES}


class NotificationPreferences(BaseModel):
    model_config = ConfigDict(extra="forbid")

    quiet_hours: QuietHours = Field(default_factory=QuietHours)
    minimum_priority: Priority = Priority.low
    allow_critical_in_quiet_hours: bool = True
    category_toggles: Dict[AgentName, bool] = Field(default_factory=_all_categories_on)


class NotificationPreferencesPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    quiet_hours: Optional[QuietHoursPatch] = None
    minimum_priority: Optional[Priority] = None
    allow_critical_in_quiet_hours: Optional[bool] = None
    category_toggles: Optional[Dict[AgentName, bool]] = None


# ---- durable collections ----
class LectureEventDraft(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1, max_length=200)
    start_time: str = Field(min_length=1)
    duration_minutes: int = Field(gt=0, le=24 * 60)
    workload: Level

    @field_validator("title")
    @classmethod
    def _strip(cls, v: str) -> str:
        return _non_empty(v, "title")


class LectureEventPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    start_time: Optional[str] = Field(default=None, min_length=1)
    duration_minutes: Optional[int] = Field(default=None, gt=0, le=24 * 60)
    workload: Optional[Level] = None


class LectureEvent(LectureEventDraft):
    id: str
    created_at: str


class DeadlineDraft(BaseModel):
    model_config = ConfigDict(extra="forbid")

    course: str = Field(min_length=1, max_length=200)
    task: str = Field(min_length=1, max_length=300)
    due_date: str = Field(min_length=1)
    priority: Priority
    completed: bool = False

    @field_validator("course", "task")
    @classmethod
    def _strip(cls, v: str, info) -> str:
        return _non_empty(v, info.field_name)


class DeadlinePatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    course: Optional[str] = Field(default=None, min_length=1, max_length=200)
    task: Optional[str] = Field(default=None, min_length=1, max_length=300)
    due_date: Optional[str] = Field(default=None, min_length=1)
    priority: Optional[Priority] = None
    completed: Optional[bool] = None


class Deadline(DeadlineDraft):
    id: str
    created_at: str


class JournalEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    content: str = Field(min_length=1, max_length=10_000)
    tags: List[str] = Field(default_factory=list)
    timestamp: str

    @field_validator("content")
    @classmethod
    def _content(cls, v: str) -> str:
        return _non_empty(v, "content")


# ---- read side ----
class DashboardSummary(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    today_focus: str
    pending_deadlines: int
    meal_compliance: int
    digest_ready: bool


class DashboardSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    generated_at: str
    agent_states: List[AgentState]
    events: List[AgentEvent]
    notifications: List[Notification]
    summary: DashboardSummary
