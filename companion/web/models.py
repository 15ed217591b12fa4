from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from companion.core.models import (
    Deadline,
    DeadlineDraft,
    DeadlinePatch,
    JournalEntry,
    LectureEvent,
    LectureEventDraft,
    LectureEventPatch,
    NotificationPreferences,
    NotificationPreferencesPatch,
    UserContext,
    UserContextPatch,
)

# Request bodies are the core drafts/patches, so HTTP and the store validate the same way.
ContextUpdateRequest = UserContextPatch
PreferencesUpdateRequest = NotificationPreferencesPatch
LectureCreateRequest = LectureEventDraft
LectureUpdateRequest = LectureEventPatch
DeadlineCreateRequest = DeadlineDraft
DeadlineUpdateRequest = DeadlinePatch


class JournalCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    content: str = Field(min_length=1, max_length=10_000)
    tags: Optional[List[str]] = None


class HealthResponse(BaseModel):
    status: str


class ContextResponse(BaseModel):
    context: UserContext


class PreferencesResponse(BaseModel):
    preferences: NotificationPreferences


class JournalEntryResponse(BaseModel):
    entry: JournalEntry


class JournalListResponse(BaseModel):
    entries: List[JournalEntry]


class LectureResponse(BaseModel):
    lecture: LectureEvent


class ScheduleListResponse(BaseModel):
    schedule: List[LectureEvent]


class DeadlineResponse(BaseModel):
    deadline: Deadline


class DeadlineListResponse(BaseModel):
    deadlines: List[Deadline]
