from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from companion.core.errors import CompanionError, NotFoundError, format_issues
from companion.core.runtime_store import RuntimeStore
from companion.web.models import (
    ContextResponse,
    ContextUpdateRequest,
    DeadlineCreateRequest,
    DeadlineListResponse,
    DeadlineResponse,
    DeadlineUpdateRequest,
    HealthResponse,
    JournalCreateRequest,
    JournalEntryResponse,
    JournalListResponse,
    LectureCreateRequest,
    LectureResponse,
    LectureUpdateRequest,
    PreferencesResponse,
    PreferencesUpdateRequest,
    ScheduleListResponse,
)

_BAD_REQUEST_CODES = {"validation_error", "invalid_event", "invalid_notification", "unknown_agent"}


def status_for(exc: CompanionError) -> int:
    if exc.code == "not_found":
        return 404
    if exc.code in _BAD_REQUEST_CODES:
        return 400
    return 500


def create_app(store: RuntimeStore, *, logger=None, allowed_origins: Optional[List[str]] = None) -> FastAPI:
    app = FastAPI(title="Companion", version="0.1.0")

    if allowed_origins:
        if any(o == "*" for o in allowed_origins):
            raise ValueError("Wildcard CORS origins are not allowed.")
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(CompanionError)
    async def companion_error_handler(request: Request, exc: CompanionError):
        code = status_for(exc)
        if code >= 500 and logger:
            logger.error(f"{request.method} {request.url.path} failed: {exc.to_dict()}")
        content: Dict[str, Any] = {"error": exc.user_message, "code": exc.code}
        if "issues" in exc.context:
            content["issues"] = exc.context["issues"]
        return JSONResponse(status_code=code, content=content)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid request.", "issues": format_issues(exc)})

    @app.get("/api/health", response_model=HealthResponse)
    def health():
        return {"status": "ok"}

    @app.get("/api/dashboard")
    def dashboard():
        return store.get_snapshot().model_dump(mode="json")

    # ---- context / preferences ----
    @app.get("/api/context", response_model=ContextResponse)
    def get_context():
        return {"context": store.get_user_context()}

    @app.post("/api/context", response_model=ContextResponse)
    def update_context(req: ContextUpdateRequest):
        return {"context": store.set_user_context(req)}

    @app.get("/api/notification-preferences", response_model=PreferencesResponse)
    def get_preferences():
        return {"preferences": store.get_notification_preferences()}

    @app.put("/api/notification-preferences", response_model=PreferencesResponse)
    def update_preferences(req: PreferencesUpdateRequest):
        return {"preferences": store.set_notification_preferences(req)}

    # ---- journal ----
    @app.post("/api/journal", response_model=JournalEntryResponse)
    def create_journal_entry(req: JournalCreateRequest):
        return {"entry": store.record_journal_entry(req.content, req.tags)}

    @app.get("/api/journal", response_model=JournalListResponse)
    def list_journal_entries(limit: Optional[int] = None):
        return {"entries": store.get_journal_entries(limit)}

    # ---- schedule ----
    @app.post("/api/schedule", response_model=LectureResponse, status_code=201)
    def create_lecture(req: LectureCreateRequest):
        return {"lecture": store.create_lecture_event(req)}

    @app.get("/api/schedule", response_model=ScheduleListResponse)
    def list_schedule():
        return {"schedule": store.get_schedule_events()}

    @app.get("/api/schedule/{event_id}", response_model=LectureResponse)
    def get_lecture(event_id: str):
        ev = store.get_schedule_event_by_id(event_id)
        if ev is None:
            raise NotFoundError("Schedule entry not found.", id=event_id)
        return {"lecture": ev}

    @app.patch("/api/schedule/{event_id}", response_model=LectureResponse)
    def update_lecture(event_id: str, req: LectureUpdateRequest):
        return {"lecture": store.update_schedule_event(event_id, req)}

    @app.delete("/api/schedule/{event_id}", status_code=204)
    def delete_lecture(event_id: str):
        store.delete_schedule_event(event_id)
        return Response(status_code=204)

    # ---- deadlines ----
    @app.post("/api/deadlines", response_model=DeadlineResponse, status_code=201)
    def create_deadline(req: DeadlineCreateRequest):
        return {"deadline": store.create_deadline(req)}

    @app.get("/api/deadlines", response_model=DeadlineListResponse)
    def list_deadlines():
        return {"deadlines": store.get_deadlines()}

    @app.get("/api/deadlines/{deadline_id}", response_model=DeadlineResponse)
    def get_deadline(deadline_id: str):
        dl = store.get_deadline_by_id(deadline_id)
        if dl is None:
            raise NotFoundError("Deadline not found.", id=deadline_id)
        return {"deadline": dl}

    @app.patch("/api/deadlines/{deadline_id}", response_model=DeadlineResponse)
    def update_deadline(deadline_id: str, req: DeadlineUpdateRequest):
        return {"deadline": store.update_deadline(deadline_id, req)}

    @app.delete("/api/deadlines/{deadline_id}", status_code=204)
    def delete_deadline(deadline_id: str):
        store.delete_deadline(deadline_id)
        return Response(status_code=204)

    return app
