from __future__ import annotations

import uuid
from datetime import datetime, timezone


def now_iso() -> str:
    """UTC wall clock as ISO-8601 with millisecond precision, e.g. 2026-02-14T12:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def make_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex}"
