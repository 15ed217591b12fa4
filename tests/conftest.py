from __future__ import annotations

import itertools

import pytest

from companion.core.runtime_store import RuntimeStore


@pytest.fixture
def store():
    s = RuntimeStore()
    yield s
    s.close()


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "data" / "companion.db")


@pytest.fixture
def frozen_clock(monkeypatch):
    """Deterministic timestamps: 2026-03-02T09:00:00.000Z, then +1s per call."""
    counter = itertools.count()

    def fake_now() -> str:
        n = next(counter)
        return f"2026-03-02T09:{n // 60:02d}:{n % 60:02d}.000Z"

    monkeypatch.setattr("companion.core.clock.now_iso", fake_now)
    return fake_now
