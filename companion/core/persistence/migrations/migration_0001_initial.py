from __future__ import annotations

from typing import Any


def migrate(conn: Any) -> None:
    """
    Initial durable schema: one table per entity kind.
    Idempotent and transactional (caller controls commit/rollback).
    """
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schedule_events (
          id TEXT PRIMARY KEY,
          title TEXT NOT NULL,
          start_time TEXT NOT NULL,
          duration_minutes INTEGER NOT NULL,
          workload TEXT NOT NULL,
          created_at TEXT NOT NULL
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS deadlines (
          id TEXT PRIMARY KEY,
          course TEXT NOT NULL,
          task TEXT NOT NULL,
          due_date TEXT NOT NULL,
          priority TEXT NOT NULL,
          completed INTEGER NOT NULL DEFAULT 0,
          created_at TEXT NOT NULL
        )
        """
    )
    conn.execute("CREATE INDEX IF NOT EXISTS idx_deadlines_due ON deadlines(due_date)")
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS journal_entries (
          id TEXT PRIMARY KEY,
          content TEXT NOT NULL,
          tags_json TEXT NOT NULL DEFAULT '[]',
          created_at TEXT NOT NULL
        )
        """
    )
    # Singletons: the CHECK pins the table to a single row.
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS user_context (
          id TEXT PRIMARY KEY CHECK (id = 'default'),
          stress_level TEXT NOT NULL,
          energy_level TEXT NOT NULL,
          mode TEXT NOT NULL,
          updated_at TEXT NOT NULL
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS notification_preferences (
          id TEXT PRIMARY KEY CHECK (id = 'default'),
          quiet_enabled INTEGER NOT NULL,
          quiet_start_hour INTEGER NOT NULL,
          quiet_end_hour INTEGER NOT NULL,
          minimum_priority TEXT NOT NULL,
          allow_critical_in_quiet_hours INTEGER NOT NULL,
          category_toggles_json TEXT NOT NULL,
          updated_at TEXT NOT NULL
        )
        """
    )
