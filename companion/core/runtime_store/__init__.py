"""
Runtime state store: agent telemetry in memory, user data in SQLite, one lock.

Telemetry (agent states, event log, notification feed) is rebuilt empty on every start.
"""

from companion.core.runtime_store.feeds import MAX_EVENTS, MAX_NOTIFICATIONS
from companion.core.runtime_store.manager import RuntimeStore

__all__ = ["MAX_EVENTS", "MAX_NOTIFICATIONS", "RuntimeStore"]
