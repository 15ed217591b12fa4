"""
Durable tier: SQLite gateway plus per-entity CRUD.

Only schedule events, deadlines, journal entries, user context and notification
preferences live here. Agent telemetry never touches the database.
"""

from companion.core.persistence.entities import DurableEntityStore
from companion.core.persistence.gateway import PersistenceGateway

__all__ = ["DurableEntityStore", "PersistenceGateway"]
