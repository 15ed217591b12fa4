from __future__ import annotations

from typing import Any, Callable, List, Tuple

from companion.core.persistence.migrations.migration_0001_initial import migrate as mig_0001

# (target user_version, migrate(conn)); append only, never renumber.
MIGRATIONS: List[Tuple[int, Callable[[Any], None]]] = [(1, mig_0001)]

LATEST_VERSION = MIGRATIONS[-1][0]

__all__ = ["MIGRATIONS", "LATEST_VERSION"]
