from __future__ import annotations

import os
import sqlite3
import threading
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Sequence

from companion.core.errors import PersistenceError
from companion.core.persistence.migrations import MIGRATIONS

MEMORY_PATH = ":memory:"


class PersistenceGateway:
    """
    Thin wrapper around one SQLite database (file or private in-memory).

    NOTES:
    - a single long-lived connection; an in-memory database only lives as long as it does
    - every call commits before returning (write-through)
    - cross-process writers are serialized by SQLite's own file locking, nothing more
    """

    def __init__(self, path: Optional[str] = None, *, logger: Any = None):
        self.path = str(path) if path else MEMORY_PATH
        self.logger = logger
        self._lock = threading.RLock()
        self._conn: Optional[sqlite3.Connection] = None
        self._open()

    @property
    def is_ephemeral(self) -> bool:
        return self.path == MEMORY_PATH

    # ---- lifecycle ----
    def _open(self) -> None:
        try:
            if not self.is_ephemeral:
                os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
            # autocommit mode; transaction() issues BEGIN/COMMIT itself
            conn = sqlite3.connect(self.path, check_same_thread=False, isolation_level=None)
            conn.row_factory = sqlite3.Row
            if not self.is_ephemeral:
                conn.execute("PRAGMA journal_mode=WAL;")
                conn.execute("PRAGMA synchronous=NORMAL;")
        except (sqlite3.Error, OSError) as e:
            raise PersistenceError("Could not open the database.", operation="open", db_path=self.path, reason=str(e)) from e
        self._conn = conn

    def close(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            try:
                self._conn.close()
            finally:
                self._conn = None

    @property
    def closed(self) -> bool:
        return self._conn is None

    # ---- schema ----
    def user_version(self) -> int:
        row = self.query_one("PRAGMA user_version")
        return int(row[0] or 0) if row else 0

    def migrate(self) -> int:
        """Apply pending migrations in one transaction; safe to call on every open."""
        with self.transaction() as conn:
            ver = int(conn.execute("PRAGMA user_version").fetchone()[0] or 0)
            applied: List[int] = []
            for target_version, fn in MIGRATIONS:
                if int(target_version) <= ver:
                    continue
                fn(conn)
                conn.execute(f"PRAGMA user_version={int(target_version)}")
                ver = int(target_version)
                applied.append(ver)
        if applied and self.logger:
            self.logger.info(f"Applied store migrations {applied} to {self.path}")
        return ver

    # ---- statements ----
    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            conn = self._require_conn("transaction")
            try:
                conn.execute("BEGIN IMMEDIATE")
                yield conn
                conn.execute("COMMIT")
            except sqlite3.Error as e:
                self._rollback_quietly(conn)
                raise PersistenceError("Database write failed.", operation="transaction", db_path=self.path, reason=str(e)) from e
            except BaseException:
                self._rollback_quietly(conn)
                raise

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        with self.transaction() as conn:
            cur = conn.execute(sql, tuple(params))
            return int(cur.rowcount or 0)

    def query(self, sql: str, params: Sequence[Any] = ()) -> List[sqlite3.Row]:
        with self._lock:
            conn = self._require_conn("query")
            try:
                return list(conn.execute(sql, tuple(params)).fetchall())
            except sqlite3.Error as e:
                raise PersistenceError("Database read failed.", operation="query", db_path=self.path, reason=str(e)) from e

    def query_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[sqlite3.Row]:
        rows = self.query(sql, params)
        return rows[0] if rows else None

    # ---- internals ----
    def _require_conn(self, operation: str) -> sqlite3.Connection:
        if self._conn is None:
            raise PersistenceError("Database is closed.", operation=operation, db_path=self.path)
        return self._conn

    @staticmethod
    def _rollback_quietly(conn: sqlite3.Connection) -> None:
        if conn.in_transaction:
            try:
                conn.execute("ROLLBACK")
            except sqlite3.Error:
                pass
