from __future__ import annotations

from typing import Any, Mapping, Protocol

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.sql import TextClause


class Executor(Protocol):
    """
    Anything that runs one statement and reports the affected row count.

    ``DbSession`` is the stock implementation. Transactions, retries and
    timeouts are the executor's business, not the compiler's.
    """

    def execute(
        self,
        sql: str | TextClause,
        params: Mapping[str, Any] | None = None,
    ) -> int:
        ...


class DbSession:
    """
    One connection and one transaction over a SQLAlchemy Engine.

    Commits when the block exits cleanly and rolls back when it raises, so a
    chunked bulk update executed inside one session is all-or-nothing.

    Use as:
        with DbSession(engine) as session:
            bulk_update(session, "users", rows)
            row = session.fetch_one(...)
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._conn: Connection | None = None
        self._tx = None

    def __enter__(self) -> "DbSession":
        if self._conn is not None:
            raise RuntimeError("DbSession is already active; nested sessions are not allowed")
        self._conn = self.engine.connect()
        self._tx = self._conn.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._tx is not None:
                if exc_type:
                    self._tx.rollback()
                else:
                    self._tx.commit()
        finally:
            if self._conn is not None:
                self._conn.close()
            self._conn = None
            self._tx = None
        return False

    @property
    def active(self) -> bool:
        return self._conn is not None

    def _connection(self) -> Connection:
        if self._conn is None:
            raise RuntimeError("DbSession is not active; use within a context manager")
        return self._conn

    def execute(
        self,
        sql: str | TextClause,
        params: Mapping[str, Any] | None = None,
    ) -> int:
        """
        Execute a non-SELECT statement and return affected row count.
        """
        conn = self._connection()
        stmt = text(sql) if isinstance(sql, str) else sql
        result = conn.execute(stmt, dict(params or {}))
        try:
            if result.rowcount is None:
                raise RuntimeError(
                    "execute() received None rowcount; the driver did not report affected rows"
                )
            return int(result.rowcount)
        finally:
            result.close()

    def fetch_one(
        self,
        sql: str | TextClause,
        params: Mapping[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """
        Execute a SELECT expected to return 0 or 1 row. Raises if more than one row.
        """
        conn = self._connection()
        stmt = text(sql) if isinstance(sql, str) else sql
        result = conn.execute(stmt, dict(params or {}))
        row = result.mappings().one_or_none()
        return dict(row) if row is not None else None

    def fetch_all(
        self,
        sql: str | TextClause,
        params: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        conn = self._connection()
        stmt = text(sql) if isinstance(sql, str) else sql
        result = conn.execute(stmt, dict(params or {}))
        return [dict(row) for row in result.mappings()]
