from __future__ import annotations

import logging
import time
from typing import Any, Iterable, Optional

from sqlalchemy.engine import Engine

from ..config import CompilerConfig
from ..errors import BulkUpdateExecutionError
from .compiler import RowLike, compile_bulk_update_chunks
from .helpers import execute_compiled
from .metrics import observe_bulk_update
from .models import BatchSchema
from .session import DbSession

logger = logging.getLogger(__name__)


class BulkUpdater:
    """
    Engine-owning entry point for bulk updates.

    Each call compiles the batch, opens its own DbSession, executes the
    compiled statement(s) and commits. Compile errors are raised as-is before
    a connection is taken; anything that fails during execution is rolled
    back and raised as BulkUpdateExecutionError. Nothing is retried.

    Usage:
        updater = BulkUpdater(engine)
        updater.bulk_update("users", rows)

        users = updater.bind("users")
        users(rows)
    """

    def __init__(self, engine: Engine, config: Optional[CompilerConfig] = None) -> None:
        self.engine = engine
        self.config = config or CompilerConfig.for_dialect(engine.dialect.name)

    def bulk_update(
        self,
        table: Any,
        rows: Iterable[RowLike],
        schema: Optional[BatchSchema] = None,
    ) -> int:
        """
        Update every row in ``rows`` and return the affected row count.

        Raises:
            CompileError: the batch is invalid; nothing was executed
            BulkUpdateExecutionError: the database rejected the statement
        """
        start_time = time.monotonic()
        rows = list(rows)
        statements = compile_bulk_update_chunks(table, rows, self.config, schema)
        if not statements:
            return 0

        table_name = statements[0].table
        status = "success"
        try:
            with DbSession(self.engine) as session:
                affected = execute_compiled(session, statements)
        except Exception as exc:
            status = "error"
            logger.error("Bulk update of %s failed (%d rows): %s", table_name, len(rows), exc)
            raise BulkUpdateExecutionError(str(exc)) from exc
        finally:
            observe_bulk_update(table_name, status, time.monotonic() - start_time, len(rows))

        logger.info(
            "Bulk updated %s: %d row(s) submitted, %d affected, %d statement(s)",
            table_name,
            len(rows),
            affected,
            len(statements),
        )
        return affected

    def bind(self, table: Any, schema: Optional[BatchSchema] = None) -> "BoundBulkUpdate":
        """Pre-bind a table (and optionally a schema) for repeated updates."""
        return BoundBulkUpdate(self, table, schema)


class BoundBulkUpdate:
    """A BulkUpdater fixed to one table."""

    def __init__(self, updater: BulkUpdater, table: Any, schema: Optional[BatchSchema] = None) -> None:
        self.updater = updater
        self.table = table
        self.schema = schema

    def __call__(self, rows: Iterable[RowLike]) -> int:
        return self.updater.bulk_update(self.table, rows, self.schema)

    def __repr__(self) -> str:
        return f"BoundBulkUpdate(table={self.table!r})"
