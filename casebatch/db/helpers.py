from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Sequence

from ..config import CompilerConfig
from .compiler import RowLike, compile_bulk_update_chunks
from .models import BatchSchema, CompiledStatement
from .session import Executor

logger = logging.getLogger(__name__)


def execute_compiled(executor: Executor, statements: Sequence[CompiledStatement]) -> int:
    """
    Run already-compiled statements in order on one executor and return the
    total affected row count. Driver errors propagate unchanged.
    """
    affected = 0
    for compiled in statements:
        affected += executor.execute(compiled.text(), compiled.parameters)
    return affected


def bulk_update(
    executor: Executor,
    table: Any,
    rows: Iterable[RowLike],
    config: Optional[CompilerConfig] = None,
    schema: Optional[BatchSchema] = None,
) -> int:
    """
Update many rows, each selected by its own (possibly compound) key, with a
single CASE-based UPDATE statement.

Each row is ``{"where": {...key columns...}, "data": {...columns to set...}}``
or an ``UpdateRow``. Columns a row leaves out of ``data`` keep their stored
value; ``None`` sets the column to NULL.

⚠️ IMPORTANT USAGE CONTRACT ⚠️
The whole batch is compiled and validated before anything is sent, so a bad
row never causes a partial update. With ``config.chunk_size`` set the batch
becomes several statements; run them inside one ``DbSession`` so the
transaction keeps them all-or-nothing.

Args:
    executor: Active DbSession (or any Executor)
    table: Table name, "schema.table", or a SQLAlchemy Table
    rows: Update rows in precedence order (first row wins on duplicate keys)
    config: Dialect quoting and rendering options (defaults to ANSI quoting)
    schema: Optional declared key/data columns every row must conform to

Returns:
    Affected row count reported by the driver (0 for a no-op batch)

Raises:
    CompileError: (and subclasses) before any statement is executed
    Whatever the executor raises, unchanged

Example:

    with DbSession(engine) as session:
        bulk_update(
            session,
            "users",
            [
                {"where": {"org_id": 1, "email": "a@x.com"}, "data": {"name": "A2", "status": "ACTIVE"}},
                {"where": {"org_id": 1, "email": "b@x.com"}, "data": {"status": "INACTIVE"}},
            ],
        )
"""
    statements = compile_bulk_update_chunks(table, rows, config, schema)
    if not statements:
        return 0
    affected = execute_compiled(executor, statements)
    logger.debug(
        "Bulk update of %s ran %d statement(s), %d row(s) affected",
        statements[0].table,
        len(statements),
        affected,
    )
    return affected
