from __future__ import annotations

import dataclasses
import logging
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..config import CompilerConfig
from .clauses import build_case_clause, build_membership_predicate, build_row_predicate
from .columns import derive_columns, key_values
from .escape import ValueRenderer, quote_identifier, resolve_table
from .models import BatchSchema, CompiledStatement, UpdateRow

logger = logging.getLogger(__name__)

RowLike = UpdateRow | Mapping[str, Any]


def compile_bulk_update_chunks(
    table: Any,
    rows: Iterable[RowLike],
    config: Optional[CompilerConfig] = None,
    schema: Optional[BatchSchema] = None,
) -> list[CompiledStatement]:
    """
    Compile a batch into UPDATE statements of at most ``config.chunk_size``
    rows each (one statement when ``chunk_size`` is None).

    Every row is validated before anything is returned, so a bad row in the
    last chunk still fails the whole batch. Returns an empty list when there
    is nothing to update.

    Raises:
        InvalidIdentifierError: table or column name is not a safe identifier
        UnsupportedValueTypeError: a value cannot be bound or inlined
        InconsistentKeyShapeError: rows are keyed by different columns
        UndeclaredColumnError: a row sets a column ``schema`` does not declare
    """
    config = config or CompilerConfig()
    table_name, quoted_table = resolve_table(table, config)
    batch = [UpdateRow.coerce(row) for row in rows]

    if not batch:
        logger.info("Empty batch for %s; nothing to update", table_name)
        return []

    columns = derive_columns(batch, schema)
    keys = key_values(batch, columns.key_columns)

    if not columns.data_columns:
        logger.info(
            "No row in batch of %d for %s sets any column; nothing to update",
            len(batch),
            table_name,
        )
        return []

    _warn_duplicate_keys(table_name, columns.key_columns, keys)

    quoted_keys = [quote_identifier(c, config, "key column") for c in columns.key_columns]
    quoted_data = {c: quote_identifier(c, config, "column") for c in columns.data_columns}

    size = config.chunk_size or len(batch)
    statements = []
    for start in range(0, len(batch), size):
        chunk = batch[start:start + size]
        chunk_columns = [c for c in columns.data_columns if any(c in row.data for row in chunk)]
        if not chunk_columns:
            continue

        renderer = ValueRenderer(config)
        # Each row's key values are rendered once; WHEN predicates and the
        # IN tuple share the same placeholders.
        rendered_keys = [[renderer.render(v) for v in row_keys] for row_keys in keys[start:start + size]]
        predicates = [build_row_predicate(quoted_keys, rendered) for rendered in rendered_keys]

        set_clauses = []
        for column in chunk_columns:
            branches = [
                (predicates[i], renderer.render(row.data[column]))
                for i, row in enumerate(chunk)
                if column in row.data
            ]
            set_clauses.append(build_case_clause(quoted_data[column], branches))

        where_sql = build_membership_predicate(quoted_keys, rendered_keys)
        sql = f"UPDATE {quoted_table} SET {', '.join(set_clauses)} WHERE {where_sql};"

        logger.debug(
            "Compiled bulk update for %s: rows=%d columns=%d parameters=%d",
            table_name,
            len(chunk),
            len(chunk_columns),
            len(renderer.parameters),
        )
        statements.append(
            CompiledStatement(
                statement=sql,
                parameters=renderer.parameters,
                table=table_name,
                key_columns=columns.key_columns,
                data_columns=tuple(chunk_columns),
                row_count=len(chunk),
            )
        )
    return statements


def compile_bulk_update(
    table: Any,
    rows: Iterable[RowLike],
    config: Optional[CompilerConfig] = None,
    schema: Optional[BatchSchema] = None,
) -> CompiledStatement | None:
    """
    Compile the whole batch into a single UPDATE, ignoring ``chunk_size``.

    Returns None for an empty batch or when no row sets any column.

    Example:
        >>> compiled = compile_bulk_update("users", [
        ...     {"where": {"id": 1}, "data": {"name": "A"}},
        ...     {"where": {"id": 2}, "data": {"name": None}},
        ... ])
        >>> compiled.statement
        'UPDATE "users" SET "name" = CASE WHEN ("id" = :p0) THEN :p2 WHEN ("id" = :p1) THEN NULL ELSE "name" END WHERE "id" IN (:p0, :p1);'
        >>> compiled.parameters
        {'p0': 1, 'p1': 2, 'p2': 'A'}
    """
    if config is not None and config.chunk_size is not None:
        config = dataclasses.replace(config, chunk_size=None)
    statements = compile_bulk_update_chunks(table, rows, config, schema)
    return statements[0] if statements else None


def _warn_duplicate_keys(
    table_name: str,
    key_columns: Sequence[str],
    keys: Sequence[tuple[Any, ...]],
) -> None:
    # Typed so that 1, 1.0 and True stay distinct keys.
    seen: set[tuple[Any, ...]] = set()
    reported: set[tuple[Any, ...]] = set()
    for values in keys:
        typed = tuple((type(v), v) for v in values)
        if typed in seen and typed not in reported:
            logger.warning(
                "Duplicate key %s=%r in bulk update for %s; the first row wins",
                ",".join(key_columns),
                values,
                table_name,
            )
            reported.add(typed)
        seen.add(typed)
