from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from ..errors import (
    CompileError,
    InconsistentKeyShapeError,
    UndeclaredColumnError,
    UnsupportedValueTypeError,
)
from .escape import check_bindable
from .models import BatchSchema, UpdateRow


@dataclass(frozen=True)
class ColumnSet:
    key_columns: tuple[str, ...]
    data_columns: tuple[str, ...]


def flatten_key(where: Mapping[str, Any]) -> list[tuple[str, Any]]:
    """
    Flatten a ``where`` mapping into ``(column, value)`` pairs.

    A compound-key wrapper (a key whose value is a mapping) is replaced in
    place by its inner columns, in the wrapper's own order:

        >>> flatten_key({"org_id_email": {"org_id": 1, "email": "a@x.com"}})
        [('org_id', 1), ('email', 'a@x.com')]

    Only one level of wrapping is allowed. Key values cannot be NULL since
    ``col = NULL`` never matches a row.
    """
    if not isinstance(where, Mapping):
        raise CompileError(f"where must be a mapping, got {type(where).__name__}")
    if not where:
        raise InconsistentKeyShapeError("where cannot be empty")

    pairs: list[tuple[str, Any]] = []
    for name, value in where.items():
        if isinstance(value, Mapping):
            if not value:
                raise InconsistentKeyShapeError(f"compound key {name!r} has no columns")
            for inner_name, inner_value in value.items():
                if isinstance(inner_value, Mapping):
                    raise UnsupportedValueTypeError(
                        f"compound key {name!r} nests another mapping under {inner_name!r}"
                    )
                pairs.append((inner_name, inner_value))
        else:
            pairs.append((name, value))

    seen: set[str] = set()
    for column, value in pairs:
        if column in seen:
            raise InconsistentKeyShapeError(f"key column {column!r} appears more than once")
        seen.add(column)
        if value is None:
            raise UnsupportedValueTypeError(f"key column {column!r} cannot be NULL")
        check_bindable(value, f"value for key column {column!r}")
    return pairs


def derive_columns(
    rows: Sequence[UpdateRow],
    schema: Optional[BatchSchema] = None,
) -> ColumnSet:
    """
    Key columns come from the first row (or the declared schema); data
    columns are the union of every row's ``data`` keys in first-appearance
    order (or in schema order when a schema is declared).
    """
    if not rows:
        return ColumnSet((), ())

    if schema is not None:
        key_columns = tuple(schema.key_columns)
    else:
        key_columns = tuple(column for column, _ in flatten_key(rows[0].where))

    seen: dict[str, None] = {}
    for row in rows:
        if not isinstance(row.data, Mapping):
            raise CompileError(f"data must be a mapping, got {type(row.data).__name__}")
        for column in row.data:
            seen.setdefault(column)

    if schema is None:
        return ColumnSet(key_columns, tuple(seen))

    undeclared = [column for column in seen if column not in schema.data_columns]
    if undeclared:
        raise UndeclaredColumnError(f"Columns not declared in batch schema: {undeclared}")
    return ColumnSet(key_columns, tuple(c for c in schema.data_columns if c in seen))


def key_values(rows: Sequence[UpdateRow], key_columns: Sequence[str]) -> list[tuple[Any, ...]]:
    """
    Each row's key values ordered by ``key_columns``.

    Rows may list their key columns in any order, but every row must carry
    exactly the same set of columns.
    """
    expected = set(key_columns)
    result = []
    for index, row in enumerate(rows):
        pairs = dict(flatten_key(row.where))
        if set(pairs) != expected:
            raise InconsistentKeyShapeError(
                f"Row {index} is keyed by {sorted(pairs)}, expected {sorted(expected)}"
            )
        result.append(tuple(pairs[column] for column in key_columns))
    return result
