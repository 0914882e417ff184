"""
Clause builders for the bulk UPDATE statement.

All inputs are already-rendered SQL fragments: quoted identifiers from
:func:`casebatch.db.escape.quote_identifier` and placeholders or literals from
:class:`casebatch.db.escape.ValueRenderer`. Nothing here touches raw values.
"""
from __future__ import annotations

from typing import Sequence


def build_row_predicate(key_columns: Sequence[str], key_values: Sequence[str]) -> str:
    """``"k1" = v1 AND "k2" = v2`` for one row."""
    if len(key_columns) != len(key_values):
        raise ValueError(
            f"Got {len(key_values)} key values for {len(key_columns)} key columns"
        )
    return " AND ".join(f"{column} = {value}" for column, value in zip(key_columns, key_values))


def build_case_clause(column: str, branches: Sequence[tuple[str, str]]) -> str:
    """
    ``"c" = CASE WHEN (pred) THEN v ... ELSE "c" END``.

    ``branches`` is ``(predicate, value)`` pairs in row order. The first
    matching WHEN wins, so row order decides duplicate keys. Rows absent from
    ``branches`` fall through to ``ELSE`` and keep their current value.
    """
    if not branches:
        raise ValueError(f"CASE clause for {column} needs at least one WHEN branch")
    whens = " ".join(f"WHEN ({predicate}) THEN {value}" for predicate, value in branches)
    return f"{column} = CASE {whens} ELSE {column} END"


def build_membership_predicate(
    key_columns: Sequence[str],
    key_tuples: Sequence[Sequence[str]],
) -> str:
    """
    ``("k1", "k2") IN ((v11, v12), (v21, v22))``, one tuple per row.

    A single key column renders as a plain ``"k" IN (v1, v2)``.
    """
    if not key_tuples:
        raise ValueError("Membership predicate needs at least one key tuple")
    if len(key_columns) == 1:
        values = ", ".join(values[0] for values in key_tuples)
        return f"{key_columns[0]} IN ({values})"
    columns = ", ".join(key_columns)
    tuples = ", ".join(f"({', '.join(values)})" for values in key_tuples)
    return f"({columns}) IN ({tuples})"
