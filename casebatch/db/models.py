from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from sqlalchemy import text
from sqlalchemy.sql.elements import TextClause

from ..errors import CompileError


@dataclass(frozen=True)
class UpdateRow:
    """
    One entry of a bulk update.

    ``where`` holds the key column values identifying exactly one row. A key
    whose value is itself a mapping is a compound-key wrapper, e.g.
    ``{"org_id_email": {"org_id": 1, "email": "a@x.com"}}``.
    ``data`` holds the columns to set; ``None`` means "set to NULL" and a
    missing column means "leave unchanged".
    """
    where: Mapping[str, Any]
    data: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def coerce(cls, row: "UpdateRow | Mapping[str, Any]") -> "UpdateRow":
        """Accept either an UpdateRow or a ``{"where": ..., "data": ...}`` mapping."""
        if isinstance(row, UpdateRow):
            return row
        if isinstance(row, Mapping) and "where" in row:
            extra = set(row) - {"where", "data"}
            if extra:
                raise CompileError(f"Unexpected update row keys: {sorted(extra)}")
            return cls(where=row["where"], data=row.get("data") or {})
        raise CompileError(
            f"Update rows must be UpdateRow or a mapping with 'where'/'data', got {type(row).__name__}"
        )


@dataclass(frozen=True)
class BatchSchema:
    """
    Declared shape of a batch: the physical key columns (after compound-key
    flattening) and the data columns rows are allowed to set.
    """
    key_columns: Sequence[str]
    data_columns: Sequence[str]

    def __post_init__(self) -> None:
        if not self.key_columns:
            raise ValueError("BatchSchema.key_columns cannot be empty")
        if len(set(self.key_columns)) != len(self.key_columns):
            raise ValueError("BatchSchema.key_columns contains duplicates")


@dataclass(frozen=True)
class CompiledStatement:
    """
    A compiled UPDATE plus its bind parameters.

    ``parameters`` is empty when literals were inlined.
    """
    statement: str
    parameters: Mapping[str, Any]
    table: str
    key_columns: tuple[str, ...]
    data_columns: tuple[str, ...]
    row_count: int

    @property
    def values(self) -> list[Any]:
        """Parameter values in placeholder order."""
        return list(self.parameters.values())

    def text(self) -> TextClause:
        if self.parameters:
            return text(self.statement)
        # Inlined literals may contain colons that text() would read as binds.
        return text(self.statement.replace(":", "\\:"))
