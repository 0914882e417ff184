from __future__ import annotations

import math
import re
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import Table

from ..config import CompilerConfig
from ..errors import InvalidIdentifierError, UnsupportedValueTypeError

_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_BINDABLE_TYPES = (str, bool, int, float, Decimal, datetime, date, time, UUID, bytes)


def check_bindable(value: Any, what: str = "value") -> Any:
    """Raise UnsupportedValueTypeError unless ``value`` is None or a bindable scalar."""
    if value is not None and not isinstance(value, _BINDABLE_TYPES):
        raise UnsupportedValueTypeError(
            f"Unsupported {what} of type {type(value).__name__}: {value!r}"
        )
    return value


def validate_identifier(
    name: str,
    identifier_type: str = "identifier",
    max_length: int = 64,
) -> str:
    """
    Validate that an identifier (table/column name) is safe for SQL interpolation.

    Identifiers cannot be bound as parameters, so they are interpolated into
    the statement text. Only ``[A-Za-z_][A-Za-z0-9_]*`` is accepted, which
    rules out quote characters, whitespace and control characters for every
    dialect.

    ⚠️ SECURITY CONTRACT ⚠️
    Validation keeps the statement well formed; it does not make a
    user-controlled column name a good idea. Identifiers SHOULD come from code
    or a whitelist, not straight from request payloads.

    Args:
        name: The identifier to validate
        identifier_type: Description of the identifier (for error messages)
        max_length: Longest identifier the target dialect accepts

    Returns:
        The validated identifier (unchanged if valid)

    Raises:
        InvalidIdentifierError: If the identifier is not a string, is empty,
            contains unsafe characters or is too long

    Example:
        >>> validate_identifier("orders", "table")
        'orders'
        >>> validate_identifier("'; DROP TABLE--", "table")
        InvalidIdentifierError: Invalid table "'; DROP TABLE--": ...
    """
    if not isinstance(name, str):
        raise InvalidIdentifierError(
            f"{identifier_type} must be a string, got {type(name).__name__}"
        )

    if not name:
        raise InvalidIdentifierError(f"{identifier_type} cannot be empty")

    if not _IDENTIFIER_RE.fullmatch(name):
        raise InvalidIdentifierError(
            f"Invalid {identifier_type} {name!r}: "
            "must start with letter/underscore and contain only alphanumeric characters and underscores"
        )

    if len(name) > max_length:
        raise InvalidIdentifierError(
            f"{identifier_type} {name!r} exceeds the {max_length}-character limit"
        )

    return name


def quote_identifier(name: str, config: CompilerConfig, identifier_type: str = "column") -> str:
    name = validate_identifier(name, identifier_type, config.max_identifier_length)
    q = config.quote_char
    return f"{q}{name}{q}"


def resolve_table(table: Any, config: CompilerConfig) -> tuple[str, str]:
    """
    Resolve a table reference into ``(display_name, quoted_sql)``.

    Accepts a plain name, a ``"schema.table"`` name, a SQLAlchemy ``Table``
    or a mapped class exposing ``__table__``.
    """
    table = getattr(table, "__table__", table)
    if isinstance(table, Table):
        parts = [table.schema, table.name] if table.schema else [table.name]
    elif isinstance(table, str):
        parts = table.split(".")
        if len(parts) > 2:
            raise InvalidIdentifierError(
                f"Invalid table {table!r}: expected 'table' or 'schema.table'"
            )
    else:
        raise InvalidIdentifierError(
            f"table must be a string or sqlalchemy Table, got {type(table).__name__}"
        )

    quoted = ".".join(
        quote_identifier(part, config, "schema" if len(parts) == 2 and i == 0 else "table")
        for i, part in enumerate(parts)
    )
    return ".".join(parts), quoted


class ValueRenderer:
    """
    Renders values into a statement.

    In the default mode every value becomes a named placeholder (``:p0``,
    ``:p1``, ...) and is recorded in :attr:`parameters`. With
    ``config.inline_literals`` values are written into the SQL text instead
    and :attr:`parameters` stays empty.
    """

    def __init__(self, config: CompilerConfig) -> None:
        self.config = config
        self.parameters: dict[str, Any] = {}

    def render(self, value: Any) -> str:
        if value is None:
            return "NULL"
        check_bindable(value)
        if self.config.inline_literals:
            return self._literal(value)
        return self._bind(value)

    def _bind(self, value: Any) -> str:
        name = f"{self.config.param_prefix}{len(self.parameters)}"
        self.parameters[name] = value
        return f":{name}"

    def _literal(self, value: Any) -> str:
        if isinstance(value, bool):
            return "TRUE" if value else "FALSE"
        if isinstance(value, int):
            return str(int(value))
        if isinstance(value, float):
            if math.isnan(value) or math.isinf(value):
                raise UnsupportedValueTypeError(f"Cannot inline non-finite float {value!r}")
            return repr(value)
        if isinstance(value, Decimal):
            if not value.is_finite():
                raise UnsupportedValueTypeError(f"Cannot inline non-finite decimal {value!r}")
            return str(value)
        if isinstance(value, datetime):
            return self._quote_string(value.isoformat(sep=" "))
        if isinstance(value, (date, time)):
            return self._quote_string(value.isoformat())
        if isinstance(value, UUID):
            return self._quote_string(str(value))
        if isinstance(value, str):
            return self._quote_string(value)
        raise UnsupportedValueTypeError(
            f"{type(value).__name__} values can only be bound as parameters, not inlined"
        )

    def _quote_string(self, value: str) -> str:
        if self.config.backslash_escapes:
            value = value.replace("\\", "\\\\")
        return "'" + value.replace("'", "''") + "'"
