class CasebatchError(Exception):
    """Base exception for casebatch errors."""


class CompileError(CasebatchError, ValueError):
    """Batch could not be compiled; nothing was sent to the database."""


class InvalidIdentifierError(CompileError):
    """Table or column name failed safe-identifier validation."""


class UnsupportedValueTypeError(CompileError):
    """A where/data value is not a bindable scalar or a compound-key mapping."""


class InconsistentKeyShapeError(CompileError):
    """A row's key columns differ from the rest of the batch."""


class UndeclaredColumnError(CompileError):
    """A row sets a data column the declared batch schema does not list."""


class BulkUpdateExecutionError(CasebatchError):
    """Any failure while executing a compiled bulk update."""
