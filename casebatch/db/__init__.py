from .compiler import compile_bulk_update, compile_bulk_update_chunks
from .helpers import bulk_update, execute_compiled
from .models import BatchSchema, CompiledStatement, UpdateRow
from .session import DbSession, Executor
from .writer import BoundBulkUpdate, BulkUpdater

__all__ = [
    "BatchSchema",
    "BoundBulkUpdate",
    "BulkUpdater",
    "CompiledStatement",
    "DbSession",
    "Executor",
    "UpdateRow",
    "bulk_update",
    "compile_bulk_update",
    "compile_bulk_update_chunks",
    "execute_compiled",
]
