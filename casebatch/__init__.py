from .config import CompilerConfig
from .db.compiler import compile_bulk_update
from .db.helpers import bulk_update
from .db.models import BatchSchema, UpdateRow
from .db.writer import BulkUpdater

__all__ = [
    "BatchSchema",
    "BulkUpdater",
    "CompilerConfig",
    "UpdateRow",
    "bulk_update",
    "compile_bulk_update",
]
