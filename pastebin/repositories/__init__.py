from .paste_store import (
    CorruptPasteRecord,
    PasteStore,
    StorageError,
    StorageUnavailable,
)

__all__ = [
    "CorruptPasteRecord",
    "PasteStore",
    "StorageError",
    "StorageUnavailable",
]
