# Pydantic schemas package
from notesync.schemas.base import ErrorDetail
from notesync.schemas.note import NoteRecord
from notesync.schemas.sync import SyncOperation, SyncResult, SyncStatus

__all__ = [
    "ErrorDetail",
    "NoteRecord",
    "SyncOperation",
    "SyncResult",
    "SyncStatus",
]
