"""Memory module for persistent agent notes."""

from .notes import (
    INDEX_FILENAME,
    MemoryNote,
    MemoryNoteError,
    MemoryNotesStore,
)

__all__ = [
    "INDEX_FILENAME",
    "MemoryNote",
    "MemoryNoteError",
    "MemoryNotesStore",
]
