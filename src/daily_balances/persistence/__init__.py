"""Persistence layer - storage slots and JSON file export."""

from .file_export import FileCollaborator, JsonFileExporter
from .slots import MemorySlotStore, SlotStore, SQLiteSlotStore

__all__ = [
    "FileCollaborator",
    "JsonFileExporter",
    "MemorySlotStore",
    "SlotStore",
    "SQLiteSlotStore",
]
