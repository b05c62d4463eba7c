"""
Storage Services Package

Provides the abstract audit storage interface and its implementations.
The in-memory backend is the default; JSON file and Google Sheets
backends are swappable without touching callers.
"""

from fintrack.services.storage.interface import (
    DEFAULT_MAX_ENTRIES,
    AuditStorageInterface,
    ConnectionError,
    StorageError,
)
from fintrack.services.storage.memory import InMemoryAuditStorage
from fintrack.services.storage.json_file import JsonFileAuditStorage

__all__ = [
    # Interface
    "AuditStorageInterface",
    "DEFAULT_MAX_ENTRIES",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # Implementations
    "InMemoryAuditStorage",
    "JsonFileAuditStorage",
]
