"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for audit storage.
This allows us to:
1. Keep a process-local log in memory (the default)
2. Persist to a local JSON file or a Google Sheet without touching callers
3. Use in-memory storage for testing

The contract is deliberately small: append one entry, read the N most
recent entries, and keep no more than a fixed number of entries (oldest
evicted first).
"""

from abc import ABC, abstractmethod

from fintrack.models.audit import AuditLogEntry


DEFAULT_MAX_ENTRIES = 100


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Entries are append-only. The only removal is FIFO eviction once
    ``max_entries`` is exceeded.
    """

    @property
    @abstractmethod
    def max_entries(self) -> int:
        """Maximum number of retained entries."""
        pass

    @abstractmethod
    async def append_event(self, entry: AuditLogEntry) -> bool:
        """
        Append an audit entry to the log, evicting the oldest entries
        if the log grows past ``max_entries``.

        Args:
            entry: The audit entry to store

        Returns:
            True if stored successfully

        Raises:
            StorageError: If the backend cannot be written
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 50,
    ) -> list[AuditLogEntry]:
        """
        Get the most recent audit entries.

        Args:
            limit: Maximum number of entries to return

        Returns:
            List of recent entries (newest first)

        Raises:
            StorageError: If the backend cannot be read
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
