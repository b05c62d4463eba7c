"""
In-Memory Audit Storage

Process-local, capacity-bounded log. This is the default backend: state
lives as long as the process and is lost on restart.
"""

from collections import deque

from fintrack.models.audit import AuditLogEntry
from fintrack.services.storage.interface import (
    DEFAULT_MAX_ENTRIES,
    AuditStorageInterface,
)


class InMemoryAuditStorage(AuditStorageInterface):
    """Bounded FIFO log backed by a deque."""

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._entries: deque[AuditLogEntry] = deque(maxlen=max_entries)

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def __len__(self) -> int:
        return len(self._entries)

    async def append_event(self, entry: AuditLogEntry) -> bool:
        self._entries.append(entry)
        return True

    async def get_recent_events(self, limit: int = 50) -> list[AuditLogEntry]:
        if limit <= 0:
            return []
        return list(reversed(self._entries))[:limit]
