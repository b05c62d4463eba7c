"""
JSON File Audit Storage

A small local persistent key-value store: the whole log is one JSON
array in one file, rewritten on every append.

TRADEOFFS:
- Every append rewrites the file (fine for a 100-entry log)
- Writes go through a temp file and os.replace, so a crash never
  leaves a half-written log behind
- Blocking file I/O runs in a worker thread to keep the event loop free
"""

import asyncio
import json
import os
import threading
from pathlib import Path
from typing import Union

import structlog
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from fintrack.models.audit import AuditLogEntry
from fintrack.services.storage.interface import (
    DEFAULT_MAX_ENTRIES,
    AuditStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)


class JsonFileAuditStorage(AuditStorageInterface):
    """
    File-backed implementation of audit log storage.

    Entries are stored oldest first; the file never holds more than
    ``max_entries`` of them.
    """

    def __init__(
        self,
        path: Union[str, Path],
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._path = Path(path)
        self._max_entries = max_entries
        self._lock = threading.Lock()

    @property
    def max_entries(self) -> int:
        return self._max_entries

    @property
    def path(self) -> Path:
        return self._path

    def _read_rows(self) -> list[dict]:
        if not self._path.exists():
            return []
        rows = json.loads(self._path.read_text(encoding="utf-8") or "[]")
        if not isinstance(rows, list):
            raise StorageError(f"Audit file {self._path} does not hold a JSON list")
        return rows

    def _write_rows(self, rows: list[dict]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(json.dumps(rows), encoding="utf-8")
        os.replace(tmp_path, self._path)

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        reraise=True,
    )
    def _append_row(self, row: dict) -> None:
        with self._lock:
            rows = self._read_rows()
            rows.append(row)
            # Keep only the newest max_entries rows
            del rows[:-self._max_entries]
            self._write_rows(rows)

    async def append_event(self, entry: AuditLogEntry) -> bool:
        """Append an entry, trimming the file to capacity."""
        row = entry.model_dump(mode="json")
        try:
            await asyncio.to_thread(self._append_row, row)
        except StorageError:
            raise
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to write audit log {self._path}: {e}") from e
        return True

    async def get_recent_events(self, limit: int = 50) -> list[AuditLogEntry]:
        """Get recent entries, newest first."""
        if limit <= 0:
            return []

        try:
            rows = await asyncio.to_thread(self._read_rows)
        except StorageError:
            raise
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read audit log {self._path}: {e}") from e

        entries = []
        for row in reversed(rows[-limit:]):
            try:
                entries.append(AuditLogEntry.model_validate(row))
            except ValidationError:
                logger.warning("audit_row_skipped", path=str(self._path))
                continue
        return entries
