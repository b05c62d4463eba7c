"""
Google Sheets Audit Storage

DESIGN DECISION: Google Sheets is offered as a shared audit backend because:
1. Account owners can view the audit trail directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (a 100-entry log is fine)
- No transactions: append first, then trim the oldest rows
- Limited query capabilities (we read all rows and slice in Python)
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from fintrack.config import GoogleSheetsSettings, get_settings
from fintrack.models.audit import AuditEventType, AuditLogEntry
from fintrack.services.storage.interface import (
    DEFAULT_MAX_ENTRIES,
    AuditStorageInterface,
    ConnectionError,
    StorageError,
)


logger = structlog.get_logger(__name__)


# Column mappings for the audit sheet
AUDIT_COLUMNS = [
    "id",
    "created_at",
    "user_id",
    "event_type",
    "event_description",
    "metadata_json",
    "ip_address",
    "user_agent",
]

# Row 1 holds the headers
FIRST_DATA_ROW = 2


class GoogleSheetsClient:
    """
    Opens the audit worksheet with service account credentials.

    Only the spreadsheets scope is requested: the spreadsheet is opened
    by key, so no Drive lookup is needed. The worksheet handle is cached
    after the first successful lookup.
    """

    scopes = ["https://www.googleapis.com/auth/spreadsheets"]

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._settings = settings if settings is not None else get_settings().google_sheets
        self._sheet: Optional[gspread.Worksheet] = None

    def _authorize(self) -> gspread.Client:
        path = Path(self._settings.credentials_path)
        if not path.is_file():
            # Nothing to retry: the file will not appear between attempts
            raise ConnectionError(f"Google credentials file not found: {path}")
        credentials = Credentials.from_service_account_file(str(path), scopes=self.scopes)
        return gspread.authorize(credentials)

    @retry(
        retry=retry_if_exception_type(gspread.exceptions.APIError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _open_audit_sheet(self) -> gspread.Worksheet:
        spreadsheet = self._authorize().open_by_key(self._settings.spreadsheet_id)
        try:
            return spreadsheet.worksheet(self._settings.audit_sheet_name)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=self._settings.audit_sheet_name,
                rows=DEFAULT_MAX_ENTRIES + 1,
                cols=len(AUDIT_COLUMNS),
            )
            sheet.append_row(AUDIT_COLUMNS)
            logger.info("audit_sheet_created", sheet=self._settings.audit_sheet_name)
            return sheet

    def get_audit_sheet(self) -> gspread.Worksheet:
        """The audit worksheet, created with a header row if missing."""
        if self._sheet is None:
            try:
                self._sheet = self._open_audit_sheet()
            except StorageError:
                raise
            except gspread.SpreadsheetNotFound as e:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                ) from e
            except Exception as e:
                raise ConnectionError(f"Failed to open audit sheet: {e}") from e
        return self._sheet


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    One entry per row, oldest at the top. Rows past ``max_entries``
    are deleted from the top after each append.
    """

    def __init__(
        self,
        client: Optional[GoogleSheetsClient] = None,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ):
        self._client = client if client is not None else GoogleSheetsClient()
        self._max_entries = max_entries

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def _row_to_entry(self, row: list) -> AuditLogEntry:
        """Convert a spreadsheet row to an AuditLogEntry."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return AuditLogEntry(
            id=UUID(safe_get(0)),
            created_at=datetime.fromisoformat(safe_get(1)),
            user_id=safe_get(2) or None,
            event_type=AuditEventType(safe_get(3)),
            event_description=safe_get(4),
            metadata=json.loads(safe_get(5)) if safe_get(5) else {},
            ip_address=safe_get(6, "client"),
            user_agent=safe_get(7, "unknown"),
        )

    async def append_event(self, entry: AuditLogEntry) -> bool:
        """Append an entry and trim the oldest rows past capacity."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(entry.to_sheets_row(), value_input_option="RAW")

            data_rows = len(sheet.get_all_values()) - 1
            overflow = data_rows - self._max_entries
            if overflow > 0:
                sheet.delete_rows(FIRST_DATA_ROW, FIRST_DATA_ROW + overflow - 1)
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write audit entry: {e}") from e

    async def get_recent_events(self, limit: int = 50) -> list[AuditLogEntry]:
        """Get recent entries, newest first."""
        if limit <= 0:
            return []

        try:
            sheet = self._client.get_audit_sheet()
            all_rows = sheet.get_all_values()[1:]
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to get audit entries: {e}") from e

        entries = []
        for row in reversed(all_rows):
            if not row or not row[0]:
                continue
            try:
                entries.append(self._row_to_entry(row))
            except Exception:
                logger.warning("audit_row_skipped", row_id=row[0])
                continue
            if len(entries) >= limit:
                break
        return entries
