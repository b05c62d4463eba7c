"""
Audit Logger

DESIGN DECISION: Every security-relevant action is recorded.
This provides:
1. Traceability of sign-ins, sign-ups and rate-limit trips
2. A trail for flagged (large) transactions
3. Debugging capability

The audit logger:
- Is async and best-effort: it never raises to the caller
- Keeps a bounded log (oldest entries evicted first)
- Also emits every entry to the structured diagnostic log
"""

import asyncio
from collections.abc import Mapping
from typing import Optional

import structlog

from fintrack.models.audit import (
    AuditEventType,
    AuditLogEntry,
    ClientContext,
    MetadataValue,
    utc_now,
)
from fintrack.services.auth import AnonymousUserProvider, CurrentUserProvider
from fintrack.services.storage import AuditStorageInterface, InMemoryAuditStorage


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


DEFAULT_LARGE_TRANSACTION_THRESHOLD = 10000.0
MAX_DESCRIPTION_LENGTH = 500


def _format_amount(amount: float) -> str:
    if isinstance(amount, float) and amount.is_integer():
        return str(int(amount))
    return str(amount)


class AuditLogger:
    """
    Central audit logging service.

    Logs entries both to:
    1. Structured local log (for debugging)
    2. The configured audit storage (bounded, newest entries kept)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
        user_provider: Optional[CurrentUserProvider] = None,
        client_context: Optional[ClientContext] = None,
        large_transaction_threshold: float = DEFAULT_LARGE_TRANSACTION_THRESHOLD,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend. Defaults to a 100-entry in-memory log.
            user_provider: Resolves the current user for attribution.
                          If None, every entry is anonymous.
            client_context: User agent and address recorded on entries.
            large_transaction_threshold: Amounts above this are recorded
                          as LARGE_TRANSACTION. Currency-unaware.
        """
        self._storage = storage if storage is not None else InMemoryAuditStorage()
        self._user_provider = (
            user_provider if user_provider is not None else AnonymousUserProvider()
        )
        self._client_context = (
            client_context if client_context is not None else ClientContext()
        )
        self._large_transaction_threshold = large_transaction_threshold
        self._pending: set[asyncio.Task] = set()
        self._logger = structlog.get_logger(__name__)

    @property
    def storage(self) -> AuditStorageInterface:
        return self._storage

    async def _get_current_user_id(self) -> Optional[str]:
        try:
            return await self._user_provider.get_current_user_id()
        except Exception as e:
            # Attribution is optional; record the event anonymously
            self._logger.warning("audit_user_lookup_failed", error=str(e))
            return None

    async def log_event(
        self,
        event_type: AuditEventType,
        description: str,
        metadata: Optional[Mapping[str, MetadataValue]] = None,
    ) -> bool:
        """
        Record an audit event.

        Always logs locally. Never raises.

        Returns True if the entry reached storage.
        """
        try:
            user_id = await self._get_current_user_id()
            created_at = utc_now()

            entry = AuditLogEntry(
                user_id=user_id,
                event_type=event_type,
                event_description=description[:MAX_DESCRIPTION_LENGTH],
                metadata={
                    **(metadata or {}),
                    "timestamp": created_at.isoformat(),
                },
                ip_address=self._client_context.ip_address,
                user_agent=self._client_context.user_agent,
                created_at=created_at,
            )
        except Exception as e:
            self._logger.error(
                "audit_event_invalid",
                error=str(e),
                event_type=getattr(event_type, "value", str(event_type)),
            )
            return False

        log_dict = entry.to_log_dict()
        if entry.severity == "high":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        try:
            return await self._storage.append_event(entry)
        except Exception as e:
            # Log failure but don't raise
            self._logger.error(
                "audit_storage_failed",
                error=str(e),
                entry_id=str(entry.id),
            )
            return False

    def log_event_nowait(
        self,
        event_type: AuditEventType,
        description: str,
        metadata: Optional[Mapping[str, MetadataValue]] = None,
    ) -> Optional[asyncio.Task]:
        """
        Schedule ``log_event`` in the background and return immediately.

        Returns the scheduled task, or None when there is no running
        event loop (the event is then dropped and a warning logged).
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._logger.warning(
                "audit_event_dropped",
                reason="no running event loop",
                event_type=event_type.value,
            )
            return None

        task = loop.create_task(self.log_event(event_type, description, metadata))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def flush(self) -> None:
        """Wait for all background entries to be written."""
        pending = [task for task in self._pending if not task.done()]
        while pending:
            await asyncio.gather(*pending)
            pending = [task for task in self._pending if not task.done()]

    async def log_auth_event(
        self,
        event_type: AuditEventType,
        email: Optional[str] = None,
        success: bool = True,
    ) -> bool:
        """Log a sign-in, sign-up or sign-out outcome."""
        action = event_type.value.replace("_", " ", 1).lower()
        outcome = "successful" if success else "failed"
        description = f"{action} {outcome}"
        if email:
            description += f" for {email}"

        return await self.log_event(
            event_type,
            description,
            {"email": email, "success": success},
        )

    async def log_profile_event(
        self,
        event_type: AuditEventType,
        changes: Optional[Mapping[str, MetadataValue]] = None,
    ) -> bool:
        """Log a profile change; each changed field becomes a changes.<field> key."""
        return await self.log_event(
            event_type,
            f"Profile {event_type.value.replace('PROFILE_', '', 1).lower()}",
            {f"changes.{field}": value for field, value in (changes or {}).items()},
        )

    async def log_transaction_event(
        self,
        event_type: AuditEventType,
        amount: Optional[float] = None,
        merchant: Optional[str] = None,
    ) -> bool:
        """
        Log a transaction event.

        Amounts above the large-transaction threshold are recorded as
        LARGE_TRANSACTION whatever type the caller passed.
        """
        is_large = amount is not None and amount > self._large_transaction_threshold

        description = event_type.value.replace("TRANSACTION_", "Transaction ", 1).lower()
        if merchant:
            description += f" for {merchant}"
        if amount:
            description += f" ({_format_amount(amount)})"

        return await self.log_event(
            AuditEventType.LARGE_TRANSACTION if is_large else event_type,
            description,
            {"amount": amount, "merchant": merchant, "flagged_as_large": is_large},
        )

    async def log_security_event(
        self,
        event_type: AuditEventType,
        details: str,
        metadata: Optional[Mapping[str, MetadataValue]] = None,
    ) -> bool:
        """Log a security event. Always tagged with severity=high."""
        return await self.log_event(
            event_type,
            f"Security event: {details}",
            {**(metadata or {}), "severity": "high"},
        )

    async def get_audit_logs(self, limit: int = 50) -> list[AuditLogEntry]:
        """
        Get the most recent entries, newest first.

        Returns an empty list if storage cannot be read.
        """
        try:
            return await self._storage.get_recent_events(limit)
        except Exception as e:
            self._logger.error("audit_retrieval_failed", error=str(e))
            return []
