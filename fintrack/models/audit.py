"""
Audit Models for FinTrack

Every security-relevant action (sign-in, sign-up, rate-limit trips,
large transactions) is recorded for audit purposes.

DESIGN DECISION: Audit entries are immutable and append-only. Once
created they are never modified; the log only drops the oldest entries
when its capacity is exceeded.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Metadata values are restricted to primitives so the log stays serializable
MetadataValue = Union[bool, int, float, str, datetime, None]

# Metadata keys holding datetimes; JSON storage hands them back as ISO strings
DATETIME_METADATA_KEYS = frozenset({"blocked_until"})


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _zulu_to_offset(value: str) -> str:
    return value[:-1] + "+00:00" if value.endswith("Z") else value


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    The enumeration is closed: helpers may reclassify an event
    (e.g. to LARGE_TRANSACTION) but never invent new types.
    """
    # Authentication
    USER_SIGN_IN = "USER_SIGN_IN"
    USER_SIGN_UP = "USER_SIGN_UP"
    USER_SIGN_OUT = "USER_SIGN_OUT"
    PASSWORD_CHANGE = "PASSWORD_CHANGE"
    EMAIL_CHANGE = "EMAIL_CHANGE"

    # Profile
    PROFILE_UPDATE = "PROFILE_UPDATE"
    PROFILE_DELETE = "PROFILE_DELETE"

    # Accounts
    ACCOUNT_CREATE = "ACCOUNT_CREATE"
    ACCOUNT_UPDATE = "ACCOUNT_UPDATE"
    ACCOUNT_DELETE = "ACCOUNT_DELETE"

    # Transactions
    LARGE_TRANSACTION = "LARGE_TRANSACTION"
    TRANSACTION_CREATE = "TRANSACTION_CREATE"
    TRANSACTION_UPDATE = "TRANSACTION_UPDATE"
    TRANSACTION_DELETE = "TRANSACTION_DELETE"

    # Security
    FAILED_LOGIN = "FAILED_LOGIN"
    PASSWORD_RESET_REQUEST = "PASSWORD_RESET_REQUEST"
    FAILED_PASSWORD_RESET = "FAILED_PASSWORD_RESET"
    SUSPICIOUS_ACTIVITY = "SUSPICIOUS_ACTIVITY"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Settings
    SETTINGS_UPDATE = "SETTINGS_UPDATE"


class ClientContext(BaseModel):
    """
    Where an event came from.

    The IP address is a placeholder: only a trusted network boundary
    can fill it in honestly.
    """

    model_config = ConfigDict(frozen=True)

    user_agent: str = Field(
        default="unknown",
        description="Client user agent string"
    )
    ip_address: str = Field(
        default="client",
        description="Client address placeholder"
    )


class AuditLogEntry(BaseModel):
    """
    A single audit log entry.

    This is the core unit of the audit trail.
    """

    model_config = ConfigDict(frozen=True)

    # Identity
    id: UUID = Field(
        default_factory=uuid4,
        description="Unique entry identifier"
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the entry was created (UTC)"
    )

    # Actor - None means an anonymous event
    user_id: Optional[str] = Field(
        default=None,
        description="Identifier of the signed-in user, if any"
    )

    # Event
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    event_description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    metadata: dict[str, MetadataValue] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Client context
    ip_address: str = "client"
    user_agent: str = "unknown"

    @field_validator("metadata")
    @classmethod
    def restore_datetimes(cls, v: dict[str, MetadataValue]) -> dict[str, MetadataValue]:
        restored = dict(v)
        for key in DATETIME_METADATA_KEYS.intersection(restored):
            value = restored[key]
            if isinstance(value, str):
                try:
                    restored[key] = datetime.fromisoformat(_zulu_to_offset(value))
                except ValueError:
                    # Not ISO: keep the recorded string
                    continue
        return restored

    @property
    def severity(self) -> str:
        return str(self.metadata.get("severity") or "info")

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "id": str(self.id),
            "created_at": self.created_at.isoformat(),
            "user_id": self.user_id,
            "event_type": self.event_type.value,
            "event_description": self.event_description,
            "metadata": {
                key: value.isoformat() if isinstance(value, datetime) else value
                for key, value in self.metadata.items()
            },
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [id, created_at, user_id, event_type, event_description,
         metadata_json, ip_address, user_agent]
        """
        log_dict = self.to_log_dict()
        return [
            log_dict["id"],
            log_dict["created_at"],
            self.user_id or "",
            log_dict["event_type"],
            self.event_description,
            json.dumps(log_dict["metadata"]) if self.metadata else "",
            self.ip_address,
            self.user_agent,
        ]
