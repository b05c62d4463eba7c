"""
Data Models Package

Pydantic models and value objects used across FinTrack.

Only the leaf models are re-exported here. The request schemas in
``fintrack.models.auth`` and ``fintrack.models.forms`` depend on the
validators and are imported from their modules directly.
"""

from fintrack.models.security import (
    EmailValidationResult,
    PasswordStrengthResult,
    RateLimitConfig,
    RateLimitWindow,
)
from fintrack.models.audit import (
    AuditEventType,
    AuditLogEntry,
    ClientContext,
    MetadataValue,
)

__all__ = [
    # Security models
    "EmailValidationResult",
    "PasswordStrengthResult",
    "RateLimitConfig",
    "RateLimitWindow",
    # Audit models
    "AuditEventType",
    "AuditLogEntry",
    "ClientContext",
    "MetadataValue",
]
