"""Services package."""

from fintrack.services.auth import (
    AnonymousUserProvider,
    AuthProviderError,
    AuthProviderInterface,
    AuthProviderResult,
    CurrentUserProvider,
)
from fintrack.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    InMemoryAuditStorage,
    JsonFileAuditStorage,
    StorageError,
)

__all__ = [
    # Authentication provider
    "AnonymousUserProvider",
    "AuthProviderError",
    "AuthProviderInterface",
    "AuthProviderResult",
    "CurrentUserProvider",
    # Audit storage
    "AuditStorageInterface",
    "ConnectionError",
    "InMemoryAuditStorage",
    "JsonFileAuditStorage",
    "StorageError",
]
