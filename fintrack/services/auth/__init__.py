"""Authentication provider package."""

from fintrack.services.auth.interface import (
    AnonymousUserProvider,
    AuthProviderError,
    AuthProviderInterface,
    AuthProviderResult,
    CurrentUserProvider,
)

__all__ = [
    "AnonymousUserProvider",
    "AuthProviderError",
    "AuthProviderInterface",
    "AuthProviderResult",
    "CurrentUserProvider",
]
