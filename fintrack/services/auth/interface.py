"""
Authentication Provider Interface

DESIGN DECISION: The hosted authentication backend is an external
collaborator. The security core only needs three things from it:
1. Password sign-in
2. Sign-up with profile data
3. "Who is the current user?" for audit attribution

Everything else (sessions, tokens, e-mail verification) stays on the
provider's side of the boundary.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, Field


class AuthProviderError(Exception):
    """
    The provider failed unexpectedly (network, outage, bad response).

    Rejected credentials are NOT errors - they come back as an
    AuthProviderResult with success=False.
    """
    pass


class AuthProviderResult(BaseModel):
    """Outcome reported by the authentication provider."""

    success: bool
    user_id: Optional[str] = None
    error_message: Optional[str] = Field(
        default=None,
        description="Provider message for rejected requests, safe to show"
    )


class CurrentUserProvider(ABC):
    """
    Resolves the signed-in user for audit attribution.

    Implementations should not raise; None means an anonymous event.
    """

    @abstractmethod
    async def get_current_user_id(self) -> Optional[str]:
        pass


class AnonymousUserProvider(CurrentUserProvider):
    """Used when no identity backend is wired in."""

    async def get_current_user_id(self) -> Optional[str]:
        return None


class AuthProviderInterface(CurrentUserProvider):
    """
    Abstract interface for the hosted authentication backend.

    Any provider (hosted auth service, local user table, test fake)
    must implement these methods.
    """

    @abstractmethod
    async def sign_in_with_password(
        self,
        email: str,
        password: str,
    ) -> AuthProviderResult:
        """
        Sign a user in.

        Raises:
            AuthProviderError: If the provider could not be reached
        """
        pass

    @abstractmethod
    async def sign_up(
        self,
        email: str,
        password: str,
        profile: dict[str, str],
    ) -> AuthProviderResult:
        """
        Register a user with the given profile data.

        Raises:
            AuthProviderError: If the provider could not be reached
        """
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        pass
