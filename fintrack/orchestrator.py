"""
Main Orchestrator for FinTrack

This module ties the security components together in front of the
authentication provider:
1. Sign in  (rate check → sanitize → validate → provider → audit)
2. Sign up  (rate check → sanitize → validate → provider → audit)
3. Sign out (provider → audit)

DESIGN DECISION: The orchestrator enforces the boundaries:
- A rate-limited attempt never reaches the provider
- Invalid input never reaches the provider and is never audited
- Every provider outcome, success or failure, is audited
- Provider errors are never shown to the user verbatim
"""

import logging
from datetime import datetime
from typing import Optional

import structlog
from pydantic import ValidationError

from fintrack.audit import AuditLogger
from fintrack.config import AuditSettings, Settings, get_settings
from fintrack.models.audit import AuditEventType, ClientContext
from fintrack.models.auth import (
    AuthOutcome,
    AuthStatus,
    SignInRequest,
    SignUpRequest,
    first_error_message,
)
from fintrack.models.security import PasswordStrengthResult
from fintrack.security import RateLimiter, validate_password_strength
from fintrack.services.auth import AuthProviderInterface
from fintrack.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    JsonFileAuditStorage,
)
from fintrack.validation import sanitize_input


SIGN_IN_ACTION = "signin"
SIGN_UP_ACTION = "signup"
ANONYMOUS_CLIENT = "anonymous"

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


logger = structlog.get_logger(__name__)


def _rate_limit_message(prefix: str, blocked_until: Optional[datetime]) -> str:
    if blocked_until is None:
        return f"{prefix} Try again later."
    return f"{prefix} Try again after {blocked_until.astimezone().strftime('%H:%M:%S')}."


class AuthenticationFlow:
    """
    Orchestrates sign-in, sign-up and sign-out.

    Flow for sign-in and sign-up:
    1. Rate check on (email or "anonymous", action) - deny early
    2. Sanitize and validate input - reject with the first message
    3. Call the provider - catch anything unexpected
    4. Audit the outcome
    """

    def __init__(
        self,
        auth_provider: AuthProviderInterface,
        rate_limiter: RateLimiter,
        audit_logger: AuditLogger,
    ):
        self._auth_provider = auth_provider
        self._rate_limiter = rate_limiter
        self._audit_logger = audit_logger

    async def _check_rate_limit(
        self,
        client_id: str,
        action: str,
        message_prefix: str,
    ) -> Optional[AuthOutcome]:
        if await self._rate_limiter.check_limit(client_id, action):
            return None

        blocked_until = self._rate_limiter.get_blocked_until(client_id, action)
        return AuthOutcome(
            status=AuthStatus.RATE_LIMITED,
            message=_rate_limit_message(message_prefix, blocked_until),
            blocked_until=blocked_until,
            remaining_attempts=0,
        )

    async def sign_in(self, email: str, password: str) -> AuthOutcome:
        """Sign a user in with e-mail and password."""
        client_id = email or ANONYMOUS_CLIENT

        denied = await self._check_rate_limit(
            client_id, SIGN_IN_ACTION, "Too many failed attempts."
        )
        if denied:
            return denied

        try:
            request = SignInRequest(email=sanitize_input(email), password=password)
        except ValidationError as e:
            return AuthOutcome(
                status=AuthStatus.INVALID_INPUT,
                message=first_error_message(e),
            )

        try:
            result = await self._auth_provider.sign_in_with_password(
                request.email, request.password
            )
        except Exception:
            logger.exception("sign_in_provider_error", action=SIGN_IN_ACTION)
            await self._audit_logger.log_auth_event(
                AuditEventType.FAILED_LOGIN, request.email, False
            )
            return AuthOutcome(status=AuthStatus.ERROR, message=UNEXPECTED_ERROR_MESSAGE)

        if not result.success:
            await self._audit_logger.log_auth_event(
                AuditEventType.FAILED_LOGIN, request.email, False
            )
            return AuthOutcome(
                status=AuthStatus.REJECTED,
                message=result.error_message or "Invalid login credentials",
                remaining_attempts=self._rate_limiter.get_remaining_attempts(
                    client_id, SIGN_IN_ACTION
                ),
            )

        await self._audit_logger.log_auth_event(
            AuditEventType.USER_SIGN_IN, request.email, True
        )
        return AuthOutcome(
            status=AuthStatus.SUCCESS,
            message="You have been signed in successfully.",
            user_id=result.user_id,
        )

    async def sign_up(
        self,
        email: str,
        password: str,
        confirm_password: str,
        first_name: str,
        last_name: str,
        preferred_currency: str,
    ) -> AuthOutcome:
        """Register a new user."""
        client_id = email or ANONYMOUS_CLIENT

        denied = await self._check_rate_limit(
            client_id, SIGN_UP_ACTION, "Too many attempts."
        )
        if denied:
            return denied

        try:
            request = SignUpRequest(
                email=sanitize_input(email),
                password=password,
                confirm_password=confirm_password,
                first_name=sanitize_input(first_name),
                last_name=sanitize_input(last_name),
                preferred_currency=preferred_currency,
            )
        except ValidationError as e:
            return AuthOutcome(
                status=AuthStatus.INVALID_INPUT,
                message=first_error_message(e),
            )

        try:
            result = await self._auth_provider.sign_up(
                request.email, request.password, request.profile()
            )
        except Exception:
            logger.exception("sign_up_provider_error", action=SIGN_UP_ACTION)
            await self._audit_logger.log_auth_event(
                AuditEventType.USER_SIGN_UP, request.email, False
            )
            return AuthOutcome(status=AuthStatus.ERROR, message=UNEXPECTED_ERROR_MESSAGE)

        await self._audit_logger.log_auth_event(
            AuditEventType.USER_SIGN_UP, request.email, result.success
        )

        if not result.success:
            return AuthOutcome(
                status=AuthStatus.REJECTED,
                message=result.error_message or "Sign up failed",
            )

        return AuthOutcome(
            status=AuthStatus.SUCCESS,
            message="Please check your email to verify your account.",
            user_id=result.user_id,
        )

    async def sign_out(self) -> AuthOutcome:
        """Sign the current user out."""
        try:
            await self._auth_provider.sign_out()
        except Exception:
            logger.exception("sign_out_provider_error")
            await self._audit_logger.log_auth_event(AuditEventType.USER_SIGN_OUT, success=False)
            return AuthOutcome(status=AuthStatus.ERROR, message=UNEXPECTED_ERROR_MESSAGE)

        await self._audit_logger.log_auth_event(AuditEventType.USER_SIGN_OUT, success=True)
        return AuthOutcome(status=AuthStatus.SUCCESS, message="You have been signed out.")

    def check_password(self, password: str) -> PasswordStrengthResult:
        """Live strength feedback for the sign-up form."""
        return validate_password_strength(password)


def create_audit_storage(audit_settings: AuditSettings) -> AuditStorageInterface:
    """
    Build the configured audit storage backend.

    Falls back to in-memory storage if Google Sheets is not configured.
    """
    if audit_settings.storage_backend == "file":
        return JsonFileAuditStorage(
            audit_settings.file_path,
            max_entries=audit_settings.max_entries,
        )

    if audit_settings.storage_backend == "google_sheets":
        try:
            from fintrack.services.storage.google_sheets import GoogleSheetsAuditStorage

            return GoogleSheetsAuditStorage(max_entries=audit_settings.max_entries)
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("audit_storage_unavailable", backend="google_sheets", error=str(e))

    return InMemoryAuditStorage(max_entries=audit_settings.max_entries)


def create_app_components(
    auth_provider: AuthProviderInterface,
    settings: Optional[Settings] = None,
) -> tuple[AuthenticationFlow, RateLimiter, AuditLogger]:
    """
    Factory function to create all application components.

    Args:
        auth_provider: The authentication backend
        settings: Defaults to the cached environment settings

    Returns:
        (authentication_flow, general_rate_limiter, audit_logger)
    """
    settings = settings or get_settings()
    audit_settings = settings.audit

    logging.getLogger("fintrack").setLevel(settings.app.log_level.upper())

    audit_logger = AuditLogger(
        storage=create_audit_storage(audit_settings),
        user_provider=auth_provider,
        client_context=ClientContext(
            user_agent=audit_settings.user_agent,
            ip_address=audit_settings.ip_address,
        ),
        large_transaction_threshold=audit_settings.large_transaction_threshold,
    )

    auth_rate_limiter = RateLimiter(
        settings.auth_rate_limit.to_config(),
        audit_logger=audit_logger,
    )
    general_rate_limiter = RateLimiter(
        settings.general_rate_limit.to_config(),
        audit_logger=audit_logger,
    )

    authentication_flow = AuthenticationFlow(
        auth_provider=auth_provider,
        rate_limiter=auth_rate_limiter,
        audit_logger=audit_logger,
    )

    return authentication_flow, general_rate_limiter, audit_logger
