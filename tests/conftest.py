"""Shared fixtures and fakes for the FinTrack test suite."""

from typing import Optional

import pytest

from fintrack.audit import AuditLogger
from fintrack.models.audit import AuditLogEntry, ClientContext
from fintrack.models.security import RateLimitConfig
from fintrack.security import RateLimiter
from fintrack.services.auth import (
    AuthProviderInterface,
    AuthProviderResult,
)
from fintrack.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    StorageError,
)


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 0):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def set(self, now: int) -> None:
        self.now = now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeAuthProvider(AuthProviderInterface):
    """Scriptable stand-in for the hosted authentication backend."""

    def __init__(self):
        self.result = AuthProviderResult(success=True, user_id="user-1")
        self.raise_error: Optional[Exception] = None
        self.current_user_id: Optional[str] = None
        self.sign_in_calls: list[tuple[str, str]] = []
        self.sign_up_calls: list[tuple[str, str, dict]] = []
        self.sign_out_calls = 0

    async def get_current_user_id(self) -> Optional[str]:
        return self.current_user_id

    async def sign_in_with_password(self, email: str, password: str) -> AuthProviderResult:
        self.sign_in_calls.append((email, password))
        if self.raise_error:
            raise self.raise_error
        if self.result.success:
            self.current_user_id = self.result.user_id
        return self.result

    async def sign_up(self, email: str, password: str, profile: dict) -> AuthProviderResult:
        self.sign_up_calls.append((email, password, profile))
        if self.raise_error:
            raise self.raise_error
        return self.result

    async def sign_out(self) -> None:
        self.sign_out_calls += 1
        if self.raise_error:
            raise self.raise_error
        self.current_user_id = None


class BrokenStorage(AuditStorageInterface):
    """Storage whose every operation fails."""

    @property
    def max_entries(self) -> int:
        return 100

    async def append_event(self, entry: AuditLogEntry) -> bool:
        raise StorageError("disk on fire")

    async def get_recent_events(self, limit: int = 50) -> list[AuditLogEntry]:
        raise StorageError("disk on fire")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(storage) -> AuditLogger:
    return AuditLogger(
        storage=storage,
        client_context=ClientContext(user_agent="pytest"),
    )


@pytest.fixture
def auth_provider() -> FakeAuthProvider:
    return FakeAuthProvider()


@pytest.fixture
def make_limiter(audit_logger, clock):
    """Build a limiter sharing the test clock and audit log."""
    def _make(window_ms: int = 1000, max_attempts: int = 2, block_duration_ms: int = 2000):
        return RateLimiter(
            RateLimitConfig(
                window_ms=window_ms,
                max_attempts=max_attempts,
                block_duration_ms=block_duration_ms,
            ),
            audit_logger=audit_logger,
            clock=clock,
        )
    return _make


@pytest.fixture
def broken_storage() -> BrokenStorage:
    return BrokenStorage()
