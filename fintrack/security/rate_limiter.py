"""
Rate Limiter

Sliding-window attempt counting with temporary blocks, keyed by
identifier and action (e.g. "someone@example.com:signin").

How a check works:
1. A key with an unexpired block is denied outright
2. Otherwise attempts older than the window are pruned
3. If the pruned count has reached the limit, the key is blocked for
   block_duration_ms and the attempt is denied
4. Otherwise the attempt is recorded and allowed

The block and the attempt window are independent: the block does not
reset the history, so once a block expires the count resumes from
whatever attempts are still inside the window.

This is an in-process approximation. Each process has its own state;
nothing is persisted or shared.
"""

import threading
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Optional

import structlog

from fintrack.audit import AuditLogger
from fintrack.models.audit import AuditEventType
from fintrack.models.security import RateLimitConfig, RateLimitWindow


def _now_ms() -> int:
    return int(time.time() * 1000)


def _ms_to_datetime(timestamp_ms: int) -> datetime:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)


class RateLimiter:
    """
    Per-key sliding window limiter.

    Instances are independent; create one per policy (auth, general, ...)
    and pass it to whoever needs to check.
    """

    def __init__(
        self,
        config: RateLimitConfig,
        audit_logger: Optional[AuditLogger] = None,
        clock: Callable[[], int] = _now_ms,
    ):
        """
        Initialize rate limiter.

        Args:
            config: Window, attempt limit and block duration
            audit_logger: Receives RATE_LIMIT_EXCEEDED events.
                         If None, denials are only logged locally.
            clock: Returns the current time in milliseconds
        """
        self._config = config
        self._audit_logger = audit_logger
        self._clock = clock
        self._windows: dict[str, RateLimitWindow] = {}
        # check_limit is prune -> compare -> append; keep it atomic
        self._lock = threading.Lock()
        self._logger = structlog.get_logger(__name__)

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    @staticmethod
    def _get_key(identifier: str, action: str) -> str:
        return f"{identifier}:{action}"

    async def check_limit(self, identifier: str, action: str) -> bool:
        """
        Check whether an attempt may proceed, and record it if so.

        The identifier is treated as an opaque string.

        Returns:
            True if the attempt is allowed, False if denied
        """
        key = self._get_key(identifier, action)

        with self._lock:
            now = self._clock()
            window = self._windows.setdefault(key, RateLimitWindow())

            if window.blocked_until is not None and now < window.blocked_until:
                metadata = {
                    "identifier": identifier,
                    "action": action,
                    "blocked_until": _ms_to_datetime(window.blocked_until),
                }
                allowed = False
            else:
                valid_attempts = window.valid_attempts(now, self._config.window_ms)

                if len(valid_attempts) >= self._config.max_attempts:
                    window.blocked_until = now + self._config.block_duration_ms
                    window.attempts = valid_attempts
                    metadata = {
                        "identifier": identifier,
                        "action": action,
                        "attempts": len(valid_attempts),
                    }
                    allowed = False
                    self._logger.info(
                        "rate_limit_blocked",
                        key=key,
                        attempts=len(valid_attempts),
                        blocked_until_ms=window.blocked_until,
                    )
                else:
                    valid_attempts.append(now)
                    window.attempts = valid_attempts
                    allowed = True

        if not allowed and self._audit_logger is not None:
            await self._audit_logger.log_security_event(
                AuditEventType.RATE_LIMIT_EXCEEDED,
                f"Rate limit exceeded for {action} by {identifier}",
                metadata,
            )

        return allowed

    def get_remaining_attempts(self, identifier: str, action: str) -> int:
        """Attempts left in the current window. Read-only."""
        window = self._windows.get(self._get_key(identifier, action))
        if window is None:
            return self._config.max_attempts

        valid_attempts = window.valid_attempts(self._clock(), self._config.window_ms)
        return max(0, self._config.max_attempts - len(valid_attempts))

    def get_blocked_until(self, identifier: str, action: str) -> Optional[datetime]:
        """
        When the current block ends, or None if the key is not blocked.

        An expired block is reported as None but left in place; the next
        block simply overwrites it.
        """
        window = self._windows.get(self._get_key(identifier, action))
        if window is None or window.blocked_until is None:
            return None
        if self._clock() < window.blocked_until:
            return _ms_to_datetime(window.blocked_until)
        return None

    def purge_idle_keys(self) -> int:
        """
        Forget keys with no attempts left in the window and no active block.

        Returns:
            Number of keys removed
        """
        with self._lock:
            now = self._clock()
            idle_keys = [
                key
                for key, window in self._windows.items()
                if not window.valid_attempts(now, self._config.window_ms)
                and (window.blocked_until is None or now >= window.blocked_until)
            ]
            for key in idle_keys:
                del self._windows[key]

        if idle_keys:
            self._logger.debug("rate_limit_keys_purged", count=len(idle_keys))
        return len(idle_keys)
