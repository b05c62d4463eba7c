"""
Security Models for FinTrack

Value objects shared by the rate limiter, the password strength
evaluator and the input validators.
"""

from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RateLimitConfig(BaseModel):
    """
    Immutable configuration for one rate limiter instance.

    Several limiters with different configs can coexist, e.g. a strict
    one for authentication and a looser one for general actions.
    """

    model_config = ConfigDict(frozen=True)

    window_ms: int = Field(
        ...,
        gt=0,
        description="Rolling window over which attempts are counted (ms)"
    )
    max_attempts: int = Field(
        ...,
        gt=0,
        description="Attempts allowed inside one window"
    )
    block_duration_ms: int = Field(
        ...,
        gt=0,
        description="Hard denial period once the limit is exceeded (ms)"
    )


@dataclass
class RateLimitWindow:
    """Attempt history and block state for one identifier:action key."""

    attempts: list[int] = field(default_factory=list)
    blocked_until: Optional[int] = None

    def valid_attempts(self, now: int, window_ms: int) -> list[int]:
        """Attempts still inside the window ending at ``now``."""
        return [ts for ts in self.attempts if now - ts < window_ms]


class PasswordStrengthResult(BaseModel):
    """
    Outcome of a password strength evaluation.

    Feedback order is stable: length, composition, then pattern checks.
    """

    model_config = ConfigDict(frozen=True)

    score: int = Field(
        ...,
        ge=0,
        le=4,
        description="0 (very weak) to 4 (strong); the scoring formula tops out at 3"
    )
    feedback: list[str] = Field(
        default_factory=list,
        description="Human-readable improvement hints"
    )
    is_valid: bool = Field(
        ...,
        description="Whether the password is acceptable for sign-up"
    )


class EmailValidationResult(BaseModel):
    """Result of an e-mail shape check."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    message: Optional[str] = None
