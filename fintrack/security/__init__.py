"""Rate limiting and password strength package."""

from fintrack.security.password import strength_label, validate_password_strength
from fintrack.security.rate_limiter import RateLimiter

__all__ = ["RateLimiter", "strength_label", "validate_password_strength"]
