"""Input validation package."""

from fintrack.validation.inputs import sanitize_input, validate_email

__all__ = ["sanitize_input", "validate_email"]
