"""
Input Validation Helpers

Cheap, synchronous checks applied to user input before anything is
forwarded to the authentication backend.

IMPORTANT: These helpers report problems; they never raise. A failed
check is a validation error for the caller to display, not an audit
event.
"""

import re

from fintrack.models.security import EmailValidationResult


MAX_EMAIL_LENGTH = 254
MAX_LOCAL_PART_LENGTH = 64
MAX_INPUT_LENGTH = 1000

_EMAIL_PATTERN = re.compile(
    r"[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*"
)

# Shapes the main pattern lets through but no mailbox should have
_SUSPICIOUS_EMAIL_PATTERNS = [
    re.compile(r"\.{2,}"),  # consecutive dots
    re.compile(r"^\."),  # starts with dot
    re.compile(r"\.$"),  # ends with dot
    re.compile(r"@\."),  # @ followed by dot
    re.compile(r"\.@"),  # dot followed by @
]

_SCRIPT_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+=", re.IGNORECASE | re.ASCII)


def validate_email(email: str) -> EmailValidationResult:
    """
    Check that an e-mail address is plausibly shaped.

    Returns:
        EmailValidationResult with a message when the address is rejected
    """
    if not _EMAIL_PATTERN.fullmatch(email):
        return EmailValidationResult(is_valid=False, message="Invalid email format")

    if len(email) > MAX_EMAIL_LENGTH:
        return EmailValidationResult(is_valid=False, message="Email address too long")

    local_part = email.split("@")[0]
    if len(local_part) > MAX_LOCAL_PART_LENGTH:
        return EmailValidationResult(is_valid=False, message="Email local part too long")

    for pattern in _SUSPICIOUS_EMAIL_PATTERNS:
        if pattern.search(email):
            return EmailValidationResult(is_valid=False, message="Invalid email format")

    return EmailValidationResult(is_valid=True)


def sanitize_input(text: str) -> str:
    """
    Strip markup-ish fragments from free text and cap its length.

    This is a display-safety measure, not an HTML sanitizer.
    """
    cleaned = text.strip()
    cleaned = cleaned.replace("<", "").replace(">", "")
    cleaned = _SCRIPT_PROTOCOL.sub("", cleaned)
    cleaned = _EVENT_HANDLER.sub("", cleaned)
    return cleaned[:MAX_INPUT_LENGTH]
