"""
Password Strength Evaluation

Scores a candidate password and explains the score. The evaluation is a
pure function of the string: no locale, no dictionary lookups, no state.

Scoring:
- +1 for 12 or more characters
- +0.5 for each of uppercase, lowercase, digit, special character
- -1 for a common prefix (password, 123456, qwerty, admin, welcome)
- -0.5 for an ascending 3-character run (123, abc, ...)
- -0.5 for a character repeated 3+ times in a row
Penalties never take the score below 0.

NOTE: The additive maximum is 1 + 4 * 0.5 = 3, so a score of 4 ("Strong")
is unreachable through this formula. Stored results and the sign-up rule
depend on the current numbers, so the ceiling is kept as is.
"""

import math
import re

from fintrack.models.security import PasswordStrengthResult


MIN_LENGTH = 8
LONG_PASSWORD_LENGTH = 12
MIN_VALID_SCORE = 2

SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"

COMMON_PREFIXES = ("password", "123456", "qwerty", "admin", "welcome")

SEQUENCES = (
    "012", "123", "234", "345", "456", "567", "678", "789", "890",
    "abc", "bcd", "cde", "def",
)

STRENGTH_LABELS = ("Very Weak", "Weak", "Fair", "Good", "Strong")

_UPPERCASE = re.compile(r"[A-Z]")
_LOWERCASE = re.compile(r"[a-z]")
_DIGIT = re.compile(r"[0-9]")
_SPECIAL = re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]")
_REPEATED = re.compile(r"(.)\1{2,}")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def validate_password_strength(password: str) -> PasswordStrengthResult:
    """
    Evaluate a password.

    Args:
        password: The candidate password

    Returns:
        PasswordStrengthResult with score, ordered feedback and validity
    """
    feedback: list[str] = []
    score = 0.0

    # Length
    if len(password) < MIN_LENGTH:
        feedback.append("Password must be at least 8 characters long")
    elif len(password) >= LONG_PASSWORD_LENGTH:
        score += 1

    # Composition
    checks = [
        (_UPPERCASE, "Add uppercase letters"),
        (_LOWERCASE, "Add lowercase letters"),
        (_DIGIT, "Add numbers"),
        (_SPECIAL, "Add special characters (!@#$%^&*)"),
    ]
    for pattern, hint in checks:
        if pattern.search(password):
            score += 0.5
        else:
            feedback.append(hint)

    # Common patterns - first match only
    lowered = password.lower()
    if any(lowered.startswith(prefix) for prefix in COMMON_PREFIXES):
        feedback.append("Avoid common password patterns")
        score = max(0.0, score - 1)

    # Sequential characters
    if any(sequence in lowered for sequence in SEQUENCES):
        feedback.append("Avoid sequential characters")
        score = max(0.0, score - 0.5)

    # Repeated characters
    if _REPEATED.search(password):
        feedback.append("Avoid repeated characters")
        score = max(0.0, score - 0.5)

    return PasswordStrengthResult(
        score=_round_half_up(score),
        feedback=feedback,
        is_valid=score >= MIN_VALID_SCORE and len(password) >= MIN_LENGTH,
    )


def strength_label(score: int) -> str:
    """Human-readable label for a 0-4 score."""
    return STRENGTH_LABELS[max(0, min(score, len(STRENGTH_LABELS) - 1))]
