"""
Authentication Models for FinTrack

Request schemas for the sign-in and sign-up forms, and the outcome the
authentication flow reports back to the UI.

Validation messages are written for end users: the flow shows the first
one verbatim.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_core import PydanticCustomError

from fintrack.security.password import MIN_LENGTH, validate_password_strength
from fintrack.validation.inputs import sanitize_input, validate_email


MAX_NAME_LENGTH = 50


def invalid_input(message: str) -> PydanticCustomError:
    return PydanticCustomError("invalid_input", message)


def first_error_message(error: ValidationError) -> str:
    """The message of the first failing field, in field order."""
    errors = error.errors()
    return errors[0]["msg"] if errors else "Invalid input"


def _check_email(email: str) -> str:
    if len(email) < 1:
        raise invalid_input("Email is required")
    if not validate_email(email).is_valid:
        raise invalid_input("Please enter a valid email address")
    return email


def _check_name(value: str, label: str) -> str:
    if len(value) < 1:
        raise invalid_input(f"{label} is required")
    if len(value) > MAX_NAME_LENGTH:
        raise invalid_input(f"{label} must be less than {MAX_NAME_LENGTH} characters")
    if not sanitize_input(value):
        raise invalid_input(f"{label} cannot be empty")
    return value


class SignInRequest(BaseModel):
    """Sign-in form input."""

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def validate_password_present(cls, v: str) -> str:
        if len(v) < 1:
            raise invalid_input("Password is required")
        return v


class SignUpRequest(BaseModel):
    """Sign-up form input."""

    email: str
    password: str
    confirm_password: str
    first_name: str
    last_name: str
    preferred_currency: str

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def validate_password_strength_field(cls, v: str) -> str:
        if len(v) < MIN_LENGTH:
            raise invalid_input("Password must be at least 8 characters long")
        if not validate_password_strength(v).is_valid:
            raise invalid_input(
                "Password must contain uppercase, lowercase, numbers, and special characters"
            )
        return v

    @field_validator("first_name")
    @classmethod
    def validate_first_name(cls, v: str) -> str:
        return _check_name(v, "First name")

    @field_validator("last_name")
    @classmethod
    def validate_last_name(cls, v: str) -> str:
        return _check_name(v, "Last name")

    @field_validator("preferred_currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        if len(v) != 3:
            raise invalid_input("Currency must be a valid 3-letter code")
        return v

    @model_validator(mode="after")
    def validate_passwords_match(self) -> "SignUpRequest":
        if self.password != self.confirm_password:
            raise invalid_input("Passwords do not match")
        return self

    def profile(self) -> dict[str, str]:
        """Profile data handed to the auth provider on sign-up."""
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "preferred_currency": self.preferred_currency,
        }


class AuthStatus(str, Enum):
    """How an authentication attempt ended."""
    SUCCESS = "success"
    RATE_LIMITED = "rate_limited"
    INVALID_INPUT = "invalid_input"
    REJECTED = "rejected"
    ERROR = "error"


class AuthOutcome(BaseModel):
    """
    Result of a sign-in or sign-up attempt.

    ``message`` is always safe to show to the user; internal error
    details never end up here.
    """

    status: AuthStatus
    message: str
    user_id: Optional[str] = None
    blocked_until: Optional[datetime] = Field(
        default=None,
        description="Set when the attempt was rate limited"
    )
    remaining_attempts: Optional[int] = Field(
        default=None,
        ge=0,
        description="Attempts left in the current window, for UI hints"
    )

    @property
    def succeeded(self) -> bool:
        return self.status == AuthStatus.SUCCESS
