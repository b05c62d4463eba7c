"""
Form Schemas for FinTrack

Input bounds for the account, transaction, goal, profile and settings
forms. These only check shape and range; ownership and existence checks
belong to the backend.

Every rule raises its own end-user message, so a form can show
``first_error_message`` verbatim.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from fintrack.models.auth import invalid_input
from fintrack.validation.inputs import sanitize_input


ACCOUNT_TYPES = ("checking", "savings", "credit_card", "investment", "loan", "other")
TRANSACTION_TYPES = ("income", "expense")
GOAL_TYPES = ("savings", "debt_payoff", "investment", "purchase", "emergency")

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
PHONE_PATTERN = r"^\+?[0-9\-\s()]*$"


def _check_text(
    value: Optional[str],
    max_length: int,
    too_long: str,
    required: Optional[str] = None,
) -> Optional[str]:
    if value is None:
        return value
    if required and len(value) < 1:
        raise invalid_input(required)
    if len(value) > max_length:
        raise invalid_input(too_long)
    return value


def _check_choice(value: Any, choices: tuple[str, ...], message: str) -> Any:
    if value not in choices:
        raise invalid_input(message)
    return value


def _check_uuid(value: Any, message: str) -> Any:
    if value is None or isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise invalid_input(message)


def _to_decimal(value: Any, message: str) -> Decimal:
    """Coerce a form number, rejecting anything that is not finite."""
    if isinstance(value, bool):
        raise invalid_input(message)
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise invalid_input(message)
    if not number.is_finite():
        raise invalid_input(message)
    return number


def _check_range(
    value: Decimal,
    minimum: Decimal,
    too_small: str,
    maximum: Decimal,
    too_large: str,
) -> Decimal:
    if value < minimum:
        raise invalid_input(too_small)
    if value > maximum:
        raise invalid_input(too_large)
    return value


def _check_currency(value: Optional[str]) -> Optional[str]:
    if value is not None and len(value) != 3:
        raise invalid_input("Currency must be a valid 3-letter code")
    return value


class AccountForm(BaseModel):
    """A bank, card, investment or loan account."""

    name: str
    account_type: Literal[
        "checking", "savings", "credit_card", "investment", "loan", "other"
    ]
    institution_name: Optional[str] = None
    balance: Decimal
    currency: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        _check_text(
            v, 100, "Account name must be less than 100 characters",
            required="Account name is required",
        )
        if not sanitize_input(v):
            raise invalid_input("Account name cannot be empty")
        return v

    @field_validator("account_type", mode="before")
    @classmethod
    def validate_account_type(cls, v: Any) -> Any:
        return _check_choice(v, ACCOUNT_TYPES, "Please select a valid account type")

    @field_validator("institution_name")
    @classmethod
    def validate_institution_name(cls, v: Optional[str]) -> Optional[str]:
        return _check_text(v, 100, "Institution name must be less than 100 characters")

    @field_validator("balance", mode="before")
    @classmethod
    def validate_balance(cls, v: Any) -> Decimal:
        return _check_range(
            _to_decimal(v, "Balance must be a valid number"),
            Decimal("-1000000"), "Balance cannot be less than -1,000,000",
            Decimal("1000000000"), "Balance cannot exceed 1,000,000,000",
        )

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        return _check_currency(v)


class TransactionForm(BaseModel):
    """An income or expense entry."""

    merchant: str
    amount: Decimal
    account_id: UUID
    category_id: Optional[UUID] = None
    transaction_type: Literal["income", "expense"]
    transaction_date: str
    description: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("merchant")
    @classmethod
    def validate_merchant(cls, v: str) -> str:
        return _check_text(
            v, 200, "Merchant name must be less than 200 characters",
            required="Merchant/Description is required",
        )

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> Decimal:
        return _check_range(
            _to_decimal(v, "Amount must be a valid number"),
            Decimal("0.01"), "Amount must be greater than 0",
            Decimal("1000000"), "Amount cannot exceed 1,000,000",
        )

    @field_validator("account_id", mode="before")
    @classmethod
    def validate_account_id(cls, v: Any) -> Any:
        return _check_uuid(v, "Please select a valid account")

    @field_validator("category_id", mode="before")
    @classmethod
    def validate_category_id(cls, v: Any) -> Any:
        return _check_uuid(v, "Please select a valid category")

    @field_validator("transaction_type", mode="before")
    @classmethod
    def validate_transaction_type(cls, v: Any) -> Any:
        return _check_choice(v, TRANSACTION_TYPES, "Please select income or expense")

    @field_validator("transaction_date")
    @classmethod
    def validate_transaction_date(cls, v: str) -> str:
        if not re.match(DATE_PATTERN, v):
            raise invalid_input("Invalid date format")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return _check_text(v, 500, "Description must be less than 500 characters")

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v: Optional[str]) -> Optional[str]:
        return _check_text(v, 1000, "Notes must be less than 1000 characters")


class GoalForm(BaseModel):
    """A savings, payoff or purchase goal."""

    title: str
    target_amount: Decimal
    current_amount: Decimal
    goal_type: Literal["savings", "debt_payoff", "investment", "purchase", "emergency"]
    description: Optional[str] = None
    target_date: Optional[str] = None
    priority: Optional[Literal["low", "medium", "high"]] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _check_text(
            v, 100, "Goal title must be less than 100 characters",
            required="Goal title is required",
        )

    @field_validator("target_amount", mode="before")
    @classmethod
    def validate_target_amount(cls, v: Any) -> Decimal:
        return _check_range(
            _to_decimal(v, "Target amount must be a valid number"),
            Decimal("1"), "Target amount must be greater than 0",
            Decimal("1000000000"), "Target amount cannot exceed 1,000,000,000",
        )

    @field_validator("current_amount", mode="before")
    @classmethod
    def validate_current_amount(cls, v: Any) -> Decimal:
        return _check_range(
            _to_decimal(v, "Current amount must be a valid number"),
            Decimal("0"), "Current amount cannot be negative",
            Decimal("1000000000"), "Current amount cannot exceed 1,000,000,000",
        )

    @field_validator("goal_type", mode="before")
    @classmethod
    def validate_goal_type(cls, v: Any) -> Any:
        return _check_choice(v, GOAL_TYPES, "Please select a valid goal type")

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return _check_text(v, 500, "Description must be less than 500 characters")


class ProfileForm(BaseModel):
    """Editable profile fields; everything is optional."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    display_name: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    preferred_currency: Optional[str] = None

    @field_validator("first_name")
    @classmethod
    def validate_first_name(cls, v: Optional[str]) -> Optional[str]:
        return _check_text(v, 50, "First name must be less than 50 characters")

    @field_validator("last_name")
    @classmethod
    def validate_last_name(cls, v: Optional[str]) -> Optional[str]:
        return _check_text(v, 50, "Last name must be less than 50 characters")

    @field_validator("display_name")
    @classmethod
    def validate_display_name(cls, v: Optional[str]) -> Optional[str]:
        return _check_text(v, 100, "Display name must be less than 100 characters")

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not re.match(PHONE_PATTERN, v):
            raise invalid_input("Invalid phone number format")
        return _check_text(v, 20, "Phone number must be less than 20 characters")

    @field_validator("location")
    @classmethod
    def validate_location(cls, v: Optional[str]) -> Optional[str]:
        return _check_text(v, 100, "Location must be less than 100 characters")

    @field_validator("preferred_currency")
    @classmethod
    def validate_preferred_currency(cls, v: Optional[str]) -> Optional[str]:
        return _check_currency(v)


class UserSettingsForm(BaseModel):
    """Notification preferences."""

    email_notifications: bool
    push_notifications: bool
    budget_alerts: bool
    goal_reminders: bool
    transaction_notifications: bool
    weekly_summary: bool
    monthly_report: bool
    low_balance_threshold: Decimal

    @field_validator("low_balance_threshold", mode="before")
    @classmethod
    def validate_low_balance_threshold(cls, v: Any) -> Decimal:
        return _check_range(
            _to_decimal(v, "Threshold must be a valid number"),
            Decimal("0"), "Threshold cannot be negative",
            Decimal("1000000"), "Threshold cannot exceed 1,000,000",
        )
