"""
Tests for input validation: e-mail shape, sanitization and form schemas.
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from fintrack.models.auth import SignInRequest, SignUpRequest, first_error_message
from fintrack.models.forms import (
    AccountForm,
    GoalForm,
    ProfileForm,
    TransactionForm,
    UserSettingsForm,
)
from fintrack.validation import sanitize_input, validate_email


def first_message(model, **fields) -> str:
    with pytest.raises(ValidationError) as exc_info:
        model(**fields)
    return first_error_message(exc_info.value)


VALID_SIGN_UP = {
    "email": "jane@example.com",
    "password": "Tr0ub4dor&3xyz!",
    "confirm_password": "Tr0ub4dor&3xyz!",
    "first_name": "Jane",
    "last_name": "Doe",
    "preferred_currency": "USD",
}


class TestValidateEmail:
    """Tests for validate_email."""

    @pytest.mark.parametrize("email", ["a@b.com", "jane.doe+tag@mail.example.co.uk", "x@localhost"])
    def test_valid_addresses(self, email):
        """Test ordinary addresses are accepted."""
        result = validate_email(email)
        assert result.is_valid is True
        assert result.message is None

    @pytest.mark.parametrize("email", ["invalid", "a@", "@b.com", "a b@c.com", "a@b.com\n", ""])
    def test_malformed_addresses(self, email):
        """Test malformed addresses are rejected."""
        result = validate_email(email)
        assert result.is_valid is False
        assert result.message == "Invalid email format"

    @pytest.mark.parametrize("email", ["a..b@x.com", ".a@x.com", "a.@x.com"])
    def test_suspicious_dots(self, email):
        """Test dot placements the main pattern allows are still rejected."""
        result = validate_email(email)
        assert result.is_valid is False
        assert result.message == "Invalid email format"

    def test_local_part_too_long(self):
        """Test local parts over 64 characters are rejected."""
        result = validate_email("a" * 65 + "@x.com")
        assert result.message == "Email local part too long"

    def test_address_too_long(self):
        """Test addresses over 254 characters are rejected."""
        email = "a@" + ("b" * 60 + ".") * 5 + "com"
        result = validate_email(email)
        assert result.message == "Email address too long"


class TestSanitizeInput:
    """Tests for sanitize_input."""

    def test_strips_whitespace_and_angle_brackets(self):
        """Test surrounding whitespace and < > are removed."""
        assert sanitize_input("  <b>hi</b>  ") == "bhi/b"

    def test_removes_script_protocol(self):
        """Test javascript: is removed regardless of case."""
        assert sanitize_input("JavaScript:alert(1)") == "alert(1)"

    def test_removes_event_handlers(self):
        """Test on<event>= attributes are removed."""
        assert sanitize_input("<img onerror=x>") == "img x"

    def test_truncates_long_input(self):
        """Test input is capped at 1000 characters."""
        assert len(sanitize_input("x" * 2000)) == 1000

    def test_plain_text_unchanged(self):
        """Test ordinary text passes through."""
        assert sanitize_input("Groceries at Joe's") == "Groceries at Joe's"


class TestSignInRequest:
    """Tests for the sign-in schema."""

    def test_valid(self):
        """Test a well-formed sign-in request."""
        request = SignInRequest(email="a@b.com", password="x")
        assert request.email == "a@b.com"

    def test_email_required(self):
        """Test the empty e-mail message."""
        assert first_message(SignInRequest, email="", password="x") == "Email is required"

    def test_email_shape(self):
        """Test the malformed e-mail message."""
        message = first_message(SignInRequest, email="nope", password="x")
        assert message == "Please enter a valid email address"

    def test_password_required(self):
        """Test the empty password message."""
        message = first_message(SignInRequest, email="a@b.com", password="")
        assert message == "Password is required"

    def test_email_error_reported_first(self):
        """Test field order decides which message is shown."""
        assert first_message(SignInRequest, email="", password="") == "Email is required"


class TestSignUpRequest:
    """Tests for the sign-up schema."""

    def test_valid(self):
        """Test a well-formed sign-up request and its profile payload."""
        request = SignUpRequest(**VALID_SIGN_UP)
        assert request.profile() == {
            "first_name": "Jane",
            "last_name": "Doe",
            "preferred_currency": "USD",
        }

    def test_short_password(self):
        """Test the minimum length message."""
        fields = {**VALID_SIGN_UP, "password": "Ab1!", "confirm_password": "Ab1!"}
        assert first_message(SignUpRequest, **fields) == "Password must be at least 8 characters long"

    def test_weak_password(self):
        """Test passwords failing the strength check are rejected."""
        fields = {**VALID_SIGN_UP, "password": "password1", "confirm_password": "password1"}
        assert first_message(SignUpRequest, **fields) == (
            "Password must contain uppercase, lowercase, numbers, and special characters"
        )

    def test_passwords_must_match(self):
        """Test the confirmation mismatch message."""
        fields = {**VALID_SIGN_UP, "confirm_password": "Different&3xyz!"}
        assert first_message(SignUpRequest, **fields) == "Passwords do not match"

    def test_name_bounds(self):
        """Test first and last name length messages."""
        assert first_message(SignUpRequest, **{**VALID_SIGN_UP, "first_name": ""}) == "First name is required"
        assert first_message(SignUpRequest, **{**VALID_SIGN_UP, "last_name": "x" * 51}) == (
            "Last name must be less than 50 characters"
        )

    def test_name_that_sanitizes_to_nothing(self):
        """Test names made only of stripped characters are rejected."""
        assert first_message(SignUpRequest, **{**VALID_SIGN_UP, "first_name": "<>"}) == (
            "First name cannot be empty"
        )

    def test_currency_code(self):
        """Test currency codes must be three letters long."""
        assert first_message(SignUpRequest, **{**VALID_SIGN_UP, "preferred_currency": "US"}) == (
            "Currency must be a valid 3-letter code"
        )


class TestFormSchemas:
    """Tests for the entity form schemas."""

    def test_transaction_form_valid(self):
        """Test a well-formed transaction."""
        form = TransactionForm(
            merchant="Corner Shop",
            amount=12.5,
            account_id=uuid4(),
            transaction_type="expense",
            transaction_date="2024-12-15",
        )
        assert form.category_id is None

    @pytest.mark.parametrize("amount", [0, -5, 1_000_001])
    def test_transaction_amount_bounds(self, amount):
        """Test amounts outside 0.01 - 1,000,000 are rejected."""
        with pytest.raises(ValidationError):
            TransactionForm(
                merchant="Shop",
                amount=amount,
                account_id=uuid4(),
                transaction_type="expense",
                transaction_date="2024-12-15",
            )

    def test_transaction_date_format(self):
        """Test dates must be YYYY-MM-DD."""
        with pytest.raises(ValidationError):
            TransactionForm(
                merchant="Shop",
                amount=10,
                account_id=uuid4(),
                transaction_type="income",
                transaction_date="15/12/2024",
            )

    def test_account_name_cannot_sanitize_to_empty(self):
        """Test account names made only of markup are rejected."""
        with pytest.raises(ValidationError, match="Account name cannot be empty"):
            AccountForm(name="<>", account_type="checking", balance=0, currency="USD")

    def test_account_type_is_closed(self):
        """Test unknown account types are rejected."""
        with pytest.raises(ValidationError):
            AccountForm(name="Main", account_type="crypto", balance=0, currency="USD")

    def test_goal_form(self):
        """Test goal amounts must be positive and non-negative."""
        GoalForm(title="Holiday", target_amount=1000, current_amount=0, goal_type="savings")
        with pytest.raises(ValidationError):
            GoalForm(title="Holiday", target_amount=0, current_amount=0, goal_type="savings")

    def test_profile_phone_format(self):
        """Test phone numbers allow digits, spaces, dashes and parentheses only."""
        assert ProfileForm(phone="+1 (555) 123-4567").phone == "+1 (555) 123-4567"
        with pytest.raises(ValidationError):
            ProfileForm(phone="call me")


VALID_TRANSACTION = {
    "merchant": "Corner Shop",
    "amount": 12.5,
    "account_id": str(uuid4()),
    "transaction_type": "expense",
    "transaction_date": "2024-12-15",
}


class TestFormMessages:
    """Tests for the end-user messages raised by the form schemas."""

    @pytest.mark.parametrize("override, expected", [
        ({"merchant": ""}, "Merchant/Description is required"),
        ({"merchant": "x" * 201}, "Merchant name must be less than 200 characters"),
        ({"amount": 0}, "Amount must be greater than 0"),
        ({"amount": 1_000_001}, "Amount cannot exceed 1,000,000"),
        ({"amount": "lots"}, "Amount must be a valid number"),
        ({"amount": float("nan")}, "Amount must be a valid number"),
        ({"account_id": "not-a-uuid"}, "Please select a valid account"),
        ({"category_id": "nope"}, "Please select a valid category"),
        ({"transaction_type": "transfer"}, "Please select income or expense"),
        ({"transaction_date": "15/12/2024"}, "Invalid date format"),
        ({"notes": "x" * 1001}, "Notes must be less than 1000 characters"),
    ])
    def test_transaction_messages(self, override, expected):
        """Test each transaction rule reports its own message."""
        assert first_message(TransactionForm, **{**VALID_TRANSACTION, **override}) == expected

    @pytest.mark.parametrize("override, expected", [
        ({"name": ""}, "Account name is required"),
        ({"name": "<>"}, "Account name cannot be empty"),
        ({"account_type": "crypto"}, "Please select a valid account type"),
        ({"balance": -1_000_001}, "Balance cannot be less than -1,000,000"),
        ({"balance": 1_000_000_001}, "Balance cannot exceed 1,000,000,000"),
        ({"currency": "EURO"}, "Currency must be a valid 3-letter code"),
    ])
    def test_account_messages(self, override, expected):
        """Test each account rule reports its own message."""
        fields = {"name": "Main", "account_type": "checking", "balance": 0, "currency": "USD"}
        assert first_message(AccountForm, **{**fields, **override}) == expected

    def test_goal_messages(self):
        """Test goal amount and type messages."""
        fields = {"title": "Holiday", "target_amount": 1000, "current_amount": 0, "goal_type": "savings"}

        assert first_message(GoalForm, **{**fields, "title": ""}) == "Goal title is required"
        assert first_message(GoalForm, **{**fields, "target_amount": 0}) == (
            "Target amount must be greater than 0"
        )
        assert first_message(GoalForm, **{**fields, "current_amount": -1}) == (
            "Current amount cannot be negative"
        )
        assert first_message(GoalForm, **{**fields, "goal_type": "yacht"}) == (
            "Please select a valid goal type"
        )

    def test_profile_and_settings_messages(self):
        """Test profile and notification settings messages."""
        assert first_message(ProfileForm, phone="call me") == "Invalid phone number format"
        assert first_message(ProfileForm, display_name="x" * 101) == (
            "Display name must be less than 100 characters"
        )

        flags = dict.fromkeys([
            "email_notifications", "push_notifications", "budget_alerts", "goal_reminders",
            "transaction_notifications", "weekly_summary", "monthly_report",
        ], True)
        assert first_message(UserSettingsForm, **flags, low_balance_threshold=-5) == (
            "Threshold cannot be negative"
        )

    def test_amounts_keep_full_precision(self):
        """Test amounts are not restricted to two decimal places."""
        account = AccountForm(name="Main", account_type="checking", balance=Decimal("12.345"), currency="USD")
        assert account.balance == Decimal("12.345")

        transaction = TransactionForm(**{**VALID_TRANSACTION, "amount": "0.015"})
        assert transaction.amount == Decimal("0.015")
