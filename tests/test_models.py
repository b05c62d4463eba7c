"""
Tests for FinTrack models

Test strategy:
1. Unit tests for individual models (audit, security)
2. Serialization helpers used by the storage backends
"""

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from fintrack.models.audit import AuditEventType, AuditLogEntry, ClientContext
from fintrack.models.security import PasswordStrengthResult, RateLimitWindow


class TestAuditModels:
    """Tests for audit models."""

    def test_event_type_values_match_names(self):
        """Test every event type serializes to its own name."""
        for event_type in AuditEventType:
            assert event_type.value == event_type.name
        assert len(AuditEventType) == 20

    def test_entry_defaults(self):
        """Test id, timestamp and client fields are filled in."""
        entry = AuditLogEntry(
            event_type=AuditEventType.USER_SIGN_IN,
            event_description="user sign_in successful",
        )
        assert entry.id is not None
        assert entry.created_at.tzinfo is not None
        assert entry.user_id is None
        assert entry.ip_address == "client"
        assert entry.user_agent == "unknown"
        assert entry.severity == "info"

    def test_entry_is_immutable(self):
        """Test audit entries cannot be modified after creation."""
        entry = AuditLogEntry(
            event_type=AuditEventType.USER_SIGN_IN,
            event_description="Signed in",
        )
        with pytest.raises(ValidationError):
            entry.event_description = "Changed"

    def test_description_length_limit(self):
        """Test descriptions over 500 characters are rejected."""
        with pytest.raises(ValidationError):
            AuditLogEntry(
                event_type=AuditEventType.USER_SIGN_IN,
                event_description="x" * 501,
            )

    def test_metadata_must_be_primitive(self):
        """Test nested structures are rejected in metadata."""
        with pytest.raises(ValidationError):
            AuditLogEntry(
                event_type=AuditEventType.USER_SIGN_IN,
                event_description="Signed in",
                metadata={"tags": ["a", "b"]},
            )

    def test_to_log_dict(self):
        """Test conversion to a structured-logging dictionary."""
        when = datetime(2024, 12, 15, 10, 30, tzinfo=timezone.utc)
        entry = AuditLogEntry(
            user_id="user-1",
            event_type=AuditEventType.RATE_LIMIT_EXCEEDED,
            event_description="Security event: Rate limit exceeded",
            metadata={"blocked_until": when, "attempts": 5, "severity": "high"},
        )

        log_dict = entry.to_log_dict()
        assert log_dict["event_type"] == "RATE_LIMIT_EXCEEDED"
        assert log_dict["user_id"] == "user-1"
        assert log_dict["metadata"]["blocked_until"] == "2024-12-15T10:30:00+00:00"
        assert log_dict["metadata"]["attempts"] == 5
        assert entry.severity == "high"

    def test_block_expiry_parsed_from_iso_string(self):
        """Test a stored blocked_until string is restored as an aware datetime."""
        entry = AuditLogEntry(
            event_type=AuditEventType.RATE_LIMIT_EXCEEDED,
            event_description="Security event: Rate limit exceeded",
            metadata={"blocked_until": "2024-12-15T10:30:00Z", "timestamp": "2024-12-15T10:00:00Z"},
        )

        assert entry.metadata["blocked_until"] == datetime(2024, 12, 15, 10, 30, tzinfo=timezone.utc)
        # Other string values are left as recorded
        assert entry.metadata["timestamp"] == "2024-12-15T10:00:00Z"

    def test_to_sheets_row(self):
        """Test conversion to a Google Sheets row."""
        entry = AuditLogEntry(
            event_type=AuditEventType.FAILED_LOGIN,
            event_description="failed login failed for a@b.com",
            metadata={"email": "a@b.com", "success": False},
            user_agent="pytest",
        )

        row = entry.to_sheets_row()
        assert len(row) == 8
        assert row[0] == str(entry.id)
        assert row[2] == ""
        assert row[3] == "FAILED_LOGIN"
        assert json.loads(row[5]) == {"email": "a@b.com", "success": False}
        assert row[6:] == ["client", "pytest"]

    def test_client_context_defaults(self):
        """Test the client context placeholders."""
        context = ClientContext()
        assert context.user_agent == "unknown"
        assert context.ip_address == "client"


class TestSecurityModels:
    """Tests for rate limiting and password models."""

    def test_window_valid_attempts(self):
        """Test attempts outside the window are filtered without mutation."""
        window = RateLimitWindow(attempts=[0, 500, 900], blocked_until=None)

        assert window.valid_attempts(now=1400, window_ms=1000) == [500, 900]
        assert window.attempts == [0, 500, 900]

    def test_password_score_bounds(self):
        """Test scores outside 0-4 are rejected."""
        with pytest.raises(ValidationError):
            PasswordStrengthResult(score=5, feedback=[], is_valid=True)
