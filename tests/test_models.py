"""
Tests for Shop Ledger models

Test strategy:
1. Unit tests for individual components (models, validators, normalizer)
2. Flow tests for the reconciler with in-memory and temp-dir stores
3. No real network calls in tests (httpx.MockTransport and fakes)
"""

import asyncio
from decimal import Decimal

import pytest
from pydantic import ValidationError

from shop_ledger.audit import AuditLogger
from shop_ledger.models.entry import (
    AnnotatedEntry,
    EntryForm,
    EntryType,
    LedgerEntry,
    RawEntry,
    coerce_amount,
    decimal_to_json,
    format_decimal,
    signed_amount,
)
from shop_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from shop_ledger.validation import (
    EntryValidationError,
    EntryValidator,
)


class TestEntryType:
    """Tests for the entry type enum."""

    def test_parse_is_case_insensitive(self):
        """Test that lower/mixed case values are recognised."""
        assert EntryType.parse("in") is EntryType.IN
        assert EntryType.parse("Out") is EntryType.OUT
        assert EntryType.parse(" inout ") is EntryType.INOUT

    def test_parse_unknown_values(self):
        """Test that unknown values parse to None."""
        assert EntryType.parse("refund") is None
        assert EntryType.parse("") is None
        assert EntryType.parse(None) is None


class TestAmountCoercion:
    """Tests for coerce_amount and signed_amount."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (100, Decimal("100")),
            (12.5, Decimal("12.5")),
            ("30", Decimal("30")),
            (" 7.25 ", Decimal("7.25")),
            ("1e3", Decimal("1000")),
            (Decimal("4.10"), Decimal("4.10")),
            (True, Decimal("1")),
            ("", Decimal("0")),
            ("   ", Decimal("0")),
            ("abc", Decimal("0")),
            (None, Decimal("0")),
            ("NaN", Decimal("0")),
            (float("inf"), Decimal("0")),
            ([1, 2], Decimal("0")),
            ({"amount": 5}, Decimal("0")),
        ],
    )
    def test_coerce_amount(self, raw, expected):
        """Test that amounts coerce to numbers and fail soft to zero."""
        assert coerce_amount(raw) == expected

    def test_signed_amount(self):
        """Test sign rules for each type."""
        amount = Decimal("40")
        assert signed_amount("IN", amount) == Decimal("40")
        assert signed_amount("out", amount) == Decimal("-40")
        assert signed_amount("INOUT", amount) == Decimal("0")
        assert signed_amount("gift", amount) == Decimal("0")
        assert signed_amount(None, amount) == Decimal("0")

    def test_format_decimal(self):
        """Test number rendering drops trailing zeros."""
        assert format_decimal(Decimal("100")) == "100"
        assert format_decimal(Decimal("12.50")) == "12.5"
        assert format_decimal(Decimal("-30.00")) == "-30"
        assert format_decimal(Decimal("1E+2")) == "100"
        assert format_decimal(Decimal("-0")) == "0"

    def test_decimal_to_json(self):
        """Test integral amounts serialize as ints."""
        assert decimal_to_json(Decimal("100.00")) == 100
        assert isinstance(decimal_to_json(Decimal("100.00")), int)
        assert decimal_to_json(Decimal("2.5")) == 2.5


class TestEntryModels:
    """Tests for raw and typed entry models."""

    def test_raw_entry_keeps_unknown_fields(self):
        """Test that RawEntry accepts anything a store sends."""
        raw = RawEntry.model_validate({"date": 20250101, "amount": "x", "row": 7})
        assert raw.date == 20250101
        assert raw.amount == "x"
        assert raw.model_extra == {"row": 7}

    def test_ledger_entry_from_raw(self):
        """Test conversion from a loose record to a typed entry."""
        raw = RawEntry(date="2025-01-01", name=None, type="in", amount="100")
        entry = LedgerEntry.from_raw(raw)
        assert entry.date == "2025-01-01"
        assert entry.name == ""
        assert entry.type == "in"
        assert entry.entry_type is EntryType.IN
        assert entry.amount == Decimal("100")
        assert entry.signed_amount == Decimal("100")

    def test_ledger_entry_is_immutable(self):
        """Test that a persisted entry cannot be edited in place."""
        entry = LedgerEntry(date="2025-01-01", type="IN", amount=Decimal("5"))
        with pytest.raises(ValidationError):
            entry.amount = Decimal("6")

    def test_to_record_has_no_balance(self):
        """Test the persisted projection."""
        entry = AnnotatedEntry(
            date="2025-01-01",
            description="milk",
            type="OUT",
            amount=Decimal("30"),
            balance=Decimal("70"),
        )
        assert entry.to_record() == {
            "date": "2025-01-01",
            "name": "",
            "description": "milk",
            "type": "OUT",
            "amount": 30,
        }

    def test_to_form_fields(self):
        """Test the payload sent to a remote store."""
        entry = AnnotatedEntry(
            date="2025-01-02",
            name="Ravi",
            type="OUT",
            amount=Decimal("12.50"),
            balance=Decimal("87.50"),
        )
        assert entry.to_form_fields() == {
            "date": "2025-01-02",
            "name": "Ravi",
            "description": "",
            "type": "OUT",
            "amount": "12.5",
            "balance": "87.5",
        }

    def test_entry_form_defaults(self):
        """Test that a fresh form is an empty OUT entry."""
        form = EntryForm()
        assert form.date == ""
        assert form.type == "OUT"
        assert form.amount == ""


class TestEntryValidator:
    """Tests for submission validation."""

    def test_valid_form(self):
        """Test a complete form passes."""
        result = EntryValidator().validate(
            EntryForm(date="2025-02-01", type="IN", amount="50")
        )
        assert result.is_valid is True
        assert result.issues == []
        assert result.amount == Decimal("50")

    def test_result_carries_coerced_amount(self):
        """Test that the amount is coerced once, during validation."""
        result = EntryValidator().validate(
            EntryForm(date="2025-02-01", type="OUT", amount=" 12.50 ")
        )
        assert result.amount == Decimal("12.50")

    def test_missing_date(self):
        """Test that an empty date is an error."""
        result = EntryValidator().validate(EntryForm(date="", amount=10))
        assert result.is_valid is False
        assert [i.field for i in result.errors] == ["date"]

    def test_whitespace_date_is_missing(self):
        """Test that a blank date is stripped to empty."""
        result = EntryValidator().validate(EntryForm(date="   ", amount=10))
        assert result.is_valid is False

    @pytest.mark.parametrize("amount, issue_type", [
        ("", "missing"),
        (None, "missing"),
        (0, "invalid_value"),
        ("0", "invalid_value"),
        ("abc", "invalid_value"),
    ])
    def test_zero_or_missing_amount(self, amount, issue_type):
        """Test that the amount must coerce to a non-zero number."""
        result = EntryValidator().validate(
            EntryForm(date="2025-02-01", amount=amount)
        )
        assert result.is_valid is False
        assert result.errors[0].field == "amount"
        assert result.errors[0].issue_type == issue_type

    def test_unknown_type_is_only_a_warning(self):
        """Test that unrecognised types don't block the submission."""
        result = EntryValidator().validate(
            EntryForm(date="2025-02-01", type="refund", amount=5)
        )
        assert result.is_valid is True
        assert result.warnings[0].field == "type"

    def test_check_raises(self):
        """Test check() raises with the issues attached."""
        with pytest.raises(EntryValidationError) as exc_info:
            EntryValidator().check(EntryForm())
        fields = {issue.field for issue in exc_info.value.issues}
        assert fields == {"date", "amount"}


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            description="Ledger loaded",
        )
        assert event.severity == AuditSeverity.INFO
        assert event.timestamp.tzinfo is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.entry_appended(
            store="local",
            entry_date="2025-02-01",
            entry_type="IN",
            amount="50",
            balance="50",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "entry_appended"
        assert log_dict["store"] == "local"
        assert log_dict["details"]["balance"] == "50"
        assert log_dict["is_user_action"] is True

    def test_fallback_event_is_a_warning(self):
        """Test that a read fallback is logged as a warning."""
        event = AuditEventBuilder.load_fallback_used("remote", "timeout")
        assert event.severity == AuditSeverity.WARNING
        assert event.error_message == "timeout"

    def test_audit_logger_keeps_bounded_history(self):
        """Test that the in-memory history is trimmed."""
        audit_logger = AuditLogger(history_size=2)

        async def log_three():
            for count in range(3):
                await audit_logger.log_ledger_loaded("local", count)

        asyncio.run(log_three())
        counts = [e.details["entry_count"] for e in audit_logger.history]
        assert counts == [1, 2]

    def test_long_entry_date_in_event(self):
        """Test that free-text dates of any length fit in an event."""
        event = AuditEventBuilder.entry_appended(
            store="local",
            entry_date="x" * 600,
            entry_type="IN",
            amount="5",
            balance="5",
        )
        assert event.details["date"] == "x" * 600

    def test_audit_logger_never_raises(self):
        """Test that an event that cannot be built is dropped, not raised."""
        audit_logger = AuditLogger()

        async def log_bad_event():
            await audit_logger.log_ledger_loaded("local", 1, correlation_id="not-a-uuid")

        asyncio.run(log_bad_event())
        assert audit_logger.history == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
