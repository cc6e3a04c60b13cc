"""
Tests for FNA Intake models

Test strategy:
1. Unit tests for coercion and the field-group invariants
2. Row / draft conversion of the FNA header
3. Audit events
"""

import pytest
from datetime import date, datetime, time, timezone
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from src.models.client import Client, FnaSession
from src.models.fna import (
    FNA_FIELDS,
    NUMERIC_FIELDS,
    FamilyPlanningSection,
    FieldKind,
    FnaHeader,
    HouseholdSection,
    InsuranceNeedsSection,
    blank_draft,
    coerce_amount,
    coerce_count,
    coerce_tri_state,
    describe_validation_error,
)


class TestCoercion:
    """Tests for raw form value coercion."""

    def test_blank_amount_is_none(self):
        assert coerce_amount("") is None
        assert coerce_amount("   ") is None
        assert coerce_amount(None) is None

    def test_zero_is_not_none(self):
        """Zero must survive as zero, distinct from unset."""
        assert coerce_amount("0") == Decimal("0")
        assert coerce_amount(0) is not None

    def test_amount_parses_strings_and_numbers(self):
        assert coerce_amount("1200") == Decimal("1200")
        assert coerce_amount(" 99.50 ") == Decimal("99.50")
        assert coerce_amount(1200) == Decimal("1200")

    def test_negative_amount_passes(self):
        """No range validation on amounts."""
        assert coerce_amount("-250") == Decimal("-250")

    @pytest.mark.parametrize("raw", ["abc", "12,000", "NaN", "Infinity", True])
    def test_amount_rejects_non_numbers(self, raw):
        with pytest.raises(ValueError):
            coerce_amount(raw)

    def test_count_requires_whole_number(self):
        assert coerce_count("3") == 3
        assert coerce_count("3.0") == 3
        assert coerce_count("") is None
        with pytest.raises(ValueError):
            coerce_count("2.5")

    def test_tri_state(self):
        assert coerce_tri_state(True) is True
        assert coerce_tri_state(False) is False
        assert coerce_tri_state(None) is None
        assert coerce_tri_state("") is None
        assert coerce_tri_state("Yes") is True
        assert coerce_tri_state("no") is False

    def test_tri_state_rejects_other_values(self):
        with pytest.raises(ValueError):
            coerce_tri_state("maybe")


class TestFieldGroups:
    """Tests for the field-group models."""

    def test_text_fields_never_none(self):
        section = HouseholdSection(spouse_name=None, city="Austin")
        assert section.spouse_name == ""
        assert section.city == "Austin"

    def test_family_tri_state_defaults_to_unknown(self):
        section = FamilyPlanningSection()
        assert section.more_children_planned is None
        assert section.more_children_count is None

    def test_family_rejects_unknown_flag(self):
        with pytest.raises(ValidationError):
            FamilyPlanningSection(more_children_planned="maybe")

    def test_insurance_amounts_serialize_as_numbers(self):
        section = InsuranceNeedsSection(li_debt="1200", li_income="", li_mortgage="0")
        dumped = section.model_dump(mode="json")
        assert dumped["li_debt"] == 1200
        assert dumped["li_income"] is None
        assert dumped["li_mortgage"] == 0
        assert dumped["li_mortgage"] is not None


class TestFieldRegistry:
    """Tests for the field registry."""

    def test_numeric_fields(self):
        assert "more_children_count" in NUMERIC_FIELDS
        assert "li_debt" in NUMERIC_FIELDS
        assert "spouse_name" not in NUMERIC_FIELDS

    def test_blank_draft(self):
        draft = blank_draft()
        assert set(draft) == set(FNA_FIELDS)
        assert draft["spouse_name"] == ""
        assert draft["li_debt"] is None
        assert draft["has_old_401k"] is None

    def test_accepts_checks_basic_type_only(self):
        assert FNA_FIELDS["li_debt"].accepts("not yet parsed")
        assert FNA_FIELDS["has_old_401k"].accepts(True)
        assert not FNA_FIELDS["has_old_401k"].accepts("yes")
        assert not FNA_FIELDS["city"].accepts(5)
        assert FNA_FIELDS["next_appointment_date"].kind == FieldKind.DATE


class TestFnaHeader:
    """Tests for FnaHeader conversion."""

    def test_from_row(self):
        header = FnaHeader.from_row({
            "id": 7,
            "client_id": "c-ana",
            "spouse_name": "Jordan",
            "li_debt": 1500.0,
            "more_children_planned": False,
            "next_appointment_date": "2025-03-01",
            "updated_at": None,
            "unrelated_column": "ignored",
        })
        assert header.id == "7"
        assert header.household.spouse_name == "Jordan"
        assert header.insurance.li_debt == Decimal("1500")
        assert header.family.more_children_planned is False
        assert header.income.next_appointment_date == date(2025, 3, 1)

    @pytest.mark.parametrize("name", NUMERIC_FIELDS)
    def test_numeric_fields_persist_null_zero_and_value(self, name):
        """"" -> null, "1200" -> 1200, "0" -> 0 for every numeric field."""
        for raw, expected in [("", None), ("1200", 1200), ("0", 0)]:
            draft = blank_draft()
            draft[name] = raw
            row = FnaHeader.from_draft("h1", "c1", draft).to_row()
            if expected is None:
                assert row[name] is None
            else:
                assert row[name] == expected

    def test_to_row_is_flat_and_keyed_by_id(self):
        saved_at = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        draft = blank_draft()
        draft.update({
            "spouse_name": "Jordan",
            "has_old_401k": True,
            "next_appointment_date": date(2025, 3, 1),
            "next_appointment_time": time(14, 30),
        })
        row = FnaHeader.from_draft("h1", "c1", draft, updated_at=saved_at).to_row()

        assert "id" not in row
        assert "client_id" not in row
        assert set(row) == set(FNA_FIELDS) | {"updated_at"}
        assert row["spouse_name"] == "Jordan"
        assert row["has_old_401k"] is True
        assert row["expects_lump_sum"] is None
        assert row["next_appointment_date"] == "2025-03-01"
        assert row["next_appointment_time"] == "14:30:00"
        assert row["updated_at"] == saved_at.isoformat()

    def test_draft_round_trip(self):
        draft = blank_draft()
        draft.update({"city": "Austin", "li_income": "1200", "more_children_planned": True})
        header = FnaHeader.from_draft("h1", "c1", draft)
        restored = header.to_draft()
        assert restored["city"] == "Austin"
        assert restored["li_income"] == Decimal("1200")
        assert restored["more_children_planned"] is True
        assert restored["li_debt"] is None

    def test_invalid_number_is_described_by_label(self):
        draft = blank_draft()
        draft["li_debt"] = "abc"
        with pytest.raises(ValidationError) as exc_info:
            FnaHeader.from_draft("h1", "c1", draft)
        assert describe_validation_error(exc_info.value) == "Debt to cover ($): 'abc' is not a number"


class TestClientModels:
    """Tests for client and dashboard models."""

    def test_client_match_is_case_insensitive(self):
        client = Client(id=1, firstname="Ana", lastname="Lee", phone="555-1111")
        assert client.id == "1"
        assert client.matches("LEE")
        assert client.matches("555-11")
        assert client.matches("")
        assert not client.matches("zzz")

    def test_client_display(self):
        client = Client(id="c1", firstname="Ana", lastname=None, phone=None, email="  ")
        assert client.display_name == "Ana"
        assert client.phone == ""
        assert client.email is None
        assert client.email_display == "-"

    def test_session_display(self):
        session = FnaSession(id="s1", created_at="2024-04-01T09:30:00Z", household_income="85000")
        assert session.income_display == "$85,000"
        assert session.dependents_display == "-"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.FNA_SAVED,
            description="FNA saved",
        )
        assert event.event_type == AuditEventType.FNA_SAVED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.CLIENTS_LOADED,
            description="Loaded 2 clients",
            details={"count": 2},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "clients_loaded"
        assert log_dict["details"]["count"] == 2

    def test_audit_event_builder_header_created(self):
        """Test AuditEventBuilder.header_loaded for a new header."""
        correlation_id = uuid4()

        event = AuditEventBuilder.header_loaded(
            header_id="h1",
            client_id="c1",
            created=True,
            correlation_id=correlation_id,
        )

        assert event.event_type == AuditEventType.FNA_HEADER_CREATED
        assert event.entity_id == "h1"
        assert event.correlation_id == correlation_id
        assert event.is_user_action is True

    def test_audit_event_builder_save_failed(self):
        """Test AuditEventBuilder.save_failed keeps the message verbatim."""
        event = AuditEventBuilder.save_failed(
            header_id="h1",
            error_message="permission denied for table fna_header",
            correlation_id=None,
        )

        assert event.event_type == AuditEventType.FNA_SAVE_FAILED
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "permission denied for table fna_header"

    def test_long_ids_are_clipped_in_descriptions(self):
        """Ids come from requests; the description limit must never reject an event."""
        event = AuditEventBuilder.pdf_rendered(session_id="x" * 600, size_bytes=10)

        assert len(event.description) <= 500
        assert event.entity_id == "x" * 600


class TestAmountOverflow:
    """Numbers that only overflow once written as floats."""

    @pytest.mark.parametrize("raw", ["1e400", "-1e400", Decimal("1e309")])
    def test_amount_rejects_values_beyond_float_range(self, raw):
        with pytest.raises(ValueError):
            coerce_amount(raw)

    def test_large_but_finite_amount_passes(self):
        assert coerce_amount("1e300") == Decimal("1e300")
