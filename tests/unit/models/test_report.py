"""Tests for report models."""

import pytest
from pydantic import ValidationError

from schematron_engine.models import (
    AssertionKind,
    FiringRecord,
    ValidationOutcome,
    ValidationReport,
    Verdict,
)


def make_record(pattern_id="p", kind=AssertionKind.ASSERT, outcome=True, message=""):
    return FiringRecord(
        location="/doc/item[1]",
        pattern_id=pattern_id,
        rule_id="r",
        rule_context="//item",
        kind=kind,
        test="price > 0",
        outcome=outcome,
        message=message,
    )


class TestFiringRecord:
    """Test the FiringRecord model."""

    def test_assert_polarity(self):
        """Test a false assert fails."""
        assert make_record(outcome=True).passed
        assert make_record(outcome=False).failed

    def test_report_polarity(self):
        """Test a true report fails."""
        assert make_record(kind=AssertionKind.REPORT, outcome=False).passed
        assert make_record(kind=AssertionKind.REPORT, outcome=True).failed

    def test_string_representation(self):
        """Test the one-line record summary."""
        record = make_record(outcome=False, message="negative price")

        expected = "[FAIL] p/r assert 'price > 0' at /doc/item[1]: negative price"
        assert str(record) == expected

    def test_frozen(self):
        """Test records cannot be modified."""
        record = make_record()
        with pytest.raises(ValidationError):
            record.outcome = False


class TestValidationReport:
    """Test the ValidationReport model."""

    @pytest.fixture
    def report(self):
        return ValidationReport(records=[
            make_record("p1", outcome=True),
            make_record("p1", outcome=False),
            make_record("p2", kind=AssertionKind.REPORT, outcome=True),
            make_record("p2", kind=AssertionKind.REPORT, outcome=False),
        ])

    def test_filters(self, report):
        """Test failure and report filters."""
        assert len(report.failures()) == 2
        assert len(report.failed_asserts()) == 1
        assert len(report.fired_reports()) == 1
        assert len(report.records_for_pattern("p2")) == 2

    def test_counters(self, report):
        """Test summary counters."""
        assert report.counters() == {
            "records": 4,
            "failed_asserts": 1,
            "fired_reports": 1,
            "patterns": 2,
        }

    def test_empty(self):
        """Test an empty report."""
        assert ValidationReport().is_empty

    def test_records_immutable(self, report):
        """Test the record sequence cannot be modified."""
        assert isinstance(report.records, tuple)
        with pytest.raises(ValidationError):
            report.records = ()

    def test_json_dump(self, report):
        """Test the report dumps to JSON."""
        data = report.model_dump(mode="json")

        assert data["records"][2]["kind"] == "report"
        assert data["records"][1]["outcome"] is False


class TestVerdict:
    """Test verdicts and outcomes."""

    def test_is_valid(self):
        """Test only VALID is valid."""
        assert Verdict.VALID.is_valid
        assert not Verdict.INVALID.is_valid
        assert not Verdict.INVALID_DUE_TO_UNEXPECTED_SUCCESS.is_valid

    def test_outcome(self):
        """Test the outcome pairs report and verdict."""
        outcome = ValidationOutcome(report=ValidationReport(), verdict=Verdict.VALID)
        assert outcome.is_valid
