"""Tests for validity policies."""

import pytest

from schematron_engine.config import ValidityConfig
from schematron_engine.engine import (
    CallableValidityPolicy,
    DefaultValidityPolicy,
    RoleValidityPolicy,
    StrictSuccessPolicy,
    ValidityPolicy,
    as_policy,
    create_policy,
)
from schematron_engine.models import AssertionKind, FiringRecord, ValidationReport, Verdict


def record(kind=AssertionKind.ASSERT, outcome=True, role=None):
    return FiringRecord(
        location="/doc",
        pattern_id="p",
        rule_id="r",
        rule_context="/doc",
        kind=kind,
        test="t",
        outcome=outcome,
        role=role,
    )


def report(*records):
    return ValidationReport(records=records)


class TestDefaultValidityPolicy:
    """Test the default policy."""

    def test_all_passing(self):
        """Test a report with only passing records is valid."""
        policy = DefaultValidityPolicy()
        result = policy.judge(report(record(), record(AssertionKind.REPORT, outcome=False)))
        assert result == Verdict.VALID

    def test_failed_assert(self):
        """Test a failed assert is invalid."""
        assert DefaultValidityPolicy().judge(report(record(outcome=False))) == Verdict.INVALID

    def test_fired_report(self):
        """Test a fired report is invalid."""
        assert DefaultValidityPolicy().judge(report(record(AssertionKind.REPORT, outcome=True))) == Verdict.INVALID

    def test_empty_report_valid_by_default(self):
        """Test an empty report is valid by default."""
        assert DefaultValidityPolicy().judge(report()) == Verdict.VALID

    def test_empty_report_can_be_invalid(self):
        """Test empty reports can be configured invalid."""
        assert DefaultValidityPolicy(empty_report_valid=False).judge(report()) == Verdict.INVALID


class TestRoleValidityPolicy:
    """Test the role-based policy."""

    def test_warning_failures_ignored(self):
        """Test failures with a non-invalidating role are ignored."""
        policy = RoleValidityPolicy(invalidating_roles=["error"])
        result = policy.judge(report(record(outcome=False, role="warning")))
        assert result == Verdict.VALID

    def test_error_failures_invalidate(self):
        """Test failures with an invalidating role invalidate."""
        policy = RoleValidityPolicy(invalidating_roles=["error"])
        result = policy.judge(report(record(outcome=False, role="ERROR")))
        assert result == Verdict.INVALID

    def test_missing_role_uses_default(self):
        """Test records without role count as the default role."""
        lenient = RoleValidityPolicy(invalidating_roles=["error"], default_role="info")
        strict = RoleValidityPolicy(invalidating_roles=["error"], default_role="error")
        failing = report(record(outcome=False))

        assert lenient.judge(failing) == Verdict.VALID
        assert strict.judge(failing) == Verdict.INVALID

    def test_passing_error_records_do_not_invalidate(self):
        """Test passing records never invalidate."""
        policy = RoleValidityPolicy()
        assert policy.judge(report(record(outcome=True, role="error"))) == Verdict.VALID


class TestStrictSuccessPolicy:
    """Test the unexpected-success policy."""

    def test_only_reports_fired(self):
        """Test fired reports alone give the unexpected-success verdict."""
        result = StrictSuccessPolicy().judge(report(record(), record(AssertionKind.REPORT, outcome=True)))
        assert result == Verdict.INVALID_DUE_TO_UNEXPECTED_SUCCESS

    def test_failed_assert_wins(self):
        """Test a failed assert gives plain INVALID."""
        result = StrictSuccessPolicy().judge(
            report(record(outcome=False), record(AssertionKind.REPORT, outcome=True))
        )
        assert result == Verdict.INVALID

    def test_valid(self):
        """Test a clean report is valid."""
        assert StrictSuccessPolicy().judge(report(record())) == Verdict.VALID


class TestPolicyAdapters:
    """Test wrapping of callables into policies."""

    def test_callable_policy(self):
        """Test a callable is used as a policy."""
        policy = CallableValidityPolicy(lambda r: Verdict.INVALID, name="always-invalid")
        assert policy.name == "always-invalid"
        assert policy.judge(report()) == Verdict.INVALID

    def test_callable_must_return_verdict(self):
        """Test a callable returning a non-verdict is rejected."""
        policy = CallableValidityPolicy(lambda r: True)
        with pytest.raises(TypeError):
            policy.judge(report())

    def test_as_policy(self):
        """Test policies, callables and None are normalized."""
        default = as_policy(None)
        assert isinstance(default, DefaultValidityPolicy)

        strict = StrictSuccessPolicy()
        assert as_policy(strict) is strict

        wrapped = as_policy(lambda r: Verdict.VALID)
        assert isinstance(wrapped, CallableValidityPolicy)

    def test_as_policy_rejects_other_values(self):
        """Test unsupported policy values are rejected."""
        with pytest.raises(TypeError):
            as_policy(42)

    def test_builtin_policies_satisfy_protocol(self):
        """Test built-in policies implement ValidityPolicy."""
        for policy in (DefaultValidityPolicy(), RoleValidityPolicy(), StrictSuccessPolicy()):
            assert isinstance(policy, ValidityPolicy)


class TestCreatePolicy:
    """Test building policies from configuration."""

    def test_default(self):
        """Test the default policy from config."""
        assert isinstance(create_policy(ValidityConfig()), DefaultValidityPolicy)

    def test_roles(self):
        """Test the role policy from config."""
        policy = create_policy(ValidityConfig(policy="roles", invalidatingRoles=["fatal"], defaultRole="info"))

        assert isinstance(policy, RoleValidityPolicy)
        assert policy.invalidating_roles == frozenset({"fatal"})
        assert policy.default_role == "info"

    def test_strict_with_empty_report_invalid(self):
        """Test the strict policy honours emptyReportValid."""
        policy = create_policy(ValidityConfig(policy="strict", emptyReportValid=False))

        assert isinstance(policy, StrictSuccessPolicy)
        assert policy.judge(report()) == Verdict.INVALID
