"""Validity policies reducing a finished report to a verdict.

A policy is anything with a `name` and a `judge(report) -> Verdict` method.
Callers pick one per run; there is no process-wide default instance.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Protocol, runtime_checkable

from ..config import ValidityConfig, ValidityPolicyName
from ..models.report import FiringRecord, ValidationReport, Verdict

logger = logging.getLogger(__name__)


@runtime_checkable
class ValidityPolicy(Protocol):
    """Pluggable verdict strategy."""

    name: str

    def judge(self, report: ValidationReport) -> Verdict:
        ...


class DefaultValidityPolicy:
    """VALID iff every assert held and no report fired.

    An empty report (no rule matched anything) is VALID unless
    `empty_report_valid` is False.
    """

    name = "default"

    def __init__(self, empty_report_valid: bool = True):
        self.empty_report_valid = empty_report_valid

    def judge(self, report: ValidationReport) -> Verdict:
        if report.is_empty:
            return Verdict.VALID if self.empty_report_valid else Verdict.INVALID
        if any(record.failed for record in report.records):
            return Verdict.INVALID
        return Verdict.VALID


class RoleValidityPolicy:
    """Only failures whose role is in `invalidating_roles` make a document invalid.

    Roles are compared case-insensitively. Records without a role are treated
    as `default_role`.
    """

    name = "roles"

    def __init__(
        self,
        invalidating_roles: Iterable[str] = ("error", "fatal"),
        default_role: str = "error",
        empty_report_valid: bool = True,
    ):
        self.invalidating_roles = frozenset(role.lower() for role in invalidating_roles)
        self.default_role = default_role.lower()
        self.empty_report_valid = empty_report_valid

    def is_invalidating(self, record: FiringRecord) -> bool:
        role = (record.role or self.default_role).lower()
        return record.failed and role in self.invalidating_roles

    def judge(self, report: ValidationReport) -> Verdict:
        if report.is_empty:
            return Verdict.VALID if self.empty_report_valid else Verdict.INVALID
        if any(self.is_invalidating(record) for record in report.records):
            return Verdict.INVALID
        return Verdict.VALID


class StrictSuccessPolicy:
    """Separates failed asserts from fired reports.

    INVALID when any assert failed, INVALID_DUE_TO_UNEXPECTED_SUCCESS when the
    only failures are reports that fired.
    """

    name = "strict"

    def __init__(self, empty_report_valid: bool = True):
        self.empty_report_valid = empty_report_valid

    def judge(self, report: ValidationReport) -> Verdict:
        if report.is_empty:
            return Verdict.VALID if self.empty_report_valid else Verdict.INVALID
        if report.failed_asserts():
            return Verdict.INVALID
        if report.fired_reports():
            return Verdict.INVALID_DUE_TO_UNEXPECTED_SUCCESS
        return Verdict.VALID


class CallableValidityPolicy:
    """Adapts a plain function to the policy interface."""

    def __init__(self, func: Callable[[ValidationReport], Verdict], name: str | None = None):
        self.func = func
        self.name = name or getattr(func, "__name__", "callable")

    def judge(self, report: ValidationReport) -> Verdict:
        verdict = self.func(report)
        if not isinstance(verdict, Verdict):
            raise TypeError(f"Policy '{self.name}' returned {type(verdict).__name__}, expected Verdict")
        return verdict


def create_policy(config: ValidityConfig) -> ValidityPolicy:
    """Build the policy selected by configuration."""
    policy = ValidityPolicyName(config.policy)
    if policy == ValidityPolicyName.ROLES:
        return RoleValidityPolicy(
            invalidating_roles=config.invalidating_roles,
            default_role=config.default_role,
            empty_report_valid=config.empty_report_valid,
        )
    if policy == ValidityPolicyName.STRICT:
        return StrictSuccessPolicy(empty_report_valid=config.empty_report_valid)
    return DefaultValidityPolicy(empty_report_valid=config.empty_report_valid)


def as_policy(policy: ValidityPolicy | Callable[[ValidationReport], Verdict] | None) -> ValidityPolicy:
    """Accept a policy object, a bare function or None (default policy)."""
    if policy is None:
        return DefaultValidityPolicy()
    if hasattr(policy, "judge"):
        return policy  # type: ignore[return-value]
    if callable(policy):
        return CallableValidityPolicy(policy)
    raise TypeError(f"Not a validity policy: {policy!r}")
