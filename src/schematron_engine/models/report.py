"""Validation report models produced by a single engine run."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict

from .schema import AssertionKind


class Verdict(str, Enum):
    """Overall judgement derived from a report by a validity policy."""
    VALID = "valid"
    INVALID = "invalid"
    INVALID_DUE_TO_UNEXPECTED_SUCCESS = "invalid_due_to_unexpected_success"

    @property
    def is_valid(self) -> bool:
        return self is Verdict.VALID


class RenderedDiagnostic(BaseModel):
    """Diagnostic text rendered at the matched node."""
    id: str
    text: str

    model_config = ConfigDict(frozen=True)


class FiringRecord(BaseModel):
    """Outcome of one assertion evaluated at one matched node."""
    location: str
    pattern_id: str
    rule_id: str
    rule_context: str
    kind: AssertionKind
    test: str
    outcome: bool
    message: str = ""
    assertion_id: str | None = None
    role: str | None = None
    flag: str | None = None
    diagnostics: tuple[RenderedDiagnostic, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def passed(self) -> bool:
        """PASS for an assert whose test held, or a report that did not fire."""
        if self.kind is AssertionKind.REPORT:
            return not self.outcome
        return self.outcome

    @property
    def failed(self) -> bool:
        return not self.passed

    def __str__(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        text = f"[{status}] {self.pattern_id}/{self.rule_id} {self.kind.value} '{self.test}' at {self.location}"
        if self.message:
            text += f": {self.message}"
        return text


class ValidationReport(BaseModel):
    """Ordered, immutable collection of firing records for one run."""
    records: tuple[FiringRecord, ...] = ()
    schema_title: str | None = None
    phase: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_empty(self) -> bool:
        return not self.records

    def failures(self) -> list[FiringRecord]:
        """Records that count against validity under the default reading."""
        return [record for record in self.records if record.failed]

    def failed_asserts(self) -> list[FiringRecord]:
        return [
            record for record in self.records
            if record.kind is AssertionKind.ASSERT and not record.outcome
        ]

    def fired_reports(self) -> list[FiringRecord]:
        return [
            record for record in self.records
            if record.kind is AssertionKind.REPORT and record.outcome
        ]

    def records_for_pattern(self, pattern_id: str) -> list[FiringRecord]:
        return [record for record in self.records if record.pattern_id == pattern_id]

    def counters(self) -> dict[str, int]:
        """Summary counters in the style of a validation result."""
        return {
            "records": len(self.records),
            "failed_asserts": len(self.failed_asserts()),
            "fired_reports": len(self.fired_reports()),
            "patterns": len({record.pattern_id for record in self.records}),
        }


@dataclass(frozen=True)
class ValidationOutcome:
    """Report plus the verdict derived from it."""
    report: ValidationReport
    verdict: Verdict

    @property
    def is_valid(self) -> bool:
        return self.verdict.is_valid
