"""Pydantic data models for compiled schemas and validation reports."""

from schematron_engine.models.report import (
    FiringRecord,
    RenderedDiagnostic,
    ValidationOutcome,
    ValidationReport,
    Verdict,
)
from schematron_engine.models.schema import (
    ALL_PHASES,
    DEFAULT_PHASE,
    Assertion,
    AssertionKind,
    Diagnostic,
    Pattern,
    Phase,
    Rule,
    Schema,
    Variable,
)

__all__ = [
    "ALL_PHASES",
    "DEFAULT_PHASE",
    "Assertion",
    "AssertionKind",
    "Diagnostic",
    "Pattern",
    "Phase",
    "Rule",
    "Schema",
    "Variable",
    "FiringRecord",
    "RenderedDiagnostic",
    "ValidationReport",
    "ValidationOutcome",
    "Verdict",
]
