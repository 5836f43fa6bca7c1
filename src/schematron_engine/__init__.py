"""schematron-engine - Schematron rule evaluation for XML documents.

Evaluates a compiled Schematron schema (patterns, rules, assertions, phases)
against a parsed document and produces an ordered report of firing records
plus a verdict from a pluggable validity policy.
"""

__version__ = "0.1.0"
__author__ = "schematron-engine contributors"
__description__ = "Schematron rule evaluation engine for XML documents"

from schematron_engine.config import EngineConfig, load_config
from schematron_engine.engine import (
    CancellationToken,
    DefaultValidityPolicy,
    RoleValidityPolicy,
    RunOptions,
    SchematronEngine,
    StrictSuccessPolicy,
    validate,
)
from schematron_engine.errors import (
    AssertionEvaluationError,
    Cancelled,
    SchemaCompilationError,
    SchemaEvaluationError,
    SchematronError,
)
from schematron_engine.models import (
    ALL_PHASES,
    Assertion,
    AssertionKind,
    FiringRecord,
    Pattern,
    Phase,
    Rule,
    Schema,
    ValidationOutcome,
    ValidationReport,
    Variable,
    Verdict,
)

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    "EngineConfig",
    "load_config",
    "SchematronEngine",
    "RunOptions",
    "validate",
    "CancellationToken",
    "DefaultValidityPolicy",
    "RoleValidityPolicy",
    "StrictSuccessPolicy",
    "SchematronError",
    "SchemaCompilationError",
    "SchemaEvaluationError",
    "AssertionEvaluationError",
    "Cancelled",
    "ALL_PHASES",
    "Assertion",
    "AssertionKind",
    "FiringRecord",
    "Pattern",
    "Phase",
    "Rule",
    "Schema",
    "ValidationOutcome",
    "ValidationReport",
    "Variable",
    "Verdict",
]
