"""Schematron rule-evaluation engine.

Pipeline for one run: the context resolver claims document nodes per pattern,
the assertion evaluator runs each claimed rule's assertions, the report
builder freezes the records, and a validity policy derives the verdict.
"""

from .cancellation import CancellationToken
from .context import RunContext
from .engine import RunOptions, SchematronEngine, validate
from .evaluator import AssertionEvaluator
from .judge import (
    CallableValidityPolicy,
    DefaultValidityPolicy,
    RoleValidityPolicy,
    StrictSuccessPolicy,
    ValidityPolicy,
    as_policy,
    create_policy,
)
from .report_builder import ReportBuilder
from .resolver import ContextResolver, MatchedContext

__all__ = [
    "SchematronEngine",
    "RunOptions",
    "validate",
    "CancellationToken",
    "RunContext",
    "ContextResolver",
    "MatchedContext",
    "AssertionEvaluator",
    "ReportBuilder",
    "ValidityPolicy",
    "DefaultValidityPolicy",
    "RoleValidityPolicy",
    "StrictSuccessPolicy",
    "CallableValidityPolicy",
    "as_policy",
    "create_policy",
]
