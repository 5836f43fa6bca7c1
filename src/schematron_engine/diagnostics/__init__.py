"""Non-fatal diagnostics emitted during validation runs."""

from .collector import (
    DiagnosticCollector,
    DiagnosticContext,
    DiagnosticSeverity,
    DiagnosticSink,
    DiagnosticWarning,
    LoggingDiagnosticSink,
)

__all__ = [
    "DiagnosticCollector",
    "DiagnosticContext",
    "DiagnosticSeverity",
    "DiagnosticSink",
    "DiagnosticWarning",
    "LoggingDiagnosticSink",
]
