"""Run-scoped collection of non-fatal diagnostics.

The engine reports recoverable problems (unbound message placeholders, unknown
diagnostic references, non-node context items) through a diagnostic sink. A
sink is any callable taking a `DiagnosticWarning`.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class DiagnosticSeverity(str, Enum):
    """Severity levels for non-fatal diagnostics."""
    WARNING = "warning"  # Evaluation continued with degraded output
    INFO = "info"        # Notable event, output unaffected


@dataclass
class DiagnosticContext:
    """Where in the schema and document a diagnostic was raised."""
    operation: str                       # e.g. "render_message"
    pattern_id: str | None = None
    rule_id: str | None = None
    assertion_id: str | None = None
    location: str | None = None          # Matched node path
    expression: str | None = None
    additional_context: dict[str, Any] | None = None


@dataclass
class DiagnosticWarning:
    """A single recoverable problem observed during a run."""
    code: str                            # e.g. "unbound-placeholder"
    message: str
    context: DiagnosticContext
    severity: DiagnosticSeverity = DiagnosticSeverity.WARNING
    diagnostic_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    def __str__(self) -> str:
        where = []
        if self.context.pattern_id:
            where.append(self.context.pattern_id)
        if self.context.rule_id:
            where.append(self.context.rule_id)
        location = f" [{'/'.join(where)}]" if where else ""
        if self.context.location:
            location += f" at {self.context.location}"
        return f"[{self.severity.value.upper()}] {self.code}: {self.message}{location}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "diagnostic_id": self.diagnostic_id,
            "timestamp": self.timestamp,
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "context": asdict(self.context),
        }


DiagnosticSink = Callable[[DiagnosticWarning], None]


class LoggingDiagnosticSink:
    """Forward diagnostics to the standard logging system."""

    def __init__(self, target: logging.Logger | None = None):
        self.target = target or logger

    def __call__(self, warning: DiagnosticWarning) -> None:
        level = logging.WARNING if warning.severity == DiagnosticSeverity.WARNING else logging.INFO
        self.target.log(level, str(warning), extra={"diagnostic_code": warning.code})


class DiagnosticCollector:
    """Collects diagnostics emitted during a single run."""

    def __init__(self, forward_to: DiagnosticSink | None = None):
        """Initialize collector.

        Args:
            forward_to: Optional sink that also receives every diagnostic
        """
        self.forward_to = forward_to
        self.warnings: list[DiagnosticWarning] = []

    def __call__(self, warning: DiagnosticWarning) -> None:
        self.warnings.append(warning)
        if self.forward_to is not None:
            self.forward_to(warning)

    def has_warnings(self) -> bool:
        """Check if any warning-level diagnostics were collected."""
        return any(w.severity == DiagnosticSeverity.WARNING for w in self.warnings)

    def by_code(self, code: str) -> list[DiagnosticWarning]:
        return [w for w in self.warnings if w.code == code]

    def get_counts(self) -> dict[str, int]:
        """Get diagnostic counts by severity."""
        counts = {severity.value: 0 for severity in DiagnosticSeverity}
        for warning in self.warnings:
            counts[warning.severity.value] += 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": len(self.warnings),
            "by_severity": self.get_counts(),
            "diagnostics": [w.to_dict() for w in self.warnings],
        }
