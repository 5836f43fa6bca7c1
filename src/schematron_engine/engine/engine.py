"""Engine facade: one validation run from compiled schema to report and verdict."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..config import EngineConfig
from ..diagnostics import DiagnosticSink, LoggingDiagnosticSink
from ..errors import SchemaEvaluationError
from ..models.report import ValidationOutcome, ValidationReport, Verdict
from ..models.schema import ALL_PHASES, Schema
from ..query import LxmlQueryEvaluator, QueryEvaluator
from .cancellation import CancellationToken
from .context import RunContext
from .evaluator import AssertionEvaluator
from .judge import ValidityPolicy, as_policy, create_policy
from .report_builder import ReportBuilder
from .resolver import ContextResolver

logger = logging.getLogger(__name__)

PolicyLike = ValidityPolicy | Callable[[ValidationReport], Verdict]


@dataclass
class RunOptions:
    """Caller-owned configuration of a single run."""
    phase: str = ALL_PHASES
    parameters: Mapping[str, Any] = field(default_factory=dict)
    diagnostic_sink: DiagnosticSink | None = None
    cancellation: CancellationToken | None = None
    timeout: float | None = None
    policy: PolicyLike | None = None
    allow_undeclared_parameters: bool = False

    @classmethod
    def from_config(cls, config: EngineConfig, **overrides: Any) -> "RunOptions":
        """Build options from loaded configuration; keyword overrides win."""
        options = cls(
            phase=config.run.phase,
            parameters=dict(config.run.parameters),
            timeout=config.run.deadline_seconds,
            policy=create_policy(config.validity),
            allow_undeclared_parameters=config.run.allow_undeclared_parameters,
        )
        for name, value in overrides.items():
            if not hasattr(options, name):
                raise TypeError(f"Unknown run option: {name}")
            setattr(options, name, value)
        return options

    def cancellation_tokens(self) -> list[CancellationToken]:
        """Tokens checked during the run; the timeout starts counting now."""
        tokens = []
        if self.cancellation is not None:
            tokens.append(self.cancellation)
        if self.timeout is not None:
            tokens.append(CancellationToken.with_timeout(self.timeout))
        return tokens


class SchematronEngine:
    """Validates documents against compiled schemas.

    The engine keeps no per-run state, so a single instance and a single
    compiled schema can be used from several threads at once.
    """

    def __init__(
        self,
        evaluator: QueryEvaluator | None = None,
        policy: PolicyLike | None = None,
    ):
        self.evaluator = evaluator or LxmlQueryEvaluator()
        self.policy = as_policy(policy)

    def run(self, schema: Schema, document: Any, options: RunOptions | None = None) -> ValidationReport:
        """Evaluate every active rule and return the complete report.

        Raises:
            SchemaEvaluationError: context or variable expression failed
            AssertionEvaluationError: test or placeholder expression failed
            Cancelled: cancellation token fired or deadline passed
        """
        options = options or RunOptions()
        tokens = options.cancellation_tokens()
        for token in tokens:
            token.raise_if_cancelled()

        try:
            patterns = schema.active_patterns(options.phase)
        except KeyError:
            raise SchemaEvaluationError(f"Unknown phase '{options.phase}'") from None

        run = RunContext(
            schema=schema,
            evaluator=self.evaluator,
            root=self.evaluator.document_root(document),
            sink=options.diagnostic_sink or LoggingDiagnosticSink(),
            cancellation=tokens,
        )
        run.bindings = self._bind_globals(run, options)

        logger.debug(f"Starting run: phase={options.phase}, {len(patterns)} active patterns")

        builder = ReportBuilder(schema_title=schema.title, phase=options.phase)
        resolver = ContextResolver(run)
        assertions = AssertionEvaluator(run)
        for match in resolver.resolve(patterns):
            builder.extend(assertions.evaluate(match))

        report = builder.build()
        counters = report.counters()
        logger.info(
            f"Run complete: {counters['records']} records, "
            f"{counters['failed_asserts']} failed asserts, {counters['fired_reports']} fired reports"
        )
        return report

    def judge(self, report: ValidationReport, options: RunOptions | None = None) -> Verdict:
        policy = as_policy(options.policy) if options and options.policy is not None else self.policy
        verdict = policy.judge(report)
        name = getattr(policy, "name", type(policy).__name__)
        logger.debug(f"Policy {name} judged report: {verdict.value}")
        return verdict

    def validate(self, schema: Schema, document: Any, options: RunOptions | None = None) -> ValidationOutcome:
        """Run and judge in one step."""
        report = self.run(schema, document, options)
        return ValidationOutcome(report=report, verdict=self.judge(report, options))

    def is_valid(self, schema: Schema, document: Any, options: RunOptions | None = None) -> bool:
        return self.validate(schema, document, options).is_valid

    def _bind_globals(self, run: RunContext, options: RunOptions) -> dict[str, Any]:
        """Schema globals overridden by caller parameters, then phase variables."""
        schema = run.schema
        declared = {variable.name for variable in schema.variables}
        undeclared = [name for name in options.parameters if name not in declared]
        if undeclared and not options.allow_undeclared_parameters:
            raise SchemaEvaluationError(
                f"Parameters not declared by the schema: {', '.join(sorted(undeclared))}"
            )

        bindings = dict(options.parameters)
        pending = [variable for variable in schema.variables if variable.name not in options.parameters]
        bindings = run.bind_variables(pending, run.root, bindings)

        phase = schema.resolve_phase(options.phase)
        if phase is not None:
            bindings = run.bind_variables(phase.variables, run.root, bindings)
        return bindings


def validate(
    schema: Schema,
    document: Any,
    evaluator: QueryEvaluator | None = None,
    **options: Any,
) -> ValidationOutcome:
    """Validate `document` with a fresh engine; keyword arguments become RunOptions."""
    engine = SchematronEngine(evaluator=evaluator)
    return engine.validate(schema, document, RunOptions(**options))
