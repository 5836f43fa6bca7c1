"""Per-run evaluation state shared by the resolver and the assertion evaluator."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..diagnostics import DiagnosticContext, DiagnosticSink, DiagnosticWarning
from ..errors import QueryError, SchemaEvaluationError
from ..models.schema import Schema, Variable
from ..query import QueryEvaluator
from .cancellation import CancellationToken

logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    """Everything one run needs; created fresh per run and never shared."""
    schema: Schema
    evaluator: QueryEvaluator
    root: Any
    sink: DiagnosticSink
    bindings: dict[str, Any] = field(default_factory=dict)
    cancellation: list[CancellationToken] = field(default_factory=list)

    @property
    def namespaces(self) -> Mapping[str, str]:
        return self.schema.namespaces

    def check_cancelled(self) -> None:
        for token in self.cancellation:
            token.raise_if_cancelled()

    def warn(self, code: str, message: str, context: DiagnosticContext) -> None:
        self.sink(DiagnosticWarning(code=code, message=message, context=context))

    def query(self, expression: str, node: Any, bindings: Mapping[str, Any]) -> Any:
        """Evaluate with the schema namespaces; collaborator errors propagate."""
        return self.evaluator.evaluate(expression, node, bindings, self.namespaces)

    def bind_variables(
        self,
        variables: Iterable[Variable],
        node: Any,
        scope: Mapping[str, Any],
        pattern_id: str | None = None,
        rule_id: str | None = None,
    ) -> dict[str, Any]:
        """Evaluate `let` bindings in order, each seeing the ones before it.

        Returns a new scope; `scope` is not modified.
        """
        bound = dict(scope)
        for variable in variables:
            try:
                bound[variable.name] = self.query(variable.expression, node, bound)
            except QueryError as e:
                raise SchemaEvaluationError(
                    f"Cannot evaluate variable '{variable.name}': {e}",
                    pattern_id=pattern_id,
                    rule_id=rule_id,
                    expression=variable.expression,
                ) from e
        return bound
