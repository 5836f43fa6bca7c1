"""Evaluation of a rule's assertions at a matched node."""

import logging
import re
from collections.abc import Iterator, Mapping
from typing import Any

from ..diagnostics import DiagnosticContext
from ..errors import AssertionEvaluationError, QueryError
from ..models.report import FiringRecord, RenderedDiagnostic
from ..models.schema import Assertion, Variable
from .context import RunContext
from .resolver import MatchedContext

logger = logging.getLogger(__name__)

# {name} is a placeholder, {{ and }} are literal braces
PLACEHOLDER_PATTERN = re.compile(r"\{\{|\}\}|\{([A-Za-z_][\w.\-]*)\}")


class AssertionEvaluator:
    """Runs assertions in declaration order and renders their messages."""

    def __init__(self, run: RunContext):
        self.run = run

    def evaluate(self, match: MatchedContext) -> Iterator[FiringRecord]:
        rule = match.rule
        bindings = self.run.bind_variables(
            rule.variables,
            match.node,
            match.bindings,
            pattern_id=match.pattern.id,
            rule_id=rule.label,
        )

        for assertion in rule.assertions:
            outcome = self.run.evaluator.to_boolean(
                self._query(match, assertion, assertion.test, bindings)
            )
            message = self.render(match, assertion, assertion.message, assertion.placeholders, bindings)
            diagnostics = tuple(self._render_diagnostics(match, assertion, bindings))

            yield FiringRecord(
                location=match.location,
                pattern_id=match.pattern.id,
                rule_id=rule.label,
                rule_context=rule.context,
                kind=assertion.kind,
                test=assertion.test,
                outcome=outcome,
                message=message,
                assertion_id=assertion.id,
                role=assertion.role,
                flag=assertion.flag,
                diagnostics=diagnostics,
            )

    def render(
        self,
        match: MatchedContext,
        assertion: Assertion,
        template: str,
        placeholders: tuple[Variable, ...],
        bindings: Mapping[str, Any],
    ) -> str:
        """Substitute `{name}` placeholders with string values at the node.

        An unbound placeholder is left as literal text and reported to the
        diagnostic sink.
        """
        expressions = {placeholder.name: placeholder.expression for placeholder in placeholders}

        def substitute(found: re.Match) -> str:
            token = found.group(0)
            if token == "{{":
                return "{"
            if token == "}}":
                return "}"
            name = found.group(1)
            expression = expressions.get(name)
            if expression is None:
                self.run.warn(
                    "unbound-placeholder",
                    f"No binding for message placeholder '{name}'",
                    DiagnosticContext(
                        operation="render_message",
                        pattern_id=match.pattern.id,
                        rule_id=match.rule.label,
                        assertion_id=assertion.id,
                        location=match.location,
                    ),
                )
                return token
            value = self._query(match, assertion, expression, bindings)
            return self.run.evaluator.to_string(value)

        return PLACEHOLDER_PATTERN.sub(substitute, template)

    def _render_diagnostics(
        self, match: MatchedContext, assertion: Assertion, bindings: Mapping[str, Any]
    ) -> Iterator[RenderedDiagnostic]:
        for diagnostic_id in assertion.diagnostics:
            diagnostic = self.run.schema.get_diagnostic(diagnostic_id)
            if diagnostic is None:
                self.run.warn(
                    "unknown-diagnostic",
                    f"Assertion references undeclared diagnostic '{diagnostic_id}'",
                    DiagnosticContext(
                        operation="render_diagnostic",
                        pattern_id=match.pattern.id,
                        rule_id=match.rule.label,
                        assertion_id=assertion.id,
                        location=match.location,
                    ),
                )
                continue
            text = self.render(match, assertion, diagnostic.message, diagnostic.placeholders, bindings)
            yield RenderedDiagnostic(id=diagnostic.id, text=text)

    def _query(
        self, match: MatchedContext, assertion: Assertion, expression: str, bindings: Mapping[str, Any]
    ) -> Any:
        try:
            return self.run.query(expression, match.node, bindings)
        except QueryError as e:
            raise AssertionEvaluationError(
                f"Cannot evaluate assertion expression at {match.location}: {e}",
                pattern_id=match.pattern.id,
                rule_id=match.rule.label,
                expression=expression,
                assertion_id=assertion.id,
            ) from e
