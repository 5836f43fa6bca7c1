"""Resolution of rule contexts to matched document nodes.

Inside a pattern every node is claimed by the first rule (in declaration
order) whose context selects it. Patterns do not share match marks, so one
node may fire under several patterns. Matches of all active patterns are
yielded in document order; a node matched by several patterns is yielded
once per pattern, in pattern declaration order.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from ..diagnostics import DiagnosticContext
from ..errors import QueryError, SchemaEvaluationError
from ..models.schema import Pattern, Rule
from .context import RunContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchedContext:
    """A node claimed by a rule within one pattern."""
    pattern: Pattern
    rule: Rule
    node: Any
    location: str
    bindings: Mapping[str, Any]


class ContextResolver:
    """Turns active patterns into a lazy stream of matched contexts."""

    def __init__(self, run: RunContext):
        self.run = run

    def resolve(self, patterns: Iterable[Pattern]) -> Iterator[MatchedContext]:
        order_key = self.run.evaluator.document_order(self.run.root)
        claimed: list[tuple[Any, Pattern, Rule, Mapping[str, Any]]] = []

        for pattern in patterns:
            self.run.check_cancelled()
            scope = self.run.bind_variables(
                pattern.variables, self.run.root, self.run.bindings, pattern_id=pattern.id
            )
            matches = self._claim_nodes(pattern, scope)
            logger.debug(f"Pattern {pattern.id}: {len(matches)} matched nodes")
            claimed.extend((node, pattern, rule, scope) for node, rule in matches)

        # stable sort: equal nodes stay in pattern order
        claimed.sort(key=lambda item: order_key(item[0]))

        for node, pattern, rule, scope in claimed:
            self.run.check_cancelled()
            yield MatchedContext(
                pattern=pattern,
                rule=rule,
                node=node,
                location=self.run.evaluator.locate(node),
                bindings=scope,
            )

    def _claim_nodes(self, pattern: Pattern, scope: Mapping[str, Any]) -> list[tuple[Any, Rule]]:
        """First-match claim of nodes by rules, in rule declaration order."""
        claimed: list[tuple[Any, Rule]] = []
        seen: set[Any] = set()

        for rule in pattern.concrete_rules():
            for item in self._select(pattern, rule, scope):
                if not self.run.evaluator.is_context_node(item):
                    self.run.warn(
                        "non-node-context",
                        f"Context selected a non-element item ({type(item).__name__}); skipped",
                        DiagnosticContext(
                            operation="resolve_context",
                            pattern_id=pattern.id,
                            rule_id=rule.label,
                            location=self.run.evaluator.locate(item),
                            expression=rule.context,
                        ),
                    )
                    continue
                if item in seen:
                    continue
                seen.add(item)
                claimed.append((item, rule))

        return claimed

    def _select(self, pattern: Pattern, rule: Rule, scope: Mapping[str, Any]) -> list[Any]:
        try:
            result = self.run.query(rule.context, self.run.root, scope)
        except QueryError as e:
            raise SchemaEvaluationError(
                f"Cannot evaluate rule context: {e}",
                pattern_id=pattern.id,
                rule_id=rule.label,
                expression=rule.context,
            ) from e

        if not isinstance(result, list | tuple):
            raise SchemaEvaluationError(
                f"Rule context must select nodes, got {type(result).__name__}",
                pattern_id=pattern.id,
                rule_id=rule.label,
                expression=rule.context,
            )
        return list(result)
