"""Interface of the query-evaluation collaborator.

The engine never interprets expressions itself. It hands expression strings,
a context node and the variable bindings in scope to a `QueryEvaluator`, and
converts the results with XPath 1.0 boolean/string semantics.
"""

import math
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any

# Result of an expression: a node-set (list) or a scalar (str, float, bool)
QueryResult = Any


class QueryEvaluator(ABC):
    """Evaluates path/query expressions against document nodes."""

    @abstractmethod
    def evaluate(
        self,
        expression: str,
        context: Any,
        bindings: Mapping[str, Any],
        namespaces: Mapping[str, str] | None = None,
    ) -> QueryResult:
        """Evaluate `expression` with `context` as the context node.

        Raises:
            InvalidExpression: expression is malformed
            UnboundVariable: expression references a name not in `bindings`
            QueryError: any other evaluation failure
        """

    @abstractmethod
    def document_root(self, document: Any) -> Any:
        """Return the node context expressions are evaluated against."""

    @abstractmethod
    def is_context_node(self, item: Any) -> bool:
        """Whether `item` can serve as the context node of a rule."""

    @abstractmethod
    def locate(self, node: Any) -> str:
        """Stable, human-readable path of `node` within its document."""

    @abstractmethod
    def string_value(self, node: Any) -> str:
        """XPath string-value of a single node."""

    def document_order(self, document: Any) -> Callable[[Any], Any]:
        """Sort key placing nodes of `document` in document order.

        The default keeps the evaluator's own ordering (stable sort).
        """
        return lambda node: 0

    def to_boolean(self, value: QueryResult) -> bool:
        """XPath 1.0 boolean() conversion."""
        if isinstance(value, bool):
            return value
        if isinstance(value, int | float):
            return not (value == 0 or math.isnan(value))
        if isinstance(value, str):
            return len(value) > 0
        if isinstance(value, list | tuple):
            return len(value) > 0
        return value is not None

    def to_string(self, value: QueryResult) -> str:
        """XPath 1.0 string() conversion."""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, int | float):
            return format_number(float(value))
        if isinstance(value, str):
            return str(value)
        if isinstance(value, list | tuple):
            if not value:
                return ""
            return self.string_value(value[0])
        if value is None:
            return ""
        return self.string_value(value)


def format_number(value: float) -> str:
    """Render a number the way XPath 1.0 string() does."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == int(value):
        return str(int(value))
    text = repr(value)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    return text
