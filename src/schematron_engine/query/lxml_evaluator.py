"""XPath 1.0 query evaluator backed by lxml."""

import logging
import re
from collections.abc import Callable, Mapping
from typing import Any

from lxml import etree

from ..errors import InvalidExpression, QueryError, UnboundVariable
from .base import QueryEvaluator, QueryResult

logger = logging.getLogger(__name__)

_TOKEN = re.compile(
    r"""
      (?P<space>\s+)
    | (?P<literal>"[^"]*"|'[^']*')
    | (?P<number>\d+(?:\.\d*)?|\.\d+)
    | (?P<dots>\.\.|\.)
    | (?P<variable>\$(?:[^\W\d][\w.\-]*:)?[^\W\d][\w.\-]*)
    | (?P<operator>//|/|::|!=|<=|>=|[=<>|+\-*@,()\[\]])
    | (?P<name>(?:[^\W\d][\w.\-]*:)?(?:\*|[^\W\d][\w.\-]*))
    | (?P<other>.)
    """,
    re.VERBOSE,
)

_NODE_TYPES = frozenset({"comment", "text", "processing-instruction", "node"})
_OPERATOR_NAMES = frozenset({"and", "or", "mod", "div"})
# tokens after which the next token starts a new operand
_OPENERS = frozenset({"(", "[", ",", "@", "::", "/", "//", "|", "+", "-", "=", "!=", "<", "<=", ">", ">="})
# tokens after which a name is the next step of the same path
_PATH_CONTINUATIONS = frozenset({"/", "//", "::", "@"})


def anchor_relative_paths(expression: str) -> str:
    """Prefix the relative location paths of `expression` with `/`.

    lxml evaluates an expression on an element tree with the root element as
    the context node. Anchoring every relative path outside predicates makes
    the expression behave as if the document node were the context node.
    Predicates keep their own context and are left untouched.

    Examples:
        items                 -> /items
        count(item) > 0       -> count(/item) > 0
        //item[price > 0]     -> //item[price > 0]
    """
    tokens = [
        (match.lastgroup, match.group(), match.start())
        for match in _TOKEN.finditer(expression)
        if match.lastgroup != "space"
    ]

    anchors = []
    brackets: list[str] = []
    expects_operand = True
    previous = None
    for position, (kind, text, start) in enumerate(tokens):
        following = tokens[position + 1][1] if position + 1 < len(tokens) else None
        is_operator = not expects_operand and (
            text == "*" or (kind == "name" and text in _OPERATOR_NAMES)
        )
        if (
            expects_operand
            and previous not in _PATH_CONTINUATIONS
            and "[" not in brackets
            and _starts_step(kind, text, following)
        ):
            anchors.append(start)

        if text in ("(", "["):
            brackets.append(text)
        elif text in (")", "]") and brackets:
            brackets.pop()
        expects_operand = is_operator or (kind == "operator" and text in _OPENERS)
        previous = text

    if not anchors:
        return expression
    parts = []
    last = 0
    for start in anchors:
        parts.append(expression[last:start])
        parts.append("/")
        last = start
    parts.append(expression[last:])
    return "".join(parts)


def _starts_step(kind: str, text: str, following: str | None) -> bool:
    if text in ("@", "*") or kind == "dots":
        return True
    if kind != "name":
        return False
    if following == "(":
        # function call unless it is a node type test
        return text in _NODE_TYPES
    return True


class LxmlQueryEvaluator(QueryEvaluator):
    """Evaluates XPath expressions on lxml element trees.

    An `_ElementTree` context stands for the document node: relative paths are
    resolved from it and a selected document node is returned as the tree
    itself. lxml cannot pass the document node into a variable, so it is
    dropped from node-set bindings.

    Stateless between calls, so one instance can serve concurrent runs.
    """

    def __init__(self, smart_strings: bool = True):
        self.smart_strings = smart_strings

    def evaluate(
        self,
        expression: str,
        context: Any,
        bindings: Mapping[str, Any],
        namespaces: Mapping[str, str] | None = None,
    ) -> QueryResult:
        if not isinstance(context, etree._Element | etree._ElementTree):
            raise QueryError(
                f"Unsupported context node type: {type(context).__name__}", expression
            )
        at_document = isinstance(context, etree._ElementTree)
        source = anchor_relative_paths(expression) if at_document else expression
        variables = _xpath_variables(bindings)

        result = self._run(source, expression, context, variables, namespaces)
        if at_document and isinstance(result, list) and context not in result:
            if self._run(f"count(({source})[not(..)]) > 0", expression, context, variables, namespaces):
                result = [context, *result]
        return result

    def _run(
        self,
        source: str,
        expression: str,
        context: Any,
        variables: dict[str, Any],
        namespaces: Mapping[str, str] | None,
    ) -> QueryResult:
        """Compile and evaluate `source`; errors report the caller's `expression`."""
        try:
            compiled = etree.XPath(
                source,
                namespaces=dict(namespaces) if namespaces else None,
                smart_strings=self.smart_strings,
            )
        except etree.XPathSyntaxError as e:
            raise InvalidExpression(f"Malformed expression: {e}", expression) from e

        try:
            return compiled(context, **variables)
        except etree.XPathEvalError as e:
            message = str(e)
            if "Undefined variable" in message:
                raise UnboundVariable(f"Unbound variable in expression: {message}", expression) from e
            if "namespace prefix" in message:
                raise InvalidExpression(f"Malformed expression: {message}", expression) from e
            raise QueryError(f"Expression evaluation failed: {message}", expression) from e
        except etree.XPathError as e:
            raise QueryError(f"Expression evaluation failed: {e}", expression) from e

    def document_root(self, document: Any) -> etree._ElementTree:
        if isinstance(document, etree._ElementTree):
            return document
        if isinstance(document, etree._Element):
            return document.getroottree()
        raise TypeError(f"Expected an lxml element or tree, got {type(document).__name__}")

    def is_context_node(self, item: Any) -> bool:
        return isinstance(item, etree._Element | etree._ElementTree)

    def locate(self, node: Any) -> str:
        if isinstance(node, etree._ElementTree):
            return "/"
        if isinstance(node, etree._Element):
            return node.getroottree().getpath(node)
        if isinstance(node, etree._ElementUnicodeResult):
            parent = node.getparent()
            if parent is None:
                return ""
            base = parent.getroottree().getpath(parent)
            if node.is_attribute:
                return f"{base}/@{node.attrname}"
            if node.is_tail:
                return f"{base}/following-sibling::text()[1]"
            return f"{base}/text()"
        return repr(node)

    def string_value(self, node: Any) -> str:
        if isinstance(node, etree._Element | etree._ElementTree):
            return str(node.xpath("string()"))
        return str(node)

    def document_order(self, document: Any) -> Callable[[Any], Any]:
        tree = self.document_root(document)
        index: dict[Any, int] = {}
        for position, element in enumerate(tree.iter()):
            index[element] = position
        logger.debug(f"Indexed {len(index)} nodes for document order")

        def key(node: Any) -> int:
            if isinstance(node, etree._ElementTree):
                return -1
            return index.get(node, len(index))

        return key


def _xpath_variables(bindings: Mapping[str, Any]) -> dict[str, Any]:
    variables = {}
    for name, value in bindings.items():
        if isinstance(value, list):
            value = [item for item in value if not isinstance(item, etree._ElementTree)]
        variables[name] = value
    return variables
