"""Error taxonomy for schematron-engine.

Evaluation errors are run-fatal: a run either returns a complete report or
raises one of these. They are never converted into failing assertions.
"""


class SchematronError(Exception):
    """Base class for all engine errors."""


class SchemaCompilationError(SchematronError):
    """The compiled schema is structurally invalid."""


class QueryError(SchematronError):
    """The query-evaluation collaborator could not evaluate an expression."""

    def __init__(self, message: str, expression: str | None = None):
        super().__init__(message)
        self.expression = expression


class InvalidExpression(QueryError):
    """Expression is syntactically malformed."""


class UnboundVariable(QueryError):
    """Expression references a variable that is not in scope."""


class SchemaEvaluationError(SchematronError):
    """A context or variable expression could not be evaluated."""

    def __init__(
        self,
        message: str,
        pattern_id: str | None = None,
        rule_id: str | None = None,
        expression: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.pattern_id = pattern_id
        self.rule_id = rule_id
        self.expression = expression

    def __str__(self) -> str:
        location = []
        if self.pattern_id:
            location.append(f"pattern={self.pattern_id}")
        if self.rule_id:
            location.append(f"rule={self.rule_id}")
        if self.expression is not None:
            location.append(f"expression={self.expression!r}")
        if not location:
            return self.message
        return f"{self.message} ({', '.join(location)})"


class AssertionEvaluationError(SchemaEvaluationError):
    """An assertion test or placeholder expression could not be evaluated."""

    def __init__(
        self,
        message: str,
        pattern_id: str | None = None,
        rule_id: str | None = None,
        expression: str | None = None,
        assertion_id: str | None = None,
    ):
        super().__init__(message, pattern_id, rule_id, expression)
        self.assertion_id = assertion_id

    def __str__(self) -> str:
        text = super().__str__()
        if self.assertion_id:
            return f"{text} [assertion={self.assertion_id}]"
        return text


class Cancelled(SchematronError):
    """The run was aborted by its cancellation token or deadline."""
