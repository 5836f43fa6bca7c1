"""Compiled rule model: schema, phases, patterns, rules and assertions.

Instances are produced by a schema loader and are treated as read-only by the
engine, so one compiled schema can be shared across concurrent runs.
"""

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from ..errors import SchemaCompilationError

# phase selectors; "ALL PHASES" is accepted as a spelling of #ALL
ALL_PHASES = "#ALL"
ALL_PHASES_ALIASES = frozenset({ALL_PHASES, "ALL PHASES"})
DEFAULT_PHASE = "#DEFAULT"


class AssertionKind(str, Enum):
    """Polarity of an assertion."""
    ASSERT = "assert"  # must hold
    REPORT = "report"  # fires when the test holds


class Variable(BaseModel):
    """A named expression (`let` binding or message placeholder)."""
    name: str
    expression: str

    model_config = ConfigDict(frozen=True)


class Assertion(BaseModel):
    """Single `assert` or `report` test with its message template."""
    kind: AssertionKind = AssertionKind.ASSERT
    test: str
    message: str = ""
    placeholders: tuple[Variable, ...] = ()
    role: str | None = None
    id: str | None = None
    flag: str | None = None
    diagnostics: tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)

    def placeholder_expression(self, name: str) -> str | None:
        for placeholder in self.placeholders:
            if placeholder.name == name:
                return placeholder.expression
        return None


class Rule(BaseModel):
    """Context expression plus the assertions run on each matched node.

    Abstract rules are kept only for traceability; extension is flattened by
    the loader before the engine sees the schema.
    """
    context: str
    assertions: tuple[Assertion, ...] = ()
    variables: tuple[Variable, ...] = ()
    id: str | None = None
    abstract: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def label(self) -> str:
        """Identifier used in records and errors."""
        return self.id or self.context


class Pattern(BaseModel):
    """Named group of rules with its own first-match scope."""
    id: str
    title: str | None = None
    rules: tuple[Rule, ...] = ()
    variables: tuple[Variable, ...] = ()

    model_config = ConfigDict(frozen=True)

    def concrete_rules(self) -> list[Rule]:
        """Rules that can match nodes, in declaration order."""
        return [rule for rule in self.rules if not rule.abstract]


class Phase(BaseModel):
    """Named subset of patterns active for a run."""
    id: str
    active: frozenset[str] = frozenset()
    variables: tuple[Variable, ...] = ()

    model_config = ConfigDict(frozen=True)


class Diagnostic(BaseModel):
    """Reusable diagnostic text referenced from assertions by id."""
    id: str
    message: str = ""
    placeholders: tuple[Variable, ...] = ()

    model_config = ConfigDict(frozen=True)


class Schema(BaseModel):
    """Complete compiled schema."""
    title: str | None = None
    patterns: tuple[Pattern, ...] = ()
    phases: tuple[Phase, ...] = ()
    variables: tuple[Variable, ...] = ()
    namespaces: Mapping[str, str] = Field(default_factory=dict, validate_default=True)
    default_phase: str | None = Field(alias="defaultPhase", default=None)
    diagnostics: tuple[Diagnostic, ...] = ()

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("namespaces")
    @classmethod
    def freeze_namespaces(cls, v):
        return MappingProxyType(dict(v))

    @field_serializer("namespaces")
    def serialize_namespaces(self, v):
        return dict(v)

    @model_validator(mode="after")
    def check_structure(self) -> "Schema":
        pattern_ids = [pattern.id for pattern in self.patterns]
        duplicates = sorted({pid for pid in pattern_ids if pattern_ids.count(pid) > 1})
        if duplicates:
            raise SchemaCompilationError(f"Duplicate pattern ids: {', '.join(duplicates)}")

        phase_ids = [phase.id for phase in self.phases]
        if len(phase_ids) != len(set(phase_ids)):
            raise SchemaCompilationError("Duplicate phase ids")

        known = set(pattern_ids)
        for phase in self.phases:
            unknown = sorted(phase.active - known)
            if unknown:
                raise SchemaCompilationError(
                    f"Phase '{phase.id}' references unknown patterns: {', '.join(unknown)}"
                )

        if (
            self.default_phase
            and self.default_phase not in ALL_PHASES_ALIASES
            and self.default_phase not in phase_ids
        ):
            raise SchemaCompilationError(f"Default phase '{self.default_phase}' is not declared")

        diagnostic_ids = [diagnostic.id for diagnostic in self.diagnostics]
        if len(diagnostic_ids) != len(set(diagnostic_ids)):
            raise SchemaCompilationError("Duplicate diagnostic ids")

        return self

    def get_phase(self, phase_id: str) -> Phase | None:
        for phase in self.phases:
            if phase.id == phase_id:
                return phase
        return None

    def get_diagnostic(self, diagnostic_id: str) -> Diagnostic | None:
        for diagnostic in self.diagnostics:
            if diagnostic.id == diagnostic_id:
                return diagnostic
        return None

    def resolve_phase(self, phase: str | None) -> Phase | None:
        """Map a phase selector to a declared phase.

        Returns None when every pattern is active. Raises KeyError for an
        undeclared phase id.
        """
        if phase is None or phase in ALL_PHASES_ALIASES:
            return None
        if phase == DEFAULT_PHASE:
            if not self.default_phase or self.default_phase in ALL_PHASES_ALIASES:
                return None
            phase = self.default_phase
        found = self.get_phase(phase)
        if found is None:
            raise KeyError(phase)
        return found

    def active_patterns(self, phase: str | None = ALL_PHASES) -> list[Pattern]:
        """Patterns active under `phase`, in declaration order."""
        selected = self.resolve_phase(phase)
        if selected is None:
            return list(self.patterns)
        return [pattern for pattern in self.patterns if pattern.id in selected.active]
