"""Compiled route models and match results.

Compiled routes are immutable: they are built once when a route table is
assembled and shared read-only by every dispatch afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..exceptions import ConversionError
from .converters import TypeConverter


class RouteKind(str, Enum):
    """Side-effect classification of a route."""

    UNSPECIFIED = "unspecified"
    QUERY = "query"
    COMMAND = "command"
    IDEMPOTENT_COMMAND = "idempotent_command"


@dataclass(frozen=True, slots=True)
class LiteralMatcher:
    """Matches one argument exactly."""

    text: str


@dataclass(frozen=True, slots=True)
class ParameterMatcher:
    """Binds one positional argument."""

    name: str
    converter: TypeConverter | None = None
    is_optional: bool = False
    description: str | None = None

    @property
    def type_name(self) -> str | None:
        return self.converter.name if self.converter else None


@dataclass(frozen=True, slots=True)
class CatchAllMatcher:
    """Binds every remaining positional argument as a list."""

    name: str
    converter: TypeConverter | None = None
    description: str | None = None

    @property
    def type_name(self) -> str | None:
        return self.converter.name if self.converter else None


@dataclass(frozen=True, slots=True)
class EndOfOptionsMatcher:
    """Matches the literal ``--`` separator."""

    text: str = "--"


@dataclass(frozen=True, slots=True)
class OptionMatcher:
    """Recognises an option anywhere in the argument vector.

    ``is_optional`` is the runtime optionality: boolean flags and repeated
    options are always optional, value options only when declared with
    ``?``. ``declared_optional`` records the ``?`` itself and drives
    specificity.
    """

    long_form: str | None
    short_form: str | None
    binding: str
    expects_value: bool = False
    value_is_optional: bool = False
    is_optional: bool = True
    declared_optional: bool = False
    is_repeated: bool = False
    converter: TypeConverter | None = None
    description: str | None = None
    forms: frozenset[str] = field(default=frozenset())

    @property
    def key(self) -> str:
        if self.long_form is not None:
            return f"--{self.long_form}"
        return f"-{self.short_form}"

    @property
    def type_name(self) -> str | None:
        return self.converter.name if self.converter else None

    def matches(self, arg: str) -> bool:
        return arg in self.forms


PositionalMatcher = LiteralMatcher | ParameterMatcher | CatchAllMatcher | EndOfOptionsMatcher
SegmentMatcher = PositionalMatcher | OptionMatcher


class RouteMetadata(BaseModel):
    """Descriptive data carried by a route, never used for matching."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    name: str | None = Field(default=None, description="Host-defined route identifier")
    description: str | None = Field(default=None, description="Human-readable summary")
    aliases: tuple[str, ...] = Field(
        default=(), description="Alternative patterns compiled to equivalent routes"
    )
    kind: RouteKind = Field(
        default=RouteKind.UNSPECIFIED, description="Side-effect classification"
    )

    @field_validator("aliases")
    @classmethod
    def validate_aliases(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Ensure alias patterns are non-empty and unique."""
        cleaned = tuple(alias.strip() for alias in v)
        if any(not alias for alias in cleaned):
            raise ValueError("Alias patterns cannot be empty")
        if len(set(cleaned)) != len(cleaned):
            raise ValueError("Alias patterns must be unique")
        return cleaned


class CompiledRoute(BaseModel):
    """A pattern compiled into matchers with its specificity score."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    pattern: str = Field(min_length=1, description="Source pattern text")
    segments: tuple[SegmentMatcher, ...] = Field(description="Matchers in source order")
    specificity: int = Field(ge=0, description="Ranking score, higher wins")
    metadata: RouteMetadata = Field(default_factory=RouteMetadata)
    alias_routes: tuple["CompiledRoute", ...] = Field(
        default=(), description="Compiled alias patterns"
    )
    alias_of: str | None = Field(
        default=None, description="Primary pattern when this route is an alias"
    )
    order: int = Field(default=0, ge=0, description="Declaration index in its table")

    @property
    def positionals(self) -> tuple[PositionalMatcher, ...]:
        return tuple(s for s in self.segments if not isinstance(s, OptionMatcher))

    @property
    def options(self) -> tuple[OptionMatcher, ...]:
        return tuple(s for s in self.segments if isinstance(s, OptionMatcher))

    @property
    def has_catch_all(self) -> bool:
        return any(isinstance(s, CatchAllMatcher) for s in self.segments)

    @property
    def has_end_of_options(self) -> bool:
        return any(isinstance(s, EndOfOptionsMatcher) for s in self.segments)

    @property
    def bindings(self) -> tuple[str, ...]:
        """Names under which this route binds values, in source order."""
        names: list[str] = []
        for segment in self.segments:
            match segment:
                case ParameterMatcher(name=name) | CatchAllMatcher(name=name):
                    names.append(name)
                case OptionMatcher(binding=binding):
                    names.append(binding)
        return tuple(names)

    def with_order(self, order: int) -> "CompiledRoute":
        """Copy of this route carrying a table declaration index."""
        return self.model_copy(update={"order": order})

    def __str__(self) -> str:
        return self.pattern


@dataclass(frozen=True, slots=True)
class NoMatch:
    """No route accepted the argument vector."""

    args: tuple[str, ...]

    @property
    def matched(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class Matched:
    """A route accepted the arguments and every value converted."""

    route: CompiledRoute
    values: dict[str, Any]
    present_options: frozenset[str] = frozenset()

    @property
    def matched(self) -> bool:
        return True

    def __getitem__(self, name: str) -> Any:
        return self.values[name]


@dataclass(frozen=True, slots=True)
class ConversionFailed:
    """A route structurally matched but some values failed conversion."""

    route: CompiledRoute
    errors: tuple[ConversionError, ...]

    @property
    def matched(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return "; ".join(str(error) for error in self.errors)


MatchResult = NoMatch | Matched | ConversionFailed
