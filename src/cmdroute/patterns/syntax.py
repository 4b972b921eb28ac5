"""Parsed route syntax: an ordered sequence of segment nodes."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LiteralSyntax:
    """A bare word that must match an argument exactly."""

    text: str


@dataclass(frozen=True, slots=True)
class ParameterSyntax:
    """A named positional parameter, e.g. ``{env}`` or ``{count:int?}``."""

    name: str
    type_constraint: str | None = None
    is_optional: bool = False
    description: str | None = None


@dataclass(frozen=True, slots=True)
class CatchAllSyntax:
    """A parameter capturing every remaining argument, e.g. ``{*args}``."""

    name: str
    type_constraint: str | None = None
    description: str | None = None


@dataclass(frozen=True, slots=True)
class OptionSyntax:
    """A named option, either a boolean flag or one that takes a value.

    ``is_optional`` reflects a ``?`` after the option name. ``value_is_optional``
    reflects a ``?`` inside the value braces.
    """

    long_form: str | None = None
    short_form: str | None = None
    expects_value: bool = False
    value_is_optional: bool = False
    description: str | None = None
    is_optional: bool = False
    value_name: str | None = None
    value_type: str | None = None
    is_repeated: bool = False

    @property
    def key(self) -> str:
        """Preferred display form of the option, long form first."""
        if self.long_form is not None:
            return f"--{self.long_form}"
        return f"-{self.short_form}"


@dataclass(frozen=True, slots=True)
class EndOfOptionsSyntax:
    """The ``--`` separator after which no options are recognised."""


SegmentSyntax = (
    LiteralSyntax | ParameterSyntax | CatchAllSyntax | OptionSyntax | EndOfOptionsSyntax
)

POSITIONAL_SYNTAX = (LiteralSyntax, ParameterSyntax, CatchAllSyntax, EndOfOptionsSyntax)


@dataclass(frozen=True, slots=True)
class RouteSyntax:
    """Result of parsing one pattern."""

    pattern: str
    segments: tuple[SegmentSyntax, ...]

    @property
    def positionals(self) -> tuple[SegmentSyntax, ...]:
        return tuple(s for s in self.segments if isinstance(s, POSITIONAL_SYNTAX))

    @property
    def options(self) -> tuple[OptionSyntax, ...]:
        return tuple(s for s in self.segments if isinstance(s, OptionSyntax))


def render_segment(segment: SegmentSyntax) -> str:
    """Render one segment back to pattern text."""
    match segment:
        case LiteralSyntax(text=text):
            return text
        case ParameterSyntax(name=name, type_constraint=type_name, is_optional=optional):
            type_part = f":{type_name}" if type_name else ""
            return f"{{{name}{type_part}{'?' if optional else ''}}}"
        case CatchAllSyntax(name=name, type_constraint=type_name):
            type_part = f":{type_name}" if type_name else ""
            return f"{{*{name}{type_part}}}"
        case OptionSyntax() as option:
            text = f"--{option.long_form}" if option.long_form else ""
            if option.short_form:
                text = f"{text},-{option.short_form}" if text else f"-{option.short_form}"
            if option.is_optional:
                text += "?"
            if option.expects_value:
                type_part = f":{option.value_type}" if option.value_type else ""
                optional = "?" if option.value_is_optional else ""
                text += f" {{{option.value_name}{type_part}{optional}}}"
                if option.is_repeated:
                    text += "*"
            return text
        case EndOfOptionsSyntax():
            return "--"
    raise TypeError(f"Unknown segment type: {type(segment).__name__}")


def dump_syntax(syntax: RouteSyntax) -> str:
    """Render parsed syntax as a compact debug string."""
    return " ".join(
        f"{type(segment).__name__}[{render_segment(segment)}]"
        for segment in syntax.segments
    )
