"""Compile parsed route syntax into matchers with a specificity score."""

from ..common.logging import get_logger
from ..exceptions import CompileError
from ..patterns.parser import parse_pattern
from ..patterns.syntax import (
    CatchAllSyntax,
    EndOfOptionsSyntax,
    LiteralSyntax,
    OptionSyntax,
    ParameterSyntax,
    RouteSyntax,
)
from .converters import ConverterRegistry, TypeConverter, default_registry
from .models import (
    CatchAllMatcher,
    CompiledRoute,
    EndOfOptionsMatcher,
    LiteralMatcher,
    OptionMatcher,
    ParameterMatcher,
    RouteKind,
    RouteMetadata,
    SegmentMatcher,
)

logger = get_logger(__name__)

# Specificity weights; a route's score is the sum over its segments
LITERAL_WEIGHT = 100
REQUIRED_OPTION_WEIGHT = 50
OPTIONAL_OPTION_WEIGHT = 25
TYPED_PARAMETER_WEIGHT = 20
UNTYPED_PARAMETER_WEIGHT = 10
OPTIONAL_PARAMETER_WEIGHT = 5
CATCH_ALL_WEIGHT = 1


def option_binding(long_form: str | None, short_form: str | None) -> str:
    """Name a boolean flag binds under: ``--dry-run`` becomes ``dry_run``."""
    return (long_form or short_form or "").replace("-", "_")


def _parameter_weight(is_optional: bool, type_constraint: str | None) -> int:
    if is_optional:
        return OPTIONAL_PARAMETER_WEIGHT
    if type_constraint is not None:
        return TYPED_PARAMETER_WEIGHT
    return UNTYPED_PARAMETER_WEIGHT


def segment_specificity(segment: SegmentMatcher) -> int:
    """Specificity contribution of a single compiled segment."""
    match segment:
        case LiteralMatcher():
            return LITERAL_WEIGHT
        case ParameterMatcher(is_optional=is_optional, converter=converter):
            return _parameter_weight(is_optional, converter.name if converter else None)
        case CatchAllMatcher():
            return CATCH_ALL_WEIGHT
        case EndOfOptionsMatcher():
            return 0
        case OptionMatcher() as option:
            score = (
                OPTIONAL_OPTION_WEIGHT
                if option.declared_optional
                else REQUIRED_OPTION_WEIGHT
            )
            if option.expects_value:
                score += _parameter_weight(option.value_is_optional, option.type_name)
            return score
    raise TypeError(f"Unknown segment type: {type(segment).__name__}")


class RouteCompiler:
    """Turns ``RouteSyntax`` into ``CompiledRoute`` using a converter registry."""

    def __init__(self, registry: ConverterRegistry | None = None) -> None:
        self.registry = registry if registry is not None else default_registry

    def _resolve(self, pattern: str, type_name: str | None) -> TypeConverter | None:
        if type_name is None:
            return None
        converter = self.registry.resolve(type_name)
        if converter is None:
            position = pattern.find(f":{type_name}")
            raise CompileError(
                f"Unknown type constraint '{type_name}'",
                pattern,
                position + 1 if position >= 0 else None,
            )
        return converter

    def compile_segments(self, syntax: RouteSyntax) -> tuple[SegmentMatcher, ...]:
        """Resolve every segment of a parsed pattern into a matcher.

        Raises:
            CompileError: If a type constraint is unknown or two segments
                bind under the same name
        """
        pattern = syntax.pattern
        segments: list[SegmentMatcher] = []
        for segment in syntax.segments:
            match segment:
                case LiteralSyntax(text=text):
                    segments.append(LiteralMatcher(text))
                case ParameterSyntax() as param:
                    segments.append(
                        ParameterMatcher(
                            name=param.name,
                            converter=self._resolve(pattern, param.type_constraint),
                            is_optional=param.is_optional,
                            description=param.description,
                        )
                    )
                case CatchAllSyntax() as catch_all:
                    segments.append(
                        CatchAllMatcher(
                            name=catch_all.name,
                            converter=self._resolve(pattern, catch_all.type_constraint),
                            description=catch_all.description,
                        )
                    )
                case EndOfOptionsSyntax():
                    segments.append(EndOfOptionsMatcher())
                case OptionSyntax() as option:
                    segments.append(self._compile_option(pattern, option))

        bound: set[str] = set()
        for segment in segments:
            name = getattr(segment, "binding", None) or getattr(segment, "name", None)
            if name is None:
                continue
            if name in bound:
                raise CompileError(f"Duplicate binding name '{name}'", pattern)
            bound.add(name)

        return tuple(segments)

    def _compile_option(self, pattern: str, option: OptionSyntax) -> OptionMatcher:
        forms = set()
        if option.long_form is not None:
            forms.add(f"--{option.long_form}")
        if option.short_form is not None:
            forms.add(f"-{option.short_form}")

        if option.expects_value:
            binding = option.value_name or option_binding(
                option.long_form, option.short_form
            )
            runtime_optional = option.is_optional or option.is_repeated
        else:
            binding = option_binding(option.long_form, option.short_form)
            runtime_optional = True

        return OptionMatcher(
            long_form=option.long_form,
            short_form=option.short_form,
            binding=binding,
            expects_value=option.expects_value,
            value_is_optional=option.value_is_optional,
            is_optional=runtime_optional,
            declared_optional=option.is_optional,
            is_repeated=option.is_repeated,
            converter=self._resolve(pattern, option.value_type),
            description=option.description,
            forms=frozenset(forms),
        )

    def compile(
        self,
        pattern: str,
        metadata: RouteMetadata | None = None,
        *,
        alias_of: str | None = None,
    ) -> CompiledRoute:
        """Compile a pattern and its aliases.

        Args:
            pattern: Route pattern text
            metadata: Descriptive route metadata
            alias_of: Primary pattern when compiling an alias

        Returns:
            Compiled route with its compiled alias routes

        Raises:
            LexError: If the pattern cannot be tokenized
            ParseError: If the pattern is not grammatical
            CompileError: If the syntax cannot be compiled
        """
        metadata = metadata or RouteMetadata()
        syntax = parse_pattern(pattern)
        segments = self.compile_segments(syntax)
        specificity = sum(segment_specificity(segment) for segment in segments)

        alias_routes: tuple[CompiledRoute, ...] = ()
        if alias_of is None and metadata.aliases:
            alias_routes = tuple(
                self.compile(alias, metadata, alias_of=pattern)
                for alias in metadata.aliases
            )

        route = CompiledRoute(
            pattern=pattern,
            segments=segments,
            specificity=specificity,
            metadata=metadata,
            alias_routes=alias_routes,
            alias_of=alias_of,
        )

        for alias in alias_routes:
            if set(alias.bindings) != set(route.bindings):
                raise CompileError(
                    f"Alias '{alias.pattern}' must bind the same names as '{pattern}'",
                    alias.pattern,
                )

        logger.debug(
            "Route compiled",
            pattern=pattern,
            specificity=specificity,
            aliases=len(alias_routes),
            alias_of=alias_of,
        )
        return route


def compile_syntax(
    syntax: RouteSyntax,
    metadata: RouteMetadata | None = None,
    *,
    registry: ConverterRegistry | None = None,
) -> CompiledRoute:
    """Compile already parsed syntax. Aliases in metadata are not expanded."""
    compiler = RouteCompiler(registry)
    segments = compiler.compile_segments(syntax)
    return CompiledRoute(
        pattern=syntax.pattern,
        segments=segments,
        specificity=sum(segment_specificity(segment) for segment in segments),
        metadata=metadata or RouteMetadata(),
    )


def compile_route(
    pattern: str,
    metadata: RouteMetadata | None = None,
    *,
    registry: ConverterRegistry | None = None,
    name: str | None = None,
    description: str | None = None,
    aliases: tuple[str, ...] | list[str] = (),
    kind: RouteKind = RouteKind.UNSPECIFIED,
) -> CompiledRoute:
    """Compile one route pattern.

    Metadata can be passed as a ``RouteMetadata`` or as keyword arguments,
    but not both.

    Args:
        pattern: Route pattern such as ``"deploy {env} --force,-f"``
        metadata: Descriptive route metadata
        registry: Converter registry, defaults to the shared default registry
        name: Host-defined route identifier
        description: Human-readable summary
        aliases: Alternative patterns compiled to equivalent routes
        kind: Side-effect classification

    Returns:
        Compiled route

    Raises:
        LexError: If the pattern cannot be tokenized
        ParseError: If the pattern is not grammatical
        CompileError: If a type constraint is unknown
        ValueError: If metadata is given both ways
    """
    if metadata is None:
        metadata = RouteMetadata(
            name=name, description=description, aliases=tuple(aliases), kind=kind
        )
    elif name or description or aliases or kind != RouteKind.UNSPECIFIED:
        raise ValueError("Pass metadata either as RouteMetadata or as keywords, not both")
    return RouteCompiler(registry).compile(pattern, metadata)
