"""Match argument vectors against compiled routes."""

from collections.abc import Iterable, Sequence
from typing import Any

from ..common.logging import get_logger
from ..exceptions import ConversionError
from .models import (
    CatchAllMatcher,
    CompiledRoute,
    ConversionFailed,
    EndOfOptionsMatcher,
    LiteralMatcher,
    Matched,
    MatchResult,
    NoMatch,
    OptionMatcher,
    ParameterMatcher,
)

logger = get_logger(__name__)

END_OF_OPTIONS = "--"


class _Rejected(Exception):
    """Structural mismatch of one candidate route."""


def _extract_options(
    route: CompiledRoute, args: Sequence[str]
) -> tuple[list[str], dict[str, Any], set[str]]:
    """Pull declared options out of the argument vector.

    Returns:
        Remaining positional arguments, raw option values by binding name
        and the keys of the options that were present
    """
    options = route.options
    if not options:
        return list(args), {}, set()

    by_form = {form: option for option in options for form in option.forms}
    boundary = len(args)
    if route.has_end_of_options and END_OF_OPTIONS in args:
        boundary = args.index(END_OF_OPTIONS)

    positional: list[str] = []
    raw: dict[str, Any] = {}
    present: set[str] = set()

    index = 0
    while index < len(args):
        arg = args[index]
        option = by_form.get(arg) if index < boundary else None
        if option is None or (option.key in present and not option.is_repeated):
            # Unknown dashed words such as negative numbers stay positional
            positional.append(arg)
            index += 1
            continue

        present.add(option.key)
        index += 1
        if not option.expects_value:
            continue

        value: str | None = None
        if index < boundary and args[index] not in by_form:
            value = args[index]
            index += 1
        elif not option.value_is_optional:
            raise _Rejected(f"option {arg} is missing its value")

        if option.is_repeated:
            values = raw.setdefault(option.binding, [])
            if value is not None:
                values.append(value)
        else:
            raw[option.binding] = value

    for option in options:
        if not option.is_optional and option.key not in present:
            raise _Rejected(f"required option {option.key} is absent")

    return positional, raw, present


def _bind_positionals(route: CompiledRoute, args: list[str]) -> dict[str, Any]:
    positionals = route.positionals
    raw: dict[str, Any] = {}
    index = 0

    for position, segment in enumerate(positionals):
        match segment:
            case LiteralMatcher(text=text) | EndOfOptionsMatcher(text=text):
                if index >= len(args) or args[index] != text:
                    found = args[index] if index < len(args) else None
                    raise _Rejected(f"expected '{text}', found {found!r}")
                index += 1
            case ParameterMatcher(name=name, is_optional=False):
                if index >= len(args):
                    raise _Rejected(f"missing required parameter '{name}'")
                raw[name] = args[index]
                index += 1
            case ParameterMatcher(name=name):
                still_required = sum(
                    1
                    for later in positionals[position + 1 :]
                    if not isinstance(later, CatchAllMatcher)
                    and not (isinstance(later, ParameterMatcher) and later.is_optional)
                )
                if len(args) - index > still_required:
                    raw[name] = args[index]
                    index += 1
                else:
                    raw[name] = None
            case CatchAllMatcher(name=name):
                raw[name] = args[index:]
                index = len(args)

    if index < len(args):
        raise _Rejected(f"unexpected extra arguments {args[index:]!r}")
    return raw


def _convert(
    route: CompiledRoute, raw: dict[str, Any], present: set[str]
) -> tuple[dict[str, Any], list[ConversionError]]:
    values: dict[str, Any] = {}
    errors: list[ConversionError] = []

    def convert_one(segment: Any, name: str, text: str) -> Any:
        if segment.converter is None:
            return text
        try:
            return segment.converter.convert_arg(name, text)
        except ConversionError as e:
            errors.append(e)
            return None

    for segment in route.segments:
        match segment:
            case ParameterMatcher(name=name):
                text = raw.get(name)
                values[name] = None if text is None else convert_one(segment, name, text)
            case CatchAllMatcher(name=name):
                values[name] = [convert_one(segment, name, text) for text in raw.get(name, [])]
            case OptionMatcher(binding=binding) if not segment.expects_value:
                values[binding] = segment.key in present
            case OptionMatcher(binding=binding) if segment.is_repeated:
                values[binding] = [
                    convert_one(segment, binding, text) for text in raw.get(binding, [])
                ]
            case OptionMatcher(binding=binding):
                text = raw.get(binding)
                values[binding] = None if text is None else convert_one(segment, binding, text)

    return values, errors


def match_route(
    route: CompiledRoute, args: Sequence[str]
) -> Matched | ConversionFailed | None:
    """Match one route against an argument vector.

    Args:
        route: Compiled route
        args: Argument vector, program name excluded

    Returns:
        ``Matched`` or ``ConversionFailed`` when the route structurally
        accepts the arguments, None otherwise
    """
    try:
        positional, raw_options, present = _extract_options(route, args)
        raw = _bind_positionals(route, positional)
    except _Rejected as e:
        logger.debug("Route rejected", pattern=route.pattern, reason=str(e))
        return None

    raw.update(raw_options)
    values, errors = _convert(route, raw, present)
    if errors:
        logger.debug(
            "Route matched with conversion errors",
            pattern=route.pattern,
            errors=[str(error) for error in errors],
        )
        return ConversionFailed(route=route, errors=tuple(errors))

    return Matched(route=route, values=values, present_options=frozenset(present))


def match(routes: Iterable[CompiledRoute], args: Sequence[str]) -> MatchResult:
    """Select the first route accepting the argument vector.

    Routes are tried in iteration order; a ``RouteTable`` iterates by
    descending specificity. A conversion failure on the first structural
    match is returned as is and no lower-ranked route is tried.

    Args:
        routes: Route table or routes in ranking order
        args: Argument vector, program name excluded

    Returns:
        ``Matched``, ``ConversionFailed`` or ``NoMatch``
    """
    args = tuple(args)
    for route in routes:
        result = match_route(route, args)
        if result is not None:
            logger.debug(
                "Route selected",
                pattern=route.pattern,
                alias_of=route.alias_of,
                matched=result.matched,
            )
            return result

    logger.debug("No matching route", argv=list(args))
    return NoMatch(args=args)
