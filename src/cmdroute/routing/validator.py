"""Static overlap and ambiguity checks for route tables.

Routes that share a structure signature can never be told apart by the
matcher: the higher-ranked one always wins, whatever the argument values.
The validator reports such groups, and routes fully shadowed by a
higher-ranked route, without changing how matching behaves.
"""

from collections.abc import Iterable

from ..common.logging import get_logger
from .conflicts import DiagnosticKind, RouteDiagnostic
from .models import (
    CatchAllMatcher,
    CompiledRoute,
    EndOfOptionsMatcher,
    LiteralMatcher,
    OptionMatcher,
    ParameterMatcher,
    PositionalMatcher,
)

logger = get_logger(__name__)


def _positional_token(segment: PositionalMatcher) -> str:
    match segment:
        case LiteralMatcher(text=text):
            return text
        case EndOfOptionsMatcher():
            return "--"
        case CatchAllMatcher():
            return "{*}"
        case ParameterMatcher(is_optional=True):
            return "{P?}"
        case ParameterMatcher():
            return "{P}"
    raise TypeError(f"Unknown segment type: {type(segment).__name__}")


def _option_token(option: OptionMatcher) -> str:
    token = option.key
    if option.expects_value:
        if option.is_optional:
            token += "?"
        token += " {P?}" if option.value_is_optional else " {P}"
        if option.is_repeated:
            token += "*"
    return token


def _sorted_options(route: CompiledRoute) -> list[OptionMatcher]:
    return sorted(route.options, key=lambda option: option.key)


def structure_signature(route: CompiledRoute) -> str:
    """Shape of a route with names and type constraints erased.

    Positional segments keep their order; options follow, sorted by key,
    since their position in the argument vector does not matter.

    Example:
        ``deploy {env:int} --force,-f`` -> ``deploy {P} --force``
    """
    parts = [_positional_token(segment) for segment in route.positionals]
    parts.extend(_option_token(option) for option in _sorted_options(route))
    return " ".join(parts)


def required_signature(route: CompiledRoute) -> str:
    """Shape of the segments every matching argument vector must contain."""
    parts = [
        _positional_token(segment)
        for segment in route.positionals
        if not isinstance(segment, CatchAllMatcher)
        and not (isinstance(segment, ParameterMatcher) and segment.is_optional)
    ]
    parts.extend(
        _option_token(option)
        for option in _sorted_options(route)
        if not option.is_optional
    )
    return " ".join(parts)


def type_signature(route: CompiledRoute) -> tuple[str | None, ...]:
    """Type constraints of a route: positionals in order, then options by key."""
    types: list[str | None] = [
        segment.type_name
        for segment in route.positionals
        if isinstance(segment, ParameterMatcher | CatchAllMatcher)
    ]
    types.extend(
        option.type_name for option in _sorted_options(route) if option.expects_value
    )
    return tuple(types)


def _families(routes: list[CompiledRoute]) -> list[int]:
    """Family index of each route, by position.

    Each primary route starts its own family, even when its pattern text
    repeats an earlier one. An alias joins the closest preceding primary
    whose pattern it names, which is where a route table places it.
    """
    families: list[int] = []
    primaries: dict[str, int] = {}
    for index, route in enumerate(routes):
        if route.alias_of is not None and route.alias_of in primaries:
            families.append(primaries[route.alias_of])
            continue
        families.append(index)
        if route.alias_of is None:
            primaries[route.pattern] = index
    return families


class RouteValidator:
    """Finds duplicate, type-ambiguous and unreachable routes."""

    def validate(self, routes: Iterable[CompiledRoute]) -> list[RouteDiagnostic]:
        """Check a set of routes.

        Args:
            routes: Route table or compiled routes

        Returns:
            List of diagnostics, empty when the routes are unambiguous
        """
        # Declaration order puts every alias right after its primary
        declared = sorted(routes, key=lambda route: route.order)
        families = _families(declared)
        ranking = sorted(
            range(len(declared)),
            key=lambda index: (-declared[index].specificity, declared[index].order),
        )
        ordered = [(declared[index], families[index]) for index in ranking]

        diagnostics = self._check_structure_groups(ordered)
        diagnostics.extend(self._check_unreachable(ordered))
        if diagnostics:
            logger.debug("Route validation found conflicts", count=len(diagnostics))
        return diagnostics

    def _check_structure_groups(
        self, ordered: list[tuple[CompiledRoute, int]]
    ) -> list[RouteDiagnostic]:
        groups: dict[str, list[tuple[CompiledRoute, int]]] = {}
        for route, family in ordered:
            entries = groups.setdefault(structure_signature(route), [])
            if all(other != family for _, other in entries):
                entries.append((route, family))

        diagnostics: list[RouteDiagnostic] = []
        for signature, entries in groups.items():
            members = [route for route, _ in entries]
            if len(members) < 2:
                continue

            partitions: dict[tuple[str | None, ...], list[CompiledRoute]] = {}
            for member in members:
                partitions.setdefault(type_signature(member), []).append(member)

            for partition in partitions.values():
                if len(partition) < 2:
                    continue
                patterns = tuple(route.pattern for route in partition)
                diagnostics.append(
                    RouteDiagnostic(
                        kind=DiagnosticKind.DUPLICATE_ROUTE,
                        patterns=patterns,
                        signature=signature,
                        message=(
                            f"Routes {', '.join(repr(p) for p in patterns)} are "
                            f"duplicates of structure '{signature}'; only "
                            f"'{patterns[0]}' can ever match"
                        ),
                    )
                )

            if len(partitions) > 1:
                patterns = tuple(route.pattern for route in members)
                diagnostics.append(
                    RouteDiagnostic(
                        kind=DiagnosticKind.AMBIGUOUS_TYPES,
                        patterns=patterns,
                        signature=signature,
                        message=(
                            f"Routes {', '.join(repr(p) for p in patterns)} share "
                            f"structure '{signature}' and differ only in type "
                            f"constraints; '{patterns[0]}' always wins"
                        ),
                    )
                )

        return diagnostics

    def _check_unreachable(
        self, ordered: list[tuple[CompiledRoute, int]]
    ) -> list[RouteDiagnostic]:
        diagnostics: list[RouteDiagnostic] = []
        for index, (lower, lower_family) in enumerate(ordered):
            lower_signature = structure_signature(lower)
            for higher, higher_family in ordered[:index]:
                if higher_family == lower_family:
                    continue
                if structure_signature(higher) == lower_signature:
                    continue
                if required_signature(higher) != required_signature(lower):
                    continue
                if not _covers(higher, lower):
                    continue
                diagnostics.append(
                    RouteDiagnostic(
                        kind=DiagnosticKind.UNREACHABLE_ROUTE,
                        patterns=(lower.pattern, higher.pattern),
                        signature=required_signature(lower),
                        message=(
                            f"Route '{lower.pattern}' is unreachable: "
                            f"'{higher.pattern}' ranks higher and accepts "
                            f"every argument list it accepts"
                        ),
                        shadowed_by=higher.pattern,
                    )
                )
                break
        return diagnostics


def _split_tail(route: CompiledRoute) -> tuple[list[str], list[str]] | None:
    """Split positional tokens into the required head and the optional tail.

    Returns None when an optional segment is followed by a required one.
    """
    tokens = [_positional_token(segment) for segment in route.positionals]
    cut = len(tokens)
    while cut > 0 and tokens[cut - 1] in ("{P?}", "{*}"):
        cut -= 1
    head, tail = tokens[:cut], tokens[cut:]
    if "{P?}" in head or "{*}" in head:
        return None
    return head, tail


def _covers(higher: CompiledRoute, lower: CompiledRoute) -> bool:
    """Whether ``higher`` accepts every argument vector ``lower`` accepts."""
    higher_split = _split_tail(higher)
    lower_split = _split_tail(lower)
    if higher_split is None or lower_split is None:
        positional_ok = [_positional_token(s) for s in higher.positionals] == [
            _positional_token(s) for s in lower.positionals
        ]
    else:
        (higher_head, higher_tail), (lower_head, lower_tail) = higher_split, lower_split
        if higher_head != lower_head:
            return False
        if "{*}" in higher_tail:
            positional_ok = True
        else:
            positional_ok = "{*}" not in lower_tail and len(lower_tail) <= len(higher_tail)
    if not positional_ok:
        return False

    higher_options = {option.key: option for option in higher.options}
    for option in lower.options:
        other = higher_options.pop(option.key, None)
        if other is None or not option.forms <= other.forms:
            return False
        if option.expects_value != other.expects_value:
            return False
        if option.value_is_optional and not other.value_is_optional:
            return False
        if option.is_repeated and not other.is_repeated:
            return False

    # Options only the higher route knows may swallow arguments the lower
    # route binds positionally; one requiring a value then rejects the input.
    return all(
        not option.expects_value or option.value_is_optional
        for option in higher_options.values()
    )


def validate(routes: Iterable[CompiledRoute]) -> list[RouteDiagnostic]:
    """Run the overlap validator over a route table or list of routes."""
    return RouteValidator().validate(routes)
