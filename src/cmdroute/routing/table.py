"""Route table assembly: explicit registration, ordering and validation."""

from collections.abc import Iterable, Iterator, Sequence
from typing import Any, overload

from ..common.logging import get_logger
from ..config import RouteTableConfig
from ..exceptions import AmbiguousRouteTableError, RouteTableError
from .compiler import RouteCompiler
from .conflicts import RouteDiagnostic
from .converters import ConverterRegistry
from .matcher import match
from .models import CompiledRoute, MatchResult, RouteKind, RouteMetadata
from .validator import validate

logger = get_logger(__name__)


def sort_routes(routes: Iterable[CompiledRoute]) -> list[CompiledRoute]:
    """Order routes by descending specificity, ties by declaration order."""
    return sorted(routes, key=lambda route: (-route.specificity, route.order))


class RouteTable(Sequence[CompiledRoute]):
    """Immutable, specificity-ordered sequence of compiled routes.

    Safe to share between threads: nothing is mutated after construction.
    """

    __slots__ = ("_routes",)

    def __init__(self, routes: Iterable[CompiledRoute] = ()) -> None:
        self._routes: tuple[CompiledRoute, ...] = tuple(sort_routes(routes))

    @property
    def routes(self) -> tuple[CompiledRoute, ...]:
        return self._routes

    @overload
    def __getitem__(self, index: int) -> CompiledRoute: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[CompiledRoute, ...]: ...

    def __getitem__(self, index: int | slice) -> CompiledRoute | tuple[CompiledRoute, ...]:
        return self._routes[index]

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[CompiledRoute]:
        return iter(self._routes)

    def __repr__(self) -> str:
        return f"RouteTable({[route.pattern for route in self._routes]!r})"

    def match(self, args: Sequence[str]) -> MatchResult:
        """Match an argument vector against this table."""
        return match(self._routes, args)

    def validate(self) -> list[RouteDiagnostic]:
        """Run the overlap validator over this table."""
        return validate(self._routes)

    def find(self, name: str) -> CompiledRoute | None:
        """Primary route registered under a metadata name, if any."""
        for route in self._routes:
            if route.alias_of is None and route.metadata.name == name:
                return route
        return None


def build_table(
    routes: Iterable[CompiledRoute], config: RouteTableConfig | None = None
) -> RouteTable:
    """Assemble a route table from compiled routes.

    Each route receives its declaration index; alias routes are placed right
    after their primary route so they share its tie-breaking position.

    Args:
        routes: Compiled routes in declaration order
        config: Assembly options

    Returns:
        Specificity-ordered route table

    Raises:
        RouteTableError: If the table exceeds ``config.max_routes``
        AmbiguousRouteTableError: If ``config.reject_conflicts`` is set and
            the validator reports diagnostics
    """
    config = config or RouteTableConfig()

    entries: list[CompiledRoute] = []
    for route in routes:
        entries.append(route.with_order(len(entries)))
        for alias in route.alias_routes:
            entries.append(alias.with_order(len(entries)))

    if len(entries) > config.max_routes:
        raise RouteTableError(
            f"Route table has {len(entries)} entries, maximum is {config.max_routes}"
        )

    table = RouteTable(entries)
    logger.debug("Route table built", routes=len(table))

    if config.validate_on_build or config.reject_conflicts:
        diagnostics = table.validate()
        for diagnostic in diagnostics:
            logger.warning(
                "Route conflict detected",
                kind=diagnostic.kind.value,
                patterns=list(diagnostic.patterns),
                signature=diagnostic.signature,
            )
        if diagnostics and config.reject_conflicts:
            raise AmbiguousRouteTableError(diagnostics)

    return table


class RouteTableBuilder:
    """Fluent, explicit registration list for a route table.

    Example:
        table = (
            RouteTableBuilder()
            .add("status", kind=RouteKind.QUERY)
            .add("deploy {env} --force,-f", aliases=["ship {env} --force,-f"])
            .build()
        )
    """

    def __init__(
        self,
        registry: ConverterRegistry | None = None,
        config: RouteTableConfig | None = None,
    ) -> None:
        self._compiler = RouteCompiler(registry)
        self._config = config
        self._routes: list[CompiledRoute] = []

    def add(
        self,
        pattern: str,
        *,
        name: str | None = None,
        description: str | None = None,
        aliases: Sequence[str] = (),
        kind: RouteKind = RouteKind.UNSPECIFIED,
    ) -> "RouteTableBuilder":
        """Compile and register a pattern.

        Raises:
            LexError: If the pattern cannot be tokenized
            ParseError: If the pattern is not grammatical
            CompileError: If the syntax cannot be compiled
        """
        metadata = RouteMetadata(
            name=name, description=description, aliases=tuple(aliases), kind=kind
        )
        self._routes.append(self._compiler.compile(pattern, metadata))
        return self

    def add_route(self, route: CompiledRoute) -> "RouteTableBuilder":
        """Register an already compiled route."""
        self._routes.append(route)
        return self

    def configure(self, **options: Any) -> "RouteTableBuilder":
        """Update table assembly options, e.g. ``reject_conflicts=True``."""
        base = self._config.model_dump() if self._config else {}
        self._config = RouteTableConfig(**{**base, **options})
        return self

    def build(self) -> RouteTable:
        """Assemble the table; see ``build_table``."""
        return build_table(self._routes, self._config)

    def __len__(self) -> int:
        return len(self._routes)
