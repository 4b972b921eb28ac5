"""Custom exceptions for cmdroute."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .routing.conflicts import RouteDiagnostic


class RouteError(Exception):
    """Base exception for all cmdroute errors."""

    pass


class PatternError(RouteError):
    """Raised when a route pattern cannot be turned into a compiled route.

    Attributes:
        pattern: The offending pattern text
        position: Character index of the problem within the pattern
        offset: UTF-8 byte offset of the problem within the pattern
    """

    def __init__(
        self, message: str, pattern: str = "", position: int | None = None
    ) -> None:
        self.message = message
        self.pattern = pattern
        self.position = position
        self.offset = (
            len(pattern[:position].encode("utf-8")) if position is not None else None
        )
        super().__init__(self._format())

    def _format(self) -> str:
        if not self.pattern:
            return self.message
        if self.position is None:
            return f"{self.message} in pattern '{self.pattern}'"
        return f"{self.message} at offset {self.offset} in pattern '{self.pattern}'"


class LexError(PatternError):
    """Raised when a pattern contains characters that cannot be tokenized."""

    pass


class ParseError(PatternError):
    """Raised when a token stream violates the pattern grammar."""

    pass


class CompileError(PatternError):
    """Raised when parsed syntax cannot be compiled (e.g. unknown type)."""

    pass


class ConversionError(RouteError):
    """A raw argument does not satisfy its declared type constraint.

    Conversion errors are returned inside a match result rather than raised
    by the matcher.
    """

    def __init__(self, name: str, raw: str, type_name: str, reason: str = "") -> None:
        self.name = name
        self.raw = raw
        self.type_name = type_name
        self.reason = reason
        message = f"Cannot convert '{raw}' to {type_name} for '{name}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class RouteTableError(RouteError):
    """Raised when a route table cannot be assembled."""

    pass


class AmbiguousRouteTableError(RouteTableError):
    """Raised when a table is rejected because of validator diagnostics."""

    def __init__(self, diagnostics: list["RouteDiagnostic"]) -> None:
        self.diagnostics = diagnostics
        lines = "\n".join(f"  - {d.message}" for d in diagnostics)
        super().__init__(
            f"Route table has {len(diagnostics)} conflicting route(s):\n{lines}"
        )
