"""Route compilation, tables, matching and validation."""

from .compiler import RouteCompiler, compile_route, compile_syntax, segment_specificity
from .conflicts import DiagnosticKind, RouteDiagnostic
from .converters import (
    ConverterRegistry,
    TypeConverter,
    default_registry,
    register_converter,
)
from .matcher import match, match_route
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
    RouteKind,
    RouteMetadata,
)
from .table import RouteTable, RouteTableBuilder, build_table, sort_routes
from .validator import RouteValidator, structure_signature, validate

__all__ = [
    "CatchAllMatcher",
    "CompiledRoute",
    "ConversionFailed",
    "ConverterRegistry",
    "DiagnosticKind",
    "EndOfOptionsMatcher",
    "LiteralMatcher",
    "MatchResult",
    "Matched",
    "NoMatch",
    "OptionMatcher",
    "ParameterMatcher",
    "RouteCompiler",
    "RouteDiagnostic",
    "RouteKind",
    "RouteMetadata",
    "RouteTable",
    "RouteTableBuilder",
    "RouteValidator",
    "TypeConverter",
    "build_table",
    "compile_route",
    "compile_syntax",
    "default_registry",
    "match",
    "match_route",
    "register_converter",
    "segment_specificity",
    "sort_routes",
    "structure_signature",
    "validate",
]
