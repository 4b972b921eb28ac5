"""cmdroute - Pattern compiler and matching engine for command-line routing."""

# Common utilities
from .common.logging import get_logger, setup_logging

# Configuration
from .config import RouteTableConfig

# Errors
from .exceptions import (
    AmbiguousRouteTableError,
    CompileError,
    ConversionError,
    LexError,
    ParseError,
    PatternError,
    RouteError,
    RouteTableError,
)

# Pattern language
from .patterns import RouteSyntax, Token, TokenType, parse, parse_pattern, tokenize

# Compilation, tables and matching
from .routing import (
    CompiledRoute,
    ConversionFailed,
    ConverterRegistry,
    DiagnosticKind,
    Matched,
    MatchResult,
    NoMatch,
    RouteDiagnostic,
    RouteKind,
    RouteMetadata,
    RouteTable,
    RouteTableBuilder,
    build_table,
    compile_route,
    default_registry,
    match,
    register_converter,
    structure_signature,
    validate,
)

__version__ = "0.1.0"


__all__ = [
    # Core API
    "compile_route",
    "build_table",
    "match",
    "validate",
    "register_converter",
    # Pattern language
    "tokenize",
    "parse",
    "parse_pattern",
    "RouteSyntax",
    "Token",
    "TokenType",
    # Models
    "CompiledRoute",
    "RouteMetadata",
    "RouteKind",
    "RouteTable",
    "RouteTableBuilder",
    "RouteTableConfig",
    "ConverterRegistry",
    "default_registry",
    "structure_signature",
    # Results and diagnostics
    "MatchResult",
    "Matched",
    "NoMatch",
    "ConversionFailed",
    "RouteDiagnostic",
    "DiagnosticKind",
    # Errors
    "RouteError",
    "PatternError",
    "LexError",
    "ParseError",
    "CompileError",
    "ConversionError",
    "RouteTableError",
    "AmbiguousRouteTableError",
    # Logging
    "setup_logging",
    "get_logger",
]
