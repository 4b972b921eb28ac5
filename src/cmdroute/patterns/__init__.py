"""Route pattern language: lexer, syntax tree and parser."""

from .lexer import PatternLexer, tokenize
from .parser import PatternParser, parse, parse_pattern
from .syntax import (
    CatchAllSyntax,
    EndOfOptionsSyntax,
    LiteralSyntax,
    OptionSyntax,
    ParameterSyntax,
    RouteSyntax,
    SegmentSyntax,
    dump_syntax,
    render_segment,
)
from .tokens import Token, TokenType, dump_tokens

__all__ = [
    "CatchAllSyntax",
    "EndOfOptionsSyntax",
    "LiteralSyntax",
    "OptionSyntax",
    "ParameterSyntax",
    "PatternLexer",
    "PatternParser",
    "RouteSyntax",
    "SegmentSyntax",
    "Token",
    "TokenType",
    "dump_syntax",
    "dump_tokens",
    "parse",
    "parse_pattern",
    "render_segment",
    "tokenize",
]
