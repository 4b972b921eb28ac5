"""Token definitions for the route pattern lexer."""

from dataclasses import dataclass
from enum import Enum


class TokenType(str, Enum):
    """Lexical token classes of the pattern language."""

    LITERAL = "literal"
    LEFT_BRACE = "left_brace"
    RIGHT_BRACE = "right_brace"
    PARAMETER_NAME = "parameter_name"
    TYPE_NAME = "type_name"
    OPTIONAL = "optional"
    CATCH_ALL = "catch_all"
    LONG_OPTION = "long_option"
    SHORT_OPTION = "short_option"
    ALIAS_SEPARATOR = "alias_separator"
    DESCRIPTION_SEPARATOR = "description_separator"
    DESCRIPTION = "description"
    REPEAT = "repeat"
    END_OF_OPTIONS = "end_of_options"
    WHITESPACE = "whitespace"
    END_OF_INPUT = "end_of_input"


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexical token.

    ``position`` is the character index into the pattern; ``offset`` is the
    matching UTF-8 byte offset.
    """

    type: TokenType
    value: str
    position: int
    offset: int

    def __str__(self) -> str:
        if self.value:
            return f"{self.type.name}({self.value!r})@{self.position}"
        return f"{self.type.name}@{self.position}"


def dump_tokens(tokens: list[Token]) -> str:
    """Render a token stream as one line for debug logging."""
    return " ".join(str(token) for token in tokens)
