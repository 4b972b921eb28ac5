"""Lexer turning route pattern text into a flat token stream."""

from functools import lru_cache

from ..common.logging import get_logger
from ..exceptions import LexError
from .tokens import Token, TokenType, dump_tokens

logger = get_logger(__name__)

# Characters that can never appear inside a literal word
_RESERVED = frozenset("{}|,?*<>")


def _is_name_char(ch: str) -> bool:
    return ch.isalnum() or ch in "_-"


class PatternLexer:
    """Single-pass, context-aware scanner for one pattern string.

    Outside braces it recognises literal words, option markers (``--name``,
    ``-n``, the ``,`` alias separator, a trailing ``?``), the standalone
    ``--`` end-of-options marker and ``|`` descriptions. Inside braces it
    recognises the catch-all ``*``, the parameter name, ``?``, ``:type`` and
    a ``|`` description running to the closing brace.
    """

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        self._pos = 0
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Scan the whole pattern.

        Returns:
            Tokens in source order, terminated by an END_OF_INPUT token

        Raises:
            LexError: If the pattern contains invalid syntax
        """
        while not self._at_end():
            ch = self._current()
            if ch.isspace():
                self._scan_whitespace()
            elif ch == "{":
                self._scan_parameter()
            elif ch == "}":
                raise self._error("Unexpected '}' without matching '{'")
            elif ch == "-":
                self._scan_option()
            elif ch == "|":
                self._scan_trailing_description()
            elif ch == "*":
                self._scan_repeat()
            elif ch == "<":
                self._scan_angle_brackets()
            elif ch in _RESERVED:
                raise self._error(f"Unexpected character '{ch}'")
            else:
                self._scan_literal()

        self._emit(TokenType.END_OF_INPUT, "", self._pos)
        return self._tokens

    # -- helpers -----------------------------------------------------------

    def _at_end(self, pos: int | None = None) -> bool:
        return (self._pos if pos is None else pos) >= len(self.pattern)

    def _current(self) -> str:
        return self.pattern[self._pos]

    def _peek(self, ahead: int = 1) -> str:
        pos = self._pos + ahead
        return self.pattern[pos] if pos < len(self.pattern) else ""

    def _emit(self, token_type: TokenType, value: str, position: int) -> None:
        offset = len(self.pattern[:position].encode("utf-8"))
        self._tokens.append(Token(token_type, value, position, offset))

    def _error(self, message: str, position: int | None = None) -> LexError:
        return LexError(
            message, self.pattern, self._pos if position is None else position
        )

    def _skip_spaces(self) -> None:
        while not self._at_end() and self._current().isspace():
            self._pos += 1

    def _read_name(self, kind: str) -> str:
        start = self._pos
        while not self._at_end() and _is_name_char(self._current()):
            self._pos += 1
        name = self.pattern[start : self._pos]

        if not name:
            raise self._error(f"Empty {kind} name", start)
        if name.startswith("-") or name.endswith("-") or "--" in name:
            raise self._error(
                f"Invalid {kind} name '{name}': dashes are only allowed between words",
                start,
            )
        return name

    # -- scanners ----------------------------------------------------------

    def _scan_whitespace(self) -> None:
        start = self._pos
        self._skip_spaces()
        self._emit(TokenType.WHITESPACE, self.pattern[start : self._pos], start)

    def _scan_literal(self) -> None:
        start = self._pos
        while not self._at_end():
            ch = self._current()
            if ch.isspace() or ch in _RESERVED:
                break
            self._pos += 1
        self._emit(TokenType.LITERAL, self.pattern[start : self._pos], start)

    def _scan_parameter(self) -> None:
        open_pos = self._pos
        self._emit(TokenType.LEFT_BRACE, "{", open_pos)
        self._pos += 1

        self._skip_spaces()
        if not self._at_end() and self._current() == "*":
            self._emit(TokenType.CATCH_ALL, "*", self._pos)
            self._pos += 1
            self._skip_spaces()
        if self._at_end():
            raise self._error("Unterminated '{'", open_pos)

        name_start = self._pos
        self._emit(TokenType.PARAMETER_NAME, self._read_name("parameter"), name_start)

        while True:
            self._skip_spaces()
            if self._at_end():
                raise self._error("Unterminated '{'", open_pos)

            ch = self._current()
            if ch == "}":
                self._emit(TokenType.RIGHT_BRACE, "}", self._pos)
                self._pos += 1
                return
            if ch == "?":
                self._emit(TokenType.OPTIONAL, "?", self._pos)
                self._pos += 1
            elif ch == ":":
                self._pos += 1
                self._skip_spaces()
                type_start = self._pos
                while not self._at_end() and (
                    self._current().isalnum() or self._current() in "_."
                ):
                    self._pos += 1
                type_name = self.pattern[type_start : self._pos]
                if not type_name:
                    raise self._error("Empty type name", type_start)
                self._emit(TokenType.TYPE_NAME, type_name, type_start)
            elif ch == "|":
                self._emit(TokenType.DESCRIPTION_SEPARATOR, "|", self._pos)
                self._pos += 1
                text_start = self._pos
                while not self._at_end() and self._current() != "}":
                    self._pos += 1
                if self._at_end():
                    raise self._error("Unterminated '{'", open_pos)
                self._emit(
                    TokenType.DESCRIPTION,
                    self.pattern[text_start : self._pos].strip(),
                    text_start,
                )
            elif ch == "{":
                raise self._error("Nested '{' inside parameter")
            else:
                raise self._error(f"Illegal character '{ch}' in parameter")

    def _scan_option(self) -> None:
        start = self._pos
        if self._peek() == "-":
            after = self._peek(2)
            if not after or after.isspace():
                self._emit(TokenType.END_OF_OPTIONS, "--", start)
                self._pos += 2
                return
            self._pos += 2
            self._emit(TokenType.LONG_OPTION, self._read_name("option"), start)

            if not self._at_end() and self._current() == ",":
                self._emit(TokenType.ALIAS_SEPARATOR, ",", self._pos)
                self._pos += 1
                if self._at_end() or self._current() != "-" or self._peek() == "-":
                    raise self._error("Expected a short option like '-f' after ','")
                short_start = self._pos
                self._pos += 1
                self._emit(
                    TokenType.SHORT_OPTION, self._read_name("option"), short_start
                )
        else:
            self._pos += 1
            self._emit(TokenType.SHORT_OPTION, self._read_name("option"), start)

        if not self._at_end() and self._current() == "?":
            self._emit(TokenType.OPTIONAL, "?", self._pos)
            self._pos += 1

        if not self._at_end():
            ch = self._current()
            if not ch.isspace() and ch != "|":
                raise self._error(f"Illegal character '{ch}' in option name")

    def _scan_trailing_description(self) -> None:
        self._emit(TokenType.DESCRIPTION_SEPARATOR, "|", self._pos)
        self._pos += 1
        text_start = self._pos
        end = self._pos
        while end < len(self.pattern):
            if self.pattern[end].isspace():
                # A description ends where the next option or parameter begins
                lookahead = end
                while lookahead < len(self.pattern) and self.pattern[lookahead].isspace():
                    lookahead += 1
                if lookahead < len(self.pattern) and self.pattern[lookahead] in "-{":
                    break
            end += 1
        self._emit(
            TokenType.DESCRIPTION, self.pattern[text_start:end].strip(), text_start
        )
        self._pos = end

    def _scan_repeat(self) -> None:
        if self._pos == 0 or self.pattern[self._pos - 1] != "}":
            raise self._error("'*' outside braces must directly follow an option value")
        self._emit(TokenType.REPEAT, "*", self._pos)
        self._pos += 1

    def _scan_angle_brackets(self) -> None:
        close = self.pattern.find(">", self._pos)
        if close == -1:
            raise self._error("Unexpected character '<'")
        name = self.pattern[self._pos + 1 : close]
        raise self._error(f"Invalid parameter syntax '<{name}>', use '{{{name}}}' instead")


@lru_cache(maxsize=256)
def _tokenize_cached(pattern: str) -> tuple[Token, ...]:
    tokens = PatternLexer(pattern).tokenize()
    logger.debug("Pattern tokenized", pattern=pattern, tokens=dump_tokens(tokens))
    return tuple(tokens)


def tokenize(pattern: str) -> list[Token]:
    """Tokenize a route pattern.

    Args:
        pattern: Route pattern such as ``"deploy {env} --force,-f"``

    Returns:
        Token list terminated by END_OF_INPUT

    Raises:
        LexError: If the pattern contains invalid syntax
    """
    return list(_tokenize_cached(pattern))
