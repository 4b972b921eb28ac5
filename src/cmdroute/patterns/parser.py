"""Recursive-descent parser from pattern tokens to route syntax."""

from collections.abc import Callable
from dataclasses import dataclass

from ..common.logging import get_logger
from ..exceptions import ParseError
from .lexer import tokenize
from .syntax import (
    CatchAllSyntax,
    EndOfOptionsSyntax,
    LiteralSyntax,
    OptionSyntax,
    ParameterSyntax,
    RouteSyntax,
    SegmentSyntax,
    dump_syntax,
)
from .tokens import Token, TokenType

logger = get_logger(__name__)


@dataclass
class _Braced:
    """Fields collected from one ``{...}`` group."""

    name: str
    position: int
    is_catch_all: bool = False
    is_optional: bool = False
    type_name: str | None = None
    description: str | None = None


class PatternParser:
    """Builds a ``RouteSyntax`` from a token stream and checks its rules."""

    def __init__(self, tokens: list[Token], pattern: str = "") -> None:
        if not tokens or tokens[-1].type != TokenType.END_OF_INPUT:
            end = Token(
                TokenType.END_OF_INPUT, "", len(pattern), len(pattern.encode("utf-8"))
            )
            tokens = [*tokens, end]
        self.tokens = tokens
        self.pattern = pattern
        self._index = 0

    def parse(self) -> RouteSyntax:
        """Parse the full token stream.

        Returns:
            Parsed route syntax

        Raises:
            ParseError: If the tokens violate the grammar or a semantic rule
        """
        segments: list[SegmentSyntax] = []
        positions: list[int] = []

        self._accept(TokenType.WHITESPACE)
        while self._peek().type != TokenType.END_OF_INPUT:
            positions.append(self._peek().position)
            segments.append(self._parse_segment())

            following = self._peek()
            if following.type == TokenType.END_OF_INPUT:
                break
            if following.type != TokenType.WHITESPACE:
                raise self._error(
                    f"Expected whitespace between segments, found '{following.value}'",
                    following,
                )
            self._advance()

        self._validate(segments, positions)
        return RouteSyntax(pattern=self.pattern, segments=tuple(segments))

    # -- token cursor ------------------------------------------------------

    def _peek(self, ahead: int = 0) -> Token:
        index = min(self._index + ahead, len(self.tokens) - 1)
        return self.tokens[index]

    def _advance(self) -> Token:
        token = self._peek()
        if token.type != TokenType.END_OF_INPUT:
            self._index += 1
        return token

    def _accept(self, token_type: TokenType) -> Token | None:
        if self._peek().type == token_type:
            return self._advance()
        return None

    def _expect(self, token_type: TokenType, what: str) -> Token:
        token = self._peek()
        if token.type != token_type:
            found = token.value or token.type.value
            raise self._error(f"Expected {what}, found '{found}'", token)
        return self._advance()

    def _error(self, message: str, token: Token | None = None) -> ParseError:
        position = token.position if token is not None else None
        return ParseError(message, self.pattern, position)

    def _accept_description(self) -> str | None:
        if self._accept(TokenType.DESCRIPTION_SEPARATOR) is None:
            return None
        description = self._accept(TokenType.DESCRIPTION)
        return description.value if description is not None else ""

    # -- segments ----------------------------------------------------------

    def _parse_segment(self) -> SegmentSyntax:
        token = self._peek()
        match token.type:
            case TokenType.LITERAL:
                self._advance()
                if self._peek().type == TokenType.DESCRIPTION_SEPARATOR:
                    raise self._error(
                        f"Literal '{token.value}' cannot have a description", self._peek()
                    )
                return LiteralSyntax(token.value)
            case TokenType.LEFT_BRACE:
                return self._parse_parameter()
            case TokenType.LONG_OPTION | TokenType.SHORT_OPTION:
                return self._parse_option()
            case TokenType.END_OF_OPTIONS:
                self._advance()
                return EndOfOptionsSyntax()
            case TokenType.REPEAT:
                raise self._error("'*' is only valid after an option value", token)
            case TokenType.DESCRIPTION_SEPARATOR:
                raise self._error("Description must follow a parameter or option", token)
        raise self._error(f"Unexpected token '{token.value or token.type.value}'", token)

    def _parse_braced(self) -> _Braced:
        self._expect(TokenType.LEFT_BRACE, "'{'")
        is_catch_all = self._accept(TokenType.CATCH_ALL) is not None
        name_token = self._expect(TokenType.PARAMETER_NAME, "parameter name")
        braced = _Braced(
            name=name_token.value,
            position=name_token.position,
            is_catch_all=is_catch_all,
        )

        while True:
            token = self._peek()
            match token.type:
                case TokenType.RIGHT_BRACE:
                    self._advance()
                    return braced
                case TokenType.OPTIONAL:
                    if braced.is_optional:
                        raise self._error("Duplicate '?' in parameter", token)
                    braced.is_optional = True
                    self._advance()
                case TokenType.TYPE_NAME:
                    if braced.type_name is not None:
                        raise self._error("Duplicate type constraint in parameter", token)
                    braced.type_name = token.value
                    self._advance()
                case TokenType.DESCRIPTION_SEPARATOR:
                    braced.description = self._accept_description()
                case _:
                    raise self._error(
                        f"Unexpected token '{token.value or token.type.value}' in parameter",
                        token,
                    )

    def _parse_parameter(self) -> ParameterSyntax | CatchAllSyntax:
        open_token = self._peek()
        braced = self._parse_braced()

        if self._peek().type == TokenType.DESCRIPTION_SEPARATOR:
            if braced.description is not None:
                raise self._error(
                    f"Parameter '{braced.name}' already has a description", self._peek()
                )
            braced.description = self._accept_description()

        if braced.is_catch_all:
            if braced.is_optional:
                raise self._error(
                    f"Catch-all parameter '{braced.name}' cannot be optional", open_token
                )
            return CatchAllSyntax(
                name=braced.name,
                type_constraint=braced.type_name,
                description=braced.description,
            )
        return ParameterSyntax(
            name=braced.name,
            type_constraint=braced.type_name,
            is_optional=braced.is_optional,
            description=braced.description,
        )

    def _parse_option(self) -> OptionSyntax:
        long_form: str | None = None
        short_form: str | None = None

        token = self._advance()
        if token.type == TokenType.LONG_OPTION:
            long_form = token.value
            if self._accept(TokenType.ALIAS_SEPARATOR) is not None:
                short_form = self._expect(TokenType.SHORT_OPTION, "short option").value
        else:
            short_form = token.value

        is_optional = self._accept(TokenType.OPTIONAL) is not None
        description = self._accept_description()

        if not (
            self._peek().type == TokenType.WHITESPACE
            and self._peek(1).type == TokenType.LEFT_BRACE
        ):
            return OptionSyntax(
                long_form=long_form,
                short_form=short_form,
                description=description,
                is_optional=is_optional,
            )

        self._advance()
        value_token = self._peek()
        value = self._parse_braced()
        if value.is_catch_all:
            raise self._error(
                f"Catch-all parameter '{value.name}' cannot be an option value",
                value_token,
            )
        is_repeated = self._accept(TokenType.REPEAT) is not None

        if self._peek().type == TokenType.DESCRIPTION_SEPARATOR:
            if description is not None:
                raise self._error(
                    f"Option '{token.value}' already has a description", self._peek()
                )
            description = self._accept_description()

        return OptionSyntax(
            long_form=long_form,
            short_form=short_form,
            expects_value=True,
            value_is_optional=value.is_optional,
            description=description if description is not None else value.description,
            is_optional=is_optional,
            value_name=value.name,
            value_type=value.type_name,
            is_repeated=is_repeated,
        )

    # -- semantic rules ----------------------------------------------------

    def _validate(self, segments: list[SegmentSyntax], positions: list[int]) -> None:
        if not segments:
            raise self._error("Pattern must contain at least one segment")

        def fail(message: str, index: int) -> ParseError:
            return ParseError(message, self.pattern, positions[index])

        seen_names: set[str] = set()
        seen_forms: set[str] = set()
        for index, segment in enumerate(segments):
            names: list[str] = []
            match segment:
                case ParameterSyntax(name=name) | CatchAllSyntax(name=name):
                    names.append(name)
                case OptionSyntax() as option:
                    if option.value_name is not None:
                        names.append(option.value_name)
                    for form in (
                        f"--{option.long_form}" if option.long_form else None,
                        f"-{option.short_form}" if option.short_form else None,
                    ):
                        if form is None:
                            continue
                        if form in seen_forms:
                            raise fail(f"Duplicate option '{form}'", index)
                        seen_forms.add(form)
            for name in names:
                if name in seen_names:
                    raise fail(f"Duplicate parameter name '{name}'", index)
                seen_names.add(name)

        self._validate_positionals(segments, fail)

    def _validate_positionals(
        self, segments: list[SegmentSyntax], fail: Callable[[str, int], ParseError]
    ) -> None:
        catch_all_index: int | None = None
        has_optional = False
        previous_optional: ParameterSyntax | None = None
        end_of_options_index: int | None = None

        for index, segment in enumerate(segments):
            if end_of_options_index is not None and isinstance(segment, OptionSyntax):
                raise fail("Options cannot be declared after '--'", index)

            match segment:
                case OptionSyntax():
                    continue
                case CatchAllSyntax(name=name):
                    if catch_all_index is not None:
                        raise fail(f"Only one catch-all parameter is allowed, found '{name}'", index)
                    catch_all_index = index
                    previous_optional = None
                    continue
                case EndOfOptionsSyntax():
                    if end_of_options_index is not None:
                        raise fail("'--' may appear only once", index)
                    end_of_options_index = index
                case ParameterSyntax(is_optional=True, name=name):
                    if previous_optional is not None:
                        raise fail(
                            f"Consecutive optional parameters '{previous_optional.name}' "
                            f"and '{name}' are ambiguous",
                            index,
                        )
                    has_optional = True
                    previous_optional = segment
                case ParameterSyntax(name=name) if has_optional:
                    raise fail(
                        f"Required parameter '{name}' cannot follow an optional parameter",
                        index,
                    )
                case _:
                    previous_optional = None

            if catch_all_index is not None:
                catch_all = segments[catch_all_index]
                raise fail(
                    f"Catch-all parameter '{catch_all.name}' must be the last positional segment",
                    catch_all_index,
                )

        if catch_all_index is not None and has_optional:
            raise fail(
                "A catch-all parameter cannot be combined with optional parameters",
                catch_all_index,
            )

        if end_of_options_index is not None:
            rest = segments[end_of_options_index + 1 :]
            if len(rest) != 1 or not isinstance(rest[0], CatchAllSyntax):
                raise fail("'--' must be followed by a catch-all parameter", end_of_options_index)


def parse(tokens: list[Token], pattern: str = "") -> RouteSyntax:
    """Parse a token stream into route syntax.

    Args:
        tokens: Tokens produced by ``tokenize``
        pattern: Source pattern, used for error messages

    Returns:
        Parsed route syntax

    Raises:
        ParseError: If the tokens are not a valid pattern
    """
    syntax = PatternParser(tokens, pattern).parse()
    logger.debug("Pattern parsed", pattern=pattern, syntax=dump_syntax(syntax))
    return syntax


def parse_pattern(pattern: str) -> RouteSyntax:
    """Tokenize and parse a pattern in one step.

    Raises:
        LexError: If the pattern cannot be tokenized
        ParseError: If the pattern is not grammatical
    """
    return parse(tokenize(pattern), pattern)
