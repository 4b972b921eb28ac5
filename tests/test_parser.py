"""Tests for the route pattern parser."""

import pytest

from cmdroute.exceptions import ParseError
from cmdroute.patterns import (
    CatchAllSyntax,
    EndOfOptionsSyntax,
    LiteralSyntax,
    OptionSyntax,
    ParameterSyntax,
    dump_syntax,
    parse,
    parse_pattern,
    tokenize,
)


class TestParseSegments:
    """Test parsing of valid patterns"""

    def test_literal_parameter_and_option(self):
        """Test a typical command pattern"""
        syntax = parse_pattern("deploy {env} --force,-f")

        assert syntax.pattern == "deploy {env} --force,-f"
        assert syntax.segments == (
            LiteralSyntax("deploy"),
            ParameterSyntax("env"),
            OptionSyntax(long_form="force", short_form="f"),
        )

    def test_parse_is_idempotent(self):
        """Test parsing the same pattern twice yields equal syntax"""
        pattern = "build {target:int?} --config,-c {mode} --verbose"

        assert parse_pattern(pattern) == parse_pattern(pattern)
        assert parse(tokenize(pattern), pattern) == parse_pattern(pattern)

    def test_typed_optional_parameter(self):
        """Test '?' is accepted before or after the type"""
        expected = ParameterSyntax("count", type_constraint="int", is_optional=True)

        assert parse_pattern("{count:int?}").segments == (expected,)
        assert parse_pattern("{count?:int}").segments == (expected,)

    def test_catch_all(self):
        """Test catch-all with type constraint"""
        syntax = parse_pattern("sum {*nums:int}")

        assert syntax.segments[1] == CatchAllSyntax("nums", type_constraint="int")

    def test_value_option(self):
        """Test option taking a value"""
        option = parse_pattern("build --config,-c {mode}").segments[1]

        assert option == OptionSyntax(
            long_form="config",
            short_form="c",
            expects_value=True,
            value_name="mode",
        )
        assert option.key == "--config"

    def test_optional_option_with_optional_typed_value(self):
        """Test '?' on both the option and its value"""
        option = parse_pattern("run --level? {n:int?}").segments[1]

        assert option.is_optional
        assert option.value_is_optional
        assert option.value_type == "int"

    def test_repeated_option(self):
        """Test '*' after an option value"""
        option = parse_pattern("docker --env {e}*").segments[1]

        assert option.is_repeated
        assert option.expects_value

    def test_short_only_option(self):
        """Test option declared only by its short form"""
        option = parse_pattern("ls -l").segments[1]

        assert option.long_form is None
        assert option.short_form == "l"
        assert option.key == "-l"

    def test_descriptions(self):
        """Test descriptions on parameters and options"""
        syntax = parse_pattern("deploy {env|Target environment} --force,-f|Skip confirmation")

        assert syntax.segments[1].description == "Target environment"
        assert syntax.segments[2].description == "Skip confirmation"

    def test_value_description_becomes_option_description(self):
        """Test description inside the value braces"""
        option = parse_pattern("build --config {mode|Build mode}").segments[1]

        assert option.description == "Build mode"

    def test_end_of_options(self):
        """Test '--' followed by a catch-all"""
        syntax = parse_pattern("exec --verbose -- {*cmd}")

        assert syntax.segments[2] == EndOfOptionsSyntax()
        assert syntax.positionals == (
            LiteralSyntax("exec"),
            EndOfOptionsSyntax(),
            CatchAllSyntax("cmd"),
        )
        assert len(syntax.options) == 1

    def test_options_before_positionals(self):
        """Test options may be declared anywhere"""
        syntax = parse_pattern("--verbose status")

        assert syntax.positionals == (LiteralSyntax("status"),)

    def test_dump_syntax(self):
        """Test debug rendering"""
        rendered = dump_syntax(parse_pattern("get {id:int} --all"))

        assert rendered == "LiteralSyntax[get] ParameterSyntax[{id:int}] OptionSyntax[--all]"


class TestParseErrors:
    """Test grammar and semantic violations raise ParseError"""

    def test_catch_all_not_last(self):
        """Test catch-all followed by another positional"""
        with pytest.raises(ParseError, match="must be the last positional") as exc_info:
            parse_pattern("run {*args} extra")

        assert exc_info.value.position == 4

    def test_options_after_catch_all_allowed(self):
        """Test options are not positional"""
        syntax = parse_pattern("run {*args} --verbose")

        assert len(syntax.options) == 1

    def test_optional_catch_all(self):
        """Test catch-all cannot be optional"""
        with pytest.raises(ParseError, match="cannot be optional"):
            parse_pattern("run {*args?}")

    def test_duplicate_long_option(self):
        """Test duplicate long form"""
        with pytest.raises(ParseError, match="Duplicate option '--force'"):
            parse_pattern("push --force --force")

    def test_duplicate_short_alias(self):
        """Test duplicate short alias across options"""
        with pytest.raises(ParseError, match="Duplicate option '-f'"):
            parse_pattern("push --force,-f --file,-f {path}")

    def test_duplicate_parameter_name(self):
        """Test duplicate names among positionals and option values"""
        with pytest.raises(ParseError, match="Duplicate parameter name 'a'"):
            parse_pattern("cp {a} {a}")
        with pytest.raises(ParseError, match="Duplicate parameter name 'src'"):
            parse_pattern("cp {src} --from {src}")

    def test_optional_before_required(self):
        """Test required parameter after an optional one"""
        with pytest.raises(ParseError, match="cannot follow an optional parameter"):
            parse_pattern("deploy {env?} {region}")

    def test_consecutive_optional_parameters(self):
        """Test adjacent optional parameters"""
        with pytest.raises(ParseError, match="Consecutive optional parameters"):
            parse_pattern("deploy {env?} {region?}")

    def test_catch_all_with_optional(self):
        """Test catch-all combined with optional parameters"""
        with pytest.raises(ParseError, match="cannot be combined with optional"):
            parse_pattern("run {script?} {*args}")

    def test_catch_all_as_option_value(self):
        """Test catch-all inside an option"""
        with pytest.raises(ParseError, match="cannot be an option value"):
            parse_pattern("run --files {*files}")

    def test_end_of_options_without_catch_all(self):
        """Test '--' must be followed by a catch-all"""
        with pytest.raises(ParseError, match="must be followed by a catch-all"):
            parse_pattern("exec -- {cmd}")

    def test_option_after_end_of_options(self):
        """Test no options after '--'"""
        with pytest.raises(ParseError, match="Options cannot be declared after '--'"):
            parse_pattern("exec -- {*cmd} --verbose")

    def test_description_on_literal(self):
        """Test literals do not take descriptions"""
        with pytest.raises(ParseError, match="cannot have a description"):
            parse_pattern("status|Show status")

    def test_empty_pattern(self):
        """Test empty and whitespace-only patterns"""
        with pytest.raises(ParseError, match="at least one segment"):
            parse_pattern("")
        with pytest.raises(ParseError, match="at least one segment"):
            parse_pattern("   ")

    def test_segments_must_be_separated(self):
        """Test segments glued together"""
        with pytest.raises(ParseError, match="Expected whitespace between segments"):
            parse_pattern("deploy{env}")

    def test_error_message_includes_pattern(self):
        """Test error text names the pattern and offset"""
        with pytest.raises(ParseError) as exc_info:
            parse_pattern("cp {a} {a}")

        assert "cp {a} {a}" in str(exc_info.value)
        assert exc_info.value.offset == 7
