"""Tests for route compilation and specificity scoring."""

import pytest
from pydantic import ValidationError

from cmdroute import CompiledRoute, RouteKind, RouteMetadata, compile_route
from cmdroute.exceptions import CompileError, LexError, ParseError
from cmdroute.patterns import parse_pattern
from cmdroute.routing import (
    CatchAllMatcher,
    LiteralMatcher,
    OptionMatcher,
    ParameterMatcher,
    compile_syntax,
)


def specificity(pattern: str) -> int:
    return compile_route(pattern).specificity


class TestSpecificity:
    """Test specificity scores"""

    @pytest.mark.parametrize(
        "pattern,expected",
        [
            ("status", 100),
            ("deploy {env}", 110),
            ("deploy {env:int}", 120),
            ("deploy {env?}", 105),
            ("run {*args}", 101),
            ("deploy {env} --force", 160),
            ("deploy {env} --force?", 135),
            ("build --config {mode}", 160),
            ("build --config {mode:int}", 170),
            ("build --level {n?}", 155),
            ("exec -- {*cmd}", 101),
        ],
    )
    def test_scores(self, pattern, expected):
        """Test per-segment weights add up"""
        assert specificity(pattern) == expected

    def test_literal_outranks_parameter(self):
        """Test literal beats parameter at the same position"""
        assert specificity("git status") > specificity("git {command}")

    def test_typed_outranks_untyped(self):
        """Test typed parameter beats untyped"""
        assert specificity("wait {seconds:int}") > specificity("wait {what}")

    def test_required_outranks_optional(self):
        """Test required parameter beats optional"""
        assert specificity("deploy {env}") > specificity("deploy {env?}")

    def test_catch_all_sorts_last(self):
        """Test catch-all loses to an equally shaped parameter route"""
        assert specificity("run {script}") > specificity("run {*args}")


class TestCompileSegments:
    """Test compiled matchers"""

    def test_segment_matchers(self):
        """Test each syntax node becomes its matcher"""
        route = compile_route("deploy {env:int} {*rest} --force,-f")

        literal, param, catch_all, option = route.segments
        assert literal == LiteralMatcher("deploy")
        assert isinstance(param, ParameterMatcher)
        assert param.type_name == "int"
        assert isinstance(catch_all, CatchAllMatcher)
        assert catch_all.type_name is None
        assert isinstance(option, OptionMatcher)
        assert option.forms == frozenset({"--force", "-f"})

    def test_flag_binding_names(self):
        """Test boolean flags bind under their long form in snake case"""
        route = compile_route("git commit --dry-run -v")

        assert route.options[0].binding == "dry_run"
        assert route.options[1].binding == "v"
        assert route.bindings == ("dry_run", "v")

    def test_value_option_binds_value_name(self):
        """Test value options bind under the value name"""
        route = compile_route("build --config,-c {mode}")

        assert route.options[0].binding == "mode"
        assert route.options[0].key == "--config"

    def test_runtime_optionality(self):
        """Test flags and repeated options are always optional"""
        flag, value, optional_value, repeated = compile_route(
            "run --fast --out {o} --log? {l} --tag {t}*"
        ).options

        assert flag.is_optional and not flag.declared_optional
        assert not value.is_optional
        assert optional_value.is_optional and optional_value.declared_optional
        assert repeated.is_optional and repeated.is_repeated

    def test_unknown_type_constraint(self):
        """Test unknown types fail at compile time"""
        with pytest.raises(CompileError, match="Unknown type constraint 'widget'") as exc_info:
            compile_route("make {thing:widget}")

        assert exc_info.value.position == 12

    def test_type_names_are_case_insensitive(self):
        """Test type constraint lookup ignores case"""
        route = compile_route("wait {seconds:Int32}")

        assert route.positionals[1].type_name == "int"

    def test_duplicate_binding_name(self):
        """Test a flag cannot bind under a parameter's name"""
        with pytest.raises(CompileError, match="Duplicate binding name 'force'"):
            compile_route("push {force} --force")

    def test_lex_and_parse_errors_propagate(self):
        """Test compile surfaces earlier stage errors"""
        with pytest.raises(LexError):
            compile_route("deploy {env")
        with pytest.raises(ParseError):
            compile_route("run {*args} extra")

    def test_compile_syntax(self):
        """Test compiling already parsed syntax"""
        route = compile_syntax(parse_pattern("status"))

        assert route.pattern == "status"
        assert route.specificity == 100


class TestMetadataAndAliases:
    """Test route metadata and alias compilation"""

    def test_metadata_keywords(self):
        """Test metadata passed as keywords"""
        route = compile_route(
            "status", name="status", description="Show status", kind=RouteKind.QUERY
        )

        assert route.metadata == RouteMetadata(
            name="status", description="Show status", kind=RouteKind.QUERY
        )

    def test_metadata_both_ways_rejected(self):
        """Test metadata cannot be given twice"""
        with pytest.raises(ValueError, match="not both"):
            compile_route("status", RouteMetadata(), name="status")

    def test_aliases_compile_to_equivalent_routes(self):
        """Test alias patterns share metadata and bindings"""
        route = compile_route(
            "deploy {env} --force,-f",
            aliases=["d {env} --force,-f"],
            kind=RouteKind.COMMAND,
        )

        (alias,) = route.alias_routes
        assert alias.pattern == "d {env} --force,-f"
        assert alias.alias_of == "deploy {env} --force,-f"
        assert alias.metadata.kind == RouteKind.COMMAND
        assert alias.bindings == route.bindings
        assert route.alias_of is None

    def test_alias_must_bind_same_names(self):
        """Test alias binding mismatch"""
        with pytest.raises(CompileError, match="must bind the same names"):
            compile_route("deploy {env}", aliases=["d {target}"])

    def test_invalid_alias_metadata(self):
        """Test empty or duplicate aliases are rejected"""
        with pytest.raises(ValidationError):
            RouteMetadata(aliases=("",))
        with pytest.raises(ValidationError):
            RouteMetadata(aliases=("d {env}", "d {env}"))

    def test_compiled_route_is_frozen(self):
        """Test compiled routes cannot be mutated"""
        route = compile_route("status")

        with pytest.raises(ValidationError):
            route.specificity = 1

        assert isinstance(route, CompiledRoute)
        assert str(route) == "status"
