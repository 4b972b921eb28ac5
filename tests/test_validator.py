"""Tests for the overlap and ambiguity validator."""

import pytest

from cmdroute import (
    DiagnosticKind,
    RouteTableConfig,
    build_table,
    compile_route,
    structure_signature,
    validate,
)
from cmdroute.routing.validator import required_signature, type_signature


def diagnostics_for(*patterns: str):
    return validate([compile_route(pattern) for pattern in patterns])


def kinds(diagnostics) -> list[DiagnosticKind]:
    return [diagnostic.kind for diagnostic in diagnostics]


class TestSignatures:
    """Test structure signatures"""

    @pytest.mark.parametrize(
        "pattern,expected",
        [
            ("deploy {env:int} --force,-f", "deploy {P} --force"),
            ("run {*args}", "run {*}"),
            ("get {id?}", "get {P?}"),
            ("build --config {mode}", "build --config {P}"),
            ("build --log? {level?}", "build --log? {P?}"),
            ("docker --env {e}*", "docker --env? {P}*"),
            ("exec -- {*cmd}", "exec -- {*}"),
            ("ls -l", "ls -l"),
        ],
    )
    def test_structure_signature(self, pattern, expected):
        """Test names and types are erased"""
        assert structure_signature(compile_route(pattern)) == expected

    def test_options_are_order_independent(self):
        """Test option declaration order does not change the signature"""
        first = compile_route("cp {src} --force --recursive")
        second = compile_route("cp {dst} --recursive --force")

        assert structure_signature(first) == structure_signature(second)

    def test_required_signature(self):
        """Test optional parts are left out"""
        route = compile_route("deploy {env} {region?} --force --config {c}")

        assert required_signature(route) == "deploy {P} --config {P}"

    def test_type_signature(self):
        """Test types of positionals then option values"""
        route = compile_route("get {id:int} --page {p:int} --all")

        assert type_signature(route) == ("int", "int")


class TestStructureGroups:
    """Test duplicate and ambiguous route detection"""

    def test_single_route_is_clean(self):
        """Test one route produces no diagnostics"""
        assert diagnostics_for("get {id}") == []

    def test_distinct_literals_are_clean(self):
        """Test different literal commands do not overlap"""
        assert diagnostics_for("git status", "git log", "git {command}") == []

    def test_types_only_differ(self):
        """Test routes differing only by type are ambiguous"""
        diagnostics = diagnostics_for("get {id:int}", "get {id:guid}")

        assert kinds(diagnostics) == [DiagnosticKind.AMBIGUOUS_TYPES]
        assert diagnostics[0].patterns == ("get {id:int}", "get {id:guid}")
        assert diagnostics[0].signature == "get {P}"

    def test_typed_and_untyped_are_ambiguous(self):
        """Test typed vs untyped counts as a type difference"""
        diagnostics = diagnostics_for("get {id}", "get {id:int}")

        assert kinds(diagnostics) == [DiagnosticKind.AMBIGUOUS_TYPES]

    def test_identical_structure_is_duplicate(self):
        """Test routes differing only by names are duplicates"""
        diagnostics = diagnostics_for("get {id}", "get {name}")

        assert kinds(diagnostics) == [DiagnosticKind.DUPLICATE_ROUTE]
        assert diagnostics[0].patterns == ("get {id}", "get {name}")
        assert "only 'get {id}' can ever match" in diagnostics[0].message

    def test_mixed_group(self):
        """Test duplicates inside an ambiguous group"""
        diagnostics = diagnostics_for("get {a:int}", "get {b:int}", "get {c:guid}")

        assert sorted(kinds(diagnostics)) == sorted(
            [DiagnosticKind.DUPLICATE_ROUTE, DiagnosticKind.AMBIGUOUS_TYPES]
        )
        ambiguous = next(
            d for d in diagnostics if d.kind == DiagnosticKind.AMBIGUOUS_TYPES
        )
        assert len(ambiguous.patterns) == 3

    def test_option_value_types(self):
        """Test option value types take part in ambiguity"""
        diagnostics = diagnostics_for("set --level {n:int}", "set --level {n}")

        assert kinds(diagnostics) == [DiagnosticKind.AMBIGUOUS_TYPES]

    def test_same_pattern_registered_twice(self):
        """Test two registrations of one pattern are duplicates"""
        diagnostics = diagnostics_for("status", "status")

        assert kinds(diagnostics) == [DiagnosticKind.DUPLICATE_ROUTE]
        assert diagnostics[0].patterns == ("status", "status")

    def test_same_pattern_with_options_registered_twice(self, build_routes):
        """Test duplicate registrations are reported from a built table"""
        table = build_routes("deploy {env} --force", "deploy {env} --force")

        diagnostics = table.validate()

        assert kinds(diagnostics) == [DiagnosticKind.DUPLICATE_ROUTE]
        assert diagnostics[0].signature == "deploy {P} --force"

    def test_same_route_object_twice(self):
        """Test passing one compiled route twice is still a duplicate"""
        route = compile_route("status")

        assert kinds(validate([route, route])) == [DiagnosticKind.DUPLICATE_ROUTE]

    def test_route_duplicating_another_routes_alias(self):
        """Test a primary route is compared with aliases of other routes"""
        listing = compile_route("list {*items}", aliases=["ls {*items}"])
        short = compile_route("ls {*paths}")

        diagnostics = validate([listing, *listing.alias_routes, short])

        assert kinds(diagnostics) == [DiagnosticKind.DUPLICATE_ROUTE]
        assert diagnostics[0].patterns == ("ls {*items}", "ls {*paths}")

    def test_alias_duplicates_in_built_table(self):
        """Test alias conflicts are found in a built table"""
        table = build_table(
            [
                compile_route("ls {*paths}"),
                compile_route("list {dir} {*items}", aliases=["ls {dir} {*items}"]),
            ],
            RouteTableConfig(validate_on_build=False),
        )

        assert table.validate() == []

        table = build_table(
            [
                compile_route("ls {dir} {*paths}"),
                compile_route("list {dir} {*items}", aliases=["ls {dir} {*items}"]),
            ],
            RouteTableConfig(validate_on_build=False),
        )

        (diagnostic,) = table.validate()
        assert diagnostic.kind == DiagnosticKind.DUPLICATE_ROUTE
        assert diagnostic.patterns == ("ls {dir} {*paths}", "ls {dir} {*items}")

    def test_option_order_duplicate(self):
        """Test reordered options are duplicates"""
        diagnostics = diagnostics_for(
            "cp {src} --force --recursive", "cp {dst} --recursive --force"
        )

        assert kinds(diagnostics) == [DiagnosticKind.DUPLICATE_ROUTE]


class TestUnreachableRoutes:
    """Test shadowed route detection"""

    def test_catch_all_shadows_bare_literal(self):
        """Test 'git {*args}' outranks and covers 'git'"""
        (diagnostic,) = diagnostics_for("git", "git {*args}")

        assert diagnostic.kind == DiagnosticKind.UNREACHABLE_ROUTE
        assert diagnostic.patterns == ("git", "git {*args}")
        assert diagnostic.shadowed_by == "git {*args}"

    def test_trailing_optional_shadows(self):
        """Test optional parameter route covers its required-only twin"""
        (diagnostic,) = diagnostics_for("deploy {env}", "deploy {env} {region?}")

        assert diagnostic.kind == DiagnosticKind.UNREACHABLE_ROUTE
        assert diagnostic.patterns[0] == "deploy {env}"

    def test_optional_flag_shadows(self):
        """Test extra boolean flag does not prevent shadowing"""
        (diagnostic,) = diagnostics_for("build", "build --verbose")

        assert diagnostic.shadowed_by == "build --verbose"

    def test_partial_overlap_is_not_reported(self):
        """Test a route accepting more arguments is not shadowed"""
        assert diagnostics_for("get {id} {name?}", "get {id} --all") == []

    def test_required_option_prevents_shadowing(self):
        """Test routes with different required options do not shadow"""
        assert diagnostics_for("build --config {mode}", "build") == []

    def test_value_option_can_reject_input(self):
        """Test higher route with a value option does not cover positionals"""
        assert diagnostics_for("cmd {x}", "cmd {x} --tag? {t}") == []

    def test_aliases_are_not_compared_with_each_other(self):
        """Test alias routes of one primary are one family"""
        route = compile_route("list {*items}", aliases=["ls {*items}"])

        assert validate([route, *route.alias_routes]) == []

    def test_alias_ranked_above_its_primary(self):
        """Test an alias sorted before its primary stays in its family"""
        route = compile_route("get {id}", aliases=["get {id:int}"])
        table = build_table([route], RouteTableConfig(validate_on_build=False))

        assert [entry.pattern for entry in table] == ["get {id:int}", "get {id}"]
        assert table.validate() == []


class TestValidatorDoesNotChangeMatching:
    """Test diagnostics are informational"""

    def test_table_still_matches(self, build_routes):
        """Test first route still wins after validation"""
        table = build_routes("get {id}", "get {name}")

        assert table.validate()
        assert table.match(["get", "7"]).values == {"id": "7"}
