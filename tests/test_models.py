"""Tests for coordinates, meta versions and relative paths."""
from pathlib import Path

import pytest

from constants import Scope
from project.models import Coordinate, DependencyEdge, RelativePath, compound_name, meta_version
from project.scope import effective_scope, is_candidate


class TestCoordinate:

    def test_parse_three_fields(self):
        c = Coordinate.parse("org.example:widget:1.2")
        assert (c.group, c.name, c.version, c.type) == ("org.example", "widget", "1.2", "jar")

    def test_parse_with_type(self):
        c = Coordinate.parse("org.example:widget:1.2:pom")
        assert c.type == "pom"
        assert str(c) == "org.example:widget:1.2:pom"

    @pytest.mark.parametrize("text", ["org.example:widget", "a:b:c:d:e", "a::1.0"])
    def test_parse_rejects_bad_input(self, text):
        with pytest.raises(ValueError):
            Coordinate.parse(text)

    def test_key_ignores_type(self):
        jar = Coordinate("g", "a", "1.0")
        pom = Coordinate("g", "a", "1.0", "pom")
        assert jar != pom
        assert jar.key == pom.key

    def test_repository_path(self):
        c = Coordinate("org.example.sub", "widget", "1.2")
        assert c.path == "org/example/sub/widget/1.2"
        assert c.file_name("pom") == "widget-1.2.pom"
        assert c.file_name() == "widget-1.2.jar"

    def test_meta_version_collapses_timestamped_snapshots(self):
        assert meta_version("1.0-20070101.101010-3") == "1.0-SNAPSHOT"
        assert meta_version("1.0-SNAPSHOT") == "1.0-SNAPSHOT"
        assert meta_version("2.1") == "2.1"
        c = Coordinate("g", "a", "1.0-20070101.101010-3").with_meta_version()
        assert c.version == "1.0-SNAPSHOT"


def test_compound_name():
    assert compound_name("org.foo", "org.foo.bar") == "org.foo.bar"
    assert compound_name("org.foo", "org.foo") == "org.foo"
    assert compound_name("org.foo", "foo") == "org.foo"
    assert compound_name("org.foo", "bar") == "org.foo.bar"


class TestRelativePath:

    def test_offset_and_rendering(self):
        pivot = RelativePath(up=2, common_root=Path("/x"), down=("a", "b"))
        assert pivot.offset == 0
        assert pivot.as_posix() == "../../a/b"

    def test_same_directory(self):
        assert RelativePath(0, Path("/x")).as_posix() == "."


class TestScope:

    def test_parse_blank_is_compile(self):
        assert Scope.parse(None) is Scope.COMPILE
        assert Scope.parse("  ") is Scope.COMPILE
        assert Scope.parse("provided") is Scope.PROVIDED

    def test_parse_is_case_sensitive(self):
        with pytest.raises(ValueError):
            Scope.parse("Provided")

    @pytest.mark.parametrize("scope", [Scope.COMPILE, Scope.RUNTIME, Scope.PROVIDED])
    def test_widening_turns_scope_into_provided(self, scope):
        assert effective_scope(scope, widen_scope=True) is Scope.PROVIDED

    @pytest.mark.parametrize("scope", [Scope.TEST, Scope.SYSTEM])
    def test_widening_keeps_test_and_system(self, scope):
        assert effective_scope(scope, widen_scope=True) is scope

    def test_no_widening_by_default(self):
        assert effective_scope(Scope.COMPILE) is Scope.COMPILE

    def test_candidate_requires_provided_and_not_optional(self):
        target = Coordinate("g", "a", "1")
        assert is_candidate(DependencyEdge(target, Scope.PROVIDED))
        assert not is_candidate(DependencyEdge(target, Scope.PROVIDED, optional=True))
        assert not is_candidate(DependencyEdge(target, Scope.COMPILE))
        assert is_candidate(DependencyEdge(target, Scope.COMPILE), widen_scope=True)
        assert not is_candidate(DependencyEdge(target, Scope.TEST), widen_scope=True)
