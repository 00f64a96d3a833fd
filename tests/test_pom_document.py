"""Tests for PomDocument reading and editing."""
import pytest

from constants import Scope
from pom.document import PomDocument
from project.errors import ManifestError
from project.models import Coordinate, DependencyEdge

from conftest import write_pom


def edge(group, artifact, version, scope=Scope.PROVIDED, optional=False):
    return DependencyEdge(Coordinate(group, artifact, version), scope, optional)


def test_read_identity_and_inherited_fields(tmp_path):
    write_pom(tmp_path, "child", group="com.example", version="2.0",
              parent=("com.example", "parent", "2.0"))
    doc = PomDocument.read(tmp_path)
    assert doc.identity == ("com.example", "child", "2.0")
    assert doc.id == "com.example:child:2.0"
    assert doc.packaging == "pom"
    assert doc.relative_path == "../pom.xml"  # Maven default when absent


def test_group_and_version_fall_back_to_parent(tmp_path):
    (tmp_path / "pom.xml").write_text(
        """<project>
  <modelVersion>4.0.0</modelVersion>
  <parent>
    <groupId>org.parent</groupId>
    <artifactId>p</artifactId>
    <version>3.1</version>
  </parent>
  <artifactId>kid</artifactId>
</project>""",
        encoding="utf-8",
    )
    doc = PomDocument.read(tmp_path / "pom.xml")
    assert doc.identity == ("org.parent", "kid", "3.1")
    assert doc.packaging == "jar"


def test_read_missing_pom_raises(tmp_path):
    with pytest.raises(ManifestError):
        PomDocument.read(tmp_path)


def test_read_non_pom_raises(tmp_path):
    (tmp_path / "pom.xml").write_text("<settings/>", encoding="utf-8")
    with pytest.raises(ManifestError):
        PomDocument.read(tmp_path)


def test_matches_artifact_group_and_symbolic_name(tmp_path):
    write_pom(tmp_path, "widget", group="org.example")
    doc = PomDocument.read(tmp_path)
    assert doc.matches("widget")
    assert doc.matches("org.example:widget")
    assert doc.matches("org.example.widget")
    assert not doc.matches("gadget")


class TestModules:

    def test_add_and_remove(self, tmp_path):
        write_pom(tmp_path, "agg", modules=["a"])
        doc = PomDocument.read(tmp_path)
        assert doc.add_module("b") is True
        assert doc.add_module("a") is False
        assert doc.add_module("a", overwrite=True) is True
        doc.write()

        doc = PomDocument.read(tmp_path)
        assert doc.modules == ["a", "b"]
        assert doc.remove_module("a") is True
        assert doc.remove_module("zzz") is False
        assert doc.modules == ["b"]

    def test_add_module_creates_section(self, tmp_path):
        write_pom(tmp_path, "agg")
        doc = PomDocument.read(tmp_path)
        doc.add_module("new")
        doc.write()
        assert PomDocument.read(tmp_path).modules == ["new"]


class TestDependencies:

    def test_dependencies_are_parsed(self, tmp_path):
        write_pom(tmp_path, "x", dependencies=[
            ("org.osgi", "osgi.core", "4.1.0", "provided"),
            ("junit", "junit", "4.12", "test"),
        ])
        deps = PomDocument.read(tmp_path).dependencies
        assert deps == [
            edge("org.osgi", "osgi.core", "4.1.0"),
            edge("junit", "junit", "4.12", Scope.TEST),
        ]

    def test_repeated_add_is_idempotent(self, tmp_path):
        write_pom(tmp_path, "x")
        doc = PomDocument.read(tmp_path)
        dep = edge("org.example", "bundle", "1.0")
        assert doc.add_dependency(dep) is True
        assert doc.add_dependency(dep) is False
        assert doc.dependencies == [dep]

    def test_overwrite_replaces_in_place(self, tmp_path):
        write_pom(tmp_path, "x", dependencies=[
            ("org.example", "first", "1.0", "compile"),
            ("org.example", "second", "1.0", "compile"),
        ])
        doc = PomDocument.read(tmp_path)
        replacement = edge("org.example", "first", "1.0", Scope.PROVIDED, optional=True)
        assert doc.add_dependency(replacement, overwrite=True) is True
        doc.write()

        deps = PomDocument.read(tmp_path).dependencies
        assert len(deps) == 2
        assert deps[0] == replacement
        assert deps[1].target.name == "second"

    def test_remove_matches_any_version(self, tmp_path):
        write_pom(tmp_path, "x", dependencies=[("org.example", "b", "1.0", "provided")])
        doc = PomDocument.read(tmp_path)
        assert doc.remove_dependency(edge("org.example", "b", "9.9")) is True
        assert doc.dependencies == []
        assert doc.remove_dependency(edge("org.example", "b", "1.0")) is False


class TestParent:

    def test_set_parent_respects_overwrite(self, tmp_path):
        write_pom(tmp_path / "p", "p", group="org.p", version="5")
        write_pom(tmp_path / "q", "q", group="org.q", version="6")
        write_pom(tmp_path / "c", "c", parent=("org.p", "p", "5"))
        child = PomDocument.read(tmp_path / "c")
        other = PomDocument.read(tmp_path / "q")

        assert child.set_parent(other, "../q/pom.xml") is False
        assert child.set_parent(other, "../q/pom.xml", overwrite=True) is True
        child.write()

        child = PomDocument.read(tmp_path / "c")
        assert child.parent_coordinate.key == ("org.q", "q", "6")
        assert child.relative_path == "../q/pom.xml"

    def test_new_parent_is_placed_after_model_version(self, tmp_path):
        write_pom(tmp_path / "p", "p")
        write_pom(tmp_path / "c", "c")
        child = PomDocument.read(tmp_path / "c")
        assert child.set_parent(PomDocument.read(tmp_path / "p"), "../p/pom.xml") is True
        child.write()
        text = (tmp_path / "c" / "pom.xml").read_text(encoding="utf-8")
        assert text.index("<modelVersion>") < text.index("<parent>") < text.index("<artifactId>c")

    def test_adjust_relative_path(self, tmp_path):
        write_pom(tmp_path, "c", parent=("g", "p", "1"), relative_path="../pom.xml")
        doc = PomDocument.read(tmp_path)
        assert doc.adjust_relative_path(2) is True
        assert doc.relative_path == "../../../pom.xml"
        assert doc.adjust_relative_path(-1) is True
        assert doc.relative_path == "../../pom.xml"
        assert doc.adjust_relative_path(0) is False

    def test_adjust_relative_path_materializes_default(self, tmp_path):
        write_pom(tmp_path, "c", parent=("g", "p", "1"))
        doc = PomDocument.read(tmp_path)
        doc.adjust_relative_path(1)
        assert doc.relative_path == "../../pom.xml"

    def test_adjust_relative_path_without_parent(self, tmp_path):
        write_pom(tmp_path, "c")
        assert PomDocument.read(tmp_path).adjust_relative_path(1) is False

    def test_adjust_relative_path_cannot_go_negative(self, tmp_path):
        write_pom(tmp_path, "c", parent=("g", "p", "1"), relative_path="../pom.xml")
        with pytest.raises(ManifestError):
            PomDocument.read(tmp_path).adjust_relative_path(-2)


def test_write_keeps_default_namespace(tmp_path):
    write_pom(tmp_path, "x")
    doc = PomDocument.read(tmp_path)
    doc.add_module("m")
    doc.write()
    text = (tmp_path / "pom.xml").read_text(encoding="utf-8")
    assert 'xmlns="http://maven.apache.org/POM/4.0.0"' in text
    assert "ns0:" not in text


def test_create_and_parse_string(tmp_path):
    doc = PomDocument.create(tmp_path / "new", "org.example", "agg", "1.0")
    doc.write()
    again = PomDocument.parse_string((tmp_path / "new" / "pom.xml").read_text(encoding="utf-8"))
    assert again.identity == ("org.example", "agg", "1.0")
    assert again.is_aggregator()


class TestProperties:

    def test_set_property_creates_section(self, tmp_path):
        write_pom(tmp_path, "x")
        doc = PomDocument.read(tmp_path)

        assert doc.set_property("bundle.symbolicName", "com.example.x")
        assert not doc.set_property("bundle.symbolicName", "com.example.x")
        doc.write()

        assert PomDocument.read(tmp_path).properties == {"bundle.symbolicName": "com.example.x"}

    def test_set_property_respects_overwrite(self, tmp_path):
        write_pom(tmp_path, "x")
        doc = PomDocument.read(tmp_path)
        doc.set_property("bundle.symbolicName", "old")

        assert not doc.set_property("bundle.symbolicName", "new", overwrite=False)
        assert doc.properties["bundle.symbolicName"] == "old"
        assert doc.set_property("bundle.symbolicName", "new")
        assert doc.properties["bundle.symbolicName"] == "new"
