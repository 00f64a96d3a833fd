"""Read/modify/write access to a single pom.xml.

Wraps ``xml.etree.ElementTree`` so callers never touch elements directly.
Both namespaced (``http://maven.apache.org/POM/4.0.0``) and bare POMs are
supported; the namespace found on read is reused for every element added.
"""
from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional, Tuple, Union

from constants import Constants, Scope
from common.logging_utils import extra_context, is_debug_enabled
from project.errors import ManifestError
from project.models import Coordinate, DependencyEdge, compound_name

logger = logging.getLogger(__name__)

ET.register_namespace("", Constants.POM_NAMESPACE)
ET.register_namespace("xsi", "http://www.w3.org/2001/XMLSchema-instance")

PathLike = Union[str, os.PathLike]

_UP = "../"


def pom_file(path: PathLike) -> Path:
    """Return the pom.xml location for a directory or file path."""
    p = Path(path)
    if p.is_dir() or p.suffix != ".xml":
        return p / Constants.POM_XML_FILE
    return p


def has_pom(directory: PathLike) -> bool:
    return (Path(directory) / Constants.POM_XML_FILE).is_file()


class PomDocument:
    """In-memory POM bound to the file it was read from."""

    def __init__(self, path: PathLike, tree: ET.ElementTree):
        self.path = Path(path)
        self._tree = tree
        self._root = tree.getroot()
        tag = self._root.tag
        self._ns = tag[1:tag.index("}")] if tag.startswith("{") else ""

    # ---------- lifecycle ----------

    @classmethod
    def read(cls, path: PathLike) -> "PomDocument":
        """Parse the POM in ``path`` (a directory or a pom file).

        Raises:
            ManifestError: the file is missing or is not a POM.
        """
        location = pom_file(path)
        parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
        try:
            tree = ET.parse(location, parser=parser)
        except (OSError, ET.ParseError) as exc:
            raise ManifestError(f"Unable to read POM {location}: {exc}") from exc
        doc = cls(location, tree)
        if doc._local(doc._root.tag) != "project":
            raise ManifestError(f"{location} is not a Maven POM")
        return doc

    @classmethod
    def parse_string(cls, text: str, origin: PathLike = Constants.POM_XML_FILE) -> "PomDocument":
        """Parse POM text fetched from elsewhere; ``origin`` is used for messages only."""
        parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
        try:
            parser.feed(text)
            root = parser.close()
        except ET.ParseError as exc:
            raise ManifestError(f"Unable to parse POM {origin}: {exc}") from exc
        doc = cls(origin, ET.ElementTree(root))
        if doc._local(root.tag) != "project":
            raise ManifestError(f"{origin} is not a Maven POM")
        return doc

    @classmethod
    def create(
        cls,
        path: PathLike,
        group_id: str,
        artifact_id: str,
        version: str,
        packaging: str = Constants.AGGREGATOR_PACKAGING,
    ) -> "PomDocument":
        """Build a new, unsaved POM skeleton at ``path``."""
        root = ET.Element(f"{{{Constants.POM_NAMESPACE}}}project")
        doc = cls(pom_file(path), ET.ElementTree(root))
        doc._set_text(root, "modelVersion", "4.0.0")
        doc._set_text(root, "groupId", group_id)
        doc._set_text(root, "artifactId", artifact_id)
        doc._set_text(root, "version", version)
        doc._set_text(root, "packaging", packaging)
        return doc

    def write(self) -> None:
        """Persist to ``self.path``.

        Raises:
            ManifestError: the file cannot be written.
        """
        ET.indent(self._tree, space="  ")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._tree.write(self.path, encoding="UTF-8", xml_declaration=True)
        except OSError as exc:
            raise ManifestError(f"Unable to write POM {self.path}: {exc}") from exc
        if is_debug_enabled(logger):
            logger.debug("POM written", extra=extra_context(
                event="write", component="pom", action="write", target=str(self.path)
            ))

    @property
    def basedir(self) -> Path:
        return self.path.parent

    # ---------- element helpers ----------

    def _q(self, tag: str) -> str:
        return f"{{{self._ns}}}{tag}" if self._ns else tag

    @staticmethod
    def _local(tag) -> str:
        if not isinstance(tag, str):
            return ""
        return tag.rsplit("}", 1)[-1]

    def _find(self, parent: ET.Element, path: str) -> Optional[ET.Element]:
        return parent.find("/".join(self._q(p) for p in path.split("/")))

    def _text(self, parent: Optional[ET.Element], path: str) -> Optional[str]:
        if parent is None:
            return None
        node = self._find(parent, path)
        if node is None or node.text is None:
            return None
        return node.text.strip() or None

    def _set_text(self, parent: ET.Element, tag: str, value: str) -> ET.Element:
        node = parent.find(self._q(tag))
        if node is None:
            node = ET.SubElement(parent, self._q(tag))
        node.text = value
        return node

    def _section(self, tag: str, create: bool = False) -> Optional[ET.Element]:
        node = self._root.find(self._q(tag))
        if node is None and create:
            node = ET.SubElement(self._root, self._q(tag))
        return node

    # ---------- identity ----------

    @property
    def group_id(self) -> Optional[str]:
        return self._text(self._root, "groupId") or self._text(self._root, "parent/groupId")

    @property
    def artifact_id(self) -> Optional[str]:
        return self._text(self._root, "artifactId")

    @property
    def version(self) -> Optional[str]:
        return self._text(self._root, "version") or self._text(self._root, "parent/version")

    @property
    def packaging(self) -> str:
        return self._text(self._root, "packaging") or Constants.DEFAULT_TYPE

    @property
    def name(self) -> Optional[str]:
        return self._text(self._root, "name")

    @property
    def identity(self) -> Tuple[Optional[str], Optional[str], Optional[str]]:
        return (self.group_id, self.artifact_id, self.version)

    @property
    def id(self) -> str:
        return ":".join(part or "?" for part in self.identity)

    @property
    def coordinate(self) -> Coordinate:
        group, artifact, version = self.identity
        return Coordinate(group or "", artifact or "", version or "")

    @property
    def symbolic_name(self) -> str:
        return compound_name(self.group_id or "", self.artifact_id or "")

    def matches(self, name: str) -> bool:
        """True when ``name`` is this POM's artifactId, group:artifact or symbolic name."""
        group, artifact = self.group_id, self.artifact_id
        if not artifact:
            return False
        return name in (artifact, f"{group}:{artifact}", self.symbolic_name)

    def is_bundle_project(self) -> bool:
        return self.packaging == Constants.BUNDLE_PACKAGING

    def is_aggregator(self) -> bool:
        return self.packaging == Constants.AGGREGATOR_PACKAGING

    # ---------- modules ----------

    @property
    def modules(self) -> List[str]:
        section = self._section("modules")
        if section is None:
            return []
        return [
            node.text.strip()
            for node in section.findall(self._q("module"))
            if node.text and node.text.strip()
        ]

    def add_module(self, module: str, overwrite: bool = False) -> bool:
        """Add ``module`` to the module list; returns True when the list changed.

        An existing entry is left alone unless ``overwrite`` is set, in which
        case it is rewritten in place.
        """
        section = self._section("modules", create=True)
        for node in section.findall(self._q("module")):
            if (node.text or "").strip() == module:
                if not overwrite:
                    return False
                node.text = module
                return True
        ET.SubElement(section, self._q("module")).text = module
        return True

    def remove_module(self, module: str) -> bool:
        section = self._section("modules")
        if section is None:
            return False
        removed = False
        for node in list(section.findall(self._q("module"))):
            if (node.text or "").strip() == module:
                section.remove(node)
                removed = True
        return removed

    # ---------- dependencies ----------

    def _dependency_nodes(self, section_path: str = "dependencies") -> List[ET.Element]:
        section = self._find(self._root, section_path)
        if section is None:
            return []
        return section.findall(self._q("dependency"))

    def _edge(self, node: ET.Element) -> Optional[DependencyEdge]:
        group = self._text(node, "groupId")
        artifact = self._text(node, "artifactId")
        if not group or not artifact:
            return None
        target = Coordinate(
            group,
            artifact,
            self._text(node, "version") or "",
            self._text(node, "type") or Constants.DEFAULT_TYPE,
        )
        try:
            scope = Scope.parse(self._text(node, "scope"))
        except ValueError:
            logger.warning("Unknown scope on %s in %s", target, self.path)
            scope = Scope.COMPILE
        optional = (self._text(node, "optional") or "false").lower() == "true"
        return DependencyEdge(target, scope, optional)

    @property
    def dependencies(self) -> List[DependencyEdge]:
        edges = []
        for node in self._dependency_nodes():
            edge = self._edge(node)
            if edge is not None:
                edges.append(edge)
        return edges

    def text(self, path: str) -> Optional[str]:
        """Raw text of an element below <project>, e.g. ``parent/version``."""
        return self._text(self._root, path)

    @property
    def properties(self) -> dict:
        section = self._section("properties")
        if section is None:
            return {}
        return {
            self._local(node.tag): (node.text or "").strip()
            for node in section
            if isinstance(node.tag, str)
        }

    def set_property(self, name: str, value: str, overwrite: bool = True) -> bool:
        """Set ``<properties><name>``; returns True when the POM changed."""
        section = self._section("properties", create=True)
        node = section.find(self._q(name))
        if node is not None and ((node.text or "").strip() == value or not overwrite):
            return False
        self._set_text(section, name, value)
        return True

    def raw_dependencies(self, section_path: str = "dependencies") -> List[dict]:
        """Dependency entries as uninterpolated text fields (for effective-POM building)."""
        fields = ("groupId", "artifactId", "version", "type", "classifier", "scope", "optional")
        return [
            {f: self._text(node, f) for f in fields}
            for node in self._dependency_nodes(section_path)
        ]

    def _fill_dependency(self, node: ET.Element, edge: DependencyEdge) -> None:
        for child in list(node):
            node.remove(child)
        self._set_text(node, "groupId", edge.target.group)
        self._set_text(node, "artifactId", edge.target.name)
        if edge.target.version:
            self._set_text(node, "version", edge.target.version)
        if edge.target.type != Constants.DEFAULT_TYPE:
            self._set_text(node, "type", edge.target.type)
        if edge.scope is not Scope.COMPILE:
            self._set_text(node, "scope", edge.scope.value)
        if edge.optional:
            self._set_text(node, "optional", "true")

    def find_dependency(self, edge: DependencyEdge) -> Optional[DependencyEdge]:
        for existing in self.dependencies:
            if existing.key == edge.key:
                return existing
        return None

    def add_dependency(self, edge: DependencyEdge, overwrite: bool = False) -> bool:
        """Record ``edge``; returns True when the dependency list changed.

        A dependency with the same group/artifact/version is kept as is unless
        ``overwrite`` is set, in which case it is replaced at its position.
        """
        for node in self._dependency_nodes():
            existing = self._edge(node)
            if existing is not None and existing.key == edge.key:
                if not overwrite:
                    return False
                self._fill_dependency(node, edge)
                return True
        section = self._section("dependencies", create=True)
        self._fill_dependency(ET.SubElement(section, self._q("dependency")), edge)
        return True

    def remove_dependency(self, edge: DependencyEdge) -> bool:
        """Drop every dependency on the edge's group/artifact, whatever its version."""
        section = self._section("dependencies")
        if section is None:
            return False
        removed = False
        for node in list(section.findall(self._q("dependency"))):
            existing = self._edge(node)
            if existing is not None and (existing.target.group, existing.target.name) == (
                edge.target.group, edge.target.name
            ):
                section.remove(node)
                removed = True
        return removed

    # ---------- parent ----------

    @property
    def parent_coordinate(self) -> Optional[Coordinate]:
        parent = self._section("parent")
        if parent is None:
            return None
        return Coordinate(
            self._text(parent, "groupId") or "",
            self._text(parent, "artifactId") or "",
            self._text(parent, "version") or "",
            Constants.AGGREGATOR_PACKAGING,
        )

    @property
    def relative_path(self) -> Optional[str]:
        """Parent relative path, with Maven's default when the element is absent."""
        parent = self._section("parent")
        if parent is None:
            return None
        node = parent.find(self._q("relativePath"))
        if node is None:
            return Constants.DEFAULT_RELATIVE_PATH
        return (node.text or "").strip()

    def set_parent(self, parent: "PomDocument", relative_path: Optional[str] = None,
                   overwrite: bool = False) -> bool:
        """Point this POM's <parent> at ``parent``.

        An existing parent is only replaced when ``overwrite`` is set.
        """
        node = self._section("parent")
        if node is not None and not overwrite:
            return False
        if node is None:
            node = ET.Element(self._q("parent"))
            model = self._root.find(self._q("modelVersion"))
            index = list(self._root).index(model) + 1 if model is not None else 0
            self._root.insert(index, node)
        for child in list(node):
            node.remove(child)
        group, artifact, version = parent.identity
        self._set_text(node, "groupId", group or "")
        self._set_text(node, "artifactId", artifact or "")
        self._set_text(node, "version", version or "")
        if relative_path:
            self._set_text(node, "relativePath", relative_path)
        return True

    def adjust_relative_path(self, offset: int) -> bool:
        """Add (positive) or remove (negative) ``offset`` leading ``../`` steps.

        Returns False when there is no parent to adjust.

        Raises:
            ManifestError: the path has fewer ``../`` steps than requested.
        """
        current = self.relative_path
        if current is None or offset == 0:
            return False
        if offset > 0:
            updated = _UP * offset + current
        else:
            updated = current
            for _ in range(-offset):
                if not updated.startswith(_UP):
                    raise ManifestError(
                        f"Cannot remove {-offset} parent level(s) from '{current}' in {self.path}"
                    )
                updated = updated[len(_UP):]
        self._set_text(self._section("parent"), "relativePath", updated)
        return True
