"""Effective module descriptions built from repository POMs.

Only the parts of Maven's model building that matter for walking the
dependency graph are reproduced: parent inheritance of coordinates,
properties, dependencies and dependencyManagement, plus ``${...}``
interpolation.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from constants import Constants, Scope
from common.logging_utils import extra_context, is_debug_enabled
from pom.document import PomDocument
from project.errors import ManifestError, ResolutionFailure
from project.models import Coordinate, DependencyEdge, ResolvedProject
from registry.maven.client import MavenRepositoryClient

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


def interpolate(value: Optional[str], values: Dict[str, str]) -> Optional[str]:
    """Replace ``${key}`` placeholders; unknown keys are left untouched."""
    if value is None:
        return None
    for _ in range(5):  # nested properties
        updated = _PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), value)
        if updated == value:
            break
        value = updated
    return value


class ProjectBuilder:
    """Turns a coordinate into a ResolvedProject using a repository client."""

    def __init__(self, client: Optional[MavenRepositoryClient] = None):
        self.client = client or MavenRepositoryClient()

    def _load(self, coordinate: Coordinate) -> PomDocument:
        text = self.client.fetch_pom(coordinate)
        if text is None:
            raise ResolutionFailure(f"Unable to find POM for {coordinate}")
        try:
            return PomDocument.parse_string(text, origin=coordinate.file_name("pom"))
        except ManifestError as exc:
            raise ResolutionFailure(str(exc)) from exc

    def _lineage(self, coordinate: Coordinate) -> List[PomDocument]:
        """The POM followed by its ancestors, nearest first."""
        lineage = [self._load(coordinate)]
        seen = {coordinate.key}
        parent = lineage[0].parent_coordinate
        while parent is not None and parent.group and parent.name and parent.version:
            if parent.key in seen or len(lineage) > Constants.MAX_PARENT_DEPTH:
                raise ResolutionFailure(f"Parent chain of {coordinate} is cyclic or too deep")
            seen.add(parent.key)
            doc = self._load(parent)
            lineage.append(doc)
            parent = doc.parent_coordinate
        return lineage

    @staticmethod
    def _values(lineage: List[PomDocument], coordinate: Coordinate) -> Dict[str, str]:
        values: Dict[str, str] = {}
        for doc in reversed(lineage):
            values.update(doc.properties)
        head = lineage[0]
        group = head.group_id or coordinate.group
        version = head.version or coordinate.version
        for prefix in ("project.", "pom.", ""):
            values[prefix + "groupId"] = group
            values[prefix + "artifactId"] = head.artifact_id or coordinate.name
            values[prefix + "version"] = version
        parent = head.parent_coordinate
        if parent is not None:
            values["project.parent.groupId"] = parent.group
            values["project.parent.version"] = parent.version
        return values

    @staticmethod
    def _managed(lineage: List[PomDocument], values: Dict[str, str]) -> Dict[Tuple[str, str], dict]:
        managed: Dict[Tuple[str, str], dict] = {}
        for doc in reversed(lineage):
            for raw in doc.raw_dependencies("dependencyManagement/dependencies"):
                if raw.get("scope") == "import":
                    continue
                group = interpolate(raw.get("groupId"), values)
                artifact = interpolate(raw.get("artifactId"), values)
                if group and artifact:
                    managed[(group, artifact)] = raw
        return managed

    def build(self, coordinate: Coordinate) -> ResolvedProject:
        """Fetch and interpret the POM of ``coordinate``.

        Raises:
            ResolutionFailure: the POM (or one of its parents) cannot be fetched or parsed.
        """
        lineage = self._lineage(coordinate)
        head = lineage[0]
        values = self._values(lineage, coordinate)
        managed = self._managed(lineage, values)

        declared: Dict[Tuple[str, str], dict] = {}
        for doc in reversed(lineage):
            for raw in doc.raw_dependencies():
                group = interpolate(raw.get("groupId"), values)
                artifact = interpolate(raw.get("artifactId"), values)
                if group and artifact:
                    declared[(group, artifact)] = raw

        dependencies: List[DependencyEdge] = []
        for (group, artifact), raw in declared.items():
            fallback = managed.get((group, artifact), {})
            version = interpolate(raw.get("version") or fallback.get("version"), values)
            if not version or "${" in version:
                if is_debug_enabled(logger):
                    logger.debug("Dependency version unresolved", extra=extra_context(
                        event="decision", component="project_builder", action="build",
                        outcome="skipped", target=f"{group}:{artifact}",
                        package_manager="maven"
                    ))
                continue
            scope_text = interpolate(raw.get("scope") or fallback.get("scope"), values)
            try:
                scope = Scope.parse(scope_text)
            except ValueError:
                logger.warning("Unknown scope '%s' for %s:%s in %s", scope_text, group, artifact, coordinate)
                continue
            optional = (interpolate(raw.get("optional"), values) or "false").lower() == "true"
            dep_type = interpolate(raw.get("type") or fallback.get("type"), values) or Constants.DEFAULT_TYPE
            dependencies.append(
                DependencyEdge(Coordinate(group, artifact, version, dep_type), scope, optional)
            )

        packaging = interpolate(head.text("packaging"), values) or Constants.DEFAULT_TYPE
        return ResolvedProject(
            coordinate=Coordinate(coordinate.group, coordinate.name, coordinate.version, packaging),
            packaging=packaging,
            name=interpolate(head.name, values),
            dependencies=dependencies,
        )
