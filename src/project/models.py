"""Data models shared by the resolver, the import planner and the tree manager."""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Tuple

from constants import Constants, Scope

# groupId, artifactId, version
CoordinateKey = Tuple[str, str, str]

_TIMESTAMP_SNAPSHOT = re.compile(r"^(?P<base>.*)-\d{8}\.\d{6}-\d+$")


def meta_version(version: str) -> str:
    """Collapse a timestamped snapshot (1.0-20070101.101010-3) to 1.0-SNAPSHOT."""
    match = _TIMESTAMP_SNAPSHOT.match(version)
    if match:
        return match.group("base") + "-SNAPSHOT"
    return version


@dataclass(frozen=True)
class Coordinate:
    """Identifies a versioned module; ``key`` ignores the type qualifier."""
    group: str
    name: str
    version: str
    type: str = Constants.DEFAULT_TYPE

    @classmethod
    def parse(cls, text: str) -> "Coordinate":
        """Parse ``group:name:version`` or ``group:name:version:type``."""
        fields = [part.strip() for part in text.split(":")]
        if len(fields) not in (3, 4) or not all(fields):
            raise ValueError(
                f"Invalid coordinate '{text}'. Expected 'groupId:artifactId:version[:type]'."
            )
        return cls(*fields)

    @property
    def key(self) -> CoordinateKey:
        return (self.group, self.name, self.version)

    @property
    def path(self) -> str:
        """Repository layout directory: group/with/slashes/name/version."""
        return f"{self.group.replace('.', '/')}/{self.name}/{self.version}"

    def file_name(self, extension: Optional[str] = None) -> str:
        return f"{self.name}-{self.version}.{extension or self.type}"

    def with_meta_version(self) -> "Coordinate":
        return Coordinate(self.group, self.name, meta_version(self.version), self.type)

    def __str__(self) -> str:
        if self.type != Constants.DEFAULT_TYPE:
            return f"{self.group}:{self.name}:{self.version}:{self.type}"
        return f"{self.group}:{self.name}:{self.version}"


@dataclass(frozen=True)
class DependencyEdge:
    """A declared dependency of a resolved module."""
    target: Coordinate
    scope: Scope = Scope.COMPILE
    optional: bool = False

    @property
    def key(self) -> CoordinateKey:
        return self.target.key


@dataclass(frozen=True)
class ImportAction:
    """A bundle discovered by the resolver, with the dependency to record for it."""
    coordinate: Coordinate
    name: str
    dependency: DependencyEdge


@dataclass
class ResolveOptions:
    """Flags steering one resolver run."""
    exclude_transitive: bool = False
    widen_scope: bool = False
    test_metadata: bool = True
    deploy: bool = True


@dataclass
class ResolvedProject:
    """Effective description of a module fetched from a repository."""
    coordinate: Coordinate
    packaging: str = Constants.DEFAULT_TYPE
    name: Optional[str] = None
    dependencies: List[DependencyEdge] = field(default_factory=list)

    @property
    def is_aggregator(self) -> bool:
        return self.packaging == Constants.AGGREGATOR_PACKAGING

    @property
    def display_name(self) -> str:
        return self.name or self.coordinate.name


@dataclass
class ModuleNode:
    """One directory of the project tree together with its manifest."""
    directory: Path
    manifest: Any
    parent_path: Optional[str] = None

    @property
    def name(self) -> str:
        return self.directory.name


@dataclass(frozen=True)
class RelativePath:
    """Route between two directories: go up ``up`` levels, then down ``down``."""
    up: int
    common_root: Path
    down: Tuple[str, ...] = ()

    @property
    def offset(self) -> int:
        """Extra parent levels gained when moving from the source to the destination.

        Positive when the source is deeper than the destination.
        """
        return self.up - len(self.down)

    def as_posix(self) -> str:
        """Render as ``../../a/b`` (``.`` when both ends are the same directory)."""
        parts = [".."] * self.up + list(self.down)
        return "/".join(parts) if parts else "."


def compound_name(group: str, name: str) -> str:
    """Join group and artifact ids without repeating a shared segment.

    ``org.foo`` + ``org.foo.bar`` gives ``org.foo.bar``; ``org.foo`` + ``foo``
    gives ``org.foo``; anything else is ``group.name``.
    """
    if name == group or name.startswith(group + "."):
        return name
    if group.endswith("." + name):
        return group
    return f"{group}.{name}"
