"""Removal of a bundle module and every reference to it."""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

from constants import Scope
from pom.document import PomDocument, has_pom
from project.errors import ManifestError, SafetyViolation
from project.models import Coordinate, DependencyEdge
from project.tree import ProjectTreeManager, PathLike

logger = logging.getLogger(__name__)


class BundleRemoval:
    """One removal session.

    ``prepare`` deletes the bundle directory once and remembers what was
    removed; ``apply`` can then be called for each POM that may still refer
    to it.
    """

    def __init__(self, base: PathLike, name: str, tree: Optional[ProjectTreeManager] = None):
        self.base = Path(base)
        self.name = name
        self.tree = tree or ProjectTreeManager()
        self.dependency: Optional[DependencyEdge] = None
        self.module_name: Optional[str] = None
        self.removed_from: Optional[Path] = None

    @property
    def prepared(self) -> bool:
        return self.dependency is not None

    def prepare(self) -> DependencyEdge:
        """Locate and delete the bundle directory (only on the first call).

        Raises:
            ModuleNotFound: no such bundle.
            SafetyViolation: the module lists submodules of its own.
        """
        if self.dependency is not None:
            return self.dependency

        node = self.tree.locate(self.base, self.name)
        bundle = node.manifest
        if bundle.modules:
            raise SafetyViolation(f"Folder {self.name} is not a bundle")

        group, artifact, version = bundle.identity
        self.dependency = DependencyEdge(
            Coordinate(group or "", artifact or "", version or ""), Scope.PROVIDED
        )
        self.module_name = node.directory.name
        self.removed_from = node.directory.parent

        logger.info("Removing %s from %s", bundle.id, node.directory)
        try:
            shutil.rmtree(node.directory)
        except OSError as exc:
            raise ManifestError(f"Unable to delete {node.directory}: {exc}") from exc
        return self.dependency

    def apply(self, pom: PomDocument) -> bool:
        """Drop the removed bundle from one POM's dependencies and module list."""
        if self.dependency is None:
            raise RuntimeError("prepare() must run before apply()")
        changed = pom.remove_dependency(self.dependency)
        if pom.basedir.resolve() == self.removed_from.resolve():
            changed = pom.remove_module(self.module_name) or changed
        if changed:
            pom.write()
        return changed

    def run(self) -> int:
        """Remove the bundle and clean every POM of the tree; returns POMs updated."""
        root = self.tree.find_project_root(self.base)
        self.prepare()
        if root is None or not has_pom(root):
            return 0
        updated = 0
        for directory in self.tree.iter_pom_dirs(root):
            if self.apply(PomDocument.read(directory)):
                updated += 1
        return updated
