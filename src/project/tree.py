"""Project tree management: finding modules and keeping parent/child POMs in step.

A project tree is a directory hierarchy of POMs. Parents list children in
<modules>; children point back through <parent><relativePath>. Every mutation
here updates both sides.
"""
from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Iterator, Optional, Sequence, Set, Union

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from pom.document import PomDocument, has_pom
from project.errors import (
    ManifestError,
    ModuleNotFound,
    PhysicalMoveFailure,
    PostMoveInconsistency,
    TreeBoundaryError,
)
from project.models import ModuleNode, RelativePath, compound_name

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def compute_relative_path(
    source: PathLike, target: PathLike, boundary: Optional[PathLike] = None
) -> Optional[RelativePath]:
    """Decompose the route from ``source`` to ``target`` into up/common/down.

    Returns None when the two paths share no ancestor, or when ``boundary``
    is given and their common ancestor lies outside it.
    """
    src = Path(source).resolve()
    dst = Path(target).resolve()
    try:
        common = Path(os.path.commonpath([src, dst]))
    except ValueError:
        return None
    if boundary is not None:
        limit = Path(boundary).resolve()
        if common != limit and limit not in common.parents:
            return None
    return RelativePath(
        up=len(src.relative_to(common).parts),
        common_root=common,
        down=dst.relative_to(common).parts,
    )


def parent_relative_path(child_dir: PathLike, parent_dir: PathLike) -> Optional[str]:
    """Value for <relativePath> pointing from ``child_dir`` at the POM in ``parent_dir``."""
    pivot = compute_relative_path(child_dir, parent_dir)
    if pivot is None:
        return None
    return f"{pivot.as_posix()}/{Constants.POM_XML_FILE}"


class ProjectTreeManager:
    """Locates modules and moves them around a project tree."""

    def __init__(self, skip_dirs: Optional[Sequence[str]] = None):
        self.skip_dirs = set(skip_dirs if skip_dirs is not None else Constants.SKIP_DIRS)

    # ---------- discovery ----------

    @staticmethod
    def find_project_root(base: PathLike) -> Optional[Path]:
        """Topmost directory of the unbroken chain of POM directories above ``base``."""
        current = Path(base).resolve()
        while not has_pom(current):
            if current.parent == current:
                return None
            current = current.parent
        while current.parent != current and has_pom(current.parent):
            current = current.parent
        return current

    def iter_pom_dirs(self, root: PathLike) -> Iterator[Path]:
        """Every directory under ``root`` holding a pom.xml, in sorted walk order."""
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(
                d for d in dirnames if d not in self.skip_dirs and not d.startswith(".")
            )
            if Constants.POM_XML_FILE in filenames:
                yield Path(dirpath)

    def find_pom(self, base: PathLike, name: str) -> Optional[PomDocument]:
        """Search the tree containing ``base`` for a POM matching ``name``.

        ``name`` may be an artifactId, ``groupId:artifactId`` or a symbolic name.
        """
        root = self.find_project_root(base)
        if root is None:
            return None
        for directory in self.iter_pom_dirs(root):
            try:
                doc = PomDocument.read(directory)
            except ManifestError as exc:
                if is_debug_enabled(logger):
                    logger.debug("Skipping unreadable POM", extra=extra_context(
                        event="anomaly", component="tree", action="find_pom",
                        outcome="unreadable", target=str(directory), error=str(exc)
                    ))
                continue
            if doc.matches(name):
                return doc
        return None

    def locate(self, base: PathLike, name_or_path: str) -> ModuleNode:
        """Find a module by directory path first, then by name within the tree.

        Raises:
            ModuleNotFound: neither lookup succeeded.
        """
        given = Path(name_or_path)
        candidates = [given] if given.is_absolute() else [given, Path(base) / given]
        for candidate in candidates:
            if has_pom(candidate):
                doc = PomDocument.read(candidate)
                return ModuleNode(doc.basedir.resolve(), doc, doc.relative_path)

        doc = self.find_pom(base, given.name)
        if doc is None:
            raise ModuleNotFound(f"Cannot find bundle {name_or_path}")
        return ModuleNode(doc.basedir.resolve(), doc, doc.relative_path)

    def iter_modules(self, root: PathLike) -> Iterator[ModuleNode]:
        """Depth-first walk following each POM's module list (reactor order)."""
        seen: Set[Path] = set()

        def _walk(directory: Path) -> Iterator[ModuleNode]:
            directory = directory.resolve()
            if directory in seen:
                return
            seen.add(directory)
            doc = PomDocument.read(directory)
            yield ModuleNode(directory, doc, doc.relative_path)
            for module in doc.modules:
                child = directory / module
                if not has_pom(child):
                    logger.warning("Module %s listed in %s has no POM", module, doc.path)
                    continue
                yield from _walk(child)

        yield from _walk(Path(root))

    # ---------- structure ----------

    def _create_aggregator(self, parent: PomDocument, directory: Path) -> PomDocument:
        doc = PomDocument.create(
            directory,
            compound_name(parent.group_id or "", parent.artifact_id or ""),
            directory.name,
            parent.version or "",
        )
        doc.set_parent(parent, parent_relative_path(directory, parent.basedir))
        doc.write()
        logger.info("Created module POM %s", doc.path)
        return doc

    def create_module_tree(self, base: PathLike, target_dir: PathLike) -> Optional[PomDocument]:
        """Make sure every directory from the project root down to ``target_dir`` has
        an aggregator POM listed by its parent.

        Returns the POM of ``target_dir``, or None when ``target_dir`` is outside
        the project tree of ``base``.

        Raises:
            TreeBoundaryError: an existing POM on the way is not an aggregator.
        """
        root = self.find_project_root(base)
        if root is None:
            return None
        pivot = compute_relative_path(root, target_dir, boundary=root)
        if pivot is None or pivot.up:
            return None

        parent = PomDocument.read(root)
        current = root
        for segment in pivot.down:
            if not parent.is_aggregator():
                raise TreeBoundaryError(f"{parent.path} is not an aggregator POM")
            current = current / segment
            doc = PomDocument.read(current) if has_pom(current) else self._create_aggregator(parent, current)
            if parent.add_module(segment):
                parent.write()
            parent = doc
        return parent

    def _check_module_tree(self, root: Path, pivot: RelativePath) -> Optional[Path]:
        """Dry run of ``create_module_tree``: fail where it would, write nothing.

        Returns the first directory on the way that does not exist yet.
        """
        doc: Optional[PomDocument] = PomDocument.read(root)
        current = root
        missing = None
        for segment in pivot.down:
            if doc is not None and not doc.is_aggregator():
                raise TreeBoundaryError(f"{doc.path} is not an aggregator POM")
            current = current / segment
            if missing is None and not current.exists():
                missing = current
            # directories without a POM get a fresh aggregator
            doc = PomDocument.read(current) if has_pom(current) else None
        return missing

    def update_relative_path(self, module_dir: PathLike, old_parent_dir: PathLike,
                             new_parent_dir: PathLike) -> int:
        """Re-point a moved module's <relativePath> by the change in depth.

        Only the difference between the old and new location matters: the
        existing path already encodes the old distance. Returns the offset applied.
        """
        pivot = compute_relative_path(new_parent_dir, old_parent_dir)
        if pivot is None or pivot.offset == 0:
            return 0
        pom = PomDocument.read(module_dir)
        if pom.adjust_relative_path(pivot.offset):
            pom.write()
        return pivot.offset

    def move(self, module: str, base: PathLike, target_dir: PathLike,
             overwrite: bool = True) -> ModuleNode:
        """Move a module below ``target_dir`` and transfer its module-list entry.

        Nothing is written before the directory is renamed: the aggregator
        chain is only checked up front and created afterwards, so a failed
        rename leaves every POM as it was.

        Raises:
            ModuleNotFound: the module cannot be located.
            TreeBoundaryError: ``target_dir`` is outside the project tree.
            PhysicalMoveFailure: the directory cannot be moved there.
            PostMoveInconsistency: the directory moved but POM updates failed.
        """
        node = self.locate(base, module)
        target = Path(target_dir)
        if not target.is_absolute():
            target = Path(base) / target
        target = target.resolve()

        root = self.find_project_root(base)
        pivot = compute_relative_path(root, target, boundary=root) if root else None
        if pivot is None or pivot.up:
            raise TreeBoundaryError("targetDirectory is outside of this project")

        bundle_dir = node.directory
        modules_dir = bundle_dir.parent
        module_name = bundle_dir.name
        new_bundle_dir = target / module_name

        if new_bundle_dir.exists():
            raise PhysicalMoveFailure(f"Unable to move {module} to {target}: {new_bundle_dir} already exists")
        if target == bundle_dir or bundle_dir in target.parents:
            raise PhysicalMoveFailure(f"Unable to move {module} into itself")

        created = self._check_module_tree(root, pivot)

        logger.info("Moving %s to %s", node.manifest.id, new_bundle_dir)
        try:
            target.mkdir(parents=True, exist_ok=True)
            os.rename(bundle_dir, new_bundle_dir)
        except OSError as exc:
            if created is not None:
                shutil.rmtree(created, ignore_errors=True)
            raise PhysicalMoveFailure(f"Unable to move bundle {module} to {target}: {exc}") from exc

        try:
            new_modules_pom = self.create_module_tree(root, target)
            if new_modules_pom is None:
                raise ManifestError(f"No module POM could be created in {target}")

            self.update_relative_path(new_bundle_dir, modules_dir, target)

            if has_pom(modules_dir):
                modules_pom = PomDocument.read(modules_dir)
                if modules_pom.remove_module(module_name):
                    modules_pom.write()

            if new_modules_pom.add_module(module_name, overwrite):
                new_modules_pom.write()

            moved = PomDocument.read(new_bundle_dir)
        except (ManifestError, TreeBoundaryError, OSError) as exc:
            raise PostMoveInconsistency(
                f"Problem moving module from {modules_dir} to {target}: {exc}",
                moved_to=new_bundle_dir,
            ) from exc

        return ModuleNode(new_bundle_dir, moved, moved.relative_path)
