"""Wiring new modules into the project tree.

Creating a module runs three steps in order: ``prepare_target`` attaches the
new directory to the module tree, a ``generate`` strategy writes the module
content, and ``post_process`` points the new POM at its logical parent.
Template-driven generation plugs in as the ``generate`` callable.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from constants import Constants
from pom.document import PomDocument
from project.models import compound_name
from project.tree import ProjectTreeManager, PathLike, parent_relative_path

logger = logging.getLogger(__name__)


@dataclass
class ScaffoldRequest:
    """Identity and placement options for a new module."""
    group_id: str
    artifact_id: str
    version: str
    parent_id: Optional[str] = None
    packaging: str = Constants.BUNDLE_PACKAGING
    overwrite: bool = False
    attach_pom: bool = True
    compact_names: bool = True


def compact_name(group_id: str, artifact_id: str, compact: bool = True) -> str:
    if compact:
        return compound_name(group_id, artifact_id)
    return f"{group_id}.{artifact_id}"


Generator = Callable[[Path, ScaffoldRequest], PomDocument]


def generate_pom(pom_dir: Path, request: ScaffoldRequest) -> PomDocument:
    """Default generator: a bare POM carrying the requested identity.

    The bundle symbolic name is recorded as a POM property, compacted unless
    the request turns that off.
    """
    pom_path = pom_dir / Constants.POM_XML_FILE
    if pom_path.is_file():
        return PomDocument.read(pom_path)
    doc = PomDocument.create(
        pom_dir, request.group_id, request.artifact_id, request.version, request.packaging
    )
    doc.set_property(Constants.SYMBOLIC_NAME_PROPERTY,
                     compact_name(request.group_id, request.artifact_id, request.compact_names))
    doc.write()
    return doc


def prepare_target(tree: ProjectTreeManager, project_dir: PathLike, target_dir: PathLike,
                   request: ScaffoldRequest) -> Path:
    """Clear an old POM when overwriting and attach the module directory to the tree."""
    pom_dir = Path(target_dir) / request.artifact_id
    pom_path = pom_dir / Constants.POM_XML_FILE
    if request.overwrite and pom_path.exists():
        pom_path.unlink()

    if request.attach_pom:
        modules_pom = tree.create_module_tree(project_dir, target_dir)
        if modules_pom is not None:
            pom_dir.mkdir(parents=True, exist_ok=True)
            if modules_pom.add_module(request.artifact_id, request.overwrite):
                modules_pom.write()
    pom_dir.mkdir(parents=True, exist_ok=True)
    return pom_dir


def post_process(tree: ProjectTreeManager, pom_dir: PathLike, target_dir: PathLike,
                 request: ScaffoldRequest) -> PomDocument:
    """Set <parent> on the generated POM when the parent module can be found."""
    doc = PomDocument.read(pom_dir)
    if not request.parent_id:
        return doc
    parent = tree.find_pom(target_dir, request.parent_id)
    if parent is None:
        logger.warning("Parent %s not found, leaving %s without a parent", request.parent_id, doc.id)
        return doc

    if doc.set_parent(parent, parent_relative_path(doc.basedir, parent.basedir), request.overwrite):
        doc.write()
    return doc


class Scaffolder:
    """Runs prepare, generate and post-process for one new module."""

    def __init__(self, tree: Optional[ProjectTreeManager] = None, generate: Generator = generate_pom):
        self.tree = tree or ProjectTreeManager()
        self.generate = generate

    def run(self, project_dir: PathLike, target_dir: PathLike, request: ScaffoldRequest) -> PomDocument:
        pom_dir = prepare_target(self.tree, project_dir, target_dir, request)
        generated = self.generate(pom_dir, request)
        logger.info("Created %s in %s", generated.id, pom_dir)
        return post_process(self.tree, pom_dir, target_dir, request)
