"""Accumulates the bundles of a multi-module run and deploys them once."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from constants import Constants, Scope
from pom.document import PomDocument
from project.errors import ManifestError
from project.models import Coordinate, CoordinateKey, DependencyEdge, compound_name
from provision.runner import ProvisionRunner

logger = logging.getLogger(__name__)


class ProvisionSession:
    """Explicitly scoped bundle accumulator.

    A session starts empty, collects bundles from each project handed to
    ``add_project`` and ends with ``finalize``, which writes the deployment
    POM, optionally deploys it and clears the accumulator.
    """

    def __init__(self, runner: Optional[ProvisionRunner] = None, deploy: bool = True):
        self.runner = runner or ProvisionRunner()
        self.deploy = deploy
        self._bundles: Dict[CoordinateKey, Coordinate] = {}
        self.finalized = False

    @property
    def bundles(self) -> List[Coordinate]:
        return sorted(self._bundles.values(), key=lambda c: c.key)

    def _add(self, coordinate: Coordinate) -> None:
        if self.finalized:
            raise RuntimeError("Provisioning session already finalized")
        meta = Coordinate(coordinate.group, coordinate.name, coordinate.version).with_meta_version()
        self._bundles.setdefault(meta.key, meta)

    def add_project(self, pom: PomDocument) -> None:
        """Add the project itself when it is a bundle, plus its provided,
        non-optional dependencies."""
        if pom.is_bundle_project():
            self._add(pom.coordinate)
        for edge in pom.dependencies:
            if edge.scope is Scope.PROVIDED and not edge.optional and edge.target.version:
                self._add(edge.target)

    def add_additional_poms(self, pom_paths: Iterable[str]) -> None:
        """Treat extra POM files as if they were part of the project."""
        for raw in pom_paths:
            path = Path(raw.strip())
            if not raw.strip() or not path.exists():
                continue
            try:
                self.add_project(PomDocument.read(path))
            except ManifestError as exc:
                logger.warning("Unable to read additional POM %s: %s", path, exc)

    def deployment_pom(self, root: PomDocument) -> PomDocument:
        """Build (without writing) the POM listing every collected bundle."""
        group = compound_name(root.group_id or "", root.artifact_id or "") + ".build"
        path = root.basedir / Constants.DEPLOYMENT_DIR / Constants.POM_XML_FILE
        doc = PomDocument.create(path, group, "deployment", root.version or "",
                                 Constants.AGGREGATOR_PACKAGING)
        for bundle in self.bundles:
            doc.add_dependency(DependencyEdge(bundle))
        return doc

    def finalize(self, root: PomDocument) -> PomDocument:
        """Write the deployment POM, run the provisioning tool and end the session."""
        if not self._bundles:
            logger.info("~~~~~~~~~~~~~~~~~~~")
            logger.info(" No bundles found! ")
            logger.info("~~~~~~~~~~~~~~~~~~~")

        doc = self.deployment_pom(root)
        doc.write()
        logger.info("Deployment POM written to %s", doc.path)
        try:
            if self.deploy:
                self.runner.run(doc.path)
            else:
                logger.info("Deployment complete")
        finally:
            self._bundles.clear()
            self.finalized = True
        return doc
