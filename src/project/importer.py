"""Records imported bundles in the provisioning POM and the current module's POM."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from pom.document import PomDocument
from project.models import DependencyEdge, ImportAction

logger = logging.getLogger(__name__)


def record_dependency(pom: PomDocument, dependency: DependencyEdge, overwrite: bool = False) -> bool:
    """Add ``dependency`` to ``pom`` and persist it when something changed.

    Re-recording an existing dependency is a no-op unless ``overwrite`` is set,
    so repeated imports leave the POM untouched.
    """
    if not pom.add_dependency(dependency, overwrite):
        return False
    pom.write()
    return True


class ImportPlanner:
    """Applies resolver output to the eligible destination POMs.

    The provisioning POM and the target POM are updated independently; a
    dependency on the target's own group is never added to the provisioning
    POM.
    """

    def __init__(
        self,
        provision_pom: Optional[PomDocument] = None,
        target_pom: Optional[PomDocument] = None,
        overwrite: bool = True,
    ):
        self.provision_pom = provision_pom
        self.target_pom = target_pom
        self.overwrite = overwrite

    def _is_local(self, dependency: DependencyEdge) -> bool:
        return self.target_pom is not None and self.target_pom.group_id == dependency.target.group

    def import_bundle(self, action: ImportAction) -> List[PomDocument]:
        """Record one bundle; returns the POMs that were modified."""
        dependency = action.dependency
        changed = []

        if self.provision_pom is not None and not self._is_local(dependency):
            logger.info("Importing %s to %s", action.name, self.provision_pom.id)
            if record_dependency(self.provision_pom, dependency, self.overwrite):
                changed.append(self.provision_pom)

        if self.target_pom is not None and self.target_pom.is_bundle_project():
            logger.info("Adding %s as a dependency to %s", action.name, self.target_pom.id)
            if record_dependency(self.target_pom, dependency, self.overwrite):
                changed.append(self.target_pom)

        return changed

    def apply(self, actions: Iterable[ImportAction]) -> int:
        """Record every action; returns how many POM updates were written."""
        return sum(len(self.import_bundle(action)) for action in actions)
