"""Breadth-first walk of the artifact graph looking for importable bundles."""
from __future__ import annotations

import logging
from collections import deque
from typing import Deque, List, Optional, Set

from constants import Scope
from common.logging_utils import extra_context, is_debug_enabled
from project.errors import ResolutionFailure
from project.models import (
    Coordinate,
    CoordinateKey,
    DependencyEdge,
    ImportAction,
    ResolveOptions,
    ResolvedProject,
)
from project.scope import is_candidate
from registry.maven.classifier import BundleClassifier
from registry.maven.project import ProjectBuilder

logger = logging.getLogger(__name__)


class ArtifactGraphResolver:
    """Walks provided-scope dependencies from a root coordinate.

    Each coordinate (group:artifact:version) is resolved at most once per run.
    Aggregator POMs and non-bundle modules are walked through but never
    imported. A node that cannot be resolved is logged and skipped.
    """

    def __init__(
        self,
        builder: Optional[ProjectBuilder] = None,
        classifier: Optional[BundleClassifier] = None,
    ):
        self.builder = builder or ProjectBuilder()
        self.classifier = classifier or BundleClassifier(self.builder.client)
        self.resolved: List[Coordinate] = []
        self.failures: List[Coordinate] = []

    def resolve(self, root: Coordinate, options: Optional[ResolveOptions] = None) -> List[ImportAction]:
        """Return the import actions discovered from ``root`` in breadth-first order."""
        options = options or ResolveOptions()
        self.resolved = []
        self.failures = []

        actions: List[ImportAction] = []
        # snapshot roots are rediscovered under their meta version
        visited: Set[CoordinateKey] = {root.key, root.with_meta_version().key}
        queue: Deque[Coordinate] = deque([root])

        while queue:
            coordinate = queue.popleft()
            try:
                project = self.builder.build(coordinate)
            except ResolutionFailure as exc:
                logger.warning("Problem resolving %s: %s", coordinate, exc)
                self.failures.append(coordinate)
                continue
            self.resolved.append(coordinate)

            if not project.is_aggregator:
                if self.classifier.is_bundle(project, options.test_metadata):
                    actions.append(self._import_action(project, options))
                    if options.exclude_transitive:
                        logger.info("Found bundle %s, skipping transitive dependencies", coordinate)
                        return actions
                elif is_debug_enabled(logger):
                    logger.debug("Not a bundle", extra=extra_context(
                        event="decision", component="resolver", action="classify",
                        outcome="not_bundle", target=str(coordinate)
                    ))

            for edge in project.dependencies:
                candidate = edge.target.with_meta_version()
                if candidate.key in visited or not is_candidate(edge, options.widen_scope):
                    continue
                visited.add(candidate.key)
                queue.append(candidate)

        if is_debug_enabled(logger):
            logger.debug("Resolution finished", extra=extra_context(
                event="function_exit", component="resolver", action="resolve",
                outcome="complete", target=str(root), count=len(actions)
            ))
        return actions

    @staticmethod
    def _import_action(project: ResolvedProject, options: ResolveOptions) -> ImportAction:
        coordinate = project.coordinate
        dependency = DependencyEdge(
            Coordinate(coordinate.group, coordinate.name, coordinate.version),
            Scope.PROVIDED,
            # non-deployed imports are optional framework packages
            optional=not options.deploy,
        )
        return ImportAction(coordinate, project.display_name, dependency)
