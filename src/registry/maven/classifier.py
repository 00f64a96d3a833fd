"""Decides whether a resolved module is an importable OSGi bundle."""
from __future__ import annotations

import io
import logging
import zipfile
from typing import Optional

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from project.models import ResolvedProject
from registry.maven.client import MavenRepositoryClient

logger = logging.getLogger(__name__)

MANIFEST_ENTRY = "META-INF/MANIFEST.MF"
SYMBOLIC_NAME_HEADER = "Bundle-SymbolicName"

# Packagings that never carry their own jar
_NON_ARCHIVE = (Constants.AGGREGATOR_PACKAGING,)


def read_manifest_headers(archive: bytes) -> dict:
    """Return the main-section headers of a jar manifest ({} when absent or unreadable)."""
    try:
        with zipfile.ZipFile(io.BytesIO(archive)) as jar:
            raw = jar.read(MANIFEST_ENTRY).decode("utf-8", errors="replace")
    except (KeyError, zipfile.BadZipFile):
        return {}

    headers: dict = {}
    last: Optional[str] = None
    for line in raw.splitlines():
        if not line.strip():
            break  # end of main section
        if line.startswith(" ") and last is not None:
            headers[last] += line[1:]
            continue
        name, sep, value = line.partition(":")
        if sep:
            last = name.strip()
            headers[last] = value.strip()
    return headers


class BundleClassifier:
    """Classifies resolved modules, optionally inspecting their jar metadata."""

    def __init__(self, client: Optional[MavenRepositoryClient] = None):
        self.client = client or MavenRepositoryClient()

    def is_bundle(self, project: ResolvedProject, test_metadata: bool = True) -> bool:
        """True for ``bundle`` packaging, or for jars whose manifest names a bundle.

        Without ``test_metadata`` jar-like modules are assumed to be bundles.
        """
        packaging = project.packaging
        if packaging == Constants.BUNDLE_PACKAGING:
            return True
        if packaging in _NON_ARCHIVE:
            return False
        if not test_metadata:
            return True

        archive = self.client.fetch_artifact(project.coordinate)
        if archive is None:
            logger.warning("Unable to download %s to check its bundle metadata", project.coordinate)
            return False
        headers = read_manifest_headers(archive)
        found = SYMBOLIC_NAME_HEADER in headers
        if is_debug_enabled(logger):
            logger.debug("Bundle metadata checked", extra=extra_context(
                event="decision", component="classifier", action="is_bundle",
                outcome="bundle" if found else "not_bundle", target=str(project.coordinate)
            ))
        return found
