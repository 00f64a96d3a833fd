"""Maven repository client: fetches POMs and artifacts by coordinate.

The local repository is consulted first, then every configured remote
repository in order. Nothing here raises on a miss; callers get ``None`` and
decide whether that is fatal.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from constants import Constants
from common import http_client
from common.logging_utils import extra_context, is_debug_enabled, Timer, safe_url
from project.models import Coordinate


logger = logging.getLogger(__name__)


class MavenRepositoryClient:
    """Looks artifacts up in a local repository and a list of remote ones."""

    def __init__(
        self,
        repositories: Optional[Sequence[str]] = None,
        local_repository: Optional[str] = None,
    ):
        self.repositories: List[str] = [
            url.rstrip("/") for url in (repositories or Constants.REMOTE_REPOSITORIES)
        ]
        self.local_repository = Path(local_repository or Constants.LOCAL_REPOSITORY)

    def local_path(self, coordinate: Coordinate, extension: str) -> Path:
        return self.local_repository / coordinate.path / coordinate.file_name(extension)

    def remote_urls(self, coordinate: Coordinate, extension: str) -> List[str]:
        suffix = f"{coordinate.path}/{coordinate.file_name(extension)}"
        return [f"{base}/{suffix}" for base in self.repositories]

    def _fetch(self, coordinate: Coordinate, extension: str, binary: bool):
        local = self.local_path(coordinate, extension)
        if local.is_file():
            if is_debug_enabled(logger):
                logger.debug("Local repository hit", extra=extra_context(
                    event="cache_hit", component="repository", action="fetch",
                    target=str(local), package_manager="maven"
                ))
            try:
                return local.read_bytes() if binary else local.read_text(encoding="utf-8")
            except OSError as exc:
                logger.warning("Unable to read %s: %s", local, exc)

        for url in self.remote_urls(coordinate, extension):
            with Timer() as timer:
                status, _, body = http_client.robust_get(url, binary=binary)
            if status == 200 and body:
                if is_debug_enabled(logger):
                    logger.debug("Remote repository hit", extra=extra_context(
                        event="http_response", component="repository", action="fetch",
                        outcome="success", status_code=status,
                        duration_ms=timer.duration_ms(), target=safe_url(url),
                        package_manager="maven"
                    ))
                return body
            if is_debug_enabled(logger):
                logger.debug("Remote repository miss", extra=extra_context(
                    event="http_response", component="repository", action="fetch",
                    outcome="miss", status_code=status, target=safe_url(url),
                    package_manager="maven"
                ))
        return None

    def fetch_pom(self, coordinate: Coordinate) -> Optional[str]:
        """Return the POM text for ``coordinate`` or None when no repository has it."""
        return self._fetch(coordinate, "pom", binary=False)

    def fetch_artifact(self, coordinate: Coordinate) -> Optional[bytes]:
        """Return the primary artifact bytes (``bundle`` packaging is stored as a jar)."""
        extension = coordinate.type
        if extension in (Constants.BUNDLE_PACKAGING, "maven-plugin", "ejb"):
            extension = Constants.DEFAULT_TYPE
        return self._fetch(coordinate, extension, binary=True)
