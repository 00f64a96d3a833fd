"""External provisioning runner invoked as a separate process."""
from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from constants import Constants
from project.errors import ProvisionError

logger = logging.getLogger(__name__)


class ProvisionRunner:
    """Launches the runner executable on a deployment POM."""

    def __init__(self, executable: Optional[str] = None, framework: Optional[str] = None,
                 extra_args: Optional[Sequence[str]] = None):
        self.executable = executable or Constants.RUNNER
        self.framework = framework or Constants.FRAMEWORK
        self.extra_args = list(extra_args or [])

    def command(self, pom_path: Path) -> List[str]:
        return [
            self.executable,
            "--overwrite",
            f"--platform={self.framework}",
            *self.extra_args,
            str(Path(pom_path).resolve()),
        ]

    def run(self, pom_path: Path) -> int:
        """Run the provisioning tool and wait for it.

        Raises:
            ProvisionError: the executable is missing or exits non-zero.
        """
        if shutil.which(self.executable) is None:
            raise ProvisionError(f"Provisioning runner '{self.executable}' not found on PATH")
        cmd = self.command(pom_path)
        logger.info("Provisioning with: %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, check=False)
        except OSError as exc:
            raise ProvisionError(f"Unable to start '{self.executable}': {exc}") from exc
        if result.returncode != 0:
            raise ProvisionError(f"'{self.executable}' exited with status {result.returncode}")
        return result.returncode
