"""Error hierarchy for project construction commands.

Only ResolutionFailure is recovered (by the resolver, per node); every other
error halts the current command with a single-line reason.
"""


class ConstructError(Exception):
    """Base class for all project construction errors."""


class ResolutionFailure(ConstructError):
    """A coordinate could not be fetched or its POM could not be read."""


class ManifestError(ConstructError):
    """A POM could not be read, parsed or written."""


class ModuleNotFound(ConstructError):
    """No module in the tree matches the requested name or path."""


class TreeBoundaryError(ConstructError):
    """The target directory is not reachable from the project root."""


class PhysicalMoveFailure(ConstructError):
    """The module directory could not be relocated; nothing was changed."""


class PostMoveInconsistency(ConstructError):
    """The directory moved but the POM bookkeeping did not complete."""

    def __init__(self, message: str, moved_to=None):
        super().__init__(
            f"{message} (module directory already moved to {moved_to}; "
            "reconcile the parent POMs manually)"
            if moved_to is not None else message
        )
        self.moved_to = moved_to


class SafetyViolation(ConstructError):
    """The operation would orphan part of the tree and was refused."""


class ProvisionError(ConstructError):
    """The provisioning runner could not be started or failed."""
