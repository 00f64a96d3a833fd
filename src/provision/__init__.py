"""Provisioning: collect bundles across a project and hand them to a runner."""

from .runner import ProvisionRunner
from .session import ProvisionSession

__all__ = ["ProvisionRunner", "ProvisionSession"]
