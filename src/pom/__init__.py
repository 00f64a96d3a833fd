"""POM manifest access."""

from .document import PomDocument, has_pom, pom_file

__all__ = ["PomDocument", "has_pom", "pom_file"]
