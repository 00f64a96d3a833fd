"""Maven repository access.

- client.py: local/remote repository lookups for POMs and artifacts
- project.py: effective module descriptions (parents, properties, managed versions)
- classifier.py: OSGi bundle classification of resolved modules
"""

from .client import MavenRepositoryClient  # noqa: F401
from .project import ProjectBuilder  # noqa: F401
from .classifier import BundleClassifier  # noqa: F401
