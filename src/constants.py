"""Constants used in the project."""

import os
from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONSTRUCT_ERROR = 2
    INCONSISTENT_STATE = 3


class Scope(Enum):
    """Dependency scopes as recorded in a POM.

    Args:
        Enum (string): Scope names, case-sensitive.
    """

    COMPILE = "compile"
    PROVIDED = "provided"
    RUNTIME = "runtime"
    TEST = "test"
    SYSTEM = "system"

    @classmethod
    def parse(cls, text):
        """Map a POM scope string to a Scope; blank means compile."""
        if text is None or not text.strip():
            return cls.COMPILE
        return cls(text.strip())


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    POM_XML_FILE = "pom.xml"
    POM_NAMESPACE = "http://maven.apache.org/POM/4.0.0"
    DEFAULT_RELATIVE_PATH = "../pom.xml"
    AGGREGATOR_PACKAGING = "pom"
    BUNDLE_PACKAGING = "bundle"
    SYMBOLIC_NAME_PROPERTY = "bundle.symbolicName"
    DEFAULT_TYPE = "jar"
    PROVISION_ID = "provision"
    SKIP_DIRS = ["target", ".git", ".svn", ".idea", "node_modules"]

    REMOTE_REPOSITORIES = ["https://repo1.maven.org/maven2"]
    LOCAL_REPOSITORY = os.path.join(os.path.expanduser("~"), ".m2", "repository")
    MAX_PARENT_DEPTH = 10

    RUNNER = "pax-run"
    FRAMEWORK = "felix"
    DEPLOYMENT_DIR = os.path.join("target", "deployment")

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "PAXCONSTRUCT_LOG_LEVEL"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    HTTP_CACHE_TTL_SEC = 300
