"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2


class PackageManagers(Enum):
    """Package managers supported by the program.

    Args:
        Enum (string): Package managers supported by the program.
    """

    NUGET = "nuget"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    CSPROJ_PATTERN = "*.csproj"
    CSPROJ_EXTENSION = ".csproj"
    PACKAGES_CONFIG_FILE = "packages.config"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    USER_AGENT = "nugetdeps/1.0"

    # Repository API constants
    GITHUB_API_BASE = "https://api.github.com"
    ENV_GITHUB_TOKEN = "GITHUB_TOKEN"
    REPO_API_PER_PAGE = 100
    SEARCH_MAX_PAGES = 10  # GitHub code search stops at 1000 results

    # Result cache constants
    CACHE_KEY_PREFIX = "repo_nuget_dependencies_"
    CACHE_TTL_SEC = 24 * 3600
    CACHE_MAX_ENTRIES = 10000
    CACHE_CLEANUP_INTERVAL_SEC = 60
