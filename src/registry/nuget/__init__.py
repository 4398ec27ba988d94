"""NuGet registry package.

This package provides NuGet dependency extraction for remote repositories:
- parse.py: safe XML parsing and manifest file classification
- extract.py: dependency records from .csproj and packages.config documents
- scan.py: repository scan with csproj -> packages.config fallback and caching
"""

# Patch points exposed for tests (e.g., monkeypatch in tests)
from repository.github import GitHubClient  # noqa: F401
from common.cache import default_cache  # noqa: F401

# Public API re-exports
from .parse import (  # noqa: F401
    parse_xml,
    is_dependency_file,
    detect_project_name,
)
from .extract import (  # noqa: F401
    csproj_dependencies_stats,
    packages_config_dependencies_stats,
    aggregate_dependencies,
    dependencies_stats,
)
from .scan import get_dependencies_from_github_repo  # noqa: F401

__all__ = [
    # Parsing/classification
    "parse_xml",
    "is_dependency_file",
    "detect_project_name",
    # Extraction
    "csproj_dependencies_stats",
    "packages_config_dependencies_stats",
    "aggregate_dependencies",
    "dependencies_stats",
    # Repository scan
    "get_dependencies_from_github_repo",
    # Patch points for tests
    "GitHubClient",
    "default_cache",
]
