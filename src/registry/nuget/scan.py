"""NuGet repository scanner: discover, fetch and parse manifests of a remote repository."""
from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional, Sequence
from xml.etree.ElementTree import Element

from constants import Constants
from models import ExtractionResult, RemoteFile, RepositoryHandle
from common.cache import CacheStore
from common.logging_utils import extra_context, is_debug_enabled, Timer

import registry.nuget as nuget_pkg
from repository.github import RepositoryGateway
from .extract import (
    aggregate_dependencies,
    csproj_dependencies_stats,
    packages_config_dependencies_stats,
)
from .parse import parse_xml

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManifestStrategy:
    """A manifest kind to search for and the extractor that reads it."""

    search_pattern: str
    extract: Callable[[Element], ExtractionResult]

    @property
    def suffix(self) -> str:
        return self.search_pattern.replace("*", "")


# Modern projects declare PackageReference items in *.csproj (since .NET Core);
# older ones keep a packages.config. Tried in order, first non-empty wins.
STRATEGIES: Sequence[ManifestStrategy] = (
    ManifestStrategy(Constants.CSPROJ_PATTERN, csproj_dependencies_stats),
    ManifestStrategy(Constants.PACKAGES_CONFIG_FILE, packages_config_dependencies_stats),
)


def cache_key(repo: RepositoryHandle) -> str:
    """Cache key for a repository's extraction result."""
    return f"{Constants.CACHE_KEY_PREFIX}{repo.id}"


async def _map_packages(
    gateway: RepositoryGateway,
    repo: RepositoryHandle,
    access_token: Optional[str],
    strategy: ManifestStrategy,
) -> ExtractionResult:
    """Run one search -> fetch -> parse -> extract -> aggregate pass."""
    logger.debug("Scanning %s for %s", repo.full_name, strategy.search_pattern)

    hits = await gateway.search_files_from_repo(repo, strategy.search_pattern, access_token)
    files = [RemoteFile(name=hit["name"], path=hit["path"]) for hit in hits]
    # Code search matches loosely; require the exact suffix
    files = [f for f in files if f.name.endswith(strategy.suffix)]

    if is_debug_enabled(logger):
        logger.debug(
            "Discovered manifest files",
            extra=extra_context(
                event="discover",
                component="scan",
                package_manager="nuget",
                target=repo.full_name,
                files=[f.path for f in files],
            ),
        )

    texts = await asyncio.gather(
        *(gateway.fetch_file_from_repo(repo, f.path, access_token) for f in files),
        return_exceptions=True,
    )
    # Every fetch has settled; the first failure aborts the pass
    for text in texts:
        if isinstance(text, BaseException):
            raise text
    files = [replace(f, text=text) for f, text in zip(files, texts)]
    files = [replace(f, xml=parse_xml(f.text)) for f in files]
    parsed = [f for f in files if f.xml is not None]
    if len(parsed) != len(files):
        logger.info(
            "Skipped %d unparseable manifest(s) in %s",
            len(files) - len(parsed),
            repo.full_name,
        )

    per_file = [strategy.extract(f.xml) for f in parsed]
    return functools.reduce(aggregate_dependencies, per_file, [])


async def _scan_with_fallback(
    gateway: RepositoryGateway,
    repo: RepositoryHandle,
    access_token: Optional[str],
) -> ExtractionResult:
    result: ExtractionResult = []
    for strategy in STRATEGIES:
        result = await _map_packages(gateway, repo, access_token, strategy)
        if result:
            break
    return result


async def get_dependencies_from_github_repo(
    repo: RepositoryHandle,
    access_token: Optional[str] = None,
    *,
    gateway: Optional[RepositoryGateway] = None,
    cache: Optional[CacheStore] = None,
) -> ExtractionResult:
    """Scan a remote repository for NuGet dependencies.

    Results are cached per repository id, including empty ones. Any failure
    while scanning is logged and reported as an empty list; this coroutine
    does not raise.

    Args:
        repo: Repository to scan.
        access_token: Optional GitHub token.
        gateway: Search/fetch client; a fresh GitHubClient when omitted.
        cache: Result store; the process-wide default cache when omitted.

    Returns:
        Dependency records in first-seen order, unique by name.
    """
    store = cache if cache is not None else nuget_pkg.default_cache
    key = cache_key(repo)
    cached = store.get(key)
    if cached is not None:
        return list(cached)

    try:
        with Timer() as t:
            if gateway is None:
                async with nuget_pkg.GitHubClient() as client:
                    result = await _scan_with_fallback(client, repo, access_token)
            else:
                result = await _scan_with_fallback(gateway, repo, access_token)
        store.set(key, result)
        logger.info(
            "Found %d NuGet dependencies in %s",
            len(result),
            repo.full_name,
            extra=extra_context(
                event="scan",
                component="scan",
                package_manager="nuget",
                outcome="success",
                duration_ms=t.duration_ms(),
                target=repo.full_name,
            ),
        )
        return list(result)
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.warning("Dependency scan of %s failed: %s", repo.full_name, e)
        return []
