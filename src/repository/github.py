"""GitHub API client for repository file discovery and retrieval.

Provides an asyncio REST client over aiohttp used by the NuGet scanner to
search a repository for manifest files and download their raw contents.
"""
from __future__ import annotations

import codecs
import logging
from typing import Any, Dict, List, Optional, Protocol
from urllib.parse import quote

import aiohttp

from constants import Constants
from models import RepositoryHandle
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

HEADERS_JSON = {"Accept": "application/vnd.github+json"}
HEADERS_RAW = {"Accept": "application/vnd.github.raw"}
_BOMS = (
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)


def decode_content(raw: bytes) -> str:
    """Decode file bytes without failing on foreign encodings.

    A UTF-8 or UTF-16 byte order mark selects the codec; anything else is read
    as UTF-8 with undecodable bytes replaced, leaving malformed documents to the
    XML parser.
    """
    for bom, codec in _BOMS:
        if raw.startswith(bom):
            return raw[len(bom):].decode(codec, errors="replace")
    return raw.decode("utf-8", errors="replace")


class RepositoryApiError(Exception):
    """Non-success response from the repository host."""

    def __init__(self, status: int, url: str, message: str = ""):
        self.status = status
        self.url = url
        self.message = message
        super().__init__(f"{status} from {safe_url(url)}: {message}".rstrip(": "))


class RepositoryGateway(Protocol):
    """Search/fetch surface consumed by the scanner."""

    async def search_files_from_repo(
        self, repo: RepositoryHandle, pattern: str, access_token: Optional[str]
    ) -> List[Dict[str, Any]]: ...

    async def fetch_file_from_repo(
        self, repo: RepositoryHandle, path: str, access_token: Optional[str]
    ) -> str: ...


class GitHubClient:
    """Lightweight asyncio REST client for GitHub API operations.

    Use as an async context manager, or call :meth:`start` and :meth:`stop`
    explicitly. The access token is passed per call; no token means
    unauthenticated requests.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: int = Constants.REQUEST_TIMEOUT):
        """Initialize GitHub client.

        Args:
            base_url: Base URL for GitHub API (defaults to Constants.GITHUB_API_BASE)
            timeout: Total request timeout in seconds.
        """
        self.base_url = (base_url or Constants.GITHUB_API_BASE).rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "GitHubClient":
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    async def start(self) -> None:
        """Start the HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)

    async def stop(self) -> None:
        """Stop the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    def _get_headers(self, access_token: Optional[str], accept: Dict[str, str]) -> Dict[str, str]:
        """Get request headers including authorization if a token is given."""
        headers = {"User-Agent": Constants.USER_AGENT, **accept}
        if access_token:
            headers["Authorization"] = f"token {access_token}"
        return headers

    async def get_repository(self, full_name: str, access_token: Optional[str] = None) -> RepositoryHandle:
        """Resolve ``owner/name`` to a repository handle.

        Raises:
            RepositoryApiError: If the repository cannot be read.
        """
        url = f"{self.base_url}/repos/{full_name}"
        data = await self._get_json(url, access_token)
        return RepositoryHandle(id=data["id"], full_name=data["full_name"])

    async def search_files_from_repo(
        self,
        repo: RepositoryHandle,
        pattern: str,
        access_token: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Search a repository for files whose name matches ``pattern``.

        GitHub's ``filename:`` qualifier is a loose match, so callers should
        re-filter the returned names.

        Args:
            repo: Repository to search.
            pattern: Filename pattern, e.g. ``*.csproj`` or ``packages.config``.
            access_token: Optional token.

        Returns:
            List of search result items (each has at least ``name`` and ``path``).
        """
        query = quote(f"filename:{pattern} repo:{repo.full_name}", safe=":/")
        base = f"{self.base_url}/search/code?q={query}&per_page={Constants.REPO_API_PER_PAGE}"

        results: List[Dict[str, Any]] = []
        for page in range(1, Constants.SEARCH_MAX_PAGES + 1):
            data = await self._get_json(f"{base}&page={page}", access_token)
            items = data.get("items") or []
            results.extend(items)
            total = data.get("total_count", 0)
            if not items or len(results) >= total:
                break
        return results

    async def fetch_file_from_repo(
        self,
        repo: RepositoryHandle,
        path: str,
        access_token: Optional[str] = None,
    ) -> str:
        """Download the raw text of ``path`` from the default branch."""
        url = f"{self.base_url}/repos/{repo.full_name}/contents/{quote(path)}"
        return await self._request(url, access_token, HEADERS_RAW, as_json=False)

    async def _get_json(self, url: str, access_token: Optional[str]) -> Dict[str, Any]:
        return await self._request(url, access_token, HEADERS_JSON, as_json=True)

    async def _request(
        self,
        url: str,
        access_token: Optional[str],
        accept: Dict[str, str],
        *,
        as_json: bool,
    ) -> Any:
        """GET ``url`` and return decoded JSON or text.

        Raises:
            RepositoryApiError: On a non-200 status.
            aiohttp.ClientError: On transport failures.
        """
        if self._session is None:
            await self.start()
        assert self._session is not None
        safe_target = safe_url(url)

        with Timer() as t:
            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP request",
                    extra=extra_context(
                        event="http_request",
                        component="github",
                        action="GET",
                        target=safe_target,
                    ),
                )
            async with self._session.get(url, headers=self._get_headers(access_token, accept)) as res:
                if res.status != 200:
                    body = decode_content(await res.read())
                    logger.warning("GitHub request failed with status %s: %s", res.status, safe_target)
                    raise RepositoryApiError(res.status, url, body[:200])
                payload = await res.json(content_type=None) if as_json else decode_content(await res.read())

            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP response ok",
                    extra=extra_context(
                        event="http_response",
                        component="github",
                        action="GET",
                        outcome="success",
                        status_code=res.status,
                        duration_ms=t.duration_ms(),
                        target=safe_target,
                    ),
                )
        return payload
