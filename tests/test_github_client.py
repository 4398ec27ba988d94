"""Tests for the GitHub repository client against a local fake API."""

import asyncio

import pytest

aiohttp = pytest.importorskip("aiohttp")
from aiohttp import web  # noqa: E402
from aiohttp import test_utils  # noqa: E402

from models import RepositoryHandle  # noqa: E402
from repository.github import GitHubClient, RepositoryApiError, decode_content  # noqa: E402

REPO = RepositoryHandle(id=42, full_name="octo/app")


def _record(request):
    """Snapshot the parts of a request the tests assert on."""
    return {"path": request.path, "query": dict(request.query), "headers": request.headers.copy()}


def _make_app(seen):
    """Fake GitHub API recording incoming requests into ``seen``."""

    async def get_repo(request):
        seen.append(_record(request))
        if request.match_info["name"] == "missing":
            return web.json_response({"message": "Not Found"}, status=404)
        owner, name = request.match_info["owner"], request.match_info["name"]
        return web.json_response({"id": 42, "full_name": f"{owner}/{name}"})

    async def search_code(request):
        seen.append(_record(request))
        page = int(request.query.get("page", "1"))
        items = {
            1: [{"name": "A.csproj", "path": "A/A.csproj"}, {"name": "B.csproj", "path": "B/B.csproj"}],
            2: [{"name": "C.csproj", "path": "C/C.csproj"}],
        }.get(page, [])
        return web.json_response({"total_count": 3, "items": items})

    async def get_contents(request):
        seen.append(_record(request))
        return web.Response(text=f"<Project><!-- {request.match_info['path']} --></Project>")

    app = web.Application()
    app.router.add_get("/repos/{owner}/{name}", get_repo)
    app.router.add_get("/repos/{owner}/{name}/contents/{path:.*}", get_contents)
    app.router.add_get("/search/code", search_code)
    return app


def _run_with_server(scenario):
    """Run ``scenario(client)`` against a fresh fake API."""
    seen = []

    async def _run():
        async with test_utils.TestServer(_make_app(seen)) as ts:
            async with GitHubClient(base_url=str(ts.make_url("/"))) as client:
                return await scenario(client)

    return asyncio.run(_run()), seen


class TestGitHubClient:
    """Tests for repository resolution, code search and file fetch."""

    def test_get_repository(self):
        """Test owner/name resolves to a handle with id and full name."""
        handle, _ = _run_with_server(lambda c: c.get_repository("octo/app"))

        assert handle == REPO

    def test_get_repository_not_found(self):
        """Test a 404 surfaces as RepositoryApiError."""
        with pytest.raises(RepositoryApiError) as exc_info:
            _run_with_server(lambda c: c.get_repository("octo/missing"))

        assert exc_info.value.status == 404

    def test_search_paginates_until_total(self):
        """Test search results from all pages are concatenated."""
        items, seen = _run_with_server(
            lambda c: c.search_files_from_repo(REPO, "*.csproj", "secret")
        )

        assert [i["path"] for i in items] == ["A/A.csproj", "B/B.csproj", "C/C.csproj"]
        assert [r["query"]["page"] for r in seen] == ["1", "2"]
        assert seen[0]["query"]["q"] == "filename:*.csproj repo:octo/app"
        assert seen[0]["query"]["per_page"] == "100"

    def test_sends_token_only_when_given(self):
        """Test the Authorization header follows the access token."""
        _, with_token = _run_with_server(
            lambda c: c.search_files_from_repo(REPO, "packages.config", "secret")
        )
        _, without_token = _run_with_server(
            lambda c: c.search_files_from_repo(REPO, "packages.config", None)
        )

        assert with_token[0]["headers"]["Authorization"] == "token secret"
        assert "Authorization" not in without_token[0]["headers"]
        assert with_token[0]["headers"]["User-Agent"] == "nugetdeps/1.0"

    def test_fetch_file_returns_raw_text(self):
        """Test file contents are requested with the raw media type."""
        text, seen = _run_with_server(
            lambda c: c.fetch_file_from_repo(REPO, "src/App/App.csproj", None)
        )

        assert text == "<Project><!-- src/App/App.csproj --></Project>"
        assert seen[0]["headers"]["Accept"] == "application/vnd.github.raw"
        assert seen[0]["path"] == "/repos/octo/app/contents/src/App/App.csproj"


class TestRepositoryApiError:
    """Tests for error formatting."""

    def test_message_hides_query_string(self):
        """Test the error message does not leak URL query strings."""
        err = RepositoryApiError(403, "https://api.github.com/search/code?q=secret", "rate limited")

        assert "secret" not in str(err)
        assert str(err) == "403 from https://api.github.com/search/code: rate limited"


class TestDecodeContent:
    """Tests for decoding raw file bytes."""

    def test_utf8_with_and_without_bom(self):
        """Test UTF-8 content decodes and a BOM is dropped."""
        assert decode_content(b"\xef\xbb\xbf<Project/>") == "<Project/>"
        assert decode_content("<Project>é</Project>".encode("utf-8")) == "<Project>é</Project>"

    def test_utf16_by_bom(self):
        """Test UTF-16 content is detected from its byte order mark."""
        assert decode_content(b"\xff\xfe" + "<Project/>".encode("utf-16-le")) == "<Project/>"
        assert decode_content(b"\xfe\xff" + "<Project/>".encode("utf-16-be")) == "<Project/>"

    def test_invalid_bytes_are_replaced(self):
        """Test bytes that are not UTF-8 never raise."""
        assert decode_content(b"<a>Caf\xe9</a>") == "<a>Caf\ufffd</a>"
