"""nugetdeps - NuGet dependency lister for GitHub repositories.

    Returns:
        int: Exit code
"""
import asyncio
import json
import logging
import os
import sys

import aiohttp

from constants import ExitCodes, Constants
from common.logging_utils import configure_logging
from args import parse_args
from registry.nuget import get_dependencies_from_github_repo
from repository.github import GitHubClient, RepositoryApiError

logger = logging.getLogger(__name__)


async def scan_repository(full_name, access_token=None, api_url=None):
    """Resolve ``owner/name`` and scan it.

    Args:
        full_name (str): Repository full name.
        access_token (str, optional): GitHub token.
        api_url (str, optional): GitHub API base URL.

    Raises:
        RepositoryApiError: If the repository cannot be resolved.

    Returns:
        list: Dependency records.
    """
    async with GitHubClient(base_url=api_url) as client:
        repo = await client.get_repository(full_name, access_token)
        return await get_dependencies_from_github_repo(repo, access_token, gateway=client)


def export_json(records, path=None):
    """Write dependency records as JSON to ``path`` or stdout."""
    payload = json.dumps([r.to_dict() for r in records], indent=2)
    if not path:
        print(payload)
        return
    try:
        with open(path, "w", encoding="utf-8") as file:
            file.write(payload + "\n")
        logging.info("JSON file has been successfully exported at: %s", path)
    except OSError as e:
        logging.error("JSON file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL, args.LOG_FILE)
    token = args.TOKEN or os.environ.get(Constants.ENV_GITHUB_TOKEN)

    try:
        records = asyncio.run(scan_repository(args.REPO, token, args.API_URL))
    except (RepositoryApiError, aiohttp.ClientError, asyncio.TimeoutError) as e:
        logging.error("Couldn't resolve repository %s: %s", args.REPO, e)
        sys.exit(ExitCodes.CONNECTION_ERROR.value)

    export_json(records, args.OUTPUT)
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
