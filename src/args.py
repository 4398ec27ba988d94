"""Argument parsing functionality for nugetdeps."""

import argparse

from constants import Constants


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="nugetdeps",
        description=(
            "nugetdeps - List NuGet dependencies declared in a GitHub repository"
        ),
        add_help=True,
    )

    parser.add_argument("-r", "--repo",
                        dest="REPO",
                        help="Repository full name, i.e: owner/name",
                        action="store", type=str,
                        required=True)
    parser.add_argument("--token",
                        dest="TOKEN",
                        help=f"GitHub access token (default: ${Constants.ENV_GITHUB_TOKEN})",
                        action="store",
                        type=str)
    parser.add_argument("--api-url",
                        dest="API_URL",
                        help="GitHub API base URL",
                        action="store",
                        type=str,
                        default=Constants.GITHUB_API_BASE)
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output JSON file (default: stdout)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='WARNING')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
