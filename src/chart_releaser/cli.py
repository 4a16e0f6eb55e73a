#!/usr/bin/env python3
"""Command-line entry point: ``cr upload`` and ``cr index``."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from dotenv import find_dotenv, load_dotenv

from . import __version__
from .config import INDEX_REQUIRED, UPLOAD_REQUIRED, ConfigurationError, Options
from .exceptions import ChartReleaserError
from .forge import GitHubClient
from .releaser import IndexReconciler, ReleasePublisher
from .vcs import Git

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Parser destinations that are not Options fields
_NON_OPTION_ARGS = {"command", "config", "log_level", "func"}


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging from ``level`` or the LOG_LEVEL environment variable."""
    log_level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, log_level, logging.INFO), format=LOG_FORMAT)


def _github_client(options: Options) -> GitHubClient:
    return GitHubClient(
        options.owner,
        options.git_repo,
        token=options.token,
        base_url=options.git_base_url,
        upload_url=options.git_upload_url,
        timeout=options.request_timeout,
    )


def cmd_upload(options: Options) -> None:
    options.validate_or_raise(required=UPLOAD_REQUIRED)
    publisher = ReleasePublisher(options, _github_client(options))
    publisher.publish()


def cmd_index(options: Options) -> None:
    options.validate_or_raise(required=INDEX_REQUIRED)
    reconciler = IndexReconciler(options, _github_client(options), Git())
    changed = reconciler.reconcile()
    logger.info("Index updated" if changed else "Index unchanged")


def _add_repo_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-o", "--owner", help="GitHub username or organization")
    parser.add_argument("-r", "--git-repo", help="GitHub repository")
    parser.add_argument("-t", "--token", help="GitHub Auth Token")
    parser.add_argument(
        "-b", "--git-base-url", help="GitHub Base URL (only needed for private GitHub)"
    )
    parser.add_argument(
        "-u", "--git-upload-url", help="GitHub Upload URL (only needed for private GitHub)"
    )
    parser.add_argument(
        "-p", "--package-path", help="Path to directory with chart packages (default: .cr-release-packages)"
    )
    parser.add_argument("--request-timeout", type=int, help="Timeout in seconds for each HTTP request")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cr",
        description="Publish Helm charts as GitHub releases and maintain their index.yaml",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="Config file (default: cr.yaml when present)")
    parser.add_argument("--log-level", help="Logging level (default: LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    upload = subparsers.add_parser("upload", help="Upload Helm chart packages to GitHub Releases")
    _add_repo_arguments(upload)
    upload.add_argument("-c", "--commit", help="Target commit for release")
    upload.add_argument(
        "--skip-existing", action=argparse.BooleanOptionalAction, default=None, help="Skip upload if release exists"
    )
    upload.add_argument(
        "--release-name-template",
        help="Template for computing release names, using chart metadata (default: '{{ Name }}-{{ Version }}')",
    )
    upload.add_argument(
        "--release-notes-file",
        help="Markdown file with chart release notes, read from the chart package. "
        "If it is empty or the file is not found, the chart description is used instead",
    )
    upload.add_argument(
        "--generate-release-notes",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Let GitHub generate the name and body of the release",
    )
    upload.add_argument(
        "--make-release-latest",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Mark the created GitHub release as 'latest' (default: true)",
    )
    upload.set_defaults(func=cmd_upload)

    index = subparsers.add_parser("index", help="Update the Helm repo index.yaml from GitHub Releases")
    _add_repo_arguments(index)
    index.add_argument("-i", "--index-path", help="Path to index file (default: .cr-index/index.yaml)")
    index.add_argument("--pages-branch", help="The GitHub pages branch (default: gh-pages)")
    index.add_argument("--pages-index-path", help="The GitHub pages index path (default: index.yaml)")
    index.add_argument("--remote", help="The Git remote used when creating a local worktree (default: origin)")
    index.add_argument(
        "--push", action=argparse.BooleanOptionalAction, default=None, help="Push index.yaml to the pages branch"
    )
    index.add_argument(
        "--pr",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Create a pull request for index.yaml against the pages branch",
    )
    index.set_defaults(func=cmd_index)

    return parser


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    return {key: value for key, value in vars(args).items() if key not in _NON_OPTION_ARGS and value is not None}


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command line and return the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Loads .env from the current working directory
    load_dotenv(find_dotenv(usecwd=True))
    configure_logging(args.log_level)

    try:
        options = Options.load(config_file=args.config, overrides=_overrides(args))
        logger.debug(f"Resolved options: {options.redacted()}")
        args.func(options)
    except (ChartReleaserError, ConfigurationError) as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
