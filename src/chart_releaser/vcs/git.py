"""Git command-line implementation of VersionControl."""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from typing import Optional, Sequence
from urllib.parse import urlsplit, urlunsplit

from ..exceptions import GitCommandError
from .protocol import VersionControl

logger = logging.getLogger(__name__)

TOKEN_USER = "x-access-token"


def run_git(args: Sequence[str], cwd: Optional[str] = None) -> str:
    """Run ``git`` with ``args`` and return its stripped stdout.

    Raises:
        GitCommandError: If git exits with a non-zero status
    """
    command = ["git", *args]
    logger.debug(f"Executing: {' '.join(command)}")
    result = subprocess.run(
        command,
        cwd=cwd or None,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        check=False,
    )
    if result.returncode != 0:
        raise GitCommandError(command, result.returncode, result.stdout, result.stderr)
    return result.stdout.strip()


def authenticated_url(url: str, token: str) -> str:
    """Turn a remote URL into an https URL carrying ``token`` as credentials.

    SSH remotes (``git@github.com:owner/repo.git`` or ``ssh://...``) are
    rewritten to https. Existing credentials are replaced.
    """
    if "://" not in url and "@" in url and ":" in url:
        user_host, _, path = url.partition(":")
        host = user_host.split("@", 1)[1]
        url = f"https://{host}/{path.lstrip('/')}"

    parts = urlsplit(url)
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    scheme = "https" if parts.scheme in ("ssh", "git", "") else parts.scheme
    return urlunsplit((scheme, f"{TOKEN_USER}:{token}@{host}", parts.path, parts.query, parts.fragment))


class Git(VersionControl):
    """Runs git subprocesses in the given working directory."""

    def add_worktree(self, working_dir: str, committish: str) -> str:
        path = tempfile.mkdtemp(prefix="chart-releaser-")
        run_git(["worktree", "add", "--detach", path, committish], cwd=working_dir)
        logger.info(f"Checked out {committish} into worktree {path}")
        return path

    def remove_worktree(self, working_dir: str, path: str) -> None:
        run_git(["worktree", "remove", path, "--force"], cwd=working_dir)

    def add(self, working_dir: str, *paths: str) -> None:
        if not paths:
            raise ValueError("no paths to add")
        run_git(["add", "--", *paths], cwd=working_dir)

    def commit(self, working_dir: str, message: str) -> None:
        run_git(["commit", "--message", message], cwd=working_dir)

    def push(self, working_dir: str, *args: str) -> None:
        run_git(["push", *args], cwd=working_dir)

    def get_push_url(self, remote: str, token: str) -> str:
        url = run_git(["remote", "get-url", "--push", remote], cwd=os.getcwd())
        if not token:
            return url
        return authenticated_url(url, token)
