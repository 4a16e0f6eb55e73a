"""VersionControl abstract interface used to publish the index."""

from abc import ABC, abstractmethod


class VersionControl(ABC):
    """Working tree and push operations needed to publish the index file."""

    @abstractmethod
    def add_worktree(self, working_dir: str, committish: str) -> str:
        """Check out ``committish`` into a new temporary worktree and return its path."""

    @abstractmethod
    def remove_worktree(self, working_dir: str, path: str) -> None:
        """Remove a worktree created by add_worktree."""

    @abstractmethod
    def add(self, working_dir: str, *paths: str) -> None:
        """Stage paths."""

    @abstractmethod
    def commit(self, working_dir: str, message: str) -> None:
        """Commit staged changes."""

    @abstractmethod
    def push(self, working_dir: str, *args: str) -> None:
        """Push, passing ``args`` (remote URL and refspecs) through."""

    @abstractmethod
    def get_push_url(self, remote: str, token: str) -> str:
        """Return an authenticated push URL for ``remote``."""
