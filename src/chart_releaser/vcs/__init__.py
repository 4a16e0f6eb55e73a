"""Version control access for publishing the index."""

from .git import Git, authenticated_url, run_git
from .protocol import VersionControl

__all__ = ["Git", "VersionControl", "authenticated_url", "run_git"]
