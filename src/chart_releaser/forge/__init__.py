"""Forge (GitHub) release and pull request access."""

from .github import GitHubClient
from .protocol import ForgeClient
from .types import Asset, Release

__all__ = ["Asset", "ForgeClient", "GitHubClient", "Release"]
