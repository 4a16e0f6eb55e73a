"""ForgeClient abstract interface.

The publisher and the reconciler depend only on this interface, so the
GitHub implementation can be replaced by a fake in tests.
"""

from abc import ABC, abstractmethod
from typing import List

from .types import Release


class ForgeClient(ABC):
    """Release and pull request operations of a hosted git forge."""

    @abstractmethod
    def create_release(self, release: Release) -> None:
        """Create a release and upload all of its assets.

        Each asset upload is retried on failure; the last failure propagates.

        Raises:
            ChartReleaserError: If the release or any asset cannot be created
        """

    @abstractmethod
    def get_release(self, tag: str) -> Release:
        """Fetch the release tagged ``tag``.

        Raises:
            ReleaseNotFoundError: If no such release exists
            ForgeError: If the lookup fails for another reason
        """

    @abstractmethod
    def get_releases(self) -> List[Release]:
        """Return every release of the repository, following pagination to the end."""

    @abstractmethod
    def create_pull_request(self, owner: str, repo: str, message: str, head: str, base: str) -> str:
        """Open a pull request from ``head`` into ``base``.

        The first line of ``message`` is the title; the remainder, trimmed,
        is the body.

        Returns:
            URL of the pull request
        """
