"""Custom exceptions for chart-releaser.

Every error raised by the publisher and the reconciler derives from
ChartReleaserError. Each class carries a ``kind`` that names the failure
category (input, metadata, network, not_found, index, vcs) and a ``context``
dictionary with identifiers such as the release name, file path or URL.
"""

from typing import Any, Dict, Optional, Sequence


class ChartReleaserError(Exception):
    """Base exception for all chart-releaser failures.

    Attributes:
        kind: Failure category shared by every instance of the class.
        context: Dictionary containing error details such as release name,
                 file path, URL, or HTTP status.
    """

    kind = "error"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Initialize the error with message and optional context.

        Args:
            message: Human-readable error message
            context: Optional dictionary with error details for debugging
        """
        super().__init__(message)
        self.context = context or {}


class InputError(ChartReleaserError):
    """Exception raised when user-supplied input cannot be used."""

    kind = "input"


class NoChartsFoundError(InputError):
    """Exception raised when the package directory holds no chart archives."""


class TemplateRenderError(InputError):
    """Exception raised when the release name template cannot be rendered."""


class InvalidURLError(InputError):
    """Exception raised when a download URL is not an absolute http(s) URL."""


class ChartLoadError(ChartReleaserError):
    """Exception raised when an archive is not a valid Helm chart package.

    The context always holds the offending ``path``.
    """

    kind = "metadata"


class NetworkError(ChartReleaserError):
    """Exception raised when a remote operation fails."""

    kind = "network"


class ForgeError(NetworkError):
    """Exception raised when a GitHub API call fails.

    The context holds ``method``, ``url`` and, when a response was received,
    ``status_code``.
    """


class DownloadError(NetworkError):
    """Exception raised when a release asset cannot be downloaded."""


class ReleaseCreationError(NetworkError):
    """Exception raised when a release or one of its assets cannot be created."""


class ReleaseNotFoundError(ChartReleaserError):
    """Exception raised when a release lookup finds nothing.

    Skip-existing treats this as "no existing release", not as a failure.
    """

    kind = "not_found"


class IndexFileError(ChartReleaserError):
    """Exception raised for index lookups and index consistency problems."""

    kind = "index"


class ChartNotFoundError(IndexFileError):
    """Exception raised when a chart version is absent from the index."""


class DuplicateEntryError(IndexFileError):
    """Exception raised when adding a chart version the index already has."""


class GitCommandError(ChartReleaserError):
    """Exception raised when a git subprocess exits with a non-zero status."""

    kind = "vcs"

    def __init__(self, command: Sequence[str], returncode: int, stdout: str, stderr: str) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"Command {' '.join(command)} failed with exit code {returncode}: {stderr.strip()}",
            {"command": self.command, "returncode": returncode},
        )
