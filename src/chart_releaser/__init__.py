"""chart-releaser - publish Helm charts as GitHub releases.

This package uploads chart packages to GitHub releases and keeps a Helm
repository index (index.yaml) in step with the charts published there.
"""

from __future__ import annotations

__version__ = "1.0.0"

from .config import Options
from .exceptions import ChartReleaserError
from .releaser import IndexReconciler, ReleasePublisher

__all__ = [
    "ChartReleaserError",
    "IndexReconciler",
    "Options",
    "ReleasePublisher",
    "__version__",
]
