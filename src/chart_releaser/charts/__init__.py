"""Helm chart packages and repository index."""

from .digest import digest_file
from .index import ChartVersion, IndexFile
from .loader import load_chart
from .metadata import Chart, ChartFile, ChartMetadata, Maintainer

__all__ = [
    "Chart",
    "ChartFile",
    "ChartMetadata",
    "ChartVersion",
    "IndexFile",
    "Maintainer",
    "digest_file",
    "load_chart",
]
