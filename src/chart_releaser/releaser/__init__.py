"""Release publication and index reconciliation."""

from .helpers import download_file, split_package_name_and_version
from .publisher import ReleasePublisher
from .reconciler import IndexReconciler

__all__ = ["IndexReconciler", "ReleasePublisher", "download_file", "split_package_name_and_version"]
