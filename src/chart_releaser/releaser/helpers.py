"""Helpers shared by the publisher and the reconciler."""

from __future__ import annotations

import glob
import logging
import os
import random
import shutil
from typing import List, Optional, Tuple
from urllib.parse import urlsplit

import requests

from ..constants import CHART_ASSET_FILE_EXTENSION, DEFAULT_REQUEST_TIMEOUT, PR_BRANCH_ALPHABET
from ..exceptions import DownloadError, InvalidURLError

logger = logging.getLogger(__name__)

_DOWNLOAD_CHUNK_SIZE = 64 * 1024


def split_package_name_and_version(pkg: str) -> Tuple[str, str]:
    """Split ``name-version`` at the last hyphen.

    ``foo-bar-1.2.3`` gives ``("foo-bar", "1.2.3")``. A version that itself
    contains a hyphen (``foo-1.0.0-rc.1``) is split inside the version; this
    is a known limitation of deriving chart coordinates from file names.

    Raises:
        ValueError: If ``pkg`` contains no hyphen
    """
    delim_index = pkg.rfind("-")
    if delim_index < 0:
        raise ValueError(f"package file name {pkg!r} has no hyphen between chart name and version")
    return pkg[:delim_index], pkg[delim_index + 1 :]


def url_filename(url: str) -> str:
    """Return the last path segment of a URL."""
    return os.path.basename(urlsplit(url).path)


def strip_filename(url: str) -> str:
    """Drop the last path segment of a URL, keeping everything before it."""
    return url.rsplit("/", 1)[0] if "/" in url else ""


def list_packages(directory: str) -> List[str]:
    """Return chart archives directly under ``directory`` in sorted order."""
    return sorted(glob.glob(os.path.join(glob.escape(directory), "*" + CHART_ASSET_FILE_EXTENSION)))


def download_file(
    url: str,
    directory: str,
    session: Optional[requests.Session] = None,
    timeout: int = DEFAULT_REQUEST_TIMEOUT,
) -> str:
    """
    Download ``url`` into ``directory`` unless a file with the same name exists.

    An existing file is reused as is, without verifying its content.

    Args:
        url: Absolute http(s) URL of the file
        directory: Download cache directory, created when missing
        session: Optional requests session
        timeout: Request timeout in seconds

    Returns:
        Path of the downloaded (or reused) file

    Raises:
        InvalidURLError: If ``url`` is not an absolute http(s) URL
        DownloadError: If the request fails or the file cannot be written
    """
    file_path = os.path.join(directory, url_filename(url))

    try:
        os.makedirs(directory, exist_ok=True)
    except OSError as e:
        raise DownloadError(f"error creating directory {directory}: {e}", {"path": directory}) from e

    if os.path.exists(file_path):
        logger.info(f"File already exists: {file_path}")
        return file_path

    parsed = urlsplit(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidURLError(f"invalid URL: {url}", {"url": url})

    client = session or requests
    try:
        response = client.get(url, stream=True, timeout=timeout)
    except requests.RequestException as e:
        raise DownloadError(f"error sending request to {url}: {e}", {"url": url}) from e

    with response:
        if response.status_code != 200:
            raise DownloadError(
                f"error response from {url}: {response.status_code} {response.reason}",
                {"url": url, "status_code": response.status_code},
            )
        try:
            with open(file_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=_DOWNLOAD_CHUNK_SIZE):
                    f.write(chunk)
        except (OSError, requests.RequestException) as e:
            raise DownloadError(f"error saving file {file_path}: {e}", {"url": url, "path": file_path}) from e

    logger.info(f"Downloaded {url} to {file_path}")
    return file_path


def copy_file(src: str, dst: str) -> None:
    shutil.copyfile(src, dst)


def random_string(n: int, rng: random.Random) -> str:
    """Return ``n`` random lowercase alphanumeric characters drawn from ``rng``."""
    return "".join(rng.choice(PR_BRANCH_ALPHABET) for _ in range(n))
