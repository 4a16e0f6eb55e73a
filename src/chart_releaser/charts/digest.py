"""Content digests for chart archives."""

from __future__ import annotations

import hashlib
from pathlib import Path

_CHUNK_SIZE = 8192


def digest_file(path: str | Path) -> str:
    """Compute the hex SHA256 digest Helm stores for a chart archive.

    Raises:
        OSError: If the file cannot be read
    """
    digest = hashlib.sha256()
    with open(path, "rb") as file_handle:
        for chunk in iter(lambda: file_handle.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()
