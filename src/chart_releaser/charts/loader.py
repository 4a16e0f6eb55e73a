"""Load Helm chart packages (.tgz archives) into Chart objects."""

from __future__ import annotations

import logging
import posixpath
import tarfile
from pathlib import Path
from typing import Dict, List

import yaml
from pydantic import ValidationError

from ..constants import CHART_METADATA_FILE
from ..exceptions import ChartLoadError
from .metadata import Chart, ChartFile, ChartMetadata

logger = logging.getLogger(__name__)

# Files and directories that Helm treats as chart structure rather than
# user files; they are not exposed through Chart.files.
_STRUCTURAL_FILES = {CHART_METADATA_FILE, "values.yaml", "values.schema.json"}
_STRUCTURAL_DIRS = ("templates/", "charts/")


def load_chart(path: str | Path) -> Chart:
    """
    Read a chart package and return its metadata and embedded files.

    The archive must contain a single top-level directory holding a
    Chart.yaml with at least ``name`` and ``version``.

    Args:
        path: Path to a gzipped tar chart package

    Returns:
        Chart with parsed metadata and the non-template files of the chart

    Raises:
        ChartLoadError: If the file is not a readable chart package
    """
    path = str(path)
    try:
        contents = _read_archive(path)
    except (OSError, tarfile.TarError) as e:
        raise ChartLoadError(f"{path} is not a helm chart package: {e}", {"path": path}) from e

    if not contents:
        raise ChartLoadError(f"{path} is not a helm chart package: archive is empty", {"path": path})

    raw_metadata = contents.pop(CHART_METADATA_FILE, None)
    if raw_metadata is None:
        raise ChartLoadError(
            f"{path} is not a helm chart package: {CHART_METADATA_FILE} file is missing", {"path": path}
        )

    try:
        data = yaml.safe_load(raw_metadata)
    except yaml.YAMLError as e:
        raise ChartLoadError(f"{path} is not a helm chart package: invalid {CHART_METADATA_FILE}: {e}", {"path": path}) from e
    if not isinstance(data, dict):
        raise ChartLoadError(
            f"{path} is not a helm chart package: {CHART_METADATA_FILE} must be a mapping", {"path": path}
        )

    try:
        metadata = ChartMetadata.model_validate(data)
    except ValidationError as e:
        raise ChartLoadError(f"{path} is not a helm chart package: {e}", {"path": path}) from e

    files: List[ChartFile] = []
    for name in sorted(contents):
        if name in _STRUCTURAL_FILES or name.startswith(_STRUCTURAL_DIRS):
            continue
        files.append(ChartFile(name=name, data=contents[name]))

    logger.debug(f"Loaded chart {metadata.name}-{metadata.version} from {path} with {len(files)} files")
    return Chart(path=path, metadata=metadata, files=files)


def _read_archive(path: str) -> Dict[str, bytes]:
    """Return regular file contents keyed by their path below the chart root."""
    contents: Dict[str, bytes] = {}
    with tarfile.open(path, "r:gz") as archive:
        for member in archive:
            if not member.isfile():
                continue
            name = posixpath.normpath(member.name.replace("\\", "/"))
            if name.startswith("/") or name.startswith(".."):
                raise tarfile.TarError(f"chart contains illegal path {member.name!r}")
            parts = name.split("/", 1)
            if len(parts) < 2:
                # Files next to the chart directory are not part of the chart
                continue
            extracted = archive.extractfile(member)
            if extracted is None:
                continue
            contents[parts[1]] = extracted.read()
    return contents
