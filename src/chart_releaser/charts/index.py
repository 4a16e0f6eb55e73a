"""Helm repository index (index.yaml) model.

The index maps chart names to the list of published versions of that chart.
Each version record carries the chart's Chart.yaml fields plus the download
URLs, the archive digest and the time it was added. ``(name, version)`` is
unique within an index.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from packaging.version import InvalidVersion, Version
from pydantic import ValidationError

from ..constants import INDEX_API_VERSION
from ..exceptions import ChartNotFoundError, DuplicateEntryError, IndexFileError
from .metadata import ChartMetadata

logger = logging.getLogger(__name__)

_RECORD_KEYS = ("urls", "digest", "created")


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as RFC 3339 in UTC with microseconds."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _now() -> str:
    return format_timestamp(datetime.now(timezone.utc))


def _timestamp_from_yaml(value: Any) -> str:
    # Unquoted timestamps written by other tools are parsed into datetimes
    if isinstance(value, datetime):
        return format_timestamp(value)
    return "" if value is None else str(value)


@dataclass
class ChartVersion:
    """One published version of a chart."""

    metadata: ChartMetadata
    urls: List[str] = field(default_factory=list)
    digest: str = ""
    created: str = ""

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def version(self) -> str:
        return self.metadata.version

    def to_dict(self) -> Dict[str, Any]:
        record = self.metadata.to_chart_yaml()
        record["urls"] = list(self.urls)
        record["digest"] = self.digest
        record["created"] = self.created
        return record

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ChartVersion:
        chart_fields = {k: v for k, v in data.items() if k not in _RECORD_KEYS}
        return cls(
            metadata=ChartMetadata.model_validate(chart_fields),
            urls=list(data.get("urls") or []),
            digest=str(data.get("digest") or ""),
            created=_timestamp_from_yaml(data.get("created")),
        )


def _version_sort_key(chart_version: ChartVersion) -> Tuple[bool, Optional[Version], str]:
    try:
        parsed: Optional[Version] = Version(chart_version.version)
    except InvalidVersion:
        parsed = None
    return (parsed is not None, parsed, chart_version.version)


@dataclass
class IndexFile:
    """In-memory Helm repository index.

    Attributes:
        api_version: Index format version, always "v1"
        generated: Time of the last mutation, RFC 3339
        entries: Chart name to published versions
        annotations: Optional free-form index annotations
    """

    api_version: str = INDEX_API_VERSION
    generated: str = ""
    entries: Dict[str, List[ChartVersion]] = field(default_factory=dict)
    annotations: Optional[Dict[str, Any]] = None

    @classmethod
    def new(cls) -> IndexFile:
        """Create an empty index stamped with the current time."""
        return cls(generated=_now())

    @classmethod
    def load(cls, path: str | Path) -> IndexFile:
        """Read an index from a YAML file.

        Raises:
            IndexFileError: If the file cannot be read or is not an index
        """
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise IndexFileError(f"failed to read index file {path}: {e}", {"path": str(path)}) from e

        if not isinstance(data, dict):
            raise IndexFileError(f"{path} is not a chart repository index", {"path": str(path)})

        entries: Dict[str, List[ChartVersion]] = {}
        try:
            for name, records in (data.get("entries") or {}).items():
                entries[str(name)] = [ChartVersion.from_dict(record) for record in records or []]
        except (AttributeError, TypeError, ValidationError) as e:
            raise IndexFileError(f"{path} has an invalid entry: {e}", {"path": str(path)}) from e

        index = cls(
            api_version=str(data.get("apiVersion") or INDEX_API_VERSION),
            generated=_timestamp_from_yaml(data.get("generated")),
            entries=entries,
            annotations=data.get("annotations"),
        )
        logger.debug(f"Loaded index {path} with {len(index)} chart versions")
        return index

    def __len__(self) -> int:
        return sum(len(versions) for versions in self.entries.values())

    def has(self, name: str, version: str) -> bool:
        """Return True when the index holds the given chart version."""
        return any(cv.version == version for cv in self.entries.get(name, []))

    def get(self, name: str, version: str) -> ChartVersion:
        """Return the given chart version.

        Raises:
            ChartNotFoundError: If the chart version is not in the index
        """
        for chart_version in self.entries.get(name, []):
            if chart_version.version == version:
                return chart_version
        raise ChartNotFoundError(
            f"no chart version found for {name}-{version}", {"name": name, "version": version}
        )

    def must_add(self, metadata: ChartMetadata, filename: str, base_url: str, digest: str) -> ChartVersion:
        """Add a chart version, building its download URL from base URL and filename.

        Args:
            metadata: Metadata of the chart being added
            filename: Archive file name, appended to base_url
            base_url: URL of the directory holding the archive; may be empty
            digest: Hex SHA256 digest of the archive

        Returns:
            The added ChartVersion

        Raises:
            IndexFileError: If the metadata lacks a name or version
            DuplicateEntryError: If the chart version is already indexed
        """
        if not metadata.name or not metadata.version:
            raise IndexFileError(
                "validation: chart name and version are required", {"name": metadata.name, "filename": filename}
            )
        if self.has(metadata.name, metadata.version):
            raise DuplicateEntryError(
                f"chart {metadata.name}-{metadata.version} is already in the index",
                {"name": metadata.name, "version": metadata.version},
            )

        metadata = metadata.model_copy()
        if not metadata.api_version:
            metadata.api_version = INDEX_API_VERSION

        url = f"{base_url.rstrip('/')}/{filename}" if base_url else filename
        chart_version = ChartVersion(metadata=metadata, urls=[url], digest=digest, created=_now())
        self.entries.setdefault(metadata.name, []).append(chart_version)
        return chart_version

    def sort_entries(self) -> None:
        """Order chart names alphabetically and each chart's versions newest first."""
        self.entries = {
            name: sorted(self.entries[name], key=_version_sort_key, reverse=True) for name in sorted(self.entries)
        }

    def touch(self) -> None:
        """Refresh the generated timestamp."""
        self.generated = _now()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "apiVersion": self.api_version,
            "entries": {name: [cv.to_dict() for cv in versions] for name, versions in self.entries.items()},
            "generated": self.generated,
        }
        if self.annotations:
            data["annotations"] = self.annotations
        return data

    def dumps(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=True, default_flow_style=False)

    def write_file(self, path: str | Path, mode: int = 0o644) -> None:
        """Write the index atomically.

        The content is written to a temporary file in the target directory
        and moved into place, so readers never see a partial index.
        """
        path = Path(path)
        content = self.dumps()
        fd, tmp_path = tempfile.mkstemp(prefix=".index-", suffix=".yaml", dir=str(path.parent))
        try:
            with os.fdopen(fd, "w") as f:
                f.write(content)
            os.chmod(tmp_path, mode)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
