"""Chart metadata and in-memory chart representation.

ChartMetadata mirrors the fields of a Helm ``Chart.yaml``. Keys are stored
with their Chart.yaml spelling (``apiVersion``, ``appVersion``) when dumped,
and unknown keys are preserved so that index entries keep everything the
chart author wrote.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Maintainer(BaseModel):
    """A chart maintainer entry."""

    model_config = ConfigDict(extra="allow")

    name: str
    email: Optional[str] = None
    url: Optional[str] = None


class ChartMetadata(BaseModel):
    """Metadata read from a chart's Chart.yaml."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    api_version: Optional[str] = Field(default=None, alias="apiVersion")
    name: str
    version: str
    description: Optional[str] = None
    app_version: Optional[str] = Field(default=None, alias="appVersion")
    kube_version: Optional[str] = Field(default=None, alias="kubeVersion")
    type: Optional[str] = None
    home: Optional[str] = None
    icon: Optional[str] = None
    sources: Optional[List[str]] = None
    keywords: Optional[List[str]] = None
    maintainers: Optional[List[Maintainer]] = None
    annotations: Optional[Dict[str, Any]] = None
    deprecated: Optional[bool] = None

    @field_validator("version", "app_version", mode="before")
    @classmethod
    def _stringify_numbers(cls, value: Any) -> Any:
        # YAML reads unquoted versions such as 1.0 as numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    def to_chart_yaml(self) -> Dict[str, Any]:
        """Dump the metadata with Chart.yaml key names, dropping unset fields."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def template_context(self) -> Dict[str, Any]:
        """Expose metadata to release name templates.

        Keys are capitalised so that templates read like ``{{ Name }}-{{ Version }}``.
        """
        context = {}
        for key, value in self.to_chart_yaml().items():
            context[key[:1].upper() + key[1:]] = value
        context.setdefault("Description", "")
        return context


@dataclass(frozen=True)
class ChartFile:
    """A file embedded in a chart package, relative to the chart root."""

    name: str
    data: bytes


@dataclass
class Chart:
    """A loaded chart package.

    Attributes:
        path: Archive the chart was loaded from
        metadata: Parsed Chart.yaml
        files: Non-template files shipped with the chart (README.md, NOTES, ...)
    """

    path: str
    metadata: ChartMetadata
    files: List[ChartFile] = field(default_factory=list)

    def get_file(self, name: str) -> Optional[ChartFile]:
        for chart_file in self.files:
            if chart_file.name == name:
                return chart_file
        return None
