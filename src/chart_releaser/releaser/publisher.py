"""Release publisher: turns local chart packages into GitHub releases."""

from __future__ import annotations

import logging
import os
import re
from typing import Optional

import jinja2

from ..charts import Chart, load_chart
from ..config import Options
from ..constants import PROVENANCE_FILE_EXTENSION
from ..exceptions import (
    ChartReleaserError,
    NoChartsFoundError,
    ReleaseCreationError,
    ReleaseNotFoundError,
    TemplateRenderError,
)
from ..forge import Asset, ForgeClient, Release
from .helpers import list_packages

logger = logging.getLogger(__name__)

# Leading dot of Go template field references, as in "{{ .Name }}"
_GO_FIELD_REFERENCE = re.compile(r"(\{\{-?\s*)\.(?=[A-Za-z_])")


class ReleasePublisher:
    """Publishes every chart package of a directory as a release.

    Packages are processed in order and the run stops at the first failure;
    releases created before the failure stay on the forge.

    Args:
        config: Upload options
        forge: Forge client used to look up and create releases
    """

    def __init__(self, config: Options, forge: ForgeClient):
        self.config = config
        self.forge = forge
        self._template_env = jinja2.Environment(autoescape=False, undefined=jinja2.StrictUndefined)

    def publish(self, package_path: Optional[str] = None) -> None:
        """Create a release for each ``*.tgz`` package under ``package_path``.

        Args:
            package_path: Package directory; defaults to ``config.package_path``

        Raises:
            NoChartsFoundError: If the directory has no chart packages
            ChartLoadError: If a package is not a valid chart
            TemplateRenderError: If the release name cannot be computed
            ReleaseCreationError: If creating a release or uploading an asset fails
        """
        package_path = package_path or self.config.package_path
        packages = list_packages(package_path)
        if not packages:
            raise NoChartsFoundError(f"no charts found at {package_path}", {"path": package_path})

        for package in packages:
            chart = load_chart(package)
            release_name = self.compute_release_name(chart)
            release = self.build_release(chart, release_name)

            if self.config.skip_existing and self._release_exists(release_name):
                logger.info(f"Release {release_name} already exists, skipping {package}")
                continue

            logger.info(f"Creating release {release_name} for {package}")
            try:
                self.forge.create_release(release)
            except ChartReleaserError as e:
                raise ReleaseCreationError(
                    f"error creating GitHub release {release_name}: {e}",
                    {"release": release_name, "path": package, **e.context},
                ) from e

    def compute_release_name(self, chart: Chart) -> str:
        """Render the release name template against the chart metadata.

        Raises:
            TemplateRenderError: If the template is malformed or references an unknown field
        """
        template_source = self.config.release_name_template
        try:
            template = self._template_env.from_string(_GO_FIELD_REFERENCE.sub(r"\1", template_source))
            return template.render(**chart.metadata.template_context())
        except jinja2.TemplateError as e:
            raise TemplateRenderError(
                f"failed to render release name template {template_source!r} for {chart.path}: {e}",
                {"template": template_source, "path": chart.path},
            ) from e

    def get_release_notes(self, chart: Chart) -> str:
        """Return the configured notes file from the chart, or the chart description."""
        notes_file = self.config.release_notes_file
        if notes_file:
            chart_file = chart.get_file(notes_file)
            if chart_file is not None:
                return chart_file.data.decode("utf-8")
            logger.warning(f"The release note file {notes_file!r} is not present in the chart package {chart.path}")
        return chart.metadata.description or ""

    def build_release(self, chart: Chart, release_name: str) -> Release:
        """Describe the release for a chart package, attaching its provenance file when present."""
        release = Release(
            name=release_name,
            description=self.get_release_notes(chart),
            assets=[Asset(path=chart.path)],
            commit=self.config.commit,
            generate_release_notes=self.config.generate_release_notes,
            make_latest=str(self.config.make_release_latest).lower(),
        )
        prov_file = chart.path + PROVENANCE_FILE_EXTENSION
        if os.path.exists(prov_file):
            release.assets.append(Asset(path=prov_file))
        return release

    def _release_exists(self, release_name: str) -> bool:
        try:
            self.forge.get_release(release_name)
        except ReleaseNotFoundError:
            return False
        return True
