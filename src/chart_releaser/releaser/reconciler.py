"""Index reconciler: merges published release assets into the chart index.

The reconciler lists every release on the forge, adds chart versions the
index does not know yet, writes the index when anything changed, and can
publish it to the pages branch by direct push or through a pull request.
"""

from __future__ import annotations

import logging
import os
import random
from typing import Optional

import requests

from ..charts import IndexFile, digest_file, load_chart
from ..config import Options
from ..constants import (
    CHART_ASSET_FILE_EXTENSION,
    INDEX_FILE_NAME,
    PR_BRANCH_PREFIX,
    PR_BRANCH_SUFFIX_LENGTH,
    PR_TITLE,
)
from ..exceptions import ChartReleaserError, DownloadError
from ..forge import ForgeClient
from ..vcs import VersionControl
from .helpers import (
    copy_file,
    download_file,
    random_string,
    split_package_name_and_version,
    strip_filename,
    url_filename,
)

logger = logging.getLogger(__name__)


class IndexReconciler:
    """Keeps the index file in step with the charts published as release assets.

    Args:
        config: Index options
        forge: Forge client used to list releases and open pull requests
        git: Version control used to publish the index
        session: Optional requests session for downloading archives
        rng: Random source for pull request branch names; seeded once per
             process when not given
    """

    def __init__(
        self,
        config: Options,
        forge: ForgeClient,
        git: VersionControl,
        session: Optional[requests.Session] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config
        self.forge = forge
        self.git = git
        self.session = session
        self.rng = rng or random.Random()

    def reconcile(self) -> bool:
        """Update the index file from the forge's releases.

        Returns:
            True when the index gained entries and was written, False otherwise

        Raises:
            ChartReleaserError: On any listing, download, metadata, digest or
                publication failure; the index file is left untouched unless
                the failure happens after it was written
        """
        releases = self.forge.get_releases()
        for release in releases:
            logger.info(f"Found release: {release.name}")

        worktree: Optional[str] = None
        if self.config.push or self.config.pr:
            worktree = self.git.add_worktree("", f"{self.config.remote}/{self.config.pages_branch}")

        try:
            index = self._load_index(worktree)

            changed = False
            for release in releases:
                for asset in release.assets:
                    if not asset.url:
                        continue
                    name = url_filename(asset.url)
                    # Ignore any other files added to the release by users
                    if os.path.splitext(name)[1] != CHART_ASSET_FILE_EXTENSION:
                        continue
                    package_name, package_version = split_package_name_and_version(
                        name[: -len(CHART_ASSET_FILE_EXTENSION)]
                    )
                    logger.info(f"Found {package_name}-{package_version}{CHART_ASSET_FILE_EXTENSION}")
                    if index.has(package_name, package_version):
                        continue
                    if not self.add_to_index_file(index, asset.url):
                        continue
                    changed = True
                    break

            if not changed:
                logger.info(f"Index {self.config.index_path} did not change")
                return False

            self._write_index(index)

            if worktree is not None:
                self._publish_index(worktree)
            return True
        finally:
            if worktree is not None:
                self._remove_worktree(worktree)

    def _remove_worktree(self, worktree: str) -> None:
        try:
            self.git.remove_worktree("", worktree)
        except ChartReleaserError as e:
            logger.warning(f"Failed to remove worktree {worktree}: {e}")

    def add_to_index_file(self, index: IndexFile, url: str) -> bool:
        """Download a chart archive and add it to ``index``.

        The file name split is lossy for versions containing hyphens, so the
        chart's own name and version decide whether it is already indexed.

        Returns:
            True when an entry was added, False when the chart was already indexed

        Raises:
            DownloadError: If the archive cannot be downloaded or hashed
            ChartLoadError: If the archive is not a chart package
        """
        try:
            archive = download_file(
                url, self.config.package_path, session=self.session, timeout=self.config.request_timeout
            )
        except DownloadError as e:
            raise DownloadError(f"err in download: {e}", {"url": url, **e.context}) from e

        logger.info(f"Extracting chart metadata from {archive}")
        chart = load_chart(archive)
        if index.has(chart.metadata.name, chart.metadata.version):
            logger.info(f"{chart.metadata.name}-{chart.metadata.version} is already in the index")
            return False

        logger.info(f"Calculating hash for {archive}")
        try:
            digest = digest_file(archive)
        except OSError as e:
            raise DownloadError(f"failed to hash {archive}: {e}", {"path": archive}) from e

        # must_add appends the file name to the base URL itself
        index.must_add(chart.metadata, os.path.basename(archive), strip_filename(url), digest)
        return True

    def _load_index(self, worktree: Optional[str]) -> IndexFile:
        if worktree is not None:
            published = os.path.join(worktree, INDEX_FILE_NAME)
            if os.path.exists(published):
                logger.info(f"Loading index from {published}")
                return IndexFile.load(published)
        if os.path.exists(self.config.index_path):
            logger.info(f"Loading index from {self.config.index_path}")
            return IndexFile.load(self.config.index_path)
        return IndexFile.new()

    def _write_index(self, index: IndexFile) -> None:
        index_dir = os.path.dirname(self.config.index_path)
        if index_dir:
            os.makedirs(index_dir, exist_ok=True)

        logger.info(f"Updating index {self.config.index_path}")
        index.sort_entries()
        index.touch()
        index.write_file(self.config.index_path)

    def _publish_index(self, worktree: str) -> None:
        index_yaml_path = os.path.join(worktree, INDEX_FILE_NAME)
        copy_file(self.config.index_path, index_yaml_path)
        self.git.add(worktree, index_yaml_path)
        self.git.commit(worktree, f"Update {self.config.pages_index_path}")

        push_url = self.git.get_push_url(self.config.remote, self.config.token)

        if self.config.push:
            logger.info(f"Pushing to branch {self.config.pages_branch!r}")
            self.git.push(worktree, push_url, f"HEAD:refs/heads/{self.config.pages_branch}")
        elif self.config.pr:
            branch = self.new_branch_name()
            logger.info(f"Pushing to branch {branch!r}")
            self.git.push(worktree, push_url, f"HEAD:refs/heads/{branch}")

            logger.info(f"Creating pull request against branch {self.config.pages_branch!r}")
            pr_url = self.forge.create_pull_request(
                self.config.owner, self.config.git_repo, PR_TITLE, branch, self.config.pages_branch
            )
            logger.info(f"Pull request created: {pr_url}")

    def new_branch_name(self) -> str:
        """Return a fresh branch name for an index pull request."""
        return PR_BRANCH_PREFIX + random_string(PR_BRANCH_SUFFIX_LENGTH, self.rng)
