"""GitHub REST API client for releases and pull requests."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

import requests

from ..constants import (
    DEFAULT_GIT_BASE_URL,
    DEFAULT_GIT_UPLOAD_URL,
    DEFAULT_REQUEST_TIMEOUT,
    GITHUB_PAGE_SIZE,
    UPLOAD_MAX_ATTEMPTS,
    UPLOAD_RETRY_DELAY_SECONDS,
)
from ..exceptions import ForgeError, ReleaseCreationError, ReleaseNotFoundError
from ..retry import with_retry
from .protocol import ForgeClient
from .types import Asset, Release

logger = logging.getLogger(__name__)


def _ensure_trailing_slash(url: str) -> str:
    return url if url.endswith("/") else url + "/"


def _response_field(response: requests.Response, key: str, method: str, url: str) -> Any:
    try:
        return response.json()[key]
    except (ValueError, KeyError, TypeError) as e:
        raise ForgeError(
            f"{method} {url} returned an unexpected response without {key!r}: {response.text[:500]}",
            {"method": method, "url": url, "status_code": response.status_code},
        ) from e


def _release_from_api(data: Dict[str, Any]) -> Release:
    assets = [Asset(path=asset["name"], url=asset["browser_download_url"]) for asset in data.get("assets") or []]
    return Release(
        name=data.get("name") or data.get("tag_name") or "",
        description=data.get("body") or "",
        assets=assets,
        commit=data.get("target_commitish") or "",
    )


class GitHubClient(ForgeClient):
    """ForgeClient backed by the GitHub REST API v3.

    Args:
        owner: Repository owner (user or organization)
        repo: Repository name
        token: Auth token; requests are anonymous when empty
        base_url: API base URL, for GitHub Enterprise
        upload_url: Upload base URL for release assets
        timeout: Timeout in seconds applied to every request
        session: Optional requests session, mainly for tests
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str = "",
        base_url: str = DEFAULT_GIT_BASE_URL,
        upload_url: str = DEFAULT_GIT_UPLOAD_URL,
        timeout: int = DEFAULT_REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.owner = owner
        self.repo = repo
        self.base_url = _ensure_trailing_slash(base_url)
        self.upload_url = _ensure_trailing_slash(upload_url)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github.v3+json",
                "User-Agent": "chart-releaser",
            }
        )
        if token:
            self.session.headers["Authorization"] = f"token {token}"

    def _repo_url(self, *parts: str) -> str:
        return self.base_url + "/".join(("repos", self.owner, self.repo) + parts)

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        kwargs.setdefault("timeout", self.timeout)
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise ForgeError(f"{method} {url} failed: {e}", {"method": method, "url": url}) from e

        if response.status_code >= 400:
            raise ForgeError(
                f"{method} {url} failed with status {response.status_code}: {response.text[:500]}",
                {"method": method, "url": url, "status_code": response.status_code},
            )
        return response

    def get_release(self, tag: str) -> Release:
        """Fetch the release tagged ``tag``."""
        url = self._repo_url("releases", "tags", tag)
        try:
            response = self._request("GET", url)
        except ForgeError as e:
            if e.context.get("status_code") == 404:
                raise ReleaseNotFoundError(f"release {tag} not found", {"tag": tag}) from e
            raise
        return _release_from_api(response.json())

    def get_releases(self) -> List[Release]:
        """Return every release, following ``Link: rel="next"`` until exhausted."""
        releases: List[Release] = []
        url: Optional[str] = self._repo_url("releases")
        params: Optional[Dict[str, Any]] = {"per_page": GITHUB_PAGE_SIZE}

        while url:
            response = self._request("GET", url, params=params)
            releases.extend(_release_from_api(item) for item in response.json())
            url = response.links.get("next", {}).get("url")
            # The next link already carries the paging parameters
            params = None

        logger.debug(f"Listed {len(releases)} releases of {self.owner}/{self.repo}")
        return releases

    def create_release(self, release: Release) -> None:
        """Create the release and upload its assets one by one."""
        payload: Dict[str, Any] = {
            "tag_name": release.name,
            "name": release.name,
            "body": release.description,
            "generate_release_notes": release.generate_release_notes,
            "make_latest": release.make_latest,
        }
        if release.commit:
            payload["target_commitish"] = release.commit

        url = self._repo_url("releases")
        response = self._request("POST", url, json=payload)
        release_id = _response_field(response, "id", "POST", url)
        logger.info(f"Created release {release.name} (id {release_id})")

        for asset in release.assets:
            self._upload_release_asset(release_id, asset.path)

    def _upload_release_asset(self, release_id: int, filename: str) -> None:
        filename = os.path.abspath(filename)
        name = os.path.basename(filename)
        url = f"{self.upload_url}repos/{self.owner}/{self.repo}/releases/{release_id}/assets"

        @with_retry(max_attempts=UPLOAD_MAX_ATTEMPTS, delay=UPLOAD_RETRY_DELAY_SECONDS)
        def upload() -> None:
            try:
                f = open(filename, "rb")
            except OSError as e:
                raise ReleaseCreationError(f"failed to open file {filename}: {e}", {"path": filename}) from e
            with f:
                try:
                    self._request(
                        "POST",
                        url,
                        params={"name": name},
                        data=f,
                        headers={"Content-Type": "application/octet-stream"},
                    )
                except ForgeError as e:
                    raise ReleaseCreationError(
                        f"failed to upload release asset: {filename}: {e}", {"path": filename, **e.context}
                    ) from e

        upload()
        logger.info(f"Uploaded release asset {name}")

    def create_pull_request(self, owner: str, repo: str, message: str, head: str, base: str) -> str:
        """Open a pull request and return its HTML URL."""
        title, _, remainder = message.partition("\n")
        payload: Dict[str, Any] = {"title": title, "head": head, "base": base}
        if remainder:
            payload["body"] = remainder.strip()

        url = self.base_url + f"repos/{owner}/{repo}/pulls"
        response = self._request("POST", url, json=payload)
        return _response_field(response, "html_url", "POST", url)
