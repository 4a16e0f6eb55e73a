"""Tests for the helpers shared by the publisher and the reconciler."""

import random
from unittest.mock import MagicMock

import pytest
import requests

from chart_releaser.exceptions import DownloadError, InvalidURLError
from chart_releaser.releaser.helpers import (
    download_file,
    list_packages,
    random_string,
    split_package_name_and_version,
    strip_filename,
    url_filename,
)


def _response(status_code=200, chunks=(b"chart-bytes",), reason="OK"):
    response = MagicMock()
    response.status_code = status_code
    response.reason = reason
    response.iter_content.return_value = list(chunks)
    response.__enter__.return_value = response
    return response


class TestSplitPackageNameAndVersion:
    """Chart coordinates come from splitting the file name at the last hyphen."""

    def test_one_hyphen(self):
        assert split_package_name_and_version("foo-1.2.3") == ("foo", "1.2.3")

    def test_two_hyphens_split_at_the_last_one(self):
        assert split_package_name_and_version("foo-bar-1.2.3") == ("foo-bar", "1.2.3")

    def test_hyphenated_prerelease_is_not_isolated(self):
        """Known limitation: the pre-release suffix becomes the version."""
        assert split_package_name_and_version("foo-1.0.0-rc.1") == ("foo-1.0.0", "rc.1")

    def test_no_hyphen_is_a_contract_violation(self):
        with pytest.raises(ValueError, match="no hyphen"):
            split_package_name_and_version("foo")


class TestUrlHelpers:
    def test_url_filename(self):
        assert url_filename("https://myrepo/charts/test-chart-0.1.0.tgz") == "test-chart-0.1.0.tgz"

    def test_strip_filename(self):
        assert strip_filename("https://myrepo/charts/test-chart-0.1.0.tgz") == "https://myrepo/charts"

    def test_strip_filename_without_slash(self):
        assert strip_filename("test-chart-0.1.0.tgz") == ""


class TestListPackages:
    def test_lists_only_archives_in_sorted_order(self, tmp_path, chart_factory):
        chart_factory(tmp_path, name="zeta")
        chart_factory(tmp_path, name="alpha")
        (tmp_path / "notes.txt").write_text("not a chart")
        (tmp_path / "nested").mkdir()
        chart_factory(tmp_path / "nested", name="hidden")

        packages = list_packages(str(tmp_path))

        assert [p.rsplit("/", 1)[-1] for p in packages] == ["alpha-0.1.0.tgz", "zeta-0.1.0.tgz"]

    def test_empty_directory(self, tmp_path):
        assert list_packages(str(tmp_path)) == []


class TestDownloadFile:
    """Downloads land in the cache directory and are reused by name."""

    def test_downloads_into_directory(self, tmp_path):
        session = MagicMock()
        session.get.return_value = _response(chunks=[b"abc", b"def"])
        cache = tmp_path / "cache"

        path = download_file("https://myrepo/charts/test-chart-0.1.0.tgz", str(cache), session=session, timeout=5)

        assert path == str(cache / "test-chart-0.1.0.tgz")
        assert (cache / "test-chart-0.1.0.tgz").read_bytes() == b"abcdef"
        session.get.assert_called_once_with("https://myrepo/charts/test-chart-0.1.0.tgz", stream=True, timeout=5)

    def test_existing_file_is_reused_without_request(self, tmp_path):
        (tmp_path / "test-chart-0.1.0.tgz").write_bytes(b"cached")
        session = MagicMock()

        path = download_file("https://myrepo/charts/test-chart-0.1.0.tgz", str(tmp_path), session=session)

        assert path == str(tmp_path / "test-chart-0.1.0.tgz")
        assert (tmp_path / "test-chart-0.1.0.tgz").read_bytes() == b"cached"
        session.get.assert_not_called()

    def test_error_status_raises_download_error(self, tmp_path):
        session = MagicMock()
        session.get.return_value = _response(status_code=404, reason="Not Found")

        with pytest.raises(DownloadError) as exc_info:
            download_file("https://myrepo/charts/missing-0.1.0.tgz", str(tmp_path), session=session)

        assert exc_info.value.context["status_code"] == 404
        assert not (tmp_path / "missing-0.1.0.tgz").exists()

    def test_request_exception_raises_download_error(self, tmp_path):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(DownloadError, match="error sending request"):
            download_file("https://myrepo/charts/test-chart-0.1.0.tgz", str(tmp_path), session=session)

    def test_invalid_url(self, tmp_path):
        session = MagicMock()

        with pytest.raises(InvalidURLError):
            download_file("not-a-url/test-chart-0.1.0.tgz", str(tmp_path), session=session)
        session.get.assert_not_called()


class TestRandomString:
    def test_length_and_alphabet(self):
        value = random_string(16, random.Random())
        assert len(value) == 16
        assert all(c in "abcdefghijklmnopqrstuvwxyz0123456789" for c in value)

    def test_seeded_generator_is_deterministic(self):
        assert random_string(16, random.Random(7)) == random_string(16, random.Random(7))
