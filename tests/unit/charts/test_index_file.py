"""Tests for the repository index model."""

import os
import stat
from datetime import datetime, timezone
from unittest.mock import patch

import pytest
import yaml

from chart_releaser.charts import ChartMetadata, IndexFile
from chart_releaser.charts.index import format_timestamp
from chart_releaser.exceptions import ChartNotFoundError, DuplicateEntryError, IndexFileError

DIGEST = "a" * 64


def _metadata(name="test-chart", version="0.1.0", **extra):
    return ChartMetadata(name=name, version=version, **extra)


class TestMustAdd:
    def test_builds_url_from_base_and_filename(self):
        index = IndexFile.new()

        entry = index.must_add(_metadata(), "test-chart-0.1.0.tgz", "https://myrepo/charts", DIGEST)

        assert entry.urls == ["https://myrepo/charts/test-chart-0.1.0.tgz"]
        assert entry.digest == DIGEST
        assert entry.created.endswith("Z")
        assert index.has("test-chart", "0.1.0")
        assert len(index) == 1

    def test_trailing_slash_in_base_url(self):
        entry = IndexFile.new().must_add(_metadata(), "test-chart-0.1.0.tgz", "https://myrepo/charts/", DIGEST)
        assert entry.urls == ["https://myrepo/charts/test-chart-0.1.0.tgz"]

    def test_empty_base_url_keeps_bare_filename(self):
        entry = IndexFile.new().must_add(_metadata(), "test-chart-0.1.0.tgz", "", DIGEST)
        assert entry.urls == ["test-chart-0.1.0.tgz"]

    def test_missing_api_version_defaults_to_v1(self):
        metadata = _metadata()

        entry = IndexFile.new().must_add(metadata, "test-chart-0.1.0.tgz", "", DIGEST)

        assert entry.metadata.api_version == "v1"
        # The caller's metadata is left alone
        assert metadata.api_version is None

    def test_existing_api_version_is_kept(self):
        entry = IndexFile.new().must_add(_metadata(api_version="v2"), "test-chart-0.1.0.tgz", "", DIGEST)
        assert entry.metadata.api_version == "v2"

    def test_duplicate_is_rejected(self):
        index = IndexFile.new()
        index.must_add(_metadata(), "test-chart-0.1.0.tgz", "", DIGEST)

        with pytest.raises(DuplicateEntryError):
            index.must_add(_metadata(), "test-chart-0.1.0.tgz", "", DIGEST)
        assert len(index) == 1

    def test_empty_version_is_rejected(self):
        with pytest.raises(IndexFileError, match="validation"):
            IndexFile.new().must_add(_metadata(version=""), "x.tgz", "", DIGEST)


class TestLookup:
    def test_get_missing_version(self):
        index = IndexFile.new()
        index.must_add(_metadata(), "test-chart-0.1.0.tgz", "", DIGEST)

        with pytest.raises(ChartNotFoundError):
            index.get("test-chart", "9.9.9")
        assert not index.has("other", "0.1.0")


class TestSortEntries:
    def test_names_alphabetical_versions_newest_first(self):
        index = IndexFile.new()
        for name, version in [("zeta", "1.0.0"), ("alpha", "0.2.0"), ("alpha", "0.10.0"), ("alpha", "1.0.0-rc.1")]:
            index.must_add(_metadata(name, version), f"{name}-{version}.tgz", "", DIGEST)

        index.sort_entries()

        assert list(index.entries) == ["alpha", "zeta"]
        assert [cv.version for cv in index.entries["alpha"]] == ["1.0.0-rc.1", "0.10.0", "0.2.0"]

    def test_unparseable_versions_sort_after_valid_ones(self):
        index = IndexFile.new()
        for version in ["not-a-version", "0.1.0"]:
            index.must_add(_metadata(version=version), "x.tgz", "", DIGEST)

        index.sort_entries()

        assert [cv.version for cv in index.entries["test-chart"]] == ["0.1.0", "not-a-version"]


class TestPersistence:
    def test_write_and_load(self, tmp_path):
        index = IndexFile.new()
        index.must_add(
            _metadata(description="A chart", app_version="1.16.0", api_version="v2"),
            "test-chart-0.1.0.tgz",
            "https://myrepo/charts",
            DIGEST,
        )
        path = tmp_path / "index.yaml"

        index.write_file(path)
        loaded = IndexFile.load(path)

        assert loaded.api_version == "v1"
        assert loaded.generated == index.generated
        entry = loaded.get("test-chart", "0.1.0")
        assert entry.urls == ["https://myrepo/charts/test-chart-0.1.0.tgz"]
        assert entry.digest == DIGEST
        assert entry.metadata.description == "A chart"
        assert entry.created == index.get("test-chart", "0.1.0").created

    def test_written_layout(self, tmp_path):
        index = IndexFile.new()
        index.must_add(_metadata(), "test-chart-0.1.0.tgz", "https://myrepo/charts", DIGEST)
        path = tmp_path / "index.yaml"

        index.write_file(path)

        data = yaml.safe_load(path.read_text())
        assert set(data) == {"apiVersion", "entries", "generated"}
        record = data["entries"]["test-chart"][0]
        assert record["urls"] == ["https://myrepo/charts/test-chart-0.1.0.tgz"]
        assert record["apiVersion"] == "v1"
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o644
        # No temporary files are left behind
        assert os.listdir(tmp_path) == ["index.yaml"]

    def test_failed_write_keeps_previous_file(self, tmp_path):
        path = tmp_path / "index.yaml"
        path.write_text("previous")
        index = IndexFile.new()

        with patch("chart_releaser.charts.index.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                index.write_file(path)

        assert path.read_text() == "previous"
        assert os.listdir(tmp_path) == ["index.yaml"]

    def test_load_index_written_by_helm(self, tmp_path):
        path = tmp_path / "index.yaml"
        path.write_text(
            "apiVersion: v1\n"
            "entries:\n"
            "  nginx:\n"
            "  - apiVersion: v2\n"
            "    name: nginx\n"
            "    version: 1.0.0\n"
            "    created: 2023-01-02T03:04:05.000006Z\n"
            "    digest: abc\n"
            "    urls:\n"
            "    - https://example.com/nginx-1.0.0.tgz\n"
            "generated: 2023-01-02T03:04:05Z\n"
        )

        index = IndexFile.load(path)

        assert index.generated == "2023-01-02T03:04:05.000000Z"
        assert index.get("nginx", "1.0.0").created == "2023-01-02T03:04:05.000006Z"

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(IndexFileError):
            IndexFile.load(tmp_path / "index.yaml")

    def test_load_non_mapping(self, tmp_path):
        path = tmp_path / "index.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(IndexFileError, match="not a chart repository index"):
            IndexFile.load(path)


class TestFormatTimestamp:
    def test_naive_datetime_is_utc(self):
        assert format_timestamp(datetime(2024, 5, 6, 7, 8, 9, 10)) == "2024-05-06T07:08:09.000010Z"

    def test_aware_datetime(self):
        assert (
            format_timestamp(datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone.utc)) == "2024-05-06T07:08:09.000000Z"
        )
