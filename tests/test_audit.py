"""
Tests for gct_golden/dataset/audit.py

Covers dataset statistics, media existence probing and the duplicate-id
report.
"""

from __future__ import annotations

import pytest

from gct_golden.dataset.audit import (
    find_duplicate_case_ids,
    get_dataset_stats,
    validate_all_uris,
    validate_video_exists,
)
from gct_golden.dataset.validation import load_golden_dataset, validate_manifest_data


class TestGetDatasetStats:
    """Tests for get_dataset_stats."""

    def test_counts(self, manifest_dict):
        """
        3 cases, 2 accept / 1 reject, landings [2, 0, 3], takeoffs [2, 0, 3]
        -> average hops = 5 / 3
        """
        stats = get_dataset_stats(validate_manifest_data(manifest_dict, "/base"))

        assert stats.total_cases == 3
        assert stats.accept_cases == 2
        assert stats.reject_cases == 1
        assert stats.total_labeled_landings == 5
        assert stats.total_labeled_takeoffs == 5
        assert pytest.approx(stats.average_hops_per_case) == 5 / 3

    def test_no_landings_gives_zero_average(self, manifest_dict):
        """Without any landings the average is 0."""
        manifest_dict["cases"] = [manifest_dict["cases"][1]]
        stats = get_dataset_stats(validate_manifest_data(manifest_dict, "/base"))
        assert stats.total_labeled_landings == 0
        assert stats.average_hops_per_case == 0

    def test_to_dict(self, manifest):
        """to_dict exposes every statistic."""
        assert set(get_dataset_stats(manifest).to_dict()) == {
            "total_cases", "accept_cases", "reject_cases",
            "total_labeled_landings", "total_labeled_takeoffs", "average_hops_per_case",
        }


class TestUriAudit:
    """Tests for validate_video_exists and validate_all_uris."""

    @pytest.fixture
    def on_disk(self, manifest_dict, write_manifest, tmp_path):
        """Manifest in tmp_path where only hop-001 and blurry-001 have videos."""
        manifest_dict["cases"][2]["uri"] = "videos/hop-002.mp4"
        (tmp_path / "videos").mkdir()
        (tmp_path / "videos" / "hop-001.mp4").write_bytes(b"\x00")
        (tmp_path / "videos" / "blurry-001.mp4").write_bytes(b"\x00")
        return load_golden_dataset(write_manifest(manifest_dict))

    def test_existing_video(self, on_disk):
        """A present file is reported as existing."""
        assert validate_video_exists(on_disk.cases[0]) is True

    def test_missing_video(self, on_disk):
        """An absent file is reported as missing."""
        assert validate_video_exists(on_disk.cases[2]) is False

    def test_probe_errors_count_as_missing(self, manifest, monkeypatch):
        """Exceptions from the existence probe never propagate."""
        def _boom(path):
            raise PermissionError("denied")

        monkeypatch.setattr("gct_golden.dataset.audit.os.path.exists", _boom)
        assert validate_video_exists(manifest.cases[0]) is False

    def test_validate_all_uris_reports_missing(self, on_disk):
        """One missing case -> one '<id>: <uri>' entry, found == n - 1."""
        result = validate_all_uris(on_disk)
        missing_case = on_disk.cases[2]
        assert result.missing == [f"{missing_case.id}: {missing_case.uri}"]
        assert result.found == len(on_disk.cases) - 1

    def test_validate_all_uris_never_raises(self, manifest):
        """Nothing under /data/golden exists; every case is reported missing."""
        result = validate_all_uris(manifest)
        assert result.found == 0
        assert len(result.missing) == 3


class TestDuplicateIds:
    """Tests for find_duplicate_case_ids."""

    def test_no_duplicates(self, manifest):
        """Unique ids give an empty report."""
        assert find_duplicate_case_ids(manifest) == []

    def test_reports_repeated_ids_once(self, manifest_dict):
        """Each repeated id is listed once."""
        manifest_dict["cases"][1]["id"] = "hop-001"
        manifest_dict["cases"][2]["id"] = "hop-001"
        manifest = validate_manifest_data(manifest_dict, "/base")
        assert find_duplicate_case_ids(manifest) == ["hop-001"]
