"""
Common fixtures for the golden dataset test suite.

Provides raw manifest dictionaries, a helper that writes them to disk,
and validated manifests so individual test modules stay focused on
their assertions.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

from gct_golden.dataset.schema import GoldenDatasetManifest
from gct_golden.dataset.validation import validate_manifest_data


# ---------------------------------------------------------------------------
# Raw manifest fixtures
# ---------------------------------------------------------------------------


def make_case(case_id: str = "hop-001", **overrides: Any) -> Dict[str, Any]:
    """A valid raw case dict; top-level keys can be overridden."""
    case = {
        "id": case_id,
        "uri": f"videos/{case_id}.mp4",
        "notes": "side view, good light",
        "roi": {"space": "normalized", "x": 0.1, "y": 0.5, "width": 0.8, "height": 0.4},
        "labels": {
            "source": "manual-label-mode",
            "toleranceMs": 30,
            "landingsMs": [1000, 1600],
            "takeoffsMs": [1200, 1800],
        },
        "expected": {
            "shouldAccept": True,
            "maxMedianGctErrMs": 15,
            "maxP95GctErrMs": 40,
        },
    }
    case.update(overrides)
    return case


@pytest.fixture
def case_dict() -> Dict[str, Any]:
    return make_case()


@pytest.fixture
def manifest_dict() -> Dict[str, Any]:
    """A valid three-case manifest: two accept cases, one reject case."""
    return {
        "version": "1.0.0",
        "description": "Pogo hops, side view",
        "fpsAssumption": 240,
        "cases": [
            make_case("hop-001"),
            make_case(
                "blurry-001",
                labels={"source": "external", "toleranceMs": 0, "landingsMs": [], "takeoffsMs": []},
                expected={"shouldAccept": False, "reason": "motion blur"},
            ),
            make_case(
                "hop-002",
                uri="file:///abs/videos/hop-002.mp4",
                labels={
                    "source": "synthetic",
                    "toleranceMs": 20,
                    "landingsMs": [500, 900, 1300],
                    "takeoffsMs": [700, 1100, 1500],
                },
            ),
        ],
    }


@pytest.fixture
def write_manifest(tmp_path: Path) -> Callable[[Any], Path]:
    """Write a manifest (dict or raw text) to tmp_path and return its path."""

    def _write(content: Any, name: str = "manifest.json") -> Path:
        path = tmp_path / name
        text = content if isinstance(content, str) else json.dumps(content)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


# ---------------------------------------------------------------------------
# Validated manifest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def manifest(manifest_dict: Dict[str, Any]) -> GoldenDatasetManifest:
    """The three-case manifest validated against /data/golden."""
    return validate_manifest_data(copy.deepcopy(manifest_dict), "/data/golden")
