"""
Golden dataset tooling for ground-contact-time regression testing.

Loads and validates the labeled video manifest, audits its media files,
and compares detector measurements against the labels.
"""

from gct_golden.dataset import (
    DatasetStats,
    GoldenDatasetManifest,
    GoldenTestCase,
    get_dataset_stats,
    load_golden_dataset,
    normalize_uri,
    validate_all_uris,
    validate_video_exists,
)
from gct_golden.exceptions import (
    GoldenDatasetError,
    ManifestParseError,
    ManifestReadError,
    ValidationError,
)

__all__ = [
    "DatasetStats",
    "GoldenDatasetManifest",
    "GoldenTestCase",
    "get_dataset_stats",
    "load_golden_dataset",
    "normalize_uri",
    "validate_all_uris",
    "validate_video_exists",
    "GoldenDatasetError",
    "ManifestParseError",
    "ManifestReadError",
    "ValidationError",
]
