"""
Golden dataset manifest handling.

Provides:
- Typed, immutable manifest records (schema)
- Manifest reading and media URI resolution (reader)
- Fail-fast schema validation (validation)
- Dataset statistics and media auditing (audit)
"""

from gct_golden.dataset.audit import (
    DatasetStats,
    UriAuditResult,
    find_duplicate_case_ids,
    get_dataset_stats,
    validate_all_uris,
    validate_video_exists,
)
from gct_golden.dataset.reader import normalize_uri
from gct_golden.dataset.schema import (
    ExpectedSpec,
    GoldenDatasetManifest,
    GoldenTestCase,
    LabelSource,
    LabelsSpec,
    RoiSpace,
    RoiSpec,
)
from gct_golden.dataset.validation import load_golden_dataset, validate_manifest_data

__all__ = [
    "DatasetStats",
    "UriAuditResult",
    "find_duplicate_case_ids",
    "get_dataset_stats",
    "validate_all_uris",
    "validate_video_exists",
    "normalize_uri",
    "ExpectedSpec",
    "GoldenDatasetManifest",
    "GoldenTestCase",
    "LabelSource",
    "LabelsSpec",
    "RoiSpace",
    "RoiSpec",
    "load_golden_dataset",
    "validate_manifest_data",
]
