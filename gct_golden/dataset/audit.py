"""
Dataset-level statistics and media auditing for a validated manifest.

These are reporting utilities: nothing here raises on a missing or
unreadable video, it is reported instead.
"""

from __future__ import annotations

import logging
import os
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List

from gct_golden.dataset.schema import GoldenDatasetManifest, GoldenTestCase

logger = logging.getLogger(__name__)


@dataclass
class DatasetStats:
    """Summary counts over all cases of a manifest."""
    total_cases: int
    accept_cases: int
    reject_cases: int
    total_labeled_landings: int
    total_labeled_takeoffs: int
    average_hops_per_case: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_cases": self.total_cases,
            "accept_cases": self.accept_cases,
            "reject_cases": self.reject_cases,
            "total_labeled_landings": self.total_labeled_landings,
            "total_labeled_takeoffs": self.total_labeled_takeoffs,
            "average_hops_per_case": self.average_hops_per_case,
        }


@dataclass
class UriAuditResult:
    """Outcome of probing every case's media file."""
    missing: List[str] = field(default_factory=list)  # "<id>: <uri>"
    found: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"missing": list(self.missing), "found": self.found}


def validate_video_exists(test_case: GoldenTestCase) -> bool:
    """Whether the case's resolved video path exists; probe errors count as missing."""
    try:
        return os.path.exists(test_case.uri)
    except (OSError, ValueError) as exc:
        logger.debug("Existence check failed for %s: %s", test_case.uri, exc)
        return False


def get_dataset_stats(manifest: GoldenDatasetManifest) -> DatasetStats:
    accept_count = 0
    reject_count = 0
    total_landings = 0
    total_takeoffs = 0

    for test_case in manifest.cases:
        if test_case.expected.should_accept:
            accept_count += 1
        else:
            reject_count += 1
        total_landings += len(test_case.labels.landings_ms)
        total_takeoffs += len(test_case.labels.takeoffs_ms)

    return DatasetStats(
        total_cases=len(manifest.cases),
        accept_cases=accept_count,
        reject_cases=reject_count,
        total_labeled_landings=total_landings,
        total_labeled_takeoffs=total_takeoffs,
        average_hops_per_case=total_landings / len(manifest.cases) if total_landings > 0 else 0,
    )


def validate_all_uris(manifest: GoldenDatasetManifest) -> UriAuditResult:
    result = UriAuditResult()

    for test_case in manifest.cases:
        if validate_video_exists(test_case):
            result.found += 1
        else:
            logger.warning("Missing video for case %s: %s", test_case.id, test_case.uri)
            result.missing.append(f"{test_case.id}: {test_case.uri}")

    return result


def find_duplicate_case_ids(manifest: GoldenDatasetManifest) -> List[str]:
    """Case ids that occur more than once, in first-seen order."""
    counts = Counter(test_case.id for test_case in manifest.cases)
    return [case_id for case_id, count in counts.items() if count > 1]
