#!/usr/bin/env python3
"""
Golden Dataset Check

Validates a golden dataset manifest and audits its media files:
- Schema and label invariants (fail-fast, first violation reported)
- Summary statistics
- Missing video files and duplicate case ids

Usage:
    python scripts/check_golden_dataset.py
    python scripts/check_golden_dataset.py datasets/gct-golden/manifest.json --require-media

Exit codes: 0 valid, 1 schema violation or missing media (with
--require-media), 2 unreadable or malformed manifest.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from gct_golden.config.settings import DEFAULT_MANIFEST_PATH
from gct_golden.dataset import (
    find_duplicate_case_ids,
    get_dataset_stats,
    load_golden_dataset,
    validate_all_uris,
)
from gct_golden.exceptions import ManifestParseError, ManifestReadError, ValidationError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s — %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Validate a golden dataset manifest")
    parser.add_argument("manifest", nargs="?", default=str(DEFAULT_MANIFEST_PATH))
    parser.add_argument("--require-media", action="store_true",
                        help="Fail when any referenced video is missing")
    args = parser.parse_args(argv)

    try:
        manifest = load_golden_dataset(args.manifest)
    except ValidationError as exc:
        logger.error("Invalid manifest: %s", exc)
        return 1
    except (ManifestReadError, ManifestParseError) as exc:
        logger.error("%s", exc)
        return 2

    stats = get_dataset_stats(manifest)
    logger.info("Cases: %d (accept %d, reject %d)",
                stats.total_cases, stats.accept_cases, stats.reject_cases)
    logger.info("Labeled landings: %d, takeoffs: %d, avg hops/case: %.2f",
                stats.total_labeled_landings, stats.total_labeled_takeoffs,
                stats.average_hops_per_case)

    duplicates = find_duplicate_case_ids(manifest)
    if duplicates:
        logger.warning("Duplicate case ids: %s", ", ".join(duplicates))

    audit = validate_all_uris(manifest)
    logger.info("Videos found: %d/%d", audit.found, stats.total_cases)
    for entry in audit.missing:
        print("Missing video:", entry)

    if args.require_media and audit.missing:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
