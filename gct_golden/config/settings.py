"""
Centralized configuration for the GCT golden dataset tooling.

Paths, schema vocabularies and accuracy defaults live here.
Import from this module instead of hardcoding values in source files.
"""

from __future__ import annotations

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

DATASETS_DIR = PROJECT_ROOT / "datasets"
DEFAULT_MANIFEST_PATH = Path(
    os.getenv("GCT_GOLDEN_MANIFEST", str(DATASETS_DIR / "gct-golden" / "manifest.json"))
)

# ---------------------------------------------------------------------------
# Manifest schema
# ---------------------------------------------------------------------------

FILE_URI_PREFIX = "file://"

ROI_FIELDS = ("x", "y", "width", "height")

# Manifest key -> model attribute, in the order they are checked
THRESHOLD_FIELDS = {
    "maxMedianGctErrMs": "max_median_gct_err_ms",
    "maxP95GctErrMs": "max_p95_gct_err_ms",
    "maxMedianFlightErrMs": "max_median_flight_err_ms",
    "maxP95FlightErrMs": "max_p95_flight_err_ms",
    "maxMedianLandingErrMs": "max_median_landing_err_ms",
    "maxP95LandingErrMs": "max_p95_landing_err_ms",
    "maxMedianTakeoffErrMs": "max_median_takeoff_err_ms",
    "maxP95TakeoffErrMs": "max_p95_takeoff_err_ms",
}

# ---------------------------------------------------------------------------
# Accuracy comparison
# ---------------------------------------------------------------------------

DEFAULT_TOLERANCE_MS = 50.0  # used when a case declares toleranceMs = 0
TAIL_PERCENTILE = 95
