from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict


class RoiSpace(str, Enum):
    normalized = "normalized"
    pixel = "pixel"


class LabelSource(str, Enum):
    manual_label_mode = "manual-label-mode"
    external = "external"
    synthetic = "synthetic"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class RoiSpec(_Frozen):
    space: RoiSpace
    x: float
    y: float
    width: float
    height: float


class LabelsSpec(_Frozen):
    source: LabelSource
    tolerance_ms: float
    landings_ms: Tuple[float, ...]
    takeoffs_ms: Tuple[float, ...]


class ExpectedSpec(_Frozen):
    should_accept: bool
    reason: Optional[str] = None
    max_median_gct_err_ms: Optional[float] = None
    max_p95_gct_err_ms: Optional[float] = None
    max_median_flight_err_ms: Optional[float] = None
    max_p95_flight_err_ms: Optional[float] = None
    max_median_landing_err_ms: Optional[float] = None
    max_p95_landing_err_ms: Optional[float] = None
    max_median_takeoff_err_ms: Optional[float] = None
    max_p95_takeoff_err_ms: Optional[float] = None


class GoldenTestCase(_Frozen):
    id: str
    uri: str
    notes: Optional[str] = None
    roi: RoiSpec
    labels: LabelsSpec
    expected: ExpectedSpec


class GoldenDatasetManifest(_Frozen):
    version: str
    description: str = ""
    fps_assumption: float
    cases: Tuple[GoldenTestCase, ...]
