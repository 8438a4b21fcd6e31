"""
Accuracy comparison of measured events against golden labels.

Matches detector output (landings / takeoffs) to the labeled ground truth
of one case, derives per-hop ground contact and flight times, and checks
the resulting error percentiles against the case's acceptance thresholds.

Percentiles use the nearest-rank method so reports are reproducible
across numpy versions and interpolation defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from gct_golden.config.settings import DEFAULT_TOLERANCE_MS, TAIL_PERCENTILE, THRESHOLD_FIELDS
from gct_golden.dataset.schema import GoldenTestCase


class CaseStatus(str, Enum):
    """Outcome of running one case."""
    ACCEPT = "accept"  # behaved as expected (accepted and compared, or correctly rejected)
    REJECT = "reject"  # wrongly rejected, or falsely accepted
    SKIP = "skip"
    ERROR = "error"


def percentile(values: Sequence[float], p: float) -> float:
    """Nearest-rank percentile; 0.0 for no values."""
    if len(values) == 0:
        return 0.0
    if len(values) == 1:
        return float(values[0])

    ordered = np.sort(np.asarray(values, dtype=np.float64))
    rank = int(np.ceil((p / 100.0) * ordered.size)) - 1
    return float(ordered[min(max(rank, 0), ordered.size - 1)])


def median(values: Sequence[float]) -> float:
    return percentile(values, 50)


@dataclass(frozen=True)
class EventMatch:
    auto: Optional[float] = None
    label: Optional[float] = None
    error_ms: Optional[float] = None  # auto - label
    unmatched: Optional[str] = None  # "auto" | "label"


@dataclass(frozen=True)
class Hop:
    landing_ms: float
    takeoff_ms: float
    gct_ms: float
    flight_ms: Optional[float] = None  # takeoff -> next landing


@dataclass(frozen=True)
class HopMatch:
    auto: Optional[Hop] = None
    label: Optional[Hop] = None
    gct_error_ms: Optional[float] = None
    unmatched: Optional[str] = None


def _nearest_unused(target: float, candidates: Sequence[float], used: set, tolerance_ms: float) -> Optional[int]:
    best_idx: Optional[int] = None
    best_dist = tolerance_ms + 1
    for i, candidate in enumerate(candidates):
        if i in used:
            continue
        dist = abs(target - candidate)
        if dist < best_dist:
            best_dist = dist
            best_idx = i
    if best_idx is not None and best_dist <= tolerance_ms:
        return best_idx
    return None


def match_events(
    auto_times: Sequence[float],
    label_times: Sequence[float],
    tolerance_ms: float,
) -> List[EventMatch]:
    """
    Greedy nearest-neighbour matching of detected events to labels.

    Each auto event, in order, takes the closest label not yet used that lies
    within ``tolerance_ms``. Labels left over are reported as unmatched.
    """
    matches: List[EventMatch] = []
    used_labels: set = set()

    for auto_t in auto_times:
        idx = _nearest_unused(auto_t, label_times, used_labels, tolerance_ms)
        if idx is None:
            matches.append(EventMatch(auto=auto_t, unmatched="auto"))
            continue
        used_labels.add(idx)
        matches.append(EventMatch(auto=auto_t, label=label_times[idx], error_ms=auto_t - label_times[idx]))

    for i, label_t in enumerate(label_times):
        if i not in used_labels:
            matches.append(EventMatch(label=label_t, unmatched="label"))

    return matches


def pair_hops(landings: Sequence[float], takeoffs: Sequence[float]) -> List[Hop]:
    """Pair each landing with the next takeoff strictly after it."""
    hops: List[Hop] = []
    takeoff_idx = 0

    for landing in landings:
        while takeoff_idx < len(takeoffs) and takeoffs[takeoff_idx] <= landing:
            takeoff_idx += 1
        if takeoff_idx >= len(takeoffs):
            continue

        takeoff = takeoffs[takeoff_idx]
        next_landing = min((t for t in landings if t > takeoff), default=None)
        hops.append(Hop(
            landing_ms=landing,
            takeoff_ms=takeoff,
            gct_ms=takeoff - landing,
            flight_ms=next_landing - takeoff if next_landing is not None else None,
        ))

    return hops


def match_hops(auto_hops: Sequence[Hop], label_hops: Sequence[Hop], tolerance_ms: float) -> List[HopMatch]:
    """Match hops by landing time and report the ground contact time error."""
    matches: List[HopMatch] = []
    used_labels: set = set()
    label_landings = [hop.landing_ms for hop in label_hops]

    for auto_hop in auto_hops:
        idx = _nearest_unused(auto_hop.landing_ms, label_landings, used_labels, tolerance_ms)
        if idx is None:
            matches.append(HopMatch(auto=auto_hop, unmatched="auto"))
            continue
        used_labels.add(idx)
        label_hop = label_hops[idx]
        matches.append(HopMatch(auto=auto_hop, label=label_hop, gct_error_ms=auto_hop.gct_ms - label_hop.gct_ms))

    for i, label_hop in enumerate(label_hops):
        if i not in used_labels:
            matches.append(HopMatch(label=label_hop, unmatched="label"))

    return matches


@dataclass(frozen=True)
class MeasuredEvents:
    """Detector output for one case, supplied by the external pipeline."""
    accepted: bool
    landings_ms: Sequence[float] = ()
    takeoffs_ms: Sequence[float] = ()


@dataclass
class CaseMetrics:
    num_matches: int
    median_landing_err_ms: Optional[float] = None
    p95_landing_err_ms: Optional[float] = None
    median_takeoff_err_ms: Optional[float] = None
    p95_takeoff_err_ms: Optional[float] = None
    median_gct_err_ms: Optional[float] = None
    p95_gct_err_ms: Optional[float] = None
    median_flight_err_ms: Optional[float] = None
    p95_flight_err_ms: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)


@dataclass
class CaseResult:
    """
    Result of comparing one case.

    Error lists hold absolute errors in milliseconds and are only filled
    when the case should accept and the pipeline accepted it.
    """
    case_id: str
    status: CaseStatus
    expected_accept: bool
    expected_thresholds: Dict[str, Optional[float]] = field(default_factory=dict)
    skip_reason: Optional[str] = None
    error_reason: Optional[str] = None
    pipeline_accepted: Optional[bool] = None
    landing_errors_ms: List[float] = field(default_factory=list)
    takeoff_errors_ms: List[float] = field(default_factory=list)
    gct_errors_ms: List[float] = field(default_factory=list)
    flight_errors_ms: List[float] = field(default_factory=list)
    unmatched_auto_landings: int = 0
    unmatched_auto_takeoffs: int = 0
    unmatched_label_landings: int = 0
    unmatched_label_takeoffs: int = 0
    metrics: Optional[CaseMetrics] = None
    threshold_passed: Optional[bool] = None
    threshold_failures: List[str] = field(default_factory=list)

    @property
    def is_runnable(self) -> bool:
        return self.status not in (CaseStatus.SKIP, CaseStatus.ERROR)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "case_id": self.case_id,
            "status": self.status.value,
            "expected_accept": self.expected_accept,
            "expected_thresholds": dict(self.expected_thresholds),
            "skip_reason": self.skip_reason,
            "error_reason": self.error_reason,
            "pipeline_accepted": self.pipeline_accepted,
            "landing_errors_ms": list(self.landing_errors_ms),
            "takeoff_errors_ms": list(self.takeoff_errors_ms),
            "gct_errors_ms": list(self.gct_errors_ms),
            "flight_errors_ms": list(self.flight_errors_ms),
            "unmatched_auto_landings": self.unmatched_auto_landings,
            "unmatched_auto_takeoffs": self.unmatched_auto_takeoffs,
            "unmatched_label_landings": self.unmatched_label_landings,
            "unmatched_label_takeoffs": self.unmatched_label_takeoffs,
            "metrics": self.metrics.to_dict() if self.metrics else None,
            "threshold_passed": self.threshold_passed,
            "threshold_failures": list(self.threshold_failures),
        }


def expected_thresholds(test_case: GoldenTestCase) -> Dict[str, Optional[float]]:
    return {attr: getattr(test_case.expected, attr) for attr in THRESHOLD_FIELDS.values()}


def _metric_name(attr: str) -> str:
    # "max_median_gct_err_ms" -> metric attr "median_gct_err_ms"
    return attr[len("max_"):]


def _display_name(metric: str) -> str:
    # "median_gct_err_ms" -> "medianGctErr"
    head, *rest = metric[: -len("_ms")].split("_")
    return head + "".join(part.capitalize() for part in rest)


def check_thresholds(test_case: GoldenTestCase, metrics: CaseMetrics) -> List[str]:
    """Failure descriptions for every present threshold the metrics exceed."""
    failures: List[str] = []
    for attr, threshold in expected_thresholds(test_case).items():
        if threshold is None:
            continue
        metric = _metric_name(attr)
        value = getattr(metrics, metric)
        if value is not None and value > threshold:
            failures.append(f"{_display_name(metric)} {value:.1f}ms > {threshold:g}ms")
    return failures


def compare_case(test_case: GoldenTestCase, measured: MeasuredEvents) -> CaseResult:
    """Compare one case's measured events against its labels and thresholds."""
    result = CaseResult(
        case_id=test_case.id,
        status=CaseStatus.SKIP,
        expected_accept=test_case.expected.should_accept,
        expected_thresholds=expected_thresholds(test_case),
        pipeline_accepted=measured.accepted,
    )

    if not measured.accepted:
        result.status = CaseStatus.REJECT if test_case.expected.should_accept else CaseStatus.ACCEPT
        return result

    if not test_case.expected.should_accept:
        result.status = CaseStatus.REJECT
        return result

    result.status = CaseStatus.ACCEPT
    labels = test_case.labels
    tolerance_ms = labels.tolerance_ms or DEFAULT_TOLERANCE_MS
    auto_landings = list(measured.landings_ms)
    auto_takeoffs = list(measured.takeoffs_ms)

    landing_matches = match_events(auto_landings, labels.landings_ms, tolerance_ms)
    takeoff_matches = match_events(auto_takeoffs, labels.takeoffs_ms, tolerance_ms)
    hop_matches = match_hops(
        pair_hops(auto_landings, auto_takeoffs),
        pair_hops(labels.landings_ms, labels.takeoffs_ms),
        tolerance_ms,
    )
    matched_hops = [m for m in hop_matches if m.auto is not None and m.label is not None]

    result.landing_errors_ms = [abs(m.error_ms) for m in landing_matches if m.error_ms is not None]
    result.takeoff_errors_ms = [abs(m.error_ms) for m in takeoff_matches if m.error_ms is not None]
    result.gct_errors_ms = [abs(m.gct_error_ms) for m in matched_hops]
    result.flight_errors_ms = [
        abs(m.auto.flight_ms - m.label.flight_ms)
        for m in matched_hops
        if m.auto.flight_ms is not None and m.label.flight_ms is not None
    ]

    result.unmatched_auto_landings = sum(1 for m in landing_matches if m.unmatched == "auto")
    result.unmatched_auto_takeoffs = sum(1 for m in takeoff_matches if m.unmatched == "auto")
    result.unmatched_label_landings = sum(1 for m in landing_matches if m.unmatched == "label")
    result.unmatched_label_takeoffs = sum(1 for m in takeoff_matches if m.unmatched == "label")

    def _summary(errors: List[float]) -> tuple:
        if not errors:
            return None, None
        return median(errors), percentile(errors, TAIL_PERCENTILE)

    med_landing, p95_landing = _summary(result.landing_errors_ms)
    med_takeoff, p95_takeoff = _summary(result.takeoff_errors_ms)
    med_gct, p95_gct = _summary(result.gct_errors_ms)
    med_flight, p95_flight = _summary(result.flight_errors_ms)

    result.metrics = CaseMetrics(
        num_matches=len(matched_hops),
        median_landing_err_ms=med_landing,
        p95_landing_err_ms=p95_landing,
        median_takeoff_err_ms=med_takeoff,
        p95_takeoff_err_ms=p95_takeoff,
        median_gct_err_ms=med_gct,
        p95_gct_err_ms=p95_gct,
        median_flight_err_ms=med_flight,
        p95_flight_err_ms=p95_flight,
    )

    result.threshold_failures = check_thresholds(test_case, result.metrics)
    result.threshold_passed = not result.threshold_failures
    return result
