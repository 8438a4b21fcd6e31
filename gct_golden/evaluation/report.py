"""
Accuracy runner, report aggregation and regression gate.

The detection pipeline stays external: ``run_accuracy`` asks a
caller-supplied ``measure`` callable for each case's detected events and
aggregates the per-case comparisons into one report.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from gct_golden.config.settings import TAIL_PERCENTILE
from gct_golden.dataset.schema import GoldenDatasetManifest, GoldenTestCase
from gct_golden.evaluation.accuracy import (
    CaseResult,
    CaseStatus,
    MeasuredEvents,
    compare_case,
    expected_thresholds,
    median,
    percentile,
)
from gct_golden.exceptions import MeasurementUnavailableError

logger = logging.getLogger(__name__)

MeasureFn = Callable[[GoldenTestCase], MeasuredEvents]


@dataclass
class RejectMetrics:
    should_accept_count: int
    actually_rejected_count: int
    reject_rate: float  # percent of should-accept cases the pipeline rejected
    should_reject_count: int
    false_accept_count: int
    false_accept_rate: float  # percent of should-reject cases the pipeline accepted

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)


@dataclass
class GlobalMetrics:
    """Errors pooled across every analyzed case."""
    num_cases_analyzed: int
    num_matched_hops: int
    median_gct_err_ms: float
    p95_gct_err_ms: float
    median_landing_err_ms: float
    p95_landing_err_ms: float
    median_takeoff_err_ms: float
    p95_takeoff_err_ms: float
    median_flight_err_ms: float
    p95_flight_err_ms: float

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)


@dataclass
class AccuracyReport:
    version: str
    num_total_cases: int
    num_accept_cases: int
    num_reject_cases: int
    num_skipped: int
    num_errors: int
    cases: List[CaseResult]
    reject_metrics: RejectMetrics
    all_thresholds_passed: bool
    cases_failed_thresholds: List[str]
    global_metrics: Optional[GlobalMetrics] = None
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp,
            "version": self.version,
            "num_total_cases": self.num_total_cases,
            "num_accept_cases": self.num_accept_cases,
            "num_reject_cases": self.num_reject_cases,
            "num_skipped": self.num_skipped,
            "num_errors": self.num_errors,
            "cases": [c.to_dict() for c in self.cases],
            "global": self.global_metrics.to_dict() if self.global_metrics else None,
            "reject_metrics": self.reject_metrics.to_dict(),
            "summary": {
                "all_thresholds_passed": self.all_thresholds_passed,
                "cases_failed_thresholds": list(self.cases_failed_thresholds),
            },
        }


@dataclass
class GateOutcome:
    runnable_count: int
    passed_count: int
    failed_count: int
    exit_code: int
    failing_cases: List[Dict[str, Any]] = field(default_factory=list)  # {"case_id", "reasons"}


def _rate(count: int, total: int) -> float:
    return count / total * 100 if total > 0 else 0.0


def _pooled(errors: List[float]) -> tuple:
    if not errors:
        return 0.0, 0.0
    return median(errors), percentile(errors, TAIL_PERCENTILE)


def build_report(manifest: GoldenDatasetManifest, results: Sequence[CaseResult]) -> AccuracyReport:
    """
    Aggregate per-case results into an accuracy report.

    Global error percentiles pool the raw errors of analyzed cases that
    matched at least one hop; cases with no matched hop still count as
    analyzed but contribute no errors.
    """
    should_accept = sum(1 for c in manifest.cases if c.expected.should_accept)
    should_reject = len(manifest.cases) - should_accept

    analyzed = [r for r in results if r.is_runnable and r.pipeline_accepted]
    actually_rejected = sum(
        1 for r in results if r.is_runnable and r.expected_accept and not r.pipeline_accepted
    )
    false_accepts = sum(1 for r in analyzed if not r.expected_accept)

    global_metrics = None
    if analyzed:
        gct, landing, takeoff, flight = [], [], [], []
        num_matched_hops = 0
        for r in analyzed:
            if r.metrics is None or r.metrics.num_matches == 0:
                continue
            num_matched_hops += r.metrics.num_matches
            gct.extend(r.gct_errors_ms)
            landing.extend(r.landing_errors_ms)
            takeoff.extend(r.takeoff_errors_ms)
            flight.extend(r.flight_errors_ms)

        med_gct, p95_gct = _pooled(gct)
        med_landing, p95_landing = _pooled(landing)
        med_takeoff, p95_takeoff = _pooled(takeoff)
        med_flight, p95_flight = _pooled(flight)
        global_metrics = GlobalMetrics(
            num_cases_analyzed=len(analyzed),
            num_matched_hops=num_matched_hops,
            median_gct_err_ms=med_gct,
            p95_gct_err_ms=p95_gct,
            median_landing_err_ms=med_landing,
            p95_landing_err_ms=p95_landing,
            median_takeoff_err_ms=med_takeoff,
            p95_takeoff_err_ms=p95_takeoff,
            median_flight_err_ms=med_flight,
            p95_flight_err_ms=p95_flight,
        )

    failed_thresholds = [r.case_id for r in results if r.threshold_passed is False]

    return AccuracyReport(
        version=manifest.version,
        num_total_cases=len(manifest.cases),
        num_accept_cases=should_accept,
        num_reject_cases=should_reject,
        num_skipped=sum(1 for r in results if r.status == CaseStatus.SKIP),
        num_errors=sum(1 for r in results if r.status == CaseStatus.ERROR),
        cases=list(results),
        reject_metrics=RejectMetrics(
            should_accept_count=should_accept,
            actually_rejected_count=actually_rejected,
            reject_rate=_rate(actually_rejected, should_accept),
            should_reject_count=should_reject,
            false_accept_count=false_accepts,
            false_accept_rate=_rate(false_accepts, should_reject),
        ),
        all_thresholds_passed=not failed_thresholds,
        cases_failed_thresholds=failed_thresholds,
        global_metrics=global_metrics,
    )


def run_accuracy(manifest: GoldenDatasetManifest, measure: MeasureFn) -> AccuracyReport:
    """
    Compare every case of a validated manifest against pipeline measurements.

    ``measure`` raises MeasurementUnavailableError to skip a case. Any other
    failure while measuring or comparing a case marks it as errored and the
    run continues with the next case.
    """
    results: List[CaseResult] = []

    for test_case in manifest.cases:
        try:
            result = compare_case(test_case, measure(test_case))
        except MeasurementUnavailableError as exc:
            logger.info("Case %s skipped: %s", test_case.id, exc)
            results.append(_placeholder(test_case, CaseStatus.SKIP, skip_reason=str(exc)))
            continue
        except Exception as exc:
            logger.warning("Case %s errored: %s: %s", test_case.id, type(exc).__name__, exc)
            results.append(_placeholder(test_case, CaseStatus.ERROR, error_reason=str(exc)))
            continue

        if result.threshold_passed is False:
            logger.warning("Case %s failed thresholds: %s", test_case.id, ", ".join(result.threshold_failures))
        else:
            logger.debug("Case %s: %s", test_case.id, result.status.value)
        results.append(result)

    report = build_report(manifest, results)
    logger.info("Accuracy run: %d cases, %d skipped, %d errors",
                report.num_total_cases, report.num_skipped, report.num_errors)
    return report


def _placeholder(test_case: GoldenTestCase, status: CaseStatus, **reasons: str) -> CaseResult:
    return CaseResult(
        case_id=test_case.id,
        status=status,
        expected_accept=test_case.expected.should_accept,
        expected_thresholds=expected_thresholds(test_case),
        **reasons,
    )


def evaluate_gate(report: AccuracyReport) -> GateOutcome:
    """Regression gate over runnable (not skipped, not errored) cases."""
    runnable = [c for c in report.cases if c.is_runnable]
    failing: List[Dict[str, Any]] = []

    for c in runnable:
        reasons: List[str] = []
        if c.expected_accept:
            if not c.pipeline_accepted:
                reasons.append("rejected but shouldAccept")
            elif c.threshold_passed is False:
                reasons.extend(c.threshold_failures or ["thresholds not met"])
        elif c.pipeline_accepted:
            reasons.append("false-accept (shouldReject)")

        if reasons:
            failing.append({"case_id": c.case_id, "reasons": reasons})

    return GateOutcome(
        runnable_count=len(runnable),
        passed_count=len(runnable) - len(failing),
        failed_count=len(failing),
        exit_code=1 if failing else 0,
        failing_cases=failing,
    )


def format_summary(report: AccuracyReport) -> str:
    lines = ["=" * 60, "ACCURACY SUMMARY", "=" * 60]
    lines.append(f"Cases: {report.num_total_cases} total")
    lines.append(f"  - Accept: {report.num_accept_cases}")
    lines.append(f"  - Reject: {report.num_reject_cases}")
    lines.append(f"  - Skipped: {report.num_skipped}")
    lines.append(f"  - Errors: {report.num_errors}")

    rm = report.reject_metrics
    lines.append(f"Reject Rate: {rm.reject_rate:.1f}% "
                 f"({rm.actually_rejected_count}/{rm.should_accept_count} should-accept cases rejected)")
    lines.append(f"False Accept Rate: {rm.false_accept_rate:.1f}% "
                 f"({rm.false_accept_count}/{rm.should_reject_count} should-reject cases accepted)")

    if report.global_metrics:
        g = report.global_metrics
        lines.append(f"Global Metrics ({g.num_cases_analyzed} cases analyzed)")
        lines.append(f"  - Matched hops: {g.num_matched_hops}")
        lines.append(f"  - Median GCT error: {g.median_gct_err_ms:.1f}ms")
        lines.append(f"  - P95 GCT error: {g.p95_gct_err_ms:.1f}ms")
        lines.append(f"  - Median flight error: {g.median_flight_err_ms:.1f}ms")
        lines.append(f"  - P95 flight error: {g.p95_flight_err_ms:.1f}ms")

    lines.append(f"All Thresholds Passed: {'YES' if report.all_thresholds_passed else 'NO'}")
    if report.cases_failed_thresholds:
        lines.append(f"  Failed cases: {', '.join(report.cases_failed_thresholds)}")
    lines.append("=" * 60)
    return "\n".join(lines)


def format_gate(gate: GateOutcome) -> str:
    lines = ["GATE SCOREBOARD", "=" * 60]
    lines.append(f"Runnable cases: {gate.runnable_count}")
    lines.append(f"Pass: {gate.passed_count}  Fail: {gate.failed_count}")
    if gate.failing_cases:
        lines.append("Failing cases:")
        for failure in gate.failing_cases:
            lines.append(f"  - {failure['case_id']}: {'; '.join(failure['reasons'])}")
    if gate.runnable_count == 0:
        lines.append("WARNING: No runnable cases. Gate skipped.")
    lines.append("=" * 60)
    return "\n".join(lines)
