"""
Accuracy evaluation against the golden dataset.

Provides:
- Event and hop matching with nearest-rank error percentiles (accuracy)
- Per-case threshold checks against the manifest's acceptance criteria
- Report aggregation and the regression gate (report)
"""

from gct_golden.evaluation.accuracy import (
    CaseMetrics,
    CaseResult,
    CaseStatus,
    MeasuredEvents,
    compare_case,
    match_events,
    match_hops,
    median,
    pair_hops,
    percentile,
)
from gct_golden.evaluation.report import (
    AccuracyReport,
    GateOutcome,
    build_report,
    evaluate_gate,
    run_accuracy,
)

__all__ = [
    "CaseMetrics",
    "CaseResult",
    "CaseStatus",
    "MeasuredEvents",
    "compare_case",
    "match_events",
    "match_hops",
    "median",
    "pair_hops",
    "percentile",
    "AccuracyReport",
    "GateOutcome",
    "build_report",
    "evaluate_gate",
    "run_accuracy",
]
