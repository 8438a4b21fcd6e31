"""
Golden dataset manifest validation.

Each sub-schema has a staged validator that takes untyped JSON and returns
a frozen record, or raises ValidationError naming the offending field path
(e.g. ``cases[2].roi.space``). Validation is fail-fast: the first violation
ends the load and no partial manifest is returned.
"""

from __future__ import annotations

import logging
import math
import os
from pathlib import Path
from typing import Any, Dict, List, Tuple

from gct_golden.config.settings import ROI_FIELDS, THRESHOLD_FIELDS
from gct_golden.dataset.reader import normalize_uri, parse_manifest_json, read_manifest_text
from gct_golden.dataset.schema import (
    ExpectedSpec,
    GoldenDatasetManifest,
    GoldenTestCase,
    LabelSource,
    LabelsSpec,
    RoiSpace,
    RoiSpec,
)
from gct_golden.exceptions import ValidationError

logger = logging.getLogger(__name__)

_ROI_SPACES = frozenset(space.value for space in RoiSpace)
_LABEL_SOURCES = frozenset(source.value for source in LabelSource)


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a JSON number
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(float(value))
    except OverflowError:
        # integer literals beyond float range
        return False


def _require_object(value: Any, message: str, path: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ValidationError(message, path=path, details=value)
    return value


def validate_roi_spec(roi: Any, case_path: str) -> RoiSpec:
    roi = _require_object(roi, "roi must be an object", case_path)

    if roi.get("space") not in _ROI_SPACES:
        raise ValidationError(
            "roi.space must be 'normalized' or 'pixel'",
            path=f"{case_path}.roi.space",
            details=roi.get("space"),
        )

    for name in ROI_FIELDS:
        if not _is_number(roi.get(name)):
            raise ValidationError(
                f"roi.{name} must be a number",
                path=f"{case_path}.roi.{name}",
                details=roi.get(name),
            )

    if roi["space"] == RoiSpace.normalized.value:
        if any(not 0 <= roi[name] <= 1 for name in ROI_FIELDS):
            raise ValidationError(
                "normalized roi values must be in [0..1]",
                path=f"{case_path}.roi",
                details={name: roi[name] for name in ROI_FIELDS},
            )

    return RoiSpec(
        space=roi["space"],
        x=roi["x"],
        y=roi["y"],
        width=roi["width"],
        height=roi["height"],
    )


def _validate_timestamps(values: Any, name: str, case_path: str) -> List[float]:
    if not isinstance(values, list):
        raise ValidationError(
            f"labels.{name} must be an array",
            path=f"{case_path}.labels.{name}",
            details=values,
        )
    for i, value in enumerate(values):
        if not _is_number(value):
            raise ValidationError(
                f"{name}[{i}] must be a number",
                path=f"{case_path}.labels.{name}[{i}]",
                details=value,
            )
    return values


def validate_labels_spec(labels: Any, case_path: str) -> LabelsSpec:
    labels = _require_object(labels, "labels must be an object", case_path)

    if labels.get("source") not in _LABEL_SOURCES:
        raise ValidationError(
            "labels.source must be 'manual-label-mode', 'external', or 'synthetic'",
            path=f"{case_path}.labels.source",
            details=labels.get("source"),
        )

    tolerance = labels.get("toleranceMs")
    if not _is_number(tolerance) or tolerance < 0:
        raise ValidationError(
            "labels.toleranceMs must be a non-negative number",
            path=f"{case_path}.labels.toleranceMs",
            details=tolerance,
        )

    landings = _validate_timestamps(labels.get("landingsMs"), "landingsMs", case_path)
    takeoffs = _validate_timestamps(labels.get("takeoffsMs"), "takeoffsMs", case_path)

    events: List[Tuple[float, str]] = sorted(
        [(t, "landing") for t in landings] + [(t, "takeoff") for t in takeoffs],
        key=lambda event: event[0],
    )
    for (t, kind), (next_t, next_kind) in zip(events, events[1:]):
        if t == next_t:
            raise ValidationError(
                f"duplicate timestamp at {t}ms",
                path=f"{case_path}.labels",
                details={"timestamp": t, "events": [kind, next_kind]},
            )

    # Any later takeoff covers a landing; pairing is not one-to-one.
    for landing in landings:
        if not any(takeoff > landing for takeoff in takeoffs):
            raise ValidationError(
                f"landing at {landing}ms has no corresponding takeoff",
                path=f"{case_path}.labels",
                details={"landing": landing},
            )

    return LabelsSpec(
        source=labels["source"],
        tolerance_ms=tolerance,
        landings_ms=tuple(landings),
        takeoffs_ms=tuple(takeoffs),
    )


def validate_expected_spec(expected: Any, case_path: str) -> ExpectedSpec:
    expected = _require_object(expected, "expected must be an object", case_path)

    should_accept = expected.get("shouldAccept")
    if not isinstance(should_accept, bool):
        raise ValidationError(
            "expected.shouldAccept must be a boolean",
            path=f"{case_path}.expected.shouldAccept",
            details=should_accept,
        )

    reason = expected.get("reason")
    if not should_accept and reason and not isinstance(reason, str):
        raise ValidationError(
            "expected.reason must be a string",
            path=f"{case_path}.expected.reason",
            details=reason,
        )

    if should_accept and not any(_is_number(expected.get(key)) for key in THRESHOLD_FIELDS):
        raise ValidationError(
            "shouldAccept=true requires at least one maxMedian* or maxP95* threshold",
            path=f"{case_path}.expected",
        )

    thresholds: Dict[str, float] = {}
    for key, attr in THRESHOLD_FIELDS.items():
        if key not in expected:
            continue
        value = expected[key]
        if not _is_number(value) or value < 0:
            raise ValidationError(
                f"expected.{key} must be a non-negative number",
                path=f"{case_path}.expected.{key}",
                details=value,
            )
        thresholds[attr] = value

    return ExpectedSpec(
        should_accept=should_accept,
        reason=reason if isinstance(reason, str) else None,
        **thresholds,
    )


def validate_test_case(test_case: Any, case_index: int, base_dir: str | Path) -> GoldenTestCase:
    case_path = f"cases[{case_index}]"
    test_case = _require_object(test_case, "must be an object", case_path)

    case_id = test_case.get("id")
    if not isinstance(case_id, str) or not case_id:
        raise ValidationError(
            "id is required and must be a non-empty string",
            path=f"{case_path}.id",
            details=case_id,
        )

    uri = test_case.get("uri")
    if not isinstance(uri, str) or not uri:
        raise ValidationError(
            "uri is required and must be a non-empty string",
            path=f"{case_path}.uri",
            details=uri,
        )

    try:
        resolved_uri = normalize_uri(uri, base_dir)
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            f"failed to normalize uri: {exc}", path=f"{case_path}.uri", details=uri
        ) from exc

    notes = test_case.get("notes")
    if notes and not isinstance(notes, str):
        raise ValidationError("notes must be a string", path=f"{case_path}.notes", details=notes)

    roi = validate_roi_spec(test_case.get("roi"), case_path)
    labels = validate_labels_spec(test_case.get("labels"), case_path)
    expected = validate_expected_spec(test_case.get("expected"), case_path)

    logger.debug("Validated %s (%s): %d landings, %d takeoffs",
                 case_path, case_id, len(labels.landings_ms), len(labels.takeoffs_ms))

    return GoldenTestCase(
        id=case_id,
        uri=resolved_uri,
        notes=notes if isinstance(notes, str) else None,
        roi=roi,
        labels=labels,
        expected=expected,
    )


def validate_manifest_data(data: Any, base_dir: str | Path) -> GoldenDatasetManifest:
    """Validate already-parsed manifest JSON; media URIs resolve against ``base_dir``."""
    data = _require_object(data, "manifest must be an object", "root")

    version = data.get("version")
    if not isinstance(version, str):
        raise ValidationError("version is required and must be a string", path="version", details=version)

    fps = data.get("fpsAssumption")
    if not _is_number(fps) or fps <= 0:
        raise ValidationError("fpsAssumption must be a positive number", path="fpsAssumption", details=fps)

    cases = data.get("cases")
    if not isinstance(cases, list):
        raise ValidationError("cases must be an array", path="cases", details=cases)
    if not cases:
        raise ValidationError("cases array must not be empty", path="cases")

    description = data.get("description") or ""
    if not isinstance(description, str):
        raise ValidationError("description must be a string", path="description", details=description)

    validated = tuple(
        validate_test_case(test_case, i, base_dir) for i, test_case in enumerate(cases)
    )

    return GoldenDatasetManifest(
        version=version,
        description=description,
        fps_assumption=fps,
        cases=validated,
    )


def load_golden_dataset(manifest_path: str | Path) -> GoldenDatasetManifest:
    """
    Load and validate a golden dataset manifest.

    Raises:
        ManifestReadError: The file could not be read.
        ManifestParseError: The file is not well-formed JSON.
        ValidationError: The first schema or invariant violation found.
    """
    logger.debug("Loading golden dataset manifest from %s", manifest_path)
    data = parse_manifest_json(read_manifest_text(manifest_path))

    base_dir = os.path.dirname(os.path.abspath(os.fspath(manifest_path)))
    manifest = validate_manifest_data(data, base_dir)

    logger.info("Loaded golden dataset %s: %d cases", manifest.version, len(manifest.cases))
    return manifest
