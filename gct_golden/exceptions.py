"""
Custom exception hierarchy for the GCT golden dataset tooling.

Separates "the manifest could not be read or parsed" from "the manifest
was well-formed data but violated the schema", so test harnesses can
skip a broken file without mistaking it for a labeling mistake.
"""

from __future__ import annotations

from typing import Any


class GoldenDatasetError(Exception):
    """Base exception for all project-specific errors."""


class ManifestReadError(GoldenDatasetError):
    """Raised when the manifest file cannot be read.

    Attributes:
        manifest_path: The path that failed to read.
    """

    def __init__(self, message: str, *, manifest_path: str = ""):
        super().__init__(message)
        self.manifest_path = manifest_path


class ManifestParseError(GoldenDatasetError):
    """Raised when the manifest content is not well-formed JSON."""


class ValidationError(GoldenDatasetError):
    """Raised when the manifest violates the golden dataset schema.

    Attributes:
        path: Dotted/bracketed field path, e.g. ``cases[2].roi.space``.
        message: The violation without the path prefix.
        details: Optional extra context (offending value, etc.).
    """

    def __init__(self, message: str, *, path: str = "", details: Any = None):
        super().__init__(f"{path}: {message}" if path else message)
        self.message = message
        self.path = path
        self.details = details


class MeasurementUnavailableError(GoldenDatasetError):
    """Raised by a measurement provider when a case has nothing to compare.

    Attributes:
        case_id: The case that was skipped.
    """

    def __init__(self, message: str, *, case_id: str = ""):
        super().__init__(message)
        self.case_id = case_id
