"""
Tests for gct_golden/exceptions.py — custom exception hierarchy.

Verifies that all custom exceptions inherit from GoldenDatasetError,
store their extra attributes, and that read/parse failures are kept
apart from schema violations.
"""

from __future__ import annotations

import pytest

from gct_golden.exceptions import (
    GoldenDatasetError,
    ManifestParseError,
    ManifestReadError,
    MeasurementUnavailableError,
    ValidationError,
)


class TestExceptionHierarchy:
    """All custom exceptions should be subclasses of GoldenDatasetError."""

    @pytest.mark.parametrize("exc_cls", [
        ManifestReadError,
        ManifestParseError,
        ValidationError,
        MeasurementUnavailableError,
    ])
    def test_is_golden_dataset_error(self, exc_cls):
        """Every project exception should be a GoldenDatasetError subclass."""
        assert issubclass(exc_cls, GoldenDatasetError)

    @pytest.mark.parametrize("exc_cls", [ManifestReadError, ManifestParseError])
    def test_read_and_parse_errors_are_not_validation_errors(self, exc_cls):
        """Malformed input must not be mistaken for a schema violation."""
        assert not issubclass(exc_cls, ValidationError)


class TestValidationError:
    """Tests for ValidationError attributes."""

    def test_message_is_prefixed_with_path(self):
        """str(err) should read '<path>: <message>'."""
        err = ValidationError("roi.space must be 'normalized' or 'pixel'", path="cases[2].roi.space")
        assert str(err) == "cases[2].roi.space: roi.space must be 'normalized' or 'pixel'"
        assert err.path == "cases[2].roi.space"
        assert err.message == "roi.space must be 'normalized' or 'pixel'"

    def test_stores_details(self):
        """Details should be kept verbatim."""
        err = ValidationError("bad", path="version", details={"value": 3})
        assert err.details == {"value": 3}

    def test_default_attributes(self):
        """Without a path the message is left bare."""
        err = ValidationError("fail")
        assert err.path == ""
        assert err.details is None
        assert str(err) == "fail"


class TestOtherErrors:
    """Tests for the remaining exception attributes."""

    def test_read_error_stores_path(self):
        """ManifestReadError should store the manifest path."""
        err = ManifestReadError("Failed to read manifest: nope", manifest_path="/x/manifest.json")
        assert err.manifest_path == "/x/manifest.json"

    def test_measurement_unavailable_stores_case_id(self):
        """MeasurementUnavailableError should store the case id."""
        err = MeasurementUnavailableError("no frame cache", case_id="hop-001")
        assert err.case_id == "hop-001"
        assert str(err) == "no frame cache"
