"""
Manifest reading and media URI resolution.

Read and parse failures surface as ManifestReadError / ManifestParseError,
never as ValidationError: they mean the input was not data at all.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from gct_golden.config.settings import FILE_URI_PREFIX
from gct_golden.exceptions import ManifestParseError, ManifestReadError


def read_manifest_text(manifest_path: str | Path) -> str:
    """Read the raw UTF-8 manifest text."""
    try:
        return Path(manifest_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestReadError(
            f"Failed to read manifest: {exc}", manifest_path=str(manifest_path)
        ) from exc


def _reject_constant(name: str) -> Any:
    # NaN / Infinity are not JSON
    raise ValueError(f"invalid JSON constant {name!r}")


def parse_manifest_json(content: str) -> Any:
    """Parse manifest text into untyped JSON data."""
    try:
        return json.loads(content, parse_constant=_reject_constant)
    except ValueError as exc:
        raise ManifestParseError(f"Failed to parse manifest JSON: {exc}") from exc


def normalize_uri(uri: str, base_dir: str | Path) -> str:
    """
    Resolve a declared media reference to an absolute path.

    Accepts ``file://`` URIs, absolute paths and paths relative to
    ``base_dir`` (the manifest's directory). Absolute inputs are returned
    unchanged; relative ones are joined and normalized lexically.
    """
    if uri.startswith(FILE_URI_PREFIX):
        file_path = uri[len(FILE_URI_PREFIX):]
        if os.path.isabs(file_path):
            return file_path
        return os.path.abspath(os.path.join(os.fspath(base_dir), file_path))

    if os.path.isabs(uri):
        return uri

    return os.path.abspath(os.path.join(os.fspath(base_dir), uri))
