"""Versioned writers for layout diagnostics artifacts."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Union

import pandas as pd


PathLike = Union[str, Path]

DIAGNOSTICS_VERSION = "v0.1"
"""Version tag embedded in every diagnostics filename."""

DIAGNOSTICS_BASENAME = f"shelfgrid-diagnostics-{DIAGNOSTICS_VERSION}"


def artifact_name(suffix: str, *, table: str | None = None) -> str:
    """Return the versioned filename for a diagnostics artifact.

    The JSON report and HTML summary share :data:`DIAGNOSTICS_BASENAME`; CSV
    tables append their ``table`` name (``shelfgrid-diagnostics-v0.1-placements.csv``).
    """

    if table is None:
        return f"{DIAGNOSTICS_BASENAME}{suffix}"
    return f"{DIAGNOSTICS_BASENAME}-{table}{suffix}"


def _resolve_target_path(target: PathLike, expected_name: str) -> Path:
    path = Path(target)

    if path.suffix:
        if path.name != expected_name:
            raise ValueError(f"Diagnostics outputs must use the versioned filename '{expected_name}'.")
        resolved = path
    elif path.is_file():
        raise ValueError("Target path must be a directory or the explicit versioned filename.")
    else:
        resolved = path / expected_name

    resolved.parent.mkdir(parents=True, exist_ok=True)
    return resolved


def write_json(payload: Mapping[str, Any], target: PathLike) -> Path:
    """Serialize a diagnostics payload to ``<target>/shelfgrid-diagnostics-<version>.json``."""

    path = _resolve_target_path(target, artifact_name(".json"))
    path.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    return path


def write_html(html: str, target: PathLike) -> Path:
    """Persist a rendered diagnostics report next to the JSON payload."""

    path = _resolve_target_path(target, artifact_name(".html"))
    path.write_text(html, encoding="utf-8")
    return path


def write_table(frame: pd.DataFrame, target: PathLike, *, table: str) -> Path:
    """Persist a diagnostics dataframe (placements, connectors) as CSV."""

    if not table or not table.replace("_", "").isalnum():
        raise ValueError(f"Invalid diagnostics table name '{table}'")
    path = _resolve_target_path(target, artifact_name(".csv", table=table))
    frame.to_csv(path, index=False)
    return path


__all__ = [
    "DIAGNOSTICS_BASENAME",
    "DIAGNOSTICS_VERSION",
    "PathLike",
    "artifact_name",
    "write_html",
    "write_json",
    "write_table",
]
