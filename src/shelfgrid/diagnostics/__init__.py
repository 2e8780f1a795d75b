"""Quality checks and summaries computed over finished layouts."""

from __future__ import annotations

from collections import defaultdict
import html
import math
from typing import Dict, List, Optional, Sequence, TypedDict

import numpy as np
import pandas as pd

from ..layout import LayoutResult, slot_positions
from .writers import (
    DIAGNOSTICS_BASENAME,
    DIAGNOSTICS_VERSION,
    artifact_name,
    write_html,
    write_json,
    write_table,
)


LARGE_SUPER_CLUSTER = 200
"""Super-cluster size above which chain ordering cost becomes noticeable."""


class DistributionSummary(TypedDict):
    """Summary statistics for a single metric.

    Attributes
    ----------
    count:
        Number of non-null observations used to compute the summary.
    missing:
        Number of missing values that were excluded from the summary.
    mean:
        Arithmetic mean of the metric, or ``NaN`` when ``count == 0``.
    minimum, maximum:
        Observed range, or ``NaN`` when ``count == 0``.
    quantiles:
        Mapping of requested quantile -> value.
    """

    count: int
    missing: int
    mean: float
    minimum: float
    maximum: float
    quantiles: Dict[float, float]


class UnalignedLink(TypedDict):
    """A connector whose endpoints do not share an x coordinate."""

    source_cluster: int
    source_position: int
    target_cluster: int
    target_position: int
    delta: float


class HueCollision(TypedDict):
    hue: int
    clusters: List[int]


class QASignals(TypedDict):
    """Heuristic checks over a layout; none of these are errors."""

    excluded_items: List[str]
    skipped_pairs: Dict[str, int]
    unaligned_links: List[UnalignedLink]
    hue_collisions: List[HueCollision]
    warnings: List[str]


def generate_qa_signals(
    result: LayoutResult,
    *,
    large_super_cluster: int = LARGE_SUPER_CLUSTER,
    tolerance: float = 1e-6,
) -> QASignals:
    """Inspect ``result`` for gaps the layout absorbed silently.

    Parameters
    ----------
    result:
        Layout produced by :func:`shelfgrid.layout.compute_layout`.
    large_super_cluster:
        Super-clusters with more clusters than this trigger a warning.
    tolerance:
        Absolute pixel difference below which connector endpoints count as
        aligned.
    """

    warnings: List[str] = []

    if result.excluded_ids:
        warnings.append(
            f"{len(result.excluded_ids)} item(s) appear in no horizontal pair and were left out of the layout"
        )

    skipped = {
        "horizontal": int(result.metrics.get("skipped_horizontal_pairs", 0)),
        "vertical": int(result.metrics.get("skipped_vertical_pairs", 0)),
    }
    for relation, count in skipped.items():
        if count:
            warnings.append(f"{count} {relation} pair(s) referenced unknown or unclustered items")

    longest = max((len(cluster) for cluster in result.clusters), default=0)
    positions = slot_positions(longest, result.parameters)
    unaligned: List[UnalignedLink] = []
    for connector in result.connectors:
        source_x = connector.source_offset + positions[connector.source_position]
        target_x = connector.target_offset + positions[connector.target_position]
        delta = float(target_x - source_x)
        if not math.isclose(delta, 0.0, abs_tol=tolerance):
            unaligned.append(
                UnalignedLink(
                    source_cluster=connector.source_cluster,
                    source_position=connector.source_position,
                    target_cluster=connector.target_cluster,
                    target_position=connector.target_position,
                    delta=delta,
                )
            )

    by_hue: Dict[int, List[int]] = defaultdict(list)
    for cluster_index, hue in enumerate(result.hues):
        by_hue[hue].append(cluster_index)
    collisions = [
        HueCollision(hue=hue, clusters=clusters)
        for hue, clusters in sorted(by_hue.items())
        if len(clusters) > 1
    ]
    if collisions:
        warnings.append(f"{len(collisions)} hue(s) are shared by more than one cluster")

    for group_index, group in enumerate(result.super_clusters):
        if len(group) > large_super_cluster:
            warnings.append(
                f"Super-cluster {group_index} holds {len(group)} clusters; chain ordering is quadratic in this size"
            )

    return QASignals(
        excluded_items=list(result.excluded_ids),
        skipped_pairs=skipped,
        unaligned_links=unaligned,
        hue_collisions=collisions,
        warnings=warnings,
    )


def summarize_distributions(
    frame: pd.DataFrame,
    *,
    metrics: Optional[Sequence[str]] = None,
    quantiles: Sequence[float] = (0.05, 0.5, 0.95),
) -> Dict[str, DistributionSummary]:
    """Summarize the numeric columns of a placements (or similar) frame.

    Raises ``KeyError`` for unknown metrics and ``ValueError`` for quantiles
    outside ``[0, 1]``.
    """

    if metrics is None:
        metrics = [column for column in frame.columns if pd.api.types.is_numeric_dtype(frame[column])]
    else:
        unknown = [column for column in metrics if column not in frame.columns]
        if unknown:
            raise KeyError(f"Metrics not found in frame: {unknown}")

    probabilities = tuple(sorted({float(q) for q in quantiles}))
    if any(not 0.0 <= q <= 1.0 for q in probabilities):
        raise ValueError(f"Quantiles must lie in [0, 1]; received {list(probabilities)}")

    summaries: Dict[str, DistributionSummary] = {}
    for metric in metrics:
        series = pd.to_numeric(frame[metric], errors="coerce")
        valid = series.dropna().to_numpy(dtype=float)
        if valid.size == 0:
            summaries[metric] = DistributionSummary(
                count=0,
                missing=int(series.isna().sum()),
                mean=math.nan,
                minimum=math.nan,
                maximum=math.nan,
                quantiles={q: math.nan for q in probabilities},
            )
            continue
        summaries[metric] = DistributionSummary(
            count=int(valid.size),
            missing=int(series.isna().sum()),
            mean=float(valid.mean()),
            minimum=float(valid.min()),
            maximum=float(valid.max()),
            quantiles={q: float(np.quantile(valid, q)) for q in probabilities},
        )
    return summaries


def cluster_sizes(result: LayoutResult) -> pd.DataFrame:
    """Return one row per cluster with its size, super-cluster and offset."""

    membership = result.group_positions()
    return pd.DataFrame(
        {
            "cluster_index": list(range(len(result.clusters))),
            "size": [len(cluster) for cluster in result.clusters],
            "super_cluster": [membership[index][0] for index in range(len(result.clusters))],
            "offset": [result.offsets.get(index, 0.0) for index in range(len(result.clusters))],
        }
    )


def build_diagnostics(result: LayoutResult) -> Dict[str, object]:
    """Assemble the JSON diagnostics payload for ``result``."""

    placements = result.to_frame()
    sizes = cluster_sizes(result)
    distributions = {
        **summarize_distributions(placements, metrics=["price", "x"]),
        **summarize_distributions(sizes, metrics=["size", "offset"]),
    }
    return {
        "metadata": {
            "diagnostics_version": DIAGNOSTICS_VERSION,
            "input_hash": result.input_hash,
            **dict(result.metrics),
        },
        "distributions": {
            metric: {**summary, "quantiles": {str(q): value for q, value in summary["quantiles"].items()}}
            for metric, summary in distributions.items()
        },
        "qa_signals": generate_qa_signals(result),
    }


def render_html(payload: Dict[str, object]) -> str:
    """Render a minimal standalone HTML report for a diagnostics payload."""

    metadata = payload.get("metadata", {})
    signals = payload.get("qa_signals", {})
    rows = "".join(
        f"<tr><th>{html.escape(str(key))}</th><td>{html.escape(str(value))}</td></tr>"
        for key, value in sorted(metadata.items())
    )
    warnings = signals.get("warnings", []) if isinstance(signals, dict) else []
    warning_items = "".join(f"<li>{html.escape(str(message))}</li>" for message in warnings) or "<li>None</li>"
    return (
        "<!DOCTYPE html>\n"
        "<html><head><meta charset=\"utf-8\"><title>shelfgrid diagnostics</title></head><body>"
        f"<h1>Layout diagnostics {html.escape(DIAGNOSTICS_VERSION)}</h1>"
        f"<table>{rows}</table>"
        f"<h2>Warnings</h2><ul>{warning_items}</ul>"
        "</body></html>\n"
    )


__all__ = [
    "DIAGNOSTICS_BASENAME",
    "DIAGNOSTICS_VERSION",
    "DistributionSummary",
    "HueCollision",
    "LARGE_SUPER_CLUSTER",
    "QASignals",
    "UnalignedLink",
    "artifact_name",
    "build_diagnostics",
    "cluster_sizes",
    "generate_qa_signals",
    "render_html",
    "summarize_distributions",
    "write_html",
    "write_json",
    "write_table",
]
