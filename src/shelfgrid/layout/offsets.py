"""Horizontal alignment of clusters stacked inside a super-cluster."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Dict, Sequence

import numpy as np

from ..clustering.horizontal import Cluster
from .connections import ConnectionIndex
from .parameters import LayoutParameters


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Anchor:
    """First cross-cluster link found between two adjacent clusters."""

    source_cluster: int
    source_position: int
    source_item: str
    target_cluster: int
    target_position: int
    target_item: str


@dataclass(frozen=True, slots=True)
class OffsetSolution:
    """Per-cluster offsets together with the anchors that produced them."""

    offsets: Dict[int, float]
    anchors: Dict[int, Anchor]


def card_widths(count: int, params: LayoutParameters) -> np.ndarray:
    """Return the width of the first ``count`` slots of a cluster row."""

    if count <= 0:
        return np.zeros(0, dtype=float)
    if params.card_sizing == "fixed":
        return np.full(count, params.card_width, dtype=float)

    widths = np.empty(count, dtype=float)
    widths[: min(count, 2)] = params.card_width
    previous, current = params.card_width, params.card_width + params.card_width_step
    for position in range(2, count):
        previous, current = current, min(previous + current, params.max_card_width)
        widths[position] = current
    return widths


def slot_positions(count: int, params: LayoutParameters) -> np.ndarray:
    """Return the left edge of each of the first ``count`` slots, starting at zero."""

    if count <= 0:
        return np.zeros(0, dtype=float)
    strides = card_widths(count, params) + params.card_gap + params.connector_width
    return np.concatenate(([0.0], np.cumsum(strides[:-1])))


def find_anchor(
    previous_index: int,
    previous: Cluster,
    current_index: int,
    current: Cluster,
    connections: ConnectionIndex,
) -> Anchor | None:
    """Return the first item of ``previous`` linked into ``current``.

    When that item links to several members of ``current`` the lowest
    position wins.
    """

    current_positions = {item.item_id: position for position, item in enumerate(current)}
    for source_position, item in enumerate(previous):
        targets = [current_positions[linked] for linked in connections.linked(item.item_id) if linked in current_positions]
        if not targets:
            continue
        target_position = min(targets)
        return Anchor(
            source_cluster=previous_index,
            source_position=source_position,
            source_item=item.item_id,
            target_cluster=current_index,
            target_position=target_position,
            target_item=current[target_position].item_id,
        )
    return None


def solve_offsets(
    clusters: Sequence[Cluster],
    groups: Sequence[Sequence[int]],
    connections: ConnectionIndex,
    params: LayoutParameters,
) -> OffsetSolution:
    """Compute the horizontal displacement of every cluster.

    The first cluster of each super-cluster sits at zero. Every later cluster
    is shifted so that its anchor item lines up under the anchor item of its
    predecessor; without an anchor it inherits the predecessor's offset.
    """

    longest = max((len(cluster) for cluster in clusters), default=0)
    positions = slot_positions(longest, params)

    offsets: Dict[int, float] = {}
    anchors: Dict[int, Anchor] = {}
    for group in groups:
        if not group:
            continue
        offsets[group[0]] = 0.0
        for previous_index, current_index in zip(group, group[1:]):
            anchor = find_anchor(
                previous_index,
                clusters[previous_index],
                current_index,
                clusters[current_index],
                connections,
            )
            if anchor is None:
                offsets[current_index] = offsets[previous_index]
                continue
            anchors[current_index] = anchor
            shift = positions[anchor.source_position] - positions[anchor.target_position]
            offsets[current_index] = offsets[previous_index] + float(shift)

    logger.debug("Solved offsets for %d cluster(s) with %d anchor(s)", len(offsets), len(anchors))
    return OffsetSolution(offsets=offsets, anchors=anchors)


__all__ = [
    "Anchor",
    "OffsetSolution",
    "card_widths",
    "find_anchor",
    "slot_positions",
    "solve_offsets",
]
