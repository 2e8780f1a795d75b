"""Layout stages: connection index, alignment, connectors, colours and the pipeline."""

from .colors import PRIME_TABLE, cluster_color, cluster_hue, cluster_label
from .connections import ConnectionIndex, build_connection_index
from .connectors import Connector, resolve_connectors
from .offsets import (
    Anchor,
    OffsetSolution,
    card_widths,
    find_anchor,
    slot_positions,
    solve_offsets,
)
from .parameters import LayoutConfigurationError, LayoutParameters
from .pipeline import LayoutEngine, LayoutResult, compute_layout, layout_input_hash

__all__ = [
    "Anchor",
    "ConnectionIndex",
    "Connector",
    "LayoutConfigurationError",
    "LayoutEngine",
    "LayoutParameters",
    "LayoutResult",
    "OffsetSolution",
    "PRIME_TABLE",
    "build_connection_index",
    "card_widths",
    "cluster_color",
    "cluster_hue",
    "cluster_label",
    "compute_layout",
    "find_anchor",
    "layout_input_hash",
    "resolve_connectors",
    "slot_positions",
    "solve_offsets",
]
