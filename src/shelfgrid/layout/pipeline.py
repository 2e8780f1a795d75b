"""End-to-end layout pipeline: clusters, super-clusters, offsets and connectors.

Stages run strictly forward and every stage is a pure function of the
previous ones, so identical inputs always produce identical layouts. The
:class:`LayoutEngine` exploits this by memoising whole results under a
content hash of the inputs.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

import pandas as pd

from ..clustering import (
    Cluster,
    SuperCluster,
    build_clusters,
    cluster_index_lookup,
    group_clusters,
    order_cluster,
    rank_clusters,
    resolve_pairs,
    usable_pairs,
)
from ..explain import TraceRecord, hash_payload
from ..model import Item, RelationPair, index_items, normalise_pairs
from .colors import cluster_hue, cluster_label
from .connections import ConnectionIndex, build_connection_index
from .connectors import Connector, resolve_connectors
from .offsets import Anchor, card_widths, slot_positions, solve_offsets
from .parameters import LayoutParameters


logger = logging.getLogger(__name__)

PLACEMENT_COLUMNS = [
    "item_id",
    "price",
    "cluster_index",
    "cluster_label",
    "position",
    "super_cluster",
    "group_position",
    "offset",
    "x",
    "width",
    "hue",
]

CONNECTOR_COLUMNS = [
    "source_cluster",
    "source_position",
    "source_offset",
    "target_cluster",
    "target_position",
    "target_offset",
    "span",
    "lane",
    "nudge",
]


@dataclass(frozen=True, slots=True)
class LayoutResult:
    """Complete, read-only description of a computed layout."""

    clusters: Tuple[Cluster, ...]
    super_clusters: Tuple[SuperCluster, ...]
    offsets: Mapping[int, float]
    anchors: Mapping[int, Anchor]
    connectors: Tuple[Connector, ...]
    hues: Tuple[int, ...]
    labels: Tuple[str, ...]
    connections: ConnectionIndex
    excluded_ids: Tuple[str, ...]
    metrics: Mapping[str, int | str]
    parameters: LayoutParameters
    input_hash: str

    def group_positions(self) -> Dict[int, Tuple[int, int]]:
        """Map each cluster index to ``(super_cluster, position within it)``."""

        return {
            cluster_index: (group_index, rank)
            for group_index, group in enumerate(self.super_clusters)
            for rank, cluster_index in enumerate(group)
        }

    def to_frame(self) -> pd.DataFrame:
        """Return one row per placed item with its resolved coordinates."""

        if not self.clusters:
            return pd.DataFrame(columns=PLACEMENT_COLUMNS)

        longest = max(len(cluster) for cluster in self.clusters)
        positions = slot_positions(longest, self.parameters)
        widths = card_widths(longest, self.parameters)
        membership = self.group_positions()

        rows: List[Dict[str, object]] = []
        for cluster_index, cluster in enumerate(self.clusters):
            group_index, rank = membership[cluster_index]
            offset = self.offsets.get(cluster_index, 0.0)
            for position, item in enumerate(cluster):
                rows.append(
                    {
                        "item_id": item.item_id,
                        "price": item.price,
                        "cluster_index": cluster_index,
                        "cluster_label": self.labels[cluster_index],
                        "position": position,
                        "super_cluster": group_index,
                        "group_position": rank,
                        "offset": offset,
                        "x": offset + float(positions[position]),
                        "width": float(widths[position]),
                        "hue": self.hues[cluster_index],
                    }
                )
        return pd.DataFrame.from_records(rows, columns=PLACEMENT_COLUMNS)

    def connectors_frame(self) -> pd.DataFrame:
        """Return the resolved connectors as a dataframe."""

        if not self.connectors:
            return pd.DataFrame(columns=CONNECTOR_COLUMNS)
        return pd.DataFrame.from_records(
            [connector.to_record() for connector in self.connectors],
            columns=CONNECTOR_COLUMNS,
        )

    def to_payload(self) -> Dict[str, object]:
        """Return a JSON-ready dictionary describing the layout."""

        return {
            "metadata": {
                "input_hash": self.input_hash,
                "parameters": self.parameters.to_dict(),
                "metrics": dict(self.metrics),
            },
            "clusters": [
                {
                    "index": cluster_index,
                    "label": self.labels[cluster_index],
                    "hue": self.hues[cluster_index],
                    "offset": self.offsets.get(cluster_index, 0.0),
                    "items": [item.to_record() for item in cluster],
                }
                for cluster_index, cluster in enumerate(self.clusters)
            ],
            "super_clusters": [list(group) for group in self.super_clusters],
            "connectors": [connector.to_record() for connector in self.connectors],
            "excluded_ids": list(self.excluded_ids),
        }

    def to_trace(self) -> List[Dict[str, object]]:
        """Return flattened per-cluster trace records."""

        membership = self.group_positions()
        incoming: Dict[int, int] = {}
        for connector in self.connectors:
            incoming[connector.target_cluster] = incoming.get(connector.target_cluster, 0) + 1

        records: List[Dict[str, object]] = []
        for cluster_index, cluster in enumerate(self.clusters):
            group_index, rank = membership[cluster_index]
            anchor = self.anchors.get(cluster_index)
            record = TraceRecord(
                cluster_index=cluster_index,
                stage="layout",
                metadata={"input_hash": self.input_hash},
                cluster={
                    "label": self.labels[cluster_index],
                    "size": len(cluster),
                    "max_price": cluster[0].price,
                    "item_ids": ",".join(item.item_id for item in cluster),
                },
                grouping={
                    "super_cluster": group_index,
                    "position": rank,
                    "strategy": self.parameters.grouping,
                },
                alignment={
                    "offset": self.offsets.get(cluster_index, 0.0),
                    "anchor_source_item": anchor.source_item if anchor else None,
                    "anchor_target_item": anchor.target_item if anchor else None,
                },
                connectors={"incoming": incoming.get(cluster_index, 0)},
            )
            records.append(record.to_dict())
        return records


def compute_layout(
    items: Iterable[Item],
    horizontal_pairs: Iterable[Sequence[object]],
    vertical_pairs: Iterable[Sequence[object]] | None = None,
    params: LayoutParameters | None = None,
) -> LayoutResult:
    """Run every layout stage over ``items`` and the two relation sets."""

    params = params or LayoutParameters()
    items = tuple(items)
    horizontal = normalise_pairs(horizontal_pairs)
    vertical = normalise_pairs(vertical_pairs)
    input_hash = layout_input_hash(items, horizontal, vertical, params)
    return _compute(items, horizontal, vertical, params, input_hash)


def layout_input_hash(
    items: Sequence[Item],
    horizontal: Sequence[RelationPair],
    vertical: Sequence[RelationPair],
    params: LayoutParameters,
) -> str:
    """Content hash identifying a layout input."""

    return hash_payload(
        {
            "items": list(items),
            "horizontal": list(horizontal),
            "vertical": list(vertical),
            "parameters": params,
        }
    )


def _compute(
    items: Sequence[Item],
    horizontal: Sequence[RelationPair],
    vertical: Sequence[RelationPair],
    params: LayoutParameters,
    input_hash: str,
) -> LayoutResult:
    lookup, duplicates = index_items(items)
    if duplicates:
        logger.warning(
            "Ignoring %d duplicate item id(s): %s",
            len(duplicates),
            ", ".join(sorted(set(duplicates))),
        )

    kept_horizontal, skipped_horizontal = usable_pairs(horizontal, lookup)
    raw_clusters = build_clusters(kept_horizontal)

    clustered = {item_id for cluster in raw_clusters for item_id in cluster}
    unpaired = [item_id for item_id in lookup if item_id not in clustered]
    if params.unpaired_items == "singleton":
        raw_clusters.extend([item_id] for item_id in unpaired)
        excluded: Tuple[str, ...] = ()
    else:
        excluded = tuple(unpaired)

    clusters = tuple(
        rank_clusters(order_cluster(cluster, kept_horizontal, lookup) for cluster in raw_clusters)
    )

    resolved_vertical = resolve_pairs(vertical, cluster_index_lookup(clusters))
    super_clusters = tuple(group_clusters(clusters, resolved_vertical, strategy=params.grouping))
    connections = build_connection_index(clusters, vertical)
    solution = solve_offsets(clusters, super_clusters, connections, params)
    connectors = tuple(
        resolve_connectors(
            clusters,
            super_clusters,
            connections,
            solution.offsets,
            spacing=params.connector_spacing,
        )
    )

    metrics: Dict[str, int | str] = {
        "items": len(lookup),
        "duplicate_items": len(duplicates),
        "horizontal_pairs": len(horizontal),
        "skipped_horizontal_pairs": skipped_horizontal,
        "vertical_pairs": len(vertical),
        "skipped_vertical_pairs": len(vertical) - len(resolved_vertical),
        "clusters": len(clusters),
        "super_clusters": len(super_clusters),
        "excluded_items": len(excluded),
        "links": connections.link_count,
        "anchors": len(solution.anchors),
        "connectors": len(connectors),
        "grouping": params.grouping,
    }
    logger.info(
        "Laid out %d item(s) in %d cluster(s) across %d super-cluster(s) with %d connector(s)",
        len(lookup) - len(excluded),
        len(clusters),
        len(super_clusters),
        len(connectors),
    )

    return LayoutResult(
        clusters=clusters,
        super_clusters=super_clusters,
        offsets=MappingProxyType(dict(solution.offsets)),
        anchors=MappingProxyType(dict(solution.anchors)),
        connectors=connectors,
        hues=tuple(cluster_hue(index) for index in range(len(clusters))),
        labels=tuple(cluster_label(index) for index in range(len(clusters))),
        connections=connections,
        excluded_ids=excluded,
        metrics=MappingProxyType(metrics),
        parameters=params,
        input_hash=input_hash,
    )


class LayoutEngine:
    """Memoising front-end for :func:`compute_layout`.

    Results are cached under the content hash of their inputs, so equal
    inputs hit the cache even when passed as fresh objects.
    """

    def __init__(self, params: LayoutParameters | None = None, *, cache_size: int = 32) -> None:
        if cache_size < 0:
            raise ValueError("cache_size must be non-negative")
        self.params = params or LayoutParameters()
        self.cache_size = cache_size
        self._cache: "OrderedDict[str, LayoutResult]" = OrderedDict()
        self._hits = 0
        self._misses = 0

    def layout(
        self,
        items: Iterable[Item],
        horizontal_pairs: Iterable[Sequence[object]],
        vertical_pairs: Iterable[Sequence[object]] | None = None,
    ) -> LayoutResult:
        items = tuple(items)
        horizontal = normalise_pairs(horizontal_pairs)
        vertical = normalise_pairs(vertical_pairs)
        key = layout_input_hash(items, horizontal, vertical, self.params)

        cached = self._cache.get(key)
        if cached is not None:
            self._hits += 1
            self._cache.move_to_end(key)
            logger.debug("Layout cache hit for %s", key[:12])
            return cached

        self._misses += 1
        result = _compute(items, horizontal, vertical, self.params, key)
        if self.cache_size:
            self._cache[key] = result
            while len(self._cache) > self.cache_size:
                self._cache.popitem(last=False)
        return result

    def cache_info(self) -> Dict[str, int]:
        return {
            "hits": self._hits,
            "misses": self._misses,
            "size": len(self._cache),
            "max_size": self.cache_size,
        }

    def clear(self) -> None:
        self._cache.clear()
        self._hits = 0
        self._misses = 0


__all__ = [
    "CONNECTOR_COLUMNS",
    "LayoutEngine",
    "LayoutResult",
    "PLACEMENT_COLUMNS",
    "compute_layout",
    "layout_input_hash",
]
