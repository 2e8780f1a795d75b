"""Horizontal clustering: connected components, intra-cluster ordering and ranking."""

from __future__ import annotations

from collections import deque
import logging
from typing import Container, Dict, Iterable, List, Mapping, Sequence, Tuple

from ..model import Item, RelationPair
from .disjoint_set import DisjointSet


logger = logging.getLogger(__name__)

Cluster = Tuple[Item, ...]


def usable_pairs(
    pairs: Iterable[RelationPair],
    known_ids: Container[str] | None = None,
) -> Tuple[List[RelationPair], int]:
    """Split ``pairs`` into those whose endpoints are both known and a skip count.

    When ``known_ids`` is ``None`` every pair is usable.
    """

    kept: List[RelationPair] = []
    skipped = 0
    for left, right in pairs:
        if known_ids is not None and (left not in known_ids or right not in known_ids):
            skipped += 1
            continue
        kept.append((left, right))
    return kept, skipped


def build_clusters(
    pairs: Sequence[RelationPair],
    known_ids: Container[str] | None = None,
) -> List[List[str]]:
    """Group item ids into connected components of the horizontal relation.

    Clusters are returned in the order their first endpoint appears in
    ``pairs`` and list members in first-seen order. Ids that never appear in a
    usable pair are absent from the output.
    """

    kept, skipped = usable_pairs(pairs, known_ids)
    if skipped:
        logger.debug("Skipped %d horizontal pair(s) referencing unknown ids", skipped)

    store: DisjointSet[str] = DisjointSet()
    for left, right in kept:
        store.union(left, right)

    endpoints = (item_id for pair in kept for item_id in pair)
    clusters = store.buckets(endpoints)
    logger.debug("Built %d horizontal cluster(s) from %d pair(s)", len(clusters), len(kept))
    return clusters


def order_cluster(
    cluster: Sequence[str],
    pairs: Iterable[RelationPair],
    lookup: Mapping[str, Item],
) -> Cluster:
    """Order a cluster breadth-first from its most expensive member.

    The start node is the first member (in ``cluster`` order) holding the
    strictly highest price. Each dequeued node enqueues its unvisited
    neighbours by descending price; equal prices keep discovery order.
    """

    if not cluster:
        return ()

    members = {item_id: None for item_id in cluster}
    adjacency: Dict[str, Dict[str, None]] = {item_id: {} for item_id in members}
    for left, right in pairs:
        if left in members and right in members:
            adjacency[left][right] = None
            adjacency[right][left] = None

    visited: set[str] = set()
    ordered: List[str] = []

    while len(ordered) < len(members):
        remaining = [item_id for item_id in members if item_id not in visited]
        start = _most_expensive(remaining, lookup)
        queue = deque([start])
        visited.add(start)

        while queue:
            current = queue.popleft()
            ordered.append(current)
            neighbours = [node for node in adjacency[current] if node not in visited]
            neighbours.sort(key=lambda node: lookup[node].price, reverse=True)
            for neighbour in neighbours:
                visited.add(neighbour)
                queue.append(neighbour)

    return tuple(lookup[item_id] for item_id in ordered)


def _most_expensive(candidates: Sequence[str], lookup: Mapping[str, Item]) -> str:
    best = candidates[0]
    best_price = lookup[best].price
    for item_id in candidates[1:]:
        price = lookup[item_id].price
        if price > best_price:
            best, best_price = item_id, price
    return best


def max_price(cluster: Cluster) -> float:
    """Highest member price of ``cluster``."""

    return max(item.price for item in cluster)


def rank_clusters(clusters: Iterable[Cluster]) -> List[Cluster]:
    """Sort clusters by descending maximum member price, stable on ties."""

    return sorted(clusters, key=max_price, reverse=True)


__all__ = [
    "Cluster",
    "build_clusters",
    "max_price",
    "order_cluster",
    "rank_clusters",
    "usable_pairs",
]
