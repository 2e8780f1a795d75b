"""Vertical grouping of ranked clusters into ordered super-clusters."""

from __future__ import annotations

from collections import Counter, deque
import logging
from typing import Dict, Iterable, List, Literal, Mapping, Sequence, Tuple

import numpy as np

from ..model import RelationPair
from .disjoint_set import DisjointSet
from .horizontal import Cluster


logger = logging.getLogger(__name__)

GroupingStrategy = Literal["chain", "positional"]
SuperCluster = Tuple[int, ...]


def cluster_index_lookup(clusters: Sequence[Cluster]) -> Dict[str, int]:
    """Map every clustered item id to the index of its cluster."""

    return {item.item_id: index for index, cluster in enumerate(clusters) for item in cluster}


def resolve_pairs(
    pairs: Iterable[RelationPair],
    lookup: Mapping[str, int],
) -> List[Tuple[int, int]]:
    """Translate item-id pairs into cluster-index pairs, dropping unresolvable ones."""

    resolved: List[Tuple[int, int]] = []
    for left, right in pairs:
        left_index = lookup.get(left)
        right_index = lookup.get(right)
        if left_index is None or right_index is None:
            continue
        resolved.append((left_index, right_index))
    return resolved


def chain_weights(resolved: Iterable[Tuple[int, int]]) -> Counter[Tuple[int, int]]:
    """Count vertical pairs linking each unordered pair of distinct clusters."""

    weights: Counter[Tuple[int, int]] = Counter()
    for left, right in resolved:
        if left == right:
            continue
        weights[(min(left, right), max(left, right))] += 1
    return weights


def build_super_clusters(
    clusters: Sequence[Cluster],
    vertical_pairs: Iterable[RelationPair],
    *,
    strategy: GroupingStrategy = "chain",
) -> List[SuperCluster]:
    """Group ranked clusters connected by vertical pairs.

    Pairs are translated to cluster indices with :func:`resolve_pairs` and
    handed to :func:`group_clusters`.
    """

    resolved = resolve_pairs(vertical_pairs, cluster_index_lookup(clusters))
    return group_clusters(clusters, resolved, strategy=strategy)


def group_clusters(
    clusters: Sequence[Cluster],
    resolved: Sequence[Tuple[int, int]],
    *,
    strategy: GroupingStrategy = "chain",
) -> List[SuperCluster]:
    """Group clusters linked by already-resolved cluster-index pairs.

    Cluster indices are unioned in a store of their own, separate from the
    item-level store used for horizontal clustering. Each super-cluster is
    ordered by ``strategy`` and the list is sorted by lowest member index.
    """

    if strategy not in ("chain", "positional"):
        raise ValueError(f"Unsupported grouping strategy '{strategy}'")

    store: DisjointSet[int] = DisjointSet(range(len(clusters)))
    for left, right in resolved:
        store.union(left, right)
    buckets = store.buckets(range(len(clusters)))

    if strategy == "chain":
        weights = chain_weights(resolved)
        first_ids = [cluster[0].item_id for cluster in clusters]
        groups = [order_chain(bucket, weights, first_ids) for bucket in buckets]
    else:
        groups = [sorted(bucket) for bucket in buckets]

    groups.sort(key=min)
    logger.debug(
        "Grouped %d cluster(s) into %d super-cluster(s) using '%s' ordering",
        len(clusters),
        len(groups),
        strategy,
    )
    return [tuple(group) for group in groups]


def order_chain(
    bucket: Sequence[int],
    weights: Mapping[Tuple[int, int], int],
    first_ids: Sequence[str],
) -> List[int]:
    """Order one super-cluster as a greedy path over connection weights.

    The start cluster has the highest total weight to the rest of the bucket.
    Each step places the unplaced cluster with the strongest single link to a
    placed one, at whichever path end it is more strongly linked to (the tail
    on equal links). Ties between candidates go to the lexicographically
    smallest first item id.
    """

    members = sorted(bucket)
    if len(members) <= 1:
        return members

    position = {cluster_index: offset for offset, cluster_index in enumerate(members)}
    matrix = np.zeros((len(members), len(members)), dtype=np.int64)
    for (left, right), weight in weights.items():
        if left in position and right in position:
            matrix[position[left], position[right]] = weight
            matrix[position[right], position[left]] = weight

    def tie_break(cluster_index: int) -> str:
        return first_ids[cluster_index]

    totals = matrix.sum(axis=1)
    start = min(members, key=lambda index: (-int(totals[position[index]]), tie_break(index)))

    path = deque([start])
    placed = {start}
    while len(placed) < len(members):
        placed_rows = [position[index] for index in placed]
        candidates: List[Tuple[int, int]] = []
        for index in members:
            if index in placed:
                continue
            strength = int(matrix[position[index], placed_rows].max())
            if strength > 0:
                candidates.append((index, strength))

        if not candidates:
            remainder = sorted((index for index in members if index not in placed), key=tie_break)
            logger.debug("Appending %d disconnected cluster(s) to chain", len(remainder))
            path.extend(remainder)
            break

        chosen, _ = min(candidates, key=lambda entry: (-entry[1], tie_break(entry[0])))
        row = position[chosen]
        head_weight = int(matrix[row, position[path[0]]])
        tail_weight = int(matrix[row, position[path[-1]]])
        if head_weight > tail_weight:
            path.appendleft(chosen)
        else:
            path.append(chosen)
        placed.add(chosen)

    return list(path)


__all__ = [
    "GroupingStrategy",
    "SuperCluster",
    "build_super_clusters",
    "chain_weights",
    "cluster_index_lookup",
    "group_clusters",
    "order_chain",
    "resolve_pairs",
]
