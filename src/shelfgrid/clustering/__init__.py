"""Clustering stages: horizontal components and vertical super-clusters."""

from .disjoint_set import DisjointSet
from .horizontal import (
    Cluster,
    build_clusters,
    max_price,
    order_cluster,
    rank_clusters,
    usable_pairs,
)
from .vertical import (
    GroupingStrategy,
    SuperCluster,
    build_super_clusters,
    chain_weights,
    cluster_index_lookup,
    group_clusters,
    order_chain,
    resolve_pairs,
)

__all__ = [
    "Cluster",
    "DisjointSet",
    "GroupingStrategy",
    "SuperCluster",
    "build_clusters",
    "build_super_clusters",
    "chain_weights",
    "cluster_index_lookup",
    "group_clusters",
    "max_price",
    "order_chain",
    "order_cluster",
    "rank_clusters",
    "resolve_pairs",
    "usable_pairs",
]
