"""Bidirectional index of vertical links crossing cluster boundaries."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, Mapping, Sequence, Tuple

from ..clustering.horizontal import Cluster
from ..clustering.vertical import cluster_index_lookup
from ..model import RelationPair


class ConnectionIndex(Mapping[str, Tuple[str, ...]]):
    """Read-only ``item_id -> linked item ids`` mapping.

    Links are symmetric and deduplicated per source item; linked ids keep the
    order in which their first declaring pair appeared.
    """

    __slots__ = ("_links",)

    def __init__(self, links: Mapping[str, Iterable[str]] | None = None) -> None:
        self._links: Dict[str, Tuple[str, ...]] = {
            source: tuple(dict.fromkeys(targets)) for source, targets in (links or {}).items()
        }

    def __getitem__(self, item_id: str) -> Tuple[str, ...]:
        return self._links[item_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._links)

    def __len__(self) -> int:
        return len(self._links)

    def linked(self, item_id: str) -> Tuple[str, ...]:
        """Return the ids linked to ``item_id`` (empty when it has none)."""

        return self._links.get(item_id, ())

    @property
    def link_count(self) -> int:
        """Number of distinct undirected links in the index."""

        return sum(len(targets) for targets in self._links.values()) // 2

    def to_dict(self) -> dict[str, list[str]]:
        return {source: list(targets) for source, targets in self._links.items()}


def build_connection_index(
    clusters: Sequence[Cluster],
    vertical_pairs: Iterable[RelationPair],
) -> ConnectionIndex:
    """Index vertical pairs whose endpoints fall in two different clusters."""

    lookup = cluster_index_lookup(clusters)
    links: Dict[str, Dict[str, None]] = {}
    for left, right in vertical_pairs:
        left_cluster = lookup.get(left)
        right_cluster = lookup.get(right)
        if left_cluster is None or right_cluster is None or left_cluster == right_cluster:
            continue
        links.setdefault(left, {})[right] = None
        links.setdefault(right, {})[left] = None
    return ConnectionIndex(links)


__all__ = ["ConnectionIndex", "build_connection_index"]
