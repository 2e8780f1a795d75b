"""Generic disjoint-set (union-find) store."""

from __future__ import annotations

from typing import Dict, Generic, Hashable, Iterable, List, TypeVar


K = TypeVar("K", bound=Hashable)


class DisjointSet(Generic[K]):
    """Union-find over hashable keys with lazy registration and path compression.

    ``union`` re-roots the first representative under the second; no rank or
    size balancing is applied. Callers only ever observe bucket membership,
    never which key ends up as the representative.
    """

    __slots__ = ("_parent",)

    def __init__(self, keys: Iterable[K] = ()) -> None:
        self._parent: Dict[K, K] = {}
        for key in keys:
            self.find(key)

    def __contains__(self, key: object) -> bool:
        return key in self._parent

    def __len__(self) -> int:
        return len(self._parent)

    def find(self, key: K) -> K:
        """Return the representative of ``key``, registering it when unseen."""

        parent = self._parent
        if key not in parent:
            parent[key] = key
            return key

        root = key
        while parent[root] != root:
            root = parent[root]

        node = key
        while parent[node] != root:
            parent[node], node = root, parent[node]
        return root

    def union(self, first: K, second: K) -> None:
        """Merge the sets containing ``first`` and ``second``."""

        root_first = self.find(first)
        root_second = self.find(second)
        if root_first != root_second:
            self._parent[root_first] = root_second

    def connected(self, first: K, second: K) -> bool:
        return self.find(first) == self.find(second)

    def buckets(self, keys: Iterable[K]) -> List[List[K]]:
        """Group ``keys`` by representative.

        Buckets appear in the order their first member is encountered and keep
        encounter order internally. Repeated keys are placed once.
        """

        grouped: Dict[K, List[K]] = {}
        placed: set[K] = set()
        for key in keys:
            if key in placed:
                continue
            placed.add(key)
            grouped.setdefault(self.find(key), []).append(key)
        return list(grouped.values())


__all__ = ["DisjointSet"]
