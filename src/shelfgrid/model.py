"""Core value types shared by the shelfgrid clustering and layout stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence


RelationPair = tuple[str, str]


@dataclass(frozen=True, slots=True)
class Item:
    """A priced entity placed on the grid.

    The ``payload`` carries display data (product name, pack size, ...) and is
    never inspected by the engine.
    """

    item_id: str
    price: float
    payload: Mapping[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "item_id", str(self.item_id))
        object.__setattr__(self, "price", float(self.price))
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    def to_record(self) -> dict[str, object]:
        """Return a JSON-serialisable representation of the item."""

        return {"item_id": self.item_id, "price": self.price, "payload": dict(self.payload)}


def normalise_pairs(pairs: Iterable[Sequence[object]] | None) -> tuple[RelationPair, ...]:
    """Coerce ``pairs`` into a tuple of string pairs, preserving order and duplicates."""

    if pairs is None:
        return ()

    normalised: list[RelationPair] = []
    for index, pair in enumerate(pairs):
        if isinstance(pair, (str, bytes)) or len(pair) != 2:
            raise ValueError(f"Relation pair at index {index} must contain exactly two ids; received {pair!r}")
        left, right = pair
        normalised.append((str(left), str(right)))
    return tuple(normalised)


def index_items(items: Iterable[Item]) -> tuple[dict[str, Item], list[str]]:
    """Build an ``item_id -> Item`` lookup.

    The first occurrence of an id wins. Returns the lookup together with the
    ids of any dropped duplicates, in encounter order.
    """

    lookup: dict[str, Item] = {}
    duplicates: list[str] = []
    for item in items:
        if item.item_id in lookup:
            duplicates.append(item.item_id)
            continue
        lookup[item.item_id] = item
    return lookup, duplicates


__all__ = ["Item", "RelationPair", "index_items", "normalise_pairs"]
