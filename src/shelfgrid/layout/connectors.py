"""Resolution of the connector segments drawn between stacked clusters."""

from __future__ import annotations

from dataclasses import asdict, dataclass
import logging
from typing import Dict, List, Mapping, Sequence, Tuple

from ..clustering.horizontal import Cluster
from .connections import ConnectionIndex


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Connector:
    """A vertical link between one slot of an earlier cluster and one of a later cluster."""

    source_cluster: int
    source_position: int
    source_offset: float
    target_cluster: int
    target_position: int
    target_offset: float
    span: int
    lane: int
    nudge: float

    def to_record(self) -> Dict[str, object]:
        return asdict(self)


def resolve_connectors(
    clusters: Sequence[Cluster],
    groups: Sequence[Sequence[int]],
    connections: ConnectionIndex,
    offsets: Mapping[int, float],
    *,
    spacing: float = 0.0,
) -> List[Connector]:
    """Enumerate deduplicated connectors for every super-cluster.

    Each non-first cluster is matched against every earlier cluster of its
    group. Links are deduplicated by (earlier cluster, earlier position,
    current position). Connectors landing on the same cluster are numbered
    in discovery order and nudged ``lane * spacing`` pixels apart.
    """

    connectors: List[Connector] = []
    for group in groups:
        for current_rank in range(1, len(group)):
            current_index = group[current_rank]
            current_positions = {item.item_id: position for position, item in enumerate(clusters[current_index])}
            seen: set[Tuple[int, int, int]] = set()
            lane = 0

            for earlier_rank in range(current_rank):
                earlier_index = group[earlier_rank]
                for source_position, item in enumerate(clusters[earlier_index]):
                    targets = sorted(
                        {
                            current_positions[linked]
                            for linked in connections.linked(item.item_id)
                            if linked in current_positions
                        }
                    )
                    for target_position in targets:
                        key = (earlier_index, source_position, target_position)
                        if key in seen:
                            continue
                        seen.add(key)
                        connectors.append(
                            Connector(
                                source_cluster=earlier_index,
                                source_position=source_position,
                                source_offset=offsets.get(earlier_index, 0.0),
                                target_cluster=current_index,
                                target_position=target_position,
                                target_offset=offsets.get(current_index, 0.0),
                                span=current_rank - earlier_rank - 1,
                                lane=lane,
                                nudge=lane * spacing,
                            )
                        )
                        lane += 1

    logger.debug("Resolved %d connector(s)", len(connectors))
    return connectors


__all__ = ["Connector", "resolve_connectors"]
