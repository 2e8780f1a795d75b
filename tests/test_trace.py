"""Tests for input hashing and trace records."""

from __future__ import annotations

import numpy as np

from shelfgrid.explain import TRACE_SCHEMA_VERSION, TraceRecord, hash_payload
from shelfgrid.layout import LayoutParameters
from shelfgrid.model import Item


def test_hash_payload_is_stable_for_equal_structures() -> None:
    first = {"items": [Item("A", 1.0, {"Brand": "x"})], "parameters": LayoutParameters()}
    second = {"parameters": LayoutParameters(), "items": [Item("A", 1, {"Brand": "x"})]}

    assert hash_payload(first) == hash_payload(second)
    assert len(hash_payload(first)) == 64


def test_hash_payload_preserves_sequence_order() -> None:
    assert hash_payload([("A", "B"), ("B", "C")]) != hash_payload([("B", "C"), ("A", "B")])


def test_hash_payload_normalises_numpy_and_sets() -> None:
    assert hash_payload({"values": np.array([1, 2, 3])}) == hash_payload({"values": [1, 2, 3]})
    assert hash_payload({"ids": {"b", "a"}}) == hash_payload({"ids": {"a", "b"}})


def test_trace_record_flattens_sections() -> None:
    record = TraceRecord(
        cluster_index="2",
        stage="layout",
        cluster={"size": 3},
        grouping={"super_cluster": 0},
        alignment={"offset": 196.0},
        connectors={"incoming": 1},
    )

    flattened = record.to_dict()

    assert flattened["cluster_index"] == 2
    assert flattened["metadata.schema_version"] == TRACE_SCHEMA_VERSION
    assert flattened["cluster.size"] == 3
    assert flattened["grouping.super_cluster"] == 0
    assert flattened["alignment.offset"] == 196.0
    assert flattened["connectors.incoming"] == 1


def test_trace_record_keeps_explicit_schema_version() -> None:
    record = TraceRecord(cluster_index=0, stage="layout", metadata={"schema_version": "v0"})

    assert record.to_dict()["metadata.schema_version"] == "v0"
