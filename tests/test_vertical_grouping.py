import pytest

from shelfgrid.clustering import (
    build_super_clusters,
    chain_weights,
    cluster_index_lookup,
    group_clusters,
    order_chain,
    resolve_pairs,
)
from shelfgrid.model import Item


def _clusters(*groups):
    return [tuple(Item(item_id, price) for item_id, price in group) for group in groups]


@pytest.fixture
def milk_and_bread():
    return _clusters(
        [("A", 5.0), ("B", 3.0), ("C", 1.0)],
        [("D", 4.0), ("E", 2.0)],
    )


def test_clusters_without_vertical_pairs_form_singleton_groups(milk_and_bread):
    assert build_super_clusters(milk_and_bread, []) == [(0,), (1,)]


def test_vertical_pair_merges_clusters(milk_and_bread):
    assert build_super_clusters(milk_and_bread, [("A", "D")]) == [(0, 1)]


def test_vertical_pairs_inside_one_cluster_do_not_merge(milk_and_bread):
    assert build_super_clusters(milk_and_bread, [("A", "C")]) == [(0,), (1,)]


def test_unknown_vertical_pairs_are_ignored(milk_and_bread):
    assert build_super_clusters(milk_and_bread, [("A", "Z"), ("Q", "D")]) == [(0,), (1,)]


def test_chain_ordering_keeps_linked_clusters_adjacent():
    clusters = _clusters([("X", 3.0)], [("Y", 2.0)], [("Z", 1.0)])
    vertical = [("X", "Y"), ("Y", "Z")]

    chain = build_super_clusters(clusters, vertical, strategy="chain")
    positional = build_super_clusters(clusters, vertical, strategy="positional")

    assert chain == [(2, 1, 0)]
    assert positional == [(0, 1, 2)]


def test_unknown_strategy_is_rejected(milk_and_bread):
    with pytest.raises(ValueError, match="Unsupported grouping strategy"):
        build_super_clusters(milk_and_bread, [], strategy="spiral")


def test_super_clusters_are_sorted_by_lowest_member():
    clusters = _clusters([("A", 9.0)], [("B", 8.0)], [("C", 7.0)], [("D", 6.0)])

    groups = build_super_clusters(clusters, [("B", "D"), ("A", "C")], strategy="positional")

    assert groups == [(0, 2), (1, 3)]


def test_every_cluster_lands_in_exactly_one_group():
    clusters = _clusters(*[[(f"I{index}", float(20 - index))] for index in range(12)])
    vertical = [("I0", "I5"), ("I5", "I7"), ("I2", "I3"), ("I11", "I2"), ("I8", "I8")]

    for strategy in ("chain", "positional"):
        groups = build_super_clusters(clusters, vertical, strategy=strategy)
        members = [index for group in groups for index in group]
        assert sorted(members) == list(range(12))


def test_chain_weights_count_duplicate_links_once_per_pair():
    weights = chain_weights([(0, 1), (1, 0), (2, 2), (1, 2)])

    assert weights == {(0, 1): 2, (1, 2): 1}


def test_resolve_pairs_translates_ids_to_cluster_indices(milk_and_bread):
    lookup = cluster_index_lookup(milk_and_bread)

    assert lookup == {"A": 0, "B": 0, "C": 0, "D": 1, "E": 1}
    assert resolve_pairs([("B", "E"), ("B", "nope")], lookup) == [(0, 1)]


def test_order_chain_appends_disconnected_members_by_first_id():
    order = order_chain([0, 1, 2], {(0, 1): 1}, ["b", "a", "c"])

    assert order == [1, 0, 2]


def test_order_chain_prefers_the_strongest_link():
    weights = {(0, 1): 1, (0, 2): 3, (1, 2): 1}

    order = order_chain([0, 1, 2], weights, ["a", "b", "c"])

    assert order == [0, 2, 1]


def test_group_clusters_accepts_resolved_index_pairs(milk_and_bread):
    resolved = resolve_pairs([("A", "D"), ("C", "nope")], cluster_index_lookup(milk_and_bread))

    assert group_clusters(milk_and_bread, resolved) == build_super_clusters(milk_and_bread, [("A", "D")])
    assert group_clusters(milk_and_bread, [], strategy="positional") == [(0,), (1,)]
