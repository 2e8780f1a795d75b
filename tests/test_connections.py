from shelfgrid.layout import ConnectionIndex, build_connection_index
from shelfgrid.model import Item


def _clusters():
    return [
        (Item("A", 5.0), Item("B", 3.0), Item("C", 1.0)),
        (Item("D", 4.0), Item("E", 2.0)),
    ]


def test_connection_index_is_symmetric_and_deduplicated():
    index = build_connection_index(_clusters(), [("A", "E"), ("D", "A"), ("A", "D"), ("E", "A")])

    assert index.linked("A") == ("E", "D")
    assert index.linked("D") == ("A",)
    assert index.linked("E") == ("A",)
    assert index.link_count == 2


def test_connection_index_drops_same_cluster_and_unknown_pairs():
    index = build_connection_index(_clusters(), [("A", "B"), ("A", "Z"), ("Q", "D")])

    assert len(index) == 0
    assert index.linked("A") == ()
    assert index.link_count == 0


def test_connection_index_behaves_like_a_read_only_mapping():
    index = ConnectionIndex({"A": ["D", "D", "E"], "D": ["A"], "E": ["A"]})

    assert set(index) == {"A", "D", "E"}
    assert index["A"] == ("D", "E")
    assert "B" not in index
    assert index.to_dict() == {"A": ["D", "E"], "D": ["A"], "E": ["A"]}
