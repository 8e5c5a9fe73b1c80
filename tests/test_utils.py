import datetime

from genolayout.utils import ancestor_closure, parent_graph, parse_date, rank, strip_pointer


def test_strip_pointer():
    assert strip_pointer("@P12@") == "P12"
    assert strip_pointer(12) == 12


def test_parse_date():
    assert parse_date(None) is None
    assert parse_date(datetime.date(2001, 2, 3)) == datetime.date(2001, 2, 3)
    assert parse_date(datetime.datetime(2001, 2, 3, 4, 5)) == datetime.date(2001, 2, 3)
    assert parse_date("3 FEB 2001") == datetime.date(2001, 2, 3)
    assert parse_date("ABT 1950").year == 1950


def test_parent_graph(trio):
    graph = parent_graph(trio.father, trio.mother)
    assert sorted(graph.nodes) == [0, 1, 2]
    assert sorted(graph.edges) == [(0, 2), (1, 2)]


def test_ancestor_closure(cousins):
    graph = parent_graph(cousins.father, cousins.mother)
    assert ancestor_closure(graph, [10]) == {10, 6, 8, 2, 4, 0, 1}
    assert ancestor_closure(graph, [0]) == {0}
    assert ancestor_closure(graph, {6, 7}) == {6, 7, 2, 3, 4, 5, 0, 1}


def test_rank_averages_ties():
    assert rank([3, 1, 3]) == [2.5, 1.0, 2.5]
    assert rank([]) == []
