import math
import random

import networkx as nx
import pytest

from routego.Dijkstra import dijkstra, nearest_node_by_coord
from routego.graph import RoadGraph


def test_known_shortest_path(five_node_graph):
    path, cost = dijkstra(five_node_graph, "A", "E")
    assert path == ["A", "C", "B", "D", "E"]
    assert cost == pytest.approx(10.0)


def test_repeated_calls_are_identical(five_node_graph):
    first = dijkstra(five_node_graph, "A", "E")
    for _ in range(5):
        assert dijkstra(five_node_graph, "A", "E") == first


def test_start_equals_goal(five_node_graph):
    assert dijkstra(five_node_graph, "C", "C") == (["C"], 0.0)


def test_disconnected_components_have_no_path():
    g = RoadGraph()
    for nid in "abcd":
        g.add_node(nid, 0.0, 0.0)
    g.add_segment("a", "b", 1.0)
    g.add_segment("c", "d", 1.0)

    path, cost = dijkstra(g, "a", "d")
    assert path == []
    assert math.isinf(cost)


def test_unknown_node_has_no_path(five_node_graph):
    path, cost = dijkstra(five_node_graph, "A", "Z")
    assert path == [] and math.isinf(cost)


def test_equal_length_paths_break_ties_by_discovery_order():
    g = RoadGraph()
    for nid in ["s", "b", "c", "t"]:
        g.add_node(nid, 0.0, 0.0)
    g.add_segment("s", "b", 1.0)
    g.add_segment("s", "c", 1.0)
    g.add_segment("b", "t", 1.0)
    g.add_segment("c", "t", 1.0)
    assert dijkstra(g, "s", "t") == (["s", "b", "t"], 2.0)


def test_distance_matches_networkx_on_random_graph():
    rng = random.Random(42)
    g = RoadGraph()
    for i in range(60):
        g.add_node(i, rng.uniform(0, 0.1), rng.uniform(0, 0.1))
    for _ in range(150):
        a, b = rng.randrange(60), rng.randrange(60)
        if a != b:
            g.add_segment(a, b)

    G = g.to_networkx()
    for _ in range(20):
        s, t = str(rng.randrange(60)), str(rng.randrange(60))
        path, cost = dijkstra(g, s, t)
        if nx.has_path(G, s, t):
            assert cost == pytest.approx(nx.dijkstra_path_length(G, s, t))
            assert path[0] == s and path[-1] == t
            assert sum(G[u][v]["weight"] for u, v in zip(path, path[1:])) == pytest.approx(cost)
        else:
            assert path == [] and math.isinf(cost)


def test_nearest_node():
    g = RoadGraph()
    g.add_node("far", 1.0, 1.0)
    g.add_node("near", 0.001, 0.001)
    assert nearest_node_by_coord(g, 0.0, 0.0) == "near"


def test_nearest_node_tie_goes_to_first_inserted():
    g = RoadGraph()
    g.add_node("west", 0.0, -0.01)
    g.add_node("east", 0.0, 0.01)
    assert nearest_node_by_coord(g, 0.0, 0.0) == "west"


def test_nearest_node_on_empty_graph():
    assert nearest_node_by_coord(RoadGraph(), 0.0, 0.0) is None
