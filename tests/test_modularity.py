"""
Unit tests for network_analysis/modularity.py.

Modularity values are checked against closed forms on small graphs and
against networkx on the karate club graph.
"""
import networkx as nx
import pytest

from ppinet.config import GraphConfig
from ppinet.network_analysis import build_graph, community_statistics, modularity


def singleton(graph):
    return {node: i for i, node in enumerate(graph.nodes)}


class TestModularity:
    def test_two_triangles(self, two_triangles):
        partition = {"A": 0, "B": 0, "C": 0, "D": 1, "E": 1, "F": 1}
        assert modularity(two_triangles, partition) == pytest.approx(0.5)

    def test_single_community_scores_zero(self, two_triangles):
        partition = dict.fromkeys(two_triangles.nodes, 0)
        assert modularity(two_triangles, partition) == pytest.approx(0.0)

    @pytest.mark.parametrize("resolution", [0.5, 1.0, 2.0])
    def test_singleton_closed_form(self, karate, resolution):
        m = karate.total_edge_weight()
        expected = sum(-resolution * (karate.degree(v) / (2 * m)) ** 2 for v in karate.nodes)
        assert modularity(karate, singleton(karate), resolution) == pytest.approx(expected)

    def test_singleton_closed_form_with_self_loops(self):
        g = build_graph(
            [("A", "A"), ("A", "B"), ("B", "C")], config=GraphConfig(allow_self_loops=True)
        )
        m = g.total_edge_weight()
        expected = sum(
            g.self_loop_weight(v) / m - (g.degree(v) / (2 * m)) ** 2 for v in g.nodes
        )
        assert modularity(g, singleton(g)) == pytest.approx(expected)

    def test_matches_networkx_on_karate(self, karate, karate_nx):
        clubs = {n: int(karate_nx.nodes[n]["club"] == "Officer") for n in karate_nx}
        communities = [
            {n for n, c in clubs.items() if c == 0},
            {n for n, c in clubs.items() if c == 1},
        ]
        expected = nx.community.modularity(karate_nx, communities, weight=None)
        assert modularity(karate, clubs) == pytest.approx(expected)

    @pytest.mark.parametrize("resolution", [0.3, 1.7])
    def test_resolution_matches_networkx(self, bridged_triangles, resolution):
        G = bridged_triangles.to_networkx()
        communities = [{"A", "B", "C"}, {"D", "E", "F"}]
        partition = {n: 0 if n in communities[0] else 1 for n in G}
        expected = nx.community.modularity(G, communities, resolution=resolution)
        assert modularity(bridged_triangles, partition, resolution) == pytest.approx(expected)

    def test_weighted_matches_networkx(self):
        g = build_graph([("A", "B", 3), ("B", "C", 1), ("C", "D", 2), ("A", "C", 0.5)])
        G = g.to_networkx()
        communities = [{"A", "B"}, {"C", "D"}]
        partition = {"A": 0, "B": 0, "C": 1, "D": 1}
        expected = nx.community.modularity(G, communities, weight="weight")
        assert modularity(g, partition) == pytest.approx(expected)

    def test_edgeless_graph_scores_zero(self):
        g = build_graph([], nodes=["A", "B"])
        assert modularity(g, {"A": 0, "B": 1}) == 0.0

    def test_empty_graph_scores_zero(self):
        assert modularity(build_graph([]), {}) == 0.0

    def test_bounded(self, karate):
        assert -1.0 <= modularity(karate, singleton(karate)) <= 1.0

    def test_extra_keys_ignored(self, two_triangles):
        partition = {"A": 0, "B": 0, "C": 0, "D": 1, "E": 1, "F": 1, "ghost": 7}
        assert modularity(two_triangles, partition) == pytest.approx(0.5)

    def test_missing_node_raises(self, two_triangles):
        with pytest.raises(ValueError, match="does not assign"):
            modularity(two_triangles, {"A": 0, "B": 0})

    def test_missing_node_raises_on_edgeless_graph(self):
        with pytest.raises(ValueError):
            modularity(build_graph([], nodes=["A"]), {})


class TestCommunityStatistics:
    def test_two_triangles(self, two_triangles):
        stats = community_statistics(
            two_triangles, {"A": 0, "B": 0, "C": 0, "D": 1, "E": 1, "F": 1}
        )
        assert list(stats) == [0, 1]
        assert stats[0].size == 3
        assert stats[0].internal_weight == 3
        assert stats[0].total_degree == 6

    def test_cut_edge_not_internal(self, bridged_triangles):
        stats = community_statistics(
            bridged_triangles, {"A": 0, "B": 0, "C": 0, "D": 1, "E": 1, "F": 1}
        )
        assert stats[0].internal_weight == 3
        assert stats[1].total_degree == 7
