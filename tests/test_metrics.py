"""
Unit tests for network_analysis/metrics.py.

Betweenness, clustering and transitivity are compared with networkx on the
karate club graph; small graphs are checked by hand.
"""
import networkx as nx
import pytest

from ppinet.network_analysis import (
    average_clustering,
    betweenness_centrality,
    build_graph,
    degree_distribution,
    detect_communities,
    local_transitivity,
    node_metrics_table,
    summarize_degrees,
    transitivity,
)
from ppinet.network_analysis.metrics import METRIC_COLUMNS, degree, degrees


# ── betweenness ────────────────────────────────────────────────────────────────

class TestBetweenness:
    def test_path_normalized(self, path3):
        bc = betweenness_centrality(path3, normalized=True)
        assert bc == {"A": 0.0, "B": 1.0, "C": 0.0}

    def test_path_counts_ordered_pairs(self, path3):
        # (A, C) and (C, A) both pass through B
        bc = betweenness_centrality(path3, normalized=False)
        assert bc["B"] == pytest.approx(2.0)

    def test_star_center(self):
        star = build_graph([("hub", leaf) for leaf in "abcd"])
        bc = betweenness_centrality(star)
        assert bc["hub"] == pytest.approx(1.0)
        assert all(bc[leaf] == 0.0 for leaf in "abcd")

    def test_split_shortest_paths(self):
        # Two equal routes A-B-D and A-C-D share the A-D pair
        diamond = build_graph([("A", "B"), ("A", "C"), ("B", "D"), ("C", "D")])
        bc = betweenness_centrality(diamond, normalized=False)
        assert bc["B"] == pytest.approx(1.0)
        assert bc["C"] == pytest.approx(1.0)

    def test_matches_networkx_normalized(self, karate, karate_nx):
        expected = nx.betweenness_centrality(karate_nx, normalized=True)
        bc = betweenness_centrality(karate)
        for node in karate.nodes:
            assert bc[node] == pytest.approx(expected[node])

    def test_unnormalized_is_twice_networkx(self, karate, karate_nx):
        # networkx halves undirected counts; ordered pairs are summed here
        expected = nx.betweenness_centrality(karate_nx, normalized=False)
        bc = betweenness_centrality(karate, normalized=False)
        for node in karate.nodes:
            assert bc[node] == pytest.approx(2 * expected[node])

    def test_disconnected_graph(self, two_triangles):
        assert set(betweenness_centrality(two_triangles).values()) == {0.0}

    @pytest.mark.parametrize("workers", [2, 3, 8])
    def test_threads_match_sequential(self, karate, workers):
        sequential = betweenness_centrality(karate)
        threaded = betweenness_centrality(karate, workers=workers)
        assert list(threaded) == list(sequential)
        for node in karate.nodes:
            assert threaded[node] == pytest.approx(sequential[node])

    def test_tiny_graphs(self):
        assert betweenness_centrality(build_graph([("A", "B")])) == {"A": 0.0, "B": 0.0}
        assert betweenness_centrality(build_graph([])) == {}

    def test_invalid_workers(self, path3):
        with pytest.raises(ValueError):
            betweenness_centrality(path3, workers=0)


# ── clustering ─────────────────────────────────────────────────────────────────

class TestTransitivity:
    def test_triangle_nodes(self, two_triangles):
        assert local_transitivity(two_triangles, "A") == 1.0

    def test_low_degree_nodes_are_zero(self, path3):
        assert local_transitivity(path3, "A") == 0.0
        assert local_transitivity(path3, "B") == 0.0

    def test_bridge_endpoint(self, bridged_triangles):
        # C has neighbours A, B, D; only A-B is connected
        assert local_transitivity(bridged_triangles, "C") == pytest.approx(1 / 3)

    def test_matches_networkx_clustering(self, karate, karate_nx):
        expected = nx.clustering(karate_nx)
        for node in karate.nodes:
            assert local_transitivity(karate, node) == pytest.approx(expected[node])

    def test_global_transitivity(self, karate, karate_nx):
        assert transitivity(karate) == pytest.approx(nx.transitivity(karate_nx))

    def test_average_clustering(self, karate, karate_nx):
        assert average_clustering(karate) == pytest.approx(nx.average_clustering(karate_nx))

    def test_empty_graph(self):
        empty = build_graph([])
        assert transitivity(empty) == 0.0
        assert average_clustering(empty) == 0.0


# ── degrees ────────────────────────────────────────────────────────────────────

class TestDegrees:
    def test_degree(self, path3):
        assert degree(path3, "B") == 2
        assert degrees(path3) == {"A": 1, "B": 2, "C": 1}

    def test_distribution(self, path3):
        assert degree_distribution(path3) == {1: 2, 2: 1}

    def test_summary(self, path3):
        summary = summarize_degrees(path3)
        assert summary.count == 3
        assert summary.mean == pytest.approx(4 / 3)
        assert summary.median == 1.0
        assert summary.min == 1.0
        assert summary.max == 2.0

    def test_summary_of_empty_graph(self):
        summary = summarize_degrees(build_graph([]))
        assert summary.count == 0
        assert summary.mean == 0.0


# ── table ──────────────────────────────────────────────────────────────────────

class TestNodeMetricsTable:
    def test_columns_and_rows(self, path3):
        table = node_metrics_table(path3)
        assert list(table.columns) == METRIC_COLUMNS
        assert list(table["protein_id"]) == ["A", "B", "C"]
        assert list(table["betweenness"]) == [0.0, 1.0, 0.0]

    def test_with_partition(self, two_triangles):
        partition, _ = detect_communities(two_triangles)
        table = node_metrics_table(two_triangles, partition)
        assert list(table["community_id"]) == [0, 0, 0, 1, 1, 1]
        assert (table["transitivity"] == 1.0).all()
