"""
Shared fixtures for ppinet tests.

Small hand-checkable graphs plus Zachary's karate club (via networkx), which
doubles as a reference oracle for modularity, betweenness and clustering.
"""
import networkx as nx
import pytest

from ppinet.network_analysis import Graph, build_graph

TWO_TRIANGLES = [
    ("A", "B"), ("B", "C"), ("A", "C"),
    ("D", "E"), ("E", "F"), ("D", "F"),
]


def graph_from_networkx(G: nx.Graph) -> Graph:
    """Unweighted ppinet graph with the same topology as ``G``."""
    return build_graph(G.edges(), nodes=G.nodes())


@pytest.fixture
def two_triangles() -> Graph:
    return build_graph(TWO_TRIANGLES)


@pytest.fixture
def bridged_triangles() -> Graph:
    """Two triangles joined by the single edge C-D."""
    return build_graph(TWO_TRIANGLES + [("C", "D")])


@pytest.fixture
def path3() -> Graph:
    return build_graph([("A", "B"), ("B", "C")])


@pytest.fixture
def karate_nx() -> nx.Graph:
    return nx.karate_club_graph()


@pytest.fixture
def karate(karate_nx) -> Graph:
    return graph_from_networkx(karate_nx)
