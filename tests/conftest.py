import matplotlib

matplotlib.use("Agg")

import numpy as np  # noqa: E402
import pytest  # noqa: E402

from tsp_anneal.graph import Graph

EXAMPLE_EDGES = [(1, 2, 5), (2, 3, 3), (3, 4, 7), (1, 4, 2)]


@pytest.fixture
def example_graph():
    """4 vertices in a ring; the chords 1-3 and 2-4 are missing."""
    graph = Graph.from_edges(4, EXAMPLE_EDGES)
    graph.set_zero_to_max()
    return graph


@pytest.fixture
def complete_graph():
    n = 8
    rng = np.random.default_rng(11)
    graph = Graph.generate_random_complete_graph(n, (1, 50), n * (n - 1) // 2 - (n - 1), rng=rng)
    graph.set_zero_to_max()
    return graph


@pytest.fixture
def edge_list_file(tmp_path):
    path = tmp_path / "graph.csv"
    path.write_text(
        "5\n"
        "2, 1, 4\n"
        "3, 2, 6\n"
        "4, 3, 1\n"
        "5, 4, 9\n"
        "5, 1, 3\n"
        "3, 1, 8\n"
    )
    return path
