"""Dense symmetric weighted graph used by the annealing solver.

Vertices are numbered 1..n; row/column 0 is reserved so that ids map
directly onto matrix coordinates. The matrix lives in one flat row-major
numpy buffer of (n+1)*(n+1) cells.

A weight of 0 means "no edge" while a graph is being built or loaded.
``set_zero_to_max`` turns every missing off-diagonal edge into MAX_WEIGHT
so that any permutation of the vertices has a finite cost.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

MAX_WEIGHT = int(np.iinfo(np.uint32).max)  # sentinel for "no edge"
NO_EDGE = 0


def _max_edges(n: int) -> int:
    return (n * n - n) // 2


class Graph:
    def __init__(self, number_of_vertex: int, weights: Optional[np.ndarray] = None):
        size = number_of_vertex + 1
        if weights is None:
            weights = np.zeros(size * size, dtype=np.int64)
        if weights.shape != (size * size,):
            raise ValueError(f"Weight buffer must hold {size * size} cells, got shape {weights.shape}")
        self._n = number_of_vertex
        self._size = size
        self._weights = weights

    # --- construction ---

    @classmethod
    def from_edges(cls, n: int, edges: Iterable[Tuple[int, int, int]]) -> "Graph":
        """Build a graph from (v1, v2, weight) triples; unlisted pairs stay at 0."""
        graph = cls(n)
        for v1, v2, w in edges:
            graph._check_vertex(v1)
            graph._check_vertex(v2)
            graph._set(v1, v2, w)
        return graph

    @classmethod
    def generate_random_complete_graph(cls, n: int, weight_range: Tuple[int, int], additional_edges: int,
                                       rng: Optional[np.random.Generator] = None) -> "Graph":
        """Random connected graph: a random spanning tree plus `additional_edges` extra edges.

        Weights are drawn from the half-open interval ``[low, high)``.
        Raises ValueError before building anything when the request cannot
        be satisfied by a simple graph on n vertices.
        """
        if n < 1:
            raise ValueError(f"Graph needs at least one vertex, got n={n}")
        if additional_edges < 0:
            raise ValueError(f"additional_edges must be non-negative, got {additional_edges}")
        if n - 1 + additional_edges > _max_edges(n):
            raise ValueError(
                f"Too many edges requested for {n} vertex graph! "
                f"{n - 1 + additional_edges}/{_max_edges(n)}"
            )
        low, high = weight_range
        if low < 1 or high <= low:
            raise ValueError(f"Weight range must be a non-empty interval of positive weights, got [{low}, {high})")
        if rng is None:
            rng = np.random.default_rng()

        graph = cls(n)
        # spanning tree: every vertex hangs off an earlier one
        for i in range(2, n + 1):
            parent = int(rng.integers(1, i))
            graph._set(i, parent, int(rng.integers(low, high)))
        for _ in range(additional_edges):
            while True:
                v1 = int(rng.integers(2, n + 1))
                v2 = int(rng.integers(1, v1))
                weight = int(rng.integers(low, high))
                if graph._add_edge_if_not_exists(v1, v2, weight):
                    break
        return graph

    @classmethod
    def read_graph_from_file(cls, path: str) -> "Graph":
        """Parse the comma separated edge-list format.

        Line 1 holds the vertex count, every following line ``v1, v2, weight``.
        Lines without exactly three fields are reported and skipped.
        """
        with open(path, 'r') as f:
            lines = f.read().splitlines()
        if not lines:
            raise ValueError(f"{path}: empty file, expected vertex count on line 1")
        n = _parse_vertex_count(lines[0].split(',')[0], path)

        edges: List[Tuple[int, int, int]] = []
        for lineno, line in enumerate(lines[1:], start=2):
            fields = line.split(',')
            if len(fields) != 3:
                print(f"[warn] {path}:{lineno}: expected 3 fields, got {len(fields)}; line skipped")
                continue
            v1 = _parse_int(fields[0], f"{path}:{lineno}: expected vertex number")
            v2 = _parse_int(fields[1], f"{path}:{lineno}: expected vertex number")
            w = _parse_int(fields[2], f"{path}:{lineno}: expected weight")
            if not (1 <= v1 <= n and 1 <= v2 <= n):
                raise ValueError(f"{path}:{lineno}: vertex out of range 1..{n}: ({v1}, {v2})")
            if w < 0 or w > MAX_WEIGHT:
                raise ValueError(f"{path}:{lineno}: weight {w} outside 0..{MAX_WEIGHT}")
            if v1 == v2 and w != NO_EDGE:
                raise ValueError(f"{path}:{lineno}: self-loop on vertex {v1} with weight {w}")
            edges.append((v1, v2, w))
        return cls.from_edges(n, edges)

    @classmethod
    def read_graph_from_file_full_table(cls, path: str) -> "Graph":
        """Parse a whitespace separated n×n matrix preceded by a line holding n."""
        with open(path, 'r') as f:
            rows = [line.split() for line in f.read().splitlines()]
        if not rows or not rows[0]:
            raise ValueError(f"{path}: empty file, expected vertex count on line 1")
        n = _parse_vertex_count(rows[0][0], path)
        if len(rows) < n + 1:
            raise ValueError(f"{path}: expected {n} matrix rows, found {len(rows) - 1}")

        graph = cls(n)
        for i in range(n):
            row = rows[i + 1]
            for j in range(n):
                token = row[j] if j < len(row) else None
                try:
                    w = int(token)
                except (TypeError, ValueError):
                    raise ValueError(f"Expected weight but got {token!r}, on index ({i}, {j}) in {path}") from None
                if w < 0 or w > MAX_WEIGHT:
                    raise ValueError(f"Weight {w} outside 0..{MAX_WEIGHT}, on index ({i}, {j}) in {path}")
                if i == j and w != NO_EDGE:
                    raise ValueError(f"Diagonal weight must be 0 but got {w}, on index ({i}, {j}) in {path}")
                graph._weights[graph._index(i + 1, j + 1)] = w
        matrix = graph.to_matrix()
        if not np.array_equal(matrix, matrix.T):
            print(f"[warn] {path}: distance matrix not symmetric; costs follow row-major (from, to) order")
        return graph

    def save_to_file(self, path: str) -> None:
        """Write the lower-triangular edges in edge-list format."""
        lines = [f"{self._n}"]
        for i in range(1, self._n + 1):
            for j in range(1, i):
                if self.is_connected(i, j):
                    lines.append(f"{i}, {j}, {self.weight_at(i, j)}")
        with open(path, 'w') as f:
            f.write('\n'.join(lines) + '\n')

    def set_zero_to_max(self) -> None:
        """Replace every missing off-diagonal edge with MAX_WEIGHT."""
        matrix = self._weights.reshape(self._size, self._size)
        missing = matrix == NO_EDGE
        np.fill_diagonal(missing, False)
        matrix[missing] = MAX_WEIGHT

    # --- queries ---

    @property
    def number_of_vertex(self) -> int:
        return self._n

    def weight_at(self, v1: int, v2: int) -> int:
        return int(self._weights[self._index(v1, v2)])

    def distance(self, v1: int, v2: int) -> int:
        return self.weight_at(v1, v2)

    def is_connected(self, v1: int, v2: int) -> bool:
        return self.weight_at(v1, v2) != NO_EDGE

    connected = is_connected

    def edge_count(self) -> int:
        """Number of connected unordered pairs."""
        lower = np.tril(self.to_matrix()[1:, 1:], k=-1)
        return int(np.count_nonzero(lower))

    def distance_vec(self, tour: Sequence[int]) -> int:
        """Open path cost: sum of the weights between consecutive vertices."""
        if len(tour) < 2:
            return 0
        t = np.asarray(tour, dtype=np.int64)
        return int(self._weights[t[:-1] * self._size + t[1:]].sum())

    def distance_cycle(self, tour: Sequence[int]) -> int:
        """Cost of the closed tour, including the edge back to the start."""
        if len(tour) == 0:
            return 0
        return self.distance_vec(tour) + self.distance(tour[-1], tour[0])

    def to_matrix(self) -> np.ndarray:
        """Read-only (n+1)×(n+1) view of the weights."""
        view = self._weights.reshape(self._size, self._size).view()
        view.flags.writeable = False
        return view

    def format_matrix(self, placeholder: str = '-') -> str:
        """Render rows 1..n, printing `placeholder` for missing and sentinel cells."""
        cells = [
            [
                placeholder if i != j and self.weight_at(i, j) in (NO_EDGE, MAX_WEIGHT) else str(self.weight_at(i, j))
                for j in range(1, self._n + 1)
            ]
            for i in range(1, self._n + 1)
        ]
        width = max((len(c) for row in cells for c in row), default=1)
        return '\n'.join(' '.join(c.rjust(width) for c in row) for row in cells)

    # --- internals ---

    def _index(self, v1: int, v2: int) -> int:
        if not (0 <= v1 < self._size and 0 <= v2 < self._size):
            raise IndexError(f"Vertex pair ({v1}, {v2}) outside 0..{self._n}")
        return v1 * self._size + v2

    def _check_vertex(self, v: int) -> None:
        if not 1 <= v <= self._n:
            raise ValueError(f"Vertex {v} outside 1..{self._n}")

    def _set(self, v1: int, v2: int, weight: int) -> None:
        self._weights[self._index(v1, v2)] = weight
        self._weights[self._index(v2, v1)] = weight

    def _add_edge_if_not_exists(self, v1: int, v2: int, weight: int) -> bool:
        if self.weight_at(v1, v2) != NO_EDGE:
            return False
        self._set(v1, v2, weight)
        return True


def _parse_int(token: str, message: str) -> int:
    try:
        return int(token.strip())
    except ValueError:
        raise ValueError(f"{message}, got {token.strip()!r}") from None


def _parse_vertex_count(token: str, path: str) -> int:
    n = _parse_int(token, f"{path}:1: expected vertex count")
    if n < 0:
        raise ValueError(f"{path}:1: vertex count must be non-negative, got {n}")
    return n
