"""Dense signed-incidence graph over contiguous integer node indices."""

from __future__ import annotations
from typing import Iterator, NamedTuple

import numpy as np

from ..errors import MalformedTopologyError


class Edge(NamedTuple):
    """Directed edge tail -> head (incidence +1 at [tail, head])."""
    tail: int
    head: int

    def reversed(self) -> Edge:
        return Edge(self.head, self.tail)


class SignedGraph:
    """
    Graph stored as an antisymmetric node x node matrix.

    An edge a -> b is stored as matrix[a, b] = +1 and matrix[b, a] = -1.
    Node indices are contiguous: removing a node shifts every greater
    index down by one.
    """

    def __init__(self, nodes_count: int = 0):
        self._matrix = np.zeros((nodes_count, nodes_count), dtype=np.int8)

    @property
    def nodes_count(self) -> int:
        return self._matrix.shape[0]

    @property
    def matrix(self) -> np.ndarray:
        """Read-only view of the incidence matrix."""
        view = self._matrix.view()
        view.flags.writeable = False
        return view

    def next_node(self) -> int:
        """Grow the matrix by one row/column and return the new index."""
        n = self.nodes_count
        grown = np.zeros((n + 1, n + 1), dtype=np.int8)
        grown[:n, :n] = self._matrix
        self._matrix = grown
        return n

    def remove_node(self, node: int) -> None:
        """Delete row/column `node`; indices above it shift down by one."""
        self._check_node(node)
        self._matrix = np.delete(np.delete(self._matrix, node, axis=0), node, axis=1)

    def add_edge(self, endpoints) -> None:
        a, b = endpoints
        self._check_node(a)
        self._check_node(b)
        if a == b:
            raise MalformedTopologyError(f"Self-loop edge at node {a}")
        self._matrix[a, b] = 1
        self._matrix[b, a] = -1

    def remove_edge(self, endpoints) -> None:
        a, b = endpoints
        self._matrix[a, b] = 0
        self._matrix[b, a] = 0

    def has_edge(self, endpoints) -> bool:
        """True if an edge joins the endpoints in either direction."""
        a, b = endpoints
        return self._matrix[a, b] != 0

    def degree(self, node: int) -> int:
        return int(np.count_nonzero(self._matrix[node]))

    def is_isolated(self, node: int) -> bool:
        return self.degree(node) == 0

    def neighbour_nodes(self, node: int) -> Iterator[int]:
        """Nodes joined to `node` by an edge in either direction."""
        for idx in np.flatnonzero(self._matrix[node]):
            yield int(idx)

    def edges(self) -> Iterator[Edge]:
        """Every directed edge exactly once, in row-major order."""
        rows, cols = np.nonzero(self._matrix == 1)
        for a, b in zip(rows, cols):
            yield Edge(int(a), int(b))

    @property
    def edges_count(self) -> int:
        return int(np.count_nonzero(self._matrix == 1))

    def _check_node(self, node: int) -> None:
        if not 0 <= node < self.nodes_count:
            raise IndexError(f"Node {node} out of range (nodes_count={self.nodes_count})")
