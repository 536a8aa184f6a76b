"""Spanning forest with incremental edge insertion and tree-path queries."""

from __future__ import annotations
from collections import deque
from typing import Iterator

from ..errors import MalformedTopologyError
from .graph import Edge, SignedGraph


def bfs_nodes_as_undirected(graph: SignedGraph, start: int) -> Iterator[int]:
    """Yield nodes reachable from `start`, ignoring edge direction."""
    visited = {start}
    queue = deque([start])
    while queue:
        node = queue.popleft()
        yield node
        for other in graph.neighbour_nodes(node):
            if other not in visited:
                visited.add(other)
                queue.append(other)


class SpanningForest:
    """
    One spanning tree per connected component of a SignedGraph.

    Each tree is identified by a single root node listed in `roots`.
    Insertion is incremental (union of two trees); removal has no
    incremental form and requires `build` from the full graph.
    """

    def __init__(self, forest: SignedGraph | None = None, roots: list[int] | None = None):
        self._forest = forest if forest is not None else SignedGraph()
        self._roots = list(roots) if roots is not None else []

    @classmethod
    def build(cls, graph: SignedGraph) -> SpanningForest:
        """
        Build from scratch by BFS from each still-unvisited node.

        A discovered neighbour joins the tree only if every other
        neighbour of it is either the current node or not yet visited.
        """
        n = graph.nodes_count
        forest = SignedGraph(n)
        visited = [False] * n
        roots = []

        for root in range(n):
            if visited[root]:
                continue
            roots.append(root)
            queue = deque([root])

            while queue:
                idx = queue.popleft()
                visited[idx] = True

                for other in graph.neighbour_nodes(idx):
                    if visited[other]:
                        continue
                    admissible = all(
                        far == idx or not visited[far]
                        for far in graph.neighbour_nodes(other)
                    )
                    if admissible:
                        forest.add_edge((idx, other))
                        queue.append(other)

        return cls(forest, roots)

    @property
    def roots(self) -> tuple[int, ...]:
        return tuple(self._roots)

    @property
    def nodes_count(self) -> int:
        return self._forest.nodes_count

    @property
    def tree_edges_count(self) -> int:
        return self._forest.edges_count

    def next_node(self) -> int:
        """A new node starts as its own single-node tree."""
        node = self._forest.next_node()
        self._roots.append(node)
        return node

    def remove_node(self, node: int) -> None:
        """Drop an isolated node; roots above it shift down by one."""
        self._forest.remove_node(node)
        self._roots = [r - 1 if r > node else r for r in self._roots if r != node]

    def root_of(self, node: int) -> int:
        roots = set(self._roots)
        for other in bfs_nodes_as_undirected(self._forest, node):
            if other in roots:
                return other
        raise MalformedTopologyError(f"Node {node} has no tree root")

    def add_edge(self, endpoints) -> bool:
        """
        Insert an edge if it joins two different trees.

        Returns True when the trees were merged (the edge became a tree
        edge), False when it is a chord of an existing tree.
        """
        a, b = endpoints
        root_a, root_b = self.root_of(a), self.root_of(b)
        if root_a == root_b:
            return False

        self._roots.remove(root_b)
        self._forest.add_edge((a, b))
        return True

    def has_edge(self, endpoints) -> bool:
        return self._forest.has_edge(endpoints)

    def find_path(self, endpoints) -> list[Edge]:
        """
        Tree edges joining `start` to `end`, ordered from `end` back to
        `start` and oriented the same way, so appending the chord
        start -> end closes a consistently oriented cycle.
        """
        start, end = endpoints
        parent = {start: None}
        stack = [start]

        while stack:
            node = stack.pop()
            if node == end:
                break
            for other in self._forest.neighbour_nodes(node):
                if other not in parent:
                    parent[other] = node
                    stack.append(other)

        if end not in parent:
            raise MalformedTopologyError(
                f"No tree path between nodes {start} and {end}: different components"
            )

        path = []
        node = end
        while parent[node] is not None:
            path.append(Edge(node, parent[node]))
            node = parent[node]
        return path
