"""
Fundamental-cycle (loop) basis of a dynamically edited graph.

TopologyGraph keeps a SignedGraph, its SpanningForest and the ordered
edge list in step, and recomputes the loop matrix B after every edit:
one row per chord edge, one column per edge in edge-list order, entries
+1 / -1 for an edge traversed forward / backward by that cycle.
"""

from __future__ import annotations
import logging
from typing import Iterator

import jax.numpy as jnp
import numpy as np
from jax import Array

from ..errors import MalformedTopologyError
from .forest import SpanningForest
from .graph import Edge, SignedGraph

logger = logging.getLogger(__name__)


def fundamental_cycles(graph: SignedGraph, forest: SpanningForest) -> Iterator[list[Edge]]:
    """Pair every chord with the tree path between its endpoints."""
    for chord in graph.edges():
        if forest.has_edge(chord):
            continue
        cycle = forest.find_path(chord)
        cycle.append(chord)
        yield cycle


class TopologyGraph:
    """Graph + spanning forest + ordered edge list + derived loop matrix."""

    def __init__(self):
        self._graph = SignedGraph()
        self._forest = SpanningForest()
        self._edges: list[Edge] = []
        self._loops = jnp.zeros((0, 0))
        self._loops_t = jnp.zeros((0, 0))

    @property
    def graph(self) -> SignedGraph:
        return self._graph

    @property
    def forest(self) -> SpanningForest:
        return self._forest

    @property
    def edges(self) -> tuple[Edge, ...]:
        """Edges in column order of the loop matrix."""
        return tuple(self._edges)

    @property
    def nodes_count(self) -> int:
        return self._graph.nodes_count

    @property
    def loop_count(self) -> int:
        return self._loops.shape[0]

    def loops(self) -> tuple[Array, Array]:
        """(B, B^T) for the current topology."""
        return self._loops, self._loops_t

    def next_node(self) -> int:
        self._forest.next_node()
        return self._graph.next_node()

    def remove_node(self, node: int) -> None:
        """Delete an isolated node, shifting greater indices in the edge list."""
        if not self._graph.is_isolated(node):
            raise MalformedTopologyError(f"Node {node} still has incident edges")

        self._forest.remove_node(node)
        self._graph.remove_node(node)
        self._edges = [
            Edge(*(i - 1 if i > node else i for i in edge)) for edge in self._edges
        ]

    def is_isolated(self, node: int) -> bool:
        return self._graph.is_isolated(node)

    def add_edge(self, endpoints) -> bool:
        """
        Insert an edge incrementally.

        Returns True if the edge extended the spanning forest, False if
        it closed a new loop.
        """
        edge = Edge(*endpoints)
        if edge.tail == edge.head:
            raise MalformedTopologyError(f"Self-loop edge at node {edge.tail}")
        if self._graph.has_edge(edge):
            raise MalformedTopologyError(
                f"Nodes {edge.tail} and {edge.head} are already joined by an edge"
            )

        self._graph.add_edge(edge)
        is_tree_edge = self._forest.add_edge(edge)
        self._edges.append(edge)

        self._update_loops()
        return is_tree_edge

    def remove_edge(self, endpoints, *, prune=()) -> list[int]:
        """
        Remove an edge and rebuild the forest from scratch.

        Nodes listed in `prune` that are left without incident edges are
        deleted before the rebuild. Returns the deleted node indices in
        descending order, each valid at the moment it was removed.
        """
        edge = Edge(*endpoints)
        self._graph.remove_edge(edge)
        self._edges = [e for e in self._edges if e != edge]

        pruned = []
        for node in sorted(set(prune), reverse=True):
            if self._graph.is_isolated(node):
                self.remove_node(node)
                pruned.append(node)

        self._forest = SpanningForest.build(self._graph)
        logger.debug(
            "Forest rebuilt after removing %s: %d nodes, %d roots, pruned %s",
            tuple(edge), self._graph.nodes_count, len(self._forest.roots), pruned,
        )

        self._update_loops()
        return pruned

    def _update_loops(self) -> None:
        columns = {edge: j for j, edge in enumerate(self._edges)}
        rows = []

        for cycle in fundamental_cycles(self._graph, self._forest):
            row = np.zeros(len(self._edges), dtype=np.float32)
            for edge in cycle:
                if edge in columns:
                    row[columns[edge]] = 1.0
                elif edge.reversed() in columns:
                    row[columns[edge.reversed()]] = -1.0
                else:
                    raise MalformedTopologyError(f"Edge {tuple(edge)} missing from edge list")
            rows.append(row)

        loops = np.stack(rows) if rows else np.zeros((0, len(self._edges)), dtype=np.float32)
        self._loops = jnp.asarray(loops)
        self._loops_t = self._loops.T
        logger.debug("Loop matrix recomputed: %d loops x %d edges", *loops.shape)
