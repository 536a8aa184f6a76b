"""PyLoops topology module.

Graph structures behind the mesh solver:
    - SignedGraph: dense antisymmetric incidence matrix over node indices
    - SpanningForest: one spanning tree per connected component
    - TopologyGraph: graph + forest + edge list + fundamental loop matrix
"""

from .graph import Edge, SignedGraph
from .forest import SpanningForest, bfs_nodes_as_undirected
from .cycles import TopologyGraph, fundamental_cycles

__all__ = [
    "Edge",
    "SignedGraph",
    "SpanningForest",
    "bfs_nodes_as_undirected",
    "TopologyGraph",
    "fundamental_cycles",
]
