"""
Test: SignedGraph incidence bookkeeping.

Tests:
1. Edges are stored antisymmetrically (+1 / -1)
2. Node removal shifts later indices down
3. Neighbour and edge enumeration
4. Malformed edges are rejected
"""
import pytest


class TestEdges:
    """Adding and removing directed edges."""

    def test_add_edge_is_antisymmetric(self):
        from pyloops.topology import SignedGraph

        g = SignedGraph(3)
        g.add_edge((0, 2))

        assert g.matrix[0, 2] == 1
        assert g.matrix[2, 0] == -1
        assert (g.matrix == -g.matrix.T).all(), "Incidence matrix must stay antisymmetric"

    def test_remove_edge_clears_both_entries(self):
        from pyloops.topology import SignedGraph

        g = SignedGraph(2)
        g.add_edge((1, 0))
        g.remove_edge((1, 0))

        assert not g.has_edge((0, 1))
        assert not g.matrix.any()

    def test_has_edge_either_direction(self):
        from pyloops.topology import SignedGraph

        g = SignedGraph(2)
        g.add_edge((0, 1))

        assert g.has_edge((0, 1))
        assert g.has_edge((1, 0))

    def test_edges_listed_once_in_stored_direction(self):
        from pyloops.topology import SignedGraph, Edge

        g = SignedGraph(3)
        g.add_edge((2, 0))
        g.add_edge((0, 1))

        assert list(g.edges()) == [Edge(0, 1), Edge(2, 0)]
        assert g.edges_count == 2

    def test_self_loop_rejected(self):
        from pyloops.topology import SignedGraph
        from pyloops.errors import MalformedTopologyError

        g = SignedGraph(1)
        with pytest.raises(MalformedTopologyError):
            g.add_edge((0, 0))

    def test_unknown_node_rejected(self):
        from pyloops.topology import SignedGraph

        g = SignedGraph(2)
        with pytest.raises(IndexError):
            g.add_edge((0, 5))


class TestNodes:
    """Growing and shrinking the node set."""

    def test_next_node_appends(self):
        from pyloops.topology import SignedGraph

        g = SignedGraph()
        assert [g.next_node() for _ in range(3)] == [0, 1, 2]
        assert g.nodes_count == 3

    def test_remove_node_shifts_indices(self):
        from pyloops.topology import SignedGraph, Edge

        g = SignedGraph(4)
        g.add_edge((0, 3))
        g.add_edge((3, 2))
        g.remove_node(1)

        assert g.nodes_count == 3
        assert list(g.edges()) == [Edge(0, 2), Edge(2, 1)]

    def test_neighbours_ignore_direction(self):
        from pyloops.topology import SignedGraph

        g = SignedGraph(4)
        g.add_edge((0, 1))
        g.add_edge((2, 0))

        assert sorted(g.neighbour_nodes(0)) == [1, 2]
        assert list(g.neighbour_nodes(3)) == []
        assert g.is_isolated(3)
        assert g.degree(0) == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
