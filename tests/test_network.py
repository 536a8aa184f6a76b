"""
Test: Network structural edits (add / change / remove) and label mapping.

Labels are grid coordinates, as an editor would supply them.
"""
import pytest


def _chain(net, labels):
    """Add a resistor between each consecutive pair of labels."""
    from pyloops.steadystate import Resistor

    return [net.add((a, b), Resistor(1.0)) for a, b in zip(labels, labels[1:])]


class TestAdd:
    """Node creation and deduplication."""

    def test_shared_label_creates_one_node(self):
        from pyloops.steadystate import Network, Wire

        net = Network()
        net.add(((0, 0), (0, 1)), Wire())
        net.add(((0, 1), (1, 1)), Wire())

        assert net.nodes_count == 3
        assert len(net) == 2

    def test_reusing_both_labels_creates_no_node(self):
        from pyloops.steadystate import Network, Wire

        net = Network()
        _chain(net, ["a", "b", "c"])
        net.add(("c", "a"), Wire())

        assert net.nodes_count == 3
        assert net.loop_count == 1

    def test_endpoints_round_trip(self):
        from pyloops.steadystate import Network, Resistor

        net = Network()
        r = net.add(((2, 3), (4, 5)), Resistor(10.0))

        assert net.endpoints(r) == ((2, 3), (4, 5))

    def test_ids_never_reused(self):
        from pyloops.steadystate import Network, Wire

        net = Network()
        first = net.add(("a", "b"), Wire())
        net.remove(first)
        second = net.add(("a", "b"), Wire())

        assert first != second
        assert first not in net
        assert second in net

    def test_self_loop_rejected_without_side_effects(self):
        from pyloops.steadystate import Network, Wire
        from pyloops.errors import MalformedTopologyError

        net = Network()
        with pytest.raises(MalformedTopologyError):
            net.add(("a", "a"), Wire())

        assert net.nodes_count == 0
        assert len(net) == 0

    def test_parallel_element_rejected(self):
        from pyloops.steadystate import Network, Wire, Resistor
        from pyloops.errors import MalformedTopologyError

        net = Network()
        net.add(("a", "b"), Wire())
        with pytest.raises(MalformedTopologyError):
            net.add(("b", "a"), Resistor(1.0))

        assert len(net) == 1
        assert net.nodes_count == 2

    def test_iter_and_get_mut(self):
        from pyloops.steadystate import Network, Resistor

        net = Network()
        r1 = net.add(("a", "b"), Resistor(1.0))
        r2 = net.add(("b", "c"), Resistor(2.0))

        found = {element_id: c.resistance() for element_id, c in net.iter()}
        assert found == {r1: 1.0, r2: 2.0}

        net.get_mut(r2).set_property("resistance", 7.0)
        assert net.get_mut(r2).resistance() == 7.0


class TestRemove:
    """Removal prunes isolated nodes and keeps labels consistent."""

    def test_add_then_remove_restores_empty_state(self):
        from pyloops.steadystate import Network, Resistor

        net = Network()
        payload = Resistor(3.0)
        r = net.add(((0, 0), (1, 0)), payload)
        returned = net.remove(r)

        assert returned is payload
        assert len(net) == 0
        assert net.nodes_count == 0
        assert net.labels() == ()
        assert net.loops.shape == (0, 0)

    def test_only_isolated_endpoints_pruned(self):
        from pyloops.steadystate import Network

        net = Network()
        ids = _chain(net, ["a", "b", "c"])
        net.remove(ids[0])

        assert net.labels() == ("b", "c")
        assert net.node_of("b") == 0
        assert net.node_of("c") == 1

    def test_labels_stay_in_sync_after_middle_prune(self):
        from pyloops.steadystate import Network

        net = Network()
        ids = _chain(net, ["a", "b", "c", "d", "e"])
        net.remove(ids[1])  # b-c: neither endpoint isolated
        net.remove(ids[0])  # a-b: both isolated now

        labels = net.labels()
        assert set(labels) == {"c", "d", "e"}
        for index, label in enumerate(labels):
            assert net.node_of(label) == index, f"{label!r} mapped to wrong node"

        # Remaining elements still resolve to the right edges
        assert net.endpoints(ids[3]) == ("d", "e")
        assert net.loop_count == 0

    def test_remove_breaks_loop(self):
        from pyloops.steadystate import Network, Wire

        net = Network()
        _chain(net, ["a", "b", "c"])
        closing = net.add(("c", "a"), Wire())
        net.remove(closing)

        assert net.loop_count == 0
        assert net.nodes_count == 3


class TestChange:
    """Moving element endpoints."""

    def test_move_to_new_label(self):
        from pyloops.steadystate import Network

        net = Network()
        ids = _chain(net, ["a", "b", "c"])
        net.change(ids[1], ("b", "d"))

        # "c" became isolated and was deleted, "d" was created
        assert net.nodes_count == 3
        assert set(net.labels()) == {"a", "b", "d"}
        assert net.endpoints(ids[1]) == ("b", "d")

    def test_moved_element_goes_last(self):
        from pyloops.steadystate import Network

        net = Network()
        ids = _chain(net, ["a", "b", "c", "d"])
        net.change(ids[0], ("a", "c"))

        assert net.ids == (ids[1], ids[2], ids[0])

    def test_reverse_direction_keeps_nodes(self):
        from pyloops.steadystate import Network, Resistor

        net = Network()
        r = net.add(("a", "b"), Resistor(1.0))
        net.change(r, ("b", "a"))

        assert net.nodes_count == 2
        assert net.endpoints(r) == ("b", "a")

    def test_change_can_close_a_loop(self):
        from pyloops.steadystate import Network

        net = Network()
        ids = _chain(net, ["a", "b", "c", "d"])
        assert net.loop_count == 0

        net.change(ids[2], ("c", "a"))

        assert net.loop_count == 1
        assert net.nodes_count == 3

    def test_change_onto_existing_pair_rejected(self):
        from pyloops.steadystate import Network
        from pyloops.errors import MalformedTopologyError

        net = Network()
        ids = _chain(net, ["a", "b", "c"])
        with pytest.raises(MalformedTopologyError):
            net.change(ids[1], ("a", "b"))

        assert net.endpoints(ids[1]) == ("b", "c")
        assert net.nodes_count == 3


class TestUnknownElement:
    """Stale ids fail recoverably."""

    @pytest.mark.parametrize("operation", ["get_mut", "endpoints", "remove"])
    def test_lookup_of_removed_id(self, operation):
        from pyloops.steadystate import Network, Wire
        from pyloops.errors import UnknownElementError

        net = Network()
        stale = net.add(("a", "b"), Wire())
        net.remove(stale)

        with pytest.raises(UnknownElementError):
            getattr(net, operation)(stale)

    def test_change_of_removed_id(self):
        from pyloops.steadystate import Network, Wire
        from pyloops.errors import UnknownElementError

        net = Network()
        stale = net.add(("a", "b"), Wire())
        net.remove(stale)

        with pytest.raises(UnknownElementError) as exc_info:
            net.change(stale, ("c", "d"))
        assert exc_info.value.element_id == stale
        assert net.nodes_count == 0, "Failed change must not create nodes"


class TestConfig:
    """Solver settings passed to Network."""

    def test_default_config(self):
        from pyloops.config import DEFAULT_CONFIG
        from pyloops.steadystate import Network

        assert Network().config is DEFAULT_CONFIG

    def test_float64_without_x64_rejected(self):
        import jax
        from pyloops.config import SolverConfig
        from pyloops.steadystate import Network

        if jax.config.jax_enable_x64:
            pytest.skip("x64 already enabled")
        with pytest.raises(ValueError, match="jax_enable_x64"):
            Network(SolverConfig(dtype="float64"))

    def test_float32_edits_and_solves(self):
        from pyloops.config import SolverConfig
        from pyloops.steadystate import Network, Wire, Resistor, CurrentSource

        net = Network(SolverConfig(dtype="float32", residual_rtol=1e-3))
        net.add(("s", "a"), CurrentSource(emf=3.0))
        resistor = net.add(("a", "b"), Resistor(1.5))
        net.add(("b", "s"), Wire())
        solution = net.update(0.0)

        assert solution.edge_currents.dtype.name == "float32"
        assert net.get_mut(resistor).current == pytest.approx(2.0, abs=1e-5)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
