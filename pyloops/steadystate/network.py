"""Editable network of two-terminal conductors, solved by mesh analysis."""

from __future__ import annotations
import logging
from typing import Generic, Hashable, Iterator, NamedTuple, TypeVar

import jax
import jax.numpy as jnp
from jax import Array

from ..config import DEFAULT_CONFIG, SolverConfig
from ..errors import MalformedTopologyError, SingularSystemError, UnknownElementError
from ..topology import Edge, TopologyGraph
from .components import Conductor
from .solver import Solution, solve

logger = logging.getLogger(__name__)

N = TypeVar("N", bound=Hashable)
C = TypeVar("C", bound=Conductor)


class ElementId(NamedTuple):
    """Opaque element handle; never reused within a network."""
    value: int


class _Element(NamedTuple):
    endpoints: tuple  # (label, label), direction defines current sign
    conductor: object


class Network(Generic[N, C]):
    """
    Mutable circuit built from endpoint labels and conductor payloads.

    Labels are any hashable values (grid coordinates, names, ...). Each
    distinct label maps to one graph node; a node is deleted as soon as
    no element touches it.

        net = Network()
        src = net.add(((0, 0), (0, 1)), CurrentSource(emf=10.0))
        net.add(((0, 1), (1, 1)), Resistor(5.0))
        net.add(((1, 1), (0, 0)), Wire())
        net.update(delta_time=0.016)
        net.get_mut(src).current   # 2.0
    """

    def __init__(self, config: SolverConfig | None = None):
        self._config = config if config is not None else DEFAULT_CONFIG
        if jnp.dtype(self._config.dtype) == jnp.float64 and not jax.config.jax_enable_x64:
            raise ValueError(
                "dtype float64 needs jax_enable_x64; "
                'call jax.config.update("jax_enable_x64", True) first'
            )

        self._topology = TopologyGraph()
        self._elements: dict[ElementId, _Element] = {}
        self._node_by_label: dict[N, int] = {}
        self._label_by_node: dict[int, N] = {}

        # Element order matches edge-list (loop matrix column) order
        self._ids: list[ElementId] = []
        self._ids_count = 0

        self._resistances = jnp.zeros((0, 0), dtype=self._config.dtype)
        self._emf = jnp.zeros((0,), dtype=self._config.dtype)

    # --- Queries ---

    @property
    def config(self) -> SolverConfig:
        return self._config

    @property
    def nodes_count(self) -> int:
        return self._topology.nodes_count

    @property
    def loop_count(self) -> int:
        return self._topology.loop_count

    @property
    def loops(self) -> Array:
        """Current loop matrix, columns in element order (see `ids`)."""
        return self._topology.loops()[0]

    @property
    def ids(self) -> tuple[ElementId, ...]:
        """Element ids in loop-matrix column order."""
        return tuple(self._ids)

    def __len__(self) -> int:
        return len(self._elements)

    def __contains__(self, element_id) -> bool:
        return element_id in self._elements

    def labels(self) -> tuple[N, ...]:
        """Labels of all live nodes, in node index order."""
        return tuple(self._label_by_node[i] for i in range(self.nodes_count))

    def node_of(self, label: N) -> int:
        """Node index currently assigned to a label."""
        return self._node_by_label[label]

    def endpoints(self, element_id: ElementId) -> tuple[N, N]:
        return self._element(element_id).endpoints

    def get_mut(self, element_id: ElementId) -> C:
        """The element's payload, for reading or editing in place."""
        return self._element(element_id).conductor

    def iter(self) -> Iterator[tuple[ElementId, C]]:
        for element_id, element in self._elements.items():
            yield element_id, element.conductor

    # --- Structural edits ---

    def add(self, endpoints: tuple[N, N], conductor: C) -> ElementId:
        """Add an element between two labels, creating nodes as needed."""
        self._validate_endpoints(endpoints)

        edge = Edge(*(self._resolve(label) for label in endpoints))
        self._topology.add_edge(edge)

        element_id = ElementId(self._ids_count)
        self._ids_count += 1
        self._ids.append(element_id)
        self._elements[element_id] = _Element(tuple(endpoints), conductor)

        self._resize_matrices()
        logger.debug("Added %s on %s (%d loops)", element_id, endpoints, self.loop_count)
        return element_id

    def change(self, element_id: ElementId, new_endpoints: tuple[N, N]) -> None:
        """
        Move an element to new endpoint labels.

        Old endpoints left without elements are deleted. The element
        moves to the end of the column order.
        """
        element = self._element(element_id)
        self._validate_endpoints(new_endpoints, moving=element_id)

        for label in new_endpoints:
            self._resolve(label)

        keep = {self._node_by_label[label] for label in new_endpoints}
        self._remove_edge(self._edge_of(element), keep=keep)

        self._ids.remove(element_id)
        self._ids.append(element_id)
        self._elements[element_id] = element._replace(endpoints=tuple(new_endpoints))

        self._topology.add_edge(Edge(*(self._node_by_label[label] for label in new_endpoints)))
        logger.debug("Moved %s to %s (%d loops)", element_id, new_endpoints, self.loop_count)

    def remove(self, element_id: ElementId) -> C:
        """Delete an element and any node it leaves isolated; returns the payload."""
        element = self._element(element_id)

        del self._elements[element_id]
        self._ids.remove(element_id)
        self._resize_matrices()

        self._remove_edge(self._edge_of(element))
        logger.debug("Removed %s (%d loops)", element_id, self.loop_count)
        return element.conductor

    # --- Simulation ---

    def update(self, delta_time: float) -> Solution:
        """
        Solve for steady-state currents and zap every element.

        Resistive elements always get their unique current. Wires on a
        redundant zero-resistance path get one valid split of the current,
        listed by index in `Solution.indeterminate_edges`.

        Raises SingularSystemError after zapping if some loops have no
        consistent solution (ideal sources fighting across a short). The
        error lists the zero-resistance elements on those loops.
        """
        if delta_time < 0:
            raise ValueError(f"delta_time must be non-negative, got {delta_time}")

        conductors = [self._elements[element_id].conductor for element_id in self._ids]
        dtype = self._config.dtype
        resistances = jnp.asarray([c.resistance() for c in conductors], dtype=dtype)
        emf = jnp.asarray([c.emf() for c in conductors], dtype=dtype)

        diag = jnp.arange(len(conductors))
        self._resistances = self._resistances.at[diag, diag].set(resistances)
        self._emf = emf

        loops, _ = self._topology.loops()
        solution = solve(
            loops,
            self._resistances,
            self._emf,
            rcond=self._config.rcond,
            residual_rtol=self._config.residual_rtol,
        )

        currents = solution.edge_currents.tolist()
        for conductor, current in zip(conductors, currents):
            conductor.zap(current, delta_time)

        if solution.indeterminate_edges:
            logger.debug(
                "Redundant zero-resistance paths through elements %s",
                [self._ids[j] for j in solution.indeterminate_edges],
            )

        if solution.singular_loops:
            singular_rows = loops[jnp.asarray(solution.singular_loops)]
            touched = jnp.any(singular_rows != 0, axis=0).tolist()
            affected = [self._ids[j] for j in solution.indeterminate_edges if touched[j]]
            logger.warning(
                "Inconsistent mesh system: loops %s have no solution through elements %s",
                solution.singular_loops, affected,
            )
            raise SingularSystemError(affected, solution)

        return solution

    # --- Internals ---

    def _element(self, element_id: ElementId) -> _Element:
        try:
            return self._elements[element_id]
        except KeyError:
            raise UnknownElementError(element_id) from None

    def _edge_of(self, element: _Element) -> Edge:
        return Edge(*(self._node_by_label[label] for label in element.endpoints))

    def _validate_endpoints(self, endpoints, moving: ElementId | None = None) -> None:
        if len(endpoints) != 2:
            raise MalformedTopologyError(f"An element needs exactly two endpoints, got {endpoints!r}")
        a, b = endpoints
        if a == b:
            raise MalformedTopologyError(f"Both endpoints are {a!r}")

        pair = {a, b}
        for element_id, element in self._elements.items():
            if element_id != moving and set(element.endpoints) == pair:
                raise MalformedTopologyError(
                    f"{a!r} and {b!r} are already joined by element {element_id.value}"
                )

    def _resolve(self, label: N) -> int:
        node = self._node_by_label.get(label)
        if node is None:
            node = self._topology.next_node()
            self._node_by_label[label] = node
            self._label_by_node[node] = label
            logger.debug("New node %d for label %r", node, label)
        return node

    def _remove_edge(self, edge: Edge, keep=frozenset()) -> None:
        """Remove an edge, pruning isolated endpoints not listed in `keep`."""
        prune = [node for node in edge if node not in keep]
        for node in self._topology.remove_edge(edge, prune=prune):
            self._forget_node(node)

    def _forget_node(self, node: int) -> None:
        """Drop a deleted node's label and shift greater indices down."""
        label = self._label_by_node.pop(node)
        del self._node_by_label[label]
        logger.debug("Pruned node %d (label %r)", node, label)

        for other in sorted(n for n in self._label_by_node if n > node):
            shifted = self._label_by_node.pop(other)
            self._label_by_node[other - 1] = shifted
            self._node_by_label[shifted] = other - 1

    def _resize_matrices(self) -> None:
        size = len(self._ids)
        self._resistances = jnp.zeros((size, size), dtype=self._config.dtype)
        self._emf = jnp.zeros((size,), dtype=self._config.dtype)
