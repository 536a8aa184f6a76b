"""PyLoops Steady-State Module.

Synchronous mesh analysis of an editable network of two-terminal
conductors, recomputed once per tick.

Components:
    - Wire, Resistor, CurrentSource: built-in conductors
    - Conductor: protocol for custom element payloads

Network:
    - Network: label-addressed element graph with add/change/remove/update
    - ElementId: opaque element handle
"""

from .components import (
    Conductor,
    BaseConductor,
    Wire,
    Resistor,
    CurrentSource,
    ELEMENT_KINDS,
    make_element,
)
from .network import Network, ElementId
from .solver import Solution, solve, mesh_system, mesh_currents

__all__ = [
    # Network building
    "Network",
    "ElementId",
    # Components
    "Conductor",
    "BaseConductor",
    "Wire",
    "Resistor",
    "CurrentSource",
    "ELEMENT_KINDS",
    "make_element",
    # Solving
    "Solution",
    "solve",
    "mesh_system",
    "mesh_currents",
]
