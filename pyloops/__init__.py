"""PyLoops - steady-state mesh-analysis engine for editable circuits.

This package provides:
    - topology: signed-incidence graph, spanning forest, fundamental loop basis
    - steadystate: the Network engine, built-in conductors and the JAX solver

Usage:
    from pyloops.steadystate import Network, Wire, Resistor, CurrentSource
"""

from .errors import CircuitError, UnknownElementError, MalformedTopologyError, SingularSystemError

__version__ = "0.1.0"
__all__ = [
    "topology",
    "steadystate",
    "CircuitError",
    "UnknownElementError",
    "MalformedTopologyError",
    "SingularSystemError",
    "__version__",
]
