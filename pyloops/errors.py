"""Exception types raised by the topology and solver layers."""

from __future__ import annotations


class CircuitError(Exception):
    """Base class for all pyloops errors."""


class UnknownElementError(CircuitError, KeyError):
    """An ElementId that is not (or no longer) part of the network."""

    def __init__(self, element_id):
        super().__init__(element_id)
        self.element_id = element_id

    def __str__(self) -> str:
        return f"Unknown element: {self.element_id!r}"


class MalformedTopologyError(CircuitError, ValueError):
    """Edge or path request the signed incidence graph cannot represent."""


class SingularSystemError(CircuitError):
    """
    Some loops of B*R*B^T i = B*V have no consistent solution.

    Raised after every element has received its least-squares current.
    `element_ids` lists the zero-resistance elements on those loops.
    """

    def __init__(self, element_ids, solution):
        self.element_ids = tuple(element_ids)
        self.solution = solution
        super().__init__(
            f"Singular mesh system: {len(solution.singular_loops)} loop(s) "
            f"through {len(self.element_ids)} zero-resistance element(s) have no solution"
        )
