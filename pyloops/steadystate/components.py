"""Conductor protocol and the built-in element payloads."""

from __future__ import annotations
from typing import Protocol, runtime_checkable

from ..config import CHARGE_DISTANCE, CHARGE_VALUE


@runtime_checkable
class Conductor(Protocol):
    """
    Anything the network can solve for.

    resistance() and emf() are queried fresh every tick; zap() receives
    the solved current through the element once per tick.
    """

    def resistance(self) -> float: ...

    def emf(self) -> float: ...

    def zap(self, current: float, delta_time: float) -> None: ...


class BaseConductor:
    """
    Shared state for the built-in elements.

    Records the last solved current and advances the charge-animation
    offset `shift` along the element, wrapped to [0, CHARGE_DISTANCE).
    """

    kind = "base"
    property_names: tuple[str, ...] = ()

    def __init__(self):
        self.current = 0.0
        self.shift = 0.0

    def resistance(self) -> float:
        return 0.0

    def emf(self) -> float:
        return 0.0

    def zap(self, current: float, delta_time: float) -> None:
        self.current = current
        delta = current * CHARGE_DISTANCE / CHARGE_VALUE * delta_time
        self.shift = (self.shift + delta) % CHARGE_DISTANCE

    def properties(self) -> dict[str, float]:
        """Editable properties, by name."""
        return {name: getattr(self, f"_{name}") for name in self.property_names}

    def set_property(self, name: str, value: float) -> None:
        if name not in self.property_names:
            raise KeyError(f"{type(self).__name__} has no property {name!r}")
        setattr(self, f"_{name}", float(value))

    def __repr__(self) -> str:
        values = ", ".join(f"{k}={v}" for k, v in self.properties().items())
        return f"{type(self).__name__}({values})"


class Wire(BaseConductor):
    """Ideal conductor: no resistance, no emf."""

    kind = "wire"


class Resistor(BaseConductor):
    """Ohmic element."""

    kind = "resistor"
    property_names = ("resistance",)

    def __init__(self, resistance: float):
        super().__init__()
        self._resistance = float(resistance)

    def resistance(self) -> float:
        return self._resistance


class CurrentSource(BaseConductor):
    """
    EMF source with optional internal resistance.

    The emf drives current from the element's first endpoint towards
    its second.
    """

    kind = "current_source"
    property_names = ("emf", "resistance")

    def __init__(self, emf: float, resistance: float = 0.0):
        super().__init__()
        self._emf = float(emf)
        self._resistance = float(resistance)

    def emf(self) -> float:
        return self._emf

    def resistance(self) -> float:
        return self._resistance


ELEMENT_KINDS = {
    Wire.kind: Wire,
    Resistor.kind: Resistor,
    CurrentSource.kind: CurrentSource,
}


def make_element(kind: str, **values) -> BaseConductor:
    """
    Create a built-in element by kind name.

    Example:
        source = make_element("current_source", emf=10.0)
    """
    try:
        cls = ELEMENT_KINDS[kind]
    except KeyError:
        raise ValueError(
            f"Unknown element kind: {kind!r} (expected one of {sorted(ELEMENT_KINDS)})"
        ) from None
    return cls(**values)
