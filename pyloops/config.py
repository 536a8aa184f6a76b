"""Solver and charge-animation settings."""

from __future__ import annotations
from typing import NamedTuple


# Charge animation: one charge marker every CHARGE_DISTANCE units,
# each carrying CHARGE_VALUE coulombs.
CHARGE_VALUE = 1.0
CHARGE_DISTANCE = 20.0


class SolverConfig(NamedTuple):
    """
    Numeric settings for the per-tick mesh solve.

    Rank and residual tests run on the diagonally scaled block
    D^-1/2 (B R B^T) D^-1/2, so both tolerances are relative.

    dtype: "float32" (JAX default) or "float64" (needs jax_enable_x64)
    rcond: singular values below rcond * sigma_max count as zero;
        None means machine epsilon times the block size
    residual_rtol: a block whose scaled residual exceeds
        residual_rtol * |rhs| has no solution (e.g. fighting sources)
    """
    dtype: str = "float32"
    rcond: float | None = None
    residual_rtol: float = 1e-4


DEFAULT_CONFIG = SolverConfig()
