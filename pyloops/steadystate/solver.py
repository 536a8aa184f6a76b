"""Mesh-analysis solver on a fundamental loop basis.

With B the loop matrix (loops x edges), R the diagonal edge resistance
matrix and V the edge emf vector, Kirchhoff's voltage law on each loop
gives

    (B R B^T) i_loop = B V,    i_edge = B^T i_loop

The mesh matrix is block diagonal up to a permutation of loops: loops
that share no resistive edge do not couple. Each coupled block is solved
on its own by a rank-revealing least-squares solve, so that a block with
no solution (two ideal sources fighting) cannot spoil the rest of the
network.

The null space of B R B^T holds only circulations through zero-resistance
edges. Any least-squares solution therefore gives the same current on
every resistive edge, and a redundant wire path leaves only the wire
currents ambiguous.
"""

from __future__ import annotations
from typing import NamedTuple

import jax
import jax.numpy as jnp
import numpy as np
from jax import Array
from jax.scipy.linalg import solve_triangular


class Solution(NamedTuple):
    """Result of one mesh solve."""
    loop_currents: Array  # (n_loops,)
    edge_currents: Array  # (n_edges,)
    singular_loops: tuple[int, ...]  # loops in blocks with no consistent solution
    indeterminate_edges: tuple[int, ...]  # zero-resistance edges on null-space loops


@jax.jit
def mesh_system(loops: Array, resistances: Array, emf: Array) -> tuple[Array, Array]:
    """
    Assemble the mesh equations.

    Args:
        loops: (n_loops, n_edges) loop matrix B
        resistances: (n_edges, n_edges) diagonal resistance matrix R
        emf: (n_edges,) emf vector V

    Returns:
        (B R B^T, B V)
    """
    lhs = loops @ resistances @ loops.T
    rhs = loops @ emf
    return lhs, rhs


def _qr_solve(lhs: Array, rhs: Array) -> Array:
    q, r = jnp.linalg.qr(lhs)
    return solve_triangular(r, q.T @ rhs)


def mesh_currents(loops: Array, resistances: Array, emf: Array) -> Array:
    """
    Edge currents for a non-singular system, as a pure JAX function.

    Differentiable with jax.grad, e.g. for dI/dR sensitivities. Does no
    singularity checking; use `solve` for live networks.
    """
    if loops.shape[0] == 0:
        return jnp.zeros(loops.shape[1], dtype=emf.dtype)
    lhs, rhs = mesh_system(loops, resistances, emf)
    return loops.T @ _qr_solve(lhs, rhs)


def coupled_blocks(lhs) -> list[list[int]]:
    """Groups of loops connected through nonzero mesh-matrix entries."""
    coupling = np.asarray(lhs) != 0
    n = coupling.shape[0]
    seen = [False] * n
    blocks = []

    for first in range(n):
        if seen[first]:
            continue
        seen[first] = True
        block = [first]
        stack = [first]
        while stack:
            loop = stack.pop()
            for other in np.flatnonzero(coupling[loop]):
                other = int(other)
                if not seen[other]:
                    seen[other] = True
                    block.append(other)
                    stack.append(other)
        blocks.append(sorted(block))

    return blocks


def _scaling(lhs: Array) -> Array:
    """D^-1/2 for the diagonal of lhs; rows with no positive diagonal keep scale 1."""
    d = jnp.diagonal(lhs)
    positive = d > 0
    return jnp.where(positive, 1.0 / jnp.sqrt(jnp.where(positive, d, 1.0)), 1.0)


def lstsq_with_null_space(
    lhs: Array, rhs: Array, rcond: float | None = None
) -> tuple[Array, float, Array]:
    """
    Least-squares solution of lhs @ x = rhs, minimum-norm after scaling.

    The system is scaled symmetrically by its diagonal before the rank
    decision, so resistances spanning many decades stay well posed.

    Returns:
        (x, residual, null_space): residual is measured on the scaled
        system relative to |scaled rhs|; null_space holds one unscaled
        null vector of lhs per row.
    """
    n = lhs.shape[0]
    scale = _scaling(lhs)
    scaled = scale[:, None] * lhs * scale[None, :]
    scaled_rhs = scale * rhs

    if rcond is None:
        rcond = float(jnp.finfo(lhs.dtype).eps) * n

    u, s, vh = jnp.linalg.svd(scaled)
    cutoff = rcond * float(s[0])
    rank = int(jnp.sum(s > cutoff))

    y = (u[:, :rank].T @ scaled_rhs) / s[:rank]
    scaled_x = vh[:rank].T @ y

    norm_rhs = float(jnp.linalg.norm(scaled_rhs))
    norm_res = float(jnp.linalg.norm(scaled @ scaled_x - scaled_rhs))
    residual = norm_res / norm_rhs if norm_rhs > 0 else norm_res

    return scale * scaled_x, residual, scale[None, :] * vh[rank:]


def _touched_edges(loops: Array) -> set[int]:
    return {int(j) for j in np.flatnonzero(np.any(np.asarray(loops) != 0, axis=0))}


def _circulation_edges(loops: Array, null_space: Array) -> set[int]:
    """Edges carried by any null-space circulation of the given loop rows."""
    edges = set()
    for vector in null_space:
        circulation = np.abs(np.asarray(loops.T @ vector))
        peak = circulation.max(initial=0.0)
        if peak == 0.0:
            continue
        hits = circulation > peak * np.sqrt(np.finfo(circulation.dtype).eps)
        edges.update(int(j) for j in np.flatnonzero(hits))
    return edges


def solve(
    loops: Array,
    resistances: Array,
    emf: Array,
    *,
    rcond: float | None = None,
    residual_rtol: float = 1e-4,
) -> Solution:
    """
    Solve the mesh equations block by block.

    Each coupled block gets its minimum-norm least-squares solution. A
    rank-deficient but consistent block (a redundant ideal-wire path)
    still yields exact currents on every resistive edge; only the
    zero-resistance edges around its null-space loops are ambiguous and
    are listed in `Solution.indeterminate_edges`.

    A block whose residual exceeds `residual_rtol`, or whose entries or
    solution are not finite, has no solution. Its loops are listed in
    `Solution.singular_loops`; non-finite blocks get zero loop current.
    """
    n_loops, n_edges = loops.shape
    if n_loops == 0:
        return Solution(
            loop_currents=jnp.zeros(0, dtype=emf.dtype),
            edge_currents=jnp.zeros(n_edges, dtype=emf.dtype),
            singular_loops=(),
            indeterminate_edges=(),
        )

    lhs, rhs = mesh_system(loops, resistances, emf)
    loop_currents = jnp.zeros(n_loops, dtype=lhs.dtype)
    singular = []
    indeterminate = set()

    for block in coupled_blocks(lhs):
        idx = jnp.asarray(block)
        sub_lhs = lhs[jnp.ix_(idx, idx)]
        sub_rhs = rhs[idx]
        sub_loops = loops[idx]

        finite = bool(jnp.all(jnp.isfinite(sub_lhs))) and bool(jnp.all(jnp.isfinite(sub_rhs)))
        if finite:
            currents, residual, null_space = lstsq_with_null_space(sub_lhs, sub_rhs, rcond)
            finite = bool(jnp.all(jnp.isfinite(currents)))
        if not finite:
            singular.extend(block)
            indeterminate.update(_touched_edges(sub_loops))
            continue

        if residual > residual_rtol:
            singular.extend(block)
        indeterminate.update(_circulation_edges(sub_loops, null_space))
        loop_currents = loop_currents.at[idx].set(currents)

    return Solution(
        loop_currents=loop_currents,
        edge_currents=loops.T @ loop_currents,
        singular_loops=tuple(sorted(singular)),
        indeterminate_edges=tuple(sorted(indeterminate)),
    )
