# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Implicit vertical diffusion of a layered scalar.

For every column the depth-weighted scalar is advanced with backward Euler:

    ((h s)_l^{n+1} - (h s)_l^n) / dt
        = D * [(s_{l+1} - s_l)/h_{l+1/2} - (s_l - s_{l-1})/h_{l-1/2}]^{n+1}

with h_{l+1/2} = (h_l + h_{l+1})/2. This gives a tridiagonal system
M s^{n+1} = rhs with lower, principal and upper diagonals a, b, c.

The free surface always carries a Neumann condition ds/dz = dst. The bottom
carries either a Neumann condition ds/dz = dsb or a Navier slip condition
s = s_b + lambda_b ds/dz, discretised to third order.

Both solvers accept a single column of shape (nl,) or any stack of columns
(..., nl), and update ``s`` in place. Boundary values broadcast over columns.
"""

import logging

import numpy as np
from numba import njit

from layerflow.solvers.tridiagonal import thomas_solve_inplace
from layerflow.solvers.validation import check_column_heights, check_pivot

logger = logging.getLogger(__name__)


@njit(cache=True, error_model="numpy")
def _assemble_layers(h, s, dt, D, dst, a, b, c, rhs):
    """Interior rows, top row and right-hand side shared by both closures."""
    nl = h.shape[0]
    for l in range(nl):
        rhs[l] = s[l] * h[l]
        a[l] = 0.0
        c[l] = 0.0
    for l in range(1, nl - 1):
        a[l] = -2.0 * D * dt / (h[l - 1] + h[l])
        c[l] = -2.0 * D * dt / (h[l] + h[l + 1])
        b[l] = h[l] - a[l] - c[l]
    if nl > 1:
        a[nl - 1] = -2.0 * D * dt / (h[nl - 2] + h[nl - 1])
        b[nl - 1] = h[nl - 1] - a[nl - 1]
    # Ghost value above the surface: s_nl = s_{nl-1} + dst * h_{nl-1}
    rhs[nl - 1] += D * dt * dst


@njit(cache=True, error_model="numpy")
def _upper_height(h):
    # A single layer sees a mirror image of itself above.
    if h.shape[0] > 1:
        return h[1]
    return h[0]


@njit(cache=True, error_model="numpy")
def _fold_single_layer(h, dt, D, dst, b, c, rhs):
    if h.shape[0] == 1:
        b[0] += c[0]
        rhs[0] += (-c[0] * h[0] - D * dt) * dst


@njit(cache=True, error_model="numpy")
def _assemble_neumann_neumann(h, s, dt, D, dst, dsb, a, b, c, rhs):
    _assemble_layers(h, s, dt, D, dst, a, b, c, rhs)
    h0 = h[0]
    h1 = _upper_height(h)
    c[0] = -2.0 * D * dt / (h0 + h1)
    b[0] = h0 - c[0]
    rhs[0] -= D * dt * dsb
    _fold_single_layer(h, dt, D, dst, b, c, rhs)


@njit(cache=True, error_model="numpy")
def _assemble_neumann_navier(h, s, dt, D, dst, s_b, lambda_b, a, b, c, rhs):
    _assemble_layers(h, s, dt, D, dst, a, b, c, rhs)
    h0 = h[0]
    h1 = _upper_height(h)
    den = (h0 * (h0 + h1) * (h0 + h1)
           + 2.0 * lambda_b * (3.0 * h0 * h1 + 2.0 * h0 * h0 + h1 * h1))
    b[0] = h0 + 2.0 * dt * D * (1.0 / (h0 + h1)
                                + (h1 * h1 + 3.0 * h0 * h1 + 3.0 * h0 * h0) / den)
    c[0] = -2.0 * dt * D * (1.0 / (h0 + h1) + h0 * h0 / den)
    rhs[0] += 2.0 * dt * D * s_b * (h1 * h1 + 3.0 * h0 * h1 + 2.0 * h0 * h0) / den
    _fold_single_layer(h, dt, D, dst, b, c, rhs)


@njit(cache=True, error_model="numpy")
def _min_abs(b, current):
    for l in range(b.shape[0]):
        v = abs(b[l])
        # NaN sticks once seen
        if v < current or v != v:
            current = v
    return current


@njit(cache=True, error_model="numpy")
def _neumann_neumann_columns(h, s, dt, D, dst, dsb):
    ncol, nl = s.shape
    a = np.empty(nl)
    b = np.empty(nl)
    c = np.empty(nl)
    rhs = np.empty(nl)
    x = np.empty(nl)
    min_pivot = np.inf
    for k in range(ncol):
        _assemble_neumann_neumann(h[k], s[k], dt, D, dst[k], dsb[k], a, b, c, rhs)
        thomas_solve_inplace(a, b, c, rhs, x)
        s[k, :] = x
        min_pivot = _min_abs(b, min_pivot)
    return min_pivot


@njit(cache=True, error_model="numpy")
def _neumann_navier_columns(h, s, dt, D, dst, s_b, lambda_b):
    ncol, nl = s.shape
    a = np.empty(nl)
    b = np.empty(nl)
    c = np.empty(nl)
    rhs = np.empty(nl)
    x = np.empty(nl)
    min_pivot = np.inf
    for k in range(ncol):
        _assemble_neumann_navier(h[k], s[k], dt, D, dst[k], s_b[k], lambda_b[k],
                                 a, b, c, rhs)
        thomas_solve_inplace(a, b, c, rhs, x)
        s[k, :] = x
        min_pivot = _min_abs(b, min_pivot)
    return min_pivot


def _as_columns(h, s, *boundary):
    """Flatten (..., nl) fields to (ncol, nl) and boundary data to (ncol,)."""
    h = np.asarray(h)
    if h.shape != s.shape:
        raise ValueError(f"h and s shapes differ: {h.shape} != {s.shape}")
    nl = s.shape[-1]
    h2 = np.ascontiguousarray(h, dtype=np.float64).reshape(-1, nl)
    s2 = np.ascontiguousarray(s, dtype=np.float64).reshape(-1, nl)
    ncol = s2.shape[0]
    values = [
        np.ascontiguousarray(
            np.broadcast_to(np.asarray(v, dtype=np.float64), s.shape[:-1])
        ).reshape(ncol)
        for v in boundary
    ]
    return (h2, s2, *values)


def _write_back(s, s2):
    if not np.shares_memory(s, s2):
        s[...] = s2.reshape(s.shape)


def vertical_diffusion_neumann_neumann(h, s, dt, D, dst=0.0, dsb=0.0,
                                       validate=False, pivot_eps=1e-12):
    """Neumann top / Neumann bottom vertical diffusion, in place.

    Args:
        h: layer heights, shape (..., nl).
        s: scalar to diffuse, same shape as h. Updated in place.
        dt: time step.
        D: diffusion coefficient.
        dst: ds/dz at the free surface, scalar or shape (...).
        dsb: ds/dz at the bottom, scalar or shape (...).
        validate: check heights and pivots, raising DegenerateColumnError.
        pivot_eps: smallest acceptable |pivot| when validating.

    Returns:
        s
    """
    h2, s2, dst, dsb = _as_columns(h, s, dst, dsb)
    if validate:
        check_column_heights(h2)
    min_pivot = _neumann_neumann_columns(h2, s2, float(dt), float(D), dst, dsb)
    _write_back(s, s2)
    logger.debug("neumann/neumann: %d columns, nl=%d, min pivot %.3e",
                 s2.shape[0], s2.shape[1], min_pivot)
    if validate:
        check_pivot(min_pivot, pivot_eps)
    return s


def vertical_diffusion_neumann_navier(h, s, dt, D, dst=0.0, s_b=0.0, lambda_b=0.0,
                                      validate=False, pivot_eps=1e-12):
    """Neumann top / Navier slip bottom vertical diffusion, in place.

    The bottom condition is s = s_b + lambda_b * ds/dz. lambda_b = 0 is
    no-slip (Dirichlet s_b); lambda_b -> inf tends to the zero-flux Neumann
    closure of ``vertical_diffusion_neumann_neumann``.
    """
    h2, s2, dst, s_b, lambda_b = _as_columns(h, s, dst, s_b, lambda_b)
    if validate:
        check_column_heights(h2)
    min_pivot = _neumann_navier_columns(h2, s2, float(dt), float(D), dst, s_b, lambda_b)
    _write_back(s, s2)
    logger.debug("neumann/navier: %d columns, nl=%d, min pivot %.3e",
                 s2.shape[0], s2.shape[1], min_pivot)
    if validate:
        check_pivot(min_pivot, pivot_eps)
    return s


def _empty_system(nl):
    return np.empty(nl), np.empty(nl), np.empty(nl), np.empty(nl)


def assemble_neumann_neumann(h, s, dt, D, dst=0.0, dsb=0.0):
    """Tridiagonal system (a, b, c, rhs) of one column, Neumann bottom."""
    h = np.asarray(h, dtype=np.float64)
    s = np.asarray(s, dtype=np.float64)
    a, b, c, rhs = _empty_system(h.shape[0])
    _assemble_neumann_neumann(h, s, float(dt), float(D), float(dst), float(dsb),
                              a, b, c, rhs)
    return a, b, c, rhs


def assemble_neumann_navier(h, s, dt, D, dst=0.0, s_b=0.0, lambda_b=0.0):
    """Tridiagonal system (a, b, c, rhs) of one column, Navier slip bottom."""
    h = np.asarray(h, dtype=np.float64)
    s = np.asarray(s, dtype=np.float64)
    a, b, c, rhs = _empty_system(h.shape[0])
    _assemble_neumann_navier(h, s, float(dt), float(D), float(dst), float(s_b),
                             float(lambda_b), a, b, c, rhs)
    return a, b, c, rhs
