# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Explicit horizontal diffusion of a layered scalar.

Approximates h d_t s = D div(h grad s) with an explicit step, split into

    * a bulk term: the 5-point Laplacian of s in each layer, added to every
      wet layer;
    * a slope term d2sz for each layer, which accounts for layers that are
      not horizontal. It couples the vertical difference of s between
      neighbouring layers with the horizontal curvature and gradient of the
      layer thickness and of the layer base elevation zl.

The step is explicit: the caller must limit dt to about min(delta^2/D).
Every stencil reads the field as it was on entry.
"""

import numpy as np

from layerflow.solvers.operators import shift, second_difference, laplacian


def _slope_term(sp, hp, dstp, zlp, l, nl, dim):
    """Contribution of one horizontal direction to d2sz at layer l."""
    def sl(k, offset):
        return shift(sp[..., k], dim, offset)

    hP = shift(hp[..., l], dim, 1)
    hC = shift(hp[..., l], dim, 0)
    hM = shift(hp[..., l], dim, -1)
    dh = hP - hM
    d2h = hP - 2.0*hC + hM
    dzl = shift(zlp, dim, 1) - shift(zlp, dim, -1)
    d2zl = second_difference(zlp, dim)

    if l < nl - 1:
        b = (sl(l, 1) - sl(l, -1) - sl(l + 1, 1) + sl(l + 1, -1))*dh/4.0
        b += (sl(l, 0) - sl(l + 1, 0))*d2h/2.0
        if l > 0:
            b -= (sl(l + 1, 1) - sl(l + 1, -1) - sl(l - 1, 1) + sl(l - 1, -1))*dzl/4.0
            b -= (sl(l + 1, 0) - sl(l - 1, 0))*d2zl/2.0
        return b

    # Top layer: the layer above is replaced by the ghost s + dst*h.
    dstP = shift(dstp, dim, 1)
    dstC = shift(dstp, dim, 0)
    dstM = shift(dstp, dim, -1)
    b = (-dstP*hP + dstM*hM)*dh/4.0
    b += (-dstC*hC)*d2h/2.0
    if l > 0:
        b -= (sl(l, 1) + dstP*hP - sl(l, -1) - dstM*hM
              - sl(l - 1, 1) + sl(l - 1, -1))*dzl/4.0
        b -= (sl(l, 0) + dstC*hC - sl(l - 1, 0))*d2zl/2.0
    return b


def slope_correction(s, h, grid, dst=0.0, zb=None):
    """Per-layer correction d2sz for layers that are not horizontal.

    Layers are visited bottom to top; ``zl`` is the base elevation of the
    current layer, starting from ``zb``. The top layer uses the ghost value
    s + dst*h in place of the layer above.

    Returns:
        d2sz, shape (nx, ny, nl).
    """
    nl = grid.nl
    dst = np.broadcast_to(np.asarray(dst, dtype=np.float64), grid.column_shape)
    zl = np.zeros(grid.column_shape) if zb is None else np.array(zb, dtype=np.float64)

    sp = grid.pad(s)
    hp = grid.pad(h)
    dstp = grid.pad(np.ascontiguousarray(dst))
    d2sz = np.empty(grid.layer_shape)
    for l in range(nl):
        zlp = grid.pad(zl)
        b = 0.0
        for dim in (0, 1):
            b = b + _slope_term(sp, hp, dstp, zlp, l, nl, dim)
        d2sz[..., l] = b / grid.delta**2
        zl += h[..., l]
    return d2sz


def horizontal_diffusion(s, h, D, dt, grid, dst=0.0, zb=None):
    """Add one explicit horizontal diffusion increment to s, in place.

    Args:
        s: layered scalar, shape (nx, ny, nl). Updated in place.
        h: layer heights, shape (nx, ny, nl).
        D: diffusion coefficient. Nothing happens when D <= 0.
        dt: time step (not limited here).
        grid: LayeredGrid.
        dst: top flux ds/dz, scalar or shape (nx, ny).
        zb: bed elevation, shape (nx, ny). Defaults to a flat bed at 0.

    Returns:
        s
    """
    if D <= 0.0:
        return s

    d2s = laplacian(grid.pad(s), grid.delta)
    d2sz = slope_correction(s, h, grid, dst, zb)

    wet = h > grid.dry
    s += np.where(wet, dt*D*d2s, 0.0)
    safe_h = np.where(wet, h, 1.0)
    s += np.where(wet, dt*D*d2sz/safe_h, 0.0)
    return s
