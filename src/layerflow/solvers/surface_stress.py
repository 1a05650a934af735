# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Viscous stress continuity at the free surface.

Projecting (T_liquid - T_gas).n = 0 on the normal and tangential directions
gives, in each horizontal direction with surface slope eta_x,

    phi|_top = -2 nu (1 + eta_x^2)/(1 - eta_x^2) d_x u|_top
    (1 - eta_x^2)(d_z u + d_x w)|_top = 4 eta_x d_x u|_top

The normal part is a non-hydrostatic pressure deviation phi_nu, added to the
momentum equation as -grad(h phi_nu)_k + [phi_nu grad z]_k. The tangential part
is the top Neumann condition du/dz of the vertical viscosity solve. Because it
contains the horizontal derivative of the top-layer shear, it is obtained by
fixed-point relaxation.
"""

import logging

import numpy as np

from layerflow.solvers.operators import shift, grad_central, face_pair

logger = logging.getLogger(__name__)

STRESS_ITERATIONS = 10


def _slope_factor(etax):
    return etax / (1.0 - etax*etax)


def normal_stress_deviation(state, nu, grid):
    """Pressure deviation phi_nu, shape (nx, ny, nl), uniform over each column."""
    delta = grid.delta
    top = grid.nl - 1
    etap = grid.pad(state.eta)
    hp = grid.pad(state.h[..., top])

    phi0 = np.zeros(grid.column_shape)
    for dim in (0, 1):
        etax = grad_central(etap, dim, delta)
        up = grid.pad(state.u[dim][..., top])
        dutp = grid.pad(state.dut[dim])
        slip = (shift(hp, dim, 1)/2*shift(dutp, dim, 1)
                - shift(hp, dim, -1)/2*shift(dutp, dim, -1))
        phi0 -= (nu*2.0*(1.0 + etax**2)/(1.0 - etax**2)
                 * (shift(up, dim, 1) - shift(up, dim, -1) + slip)/(2.0*delta))

    return np.repeat(phi0[..., None], grid.nl, axis=-1)


def layer_pressure_gradient(phi, h, zb, grid):
    """Face contributions -grad(h phi)_k + [phi grad z]_k of a layered potential.

    ``phi`` is stored on the top interface of each layer; the layer value is
    the mean of its two bounding interfaces, and the bed interface takes the
    value of the bottom layer. Faces whose two neighbouring columns hold less
    than ``grid.dry`` are left at zero.

    Returns:
        (pgx, pgy) with the face shapes of ``grid``.
    """
    delta = grid.delta
    phi_top = phi
    phi_bot = np.concatenate([phi[..., :1], phi[..., :-1]], axis=-1)
    phi_mid = 0.5*(phi_top + phi_bot)

    z_bot = zb[..., None] + np.cumsum(h, axis=-1) - h
    z_top = z_bot + h

    hp = grid.pad(h)
    hphip = grid.pad(h*phi_mid)
    ztp = grid.pad(z_top)
    zbp = grid.pad(z_bot)
    ptp = grid.pad(phi_top)
    pbp = grid.pad(phi_bot)

    result = []
    for dim in (0, 1):
        hL, hR = face_pair(hp, dim)
        qL, qR = face_pair(hphip, dim)
        ztL, ztR = face_pair(ztp, dim)
        zbL, zbR = face_pair(zbp, dim)
        ptL, ptR = face_pair(ptp, dim)
        pbL, pbR = face_pair(pbp, dim)
        pg = (-(qR - qL)
              + 0.5*(ptL + ptR)*(ztR - ztL)
              - 0.5*(pbL + pbR)*(zbR - zbL))/delta
        result.append(np.where(hL + hR > grid.dry, pg, 0.0))
    return tuple(result)


def apply_normal_stress(state, nu, grid, pressure_gradient=None):
    """Add the normal-stress pressure term to the face acceleration ``state.ha``.

    ``pressure_gradient(phi, h, zb, grid) -> (pgx, pgy)`` defaults to
    ``layer_pressure_gradient``. The deviation field only lives for this call.
    """
    if pressure_gradient is None:
        pressure_gradient = layer_pressure_gradient
    phi = normal_stress_deviation(state, nu, grid)
    for ha, pg in zip(state.ha, pressure_gradient(phi, state.h, state.zb, grid)):
        ha += pg
    return state.ha


def tstress_coefficients(h_top, eta, grid, dim):
    """Neighbour weights (a, b, c) of the tangential-stress relaxation along dim.

    a multiplies the downstream neighbour, c the upstream one and b the
    column's own previous iterate.
    """
    delta = grid.delta
    hp = grid.pad(h_top)
    hP = shift(hp, dim, 1)
    hC = shift(hp, dim, 0)
    hM = shift(hp, dim, -1)
    slope = _slope_factor(grad_central(grid.pad(eta), dim, delta))

    a = 0.25*hP**2/delta**2 + slope*hP/delta
    b = 0.25*hP*hC/delta**2
    c = 0.25*hC*hM/delta**2 - slope*hM/delta
    return a, b, c


def _tangential_source(state, grid, dim):
    """Iteration-independent part of the tangential stress along dim."""
    delta = grid.delta
    top = grid.nl - 1
    etax = grad_central(grid.pad(state.eta), dim, delta)
    wp = grid.pad(state.w[..., top])
    up = grid.pad(state.u[dim][..., top])
    hp = grid.pad(state.h[..., top])

    uP, uC, uM = shift(up, dim, 1), shift(up, dim, 0), shift(up, dim, -1)
    hP, hC = shift(hp, dim, 1), shift(hp, dim, 0)

    return (-grad_central(wp, dim, delta)
            + 4.0*(uP - uM)/(2.0*delta)*_slope_factor(etax)
            + (hP*uP - (hP + hC)*uC + hC*uM)/(2.0*delta**2))


def tangential_stress(state, grid, iterations=STRESS_ITERATIONS, tol=None):
    """Top shear du_nu from fixed-point relaxation of the tangential balance.

    Starts from du_nu = 0 and runs ``iterations`` Jacobi passes: every pass
    reads the previous iterate only. With ``tol`` set, relaxation stops early
    once the max-norm update drops below it.

    Returns:
        du_nu, shape (2, nx, ny).
    """
    du_nu = np.zeros((2,) + grid.column_shape)
    for dim in (0, 1):
        source = _tangential_source(state, grid, dim)
        a, b, c = tstress_coefficients(state.h[..., -1], state.eta, grid, dim)
        field = du_nu[dim]
        passes = 0
        change = 0.0
        for _ in range(iterations):
            fp = grid.pad(field)
            new = source + a*shift(fp, dim, 1) + c*shift(fp, dim, -1) - b*field
            change = np.max(np.abs(new - field))
            field = new
            passes += 1
            if tol is not None and change < tol:
                break
        logger.debug("tangential stress dim=%d: %d passes, last update %.3e",
                     dim, passes, change)
        du_nu[dim] = field
    return du_nu


def tangential_stress_residual(du_nu, state, grid):
    """Max-norm of F(du_nu) - du_nu, where F is one relaxation pass."""
    residual = 0.0
    for dim in (0, 1):
        source = _tangential_source(state, grid, dim)
        a, b, c = tstress_coefficients(state.h[..., -1], state.eta, grid, dim)
        fp = grid.pad(du_nu[dim])
        new = source + a*shift(fp, dim, 1) + c*shift(fp, dim, -1) - b*du_nu[dim]
        residual = max(residual, float(np.max(np.abs(new - du_nu[dim]))))
    return residual


def van_der_waals_acceleration(state, hamaker, grid):
    """Disjoining-pressure face acceleration of a thin film.

    a = -A ((2 H_i)^-3 - (2 H_{i-1})^-3) / delta with film thickness
    H = eta - zb, returned h-weighted per layer as (ax, ay).
    """
    film = grid.pad(state.eta - state.zb)
    hf = state.hf
    result = []
    for dim in (0, 1):
        HL, HR = face_pair(film, dim)
        acc = -hamaker*((2.0*HR)**-3 - (2.0*HL)**-3)/grid.delta
        result.append(hf[dim]*acc[..., None])
    return tuple(result)
