# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Vertical viscous friction between layers.

Vertical viscosity acts on the velocity just after advection, before the
acceleration of the current step. To keep the pressure gradient in balance,
the acceleration of the previous step is first applied, the viscous solve is
done and the same acceleration is then taken off again.

By default the viscosity is zero and the step does nothing.
"""

import logging

import numpy as np

from layerflow.solvers.vertical_diffusion import (
    vertical_diffusion_neumann_neumann, vertical_diffusion_neumann_navier,
)
from layerflow.solvers.horizontal_diffusion import horizontal_diffusion

logger = logging.getLogger(__name__)


def apply_viscous_term(state, config, dt):
    """Advance ``state.u`` by one viscous step, in place.

    Per velocity component, the top condition is du/dz = state.dut
    (or 0 with ``top_bc="free_slip"``); the bottom condition is Navier slip
    u = u_b + lambda_b du/dz, or du/dz = dub with ``bottom_bc="neumann"``.
    """
    nu = config.diffusivity
    if nu <= 0.0:
        return state.u

    grid = state.grid
    if config.top_bc == "free_slip":
        dut = np.zeros_like(state.dut)
    else:
        dut = state.dut

    accel = dt*state.centre_acceleration()
    state.u += accel

    for d in (0, 1):
        if config.bottom_bc == "navier":
            vertical_diffusion_neumann_navier(
                state.h, state.u[d], dt, nu, dut[d], state.u_b[d], state.lambda_b[d],
                validate=config.validate, pivot_eps=config.pivot_eps,
            )
        else:
            vertical_diffusion_neumann_neumann(
                state.h, state.u[d], dt, nu, dut[d], state.dub[d],
                validate=config.validate, pivot_eps=config.pivot_eps,
            )

    if config.horizontal_diffusion_enabled:
        dup = dut.copy()
        for d in (0, 1):
            horizontal_diffusion(state.u[d], state.h, nu, dt, grid, dst=dup[d], zb=state.zb)

    state.u -= accel
    logger.debug("viscous term: nu=%g dt=%g bottom=%s", nu, dt, config.bottom_bc)
    return state.u
