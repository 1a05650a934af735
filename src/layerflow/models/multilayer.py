# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import logging

import numpy as np

from layerflow.config import ViscousConfig
from layerflow.grid import LayeredGrid
from layerflow.state import LayeredState
from layerflow.models.viscosity import apply_viscous_term
from layerflow.solvers.horizontal_diffusion import horizontal_diffusion
from layerflow.solvers.surface_stress import (
    apply_normal_stress, tangential_stress, van_der_waals_acceleration,
)
from layerflow.solvers.vertical_diffusion import vertical_diffusion_neumann_neumann

logger = logging.getLogger(__name__)

CONFIG_KEYS = {
    "nu": "diffusivity",
    "D_T": "tracer_diffusivity",
    "surface_stress": "surface_stress_enabled",
    "horizontal_diffusion": "horizontal_diffusion_enabled",
    "top_bc": "top_bc",
    "bottom_bc": "bottom_bc",
    "stress_iterations": "stress_iterations",
    "stress_tol": "stress_tol",
    "hamaker": "hamaker",
    "validate": "validate",
}


class MultilayerViscousModel:
    """Viscous film on a flat bed, discretised in nl layers.

    The free surface carries a cosine perturbation of wavelength ``length``.
    Each step applies, in order:
        - the tangential surface stress, giving the top condition du/dz;
        - vertical (and optionally horizontal) viscosity on u;
        - tracer diffusion with zero flux through surface and bed;
        - the acceleration event: normal surface stress and Van der Waals
          terms accumulated in the face acceleration, then applied to u.

    Layer heights are held fixed: advection and the hydrostatic pressure
    belong to the host solver.
    """

    def __init__(self, params):
        if params.get("nl", 4) < 1:
            raise ValueError(f"nl must be >= 1, got {params.get('nl')}")
        if params.get("depth", 0.05) <= 0:
            raise ValueError(f"depth must be positive, got {params.get('depth')}")
        if abs(params.get("amplitude", 0.0)) >= params.get("depth", 0.05):
            raise ValueError("amplitude must be smaller than depth (film would dry out)")

        self.params = params
        nx = params.get("nx", 64)
        self.length = params.get("length", 1.0)
        self.depth = params.get("depth", 0.05)
        self.amplitude = params.get("amplitude", 0.005)
        self.shear = params.get("shear", 0.0)
        self.lambda_b = params.get("lambda_b", 0.0)
        self.u_b = params.get("u_b", 0.0)

        self.grid = LayeredGrid(
            nx=nx, ny=params.get("ny", 1), nl=params.get("nl", 4),
            delta=self.length / nx, dry=params.get("dry", 1e-6),
            boundary=params.get("boundary", "periodic"),
        )
        self.config = ViscousConfig(**{
            CONFIG_KEYS[k]: v for k, v in params.items() if k in CONFIG_KEYS
        })

        # Explicit horizontal diffusion limit; the vertical solve is implicit.
        dt_max = params.get("dt_max", 1e-3)
        D_max = max(self.config.diffusivity, self.config.tracer_diffusivity)
        if D_max > 0:
            self.dt = min(dt_max, 0.25 * self.grid.delta**2 / D_max)
        else:
            self.dt = dt_max

    def get_initial_condition(self):
        """Cosine free surface, equal layers, linear shear and a two-layer tracer."""
        g = self.grid
        state = LayeredState.zeros(g)

        kx = 2 * np.pi * g.x / self.length
        state.eta[:] = (self.depth + self.amplitude * np.cos(kx))[:, None]
        state.h[:] = (state.eta / g.nl)[..., None]

        z_mid = np.cumsum(state.h, axis=-1) - 0.5 * state.h
        state.u[0] = self.shear * z_mid / self.depth
        state.T[:] = np.where(z_mid < 0.5 * state.eta[..., None], 1.0, 0.0)

        state.u_b[:] = self.u_b
        state.lambda_b[:] = self.lambda_b
        state.update_face_heights()
        return state

    def viscous_term(self, state, dt):
        cfg = self.config
        g = self.grid

        if cfg.surface_stress_enabled:
            state.dut[...] = tangential_stress(state, g, cfg.stress_iterations,
                                               cfg.stress_tol)

        apply_viscous_term(state, cfg, dt)

        D_T = cfg.tracer_diffusivity
        if D_T > 0:
            vertical_diffusion_neumann_neumann(state.h, state.T, dt, D_T, 0.0, 0.0,
                                               validate=cfg.validate,
                                               pivot_eps=cfg.pivot_eps)
            if cfg.horizontal_diffusion_enabled:
                horizontal_diffusion(state.T, state.h, D_T, dt, g, dst=0.0, zb=state.zb)

    def acceleration(self, state):
        cfg = self.config
        if cfg.surface_stress_enabled:
            apply_normal_stress(state, cfg.diffusivity, self.grid)
        if cfg.hamaker > 0:
            for ha, a in zip(state.ha, van_der_waals_acceleration(state, cfg.hamaker,
                                                                  self.grid)):
                ha += a

    def step(self, state, t):
        """Advance one timestep, in place. Returns the state."""
        dt = self.dt
        self.viscous_term(state, dt)
        state.reset_acceleration()
        self.acceleration(state)
        state.u += dt * state.centre_acceleration()
        return state
