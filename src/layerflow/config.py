# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Run-time options of the viscous layer solvers."""

import json

TOP_BCS = ("neumann", "free_slip")
BOTTOM_BCS = ("navier", "neumann")


class ViscousConfig:
    """Options shared by the vertical/horizontal diffusion and stress solvers.

    Attributes:
        diffusivity: kinematic viscosity nu. 0 disables the viscous term.
        tracer_diffusivity: diffusion coefficient of the tracer.
        surface_stress_enabled: compute the free-surface viscous stresses.
        horizontal_diffusion_enabled: add explicit horizontal diffusion.
        top_bc: "neumann" (prescribed du/dz) or "free_slip" (du/dz = 0).
        bottom_bc: "navier" (u = u_b + lambda_b du/dz) or "neumann".
        stress_iterations: number of tangential-stress relaxation passes.
        stress_tol: optional early-exit tolerance for the relaxation.
        hamaker: Hamaker constant of the Van der Waals acceleration (0 = off).
        validate: check heights and pivots of every column solve.
        pivot_eps: smallest acceptable |pivot| when validating.
    """

    DEFAULTS = {
        "diffusivity": 0.0,
        "tracer_diffusivity": 0.0,
        "surface_stress_enabled": True,
        "horizontal_diffusion_enabled": False,
        "top_bc": "neumann",
        "bottom_bc": "navier",
        "stress_iterations": 10,
        "stress_tol": None,
        "hamaker": 0.0,
        "validate": False,
        "pivot_eps": 1e-12,
    }

    def __init__(self, **options):
        unknown = set(options) - set(self.DEFAULTS)
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        values = dict(self.DEFAULTS, **options)

        if values["diffusivity"] < 0:
            raise ValueError(f"diffusivity must be non-negative, got {values['diffusivity']}")
        if values["tracer_diffusivity"] < 0:
            raise ValueError(
                f"tracer_diffusivity must be non-negative, got {values['tracer_diffusivity']}"
            )
        if values["top_bc"] not in TOP_BCS:
            raise ValueError(f"Unknown top_bc: {values['top_bc']!r}")
        if values["bottom_bc"] not in BOTTOM_BCS:
            raise ValueError(f"Unknown bottom_bc: {values['bottom_bc']!r}")
        if values["stress_iterations"] < 0:
            raise ValueError(
                f"stress_iterations must be >= 0, got {values['stress_iterations']}"
            )
        if values["stress_tol"] is not None and values["stress_tol"] <= 0:
            raise ValueError(f"stress_tol must be positive, got {values['stress_tol']}")
        if values["hamaker"] < 0:
            raise ValueError(f"hamaker must be non-negative, got {values['hamaker']}")

        self.diffusivity = float(values["diffusivity"])
        self.tracer_diffusivity = float(values["tracer_diffusivity"])
        self.surface_stress_enabled = bool(values["surface_stress_enabled"])
        self.horizontal_diffusion_enabled = bool(values["horizontal_diffusion_enabled"])
        self.top_bc = values["top_bc"]
        self.bottom_bc = values["bottom_bc"]
        self.stress_iterations = int(values["stress_iterations"])
        self.stress_tol = values["stress_tol"]
        self.hamaker = float(values["hamaker"])
        self.validate = bool(values["validate"])
        self.pivot_eps = float(values["pivot_eps"])

    @classmethod
    def from_dict(cls, d):
        return cls(**d)

    def to_dict(self):
        return {k: getattr(self, k) for k in self.DEFAULTS}

    def __repr__(self):
        items = ", ".join(f"{k}={v!r}" for k, v in self.to_dict().items())
        return f"ViscousConfig({items})"


def save_config(config, path):
    with open(path, "w") as f:
        json.dump(config.to_dict(), f, indent=2)


def load_config(path):
    with open(path, "r") as f:
        return ViscousConfig.from_dict(json.load(f))
