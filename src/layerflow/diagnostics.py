# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

# src/layerflow/diagnostics.py
import numpy as np


def column_content(h, s):
    """Depth-integrated scalar sum_l h_l s_l of every column."""
    return np.sum(h * s, axis=-1)


class RunDiagnostics:
    """Accumulate and summarise per-step diagnostics of a layered run.

    Usage:
        diag = RunDiagnostics(grid)
        for each timestep:
            diag.accumulate(state, t)
        result = diag.finalize()
    """

    def __init__(self, grid):
        self.grid = grid
        self.samples = []

    def accumulate(self, state, t):
        """Store one snapshot."""
        area = self.grid.delta**2
        speed_sq = state.u[0]**2 + state.u[1]**2

        self.samples.append({
            "t": t,
            "volume": float(np.sum(state.column_depth()) * area),
            "tracer": float(np.sum(column_content(state.h, state.T)) * area),
            "kinetic_energy": float(0.5 * np.sum(state.h * speed_sq) * area),
            "surface_speed_max": float(np.sqrt(np.max(speed_sq[..., -1]))),
            "dut_max": float(np.max(np.abs(state.dut))),
            "u_profile": state.u[0].mean(axis=(0, 1)),
            "T_profile": state.T.mean(axis=(0, 1)),
            "z_profile": (np.cumsum(state.h, axis=-1) - 0.5 * state.h).mean(axis=(0, 1)),
            "finite": bool(np.all(np.isfinite(state.u)) and np.all(np.isfinite(state.T))),
        })

    def finalize(self):
        """Compute run diagnostics from accumulated snapshots."""
        tracer = np.array([s["tracer"] for s in self.samples])
        ref = max(abs(tracer[0]), 1e-300)
        tracer_drift = float(np.max(np.abs(tracer - tracer[0])) / ref)

        last = self.samples[-1]
        return {
            "t": [s["t"] for s in self.samples],
            "tracer": tracer.tolist(),
            "tracer_drift": tracer_drift,
            "volume": [s["volume"] for s in self.samples],
            "kinetic_energy": [s["kinetic_energy"] for s in self.samples],
            "surface_speed_max": [s["surface_speed_max"] for s in self.samples],
            "dut_max": max(s["dut_max"] for s in self.samples),
            "finite": all(s["finite"] for s in self.samples),
            "profiles": {
                "u": last["u_profile"].tolist(),
                "T": last["T_profile"].tolist(),
                "z": last["z_profile"].tolist(),
            },
        }
