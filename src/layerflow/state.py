# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import numpy as np

from layerflow.solvers.operators import face_pair, face_to_centre

FIELDS = ("h", "u", "w", "eta", "zb", "T", "dut", "u_b", "lambda_b", "dub")


def face_heights(h, grid):
    """Face layer heights: mean of the two neighbouring columns, (hfx, hfy)."""
    hp = grid.pad(h)
    return tuple(0.5*(left + right) for left, right in (face_pair(hp, d) for d in (0, 1)))


class LayeredState:
    """Fields of a layered free-surface flow seen by the viscous solvers.

    Attributes:
        h: layer heights, (nx, ny, nl)
        u: horizontal velocity, (2, nx, ny, nl)
        w: vertical velocity, (nx, ny, nl)
        eta: free-surface elevation, (nx, ny)
        zb: bed elevation, (nx, ny)
        T: tracer, (nx, ny, nl)
        dut: top velocity flux du/dz, (2, nx, ny)
        u_b: bottom slip velocity, (2, nx, ny)
        lambda_b: bottom slip length, (2, nx, ny)
        dub: bottom velocity flux du/dz (Neumann bottom only), (2, nx, ny)
        ha: h-weighted face acceleration, pair (hax, hay)
        hf: face heights, pair (hfx, hfy)
    """

    def __init__(self, grid, **fields):
        self.grid = grid
        for name in FIELDS:
            setattr(self, name, fields[name])
        self.hf = fields.get("hf") or face_heights(self.h, grid)
        self.ha = fields.get("ha") or tuple(np.zeros(s) for s in grid.face_shapes())

    @classmethod
    def zeros(cls, grid):
        layers = grid.layer_shape
        columns = grid.column_shape
        return cls(
            grid,
            h=np.zeros(layers),
            u=np.zeros((2,) + layers),
            w=np.zeros(layers),
            eta=np.zeros(columns),
            zb=np.zeros(columns),
            T=np.zeros(layers),
            dut=np.zeros((2,) + columns),
            u_b=np.zeros((2,) + columns),
            lambda_b=np.zeros((2,) + columns),
            dub=np.zeros((2,) + columns),
        )

    def update_face_heights(self):
        self.hf = face_heights(self.h, self.grid)

    def reset_acceleration(self):
        for ha in self.ha:
            ha[...] = 0.0

    def centre_acceleration(self):
        """Cell-centred velocity increment rate, shape (2, nx, ny, nl)."""
        dry = self.grid.dry
        return np.stack([
            face_to_centre(self.ha[d], d) / (face_to_centre(self.hf[d], d) + dry)
            for d in (0, 1)
        ])

    def column_depth(self):
        return self.h.sum(axis=-1)

    def copy(self):
        fields = {name: getattr(self, name).copy() for name in FIELDS}
        fields["hf"] = tuple(f.copy() for f in self.hf)
        fields["ha"] = tuple(f.copy() for f in self.ha)
        return LayeredState(self.grid, **fields)

    def as_dict(self):
        d = {name: getattr(self, name) for name in FIELDS}
        d["hax"], d["hay"] = self.ha
        d["hfx"], d["hfy"] = self.hf
        return d
