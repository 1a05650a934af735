# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import numpy as np

BOUNDARIES = ("neumann", "periodic")


class LayeredGrid:
    """Regular horizontal grid carrying a stack of nl layers per column.

    Layered fields have shape (nx, ny, nl), column fields (nx, ny). Vector
    fields carry a leading component axis of length 2. Face fields are pairs
    (fx, fy) of shapes (nx+1, ny, nl) and (nx, ny+1, nl).

    A one-dimensional setup is simply ny=1: every y-difference then vanishes.

    Attributes:
        nx, ny: number of horizontal cells
        nl: number of layers, bottom (l=0) to top (l=nl-1)
        delta: horizontal cell size
        dry: height below which a layer is treated as dry
        boundary: "neumann" (zero-gradient ghosts) or "periodic"
        x, y: cell-centre coordinates, shapes (nx,) and (ny,)
    """

    def __init__(self, nx, ny, nl, delta, dry=1e-6, boundary="neumann"):
        if nx < 1 or ny < 1:
            raise ValueError(f"nx and ny must be >= 1, got nx={nx}, ny={ny}")
        if nl < 1:
            raise ValueError(f"nl must be >= 1, got {nl}")
        if delta <= 0:
            raise ValueError(f"delta must be positive, got {delta}")
        if dry < 0:
            raise ValueError(f"dry must be non-negative, got {dry}")
        if boundary not in BOUNDARIES:
            raise ValueError(f"Unknown boundary: {boundary!r}")

        self.nx = int(nx)
        self.ny = int(ny)
        self.nl = int(nl)
        self.delta = float(delta)
        self.dry = float(dry)
        self.boundary = boundary

        self.x = (np.arange(self.nx) + 0.5) * self.delta
        self.y = (np.arange(self.ny) + 0.5) * self.delta

    @property
    def column_shape(self):
        return (self.nx, self.ny)

    @property
    def layer_shape(self):
        return (self.nx, self.ny, self.nl)

    def face_shapes(self):
        return (self.nx + 1, self.ny, self.nl), (self.nx, self.ny + 1, self.nl)

    def pad(self, field):
        """Return field with one ghost cell on each horizontal side.

        The first two axes of ``field`` are horizontal; trailing axes (layers)
        are left untouched.
        """
        width = [(1, 1), (1, 1)] + [(0, 0)] * (field.ndim - 2)
        mode = "edge" if self.boundary == "neumann" else "wrap"
        return np.pad(field, width, mode=mode)
