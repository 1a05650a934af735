# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Debug-mode checks for the column solvers.

These never change the arithmetic of a solve; they only raise when the inputs
or the elimination pivots are outside the range where the tridiagonal system
is known to be well posed.
"""

import numpy as np


class DegenerateColumnError(ValueError):
    """A column system is not solvable as assembled."""


def check_column_heights(h):
    h = np.asarray(h)
    if h.ndim == 0 or h.shape[-1] < 1:
        raise DegenerateColumnError("columns need at least one layer (nl >= 1)")
    if not np.all(np.isfinite(h)):
        raise DegenerateColumnError("layer heights contain non-finite values")
    if np.any(h < 0):
        idx = np.unravel_index(np.argmin(h), h.shape)
        raise DegenerateColumnError(f"negative layer height {h[idx]:g} at {idx}")


def check_pivot(min_pivot, eps):
    if not min_pivot >= eps:
        raise DegenerateColumnError(
            f"tridiagonal pivot {min_pivot:g} is below pivot_eps={eps:g}"
        )
