# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import numpy as np
from numba import njit


@njit(cache=True, error_model="numpy")
def thomas_solve_inplace(a, b, c, rhs, x):
    """Thomas algorithm working directly on caller-owned buffers.

    Forward elimination overwrites ``b`` (the pivots) and ``rhs``; the
    solution is written to ``x``. No pivot is checked: a zero pivot yields
    non-finite output.

    Args:
        a: lower diagonal, length N. a[0] is unused.
        b: main diagonal, length N. Overwritten with the pivots.
        c: upper diagonal, length N. c[-1] is unused.
        rhs: right-hand side, length N. Overwritten.
        x: output, length N.
    """
    N = len(b)
    for i in range(1, N):
        b[i] -= a[i] * c[i - 1] / b[i - 1]
        rhs[i] -= a[i] * rhs[i - 1] / b[i - 1]
    x[N - 1] = rhs[N - 1] / b[N - 1]
    for i in range(N - 2, -1, -1):
        x[i] = (rhs[i] - c[i] * x[i + 1]) / b[i]


@njit(cache=True, error_model="numpy")
def thomas_solve(a, b, c, d):
    """Solve tridiagonal system Ax = d using the Thomas algorithm.

    Args:
        a: lower diagonal, length N. a[0] is unused.
        b: main diagonal, length N.
        c: upper diagonal, length N. c[-1] is unused.
        d: right-hand side, length N.

    Returns:
        x: solution, length N.
    """
    x = np.empty(len(b))
    thomas_solve_inplace(a, b.copy(), c, d.copy(), x)
    return x
