# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT


import numpy as np


def shift(padded, dim, offset):
    """Interior view of a padded field, displaced by ``offset`` cells along dim.

    ``padded`` comes from ``LayeredGrid.pad``; offset is -1, 0 or 1.
    """
    nx = padded.shape[0] - 2
    ny = padded.shape[1] - 2
    ox, oy = (offset, 0) if dim == 0 else (0, offset)
    return padded[1 + ox:1 + ox + nx, 1 + oy:1 + oy + ny]


def grad_central(padded, dim, dx):
    return (shift(padded, dim, 1) - shift(padded, dim, -1)) / (2*dx)


def second_difference(padded, dim):
    return shift(padded, dim, 1) - 2*shift(padded, dim, 0) + shift(padded, dim, -1)


def laplacian(padded, dx):
    """5-point horizontal Laplacian."""
    return (second_difference(padded, 0) + second_difference(padded, 1)) / dx**2


def face_pair(padded, dim):
    """(left, right) neighbours of every face normal to dim.

    For dim=0 both arrays have shape (nx+1, ny, ...), for dim=1
    (nx, ny+1, ...).
    """
    nx = padded.shape[0] - 2
    ny = padded.shape[1] - 2
    if dim == 0:
        return padded[0:nx + 1, 1:ny + 1], padded[1:nx + 2, 1:ny + 1]
    return padded[1:nx + 1, 0:ny + 1], padded[1:nx + 1, 1:ny + 2]


def face_to_centre(face, dim):
    """Sum of the two faces bounding each cell along dim."""
    if dim == 0:
        return face[:-1] + face[1:]
    return face[:, :-1] + face[:, 1:]
