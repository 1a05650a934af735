# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import numpy as np
import pytest
from layerflow.grid import LayeredGrid


def test_cell_centres():
    """Cell centres sit half a cell from the origin."""
    g = LayeredGrid(nx=4, ny=2, nl=3, delta=0.5)
    assert np.allclose(g.x, [0.25, 0.75, 1.25, 1.75])
    assert np.allclose(g.y, [0.25, 0.75])


def test_shapes():
    g = LayeredGrid(nx=5, ny=3, nl=4, delta=1.0)
    assert g.layer_shape == (5, 3, 4)
    assert g.column_shape == (5, 3)
    assert g.face_shapes() == ((6, 3, 4), (5, 4, 4))


def test_pad_neumann_copies_edges():
    g = LayeredGrid(nx=3, ny=1, nl=2, delta=1.0)
    f = np.arange(6, dtype=float).reshape(3, 1, 2)
    p = g.pad(f)
    assert p.shape == (5, 3, 2)
    assert np.array_equal(p[0, 1], f[0, 0])
    assert np.array_equal(p[-1, 1], f[-1, 0])
    assert np.array_equal(p[1:-1, 0], f[:, 0])


def test_pad_periodic_wraps():
    g = LayeredGrid(nx=4, ny=1, nl=1, delta=1.0, boundary="periodic")
    f = np.arange(4, dtype=float).reshape(4, 1)
    p = g.pad(f)
    assert p[0, 1] == 3.0
    assert p[-1, 1] == 0.0


@pytest.mark.parametrize("kwargs", [
    dict(nx=0, ny=1, nl=1, delta=1.0),
    dict(nx=4, ny=1, nl=0, delta=1.0),
    dict(nx=4, ny=1, nl=2, delta=0.0),
    dict(nx=4, ny=1, nl=2, delta=1.0, dry=-1.0),
    dict(nx=4, ny=1, nl=2, delta=1.0, boundary="reflect"),
])
def test_grid_rejects_bad_parameters(kwargs):
    with pytest.raises(ValueError):
        LayeredGrid(**kwargs)
