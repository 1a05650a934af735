# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import numpy as np
from layerflow.grid import LayeredGrid
from layerflow.state import LayeredState, face_heights


def test_zeros_shapes():
    g = LayeredGrid(nx=5, ny=3, nl=2, delta=1.0)
    s = LayeredState.zeros(g)
    assert s.h.shape == (5, 3, 2)
    assert s.u.shape == (2, 5, 3, 2)
    assert s.eta.shape == (5, 3)
    assert s.dut.shape == (2, 5, 3)
    assert s.ha[0].shape == (6, 3, 2)
    assert s.ha[1].shape == (5, 4, 2)


def test_face_heights_average_neighbours():
    g = LayeredGrid(nx=3, ny=1, nl=1, delta=1.0)
    h = np.array([1.0, 3.0, 5.0]).reshape(3, 1, 1)
    hfx, hfy = face_heights(h, g)
    assert np.allclose(hfx[:, 0, 0], [1.0, 2.0, 4.0, 5.0])
    assert np.allclose(hfy[:, :, 0], [[1.0, 1.0], [3.0, 3.0], [5.0, 5.0]])


def test_centre_acceleration():
    """u increment rate is (ha[f] + ha[f+1]) / (hf[f] + hf[f+1] + dry)."""
    g = LayeredGrid(nx=2, ny=1, nl=1, delta=1.0, dry=0.0)
    s = LayeredState.zeros(g)
    s.h[:] = 1.0
    s.update_face_heights()
    s.ha[0][:, 0, 0] = [0.0, 2.0, 4.0]
    acc = s.centre_acceleration()
    assert np.allclose(acc[0, :, 0, 0], [1.0, 3.0])
    assert np.allclose(acc[1], 0.0)


def test_copy_is_independent():
    g = LayeredGrid(nx=2, ny=2, nl=2, delta=1.0)
    s = LayeredState.zeros(g)
    c = s.copy()
    c.u[0] += 1.0
    c.ha[0] += 1.0
    assert np.all(s.u == 0.0)
    assert np.all(s.ha[0] == 0.0)


def test_reset_acceleration():
    g = LayeredGrid(nx=2, ny=2, nl=2, delta=1.0)
    s = LayeredState.zeros(g)
    s.ha[1][...] = 3.0
    s.reset_acceleration()
    assert np.all(s.ha[1] == 0.0)


def test_column_depth():
    g = LayeredGrid(nx=2, ny=1, nl=3, delta=1.0)
    s = LayeredState.zeros(g)
    s.h[:] = [0.1, 0.2, 0.3]
    assert np.allclose(s.column_depth(), 0.6)
