# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import numpy as np
from layerflow.grid import LayeredGrid
from layerflow.solvers.horizontal_diffusion import horizontal_diffusion, slope_correction
from layerflow.solvers.operators import laplacian


def test_zero_diffusivity_is_noop():
    grid = LayeredGrid(nx=8, ny=1, nl=3, delta=0.1)
    rng = np.random.default_rng(0)
    s = rng.uniform(size=grid.layer_shape)
    h = rng.uniform(0.1, 1.0, grid.layer_shape)
    expected = s.copy()
    horizontal_diffusion(s, h, 0.0, 0.01, grid, dst=1.0)
    assert np.array_equal(s, expected)


def test_single_flat_layer_is_explicit_heat_step():
    """One flat layer on a periodic grid: a cosine mode decays by the FTCS factor."""
    nx, delta, D, dt = 32, 0.1, 0.5, 0.004
    grid = LayeredGrid(nx=nx, ny=1, nl=1, delta=delta, boundary="periodic")
    k = 2 * np.pi / (nx * delta)
    s = np.cos(k * grid.x)[:, None, None].copy()
    h = np.ones(grid.layer_shape)
    horizontal_diffusion(s, h, D, dt, grid)
    factor = 1 - D * dt * (2 - 2 * np.cos(k * delta)) / delta**2
    assert np.allclose(s[:, 0, 0], factor * np.cos(k * grid.x), atol=1e-13)


def test_flat_layers_conserve_total_on_periodic_grid():
    grid = LayeredGrid(nx=16, ny=12, nl=3, delta=0.2, boundary="periodic")
    rng = np.random.default_rng(1)
    s = rng.uniform(size=grid.layer_shape)
    h = np.full(grid.layer_shape, 0.5)
    before = s.sum()
    horizontal_diffusion(s, h, 0.1, 0.01, grid)
    assert np.isclose(s.sum(), before, rtol=1e-12)


def test_vertically_uniform_scalar_gets_bulk_term_only():
    """If s does not vary between layers, slope terms vanish even on sloped layers."""
    grid = LayeredGrid(nx=20, ny=1, nl=4, delta=0.05)
    h = (0.2 + 0.1 * np.sin(grid.x))[:, None, None] * np.ones(grid.layer_shape)
    profile = np.exp(-((grid.x - 0.5) / 0.2) ** 2)
    s = np.repeat(profile[:, None, None], 4, axis=-1) * np.ones(grid.layer_shape)
    zb = 0.05 * grid.x[:, None]

    D, dt = 0.01, 0.01
    expected = s + dt * D * laplacian(grid.pad(s), grid.delta)
    horizontal_diffusion(s, h, D, dt, grid, dst=0.0, zb=zb)
    assert np.allclose(s, expected, rtol=1e-13, atol=1e-15)


def test_surface_flux_only_touches_top_layer():
    """s = 0 with a surface flux: only the top layer receives the slope correction."""
    grid = LayeredGrid(nx=16, ny=1, nl=3, delta=0.1)
    h = (0.3 + 0.1 * np.cos(2 * grid.x))[:, None, None] * np.ones(grid.layer_shape)
    s = np.zeros(grid.layer_shape)
    horizontal_diffusion(s, h, 0.2, 0.01, grid, dst=1.5)
    assert np.all(s[..., :-1] == 0.0)
    assert np.any(s[..., -1] != 0.0)


def test_dry_cells_are_skipped():
    grid = LayeredGrid(nx=8, ny=1, nl=2, delta=0.1, dry=1e-3)
    h = np.full(grid.layer_shape, 0.5)
    h[3] = 0.0
    s = np.zeros(grid.layer_shape)
    s[4] = 1.0
    horizontal_diffusion(s, h, 0.1, 0.01, grid)
    assert np.all(s[3] == 0.0)
    assert np.all(np.isfinite(s))


def test_two_dimensional_field_is_symmetric():
    """A centred bump on a square grid diffuses identically along x and y."""
    grid = LayeredGrid(nx=9, ny=9, nl=2, delta=0.1)
    s = np.zeros(grid.layer_shape)
    s[4, 4, :] = 1.0
    h = np.full(grid.layer_shape, 0.4)
    horizontal_diffusion(s, h, 0.05, 0.02, grid)
    assert np.allclose(s, np.transpose(s, (1, 0, 2)))
    assert s[4, 4, 0] < 1.0
    assert s[3, 4, 0] > 0.0


def test_layers_diffuse_independently():
    """Flat layers: a bump in the bottom layer leaves the empty top layer untouched."""
    grid = LayeredGrid(nx=5, ny=1, nl=2, delta=0.1, boundary="periodic")
    h = np.full(grid.layer_shape, 0.2)
    s = np.zeros(grid.layer_shape)
    s[2, 0, 0] = 1.0
    D, dt = 0.5, 0.004
    horizontal_diffusion(s, h, D, dt, grid)
    r = D * dt / grid.delta**2
    assert np.allclose(s[:, 0, 0], [0.0, r, 1 - 2 * r, r, 0.0])
    assert np.all(s[..., 1] == 0.0)


def _slope_stencil(s, h, zb, dst, i, l, delta):
    """d2sz of a 1-D (ny = 1) column stack at interior cell i, layer l."""
    nl = s.shape[-1]
    zl = zb + h[:, :l].sum(axis=-1)
    dzl = zl[i + 1] - zl[i - 1]
    d2zl = zl[i + 1] - 2 * zl[i] + zl[i - 1]
    dh = h[i + 1, l] - h[i - 1, l]
    d2h = h[i + 1, l] - 2 * h[i, l] + h[i - 1, l]
    if l < nl - 1:
        b = (s[i + 1, l] - s[i - 1, l] - s[i + 1, l + 1] + s[i - 1, l + 1]) * dh / 4
        b += (s[i, l] - s[i, l + 1]) * d2h / 2
        if l > 0:
            b -= (s[i + 1, l + 1] - s[i - 1, l + 1]
                  - s[i + 1, l - 1] + s[i - 1, l - 1]) * dzl / 4
            b -= (s[i, l + 1] - s[i, l - 1]) * d2zl / 2
    else:
        ghost = s[:, l] + dst * h[:, l]
        b = (-dst[i + 1] * h[i + 1, l] + dst[i - 1] * h[i - 1, l]) * dh / 4
        b += -dst[i] * h[i, l] * d2h / 2
        b -= (ghost[i + 1] - ghost[i - 1] - s[i + 1, l - 1] + s[i - 1, l - 1]) * dzl / 4
        b -= (ghost[i] - s[i, l - 1]) * d2zl / 2
    return b / delta**2


def test_slope_correction_matches_stencil_on_sloped_layers():
    """Three sloped layers on a sloped bed with a vertically varying scalar."""
    grid = LayeredGrid(nx=7, ny=1, nl=3, delta=0.1)
    x = grid.x
    h = np.stack([0.2 + 0.05 * x**2, 0.3 - 0.1 * x, 0.15 + 0.04 * np.sin(3 * x)],
                 axis=-1)
    s = np.stack([np.cos(x), 0.5 * x**2, 1.0 - x], axis=-1)
    zb = 0.1 * x + 0.02 * x**2
    dst = 0.7 + 0.3 * x

    d2sz = slope_correction(s[:, None], h[:, None], grid, dst=dst[:, None],
                            zb=zb[:, None])
    assert d2sz.shape == grid.layer_shape
    for i in range(1, grid.nx - 1):
        for l in range(grid.nl):
            expected = _slope_stencil(s, h, zb, dst, i, l, grid.delta)
            assert np.isclose(d2sz[i, 0, l], expected, rtol=1e-12, atol=1e-12)
    # the running base elevation matters above the bed layer
    flat_bed = slope_correction(s[:, None], h[:, None], grid, dst=dst[:, None])
    assert not np.allclose(flat_bed[1:-1, 0, 1:], d2sz[1:-1, 0, 1:])


def test_increment_combines_bulk_and_slope_terms():
    grid = LayeredGrid(nx=6, ny=2, nl=3, delta=0.2)
    rng = np.random.default_rng(7)
    h = rng.uniform(0.1, 0.3, grid.layer_shape)
    s = rng.uniform(-1.0, 1.0, grid.layer_shape)
    zb = rng.uniform(0.0, 0.05, grid.column_shape)
    D, dt = 0.05, 0.01
    expected = (s + dt * D * laplacian(grid.pad(s), grid.delta)
                + dt * D * slope_correction(s, h, grid, 0.4, zb) / h)
    horizontal_diffusion(s, h, D, dt, grid, dst=0.4, zb=zb)
    assert np.allclose(s, expected, rtol=1e-13, atol=1e-15)
