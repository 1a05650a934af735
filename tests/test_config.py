# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import pytest
from layerflow.config import ViscousConfig, save_config, load_config


def test_defaults():
    """Viscosity is off by default, with a Navier bottom and 10 stress passes."""
    c = ViscousConfig()
    assert c.diffusivity == 0.0
    assert c.surface_stress_enabled is True
    assert c.horizontal_diffusion_enabled is False
    assert c.top_bc == "neumann"
    assert c.bottom_bc == "navier"
    assert c.stress_iterations == 10
    assert c.stress_tol is None


@pytest.mark.parametrize("options", [
    dict(diffusivity=-1.0),
    dict(top_bc="dirichlet"),
    dict(bottom_bc="robin"),
    dict(stress_iterations=-1),
    dict(stress_tol=0.0),
    dict(hamaker=-1e-10),
    dict(viscosity=1.0),
])
def test_rejects_bad_options(options):
    with pytest.raises(ValueError):
        ViscousConfig(**options)


def test_save_and_load_roundtrip(tmp_path):
    c = ViscousConfig(diffusivity=0.01, bottom_bc="neumann", stress_tol=1e-8)
    path = tmp_path / "config.json"
    save_config(c, str(path))
    loaded = load_config(str(path))
    assert loaded.to_dict() == c.to_dict()
