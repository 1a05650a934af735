# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

# tests/test_cli.py
import json
import logging
import os

from layerflow.cli import main
from layerflow.sweep_utils import load_summary


def _close_log_handlers():
    logger = logging.getLogger("layerflow")
    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()


def test_cli_runs_small_sweep(tmp_path, capsys):
    outdir = str(tmp_path / "out")
    try:
        main(["--nu", "0.001", "--lambda-b", "0.0", "0.01", "-nl", "2",
              "--nx", "8", "--steps", "5", "--workers", "1", "--outdir", outdir])
    finally:
        _close_log_handlers()

    rows = load_summary(os.path.join(outdir, "summary.csv"))
    assert len(rows) == 2
    assert all(r["nl"] == 2 for r in rows)
    assert os.path.exists(os.path.join(outdir, "sweep.log"))
    assert "Results saved" in capsys.readouterr().out


def test_cli_config_file_overrides(tmp_path):
    config = tmp_path / "extra.json"
    config.write_text(json.dumps({"surface_stress": False, "sample_every": 1}))
    outdir = str(tmp_path / "out")
    try:
        main(["--nu", "0.001", "-nl", "2", "--nx", "8", "--steps", "3",
              "--workers", "1", "--config", str(config), "--outdir", outdir])
    finally:
        _close_log_handlers()

    with open(os.path.join(outdir, "nu0.001_lb0.0_nl2.json")) as f:
        result = json.load(f)
    assert result["dut_max"] == 0.0
    assert len(result["t"]) == 4
