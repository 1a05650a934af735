# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Shared utilities for sweep scripts: save/load results, logging, summary tables."""

import csv
import logging
import os

from layerflow.io import save_run


def save_sweep_results(results, outdir):
    """Save per-case JSON files and a summary CSV.

    Args:
        results: list of result dicts from single_run.
        outdir: output directory path.

    Returns:
        list of summary row dicts.
    """
    os.makedirs(outdir, exist_ok=True)
    summary_rows = []

    for r in results:
        p = r["params"]
        fname = f"nu{p['nu']}_lb{p['lambda_b']}_nl{p['nl']}.json"
        save_run(r, os.path.join(outdir, fname))

        summary_rows.append({
            "nu": p["nu"],
            "lambda_b": p["lambda_b"],
            "nl": p["nl"],
            "finite": r["finite"],
            "tracer_drift": r["tracer_drift"],
            "kinetic_energy": r["kinetic_energy"][-1],
            "dut_max": r["dut_max"],
        })

    # Write summary CSV
    if summary_rows:
        csv_path = os.path.join(outdir, "summary.csv")
        with open(csv_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=summary_rows[0].keys())
            writer.writeheader()
            writer.writerows(summary_rows)

    return summary_rows


def load_summary(csv_path):
    """Read a summary CSV into a list of dicts with proper types.

    Numeric columns are converted to float (nl to int), 'finite' to bool.
    """
    rows = []
    with open(csv_path, "r") as f:
        reader = csv.DictReader(f)
        for row in reader:
            typed = {}
            for k, v in row.items():
                if k == "nl":
                    typed[k] = int(v)
                elif k == "finite":
                    typed[k] = v.strip().lower() in ("true", "1", "yes")
                else:
                    typed[k] = float(v)
            rows.append(typed)
    return rows


def configure_logging(outdir, run_name):
    """Set up file + console logging on the 'layerflow' logger.

    Args:
        outdir: directory for the log file.
        run_name: used in the log filename.

    Returns:
        the configured logger.
    """
    os.makedirs(outdir, exist_ok=True)
    logger = logging.getLogger("layerflow")
    logger.setLevel(logging.INFO)

    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    # File handler
    log_path = os.path.join(outdir, f"{run_name}.log")
    fh = logging.FileHandler(log_path)
    fh.setLevel(logging.INFO)
    fh.setFormatter(fmt)
    logger.addHandler(fh)

    # Console handler (only if none already exists)
    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
               for h in logger.handlers):
        ch = logging.StreamHandler()
        ch.setLevel(logging.INFO)
        ch.setFormatter(fmt)
        logger.addHandler(ch)

    return logger


def print_summary_table(summary_rows):
    """Print a formatted summary table to stdout."""
    header = (f"{'nu':>10} {'lambda_b':>10} {'nl':>4} {'finite':>7} "
              f"{'drift':>10} {'KE':>12} {'max dut':>10}")
    print(header)
    print("-" * len(header))
    for row in summary_rows:
        print(
            f"{row['nu']:>10.4g} {row['lambda_b']:>10.4g} {row['nl']:>4d} "
            f"{str(row['finite']):>7} {row['tracer_drift']:>10.2e} "
            f"{row['kinetic_energy']:>12.4e} {row['dut_max']:>10.4g}"
        )
