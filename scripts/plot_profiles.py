#!/usr/bin/env python
# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Plot vertical profiles and energy histories of a layerflow sweep.

Usage:
    python scripts/plot_profiles.py results/ [--out figures/]

Reads the per-case JSON files written by ``layerflow-sweep`` and writes
profiles.pdf (u(z), T(z)) and energy.pdf (kinetic energy against time).
"""

import argparse
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from layerflow.io import load_run

sns.set_theme(style="whitegrid", context="paper", font_scale=1.1)


def load_json_results(sweep_dir):
    """Load all JSON result files of a sweep directory, sorted by (nu, lambda_b)."""
    results = [load_run(str(f)) for f in sorted(Path(sweep_dir).glob("*.json"))]
    results.sort(key=lambda r: (r["params"]["nu"], r["params"]["lambda_b"]))
    return results


def _label(r):
    p = r["params"]
    return f"$\\nu = {p['nu']:g}$, $\\lambda_b = {p['lambda_b']:g}$"


def fig_profiles(results, output_dir):
    """Two panels: horizontally averaged u(z) and T(z) at the last sample."""
    fig, (ax_u, ax_t) = plt.subplots(1, 2, figsize=(8, 4), sharey=True)
    colors = sns.color_palette("colorblind", len(results))

    for r, color in zip(results, colors):
        prof = r["profiles"]
        z = np.array(prof["z"])
        ax_u.plot(prof["u"], z, marker="o", color=color, label=_label(r), linewidth=1.5)
        ax_t.plot(prof["T"], z, marker="o", color=color, linewidth=1.5)

    ax_u.set_xlabel(r"$\langle u \rangle$")
    ax_u.set_ylabel(r"$z$")
    ax_u.set_title("(a) Velocity")
    ax_u.legend(fontsize=8)

    ax_t.set_xlabel(r"$\langle T \rangle$")
    ax_t.set_title("(b) Tracer")

    fig.tight_layout()
    fig.savefig(output_dir / "profiles.pdf", bbox_inches="tight")
    plt.close(fig)
    print("  profiles.pdf")


def fig_energy(results, output_dir):
    fig, ax = plt.subplots(figsize=(5.5, 4))
    colors = sns.color_palette("colorblind", len(results))
    for r, color in zip(results, colors):
        ax.plot(r["t"], r["kinetic_energy"], color=color, label=_label(r))
    ax.set_xlabel(r"$t$")
    ax.set_ylabel(r"$KE$")
    ax.set_yscale("log")
    ax.legend(fontsize=8)

    fig.tight_layout()
    fig.savefig(output_dir / "energy.pdf", bbox_inches="tight")
    plt.close(fig)
    print("  energy.pdf")


def main():
    parser = argparse.ArgumentParser(description="Plot layerflow sweep profiles.")
    parser.add_argument("sweep_dir", help="Directory written by layerflow-sweep")
    parser.add_argument("--out", default=None,
                        help="Output directory (default: the sweep directory)")
    args = parser.parse_args()

    output_dir = Path(args.out or args.sweep_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    print("Loading data...")
    results = load_json_results(args.sweep_dir)
    print(f"  {len(results)} cases")
    if not results:
        return

    fig_profiles(results, output_dir)
    fig_energy(results, output_dir)
    print("\nDone.")


if __name__ == "__main__":
    main()
