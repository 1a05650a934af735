# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Command-line interface for layerflow parameter sweeps."""

import argparse
import json
import os

from layerflow.sweep import build_sweep_grid, run_sweep
from layerflow.sweep_utils import configure_logging, save_sweep_results, print_summary_table


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="layerflow-sweep",
        description="Run viscous film sweeps over (nu, lambda_b).",
    )
    parser.add_argument(
        "--nu", nargs="+", type=float, required=True,
        help="Viscosity values",
    )
    parser.add_argument(
        "--lambda-b", nargs="+", type=float, default=[0.0],
        help="Bottom slip length values (default: 0, no-slip)",
    )
    parser.add_argument(
        "-nl", type=int, default=4,
        help="Number of layers (default: 4)",
    )
    parser.add_argument(
        "--nx", type=int, default=64,
        help="Number of horizontal cells (default: 64)",
    )
    parser.add_argument(
        "--depth", type=float, default=0.05,
        help="Mean film depth (default: 0.05)",
    )
    parser.add_argument(
        "--amplitude", type=float, default=0.005,
        help="Free-surface perturbation amplitude (default: 0.005)",
    )
    parser.add_argument(
        "--shear", type=float, default=1.0,
        help="Initial surface velocity of the shear profile (default: 1.0)",
    )
    parser.add_argument(
        "--D_T", type=float, default=0.0,
        help="Tracer diffusivity (default: 0)",
    )
    parser.add_argument(
        "--bottom-bc", type=str, default="navier",
        choices=["navier", "neumann"],
        help="Bottom boundary condition (default: navier)",
    )
    parser.add_argument(
        "--horizontal", action="store_true",
        help="Enable explicit horizontal diffusion",
    )
    parser.add_argument(
        "--steps", type=int, default=200,
        help="Number of time steps per case (default: 200)",
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="JSON file of extra model params applied to every case",
    )
    parser.add_argument(
        "--workers", type=int, default=None,
        help="Max parallel workers (default: cpu count)",
    )
    parser.add_argument(
        "--outdir", type=str, default="results",
        help="Output directory (default: results/)",
    )

    args = parser.parse_args(argv)
    logger = configure_logging(args.outdir, "sweep")

    param_list = build_sweep_grid(
        nu_vals=args.nu,
        lambda_vals=args.lambda_b,
        nl=args.nl,
        nx=args.nx,
        depth=args.depth,
        amplitude=args.amplitude,
        shear=args.shear,
        D_T=args.D_T,
        n_steps=args.steps,
        bottom_bc=args.bottom_bc,
        horizontal_diffusion=args.horizontal,
    )
    if args.config:
        with open(args.config) as f:
            extra = json.load(f)
        for params in param_list:
            params.update(extra)

    n_cases = len(param_list)
    logger.info("Running %d cases (nu=%s, lambda_b=%s)", n_cases, args.nu, args.lambda_b)
    print(f"Grid: nx={args.nx}, nl={args.nl}, depth={args.depth}, amplitude={args.amplitude}")
    print(f"Steps: {args.steps}, Workers: {args.workers or 'auto'}")
    print()

    results = run_sweep(param_list, max_workers=args.workers)

    summary_rows = save_sweep_results(results, args.outdir)
    print_summary_table(summary_rows)
    print(f"\nResults saved to {args.outdir}/")
    print(f"Summary: {os.path.join(args.outdir, 'summary.csv')}")
