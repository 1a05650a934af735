# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Benchmarking utilities for profiling layerflow hot paths.

Provides both micro-benchmarks (individual kernels) and a macro-benchmark
(full single_run integration) with timing and optional cProfile output.
"""

import time
import cProfile
import pstats
import io
import numpy as np


def _make_test_data(nx=64, nl=16):
    """Create a realistic film state for benchmarking."""
    from layerflow.models.multilayer import MultilayerViscousModel
    model = MultilayerViscousModel(dict(nx=nx, nl=nl, nu=1e-3, D_T=1e-3, shear=1.0))
    return model, model.get_initial_condition()


def _time_fn(fn, args=(), kwargs=None, n_warmup=3, n_iter=100):
    """Time a function over n_iter calls, returning median and stats."""
    kwargs = kwargs or {}
    for _ in range(n_warmup):
        fn(*args, **kwargs)
    times = []
    for _ in range(n_iter):
        t0 = time.perf_counter_ns()
        fn(*args, **kwargs)
        t1 = time.perf_counter_ns()
        times.append((t1 - t0) * 1e-6)  # ms
    times = np.array(times)
    return {
        "median_ms": float(np.median(times)),
        "mean_ms": float(np.mean(times)),
        "std_ms": float(np.std(times)),
        "min_ms": float(np.min(times)),
        "max_ms": float(np.max(times)),
        "n_iter": n_iter,
    }


def bench_thomas_solve(nl=16, n_iter=500):
    """Benchmark thomas_solve on one column."""
    from layerflow.solvers.tridiagonal import thomas_solve
    a = np.random.randn(nl)
    b = np.random.randn(nl) + 5.0  # diag dominant
    c = np.random.randn(nl)
    d = np.random.randn(nl)
    return _time_fn(thomas_solve, args=(a, b, c, d), n_iter=n_iter)


def bench_vertical_diffusion(nl=16, n_iter=200):
    """Benchmark the Navier vertical solve over every column."""
    from layerflow.solvers.vertical_diffusion import vertical_diffusion_neumann_navier
    model, state = _make_test_data(nl=nl)
    u = state.u[0].copy()
    return _time_fn(vertical_diffusion_neumann_navier,
                    args=(state.h, u, model.dt, 1e-3, 0.0, 0.0, 0.0), n_iter=n_iter)


def bench_horizontal_diffusion(nl=16, n_iter=200):
    """Benchmark one explicit horizontal diffusion increment."""
    from layerflow.solvers.horizontal_diffusion import horizontal_diffusion
    model, state = _make_test_data(nl=nl)
    T = state.T.copy()
    return _time_fn(horizontal_diffusion,
                    args=(T, state.h, 1e-3, model.dt, model.grid), n_iter=n_iter)


def bench_tangential_stress(nl=16, n_iter=200):
    """Benchmark the 10-pass tangential stress relaxation."""
    from layerflow.solvers.surface_stress import tangential_stress
    model, state = _make_test_data(nl=nl)
    return _time_fn(tangential_stress, args=(state, model.grid), n_iter=n_iter)


def bench_model_step(nl=16, n_iter=100):
    """Benchmark one MultilayerViscousModel.step() call."""
    model, state = _make_test_data(nl=nl)
    t = 0.0

    def one_step():
        model.step(state, t)

    return _time_fn(one_step, n_iter=n_iter)


def bench_single_run(nl=8, n_steps=50):
    """Time a full single_run (macro benchmark)."""
    from layerflow.sweep import single_run
    params = dict(nu=1e-3, lambda_b=0.0, nl=nl, nx=64, shear=1.0, n_steps=n_steps)
    t0 = time.perf_counter()
    result = single_run(params)
    elapsed = time.perf_counter() - t0
    return {
        "elapsed_s": elapsed,
        "n_steps_run": result["n_steps_run"],
        "finite": result["finite"],
    }


def profile_single_run(nl=8, n_steps=50):
    """Run cProfile on single_run, return stats as string."""
    from layerflow.sweep import single_run
    params = dict(nu=1e-3, lambda_b=0.0, nl=nl, nx=64, shear=1.0, n_steps=n_steps)
    pr = cProfile.Profile()
    pr.enable()
    single_run(params)
    pr.disable()
    s = io.StringIO()
    ps = pstats.Stats(pr, stream=s).sort_stats("cumulative")
    ps.print_stats(30)
    return s.getvalue()


def run_all_benchmarks(nl=16, verbose=True):
    """Run all micro and macro benchmarks. Returns dict of results."""
    results = {}

    benches = [
        ("thomas_solve", bench_thomas_solve),
        ("vertical_diffusion", bench_vertical_diffusion),
        ("horizontal_diffusion", bench_horizontal_diffusion),
        ("tangential_stress", bench_tangential_stress),
        ("model_step", bench_model_step),
    ]

    for name, fn in benches:
        if verbose:
            print(f"  {name}...", end="", flush=True)
        r = fn(nl=nl)
        results[name] = r
        if verbose:
            print(f" {r['median_ms']:.3f} ms (median, n={r['n_iter']})")

    if verbose:
        print("  single_run (nl=8, 50 steps)...", end="", flush=True)
    r = bench_single_run(nl=8, n_steps=50)
    results["single_run"] = r
    if verbose:
        print(f" {r['elapsed_s']:.2f} s")

    return results


def compare_results(before, after):
    """Print a comparison table of two benchmark result sets."""
    print(f"\n{'Benchmark':<22} {'Before':>10} {'After':>10} {'Speedup':>10}")
    print("-" * 55)
    for key in before:
        if key == "single_run":
            b = before[key]["elapsed_s"]
            a = after[key]["elapsed_s"]
            speedup = b / a if a > 0 else float("inf")
            print(f"{key:<22} {b:>9.2f}s {a:>9.2f}s {speedup:>9.1f}x")
        else:
            b = before[key]["median_ms"]
            a = after[key]["median_ms"]
            speedup = b / a if a > 0 else float("inf")
            print(f"{key:<22} {b:>8.3f}ms {a:>8.3f}ms {speedup:>9.1f}x")


if __name__ == "__main__":
    print("=" * 55)
    print("LayerFlow Benchmarks")
    print("=" * 55)
    print()

    print("cProfile of single_run (nl=8, 50 steps):")
    print(profile_single_run())

    print("Micro-benchmarks (nl=16):")
    run_all_benchmarks(nl=16)
