# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

# src/layerflow/sweep.py
import logging
from itertools import product
from concurrent.futures import ProcessPoolExecutor, as_completed
from layerflow.models.multilayer import MultilayerViscousModel
from layerflow.diagnostics import RunDiagnostics

logger = logging.getLogger(__name__)

SUMMARY_KEYS = ["nu", "lambda_b", "nl"]


def single_run(params):
    """Run one film case for a fixed number of steps.

    Args:
        params: model params dict plus n_steps (default 200) and
            sample_every (default 10).

    Returns:
        dict with params, diagnostics and the number of steps run.
    """
    n_steps = params.get("n_steps", 200)
    sample_every = max(1, params.get("sample_every", 10))
    model_params = {k: v for k, v in params.items()
                    if k not in ("n_steps", "sample_every")}

    model = MultilayerViscousModel(model_params)
    state = model.get_initial_condition()
    diag = RunDiagnostics(model.grid)

    t = 0.0
    diag.accumulate(state, t)
    for step_i in range(n_steps):
        model.step(state, t)
        t += model.dt
        if (step_i + 1) % sample_every == 0 or step_i == n_steps - 1:
            diag.accumulate(state, t)

    result = diag.finalize()
    result["params"] = {k: params[k] for k in SUMMARY_KEYS if k in params}
    result["dt"] = model.dt
    result["n_steps_run"] = n_steps
    if not result["finite"]:
        logger.warning("Non-finite values in run %s", result["params"])
    return result


def build_sweep_grid(nu_vals, lambda_vals, nl=4, nx=64, ny=1, depth=0.05,
                     amplitude=0.005, shear=1.0, D_T=0.0, n_steps=200,
                     bottom_bc="navier", horizontal_diffusion=False):
    """Build list of parameter dicts for a full sweep."""
    grid = []
    for nu, lambda_b in product(nu_vals, lambda_vals):
        grid.append(dict(
            nu=nu, lambda_b=lambda_b, nl=nl, nx=nx, ny=ny, depth=depth,
            amplitude=amplitude, shear=shear, D_T=D_T, n_steps=n_steps,
            bottom_bc=bottom_bc, horizontal_diffusion=horizontal_diffusion,
        ))
    return grid


def run_sweep(param_list, max_workers=None, progress=True):
    """Run parameter sweep in parallel.

    Args:
        param_list: list of param dicts from build_sweep_grid.
        max_workers: number of parallel processes (None = cpu count).
        progress: show tqdm progress bar if available.

    Returns:
        list of result dicts, in the same order as param_list.
    """
    n = len(param_list)
    logger.info("Starting sweep: %d cases, max_workers=%s", n, max_workers)

    # Soft import of tqdm
    tqdm_bar = None
    if progress:
        try:
            from tqdm.auto import tqdm
            tqdm_bar = tqdm(total=n, desc="Sweep", unit="case")
        except ImportError:
            pass

    results = [None] * n

    with ProcessPoolExecutor(max_workers=max_workers) as pool:
        future_to_index = {}
        for i, params in enumerate(param_list):
            future = pool.submit(single_run, params)
            future_to_index[future] = i

        for future in as_completed(future_to_index):
            idx = future_to_index[future]
            results[idx] = future.result()
            p = results[idx]["params"]
            logger.debug(
                "Case %d/%d done: nu=%s lambda_b=%s -> drift %.2e",
                idx + 1, n, p.get("nu"), p.get("lambda_b"),
                results[idx]["tracer_drift"],
            )
            if tqdm_bar is not None:
                tqdm_bar.update(1)

    if tqdm_bar is not None:
        tqdm_bar.close()

    logger.info("Sweep complete: %d cases finished", n)
    return results
