# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import json
import numpy as np

from layerflow.state import FIELDS, LayeredState


class _NumpyEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, (np.float32, np.float64)):
            return float(obj)
        if isinstance(obj, (np.int32, np.int64)):
            return int(obj)
        if isinstance(obj, np.bool_):
            return bool(obj)
        return super().default(obj)


def save_run(result, path):
    with open(path, "w") as f:
        json.dump(result, f, cls=_NumpyEncoder, indent=2)


def load_run(path):
    with open(path, "r") as f:
        return json.load(f)


def save_state(state, path):
    np.savez(path, **state.as_dict())


def load_state(path, grid):
    with np.load(path) as data:
        fields = {name: data[name] for name in FIELDS}
        fields["ha"] = (data["hax"], data["hay"])
        fields["hf"] = (data["hfx"], data["hfy"])
    return LayeredState(grid, **fields)
