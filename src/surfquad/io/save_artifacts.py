"""
Result writing for surfquad.

Quads and subdivision points are written as JSON for inspection and as a
numpy archive for downstream meshing tools.
"""

import json
import os

import numpy as np

from surfquad.models import QUAD_RECORD_SIZE
from surfquad.tracer import get_tracer


def ensure_dir(path):
    """Create directory if it does not exist."""
    os.makedirs(path, exist_ok=True)


def save_json(data, path, indent=2):
    """
    Save a dictionary or Pydantic model to JSON.
    """
    tracer = get_tracer()

    ensure_dir(os.path.dirname(path) or ".")

    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, default=str)

    tracer.event(f"Saved JSON: {path}")


def save_result(result, out_dir, indent=2):
    """
    Write a QuadrangulationResult.

    Creates:
    - quads.json: flat buffers, subdivision cache and summary
    - quads.npz: cells as (n, 5) and points as (m, 3) arrays
    """
    tracer = get_tracer()

    ensure_dir(out_dir)

    json_path = os.path.join(out_dir, "quads.json")
    save_json(result, json_path, indent=indent)

    npz_path = os.path.join(out_dir, "quads.npz")
    cells = np.asarray(result.cells, dtype=np.int64).reshape(-1, QUAD_RECORD_SIZE)
    points = np.asarray(result.points, dtype=np.float64).reshape(-1, 3)
    np.savez(npz_path, cells=cells, points=points)

    tracer.event(f"Saved arrays: {npz_path} cells={cells.shape[0]} points={points.shape[0]}")

    return json_path, npz_path
