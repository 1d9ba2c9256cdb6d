"""
Scene loading for surfquad.

A scene holds the Morse-Smale complex of one surface: critical points,
segmentation, separatrix samples and the triangles of the domain. It is
read from JSON (the QuadrangulationInput schema) or from a numpy .npz
archive with one array per field.
"""

import json
import os

import numpy as np

from surfquad.models import CriticalPoint, QuadrangulationInput
from surfquad.tracer import get_tracer, trace


SUPPORTED_EXTENSIONS = (".json", ".npz")

# arrays expected in an .npz scene
NPZ_CRITICAL_POINT_FIELDS = ("cp_vertex_ids", "cp_cell_ids", "cp_types")
NPZ_SCENE_FIELDS = ("segmentation", "sep_cell_ids", "sep_mask", "sep_points", "triangles")


@trace(label="load_input")
def load_input(path):
    """
    Load a scene from disk.

    Raises FileNotFoundError if path does not exist.
    Raises ValueError if the format is unsupported or the content invalid.
    """
    tracer = get_tracer()

    if not os.path.exists(path):
        raise FileNotFoundError(f"Scene not found: {path}")

    ext = os.path.splitext(path)[1].lower()
    if ext == ".json":
        with open(path, "r", encoding="utf-8") as f:
            data = QuadrangulationInput.model_validate(json.load(f))
    elif ext == ".npz":
        data = _load_npz(path)
    else:
        raise ValueError(f"Unsupported scene format: {path}")

    tracer.event(
        f"Loaded scene: {data.point_count} critical points, "
        f"{len(data.sep_cell_ids)} separatrix samples, {len(data.triangles)} triangles"
    )

    return data


def _load_npz(path):
    """Build a scene from the arrays of an .npz archive."""
    with np.load(path) as archive:
        missing = [
            name for name in NPZ_CRITICAL_POINT_FIELDS + NPZ_SCENE_FIELDS
            if name not in archive.files
        ]
        if missing:
            raise ValueError(f"Scene archive {path} lacks arrays: {missing}")

        arrays = {name: archive[name] for name in archive.files}

    critical_points = [
        CriticalPoint(
            identifier=index,
            vertex_id=int(vertex_id),
            cell_id=int(cell_id),
            point_type=int(point_type),
        )
        for index, (vertex_id, cell_id, point_type) in enumerate(zip(
            arrays["cp_vertex_ids"], arrays["cp_cell_ids"], arrays["cp_types"]
        ))
    ]

    return QuadrangulationInput(
        critical_points=critical_points,
        segmentation=arrays["segmentation"].astype(int).tolist(),
        sep_cell_ids=arrays["sep_cell_ids"].astype(int).tolist(),
        sep_mask=arrays["sep_mask"].astype(int).tolist(),
        sep_points=arrays["sep_points"].reshape(-1, 3).astype(float).tolist(),
        triangles=arrays["triangles"].reshape(-1, 3).astype(int).tolist(),
    )


def validate_input_path(path):
    """
    Check that a scene path exists and has a supported extension.

    Returns a list of error messages (empty if valid).
    """
    errors = []

    if not os.path.exists(path):
        errors.append(f"File not found: {path}")
        return errors

    ext = os.path.splitext(path)[1].lower()
    if ext not in SUPPORTED_EXTENSIONS:
        errors.append(f"Unsupported scene format: {path}")

    return errors
