"""Pytest fixtures for surfquad tests."""

import tempfile

import numpy as np
import pytest


def grid_triangles(width, height, offset=0):
    """Triangulate a width x height vertex grid, vertex ids start at offset."""
    triangles = []
    for y in range(height - 1):
        for x in range(width - 1):
            v = offset + y * width + x
            triangles.append([v, v + 1, v + width])
            triangles.append([v + 1, v + width + 1, v + width])
    return triangles


def build_scene(point_specs, edges, width=4, height=4, segmentation=None, triangles=None, samples=3):
    """
    Build a QuadrangulationInput from a compact description.

    point_specs: (vertex_id, CriticalPointType) per critical point; the
        critical point i gets cell id 100 + i
    edges: (source, destination) critical point identifiers; every edge gets
        a straight polyline of `samples` samples whose interior is masked
    """
    from surfquad.models import CriticalPoint, QuadrangulationInput

    critical_points = [
        CriticalPoint(identifier=i, vertex_id=v, cell_id=100 + i, point_type=t)
        for i, (v, t) in enumerate(point_specs)
    ]

    def position(vertex):
        return np.array([vertex % width, vertex // width, 0.0])

    sep_cell_ids = []
    sep_mask = []
    sep_points = []
    for src, dst in edges:
        a = position(critical_points[src].vertex_id)
        b = position(critical_points[dst].vertex_id)
        for s in range(samples):
            t = s / (samples - 1)
            sep_points.append((a + t * (b - a)).tolist())
            if s == 0:
                sep_cell_ids.append(100 + src)
                sep_mask.append(0)
            elif s == samples - 1:
                sep_cell_ids.append(100 + dst)
                sep_mask.append(0)
            else:
                sep_cell_ids.append(-1)
                sep_mask.append(1)

    if triangles is None:
        triangles = grid_triangles(width, height)
    if segmentation is None:
        segmentation = [0] * (width * height)

    return QuadrangulationInput(
        critical_points=critical_points,
        segmentation=segmentation,
        sep_cell_ids=sep_cell_ids,
        sep_mask=sep_mask,
        sep_points=sep_points,
        triangles=triangles,
    )


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def scene_factory():
    """Factory building scenes from point specs and separatrix edges."""
    return build_scene


@pytest.fixture
def grid_factory():
    """Factory triangulating vertex grids."""
    return grid_triangles


@pytest.fixture
def square_scene():
    """
    One minimum, one maximum and two saddles linked into a single quad.

    Critical points sit on the corners of a 4x4 grid with a single manifold.
    """
    from surfquad.models import CriticalPointType as T

    return build_scene(
        [(0, T.MINIMUM), (3, T.SADDLE), (15, T.MAXIMUM), (12, T.SADDLE)],
        [(1, 0), (1, 2), (3, 0), (3, 2)],
    )


@pytest.fixture
def dual_scene():
    """A single saddle linked to two minima and two maxima."""
    from surfquad.models import CriticalPointType as T

    return build_scene(
        [(0, T.MINIMUM), (3, T.MAXIMUM), (15, T.MINIMUM), (12, T.MAXIMUM), (5, T.SADDLE)],
        [(4, 0), (4, 1), (4, 2), (4, 3)],
    )


@pytest.fixture
def default_config():
    """Create default pipeline configuration."""
    from surfquad.config import PipelineConfig
    return PipelineConfig()
