"""
Consistency check of produced quads.

A critical point touched by fewer quads than it has separatrices is missing
quads around it. Quads with at least two such points are flagged and the
middles of their four boundary separatrices are located as subdivision
candidates. Flagged quads are left in place.
"""

from surfquad.models import iter_quads
from surfquad.quads.separatrix_middle import find_separatrix_middle
from surfquad.tracer import get_tracer, trace


def produced_valence(cells, point_count):
    """Number of quad corners referencing every critical point."""
    valence = [0] * point_count
    for quad in iter_quads(cells):
        for corner in quad:
            valence[corner] += 1
    return valence


def find_bad_points(produced, expected):
    """Points with fewer quads than separatrices."""
    return {
        point
        for point, (have, want) in enumerate(zip(produced, expected))
        if have < want
    }


def find_bad_quads(cells, bad_points):
    """Indices of quads with at least two corners among bad_points."""
    bad_quads = []
    for quad_index, quad in enumerate(iter_quads(cells)):
        if sum(1 for corner in quad if corner in bad_points) >= 2:
            bad_quads.append(quad_index)
    return bad_quads


@trace(label="postprocess_quads")
def postprocess_quads(cells, expected_valence, critical_points, sep_points, flat_positions, cache, output_points):
    """
    Flag inconsistent quads and locate subdivision points on their boundary.

    Args:
        cells: flat quad buffer produced by quadrangulation
        expected_valence: separatrix count per critical point
        critical_points: critical point table indexed by identifier
        sep_points: separatrix samples
        flat_positions: surviving (cell_id, sample_index) pairs
        cache: SubdivisionCache shared across the run
        output_points: flat point buffer, appended to

    Returns:
        (bad_points, bad_quads) as a set of point ids and a list of quad indices
    """
    tracer = get_tracer()

    produced = produced_valence(cells, len(critical_points))
    bad_points = find_bad_points(produced, expected_valence)
    bad_quads = find_bad_quads(cells, bad_points)

    quads = list(iter_quads(cells))
    for quad_index in bad_quads:
        i, j, k, l = quads[quad_index]
        for src, dst in ((j, i), (j, k), (l, i), (l, k)):
            find_separatrix_middle(src, dst, critical_points, sep_points, flat_positions, cache, output_points)

    tracer.event(
        f"Post-processing: {len(bad_points)} bad points, {len(bad_quads)} bad quads, "
        f"{len(cache)} subdivision points",
        bad_points=bad_points,
    )

    return bad_points, bad_quads
