"""
Direct quadrangulation: quads alternating extremum, saddle, extremum, saddle.

Two extrema of different type reached by the same pair of saddles span a
quad. When more than two saddles are shared, every saddle pair whose
neighborhoods meet a common manifold is accepted: the ambiguity is kept in
the output rather than resolved by picking a single winner.
"""

from itertools import combinations

from surfquad.models import append_quad, build_cell_lookup
from surfquad.quads.manifold import has_common_manifold
from surfquad.tracer import get_tracer, trace


def map_separatrix_sources(sep_edges, point_count, cell_lookup):
    """
    Collect the sources reaching every destination.

    Returns:
        sources: list of sets, sources[d] are the points with a separatrix to d
        degree: separatrix count per point, both ends counted
    """
    sources = [set() for _ in range(point_count)]
    degree = [0] * point_count

    for source_cell, dest_cell in sep_edges:
        source = cell_lookup.get(source_cell)
        dest = cell_lookup.get(dest_cell)
        if source is None or dest is None:
            continue
        sources[dest].add(source)
        degree[dest] += 1
        degree[source] += 1

    return sources, degree


@trace(label="quadrangulate")
def quadrangulate(sep_edges, critical_points, segmentation, triangulation, output_cells, cell_lookup=None):
    """
    Build quads mixing saddles and extrema.

    Args:
        sep_edges: (source_cell_id, destination_cell_id) pairs
        critical_points: critical point table indexed by identifier
        segmentation: manifold id per triangulation vertex
        triangulation: adjacency collaborator for the manifold test
        output_cells: flat cell buffer, appended to
        cell_lookup: optional precomputed cell id -> identifier map

    Returns:
        (degree, degenerate_count) where degree is the per-point separatrix
        count later used as expected valence
    """
    tracer = get_tracer()

    if cell_lookup is None:
        cell_lookup = build_cell_lookup(critical_points)

    point_count = len(critical_points)
    sources, degree = map_separatrix_sources(sep_edges, point_count, cell_lookup)

    emitted = 0
    rejected = 0
    degenerate_count = 0

    for i in range(point_count):
        if not sources[i]:
            continue

        for k in range(i + 1, point_count):
            if not sources[k]:
                continue
            # one minimum, one maximum
            if critical_points[k].point_type == critical_points[i].point_type:
                continue

            common = sorted(sources[i] & sources[k])

            if len(common) >= 2:
                for j, l in combinations(common, 2):
                    if has_common_manifold([j, l], critical_points, segmentation, triangulation):
                        append_quad(output_cells, i, j, k, l)
                        emitted += 1
                    else:
                        rejected += 1

            elif len(common) == 1 and (len(sources[i]) == 1 or len(sources[k]) == 1):
                j = common[0]
                append_quad(output_cells, i, j, k, j)
                degenerate_count += 1

    tracer.event(
        f"Direct quads: {emitted} emitted, {degenerate_count} degenerate, "
        f"{rejected} rejected by manifold test"
    )

    return degree, degenerate_count
