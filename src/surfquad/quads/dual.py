"""
Dual quadrangulation: quads whose four corners are extrema.

Every saddle linked to exactly four extrema yields one quad, with the two
extrema of the same type placed on opposite corners.
"""

from surfquad.models import append_quad, build_cell_lookup
from surfquad.tracer import get_tracer, trace


def group_destinations(sep_edges, cell_lookup):
    """
    Destinations of every separatrix source, in edge order.

    Edges whose endpoints resolve to no critical point are ignored.
    """
    groups = {}
    for source_cell, dest_cell in sep_edges:
        source = cell_lookup.get(source_cell)
        dest = cell_lookup.get(dest_cell)
        if source is None or dest is None:
            continue
        groups.setdefault(source, []).append(dest)
    return groups


def order_extrema(extrema, critical_points):
    """
    Arrange four extrema as (i, j, k, l) with i, k of the same type.

    Returns None when no extremum shares the type of the first one.
    """
    first = extrema[0]
    first_type = critical_points[first].point_type

    for m in range(1, 4):
        if critical_points[extrema[m]].point_type == first_type:
            j, l = (e for n, e in enumerate(extrema[1:], start=1) if n != m)
            return first, j, extrema[m], l

    return None


@trace(label="dual_quadrangulate")
def dual_quadrangulate(sep_edges, critical_points, output_cells, cell_lookup=None):
    """
    Emit one quad per saddle of separatrix valence 4.

    Args:
        sep_edges: (source_cell_id, destination_cell_id) pairs
        critical_points: critical point table indexed by identifier
        output_cells: flat cell buffer, appended to
        cell_lookup: optional precomputed cell id -> identifier map

    Returns:
        number of quads emitted
    """
    tracer = get_tracer()

    if cell_lookup is None:
        cell_lookup = build_cell_lookup(critical_points)

    groups = group_destinations(sep_edges, cell_lookup)

    emitted = 0
    skipped = 0
    for source in sorted(groups):
        extrema = groups[source]
        if len(extrema) != 4:
            skipped += 1
            continue

        corners = order_extrema(extrema, critical_points)
        if corners is None:
            skipped += 1
            continue

        append_quad(output_cells, *corners)
        emitted += 1

    tracer.event(f"Dual quads: {emitted} emitted, {skipped} sources skipped")

    return emitted


def dual_expected_valence(sep_edges, point_count, cell_lookup):
    """
    Separatrix count per critical point as seen by dual quads.

    Only the extremum end of a separatrix counts, saddles are never corners
    of a dual quad.
    """
    valence = [0] * point_count
    for source_cell, dest_cell in sep_edges:
        source = cell_lookup.get(source_cell)
        dest = cell_lookup.get(dest_cell)
        if source is None or dest is None:
            continue
        valence[dest] += 1
    return valence
