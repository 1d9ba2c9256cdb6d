"""
Arclength middle of separatrices.

Inconsistent quads are to be split along their boundary separatrices. The
split point is the polyline sample closest to half the separatrix length,
computed once per separatrix and remembered in a SubdivisionCache.
"""

from surfquad.mesh.geometry import arclength_middle_index
from surfquad.tracer import get_tracer


class SubdivisionCache:
    """
    Middle sample index of every separatrix already subdivided.

    Keys are (start, end) sample ranges. A range is stored once, which keeps
    at most one emitted point per separatrix.
    """

    def __init__(self):
        self._middles = {}

    def __contains__(self, sample_range):
        return tuple(sample_range) in self._middles

    def __len__(self):
        return len(self._middles)

    def __iter__(self):
        return iter(self._middles)

    def get(self, sample_range, default=None):
        return self._middles.get(tuple(sample_range), default)

    def insert(self, sample_range, middle_index):
        """Store a middle, returns False if the range was already present."""
        key = tuple(sample_range)
        if key in self._middles:
            return False
        self._middles[key] = middle_index
        return True

    def clear(self):
        self._middles.clear()

    def as_dict(self):
        """JSON-friendly copy with "start:end" keys."""
        return {f"{a}:{b}": middle for (a, b), middle in self._middles.items()}


def filter_separatrix_positions(sep_cell_ids, sep_mask):
    """
    Surviving separatrix samples as (cell_id, sample_index) pairs.

    Samples with mask value 1 are dropped.
    """
    return [
        (cell_id, index)
        for index, (cell_id, mask) in enumerate(zip(sep_cell_ids, sep_mask))
        if mask != 1
    ]


def separatrix_bounds(source_cell, dest_cell, flat_positions):
    """Sample ranges of every separatrix going from source_cell to dest_cell."""
    bounds = []
    for (first_cell, first_index), (next_cell, next_index) in zip(flat_positions, flat_positions[1:]):
        if first_cell == source_cell and next_cell == dest_cell:
            bounds.append((first_index, next_index))
    return bounds


def find_separatrix_middle(src, dst, critical_points, sep_points, flat_positions, cache, output_points):
    """
    Emit the arclength middle of the separatrices from src to dst.

    Args:
        src, dst: critical point identifiers
        critical_points: critical point table indexed by identifier
        sep_points: separatrix samples, one 3D point per sample index
        flat_positions: output of filter_separatrix_positions
        cache: SubdivisionCache shared across the run
        output_points: flat point buffer, appended to

    Returns:
        number of new points emitted
    """
    tracer = get_tracer()

    bounds = separatrix_bounds(
        critical_points[src].cell_id,
        critical_points[dst].cell_id,
        flat_positions,
    )

    emitted = 0
    for start, end in bounds:
        if (start, end) in cache:
            continue

        middle = start + arclength_middle_index(sep_points[start:end + 1])
        output_points.extend(float(c) for c in sep_points[middle])
        cache.insert((start, end), middle)
        emitted += 1

    if emitted:
        tracer.event(f"Separatrix {src}->{dst}: {emitted} middle points", level="DEBUG")

    return emitted
