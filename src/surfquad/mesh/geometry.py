"""
Geometric helpers on 3D polylines.
"""

import numpy as np


def distance(p, q):
    """Euclidean distance between two 3D points."""
    return float(np.linalg.norm(np.asarray(q, dtype=float) - np.asarray(p, dtype=float)))


def cumulative_arclength(points):
    """
    Cumulative arclength at every sample of a polyline.

    The first entry is 0 and the last is the total length.
    """
    points = np.asarray(points, dtype=float)
    if len(points) == 0:
        return np.zeros(0)

    segment_lengths = np.linalg.norm(np.diff(points, axis=0), axis=1)
    return np.concatenate([[0.0], np.cumsum(segment_lengths)])


def arclength_middle_index(points):
    """
    Index of the sample closest to half the polyline's arclength.

    Ties go to the first sample in polyline order.
    """
    cumulative = cumulative_arclength(points)
    if len(cumulative) == 0:
        raise ValueError("Cannot locate the middle of an empty polyline")

    offsets = np.abs(cumulative - cumulative[-1] / 2.0)
    return int(np.argmin(offsets))
