"""Tests for separatrix middles, the subdivision cache and polyline geometry."""

import numpy as np
import pytest

from surfquad.models import CriticalPoint, CriticalPointType


def saddle_and_max():
    return [
        CriticalPoint(identifier=0, vertex_id=0, cell_id=10, point_type=CriticalPointType.SADDLE),
        CriticalPoint(identifier=1, vertex_id=1, cell_id=11, point_type=CriticalPointType.MAXIMUM),
    ]


def polyline_samples(*polylines):
    """Flatten polylines from cell 10 to cell 11 into sample arrays."""
    cell_ids, mask, points = [], [], []
    for polyline in polylines:
        for n, point in enumerate(polyline):
            points.append(list(point))
            if n == 0:
                cell_ids.append(10)
                mask.append(0)
            elif n == len(polyline) - 1:
                cell_ids.append(11)
                mask.append(0)
            else:
                cell_ids.append(-1)
                mask.append(1)
    return cell_ids, mask, points


class TestGeometry:
    """Tests for distance and arclength helpers."""

    def test_distance(self):
        """Test Euclidean distance between 3D points."""
        from surfquad.mesh.geometry import distance

        assert distance([0, 0, 0], [1, 2, 2]) == pytest.approx(3.0)

    def test_cumulative_arclength(self):
        """Test that arclength accumulates segment lengths."""
        from surfquad.mesh.geometry import cumulative_arclength

        cumulative = cumulative_arclength([[0, 0, 0], [3, 4, 0], [3, 4, 2]])

        np.testing.assert_allclose(cumulative, [0.0, 5.0, 7.0])

    def test_middle_non_uniform(self):
        """Test the sample closest to half length on uneven spacing."""
        from surfquad.mesh.geometry import arclength_middle_index

        points = [[0, 0, 0], [1, 0, 0], [1.5, 0, 0], [4, 0, 0]]

        assert arclength_middle_index(points) == 2

    def test_middle_tie_first(self):
        """Test that ties go to the first sample."""
        from surfquad.mesh.geometry import arclength_middle_index

        points = [[0, 0, 0], [1, 0, 0], [3, 0, 0], [4, 0, 0]]

        assert arclength_middle_index(points) == 1

    def test_middle_empty(self):
        """Test that an empty polyline has no middle."""
        from surfquad.mesh.geometry import arclength_middle_index

        with pytest.raises(ValueError):
            arclength_middle_index([])


class TestSeparatrixBounds:
    """Tests for locating separatrix sample ranges."""

    def test_filter_drops_masked(self):
        """Test that masked samples are removed with their positions kept."""
        from surfquad.quads.separatrix_middle import filter_separatrix_positions

        flat = filter_separatrix_positions([10, -1, -1, 11, 12, 13], [0, 1, 1, 0, 0, 0])

        assert flat == [(10, 0), (11, 3), (12, 4), (13, 5)]

    def test_bounds_between_cells(self):
        """Test that every adjacent source/destination pair gives a range."""
        from surfquad.quads.separatrix_middle import separatrix_bounds

        flat = [(10, 0), (11, 3), (10, 4), (11, 9), (12, 10), (11, 12)]

        assert separatrix_bounds(10, 11, flat) == [(0, 3), (4, 9)]
        assert separatrix_bounds(11, 10, flat) == [(3, 4)]
        assert separatrix_bounds(13, 11, flat) == []


class TestFindSeparatrixMiddle:
    """Tests for find_separatrix_middle."""

    def test_emits_middle_point(self):
        """Test that the middle sample coordinates are appended."""
        from surfquad.quads.separatrix_middle import (
            SubdivisionCache, filter_separatrix_positions, find_separatrix_middle,
        )

        cell_ids, mask, points = polyline_samples(
            [[0, 0, 0], [1, 0, 0], [1.5, 0, 0], [4, 0, 0]]
        )
        flat = filter_separatrix_positions(cell_ids, mask)
        cache = SubdivisionCache()
        output_points = []

        emitted = find_separatrix_middle(0, 1, saddle_and_max(), points, flat, cache, output_points)

        assert emitted == 1
        assert output_points == [1.5, 0.0, 0.0]
        assert cache.get((0, 3)) == 2

    def test_cached_range_not_repeated(self):
        """Test that a second call on the same separatrix emits nothing."""
        from surfquad.quads.separatrix_middle import (
            SubdivisionCache, filter_separatrix_positions, find_separatrix_middle,
        )

        cell_ids, mask, points = polyline_samples([[0, 0, 0], [1, 0, 0], [2, 0, 0]])
        flat = filter_separatrix_positions(cell_ids, mask)
        cache = SubdivisionCache()
        output_points = []

        find_separatrix_middle(0, 1, saddle_and_max(), points, flat, cache, output_points)
        emitted = find_separatrix_middle(0, 1, saddle_and_max(), points, flat, cache, output_points)

        assert emitted == 0
        assert len(output_points) == 3
        assert len(cache) == 1

    def test_parallel_separatrices(self):
        """Test that two separatrices between the same points get one middle each."""
        from surfquad.quads.separatrix_middle import (
            SubdivisionCache, filter_separatrix_positions, find_separatrix_middle,
        )

        cell_ids, mask, points = polyline_samples(
            [[0, 0, 0], [1, 0, 0], [2, 0, 0]],
            [[0, 0, 0], [0, 1, 0], [0, 2, 0], [0, 3, 0], [0, 4, 0]],
        )
        flat = filter_separatrix_positions(cell_ids, mask)
        cache = SubdivisionCache()
        output_points = []

        emitted = find_separatrix_middle(0, 1, saddle_and_max(), points, flat, cache, output_points)

        assert emitted == 2
        assert output_points == [1.0, 0.0, 0.0, 0.0, 2.0, 0.0]
        assert cache.as_dict() == {"0:2": 1, "3:7": 5}

    def test_no_separatrix(self):
        """Test that unrelated points emit nothing."""
        from surfquad.quads.separatrix_middle import (
            SubdivisionCache, filter_separatrix_positions, find_separatrix_middle,
        )

        cell_ids, mask, points = polyline_samples([[0, 0, 0], [1, 0, 0], [2, 0, 0]])
        flat = filter_separatrix_positions(cell_ids, mask)
        output_points = []

        emitted = find_separatrix_middle(1, 0, saddle_and_max(), points, flat, SubdivisionCache(), output_points)

        assert emitted == 0
        assert output_points == []


class TestSubdivisionCache:
    """Tests for the subdivision cache."""

    def test_insert_once(self):
        """Test that a range is stored only once."""
        from surfquad.quads.separatrix_middle import SubdivisionCache

        cache = SubdivisionCache()

        assert cache.insert((3, 9), 5)
        assert not cache.insert([3, 9], 6)
        assert cache.get((3, 9)) == 5
        assert (3, 9) in cache
        assert list(cache) == [(3, 9)]

    def test_clear(self):
        """Test that clearing empties the cache."""
        from surfquad.quads.separatrix_middle import SubdivisionCache

        cache = SubdivisionCache()
        cache.insert((0, 1), 0)
        cache.clear()

        assert len(cache) == 0
        assert cache.get((0, 1)) is None
