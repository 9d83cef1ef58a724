"""Tests for channel distance computation and signing."""
import tracemalloc

import numpy as np
import pytest
from scipy.ndimage import distance_transform_edt

from msdfbake import distance_field
from msdfbake.distance_field import (
    apply_sign,
    compute_channel_distances,
    point_aabb_distance_sq,
    point_segment_distance_sq,
)
from msdfbake.edge_coloring import color_edges
from msdfbake.marching_squares import extract_segments
from msdfbake.stitching import stitch_contours
from msdfbake.tile_index import TileIndex
from msdfbake.types import ColoredSegment, EdgeColor, Point


def edges_for(alpha):
    return color_edges(stitch_contours(extract_segments(alpha, 0.5, 0.01), 0.01))


def brute_force(width, height, segments, max_distance):
    """Reference: scan every segment for every pixel."""
    ys, xs = np.mgrid[0:height, 0:width]
    px = xs.reshape(-1, 1) + 0.5
    py = ys.reshape(-1, 1) + 0.5
    coords = np.array([(*cs.segment.a, *cs.segment.b) for cs in segments])
    colors = np.array([cs.color.value for cs in segments])
    d_sq = point_segment_distance_sq(px, py, coords[:, 0], coords[:, 1], coords[:, 2], coords[:, 3])

    field = np.full((3, height, width), max_distance)
    for c in range(3):
        best = np.sqrt(d_sq[:, colors == c].min(axis=1))
        field[c] = np.minimum(best, max_distance).reshape(height, width)
    return field


class TestGeometry:
    """Test point distance helpers."""

    def test_projection_inside_segment(self):
        assert point_segment_distance_sq(0.0, 1.0, -1.0, 0.0, 1.0, 0.0) == pytest.approx(1.0)

    def test_projection_clamped_to_endpoint(self):
        assert point_segment_distance_sq(3.0, 0.0, -1.0, 0.0, 1.0, 0.0) == pytest.approx(4.0)
        assert point_segment_distance_sq(-2.0, 1.0, -1.0, 0.0, 1.0, 0.0) == pytest.approx(2.0)

    def test_degenerate_segment_point_distance(self):
        d = point_segment_distance_sq(4.0, 5.0, 1.0, 1.0, 1.0, 1.0)
        assert np.isfinite(d)
        assert d == pytest.approx(25.0)

    def test_aabb_distance(self):
        assert point_aabb_distance_sq(1.0, 1.0, 0.0, 0.0, 2.0, 2.0) == 0.0
        assert point_aabb_distance_sq(5.0, 1.0, 0.0, 0.0, 2.0, 2.0) == pytest.approx(9.0)
        assert point_aabb_distance_sq(5.0, 6.0, 0.0, 0.0, 2.0, 2.0) == pytest.approx(25.0)


class TestComputeChannelDistances:
    """Test the tiled per-channel search."""

    def test_no_segments_all_far(self):
        index = TileIndex(8, 8, 8, 4.0)
        field = compute_channel_distances(8, 8, [], index, 4.0)
        assert field.shape == (3, 8, 8)
        assert np.all(field == 4.0)

    def test_single_channel_segment(self):
        """Only the segment's channel gets a distance; others stay far."""
        segments = [ColoredSegment.from_points(Point(0.0, 4.0), Point(8.0, 4.0), EdgeColor.G)]
        index = TileIndex.build(8, 8, 8, segments, 8.0)

        field = compute_channel_distances(8, 8, segments, index, 8.0)

        assert field[EdgeColor.G.value, 0, 3] == pytest.approx(3.5)
        assert field[EdgeColor.G.value, 4, 3] == pytest.approx(0.5)
        assert np.all(field[EdgeColor.R.value] == 8.0)
        assert np.all(field[EdgeColor.B.value] == 8.0)

    def test_clamped_to_max_distance(self, square_alpha):
        segments = edges_for(square_alpha)
        index = TileIndex.build(32, 32, 4, segments, 4.0)

        field = compute_channel_distances(32, 32, segments, index, 4.0)

        assert field.max() <= 4.0
        assert field.min() >= 0.0
        # Corner pixel is far from every edge
        assert np.all(field[:, 0, 0] == 4.0)

    @pytest.mark.parametrize("max_distance,tile_size", [(4.0, 4), (6.0, 8), (16.0, 16), (3.0, 32)])
    def test_matches_brute_force(self, disc_alpha, max_distance, tile_size):
        """The 3x3 tile search finds exactly what a full scan finds."""
        segments = edges_for(disc_alpha)
        height, width = disc_alpha.shape
        index = TileIndex.build(width, height, tile_size, segments, max_distance)

        field = compute_channel_distances(width, height, segments, index, max_distance)

        np.testing.assert_allclose(field, brute_force(width, height, segments, max_distance))

    def test_nearest_edge_matches_euclidean_transform(self, square_alpha):
        """Along a row facing a straight side, min over channels is the true distance."""
        segments = edges_for(square_alpha)
        index = TileIndex.build(32, 32, 16, segments, 16.0)
        field = compute_channel_distances(32, 32, segments, index, 16.0)

        # distance_transform_edt measures to the nearest inside pixel center,
        # which is half a pixel past the boundary
        edt = distance_transform_edt(square_alpha < 0.5)
        row = 16
        for x in range(0, 11):
            assert field[:, row, x].min() == pytest.approx(edt[row, x] - 0.5)

    def test_small_chunks_match_brute_force(self, disc_alpha, monkeypatch):
        """Pixel blocks that split rows and tiles give the same field."""
        monkeypatch.setattr(distance_field, "MAX_PAIRS_PER_CHUNK", 7)
        segments = edges_for(disc_alpha)
        height, width = disc_alpha.shape
        index = TileIndex.build(width, height, 16, segments, 6.0)

        field = compute_channel_distances(width, height, segments, index, 6.0)

        np.testing.assert_allclose(field, brute_force(width, height, segments, 6.0))

    def test_large_tiles_bounded_memory(self):
        """One tile covering the whole image does not allocate per-tile dense arrays."""
        ys, xs = np.mgrid[0:256, 0:256]
        alpha = ((xs - 127.5) ** 2 + (ys - 127.5) ** 2 <= 100.0 ** 2).astype(np.float32)
        segments = edges_for(alpha)
        small = compute_channel_distances(
            256, 256, segments, TileIndex.build(256, 256, 8, segments, 8.0), 8.0
        )
        index = TileIndex.build(256, 256, 256, segments, 8.0)

        tracemalloc.start()
        try:
            large = compute_channel_distances(256, 256, segments, index, 8.0)
            _, peak = tracemalloc.get_traced_memory()
        finally:
            tracemalloc.stop()

        assert peak < 64 * 1024 * 1024
        np.testing.assert_allclose(large, small)


class TestApplySign:
    """Test inside/outside signing."""

    def test_inside_negated(self):
        alpha = np.array([[0.0, 0.5], [0.49, 1.0]], dtype=np.float32)
        distances = np.full((3, 2, 2), 2.0)

        result = apply_sign(distances, alpha, 0.5)

        assert result is distances
        expected = np.array([[2.0, -2.0], [2.0, -2.0]])
        for c in range(3):
            np.testing.assert_array_equal(distances[c], expected)
