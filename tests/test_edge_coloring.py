"""Tests for edge coloring."""
import numpy as np
import pytest

from msdfbake.edge_coloring import color_edges, make_counter_clockwise, signed_area
from msdfbake.marching_squares import extract_segments
from msdfbake.stitching import stitch_contours
from msdfbake.types import AABB, EdgeColor

UNIT_SQUARE_CCW = np.array([(0, 0), (1, 0), (1, 1), (0, 1), (0, 0)], dtype=float)


class TestWinding:
    """Test winding detection and canonicalization."""

    def test_signed_area(self):
        assert signed_area(UNIT_SQUARE_CCW) == pytest.approx(1.0)
        assert signed_area(UNIT_SQUARE_CCW[::-1]) == pytest.approx(-1.0)

    def test_clockwise_reversed(self):
        contour = make_counter_clockwise(UNIT_SQUARE_CCW[::-1].copy())
        assert signed_area(contour) > 0
        np.testing.assert_array_equal(contour[0], contour[-1])

    def test_counter_clockwise_kept(self):
        assert make_counter_clockwise(UNIT_SQUARE_CCW) is UNIT_SQUARE_CCW

    def test_image_frame_orientation(self):
        """With rows growing downward, a visually clockwise walk has positive area."""
        top_left, top_right, bottom_right, bottom_left = (0, 0), (4, 0), (4, 4), (0, 4)
        walk = np.array([top_left, top_right, bottom_right, bottom_left, top_left], dtype=float)
        assert signed_area(walk) > 0
        assert make_counter_clockwise(walk) is walk


class TestColorEdges:
    """Test cyclic channel assignment."""

    def test_cycle_per_contour(self):
        """Colors run R, G, B, R and restart for every contour."""
        triangle = np.array([(5, 5), (7, 5), (6, 7), (5, 5)], dtype=float)

        colored = color_edges([UNIT_SQUARE_CCW, triangle])

        assert [cs.color for cs in colored] == [
            EdgeColor.R, EdgeColor.G, EdgeColor.B, EdgeColor.R,
            EdgeColor.R, EdgeColor.G, EdgeColor.B,
        ]

    def test_clockwise_input_walked_counter_clockwise(self):
        colored = color_edges([UNIT_SQUARE_CCW[::-1].copy()])

        assert len(colored) == 4
        # Consecutive edges chain and the loop turns left
        for first, second in zip(colored, colored[1:]):
            assert first.segment.b == second.segment.a
        points = np.array([cs.segment.a for cs in colored] + [colored[0].segment.a])
        assert signed_area(points) > 0

    def test_aabb(self):
        triangle = np.array([(5, 5), (7, 5), (6, 7), (5, 5)], dtype=float)
        colored = color_edges([triangle])
        assert colored[1].aabb == AABB(6, 5, 7, 7)

    def test_next_color_cycles(self):
        assert EdgeColor.R.next() is EdgeColor.G
        assert EdgeColor.G.next() is EdgeColor.B
        assert EdgeColor.B.next() is EdgeColor.R

    def test_square_silhouette(self, square_alpha):
        """Square edges are counter-clockwise and colored R, G, B, R, ..."""
        contours = stitch_contours(extract_segments(square_alpha, 0.5, 0.01), 0.01)

        colored = color_edges(contours)

        assert len(colored) == 40
        expected = [EdgeColor(i % 3) for i in range(40)]
        assert [cs.color for cs in colored] == expected
        points = np.array([cs.segment.a for cs in colored] + [colored[0].segment.a])
        assert signed_area(points) > 0

    def test_hole_also_counter_clockwise(self, ring_alpha):
        """Every contour is canonicalized, holes included."""
        contours = stitch_contours(extract_segments(ring_alpha, 0.5, 0.01), 0.01)
        for contour in contours:
            colored = color_edges([contour])
            points = np.array([cs.segment.a for cs in colored] + [colored[0].segment.a])
            assert signed_area(points) > 0
