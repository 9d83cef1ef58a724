"""Stitch unordered boundary segments into closed contours."""
import logging
import math
from collections import defaultdict
from typing import Dict, List, Sequence

import numpy as np

from msdfbake.types import Contour, Point, Segment

logger = logging.getLogger(__name__)


_KEY_MASK = (1 << 64) - 1


def endpoint_key(point: Point, eps: float) -> int:
    """
    Pack a quantized point into a single integer key.

    y keeps 64 bits, so distinct quantized points map to distinct keys for
    any coordinate an image can hold.
    """
    qx = int(round(point.x / eps))
    qy = int(round(point.y / eps))
    return (qx << 64) | (qy & _KEY_MASK)


def build_endpoint_map(segments: Sequence[Segment], eps: float) -> Dict[int, List[int]]:
    """
    Map each quantized endpoint to the indices of segments touching it.

    Indices are stored in insertion order, which fixes the tie-break order of
    the walk.
    """
    point_to_segments: Dict[int, List[int]] = defaultdict(list)
    for i, seg in enumerate(segments):
        point_to_segments[endpoint_key(seg.a, eps)].append(i)
        point_to_segments[endpoint_key(seg.b, eps)].append(i)
    return dict(point_to_segments)


def turning_angle(prev_dir: Point, direction: Point) -> float:
    """Unsigned angle in radians between two direction vectors."""
    cross = prev_dir.x * direction.y - prev_dir.y * direction.x
    dot = prev_dir.x * direction.x + prev_dir.y * direction.y
    return math.atan2(abs(cross), dot)


def stitch_contours(segments: Sequence[Segment], stitch_eps: float = 0.01) -> List[Contour]:
    """
    Link segments into closed polylines.

    Greedy walk: from the current endpoint, take the unused incident segment
    with the smallest turning angle relative to the previous step. Ties go to
    the lowest segment index. Walks that dead-end before returning to their
    start are discarded.

    Args:
        segments: Segments from marching squares
        stitch_eps: Quantization step used for endpoint matching

    Returns:
        List of closed contours, each an (N, 2) array with
        contour[-1] == contour[0] and at least 3 distinct vertices
    """
    point_to_segments = build_endpoint_map(segments, stitch_eps)
    visited = set()
    contours: List[Contour] = []
    eps_sq = stitch_eps * stitch_eps
    broken = 0
    short = 0

    for i, seg in enumerate(segments):
        if i in visited:
            continue

        visited.add(i)
        start = seg.a
        cur = seg.b
        poly = [start, cur]
        closed = False

        while True:
            key = endpoint_key(cur, stitch_eps)
            prev = poly[-2]
            prev_dir = Point(cur.x - prev.x, cur.y - prev.y)

            next_index = -1
            next_point = None
            best_angle = math.inf

            for si in point_to_segments.get(key, ()):
                if si in visited:
                    continue

                cand = segments[si]
                if endpoint_key(cand.a, stitch_eps) == key:
                    far = cand.b
                elif endpoint_key(cand.b, stitch_eps) == key:
                    far = cand.a
                else:
                    continue

                angle = turning_angle(prev_dir, Point(far.x - cur.x, far.y - cur.y))
                if angle < best_angle:
                    best_angle = angle
                    next_index = si
                    next_point = far

            if next_index < 0:
                logger.debug(
                    f"Contour break at ({cur.x:.3f}, {cur.y:.3f}) after "
                    f"{len(poly) - 1} segments: no next segment found"
                )
                break

            visited.add(next_index)
            poly.append(next_point)
            cur = next_point

            if (cur.x - start.x) ** 2 + (cur.y - start.y) ** 2 <= eps_sq:
                poly[-1] = start
                closed = True
                break

        if not closed:
            broken += 1
            continue

        # Closing vertex duplicates the start
        if len(poly) - 1 < 3:
            short += 1
            continue

        contours.append(np.array(poly, dtype=np.float64))

    logger.info(
        f"Stitched {len(segments)} segments into {len(contours)} contours "
        f"({broken} open, {short} too short)"
    )
    return contours
