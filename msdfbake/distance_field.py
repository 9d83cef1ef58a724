"""Per-channel distance field computation and inside/outside signing."""
import logging
from typing import Sequence

import numpy as np

from msdfbake.tile_index import TileIndex
from msdfbake.types import AlphaField, ChannelField, ColoredSegment, EdgeColor

logger = logging.getLogger(__name__)

# Segments shorter than this (squared) are treated as points
DEGENERATE_LENGTH_SQ = 1e-8

# Upper bound on pixel x candidate pairs evaluated in one numpy pass
MAX_PAIRS_PER_CHUNK = 1 << 17


def point_aabb_distance_sq(px, py, min_x, min_y, max_x, max_y):
    """Squared distance from points to boxes; zero inside. Broadcasts."""
    dx = np.maximum(np.maximum(min_x - px, px - max_x), 0.0)
    dy = np.maximum(np.maximum(min_y - py, py - max_y), 0.0)
    return dx * dx + dy * dy


def point_segment_distance_sq(px, py, ax, ay, bx, by):
    """
    Squared distance from points to segments. Broadcasts.

    The projection onto each segment is clamped to its endpoints;
    zero-length segments fall back to the distance to their start point.
    """
    abx = bx - ax
    aby = by - ay
    len_sq = abx * abx + aby * aby
    degenerate = len_sq < DEGENERATE_LENGTH_SQ

    t = ((px - ax) * abx + (py - ay) * aby) / np.where(degenerate, 1.0, len_sq)
    t = np.where(degenerate, 0.0, np.clip(t, 0.0, 1.0))

    cx = ax + t * abx
    cy = ay + t * aby
    return (px - cx) ** 2 + (py - cy) ** 2


def _segment_arrays(segments: Sequence[ColoredSegment]):
    """Unpack segments into parallel float arrays."""
    coords = np.array(
        [(cs.segment.a.x, cs.segment.a.y, cs.segment.b.x, cs.segment.b.y)
         for cs in segments],
        dtype=np.float64,
    ).reshape(-1, 4)
    boxes = np.array([tuple(cs.aabb) for cs in segments], dtype=np.float64).reshape(-1, 4)
    colors = np.array([cs.color.value for cs in segments], dtype=np.int8)
    return coords, boxes, colors


def compute_channel_distances(
    width: int,
    height: int,
    segments: Sequence[ColoredSegment],
    index: TileIndex,
    max_distance: float,
) -> ChannelField:
    """
    Unsigned distance from every pixel center to the nearest edge per channel.

    Candidates for a pixel are the segments in the 3x3 tile block around its
    tile. A candidate survives when both its bounding box and the segment
    itself are within ``max_distance``; channels with no survivor hold
    ``max_distance``. Pixels of one tile share a candidate list, so the work
    is done a tile at a time with numpy, in pixel blocks of at most
    ``MAX_PAIRS_PER_CHUNK`` pixel/candidate pairs.

    Args:
        width: Image width in pixels
        height: Image height in pixels
        segments: Colored segments
        index: Tile index built over ``segments``
        max_distance: Search radius and clamp value

    Returns:
        (3, H, W) float64 array of R, G, B distances in [0, max_distance]
    """
    field = np.full((3, height, width), max_distance, dtype=np.float64)
    if not segments:
        return field

    coords, boxes, colors = _segment_arrays(segments)
    max_dist_sq = max_distance * max_distance
    candidates_scanned = 0

    for ty in range(index.tiles_y):
        for tx in range(index.tiles_x):
            candidates = index.neighborhood(tx, ty)
            if not candidates:
                continue

            cand = np.asarray(candidates)
            seg = coords[cand]
            box = boxes[cand]
            cand_colors = colors[cand]
            channels = [
                (color.value, cand_colors == color.value)
                for color in EdgeColor
                if (cand_colors == color.value).any()
            ]

            x0, x1, y0, y1 = index.pixel_bounds(tx, ty)
            tile_width = x1 - x0
            n_pixels = (y1 - y0) * tile_width
            candidates_scanned += n_pixels * len(cand)

            # Pixel blocks keep the pixel x candidate arrays bounded
            step = max(1, MAX_PAIRS_PER_CHUNK // len(cand))
            for start in range(0, n_pixels, step):
                flat = np.arange(start, min(start + step, n_pixels))
                rows = y0 + flat // tile_width
                cols = x0 + flat % tile_width
                # Distances are measured from pixel centers
                px = (cols + 0.5).astype(np.float64).reshape(-1, 1)
                py = (rows + 0.5).astype(np.float64).reshape(-1, 1)

                box_sq = point_aabb_distance_sq(
                    px, py, box[:, 0], box[:, 1], box[:, 2], box[:, 3]
                )
                dist_sq = point_segment_distance_sq(
                    px, py, seg[:, 0], seg[:, 1], seg[:, 2], seg[:, 3]
                )
                dist_sq[(box_sq > max_dist_sq) | (dist_sq > max_dist_sq)] = np.inf

                for channel, in_channel in channels:
                    best_sq = dist_sq[:, in_channel].min(axis=1)
                    field[channel, rows, cols] = np.where(
                        np.isfinite(best_sq), np.sqrt(best_sq), max_distance
                    )

    logger.info(
        f"Distance field {width}x{height}: {len(segments)} segments, "
        f"{candidates_scanned} pixel/segment pairs scanned"
    )
    return field


def apply_sign(distances: ChannelField, alpha: AlphaField, threshold: float) -> ChannelField:
    """
    Negate all channels of pixels inside the silhouette, in place.

    Inside means ``alpha >= threshold``, independent of edge geometry.
    """
    inside = alpha >= threshold
    distances[:, inside] *= -1.0
    return distances
