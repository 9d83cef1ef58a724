"""Sub-pixel boundary extraction using Marching Squares."""
import logging
from dataclasses import dataclass
from typing import List, Tuple, Union

import numpy as np

from msdfbake.types import AlphaField, Point, Segment

logger = logging.getLogger(__name__)

# Cell edges: 0 bottom (bl->br), 1 right (br->tr), 2 top (tr->tl), 3 left (bl->tl)
EdgePair = Tuple[int, int]


@dataclass(frozen=True)
class NoCrossing:
    """Cell fully inside or fully outside."""


@dataclass(frozen=True)
class OnePair:
    """Boundary enters through one edge and leaves through another."""
    pair: EdgePair


@dataclass(frozen=True)
class TwoPairs:
    """Checkerboard cell; the center sample picks joined or split regions."""
    center_inside: Tuple[EdgePair, EdgePair]
    center_outside: Tuple[EdgePair, EdgePair]


CellCase = Union[NoCrossing, OnePair, TwoPairs]

# Indexed by corner mask: bl=1, br=2, tr=4, tl=8
CASE_TABLE: Tuple[CellCase, ...] = (
    NoCrossing(),                                   # 0
    OnePair((3, 0)),                                # 1
    OnePair((0, 1)),                                # 2
    OnePair((3, 1)),                                # 3
    OnePair((1, 2)),                                # 4
    TwoPairs(((3, 2), (0, 1)), ((3, 0), (2, 1))),   # 5
    OnePair((0, 2)),                                # 6
    OnePair((3, 2)),                                # 7
    OnePair((2, 3)),                                # 8
    OnePair((2, 0)),                                # 9
    TwoPairs(((1, 2), (0, 3)), ((1, 0), (2, 3))),   # 10
    OnePair((1, 2)),                                # 11
    OnePair((1, 3)),                                # 12
    OnePair((0, 1)),                                # 13
    OnePair((0, 3)),                                # 14
    NoCrossing(),                                   # 15
)

# Per edge: (start corner offset, end corner offset, start corner, end corner)
# with corners indexed bl=0, br=1, tr=2, tl=3
_EDGE_CORNERS = (
    ((0.0, 0.0), (1.0, 0.0), 0, 1),
    ((1.0, 0.0), (1.0, 1.0), 1, 2),
    ((1.0, 1.0), (0.0, 1.0), 2, 3),
    ((0.0, 0.0), (0.0, 1.0), 0, 3),
)


def corner_masks(alpha: AlphaField, threshold: float) -> np.ndarray:
    """
    Classify every 2x2 cell of the sample lattice.

    Returns:
        (H-1, W-1) uint8 array of 4-bit corner masks
    """
    inside = alpha >= threshold
    masks = np.zeros((alpha.shape[0] - 1, alpha.shape[1] - 1), dtype=np.uint8)
    masks |= inside[:-1, :-1].astype(np.uint8)        # bottom-left
    masks |= inside[:-1, 1:].astype(np.uint8) << 1    # bottom-right
    masks |= inside[1:, 1:].astype(np.uint8) << 2     # top-right
    masks |= inside[1:, :-1].astype(np.uint8) << 3    # top-left
    return masks


def crossing_parameter(a0: float, a1: float, threshold: float) -> float:
    """Fraction along an edge where the interpolated alpha hits threshold."""
    if abs(a1 - a0) < 1e-6:
        return 0.5
    t = (threshold - a0) / (a1 - a0)
    return min(1.0, max(0.0, t))


def snap(value: float, eps: float) -> float:
    """Quantize a coordinate to a multiple of eps."""
    return round(value / eps) * eps


def resolve_case(mask: int, corners: Tuple[float, float, float, float],
                 threshold: float) -> Tuple[EdgePair, ...]:
    """Edge pairs the boundary crosses for one cell."""
    case = CASE_TABLE[mask]
    if isinstance(case, OnePair):
        return (case.pair,)
    if isinstance(case, TwoPairs):
        center = sum(corners) * 0.25
        return case.center_inside if center >= threshold else case.center_outside
    return ()


def extract_segments(
    alpha: AlphaField,
    threshold: float = 0.5,
    stitch_eps: float = 0.01,
    origin: float = 0.5,
) -> List[Segment]:
    """
    Extract unordered boundary segments at the threshold iso-level.

    Lattice sample (x, y) is placed at (x + origin, y + origin), so with the
    default origin segments live in the same space as pixel centers.

    Args:
        alpha: (H, W) alpha field
        threshold: Iso level; corners >= threshold are inside
        stitch_eps: Snapping step for crossing points

    Returns:
        Segments in row-major cell order
    """
    masks = corner_masks(alpha, threshold)
    rows, cols = np.nonzero((masks != 0) & (masks != 15))

    segments: List[Segment] = []
    dropped = 0

    for y, x in zip(rows.tolist(), cols.tolist()):
        corners = (
            float(alpha[y, x]),
            float(alpha[y, x + 1]),
            float(alpha[y + 1, x + 1]),
            float(alpha[y + 1, x]),
        )

        def edge_point(edge: int) -> Point:
            p0, p1, c0, c1 = _EDGE_CORNERS[edge]
            t = crossing_parameter(corners[c0], corners[c1], threshold)
            px = x + origin + p0[0] + (p1[0] - p0[0]) * t
            py = y + origin + p0[1] + (p1[1] - p0[1]) * t
            return Point(snap(px, stitch_eps), snap(py, stitch_eps))

        for e0, e1 in resolve_case(int(masks[y, x]), corners, threshold):
            a = edge_point(e0)
            b = edge_point(e1)
            if a == b:
                # Both crossings collapsed onto a corner sample
                dropped += 1
                continue
            segments.append(Segment(a, b))

    logger.info(
        f"Marching squares: {len(rows)} boundary cells -> {len(segments)} segments"
    )
    if dropped:
        logger.debug(f"Dropped {dropped} zero-length segments")

    return segments
