"""Edge coloring: assign contour edges to the R, G and B channels."""
import logging
from typing import List

import numpy as np

from msdfbake.types import ColoredSegment, Contour, EdgeColor, Point

logger = logging.getLogger(__name__)


def signed_area(contour: Contour) -> float:
    """
    Shoelace area of a closed contour.

    Positive for counter-clockwise order in a y-up frame. Contours use
    image rows for y, which grow downward, so a positive contour appears
    clockwise when the image is displayed with row 0 on top.
    """
    x = contour[:, 0]
    y = contour[:, 1]
    return 0.5 * float(np.sum(x[:-1] * y[1:] - x[1:] * y[:-1]))


def make_counter_clockwise(contour: Contour) -> Contour:
    """Return the contour in counter-clockwise order."""
    if signed_area(contour) < 0:
        return contour[::-1].copy()
    return contour


def color_edges(contours: List[Contour]) -> List[ColoredSegment]:
    """
    Turn contours into colored edges.

    Each contour is made counter-clockwise (see ``signed_area`` for the
    frame), then its edges are colored R, G, B, R, ... starting over at R
    for every contour. Corner sharpness is not analyzed, so channel changes
    need not fall on geometric corners.

    Args:
        contours: Closed contours

    Returns:
        Colored segments, contour by contour, in walk order
    """
    result: List[ColoredSegment] = []

    for contour in contours:
        contour = make_counter_clockwise(contour)
        color = EdgeColor.R

        # Last vertex duplicates the first
        for i in range(len(contour) - 1):
            a = Point(float(contour[i, 0]), float(contour[i, 1]))
            b = Point(float(contour[i + 1, 0]), float(contour[i + 1, 1]))
            result.append(ColoredSegment.from_points(a, b, color))
            color = color.next()

    logger.info(f"Colored {len(result)} edges across {len(contours)} contours")
    return result
