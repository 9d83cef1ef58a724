"""Contour simplification using the Douglas-Peucker algorithm."""
import logging
from typing import List

import cv2
import numpy as np

from msdfbake.types import Contour

logger = logging.getLogger(__name__)


def simplify_contour(contour: Contour, epsilon: float) -> Contour:
    """Simplify a closed contour using Douglas-Peucker.

    Marching squares emits one vertex per crossed cell, so straight runs
    carry many collinear points and corners come out chamfered. This
    removes vertices that lie within ``epsilon`` of the simplified outline,
    which lets edge colors change at real corners instead of every cell.

    Args:
        contour: Closed (N, 2) contour with contour[-1] == contour[0]
        epsilon: Maximum deviation in pixels. 0 returns the input unchanged.

    Returns:
        Closed simplified contour. May have fewer than 3 distinct vertices
        if the shape collapses.
    """
    if epsilon <= 0 or len(contour) < 4:
        return contour

    open_ring = contour[:-1].astype(np.float32).reshape(-1, 1, 2)

    simplified = cv2.approxPolyDP(open_ring, epsilon, closed=True)
    simplified = simplified.reshape(-1, 2).astype(np.float64)

    return np.vstack([simplified, simplified[:1]])


def simplify_contours(contours: List[Contour], epsilon: float) -> List[Contour]:
    """Simplify contours, dropping those that collapse below 3 vertices.

    Args:
        contours: Closed contours
        epsilon: Maximum deviation in pixels

    Returns:
        List of simplified contours
    """
    if epsilon <= 0:
        return list(contours)

    result = []
    for contour in contours:
        simplified = simplify_contour(contour, epsilon)
        if len(simplified) - 1 < 3:
            logger.debug(
                f"Contour with {len(contour) - 1} vertices collapsed under "
                f"epsilon={epsilon}, dropped"
            )
            continue
        result.append(simplified)

    logger.info(
        f"Simplified {sum(len(c) - 1 for c in contours)} vertices to "
        f"{sum(len(c) - 1 for c in result)}"
    )
    return result
