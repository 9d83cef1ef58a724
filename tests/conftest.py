"""Pytest configuration and fixtures."""

import numpy as np
import pytest


def make_square(size: int = 32, lo: int = 11, hi: int = 21) -> np.ndarray:
    """Opaque square covering pixels [lo, hi) on a transparent canvas."""
    alpha = np.zeros((size, size), dtype=np.float32)
    alpha[lo:hi, lo:hi] = 1.0
    return alpha


def make_disc(size: int = 64, radius: float = 20.0) -> np.ndarray:
    """Opaque disc centered on the canvas."""
    ys, xs = np.mgrid[0:size, 0:size]
    center = (size - 1) / 2.0
    return ((xs - center) ** 2 + (ys - center) ** 2 <= radius ** 2).astype(np.float32)


@pytest.fixture
def square_alpha():
    """10x10 opaque square centered in a 32x32 transparent image."""
    return make_square()


@pytest.fixture
def disc_alpha():
    """Disc of radius 20 in a 64x64 image."""
    return make_disc()


@pytest.fixture
def ring_alpha():
    """Square with a square hole: one outer and one inner contour."""
    alpha = make_square(40, 8, 32)
    alpha[16:24, 16:24] = 0.0
    return alpha


@pytest.fixture
def two_squares_alpha():
    """Two separate opaque squares."""
    alpha = np.zeros((48, 48), dtype=np.float32)
    alpha[5:15, 5:15] = 1.0
    alpha[28:40, 25:41] = 1.0
    return alpha
