"""Core types for the MSDF bake pipeline."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, NamedTuple

import numpy as np

# Type aliases
AlphaField = np.ndarray    # (H, W) float32, read-only, values in [0, 1]
Contour = np.ndarray       # (N, 2) float, closed: contour[-1] == contour[0]
ChannelField = np.ndarray  # (3, H, W) float32, R/G/B distances in pixels
PixelBuffer = np.ndarray   # (H, W, 4) float32 RGBA in [0, 1]


class Point(NamedTuple):
    """2D point in pixel space."""
    x: float
    y: float


class AABB(NamedTuple):
    """Axis-aligned bounding box."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def dilated(self, amount: float) -> "AABB":
        return AABB(
            self.min_x - amount,
            self.min_y - amount,
            self.max_x + amount,
            self.max_y + amount,
        )


class Segment(NamedTuple):
    """One boundary edge produced at a marching-squares cell crossing."""
    a: Point
    b: Point

    @property
    def aabb(self) -> AABB:
        return AABB(
            min(self.a.x, self.b.x),
            min(self.a.y, self.b.y),
            max(self.a.x, self.b.x),
            max(self.a.y, self.b.y),
        )


class EdgeColor(Enum):
    """Distance channel an edge contributes to."""
    R = 0
    G = 1
    B = 2

    def next(self) -> "EdgeColor":
        return EdgeColor((self.value + 1) % 3)


class ColoredSegment(NamedTuple):
    """Segment with its assigned channel and precomputed bounding box."""
    segment: Segment
    color: EdgeColor
    aabb: AABB

    @classmethod
    def from_points(cls, a: Point, b: Point, color: EdgeColor) -> "ColoredSegment":
        segment = Segment(Point(*a), Point(*b))
        return cls(segment, color, segment.aabb)


@dataclass
class BakeConfig:
    """Parameters for one MSDF bake.

    Attributes:
        threshold: Alpha level separating inside (>=) from outside, in (0, 1).
        max_distance: Distance clamp in pixels; also the encoding range.
        tile_size: Edge length of a spatial index tile in pixels. Must be at
            least ``max_distance`` so the 3x3 tile neighborhood of a pixel
            covers every edge within range.
        stitch_eps: Quantization step for crossing points and endpoint keys.
        simplify_epsilon: Douglas-Peucker tolerance in pixels applied to
            stitched contours. 0 disables simplification.
    """
    threshold: float = 0.5
    max_distance: float = 16.0
    tile_size: int = 16
    stitch_eps: float = 0.01
    simplify_epsilon: float = 0.0

    def __post_init__(self):
        """Reject parameters that would make the bake meaningless or wrong."""
        if not 0.0 < self.threshold < 1.0:
            raise BakeConfigError(
                f"threshold must be in (0, 1), got {self.threshold}"
            )
        if self.max_distance <= 0:
            raise BakeConfigError(
                f"max_distance must be positive, got {self.max_distance}"
            )
        if int(self.tile_size) != self.tile_size or self.tile_size <= 0:
            raise BakeConfigError(
                f"tile_size must be a positive integer, got {self.tile_size}"
            )
        self.tile_size = int(self.tile_size)
        if self.tile_size < self.max_distance:
            raise BakeConfigError(
                f"tile_size ({self.tile_size}) must be >= max_distance "
                f"({self.max_distance}) for the 3x3 tile search to be exact"
            )
        if self.stitch_eps <= 0:
            raise BakeConfigError(
                f"stitch_eps must be positive, got {self.stitch_eps}"
            )
        if self.simplify_epsilon < 0:
            raise BakeConfigError(
                f"simplify_epsilon must be >= 0, got {self.simplify_epsilon}"
            )


@dataclass
class BakeResult:
    """Everything produced by one bake."""
    pixels: PixelBuffer
    distances: ChannelField
    contours: List[Contour] = field(default_factory=list)
    segments: List[ColoredSegment] = field(default_factory=list)
    stats: Dict[str, float] = field(default_factory=dict)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


class MSDFError(Exception):
    """Base exception for MSDF baking errors."""
    pass


class BakeConfigError(MSDFError, ValueError):
    """Exception raised when bake parameters fail validation."""
    pass
