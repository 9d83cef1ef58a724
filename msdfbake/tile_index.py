"""Uniform tile grid for bounded-radius nearest-edge queries."""
import logging
import math
from typing import List, Sequence, Tuple

from msdfbake.types import BakeConfigError, ColoredSegment

logger = logging.getLogger(__name__)


class TileIndex:
    """Grid of tiles, each listing segments that may lie within range of it.

    A segment is registered in every tile overlapped by its bounding box
    dilated by ``max_distance``. Queries scan the 3x3 block of tiles around
    a pixel, which covers every segment within ``max_distance`` only when
    ``tile_size >= max_distance``; construction enforces that.
    """

    def __init__(self, width: int, height: int, tile_size: int, max_distance: float):
        if width <= 0 or height <= 0:
            raise BakeConfigError(
                f"width and height must be positive, got {width}x{height}"
            )
        if int(tile_size) != tile_size or tile_size <= 0:
            raise BakeConfigError(
                f"tile_size must be a positive integer, got {tile_size}"
            )
        if max_distance <= 0:
            raise BakeConfigError(
                f"max_distance must be positive, got {max_distance}"
            )
        if tile_size < max_distance:
            raise BakeConfigError(
                f"tile_size ({tile_size}) must be >= max_distance ({max_distance})"
            )

        self.width = width
        self.height = height
        self.tile_size = int(tile_size)
        self.max_distance = float(max_distance)
        self.tiles_x = (width + self.tile_size - 1) // self.tile_size
        self.tiles_y = (height + self.tile_size - 1) // self.tile_size
        self.tiles: List[List[int]] = [[] for _ in range(self.tiles_x * self.tiles_y)]

    @classmethod
    def build(
        cls,
        width: int,
        height: int,
        tile_size: int,
        segments: Sequence[ColoredSegment],
        max_distance: float,
    ) -> "TileIndex":
        """Create an index and register all segments."""
        index = cls(width, height, tile_size, max_distance)
        for i, cs in enumerate(segments):
            index.insert(i, cs)

        occupied = sum(1 for t in index.tiles if t)
        logger.info(
            f"Tile index: {index.tiles_x}x{index.tiles_y} tiles, "
            f"{occupied} occupied, {index.entry_count()} entries"
        )
        return index

    def tile_range(self, cs: ColoredSegment) -> Tuple[int, int, int, int]:
        """Clamped (min_tx, max_tx, min_ty, max_ty) covered by a segment."""
        box = cs.aabb.dilated(self.max_distance)
        ts = self.tile_size

        def clamp(v: int, hi: int) -> int:
            return min(max(v, 0), hi)

        return (
            clamp(math.floor(box.min_x / ts), self.tiles_x - 1),
            clamp(math.floor(box.max_x / ts), self.tiles_x - 1),
            clamp(math.floor(box.min_y / ts), self.tiles_y - 1),
            clamp(math.floor(box.max_y / ts), self.tiles_y - 1),
        )

    def insert(self, segment_index: int, cs: ColoredSegment) -> None:
        min_tx, max_tx, min_ty, max_ty = self.tile_range(cs)
        for ty in range(min_ty, max_ty + 1):
            for tx in range(min_tx, max_tx + 1):
                self.tiles[ty * self.tiles_x + tx].append(segment_index)

    def tile_of(self, px: int, py: int) -> Tuple[int, int]:
        """Tile containing pixel (px, py)."""
        return px // self.tile_size, py // self.tile_size

    def tile(self, tx: int, ty: int) -> List[int]:
        return self.tiles[ty * self.tiles_x + tx]

    def neighborhood(self, tx: int, ty: int) -> List[int]:
        """Sorted unique segment indices in the 3x3 block around a tile."""
        found = set()
        for nty in range(ty - 1, ty + 2):
            if not 0 <= nty < self.tiles_y:
                continue
            for ntx in range(tx - 1, tx + 2):
                if not 0 <= ntx < self.tiles_x:
                    continue
                found.update(self.tile(ntx, nty))
        return sorted(found)

    def pixel_bounds(self, tx: int, ty: int) -> Tuple[int, int, int, int]:
        """Pixel range (x0, x1, y0, y1), end-exclusive, covered by a tile."""
        x0 = tx * self.tile_size
        y0 = ty * self.tile_size
        return x0, min(x0 + self.tile_size, self.width), y0, min(y0 + self.tile_size, self.height)

    def entry_count(self) -> int:
        return sum(len(t) for t in self.tiles)
