"""Encoding of signed channel distances into an RGBA pixel buffer."""
import json
from pathlib import Path
from typing import List, Sequence, Tuple, Union

import numpy as np
from PIL import Image

from msdfbake.types import ChannelField, ColoredSegment, PixelBuffer


def encode_msdf(signed: ChannelField, max_distance: float) -> PixelBuffer:
    """
    Normalize signed distances to [0, 1] and pack them as RGBA.

    Each channel maps as ``value / max_distance * 0.5 + 0.5``; alpha is 1.

    Args:
        signed: (3, H, W) signed distances, magnitude <= max_distance
        max_distance: Distance clamp used during the bake

    Returns:
        (H, W, 4) float32 RGBA buffer
    """
    height, width = signed.shape[1:]
    pixels = np.ones((height, width, 4), dtype=np.float32)
    pixels[..., :3] = np.moveaxis(signed / max_distance * 0.5 + 0.5, 0, -1)
    return pixels


def to_rgba8(pixels: PixelBuffer) -> np.ndarray:
    """Quantize a float RGBA buffer to uint8."""
    return np.round(np.clip(pixels, 0.0, 1.0) * 255.0).astype(np.uint8)


def save_msdf_png(pixels: PixelBuffer, path: Union[str, Path]) -> None:
    """
    Write an RGBA buffer as PNG.

    Row 0 of the buffer is the first row of the file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(to_rgba8(pixels)).save(path)


def segments_to_records(segments: Sequence[ColoredSegment]) -> List[Tuple[Tuple[float, float], Tuple[float, float], str]]:
    """Colored segments as plain ``((ax, ay), (bx, by), channel)`` tuples."""
    return [
        ((cs.segment.a.x, cs.segment.a.y), (cs.segment.b.x, cs.segment.b.y), cs.color.name)
        for cs in segments
    ]


def save_segments_json(segments: Sequence[ColoredSegment], path: Union[str, Path]) -> None:
    """Dump segment records for external visualization."""
    records = [
        {"a": list(a), "b": list(b), "channel": channel}
        for a, b, channel in segments_to_records(segments)
    ]
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(records, indent=2))
