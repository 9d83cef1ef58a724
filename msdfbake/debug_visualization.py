"""Debug visualization for bake stages."""
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np
from PIL import Image

from msdfbake.types import AlphaField, ChannelField, ColoredSegment, EdgeColor

logger = logging.getLogger(__name__)

CHANNEL_RGB = {
    EdgeColor.R: (255, 40, 40),
    EdgeColor.G: (40, 220, 40),
    EdgeColor.B: (60, 90, 255),
}


def render_segment_overlay(
    segments: Sequence[ColoredSegment],
    width: int,
    height: int,
    scale: int = 4,
    background: Optional[AlphaField] = None,
) -> np.ndarray:
    """
    Draw colored segments over the (optionally dimmed) alpha mask.

    Args:
        segments: Colored segments in pixel space
        width: Image width in pixels
        height: Image height in pixels
        scale: Upscaling factor so sub-pixel geometry stays visible
        background: Optional alpha field shown in gray underneath

    Returns:
        (height*scale, width*scale, 3) uint8 RGB image
    """
    if background is not None:
        gray = (np.asarray(background) * 96).astype(np.uint8)
        gray = cv2.resize(gray, (width * scale, height * scale),
                          interpolation=cv2.INTER_NEAREST)
        canvas = np.ascontiguousarray(np.repeat(gray[..., None], 3, axis=2))
    else:
        canvas = np.zeros((height * scale, width * scale, 3), dtype=np.uint8)

    for cs in segments:
        a = (int(round(cs.segment.a.x * scale)), int(round(cs.segment.a.y * scale)))
        b = (int(round(cs.segment.b.x * scale)), int(round(cs.segment.b.y * scale)))
        cv2.line(canvas, a, b, CHANNEL_RGB[cs.color], 1, cv2.LINE_AA)

    return canvas


def render_channel(distances: ChannelField, channel: EdgeColor, max_distance: float) -> np.ndarray:
    """Map one signed channel to grayscale: inside dark, outside bright."""
    normalized = distances[channel.value] / max_distance * 0.5 + 0.5
    return np.round(np.clip(normalized, 0.0, 1.0) * 255).astype(np.uint8)


def save_debug_stages(stages: List[Tuple[str, np.ndarray]], directory: Path) -> List[Path]:
    """Save named stage images as PNG files.

    Args:
        stages: (name, image) pairs; images are uint8 or floats in [0, 1]
        directory: Output directory, created if missing

    Returns:
        Paths written
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    written = []
    for stage_name, stage_image in stages:
        if stage_image.dtype != np.uint8:
            stage_image = np.round(np.clip(stage_image, 0.0, 1.0) * 255).astype(np.uint8)

        path = directory / f"{stage_name}.png"
        Image.fromarray(stage_image).save(path)
        logger.info(f"Saved debug stage: {path}")
        written.append(path)

    return written
