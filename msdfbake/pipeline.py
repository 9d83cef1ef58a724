"""Main bake orchestrator for msdfbake."""
import logging
import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np

from msdfbake.debug_visualization import render_channel, render_segment_overlay
from msdfbake.distance_field import apply_sign, compute_channel_distances
from msdfbake.edge_coloring import color_edges
from msdfbake.encode import encode_msdf, save_msdf_png, segments_to_records
from msdfbake.marching_squares import extract_segments
from msdfbake.raster_ingest import alpha_from_array, alpha_from_flat, ingest_alpha
from msdfbake.simplify import simplify_contours
from msdfbake.stitching import stitch_contours
from msdfbake.tile_index import TileIndex
from msdfbake.types import (
    AlphaField,
    BakeConfig,
    BakeResult,
    ColoredSegment,
    EdgeColor,
    MSDFError,
)

logger = logging.getLogger(__name__)

SegmentSink = Callable[[List[ColoredSegment]], None]


class MSDFPipeline:
    """Bakes multi-channel signed distance fields from alpha masks."""

    def __init__(self, config: Optional[BakeConfig] = None):
        """Initialize pipeline with configuration.

        Args:
            config: Bake configuration. Uses defaults if None.
        """
        self.config = config or BakeConfig()
        self.debug_stages: List[Tuple[str, np.ndarray]] = []

    def bake(
        self,
        alpha: Union[AlphaField, np.ndarray],
        segment_sink: Optional[SegmentSink] = None,
        debug: bool = False,
    ) -> BakeResult:
        """Run the full bake on one alpha field.

        Args:
            alpha: (H, W) alpha samples, or any array accepted by
                ``alpha_from_array``
            segment_sink: Optional callable that receives the colored
                segments once the edges are built
            debug: If True, collect intermediate stage images

        Returns:
            BakeResult with the RGBA buffer, signed distances, contours
            and colored segments
        """
        cfg = self.config
        alpha = alpha_from_array(alpha)
        height, width = alpha.shape
        self.debug_stages = []
        timings = {}

        start = time.perf_counter()
        segments = extract_segments(alpha, cfg.threshold, cfg.stitch_eps)
        timings["extract"] = time.perf_counter() - start

        start = time.perf_counter()
        contours = stitch_contours(segments, cfg.stitch_eps)
        contours = simplify_contours(contours, cfg.simplify_epsilon)
        timings["stitch"] = time.perf_counter() - start

        if segments and not contours:
            logger.warning(
                f"{len(segments)} boundary segments but no closed contour; "
                "shapes touching the image border stay open"
            )

        start = time.perf_counter()
        colored = color_edges(contours)
        if segment_sink is not None:
            segment_sink(list(colored))
        timings["color"] = time.perf_counter() - start

        start = time.perf_counter()
        index = TileIndex.build(width, height, cfg.tile_size, colored, cfg.max_distance)
        distances = compute_channel_distances(width, height, colored, index, cfg.max_distance)
        timings["distance"] = time.perf_counter() - start

        start = time.perf_counter()
        apply_sign(distances, alpha, cfg.threshold)
        pixels = encode_msdf(distances, cfg.max_distance)
        timings["encode"] = time.perf_counter() - start

        if debug:
            self.debug_stages.append(("1_alpha", alpha))
            self.debug_stages.append(
                ("2_segments", render_segment_overlay(colored, width, height, background=alpha))
            )
            for color in EdgeColor:
                self.debug_stages.append(
                    (f"3_channel_{color.name}", render_channel(distances, color, cfg.max_distance))
                )
            self.debug_stages.append(("4_msdf", pixels))

        stats = {
            "segments": len(segments),
            "contours": len(contours),
            "edges": len(colored),
            "tiles": index.tiles_x * index.tiles_y,
            "tile_entries": index.entry_count(),
        }
        stats.update({f"time_{name}": elapsed for name, elapsed in timings.items()})

        logger.info(
            f"Baked {width}x{height}: {len(contours)} contours, {len(colored)} edges "
            f"in {sum(timings.values()):.3f}s"
        )

        return BakeResult(
            pixels=pixels,
            distances=distances,
            contours=contours,
            segments=colored,
            stats=stats,
        )


def bake_msdf(
    alpha: Union[AlphaField, np.ndarray],
    config: Optional[BakeConfig] = None,
    segment_sink: Optional[SegmentSink] = None,
    **overrides,
) -> BakeResult:
    """Bake an alpha field in one call.

    Convenience function for one-off baking.

    Args:
        alpha: (H, W) alpha samples
        config: Optional configuration object
        segment_sink: Optional receiver for the colored segments
        **overrides: BakeConfig fields to set instead of passing a config

    Returns:
        BakeResult

    Example:
        >>> result = bake_msdf(alpha, max_distance=8.0, tile_size=8)
        >>> result.pixels.shape
        (64, 64, 4)
    """
    if config is not None and overrides:
        raise MSDFError("Pass either a config or keyword overrides, not both")
    if config is None:
        config = BakeConfig(**overrides)
    return MSDFPipeline(config).bake(alpha, segment_sink=segment_sink)


def bake_flat(
    width: int,
    height: int,
    alpha: Sequence[float],
    threshold: float = 0.5,
    max_distance: float = 16.0,
    tile_size: int = 16,
    stitch_eps: float = 0.01,
    with_segments: bool = False,
):
    """Bake from a row-major flat alpha list.

    Returns:
        List of ``(r, g, b, a)`` tuples in row-major order, or a
        ``(pixels, segment_records)`` pair when ``with_segments`` is set
    """
    config = BakeConfig(
        threshold=threshold,
        max_distance=max_distance,
        tile_size=tile_size,
        stitch_eps=stitch_eps,
    )
    result = MSDFPipeline(config).bake(alpha_from_flat(alpha, width, height))
    pixels = [tuple(px) for px in result.pixels.reshape(-1, 4).tolist()]

    if with_segments:
        return pixels, segments_to_records(result.segments)
    return pixels


def process_image(
    image_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    config: Optional[BakeConfig] = None,
    use_luminance: bool = False,
) -> BakeResult:
    """Bake an image file and optionally save the MSDF as PNG.

    Args:
        image_path: Path to input image
        output_path: Optional path to save the PNG
        config: Optional configuration object
        use_luminance: Sample luminance instead of alpha

    Returns:
        BakeResult

    Raises:
        FileNotFoundError: If input file doesn't exist
        MSDFError: If baking fails
    """
    try:
        alpha = ingest_alpha(image_path, use_luminance=use_luminance)
        result = MSDFPipeline(config).bake(alpha)

        if output_path:
            save_msdf_png(result.pixels, output_path)

        return result

    except (FileNotFoundError, MSDFError):
        raise
    except Exception as e:
        raise MSDFError(f"Bake failed for {image_path}: {e}") from e
