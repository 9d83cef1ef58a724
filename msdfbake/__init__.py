"""msdfbake: multi-channel signed distance fields from alpha masks."""
from msdfbake.types import (
    BakeConfig,
    BakeConfigError,
    BakeResult,
    ColoredSegment,
    EdgeColor,
    MSDFError,
    Point,
    Segment,
)
from msdfbake.pipeline import MSDFPipeline, bake_flat, bake_msdf, process_image

__version__ = "0.1.0"
__all__ = [
    "BakeConfig",
    "BakeConfigError",
    "BakeResult",
    "ColoredSegment",
    "EdgeColor",
    "MSDFError",
    "MSDFPipeline",
    "Point",
    "Segment",
    "bake_flat",
    "bake_msdf",
    "process_image",
]
