"""Command-line interface for msdfbake."""
import argparse
import logging
import math
import sys
from pathlib import Path
from typing import Optional

from msdfbake.debug_visualization import save_debug_stages
from msdfbake.encode import save_msdf_png, save_segments_json
from msdfbake.pipeline import MSDFPipeline
from msdfbake.raster_ingest import ingest_alpha
from msdfbake.types import BakeConfig, MSDFError


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="msdfbake",
        description="Bake a multi-channel signed distance field from an alpha mask",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  msdfbake icon.png -o icon_msdf.png
  msdfbake icon.png --max-distance 8 --tile-size 8 --simplify 1.0
  msdfbake mask.jpg --luminance --segments-json edges.json --debug
        """,
    )

    parser.add_argument("input", type=str, help="Input image path")

    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output PNG path (default: <input>_msdf.png)",
    )

    parser.add_argument(
        "--threshold",
        type=float,
        default=0.5,
        help="Alpha level separating inside from outside (default: 0.5)",
    )

    parser.add_argument(
        "--max-distance",
        type=float,
        default=16.0,
        help="Distance range in pixels (default: 16)",
    )

    parser.add_argument(
        "--tile-size",
        type=int,
        default=None,
        help="Spatial index tile size, must be >= max distance (default: ceil(max distance))",
    )

    parser.add_argument(
        "--stitch-eps",
        type=float,
        default=0.01,
        help="Endpoint snapping step (default: 0.01)",
    )

    parser.add_argument(
        "--simplify",
        type=float,
        default=0.0,
        help="Douglas-Peucker tolerance in pixels, 0 to disable (default: 0)",
    )

    parser.add_argument(
        "--luminance",
        action="store_true",
        help="Sample luminance instead of the alpha channel",
    )

    parser.add_argument(
        "--segments-json",
        default=None,
        help="Write the colored edge segments to this JSON file",
    )

    parser.add_argument(
        "--debug", action="store_true", help="Save intermediate stage visualizations"
    )

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    input_path = Path(parsed.input)
    if parsed.output:
        output_path = Path(parsed.output)
    else:
        output_path = input_path.with_name(f"{input_path.stem}_msdf.png")

    tile_size = parsed.tile_size
    if tile_size is None:
        tile_size = max(1, math.ceil(parsed.max_distance))

    try:
        config = BakeConfig(
            threshold=parsed.threshold,
            max_distance=parsed.max_distance,
            tile_size=tile_size,
            stitch_eps=parsed.stitch_eps,
            simplify_epsilon=parsed.simplify,
        )

        print(f"Baking: {input_path}")
        print(f"  Threshold: {config.threshold}")
        print(f"  Max distance: {config.max_distance}")
        print(f"  Tile size: {config.tile_size}")

        alpha = ingest_alpha(input_path, use_luminance=parsed.luminance)
        pipeline = MSDFPipeline(config)
        result = pipeline.bake(alpha, debug=parsed.debug)

        save_msdf_png(result.pixels, output_path)
        print(f"  Contours: {result.stats['contours']}, edges: {result.stats['edges']}")
        print(f"  Output saved: {output_path}")

        if parsed.segments_json:
            save_segments_json(result.segments, parsed.segments_json)
            print(f"  Segments saved: {parsed.segments_json}")

        if parsed.debug:
            debug_dir = output_path.parent / f"{output_path.stem}_debug"
            for path in save_debug_stages(pipeline.debug_stages, debug_dir):
                print(f"  Saved debug stage: {path}")

        return 0

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except MSDFError as e:
        print(f"Error baking image: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
