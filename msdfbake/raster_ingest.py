"""Raster ingestion: turn image data into a normalized alpha field."""
from pathlib import Path
from typing import Sequence, Union

import numpy as np
from PIL import Image
from PIL import ImageOps

from msdfbake.types import AlphaField, BakeConfigError, MSDFError


def _freeze(alpha: np.ndarray) -> AlphaField:
    """Validate shape, clip to [0, 1] and mark read-only."""
    if alpha.ndim != 2:
        raise BakeConfigError(f"Expected 2D alpha field, got {alpha.ndim}D")

    height, width = alpha.shape
    if width <= 0 or height <= 0:
        raise BakeConfigError(
            f"Alpha field must have positive size, got {width}x{height}"
        )

    field = np.clip(alpha.astype(np.float32), 0.0, 1.0)
    field.setflags(write=False)
    return field


def alpha_from_array(array: np.ndarray) -> AlphaField:
    """
    Normalize an array into an alpha field.

    Args:
        array: (H, W) coverage values, or (H, W, C) with alpha in the last
            channel when C is 2 or 4. Integer data is scaled by its type max.

    Returns:
        Read-only float32 (H, W) array in [0, 1]
    """
    array = np.asarray(array)

    if array.ndim == 3:
        if array.shape[2] not in (2, 4):
            raise BakeConfigError(
                f"Expected 2 or 4 channels to read alpha from, got {array.shape[2]}"
            )
        array = array[..., -1]

    if np.issubdtype(array.dtype, np.integer):
        scale = float(np.iinfo(array.dtype).max)
        array = array.astype(np.float32) / scale
    elif array.dtype == np.bool_:
        array = array.astype(np.float32)

    return _freeze(array)


def alpha_from_flat(values: Sequence[float], width: int, height: int) -> AlphaField:
    """
    Build an alpha field from a row-major flat sequence.

    Element ``y * width + x`` is the sample of pixel (x, y).
    """
    if width <= 0 or height <= 0:
        raise BakeConfigError(
            f"width and height must be positive, got {width}x{height}"
        )

    flat = np.asarray(values, dtype=np.float32)
    if flat.size != width * height:
        raise BakeConfigError(
            f"Expected {width * height} alpha samples, got {flat.size}"
        )

    return _freeze(flat.reshape(height, width))


def ingest_alpha(path: Union[str, Path], use_luminance: bool = False) -> AlphaField:
    """
    Load an image file and sample its coverage.

    Reads the alpha channel; falls back to luminance for images without
    one, or when ``use_luminance`` is set.

    Args:
        path: Path to image file
        use_luminance: Sample grayscale luminance instead of alpha

    Returns:
        Read-only float32 (H, W) alpha field

    Raises:
        FileNotFoundError: If file doesn't exist
        MSDFError: If file cannot be loaded
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    if not path.is_file():
        raise MSDFError(f"Path is not a file: {path}")

    try:
        with Image.open(path) as img:
            # Apply EXIF orientation transformation to handle rotation
            img = ImageOps.exif_transpose(img)

            has_alpha = img.mode in ('RGBA', 'LA', 'PA') or (
                img.mode == 'P' and 'transparency' in img.info
            )

            if use_luminance or not has_alpha:
                samples = np.array(img.convert('L'))
            else:
                samples = np.array(img.convert('RGBA'))[..., 3]

    except (IOError, OSError) as e:
        raise MSDFError(f"Failed to load image {path}: {e}") from e

    return alpha_from_array(samples)
