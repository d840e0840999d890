"""
Extract a representative color palette from an image.

The image is decoded, shrunk so its longest side fits a working size, and
sampled on a fixed pixel stride while skipping mostly transparent pixels.
The samples are then reduced to a small palette with median-cut quantization.
"""

from pathlib import Path

import numpy as np
from PIL import Image

from .export import to_hex
from .quantize import DEFAULT_PRECISION, quantize

DEFAULT_COLORS = 8
DEFAULT_QUALITY = 10
DEFAULT_MAX_SIDE = 800
DEFAULT_ALPHA_THRESHOLD = 125


class ImageLoadError(ValueError):
    """The input could not be decoded as an image."""


def load_image(input_path: str | Path) -> Image.Image:
    """Open an image file and convert it to RGBA."""
    try:
        with Image.open(input_path) as img:
            return img.convert("RGBA")
    except OSError as e:
        raise ImageLoadError(f"Failed to load image {input_path}: {e}") from e


def downscale(img: Image.Image, max_side: int = DEFAULT_MAX_SIDE) -> Image.Image:
    """Shrink the image so its longest side is at most max_side. Never enlarges."""
    scale = min(1.0, max_side / max(img.size))
    if scale >= 1.0:
        return img
    new_size = (max(1, int(img.size[0] * scale)), max(1, int(img.size[1] * scale)))
    return img.resize(new_size, Image.Resampling.LANCZOS)


def sample_pixels(
    img: Image.Image,
    quality: int = DEFAULT_QUALITY,
    alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD,
) -> np.ndarray:
    """
    Take every quality-th pixel in row-major order, dropping translucent ones.

    Args:
        img: Source image, any mode
        quality: Sampling stride in pixels (1 = every pixel)
        alpha_threshold: Pixels with alpha below this are skipped

    Returns:
        (N, 3) uint8 array of RGB samples
    """
    if quality < 1:
        raise ValueError(f"quality must be >= 1, got {quality}")

    rgba = np.array(img.convert("RGBA")).reshape(-1, 4)[::quality]
    opaque = rgba[rgba[:, 3] >= alpha_threshold]
    return opaque[:, :3]


def extract_palette(
    input_path: str | Path,
    colors: int = DEFAULT_COLORS,
    quality: int = DEFAULT_QUALITY,
    max_side: int = DEFAULT_MAX_SIDE,
    precision: int = DEFAULT_PRECISION,
    verbose: bool = False,
) -> list[tuple[int, int, int]]:
    """
    Compute a palette of at most `colors` colors for an image file.

    Args:
        input_path: Path to the input image
        colors: Requested palette size (2-256)
        quality: Sampling stride; lower samples more pixels
        max_side: Longest side of the working copy of the image
        precision: Histogram bits per channel
        verbose: Print progress info

    Returns:
        List of RGB tuples, empty if the image has no opaque pixels
    """
    img = load_image(input_path)

    if verbose:
        print(f"Input image: {img.size[0]}x{img.size[1]}")

    scaled = downscale(img, max_side)
    if verbose and scaled.size != img.size:
        print(f"Downscaled to {scaled.size[0]}x{scaled.size[1]}")

    pixels = sample_pixels(scaled, quality)
    if verbose:
        print(f"Sampled {len(pixels)} opaque pixels (quality={quality})")

    if not len(pixels):
        if verbose:
            print("  No opaque pixels, palette is empty")
        return []

    color_map = quantize(pixels, colors, precision)
    palette = color_map.palette()

    if verbose:
        print(f"Palette: {len(palette)} colors from {len(color_map.boxes)} boxes")
        print(f"  Colors: {', '.join(to_hex(c) for c in palette)}")

    return palette
