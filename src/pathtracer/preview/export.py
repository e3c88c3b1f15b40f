"""Image export utilities for rendered images.

The integrator accumulates linear color sums. Export divides by the sample
count, applies gamma 2 (square root), clamps to [0, 0.999] and scales by
255.999, so every channel lands in 0..255.

Supported formats:
    - PPM (plain-text P3)
    - PNG (8-bit via Pillow)

Example:
    >>> from pathtracer.preview.export import image_to_uint8, save_ppm
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(400, 225)
    >>> renderer.render(100)
    >>> save_ppm(renderer.get_image_uint8(), "image.ppm")
"""

import math
from collections.abc import Sequence
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

# Largest channel value before scaling; keeps 255.999 * c below 256
MAX_INTENSITY = 0.999
SCALE = 255.999


def _check_samples(samples_per_pixel: int) -> None:
    if samples_per_pixel <= 0:
        raise ValueError(f"samples_per_pixel must be positive, got {samples_per_pixel}")


def quantize_channel(value_sum: float, samples_per_pixel: int) -> int:
    """Convert one accumulated channel sum to an integer in 0..255."""
    _check_samples(samples_per_pixel)

    value = max(value_sum / samples_per_pixel, 0.0)
    value = min(math.sqrt(value), MAX_INTENSITY)
    return int(SCALE * value)


def format_pixel(color_sum: Sequence[float], samples_per_pixel: int) -> str:
    """Format one pixel as a PPM text line.

    Args:
        color_sum: Accumulated (R, G, B) sums for the pixel.
        samples_per_pixel: Number of samples in the sums.

    Returns:
        The line "r g b\\n" with each value in 0..255.

    Raises:
        ValueError: If samples_per_pixel is not positive.
    """
    r, g, b = (quantize_channel(float(c), samples_per_pixel) for c in color_sum)
    return f"{r} {g} {b}\n"


def image_to_uint8(
    sum_image: npt.NDArray[np.floating],
    samples_per_pixel: int,
) -> npt.NDArray[np.uint8]:
    """Convert an accumulated color sum image to 8-bit.

    Applies the same averaging, gamma and clamping as format_pixel, for a
    whole image at once.

    Args:
        sum_image: Array of shape (H, W, 3) holding per-pixel color sums.
        samples_per_pixel: Number of samples in the sums.

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If samples_per_pixel is not positive.
    """
    _check_samples(samples_per_pixel)

    image = np.asarray(sum_image, dtype=np.float64) / samples_per_pixel
    image = np.clip(np.sqrt(np.maximum(image, 0.0)), 0.0, MAX_INTENSITY)
    return (SCALE * image).astype(np.uint8)


def write_ppm(stream: TextIO, image: npt.NDArray[np.uint8]) -> None:
    """Write an 8-bit image as plain-text PPM.

    The header is "P3", "<width> <height>", "255", followed by one
    "r g b" line per pixel, top row first, left to right.

    Args:
        stream: Text stream to write to.
        image: Array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If the image does not have shape (H, W, 3).
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected image of shape (H, W, 3), got {image.shape}")

    height, width, _ = image.shape
    stream.write(f"P3\n{width} {height}\n255\n")
    for r, g, b in image.reshape(-1, 3).tolist():
        stream.write(f"{r} {g} {b}\n")


def save_ppm(image: npt.NDArray[np.uint8], filepath: str) -> None:
    """Save an 8-bit image as a plain-text PPM file."""
    with open(filepath, "w", encoding="ascii", newline="\n") as f:
        write_ppm(f, image)


def save_png(image: npt.NDArray[np.uint8], filepath: str) -> None:
    """Save an 8-bit image as a PNG file."""
    pil_image = PILImage.fromarray(np.ascontiguousarray(image))
    pil_image.save(filepath)
