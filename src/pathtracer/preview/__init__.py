"""Preview module for image output.

Components:
    export: Quantisation to 8-bit plus PPM and PNG writers

Example:
    >>> from pathtracer.preview import image_to_uint8, write_ppm
    >>> import sys
    >>> write_ppm(sys.stdout, image_to_uint8(sum_image, samples_per_pixel=100))
"""

from pathtracer.preview.export import (
    format_pixel,
    image_to_uint8,
    quantize_channel,
    save_png,
    save_ppm,
    write_ppm,
)

__all__ = [
    "format_pixel",
    "image_to_uint8",
    "quantize_channel",
    "save_png",
    "save_ppm",
    "write_ppm",
]
