"""Render settings.

Example:
    >>> from pathtracer.config import RenderSettings
    >>> settings = RenderSettings(image_width=200, samples_per_pixel=16)
    >>> settings.image_height
    112
"""

from dataclasses import dataclass

from pathtracer.core.integrator import MAX_DEPTH, MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH


@dataclass
class RenderSettings:
    """Settings for one render.

    Attributes:
        image_width: Output width in pixels.
        aspect_ratio: Width divided by height.
        samples_per_pixel: Samples averaged per pixel.
        max_depth: Bounce budget per camera ray.
        seed: Seed for the per-sample RNG streams.
        num_bands: Number of row bands per pass.
    """

    image_width: int = 400
    aspect_ratio: float = 16.0 / 9.0
    samples_per_pixel: int = 100
    max_depth: int = MAX_DEPTH
    seed: int = 0
    num_bands: int = 1

    @property
    def image_height(self) -> int:
        """Image height derived from width and aspect ratio (at least 1)."""
        return max(1, int(self.image_width / self.aspect_ratio))

    def validate(self) -> None:
        """Check the settings.

        Raises:
            ValueError: If any setting is out of range.
        """
        if not self.aspect_ratio > 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if not 0 < self.image_width <= MAX_IMAGE_WIDTH:
            raise ValueError(
                f"image_width must be in 1..{MAX_IMAGE_WIDTH}, got {self.image_width}"
            )
        if self.image_height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"image height {self.image_height} exceeds maximum {MAX_IMAGE_HEIGHT}"
            )
        if self.samples_per_pixel < 1:
            raise ValueError(
                f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.num_bands < 1:
            raise ValueError(f"num_bands must be at least 1, got {self.num_bands}")
