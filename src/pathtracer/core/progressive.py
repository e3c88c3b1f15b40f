"""Progressive renderer for iterative sample accumulation.

This module provides a convenient wrapper around the core integrator that supports:
- Progressive rendering that refines over time
- Batch rendering (multiple SPP in one call)
- Progress callbacks per batch and per row band
- Easy reset and re-render functionality

Because every sample draws from its own seeded RNG stream, rendering N
samples in one call or in several smaller batches produces the same image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>> from pathtracer.scene.presets import create_materials_scene
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_materials_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = ProgressiveRenderer(400, 225, seed=7)
    >>> renderer.render(100)  # Render 100 SPP
    >>> renderer.save_ppm("image.ppm")
"""

from collections.abc import Callable, Generator
from typing import Any, TextIO

import numpy as np
import numpy.typing as npt

from pathtracer.core.integrator import (
    MAX_DEPTH,
    BandCallback,
    clear_render_target,
    get_accumulated_image_numpy,
    get_image,
    get_normalized_image_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)
from pathtracer.preview.export import image_to_uint8, save_png, save_ppm, write_ppm

# Type alias for progress callback
# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """A progressive renderer that accumulates samples over time.

    The renderer keeps the render settings (seed, bounce budget, row bands)
    and delegates to the global integrator buffers (which are Taichi fields).

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Bounce budget per camera ray.
        seed: Render-wide seed for the per-sample RNG streams.
        num_bands: Number of row bands per pass.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        max_depth: int = MAX_DEPTH,
        seed: int = 0,
        num_bands: int = 1,
    ) -> None:
        """Initialize the progressive renderer.

        Raises:
            ValueError: If dimensions are invalid or num_bands < 1.
        """
        if num_bands < 1:
            raise ValueError(f"num_bands must be at least 1, got {num_bands}")

        self._width = width
        self._height = height
        self.max_depth = max_depth
        self.seed = seed
        self.num_bands = num_bands
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Clear the accumulator without changing the image dimensions."""
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and reset accumulator.

        Raises:
            ValueError: If dimensions are invalid.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height

    def _render_batch(self, batch: int, band_callback: BandCallback | None) -> None:
        render_image(
            batch,
            seed=self.seed,
            max_depth=self.max_depth,
            num_bands=self.num_bands,
            band_callback=band_callback,
        )

    def render(
        self,
        num_samples: int = 1,
        batch_size: int | None = None,
        callback: ProgressCallback | None = None,
        band_callback: BandCallback | None = None,
    ) -> None:
        """Render samples progressively with optional progress callbacks.

        Accumulates the specified number of samples into the existing buffer.
        Can be called multiple times to continue refining the image.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each callback.
                Defaults to all samples in a single pass.
            callback: Optional callback function called after each batch.
                Receives (current_total_samples, target_total_samples).
            band_callback: Optional callback called after each row band.
                Receives (rows_completed, total_rows).

        Example:
            >>> def progress(current, target):
            ...     print(f"Progress: {current}/{target} samples")
            >>> renderer.render(100, batch_size=10, callback=progress)
        """
        for current, target in self.render_progressive(num_samples, batch_size, band_callback):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int | None = None,
        band_callback: BandCallback | None = None,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples progressively, yielding progress after each batch.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each yield.
            band_callback: Optional callback called after each row band.

        Yields:
            Tuple of (current_total_samples, target_total_samples).

        Example:
            >>> for current, target in renderer.render_progressive(100, batch_size=10):
            ...     print(f"Progress: {current}/{target} samples")
        """
        if num_samples <= 0:
            return
        if batch_size is None:
            batch_size = num_samples
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")

        target_samples = self.sample_count + num_samples

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            self._render_batch(batch, band_callback)
            remaining -= batch
            yield (self.sample_count, target_samples)

    def get_image(self) -> Any:
        """Get the raw Taichi color sum buffer field.

        Note: This returns the full preallocated buffer. Use width/height
        properties to determine the active region.
        """
        return get_image()

    def get_accumulated_numpy(self) -> npt.NDArray[np.float32]:
        """Get the per-pixel color sums, shape (height, width, 3)."""
        return get_accumulated_image_numpy()

    def get_image_numpy(self, gamma: float = 1.0) -> npt.NDArray[np.float32]:
        """Get the averaged image as a NumPy array.

        Args:
            gamma: Gamma correction value. Default 1.0 (linear).

        Returns:
            NumPy array of shape (height, width, 3) with dtype float32.
        """
        image = get_normalized_image_numpy()

        if gamma != 1.0:
            image = np.power(image, 1.0 / gamma)

        return image

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the rendered image as 8-bit, gamma 2 corrected.

        Returns a black image if no samples have been rendered yet.
        """
        samples = self.sample_count
        if samples == 0:
            return np.zeros((self._height, self._width, 3), dtype=np.uint8)
        return image_to_uint8(self.get_accumulated_numpy(), samples)

    def write_ppm(self, stream: TextIO) -> None:
        """Write the image to a text stream as plain-text PPM."""
        write_ppm(stream, self.get_image_uint8())

    def save_ppm(self, filepath: str) -> None:
        """Save the image as a plain-text PPM file."""
        save_ppm(self.get_image_uint8(), filepath)

    def save_png(self, filepath: str) -> None:
        """Save the image as an 8-bit PNG file."""
        save_png(self.get_image_uint8(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count}, seed={self.seed})"
        )
