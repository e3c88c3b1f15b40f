"""Path tracing integrator for Monte Carlo light transport.

This module implements the color estimator and the rendering kernels.

A camera ray is followed through the scene, bouncing off surfaces according
to their materials, until it escapes to the sky or the bounce budget runs
out. The sky gradient is the only light source: a path that is absorbed or
that exhausts its bounces contributes black.

The estimator is written as a loop with a running attenuation product
instead of recursion:

    color = a_1 * a_2 * ... * a_k * sky(d_k)

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Hard bounce budget (no Russian roulette)
    - t_min of 0.001 to suppress self-intersection ("shadow acne")
    - Per-sample private RNG streams (deterministic for a given seed)
    - Row-band rendering with accumulation into a raster-ordered buffer

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.integrator import render_image, setup_render_target
    >>> from pathtracer.scene.presets import create_two_spheres_scene
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_two_spheres_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(400, 225)
    >>> render_image(num_samples=100)
"""

from collections.abc import Callable

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtracer.camera.thin_lens import get_ray_jittered
from pathtracer.core.sampler import seed_rng
from pathtracer.materials.dielectric import scatter_dielectric_by_id
from pathtracer.materials.lambertian import scatter_lambertian_by_id
from pathtracer.materials.metal import scatter_metal_by_id
from pathtracer.scene.intersection import intersect_scene
from pathtracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# Callback receiving (rows_completed, total_rows) after each row band
BandCallback = Callable[[int, int], None]

# =============================================================================
# Rendering Constants
# =============================================================================

# Default bounce budget per camera ray
MAX_DEPTH = 50

# t_min and t_max for ray intersection
T_MIN = 0.001
T_MAX = tm.inf

# Sky gradient endpoints (horizon -> zenith)
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Running sum of sample colors, indexed [row, col] with row 0 at the top
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Sample count per pixel
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers. The buffers are
    preallocated to MAX_IMAGE_HEIGHT x MAX_IMAGE_WIDTH.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count.fill(0)


def release_render_target() -> None:
    """Clear the buffers and mark the render target as not set up."""
    clear_render_target()
    _image_width[None] = 0
    _image_height[None] = 0
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_image() -> "ti.MatrixField":
    """Get the color accumulation buffer (running sums, full preallocated size).

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return _color_buffer


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    rng: ti.u32,
):
    """Dispatch to the scatter function of the hit material.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The unit surface normal (facing against the ray).
        front_face: 1 if hit front face, 0 if back face.
        rng: The current sampler state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, rng).
        Unknown material IDs absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    next_rng = rng

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter, next_rng = scatter_lambertian_by_id(
            type_index, normal, rng
        )

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter, next_rng = scatter_metal_by_id(
            type_index, incident_direction, normal, rng
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter, next_rng = scatter_dielectric_by_id(
            type_index, incident_direction, normal, front_face, rng
        )

    return scattered_direction, attenuation, did_scatter, next_rng


# =============================================================================
# Color Estimator
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky gradient: white at the horizon, light blue straight up.

    t = 0.5 * (unit(direction).y + 1) blends linearly between the two.
    """
    unit_direction = tm.normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * SKY_HORIZON_COLOR + t * SKY_ZENITH_COLOR


@ti.func
def ray_color(origin: vec3, direction: vec3, max_depth: ti.i32, rng: ti.u32):
    """Estimate the radiance arriving along a ray.

    Args:
        origin: Ray origin.
        direction: Ray direction (any non-zero length).
        max_depth: Bounce budget. A budget <= 0 yields black.
        rng: The current sampler state.

    Returns:
        A tuple (color, rng).
    """
    ray_origin = origin
    ray_direction = direction
    next_rng = rng

    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    # Active flag for path continuation
    active = 1

    for _ in range(max_depth):
        if active == 1:
            hit_record = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX)

            if hit_record.hit == 0:
                color = throughput * background_color(ray_direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter, next_rng = _scatter_material(
                    hit_record.material_id,
                    ray_direction,
                    hit_record.normal,
                    hit_record.front_face,
                    next_rng,
                )

                if did_scatter == 0:
                    # Absorbed
                    active = 0
                else:
                    throughput *= attenuation
                    ray_origin = hit_record.point
                    ray_direction = scattered_direction

    return color, next_rng


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    height: ti.i32,
    first_sample: ti.i32,
    num_samples: ti.i32,
    max_depth: ti.i32,
    seed: ti.u32,
):
    """Accumulate samples for every pixel of rows [row_start, row_end).

    The outermost loop is parallelized over pixels. Each sample seeds its own
    RNG stream from (seed, pixel index, sample index).
    """
    for row, col in ti.ndrange((row_start, row_end), width):
        pixel_index = ti.cast(row * width + col, ti.u32)
        # Samples are added one at a time onto the stored sum; the addition
        # order is the same however samples are batched
        total = _color_buffer[row, col]

        for k in range(num_samples):
            rng = seed_rng(seed, pixel_index, ti.cast(first_sample + k, ti.u32))
            ray, rng = get_ray_jittered(col, row, width, height, rng)
            color, rng = ray_color(ray.origin, ray.direction, max_depth, rng)

            # Drop NaN/Inf samples
            for c in ti.static(range(3)):
                if tm.isnan(color[c]) or tm.isinf(color[c]):
                    color[c] = 0.0

            total += color

        _color_buffer[row, col] = total
        _sample_count[row, col] += num_samples


@ti.kernel
def _trace_single_ray(
    origin: vec3,
    direction: vec3,
    max_depth: ti.i32,
    seed: ti.u32,
    sample_index: ti.u32,
) -> vec3:
    """Run the color estimator for one explicit ray."""
    rng = seed_rng(seed, ti.u32(0), sample_index)
    color, rng = ray_color(origin, direction, max_depth, rng)
    return color


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = MAX_DEPTH,
    seed: int = 0,
    sample_index: int = 0,
) -> tuple[float, float, float]:
    """Estimate the color along a single ray against the current scene.

    Python-callable entry point used for testing and debugging.

    Returns:
        Tuple of (R, G, B) color values.
    """
    color = _trace_single_ray(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        max_depth,
        seed & 0xFFFFFFFF,
        sample_index & 0xFFFFFFFF,
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def split_rows(height: int, num_bands: int) -> list[tuple[int, int]]:
    """Partition rows [0, height) into contiguous half-open bands.

    Bands cover every row exactly once and differ in size by at most one
    row. The number of bands is capped at the number of rows.

    Args:
        height: Number of rows.
        num_bands: Requested number of bands (>= 1).

    Returns:
        List of (row_start, row_end) pairs in top-to-bottom order.

    Raises:
        ValueError: If height is negative or num_bands is less than 1.
    """
    if height < 0:
        raise ValueError(f"height must be non-negative, got {height}")
    if num_bands < 1:
        raise ValueError(f"num_bands must be at least 1, got {num_bands}")

    num_bands = min(num_bands, max(height, 1))
    base, extra = divmod(height, num_bands)

    bands = []
    start = 0
    for i in range(num_bands):
        end = start + base + (1 if i < extra else 0)
        bands.append((start, end))
        start = end
    return bands


def render_rows(
    row_start: int,
    row_end: int,
    num_samples: int = 1,
    *,
    first_sample: int = 0,
    seed: int = 0,
    max_depth: int = MAX_DEPTH,
) -> None:
    """Accumulate samples for the rows [row_start, row_end).

    Args:
        row_start: First row (0 = top).
        row_end: One past the last row.
        num_samples: Samples to add to every pixel in the band.
        first_sample: Index of the first sample, used to seed RNG streams.
        seed: Render-wide seed.
        max_depth: Bounce budget per camera ray.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the row range is outside the image.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    if not 0 <= row_start <= row_end <= height:
        raise ValueError(f"Row range [{row_start}, {row_end}) outside image height {height}")

    _render_rows(
        row_start, row_end, width, height, first_sample, num_samples, max_depth, seed & 0xFFFFFFFF
    )


def render_image(
    num_samples: int = 1,
    *,
    seed: int = 0,
    max_depth: int = MAX_DEPTH,
    num_bands: int = 1,
    band_callback: BandCallback | None = None,
) -> None:
    """Add samples to every pixel of the image.

    The image is processed as consecutive row bands (see split_rows); each
    band is one parallel kernel launch. Calling this repeatedly keeps
    accumulating: sample indices continue from the current sample count, so
    rendering N samples at once or in several calls gives the same result.

    Args:
        num_samples: Number of samples to add per pixel.
        seed: Render-wide seed.
        max_depth: Bounce budget per camera ray.
        num_bands: Number of row bands to split the image into.
        band_callback: Optional callback called after each band with
            (rows_completed, total_rows).

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    if num_samples <= 0:
        return

    _, height = get_image_dimensions()
    first_sample = get_total_samples()

    for row_start, row_end in split_rows(height, num_bands):
        render_rows(
            row_start,
            row_end,
            num_samples,
            first_sample=first_sample,
            seed=seed,
            max_depth=max_depth,
        )
        if band_callback is not None:
            band_callback(row_end, height)


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel.

    Returns the sample count from the top-left pixel, which is the same for
    all pixels after calling render_image().

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    return int(_sample_count[0, 0])


def get_accumulated_image_numpy() -> npt.NDArray[np.float32]:
    """Get the running color sums as a NumPy array in raster order.

    Returns:
        Array of shape (height, width, 3); row 0 is the top row.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()
    return np.ascontiguousarray(full_image[:height, :width, :], dtype=np.float32)


def get_normalized_image_numpy() -> npt.NDArray[np.float32]:
    """Get the averaged linear image as a NumPy array.

    Pixels without samples are black. Values are clamped to [0, 1].

    Returns:
        Array of shape (height, width, 3) in raster order.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    image = get_accumulated_image_numpy()

    width, height = get_image_dimensions()
    counts = _sample_count.to_numpy()[:height, :width].astype(np.float32)
    counts = np.maximum(counts, 1.0)[:, :, np.newaxis]

    image = np.clip(image / counts, 0.0, 1.0)
    return image.astype(np.float32)
