"""Random number generation for Monte Carlo sampling.

Every random draw in the renderer goes through an explicit ``u32`` state
value instead of Taichi's global ``ti.random()``. Each camera sample seeds its
own state from ``(seed, pixel_index, sample_index)``, so:

- pixels never share a stream, whichever thread computes them;
- a render is bit-identical for the same seed, regardless of thread
  scheduling or of how samples are split into batches.

The generator is the PCG hash from "Hash Functions for GPU Rendering"
(Jarzynski & Olano, JCGT 2020), iterated as a counter-free stream.

All sampling functions take the current state and return the sampled value
together with the advanced state:

    >>> @ti.kernel
    ... def draw(seed: ti.u32) -> ti.f32:
    ...     state = seed_rng(seed, 0, 0)
    ...     u, state = random_f32(state)
    ...     return u
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import length_squared, normalize

vec3 = tm.vec3

# Rejection sampling attempts before giving up (probability of exhausting
# them is below 1e-30 for the unit sphere)
MAX_REJECTION_ATTEMPTS = 100

_INV_2_24 = 1.0 / 16777216.0


@ti.func
def pcg_hash(value: ti.u32) -> ti.u32:
    """Hash a 32-bit value with one PCG step and RXS-M-XS output mix."""
    state = value * ti.u32(747796405) + ti.u32(2891336453)
    word = ((state >> ((state >> ti.u32(28)) + ti.u32(4))) ^ state) * ti.u32(277803737)
    return (word >> ti.u32(22)) ^ word


@ti.func
def seed_rng(seed: ti.u32, pixel_index: ti.u32, sample_index: ti.u32) -> ti.u32:
    """Derive the initial stream state for one camera sample.

    Args:
        seed: The render-wide seed.
        pixel_index: Linear pixel index (row * width + col).
        sample_index: Index of the sample within the pixel.

    Returns:
        The initial RNG state for this sample.
    """
    mixed = pcg_hash(sample_index ^ (seed * ti.u32(0x9E3779B9)))
    return pcg_hash(pixel_index ^ mixed)


@ti.func
def random_f32(state: ti.u32):
    """Draw a uniform float in [0, 1).

    Uses the top 24 bits of the next state so every value is exactly
    representable as f32 and 1.0 is never produced.

    Returns:
        A tuple (value, next_state).
    """
    next_state = pcg_hash(state)
    value = ti.cast(next_state >> ti.u32(8), ti.f32) * _INV_2_24
    return value, next_state


@ti.func
def random_range(min_value: ti.f32, max_value: ti.f32, state: ti.u32):
    """Draw a uniform float in [min_value, max_value).

    Returns:
        A tuple (value, next_state).
    """
    u, next_state = random_f32(state)
    return min_value + (max_value - min_value) * u, next_state


@ti.func
def random_in_unit_sphere(state: ti.u32):
    """Generate a uniformly distributed point inside the unit sphere.

    Rejection sampling from the enclosing cube. Once a point is accepted no
    further state is consumed.

    Returns:
        A tuple (point, next_state) with length(point) < 1.
    """
    rng = state
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            x, rng = random_range(-1.0, 1.0, rng)
            y, rng = random_range(-1.0, 1.0, rng)
            z, rng = random_range(-1.0, 1.0, rng)
            p = vec3(x, y, z)
            if length_squared(p) < 1.0:
                found = True
    return p, rng


@ti.func
def random_unit_vector(state: ti.u32):
    """Generate a random unit vector uniformly distributed on the sphere.

    Returns:
        A tuple (direction, next_state).
    """
    p, rng = random_in_unit_sphere(state)
    # A point this close to the center has no reliable direction
    if length_squared(p) < 1e-12:
        p = vec3(0.0, 0.0, 1.0)
    return normalize(p), rng


@ti.func
def random_in_unit_disk(state: ti.u32):
    """Generate a random point inside the unit disk in the xy-plane.

    Used for thin-lens sampling.

    Returns:
        A tuple (point, next_state) where point is (x, y, 0) with
        x^2 + y^2 < 1.
    """
    rng = state
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            x, rng = random_range(-1.0, 1.0, rng)
            y, rng = random_range(-1.0, 1.0, rng)
            p = vec3(x, y, 0.0)
            if p.x * p.x + p.y * p.y < 1.0:
                found = True
    return p, rng
