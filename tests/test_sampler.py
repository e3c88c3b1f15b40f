"""Unit tests for the sampler module.

Tests cover:
- PCG hash and per-sample seeding
- Uniform float ranges
- Unit sphere, unit vector and unit disk sampling
- Determinism of explicit RNG streams
"""

import pytest
import taichi as ti


class TestSeeding:
    """Tests for pcg_hash and seed_rng."""

    def test_pcg_hash_is_deterministic(self):
        """Test hashing the same value twice gives the same result."""
        from pathtracer.core.sampler import pcg_hash

        result = ti.field(dtype=ti.u32, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = pcg_hash(ti.u32(12345))
            result[1] = pcg_hash(ti.u32(12345))

        test_kernel()
        assert result[0] == result[1]

    def test_seed_rng_distinguishes_pixels_and_samples(self):
        """Test neighbouring pixels, samples and seeds get different states."""
        from pathtracer.core.sampler import seed_rng

        result = ti.field(dtype=ti.u32, shape=4)

        @ti.kernel
        def test_kernel():
            result[0] = seed_rng(ti.u32(0), ti.u32(0), ti.u32(0))
            result[1] = seed_rng(ti.u32(0), ti.u32(1), ti.u32(0))
            result[2] = seed_rng(ti.u32(0), ti.u32(0), ti.u32(1))
            result[3] = seed_rng(ti.u32(1), ti.u32(0), ti.u32(0))

        test_kernel()
        states = {int(result[i]) for i in range(4)}
        assert len(states) == 4


class TestUniform:
    """Tests for random_f32 and random_range."""

    def test_random_f32_bounds(self):
        """Test random_f32 stays in [0, 1)."""
        from pathtracer.core.sampler import random_f32, seed_rng

        min_val = ti.field(dtype=ti.f32, shape=())
        max_val = ti.field(dtype=ti.f32, shape=())
        min_val[None] = 10.0
        max_val[None] = -10.0

        @ti.kernel
        def test_kernel():
            for i in range(10000):
                rng = seed_rng(ti.u32(3), ti.cast(i, ti.u32), ti.u32(0))
                u, rng = random_f32(rng)
                ti.atomic_min(min_val[None], u)
                ti.atomic_max(max_val[None], u)

        test_kernel()
        assert min_val[None] >= 0.0
        assert max_val[None] < 1.0

    def test_random_f32_mean(self):
        """Test random_f32 averages close to 0.5."""
        from pathtracer.core.sampler import random_f32, seed_rng

        total = ti.field(dtype=ti.f32, shape=())
        total[None] = 0.0
        n = 20000

        @ti.kernel
        def test_kernel():
            for i in range(n):
                rng = seed_rng(ti.u32(0), ti.cast(i, ti.u32), ti.u32(0))
                u, rng = random_f32(rng)
                total[None] += u

        test_kernel()
        assert abs(total[None] / n - 0.5) < 0.02

    def test_random_range_bounds(self):
        """Test random_range stays in [min, max)."""
        from pathtracer.core.sampler import random_range, seed_rng

        min_val = ti.field(dtype=ti.f32, shape=())
        max_val = ti.field(dtype=ti.f32, shape=())
        min_val[None] = 100.0
        max_val[None] = -100.0

        @ti.kernel
        def test_kernel():
            for i in range(5000):
                rng = seed_rng(ti.u32(9), ti.cast(i, ti.u32), ti.u32(0))
                v, rng = random_range(-2.0, 3.0, rng)
                ti.atomic_min(min_val[None], v)
                ti.atomic_max(max_val[None], v)

        test_kernel()
        assert min_val[None] >= -2.0
        assert max_val[None] < 3.0
        # Spread should cover most of the interval
        assert max_val[None] - min_val[None] > 4.5

    def test_stream_is_reproducible(self):
        """Test the same starting state yields the same sequence."""
        from pathtracer.core.sampler import random_f32, seed_rng

        result = ti.field(dtype=ti.f32, shape=(2, 5))

        @ti.kernel
        def test_kernel():
            for run in range(2):
                rng = seed_rng(ti.u32(42), ti.u32(7), ti.u32(3))
                for k in range(5):
                    u, rng = random_f32(rng)
                    result[run, k] = u

        test_kernel()
        for k in range(5):
            assert result[0, k] == result[1, k]


class TestGeometricSampling:
    """Tests for sphere and disk sampling."""

    def test_random_in_unit_sphere_bounds(self):
        """Test random_in_unit_sphere returns points inside unit sphere."""
        from pathtracer.core.ray import length_squared
        from pathtracer.core.sampler import random_in_unit_sphere, seed_rng

        max_len_sq = ti.field(dtype=ti.f32, shape=())
        max_len_sq[None] = 0.0

        @ti.kernel
        def test_kernel():
            for i in range(1000):
                rng = seed_rng(ti.u32(1), ti.cast(i, ti.u32), ti.u32(0))
                p, rng = random_in_unit_sphere(rng)
                ti.atomic_max(max_len_sq[None], length_squared(p))

        test_kernel()
        assert max_len_sq[None] < 1.0

    def test_random_unit_vector_length(self):
        """Test random_unit_vector returns unit length vectors."""
        from pathtracer.core.ray import length
        from pathtracer.core.sampler import random_unit_vector, seed_rng

        min_len = ti.field(dtype=ti.f32, shape=())
        max_len = ti.field(dtype=ti.f32, shape=())
        min_len[None] = 10.0
        max_len[None] = 0.0

        @ti.kernel
        def test_kernel():
            for i in range(1000):
                rng = seed_rng(ti.u32(2), ti.cast(i, ti.u32), ti.u32(0))
                v, rng = random_unit_vector(rng)
                vec_len = length(v)
                ti.atomic_min(min_len[None], vec_len)
                ti.atomic_max(max_len[None], vec_len)

        test_kernel()
        assert abs(min_len[None] - 1.0) < 1e-4
        assert abs(max_len[None] - 1.0) < 1e-4

    def test_random_unit_vector_is_balanced(self):
        """Test random unit vectors average out near the origin."""
        from pathtracer.core.sampler import random_unit_vector, seed_rng

        total = ti.Vector.field(3, dtype=ti.f32, shape=())
        n = 20000

        @ti.kernel
        def test_kernel():
            for i in range(n):
                rng = seed_rng(ti.u32(5), ti.cast(i, ti.u32), ti.u32(0))
                v, rng = random_unit_vector(rng)
                total[None] += v

        test_kernel()
        mean = total[None] / n
        assert abs(mean[0]) < 0.03
        assert abs(mean[1]) < 0.03
        assert abs(mean[2]) < 0.03

    def test_random_in_unit_disk_bounds(self):
        """Test random_in_unit_disk returns points in xy plane inside unit disk."""
        from pathtracer.core.sampler import random_in_unit_disk, seed_rng

        max_r_sq = ti.field(dtype=ti.f32, shape=())
        max_z = ti.field(dtype=ti.f32, shape=())
        max_r_sq[None] = 0.0
        max_z[None] = 0.0

        @ti.kernel
        def test_kernel():
            for i in range(1000):
                rng = seed_rng(ti.u32(4), ti.cast(i, ti.u32), ti.u32(0))
                p, rng = random_in_unit_disk(rng)
                r_sq = p.x * p.x + p.y * p.y
                ti.atomic_max(max_r_sq[None], r_sq)
                ti.atomic_max(max_z[None], ti.abs(p.z))

        test_kernel()
        assert max_r_sq[None] < 1.0
        assert max_z[None] == 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
