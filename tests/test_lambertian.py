"""Unit tests for the Lambertian material.

Tests cover:
- Scatter never absorbs
- Scattered directions lie in the normal's hemisphere (allowing the
  normal + unit vector construction to touch the tangent plane)
- Cosine-weighted mean direction
- Material registry validation
"""

import pytest
import taichi as ti


class TestLambertianScatter:
    """Tests for scatter_lambertian."""

    def test_never_absorbs(self):
        """Test did_scatter is 1 and attenuation is the albedo."""
        from pathtracer.core.sampler import seed_rng
        from pathtracer.materials.lambertian import scatter_lambertian, vec3

        absorbed = ti.field(dtype=ti.i32, shape=())
        max_albedo_error = ti.field(dtype=ti.f32, shape=())
        absorbed[None] = 0
        max_albedo_error[None] = 0.0

        @ti.kernel
        def test_kernel():
            albedo = vec3(0.8, 0.3, 0.1)
            normal = vec3(0.0, 1.0, 0.0)
            for i in range(2000):
                rng = seed_rng(ti.u32(0), ti.cast(i, ti.u32), ti.u32(0))
                _, attenuation, did_scatter, rng = scatter_lambertian(albedo, normal, rng)
                if did_scatter == 0:
                    absorbed[None] += 1
                ti.atomic_max(max_albedo_error[None], (attenuation - albedo).norm())

        test_kernel()
        assert absorbed[None] == 0
        assert max_albedo_error[None] < 1e-6

    def test_directions_in_upper_hemisphere(self):
        """Test scattered directions never point into the surface."""
        from pathtracer.core.sampler import seed_rng
        from pathtracer.materials.lambertian import scatter_lambertian, vec3

        min_dot = ti.field(dtype=ti.f32, shape=())
        min_len = ti.field(dtype=ti.f32, shape=())
        min_dot[None] = 10.0
        min_len[None] = 10.0

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 0.0, 1.0)
            for i in range(2000):
                rng = seed_rng(ti.u32(1), ti.cast(i, ti.u32), ti.u32(0))
                direction, _, _, rng = scatter_lambertian(vec3(0.5, 0.5, 0.5), normal, rng)
                ti.atomic_min(min_dot[None], direction.dot(normal))
                ti.atomic_min(min_len[None], direction.norm())

        test_kernel()
        assert min_dot[None] >= -1e-5
        assert min_len[None] > 0.0

    def test_mean_direction_follows_normal(self):
        """Test the average unit direction is tilted along the normal.

        For a cosine-weighted distribution E[cos(theta)] = 2/3.
        """
        from pathtracer.core.sampler import seed_rng
        from pathtracer.materials.lambertian import scatter_lambertian, vec3

        total = ti.Vector.field(3, dtype=ti.f32, shape=())
        n = 20000

        @ti.kernel
        def test_kernel():
            normal = vec3(1.0, 0.0, 0.0)
            for i in range(n):
                rng = seed_rng(ti.u32(2), ti.cast(i, ti.u32), ti.u32(0))
                direction, _, _, rng = scatter_lambertian(vec3(0.5, 0.5, 0.5), normal, rng)
                total[None] += direction.normalized()

        test_kernel()
        mean = total[None] / n
        assert abs(mean[0] - 2.0 / 3.0) < 0.02
        assert abs(mean[1]) < 0.02
        assert abs(mean[2]) < 0.02


class TestLambertianRegistry:
    """Tests for the Lambertian material table."""

    def test_add_and_read_back(self):
        """Test albedo round-trips through the table."""
        from pathtracer.materials.lambertian import (
            add_lambertian_material,
            get_lambertian_albedo,
            get_lambertian_material_count,
        )

        first = add_lambertian_material((0.1, 0.2, 0.5))
        second = add_lambertian_material((0.8, 0.8, 0.0))
        assert (first, second) == (0, 1)
        assert get_lambertian_material_count() == 2

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = get_lambertian_albedo(1)

        test_kernel()
        assert abs(result[None][0] - 0.8) < 1e-6
        assert abs(result[None][2] - 0.0) < 1e-6

    @pytest.mark.parametrize(
        "albedo", [(1.2, 0.5, 0.5), (0.5, -0.1, 0.5), (0.5, float("nan"), 0.5)]
    )
    def test_albedo_out_of_range(self, albedo):
        """Test albedo components outside [0, 1] are rejected."""
        from pathtracer.materials.lambertian import (
            add_lambertian_material,
            get_lambertian_material_count,
        )

        with pytest.raises(ValueError, match="outside"):
            add_lambertian_material(albedo)
        assert get_lambertian_material_count() == 0

    def test_scatter_by_id_uses_table_albedo(self):
        """Test scatter_lambertian_by_id attenuates by the stored albedo."""
        from pathtracer.core.sampler import seed_rng
        from pathtracer.materials.lambertian import (
            add_lambertian_material,
            scatter_lambertian_by_id,
            vec3,
        )

        idx = add_lambertian_material((0.25, 0.5, 0.75))
        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel(material_idx: ti.i32):
            rng = seed_rng(ti.u32(0), ti.u32(0), ti.u32(0))
            _, attenuation, _, rng = scatter_lambertian_by_id(
                material_idx, vec3(0.0, 1.0, 0.0), rng
            )
            result[None] = attenuation

        test_kernel(idx)
        a = result[None]
        assert abs(a[0] - 0.25) < 1e-6
        assert abs(a[1] - 0.5) < 1e-6
        assert abs(a[2] - 0.75) < 1e-6


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
