"""Tests for the preset scenes.

Tests cover:
- Scene contents and material sharing
- Camera parameters of each preset
- Name lookup
- Reproducible random layouts
"""

import math

import pytest


class TestTwoSpheres:
    """Tests for the two-sphere scene."""

    def test_contents(self):
        """Test a grey sphere resting on a grey ground sphere."""
        from pathtracer.scene.presets import GROUND_CENTER, create_two_spheres_scene

        scene, camera = create_two_spheres_scene()

        assert scene.get_sphere_count() == 2
        assert scene.get_material_count() == 1
        assert scene.spheres[0].center == (0.0, 0.0, -1.0)
        assert scene.spheres[0].radius == 0.5
        assert scene.spheres[1].center == GROUND_CENTER
        assert scene.spheres[1].radius == 100.0
        assert camera.lookfrom == (0.0, 0.0, 0.0)
        assert camera.aperture == 0.0

    def test_aspect_ratio_passed_to_camera(self):
        """Test the camera uses the requested aspect ratio."""
        from pathtracer.scene.presets import create_two_spheres_scene

        _, camera = create_two_spheres_scene(aspect_ratio=1.5)
        assert camera.aspect_ratio == 1.5


class TestMaterialsScene:
    """Tests for the three-material showcase."""

    def test_contents(self):
        """Test ground, diffuse, hollow glass and metal spheres."""
        from pathtracer.scene.manager import MaterialType
        from pathtracer.scene.presets import create_materials_scene

        scene, _ = create_materials_scene()

        assert scene.get_sphere_count() == 5
        types = [scene.get_material_type_python(s.material_id) for s in scene.spheres]
        assert types == [
            MaterialType.LAMBERTIAN,
            MaterialType.LAMBERTIAN,
            MaterialType.DIELECTRIC,
            MaterialType.DIELECTRIC,
            MaterialType.METAL,
        ]
        bubble = scene.get_material_info(scene.spheres[3].material_id)
        assert abs(bubble.params["ior"] - 1.0 / 1.5) < 1e-12

    def test_camera_focuses_on_target(self):
        """Test the camera focus distance equals the distance to lookat."""
        from pathtracer.scene.presets import create_materials_scene

        _, camera = create_materials_scene()
        assert camera.aperture == 2.0
        assert camera.focus_dist == pytest.approx(math.sqrt(27.0))
        camera.validate()


class TestRandomSpheres:
    """Tests for the random sphere field."""

    def test_layout_is_reproducible(self):
        """Test the same seed gives the same scene."""
        from pathtracer.scene.presets import create_random_spheres_scene

        scene, _ = create_random_spheres_scene(seed=3)
        first = scene.to_dict()
        scene, _ = create_random_spheres_scene(seed=3)
        assert scene.to_dict() == first

    def test_different_seeds_differ(self):
        """Test different seeds change the layout."""
        from pathtracer.scene.presets import create_random_spheres_scene

        scene, _ = create_random_spheres_scene(seed=0)
        first = scene.to_dict()
        scene, _ = create_random_spheres_scene(seed=1)
        assert scene.to_dict() != first

    @pytest.mark.parametrize("seed", [0, 1, 7, 42])
    def test_fits_in_tables(self, seed):
        """Test the scene stays within capacity and has the three big spheres."""
        from pathtracer.materials.lambertian import MAX_LAMBERTIAN_MATERIALS
        from pathtracer.materials.metal import MAX_METAL_MATERIALS
        from pathtracer.scene.manager import MaterialType
        from pathtracer.scene.presets import create_random_spheres_scene

        scene, camera = create_random_spheres_scene(seed=seed)
        types = [m.material_type for m in scene.materials]
        assert types.count(MaterialType.LAMBERTIAN) <= MAX_LAMBERTIAN_MATERIALS
        assert types.count(MaterialType.METAL) <= MAX_METAL_MATERIALS
        assert scene.get_material_count() <= scene.get_max_materials()
        assert 4 <= scene.get_sphere_count() <= scene.get_max_spheres()
        big = [s for s in scene.spheres if s.radius == 1.0]
        assert len(big) == 3
        camera.validate()


class TestCreateScene:
    """Tests for create_scene."""

    @pytest.mark.parametrize("name", ["two_spheres", "materials", "random_spheres"])
    def test_known_names(self, name):
        """Test every preset can be created by name."""
        from pathtracer.scene.presets import create_scene

        scene, camera = create_scene(name, aspect_ratio=16.0 / 9.0)
        assert scene.get_sphere_count() > 0
        assert camera.aspect_ratio == pytest.approx(16.0 / 9.0)

    def test_unknown_name(self):
        """Test an unknown preset raises ValueError listing the options."""
        from pathtracer.scene.presets import create_scene

        with pytest.raises(ValueError, match="two_spheres"):
            create_scene("checkerboard")
