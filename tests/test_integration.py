"""Integration tests for the end-to-end rendering pipeline.

This module tests the complete pipeline from scene creation through final
image output, including the example command-line script.

Tests are designed to be fast (low resolution, few samples) while still
exercising the full pipeline.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

from __future__ import annotations

import numpy as np
import pytest


class TestWhiteSphereIntegration:
    """A white diffuse sphere seen by a pinhole camera looking down -z."""

    WIDTH = 32
    HEIGHT = 16

    def _render(self, samples: int, max_depth: int, seed: int = 0):
        from pathtracer.camera.thin_lens import ThinLensCamera, setup_camera
        from pathtracer.core.progressive import ProgressiveRenderer
        from pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (1.0, 1.0, 1.0))
        setup_camera(
            ThinLensCamera(
                lookfrom=(0.0, 0.0, 0.0),
                lookat=(0.0, 0.0, -1.0),
                vup=(0.0, 1.0, 0.0),
                vfov=90.0,
                aspect_ratio=self.WIDTH / self.HEIGHT,
            )
        )
        renderer = ProgressiveRenderer(self.WIDTH, self.HEIGHT, max_depth=max_depth, seed=seed)
        renderer.render(samples)
        return renderer

    def test_center_darker_than_background(self):
        """Test the sphere center is darker than the sky around it."""
        renderer = self._render(samples=1, max_depth=1)
        image = renderer.get_image_uint8().astype(int)

        center = image[self.HEIGHT // 2, self.WIDTH // 2].sum()
        for row, col in [(0, 0), (0, self.WIDTH - 1), (self.HEIGHT - 1, 0)]:
            assert center < image[row, col].sum()

    def test_deeper_paths_light_the_sphere(self):
        """Test extra bounces let sky light reach the sphere."""
        renderer = self._render(samples=4, max_depth=10)
        image = renderer.get_image_uint8().astype(int)
        assert image[self.HEIGHT // 2, self.WIDTH // 2].sum() > 0

    def test_same_seed_same_ppm(self):
        """Test two renders with one seed produce identical PPM output."""
        import io

        first = io.StringIO()
        self._render(samples=2, max_depth=5, seed=4).write_ppm(first)
        second = io.StringIO()
        self._render(samples=2, max_depth=5, seed=4).write_ppm(second)
        assert first.getvalue() == second.getvalue()


class TestPresetIntegration:
    """Render every preset at a tiny size."""

    @pytest.mark.parametrize("name", ["two_spheres", "materials", "random_spheres"])
    def test_preset_renders(self, name):
        """Test presets render finite, in-range images."""
        from pathtracer.camera.thin_lens import setup_camera
        from pathtracer.core.progressive import ProgressiveRenderer
        from pathtracer.scene.presets import create_scene

        _, camera = create_scene(name, aspect_ratio=2.0)
        setup_camera(camera)

        renderer = ProgressiveRenderer(16, 8, max_depth=8, num_bands=2)
        renderer.render(2)

        linear = renderer.get_image_numpy()
        assert np.all(np.isfinite(linear))
        assert renderer.get_image_uint8().max() > 0


class TestRenderScript:
    """Tests for examples/render_spheres.py (without re-initializing Taichi)."""

    def test_parse_args_defaults(self):
        """Test the command-line defaults."""
        from examples.render_spheres import parse_args

        args = parse_args([])
        assert args.scene == "two_spheres"
        assert args.width == 400
        assert args.samples == 100
        assert args.max_depth == 50
        assert args.output == "-"
        assert args.arch == "cpu"

    def test_render_to_stdout(self, capsys):
        """Test PPM goes to stdout and progress to stderr."""
        from examples.render_spheres import render_spheres

        render_spheres(width=8, aspect_ratio=2.0, num_samples=1, max_depth=3, num_bands=2)
        captured = capsys.readouterr()

        lines = captured.out.splitlines()
        assert lines[:3] == ["P3", "8 4", "255"]
        assert len(lines) == 3 + 32
        assert "Scanlines remaining: 0" in captured.err
        assert captured.err.rstrip().endswith("Done.")

    def test_quiet_json_scene_to_file(self, tmp_path, capsys):
        """Test a JSON scene renders to a PPM file without progress output."""
        from examples.render_spheres import render_spheres
        from pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_metal_sphere((0.0, 0.0, -1.0), 0.5, (0.8, 0.8, 0.8), 0.1)
        scene_path = tmp_path / "scene.json"
        scene.save_json(scene_path)

        out = tmp_path / "image.ppm"
        render_spheres(
            scene_name=str(scene_path),
            width=8,
            aspect_ratio=2.0,
            num_samples=1,
            output_path=str(out),
            quiet=True,
        )

        assert out.read_text().startswith("P3\n8 4\n255\n")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""

    def test_bad_output_extension(self):
        """Test unsupported output formats are rejected."""
        from examples.render_spheres import render_spheres

        with pytest.raises(ValueError, match=".ppm or .png"):
            render_spheres(width=8, num_samples=1, output_path="image.jpg", quiet=True)
