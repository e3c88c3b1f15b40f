"""Ready-made scenes.

Each factory clears the global scene, populates it through a SceneManager
and returns the manager together with a matching camera.

Scenes:
    two_spheres: A diffuse sphere resting on a large diffuse ground sphere.
    materials: Ground plus three spheres showing the diffuse, glass and
        fuzzy metal materials, viewed from above with depth of field.
    random_spheres: A field of small random spheres around three large ones.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.presets import create_scene
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_scene("materials", aspect_ratio=16 / 9)
    >>> setup_camera(camera)
"""

import math
from collections.abc import Callable

import numpy as np

from pathtracer.camera.thin_lens import ThinLensCamera
from pathtracer.scene.manager import SceneManager

# =============================================================================
# Scene Constants
# =============================================================================

GROUND_CENTER = (0.0, -100.5, -1.0)
GROUND_RADIUS = 100.0

# Diffuse grey used by the two-sphere scene (half of the incoming light)
GREY_ALBEDO = (0.5, 0.5, 0.5)

GROUND_ALBEDO = (0.8, 0.8, 0.0)
CENTER_ALBEDO = (0.1, 0.2, 0.5)
METAL_ALBEDO = (0.8, 0.6, 0.2)
GLASS_IOR = 1.5


def _default_camera(aspect_ratio: float) -> ThinLensCamera:
    """Pinhole camera at the origin looking down -z."""
    return ThinLensCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
    )


# =============================================================================
# Scene Factories
# =============================================================================


def create_two_spheres_scene(
    aspect_ratio: float = 16.0 / 9.0,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create a grey diffuse sphere on a grey diffuse ground.

    Both spheres share a single material.
    """
    scene = SceneManager()
    grey = scene.add_lambertian_material(GREY_ALBEDO)
    scene.add_sphere((0.0, 0.0, -1.0), 0.5, grey)
    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, grey)
    return scene, _default_camera(aspect_ratio)


def create_materials_scene(
    aspect_ratio: float = 16.0 / 9.0,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the three-material showcase.

    The left sphere is a hollow glass bubble: a glass sphere containing a
    smaller sphere with the inverse index of refraction, so crossing the
    inner surface behaves like leaving glass into air.
    """
    scene = SceneManager()
    ground = scene.add_lambertian_material(GROUND_ALBEDO)
    center = scene.add_lambertian_material(CENTER_ALBEDO)
    glass = scene.add_dielectric_material(GLASS_IOR)
    bubble = scene.add_dielectric_material(1.0 / GLASS_IOR)
    gold = scene.add_metal_material(METAL_ALBEDO, fuzz=0.0)

    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, ground)
    scene.add_sphere((0.0, 0.0, -1.0), 0.5, center)
    scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
    scene.add_sphere((-1.0, 0.0, -1.0), 0.4, bubble)
    scene.add_sphere((1.0, 0.0, -1.0), 0.5, gold)

    lookfrom = (3.0, 3.0, 2.0)
    lookat = (0.0, 0.0, -1.0)
    camera = ThinLensCamera(
        lookfrom=lookfrom,
        lookat=lookat,
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=2.0,
        focus_dist=math.dist(lookfrom, lookat),
    )
    return scene, camera


def create_random_spheres_scene(
    aspect_ratio: float = 3.0 / 2.0,
    seed: int = 0,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create a ground plane covered with small random spheres.

    A 22x22 grid of small spheres is jittered and assigned a random
    material (80% diffuse, 15% metal, 5% glass), with one large sphere of
    each material in the middle.

    Args:
        aspect_ratio: Camera aspect ratio.
        seed: Seed for the NumPy generator used to lay out the scene.
    """
    rng = np.random.default_rng(seed)
    scene = SceneManager()

    ground = scene.add_lambertian_material((0.5, 0.5, 0.5))
    scene.add_sphere((0.0, -1000.0, 0.0), 1000.0, ground)

    glass = scene.add_dielectric_material(GLASS_IOR)
    clearance_point = np.array([4.0, 0.2, 0.0])

    for a in range(-11, 11):
        for b in range(-11, 11):
            center = np.array([a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random()])
            if np.linalg.norm(center - clearance_point) <= 0.9:
                continue

            choose_mat = rng.random()
            center_tuple = (float(center[0]), float(center[1]), float(center[2]))
            if choose_mat < 0.8:
                albedo = rng.random(3) * rng.random(3)
                scene.add_lambertian_sphere(center_tuple, 0.2, tuple(albedo.tolist()))
            elif choose_mat < 0.95:
                albedo = rng.uniform(0.5, 1.0, 3)
                fuzz = float(rng.uniform(0.0, 0.5))
                scene.add_metal_sphere(center_tuple, 0.2, tuple(albedo.tolist()), fuzz)
            else:
                scene.add_sphere(center_tuple, 0.2, glass)

    scene.add_sphere((0.0, 1.0, 0.0), 1.0, glass)
    scene.add_lambertian_sphere((-4.0, 1.0, 0.0), 1.0, (0.4, 0.2, 0.1))
    scene.add_metal_sphere((4.0, 1.0, 0.0), 1.0, (0.7, 0.6, 0.5), 0.0)

    camera = ThinLensCamera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0,
    )
    return scene, camera


SCENE_FACTORIES: dict[str, Callable[..., tuple[SceneManager, ThinLensCamera]]] = {
    "two_spheres": create_two_spheres_scene,
    "materials": create_materials_scene,
    "random_spheres": create_random_spheres_scene,
}


def create_scene(
    name: str,
    aspect_ratio: float = 16.0 / 9.0,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create a preset scene by name.

    Raises:
        ValueError: If the name is not a known preset.
    """
    try:
        factory = SCENE_FACTORIES[name]
    except KeyError:
        known = ", ".join(sorted(SCENE_FACTORIES))
        raise ValueError(f"Unknown scene '{name}'. Available scenes: {known}") from None
    return factory(aspect_ratio=aspect_ratio)
