"""Scene module for scene construction and ray-scene queries.

Components:
    intersection: Sphere table and nearest-hit search
    manager: Scene manager coordinating spheres and materials
    presets: Ready-made scenes with matching cameras

Scene data lives in Taichi fields (structure-of-arrays) and is read-only
while rendering. Spheres refer to materials by unified material ID, so one
material can be shared by any number of spheres.
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
    material_type_indices,
    material_types,
    num_materials,
)
from .presets import (
    SCENE_FACTORIES,
    create_materials_scene,
    create_random_spheres_scene,
    create_scene,
    create_two_spheres_scene,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    "material_types",
    "material_type_indices",
    "num_materials",
    # Presets
    "SCENE_FACTORIES",
    "create_scene",
    "create_two_spheres_scene",
    "create_materials_scene",
    "create_random_spheres_scene",
]
