"""The sphere scene, its materials and closest-hit queries against it.

Components:
    intersection: Sphere storage and closest-hit queries over the scene
    manager: Scene manager coordinating spheres and the material registry
    default_scene: Built-in scenes (four-sphere demo and two-sphere check)

Device layout:
    - One struct field holding every sphere in insertion order
    - Integer material ids shared between spheres

Note: importing this package allocates Taichi fields; call ``ti.init`` first.
"""

# Built-in scenes
from .default_scene import (
    DefaultSceneParams,
    create_default_scene,
    create_two_sphere_scene,
)

# Sphere storage and closest-hit query
from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    SceneSphere,
    add_sphere,
    clear_scene,
    get_sphere,
    get_sphere_count,
    intersect_scene,
)

# Material ids and host-side scene building
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialSlot,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
    material_slots,
    num_materials,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "SceneSphere",
    "add_sphere",
    "clear_scene",
    "get_sphere",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "MaterialSlot",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    "material_slots",
    "num_materials",
    # Built-in scenes
    "DefaultSceneParams",
    "create_default_scene",
    "create_two_sphere_scene",
]
