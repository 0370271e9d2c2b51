"""Sphere storage and nearest-hit queries for the whole scene.

The scene is a flat, ordered list of spheres held in a single Taichi struct
field. A sphere refers to its material by id only; the material parameters
live in the per-type registries, so any number of spheres can share one.

``intersect_scene`` walks the list front to back and narrows the accepted
interval to the nearest hit so far. The first sphere added wins an exact tie.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytrace.scene.intersection import add_sphere, clear_scene, vec3
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, -1), 0.5, material_id=0)
    0
"""

import taichi as ti
import taichi.math as tm

from raytrace.geometry.sphere import Sphere, hit_sphere

vec3 = tm.vec3

# Fixed capacity of the sphere list
MAX_SPHERES = 1024


@ti.dataclass
class SceneSphere:
    """A sphere as stored in the scene: geometry plus its material id."""

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.dataclass
class SceneHitRecord:
    """Nearest intersection of a ray with the scene.

    Attributes:
        hit: 1 if any sphere was hit, 0 otherwise. The remaining members
            are meaningful only when hit == 1.
        t: Ray parameter of the hit point.
        point: World-space hit point.
        normal: Unit normal facing the incoming ray.
        front_face: 1 if the ray arrived from outside the sphere.
        material_id: Material of the sphere that was hit, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


spheres = SceneSphere.field(shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Empty the sphere list. Stale entries are overwritten by later adds."""
    num_spheres[None] = 0


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Append a sphere to the scene.

    The material id is stored as given; SceneManager validates it against the
    registered materials. An id with no material behind it absorbs every ray
    that hits the sphere.

    Returns:
        The sphere's index in the scene.

    Raises:
        ValueError: If radius is not a positive number.
        RuntimeError: If the scene already holds MAX_SPHERES spheres.
    """
    if not radius > 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

    spheres.center[idx] = center
    spheres.radius[idx] = radius
    spheres.material_id[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_sphere(idx: int) -> tuple[tuple[float, float, float], float, int]:
    """Read back a stored sphere as (center, radius, material_id).

    Raises:
        IndexError: If idx does not name a sphere in the scene.
    """
    if not 0 <= idx < num_spheres[None]:
        raise IndexError(f"Sphere index {idx} out of range")
    c = spheres.center[idx]
    return (
        (float(c[0]), float(c[1]), float(c[2])),
        float(spheres.radius[idx]),
        int(spheres.material_id[idx]),
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Find the nearest sphere hit with t in [t_min, t_max].

    Each accepted hit lowers the upper bound to its own t, so a later sphere
    only replaces it when strictly nearer.

    Returns:
        The nearest hit, or a record with hit == 0 and material_id == -1.
    """
    result = SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0),
        normal=vec3(0.0),
        front_face=0,
        material_id=-1,
    )
    closest_t = t_max

    for i in range(num_spheres[None]):
        s = spheres[i]
        rec = hit_sphere(
            ray_origin, ray_direction, Sphere(center=s.center, radius=s.radius), t_min, closest_t
        )
        if rec.hit == 1 and (result.hit == 0 or rec.t < closest_t):
            closest_t = rec.t
            result.hit = 1
            result.t = rec.t
            result.point = rec.point
            result.normal = rec.normal
            result.front_face = rec.front_face
            result.material_id = s.material_id

    return result
