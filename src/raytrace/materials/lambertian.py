"""Lambertian (ideal diffuse) material.

A diffuse bounce leaves in the direction ``normal + random_unit_vector()``.
The tip of that vector lies on the unit sphere resting on the hit point, so
directions follow a cosine distribution around the normal. Under that
distribution the cosine term and the sampling density cancel, and the path
is simply multiplied by the albedo.

A diffuse surface never absorbs a ray outright.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytrace.materials.lambertian import add_lambertian_material
    >>> add_lambertian_material((0.5, 0.5, 0.5))
    0
"""

import taichi as ti
import taichi.math as tm

from raytrace.core.ray import near_zero, random_unit_vector

vec3 = tm.vec3

# Registry capacity
MAX_LAMBERTIAN_MATERIALS = 256


@ti.dataclass
class LambertianMaterial:
    """Parameters of one diffuse material.

    Attributes:
        albedo: Fraction of light reflected per RGB channel, each in [0, 1].
    """

    albedo: vec3


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3):
    """Sample a diffuse bounce off a surface with the given normal.

    When the random unit vector almost exactly cancels the normal, the bare
    normal is used so the new ray never gets a degenerate direction.

    Returns:
        (scattered_direction, attenuation). The direction is not normalized;
        the attenuation is the albedo.
    """
    direction = normal + random_unit_vector()
    if near_zero(direction):
        direction = normal
    return direction, albedo


lambertian_materials = LambertianMaterial.field(shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def validate_albedo(albedo: tuple[float, float, float]) -> None:
    """Raise ValueError unless albedo is three components in [0, 1].

    Shared by every material type that takes an albedo.
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}")
    for channel, value in zip("RGB", albedo):
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Albedo {channel} = {value} is outside [0, 1]")


def clear_lambertian_materials() -> None:
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Store a diffuse material and return its index in this registry.

    Raises:
        ValueError: If the albedo is not three components in [0, 1].
        RuntimeError: If MAX_LAMBERTIAN_MATERIALS are already stored.
    """
    validate_albedo(albedo)

    idx = int(num_lambertian_materials[None])
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_materials.albedo[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    return int(num_lambertian_materials[None])


def get_lambertian_albedo(material_idx: int) -> tuple[float, float, float]:
    """Read back a stored albedo on the host."""
    a = lambertian_materials.albedo[material_idx]
    return (float(a[0]), float(a[1]), float(a[2]))


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, normal: vec3):
    """scatter_lambertian with the albedo of registry entry material_idx."""
    return scatter_lambertian(lambertian_materials[material_idx].albedo, normal)
