"""Metal (specular) material with an optional fuzzy reflection lobe.

The unit incident direction D is mirrored about the normal N,

    R = D - 2(D . N)N

and then pushed by a random vector of length ``fuzz``. With fuzz = 0 this is
a perfect mirror. A fuzzed direction that ends up below the surface is
absorbed, which darkens grazing reflections on rough metals.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytrace.materials.metal import add_metal_material
    >>> add_metal_material((0.8, 0.6, 0.2), fuzz=0.0)
    0
"""

import taichi as ti
import taichi.math as tm

from raytrace.core.ray import random_unit_vector, reflect
from raytrace.materials.lambertian import validate_albedo

vec3 = tm.vec3

# Registry capacity
MAX_METAL_MATERIALS = 256


@ti.dataclass
class MetalMaterial:
    """Parameters of one metal material.

    Attributes:
        albedo: Reflected color per RGB channel, each in [0, 1].
        fuzz: Length of the random offset added to the mirror direction,
            in [0, 1].
    """

    albedo: vec3
    fuzz: ti.f32


@ti.func
def scatter_metal(albedo: vec3, fuzz: ti.f32, incident_direction: vec3, normal: vec3):
    """Reflect an incoming ray off a metal surface.

    Args:
        albedo: Reflected color.
        fuzz: Lobe radius in [0, 1].
        incident_direction: Incoming direction, any non-zero length.
        normal: Unit normal facing the incoming ray.

    Returns:
        (scattered_direction, attenuation, did_scatter). did_scatter is 0
        when the fuzzed direction does not leave the surface.
    """
    mirrored = reflect(tm.normalize(incident_direction), normal)
    direction = mirrored + fuzz * random_unit_vector()

    did_scatter = 0
    if tm.dot(direction, normal) > 0.0:
        did_scatter = 1

    return direction, albedo, did_scatter


metal_materials = MetalMaterial.field(shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    num_metal_materials[None] = 0


def add_metal_material(albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
    """Store a metal material and return its index in this registry.

    Raises:
        ValueError: If the albedo is not three components in [0, 1], or fuzz
            is outside [0, 1].
        RuntimeError: If MAX_METAL_MATERIALS are already stored.
    """
    validate_albedo(albedo)
    if not 0.0 <= fuzz <= 1.0:
        raise ValueError(f"Fuzz = {fuzz} is outside [0, 1]")

    idx = int(num_metal_materials[None])
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded")

    metal_materials.albedo[idx] = vec3(albedo[0], albedo[1], albedo[2])
    metal_materials.fuzz[idx] = fuzz
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    return int(num_metal_materials[None])


def get_metal_material(material_idx: int) -> tuple[tuple[float, float, float], float]:
    """Read back a stored (albedo, fuzz) pair on the host."""
    a = metal_materials.albedo[material_idx]
    return (float(a[0]), float(a[1]), float(a[2])), float(metal_materials.fuzz[material_idx])


@ti.func
def scatter_metal_by_id(material_idx: ti.i32, incident_direction: vec3, normal: vec3):
    """scatter_metal with the parameters of registry entry material_idx."""
    m = metal_materials[material_idx]
    return scatter_metal(m.albedo, m.fuzz, incident_direction, normal)
