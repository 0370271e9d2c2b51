"""Rays, vector helpers and the random directions used for scattering.

Vectors are Taichi's ``vec3`` value type, so arithmetic uses the native
operators and only the products, norms and sampling routines get names here.

Ray directions are never assumed to be unit length. Every formula that needs a
unit direction normalizes explicitly.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytrace.core.ray import Ray, ray_at, vec3
    >>> ray = Ray(origin=vec3(0.0, 1.0, 0.0), direction=vec3(0.0, 0.0, -2.0))
    >>> ray_at(ray, 0.5)  # (0, 1, -1)
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Components below this magnitude count as zero in near_zero()
NEAR_ZERO_EPSILON = 1e-8

# Upper bound on rejection-sampling attempts per random point
MAX_REJECTION_ATTEMPTS = 100


@ti.dataclass
class Ray:
    """Half-line origin + t * direction for t >= 0; direction may have any length."""

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Point reached after t direction-lengths along the ray."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Build a Ray inside Taichi scope.

    Args:
        origin: Start point of the ray.
        direction: Direction of travel; any non-zero length.

    Returns:
        The Ray origin + t * direction.
    """
    return Ray(origin=origin, direction=direction)


# Vector helpers


@ti.func
def length(v: vec3) -> ti.f32:
    """Euclidean length of v.

    Args:
        v: Any vector.

    Returns:
        sqrt(v . v), zero only for the zero vector.
    """
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Squared Euclidean length."""
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Unit vector along v. v must not be the zero vector."""
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Scalar product of two vectors.

    Args:
        a: First vector.
        b: Second vector.

    Returns:
        a.x * b.x + a.y * b.y + a.z * b.z
    """
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Right-handed cross product.

    Args:
        a: First vector.
        b: Second vector.

    Returns:
        A vector perpendicular to both a and b, of length |a||b|sin(theta).
    """
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror image of incident about a unit normal: v - 2(v . n)n.

    The length of incident is preserved.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """1 when every component of v is within NEAR_ZERO_EPSILON of zero."""
    return ti.max(ti.abs(v.x), ti.max(ti.abs(v.y), ti.abs(v.z))) < NEAR_ZERO_EPSILON


# Random directions


@ti.func
def random_in_unit_cube() -> vec3:
    """Random point with every component uniform in [-1, 1)."""
    return vec3(
        ti.random(ti.f32) * 2.0 - 1.0,
        ti.random(ti.f32) * 2.0 - 1.0,
        ti.random(ti.f32) * 2.0 - 1.0,
    )


@ti.func
def random_in_unit_sphere() -> vec3:
    """Uniform random point strictly inside the unit ball.

    Draws from the [-1, 1) cube until a point lands inside the ball and away
    from the origin, so the result is always safe to normalize. If every
    attempt misses, (0, 0, 1) is returned.
    """
    point = vec3(0.0, 0.0, 1.0)
    searching = 1
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if searching == 1:
            candidate = random_in_unit_cube()
            r2 = length_squared(candidate)
            if r2 < 1.0 and r2 > NEAR_ZERO_EPSILON:
                point = candidate
                searching = 0
    return point


@ti.func
def random_unit_vector() -> vec3:
    """Uniformly distributed direction on the unit sphere."""
    return normalize(random_in_unit_sphere())
