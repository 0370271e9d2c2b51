"""Ray-sphere intersection.

A point P(t) = origin + t * direction lies on the sphere when
``|P - center|^2 = radius^2``, which is a quadratic in t. With
``oc = origin - center`` it reads

    a t^2 + 2 h t + c = 0,   a = d.d,  h = oc.d,  c = oc.oc - r^2

so the roots are ``(-h -/+ sqrt(h^2 - a c)) / a``. Solving for h instead of
b = 2h drops the factors of two and four, and nothing assumes a unit
direction.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytrace.geometry.sphere import Sphere, hit_sphere
    >>> unit = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # record = hit_sphere(origin, direction, unit, 0.001, 1e10) in a kernel
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@ti.dataclass
class Sphere:
    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Result of a primitive intersection test.

    ``hit`` is 1 when the test found an intersection; every other member is
    only meaningful in that case.

    Attributes:
        hit: 1 on intersection, 0 otherwise.
        t: Ray parameter of the intersection.
        point: World-space intersection point.
        normal: Unit normal, always on the side the ray came from.
        front_face: 1 if the ray struck the outside of the surface.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def face_normal(ray_direction: vec3, outward_normal: vec3):
    """Turn an outward normal so that it faces the incoming ray.

    Returns:
        (front_face, normal) with ``dot(ray_direction, normal) <= 0``.
    """
    front_face = 1
    normal = outward_normal
    if tm.dot(ray_direction, outward_normal) >= 0.0:
        front_face = 0
        normal = -outward_normal
    return front_face, normal


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Nearest intersection of a ray with a sphere, t in [t_min, t_max].

    The near root is preferred; the far root is taken only when the near one
    falls outside the interval, which is what happens for a ray leaving the
    inside of the sphere. Both bounds are inclusive. A zero direction or a
    negative discriminant is a miss.
    """
    record = HitRecord(hit=0, t=0.0, point=vec3(0.0), normal=vec3(0.0), front_face=0)

    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    disc = h * h - a * c

    if a > 0.0 and disc >= 0.0:
        root = ti.sqrt(disc)
        t = (-h - root) / a
        if t < t_min or t > t_max:
            t = (-h + root) / a

        if t_min <= t <= t_max:
            p = ray_origin + t * ray_direction
            front, n = face_normal(ray_direction, (p - sphere.center) / sphere.radius)
            record.hit = 1
            record.t = t
            record.point = p
            record.normal = n
            record.front_face = front

    return record
