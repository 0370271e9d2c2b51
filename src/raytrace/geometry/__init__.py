"""Geometry module for shape primitives.

This module provides the geometric primitive and its intersection routine:

Components:
    sphere: Sphere primitive with ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) so they can run inside
rendering kernels. They follow the pattern:
    record = hit_shape(ray_origin, ray_direction, shape, t_min, t_max)
where ``record.hit`` tells whether the optional result is present.
"""

from .sphere import HitRecord, Sphere, face_normal, hit_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "face_normal",
    "hit_sphere",
]
