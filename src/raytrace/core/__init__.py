"""Rays, runtime setup, render settings and the path tracing loop.

Components:
    ray: Ray data structure, vector helpers and random sampling
    integrator: Bounded light-transport loop and the accumulation buffers
    renderer: Sample scheduling, progress reporting and image retrieval
    runtime: Taichi runtime initialization (backend and random seed)
    settings: RenderSettings dataclass (image size and sampling)

The integrator estimates the radiance reaching the camera along each ray by
following it through at most ``max_depth`` scattering events. The sky gradient
is the only light source.

Note: integrator and renderer are NOT imported here. They allocate Taichi
fields at import time, which must happen after ``ti.init``. Import them
directly from raytrace.core.integrator or raytrace.core.renderer.
"""

from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_unit_cube,
    random_in_unit_sphere,
    random_unit_vector,
    ray_at,
    reflect,
    vec3,
)
from .runtime import init_runtime
from .settings import DEFAULT_MAX_DEPTH, RenderSettings

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "near_zero",
    "random_in_unit_cube",
    "random_in_unit_sphere",
    "random_unit_vector",
    "init_runtime",
    "DEFAULT_MAX_DEPTH",
    "RenderSettings",
]
