"""Monte Carlo sphere path tracer built on Taichi.

This package renders scenes of spheres with diffuse and metal materials under
a sky-gradient background, with support for:
- Bounded path tracing with per-pixel sample accumulation
- Lambertian and (optionally fuzzy) metal materials shared by id
- Plain-text PPM and PNG output with gamma-2 quantization

Subpackages:
    core: Ray helpers, runtime setup, integrator, and rendering loop
    geometry: Sphere primitive and intersection
    materials: Lambertian and metal scattering models
    scene: Scene management, hit records and built-in scenes
    camera: Fixed pinhole camera with ray generation
    output: Quantization and image export
"""

__version__ = "0.1.0"
