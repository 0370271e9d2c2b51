"""Path tracing integrator for Monte Carlo light transport.

This module implements the light-transport estimator and the rendering
kernels that feed it camera rays and accumulate the results.

For one camera ray, ray_color() follows the path through at most ``max_depth``
scattering events. At every surface the hit material either absorbs the ray
or scatters it with a color attenuation; attenuations multiply into the path
throughput. A ray that escapes the scene picks up the sky gradient, which is
the only light source. Equivalently, with depth counting the bounces left:

    ray_color(ray, 0)     = black
    ray_color(ray, depth) = attenuation * ray_color(scattered, depth - 1)  on scatter
                          = black                                          on absorption
                          = sky(ray.direction)                             on escape

The recursion is unrolled into a loop so the bounce budget alone bounds the
work done per ray.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytrace.core.integrator import render_image, setup_render_target
    >>> from raytrace.scene.default_scene import create_default_scene
    >>> from raytrace.camera.pinhole import setup_camera
    >>>
    >>> scene, camera, settings = create_default_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(camera.image_width, camera.image_height)
    >>> render_image(num_samples=10, max_depth=50)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raytrace.camera.pinhole import get_ray_jittered
from raytrace.core.ray import Ray, make_ray
from raytrace.core.settings import DEFAULT_MAX_DEPTH
from raytrace.materials.lambertian import scatter_lambertian_by_id
from raytrace.materials.metal import scatter_metal_by_id
from raytrace.scene.intersection import intersect_scene
from raytrace.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# t_min excludes the surface a ray leaves from (avoids shadow acne)
T_MIN = 0.001
T_MAX = 1e10

# Sky gradient endpoints: horizon (looking down) and zenith (looking up)
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)

# =============================================================================
# Render Target
# =============================================================================

# The buffers are allocated once at the largest supported size. A render only
# touches the lower-left width x height block, so changing the image size
# never reallocates a field or recompiles a kernel.
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Per-pixel sum of sample colors and number of samples, indexed [i, j] with
# j = 0 the bottom row
_color_sum = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Active (width, height); (0, 0) means no render target has been set up
_extent = ti.Vector.field(2, dtype=ti.i32, shape=())

_probe_color = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Make width x height the active image size and zero its buffers.

    Raises:
        ValueError: If a dimension is not positive or is larger than
            MAX_IMAGE_WIDTH / MAX_IMAGE_HEIGHT.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _extent[None] = (width, height)
    clear_render_target()


def clear_render_target() -> None:
    """Zero the color sums and sample counts, keeping the image size."""
    _color_sum.fill(0.0)
    _sample_count.fill(0)


def release_render_target() -> None:
    """Forget the active image size; rendering requires a new setup."""
    _extent[None] = (0, 0)
    clear_render_target()


def get_image_dimensions() -> tuple[int, int]:
    """Active (width, height), or (0, 0) before setup_render_target."""
    extent = _extent[None]
    return int(extent[0]), int(extent[1])


def _require_render_target() -> tuple[int, int]:
    width, height = get_image_dimensions()
    if width == 0:
        raise RuntimeError("Render target not set up; call setup_render_target() first")
    return width, height


def get_image() -> "ti.MatrixField":
    """The full-size color sum field. Only the active block holds data.

    Raises:
        RuntimeError: If no render target has been set up.
    """
    _require_render_target()
    return _color_sum


def get_sample_count() -> "ti.ScalarField":
    """The full-size per-pixel sample count field.

    Raises:
        RuntimeError: If no render target has been set up.
    """
    _require_render_target()
    return _sample_count


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(material_id: ti.i32, incident_direction: vec3, normal: vec3):
    """Scatter off the material registered under material_id.

    Returns:
        (scattered_direction, attenuation, did_scatter). An id that names no
        known material type absorbs the ray (did_scatter == 0).
    """
    kind = get_material_type(material_id)
    index = get_material_type_index(material_id)

    direction = vec3(0.0)
    attenuation = vec3(0.0)
    did_scatter = 0

    if kind == int(MaterialType.LAMBERTIAN):
        direction, attenuation = scatter_lambertian_by_id(index, normal)
        did_scatter = 1
    elif kind == int(MaterialType.METAL):
        direction, attenuation, did_scatter = scatter_metal_by_id(
            index, incident_direction, normal
        )

    return direction, attenuation, did_scatter


# =============================================================================
# Light Transport
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky gradient seen by a ray that escapes the scene.

    Blends linearly from white (straight down) to sky blue (straight up)
    by the y component of the normalized direction.
    """
    unit_direction = tm.normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * SKY_HORIZON_COLOR + t * SKY_ZENITH_COLOR


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        ray: The ray to trace. Its direction need not be normalized.
        max_depth: Number of surface interactions allowed. A value of 0 or
            less returns black without touching the scene.

    Returns:
        The estimated radiance (RGB).
    """
    origin = ray.origin
    direction = ray.direction
    throughput = vec3(1.0)
    radiance = vec3(0.0)

    # Taichi funcs cannot break out of a loop, so a flag ends the path
    alive = 1
    for _ in range(max_depth):
        if alive == 1:
            rec = intersect_scene(origin, direction, T_MIN, T_MAX)
            if rec.hit == 0:
                radiance = throughput * background_color(direction)
                alive = 0
            else:
                new_direction, attenuation, did_scatter = _scatter_material(
                    rec.material_id, direction, rec.normal
                )
                if did_scatter == 1:
                    throughput *= attenuation
                    origin = rec.point
                    direction = new_direction
                else:
                    alive = 0

    # Paths cut off by the bounce budget stay black
    return radiance


@ti.func
def _sanitize(color: vec3) -> vec3:
    """Zero out negative, NaN and infinite components of a sample."""
    result = vec3(0.0)
    for c in ti.static(range(3)):
        v = color[c]
        if v > 0.0 and not tm.isinf(v):
            result[c] = v
    return result


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _accumulate_pass(width: ti.i32, height: ti.i32, max_depth: ti.i32):
    """Add one jittered sample to every active pixel."""
    for i, j in ti.ndrange(width, height):
        sample = ray_color(get_ray_jittered(i, j, width, height), max_depth)
        _color_sum[i, j] += _sanitize(sample)
        _sample_count[i, j] += 1


# The probes below wrap their work in a one-iteration loop: only the outermost
# loop of a kernel is parallelized, so the bounce loop inside ray_color stays
# serial.


@ti.kernel
def _probe_pixel(i: ti.i32, j: ti.i32, width: ti.i32, height: ti.i32, max_depth: ti.i32):
    for _ in range(1):
        _probe_color[None] = ray_color(get_ray_jittered(i, j, width, height), max_depth)


@ti.kernel
def _probe_ray(origin: vec3, direction: vec3, max_depth: ti.i32):
    for _ in range(1):
        _probe_color[None] = ray_color(make_ray(origin, direction), max_depth)


def _read_probe() -> tuple[float, float, float]:
    c = _probe_color[None]
    return (float(c[0]), float(c[1]), float(c[2]))


# =============================================================================
# Public Rendering API
# =============================================================================


def _check_max_depth(max_depth: int) -> None:
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> tuple[float, float, float]:
    """Estimate the radiance along one ray against the current scene.

    A debugging probe: it does not need a render target or a camera.

    Raises:
        ValueError: If direction has zero length or max_depth is negative.
    """
    _check_max_depth(max_depth)
    if all(component == 0.0 for component in direction):
        raise ValueError("Ray direction must have non-zero length")

    _probe_ray(vec3(*origin), vec3(*direction), max_depth)
    return _read_probe()


def render_sample(
    pixel_i: int, pixel_j: int, max_depth: int = DEFAULT_MAX_DEPTH
) -> tuple[float, float, float]:
    """Trace one jittered camera sample through pixel (pixel_i, pixel_j).

    Pixel (0, 0) is the bottom-left corner. The result is returned, not
    accumulated.

    Raises:
        RuntimeError: If no render target has been set up.
        ValueError: If max_depth is negative.
    """
    width, height = _require_render_target()
    _check_max_depth(max_depth)

    _probe_pixel(pixel_i, pixel_j, width, height, max_depth)
    return _read_probe()


def render_image(num_samples: int = 1, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
    """Add num_samples samples to every pixel of the render target.

    Each sample pass is one kernel launch over all pixels. Calling this
    repeatedly keeps refining the same image.

    Raises:
        RuntimeError: If no render target has been set up.
        ValueError: If max_depth is negative.
    """
    width, height = _require_render_target()
    _check_max_depth(max_depth)

    for _ in range(num_samples):
        _accumulate_pass(width, height, max_depth)


def get_total_samples() -> int:
    """Samples per pixel accumulated so far (equal for every pixel).

    Raises:
        RuntimeError: If no render target has been set up.
    """
    _require_render_target()
    return int(_sample_count[0, 0])


def get_color_sum_numpy() -> npt.NDArray[np.float32]:
    """Per-pixel color sums as an (height, width, 3) array, top row first.

    The values are sums, not means; divide by get_total_samples() to average.

    Raises:
        RuntimeError: If no render target has been set up.
    """
    width, height = _require_render_target()

    # Fields are [i, j] with j growing upward; images are [row, column]
    # with row 0 at the top
    sums = _color_sum.to_numpy()[:width, :height]
    return np.ascontiguousarray(np.flipud(sums.transpose(1, 0, 2)), dtype=np.float32)


def get_normalized_image_numpy() -> npt.NDArray[np.float32]:
    """Mean linear color per pixel, (height, width, 3), top row first.

    An image with no samples yet is all black.

    Raises:
        RuntimeError: If no render target has been set up.
    """
    sums = get_color_sum_numpy()
    total = get_total_samples()
    if total == 0:
        return np.zeros_like(sums)
    return (sums / np.float32(total)).astype(np.float32)
