"""Fixed pinhole camera.

The eye sits at ``origin`` looking down -z. At ``focal_length`` in front of
it is a virtual image plane, ``viewport_height`` world units tall and as wide
as the image aspect ratio allows. A pair of normalized image coordinates
(u, v) picks a point on that plane, counting from its lower-left corner, and
the camera ray runs from the eye through that point:

    direction = lower_left + u * horizontal + v * vertical - origin

Camera rays are left unnormalized.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytrace.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>>
    >>> setup_camera(PinholeCamera(image_width=400, image_height=225))
    >>>
    >>> @ti.kernel
    ... def center_ray():
    ...     ray = get_ray(0.5, 0.5)
"""

from dataclasses import dataclass

import numpy as np
import taichi as ti

from raytrace.core.ray import Ray, make_ray, vec3


@dataclass
class PinholeCamera:
    """Camera settings, checked on construction.

    Attributes:
        image_width: Output image width in pixels.
        image_height: Output image height in pixels.
        origin: Eye position in world space.
        viewport_height: Height of the image plane in world units.
        focal_length: Distance from the eye to the image plane.

    Raises:
        ValueError: If a dimension, the viewport height or the focal length
            is not positive.
    """

    image_width: int
    image_height: int
    origin: tuple[float, float, float] = (0.0, 0.0, 0.0)
    viewport_height: float = 2.0
    focal_length: float = 1.0

    def __post_init__(self) -> None:
        if self.image_width <= 0 or self.image_height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got "
                f"{self.image_width}x{self.image_height}"
            )
        if self.viewport_height <= 0.0:
            raise ValueError(f"Viewport height must be positive, got {self.viewport_height}")
        if self.focal_length <= 0.0:
            raise ValueError(f"Focal length must be positive, got {self.focal_length}")

    @property
    def aspect_ratio(self) -> float:
        return self.image_width / self.image_height

    @property
    def viewport_width(self) -> float:
        """Image plane width in world units."""
        return self.aspect_ratio * self.viewport_height


@ti.dataclass
class Viewport:
    """World-space frame of the image plane as seen from the eye."""

    eye: vec3
    lower_left: vec3
    horizontal: vec3  # lower-left to lower-right edge
    vertical: vec3  # lower-left to upper-left edge


_viewport = Viewport.field(shape=())


def setup_camera(camera: PinholeCamera) -> None:
    """Make camera the one every kernel generates rays from.

    Call from Python scope before the first render with this camera.
    """
    eye = np.asarray(camera.origin, dtype=np.float32)
    horizontal = np.array([camera.viewport_width, 0.0, 0.0], dtype=np.float32)
    vertical = np.array([0.0, camera.viewport_height, 0.0], dtype=np.float32)
    depth = np.array([0.0, 0.0, camera.focal_length], dtype=np.float32)

    _viewport.eye[None] = eye.tolist()
    _viewport.lower_left[None] = (eye - 0.5 * horizontal - 0.5 * vertical - depth).tolist()
    _viewport.horizontal[None] = horizontal.tolist()
    _viewport.vertical[None] = vertical.tolist()


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Camera ray through image plane point (u, v).

    (0, 0) is the lower-left corner of the image and (1, 1) the upper-right.
    """
    view = _viewport[None]
    target = view.lower_left + u * view.horizontal + v * view.vertical
    return make_ray(view.eye, target - view.eye)


@ti.func
def get_ray_jittered(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Camera ray through a uniformly random point of pixel (pixel_i, pixel_j).

    Pixel (0, 0) is bottom-left. The pixel index plus a jitter in [0, 1) is
    divided by (size - 1), so the last column and row reach the plane edges.
    A one-pixel-wide or one-pixel-tall image divides by 1 instead of 0.
    """
    span_u = ti.cast(ti.max(width - 1, 1), ti.f32)
    span_v = ti.cast(ti.max(height - 1, 1), ti.f32)

    u = (ti.cast(pixel_i, ti.f32) + ti.random(ti.f32)) / span_u
    v = (ti.cast(pixel_j, ti.f32) + ti.random(ti.f32)) / span_v
    return get_ray(u, v)


@ti.func
def get_camera_origin() -> vec3:
    return _viewport[None].eye


def _host_vec(v) -> tuple[float, float, float]:
    return (float(v[0]), float(v[1]), float(v[2]))


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Current viewport frame as plain tuples, for logging and tests.

    Keys are ``origin``, ``horizontal``, ``vertical`` and ``lower_left``.
    """
    return {
        "origin": _host_vec(_viewport.eye[None]),
        "horizontal": _host_vec(_viewport.horizontal[None]),
        "vertical": _host_vec(_viewport.vertical[None]),
        "lower_left": _host_vec(_viewport.lower_left[None]),
    }
