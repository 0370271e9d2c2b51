"""Camera module for primary ray generation.

Components:
    pinhole: Fixed pinhole camera looking down -z

Camera responsibilities:
    - Map (u, v) image coordinates to world-space rays
    - Apply anti-aliasing jitter for sub-pixel sampling

Ray generation uses normalized image coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image

Note: importing this package allocates Taichi fields; call ``ti.init`` first.
"""

from .pinhole import (
    PinholeCamera,
    get_camera_info,
    get_camera_origin,
    get_ray,
    get_ray_jittered,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_ray",
    "get_ray_jittered",
    "get_camera_origin",
    "get_camera_info",
]
