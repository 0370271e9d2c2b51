"""Built-in sphere scenes.

This module provides factory functions for the scenes shipped with the tracer.

The default scene is four spheres in front of the camera (which looks down -z
from the origin):
- A huge matte yellow-green sphere acting as the ground
- A matte reddish sphere in the center
- A fuzzy silver metal sphere on the left
- A polished gold metal sphere on the right

The two-sphere scene is a matte sphere resting on a matte ground sphere. It
renders quickly and is used as an end-to-end check.

Example:
    >>> from raytrace.core.runtime import init_runtime
    >>> init_runtime()
    >>> from raytrace.scene.default_scene import create_default_scene
    >>> from raytrace.camera.pinhole import setup_camera
    >>>
    >>> scene, camera, settings = create_default_scene()
    >>> setup_camera(camera)
    >>> # Now render using the scene and camera
"""

from dataclasses import dataclass

from raytrace.camera.pinhole import PinholeCamera
from raytrace.core.settings import DEFAULT_MAX_DEPTH, RenderSettings
from raytrace.scene.manager import SceneManager

# =============================================================================
# Default Scene Parameters
# =============================================================================


@dataclass
class DefaultSceneParams:
    """Parameters for configuring the default four-sphere scene.

    All parameters have defaults matching the reference render.

    Attributes:
        ground_color: Albedo of the ground sphere.
        center_color: Albedo of the center sphere.
        left_color: Albedo of the left metal sphere.
        left_fuzz: Fuzz of the left metal sphere.
        right_color: Albedo of the right metal sphere.
        right_fuzz: Fuzz of the right metal sphere.
        image_width: Output width in pixels; the height follows from 16:9.
        samples_per_pixel: Samples averaged per pixel.
        max_depth: Bounce budget per camera ray.

    Example:
        >>> params = DefaultSceneParams(left_fuzz=0.0, samples_per_pixel=10)
        >>> scene, camera, settings = create_default_scene(params)
    """

    ground_color: tuple[float, float, float] = (0.8, 0.8, 0.0)
    center_color: tuple[float, float, float] = (0.7, 0.3, 0.3)
    left_color: tuple[float, float, float] = (0.8, 0.8, 0.8)
    left_fuzz: float = 0.3
    right_color: tuple[float, float, float] = (0.8, 0.6, 0.2)
    right_fuzz: float = 0.0
    image_width: int = 400
    samples_per_pixel: int = 100
    max_depth: int = DEFAULT_MAX_DEPTH


# =============================================================================
# Scene Geometry
# =============================================================================

ASPECT_RATIO = 16.0 / 9.0

# Ground sphere: large enough to look flat near the camera
GROUND_CENTER = (0.0, -100.5, -1.0)
GROUND_RADIUS = 100.0

# Small spheres sit one unit in front of the camera
SPHERE_RADIUS = 0.5
CENTER_SPHERE_CENTER = (0.0, 0.0, -1.0)
LEFT_SPHERE_CENTER = (-1.0, 0.0, -1.0)
RIGHT_SPHERE_CENTER = (1.0, 0.0, -1.0)


# =============================================================================
# Scene Factories
# =============================================================================


def _make_camera(settings: RenderSettings) -> PinholeCamera:
    return PinholeCamera(
        image_width=settings.image_width,
        image_height=settings.image_height,
    )


def create_default_scene(
    params: DefaultSceneParams | None = None,
) -> tuple[SceneManager, PinholeCamera, RenderSettings]:
    """Create the default four-sphere scene.

    Args:
        params: Optional DefaultSceneParams for customizing colors, fuzz and
            sampling. If None, uses default DefaultSceneParams().

    Returns:
        A tuple of (SceneManager, PinholeCamera, RenderSettings) where:
        - SceneManager contains the four spheres and their materials
        - PinholeCamera is sized to the settings' image
        - RenderSettings holds image size, samples per pixel and depth

    Raises:
        ValueError: If any color or fuzz is outside [0, 1], or the sampling
            parameters are invalid.

    Example:
        >>> scene, camera, settings = create_default_scene()
        >>> scene.get_sphere_count()
        4
        >>> (settings.image_width, settings.image_height)
        (400, 225)
    """
    if params is None:
        params = DefaultSceneParams()

    settings = RenderSettings.from_aspect_ratio(
        params.image_width,
        ASPECT_RATIO,
        samples_per_pixel=params.samples_per_pixel,
        max_depth=params.max_depth,
    )

    scene = SceneManager()

    # =========================================================================
    # Materials
    # =========================================================================

    ground_mat = scene.add_lambertian_material(albedo=params.ground_color)
    center_mat = scene.add_lambertian_material(albedo=params.center_color)
    left_mat = scene.add_metal_material(albedo=params.left_color, fuzz=params.left_fuzz)
    right_mat = scene.add_metal_material(albedo=params.right_color, fuzz=params.right_fuzz)

    # =========================================================================
    # Spheres
    # =========================================================================

    scene.add_sphere(center=GROUND_CENTER, radius=GROUND_RADIUS, material_id=ground_mat)
    scene.add_sphere(center=CENTER_SPHERE_CENTER, radius=SPHERE_RADIUS, material_id=center_mat)
    scene.add_sphere(center=LEFT_SPHERE_CENTER, radius=SPHERE_RADIUS, material_id=left_mat)
    scene.add_sphere(center=RIGHT_SPHERE_CENTER, radius=SPHERE_RADIUS, material_id=right_mat)

    return scene, _make_camera(settings), settings


def create_two_sphere_scene(
    image_width: int = 400,
    samples_per_pixel: int = 100,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> tuple[SceneManager, PinholeCamera, RenderSettings]:
    """Create the two-sphere scene: a matte sphere on a matte ground.

    Both spheres share one gray Lambertian material.

    Returns:
        A tuple of (SceneManager, PinholeCamera, RenderSettings).

    Example:
        >>> scene, camera, settings = create_two_sphere_scene(40, 1, 1)
        >>> scene.get_sphere_count()
        2
    """
    settings = RenderSettings.from_aspect_ratio(
        image_width,
        ASPECT_RATIO,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
    )

    scene = SceneManager()
    gray = scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
    scene.add_sphere(center=CENTER_SPHERE_CENTER, radius=SPHERE_RADIUS, material_id=gray)
    scene.add_sphere(center=GROUND_CENTER, radius=GROUND_RADIUS, material_id=gray)

    return scene, _make_camera(settings), settings
