"""Shared fixtures: one Taichi runtime per session and a clean scene per test."""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Start the CPU runtime before any raytrace module allocates fields.

    Fields allocated under one runtime are invalid after ti.reset(), so the
    runtime lives for the whole session.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Empty the scene, the material registries and the render target around each test."""
    # Import here so the modules allocate their fields after ti.init
    from raytrace.core import integrator
    from raytrace.materials.lambertian import clear_lambertian_materials
    from raytrace.materials.metal import clear_metal_materials
    from raytrace.scene.intersection import clear_scene
    from raytrace.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        _clear_material_tracking()

        integrator.release_render_target()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def default_camera():
    """Set up the standard 16:9 pinhole camera at the origin."""
    from raytrace.camera.pinhole import PinholeCamera, setup_camera

    camera = PinholeCamera(image_width=16, image_height=9)
    setup_camera(camera)
    return camera
