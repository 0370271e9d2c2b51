"""Tests for runtime initialization.

Taichi is initialized once per session by conftest.py, so in-process tests only
exercise the checks that run before ti.init is called. Seeded renders run in
subprocesses.
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).resolve().parent.parent / "src"


class TestInitRuntimeValidation:
    """Test init_runtime rejects bad arguments without touching Taichi."""

    @pytest.mark.parametrize("arch", ["tpu", "CPU", ""])
    def test_unknown_backend(self, arch):
        from raytrace.core.runtime import init_runtime

        with pytest.raises(ValueError, match="Unknown backend"):
            init_runtime(arch=arch)

    def test_negative_seed(self):
        from raytrace.core.runtime import init_runtime

        with pytest.raises(ValueError, match="non-negative"):
            init_runtime(seed=-1)

    def test_negative_seed_in_deterministic_mode(self):
        from raytrace.core.runtime import init_runtime

        with pytest.raises(ValueError, match="non-negative"):
            init_runtime(seed=-7, deterministic=True)



# Renders the two-sphere scene in a fresh interpreter and prints a digest of
# the color sums. Each run needs its own process because ti.init can only be
# called once here.
_RENDER_SCRIPT = """
import hashlib
import sys

from raytrace.core.runtime import init_runtime

init_runtime(arch="cpu", seed=int(sys.argv[1]), deterministic=True)

from raytrace.camera.pinhole import setup_camera
from raytrace.core.renderer import Renderer
from raytrace.scene.default_scene import create_two_sphere_scene

scene, camera, settings = create_two_sphere_scene(40, 4, 5)
setup_camera(camera)
renderer = Renderer.from_settings(settings)
renderer.render(settings.samples_per_pixel, batch_size=settings.samples_per_pixel)
print(hashlib.sha1(renderer.get_color_sum_numpy().tobytes()).hexdigest())
"""


def _render_digest(seed: int) -> str:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    result = subprocess.run(
        [sys.executable, "-c", _RENDER_SCRIPT, str(seed)],
        capture_output=True,
        text=True,
        env=env,
        timeout=600,
        check=True,
    )
    return result.stdout.strip().splitlines()[-1]


class TestDeterministicRender:
    """Test a seeded single-threaded render is reproducible."""

    def test_same_seed_gives_identical_image(self):
        first = _render_digest(7)
        second = _render_digest(7)
        assert len(first) == 40
        assert first == second


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
