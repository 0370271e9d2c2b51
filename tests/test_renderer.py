"""Tests for Renderer and RenderSettings.

raytrace modules are imported inside each test, after the session fixture
in conftest.py has started Taichi.
"""

import io
import os
import tempfile

import numpy as np
import pytest
from PIL import Image as PILImage


def _setup_simple_scene(width=16, height=16):
    """Helper to set up a single gray sphere in front of the camera."""
    from raytrace.camera.pinhole import PinholeCamera, setup_camera
    from raytrace.scene.manager import SceneManager

    scene = SceneManager()
    mat_id = scene.add_lambertian_material((0.5, 0.5, 0.5))
    scene.add_sphere((0, 0, -1), 0.5, mat_id)

    setup_camera(PinholeCamera(image_width=width, image_height=height))
    return scene


class TestRenderSettings:
    """Test RenderSettings validation and construction."""

    def test_defaults(self):
        from raytrace.core.settings import RenderSettings

        settings = RenderSettings()
        assert settings.image_width == 400
        assert settings.image_height == 225
        assert settings.samples_per_pixel == 100
        assert settings.max_depth == 50
        assert settings.seed == 0

    def test_from_aspect_ratio_truncates_height(self):
        from raytrace.core.settings import RenderSettings

        settings = RenderSettings.from_aspect_ratio(400)
        assert settings.image_height == 225

        settings = RenderSettings.from_aspect_ratio(100, samples_per_pixel=4)
        assert settings.image_height == 56
        assert settings.samples_per_pixel == 4

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"image_width": 0},
            {"image_height": -1},
            {"samples_per_pixel": 0},
            {"max_depth": -1},
            {"seed": -5},
        ],
    )
    def test_invalid_settings(self, kwargs):
        from raytrace.core.settings import RenderSettings

        with pytest.raises(ValueError):
            RenderSettings(**kwargs)

    def test_invalid_aspect_ratio(self):
        from raytrace.core.settings import RenderSettings

        with pytest.raises(ValueError, match="aspect_ratio"):
            RenderSettings.from_aspect_ratio(400, 0.0)

    def test_too_narrow_for_aspect_ratio(self):
        """Test a width that truncates to zero height is rejected."""
        from raytrace.core.settings import RenderSettings

        with pytest.raises(ValueError, match="positive"):
            RenderSettings.from_aspect_ratio(1)


class TestRendererInit:
    """Test Renderer initialization."""

    def test_init_creates_render_target(self):
        from raytrace.core.renderer import Renderer

        renderer = Renderer(128, 96)

        assert renderer.width == 128
        assert renderer.height == 96
        assert renderer.max_depth == 50
        assert renderer.sample_count == 0

    def test_init_rejects_oversized_dimensions(self):
        from raytrace.core.renderer import Renderer

        with pytest.raises(ValueError, match="exceed maximum"):
            Renderer(4096, 100)

    def test_init_rejects_negative_depth(self):
        from raytrace.core.renderer import Renderer

        with pytest.raises(ValueError, match="max_depth"):
            Renderer(16, 16, max_depth=-1)

    def test_from_settings(self):
        from raytrace.core.renderer import Renderer
        from raytrace.core.settings import RenderSettings

        renderer = Renderer.from_settings(
            RenderSettings(image_width=40, image_height=20, max_depth=7)
        )
        assert (renderer.width, renderer.height, renderer.max_depth) == (40, 20, 7)

    def test_repr_shows_state(self):
        from raytrace.core.renderer import Renderer

        renderer = Renderer(32, 24, max_depth=10)
        text = repr(renderer)
        assert "width=32" in text
        assert "height=24" in text
        assert "max_depth=10" in text
        assert "samples=0" in text


class TestRendererAccumulation:
    """Test sample accumulation, reset and resize."""

    def test_render_accumulates_samples(self):
        from raytrace.core.renderer import Renderer

        _setup_simple_scene()
        renderer = Renderer(16, 16, max_depth=5)
        renderer.render(3)
        renderer.render(2)
        assert renderer.sample_count == 5

    @pytest.mark.parametrize("num_samples", [0, -3])
    def test_render_non_positive_samples_does_nothing(self, num_samples):
        from raytrace.core.renderer import Renderer

        _setup_simple_scene()
        renderer = Renderer(16, 16)
        renderer.render(num_samples)
        assert renderer.sample_count == 0

    def test_invalid_batch_size(self):
        from raytrace.core.renderer import Renderer

        renderer = Renderer(16, 16)
        with pytest.raises(ValueError, match="batch_size"):
            renderer.render(4, batch_size=0)

    def test_reset_clears_samples_and_color(self):
        from raytrace.core.renderer import Renderer

        _setup_simple_scene()
        renderer = Renderer(16, 16, max_depth=5)
        renderer.render(2)
        assert renderer.get_color_sum_numpy().sum() > 0.0

        renderer.reset()
        assert renderer.sample_count == 0
        assert renderer.get_color_sum_numpy().sum() == 0.0

    def test_resize_changes_dimensions_and_resets(self):
        from raytrace.core.renderer import Renderer

        _setup_simple_scene()
        renderer = Renderer(16, 16, max_depth=5)
        renderer.render(2)

        renderer.resize(32, 8)
        assert renderer.width == 32
        assert renderer.height == 8
        assert renderer.sample_count == 0
        assert renderer.get_color_sum_numpy().shape == (8, 32, 3)

    def test_resize_invalid_keeps_dimensions(self):
        from raytrace.core.renderer import Renderer

        renderer = Renderer(16, 16)
        with pytest.raises(ValueError):
            renderer.resize(0, 16)
        assert renderer.width == 16


class TestRendererProgress:
    """Test progress callbacks and the generator interface."""

    def test_callback_receives_progress(self):
        from raytrace.core.renderer import Renderer

        _setup_simple_scene()
        renderer = Renderer(16, 16, max_depth=3)

        calls = []
        renderer.render(10, batch_size=4, callback=lambda cur, tot: calls.append((cur, tot)))
        assert calls == [(4, 10), (8, 10), (10, 10)]

    def test_callback_with_existing_samples(self):
        from raytrace.core.renderer import Renderer

        _setup_simple_scene()
        renderer = Renderer(16, 16, max_depth=3)
        renderer.render(2)

        calls = []
        renderer.render(2, callback=lambda cur, tot: calls.append((cur, tot)))
        assert calls == [(3, 4), (4, 4)]

    def test_render_progressive_yields_progress(self):
        from raytrace.core.renderer import Renderer

        _setup_simple_scene()
        renderer = Renderer(16, 16, max_depth=3)

        progress = list(renderer.render_progressive(6, batch_size=3))
        assert progress == [(3, 6), (6, 6)]
        assert renderer.sample_count == 6

    def test_render_progressive_interruptible(self):
        from raytrace.core.renderer import Renderer

        _setup_simple_scene()
        renderer = Renderer(16, 16, max_depth=3)

        for current, _ in renderer.render_progressive(10, batch_size=2):
            if current >= 4:
                break
        assert renderer.sample_count == 4

    def test_render_progressive_with_zero_samples(self):
        from raytrace.core.renderer import Renderer

        renderer = Renderer(16, 16)
        assert list(renderer.render_progressive(0)) == []


class TestRendererOutput:
    """Test image retrieval and file output."""

    def test_get_image_numpy(self):
        from raytrace.core.renderer import Renderer

        _setup_simple_scene(24, 12)
        renderer = Renderer(24, 12, max_depth=5)
        renderer.render(2)

        image = renderer.get_image_numpy()
        assert image.shape == (12, 24, 3)
        assert image.dtype == np.float32
        assert np.all(np.isfinite(image))
        assert np.all(image >= 0.0)

        corrected = renderer.get_image_numpy(gamma=2.0)
        np.testing.assert_allclose(corrected, np.sqrt(image), rtol=1e-6)

    def test_get_image_uint8_requires_samples(self):
        from raytrace.core.renderer import Renderer

        renderer = Renderer(8, 8)
        with pytest.raises(RuntimeError, match="No samples"):
            renderer.get_image_uint8()

    def test_get_image_uint8_matches_quantize(self):
        from raytrace.core.renderer import Renderer
        from raytrace.output.quantize import quantize

        _setup_simple_scene()
        renderer = Renderer(16, 16, max_depth=5)
        renderer.render(3)

        pixels = renderer.get_image_uint8()
        assert pixels.dtype == np.uint8
        np.testing.assert_array_equal(pixels, quantize(renderer.get_color_sum_numpy(), 3))

    def test_get_image_returns_taichi_field(self):
        from raytrace.core.renderer import Renderer

        renderer = Renderer(8, 8)
        field = renderer.get_image()
        assert field.shape[0] >= 8
        assert field.shape[1] >= 8

    def test_write_ppm(self):
        from raytrace.core.renderer import Renderer

        _setup_simple_scene(6, 4)
        renderer = Renderer(6, 4, max_depth=5)
        renderer.render(1)

        sink = io.BytesIO()
        renderer.write_ppm(sink)
        lines = sink.getvalue().decode("ascii").splitlines()

        assert lines[:3] == ["P3", "6 4", "255"]
        assert len(lines) == 3 + 6 * 4
        for line in lines[3:]:
            values = [int(v) for v in line.split()]
            assert len(values) == 3
            assert all(0 <= v <= 255 for v in values)

    def test_save_ppm_and_png(self):
        from raytrace.core.renderer import Renderer

        _setup_simple_scene(32, 16)
        renderer = Renderer(32, 16, max_depth=5)
        renderer.render(1)
        expected = renderer.get_image_uint8()

        for suffix, save in [(".ppm", renderer.save_ppm), (".png", renderer.save_png)]:
            with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as f:
                filepath = f.name

            try:
                save(filepath)
                img = PILImage.open(filepath)
                assert img.size == (32, 16)
                np.testing.assert_array_equal(np.asarray(img.convert("RGB")), expected)
            finally:
                if os.path.exists(filepath):
                    os.remove(filepath)

    def test_render_to_ppm(self):
        from raytrace.core.renderer import render_to_ppm
        from raytrace.core.settings import RenderSettings

        _setup_simple_scene(8, 8)
        settings = RenderSettings(image_width=8, image_height=8, samples_per_pixel=3, max_depth=4)

        calls = []
        sink = io.BytesIO()
        renderer = render_to_ppm(settings, sink, callback=lambda c, t: calls.append(c))

        assert renderer.sample_count == 3
        assert calls == [1, 2, 3]
        assert sink.getvalue().startswith(b"P3\n8 8\n255\n")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
