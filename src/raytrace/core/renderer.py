"""Renderer for sample accumulation and image output.

Renderer owns the image size and bounce budget of a render and drives the
integrator: it adds sample passes to the render target, reports progress
after each batch of passes, and turns the accumulated sums into 8-bit
pixels for PPM or PNG output.

It renders whatever scene and camera are currently set up.

Example:
    >>> from raytrace.core.runtime import init_runtime
    >>> init_runtime(seed=7)
    >>> from raytrace.core.renderer import Renderer
    >>> from raytrace.scene.default_scene import create_default_scene
    >>> from raytrace.camera.pinhole import setup_camera
    >>>
    >>> scene, camera, settings = create_default_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = Renderer.from_settings(settings)
    >>> renderer.render(settings.samples_per_pixel)
    >>> renderer.save_ppm("spheres.ppm")
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any, BinaryIO

import numpy as np
import numpy.typing as npt

from raytrace.core.integrator import (
    clear_render_target,
    get_color_sum_numpy,
    get_image,
    get_normalized_image_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)
from raytrace.core.settings import DEFAULT_MAX_DEPTH, RenderSettings
from raytrace.output.export import save_png, save_ppm, write_ppm
from raytrace.output.quantize import apply_gamma, quantize

# Called as callback(samples_done, samples_target) after each batch
ProgressCallback = Callable[[int, int], None]


class Renderer:
    """Accumulates camera samples for one image.

    The pixel buffers are module-level Taichi fields shared by every
    Renderer, so constructing or resizing a Renderer discards whatever the
    previous one had accumulated.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Bounce budget per camera ray.
    """

    def __init__(self, width: int, height: int, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        """Set up a zeroed width x height render target.

        Raises:
            ValueError: If a dimension is not in [1, 2048] or max_depth is
                negative.
        """
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")
        self._width = width
        self._height = height
        self._max_depth = max_depth
        setup_render_target(width, height)

    @classmethod
    def from_settings(cls, settings: RenderSettings) -> Renderer:
        """Create a renderer sized and configured from RenderSettings."""
        return cls(settings.image_width, settings.image_height, settings.max_depth)

    @property
    def width(self) -> int:
        """Image width in pixels."""
        return self._width

    @property
    def height(self) -> int:
        """Image height in pixels."""
        return self._height

    @property
    def max_depth(self) -> int:
        """Bounce budget per camera ray."""
        return self._max_depth

    @property
    def sample_count(self) -> int:
        """Samples accumulated per pixel so far."""
        return get_total_samples()

    def reset(self) -> None:
        """Discard accumulated samples, keeping the image size."""
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Switch to a new image size with an empty accumulator.

        On a ValueError the renderer keeps its previous size.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Add num_samples samples per pixel, in batches of batch_size.

        Samples add to what is already accumulated. After each batch the
        callback, if given, receives (samples_done, samples_target), both
        counted from the last reset. A non-positive num_samples does nothing.

        Raises:
            ValueError: If batch_size is not positive.

        Example:
            >>> renderer.render(100, batch_size=10, callback=lambda d, t: print(d, t))
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Generator form of render(): yields (samples_done, samples_target).

        Stopping iteration early leaves the finished batches in place.

        Raises:
            ValueError: If batch_size is not positive.
        """
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        if num_samples <= 0:
            return

        target = self.sample_count + num_samples
        for start in range(0, num_samples, batch_size):
            render_image(min(batch_size, num_samples - start), self._max_depth)
            yield self.sample_count, target

    def get_image(self) -> Any:
        """The full-size Taichi color sum field; only width x height is live."""
        return get_image()

    def get_color_sum_numpy(self) -> npt.NDArray[np.float32]:
        """Per-pixel color sums, (height, width, 3), top row first."""
        return get_color_sum_numpy()

    def get_image_numpy(self, gamma: float = 1.0) -> npt.NDArray[np.float32]:
        """Mean color per pixel as float32 (height, width, 3).

        Linear by default; pass gamma=2.0 for the square-root display
        encoding used by the 8-bit output.
        """
        image = get_normalized_image_numpy()
        return image if gamma == 1.0 else apply_gamma(image, gamma)

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """The image as gamma-2 encoded uint8 pixels, (height, width, 3).

        Raises:
            RuntimeError: If no samples have been rendered yet.
        """
        samples = self.sample_count
        if samples == 0:
            raise RuntimeError("No samples rendered yet. Call render() first.")
        return quantize(get_color_sum_numpy(), samples)

    def write_ppm(self, sink: BinaryIO) -> None:
        """Write the image as plain-text PPM to a binary stream."""
        write_ppm(self, sink)

    def save_ppm(self, filepath: str | Path) -> None:
        """Save the image as a PPM file."""
        save_ppm(self, filepath)

    def save_png(self, filepath: str | Path) -> None:
        """Save the image as a PNG file."""
        save_png(self, filepath)

    def __repr__(self) -> str:
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"max_depth={self.max_depth}, samples={self.sample_count})"
        )


def render_to_ppm(
    settings: RenderSettings,
    sink: BinaryIO,
    callback: ProgressCallback | None = None,
) -> Renderer:
    """Render the current scene and write it as PPM.

    The camera and scene must already be set up; the image is sized from
    settings and rendered with settings.samples_per_pixel samples.

    Args:
        settings: Image size, sample count and bounce budget.
        sink: Writable binary stream that receives the PPM document.
        callback: Optional progress callback, called once per sample pass.

    Returns:
        The Renderer holding the accumulated samples.
    """
    renderer = Renderer.from_settings(settings)
    renderer.render(settings.samples_per_pixel, callback=callback)
    renderer.write_ppm(sink)
    return renderer
