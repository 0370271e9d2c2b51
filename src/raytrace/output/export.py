"""Image export utilities for rendered images.

This module writes quantized images to files or byte streams.

Supported formats:
    - PPM (plain-text P3): header ``P3``, ``<width> <height>``, ``255``, then
      one ``r g b`` line per pixel, rows top to bottom
    - PNG (8-bit via Pillow)

Example:
    >>> from raytrace.output.export import save_ppm
    >>> from raytrace.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(400, 225)
    >>> renderer.render(100)
    >>> save_ppm(renderer, "output.ppm")
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from raytrace.core.renderer import Renderer

# Largest channel value written in the PPM header
PPM_MAX_VALUE = 255


def _check_pixels(pixels: npt.NDArray[np.uint8]) -> None:
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {pixels.shape}")


def format_ppm(pixels: npt.NDArray[np.uint8]) -> str:
    """Format an 8-bit image as plain-text PPM (P3).

    Args:
        pixels: Image array of shape (H, W, 3), row 0 at the top.

    Returns:
        The PPM document, ending with a newline.

    Raises:
        ValueError: If the array is not an (H, W, 3) image.
    """
    _check_pixels(pixels)
    height, width, _ = pixels.shape

    lines = ["P3", f"{width} {height}", str(PPM_MAX_VALUE)]
    lines.extend(f"{r} {g} {b}" for r, g, b in pixels.reshape(-1, 3).tolist())
    return "\n".join(lines) + "\n"


def write_ppm_from_array(pixels: npt.NDArray[np.uint8], sink: BinaryIO) -> None:
    """Write an 8-bit image to a binary stream as plain-text PPM."""
    sink.write(format_ppm(pixels).encode("ascii"))


def write_ppm(renderer: Renderer, sink: BinaryIO) -> None:
    """Write the renderer's current image to a binary stream as PPM.

    Args:
        renderer: The Renderer whose accumulated samples are written.
        sink: A writable binary stream (file opened with "wb", BytesIO, ...).
    """
    write_ppm_from_array(renderer.get_image_uint8(), sink)


def save_ppm(renderer: Renderer, filepath: str | Path) -> None:
    """Save the renderer's current image as a PPM file."""
    with open(filepath, "wb") as sink:
        write_ppm(renderer, sink)


def save_png_from_array(pixels: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an 8-bit (H, W, 3) image as a PNG file."""
    _check_pixels(pixels)
    pil_image = PILImage.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8), mode="RGB")
    pil_image.save(filepath)


def save_png(renderer: Renderer, filepath: str | Path) -> None:
    """Save the renderer's current image as a PNG file.

    Uses the same gamma-2 quantization as the PPM output.
    """
    save_png_from_array(renderer.get_image_uint8(), filepath)


def gradient_test_pattern(width: int, height: int) -> npt.NDArray[np.float32]:
    """Build the calibration gradient image.

    Red grows from 0 at the top row toward 1 at the bottom, green grows from
    0 at the left column toward 1 at the right, blue is 0. Useful for checking
    an output pipeline without rendering anything.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        Linear float image of shape (height, width, 3), one sample per pixel.

    Raises:
        ValueError: If width or height is not positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")

    rows = np.arange(height, dtype=np.float32) / np.float32(height)
    cols = np.arange(width, dtype=np.float32) / np.float32(width)

    image = np.zeros((height, width, 3), dtype=np.float32)
    image[:, :, 0] = rows[:, np.newaxis]
    image[:, :, 1] = cols[np.newaxis, :]
    return image


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
