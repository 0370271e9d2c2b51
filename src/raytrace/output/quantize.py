"""Conversion of accumulated sample colors to display values.

The renderer keeps, per pixel, the sum of its sample colors. Turning that sum
into an 8-bit value takes four steps:

    1. divide by the number of samples (the Monte Carlo mean)
    2. gamma-correct with gamma 2 (square root)
    3. clamp to [0, 0.999]
    4. multiply by 256 and truncate

Clamping to 0.999 rather than 1.0 keeps the result of step 4 at or below 255.

Example:
    >>> import numpy as np
    >>> from raytrace.output.quantize import quantize
    >>> sums = np.full((2, 2, 3), 4.0, dtype=np.float32)
    >>> quantize(sums, samples_per_pixel=4)[0, 0]
    array([255, 255, 255], dtype=uint8)
"""

from __future__ import annotations

import math

import numpy as np
import numpy.typing as npt

# Gamma used for display encoding (square-root mapping)
DISPLAY_GAMMA = 2.0

# Channel values are clamped to [0, MAX_INTENSITY] before scaling to 8 bits
MAX_INTENSITY = 0.999


def _check_samples(samples_per_pixel: int) -> None:
    if samples_per_pixel <= 0:
        raise ValueError(f"samples_per_pixel must be positive, got {samples_per_pixel}")


def average_samples(
    color_sum: npt.NDArray[np.floating],
    samples_per_pixel: int,
) -> npt.NDArray[np.float32]:
    """Divide accumulated color sums by the sample count.

    Args:
        color_sum: Per-pixel sums of sample colors, shape (H, W, 3).
        samples_per_pixel: Number of samples summed into each pixel.

    Returns:
        The mean color per pixel.

    Raises:
        ValueError: If samples_per_pixel is not positive.
    """
    _check_samples(samples_per_pixel)
    scale = 1.0 / samples_per_pixel
    return (np.asarray(color_sum, dtype=np.float32) * np.float32(scale)).astype(np.float32)


def apply_gamma(
    image: npt.NDArray[np.floating],
    gamma: float = DISPLAY_GAMMA,
) -> npt.NDArray[np.float32]:
    """Apply gamma correction: c^(1/gamma).

    Negative inputs are treated as zero.

    Args:
        image: Linear image array.
        gamma: Gamma value (default 2.0, i.e. a square root).

    Returns:
        Gamma-corrected image.

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"Gamma must be positive, got {gamma}")

    image = np.maximum(np.asarray(image, dtype=np.float32), 0.0)
    if gamma == 2.0:
        return np.sqrt(image).astype(np.float32)
    return np.power(image, 1.0 / gamma).astype(np.float32)


def to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Clamp display values to [0, 0.999] and scale to integers in [0, 255]."""
    clamped = np.clip(np.asarray(image, dtype=np.float64), 0.0, MAX_INTENSITY)
    return np.floor(clamped * 256.0).astype(np.uint8)


def quantize(
    color_sum: npt.NDArray[np.floating],
    samples_per_pixel: int,
) -> npt.NDArray[np.uint8]:
    """Convert per-pixel color sums to 8-bit display values.

    Args:
        color_sum: Per-pixel sums of sample colors, shape (H, W, 3).
        samples_per_pixel: Number of samples summed into each pixel.

    Returns:
        uint8 array of the same shape.

    Raises:
        ValueError: If samples_per_pixel is not positive.
    """
    mean = average_samples(color_sum, samples_per_pixel)
    return to_uint8(apply_gamma(mean))


def quantize_color(
    color_sum: tuple[float, float, float],
    samples_per_pixel: int,
) -> tuple[int, int, int]:
    """Scalar version of quantize() for a single pixel."""
    _check_samples(samples_per_pixel)
    scale = 1.0 / samples_per_pixel

    def channel(value: float) -> int:
        corrected = math.sqrt(max(value * scale, 0.0))
        return int(256.0 * min(max(corrected, 0.0), MAX_INTENSITY))

    return (channel(color_sum[0]), channel(color_sum[1]), channel(color_sum[2]))
