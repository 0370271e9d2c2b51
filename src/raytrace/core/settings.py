"""Render configuration.

RenderSettings holds the image size and sampling parameters of a render. It
has no Taichi state, so it can be built (for example from command-line
arguments) before the runtime is initialized.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Default bounce budget per camera ray
DEFAULT_MAX_DEPTH = 50

# Default output aspect ratio (width / height)
DEFAULT_ASPECT_RATIO = 16.0 / 9.0


@dataclass
class RenderSettings:
    """Image size and sampling configuration for a render.

    Attributes:
        image_width: Image width in pixels.
        image_height: Image height in pixels.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Bounce budget per camera ray.
        seed: Seed for the random generator (passed to init_runtime).

    Raises:
        ValueError: If a dimension or samples_per_pixel is not positive, or
            max_depth or seed is negative.
    """

    image_width: int = 400
    image_height: int = 225
    samples_per_pixel: int = 100
    max_depth: int = DEFAULT_MAX_DEPTH
    seed: int = 0

    def __post_init__(self) -> None:
        if self.image_width <= 0 or self.image_height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got "
                f"{self.image_width}x{self.image_height}"
            )
        if self.samples_per_pixel <= 0:
            raise ValueError(
                f"samples_per_pixel must be positive, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.seed < 0:
            raise ValueError(f"seed must be non-negative, got {self.seed}")

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.image_width / self.image_height

    @classmethod
    def from_aspect_ratio(
        cls,
        image_width: int,
        aspect_ratio: float = DEFAULT_ASPECT_RATIO,
        **kwargs: Any,
    ) -> RenderSettings:
        """Create settings whose height follows from width and aspect ratio.

        The height is truncated toward zero, so 400 px at 16:9 gives 225 px.

        Raises:
            ValueError: If aspect_ratio is not positive or the resulting
                dimensions are invalid.
        """
        if aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {aspect_ratio}")
        return cls(
            image_width=image_width,
            image_height=int(image_width / aspect_ratio),
            **kwargs,
        )
