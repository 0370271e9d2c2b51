"""Output module for turning accumulated samples into image files.

Components:
    quantize: Sample averaging, gamma-2 correction and 8-bit quantization
    export: Plain-text PPM (P3) and PNG writers

These modules only use NumPy and Pillow; they do not touch Taichi fields and
can be imported before ``ti.init``.
"""

from .export import (
    compute_rmse,
    format_ppm,
    gradient_test_pattern,
    save_png,
    save_png_from_array,
    save_ppm,
    write_ppm,
    write_ppm_from_array,
)
from .quantize import (
    DISPLAY_GAMMA,
    MAX_INTENSITY,
    apply_gamma,
    average_samples,
    quantize,
    quantize_color,
    to_uint8,
)

__all__ = [
    # Quantization
    "DISPLAY_GAMMA",
    "MAX_INTENSITY",
    "average_samples",
    "apply_gamma",
    "to_uint8",
    "quantize",
    "quantize_color",
    # Export
    "format_ppm",
    "write_ppm",
    "write_ppm_from_array",
    "save_ppm",
    "save_png",
    "save_png_from_array",
    "gradient_test_pattern",
    "compute_rmse",
]
