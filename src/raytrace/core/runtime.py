"""Taichi runtime initialization.

Every module that declares Taichi fields must be imported after the runtime is
initialized, so scripts call init_runtime() first and import the renderer
afterwards.

The random seed is fixed per run: Taichi seeds each worker thread's generator
from ``random_seed``. With ``deterministic=True`` the CPU backend runs on a
single worker thread, which makes the whole sample sequence (and therefore the
image) reproducible for a given seed.
"""

from typing import Literal

import taichi as ti

Backend = Literal["cpu", "gpu"]


def init_runtime(
    arch: Backend = "cpu",
    seed: int = 0,
    deterministic: bool = False,
) -> str:
    """Initialize Taichi for rendering.

    Args:
        arch: Requested backend. With "gpu", Taichi falls back to the CPU
            backend when no GPU backend can be initialized.
        seed: Seed for Taichi's random number generators.
        deterministic: Run on one CPU thread so a seed reproduces the same
            image. Forces the CPU backend.

    Returns:
        The backend actually in use ("cpu" or "gpu").

    Raises:
        ValueError: If arch is not a known backend or seed is negative.
    """
    if arch not in ("cpu", "gpu"):
        raise ValueError(f"Unknown backend: {arch!r} (expected 'cpu' or 'gpu')")
    if seed < 0:
        raise ValueError(f"Random seed must be non-negative, got {seed}")

    if deterministic:
        ti.init(arch=ti.cpu, random_seed=seed, cpu_max_num_threads=1)
        return "cpu"

    if arch == "cpu":
        ti.init(arch=ti.cpu, random_seed=seed)
        return "cpu"

    # Taichi falls back to the host CPU on its own when no GPU is usable
    ti.init(arch=ti.gpu, random_seed=seed)
    if ti.lang.impl.current_cfg().arch == ti.cpu:
        return "cpu"
    return "gpu"
