"""
Initial particle layouts for the two solvers.

Both patterns are generated in the order particles are added, so
particle indices are reproducible for a given seed.
"""

import logging
import math
import numpy as np
from typing import Optional

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


def _check_count(n_particles: int):
    if int(n_particles) != n_particles or n_particles <= 0:
        raise ConfigurationError(f"Number of particles must be a positive integer, got {n_particles!r}")


def _handle_overflow(positions: np.ndarray, requested: int, pattern: str,
                     truncate: bool) -> np.ndarray:
    """Raise, or warn and keep what fits, when a pattern holds fewer particles than requested."""
    if len(positions) >= requested:
        return positions
    message = (f"{pattern} pattern only fits {len(positions)} of {requested} "
               f"particles in the view")
    if not truncate:
        raise ConfigurationError(message + " (pass truncate_seeding=True to keep the ones that fit)")
    logger.warning("%s; truncating", message)
    return positions


def generate_jittered_column(n_particles: int, view_width: float, view_height: float,
                             kernel_radius: float, rng: Optional[np.random.Generator] = None,
                             truncate: bool = False) -> np.ndarray:
    """Rows of particles in the left-middle of the view, one kernel radius apart.

    y runs from h while y < H - 2h, x from W/4 while x <= W/2, both in
    steps of h. Each particle gets one uniform jitter in [0, 1) added to
    both coordinates.

    Args:
        n_particles: Number of particles requested
        view_width: W
        view_height: H
        kernel_radius: h (grid step)
        rng: Random generator for the jitter (default: seed 0)
        truncate: Keep the particles that fit instead of raising on overflow

    Returns:
        (n, 2) array of positions

    Raises:
        ConfigurationError: Non-positive count, or overflow without ``truncate``
    """
    _check_count(n_particles)
    if rng is None:
        rng = np.random.default_rng(0)

    positions = []
    y = kernel_radius
    while y < view_height - 2.0 * kernel_radius and len(positions) < n_particles:
        x = view_width / 4.0
        while x <= view_width / 2.0 and len(positions) < n_particles:
            jitter = rng.random()
            positions.append((x + jitter, y + jitter))
            x += kernel_radius
        y += kernel_radius

    positions = np.array(positions, dtype=np.float64).reshape(-1, 2)
    return _handle_overflow(positions, n_particles, "Jittered column", truncate)


def generate_square_block(n_particles: int, view_width: float, view_height: float,
                          particle_radius: float, truncate: bool = False) -> np.ndarray:
    """A block of ceil(sqrt(n)) columns starting at (W/4, H/2), rows going down.

    Neighboring particles are 3 particle radii apart. Particles that would
    land outside the view count as overflow.

    Raises:
        ConfigurationError: Non-positive count, or overflow without ``truncate``
    """
    _check_count(n_particles)
    side = math.ceil(math.sqrt(n_particles))
    step = 3.0 * particle_radius
    x0 = 0.25 * view_width
    y0 = 0.5 * view_height

    index = np.arange(n_particles)
    x = x0 + (index % side) * step
    y = y0 - (index // side) * step
    positions = np.column_stack((x, y))

    inside = (x >= 0.0) & (x <= view_width) & (y >= 0.0) & (y <= view_height)
    if not inside.all():
        # Rows are filled in order, so the first outside particle ends the block
        positions = positions[:int(np.argmin(inside))]
    return _handle_overflow(positions, n_particles, "Square block", truncate)
