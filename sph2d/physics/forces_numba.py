"""
Numba-compiled force pass of the standard solver.
"""

import math
import numpy as np
import numba as nb
from typing import Tuple
from ..core.particles import ParticleArrays
from ..core.kernels import SpikyKernel, ViscosityKernel


@nb.njit(parallel=True, cache=True)
def compute_forces_all_pairs_numba(position_x: np.ndarray, position_y: np.ndarray,
                                   velocity_x: np.ndarray, velocity_y: np.ndarray,
                                   density: np.ndarray, pressure: np.ndarray,
                                   force_x: np.ndarray, force_y: np.ndarray,
                                   n_active: int, kernel_radius: float,
                                   spiky_coefficient: float, laplacian_coefficient: float,
                                   mass: float, viscosity: float,
                                   gravity_x: float, gravity_y: float):
    for i in nb.prange(n_active):
        xi = position_x[i]
        yi = position_y[i]
        fpx = 0.0
        fpy = 0.0
        fvx = 0.0
        fvy = 0.0

        for j in range(n_active):
            if i == j:
                continue
            dx = position_x[j] - xi
            dy = position_y[j] - yi
            r = math.sqrt(dx * dx + dy * dy)
            if r < kernel_radius:
                dir_x = 0.0
                dir_y = 0.0
                if r > 0.0:
                    dir_x = dx / r
                    dir_y = dy / r
                r_diff = kernel_radius - r

                press = mass * (pressure[i] + pressure[j]) / (2.0 * density[j])
                press *= spiky_coefficient * r_diff * r_diff * r_diff
                fpx += -dir_x * press
                fpy += -dir_y * press

                visc = viscosity * mass / density[j] * (laplacian_coefficient * r_diff)
                fvx += visc * (velocity_x[j] - velocity_x[i])
                fvy += visc * (velocity_y[j] - velocity_y[i])

        force_x[i] = fpx + fvx + gravity_x * mass / density[i]
        force_y[i] = fpy + fvy + gravity_y * mass / density[i]


def compute_forces_all_pairs_numba_wrapper(particles: ParticleArrays, spiky: SpikyKernel,
                                           viscosity_kernel: ViscosityKernel, mass: float,
                                           viscosity: float, gravity: Tuple[float, float]):
    """Wrapper matching the NumPy pass signature."""
    compute_forces_all_pairs_numba(
        particles.position_x, particles.position_y,
        particles.velocity_x, particles.velocity_y,
        particles.density, particles.pressure,
        particles.force_x, particles.force_y,
        particles.n_active, spiky.kernel_radius,
        spiky.gradient_coefficient, viscosity_kernel.laplacian_coefficient,
        mass, viscosity, float(gravity[0]), float(gravity[1])
    )
