"""
Numba-compiled double-density relaxation.
"""

import numpy as np
import numba as nb
from ..core.particles import ParticleArrays
from ..core.kernels import ProximityKernel


@nb.njit(parallel=True, cache=True)
def relax_positions_numba(position_x: np.ndarray, position_y: np.ndarray,
                          velocity_x: np.ndarray, velocity_y: np.ndarray,
                          pressure: np.ndarray, near_pressure: np.ndarray,
                          neighbor_ids: np.ndarray, neighbor_distances: np.ndarray,
                          neighbor_count: np.ndarray,
                          predicted_x: np.ndarray, predicted_y: np.ndarray,
                          n_active: int, kernel_radius: float,
                          density_factor: float, near_density_factor: float,
                          mass: float, dt: float, surface_tension: float,
                          linear_viscosity: float, quadratic_viscosity: float):
    for i in nb.prange(n_active):
        xi = position_x[i]
        yi = position_y[i]
        px = xi
        py = yi

        for k in range(neighbor_count[i]):
            j = neighbor_ids[i, k]
            r = neighbor_distances[i, k]
            dx = position_x[j] - xi
            dy = position_y[j] - yi
            a = 1.0 - r / kernel_radius

            d = dt * dt * ((near_pressure[i] + near_pressure[j]) * a * a * a * near_density_factor
                           + (pressure[i] + pressure[j]) * a * a * density_factor) / 2.0
            px -= d * dx / (r * mass)
            py -= d * dy / (r * mass)

            st = surface_tension * a * a * density_factor
            px += st * dx
            py += st * dy

            u = (velocity_x[i] - velocity_x[j]) * dx + (velocity_y[i] - velocity_y[j]) * dy
            if u > 0.0:
                u /= r
                impulse = 0.5 * dt * a * (linear_viscosity * u + quadratic_viscosity * u * u)
                px -= impulse * dx * dt
                py -= impulse * dy * dt

        predicted_x[i] = px
        predicted_y[i] = py


def relax_positions_numba_wrapper(particles: ParticleArrays, kernel: ProximityKernel,
                                  mass: float, dt: float, surface_tension: float,
                                  linear_viscosity: float, quadratic_viscosity: float):
    """Wrapper matching the NumPy pass signature."""
    relax_positions_numba(
        particles.position_x, particles.position_y,
        particles.velocity_x, particles.velocity_y,
        particles.pressure, particles.near_pressure,
        particles.neighbor_ids, particles.neighbor_distances,
        particles.neighbor_count,
        particles.predicted_x, particles.predicted_y,
        particles.n_active, kernel.kernel_radius,
        kernel.density_factor, kernel.near_density_factor,
        mass, dt, surface_tension, linear_viscosity, quadratic_viscosity
    )
