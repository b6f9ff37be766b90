"""
Numba-compiled density and pressure passes.

Each prange iteration writes only the slots of its own particle.
"""

import numpy as np
import numba as nb
from ..core.particles import ParticleArrays
from ..core.kernels import Poly6Kernel, ProximityKernel


@nb.njit(parallel=True, cache=True)
def compute_density_pressure_all_pairs_numba(position_x: np.ndarray, position_y: np.ndarray,
                                             density: np.ndarray, pressure: np.ndarray,
                                             n_active: int, kernel_radius: float,
                                             poly6_coefficient: float, mass: float,
                                             gas_constant: float, rest_density: float):
    h2 = kernel_radius * kernel_radius
    for i in nb.prange(n_active):
        xi = position_x[i]
        yi = position_y[i]
        rho = 0.0
        for j in range(n_active):
            dx = position_x[j] - xi
            dy = position_y[j] - yi
            r2 = dx * dx + dy * dy
            if r2 < h2:
                diff = h2 - r2
                rho += poly6_coefficient * diff * diff * diff
        density[i] = mass * rho
        pressure[i] = gas_constant * (density[i] - rest_density)


@nb.njit(parallel=True, cache=True)
def compute_density_pressure_neighbors_numba(neighbor_distances: np.ndarray,
                                             neighbor_count: np.ndarray,
                                             density: np.ndarray, near_density: np.ndarray,
                                             pressure: np.ndarray, near_pressure: np.ndarray,
                                             n_active: int, kernel_radius: float,
                                             density_factor: float, near_density_factor: float,
                                             mass: float, stiffness: float,
                                             near_stiffness: float, elastic_rest_density: float):
    for i in nb.prange(n_active):
        rho = 0.0
        rho_near = 0.0
        for k in range(neighbor_count[i]):
            a = 1.0 - neighbor_distances[i, k] / kernel_radius
            a3 = a * a * a
            rho += a3 * density_factor
            rho_near += a3 * a * near_density_factor
        density[i] = mass * rho
        near_density[i] = mass * rho_near
        pressure[i] = stiffness * (density[i] - mass * elastic_rest_density)
        near_pressure[i] = near_stiffness * near_density[i]


def compute_density_pressure_all_pairs_numba_wrapper(particles: ParticleArrays, kernel: Poly6Kernel,
                                                     mass: float, gas_constant: float,
                                                     rest_density: float):
    """Wrapper matching the NumPy pass signature."""
    compute_density_pressure_all_pairs_numba(
        particles.position_x, particles.position_y,
        particles.density, particles.pressure,
        particles.n_active, kernel.kernel_radius, kernel.coefficient,
        mass, gas_constant, rest_density
    )


def compute_density_pressure_neighbors_numba_wrapper(particles: ParticleArrays,
                                                     kernel: ProximityKernel, mass: float,
                                                     stiffness: float, near_stiffness: float,
                                                     elastic_rest_density: float):
    compute_density_pressure_neighbors_numba(
        particles.neighbor_distances, particles.neighbor_count,
        particles.density, particles.near_density,
        particles.pressure, particles.near_pressure,
        particles.n_active, kernel.kernel_radius,
        kernel.density_factor, kernel.near_density_factor,
        mass, stiffness, near_stiffness, elastic_rest_density
    )
