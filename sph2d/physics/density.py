"""
Vectorized density and pressure passes.

Implements both:
- All-pairs summation for the standard solver: ρᵢ = Σⱼ m W(|rᵢ - rⱼ|, h),
  self term included, followed by the linear equation of state
- Neighbor-list double density for the viscoelastic solver
"""

import numpy as np
from ..core.particles import ParticleArrays
from ..core.kernels import Poly6Kernel, ProximityKernel


def compute_density_pressure_all_pairs(particles: ParticleArrays, kernel: Poly6Kernel,
                                       mass: float, gas_constant: float,
                                       rest_density: float, batch_size: int = 256):
    """O(n²) density and pressure over every ordered pair with r² < h².

    Rows are processed in batches so the pair matrix stays small.

    Args:
        particles: Particle arrays
        kernel: Poly6 kernel
        mass: Particle mass
        gas_constant: Equation-of-state stiffness
        rest_density: Density at zero pressure
        batch_size: Rows per batch
    """
    n = particles.n_active
    x = particles.position_x[:n]
    y = particles.position_y[:n]
    h2 = kernel.kernel_radius ** 2

    for start in range(0, n, batch_size):
        end = min(start + batch_size, n)
        dx = x[np.newaxis, :] - x[start:end, np.newaxis]
        dy = y[np.newaxis, :] - y[start:end, np.newaxis]
        r2 = dx * dx + dy * dy
        inside = r2 < h2
        w = np.where(inside, kernel(np.where(inside, h2 - r2, 0.0)), 0.0)
        particles.density[start:end] = mass * np.sum(w, axis=1)

    # Pressure may go negative below rest density
    particles.pressure[:n] = gas_constant * (particles.density[:n] - rest_density)


def compute_density_pressure_neighbors(particles: ParticleArrays, kernel: ProximityKernel,
                                       mass: float, stiffness: float, near_stiffness: float,
                                       elastic_rest_density: float):
    """Double density from the current neighbor lists (no self term).

    With a = 1 - r/h per neighbor:
        density      = Σ m a³ · density_factor
        near_density = Σ m a⁴ · near_density_factor
        pressure      = stiffness · (density - m · elastic_rest_density)
        near_pressure = near_stiffness · near_density
    """
    n = particles.n_active
    k = particles.max_neighbors
    valid = np.arange(k)[np.newaxis, :] < particles.neighbor_count[:n, np.newaxis]
    r = particles.neighbor_distances[:n]
    a = np.where(valid, 1.0 - r / kernel.kernel_radius, 0.0)

    particles.density[:n] = mass * np.sum(kernel.density(a), axis=1)
    particles.near_density[:n] = mass * np.sum(kernel.near_density(a), axis=1)
    particles.pressure[:n] = stiffness * (particles.density[:n] - mass * elastic_rest_density)
    particles.near_pressure[:n] = near_stiffness * particles.near_density[:n]
