"""
Double-density relaxation of the viscoelastic solver (vectorized).

Every particle's displacement is computed from the committed positions
and velocities only, and written to the predicted position arrays, so
particles can be processed in any order.
"""

import numpy as np
from ..core.particles import ParticleArrays
from ..core.kernels import ProximityKernel


def relax_positions(particles: ParticleArrays, kernel: ProximityKernel, mass: float,
                    dt: float, surface_tension: float, linear_viscosity: float,
                    quadratic_viscosity: float):
    """Compute predicted positions from pressure, surface tension and viscosity.

    Per neighbor j of i, with a = 1 - r/h and dx = pⱼ - pᵢ:
        D = dt² ((nPᵢ + nPⱼ) a³ k_near + (Pᵢ + Pⱼ) a² k) / 2
        predictedᵢ -= D dx / (r m)
        predictedᵢ += σ a² k dx
    and, when u = (vᵢ - vⱼ)·dx is positive, with u /= r:
        I = dt a (β u + γ u²) / 2
        predictedᵢ -= I dx dt

    Args:
        particles: Particle arrays with neighbor lists and pressures
        kernel: Proximity kernel (supplies k and k_near)
        mass: Particle mass
        dt: Substep length
        surface_tension: σ
        linear_viscosity: β
        quadratic_viscosity: γ
    """
    n = particles.n_active
    k = particles.max_neighbors
    valid = np.arange(k)[np.newaxis, :] < particles.neighbor_count[:n, np.newaxis]
    j = np.where(valid, particles.neighbor_ids[:n], 0)
    r = np.where(valid, particles.neighbor_distances[:n], 1.0)

    x = particles.position_x[:n]
    y = particles.position_y[:n]
    dx = x[j] - x[:, np.newaxis]
    dy = y[j] - y[:, np.newaxis]
    a = 1.0 - r / kernel.kernel_radius

    near_p = particles.near_pressure[:n]
    p = particles.pressure[:n]
    d = dt * dt * ((near_p[:, np.newaxis] + near_p[j]) * a ** 3 * kernel.near_density_factor
                   + (p[:, np.newaxis] + p[j]) * a ** 2 * kernel.density_factor) / 2.0
    relax = -d / (r * mass)
    tension = surface_tension * a ** 2 * kernel.density_factor

    vx = particles.velocity_x[:n]
    vy = particles.velocity_y[:n]
    u = (vx[:, np.newaxis] - vx[j]) * dx + (vy[:, np.newaxis] - vy[j]) * dy
    approaching = valid & (u > 0.0)
    u = np.where(approaching, u / r, 0.0)
    impulse = 0.5 * dt * a * (linear_viscosity * u + quadratic_viscosity * u * u)
    damp = np.where(approaching, -impulse * dt, 0.0)

    scale = np.where(valid, relax + tension + damp, 0.0)
    particles.predicted_x[:n] = x + np.sum(scale * dx, axis=1)
    particles.predicted_y[:n] = y + np.sum(scale * dy, axis=1)
