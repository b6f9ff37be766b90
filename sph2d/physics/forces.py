"""
Vectorized force pass of the standard solver.

Includes:
- Pressure forces (spiky gradient)
- Viscous forces (viscosity Laplacian)
- Gravity
"""

import numpy as np
from typing import Tuple
from ..core.particles import ParticleArrays
from ..core.kernels import SpikyKernel, ViscosityKernel


def compute_forces_all_pairs(particles: ParticleArrays, spiky: SpikyKernel,
                             viscosity_kernel: ViscosityKernel, mass: float,
                             viscosity: float, gravity: Tuple[float, float],
                             batch_size: int = 256):
    """O(n²) pressure, viscosity and gravity forces.

    For every ordered pair i != j with r < h, with dir = (pⱼ - pᵢ) / r
    (zero when r == 0):
        f_press += -dir · m (Pᵢ + Pⱼ) / (2 ρⱼ) · ∇W_spiky(h - r)
        f_visc  += μ m (vⱼ - vᵢ) / ρⱼ · ∇²W_visc(h - r)
    and f_grav = g m / ρᵢ.

    Args:
        particles: Particle arrays with density and pressure computed
        spiky: Spiky kernel
        viscosity_kernel: Viscosity kernel
        mass: Particle mass
        viscosity: Viscosity constant μ
        gravity: Gravity vector (gx, gy)
        batch_size: Rows per batch
    """
    n = particles.n_active
    h = spiky.kernel_radius
    x = particles.position_x[:n]
    y = particles.position_y[:n]
    vx = particles.velocity_x[:n]
    vy = particles.velocity_y[:n]
    rho = particles.density[:n]
    p = particles.pressure[:n]

    for start in range(0, n, batch_size):
        end = min(start + batch_size, n)
        rows = np.arange(start, end)

        dx = x[np.newaxis, :] - x[rows, np.newaxis]
        dy = y[np.newaxis, :] - y[rows, np.newaxis]
        r = np.sqrt(dx * dx + dy * dy)
        inside = r < h
        inside[np.arange(end - start), rows] = False

        safe_r = np.where(r > 0.0, r, 1.0)
        dir_x = np.where(r > 0.0, dx / safe_r, 0.0)
        dir_y = np.where(r > 0.0, dy / safe_r, 0.0)
        r_diff = np.where(inside, h - r, 0.0)

        press = mass * (p[rows, np.newaxis] + p[np.newaxis, :]) / (2.0 * rho[np.newaxis, :])
        press = np.where(inside, press * spiky.gradient_at(r_diff), 0.0)
        visc = np.where(inside, viscosity * mass / rho[np.newaxis, :]
                        * viscosity_kernel.laplacian_at(r_diff), 0.0)

        f_press_x = np.sum(-dir_x * press, axis=1)
        f_press_y = np.sum(-dir_y * press, axis=1)
        f_visc_x = np.sum(visc * (vx[np.newaxis, :] - vx[rows, np.newaxis]), axis=1)
        f_visc_y = np.sum(visc * (vy[np.newaxis, :] - vy[rows, np.newaxis]), axis=1)

        particles.force_x[start:end] = f_press_x + f_visc_x + gravity[0] * mass / rho[rows]
        particles.force_y[start:end] = f_press_y + f_visc_y + gravity[1] * mass / rho[rows]
