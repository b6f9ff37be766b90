"""
Time integration and wall handling.

Includes:
- Symplectic Euler for the force-based solver
- Predict / correct steps of the position-based viscoelastic solver
- Penalty boundary against four half-planes
"""

import numpy as np
from dataclasses import dataclass
from typing import Tuple

from .particles import ParticleArrays


@dataclass(frozen=True)
class DomainBoundary:
    """Four inward-facing half-planes enclosing [0, width] x [0, height].

    Each plane is (normal_x, normal_y, offset); a point p is at signed
    distance n·p - offset from it, positive on the inside.
    """
    width: float
    height: float

    @property
    def planes(self) -> Tuple[Tuple[float, float, float], ...]:
        return (
            (1.0, 0.0, 0.0),
            (0.0, 1.0, 0.0),
            (-1.0, 0.0, -self.width),
            (0.0, -1.0, -self.height),
        )

    def contains(self, positions: np.ndarray, margin: float = 0.0) -> np.ndarray:
        """Boolean mask of (n, 2) positions inside the domain, grown by ``margin``."""
        x, y = positions[:, 0], positions[:, 1]
        return ((x >= -margin) & (x <= self.width + margin) &
                (y >= -margin) & (y <= self.height + margin))


def integrate_symplectic_euler(particles: ParticleArrays, dt: float):
    """v += (F / ρ) dt, then x += v dt.

    Force is divided by density, not mass: the force pass yields a force
    density.
    """
    n = particles.n_active
    density = particles.density[:n]
    particles.velocity_x[:n] += particles.force_x[:n] / density * dt
    particles.velocity_y[:n] += particles.force_y[:n] / density * dt

    particles.position_x[:n] += particles.velocity_x[:n] * dt
    particles.position_y[:n] += particles.velocity_y[:n] * dt


def apply_external_forces(particles: ParticleArrays, gravity: Tuple[float, float], dt: float):
    n = particles.n_active
    particles.velocity_x[:n] += gravity[0] * dt
    particles.velocity_y[:n] += gravity[1] * dt


def integrate_predict(particles: ParticleArrays, dt: float):
    """Remember the committed position, then advect by the current velocity."""
    n = particles.n_active
    particles.previous_x[:n] = particles.position_x[:n]
    particles.previous_y[:n] = particles.position_y[:n]
    particles.position_x[:n] += particles.velocity_x[:n] * dt
    particles.position_y[:n] += particles.velocity_y[:n] * dt


def integrate_correct(particles: ParticleArrays, dt: float):
    """Commit the relaxed positions and derive velocity from the displacement."""
    n = particles.n_active
    particles.position_x[:n] = particles.predicted_x[:n]
    particles.position_y[:n] = particles.predicted_y[:n]
    particles.velocity_x[:n] = (particles.position_x[:n] - particles.previous_x[:n]) / dt
    particles.velocity_y[:n] = (particles.position_y[:n] - particles.previous_y[:n]) / dt


def enforce_boundary(particles: ParticleArrays, boundary: DomainBoundary,
                     particle_radius: float, dt: float, damping: float):
    """Push particles closer than ``particle_radius`` to a wall back inside.

    Planes are applied in order. For a particle at distance d < radius
    from a plane, the velocity gains (radius - d) · n / dt, enough to move
    it back to the radius within one step, then is scaled by ``damping``.
    Positions are left untouched.
    """
    n = particles.n_active
    x = particles.position_x[:n]
    y = particles.position_y[:n]
    vx = particles.velocity_x[:n]
    vy = particles.velocity_y[:n]

    for normal_x, normal_y, offset in boundary.planes:
        d = np.maximum(0.0, normal_x * x + normal_y * y - offset)
        hit = d < particle_radius
        if not np.any(hit):
            continue
        push = (particle_radius - d[hit]) / dt
        vx[hit] = (vx[hit] + push * normal_x) * damping
        vy[hit] = (vy[hit] + push * normal_y) * damping
