"""
Particle system data: the particle arrays plus the density/pressure pass
that goes with each solver.

Solvers hold one of the variants below rather than sharing a class
hierarchy; both satisfy the ``ParticleSystemData`` protocol.
"""

from typing import Protocol, Sequence

import numpy as np

from . import api
from .config import MAX_NEIGHBORS, StandardFluidParameters, ViscoelasticFluidParameters
from .core.backend import Backend
from .core.kernels import Poly6Kernel, ProximityKernel
from .core.particles import ParticleArrays


class ParticleSystemData(Protocol):
    """What a solver needs from its particle storage."""

    particles: ParticleArrays

    @property
    def number_of_particles(self) -> int: ...

    def add_particle(self, position: Sequence[float]) -> int: ...

    def compute_density_pressure(self) -> None: ...


class _ArrayAccessors:
    """Views of the live slots; writes go straight to the particle arrays."""

    particles: ParticleArrays

    @property
    def number_of_particles(self) -> int:
        return self.particles.n_active

    def add_particle(self, position: Sequence[float]) -> int:
        x, y = position
        return self.particles.append(float(x), float(y))

    @property
    def position_x(self) -> np.ndarray:
        return self.particles.position_x[:self.particles.n_active]

    @property
    def position_y(self) -> np.ndarray:
        return self.particles.position_y[:self.particles.n_active]

    @property
    def velocity_x(self) -> np.ndarray:
        return self.particles.velocity_x[:self.particles.n_active]

    @property
    def velocity_y(self) -> np.ndarray:
        return self.particles.velocity_y[:self.particles.n_active]

    @property
    def densities(self) -> np.ndarray:
        return self.particles.density[:self.particles.n_active]

    @property
    def pressures(self) -> np.ndarray:
        return self.particles.pressure[:self.particles.n_active]


class StandardParticleData(_ArrayAccessors):
    """Particles of the classical solver, with an all-pairs density pass."""

    def __init__(self, parameters: StandardFluidParameters, backend: Backend = Backend.CPU,
                 capacity: int = 0, max_neighbors: int = MAX_NEIGHBORS):
        self.parameters = parameters
        self.backend = backend
        self.kernel = Poly6Kernel(parameters.kernel_radius)
        self.particles = ParticleArrays.allocate(capacity, max_neighbors)

    def compute_density_pressure(self):
        p = self.parameters
        api.compute_density_pressure_all_pairs(
            self.particles, self.kernel, p.mass, p.gas_constant, p.rest_density,
            backend=self.backend
        )


class ViscoelasticParticleData(_ArrayAccessors):
    """Particles of the viscoelastic solver.

    Owns the neighbor grid covering the view; ``build_neighborhood`` must
    run before ``compute_density_pressure`` whenever positions change.
    """

    def __init__(self, parameters: ViscoelasticFluidParameters, backend: Backend = Backend.CPU,
                 capacity: int = 0, max_neighbors: int = MAX_NEIGHBORS):
        self.parameters = parameters
        self.backend = backend
        self.kernel = ProximityKernel(parameters.kernel_radius)
        self.particles = ParticleArrays.allocate(capacity, max_neighbors,
                                                 include_viscoelastic=True)
        self.neighborhood = api.create_neighbor_grid(
            parameters.view_width, parameters.view_height, parameters.kernel_radius,
            backend=backend
        )

    def resize_domain(self, width: float, height: float):
        self.neighborhood.set_grid_resolution(width, height, self.parameters.kernel_radius)

    def build_neighborhood(self):
        self.neighborhood.build(self.particles)

    def compute_density_pressure(self):
        p = self.parameters
        api.compute_density_pressure_neighbors(
            self.particles, self.kernel, p.mass, p.stiffness, p.near_stiffness,
            p.elastic_rest_density, backend=self.backend
        )

    @property
    def near_densities(self) -> np.ndarray:
        return self.particles.near_density[:self.particles.n_active]

    @property
    def near_pressures(self) -> np.ndarray:
        return self.particles.near_pressure[:self.particles.n_active]
