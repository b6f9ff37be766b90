"""
The two 2D SPH solvers.

SphSolver: classical density/pressure SPH with all-pairs interactions
and symplectic Euler integration.

ViscoelasticSolver: predictive-corrective double-density relaxation
on a neighbor grid, with surface tension and pairwise viscosity.
Each call to ``update`` advances one frame of ``substeps`` substeps.
"""

import dataclasses
import logging
import time
from typing import Optional, Sequence, Tuple

import numpy as np

from . import api
from .config import SolverSettings, StandardFluidParameters, ViscoelasticFluidParameters
from .core.backend import resolve_backend
from .core.integrator import (
    DomainBoundary, apply_external_forces, enforce_boundary,
    integrate_correct, integrate_predict, integrate_symplectic_euler,
)
from .core.kernels import SpikyKernel, ViscosityKernel
from .core.particles import ParticleArrays
from .errors import NumericalDegeneracyError
from .particle_data import StandardParticleData, ViscoelasticParticleData
from .persistence import FrameWriter
from .scenarios.seeding import generate_jittered_column, generate_square_block

logger = logging.getLogger(__name__)


class _FluidSolver:
    """Bookkeeping shared by both solvers: seeding, output, accessors."""

    def __init__(self, parameters, settings: Optional[SolverSettings],
                 number_of_particles: Optional[int]):
        parameters.validate()
        self.settings = settings if settings is not None else SolverSettings()
        self.settings.validate()
        self.parameters = parameters
        self.backend = resolve_backend(self.settings.backend, number_of_particles or 0)
        self.boundary = DomainBoundary(parameters.view_width, parameters.view_height)
        self.frame = 0
        self._writer = None

    def _open_output(self, output_path: Optional[str]):
        if output_path:
            self._writer = FrameWriter(output_path, self.settings.delimiter)

    def _seed(self, positions: np.ndarray):
        for x, y in positions:
            self.data.add_particle((x, y))

    def add_particle(self, position: Sequence[float]) -> int:
        """Add a particle at rest; returns its index."""
        return self.data.add_particle(position)

    def get_positions(self) -> np.ndarray:
        """(n, 2) copy of the current positions, in particle index order."""
        return self.data.particles.get_positions()

    @property
    def output_path(self) -> Optional[str]:
        """Trace file written after every update, None when output is off."""
        return self._writer.path if self._writer is not None else None

    @property
    def particles(self) -> ParticleArrays:
        return self.data.particles

    @property
    def number_of_particles(self) -> int:
        return self.data.number_of_particles

    @property
    def kernel_radius(self) -> float:
        return self.parameters.kernel_radius

    @property
    def particle_radius(self) -> float:
        return self.parameters.particle_radius

    @property
    def view_width(self) -> float:
        return self.parameters.view_width

    @property
    def view_height(self) -> float:
        return self.parameters.view_height

    @property
    def point_size(self) -> float:
        return self.parameters.point_size

    @property
    def window_size(self) -> Tuple[int, int]:
        return tuple(self.parameters.window_size)

    @property
    def time_step(self) -> float:
        return self.parameters.time_step

    def resize_view(self, width: float, height: float):
        """Move the walls to a new view size."""
        parameters = dataclasses.replace(self.parameters, view_width=float(width),
                                         view_height=float(height))
        parameters.validate()
        self.parameters = parameters
        self.boundary = DomainBoundary(parameters.view_width, parameters.view_height)

    def is_finite(self) -> bool:
        return next(self.data.particles.non_finite(), None) is None

    def check_finite(self):
        """Raise NumericalDegeneracyError if any particle state is NaN or inf."""
        bad = next(self.data.particles.non_finite(), None)
        if bad is not None:
            field, indices = bad
            shown = ", ".join(str(i) for i in indices[:10])
            raise NumericalDegeneracyError(
                f"Non-finite {field} after frame {self.frame} (particles {shown})",
                field=field, indices=indices
            )

    def _enforce_boundary(self):
        enforce_boundary(self.data.particles, self.boundary, self.parameters.particle_radius,
                         self.parameters.time_step, self.parameters.boundary_damping)

    def _finish_frame(self, started: float):
        self.frame += 1
        if self._writer is not None:
            self._writer.write_frame(self.get_positions())
        if self.settings.check_finite:
            self.check_finite()
        logger.debug("Frame %d: %.2f ms", self.frame, (time.perf_counter() - started) * 1000.0)


class SphSolver(_FluidSolver):
    """Classical SPH: density/pressure, forces, integration, walls.

    Args:
        number_of_particles: Seed this many particles in a jittered column
            (None for an empty system)
        output_path: Trace file to truncate now and append a frame to after
            every update
        parameters: Fluid parameters (defaults to StandardFluidParameters())
        settings: Backend, seed and runtime checks

    Raises:
        ConfigurationError: Invalid parameters or a seeding overflow
        PersistenceError: If the trace file cannot be created
    """

    def __init__(self, number_of_particles: Optional[int] = None,
                 output_path: Optional[str] = None, *,
                 parameters: Optional[StandardFluidParameters] = None,
                 settings: Optional[SolverSettings] = None):
        if parameters is None:
            parameters = StandardFluidParameters()
        super().__init__(parameters, settings, number_of_particles)

        self.data = StandardParticleData(parameters, self.backend,
                                         capacity=number_of_particles or 0,
                                         max_neighbors=self.settings.max_neighbors)
        self.spiky = SpikyKernel(parameters.kernel_radius)
        self.viscosity_kernel = ViscosityKernel(parameters.kernel_radius)

        if number_of_particles is not None:
            rng = np.random.default_rng(self.settings.seed)
            self._seed(generate_jittered_column(
                number_of_particles, parameters.view_width, parameters.view_height,
                parameters.kernel_radius, rng, truncate=self.settings.truncate_seeding
            ))
        self._open_output(output_path)

        logger.info("SPH solver: %d particles, backend %s, dt %g",
                    self.number_of_particles, self.backend.value, parameters.time_step)

    def compute_forces(self):
        p = self.parameters
        api.compute_forces_all_pairs(
            self.data.particles, self.spiky, self.viscosity_kernel,
            p.mass, p.viscosity, p.gravity, backend=self.backend
        )

    def update(self):
        """Advance one time step."""
        started = time.perf_counter()
        self.data.compute_density_pressure()
        self.compute_forces()
        integrate_symplectic_euler(self.data.particles, self.parameters.time_step)
        self._enforce_boundary()
        self._finish_frame(started)


class ViscoelasticSolver(_FluidSolver):
    """Predictive-corrective viscoelastic SPH.

    Args:
        number_of_particles: Seed this many particles in a square block
            (None for an empty system)
        output_path: Trace file to truncate now and append a frame to after
            every update
        parameters: Fluid parameters (defaults to ViscoelasticFluidParameters())
        settings: Backend, seed and runtime checks

    Raises:
        ConfigurationError: Invalid parameters, a grid smaller than 3x3 cells
            or a seeding overflow
        PersistenceError: If the trace file cannot be created
    """

    def __init__(self, number_of_particles: Optional[int] = None,
                 output_path: Optional[str] = None, *,
                 parameters: Optional[ViscoelasticFluidParameters] = None,
                 settings: Optional[SolverSettings] = None):
        if parameters is None:
            parameters = ViscoelasticFluidParameters()
        super().__init__(parameters, settings, number_of_particles)

        self.data = ViscoelasticParticleData(parameters, self.backend,
                                             capacity=number_of_particles or 0,
                                             max_neighbors=self.settings.max_neighbors)
        if number_of_particles is not None:
            self._seed(generate_square_block(
                number_of_particles, parameters.view_width, parameters.view_height,
                parameters.particle_radius, truncate=self.settings.truncate_seeding
            ))
        self.data.build_neighborhood()
        self._open_output(output_path)

        logger.info("Viscoelastic SPH solver: %d particles, backend %s, %d substeps of %g s",
                    self.number_of_particles, self.backend.value,
                    parameters.substeps, parameters.time_step)

    @property
    def neighborhood(self):
        return self.data.neighborhood

    @property
    def substeps(self) -> int:
        return int(self.parameters.substeps)

    def resize_view(self, width: float, height: float):
        # Grid first: it rejects views narrower than 3 kernel radii
        self.data.resize_domain(width, height)
        super().resize_view(width, height)
        self.data.parameters = self.parameters
        self.data.build_neighborhood()

    def project(self):
        p = self.parameters
        api.relax_positions(
            self.data.particles, self.data.kernel, p.mass, p.time_step,
            p.surface_tension, p.linear_viscosity, p.quadratic_viscosity,
            backend=self.backend
        )

    def substep(self):
        """One predict / relax / correct cycle."""
        particles = self.data.particles
        dt = self.parameters.time_step
        apply_external_forces(particles, self.parameters.gravity, dt)
        integrate_predict(particles, dt)
        self.data.build_neighborhood()
        self.data.compute_density_pressure()
        self.project()
        integrate_correct(particles, dt)
        self._enforce_boundary()

    def update(self):
        """Advance one frame (``substeps`` substeps)."""
        started = time.perf_counter()
        for _ in range(self.substeps):
            self.substep()
        self._finish_frame(started)


__all__ = ['SphSolver', 'ViscoelasticSolver']
