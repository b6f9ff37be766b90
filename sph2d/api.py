"""
Unified API for the SPH passes with backend dispatch.

Importing this module registers the NumPy (CPU) and Numba
implementations of every pass. The public functions take an optional
``backend`` ('cpu', 'numba', a Backend, or None for the default).
"""

from typing import Optional, Tuple

from .core.backend import (
    Backend, dispatch, backend_function, for_backend, resolve_backend,
    set_backend, get_backend, auto_select_backend, list_backends,
)
from .core.particles import ParticleArrays
from .core.kernels import Poly6Kernel, SpikyKernel, ViscosityKernel, ProximityKernel
from .core.neighbor_grid import NeighborGrid
from .core.neighbor_grid_numba import NumbaNeighborGrid

from .physics.density import (
    compute_density_pressure_all_pairs as _density_all_pairs_cpu,
    compute_density_pressure_neighbors as _density_neighbors_cpu,
)
from .physics.density_numba import (
    compute_density_pressure_all_pairs_numba_wrapper,
    compute_density_pressure_neighbors_numba_wrapper,
)
from .physics.forces import compute_forces_all_pairs as _forces_cpu
from .physics.forces_numba import compute_forces_all_pairs_numba_wrapper
from .physics.relaxation import relax_positions as _relax_cpu
from .physics.relaxation_numba import relax_positions_numba_wrapper


# Register CPU implementations
@backend_function("compute_density_pressure_all_pairs")
@for_backend(Backend.CPU)
def _compute_density_pressure_all_pairs_cpu(particles: ParticleArrays, kernel: Poly6Kernel,
                                            mass: float, gas_constant: float,
                                            rest_density: float):
    _density_all_pairs_cpu(particles, kernel, mass, gas_constant, rest_density)


@backend_function("compute_density_pressure_neighbors")
@for_backend(Backend.CPU)
def _compute_density_pressure_neighbors_cpu(particles: ParticleArrays, kernel: ProximityKernel,
                                            mass: float, stiffness: float,
                                            near_stiffness: float, elastic_rest_density: float):
    _density_neighbors_cpu(particles, kernel, mass, stiffness, near_stiffness,
                           elastic_rest_density)


@backend_function("compute_forces_all_pairs")
@for_backend(Backend.CPU)
def _compute_forces_all_pairs_cpu(particles: ParticleArrays, spiky: SpikyKernel,
                                  viscosity_kernel: ViscosityKernel, mass: float,
                                  viscosity: float, gravity: Tuple[float, float]):
    _forces_cpu(particles, spiky, viscosity_kernel, mass, viscosity, gravity)


@backend_function("relax_positions")
@for_backend(Backend.CPU)
def _relax_positions_cpu(particles: ParticleArrays, kernel: ProximityKernel, mass: float,
                         dt: float, surface_tension: float, linear_viscosity: float,
                         quadratic_viscosity: float):
    _relax_cpu(particles, kernel, mass, dt, surface_tension, linear_viscosity,
               quadratic_viscosity)


@backend_function("create_neighbor_grid")
@for_backend(Backend.CPU)
def _create_neighbor_grid_cpu(width: float, height: float, kernel_radius: float):
    return NeighborGrid(width, height, kernel_radius)


# Register Numba implementations
@backend_function("compute_density_pressure_all_pairs")
@for_backend(Backend.NUMBA)
def _compute_density_pressure_all_pairs_numba(particles: ParticleArrays, kernel: Poly6Kernel,
                                              mass: float, gas_constant: float,
                                              rest_density: float):
    compute_density_pressure_all_pairs_numba_wrapper(particles, kernel, mass, gas_constant,
                                                     rest_density)


@backend_function("compute_density_pressure_neighbors")
@for_backend(Backend.NUMBA)
def _compute_density_pressure_neighbors_numba(particles: ParticleArrays, kernel: ProximityKernel,
                                              mass: float, stiffness: float,
                                              near_stiffness: float, elastic_rest_density: float):
    compute_density_pressure_neighbors_numba_wrapper(particles, kernel, mass, stiffness,
                                                     near_stiffness, elastic_rest_density)


@backend_function("compute_forces_all_pairs")
@for_backend(Backend.NUMBA)
def _compute_forces_all_pairs_numba(particles: ParticleArrays, spiky: SpikyKernel,
                                    viscosity_kernel: ViscosityKernel, mass: float,
                                    viscosity: float, gravity: Tuple[float, float]):
    compute_forces_all_pairs_numba_wrapper(particles, spiky, viscosity_kernel, mass,
                                           viscosity, gravity)


@backend_function("relax_positions")
@for_backend(Backend.NUMBA)
def _relax_positions_numba(particles: ParticleArrays, kernel: ProximityKernel, mass: float,
                           dt: float, surface_tension: float, linear_viscosity: float,
                           quadratic_viscosity: float):
    relax_positions_numba_wrapper(particles, kernel, mass, dt, surface_tension,
                                  linear_viscosity, quadratic_viscosity)


@backend_function("create_neighbor_grid")
@for_backend(Backend.NUMBA)
def _create_neighbor_grid_numba(width: float, height: float, kernel_radius: float):
    return NumbaNeighborGrid(width, height, kernel_radius)


# Public API functions that dispatch to the requested backend
def compute_density_pressure_all_pairs(particles: ParticleArrays, kernel: Poly6Kernel,
                                       mass: float, gas_constant: float, rest_density: float,
                                       backend: Optional[str] = None):
    """All-pairs density and linear-EOS pressure (standard solver)."""
    dispatch("compute_density_pressure_all_pairs", particles, kernel, mass,
             gas_constant, rest_density, backend=backend)


def compute_density_pressure_neighbors(particles: ParticleArrays, kernel: ProximityKernel,
                                       mass: float, stiffness: float, near_stiffness: float,
                                       elastic_rest_density: float,
                                       backend: Optional[str] = None):
    """Double density and pressure from built neighbor lists (viscoelastic solver)."""
    dispatch("compute_density_pressure_neighbors", particles, kernel, mass, stiffness,
             near_stiffness, elastic_rest_density, backend=backend)


def compute_forces_all_pairs(particles: ParticleArrays, spiky: SpikyKernel,
                             viscosity_kernel: ViscosityKernel, mass: float, viscosity: float,
                             gravity: Tuple[float, float], backend: Optional[str] = None):
    """Pressure, viscosity and gravity forces (standard solver)."""
    dispatch("compute_forces_all_pairs", particles, spiky, viscosity_kernel, mass,
             viscosity, gravity, backend=backend)


def relax_positions(particles: ParticleArrays, kernel: ProximityKernel, mass: float,
                    dt: float, surface_tension: float, linear_viscosity: float,
                    quadratic_viscosity: float, backend: Optional[str] = None):
    """Double-density relaxation into the predicted positions."""
    dispatch("relax_positions", particles, kernel, mass, dt, surface_tension,
             linear_viscosity, quadratic_viscosity, backend=backend)


def create_neighbor_grid(width: float, height: float, kernel_radius: float,
                         backend: Optional[str] = None) -> NeighborGrid:
    """Neighbor grid factory that respects the backend."""
    return dispatch("create_neighbor_grid", width, height, kernel_radius, backend=backend)


__all__ = [
    'compute_density_pressure_all_pairs',
    'compute_density_pressure_neighbors',
    'compute_forces_all_pairs',
    'relax_positions',
    'create_neighbor_grid',

    # Backend management
    'Backend',
    'resolve_backend',
    'set_backend',
    'get_backend',
    'auto_select_backend',
    'list_backends',
]
