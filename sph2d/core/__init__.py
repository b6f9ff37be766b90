"""Core SPH components: particles, kernels, neighbor grid, and integration."""

from .particles import ParticleArrays
from .kernels import Poly6Kernel, SpikyKernel, ViscosityKernel, ProximityKernel
from .neighbor_grid import NeighborGrid
from .integrator import (
    DomainBoundary,
    integrate_symplectic_euler,
    apply_external_forces,
    integrate_predict,
    integrate_correct,
    enforce_boundary
)

__all__ = [
    'ParticleArrays',
    'Poly6Kernel',
    'SpikyKernel',
    'ViscosityKernel',
    'ProximityKernel',
    'NeighborGrid',
    'DomainBoundary',
    'integrate_symplectic_euler',
    'apply_external_forces',
    'integrate_predict',
    'integrate_correct',
    'enforce_boundary'
]
