"""Physics passes: density/pressure, forces, and double-density relaxation."""

from .density import (
    compute_density_pressure_all_pairs,
    compute_density_pressure_neighbors
)
from .forces import compute_forces_all_pairs
from .relaxation import relax_positions

__all__ = [
    'compute_density_pressure_all_pairs',
    'compute_density_pressure_neighbors',
    'compute_forces_all_pairs',
    'relax_positions'
]
