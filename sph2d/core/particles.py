"""
Particle storage using the Structure-of-Arrays (SoA) pattern.

Every per-particle quantity lives in its own contiguous float64 array of
equal capacity. ``n_active`` counts the live slots; everything past it
is scratch space that ``append`` grows into.
"""

import numpy as np
from dataclasses import dataclass, fields
from typing import Optional

from ..config import MAX_NEIGHBORS


_VISCOELASTIC_FIELDS = (
    "near_density", "near_pressure",
    "predicted_x", "predicted_y",
    "previous_x", "previous_y",
)


@dataclass
class ParticleArrays:
    """Structure of Arrays for the particle state.

    The viscoelastic arrays are None unless allocated with
    ``include_viscoelastic=True``.
    """
    # Primary state (capacity,)
    position_x: np.ndarray
    position_y: np.ndarray
    velocity_x: np.ndarray
    velocity_y: np.ndarray

    # Force accumulators
    force_x: np.ndarray
    force_y: np.ndarray

    density: np.ndarray
    pressure: np.ndarray

    # Neighbor data (fixed max neighbors K)
    neighbor_ids: np.ndarray        # shape: (capacity, K) int32
    neighbor_distances: np.ndarray  # shape: (capacity, K) float64
    neighbor_count: np.ndarray      # shape: (capacity,) int32

    n_active: int = 0

    # Viscoelastic extension
    near_density: Optional[np.ndarray] = None
    near_pressure: Optional[np.ndarray] = None
    predicted_x: Optional[np.ndarray] = None
    predicted_y: Optional[np.ndarray] = None
    previous_x: Optional[np.ndarray] = None
    previous_y: Optional[np.ndarray] = None

    @staticmethod
    def allocate(capacity: int, max_neighbors: int = MAX_NEIGHBORS,
                 include_viscoelastic: bool = False) -> 'ParticleArrays':
        """Pre-allocate zeroed arrays.

        Args:
            capacity: Number of particle slots
            max_neighbors: Maximum neighbors per particle (default 64)
            include_viscoelastic: Whether to allocate the predictive arrays

        Returns:
            Empty ParticleArrays instance (n_active == 0)
        """
        capacity = max(int(capacity), 1)

        def zeros():
            return np.zeros(capacity, dtype=np.float64)

        arrays = ParticleArrays(
            position_x=zeros(),
            position_y=zeros(),
            velocity_x=zeros(),
            velocity_y=zeros(),
            force_x=zeros(),
            force_y=zeros(),
            density=zeros(),
            pressure=zeros(),
            neighbor_ids=np.full((capacity, max_neighbors), -1, dtype=np.int32),
            neighbor_distances=np.zeros((capacity, max_neighbors), dtype=np.float64),
            neighbor_count=np.zeros(capacity, dtype=np.int32),
        )
        if include_viscoelastic:
            for name in _VISCOELASTIC_FIELDS:
                setattr(arrays, name, zeros())
        return arrays

    @property
    def capacity(self) -> int:
        return len(self.position_x)

    @property
    def max_neighbors(self) -> int:
        return self.neighbor_ids.shape[1]

    @property
    def is_viscoelastic(self) -> bool:
        return self.near_density is not None

    def _grow(self):
        """Double the capacity, keeping the live slots."""
        new_capacity = 2 * self.capacity
        for f in fields(self):
            arr = getattr(self, f.name)
            if not isinstance(arr, np.ndarray):
                continue
            shape = (new_capacity,) + arr.shape[1:]
            fill = -1 if f.name == "neighbor_ids" else 0
            grown = np.full(shape, fill, dtype=arr.dtype)
            grown[:self.n_active] = arr[:self.n_active]
            setattr(self, f.name, grown)

    def append(self, x: float, y: float) -> int:
        """Add a particle at rest at (x, y).

        All slots of the new index are written before ``n_active`` moves.

        Returns:
            Index of the new particle
        """
        if self.n_active == self.capacity:
            self._grow()
        i = self.n_active
        self.position_x[i] = x
        self.position_y[i] = y
        self.velocity_x[i] = 0.0
        self.velocity_y[i] = 0.0
        self.force_x[i] = 0.0
        self.force_y[i] = 0.0
        self.density[i] = 0.0
        self.pressure[i] = 0.0
        self.neighbor_ids[i] = -1
        self.neighbor_count[i] = 0
        if self.is_viscoelastic:
            self.near_density[i] = 0.0
            self.near_pressure[i] = 0.0
            self.predicted_x[i] = x
            self.predicted_y[i] = y
            self.previous_x[i] = x
            self.previous_y[i] = y
        self.n_active = i + 1
        return i

    def get_positions(self) -> np.ndarray:
        """Copy of the live positions as an (n, 2) array."""
        n = self.n_active
        return np.column_stack((self.position_x[:n], self.position_y[:n]))

    def reset_neighbors(self):
        self.neighbor_ids[:self.n_active] = -1
        self.neighbor_count[:self.n_active] = 0

    def non_finite(self):
        """Yield (field name, bad indices) for live state that is NaN or inf."""
        names = ["position_x", "position_y", "velocity_x", "velocity_y",
                 "density", "pressure"]
        if self.is_viscoelastic:
            names += ["near_density", "near_pressure"]
        for name in names:
            values = getattr(self, name)[:self.n_active]
            bad = np.flatnonzero(~np.isfinite(values))
            if bad.size:
                yield name, bad
