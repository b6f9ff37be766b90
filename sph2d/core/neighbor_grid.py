"""
Uniform-grid neighbor search with fixed-capacity neighbor lists.

The grid covers [0, width] x [0, height] with square cells of one kernel
radius. Cell membership is kept as singly-linked lists in two flat
arrays (``cell_head`` per cell, ``next_index`` per particle). Each
particle's cell coordinates are clamped to [1, nx-2] x [1, ny-2], so the
3x3 scan around any cell stays inside the grid; particles in the outer
ring or outside the domain are filed under the nearest interior cell
and may see fewer neighbors than actually exist.

Neighbor order is fixed: cell offsets dx outer, dy inner, and each cell
list head-first (most recently inserted, i.e. highest index, first).
The Numba grid in ``neighbor_grid_numba`` produces the same lists in the
same order.
"""

import logging
import math
import numpy as np
from typing import Callable

from .particles import ParticleArrays
from ..config import EPS
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

# 3x3 scan, dx outer loop
CELL_OFFSETS = tuple((dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1))


class NeighborGrid:
    """Cell-list neighbor grid, vectorized NumPy build.

    Insertion is done by partitioning particles by cell with a stable
    sort instead of prepending one at a time, which reproduces the
    linked lists a sequential insertion would build.
    """

    def __init__(self, width: float, height: float, kernel_radius: float):
        self.cell_head = np.empty(0, dtype=np.int32)
        self.next_index = np.empty(0, dtype=np.int32)
        self._particles = None
        self.set_grid_resolution(width, height, kernel_radius)

    def set_grid_resolution(self, width: float, height: float, kernel_radius: float):
        """Size the grid for a domain; invalidates any built lists.

        Raises:
            ConfigurationError: If the grid has fewer than 3 cells along an axis
        """
        if not kernel_radius > 0:
            raise ConfigurationError(f"kernel_radius must be positive, got {kernel_radius!r}")
        if not (math.isfinite(width) and math.isfinite(height)):
            raise ConfigurationError(f"Grid domain must be finite, got {width!r}x{height!r}")
        nx = int(np.floor(width / kernel_radius))
        ny = int(np.floor(height / kernel_radius))
        if nx < 3 or ny < 3:
            raise ConfigurationError(
                f"Grid of {nx}x{ny} cells is too small: a {width}x{height} "
                f"domain needs to span at least 3 kernel radii ({kernel_radius}) per axis"
            )
        self.cell_size = float(kernel_radius)
        self.width = float(width)
        self.height = float(height)
        self.nx = nx
        self.ny = ny
        self.n_cells = self.nx * self.ny
        self.cell_head = np.full(self.n_cells, -1, dtype=np.int32)
        self._particles = None
        logger.debug("Neighbor grid: %dx%d cells, cell size %g", self.nx, self.ny, self.cell_size)

    def cell_coordinates(self, position_x: np.ndarray, position_y: np.ndarray):
        """Clamped integer cell coordinates for each point."""
        fx = np.nan_to_num(np.floor(position_x / self.cell_size), nan=1.0)
        fy = np.nan_to_num(np.floor(position_y / self.cell_size), nan=1.0)
        fx = np.clip(fx, 1, self.nx - 2)
        fy = np.clip(fy, 1, self.ny - 2)
        return fx.astype(np.int64), fy.astype(np.int64)

    def _ensure_capacity(self, n: int):
        if len(self.next_index) < n:
            self.next_index = np.full(max(n, 2 * len(self.next_index)), -1, dtype=np.int32)

    def build(self, particles: ParticleArrays):
        """Rebuild the cell lists and every particle's neighbor list.

        Neighbor lists are written to ``particles.neighbor_ids``,
        ``neighbor_distances`` and ``neighbor_count``; a candidate j is
        accepted when EPS <= r² <= cell_size², up to ``max_neighbors``.
        """
        n = particles.n_active
        self._ensure_capacity(n)
        self._particles = particles
        self.cell_head.fill(-1)
        particles.reset_neighbors()
        if n == 0:
            return

        x = particles.position_x[:n]
        y = particles.position_y[:n]
        cx, cy = self.cell_coordinates(x, y)
        cell_id = cx + cy * self.nx
        index = np.arange(n)

        # Linked lists: each particle points at the previous (lower) index in its cell
        order = np.lexsort((index, cell_id))
        sorted_cells = cell_id[order]
        same = sorted_cells[1:] == sorted_cells[:-1]
        next_index = self.next_index[:n]
        next_index.fill(-1)
        next_index[order[1:][same]] = order[:-1][same]
        is_last = np.append(~same, True)
        self.cell_head[sorted_cells[is_last]] = order[is_last]

        # Same lists as CSR runs, head-first (descending index within a cell)
        cell_count = np.bincount(cell_id, minlength=self.n_cells)
        cell_start = np.cumsum(cell_count) - cell_count
        members = np.lexsort((-index, cell_id))

        rows, cands, r2s = [], [], []
        cs2 = self.cell_size * self.cell_size
        for dx, dy in CELL_OFFSETS:
            c = (cx + dx) + (cy + dy) * self.nx
            counts = cell_count[c]
            total = int(counts.sum())
            if total == 0:
                continue
            row = np.repeat(index, counts)
            run_start = np.cumsum(counts) - counts
            offset = np.arange(total) - np.repeat(run_start, counts)
            cand = members[np.repeat(cell_start[c], counts) + offset]
            ddx = x[cand] - x[row]
            ddy = y[cand] - y[row]
            r2 = ddx * ddx + ddy * ddy
            keep = (r2 >= EPS) & (r2 <= cs2)
            rows.append(row[keep])
            cands.append(cand[keep])
            r2s.append(r2[keep])

        if not rows:
            return
        row = np.concatenate(rows)
        cand = np.concatenate(cands)
        r2 = np.concatenate(r2s)

        # Group by particle; stable sort keeps the scan order inside each group
        by_row = np.argsort(row, kind='stable')
        row, cand, r2 = row[by_row], cand[by_row], r2[by_row]
        found = np.bincount(row, minlength=n)
        group_start = np.cumsum(found) - found
        rank = np.arange(len(row)) - group_start[row]

        k = particles.max_neighbors
        keep = rank < k
        row, cand, r2, rank = row[keep], cand[keep], r2[keep], rank[keep]
        particles.neighbor_ids[row, rank] = cand
        particles.neighbor_distances[row, rank] = np.sqrt(r2)
        particles.neighbor_count[:n] = np.minimum(found, k)

    def _require_built(self):
        if self._particles is None:
            raise RuntimeError("Neighbor grid has not been built")
        return self._particles

    def get_neighbors(self, index: int) -> np.ndarray:
        """Neighbor indices of one particle, in scan order."""
        p = self._require_built()
        return p.neighbor_ids[index, :p.neighbor_count[index]].copy()

    def get_distances(self, index: int) -> np.ndarray:
        p = self._require_built()
        return p.neighbor_distances[index, :p.neighbor_count[index]].copy()

    def for_each_nearby_point(self, index: int, callback: Callable[[int, float], None]):
        """Call ``callback(neighbor_index, distance)`` for each recorded neighbor."""
        for j, r in zip(self.get_neighbors(index), self.get_distances(index)):
            callback(int(j), float(r))

    def cell_members(self, cell_x: int, cell_y: int) -> list:
        """Walk one cell's linked list, head first."""
        members = []
        j = self.cell_head[cell_x + cell_y * self.nx]
        while j != -1:
            members.append(int(j))
            j = self.next_index[j]
        return members

