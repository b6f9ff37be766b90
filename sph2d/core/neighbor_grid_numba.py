"""
Numba-compiled neighbor grid.

Cell insertion runs sequentially (a parallel prepend would race on
``cell_head``); the per-particle query runs under ``prange`` and each
iteration writes only its own neighbor row.
"""

import math
import numpy as np
import numba as nb

from .neighbor_grid import NeighborGrid
from .particles import ParticleArrays
from ..config import EPS


@nb.njit(cache=True)
def _clamped_cell(px: float, py: float, cell_size: float, nx: int, ny: int):
    fx = np.floor(px / cell_size)
    fy = np.floor(py / cell_size)
    # NaN fails both comparisons and lands in cell 1
    if not fx >= 1.0:
        fx = 1.0
    if not fy >= 1.0:
        fy = 1.0
    if fx > nx - 2.0:
        fx = nx - 2.0
    if fy > ny - 2.0:
        fy = ny - 2.0
    return int(fx), int(fy)


@nb.njit(cache=True)
def build_cell_lists_numba(position_x: np.ndarray, position_y: np.ndarray,
                           n_active: int, cell_size: float, nx: int, ny: int,
                           cell_head: np.ndarray, next_index: np.ndarray):
    """Prepend every particle, in index order, to its cell's list."""
    cell_head[:] = -1
    for i in range(n_active):
        cx, cy = _clamped_cell(position_x[i], position_y[i], cell_size, nx, ny)
        c = cx + cy * nx
        next_index[i] = cell_head[c]
        cell_head[c] = i


@nb.njit(parallel=True, cache=True)
def query_neighbors_numba(position_x: np.ndarray, position_y: np.ndarray,
                          n_active: int, cell_size: float, nx: int, ny: int,
                          cell_head: np.ndarray, next_index: np.ndarray,
                          neighbor_ids: np.ndarray, neighbor_distances: np.ndarray,
                          neighbor_count: np.ndarray, eps: float):
    """Scan the 3x3 block around each particle's cell."""
    cs2 = cell_size * cell_size
    max_neighbors = neighbor_ids.shape[1]

    for i in nb.prange(n_active):
        px = position_x[i]
        py = position_y[i]
        cx, cy = _clamped_cell(px, py, cell_size, nx, ny)

        n_found = 0
        for dcx in range(-1, 2):
            for dcy in range(-1, 2):
                j = cell_head[(cx + dcx) + (cy + dcy) * nx]
                while j != -1 and n_found < max_neighbors:
                    dx = position_x[j] - px
                    dy = position_y[j] - py
                    r2 = dx * dx + dy * dy
                    if r2 >= eps and r2 <= cs2:
                        neighbor_ids[i, n_found] = j
                        neighbor_distances[i, n_found] = math.sqrt(r2)
                        n_found += 1
                    j = next_index[j]
        neighbor_count[i] = n_found


class NumbaNeighborGrid(NeighborGrid):
    """Drop-in replacement for NeighborGrid using compiled loops."""

    def build(self, particles: ParticleArrays):
        n = particles.n_active
        self._ensure_capacity(n)
        self._particles = particles
        particles.reset_neighbors()

        build_cell_lists_numba(
            particles.position_x, particles.position_y,
            n, self.cell_size, self.nx, self.ny,
            self.cell_head, self.next_index
        )
        query_neighbors_numba(
            particles.position_x, particles.position_y,
            n, self.cell_size, self.nx, self.ny,
            self.cell_head, self.next_index,
            particles.neighbor_ids, particles.neighbor_distances,
            particles.neighbor_count, EPS
        )
