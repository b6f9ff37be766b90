"""
Smoothing kernels for 2D SPH.

Each kernel is a callable of the *difference* argument (h² - r² or h - r)
rather than of r itself, matching how the density and force passes
compute their inputs. All evaluations accept scalars or NumPy arrays.

The precomputed ``coefficient`` attributes are plain floats so the Numba
passes can take them as scalar arguments.
"""

import numpy as np


class Poly6Kernel:
    """Poly6 density kernel, normalized to unit integral over the 2D disk.

    W(r) = 4 / (π h⁸) · (h² - r²)³   for r < h
    """

    def __init__(self, kernel_radius: float):
        self.kernel_radius = float(kernel_radius)
        self.coefficient = 4.0 / (np.pi * self.kernel_radius ** 8)

    def __call__(self, r2_diff):
        """Evaluate at r2_diff = h² - r²."""
        return self.coefficient * r2_diff ** 3


class SpikyKernel:
    """Spiky kernel, used for its gradient in the pressure force.

    ∇W(r) = -10 / (π h⁵) · (h - r)³
    """

    def __init__(self, kernel_radius: float):
        self.kernel_radius = float(kernel_radius)
        self.gradient_coefficient = -10.0 / (np.pi * self.kernel_radius ** 5)

    def gradient_at(self, r_diff):
        """Gradient magnitude at r_diff = h - r."""
        return self.gradient_coefficient * r_diff ** 3


class ViscosityKernel:
    """Viscosity kernel, used for its Laplacian.

    ∇²W(r) = 40 / (π h⁵) · (h - r)
    """

    def __init__(self, kernel_radius: float):
        self.kernel_radius = float(kernel_radius)
        self.laplacian_coefficient = 40.0 / (np.pi * self.kernel_radius ** 5)

    def laplacian_at(self, r_diff):
        return self.laplacian_coefficient * r_diff


class ProximityKernel:
    """Double-density kernels of the viscoelastic relaxation.

    With a = 1 - r/h:
        density(a)      = a³ · 20 / (2π h²)
        near_density(a) = a⁴ · 30 / (2π h²)
    """

    def __init__(self, kernel_radius: float):
        self.kernel_radius = float(kernel_radius)
        h2 = self.kernel_radius ** 2
        self.density_factor = 20.0 / (2.0 * np.pi * h2)
        self.near_density_factor = 30.0 / (2.0 * np.pi * h2)

    def proximity(self, r):
        """a = 1 - r/h, clipped at 0 outside the support."""
        return np.maximum(1.0 - np.asarray(r) / self.kernel_radius, 0.0)

    def density(self, a):
        return a ** 3 * self.density_factor

    def near_density(self, a):
        return a ** 4 * self.near_density_factor
