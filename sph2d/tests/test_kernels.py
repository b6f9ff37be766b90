"""
Tests for the smoothing kernels.
"""

import numpy as np
import pytest
from sph2d.core.kernels import Poly6Kernel, SpikyKernel, ViscosityKernel, ProximityKernel


class TestPoly6:

    def test_value_at_origin(self):
        h = 16.0
        kernel = Poly6Kernel(h)
        assert kernel(h * h) == pytest.approx(4.0 / (np.pi * h * h))

    def test_zero_at_support_edge(self):
        kernel = Poly6Kernel(2.0)
        assert kernel(0.0) == 0.0

    @pytest.mark.parametrize("h", [0.18, 1.0, 16.0])
    def test_unit_integral_over_disk(self, h):
        kernel = Poly6Kernel(h)
        n = 20000
        r = (np.arange(n) + 0.5) * h / n
        integral = np.sum(kernel(h * h - r * r) * 2.0 * np.pi * r) * h / n
        assert integral == pytest.approx(1.0, rel=1e-4)

    def test_accepts_arrays(self):
        kernel = Poly6Kernel(1.0)
        values = kernel(np.array([0.0, 0.5, 1.0]))
        assert values.shape == (3,)
        assert np.all(np.diff(values) > 0)


class TestSpiky:

    def test_gradient_coefficient(self):
        h = 16.0
        kernel = SpikyKernel(h)
        assert kernel.gradient_at(h) == pytest.approx(-10.0 / (np.pi * h * h))
        assert kernel.gradient_at(0.0) == 0.0

    def test_gradient_is_cubic(self):
        kernel = SpikyKernel(4.0)
        assert kernel.gradient_at(2.0) == pytest.approx(kernel.gradient_at(1.0) * 8.0)


class TestViscosity:

    def test_laplacian_is_linear(self):
        h = 16.0
        kernel = ViscosityKernel(h)
        assert kernel.laplacian_at(h) == pytest.approx(40.0 / (np.pi * h ** 4))
        assert kernel.laplacian_at(h / 2) == pytest.approx(kernel.laplacian_at(h) / 2)
        assert kernel.laplacian_at(0.0) == 0.0


class TestProximity:

    def test_factors(self):
        h = 0.18
        kernel = ProximityKernel(h)
        assert kernel.density_factor == pytest.approx(20.0 / (2.0 * np.pi * h * h))
        assert kernel.near_density_factor == pytest.approx(30.0 / (2.0 * np.pi * h * h))

    def test_density_and_near_density(self):
        kernel = ProximityKernel(1.0)
        assert kernel.density(1.0) == pytest.approx(kernel.density_factor)
        assert kernel.near_density(0.5) == pytest.approx(0.0625 * kernel.near_density_factor)

    def test_proximity_clipped_outside_support(self):
        kernel = ProximityKernel(2.0)
        a = kernel.proximity(np.array([0.0, 1.0, 2.0, 3.0]))
        np.testing.assert_allclose(a, [1.0, 0.5, 0.0, 0.0])
