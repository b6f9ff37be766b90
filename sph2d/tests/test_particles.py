"""
Tests for the structure-of-arrays particle storage.
"""

import numpy as np
import pytest
from sph2d.config import StandardFluidParameters, ViscoelasticFluidParameters
from sph2d.core.particles import ParticleArrays
from sph2d.particle_data import StandardParticleData, ViscoelasticParticleData


class TestAllocation:

    def test_allocate_empty(self):
        particles = ParticleArrays.allocate(10)
        assert particles.n_active == 0
        assert particles.capacity == 10
        assert particles.max_neighbors == 64
        assert particles.position_x.dtype == np.float64
        assert np.all(particles.neighbor_ids == -1)
        assert not particles.is_viscoelastic

    def test_allocate_viscoelastic(self):
        particles = ParticleArrays.allocate(4, max_neighbors=8, include_viscoelastic=True)
        assert particles.is_viscoelastic
        assert particles.neighbor_ids.shape == (4, 8)
        for name in ("near_density", "near_pressure", "predicted_x",
                     "predicted_y", "previous_x", "previous_y"):
            assert getattr(particles, name).shape == (4,)

    def test_zero_capacity_is_usable(self):
        particles = ParticleArrays.allocate(0)
        assert particles.capacity == 1
        particles.append(1.0, 2.0)
        assert particles.n_active == 1


class TestAppend:

    def test_append_returns_index_and_zeroes_state(self):
        particles = ParticleArrays.allocate(4)
        particles.velocity_x[1] = 7.0  # stale value in a free slot
        assert particles.append(1.0, 2.0) == 0
        assert particles.append(3.0, 4.0) == 1
        assert particles.n_active == 2
        assert particles.velocity_x[1] == 0.0
        np.testing.assert_array_equal(particles.get_positions(), [[1.0, 2.0], [3.0, 4.0]])

    def test_viscoelastic_append_sets_predicted_and_previous(self):
        particles = ParticleArrays.allocate(2, include_viscoelastic=True)
        particles.append(0.5, 0.25)
        assert particles.predicted_x[0] == 0.5
        assert particles.predicted_y[0] == 0.25
        assert particles.previous_x[0] == 0.5
        assert particles.previous_y[0] == 0.25
        assert particles.near_density[0] == 0.0

    def test_growth_keeps_live_slots(self):
        particles = ParticleArrays.allocate(2, include_viscoelastic=True)
        for i in range(5):
            particles.append(float(i), float(-i))
        assert particles.n_active == 5
        assert particles.capacity >= 5
        assert particles.neighbor_ids.shape[0] == particles.capacity
        assert particles.predicted_x.shape[0] == particles.capacity
        np.testing.assert_array_equal(particles.position_x[:5], np.arange(5.0))
        np.testing.assert_array_equal(particles.previous_y[:5], -np.arange(5.0))
        assert np.all(particles.neighbor_ids[:5] == -1)

    def test_get_positions_is_a_copy(self):
        particles = ParticleArrays.allocate(2)
        particles.append(1.0, 1.0)
        positions = particles.get_positions()
        positions[0, 0] = 99.0
        assert particles.position_x[0] == 1.0


class TestFiniteness:

    def test_all_finite(self):
        particles = ParticleArrays.allocate(3)
        particles.append(0.0, 0.0)
        assert list(particles.non_finite()) == []

    def test_reports_field_and_indices(self):
        particles = ParticleArrays.allocate(3)
        for i in range(3):
            particles.append(float(i), 0.0)
        particles.velocity_y[2] = np.inf
        bad = list(particles.non_finite())
        assert len(bad) == 1
        name, indices = bad[0]
        assert name == "velocity_y"
        np.testing.assert_array_equal(indices, [2])

    def test_ignores_inactive_slots(self):
        particles = ParticleArrays.allocate(3)
        particles.append(0.0, 0.0)
        particles.density[2] = np.nan
        assert list(particles.non_finite()) == []


class TestParticleSystemData:

    def test_standard_accessors_are_live_views(self):
        data = StandardParticleData(StandardFluidParameters(), capacity=4)
        data.add_particle((10.0, 20.0))
        data.add_particle((30.0, 40.0))

        assert data.number_of_particles == 2
        np.testing.assert_array_equal(data.position_x, [10.0, 30.0])
        np.testing.assert_array_equal(data.position_y, [20.0, 40.0])

        data.densities[1] = 7.0
        data.pressures[0] = -3.0
        data.velocity_x[0] = 1.5
        data.velocity_y[1] = -2.5
        data.position_y[0] = 21.0
        assert data.particles.density[1] == 7.0
        assert data.particles.pressure[0] == -3.0
        assert data.particles.velocity_x[0] == 1.5
        assert data.particles.velocity_y[1] == -2.5
        assert data.particles.position_y[0] == 21.0

    def test_accessors_cover_live_slots_only(self):
        data = StandardParticleData(StandardFluidParameters(), capacity=16)
        data.add_particle((1.0, 1.0))
        assert len(data.densities) == 1
        assert len(data.velocity_x) == 1

    def test_viscoelastic_near_fields(self):
        data = ViscoelasticParticleData(ViscoelasticFluidParameters(), capacity=2)
        data.add_particle((3.0, 3.0))
        data.add_particle((3.09, 3.0))
        data.build_neighborhood()
        data.compute_density_pressure()

        assert data.near_densities[0] > 0.0
        np.testing.assert_allclose(data.near_pressures, 0.1 * data.near_densities)
        data.near_pressures[1] = 0.0
        assert data.particles.near_pressure[1] == 0.0
