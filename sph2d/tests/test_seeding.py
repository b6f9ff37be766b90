"""
Tests for the initial particle layouts.
"""

import logging

import numpy as np
import pytest
from sph2d.errors import ConfigurationError
from sph2d.scenarios import generate_jittered_column, generate_square_block


class TestJitteredColumn:

    def test_row_major_layout(self):
        positions = generate_jittered_column(25, 1200.0, 900.0, 16.0, np.random.default_rng(0))
        assert positions.shape == (25, 2)
        # 19 particles per row: x = 300, 316, ..., 588
        np.testing.assert_allclose(positions[:19, 0] - 300.0, 16.0 * np.arange(19), atol=1.0)
        assert np.all(positions[:19, 1] < 17.0)
        assert np.all(positions[19:, 1] >= 32.0)

    def test_jitter_shared_by_both_axes(self):
        positions = generate_jittered_column(40, 1200.0, 900.0, 16.0, np.random.default_rng(5))
        grid_x = 300.0 + 16.0 * (np.arange(40) % 19)
        grid_y = 16.0 + 16.0 * (np.arange(40) // 19)
        jitter_x = positions[:, 0] - grid_x
        jitter_y = positions[:, 1] - grid_y
        np.testing.assert_allclose(jitter_x, jitter_y, atol=1e-9)
        assert np.all((jitter_x >= 0.0) & (jitter_x < 1.0))

    def test_reproducible_for_seed(self):
        a = generate_jittered_column(100, 1200.0, 900.0, 16.0, np.random.default_rng(42))
        b = generate_jittered_column(100, 1200.0, 900.0, 16.0, np.random.default_rng(42))
        c = generate_jittered_column(100, 1200.0, 900.0, 16.0, np.random.default_rng(43))
        np.testing.assert_array_equal(a, b)
        assert not np.array_equal(a, c)

    def test_capacity(self):
        # 54 rows of 19 fit in the default view
        assert len(generate_jittered_column(1026, 1200.0, 900.0, 16.0)) == 1026
        with pytest.raises(ConfigurationError, match="truncate_seeding"):
            generate_jittered_column(1027, 1200.0, 900.0, 16.0)

    def test_truncate_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            positions = generate_jittered_column(2000, 1200.0, 900.0, 16.0, truncate=True)
        assert len(positions) == 1026
        assert "truncating" in caplog.text

    @pytest.mark.parametrize("n", [0, -3, 2.5])
    def test_invalid_count(self, n):
        with pytest.raises(ConfigurationError):
            generate_jittered_column(n, 1200.0, 900.0, 16.0)


class TestSquareBlock:

    def test_layout(self):
        positions = generate_square_block(5, 12.5, 9.375, 0.03)
        step = 0.09
        expected = np.array([
            [3.125, 4.6875],
            [3.125 + step, 4.6875],
            [3.125 + 2 * step, 4.6875],
            [3.125, 4.6875 - step],
            [3.125 + step, 4.6875 - step],
        ])
        np.testing.assert_allclose(positions, expected, atol=1e-12)

    def test_perfect_square(self):
        positions = generate_square_block(2500, 12.5, 9.375, 0.03)
        assert positions.shape == (2500, 2)
        assert len(np.unique(np.round(positions[:, 0], 9))) == 50
        assert len(np.unique(np.round(positions[:, 1], 9))) == 50

    def test_deterministic(self):
        np.testing.assert_array_equal(generate_square_block(300, 12.5, 9.375, 0.03),
                                      generate_square_block(300, 12.5, 9.375, 0.03))

    def test_overflow(self):
        with pytest.raises(ConfigurationError, match="truncate_seeding"):
            generate_square_block(100, 1.0, 1.0, 0.1)

    def test_truncate_keeps_leading_particles(self, caplog):
        with caplog.at_level(logging.WARNING):
            positions = generate_square_block(100, 1.0, 1.0, 0.1, truncate=True)
        # Columns at x = 0.25, 0.55, 0.85 fit; the fourth is outside
        assert len(positions) == 3
        assert np.all(positions[:, 0] <= 1.0)
        assert "truncating" in caplog.text

    def test_invalid_count(self):
        with pytest.raises(ConfigurationError):
            generate_square_block(0, 12.5, 9.375, 0.03)
