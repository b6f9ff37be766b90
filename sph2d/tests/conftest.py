"""Pytest configuration for sph2d tests."""
import os

import numpy as np
import pytest


def pytest_configure(config):
    """Configure a headless environment for the viewer tests."""
    # Set SDL to use dummy video driver for headless operation
    os.environ['SDL_VIDEODRIVER'] = 'dummy'
    os.environ['SDL_AUDIODRIVER'] = 'dummy'
    os.environ.setdefault('PYGAME_HIDE_SUPPORT_PROMPT', '1')

    config.addinivalue_line("markers", "slow: long-running simulation tests")


BACKENDS = ['cpu', 'numba']


@pytest.fixture(params=BACKENDS)
def backend(request):
    """Parametrize tests over both backends."""
    return request.param


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
