"""2D Smoothed Particle Hydrodynamics: a classical and a viscoelastic solver."""

from . import core
from . import physics
from . import scenarios

# Import API to trigger backend registration
from . import api

from .api import (
    create_neighbor_grid,
    set_backend,
    get_backend,
    auto_select_backend,
    list_backends,
)
from .config import (
    StandardFluidParameters,
    ViscoelasticFluidParameters,
    SolverSettings,
    load_config,
)
from .errors import SPHError, ConfigurationError, PersistenceError, NumericalDegeneracyError
from .solver import SphSolver, ViscoelasticSolver

__version__ = "0.1.0"

__all__ = [
    # Modules
    'core',
    'physics',
    'scenarios',

    # Solvers
    'SphSolver',
    'ViscoelasticSolver',

    # Configuration
    'StandardFluidParameters',
    'ViscoelasticFluidParameters',
    'SolverSettings',
    'load_config',

    # Errors
    'SPHError',
    'ConfigurationError',
    'PersistenceError',
    'NumericalDegeneracyError',

    # Backend management
    'create_neighbor_grid',
    'set_backend',
    'get_backend',
    'auto_select_backend',
    'list_backends',
]
