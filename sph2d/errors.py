"""Exception hierarchy for the 2D SPH solvers."""


class SPHError(Exception):
    """Base class for all sph2d errors."""


class ConfigurationError(SPHError, ValueError):
    """Invalid solver, grid or seeding configuration.

    Raised at construction time, before any simulation step runs.
    """


class PersistenceError(SPHError, OSError):
    """A frame trace could not be opened, written or parsed."""


class NumericalDegeneracyError(SPHError, FloatingPointError):
    """The particle state contains non-finite values."""

    def __init__(self, message: str, field: str = "", indices=None):
        super().__init__(message)
        self.field = field
        self.indices = [] if indices is None else list(indices)
