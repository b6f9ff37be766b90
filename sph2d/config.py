"""
Simulation parameters for the standard and viscoelastic SPH solvers.

Values default to the reference configuration of each solver:
- Standard: pixel-scale units (kernel radius 16, 1200x900 view)
- Viscoelastic: metre-scale units (kernel radius 0.18, 12.5 m wide view)
"""

import json
import math
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Tuple

from .errors import ConfigurationError


# Gravity in 2D
GRAVITY_2D: Tuple[float, float] = (0.0, -9.8)

# Equation-of-state constants for the standard solver
REST_DENSITY = 300.0
GAS_CONSTANT = 2000.0

# Rest density used by the double-density relaxation (lower, tuned for projection)
ELASTIC_REST_DENSITY = 45.0

PARTICLE_MASS = 1.0

# Squared distances below EPS are treated as coincident particles
EPS = 1e-5

MAX_NEIGHBORS = 64

# Backend auto-selection switches to Numba above this particle count
AUTO_NUMBA_THRESHOLD = 1000


def _require_positive(name: str, value: float):
    if not (value > 0 and math.isfinite(value)):
        raise ConfigurationError(f"{name} must be positive and finite, got {value!r}")


def _from_dict(cls, data: Optional[Dict[str, Any]]):
    """Build a dataclass from a dict, rejecting unknown keys."""
    data = dict(data or {})
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ConfigurationError(
            f"Unknown {cls.__name__} keys: {', '.join(sorted(unknown))}"
        )
    for key in ("gravity", "window_size"):
        if key in data and data[key] is not None:
            data[key] = tuple(data[key])
    instance = cls(**data)
    instance.validate()
    return instance


@dataclass
class StandardFluidParameters:
    """Parameters of the classical density/pressure solver."""
    kernel_radius: float = 16.0
    particle_radius: float = 16.0
    mass: float = 2.5
    viscosity: float = 200.0
    gas_constant: float = GAS_CONSTANT
    rest_density: float = REST_DENSITY
    gravity: Tuple[float, float] = GRAVITY_2D
    time_step: float = 0.0007
    boundary_damping: float = 1.0
    window_size: Tuple[int, int] = (800, 600)
    view_width: float = 1.5 * 800.0
    view_height: float = 1.5 * 600.0

    @property
    def point_size(self) -> float:
        """Rendered point diameter in pixels."""
        return self.kernel_radius / 2.0

    def validate(self):
        _require_positive("kernel_radius", self.kernel_radius)
        _require_positive("particle_radius", self.particle_radius)
        _require_positive("mass", self.mass)
        _require_positive("time_step", self.time_step)
        _require_positive("view_width", self.view_width)
        _require_positive("view_height", self.view_height)
        if len(self.gravity) != 2:
            raise ConfigurationError(f"gravity must have 2 components, got {self.gravity!r}")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'StandardFluidParameters':
        return _from_dict(cls, data)


@dataclass
class ViscoelasticFluidParameters:
    """Parameters of the predictive-corrective viscoelastic solver.

    ``kernel_radius`` and ``view_height`` are derived when left as None:
    the kernel radius is six particle radii and the view height keeps
    the window aspect ratio.
    """
    particle_radius: float = 0.03
    kernel_radius: Optional[float] = None
    mass: float = PARTICLE_MASS
    stiffness: float = 0.08
    near_stiffness: float = 0.1
    linear_viscosity: float = 0.25
    quadratic_viscosity: float = 0.5
    surface_tension: float = 0.0001
    elastic_rest_density: float = ELASTIC_REST_DENSITY
    gravity: Tuple[float, float] = GRAVITY_2D
    fps: float = 30.0
    substeps: int = 10
    boundary_damping: float = 0.5
    window_size: Tuple[int, int] = (800, 600)
    view_width: float = 12.5
    view_height: Optional[float] = None

    def __post_init__(self):
        if self.kernel_radius is None:
            self.kernel_radius = 6.0 * self.particle_radius
        if self.view_height is None:
            self.view_height = self.window_size[1] * self.view_width / self.window_size[0]

    @property
    def time_step(self) -> float:
        """Substep length: one frame split into ``substeps`` pieces."""
        return (1.0 / self.fps) / self.substeps

    @property
    def point_size(self) -> float:
        return 2.5 * self.particle_radius * self.window_size[0] / self.view_height

    def validate(self):
        _require_positive("particle_radius", self.particle_radius)
        _require_positive("kernel_radius", self.kernel_radius)
        _require_positive("mass", self.mass)
        _require_positive("fps", self.fps)
        _require_positive("view_width", self.view_width)
        _require_positive("view_height", self.view_height)
        if int(self.substeps) != self.substeps or self.substeps < 1:
            raise ConfigurationError(f"substeps must be a positive integer, got {self.substeps!r}")
        if len(self.gravity) != 2:
            raise ConfigurationError(f"gravity must have 2 components, got {self.gravity!r}")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ViscoelasticFluidParameters':
        return _from_dict(cls, data)


@dataclass
class SolverSettings:
    """Runtime settings shared by both solvers.

    Attributes:
        backend: 'cpu', 'numba' or 'auto' (Numba for large particle counts)
        seed: Seed for the jittered seeding pattern
        check_finite: Raise NumericalDegeneracyError after any update that
            leaves non-finite state behind
        delimiter: Particle separator in persisted frame traces
        truncate_seeding: Keep only the particles that fit instead of raising
            when the seeding pattern runs out of room
        max_neighbors: Neighbor list cap per particle
    """
    backend: str = "auto"
    seed: int = 0
    check_finite: bool = False
    delimiter: str = ";"
    truncate_seeding: bool = False
    max_neighbors: int = MAX_NEIGHBORS

    def validate(self):
        if self.backend not in ("auto", "cpu", "numba"):
            raise ConfigurationError(
                f"Invalid backend: {self.backend}. Choose from: auto, cpu, numba"
            )
        if not self.delimiter or any(c in self.delimiter for c in " \n\r.-+0123456789"):
            raise ConfigurationError(f"Unusable frame delimiter: {self.delimiter!r}")
        if self.max_neighbors < 1:
            raise ConfigurationError(f"max_neighbors must be >= 1, got {self.max_neighbors}")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'SolverSettings':
        return _from_dict(cls, data)


@dataclass
class SimulationConfig:
    """Everything a CLI run needs, as loaded from a JSON file."""
    standard: StandardFluidParameters = field(default_factory=StandardFluidParameters)
    viscoelastic: ViscoelasticFluidParameters = field(default_factory=ViscoelasticFluidParameters)
    settings: SolverSettings = field(default_factory=SolverSettings)


def load_config(path: str) -> SimulationConfig:
    """Load a JSON configuration file.

    Any of the ``standard``, ``viscoelastic`` and ``settings`` sections may
    be omitted; missing keys fall back to the defaults.

    Raises:
        ConfigurationError: malformed JSON, unknown keys or invalid values
    """
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: top level must be a JSON object")
    unknown = set(data) - {"standard", "viscoelastic", "settings"}
    if unknown:
        raise ConfigurationError(f"{path}: unknown sections {', '.join(sorted(unknown))}")

    return SimulationConfig(
        standard=StandardFluidParameters.from_dict(data.get("standard")),
        viscoelastic=ViscoelasticFluidParameters.from_dict(data.get("viscoelastic")),
        settings=SolverSettings.from_dict(data.get("settings")),
    )
