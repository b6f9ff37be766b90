"""
Backend selection and dispatch for the SPH passes.

Two backends are supported:
1. CPU (NumPy) - vectorized reference implementation
2. Numba - JIT-compiled loops, parallel over particles

Each solver resolves its backend once at construction and passes it
explicitly to ``dispatch``; the process-wide default only applies to
calls that do not name one.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import numba

from ..config import AUTO_NUMBA_THRESHOLD
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


class Backend(enum.Enum):
    """Available computation backends."""
    CPU = "cpu"      # NumPy
    NUMBA = "numba"  # Numba JIT


@dataclass
class BackendInfo:
    """Information about a backend."""
    backend: Backend
    device_name: str = "CPU"


class BackendManager:
    """Keeps the implementation registry and the default backend."""

    def __init__(self):
        self._current_backend = Backend.CPU
        self._available_backends = {
            Backend.CPU: BackendInfo(Backend.CPU, "CPU (NumPy)"),
            Backend.NUMBA: BackendInfo(Backend.NUMBA, f"CPU (Numba {numba.__version__})"),
        }
        self._implementations: Dict[str, Dict[Backend, Callable]] = {}

    @property
    def current_backend(self) -> Backend:
        return self._current_backend

    @property
    def available_backends(self) -> List[Backend]:
        return list(self._available_backends)

    def set_backend(self, backend: Backend):
        self._current_backend = backend
        logger.debug("Backend set to: %s", self._available_backends[backend].device_name)

    def auto_select_backend(self, n_particles: int) -> Backend:
        """Pick Numba for problems large enough to amortize compilation.

        Args:
            n_particles: Number of particles

        Returns:
            Selected backend
        """
        if n_particles > AUTO_NUMBA_THRESHOLD:
            return Backend.NUMBA
        return Backend.CPU

    def register_implementation(self, function_name: str, backend: Backend,
                                implementation: Callable):
        self._implementations.setdefault(function_name, {})[backend] = implementation

    def get_implementation(self, function_name: str,
                           backend: Optional[Backend] = None) -> Callable:
        """Get the implementation of ``function_name`` for a backend.

        Raises:
            KeyError: If the function has no implementation for the backend
        """
        if backend is None:
            backend = self._current_backend

        if function_name not in self._implementations:
            raise KeyError(f"No implementations registered for {function_name}")
        impls = self._implementations[function_name]
        if backend not in impls:
            raise KeyError(f"No {backend.value} implementation for {function_name}")
        return impls[backend]

    def dispatch(self, function_name: str, *args, backend: Optional[Backend] = None, **kwargs):
        impl = self.get_implementation(function_name, backend)
        return impl(*args, **kwargs)


# Global backend manager instance
_backend_manager = BackendManager()


def resolve_backend(name: str, n_particles: int = 0) -> Backend:
    """Turn a settings string ('auto', 'cpu', 'numba') into a Backend.

    Raises:
        ConfigurationError: For an unknown backend name
    """
    name = name.lower()
    if name == "auto":
        return _backend_manager.auto_select_backend(n_particles)
    try:
        return Backend(name)
    except ValueError:
        raise ConfigurationError(
            f"Invalid backend: {name}. Choose from: auto, cpu, numba"
        ) from None


def set_backend(backend: str):
    """Set the default backend used by ``dispatch`` calls that name none."""
    _backend_manager.set_backend(resolve_backend(backend))


def get_backend() -> str:
    return _backend_manager.current_backend.value


def list_backends() -> List[str]:
    return [b.value for b in _backend_manager.available_backends]


def auto_select_backend(n_particles: int) -> str:
    """Auto-select the backend for a particle count without changing the default."""
    return _backend_manager.auto_select_backend(n_particles).value


def backend_function(function_name: str):
    """Decorator to register backend-specific implementations.

    Usage:
        @backend_function("compute_density")
        @for_backend(Backend.NUMBA)
        def compute_density_numba(...):
            ...
    """
    def decorator(func):
        if hasattr(func, '_backend'):
            _backend_manager.register_implementation(function_name, func._backend, func)
        return func
    return decorator


def for_backend(backend: Backend):
    """Helper decorator to specify backend."""
    def decorator(func):
        func._backend = backend
        return func
    return decorator


def dispatch(function_name: str, *args, backend=None, **kwargs):
    """Dispatch a registered function to a backend.

    Args:
        function_name: Name the implementations were registered under
        *args: Positional arguments
        backend: Backend enum or name (None for the default)
        **kwargs: Keyword arguments

    Returns:
        Function result
    """
    if isinstance(backend, str):
        backend = Backend(backend)
    return _backend_manager.dispatch(function_name, *args, backend=backend, **kwargs)
