"""MetricAX: JAX-native manifolds with interchangeable Riemannian metrics.

A manifold is described once, by what counts as a point and a tangent vector;
its geometry (inner product, exponential and logarithmic maps, distance,
parallel transport) is chosen by decorating it with a metric. Operations that
a metric does not override fall back to the base manifold where that is sound.

**Supported Manifolds:**
- **Symmetric Positive Definite** (SPD(n)): affine-invariant metric natively,
  Log-Cholesky metric through ``MetricManifold``
- **Cholesky space**: lower-triangular matrices with positive diagonal

**Quick Start:**
    >>> import metricax as mx
    >>> M = mx.create_spd(3, metric="log_cholesky")
    >>> key = mx.random.key(0)
    >>> p = M.random_point(key)
    >>> X = M.random_tangent(key, p)
    >>> q = M.exp(p, X)
    >>> distance = M.dist(p, q)
    >>> M.is_flat()
    True

**Configuration:**
    >>> mx.JITManager.configure(enable_x64=True, check_finite=True)
"""

__version__ = "0.1.0"

from typing import Any

# JAX utilities
import jax.random as random

from .core.constants import NumericalConstants
from .core.jit_decorator import clear_jit_cache
from .core.jit_manager import JITManager
from .manifolds import (
    AffineInvariantMetric,
    CholeskyDecompositionError,
    CholeskySpace,
    ConnectionManifold,
    EmbeddedManifold,
    LeviCivitaConnection,
    LogCholeskyMetric,
    Manifold,
    ManifoldError,
    MetricManifold,
    OutOfInjectivityRadiusError,
    SymmetricPositiveDefinite,
    UnsupportedOperationError,
    create_cholesky_space,
    create_log_cholesky_spd,
    create_spd,
)
from .solvers import nlsolve_inverse_retract


def enable_jit() -> None:
    """Enable JIT compilation of manifold kernels globally."""
    JITManager.configure(enable_jit=True)


def disable_jit() -> None:
    """Disable JIT compilation globally, for debugging or testing.

    Example:
        >>> import metricax as mx
        >>> mx.disable_jit()
    """
    JITManager.configure(enable_jit=False)


def get_jit_config() -> dict[str, Any]:
    """Get current configuration.

    Returns:
        Dictionary containing the configuration settings
    """
    return JITManager.get_config()


__all__ = [
    "AffineInvariantMetric",
    "CholeskyDecompositionError",
    "CholeskySpace",
    "ConnectionManifold",
    "EmbeddedManifold",
    "JITManager",
    "LeviCivitaConnection",
    "LogCholeskyMetric",
    "Manifold",
    "ManifoldError",
    "MetricManifold",
    "NumericalConstants",
    "OutOfInjectivityRadiusError",
    "SymmetricPositiveDefinite",
    "UnsupportedOperationError",
    "__version__",
    "clear_jit_cache",
    "create_cholesky_space",
    "create_log_cholesky_spd",
    "create_spd",
    "disable_jit",
    "enable_jit",
    "get_jit_config",
    "nlsolve_inverse_retract",
    "random",
]
