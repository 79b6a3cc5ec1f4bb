"""Factory functions for creating manifold instances with default configurations."""

from .cholesky_space import CholeskySpace
from .decorators import MetricManifold
from .metrics import AffineInvariantMetric, LogCholeskyMetric, RiemannianMetric
from .spd import SymmetricPositiveDefinite

_SPD_METRICS: dict[str, RiemannianMetric] = {
    "affine_invariant": AffineInvariantMetric(),
    "log_cholesky": LogCholeskyMetric(),
}


def _validate_size(n: int, field: str) -> None:
    if not isinstance(n, int) or n <= 0:
        raise ValueError(f"Matrix size must be a positive integer, got {n}")

    if field not in ("real", "complex"):
        raise ValueError(f"Field must be 'real' or 'complex', got {field!r}")


def create_spd(
    n: int,
    metric: str | RiemannianMetric = "affine_invariant",
    field: str = "real",
) -> SymmetricPositiveDefinite | MetricManifold:
    """Create a Symmetric Positive Definite manifold with validated parameters.

    With the default affine-invariant metric the plain manifold is returned;
    any other metric decorates it.

    Args:
        n: Size of the matrices (must be positive)
        metric: Metric name ("affine_invariant" or "log_cholesky") or metric instance
        field: Scalar field, "real" or "complex"

    Returns:
        Configured SPD manifold, decorated with the metric if it is not the default

    Raises:
        ValueError: If n is not positive, the field is unknown or the metric name is unknown

    Example:
        >>> manifold = create_spd(3, metric="log_cholesky")
        >>> point = manifold.random_point(jax.random.key(42))
    """
    _validate_size(n, field)

    if isinstance(metric, str):
        if metric not in _SPD_METRICS:
            raise ValueError(f"Unknown SPD metric '{metric}', expected one of {sorted(_SPD_METRICS)}")
        metric = _SPD_METRICS[metric]

    manifold = SymmetricPositiveDefinite(n, field=field)
    if metric == manifold.default_metric:
        return manifold
    return MetricManifold(manifold, metric)


def create_log_cholesky_spd(n: int, field: str = "real") -> MetricManifold:
    """Create the SPD manifold with the Log-Cholesky metric.

    Args:
        n: Size of the matrices (must be positive)
        field: Scalar field, "real" or "complex"

    Returns:
        ``MetricManifold(SymmetricPositiveDefinite(n), LogCholeskyMetric())``
    """
    _validate_size(n, field)
    return MetricManifold(SymmetricPositiveDefinite(n, field=field), LogCholeskyMetric())


def create_cholesky_space(n: int, field: str = "real") -> CholeskySpace:
    """Create Cholesky space of n x n lower-triangular matrices with positive diagonal.

    Raises:
        ValueError: If n is not positive or the field is unknown
    """
    _validate_size(n, field)
    return CholeskySpace(n, field=field)
