"""Configuration constants for MetricAX.

This module defines the numerical tolerances used throughout the library so that
validation predicates and tests agree on what "close enough" means.
"""


class NumericalConstants:
    """Numerical constants for tolerances and stability checks.

    These constants are used by the validity predicates of the manifolds and by
    the numerical safeguards around the Cholesky factorization.
    """

    EPSILON: float = 1e-10
    """Numerical stability threshold for small value detection."""

    HIGH_PRECISION_EPSILON: float = 1e-12
    """Floor used when clamping eigenvalues before taking logarithms."""

    SYMMETRY_TOLERANCE: float = 1e-8
    """Tolerance for checking matrix symmetry (Hermitian symmetry for complex input)."""

    TRIANGULARITY_TOLERANCE: float = 1e-12
    """Tolerance for the strictly-upper part of a lower-triangular matrix."""


class SolverDefaults:
    """Default settings for the nonlinear inverse-retraction solver."""

    RTOL: float = 1e-10
    """Relative tolerance passed to the Newton solver."""

    ATOL: float = 1e-10
    """Absolute tolerance passed to the Newton solver."""

    MAX_STEPS: int = 64
    """Maximum number of Newton iterations before giving up."""
