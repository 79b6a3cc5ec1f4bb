"""Manifold error hierarchy and validation helpers.

This module provides the exceptions raised by manifold operations, one per kind
of failure, and the validation utilities used by the explicit validity checks.

Error kinds:
    - Validation errors (``InvalidPointError``, ``InvalidTangentVectorError``,
      ``DimensionError``) are raised only by ``check_point``/``check_vector``.
    - Factorization failures (``CholeskyDecompositionError``) can surface from
      inside ``exp``/``log``/``inner`` when a matrix is not numerically positive definite.
    - Convergence failures (``OutOfInjectivityRadiusError``) come from iterative fallbacks.
    - ``UnsupportedOperationError`` is raised when neither a decorator nor the
      base manifold implements an operation.
"""

from typing import Any

import jax.numpy as jnp
from jaxtyping import Array


class ManifoldError(Exception):
    """Base exception for manifold-related errors."""

    pass


class DimensionError(ManifoldError):
    """Exception for dimension mismatches in manifold operations."""

    def __init__(self, message: str, expected: int | tuple | None = None, actual: int | tuple | None = None):
        """Initialize DimensionError with dimension information."""
        super().__init__(message)
        self.expected = expected
        self.actual = actual

    def __str__(self) -> str:
        """Return string representation with dimension information."""
        base_msg = super().__str__()
        if self.expected is not None and self.actual is not None:
            return f"{base_msg} (expected={self.expected}, actual={self.actual})"
        return base_msg


class InvalidPointError(ManifoldError):
    """Exception for points that do not lie on the manifold."""

    def __init__(
        self,
        message: str,
        point: Array | None = None,
        violated_constraint: str | None = None,
        constraint_value: float | None = None,
    ):
        """Initialize InvalidPointError with constraint violation information."""
        super().__init__(message)
        self.point = point
        self.violated_constraint = violated_constraint
        self.constraint_value = constraint_value


class InvalidTangentVectorError(ManifoldError):
    """Exception for tangent vectors that do not lie in the tangent space."""

    def __init__(
        self,
        message: str,
        tangent_vector: Array | None = None,
        base_point: Array | None = None,
        violated_constraint: str | None = None,
        constraint_value: float | None = None,
    ):
        """Initialize InvalidTangentVectorError with tangent space violation information."""
        super().__init__(message)
        self.tangent_vector = tangent_vector
        self.base_point = base_point
        self.violated_constraint = violated_constraint
        self.constraint_value = constraint_value


class NumericalStabilityError(ManifoldError):
    """Exception for numerical stability issues in manifold computations."""

    def __init__(
        self,
        message: str,
        condition_number: float | None = None,
        matrix_norm: float | None = None,
        recommended_action: str | None = None,
    ):
        """Initialize NumericalStabilityError with numerical diagnostics."""
        super().__init__(message)
        self.condition_number = condition_number
        self.matrix_norm = matrix_norm
        self.recommended_action = recommended_action


class CholeskyDecompositionError(NumericalStabilityError):
    """Error raised when a Cholesky factorization fails.

    This occurs when the matrix is not positive definite within floating-point
    precision, including matrices that passed validation but drifted during a
    computation.
    """

    def __init__(self, message: str, matrix: Array | None = None, **kwargs: Any) -> None:
        """Initialize the error with the matrix that failed to factor."""
        kwargs.setdefault("recommended_action", "Symmetrize the input or add a small multiple of the identity")
        super().__init__(message, **kwargs)
        self.matrix = matrix


class ConvergenceError(ManifoldError):
    """Exception for algorithms that fail to converge."""

    def __init__(
        self,
        message: str,
        max_iterations: int | None = None,
        final_error: float | None = None,
        tolerance: float | None = None,
    ):
        """Initialize ConvergenceError with algorithm convergence information."""
        super().__init__(message)
        self.max_iterations = max_iterations
        self.final_error = final_error
        self.tolerance = tolerance


class OutOfInjectivityRadiusError(ConvergenceError):
    """Raised when an inverse retraction cannot be solved for the given points.

    The target point is too far from the base point for the operation to be
    well-posed; this is not a defect of the retraction formula.
    """

    pass


class UnsupportedOperationError(ManifoldError, NotImplementedError):
    """Exception for operations no implementation is available for."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        manifold_type: str | None = None,
        decorator: Any = None,
    ):
        """Initialize UnsupportedOperationError with the failed lookup."""
        super().__init__(message)
        self.operation = operation
        self.manifold_type = manifold_type
        self.decorator = decorator


def validate_square(matrix: Array, n: int) -> None:
    """Validate that a matrix has shape (n, n).

    Raises:
        DimensionError: If the shape differs.
    """
    if matrix.ndim != 2 or matrix.shape != (n, n):
        raise DimensionError("Matrix has the wrong shape", expected=(n, n), actual=tuple(matrix.shape))


def symmetry_error(matrix: Array) -> float:
    """Largest absolute entry of ``matrix - matrix^H``."""
    return float(jnp.max(jnp.abs(matrix - jnp.conj(matrix.T))))


def validate_positive_definite(matrix: Array, tolerance: float = 1e-8) -> None:
    """Validate that a matrix is symmetric (Hermitian) positive definite.

    Args:
        matrix: Square matrix to validate
        tolerance: Tolerance for the symmetry check

    Raises:
        InvalidPointError: If the matrix is not symmetric or has a non-positive eigenvalue
    """
    sym_err = symmetry_error(matrix)
    if sym_err > tolerance:
        raise InvalidPointError(
            f"Matrix is not symmetric (error: {sym_err})",
            point=matrix,
            violated_constraint="symmetric",
            constraint_value=sym_err,
        )

    eigenvals = jnp.linalg.eigvalsh(matrix)
    min_eigenval = float(jnp.min(eigenvals))
    if not min_eigenval > 0:
        raise InvalidPointError(
            f"Matrix is not positive definite (smallest eigenvalue: {min_eigenval})",
            point=matrix,
            violated_constraint="positive_definite",
            constraint_value=min_eigenval,
        )


def validate_lower_triangular(matrix: Array, tolerance: float = 1e-12) -> None:
    """Validate that a matrix is lower triangular with a strictly positive real diagonal.

    Args:
        matrix: Square matrix to validate
        tolerance: Tolerance for entries above the diagonal and for imaginary diagonal parts

    Raises:
        InvalidPointError: If an entry above the diagonal is nonzero or a diagonal entry is not positive
    """
    upper = float(jnp.max(jnp.abs(jnp.triu(matrix, 1))))
    if upper > tolerance:
        raise InvalidPointError(
            f"Matrix is not lower triangular (largest upper entry: {upper})",
            point=matrix,
            violated_constraint="lower_triangular",
            constraint_value=upper,
        )

    diag = jnp.diagonal(matrix)
    imag = float(jnp.max(jnp.abs(jnp.imag(diag))))
    if imag > tolerance:
        raise InvalidPointError(
            f"Diagonal is not real (largest imaginary part: {imag})",
            point=matrix,
            violated_constraint="real_diagonal",
            constraint_value=imag,
        )

    min_diag = float(jnp.min(jnp.real(diag)))
    if not min_diag > 0:
        raise InvalidPointError(
            f"Diagonal is not positive (smallest entry: {min_diag})",
            point=matrix,
            violated_constraint="positive_diagonal",
            constraint_value=min_diag,
        )


def validate_dimensions_match(arrays: list[Array], operation: str) -> None:
    """Validate that arrays have identical shapes for an operation.

    Args:
        arrays: List of arrays to check
        operation: Name of operation for error reporting

    Raises:
        DimensionError: If shapes don't match
    """
    if len(arrays) < 2:
        return

    reference_shape = arrays[0].shape
    for i, array in enumerate(arrays[1:], 1):
        if array.shape != reference_shape:
            raise DimensionError(
                f"Shape mismatch in {operation} at array {i}", expected=reference_shape, actual=array.shape
            )


def ensure_finite(array: Array, operation: str) -> Array:
    """Raise if a concrete array holds NaN or Inf.

    Inside traced code (jit, vmap, grad) the array has no concrete value and is
    returned unchanged.

    Raises:
        NumericalStabilityError: If the array is concrete and not finite.
    """
    try:
        finite = bool(jnp.all(jnp.isfinite(array)))
    except TypeError:
        return array
    if not finite:
        raise NumericalStabilityError(
            f"Non-finite result in '{operation}'",
            recommended_action=f"Check the conditioning of the inputs to {operation}",
        )
    return array
