"""Implementation of the Symmetric Positive Definite (SPD) manifold.

This module provides the base SPD manifold: its validity predicates, which do
not depend on the metric, and the operations of its default affine-invariant
metric. Other metrics, such as the Log-Cholesky metric, are attached by
decorating this manifold (see ``metricax.manifolds.decorators``).
"""

import jax.numpy as jnp
import jax.random as jr
from jax import Array

from ..core.constants import NumericalConstants
from ..core.jit_decorator import jit_optimized
from ..core.type_system import adjoint
from .base import Manifold
from .errors import InvalidTangentVectorError, symmetry_error, validate_positive_definite, validate_square
from .metrics import AffineInvariantMetric, Embedding


def _eigh_apply(x: Array, fn) -> Array:
    """Apply a scalar function to the eigenvalues of a Hermitian matrix.

    For Hermitian X = Q @ diag(λ) @ Q^H this returns Q @ diag(fn(λ)) @ Q^H.
    """
    eigenvals, eigenvecs = jnp.linalg.eigh(x)
    return (eigenvecs * fn(eigenvals)[..., None, :].astype(eigenvecs.dtype)) @ adjoint(eigenvecs)


def _matrix_log(x: Array) -> Array:
    """Compute matrix logarithm using eigendecomposition for SPD matrices."""
    # Ensure all eigenvalues are positive (numerical stability)
    return _eigh_apply(x, lambda w: jnp.log(jnp.maximum(w, NumericalConstants.HIGH_PRECISION_EPSILON)))


def _matrix_exp(x: Array) -> Array:
    """Compute matrix exponential of a symmetric matrix using eigendecomposition."""
    return _eigh_apply(x, jnp.exp)


def _matrix_sqrt_and_inv_sqrt(x: Array) -> tuple[Array, Array]:
    """Compute x^(1/2) and x^(-1/2) from a single eigendecomposition."""
    eigenvals, eigenvecs = jnp.linalg.eigh(x)
    eigenvals = jnp.maximum(eigenvals, NumericalConstants.HIGH_PRECISION_EPSILON)
    sqrt_eigenvals = jnp.sqrt(eigenvals)[..., None, :].astype(eigenvecs.dtype)
    x_sqrt = (eigenvecs * sqrt_eigenvals) @ adjoint(eigenvecs)
    x_inv_sqrt = (eigenvecs / sqrt_eigenvals) @ adjoint(eigenvecs)
    return x_sqrt, x_inv_sqrt


def _hermitian_part(v: Array) -> Array:
    return 0.5 * (v + adjoint(v))


class SymmetricPositiveDefinite(Manifold):
    """Symmetric Positive Definite manifold SPD(n) with affine-invariant metric.

    The manifold of nxn symmetric positive definite matrices:
    SPD(n) = {X ∈ R^(nxn) : X = X^T, X ≻ 0}

    Over the complex field the points are Hermitian positive definite matrices.
    The native operations implement the affine-invariant metric
    ``<U, V>_P = tr(P^{-1} U P^{-1} V)``, which makes the manifold complete with
    non-positive curvature.
    """

    def __init__(self, n: int, field: str = "real") -> None:
        """Initialize the SPD manifold.

        Args:
            n: Size of the matrices (nxn).
            field: Scalar field, "real" or "complex".
        """
        super().__init__(n, field)

    @property
    def dimension(self) -> int:
        """Dimension of the space of symmetric (Hermitian) matrices."""
        if self.field == "complex":
            return self.n * self.n
        return self.n * (self.n + 1) // 2

    @property
    def default_metric(self) -> AffineInvariantMetric:
        return AffineInvariantMetric()

    @property
    def default_embedding(self) -> Embedding:
        return Embedding()

    def check_point(self, x: Array, atol: float | None = None) -> None:
        """Raise if x is not a symmetric positive definite n x n matrix.

        Symmetry is checked up to ``atol``; positive definiteness requires the
        smallest eigenvalue to be strictly positive.

        Raises:
            DimensionError: If x is not n x n.
            InvalidPointError: If x is not symmetric or not positive definite.
        """
        validate_square(x, self.n)
        validate_positive_definite(x, NumericalConstants.SYMMETRY_TOLERANCE if atol is None else atol)

    def check_vector(self, x: Array, v: Array, atol: float | None = None) -> None:
        """Raise if v is not a symmetric n x n matrix.

        Raises:
            DimensionError: If v is not n x n.
            InvalidTangentVectorError: If v is not symmetric.
        """
        validate_square(v, self.n)
        tolerance = NumericalConstants.SYMMETRY_TOLERANCE if atol is None else atol
        sym_err = symmetry_error(v)
        if sym_err > tolerance:
            raise InvalidTangentVectorError(
                f"Tangent vector is not symmetric (error: {sym_err})",
                tangent_vector=v,
                base_point=x,
                violated_constraint="symmetric",
                constraint_value=sym_err,
            )

    @jit_optimized(static_args=(0,))
    def proj(self, x: Array, v: Array) -> Array:
        """Project matrix v onto the tangent space of SPD at point x.

        The tangent space at x consists of symmetric matrices, so the
        projection is the symmetric part: proj_x(v) = (v + v^T) / 2

        Args:
            x: Point on SPD manifold (nxn symmetric positive definite matrix).
            v: Matrix in the ambient space R^(nxn).

        Returns:
            The projection of v onto the tangent space at x.
        """
        return _hermitian_part(v)

    @jit_optimized(static_args=(0,))
    def project(self, a: Array) -> Array:
        """Nearest SPD matrix to the symmetric part of a, with eigenvalues clamped from below."""
        return _eigh_apply(_hermitian_part(a), lambda w: jnp.maximum(w, NumericalConstants.EPSILON))

    @jit_optimized(static_args=(0,))
    def exp(self, x: Array, v: Array) -> Array:
        """Apply the exponential map to move from point x along tangent vector v.

        For the affine-invariant metric on SPD:
        exp_x(v) = x^(1/2) @ expm(x^(-1/2) @ v @ x^(-1/2)) @ x^(1/2)

        Args:
            x: Point on SPD manifold.
            v: Tangent vector at x.

        Returns:
            The point reached by following the geodesic from x in direction v.
        """
        x_sqrt, x_inv_sqrt = _matrix_sqrt_and_inv_sqrt(x)
        exp_v = _matrix_exp(_hermitian_part(x_inv_sqrt @ v @ x_inv_sqrt))
        return _hermitian_part(x_sqrt @ exp_v @ x_sqrt)

    @jit_optimized(static_args=(0,))
    def log(self, x: Array, y: Array) -> Array:
        """Apply the logarithmic map to find the tangent vector from x to y.

        For the affine-invariant metric on SPD:
        log_x(y) = x^(1/2) @ logm(x^(-1/2) @ y @ x^(-1/2)) @ x^(1/2)

        Args:
            x: Starting point on SPD manifold.
            y: Target point on SPD manifold.

        Returns:
            The tangent vector v at x such that exp_x(v) = y.
        """
        x_sqrt, x_inv_sqrt = _matrix_sqrt_and_inv_sqrt(x)
        log_y = _matrix_log(_hermitian_part(x_inv_sqrt @ y @ x_inv_sqrt))
        return _hermitian_part(x_sqrt @ log_y @ x_sqrt)

    @jit_optimized(static_args=(0,))
    def inner(self, x: Array, u: Array, v: Array) -> Array:
        """Compute the Riemannian inner product between tangent vectors u and v.

        For the affine-invariant metric:
        <u, v>_x = tr(x^(-1) @ u @ x^(-1) @ v)

        Args:
            x: Point on SPD manifold.
            u: First tangent vector at x.
            v: Second tangent vector at x.

        Returns:
            The (real) inner product <u, v>_x.
        """
        _, x_inv_sqrt = _matrix_sqrt_and_inv_sqrt(x)
        u_white = x_inv_sqrt @ u @ x_inv_sqrt
        v_white = x_inv_sqrt @ v @ x_inv_sqrt
        return jnp.real(jnp.trace(u_white @ v_white, axis1=-2, axis2=-1))

    @jit_optimized(static_args=(0,))
    def dist(self, x: Array, y: Array) -> Array:
        """Compute the Riemannian distance between points x and y.

        For the affine-invariant metric:
        d(x, y) = ||logm(x^(-1/2) @ y @ x^(-1/2))||_F

        Args:
            x: First point on SPD manifold.
            y: Second point on SPD manifold.

        Returns:
            The geodesic distance between x and y.
        """
        _, x_inv_sqrt = _matrix_sqrt_and_inv_sqrt(x)
        eigenvals = jnp.linalg.eigvalsh(_hermitian_part(x_inv_sqrt @ y @ x_inv_sqrt))
        log_eigenvals = jnp.log(jnp.maximum(eigenvals, NumericalConstants.HIGH_PRECISION_EPSILON))
        return jnp.sqrt(jnp.sum(log_eigenvals**2, axis=-1))

    @jit_optimized(static_args=(0,))
    def transp(self, x: Array, v: Array, y: Array) -> Array:
        """Closed-form parallel transport of v from x to y along the geodesic.

        With S = x^{-1/2} y x^{-1/2} and E = x^{1/2} S^{1/2} x^{-1/2}:
        P_{x→y}(v) = E @ v @ E^T

        Args:
            x: Starting point on SPD manifold.
            v: Tangent vector at x to be transported.
            y: Target point on SPD manifold.

        Returns:
            The transported vector in the tangent space at y.
        """
        x_sqrt, x_inv_sqrt = _matrix_sqrt_and_inv_sqrt(x)
        s_sqrt, _ = _matrix_sqrt_and_inv_sqrt(_hermitian_part(x_inv_sqrt @ y @ x_inv_sqrt))
        transport = x_sqrt @ s_sqrt @ x_inv_sqrt
        return _hermitian_part(transport @ v @ adjoint(transport))

    @jit_optimized(static_args=(0,))
    def get_coordinates(self, x: Array, v: Array) -> Array:
        """Coordinates of v in the affine-invariant orthonormal basis at x.

        The whitened vector S = x^{-1/2} v x^{-1/2} is read off as its diagonal
        followed by sqrt(2) times its strictly lower entries in row-major order
        (real parts, then imaginary parts over the complex field).
        """
        _, x_inv_sqrt = _matrix_sqrt_and_inv_sqrt(x)
        s = x_inv_sqrt @ v @ x_inv_sqrt
        rows, cols = jnp.tril_indices(self.n, -1)
        diag = jnp.real(jnp.diagonal(s, axis1=-2, axis2=-1))
        lower = jnp.sqrt(2.0) * s[..., rows, cols]
        if self.field == "complex":
            return jnp.concatenate([diag, jnp.real(lower), jnp.imag(lower)], axis=-1)
        return jnp.concatenate([diag, lower], axis=-1)

    @jit_optimized(static_args=(0,))
    def get_vector(self, x: Array, c: Array) -> Array:
        """Tangent vector at x with coordinates c in the affine-invariant orthonormal basis."""
        n = self.n
        x_sqrt, _ = _matrix_sqrt_and_inv_sqrt(x)
        rows, cols = jnp.tril_indices(n, -1)
        n_lower = rows.shape[0]
        lower = c[..., n : n + n_lower] / jnp.sqrt(2.0)
        if self.field == "complex":
            lower = lower + 1j * c[..., n + n_lower :] / jnp.sqrt(2.0)
        s_lower = jnp.zeros(c.shape[:-1] + (n, n), dtype=x_sqrt.dtype).at[..., rows, cols].set(lower)
        s = s_lower + adjoint(s_lower) + c[..., :n, None] * jnp.eye(n, dtype=x_sqrt.dtype)
        return _hermitian_part(x_sqrt @ s @ x_sqrt)

    def injectivity_radius(self, x: Array | None = None) -> Array:
        """Infinite: SPD is a Hadamard manifold under the affine-invariant metric."""
        return jnp.asarray(jnp.inf)

    def is_flat(self) -> bool:
        """The affine-invariant metric is curved for n >= 2."""
        return self.n == 1

    def random_point(self, key: Array, *shape: int) -> Array:
        """Generate random point(s) on the SPD manifold.

        Generates SPD matrices as A @ A^T + I, which keeps every eigenvalue at
        least 1.

        Args:
            key: JAX PRNG key.
            *shape: Shape of the output array of points.

        Returns:
            Random SPD matrix/matrices with shape (*shape, n, n).
        """
        key_real, key_imag = jr.split(key)
        full_shape = (*shape, self.n, self.n)
        A = jr.normal(key_real, full_shape)
        if self.field == "complex":
            A = A + 1j * jr.normal(key_imag, full_shape)
        return A @ adjoint(A) + jnp.eye(self.n, dtype=A.dtype)

    def random_tangent(self, key: Array, x: Array, *shape: int) -> Array:
        """Generate random symmetric tangent vector(s) at point x.

        Args:
            key: JAX PRNG key.
            x: Point on SPD manifold.
            *shape: Shape of the output array of tangent vectors.

        Returns:
            Random tangent vector(s) at x with shape (*shape, n, n).
        """
        key_real, key_imag = jr.split(key)
        full_shape = (*shape, self.n, self.n)
        v_raw = jr.normal(key_real, full_shape)
        if self.field == "complex":
            v_raw = v_raw + 1j * jr.normal(key_imag, full_shape)
        return _hermitian_part(v_raw)
