"""Change of representation between SPD matrices and their Cholesky factors.

Every SPD matrix ``p`` has a unique Cholesky factor ``x`` (lower triangular,
positive diagonal) with ``p = x x^T``. This module maps points and tangent
vectors across that bijection:

- ``point_to_factor(p) -> x`` and ``factor_to_point(x) -> p``
- ``tangent_point_to_factor(p, X) -> (x, W)``: pulls a symmetric tangent ``X``
  at ``p`` back to a tangent ``W = x (⌊w⌋ + diag(w)/2)`` at ``x``, where
  ``w = x^{-1} X x^{-T}`` and ``⌊w⌋`` is its strictly lower part.
- ``tangent_factor_to_point(x, W) -> X = W x^T + x W^T``

The two tangent maps are mutually inverse. For complex (Hermitian) input every
transpose is a conjugate transpose.

The factorizations run through ``jnp.linalg.cholesky``, which returns NaN
instead of raising. A matrix that is not symmetric (Hermitian) within
``NumericalConstants.SYMMETRY_TOLERANCE``, relative to its largest entry, also
factors to NaN rather than to the factor of its symmetric part. The checked
methods of ``CholeskyEngine`` turn such a factor into a
``CholeskyDecompositionError``.
"""

import jax.numpy as jnp
from jax import Array
from jax.scipy.linalg import solve_triangular

from ..core.constants import NumericalConstants
from ..core.jit_decorator import jit_optimized
from ..core.jit_manager import JITManager
from ..core.type_system import CholeskyFactor, ManifoldPoint, TangentVector, adjoint, diagonal_part, strictly_lower
from .errors import CholeskyDecompositionError


@jit_optimized()
def _cholesky(p: Array) -> Array:
    """Cholesky factor of p, or NaN where p is not Hermitian."""
    asymmetry = jnp.max(jnp.abs(p - adjoint(p)), axis=(-2, -1))
    scale = jnp.maximum(jnp.max(jnp.abs(p), axis=(-2, -1)), 1.0)
    x = jnp.linalg.cholesky(p)
    return jnp.where((asymmetry > NumericalConstants.SYMMETRY_TOLERANCE * scale)[..., None, None], jnp.nan, x)


@jit_optimized()
def _factor_to_point(x: Array) -> Array:
    return x @ adjoint(x)


@jit_optimized()
def _pull_back_tangent(x: Array, X: Array) -> Array:
    """``x (⌊w⌋ + diag(w)/2)`` with ``w = x^{-1} X x^{-H}``, via two triangular solves."""
    x_inv_X = solve_triangular(x, X, lower=True)
    w = adjoint(solve_triangular(x, adjoint(x_inv_X), lower=True))
    return x @ (strictly_lower(w) + 0.5 * diagonal_part(w))


@jit_optimized()
def _push_forward_tangent(x: Array, W: Array) -> Array:
    return W @ adjoint(x) + x @ adjoint(W)


class CholeskyEngine:
    """Bijection between SPD matrices and Cholesky-space points and tangents.

    The engine is stateless; the class groups the four maps and the factor
    check so that operator sets can hold a single instance.
    """

    def check_factor(self, x: CholeskyFactor, p: ManifoldPoint | None = None) -> CholeskyFactor:
        """Raise if a Cholesky factor is not finite.

        The check needs concrete values, so it is skipped inside traced code and
        when ``check_finite`` is disabled.

        Args:
            x: Factor returned by the factorization.
            p: Matrix that was factored, attached to the error.

        Returns:
            The factor unchanged.

        Raises:
            CholeskyDecompositionError: If x contains NaN or Inf.
        """
        if not JITManager.get("check_finite"):
            return x
        try:
            finite = bool(jnp.all(jnp.isfinite(x)))
        except TypeError:
            return x
        if not finite:
            raise CholeskyDecompositionError(
                "Cholesky factorization failed: matrix is not symmetric positive definite", matrix=p
            )
        return x

    def point_to_factor(self, p: ManifoldPoint) -> CholeskyFactor:
        """Cholesky factor of an SPD matrix.

        Args:
            p: Symmetric positive definite matrix, shape (n, n).

        Returns:
            Lower-triangular x with positive diagonal and ``x x^T = p``.

        Raises:
            CholeskyDecompositionError: If p is not symmetric or not positive definite.

        Examples:
            >>> engine = CholeskyEngine()
            >>> x = engine.point_to_factor(4.0 * jnp.eye(2))
            >>> bool(jnp.allclose(x, 2.0 * jnp.eye(2)))
            True
        """
        return self.check_factor(_cholesky(p), p)

    def factor_to_point(self, x: CholeskyFactor) -> ManifoldPoint:
        """SPD matrix ``x x^T`` of a Cholesky factor."""
        return _factor_to_point(x)

    def tangent_point_to_factor(
        self, p: ManifoldPoint, X: TangentVector, x: CholeskyFactor | None = None
    ) -> tuple[CholeskyFactor, TangentVector]:
        """Pull a tangent vector at an SPD matrix back to Cholesky space.

        Args:
            p: Base point on SPD.
            X: Symmetric tangent vector at p.
            x: Cholesky factor of p if already computed. Passing it avoids a second
                factorization and guarantees that several tangents are pulled back
                through the same factor.

        Returns:
            Tuple (x, W) of the factor of p and the tangent at x.

        Raises:
            CholeskyDecompositionError: If x is not given and p is not symmetric positive definite.
        """
        if x is None:
            x = self.point_to_factor(p)
        return x, _pull_back_tangent(x, X)

    def tangent_factor_to_point(self, x: CholeskyFactor, W: TangentVector) -> TangentVector:
        """Push a Cholesky-space tangent at x forward to the SPD tangent space at ``x x^T``."""
        return _push_forward_tangent(x, W)
