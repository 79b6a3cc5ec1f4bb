"""Implementation of Cholesky space.

Cholesky space is the set of n x n lower-triangular matrices with strictly
positive diagonal. Under the Log-Cholesky metric it is the product of a flat
Euclidean space (strictly lower entries) and n copies of the positive reals
with the log-Euclidean metric (diagonal entries), so it is a flat manifold and
every operation has a closed form acting entrywise:

- inner:  ``<V, W>_x = Σ_{i>j} V_ij W_ij + Σ_i V_ii W_ii / x_ii²``
- exp:    ``⌊x⌋ + ⌊V⌋ + diag(x_ii exp(V_ii / x_ii))``
- log:    ``⌊y⌋ - ⌊x⌋ + diag(x_ii log(y_ii / x_ii))``
- dist:   ``sqrt(‖⌊y⌋ - ⌊x⌋‖_F² + ‖log diag(y) - log diag(x)‖²)``
- transp: ``⌊V⌋ + diag(V_ii y_ii / x_ii)``

where ``⌊·⌋`` is the strictly lower-triangular part. The strictly upper part of
a tangent vector carries no meaning and is ignored by all operations.

No operation validates its inputs; ``check_point`` and ``check_vector`` do.
"""

import jax.numpy as jnp
import jax.random as jr
from jax import Array

from ..core.constants import NumericalConstants
from ..core.jit_decorator import jit_optimized
from ..core.type_system import real_diagonal, strictly_lower, with_diagonal
from .base import Manifold
from .errors import validate_lower_triangular, validate_square
from .metrics import Embedding, LogCholeskyMetric


class CholeskySpace(Manifold):
    """Manifold of lower-triangular matrices with positive diagonal.

    Points are lower-triangular n x n matrices with a strictly positive (real)
    diagonal; tangent vectors are n x n matrices whose lower-triangular part
    carries the direction.

    Examples:
        >>> space = CholeskySpace(3)
        >>> x = jnp.eye(3)
        >>> v = jnp.tril(jnp.ones((3, 3)))
        >>> bool(jnp.allclose(space.log(x, space.exp(x, v)), v))
        True
    """

    def __init__(self, n: int, field: str = "real") -> None:
        """Initialize Cholesky space.

        Args:
            n: Size of the matrices (n x n).
            field: Scalar field, "real" or "complex". Over the complex field the
                diagonal stays real and the strictly lower entries are complex.
        """
        super().__init__(n, field)

    @property
    def dimension(self) -> int:
        """Intrinsic dimension: diagonal plus strictly lower entries."""
        if self.field == "complex":
            return self.n * self.n
        return self.n * (self.n + 1) // 2

    @property
    def default_metric(self) -> LogCholeskyMetric:
        return LogCholeskyMetric()

    @property
    def default_embedding(self) -> Embedding:
        return Embedding()

    def check_point(self, x: Array, atol: float | None = None) -> None:
        validate_square(x, self.n)
        validate_lower_triangular(x, NumericalConstants.TRIANGULARITY_TOLERANCE if atol is None else atol)

    def check_vector(self, x: Array, v: Array, atol: float | None = None) -> None:
        # Any square matrix is a tangent vector; the upper part is ignored.
        validate_square(v, self.n)

    @jit_optimized(static_args=(0,))
    def proj(self, x: Array, v: Array) -> Array:
        """Lower-triangular part of v."""
        return jnp.tril(v)

    @jit_optimized(static_args=(0,))
    def inner(self, x: Array, u: Array, v: Array) -> Array:
        """Riemannian inner product of the tangent vectors u and v at x.

        Args:
            x: Point in Cholesky space.
            u: First tangent vector at x.
            v: Second tangent vector at x.

        Returns:
            Real scalar inner product.
        """
        lower = jnp.sum(jnp.real(jnp.conj(strictly_lower(u)) * strictly_lower(v)), axis=(-2, -1))
        u_diag = jnp.diagonal(u, axis1=-2, axis2=-1)
        v_diag = jnp.diagonal(v, axis1=-2, axis2=-1)
        diag = jnp.sum(jnp.real(jnp.conj(u_diag) * v_diag) / real_diagonal(x) ** 2, axis=-1)
        return lower + diag

    @jit_optimized(static_args=(0,))
    def exp(self, x: Array, v: Array) -> Array:
        """Exponential map: linear off the diagonal, multiplicative on it.

        Args:
            x: Point in Cholesky space.
            v: Tangent vector at x.

        Returns:
            The end point of the geodesic from x with initial velocity v.
        """
        x_diag = real_diagonal(x)
        new_diag = x_diag * jnp.exp(real_diagonal(v) / x_diag)
        return with_diagonal(x + v, new_diag.astype(x.dtype))

    @jit_optimized(static_args=(0,))
    def log(self, x: Array, y: Array) -> Array:
        """Logarithmic map, the inverse of ``exp``.

        Args:
            x: Starting point in Cholesky space.
            y: Target point in Cholesky space.

        Returns:
            Lower-triangular tangent vector at x pointing to y.
        """
        x_diag = real_diagonal(x)
        new_diag = x_diag * jnp.log(real_diagonal(y) / x_diag)
        return with_diagonal(y - x, new_diag.astype(x.dtype))

    @jit_optimized(static_args=(0,))
    def dist(self, x: Array, y: Array) -> Array:
        """Geodesic distance between x and y.

        Args:
            x: First point in Cholesky space.
            y: Second point in Cholesky space.

        Returns:
            Non-negative scalar distance.
        """
        lower_sq = jnp.sum(jnp.abs(strictly_lower(y) - strictly_lower(x)) ** 2, axis=(-2, -1))
        log_diag = jnp.log(real_diagonal(y)) - jnp.log(real_diagonal(x))
        return jnp.sqrt(lower_sq + jnp.sum(log_diag**2, axis=-1))

    @jit_optimized(static_args=(0,))
    def transp(self, x: Array, v: Array, y: Array) -> Array:
        """Parallel transport of v from x to y.

        The strictly lower part is kept; the diagonal is rescaled by ``y_ii / x_ii``.

        Args:
            x: Starting point.
            v: Tangent vector at x.
            y: Target point.

        Returns:
            The transported tangent vector at y.
        """
        scale = real_diagonal(y) / real_diagonal(x)
        return with_diagonal(v, jnp.diagonal(v, axis1=-2, axis2=-1) * scale)

    @jit_optimized(static_args=(0,))
    def get_coordinates(self, x: Array, v: Array) -> Array:
        """Coordinates of v in the orthonormal basis at x.

        The first n coordinates are ``v_ii / x_ii``; the remaining ones are the
        strictly lower entries in row-major order (real parts followed by
        imaginary parts over the complex field).
        """
        rows, cols = jnp.tril_indices(self.n, -1)
        diag_coords = real_diagonal(v) / real_diagonal(x)
        lower = v[..., rows, cols]
        if self.field == "complex":
            return jnp.concatenate([diag_coords, jnp.real(lower), jnp.imag(lower)], axis=-1)
        return jnp.concatenate([diag_coords, lower], axis=-1)

    @jit_optimized(static_args=(0,))
    def get_vector(self, x: Array, c: Array) -> Array:
        """Lower-triangular tangent vector at x with orthonormal coordinates c."""
        n = self.n
        rows, cols = jnp.tril_indices(n, -1)
        n_lower = rows.shape[0]
        lower = c[..., n : n + n_lower]
        if self.field == "complex":
            lower = lower + 1j * c[..., n + n_lower :]
        v = jnp.zeros(c.shape[:-1] + (n, n), dtype=lower.dtype if n_lower else c.dtype)
        v = v.at[..., rows, cols].set(lower)
        return with_diagonal(v, (c[..., :n] * real_diagonal(x)).astype(v.dtype))

    def injectivity_radius(self, x: Array | None = None) -> Array:
        """Infinite: exp is a global diffeomorphism."""
        return jnp.asarray(jnp.inf)

    def is_flat(self) -> bool:
        """Cholesky space is flat."""
        return True

    def random_point(self, key: Array, *shape: int) -> Array:
        """Generate random point(s) in Cholesky space.

        Strictly lower entries are standard normal; diagonal entries are
        log-normal, hence positive.

        Args:
            key: JAX PRNG key.
            *shape: Shape of the output array of points.

        Returns:
            Random lower-triangular matrices with shape (*shape, n, n).
        """
        key_lower, key_diag, key_imag = jr.split(key, 3)
        full_shape = (*shape, self.n, self.n)
        lower = jr.normal(key_lower, full_shape)
        if self.field == "complex":
            lower = lower + 1j * jr.normal(key_imag, full_shape)
        diag = jnp.exp(jr.normal(key_diag, (*shape, self.n)))
        return with_diagonal(lower, diag.astype(lower.dtype))

    def random_tangent(self, key: Array, x: Array, *shape: int) -> Array:
        """Generate random lower-triangular tangent vector(s) at x."""
        key_real, key_imag = jr.split(key)
        full_shape = (*shape, self.n, self.n)
        v = jr.normal(key_real, full_shape)
        if self.field == "complex":
            v = strictly_lower(v + 1j * jr.normal(key_imag, full_shape)) + v * jnp.eye(self.n)
        return jnp.tril(v)
