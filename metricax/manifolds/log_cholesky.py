"""Log-Cholesky metric on symmetric positive definite matrices.

The Log-Cholesky metric of Lin (2019) pulls the metric of ``CholeskySpace``
back to SPD matrices through the Cholesky factorization. Every operation here
factors its SPD arguments with ``CholeskyEngine``, runs the closed-form
Cholesky-space operation and maps the result back:

- dist:   ``d(p, q) = d_C(x, y)`` for the factors x of p and y of q
- exp:    ``exp_p X = z z^T`` with ``z = exp_C(x, W)`` and ``(x, W)`` the pull-back of (p, X)
- log:    ``log_p q = x W^T + W x^T`` with ``W = log_C(x, y)``
- inner:  ``<X, Y>_p = <W_X, W_Y>_x`` with both tangents pulled back through the same factor
- transp: ``y V^T + V y^T`` with ``V`` the Cholesky-space transport of W from x to y

The metric makes SPD flat and geodesically complete.

Examples:
    >>> M = MetricManifold(SymmetricPositiveDefinite(2), LogCholeskyMetric())
    >>> p = 2.0 * jnp.eye(2)
    >>> q = M.exp(p, jnp.eye(2))
    >>> bool(jnp.allclose(M.log(p, q), jnp.eye(2), atol=1e-5))
    True
"""

import jax.numpy as jnp
from jax import Array

from ..core.jit_manager import JITManager
from .cholesky_engine import CholeskyEngine
from .cholesky_space import CholeskySpace
from .decorators import OperatorSet, register_operators
from .errors import ensure_finite
from .metrics import LogCholeskyMetric
from .spd import SymmetricPositiveDefinite


@register_operators(SymmetricPositiveDefinite, LogCholeskyMetric)
class LogCholeskyOperators(OperatorSet):
    """Operations of the Log-Cholesky metric on ``SymmetricPositiveDefinite``.

    Factorization failures raise ``CholeskyDecompositionError`` and non-finite
    results raise ``NumericalStabilityError`` while ``check_finite`` is enabled
    and the inputs are concrete.
    """

    def __init__(self, manifold: SymmetricPositiveDefinite, decoration: LogCholeskyMetric) -> None:
        super().__init__(manifold, decoration)
        self.space = CholeskySpace(manifold.n, manifold.field)
        self.engine = CholeskyEngine()

    def _checked(self, result: Array, operation: str) -> Array:
        if JITManager.get("check_finite"):
            return ensure_finite(result, operation)
        return result

    def dist(self, p: Array, q: Array) -> Array:
        """Distance of the Cholesky factors of p and q in Cholesky space."""
        x = self.engine.point_to_factor(p)
        y = self.engine.point_to_factor(q)
        return self._checked(self.space.dist(x, y), "dist")

    def exp(self, p: Array, X: Array) -> Array:
        """Exponential map at p in the direction X."""
        x, W = self.engine.tangent_point_to_factor(p, X)
        z = self.space.exp(x, W)
        return self._checked(self.engine.factor_to_point(z), "exp")

    def log(self, p: Array, q: Array) -> Array:
        """Logarithmic map at p towards q."""
        x = self.engine.point_to_factor(p)
        y = self.engine.point_to_factor(q)
        W = self.space.log(x, y)
        return self._checked(self.engine.tangent_factor_to_point(x, W), "log")

    def inner(self, p: Array, X: Array, Y: Array) -> Array:
        """Inner product of X and Y at p.

        p is factored once; both tangents are pulled back through that factor.
        """
        z, Xz = self.engine.tangent_point_to_factor(p, X)
        _, Yz = self.engine.tangent_point_to_factor(p, Y, x=z)
        return self._checked(self.space.inner(z, Xz, Yz), "inner")

    def transp(self, p: Array, X: Array, q: Array) -> Array:
        """Parallel transport of X from p to q."""
        y = self.engine.point_to_factor(q)
        x, W = self.engine.tangent_point_to_factor(p, X)
        V = self.space.transp(x, W, y)
        return self._checked(self.engine.tangent_factor_to_point(y, V), "transp")

    def get_coordinates(self, p: Array, X: Array) -> Array:
        """Orthonormal coordinates of X, read off the pulled-back tangent in Cholesky space."""
        x, W = self.engine.tangent_point_to_factor(p, X)
        return self._checked(self.space.get_coordinates(x, W), "get_coordinates")

    def get_vector(self, p: Array, c: Array) -> Array:
        """Tangent vector at p with orthonormal coordinates c."""
        y = self.engine.point_to_factor(p)
        W = self.space.get_vector(y, c)
        return self._checked(self.engine.tangent_factor_to_point(y, W), "get_vector")

    def injectivity_radius(self, p: Array | None = None) -> Array:
        return jnp.asarray(jnp.inf)

    def is_flat(self) -> bool:
        """Always true: the Log-Cholesky metric has zero curvature for every n."""
        return True
