"""Abstract base class for Riemannian manifold implementations.

This module defines the capability interface of a manifold. Concrete manifolds
implement a subset of the primitive operations (inner product, exp, log,
parallel transport, basis conversion, ...); the derived operations (norm,
distance, retraction, geodesic, ...) are written in terms of the primitives on
``self`` so that a decorated manifold reuses them with its own primitives.
"""

import logging
from typing import Any

import jax.numpy as jnp
from jaxtyping import Array, PRNGKeyArray

from ..core.type_system import Coordinates, ManifoldPoint, TangentVector, validate_field
from .errors import DimensionError, InvalidPointError, InvalidTangentVectorError, UnsupportedOperationError
from .metrics import AffineConnection, Embedding, LeviCivitaConnection, RiemannianMetric

logger = logging.getLogger(__name__)


class Manifold:
    """Abstract base class for Riemannian manifolds of n x n matrices.

    Manifolds are immutable values: two instances of the same class with the
    same size and field compare equal and hash alike, which also makes them
    usable as static arguments of jitted methods.
    """

    def __init__(self, n: int, field: str = "real") -> None:
        """Initialize manifold base class.

        Args:
            n: Size of the matrices.
            field: Scalar field, "real" or "complex".
        """
        if not isinstance(n, int) or n < 1:
            raise ValueError(f"Matrix size must be a positive integer, got {n}")
        self._n = n
        self._field = validate_field(field)

    # Metric-independent queries

    @property
    def n(self) -> int:
        """Size of the matrices."""
        return self._n

    @property
    def field(self) -> str:
        """Scalar field the manifold is defined over."""
        return self._field

    @property
    def dimension(self) -> int:
        """Intrinsic dimension of the manifold."""
        raise UnsupportedOperationError(
            "Subclasses must define manifold dimension", operation="dimension", manifold_type=type(self).__name__
        )

    @property
    def ambient_dimension(self) -> int:
        """Real dimension of the space of n x n matrices."""
        return self.n * self.n * (2 if self.field == "complex" else 1)

    @property
    def representation_size(self) -> tuple[int, int]:
        """Shape of the arrays representing points and tangent vectors."""
        return (self.n, self.n)

    def check_point(self, p: ManifoldPoint, atol: float | None = None) -> None:
        """Raise if p is not a point on the manifold.

        Args:
            p: Point to validate.
            atol: Absolute tolerance for validation.

        Raises:
            DimensionError: If p has the wrong shape.
            InvalidPointError: If p violates a defining constraint.
        """
        raise UnsupportedOperationError(
            "Point validation not implemented", operation="check_point", manifold_type=type(self).__name__
        )

    def check_vector(self, p: ManifoldPoint, v: TangentVector, atol: float | None = None) -> None:
        """Raise if v is not a tangent vector at p.

        Args:
            p: Base point.
            v: Vector to validate.
            atol: Absolute tolerance for validation.

        Raises:
            DimensionError: If v has the wrong shape.
            InvalidTangentVectorError: If v violates a defining constraint.
        """
        raise UnsupportedOperationError(
            "Tangent validation not implemented", operation="check_vector", manifold_type=type(self).__name__
        )

    def is_point(self, p: ManifoldPoint, raise_error: bool = False, atol: float | None = None) -> bool:
        """Check whether p is a point on the manifold.

        Args:
            p: Point to validate.
            raise_error: Raise the validation error instead of returning False.
            atol: Absolute tolerance for validation.

        Returns:
            True if p is on the manifold, False otherwise.
        """
        try:
            self.check_point(jnp.asarray(p), atol=atol)
        except (InvalidPointError, DimensionError):
            if raise_error:
                raise
            return False
        return True

    def is_vector(
        self, p: ManifoldPoint, v: TangentVector, raise_error: bool = False, atol: float | None = None
    ) -> bool:
        """Check whether v is a tangent vector at the point p.

        The base point is validated first; an invalid base point makes every
        vector invalid.

        Args:
            p: Base point.
            v: Vector to validate.
            raise_error: Raise the validation error instead of returning False.
            atol: Absolute tolerance for validation.

        Returns:
            True if v is in the tangent space at p, False otherwise.
        """
        try:
            self.check_point(jnp.asarray(p), atol=atol)
            self.check_vector(jnp.asarray(p), jnp.asarray(v), atol=atol)
        except (InvalidPointError, InvalidTangentVectorError, DimensionError):
            if raise_error:
                raise
            return False
        return True

    def random_point(self, key: PRNGKeyArray, *shape: int) -> ManifoldPoint:
        """Generate random point(s) on the manifold.

        Args:
            key: JAX PRNG key.
            *shape: Shape of the output array of points.

        Returns:
            Random point(s) on the manifold with specified shape.
        """
        raise UnsupportedOperationError(
            "Random point generation not implemented", operation="random_point", manifold_type=type(self).__name__
        )

    def random_tangent(self, key: PRNGKeyArray, p: ManifoldPoint, *shape: int) -> TangentVector:
        """Generate random tangent vector(s) at point p.

        Args:
            key: JAX PRNG key.
            p: Point on the manifold.
            *shape: Shape of the output array of tangent vectors.

        Returns:
            Random tangent vector(s) at p with specified shape.
        """
        raise UnsupportedOperationError(
            "Random tangent generation not implemented",
            operation="random_tangent",
            manifold_type=type(self).__name__,
        )

    def zero_vector(self, p: ManifoldPoint) -> TangentVector:
        """Zero tangent vector at p."""
        return jnp.zeros_like(p)

    # Defaults used by decorated manifolds

    @property
    def default_metric(self) -> RiemannianMetric | None:
        """Metric the primitive operations of this class implement, if any."""
        return None

    @property
    def default_connection(self) -> AffineConnection | None:
        """Connection the exp, log and transport of this class implement, if any."""
        metric = self.default_metric
        return None if metric is None else LeviCivitaConnection(metric)

    @property
    def default_embedding(self) -> Embedding | None:
        """Embedding the projection operations of this class implement, if any."""
        return None

    def default_decoration(self, category: str) -> Any:
        """Default decoration of the given category ("metric", "connection" or "embedding")."""
        return {
            "metric": self.default_metric,
            "connection": self.default_connection,
            "embedding": self.default_embedding,
        }[category]

    # Embedding operations

    def proj(self, p: ManifoldPoint, v: Array) -> TangentVector:
        """Project a vector from ambient space to the tangent space at point p.

        Args:
            p: Point on the manifold.
            v: Vector in the ambient space to be projected.

        Returns:
            The projection of v onto the tangent space at p.
        """
        raise UnsupportedOperationError(
            "Subclasses must implement projection operation", operation="proj", manifold_type=type(self).__name__
        )

    def embed(self, p: ManifoldPoint) -> Array:
        """Embed a point into the ambient space (identity for matrix manifolds)."""
        return p

    def embed_vector(self, p: ManifoldPoint, v: TangentVector) -> Array:
        """Embed a tangent vector into the ambient space (identity for matrix manifolds)."""
        return v

    def project(self, a: Array) -> ManifoldPoint:
        """Project an ambient point onto the manifold."""
        raise UnsupportedOperationError(
            "Point projection not implemented", operation="project", manifold_type=type(self).__name__
        )

    # Metric primitives

    def inner(self, p: ManifoldPoint, u: TangentVector, v: TangentVector) -> Array:
        """Compute the Riemannian inner product between tangent vectors u and v at point p.

        Args:
            p: Point on the manifold.
            u: First tangent vector at p.
            v: Second tangent vector at p.

        Returns:
            The inner product <u, v>_p in the Riemannian metric.
        """
        raise UnsupportedOperationError(
            "Subclasses must implement Riemannian inner product", operation="inner", manifold_type=type(self).__name__
        )

    def exp(self, p: ManifoldPoint, v: TangentVector) -> ManifoldPoint:
        """Apply the exponential map to move from point p along tangent vector v.

        The exponential map takes a point p on the manifold and a tangent vector v at p,
        and returns the point on the manifold reached by following the geodesic in the
        direction of v for unit time.

        Args:
            p: Point on the manifold.
            v: Tangent vector at p.

        Returns:
            The point reached by following the geodesic from p in direction v.
        """
        raise UnsupportedOperationError(
            "Subclasses must implement exponential map", operation="exp", manifold_type=type(self).__name__
        )

    def log(self, p: ManifoldPoint, q: ManifoldPoint) -> TangentVector:
        """Apply the logarithmic map to find the tangent vector that maps p to q.

        The logarithmic map is the inverse of the exponential map. It takes two points
        p and q on the manifold and returns the tangent vector v at p such that the
        exponential map of v at p gives q.

        Args:
            p: Starting point on the manifold.
            q: Target point on the manifold.

        Returns:
            The tangent vector v at p such that exp(p, v) = q.
        """
        raise UnsupportedOperationError(
            "Subclasses must implement logarithmic map", operation="log", manifold_type=type(self).__name__
        )

    def transp(self, p: ManifoldPoint, v: TangentVector, q: ManifoldPoint) -> TangentVector:
        """Parallel transport v from the tangent space at p to the tangent space at q.

        Parallel transport moves a tangent vector along the geodesic from p to q
        while preserving its inner products.

        Args:
            p: Starting point on the manifold.
            v: Tangent vector at p to be transported.
            q: Target point on the manifold.

        Returns:
            The transported vector in the tangent space at q.
        """
        raise UnsupportedOperationError(
            "Subclasses must implement parallel transport", operation="transp", manifold_type=type(self).__name__
        )

    def dist(self, p: ManifoldPoint, q: ManifoldPoint) -> Array:
        """Compute the Riemannian distance between points p and q on the manifold.

        Args:
            p: First point on the manifold.
            q: Second point on the manifold.

        Returns:
            The geodesic distance between p and q.
        """
        v = self.log(p, q)
        return self.norm(p, v)

    def get_coordinates(self, p: ManifoldPoint, v: TangentVector) -> Coordinates:
        """Coordinates of v in the default orthonormal basis of the tangent space at p.

        Args:
            p: Point on the manifold.
            v: Tangent vector at p.

        Returns:
            Real coordinate vector of length ``dimension``.
        """
        raise UnsupportedOperationError(
            "Basis conversion not implemented", operation="get_coordinates", manifold_type=type(self).__name__
        )

    def get_vector(self, p: ManifoldPoint, c: Coordinates) -> TangentVector:
        """Tangent vector at p with coordinates c in the default orthonormal basis.

        Args:
            p: Point on the manifold.
            c: Real coordinate vector of length ``dimension``.

        Returns:
            The tangent vector at p.
        """
        raise UnsupportedOperationError(
            "Basis conversion not implemented", operation="get_vector", manifold_type=type(self).__name__
        )

    def injectivity_radius(self, p: ManifoldPoint | None = None) -> Array:
        """Compute the injectivity radius at point p (global radius if p is None).

        Args:
            p: Point on the manifold.

        Returns:
            The injectivity radius at p.
        """
        raise UnsupportedOperationError(
            "Injectivity radius computation not implemented",
            operation="injectivity_radius",
            manifold_type=type(self).__name__,
        )

    def is_flat(self) -> bool:
        """Whether the manifold has zero curvature under its metric."""
        raise UnsupportedOperationError(
            "Flatness query not implemented", operation="is_flat", manifold_type=type(self).__name__
        )

    # Derived operations

    def norm(self, p: ManifoldPoint, v: TangentVector) -> Array:
        """Compute the norm of tangent vector v at point p.

        Args:
            p: Point on the manifold.
            v: Tangent vector at p.

        Returns:
            The norm ||v||_p in the Riemannian metric.
        """
        return jnp.sqrt(jnp.maximum(self.inner(p, v, v), 0.0))

    def exp_fused(self, p: ManifoldPoint, v: TangentVector, t: float | Array) -> ManifoldPoint:
        """Exponential map of the scaled tangent vector ``t * v``."""
        return self.exp(p, t * v)

    def geodesic(self, p: ManifoldPoint, v: TangentVector, t: float | Array) -> ManifoldPoint:
        """Point at time t on the geodesic starting at p with velocity v."""
        return self.exp_fused(p, v, t)

    def retr(self, p: ManifoldPoint, v: TangentVector) -> ManifoldPoint:
        """Apply retraction to move from point p along tangent vector v.

        The default retraction is the exponential map.

        Args:
            p: Point on the manifold.
            v: Tangent vector at p.

        Returns:
            The point reached by the retraction from p in direction v.
        """
        return self.exp(p, v)

    def inverse_retr(self, p: ManifoldPoint, q: ManifoldPoint, method: str = "log", **solver_kwargs: Any) -> TangentVector:
        """Inverse of the retraction from p to q.

        Args:
            p: Base point.
            q: Target point.
            method: "log" uses the logarithmic map; "nlsolve" solves
                ``retr(p, X) = q`` numerically and works for any retraction.
            **solver_kwargs: Passed to ``nlsolve_inverse_retract`` when method is "nlsolve".

        Returns:
            Tangent vector X at p with ``retr(p, X) = q``.

        Raises:
            OutOfInjectivityRadiusError: If the nonlinear solve does not converge.
        """
        if method == "log":
            return self.log(p, q)
        if method == "nlsolve":
            logger.debug(f"Inverse retraction on {self!r} via nonlinear solve")
            from ..solvers.inverse_retraction import nlsolve_inverse_retract

            return nlsolve_inverse_retract(self, p, q, **solver_kwargs)
        raise ValueError(f"Unknown inverse retraction method '{method}'")

    # Value semantics

    def _key(self) -> tuple[Any, ...]:
        return (type(self), self.n, self.field)

    def __eq__(self, other: object) -> bool:
        """Manifolds are equal when class, size and field agree."""
        if not isinstance(other, Manifold):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        """String representation of the manifold."""
        if self.field == "real":
            return f"{self.__class__.__name__}({self.n})"
        return f"{self.__class__.__name__}({self.n}, field='{self.field}')"
