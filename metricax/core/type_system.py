"""Type system for MetricAX with JAX array helpers.

This module provides the type aliases used in signatures across the library and
a few small matrix helpers shared by the Cholesky engine and the manifolds.
"""

import jax.numpy as jnp
from jaxtyping import Array, Float, Inexact

# Type aliases for common manifold objects
ManifoldPoint = Inexact[Array, "... n n"]
"""Type alias for points on a matrix manifold (SPD matrix or Cholesky factor)."""

TangentVector = Inexact[Array, "... n n"]
"""Type alias for tangent vectors on a matrix manifold."""

CholeskyFactor = Inexact[Array, "... n n"]
"""Type alias for lower-triangular matrices with positive diagonal."""

Coordinates = Float[Array, "... dim"]
"""Type alias for coordinates of a tangent vector in an orthonormal basis."""

FIELDS = ("real", "complex")
"""Scalar fields a matrix manifold can be defined over."""


def adjoint(x: Array) -> Array:
    """Conjugate transpose over the last two axes (plain transpose for real input)."""
    return jnp.conj(jnp.swapaxes(x, -1, -2))


def strictly_lower(x: Array) -> Array:
    """Strictly lower-triangular part of x."""
    return jnp.tril(x, -1)


def diagonal_part(x: Array) -> Array:
    """Matrix holding only the diagonal of x."""
    return x * jnp.eye(x.shape[-1], dtype=x.dtype)


def with_diagonal(x: Array, d: Array) -> Array:
    """Strictly-lower part of x with d placed on the diagonal."""
    return strictly_lower(x) + d[..., None] * jnp.eye(x.shape[-1], dtype=x.dtype)


def real_diagonal(x: Array) -> Array:
    """Real part of the diagonal of x."""
    return jnp.real(jnp.diagonal(x, axis1=-2, axis2=-1))


def validate_field(field: str) -> str:
    """Validate a scalar field name.

    Args:
        field: Either "real" or "complex".

    Returns:
        The validated field name.

    Raises:
        ValueError: If field is not supported.
    """
    if field not in FIELDS:
        raise ValueError(f"Unsupported field '{field}', expected one of {FIELDS}")
    return field
