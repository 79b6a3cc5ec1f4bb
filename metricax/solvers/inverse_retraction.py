"""Inverse retraction by nonlinear root finding.

When a retraction has no closed-form inverse, the tangent vector X at p with
``retr(p, X) = q`` is found numerically with Optimistix's Newton solver. The
solve is only well-posed when q is close enough to p; a solve that does not
converge raises ``OutOfInjectivityRadiusError`` instead of returning an
inaccurate vector.

Key components:
- RetractionResidual: the residual ``retr(p, proj(p, X)) - q`` as an Optimistix function
- nlsolve_inverse_retract: the solver entry point used by ``Manifold.inverse_retr``
"""

import logging
from collections.abc import Callable
from typing import Any

import equinox as eqx
import jax.numpy as jnp
import optimistix as optx
from jaxtyping import Array

from ..core.constants import SolverDefaults
from ..manifolds.base import Manifold
from ..manifolds.errors import OutOfInjectivityRadiusError

logger = logging.getLogger(__name__)


class RetractionResidual(eqx.Module):
    """Residual of ``retr(p, X) = q`` in Optimistix format ``fn(y, args)``.

    The unknown X is projected onto the tangent space at p before retracting.
    The component that projection discards is added back to the residual, so
    the Jacobian stays invertible on the full ambient space and that component
    is driven to zero.
    """

    manifold: Manifold = eqx.field(static=True)
    retraction: Callable[..., Array] = eqx.field(static=True)

    def __call__(self, X: Array, args: tuple[Array, Array]) -> Array:
        p, q = args
        X_tangent = self.manifold.proj(p, X)
        return self.retraction(p, X_tangent) - q + (X - X_tangent)


def nlsolve_inverse_retract(
    manifold: Manifold,
    p: Array,
    q: Array,
    retraction: Callable[..., Array] | None = None,
    x0: Array | None = None,
    rtol: float = SolverDefaults.RTOL,
    atol: float = SolverDefaults.ATOL,
    max_steps: int = SolverDefaults.MAX_STEPS,
    **kwargs: Any,
) -> Array:
    """Approximate the inverse of a retraction by solving ``retr(p, X) = q``.

    Args:
        manifold: Manifold providing ``proj`` and, by default, ``retr``
        p: Base point
        q: Target point
        retraction: Retraction ``(p, X) -> point`` to invert; defaults to ``manifold.retr``
        x0: Initial guess; defaults to the zero vector at p
        rtol: Relative tolerance of the Newton solver
        atol: Absolute tolerance of the Newton solver
        max_steps: Maximum number of Newton iterations
        **kwargs: Additional arguments passed to ``optimistix.root_find``

    Returns:
        Tangent vector X at p with ``retraction(p, X) ≈ q``

    Raises:
        OutOfInjectivityRadiusError: If the solver does not converge

    Example:
        >>> space = CholeskySpace(2)
        >>> X = nlsolve_inverse_retract(space, jnp.eye(2), 2.0 * jnp.eye(2))
    """
    if retraction is None:
        retraction = manifold.retr
    if x0 is None:
        x0 = manifold.zero_vector(p)

    residual = RetractionResidual(manifold=manifold, retraction=retraction)
    solver = optx.Newton(rtol=rtol, atol=atol)
    sol = optx.root_find(residual, solver, x0, args=(p, q), max_steps=max_steps, throw=False, **kwargs)

    if not bool(sol.result == optx.RESULTS.successful):
        final_error = float(jnp.max(jnp.abs(residual(sol.value, (p, q)))))
        logger.debug(
            f"Inverse retraction on {manifold!r} did not converge: "
            f"{sol.result} after {sol.stats['num_steps']} steps (residual {final_error})"
        )
        raise OutOfInjectivityRadiusError(
            "Inverse retraction did not converge; the target point may be outside the injectivity radius",
            max_iterations=max_steps,
            final_error=final_error,
            tolerance=atol,
        )

    return manifold.proj(p, sol.value)
