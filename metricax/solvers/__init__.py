"""Numerical solvers used as fallbacks by manifold operations."""

from .inverse_retraction import RetractionResidual, nlsolve_inverse_retract

__all__ = ["RetractionResidual", "nlsolve_inverse_retract"]
