"""Metric, connection and embedding tags used to decorate manifolds.

Tags carry no data beyond their parameters; two tags of the same class with the
same parameters compare equal, which is how a decorated manifold recognizes that
it was decorated with the default of its base manifold.
"""

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class Decoration:
    """Base class of everything a manifold can be decorated with."""

    category: ClassVar[str] = ""

    def operator_key(self) -> type:
        """Class under which operator sets for this decoration are registered."""
        return type(self)


@dataclass(frozen=True)
class RiemannianMetric(Decoration):
    """A Riemannian metric: an inner product on every tangent space."""

    category: ClassVar[str] = "metric"


@dataclass(frozen=True)
class AffineInvariantMetric(RiemannianMetric):
    """The affine-invariant metric ``<U, V>_P = tr(P^{-1} U P^{-1} V)`` on SPD matrices."""


@dataclass(frozen=True)
class LogCholeskyMetric(RiemannianMetric):
    """The Log-Cholesky metric of Lin (2019).

    On Cholesky space it treats strictly lower entries as Euclidean and the
    diagonal as log-Euclidean; on SPD matrices it is pulled back through the
    Cholesky factorization. Both make the manifold flat.
    """


@dataclass(frozen=True)
class AffineConnection(Decoration):
    """An affine connection, determining geodesics and parallel transport."""

    category: ClassVar[str] = "connection"


@dataclass(frozen=True)
class LeviCivitaConnection(AffineConnection):
    """The Levi-Civita connection induced by a metric.

    Its operators are the metric's exp, log and parallel transport, so it looks
    up the operator sets registered for the metric.
    """

    metric: RiemannianMetric

    def operator_key(self) -> type:
        return type(self.metric)


@dataclass(frozen=True)
class Embedding(Decoration):
    """An isometric embedding into an ambient space."""

    category: ClassVar[str] = "embedding"
