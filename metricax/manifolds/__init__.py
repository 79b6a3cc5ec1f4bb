"""Manifold implementations and the metric-decoration mechanism."""

from .base import Manifold
from .cholesky_engine import CholeskyEngine
from .cholesky_space import CholeskySpace
from .decorators import (
    METRIC_INDEPENDENT,
    OPERATIONS,
    ConnectionManifold,
    DecoratedManifold,
    EmbeddedManifold,
    MetricManifold,
    OperatorSet,
    lookup_operators,
    register_operators,
)
from .errors import (
    CholeskyDecompositionError,
    ConvergenceError,
    DimensionError,
    InvalidPointError,
    InvalidTangentVectorError,
    ManifoldError,
    NumericalStabilityError,
    OutOfInjectivityRadiusError,
    UnsupportedOperationError,
)
from .factory import create_cholesky_space, create_log_cholesky_spd, create_spd
from .groups import (
    RigidMotionAction,
    SpecialEuclideanGroup,
    TranslationAction,
    TranslationGroup,
    apply,
    base_group,
    compose,
)
from .log_cholesky import LogCholeskyOperators
from .metrics import (
    AffineConnection,
    AffineInvariantMetric,
    Embedding,
    LeviCivitaConnection,
    LogCholeskyMetric,
    RiemannianMetric,
)
from .spd import SymmetricPositiveDefinite

__all__ = [
    "METRIC_INDEPENDENT",
    "OPERATIONS",
    "AffineConnection",
    "AffineInvariantMetric",
    "CholeskyDecompositionError",
    "CholeskyEngine",
    "CholeskySpace",
    "ConnectionManifold",
    "ConvergenceError",
    "DecoratedManifold",
    "DimensionError",
    "EmbeddedManifold",
    "Embedding",
    "InvalidPointError",
    "InvalidTangentVectorError",
    "LeviCivitaConnection",
    "LogCholeskyMetric",
    "LogCholeskyOperators",
    "Manifold",
    "ManifoldError",
    "MetricManifold",
    "NumericalStabilityError",
    "OperatorSet",
    "OutOfInjectivityRadiusError",
    "RiemannianMetric",
    "RigidMotionAction",
    "SpecialEuclideanGroup",
    "SymmetricPositiveDefinite",
    "TranslationAction",
    "TranslationGroup",
    "UnsupportedOperationError",
    "apply",
    "base_group",
    "compose",
    "create_cholesky_space",
    "create_log_cholesky_spd",
    "create_spd",
    "lookup_operators",
    "register_operators",
]
