"""Manifolds decorated with an alternative metric, connection or embedding.

A decorated manifold is the pair of a wrapped manifold and a decoration. Every
operation call is resolved at call time:

1. Operations that do not depend on the geometry (size, field, dimension,
   validity checks, random sampling) always go to the innermost base manifold,
   so switching metrics never changes what counts as a valid point.
2. Operations of the decoration's category (metric, connection or embedding)
   go to the operator set registered for the base manifold class and the
   decoration class, if that set implements them.
3. Otherwise they fall back to the wrapped manifold, but only when the
   decoration is the wrapped manifold's default of that category. The
   distance additionally falls back to the norm of the logarithmic map.
4. Anything else raises ``UnsupportedOperationError``.

Operations outside the decoration's category are delegated to the wrapped
manifold, which lets decorations compose:

    >>> spd = SymmetricPositiveDefinite(3)
    >>> metric = LogCholeskyMetric()
    >>> M = ConnectionManifold(MetricManifold(spd, metric), LeviCivitaConnection(metric))
    >>> M.is_flat()
    True

Operator sets are plain classes registered with ``register_operators``:

    >>> @register_operators(SymmetricPositiveDefinite, LogCholeskyMetric)
    ... class LogCholeskyOperators(OperatorSet):
    ...     def exp(self, p, X): ...
"""

import functools
import logging
from collections.abc import Callable
from typing import Any, ClassVar

from ..core.jit_manager import JITManager
from .base import Manifold
from .errors import UnsupportedOperationError
from .metrics import AffineConnection, Decoration, Embedding, LeviCivitaConnection, RiemannianMetric

logger = logging.getLogger(__name__)

OPERATIONS: dict[str, frozenset[str]] = {
    "metric": frozenset(
        {"inner", "exp", "log", "dist", "transp", "get_coordinates", "get_vector", "injectivity_radius", "is_flat"}
    ),
    "connection": frozenset({"exp", "log", "transp", "is_flat"}),
    "embedding": frozenset({"proj", "embed", "embed_vector", "project"}),
}
"""Operations each decoration category may override."""

METRIC_INDEPENDENT: frozenset[str] = frozenset(
    {
        "n",
        "field",
        "dimension",
        "ambient_dimension",
        "representation_size",
        "check_point",
        "is_point",
        "check_vector",
        "is_vector",
        "random_point",
        "random_tangent",
        "zero_vector",
    }
)
"""Operations that are always answered by the innermost base manifold."""

# Operations with a generic derivation on ``Manifold`` from other primitives
_DERIVED: frozenset[str] = frozenset({"dist"})

_REGISTRY: dict[tuple[type, type], type["OperatorSet"]] = {}


class OperatorSet:
    """Operations implementing a decoration on a base manifold class.

    Subclasses define any subset of the operations of the decoration's
    category, with the same signatures as on ``Manifold``. Operations a
    subclass does not define are resolved by fallback.

    Attributes:
        manifold: The undecorated base manifold.
        decoration: The metric, connection or embedding being implemented.
    """

    def __init__(self, manifold: Manifold, decoration: Decoration) -> None:
        self.manifold = manifold
        self.decoration = decoration

    def implements(self, operation: str) -> bool:
        """Whether this set overrides the given operation."""
        return operation not in vars(OperatorSet) and callable(getattr(self, operation, None))


def register_operators(manifold_cls: type[Manifold], decoration_cls: type[Decoration]) -> Callable[..., Any]:
    """Class decorator registering an operator set for a manifold and decoration class.

    Args:
        manifold_cls: Base manifold class the operators apply to (and its subclasses).
        decoration_cls: Class returned by ``Decoration.operator_key()`` of the decorations served.

    Returns:
        Decorator that registers and returns the operator set class.
    """

    def decorator(operator_cls: type[OperatorSet]) -> type[OperatorSet]:
        _REGISTRY[(manifold_cls, decoration_cls)] = operator_cls
        return operator_cls

    return decorator


def lookup_operators(manifold: Manifold, decoration: Decoration) -> OperatorSet | None:
    """Instantiate the operator set registered for a manifold and decoration.

    The lookup walks the method resolution orders of the manifold class and of
    the decoration's operator key, most specific first.

    Returns:
        The operator set, or None if nothing is registered.
    """
    key = decoration.operator_key()
    for manifold_cls in type(manifold).__mro__:
        for decoration_cls in key.__mro__:
            operator_cls = _REGISTRY.get((manifold_cls, decoration_cls))
            if operator_cls is not None:
                return operator_cls(manifold, decoration)
    return None


class DecoratedManifold(Manifold):
    """Manifold wrapped with a decoration that overrides one category of operations.

    Decorated manifolds are values: they compare equal when the wrapped
    manifold and the decoration are equal.
    """

    category: ClassVar[str] = ""

    def __init__(self, manifold: Manifold, decoration: Decoration) -> None:
        """Initialize the decorated manifold.

        Args:
            manifold: Manifold to decorate, possibly itself decorated.
            decoration: Decoration of this class's category.

        Raises:
            TypeError: If manifold is not a Manifold or the decoration has the wrong category.
        """
        if not isinstance(manifold, Manifold):
            raise TypeError(f"Expected a Manifold instance, got {type(manifold)}")
        if not isinstance(decoration, Decoration) or decoration.category != self.category:
            raise TypeError(f"{type(self).__name__} requires a {self.category} decoration, got {decoration!r}")
        self._manifold = manifold
        self._decoration = decoration
        self._operators = lookup_operators(self.base_manifold, decoration)

    @property
    def manifold(self) -> Manifold:
        """The wrapped manifold."""
        return self._manifold

    @property
    def base_manifold(self) -> Manifold:
        """The innermost undecorated manifold."""
        manifold = self._manifold
        while isinstance(manifold, DecoratedManifold):
            manifold = manifold.manifold
        return manifold

    @property
    def decoration(self) -> Decoration:
        return self._decoration

    @property
    def operators(self) -> OperatorSet | None:
        """Operator set registered for the decoration, if any."""
        return self._operators

    def _resolve(self, operation: str) -> Callable[..., Any]:
        """Find the implementation of an operation.

        Raises:
            UnsupportedOperationError: If neither the decoration nor an allowed
                fallback implements the operation.
        """
        if operation not in OPERATIONS[self.category]:
            return getattr(self._manifold, operation)

        if self._operators is not None and self._operators.implements(operation):
            source = type(self._operators).__name__
            impl = getattr(self._operators, operation)
        elif self._decoration == self._manifold.default_decoration(self.category):
            source = repr(self._manifold)
            impl = getattr(self._manifold, operation)
        elif operation in _DERIVED:
            source = "Manifold"
            impl = functools.partial(getattr(Manifold, operation), self)
        else:
            logger.debug(f"No implementation of '{operation}' for {self._decoration!r} on {self.base_manifold!r}")
            raise UnsupportedOperationError(
                f"Operation '{operation}' is not implemented for {self.base_manifold!r} with {self._decoration!r}",
                operation=operation,
                manifold_type=type(self.base_manifold).__name__,
                decorator=self._decoration,
            )

        if JITManager.get("debug_mode"):
            logger.debug(f"{self!r}.{operation} resolved to {source}")
        return impl

    # Metric-independent queries

    @property
    def n(self) -> int:
        return self.base_manifold.n

    @property
    def field(self) -> str:
        return self.base_manifold.field

    @property
    def dimension(self) -> int:
        return self.base_manifold.dimension

    @property
    def ambient_dimension(self) -> int:
        return self.base_manifold.ambient_dimension

    @property
    def representation_size(self) -> tuple[int, int]:
        return self.base_manifold.representation_size

    def check_point(self, p: Any, atol: float | None = None) -> None:
        return self.base_manifold.check_point(p, atol=atol)

    def is_point(self, p: Any, raise_error: bool = False, atol: float | None = None) -> bool:
        return self.base_manifold.is_point(p, raise_error=raise_error, atol=atol)

    def check_vector(self, p: Any, v: Any, atol: float | None = None) -> None:
        return self.base_manifold.check_vector(p, v, atol=atol)

    def is_vector(self, p: Any, v: Any, raise_error: bool = False, atol: float | None = None) -> bool:
        return self.base_manifold.is_vector(p, v, raise_error=raise_error, atol=atol)

    def random_point(self, key: Any, *shape: int) -> Any:
        return self.base_manifold.random_point(key, *shape)

    def random_tangent(self, key: Any, p: Any, *shape: int) -> Any:
        return self.base_manifold.random_tangent(key, p, *shape)

    def zero_vector(self, p: Any) -> Any:
        return self.base_manifold.zero_vector(p)

    # Defaults seen by further decorations

    def default_decoration(self, category: str) -> Any:
        if category == self.category:
            return self._decoration
        if category == "connection" and self.category == "metric":
            return LeviCivitaConnection(self._decoration)
        return self._manifold.default_decoration(category)

    @property
    def default_metric(self) -> RiemannianMetric | None:
        return self.default_decoration("metric")

    @property
    def default_connection(self) -> AffineConnection | None:
        return self.default_decoration("connection")

    @property
    def default_embedding(self) -> Embedding | None:
        return self.default_decoration("embedding")

    # Value semantics

    def _key(self) -> tuple[Any, ...]:
        return (type(self), self._manifold, self._decoration)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._manifold!r}, {self._decoration!r})"


def _resolved(operation: str) -> Callable[..., Any]:
    def method(self: DecoratedManifold, *args: Any, **kwargs: Any) -> Any:
        return self._resolve(operation)(*args, **kwargs)

    method.__name__ = operation
    method.__qualname__ = f"DecoratedManifold.{operation}"
    method.__doc__ = getattr(Manifold, operation).__doc__
    return method


for _operation in sorted(frozenset().union(*OPERATIONS.values())):
    setattr(DecoratedManifold, _operation, _resolved(_operation))


class MetricManifold(DecoratedManifold):
    """Manifold equipped with a Riemannian metric other than (or equal to) its default.

    Examples:
        >>> M = MetricManifold(SymmetricPositiveDefinite(2), LogCholeskyMetric())
        >>> M.dimension
        3
    """

    category: ClassVar[str] = "metric"

    @property
    def metric(self) -> RiemannianMetric:
        return self._decoration  # type: ignore[return-value]


class ConnectionManifold(DecoratedManifold):
    """Manifold equipped with an affine connection."""

    category: ClassVar[str] = "connection"

    @property
    def connection(self) -> AffineConnection:
        return self._decoration  # type: ignore[return-value]


class EmbeddedManifold(DecoratedManifold):
    """Manifold equipped with an embedding into an ambient space."""

    category: ClassVar[str] = "embedding"

    @property
    def embedding(self) -> Embedding:
        return self._decoration  # type: ignore[return-value]
