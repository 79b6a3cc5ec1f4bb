"""Group elements and group actions used at the boundary of the manifold layer.

Only the operations the manifolds call into are provided: composing group
elements, the identity and inverse, and applying an element to a point. The
module-level ``compose``, ``apply`` and ``base_group`` functions are the entry
points; the classes implement them.

Translations act by addition:

    >>> group = TranslationGroup(3)
    >>> a = jnp.array([1.0, 2.0, 3.0])
    >>> bool(jnp.allclose(compose(group, a, group.inverse(a)), group.identity()))
    True

Rigid motions ``(t, R)`` act on vectors by ``x -> R x + t``.
"""

import jax.numpy as jnp
from jax import Array

from .base import Manifold
from .errors import DimensionError

RigidMotion = tuple[Array, Array]
"""Element (t, R) of the special Euclidean group: translation vector and rotation matrix."""

GroupElement = Array | RigidMotion
"""Element of a translation group (an array) or of SE(n) (a rigid motion)."""


class Group:
    """A group whose elements are arrays or tuples of arrays."""

    def compose(self, g: GroupElement, h: GroupElement) -> GroupElement:
        """Group product ``g * h``."""
        raise NotImplementedError

    def identity(self) -> GroupElement:
        """Identity element."""
        raise NotImplementedError

    def inverse(self, g: GroupElement) -> GroupElement:
        """Inverse element ``g^{-1}``."""
        raise NotImplementedError


class TranslationGroup(Group):
    """Additive group of translations of arrays with a fixed shape."""

    def __init__(self, *shape: int) -> None:
        if not shape or any(not isinstance(s, int) or s < 1 for s in shape):
            raise ValueError(f"Translation group shape must be positive integers, got {shape}")
        self.shape = tuple(shape)

    def compose(self, g: Array, h: Array) -> Array:
        return g + h

    def identity(self) -> Array:
        return jnp.zeros(self.shape)

    def inverse(self, g: Array) -> Array:
        return -g

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TranslationGroup) and self.shape == other.shape

    def __hash__(self) -> int:
        return hash((TranslationGroup, self.shape))

    def __repr__(self) -> str:
        return f"TranslationGroup{self.shape}"


class SpecialEuclideanGroup(Group):
    """Group SE(n) of rigid motions ``(t, R)`` with rotation R in SO(n).

    The product is ``(t1, R1) * (t2, R2) = (R1 t2 + t1, R1 R2)``.
    """

    def __init__(self, n: int) -> None:
        if not isinstance(n, int) or n < 1:
            raise ValueError(f"Dimension must be a positive integer, got {n}")
        self.n = n

    def compose(self, g: RigidMotion, h: RigidMotion) -> RigidMotion:
        t1, R1 = g
        t2, R2 = h
        return R1 @ t2 + t1, R1 @ R2

    def identity(self) -> RigidMotion:
        return jnp.zeros(self.n), jnp.eye(self.n)

    def inverse(self, g: RigidMotion) -> RigidMotion:
        t, R = g
        return -(R.T @ t), R.T

    def __eq__(self, other: object) -> bool:
        return isinstance(other, SpecialEuclideanGroup) and self.n == other.n

    def __hash__(self) -> int:
        return hash((SpecialEuclideanGroup, self.n))

    def __repr__(self) -> str:
        return f"SpecialEuclideanGroup({self.n})"


class GroupAction:
    """Left action of a group on a space of points."""

    def __init__(self, group: Group) -> None:
        self._group = group

    @property
    def base_group(self) -> Group:
        """The acting group."""
        return self._group

    def apply(self, g: GroupElement, p: Array) -> Array:
        """Image of the point p under the element g."""
        raise NotImplementedError


class TranslationAction(GroupAction):
    """Action of a translation group on a manifold by ``p -> p + a``.

    Args:
        manifold: Manifold the points live on (the ``g_manifold``).
        group: Translation group with elements of the manifold's representation shape.

    Raises:
        DimensionError: If the group shape differs from the manifold's representation size.
    """

    def __init__(self, manifold: Manifold, group: TranslationGroup) -> None:
        if group.shape != tuple(manifold.representation_size):
            raise DimensionError(
                "Translation group does not match the manifold representation",
                expected=tuple(manifold.representation_size),
                actual=group.shape,
            )
        super().__init__(group)
        self._manifold = manifold

    @property
    def g_manifold(self) -> Manifold:
        """The manifold acted upon."""
        return self._manifold

    def apply(self, a: Array, p: Array) -> Array:
        return a + p


class RigidMotionAction(GroupAction):
    """Action of SE(n) on vectors of R^n by ``x -> R x + t``."""

    def __init__(self, group: SpecialEuclideanGroup) -> None:
        super().__init__(group)

    def apply(self, g: RigidMotion, x: Array) -> Array:
        t, R = g
        return R @ x + t


def compose(group: Group, g: GroupElement, h: GroupElement) -> GroupElement:
    """Compose two elements of a group."""
    return group.compose(g, h)


def apply(action: GroupAction, g: GroupElement, p: Array) -> Array:
    """Apply a group element to a point through an action."""
    return action.apply(g, p)


def base_group(action: GroupAction) -> Group:
    """The group acting in an action."""
    return action.base_group
