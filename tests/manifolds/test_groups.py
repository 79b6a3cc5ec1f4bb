"""Tests for group elements and group actions."""

import typing

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from metricax.manifolds.cholesky_space import CholeskySpace
from metricax.manifolds.errors import DimensionError
from metricax.manifolds.groups import (
    Group,
    GroupElement,
    RigidMotion,
    RigidMotionAction,
    SpecialEuclideanGroup,
    TranslationAction,
    TranslationGroup,
    apply,
    base_group,
    compose,
)


def rotation_2d(theta):
    c, s = jnp.cos(theta), jnp.sin(theta)
    return jnp.array([[c, -s], [s, c]])


def rotation_3d_z(theta):
    c, s = jnp.cos(theta), jnp.sin(theta)
    return jnp.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


class TestTranslationGroup:
    """Additive translation group."""

    def test_compose_identity_inverse(self):
        group = TranslationGroup(3)
        a = jnp.array([1.0, -2.0, 0.5])
        b = jnp.array([0.3, 0.3, 0.3])

        np.testing.assert_allclose(compose(group, a, b), a + b)
        np.testing.assert_allclose(compose(group, a, group.identity()), a)
        np.testing.assert_allclose(compose(group, a, group.inverse(a)), group.identity())

    def test_matrix_shape(self):
        group = TranslationGroup(2, 2)

        assert group.identity().shape == (2, 2)
        assert group == TranslationGroup(2, 2)
        assert group != TranslationGroup(4)
        assert hash(group) == hash(TranslationGroup(2, 2))

    @pytest.mark.parametrize("shape", [(), (0,), (2, -1)])
    def test_invalid_shape(self, shape):
        with pytest.raises(ValueError):
            TranslationGroup(*shape)


class TestTranslationAction:
    """Translations acting on a manifold."""

    def test_apply(self):
        space = CholeskySpace(2)
        action = TranslationAction(space, TranslationGroup(2, 2))
        p = jnp.eye(2)
        a = jnp.array([[0.0, 0.0], [1.0, 0.5]])

        np.testing.assert_allclose(apply(action, a, p), p + a)
        assert action.g_manifold is space
        assert base_group(action) == TranslationGroup(2, 2)

    def test_apply_composition(self):
        action = TranslationAction(CholeskySpace(2), TranslationGroup(2, 2))
        group = base_group(action)
        p = jnp.eye(2)
        a = jnp.full((2, 2), 0.5)
        b = jnp.full((2, 2), -0.25)

        np.testing.assert_allclose(apply(action, compose(group, a, b), p), apply(action, a, apply(action, b, p)))

    def test_shape_mismatch(self):
        with pytest.raises(DimensionError):
            TranslationAction(CholeskySpace(3), TranslationGroup(2, 2))


class TestSpecialEuclideanGroup:
    """Rigid motions (t, R)."""

    @pytest.fixture
    def group(self):
        return SpecialEuclideanGroup(3)

    @pytest.fixture
    def elements(self):
        g = (jnp.array([1.0, 0.0, -1.0]), rotation_3d_z(0.3))
        h = (jnp.array([0.0, 2.0, 0.5]), rotation_3d_z(-1.1))
        k = (jnp.array([-0.5, 0.5, 0.5]), rotation_3d_z(2.0))
        return g, h, k

    def test_identity(self, group, elements):
        g, _, _ = elements
        t, R = compose(group, g, group.identity())

        np.testing.assert_allclose(t, g[0], atol=1e-12)
        np.testing.assert_allclose(R, g[1], atol=1e-12)

    def test_inverse(self, group, elements):
        g, _, _ = elements
        t, R = compose(group, g, group.inverse(g))

        np.testing.assert_allclose(t, jnp.zeros(3), atol=1e-12)
        np.testing.assert_allclose(R, jnp.eye(3), atol=1e-12)

    def test_associativity(self, group, elements):
        g, h, k = elements
        left = compose(group, compose(group, g, h), k)
        right = compose(group, g, compose(group, h, k))

        np.testing.assert_allclose(left[0], right[0], atol=1e-12)
        np.testing.assert_allclose(left[1], right[1], atol=1e-12)

    def test_invalid_dimension(self):
        with pytest.raises(ValueError):
            SpecialEuclideanGroup(0)


class TestRigidMotionAction:
    """SE(n) acting on R^n."""

    def test_apply(self):
        action = RigidMotionAction(SpecialEuclideanGroup(2))
        g = (jnp.array([1.0, 2.0]), rotation_2d(jnp.pi / 2))

        np.testing.assert_allclose(apply(action, g, jnp.array([1.0, 0.0])), jnp.array([1.0, 3.0]), atol=1e-12)

    def test_action_is_compatible_with_composition(self):
        group = SpecialEuclideanGroup(2)
        action = RigidMotionAction(group)
        g = (jnp.array([1.0, -1.0]), rotation_2d(0.4))
        h = (jnp.array([0.5, 0.0]), rotation_2d(-1.3))
        x = jnp.array([0.7, 0.2])

        np.testing.assert_allclose(
            apply(action, compose(group, g, h), x), apply(action, g, apply(action, h, x)), atol=1e-12
        )
        assert base_group(action) == group


class TestElementTypes:
    """Group operations are annotated with the element types they accept."""

    def test_generic_signatures_use_group_element(self):
        assert typing.get_type_hints(compose)["g"] == GroupElement
        assert typing.get_type_hints(apply)["g"] == GroupElement
        assert typing.get_type_hints(Group.inverse)["return"] == GroupElement

    def test_group_element_covers_both_groups(self):
        translation = TranslationGroup(2).identity()
        motion = SpecialEuclideanGroup(2).identity()

        assert isinstance(translation, jax.Array)
        assert isinstance(motion, tuple) and all(isinstance(part, jax.Array) for part in motion)
        assert typing.get_args(GroupElement) == (jax.Array, RigidMotion)
