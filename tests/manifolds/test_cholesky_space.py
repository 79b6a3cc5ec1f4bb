"""Tests for Cholesky space under the Log-Cholesky metric."""

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from metricax.manifolds.cholesky_space import CholeskySpace
from metricax.manifolds.errors import DimensionError, InvalidPointError
from metricax.manifolds.metrics import LogCholeskyMetric


@pytest.fixture
def space():
    """Create a Cholesky space of 3 x 3 factors."""
    return CholeskySpace(3)


@pytest.fixture
def x(space, key):
    return space.random_point(key)


@pytest.fixture
def y(space, key):
    return space.random_point(jax.random.fold_in(key, 1))


@pytest.fixture
def v(space, key, x):
    return space.random_tangent(jax.random.fold_in(key, 2), x)


class TestCholeskySpaceStructure:
    """Dimensions, validity and defaults."""

    def test_dimension(self):
        assert CholeskySpace(3).dimension == 6
        assert CholeskySpace(3, field="complex").dimension == 9

    def test_default_metric(self, space):
        assert space.default_metric == LogCholeskyMetric()
        assert space.is_flat() is True
        assert space.injectivity_radius() == jnp.inf

    def test_random_point_is_valid(self, space, x):
        assert space.is_point(x)

    def test_batched_random_points(self, space, key):
        points = space.random_point(key, 4)

        assert points.shape == (4, 3, 3)
        for p in points:
            assert space.is_point(p)

    def test_complex_random_point_is_valid(self, key):
        space = CholeskySpace(3, field="complex")

        assert space.is_point(space.random_point(key))

    def test_upper_entry_is_rejected(self, space):
        x = jnp.eye(3).at[0, 2].set(0.5)

        assert not space.is_point(x)
        with pytest.raises(InvalidPointError) as exc_info:
            space.check_point(x)
        assert exc_info.value.violated_constraint == "lower_triangular"

    def test_nonpositive_diagonal_is_rejected(self, space):
        x = jnp.diag(jnp.array([1.0, 0.0, 2.0]))

        with pytest.raises(InvalidPointError) as exc_info:
            space.is_point(x, raise_error=True)
        assert exc_info.value.violated_constraint == "positive_diagonal"

    def test_wrong_shape_is_rejected(self, space):
        assert not space.is_point(jnp.eye(2))
        with pytest.raises(DimensionError):
            space.check_point(jnp.eye(4))

    def test_any_square_matrix_is_a_tangent_vector(self, space, x):
        assert space.is_vector(x, jnp.ones((3, 3)))
        assert not space.is_vector(x, jnp.ones((3, 2)))

    def test_proj_keeps_lower_part(self, space, x):
        v = jnp.arange(9.0).reshape(3, 3)

        np.testing.assert_allclose(space.proj(x, v), jnp.tril(v))


class TestCholeskySpaceGeometry:
    """Closed-form operations."""

    def test_inner_formula(self, space):
        x = jnp.diag(jnp.array([1.0, 2.0, 4.0]))
        v = jnp.array([[1.0, 0.0, 0.0], [3.0, 2.0, 0.0], [0.0, 1.0, 4.0]])

        # off-diagonal 9 + 1, diagonal 1 + 4/4 + 16/16
        np.testing.assert_allclose(space.inner(x, v, v), 13.0)

    def test_inner_ignores_upper_part(self, space, x, v):
        noisy = v + jnp.triu(jnp.ones((3, 3)), 1)

        np.testing.assert_allclose(space.inner(x, noisy, v), space.inner(x, v, v), atol=1e-12)

    def test_exp_log_inverse(self, space, x, y, v):
        np.testing.assert_allclose(space.exp(x, space.log(x, y)), y, atol=1e-10)
        np.testing.assert_allclose(space.log(x, space.exp(x, v)), v, atol=1e-10)

    def test_exp_diagonal_is_multiplicative(self, space):
        x = 2.0 * jnp.eye(3)
        v = 2.0 * jnp.eye(3)

        np.testing.assert_allclose(space.exp(x, v), 2.0 * jnp.e * jnp.eye(3), atol=1e-12)

    def test_exp_stays_in_space(self, space, x, v):
        assert space.is_point(space.exp(x, 5.0 * v))

    def test_dist_matches_norm_of_log(self, space, x, y):
        np.testing.assert_allclose(space.dist(x, y), space.norm(x, space.log(x, y)), atol=1e-10)

    def test_dist_properties(self, space, x, y):
        np.testing.assert_allclose(space.dist(x, y), space.dist(y, x), atol=1e-12)
        np.testing.assert_allclose(space.dist(x, x), 0.0, atol=1e-12)
        assert space.dist(x, y) > 0

    def test_transp_is_isometry(self, space, x, y, v, key):
        w = space.random_tangent(jax.random.fold_in(key, 3), x)

        np.testing.assert_allclose(
            space.inner(y, space.transp(x, v, y), space.transp(x, w, y)), space.inner(x, v, w), atol=1e-10
        )

    def test_transp_rescales_diagonal_only(self, space):
        x = jnp.eye(3)
        y = jnp.diag(jnp.array([2.0, 3.0, 4.0]))
        v = jnp.tril(jnp.ones((3, 3)))

        expected = jnp.tril(jnp.ones((3, 3)), -1) + jnp.diag(jnp.array([2.0, 3.0, 4.0]))
        np.testing.assert_allclose(space.transp(x, v, y), expected)

    def test_geodesic_endpoints(self, space, x, v):
        np.testing.assert_allclose(space.geodesic(x, v, 0.0), x, atol=1e-12)
        np.testing.assert_allclose(space.geodesic(x, v, 1.0), space.exp(x, v), atol=1e-12)
        np.testing.assert_allclose(space.exp_fused(x, v, 0.5), space.exp(x, 0.5 * v), atol=1e-12)


class TestCholeskySpaceCoordinates:
    """Orthonormal basis conversion."""

    @pytest.mark.parametrize("field", ["real", "complex"])
    def test_coordinates_round_trip(self, key, field):
        space = CholeskySpace(3, field=field)
        x = space.random_point(key)
        v = space.random_tangent(jax.random.fold_in(key, 1), x)

        c = space.get_coordinates(x, v)

        assert c.shape == (space.dimension,)
        np.testing.assert_allclose(space.get_vector(x, c), v, atol=1e-10)

    def test_coordinates_are_orthonormal(self, space, x, v, key):
        w = space.random_tangent(jax.random.fold_in(key, 5), x)

        np.testing.assert_allclose(
            jnp.dot(space.get_coordinates(x, v), space.get_coordinates(x, w)), space.inner(x, v, w), atol=1e-10
        )

    def test_coordinate_order(self, space):
        x = 2.0 * jnp.eye(3)
        v = jnp.array([[2.0, 0.0, 0.0], [1.0, 4.0, 0.0], [2.0, 3.0, 6.0]])

        np.testing.assert_allclose(space.get_coordinates(x, v), jnp.array([1.0, 2.0, 3.0, 1.0, 2.0, 3.0]))

    def test_one_by_one(self):
        space = CholeskySpace(1)
        x = jnp.array([[2.0]])

        np.testing.assert_allclose(space.get_vector(x, jnp.array([0.5])), jnp.array([[1.0]]))
