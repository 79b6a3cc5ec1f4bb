"""Tests for the SPD / Cholesky change of representation."""

import typing

import jax
import jax.numpy as jnp
import jax.random as jr
import numpy as np
import pytest

from metricax.core.jit_manager import JITManager
from metricax.core.type_system import CholeskyFactor, ManifoldPoint
from metricax.manifolds.cholesky_engine import CholeskyEngine
from metricax.manifolds.errors import CholeskyDecompositionError, NumericalStabilityError


def _random_spd(key, n, field="real"):
    k1, k2 = jr.split(key)
    A = jr.normal(k1, (n, n))
    if field == "complex":
        A = A + 1j * jr.normal(k2, (n, n))
    return A @ jnp.conj(A.T) + jnp.eye(n)


def _random_symmetric(key, n, field="real"):
    k1, k2 = jr.split(key)
    V = jr.normal(k1, (n, n))
    if field == "complex":
        V = V + 1j * jr.normal(k2, (n, n))
    return 0.5 * (V + jnp.conj(V.T))


class TestCholeskyEngine:
    """Test suite for the bijection between SPD matrices and Cholesky factors."""

    @pytest.fixture
    def engine(self):
        return CholeskyEngine()

    @pytest.fixture
    def spd_matrix(self):
        """Create a symmetric positive definite test matrix."""
        return _random_spd(jr.key(42), 5)

    @pytest.fixture
    def tangent_vector(self):
        """Create a symmetric tangent vector."""
        return _random_symmetric(jr.key(123), 5)

    def test_point_to_factor_is_lower_triangular(self, engine, spd_matrix):
        """The factor is lower triangular with a positive diagonal."""
        x = engine.point_to_factor(spd_matrix)

        np.testing.assert_allclose(jnp.triu(x, 1), 0.0, atol=1e-12)
        assert jnp.all(jnp.diagonal(x) > 0)

    def test_point_round_trip(self, engine, spd_matrix):
        """factor_to_point inverts point_to_factor."""
        x = engine.point_to_factor(spd_matrix)

        np.testing.assert_allclose(engine.factor_to_point(x), spd_matrix, atol=1e-10)

    @pytest.mark.parametrize("field", ["real", "complex"])
    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_tangent_round_trip(self, engine, field, seed):
        """Pushing forward the pulled-back tangent recovers it."""
        k1, k2 = jr.split(jr.key(seed))
        p = _random_spd(k1, 4, field)
        X = _random_symmetric(k2, 4, field)

        x, W = engine.tangent_point_to_factor(p, X)
        recovered = engine.tangent_factor_to_point(engine.point_to_factor(p), W)

        np.testing.assert_allclose(recovered, X, atol=1e-10)
        np.testing.assert_allclose(x, engine.point_to_factor(p), atol=1e-12)

    def test_pulled_back_tangent_is_lower_triangular(self, engine, spd_matrix, tangent_vector):
        """The pulled-back tangent has no strictly upper part."""
        _, W = engine.tangent_point_to_factor(spd_matrix, tangent_vector)

        np.testing.assert_allclose(jnp.triu(W, 1), 0.0, atol=1e-10)

    def test_given_factor_is_reused(self, engine, spd_matrix, tangent_vector):
        """A supplied factor is returned unchanged and used for the pull-back."""
        x = engine.point_to_factor(spd_matrix)
        x_out, W = engine.tangent_point_to_factor(spd_matrix, tangent_vector, x=x)

        assert x_out is x
        _, W_fresh = engine.tangent_point_to_factor(spd_matrix, tangent_vector)
        np.testing.assert_allclose(W, W_fresh, atol=1e-12)

    def test_scaled_identity(self, engine):
        """Known values for p = 2 I and X = I."""
        x, W = engine.tangent_point_to_factor(2.0 * jnp.eye(2), jnp.eye(2))

        np.testing.assert_allclose(x, jnp.sqrt(2.0) * jnp.eye(2), atol=1e-12)
        # w = x^{-1} X x^{-T} = I/2, diagonal halved, times x
        np.testing.assert_allclose(W, jnp.sqrt(2.0) / 4.0 * jnp.eye(2), atol=1e-12)

    def test_not_positive_definite_raises(self, engine):
        """A matrix with a negative eigenvalue cannot be factored."""
        p = jnp.array([[1.0, 0.0], [0.0, -1.0]])

        with pytest.raises(CholeskyDecompositionError) as exc_info:
            engine.point_to_factor(p)

        assert isinstance(exc_info.value, NumericalStabilityError)
        assert exc_info.value.matrix is p
        assert exc_info.value.recommended_action is not None

    def test_non_symmetric_matrix_raises(self, engine):
        """Only the symmetric part of this matrix is positive definite; it must not be factored."""
        p = jnp.array([[2.0, 1.5], [0.0, 2.0]])

        with pytest.raises(CholeskyDecompositionError, match="not symmetric positive definite") as exc_info:
            engine.point_to_factor(p)
        assert exc_info.value.matrix is p

    def test_non_hermitian_matrix_raises(self, engine):
        p = jnp.array([[2.0, 1j], [1j, 2.0]])

        with pytest.raises(CholeskyDecompositionError):
            engine.point_to_factor(p)

    def test_non_symmetric_matrix_gives_nan_under_jit(self, engine):
        x = jax.jit(engine.point_to_factor)(jnp.array([[2.0, 1.5], [0.0, 2.0]]))

        assert jnp.all(jnp.isnan(x))

    def test_rounding_level_asymmetry_is_accepted(self, engine, spd_matrix):
        """Asymmetry far below the tolerance, relative to the entries, still factors."""
        p = 1e6 * spd_matrix
        p = p.at[0, 1].add(1e-6)

        x = engine.point_to_factor(p)

        assert jnp.all(jnp.isfinite(x))

    def test_check_can_be_disabled(self, engine):
        """With check_finite off the NaN factor is returned as is."""
        JITManager.configure(check_finite=False)
        x = engine.point_to_factor(jnp.array([[1.0, 0.0], [0.0, -1.0]]))

        assert not jnp.all(jnp.isfinite(x))

    def test_near_singular_matrix_factors(self, engine):
        """Positive definite matrices factor even when badly conditioned."""
        p = jnp.diag(jnp.array([1e-12, 1.0]))
        x = engine.point_to_factor(p)

        assert jnp.all(jnp.isfinite(x))
        np.testing.assert_allclose(engine.factor_to_point(x), p, atol=1e-15)


class TestEngineSignatures:
    def test_factor_annotations(self):
        hints = typing.get_type_hints(CholeskyEngine.point_to_factor)

        assert hints["p"] is ManifoldPoint
        assert hints["return"] is CholeskyFactor
        assert typing.get_type_hints(CholeskyEngine.factor_to_point)["x"] is CholeskyFactor
