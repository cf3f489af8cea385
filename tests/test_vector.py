"""Unit tests for the tolerance, vector and config modules.

Tests cover:
- is_zero / align_zero thresholds
- Vector helpers (as_vec3, normalize, dot, cross, distance)
- RayPolicy validation and scene scaling
"""

import math

import numpy as np
import pytest


class TestTolerance:
    """Tests for the shared zero predicate."""

    def test_is_zero_threshold(self):
        """Test values below EPSILON count as zero."""
        from raygeom.core.tolerance import EPSILON, is_zero

        assert is_zero(0.0)
        assert is_zero(EPSILON / 2)
        assert is_zero(-EPSILON / 2)
        assert not is_zero(EPSILON * 2)
        assert not is_zero(-1.0)

    def test_is_zero_custom_eps(self):
        """Test the tolerance can be overridden."""
        from raygeom.core.tolerance import is_zero

        assert is_zero(1e-4, eps=1e-3)
        assert not is_zero(1e-4, eps=1e-5)

    def test_align_zero(self):
        """Test align_zero snaps tiny values and keeps the rest."""
        from raygeom.core.tolerance import align_zero

        assert align_zero(1e-13) == 0.0
        assert align_zero(-1e-13) == 0.0
        assert align_zero(0.5) == 0.5
        assert align_zero(-math.inf) == -math.inf


class TestVectorUtilities:
    """Tests for the NumPy vector helpers."""

    def test_as_vec3_copies_and_freezes(self):
        """Test as_vec3 returns an independent read-only copy."""
        from raygeom.core.vector import as_vec3

        source = np.array([1.0, 2.0, 3.0])
        v = as_vec3(source)
        source[0] = 99.0
        assert v.tolist() == [1.0, 2.0, 3.0]
        assert v.dtype == np.float64
        with pytest.raises(ValueError):
            v[0] = 5.0

    def test_as_vec3_rejects_wrong_size(self):
        """Test as_vec3 requires exactly three components."""
        from raygeom.core.vector import as_vec3

        with pytest.raises(ValueError):
            as_vec3((1.0, 2.0))
        with pytest.raises(ValueError):
            as_vec3((1.0, 2.0, 3.0, 4.0))

    def test_length(self):
        """Test vector length computation."""
        from raygeom.core.vector import length, length_squared, vec3

        v = vec3(3.0, 4.0, 0.0)
        assert length(v) == pytest.approx(5.0)
        assert length_squared(v) == pytest.approx(25.0)

    def test_normalize(self):
        """Test vector normalization."""
        from raygeom.core.vector import length, normalize, vec3

        n = normalize(vec3(3.0, 4.0, 0.0))
        assert n.tolist() == pytest.approx([0.6, 0.8, 0.0])
        assert length(n) == pytest.approx(1.0)

    def test_normalize_zero_raises(self):
        """Test normalizing a zero vector raises ZeroVectorError."""
        from raygeom.core.errors import ZeroVectorError
        from raygeom.core.vector import normalize, vec3

        with pytest.raises(ZeroVectorError):
            normalize(vec3(0.0, 0.0, 0.0))
        # ZeroVectorError is also a ValueError
        with pytest.raises(ValueError):
            normalize(vec3(1e-12, 0.0, 0.0))

    def test_dot_and_cross(self):
        """Test dot and cross products."""
        from raygeom.core.vector import cross, dot, vec3

        assert dot(vec3(1.0, 2.0, 3.0), vec3(4.0, 5.0, 6.0)) == pytest.approx(32.0)
        assert cross(vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0)).tolist() == [0.0, 0.0, 1.0]

    def test_distance(self):
        """Test distance between points."""
        from raygeom.core.vector import distance, vec3

        assert distance(vec3(1.0, 1.0, 1.0), vec3(1.0, 4.0, 5.0)) == pytest.approx(5.0)
        assert distance((0, 0, 0), (0, 0, 0)) == 0.0


class TestRayPolicy:
    """Tests for RayPolicy configuration."""

    def test_defaults(self):
        """Test the default policy matches the module constants."""
        from raygeom.core.config import DEFAULT_POLICY
        from raygeom.core.tolerance import RAY_BIAS

        assert DEFAULT_POLICY.bias == RAY_BIAS
        assert DEFAULT_POLICY.seed is None
        assert DEFAULT_POLICY.sampling == "legacy"

    def test_invalid_values(self):
        """Test non-positive bias and unknown modes are rejected."""
        from raygeom.core.config import RayPolicy

        with pytest.raises(ValueError):
            RayPolicy(bias=0.0)
        with pytest.raises(ValueError):
            RayPolicy(bias=-0.1)
        with pytest.raises(ValueError):
            RayPolicy(sampling="stratified")

    def test_policy_is_frozen(self):
        """Test policies cannot be modified after creation."""
        from dataclasses import FrozenInstanceError

        from raygeom.core.config import RayPolicy

        policy = RayPolicy()
        with pytest.raises(FrozenInstanceError):
            policy.bias = 1.0

    def test_scaled_policy(self):
        """Test the bias follows the scene scale."""
        from raygeom.core.config import scaled_ray_policy

        assert scaled_ray_policy(10.0).bias == pytest.approx(1.0)
        assert scaled_ray_policy(0.01).bias == pytest.approx(0.001)

    def test_scaled_policy_user_floor(self):
        """Test a user bias raises the scaled bias but never lowers it."""
        from raygeom.core.config import scaled_ray_policy

        assert scaled_ray_policy(0.01, user_bias=0.05).bias == pytest.approx(0.05)
        assert scaled_ray_policy(10.0, user_bias=0.05).bias == pytest.approx(1.0)

    def test_scaled_policy_passes_options(self):
        """Test seed and sampling mode are carried through."""
        from raygeom.core.config import scaled_ray_policy

        policy = scaled_ray_policy(seed=3, sampling="uniform")
        assert policy.seed == 3
        assert policy.sampling == "uniform"
