"""Unit tests for beam generation (Ray.get_beam_through_point).

Tests cover:
- Trailing original ray and shared origins
- Zero-distance target and invalid amounts
- Samples landing on the disc around the target
- Skipped samples and reproducibility with seeded generators
"""

import numpy as np
import pytest


def _disc_offset(ray, sample, dest):
    """Distance from dest to where sample crosses the plane through dest normal to ray."""
    to_dest = dest - ray.origin
    t = np.dot(to_dest, ray.direction) / np.dot(sample.direction, ray.direction)
    crossing = sample.origin + t * sample.direction
    return np.linalg.norm(crossing - dest)


class TestBeamShape:
    """Tests for the structure of a generated beam."""

    def test_last_ray_is_original(self, rng):
        """Test the beam always ends with the source ray itself."""
        from raygeom.core.ray import Ray

        ray = Ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        beam = ray.get_beam_through_point((0.0, 0.0, 10.0), radius=1.0, amount=20, rng=rng)
        assert beam[-1] is ray
        assert beam[-1] == ray

    def test_count_bounded_by_amount(self, rng):
        """Test the beam holds at most amount + 1 rays."""
        from raygeom.core.ray import Ray

        ray = Ray((1.0, 2.0, 3.0), (1.0, 1.0, 0.0))
        beam = ray.get_beam_through_point((5.0, 6.0, 3.0), radius=0.5, amount=50, rng=rng)
        assert 1 <= len(beam) <= 51

    def test_zero_amount(self, rng):
        """Test amount 0 returns only the original ray."""
        from raygeom.core.ray import Ray

        ray = Ray((0.0, 0.0, 0.0), (1.0, 0.0, 0.0))
        assert ray.get_beam_through_point((3.0, 0.0, 0.0), 1.0, 0, rng=rng) == [ray]

    def test_shared_origin(self, rng):
        """Test every sampled ray starts exactly at the source origin."""
        from raygeom.core.ray import Ray

        ray = Ray((0.5, -1.0, 2.0), (0.2, 0.3, -1.0))
        beam = ray.get_beam_through_point((1.0, 0.0, -3.0), radius=0.8, amount=30, rng=rng)
        for sample in beam:
            assert np.array_equal(sample.origin, ray.origin)

    def test_sampled_directions_are_unit(self, rng):
        """Test every sampled ray is a properly constructed Ray."""
        from raygeom.core.ray import Ray

        ray = Ray((0.0, 0.0, 0.0), (1.0, 2.0, 3.0))
        beam = ray.get_beam_through_point((2.0, 4.0, 6.0), radius=0.3, amount=25, rng=rng)
        for sample in beam:
            assert np.linalg.norm(sample.direction) == pytest.approx(1.0)


class TestBeamErrors:
    """Tests for invalid beam requests."""

    def test_zero_distance_target_raises(self, rng):
        """Test a target on the ray origin raises InvalidBeamTargetError."""
        from raygeom.core.errors import InvalidBeamTargetError
        from raygeom.core.ray import Ray

        ray = Ray((1.0, 1.0, 1.0), (0.0, 1.0, 0.0))
        with pytest.raises(InvalidBeamTargetError):
            ray.get_beam_through_point((1.0, 1.0, 1.0), radius=1.0, amount=5, rng=rng)
        # Also usable as a plain ValueError
        with pytest.raises(ValueError):
            ray.get_beam_through_point(ray.origin, radius=1.0, amount=5, rng=rng)

    def test_negative_amount_raises(self, rng):
        """Test a negative amount is rejected."""
        from raygeom.core.ray import Ray

        ray = Ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        with pytest.raises(ValueError):
            ray.get_beam_through_point((0.0, 2.0, 0.0), radius=1.0, amount=-3, rng=rng)


class TestBeamGeometry:
    """Tests for where beam samples land."""

    @pytest.mark.parametrize(
        "direction, dest",
        [
            ((0.0, 0.0, 1.0), (0.0, 0.0, 10.0)),
            ((0.0, 0.0, -1.0), (0.0, 0.0, -4.0)),
            ((1.0, 1.0, 0.0), (4.0, 4.0, 0.0)),
            ((0.3, -0.5, 0.8), (3.0, -5.0, 8.0)),
        ],
    )
    @pytest.mark.parametrize("sampling", ["legacy", "uniform"])
    def test_samples_within_radius(self, rng, direction, dest, sampling):
        """Test sampled rays cross the target disc within the radius."""
        from raygeom.core.ray import Ray
        from raygeom.core.vector import as_vec3

        ray = Ray((0.0, 0.0, 0.0), direction)
        target = as_vec3(dest)
        beam = ray.get_beam_through_point(target, radius=0.75, amount=40, rng=rng, sampling=sampling)
        assert len(beam) > 1
        for sample in beam[:-1]:
            assert _disc_offset(ray, sample, target) <= 0.75 + 1e-9

    def test_samples_spread_around_target(self, rng):
        """Test sampled rays are actually perturbed away from the target."""
        from raygeom.core.ray import Ray
        from raygeom.core.vector import vec3

        ray = Ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        target = vec3(0.0, 0.0, 10.0)
        beam = ray.get_beam_through_point(target, radius=1.0, amount=40, rng=rng)
        offsets = [_disc_offset(ray, sample, target) for sample in beam[:-1]]
        assert max(offsets) > 0.1

    def test_zero_radius_gives_only_original(self, rng):
        """Test a zero radius skips every sample."""
        from raygeom.core.ray import Ray

        ray = Ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        beam = ray.get_beam_through_point((0.0, 5.0, 0.0), radius=0.0, amount=10, rng=rng)
        assert beam == [ray]

    def test_beam_toward_other_target(self, rng):
        """Test beams may target a point off the ray's own line."""
        from raygeom.core.ray import Ray

        ray = Ray((0.0, 0.0, 0.0), (1.0, 0.0, 0.0))
        beam = ray.get_beam_through_point((0.0, 3.0, 0.0), radius=0.1, amount=10, rng=rng)
        for sample in beam[:-1]:
            assert sample.direction[1] > 0.9

    def test_sample_on_origin_is_skipped(self, monkeypatch, rng):
        """Test a disc sample landing on the ray origin is dropped, not raised."""
        import raygeom.core.ray as ray_module
        from raygeom.core.errors import DegenerateDirectionError
        from raygeom.core.ray import Ray

        # Basis for +z is norm_x = (-1, 0, 0), norm_y = (0, -1, 0), so an
        # x offset of 1 moves the target (1, 0, 0) onto the origin.
        monkeypatch.setattr(
            ray_module,
            "sample_disc_offsets",
            lambda *args, **kwargs: np.array([[1.0, 0.0], [0.5, 0.0]]),
        )
        ray = Ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        beam = ray.get_beam_through_point((1.0, 0.0, 0.0), radius=1.0, amount=2, rng=rng)

        assert len(beam) == 2
        assert beam[0].direction.tolist() == pytest.approx([1.0, 0.0, 0.0])
        assert beam[-1] is ray
        with pytest.raises(DegenerateDirectionError):
            Ray(ray.origin, ray.origin - ray.origin)


class TestBeamRandomness:
    """Tests for generator handling."""

    def test_seeded_beams_reproducible(self):
        """Test equal seeds produce equal beams."""
        from raygeom.core.ray import Ray
        from raygeom.core.sampling import make_rng

        ray = Ray((0.0, 0.0, 0.0), (1.0, 2.0, 2.0))
        a = ray.get_beam_through_point((1.0, 2.0, 2.0), 0.5, 15, rng=make_rng(seed=3))
        b = ray.get_beam_through_point((1.0, 2.0, 2.0), 0.5, 15, rng=make_rng(seed=3))
        assert a == b

    def test_default_generator(self):
        """Test beams work without an explicit generator."""
        from raygeom.core.ray import Ray

        ray = Ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        beam = ray.get_beam_through_point((0.0, 0.0, 2.0), 0.5, 5)
        assert beam[-1] is ray
        assert len(beam) <= 6


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
