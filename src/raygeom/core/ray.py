"""Ray entity and its kernel-side counterpart.

This module provides two renditions of a ray:

- ``Ray``: an immutable host-side object (NumPy float64) used to build
  primary, secondary and beam rays. Construction normalizes the direction and
  rejects zero directions; derived rays are always new objects.
- ``RayData``: a Taichi dataclass with ``@ti.func`` helpers (``make_ray``,
  ``make_biased_ray``, ``ray_at``) for use inside kernels.

Biased construction pushes the origin a small distance along a surface
normal, on the side the ray is heading toward, so a secondary ray leaving a
surface does not hit that same surface at distance ~0.

Example:
    >>> from raygeom.core.ray import Ray
    >>> ray = Ray((0.0, 0.0, 0.0), (0.0, 0.0, -2.0))
    >>> ray.direction.tolist()
    [0.0, 0.0, -1.0]
    >>> ray.get_target_point(5.0).tolist()
    [0.0, 0.0, -5.0]
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from .config import DiscSampling
from .errors import DegenerateDirectionError, InvalidBeamTargetError, ZeroVectorError
from .sampling import perpendicular_basis, sample_disc_offsets, thread_rng
from .tolerance import KERNEL_EPSILON, RAY_BIAS, is_zero
from .vector import Vec3, VectorLike, as_vec3, distance, dot, length, normalize

logger = logging.getLogger(__name__)

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


def _frozen(v: npt.NDArray[np.float64]) -> Vec3:
    v = np.array(v, dtype=np.float64)
    v.flags.writeable = False
    return v


class Ray:
    """A directed half-line with an origin point and a unit direction.

    Rays are immutable: ``origin`` and ``direction`` are read-only arrays and
    every operation that derives a ray returns a new instance.

    Attributes:
        origin: The point the ray starts from.
        direction: The unit direction vector.
    """

    __slots__ = ("_origin", "_direction")

    def __init__(self, origin: VectorLike, direction: VectorLike) -> None:
        """Create a ray, normalizing its direction.

        Args:
            origin: The starting point. Stored as an independent copy.
            direction: The direction vector; any non-zero length.

        Raises:
            DegenerateDirectionError: If the direction has zero length.
        """
        self._origin = as_vec3(origin)
        try:
            unit = normalize(as_vec3(direction))
        except ZeroVectorError as exc:
            raise DegenerateDirectionError(
                f"Ray direction must be non-zero, got {np.asarray(direction).tolist()}"
            ) from exc
        self._direction = _frozen(unit)

    @classmethod
    def _from_parts(cls, origin: Vec3, direction: Vec3) -> "Ray":
        ray = cls.__new__(cls)
        ray._origin = _frozen(origin)
        ray._direction = _frozen(direction)
        return ray

    @classmethod
    def biased(
        cls,
        point: VectorLike,
        direction: VectorLike,
        normal: VectorLike,
        bias: float = RAY_BIAS,
    ) -> "Ray":
        """Create a secondary ray leaving a surface.

        The origin is ``point + normal * bias`` when the ray heads to the
        normal's side of the surface (``normal . direction > 0``), and
        ``point - normal * bias`` otherwise.

        Args:
            point: The surface point the ray leaves from.
            direction: The ray direction; any non-zero length.
            normal: The surface normal at ``point``.
            bias: Offset distance in scene units.

        Returns:
            A new Ray with the offset origin and the normalized direction.

        Raises:
            DegenerateDirectionError: If the direction has zero length.
        """
        unbiased = cls(point, direction)
        n = as_vec3(normal)
        nv = dot(n, unbiased._direction)
        offset = n * (bias if nv > 0 else -bias)
        return cls._from_parts(unbiased._origin + offset, unbiased._direction)

    @property
    def origin(self) -> Vec3:
        """The point the ray starts from (read-only)."""
        return self._origin

    @property
    def direction(self) -> Vec3:
        """The unit direction of the ray (read-only)."""
        return self._direction

    def copy(self) -> "Ray":
        """Return a ray with independent copies of origin and direction."""
        return Ray._from_parts(self._origin.copy(), self._direction.copy())

    def __copy__(self) -> "Ray":
        return self.copy()

    def __deepcopy__(self, memo: dict) -> "Ray":
        return self.copy()

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Ray):
            return NotImplemented
        return bool(
            np.array_equal(self._origin, other._origin)
            and np.array_equal(self._direction, other._direction)
        )

    def __hash__(self) -> int:
        return hash((tuple(self._origin.tolist()), tuple(self._direction.tolist())))

    def __repr__(self) -> str:
        return f"Ray(origin={self._origin.tolist()}, direction={self._direction.tolist()})"

    def get_target_point(self, length: float) -> Vec3:
        """Compute the point at a signed distance along the ray.

        Args:
            length: Signed distance from the origin. Negative values lie
                behind the origin.

        Returns:
            ``origin + direction * length``, or a copy of the origin when
            ``length`` is numerically zero.
        """
        if is_zero(length):
            return self._origin.copy()
        return self._origin + self._direction * length

    def get_beam_through_point(
        self,
        dest_point: VectorLike,
        radius: float,
        amount: int,
        *,
        rng: np.random.Generator | None = None,
        sampling: DiscSampling = "legacy",
    ) -> list["Ray"]:
        """Generate a beam of rays around a target point.

        Every sampled ray starts at this ray's origin and passes through a
        point scattered around ``dest_point`` on a disc perpendicular to this
        ray's direction. This ray itself is always appended last.

        Samples with a numerically zero radial offset, or whose target lands
        on the origin, are skipped, so the beam may hold fewer than
        ``amount + 1`` rays. The origin case is skipped on purpose: building
        that ray directly with ``Ray(origin, sample - origin)`` would raise
        DegenerateDirectionError, but a beam drops the sample and carries on.

        Args:
            dest_point: The point the beam is centered on.
            radius: Radius of the sampling disc.
            amount: Number of random samples to attempt.
            rng: Generator to draw from. Defaults to the calling thread's
                generator (see ``thread_rng``).
            sampling: Disc sampling mode, "legacy" (default) or "uniform".

        Returns:
            List of rays; the last element is this ray.

        Raises:
            InvalidBeamTargetError: If ``dest_point`` is at zero distance from
                the origin.
            ValueError: If ``amount`` is negative.
        """
        dest = as_vec3(dest_point)
        if is_zero(distance(self._origin, dest)):
            raise InvalidBeamTargetError(
                f"Beam target {dest.tolist()} coincides with ray origin"
            )
        if rng is None:
            rng = thread_rng()

        norm_x, norm_y = perpendicular_basis(self._direction)
        offsets = sample_disc_offsets(rng, radius, amount, sampling)

        rays: list[Ray] = []
        for x, y in offsets:
            sample = dest
            if not is_zero(x):
                sample = sample + norm_x * x
            if not is_zero(y):
                sample = sample + norm_y * y
            to_sample = sample - self._origin
            if is_zero(length(to_sample)):
                continue
            rays.append(Ray(self._origin, to_sample))
        rays.append(self)

        logger.debug("Beam of %d rays from %d attempted samples", len(rays) - 1, amount)
        return rays


# =============================================================================
# Kernel-side ray (Taichi)
# =============================================================================


@ti.dataclass
class RayData:
    """A ray for use inside Taichi kernels.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Unit length when built
            with make_ray or make_biased_ray.
    """

    origin: vec3
    direction: vec3


@ti.func
def make_ray(origin: vec3, direction: vec3) -> RayData:
    """Create a ray with a normalized direction inside a kernel.

    Args:
        origin: The starting point.
        direction: The direction; must be non-zero (not checked in kernels).

    Returns:
        A new RayData instance.
    """
    return RayData(origin=origin, direction=tm.normalize(direction))


@ti.func
def make_biased_ray(point: vec3, direction: vec3, normal: vec3, bias: ti.f32) -> RayData:
    """Create a secondary ray offset off a surface inside a kernel.

    Same rule as Ray.biased: the origin moves by +bias along the normal when
    the ray heads to the normal's side, by -bias otherwise.
    """
    d = tm.normalize(direction)
    nv = tm.dot(normal, d)
    offset = ti.select(nv > 0.0, bias, -bias)
    return RayData(origin=point + normal * offset, direction=d)


@ti.func
def ray_at(ray: RayData, t: ti.f32) -> vec3:
    """Compute the point at distance t along the ray.

    Args:
        ray: The ray to evaluate.
        t: Signed distance along the ray.

    Returns:
        ray.origin + t * ray.direction, or ray.origin when t is numerically
        zero.
    """
    result = ray.origin
    if ti.abs(t) >= KERNEL_EPSILON:
        result = ray.origin + t * ray.direction
    return result
