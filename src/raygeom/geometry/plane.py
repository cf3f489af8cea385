"""Infinite plane with ray-plane intersection.

A plane is defined by a reference point ``q0`` and a unit normal ``n``. It is
mainly used as the supporting plane of a triangle: the cheap ray-plane test
runs first and the triangle then decides whether the single candidate point
lies inside it.

Ray-plane intersection solves ``n . (p0 + t*v - q0) = 0``:

    t = n . (q0 - p0) / (n . v)

The ray misses when it is parallel to the plane (``n . v == 0``), when the
hit lies at or behind the origin (``t <= 0``), or beyond ``max_distance``.

Example:
    >>> from raygeom.core.ray import Ray
    >>> from raygeom.geometry.plane import Plane
    >>> floor = Plane((0, 0, 0), (0, 0, 1))
    >>> hits = floor.find_intersections(Ray((0, 0, 2), (0, 0, -1)))
    >>> hits[0].point.tolist()
    [0.0, 0.0, 0.0]
"""

import math

import taichi as ti
import taichi.math as tm

from raygeom.core.errors import DegenerateGeometryError, ZeroVectorError
from raygeom.core.ray import Ray, RayData, ray_at
from raygeom.core.tolerance import KERNEL_EPSILON, align_zero, is_zero
from raygeom.core.vector import Vec3, VectorLike, as_vec3, cross, dot, length, normalize

from .base import Geometry
from .geopoint import GeoPoint

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


class Plane(Geometry):
    """An infinite plane through a point with a unit normal.

    Attributes:
        point: The reference point q0 on the plane.
        normal: The unit normal n.
    """

    def __init__(self, point: VectorLike, normal: VectorLike) -> None:
        """Create a plane from a point and a normal of any non-zero length.

        Raises:
            DegenerateGeometryError: If the normal has zero length.
        """
        self._point = as_vec3(point)
        try:
            self._normal = as_vec3(normalize(as_vec3(normal)))
        except ZeroVectorError as exc:
            raise DegenerateGeometryError("Plane normal must be non-zero") from exc

    @classmethod
    def from_points(cls, p1: VectorLike, p2: VectorLike, p3: VectorLike) -> "Plane":
        """Create the plane through three points.

        The normal is ``normalize((p2 - p1) x (p3 - p1))``.

        Raises:
            DegenerateGeometryError: If the points are collinear or coincide.
        """
        a, b, c = as_vec3(p1), as_vec3(p2), as_vec3(p3)
        n = cross(b - a, c - a)
        if is_zero(length(n)):
            raise DegenerateGeometryError(
                f"Points {a.tolist()}, {b.tolist()}, {c.tolist()} do not span a plane"
            )
        return cls(a, n)

    @property
    def point(self) -> Vec3:
        return self._point

    @property
    def normal(self) -> Vec3:
        return self._normal

    def get_normal(self, point: VectorLike | None = None) -> Vec3:
        """Return the plane normal; the same at every point."""
        return self._normal

    def find_intersections(
        self, ray: Ray, max_distance: float = math.inf
    ) -> list[GeoPoint] | None:
        """Intersect a ray with the plane.

        Args:
            ray: The ray to test.
            max_distance: Maximum distance from the ray origin.

        Returns:
            A single-element list with the hit, or None when the ray starts
            on the reference point, is parallel to the plane, points away
            from it, or hits beyond ``max_distance``.
        """
        to_plane = self._point - ray.origin
        if is_zero(length(to_plane)):
            return None

        nv = dot(self._normal, ray.direction)
        if is_zero(nv):
            return None

        t = align_zero(dot(self._normal, to_plane) / nv)
        if t <= 0:
            return None
        if align_zero(t - max_distance) > 0:
            return None

        return [GeoPoint(self, ray.get_target_point(t))]

    def __repr__(self) -> str:
        return f"Plane(point={self._point.tolist()}, normal={self._normal.tolist()})"


# =============================================================================
# Kernel-side intersection (Taichi)
# =============================================================================


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection inside a kernel.

    Attributes:
        hit: Whether the ray intersected the surface (1 if hit, 0 if miss).
        t: Distance along the ray to the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(hit=0, t=0.0, point=vec3(0.0, 0.0, 0.0))


@ti.func
def hit_plane(
    ray: RayData,
    plane_point: vec3,
    plane_normal: vec3,
    max_distance: ti.f32,
) -> HitRecord:
    """Test for ray-plane intersection inside a kernel.

    Follows the same rules as Plane.find_intersections, with the single
    precision tolerance KERNEL_EPSILON.

    Args:
        ray: The ray to test (unit direction).
        plane_point: Reference point on the plane.
        plane_normal: Unit plane normal.
        max_distance: Maximum distance from the ray origin.

    Returns:
        A HitRecord; check the hit field.
    """
    result = make_miss_record()

    to_plane = plane_point - ray.origin
    denom = tm.dot(plane_normal, ray.direction)

    # Origin on the reference point, or ray parallel to the plane
    if tm.length(to_plane) >= KERNEL_EPSILON and ti.abs(denom) >= KERNEL_EPSILON:
        t = tm.dot(plane_normal, to_plane) / denom
        if t > KERNEL_EPSILON and t - max_distance <= KERNEL_EPSILON:
            result = HitRecord(hit=1, t=t, point=ray_at(ray, t))

    return result
