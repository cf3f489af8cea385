"""Triangle primitive with ray-triangle intersection.

A triangle is defined by three ordered, non-collinear vertices. Its
supporting plane is computed once at construction.

Ray-triangle intersection is a two-step test:
1. Intersect the ray with the supporting plane. No plane hit, no triangle hit.
2. Decide whether the plane hit lies inside the triangle with the signed
   volume (same-side) test. With ray origin p0 and direction v:

       v1 = vertex0 - p0,  v2 = vertex1 - p0,  v3 = vertex2 - p0
       s1 = v . (v1 x v2), s2 = v . (v2 x v3), s3 = v . (v3 x v1)

   Each s_i is six times the signed volume of the tetrahedron spanned by the
   ray and one edge. The ray passes through the interior exactly when all
   three share a strict sign.

If any s_i is numerically zero the ray grazes an edge or vertex; that case is
reported as a miss rather than resolved either way.

Example:
    >>> from raygeom.core.ray import Ray
    >>> from raygeom.geometry.triangle import Triangle
    >>> tri = Triangle((0, 0, 0), (1, 0, 0), (0, 1, 0))
    >>> hits = tri.find_intersections(Ray((0.25, 0.25, 1), (0, 0, -1)))
    >>> hits[0].point.tolist()
    [0.25, 0.25, 0.0]
"""

import math

import taichi as ti
import taichi.math as tm

from raygeom.core.ray import Ray, RayData
from raygeom.core.tolerance import KERNEL_EPSILON, is_zero
from raygeom.core.vector import Vec3, VectorLike, as_vec3, cross, dot

from .base import Geometry
from .geopoint import GeoPoint
from .plane import HitRecord, Plane, hit_plane, make_miss_record

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


class Triangle(Geometry):
    """A triangle defined by three vertices.

    Attributes:
        vertices: The three vertices in winding order (read-only arrays).
        plane: The supporting plane, normal ``(p2 - p1) x (p3 - p1)``.
    """

    def __init__(self, p1: VectorLike, p2: VectorLike, p3: VectorLike) -> None:
        """Create a triangle.

        Raises:
            DegenerateGeometryError: If the vertices are collinear.
        """
        self._vertices = (as_vec3(p1), as_vec3(p2), as_vec3(p3))
        self._plane = Plane.from_points(*self._vertices)

    @property
    def vertices(self) -> tuple[Vec3, Vec3, Vec3]:
        return self._vertices

    @property
    def plane(self) -> Plane:
        return self._plane

    def get_normal(self, point: VectorLike | None = None) -> Vec3:
        """Return the triangle's normal; the same at every point."""
        return self._plane.normal

    def find_intersections(
        self, ray: Ray, max_distance: float = math.inf
    ) -> list[GeoPoint] | None:
        """Intersect a ray with the triangle's interior.

        Args:
            ray: The ray to test.
            max_distance: Maximum distance from the ray origin.

        Returns:
            A single-element list holding a GeoPoint owned by this triangle,
            or None on a miss (including rays through an edge or vertex).
        """
        plane_hits = self._plane.find_intersections(ray, max_distance)
        if plane_hits is None:
            return None

        p0 = ray.origin
        v = ray.direction

        v1 = self._vertices[0] - p0
        v2 = self._vertices[1] - p0
        v3 = self._vertices[2] - p0

        s1 = dot(v, cross(v1, v2))
        if is_zero(s1):
            return None
        s2 = dot(v, cross(v2, v3))
        if is_zero(s2):
            return None
        s3 = dot(v, cross(v3, v1))
        if is_zero(s3):
            return None

        if (s1 > 0 and s2 > 0 and s3 > 0) or (s1 < 0 and s2 < 0 and s3 < 0):
            return [plane_hits[0].retagged(self)]
        return None

    def __repr__(self) -> str:
        return "Triangle({}, {}, {})".format(*(p.tolist() for p in self._vertices))


# =============================================================================
# Kernel-side intersection (Taichi)
# =============================================================================


@ti.dataclass
class TriangleData:
    """A triangle for use inside Taichi kernels.

    Attributes:
        v0: First vertex (vec3).
        v1: Second vertex (vec3).
        v2: Third vertex (vec3).
    """

    v0: vec3
    v1: vec3
    v2: vec3


@ti.func
def triangle_normal(tri: TriangleData) -> vec3:
    """Compute the unit normal normalize((v1 - v0) x (v2 - v0))."""
    return tm.normalize(tm.cross(tri.v1 - tri.v0, tri.v2 - tri.v0))


@ti.func
def signed_volumes(ray: RayData, tri: TriangleData) -> vec3:
    """Compute the three same-side determinants (s1, s2, s3) for a ray."""
    a = tri.v0 - ray.origin
    b = tri.v1 - ray.origin
    c = tri.v2 - ray.origin
    return vec3(
        tm.dot(ray.direction, tm.cross(a, b)),
        tm.dot(ray.direction, tm.cross(b, c)),
        tm.dot(ray.direction, tm.cross(c, a)),
    )


@ti.func
def hit_triangle(ray: RayData, tri: TriangleData, max_distance: ti.f32) -> HitRecord:
    """Test for ray-triangle intersection inside a kernel.

    Follows the same rules as Triangle.find_intersections: supporting plane
    test first, then the signed volume test, with any numerically zero
    volume counted as a miss.

    Args:
        ray: The ray to test (unit direction).
        tri: The triangle to test against.
        max_distance: Maximum distance from the ray origin.

    Returns:
        A HitRecord; check the hit field.
    """
    result = make_miss_record()

    plane_rec = hit_plane(ray, tri.v0, triangle_normal(tri), max_distance)
    if plane_rec.hit == 1:
        s = signed_volumes(ray, tri)
        on_edge = (
            ti.abs(s.x) < KERNEL_EPSILON
            or ti.abs(s.y) < KERNEL_EPSILON
            or ti.abs(s.z) < KERNEL_EPSILON
        )
        if not on_edge:
            if (s.x > 0.0 and s.y > 0.0 and s.z > 0.0) or (s.x < 0.0 and s.y < 0.0 and s.z < 0.0):
                result = plane_rec

    return result
