"""Triangle scene manager coordinating host-side and kernel-side storage.

``TriangleScene`` keeps every triangle twice: as a host-side ``Triangle``
(for exact float64 queries that return GeoPoint records) and in the Taichi
fields of ``raygeom.scene.intersection`` (for batched kernel tracing). Both
copies share one index space.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raygeom.core.ray import Ray
    >>> from raygeom.scene.manager import TriangleScene
    >>> scene = TriangleScene()
    >>> scene.add_triangle((0, 0, 0), (1, 0, 0), (0, 1, 0))
    0
    >>> shadow = Ray((0.25, 0.25, -1), (0, 0, 1))
    >>> beam = shadow.get_beam_through_point((0.25, 0.25, 5), radius=0.5, amount=16)
    >>> 0.0 <= scene.beam_visibility(beam) <= 1.0
    True
"""

import logging
import math
from collections.abc import Sequence

import numpy as np

from raygeom.core.config import DEFAULT_POLICY, RayPolicy
from raygeom.core.ray import Ray
from raygeom.core.sampling import thread_rng
from raygeom.core.vector import VectorLike, as_vec3, distance, dot
from raygeom.geometry.geopoint import GeoPoint
from raygeom.geometry.triangle import Triangle
from raygeom.scene.intersection import (
    MAX_TRIANGLES,
    add_triangle,
    clear_triangles,
    get_triangle_count,
    occluded_rays,
    trace_rays,
)

logger = logging.getLogger(__name__)


class TriangleScene:
    """A collection of triangles traceable on the host or in kernels.

    Only one TriangleScene should be live at a time: the kernel-side storage
    is module-level, and creating or clearing a scene resets it.

    Attributes:
        triangles: Host-side triangles, indexed like the kernel storage.
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.triangles: list[Triangle] = []
        self.clear()

    def clear(self) -> None:
        """Remove all triangles (host and kernel storage)."""
        clear_triangles()
        self.triangles.clear()
        logger.debug("Triangle scene cleared")

    def add_triangle(self, p1: VectorLike, p2: VectorLike, p3: VectorLike) -> int:
        """Add a triangle to the scene.

        Args:
            p1: First vertex.
            p2: Second vertex.
            p3: Third vertex.

        Returns:
            The index of the added triangle.

        Raises:
            DegenerateGeometryError: If the vertices are collinear.
            RuntimeError: If the maximum number of triangles is exceeded.
        """
        triangle = Triangle(p1, p2, p3)
        if len(self.triangles) >= MAX_TRIANGLES:
            raise RuntimeError(f"Maximum number of triangles ({MAX_TRIANGLES}) exceeded")
        index = add_triangle(*(v.tolist() for v in triangle.vertices))
        self.triangles.append(triangle)
        return index

    def add_mesh(self, vertices: Sequence[VectorLike], faces: Sequence[Sequence[int]]) -> list[int]:
        """Add an indexed triangle mesh.

        Args:
            vertices: Vertex positions.
            faces: Vertex index triples, one per triangle.

        Returns:
            Indices of the added triangles, in face order.
        """
        indices = [self.add_triangle(*(vertices[k] for k in face)) for face in faces]
        logger.info("Added mesh with %d triangles (scene total %d)", len(indices), len(self.triangles))
        return indices

    def get_triangle_count(self) -> int:
        """Get the number of triangles in the scene."""
        return get_triangle_count()

    def get_triangle(self, index: int) -> Triangle | None:
        """Get a host-side triangle by index, or None if out of range."""
        if 0 <= index < len(self.triangles):
            return self.triangles[index]
        return None

    def find_closest_intersection(
        self, ray: Ray, max_distance: float = math.inf
    ) -> GeoPoint | None:
        """Find the closest hit along a ray using host-side float64 tests.

        Args:
            ray: The ray to trace.
            max_distance: Maximum distance from the ray origin.

        Returns:
            The closest GeoPoint (owned by the hit triangle), or None.
        """
        closest: GeoPoint | None = None
        for triangle in self.triangles:
            hit = triangle.find_closest_intersection(ray, max_distance)
            if hit is not None:
                closest = hit
                max_distance = distance(ray.origin, hit.point)
        return closest

    def trace_rays(
        self, rays: Sequence[Ray], max_distance: float = math.inf
    ) -> list[GeoPoint | None]:
        """Trace many rays at once in a Taichi kernel.

        Args:
            rays: The rays to trace.
            max_distance: Maximum hit distance for every ray.

        Returns:
            One entry per ray: a GeoPoint owned by the closest triangle, or
            None on a miss. Points are single precision.
        """
        if not rays:
            return []
        origins = np.stack([ray.origin for ray in rays])
        directions = np.stack([ray.direction for ray in rays])
        ids, points = trace_rays(origins, directions, max_distance)
        return [
            GeoPoint(self.triangles[idx], point) if idx >= 0 else None
            for idx, point in zip(ids.tolist(), points)
        ]

    def beam_visibility(
        self, rays: Sequence[Ray], max_distance: float | Sequence[float] = math.inf
    ) -> float:
        """Fraction of rays not blocked by any triangle.

        Intended for beams built with Ray.get_beam_through_point toward a
        light: the result approximates how much of the light is visible.

        Args:
            rays: The shadow rays.
            max_distance: Occluders beyond this distance are ignored
                (typically the distance to the light). Either one distance
                for every ray or one per ray.

        Returns:
            A value in [0, 1]; 1.0 for an empty sequence.
        """
        if not rays:
            return 1.0
        origins = np.stack([ray.origin for ray in rays])
        directions = np.stack([ray.direction for ray in rays])
        blocked = occluded_rays(origins, directions, max_distance)
        return 1.0 - float(np.count_nonzero(blocked)) / len(rays)

    def soft_shadow(
        self,
        point: VectorLike,
        normal: VectorLike,
        light: VectorLike,
        radius: float,
        amount: int,
        *,
        policy: RayPolicy = DEFAULT_POLICY,
        rng: np.random.Generator | None = None,
    ) -> float:
        """Estimate how much of a disc-shaped light a surface point sees.

        Builds a shadow ray from ``point`` toward ``light``, biased off the
        surface by ``policy.bias``, spreads it into a beam over a disc of
        ``radius`` around the light, and traces the beam. Each beam ray only
        counts occluders in front of its own disc sample.

        Args:
            point: The surface point being shaded.
            normal: The surface normal at ``point``.
            light: Center of the light.
            radius: Radius of the light disc.
            amount: Number of beam samples to attempt.
            policy: Bias, seed and sampling mode.
            rng: Generator for the beam. Defaults to the calling thread's
                generator, seeded with ``policy.seed``.

        Returns:
            Visibility in [0, 1]: 0 is full shadow, 1 fully lit.

        Raises:
            DegenerateDirectionError: If ``point`` coincides with ``light``.
        """
        light_pos = as_vec3(light)
        shadow_ray = Ray.biased(point, light_pos - as_vec3(point), normal, bias=policy.bias)
        if rng is None:
            rng = thread_rng(policy.seed)
        beam = shadow_ray.get_beam_through_point(
            light_pos, radius, amount, rng=rng, sampling=policy.sampling
        )
        # Disc samples lie in the plane through the light perpendicular to the
        # shadow ray; each beam ray meets that plane at its own sample.
        axis = shadow_ray.direction
        depth = dot(light_pos - shadow_ray.origin, axis)
        limits = [depth / dot(ray.direction, axis) for ray in beam]
        return self.beam_visibility(beam, limits)
