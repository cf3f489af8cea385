"""Abstract base class for intersectable geometry."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from raygeom.core.vector import Vec3, VectorLike, distance

if TYPE_CHECKING:
    from raygeom.core.ray import Ray

    from .geopoint import GeoPoint


class Geometry(ABC):
    """A surface that rays can be intersected with.

    Subclasses return ``None`` when a ray misses, and otherwise a list of
    GeoPoint records owned by the subclass instance.
    """

    @abstractmethod
    def find_intersections(
        self, ray: Ray, max_distance: float = math.inf
    ) -> list[GeoPoint] | None:
        """Intersect a ray with this geometry.

        Args:
            ray: The ray to test.
            max_distance: Hits farther than this from the ray origin are
                ignored.

        Returns:
            A non-empty list of intersection records, or None on a miss.
        """

    @abstractmethod
    def get_normal(self, point: VectorLike | None = None) -> Vec3:
        """Return the unit surface normal at a point on the geometry."""

    def find_closest_intersection(
        self, ray: Ray, max_distance: float = math.inf
    ) -> GeoPoint | None:
        """Return the intersection nearest to the ray origin, or None."""
        hits = self.find_intersections(ray, max_distance)
        if hits is None:
            return None
        return min(hits, key=lambda gp: distance(ray.origin, gp.point))
