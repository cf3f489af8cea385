"""Intersection record pairing a hit point with the geometry that produced it."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

import numpy as np

from raygeom.core.vector import Vec3, VectorLike, as_vec3

if TYPE_CHECKING:
    from .base import Geometry


@dataclass(frozen=True, eq=False)
class GeoPoint:
    """A ray/geometry intersection.

    Records are immutable. When a composite shape accepts a hit found by a
    helper surface (a triangle accepting its supporting plane's hit), it
    builds a new record with ``retagged`` instead of editing the helper's.

    Attributes:
        geometry: The geometry the point lies on.
        point: The intersection point (read-only array).
    """

    geometry: Geometry
    point: Vec3 = field(repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "point", as_vec3(self.point))

    @classmethod
    def at(cls, geometry: Geometry, point: VectorLike) -> GeoPoint:
        """Create a record from any 3-component point."""
        return cls(geometry=geometry, point=as_vec3(point))

    def retagged(self, geometry: Geometry) -> GeoPoint:
        """Return a copy of this record owned by another geometry."""
        return replace(self, geometry=geometry)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GeoPoint):
            return NotImplemented
        return self.geometry is other.geometry and bool(np.array_equal(self.point, other.point))

    def __hash__(self) -> int:
        return hash((id(self.geometry), tuple(self.point.tolist())))

    def __repr__(self) -> str:
        return f"GeoPoint(geometry={type(self.geometry).__name__}, point={self.point.tolist()})"
