"""Geometry module for intersectable surfaces.

Components:
    geopoint: GeoPoint intersection record
    base: Geometry abstract base class
    plane: Infinite plane (a triangle's supporting plane)
    triangle: Triangle with the signed volume containment test

Host-side classes return ``None`` on a miss and a list of GeoPoint records on
a hit. Kernel-side functions follow the pattern:
    rec = hit_shape(ray, shape_data, max_distance)  # rec.hit == 1 on a hit
"""

from .base import Geometry
from .geopoint import GeoPoint
from .plane import HitRecord, Plane, hit_plane, make_miss_record
from .triangle import Triangle, TriangleData, hit_triangle, signed_volumes, triangle_normal

__all__ = [
    "Geometry",
    "GeoPoint",
    "Plane",
    "HitRecord",
    "hit_plane",
    "make_miss_record",
    "Triangle",
    "TriangleData",
    "hit_triangle",
    "signed_volumes",
    "triangle_normal",
]
