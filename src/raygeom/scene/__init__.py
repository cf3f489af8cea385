"""Scene module: Taichi-backed triangle storage and batched tracing.

Importing this package allocates Taichi fields; call ti.init first.
"""

from .intersection import (
    MAX_TRIANGLES,
    SceneHitRecord,
    add_triangle,
    clear_triangles,
    get_triangle_count,
    intersect_triangles,
    intersect_triangles_any,
    occluded_rays,
    trace_rays,
)
from .manager import TriangleScene

__all__ = [
    "MAX_TRIANGLES",
    "SceneHitRecord",
    "add_triangle",
    "clear_triangles",
    "get_triangle_count",
    "intersect_triangles",
    "intersect_triangles_any",
    "occluded_rays",
    "trace_rays",
    "TriangleScene",
]
