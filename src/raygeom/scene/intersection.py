"""Scene-level triangle storage and kernel-side intersection.

Triangles are stored in Taichi fields (Structure of Arrays) so that batches
of rays can be traced on the GPU or on all CPU cores. The module offers:

- registry functions (``add_triangle``, ``clear_triangles``, ...)
- ``@ti.func`` queries for closest hit and any hit, for use in kernels
- ``trace_rays`` / ``occluded_rays``: Python-scope entry points tracing NumPy
  batches of rays through kernels

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raygeom.scene.intersection import add_triangle, trace_rays
    >>> add_triangle((0, 0, 0), (1, 0, 0), (0, 1, 0))
    0
    >>> ids, points = trace_rays([[0.25, 0.25, 1.0]], [[0.0, 0.0, -1.0]])
    >>> int(ids[0])
    0
"""

import logging
import math
from collections.abc import Sequence

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raygeom.core.ray import RayData, make_ray
from raygeom.geometry.plane import HitRecord
from raygeom.geometry.triangle import TriangleData, hit_triangle

logger = logging.getLogger(__name__)

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Maximum number of triangles supported in the scene
MAX_TRIANGLES = 4096

# Largest distance handed to kernels (f32 has no use for math.inf here)
T_MAX = 1e10


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection.

    Attributes:
        hit: Whether the ray intersected any triangle (1 if hit, 0 if miss).
        t: Distance along the ray to the closest hit. Only valid if hit == 1.
        point: The closest intersection point. Only valid if hit == 1.
        triangle_id: Index of the triangle hit, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    triangle_id: ti.i32


# Triangle storage: Structure of Arrays layout for GPU efficiency
triangle_v0 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_v1 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_v2 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
num_triangles = ti.field(dtype=ti.i32, shape=())


def clear_triangles() -> None:
    """Remove all triangles from the scene.

    Only the count is reset; stale field data is overwritten by later adds.
    """
    num_triangles[None] = 0


def add_triangle(
    v0: Sequence[float],
    v1: Sequence[float],
    v2: Sequence[float],
) -> int:
    """Add a triangle to the scene.

    Vertices are not validated here; callers that need a degeneracy check
    build a host-side Triangle first (TriangleScene does).

    Args:
        v0: First vertex.
        v1: Second vertex.
        v2: Third vertex.

    Returns:
        The index of the added triangle.

    Raises:
        RuntimeError: If the maximum number of triangles is exceeded.
    """
    idx = num_triangles[None]
    if idx >= MAX_TRIANGLES:
        raise RuntimeError(f"Maximum number of triangles ({MAX_TRIANGLES}) exceeded")
    triangle_v0[idx] = [float(c) for c in v0]
    triangle_v1[idx] = [float(c) for c in v1]
    triangle_v2[idx] = [float(c) for c in v2]
    num_triangles[None] = idx + 1
    return idx


def get_triangle_count() -> int:
    """Get the number of triangles in the scene."""
    return int(num_triangles[None])


@ti.func
def _load_triangle(i: ti.i32) -> TriangleData:
    return TriangleData(v0=triangle_v0[i], v1=triangle_v1[i], v2=triangle_v2[i])


@ti.func
def _to_scene_hit_record(rec: HitRecord, triangle_id: ti.i32) -> SceneHitRecord:
    return SceneHitRecord(hit=rec.hit, t=rec.t, point=rec.point, triangle_id=triangle_id)


@ti.func
def intersect_triangles(ray: RayData, max_distance: ti.f32) -> SceneHitRecord:
    """Find the closest triangle hit along a ray.

    Args:
        ray: The ray to trace (unit direction).
        max_distance: Maximum distance from the ray origin.

    Returns:
        A SceneHitRecord for the closest hit, or a miss record.
    """
    closest_t = max_distance
    result = SceneHitRecord(hit=0, t=0.0, point=vec3(0.0, 0.0, 0.0), triangle_id=-1)

    for i in range(num_triangles[None]):
        rec = hit_triangle(ray, _load_triangle(i), closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _to_scene_hit_record(rec, i)

    return result


@ti.func
def intersect_triangles_any(ray: RayData, max_distance: ti.f32) -> ti.i32:
    """Test whether any triangle blocks a ray (shadow ray query).

    Returns:
        1 if any triangle was hit within max_distance, 0 otherwise.
    """
    hit_any = 0
    for i in range(num_triangles[None]):
        if hit_any == 0:
            rec = hit_triangle(ray, _load_triangle(i), max_distance)
            if rec.hit == 1:
                hit_any = 1
    return hit_any


@ti.kernel
def _trace_kernel(
    origins: ti.types.ndarray(),
    directions: ti.types.ndarray(),
    max_distance: ti.f32,
    out_ids: ti.types.ndarray(),
    out_points: ti.types.ndarray(),
):
    for i in range(origins.shape[0]):
        ray = make_ray(
            vec3(origins[i, 0], origins[i, 1], origins[i, 2]),
            vec3(directions[i, 0], directions[i, 1], directions[i, 2]),
        )
        rec = intersect_triangles(ray, max_distance)
        out_ids[i] = rec.triangle_id
        for c in ti.static(range(3)):
            out_points[i, c] = rec.point[c]


@ti.kernel
def _occlusion_kernel(
    origins: ti.types.ndarray(),
    directions: ti.types.ndarray(),
    max_distances: ti.types.ndarray(),
    out_blocked: ti.types.ndarray(),
):
    for i in range(origins.shape[0]):
        ray = make_ray(
            vec3(origins[i, 0], origins[i, 1], origins[i, 2]),
            vec3(directions[i, 0], directions[i, 1], directions[i, 2]),
        )
        out_blocked[i] = intersect_triangles_any(ray, max_distances[i])


def _as_ray_batch(values: npt.ArrayLike, name: str) -> npt.NDArray[np.float32]:
    arr = np.ascontiguousarray(values, dtype=np.float32)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"{name} must have shape (N, 3), got {arr.shape}")
    return arr


def _kernel_distance(max_distance: float) -> float:
    return min(float(max_distance), T_MAX)


def _kernel_distances(
    max_distance: float | npt.ArrayLike, count: int
) -> npt.NDArray[np.float32]:
    limits = np.asarray(max_distance, dtype=np.float64)
    if limits.ndim > 1 or (limits.ndim == 1 and limits.shape[0] != count):
        raise ValueError(
            f"max_distance must be a scalar or have shape ({count},), got {limits.shape}"
        )
    limits = np.minimum(np.broadcast_to(limits, (count,)), T_MAX)
    return np.ascontiguousarray(limits, dtype=np.float32)


def trace_rays(
    origins: npt.ArrayLike,
    directions: npt.ArrayLike,
    max_distance: float = math.inf,
) -> tuple[npt.NDArray[np.int32], npt.NDArray[np.float32]]:
    """Trace a batch of rays against all triangles in the scene.

    Args:
        origins: Ray origins, shape (N, 3).
        directions: Ray directions, shape (N, 3); normalized in the kernel.
        max_distance: Maximum hit distance for every ray.

    Returns:
        Tuple (ids, points): ids has shape (N,) with the closest triangle
        index per ray (-1 on a miss); points has shape (N, 3) and is only
        meaningful where ids >= 0.

    Raises:
        ValueError: If the arrays are not (N, 3) or differ in length.
    """
    o = _as_ray_batch(origins, "origins")
    d = _as_ray_batch(directions, "directions")
    if o.shape != d.shape:
        raise ValueError(f"origins {o.shape} and directions {d.shape} differ in shape")

    ids = np.full(o.shape[0], -1, dtype=np.int32)
    points = np.zeros_like(o)
    if o.shape[0] == 0:
        return ids, points

    logger.debug("Tracing %d rays against %d triangles", o.shape[0], get_triangle_count())
    _trace_kernel(o, d, _kernel_distance(max_distance), ids, points)
    return ids, points


def occluded_rays(
    origins: npt.ArrayLike,
    directions: npt.ArrayLike,
    max_distance: float | npt.ArrayLike = math.inf,
) -> npt.NDArray[np.bool_]:
    """Test a batch of shadow rays for occlusion.

    Args:
        origins: Ray origins, shape (N, 3).
        directions: Ray directions, shape (N, 3).
        max_distance: Occluders beyond this distance are ignored. Either one
            distance for every ray or an array of shape (N,).

    Returns:
        Boolean array of shape (N,), True where some triangle blocks the ray.

    Raises:
        ValueError: If the arrays are malformed or differ in length.
    """
    o = _as_ray_batch(origins, "origins")
    d = _as_ray_batch(directions, "directions")
    if o.shape != d.shape:
        raise ValueError(f"origins {o.shape} and directions {d.shape} differ in shape")

    limits = _kernel_distances(max_distance, o.shape[0])
    blocked = np.zeros(o.shape[0], dtype=np.int32)
    if o.shape[0] == 0:
        return blocked.astype(bool)

    _occlusion_kernel(o, d, limits, blocked)
    return blocked.astype(bool)
