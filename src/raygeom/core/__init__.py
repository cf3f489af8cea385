"""Core ray module.

Components:
    tolerance: Shared zero predicate and epsilon constants
    errors: Exception hierarchy
    vector: NumPy vector helpers (normalize, dot, cross, distance)
    config: RayPolicy (bias, seed, sampling mode)
    sampling: Per-thread generators, perpendicular basis, disc offsets
    ray: Host-side Ray and kernel-side RayData
"""

from .config import DEFAULT_POLICY, DiscSampling, RayPolicy, scaled_ray_policy
from .errors import (
    DegenerateDirectionError,
    DegenerateGeometryError,
    InvalidBeamTargetError,
    RayGeometryError,
    ZeroVectorError,
)
from .ray import Ray, RayData, make_biased_ray, make_ray, ray_at
from .sampling import (
    make_rng,
    perpendicular_basis,
    reset_thread_rng,
    sample_disc_offsets,
    thread_index,
    thread_rng,
)
from .tolerance import EPSILON, KERNEL_EPSILON, RAY_BIAS, align_zero, is_zero
from .vector import as_vec3, cross, distance, dot, length, length_squared, normalize, vec3

__all__ = [
    "Ray",
    "RayData",
    "make_ray",
    "make_biased_ray",
    "ray_at",
    "RayPolicy",
    "DEFAULT_POLICY",
    "DiscSampling",
    "scaled_ray_policy",
    "RayGeometryError",
    "ZeroVectorError",
    "DegenerateDirectionError",
    "DegenerateGeometryError",
    "InvalidBeamTargetError",
    "make_rng",
    "thread_rng",
    "thread_index",
    "reset_thread_rng",
    "perpendicular_basis",
    "sample_disc_offsets",
    "EPSILON",
    "KERNEL_EPSILON",
    "RAY_BIAS",
    "is_zero",
    "align_zero",
    "vec3",
    "as_vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "distance",
]
