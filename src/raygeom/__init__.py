"""Ray/geometry intersection engine for ray tracing.

This package provides the ray abstraction and triangle intersection used by a
ray tracer, in two renditions: exact host-side objects (NumPy float64) and
Taichi kernel functions for batched GPU/CPU tracing.

Subpackages:
    core: Tolerances, errors, vector helpers, ray policy, sampling, and Ray
    geometry: Intersection records, planes and triangles
    scene: Taichi-backed triangle storage with batched tracing

Taichi must be initialized (ti.init) by the application before importing
raygeom.scene, which allocates Taichi fields at import time.
"""

__version__ = "0.1.0"
