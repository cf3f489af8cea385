"""Numerical tolerances shared by every geometric comparison.

All "is this zero?" decisions in the package route through ``is_zero`` on the
host side and through ``KERNEL_EPSILON`` inside Taichi kernels, which run in
single precision.
"""

# Zero threshold for host-side float64 arithmetic.
EPSILON = 1e-10

# Zero threshold for Taichi kernels (f32 arithmetic).
KERNEL_EPSILON = 1e-6

# Distance a biased ray origin is pushed along the surface normal (scene units).
RAY_BIAS = 0.1


def is_zero(value: float, eps: float = EPSILON) -> bool:
    """Check whether a scalar is numerically zero.

    Args:
        value: The value to test.
        eps: Tolerance below which the value counts as zero.

    Returns:
        True if ``abs(value) < eps``.
    """
    return abs(value) < eps


def align_zero(value: float, eps: float = EPSILON) -> float:
    """Snap a numerically-zero value to exactly 0.0."""
    return 0.0 if is_zero(value, eps) else value
