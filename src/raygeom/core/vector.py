"""Host-side 3D vector utilities built on NumPy.

Points and vectors are both ``float64`` arrays of shape ``(3,)``. Values held
by rays and geometry are read-only copies so they can be shared safely;
results of arithmetic are ordinary writable arrays.

Example:
    >>> from raygeom.core.vector import vec3, normalize, cross
    >>> n = normalize(cross(vec3(1, 0, 0), vec3(0, 1, 0)))
    >>> n.tolist()
    [0.0, 0.0, 1.0]
"""

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

from .errors import ZeroVectorError
from .tolerance import is_zero

Vec3 = npt.NDArray[np.float64]
VectorLike = Sequence[float] | npt.NDArray[np.floating]


def vec3(x: float, y: float, z: float) -> Vec3:
    """Create a 3D vector (or point) from its components."""
    return np.array((x, y, z), dtype=np.float64)


def as_vec3(value: VectorLike) -> Vec3:
    """Return a read-only float64 copy of a 3-component sequence.

    Args:
        value: Any sequence or array holding exactly three numbers.

    Returns:
        An independent, non-writeable array of shape (3,).

    Raises:
        ValueError: If the input does not have exactly three components.
    """
    arr = np.array(value, dtype=np.float64).reshape(-1)
    if arr.shape != (3,):
        raise ValueError(f"Expected 3 components, got shape {arr.shape}")
    arr.flags.writeable = False
    return arr


def length_squared(v: Vec3) -> float:
    """Squared Euclidean length; avoids the square root."""
    return float(np.dot(v, v))


def length(v: Vec3) -> float:
    """Euclidean length of a vector."""
    return float(np.sqrt(length_squared(v)))


def normalize(v: Vec3) -> Vec3:
    """Normalize a vector to unit length.

    Args:
        v: The input vector.

    Returns:
        A unit vector with the same direction as ``v``.

    Raises:
        ZeroVectorError: If ``v`` has (numerically) zero length.
    """
    n = length(v)
    if is_zero(n):
        raise ZeroVectorError(f"Cannot normalize zero-length vector {np.asarray(v).tolist()}")
    return np.asarray(v, dtype=np.float64) / n


def dot(a: Vec3, b: Vec3) -> float:
    """Dot product a . b."""
    return float(np.dot(a, b))


def cross(a: Vec3, b: Vec3) -> Vec3:
    """Cross product a x b."""
    return np.cross(a, b)


def distance(p: Vec3, q: Vec3) -> float:
    """Distance between two points."""
    return length(np.asarray(q, dtype=np.float64) - np.asarray(p, dtype=np.float64))
