"""Random sampling utilities for beam (soft-effect) generation.

Beams scatter target points over a disc perpendicular to a ray. This module
provides the pieces: an orthonormal basis around the ray direction, random
offsets inside the disc, and generator handles that are never shared between
threads.

Random state is always explicit. Callers either pass a
``numpy.random.Generator`` they own (``make_rng`` builds reproducible ones per
worker) or fall back to ``thread_rng()``, which keeps one generator per thread.

Example:
    >>> from raygeom.core.sampling import make_rng, sample_disc_offsets
    >>> rng = make_rng(seed=42)
    >>> offsets = sample_disc_offsets(rng, radius=0.5, amount=8)
    >>> offsets.shape[1]
    2
"""

import itertools
import threading

import numpy as np
import numpy.typing as npt

from .config import DiscSampling
from .tolerance import EPSILON, is_zero
from .vector import Vec3, cross, normalize, vec3

_local = threading.local()
_thread_counter = itertools.count()
_counter_lock = threading.Lock()


def make_rng(seed: int | None = None, worker: int = 0) -> np.random.Generator:
    """Create an independent generator for one worker.

    Generators created with the same ``seed`` and different ``worker``
    indices produce independent streams; the same pair always reproduces the
    same stream.

    Args:
        seed: Base seed. None draws fresh entropy from the OS.
        worker: Index of the worker (thread, process, tile) using the stream.

    Returns:
        A new numpy Generator.
    """
    if seed is None:
        return np.random.default_rng()
    return np.random.default_rng(np.random.SeedSequence([seed, worker]))


def thread_index() -> int:
    """Return a small index for the calling thread, assigned in first-use order.

    Unlike ``threading.get_ident()``, the index does not change between runs
    of the same program, so seeded per-thread streams are reproducible.
    """
    index = getattr(_local, "index", None)
    if index is None:
        with _counter_lock:
            index = next(_thread_counter)
        _local.index = index
    return index


def thread_rng(seed: int | None = None) -> np.random.Generator:
    """Return the calling thread's beam generator.

    The generator is keyed on ``(seed, thread_index())``. Requesting a seed
    different from the one the current generator was built with starts a
    fresh stream from ``make_rng(seed, worker=thread_index())``; requesting the
    same seed continues the existing stream. ``seed=None`` returns whatever
    generator the thread already has, creating an unseeded one if needed.

    Args:
        seed: Base seed, or None to accept the thread's current generator.

    Returns:
        The thread's numpy Generator.
    """
    rng = getattr(_local, "rng", None)
    if rng is None or (seed is not None and seed != _local.seed):
        rng = make_rng(seed, worker=thread_index())
        _local.rng = rng
        _local.seed = seed
    return rng


def reset_thread_rng() -> None:
    """Drop the calling thread's generator so the next request starts afresh."""
    _local.rng = None
    _local.seed = None


def perpendicular_basis(direction: Vec3) -> tuple[Vec3, Vec3]:
    """Build two unit vectors spanning the plane perpendicular to a direction.

    The generic choice ``(-y, x, 0)`` vanishes when the direction is parallel
    to the z-axis, so that case uses ``(-z, 0, 0)`` instead.

    Args:
        direction: Unit direction vector.

    Returns:
        Tuple (norm_x, norm_y) such that {direction, norm_x, norm_y} is an
        orthonormal basis.
    """
    x, y, z = float(direction[0]), float(direction[1]), float(direction[2])
    if is_zero(x) and is_zero(y):
        norm_x = normalize(vec3(-z, 0.0, 0.0))
    else:
        norm_x = normalize(vec3(-y, x, 0.0))
    norm_y = normalize(cross(direction, norm_x))
    return norm_x, norm_y


def sample_disc_offsets(
    rng: np.random.Generator,
    radius: float,
    amount: int,
    sampling: DiscSampling = "legacy",
) -> npt.NDArray[np.float64]:
    """Draw local (x, y) offsets inside a disc of the given radius.

    Every sample consumes exactly two uniform draws, angle first then radial
    offset. Samples whose radial offset is numerically zero are dropped
    without being replaced, so fewer than ``amount`` rows may come back.

    In ``legacy`` mode the angle enters through ``cos_theta`` uniform in
    [-1, 1] with a non-negative sine, and the radial offset is uniform in
    [-radius, radius]. ``uniform`` mode draws the angle over the full circle
    and uses a square-root radius, which covers the disc uniformly by area.

    Args:
        rng: Generator to draw from.
        radius: Disc radius.
        amount: Number of samples to attempt.
        sampling: Sampling mode, "legacy" or "uniform".

    Returns:
        Array of shape (k, 2) with k <= amount.

    Raises:
        ValueError: If amount is negative or the sampling mode is unknown.
    """
    if amount < 0:
        raise ValueError(f"amount must be non-negative, got {amount}")

    draws = rng.random((amount, 2))
    if sampling == "legacy":
        cos_theta = 2.0 * draws[:, 0] - 1.0
        sin_theta = np.sqrt(1.0 - cos_theta * cos_theta)
        d = radius * (2.0 * draws[:, 1] - 1.0)
    elif sampling == "uniform":
        phi = 2.0 * np.pi * draws[:, 0]
        cos_theta = np.cos(phi)
        sin_theta = np.sin(phi)
        d = radius * np.sqrt(draws[:, 1])
    else:
        raise ValueError(f"Unknown sampling mode: {sampling}")

    keep = np.abs(d) >= EPSILON
    return np.column_stack((d * cos_theta, d * sin_theta))[keep]
