"""Exception types raised by ray and geometry construction.

A ray that misses is not an error: intersection routines return ``None``.
These exceptions cover inputs for which no ray, beam or surface can exist.
"""


class RayGeometryError(Exception):
    """Base class for all errors raised by raygeom."""


class ZeroVectorError(RayGeometryError, ValueError):
    """A zero-length vector was normalized."""


class DegenerateDirectionError(ZeroVectorError):
    """A ray was constructed with a zero-length direction."""


class InvalidBeamTargetError(RayGeometryError, ValueError):
    """A beam was requested toward a point at zero distance from the ray origin."""


class DegenerateGeometryError(RayGeometryError, ValueError):
    """A surface has no defined normal (e.g. collinear triangle vertices)."""
