"""Exceptions raised by the surface generator."""


class SurfaceGenerationError(Exception):
    """Base class for surface generation errors."""


class InvalidResolutionError(SurfaceGenerationError, ValueError):
    """Requested raster resolution cannot be produced."""


class UpgradeAllocationError(SurfaceGenerationError):
    """A high-resolution upgrade could not allocate its buffers.

    The preview raster stays active when this is raised.
    """
