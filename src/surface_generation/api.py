"""Process-wide entry points of the surface generator.

These functions share one cache and one compositor for the whole process.
Upgrades run on one scheduler per event loop, so at most one
high-resolution upgrade is active at a time.
"""

import asyncio
import logging
import weakref
from typing import Optional

from ..utils.config import Configuration
from .bodies import SurfaceRequest
from .cache import TextureCache
from .compositor import SurfaceCompositor, SurfaceRaster, validate_resolution
from .scheduler import GenerationScheduler, IdleCallback

logger = logging.getLogger(__name__)

_config = Configuration()
_cache = TextureCache()
_compositor = SurfaceCompositor(_config.max_resolution)
_schedulers: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, GenerationScheduler]" = \
    weakref.WeakKeyDictionary()


def default_cache() -> TextureCache:
    return _cache


def default_compositor() -> SurfaceCompositor:
    return _compositor


def configure(config: Configuration) -> None:
    """Replace the process-wide configuration.

    Drops cached rasters and schedulers built from the previous settings.
    """
    global _config, _compositor
    _config = config
    _compositor = SurfaceCompositor(config.max_resolution)
    _cache.clear()
    _schedulers.clear()


def scheduler_for_loop(idle: Optional[IdleCallback] = None) -> GenerationScheduler:
    """The scheduler bound to the running event loop."""
    loop = asyncio.get_running_loop()
    scheduler = _schedulers.get(loop)
    if scheduler is None:
        scheduler = GenerationScheduler(_compositor, _cache, _config, idle)
        _schedulers[loop] = scheduler
    return scheduler


def generate_surface(seed_x: float, seed_y: float, body_index: int,
                     planet_type: str, resolution: int, satellite_index: int = 0,
                     development_level: float = 0.0) -> SurfaceRaster:
    """Generate (or fetch from cache) a surface raster synchronously.

    Args:
        seed_x: X coordinate of the originating star
        seed_y: Y coordinate of the originating star
        body_index: Index of the body in its system
        planet_type: Type name; unknown names use the configured default type
        resolution: Edge length in pixels (power of two)
        satellite_index: 0 for a planet, 1.. for its moons
        development_level: Urbanization level, clamped into [0, 1]

    Returns:
        The finished raster

    Raises:
        InvalidResolutionError: If the resolution is unusable
    """
    validate_resolution(resolution, _compositor.max_resolution)
    request = SurfaceRequest(seed_x, seed_y, body_index, planet_type, resolution,
                             satellite_index, development_level)
    return _cache.get_or_create(
        request.cache_key(),
        lambda: _compositor.generate(request.profile_for(_config), resolution,
                                     request.seed, satellite_index, development_level))


async def generate_surface_upgrade(seed_x: float, seed_y: float, body_index: int,
                                   planet_type: str, resolution: int,
                                   satellite_index: int = 0,
                                   development_level: float = 0.0,
                                   chunk_rows: Optional[int] = None) -> Optional[SurfaceRaster]:
    """Generate a surface raster in row chunks without blocking the loop.

    Takes the same arguments as ``generate_surface`` plus ``chunk_rows``.

    Returns:
        The finished raster, or None if the upgrade was cancelled

    Raises:
        InvalidResolutionError: If the resolution is unusable
        UpgradeAllocationError: If the raster could not be allocated
    """
    validate_resolution(resolution, _compositor.max_resolution)
    request = SurfaceRequest(seed_x, seed_y, body_index, planet_type, resolution,
                             satellite_index, development_level)
    job = scheduler_for_loop().request(request, chunk_rows=chunk_rows)
    return await job.wait()


def clear_surface_cache() -> None:
    """Drop every memoized raster."""
    _cache.clear()
