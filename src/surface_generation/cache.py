"""Process-lifetime memoization of finished surface rasters."""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .compositor import SurfaceRaster

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheKey:
    """Identity of a generated surface.

    Star coordinates are stored in thousandths, matching the precision used
    when deriving the surface seed.
    """

    seed_x_milli: int
    seed_y_milli: int
    body_index: int
    satellite_index: int
    planet_type: str
    resolution: int
    development_level: float

    @classmethod
    def for_request(cls, seed_x: float, seed_y: float, body_index: int,
                    planet_type: str, resolution: int, satellite_index: int = 0,
                    development_level: float = 0.0) -> "CacheKey":
        return cls(
            seed_x_milli=math.floor(seed_x * 1000),
            seed_y_milli=math.floor(seed_y * 1000),
            body_index=int(body_index),
            satellite_index=int(satellite_index),
            planet_type=planet_type,
            resolution=int(resolution),
            development_level=min(1.0, max(0.0, float(development_level))),
        )


class TextureCache:
    """Side table from surface identity to finished raster.

    Entries live until ``clear`` is called; rasters are immutable, so every
    holder of a reference can share them.
    """

    def __init__(self):
        self._entries: Dict[CacheKey, SurfaceRaster] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def get(self, key: CacheKey) -> Optional[SurfaceRaster]:
        raster = self._entries.get(key)
        if raster is None:
            self.misses += 1
        else:
            self.hits += 1
        return raster

    def put(self, key: CacheKey, raster: SurfaceRaster) -> SurfaceRaster:
        self._entries[key] = raster
        return raster

    def get_or_create(self, key: CacheKey,
                      factory: Callable[[], SurfaceRaster]) -> SurfaceRaster:
        """Return the cached raster for ``key``, building it on a miss."""
        raster = self.get(key)
        if raster is None:
            raster = self.put(key, factory())
        return raster

    def clear(self) -> None:
        """Drop every memoized raster."""
        if self._entries:
            logger.info("Clearing %d cached surface textures", len(self._entries))
        self._entries.clear()
