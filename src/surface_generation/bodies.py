"""Mapping from celestial bodies to surface generation requests.

The generator never sees stars, orbits or views; callers describe a body
with a ``BodyDescriptor`` and turn it into a ``SurfaceRequest``.
"""

from dataclasses import dataclass, replace
from typing import Optional

from ..utils.config import Configuration
from .cache import CacheKey
from .profiles import PlanetTypeProfile, get_profile
from .seeded_random import derive_seed


@dataclass(frozen=True)
class SurfaceRequest:
    """Everything needed to (re)generate one surface."""

    seed_x: float
    seed_y: float
    body_index: int
    planet_type: str
    resolution: int
    satellite_index: int = 0
    development_level: float = 0.0

    @property
    def seed(self) -> int:
        return derive_seed(self.seed_x, self.seed_y, self.body_index,
                           self.satellite_index)

    @property
    def profile(self) -> PlanetTypeProfile:
        return get_profile(self.planet_type)

    def profile_for(self, config: Configuration) -> PlanetTypeProfile:
        """Profile of this request, using the configured type for unknown names."""
        return get_profile(self.planet_type, config.default_planet_type)

    def with_resolution(self, resolution: int) -> "SurfaceRequest":
        return replace(self, resolution=resolution)

    def cache_key(self) -> CacheKey:
        return CacheKey.for_request(self.seed_x, self.seed_y, self.body_index,
                                    self.planet_type, self.resolution,
                                    self.satellite_index, self.development_level)


@dataclass(frozen=True)
class BodyDescriptor:
    """The parts of a planet or moon that decide how its surface looks.

    Attributes:
        planet_type: Type name, e.g. "terran"
        star_x: X coordinate of the parent star
        star_y: Y coordinate of the parent star
        body_index: Index of the planet in its system
        satellite_index: 0 for the planet itself, 1.. for its moons
        development_level: Urbanization level in [0, 1]
        star_id: Used in place of missing star coordinates
    """

    planet_type: str
    star_x: Optional[float]
    star_y: Optional[float]
    body_index: int
    satellite_index: int = 0
    development_level: float = 0.0
    star_id: int = 0

    @property
    def is_satellite(self) -> bool:
        return self.satellite_index > 0


def request_for_body(body: BodyDescriptor, config: Optional[Configuration] = None,
                     resolution: Optional[int] = None) -> SurfaceRequest:
    """Build the high-resolution request for a body.

    Stars without coordinates fall back to ``star_id * 1000``. Moons get the
    planet resolution divided by ``satellite_resolution_divisor``.

    Args:
        body: Body to describe
        config: Generator configuration, defaults to ``Configuration()``
        resolution: Explicit resolution, overriding the configured one

    Returns:
        A request at upgrade resolution
    """
    config = config or Configuration()
    if resolution is None:
        resolution = config.upgrade_resolution
        if body.is_satellite:
            resolution = max(config.preview_resolution,
                             resolution // config.satellite_resolution_divisor)

    fallback = body.star_id * 1000
    seed_x = body.star_x if body.star_x else fallback
    seed_y = body.star_y if body.star_y else fallback
    return SurfaceRequest(
        seed_x=seed_x,
        seed_y=seed_y,
        body_index=body.body_index,
        planet_type=body.planet_type,
        resolution=resolution,
        satellite_index=body.satellite_index,
        development_level=body.development_level,
    )
