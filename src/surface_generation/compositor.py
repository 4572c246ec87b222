"""Surface compositing module.

Runs the per-pixel pipeline that turns a planet type profile and a seed into
a finished equirectangular raster: relief, biome color, polar caps, urban
mask, RGBA write. Rows are independent of each other, so a raster can be
filled in one pass or in row chunks with byte-identical results.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .biomes import BiomeClassifier
from .errors import InvalidResolutionError
from .noise import CoherentNoiseField, normalized_latitude, sphere_point
from .profiles import PlanetTypeProfile
from .relief import ReliefSynthesizer

logger = logging.getLogger(__name__)

POLAR_CAP_COLOR = (240, 240, 255)
# Polar cap edge wobble, as a fraction of the cap size
POLAR_CAP_JITTER = 0.35
MAX_POLAR_CAP = 0.5

TINT_FREQUENCY = 6.0
URBAN_FREQUENCY = 24.0
URBAN_BIT = 255

MAX_RESOLUTION = 8192


def smoothstep(edge0: float, edge1: float, x: np.ndarray) -> np.ndarray:
    """Hermite interpolation between 0 and 1 over [edge0, edge1]."""
    t = np.clip((x - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def validate_resolution(resolution: int, max_resolution: int = MAX_RESOLUTION) -> int:
    """Check that a resolution is a positive power of two within limits.

    Args:
        resolution: Requested edge length in pixels
        max_resolution: Largest accepted edge length

    Returns:
        The resolution, unchanged

    Raises:
        InvalidResolutionError: If the resolution cannot be produced
    """
    if isinstance(resolution, bool) or not isinstance(resolution, (int, np.integer)):
        raise InvalidResolutionError(
            f"Resolution must be an integer, got {resolution!r}")
    if resolution <= 0:
        raise InvalidResolutionError(f"Resolution must be positive, got {resolution}")
    if resolution & (resolution - 1):
        raise InvalidResolutionError(
            f"Resolution must be a power of two, got {resolution}")
    if resolution > max_resolution:
        raise InvalidResolutionError(
            f"Resolution {resolution} exceeds the maximum of {max_resolution}")
    return int(resolution)


@dataclass(frozen=True, eq=False)
class SurfaceRaster:
    """A finished surface texture.

    ``pixels`` is a read-only ``height x width x 4`` uint8 array, row 0 at
    the north pole; ``urban_mask`` is a read-only ``height x width`` uint8
    array holding 0 or 255. Rasters compare and hash by identity.
    """

    pixels: np.ndarray
    urban_mask: np.ndarray
    seed: int
    development_level: float
    planet_type: str
    resolution: int
    satellite_index: int = 0

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.height, self.width

    def to_bytes(self) -> bytes:
        """Row-major RGBA8 buffer."""
        return self.pixels.tobytes()

    def mask_bytes(self) -> bytes:
        """Row-major one byte per pixel urban mask."""
        return self.urban_mask.tobytes()

    def urban_count(self) -> int:
        """Number of pixels carrying the urban bit."""
        return int(np.count_nonzero(self.urban_mask))

    def metadata(self) -> dict:
        """Values a renderer needs to composite night-side lights."""
        return {"seed": self.seed, "development_level": self.development_level}


class RasterBuilder:
    """Incrementally fills the rows of one surface raster."""

    def __init__(self, profile: PlanetTypeProfile, resolution: int, seed: int,
                 satellite_index: int = 0, development_level: float = 0.0):
        """Allocate buffers and build the per-surface generators.

        Args:
            profile: Planet type profile
            resolution: Edge length of the square raster (already validated)
            seed: Surface seed
            satellite_index: Satellite index, echoed in the result
            development_level: Urbanization level, clamped into [0, 1]
        """
        self.profile = profile
        self.resolution = resolution
        self.width = resolution
        self.height = resolution
        self.seed = int(seed)
        self.satellite_index = int(satellite_index)
        self.development_level = float(np.clip(development_level, 0.0, 1.0))
        self.polar_cap_size = float(np.clip(profile.polar_cap_size, 0.0, MAX_POLAR_CAP))

        self.field = CoherentNoiseField(self.seed)
        self.relief = ReliefSynthesizer(self.field, profile.relief)
        self.classifier = BiomeClassifier(profile)
        self._excluded = np.array(
            [i for i, name in enumerate(self.classifier.names)
             if name in profile.excluded_urban_biomes], dtype=np.int64)

        self.pixels = np.zeros((self.height, self.width, 4), dtype=np.uint8)
        self.urban_mask = np.zeros((self.height, self.width), dtype=np.uint8)
        self.rows_done = 0

    @property
    def complete(self) -> bool:
        return self.rows_done >= self.height

    def fill_rows(self, y0: int, y1: int) -> None:
        """Compute rows ``y0`` (inclusive) to ``y1`` (exclusive)."""
        y1 = min(y1, self.height)
        if y0 >= y1:
            return

        rows = np.arange(y0, y1, dtype=np.float64)
        cols = np.arange(self.width, dtype=np.float64)
        lat, lon = np.broadcast_arrays((rows / self.height * np.pi)[:, None],
                                       (cols / self.width * 2.0 * np.pi)[None, :])

        x, y, z = sphere_point(lat, lon)
        tint_noise = self.field.evaluate(x * TINT_FREQUENCY, y * TINT_FREQUENCY,
                                         z * TINT_FREQUENCY) * 0.5 + 0.5
        lat_n = normalized_latitude(lat)

        if self.profile.banded:
            rgb = self.classifier.band_colors(lat_n, tint_noise)
            mask = np.zeros(lat.shape, dtype=np.uint8)
        else:
            relative = self.relief.elevation_at(lat, lon) - self.profile.water_level
            rgb = self.classifier.colors(relative, lat_n, tint_noise)
            self._apply_polar_caps(rgb, lat, relative, tint_noise)
            mask = self._urban_mask(relative, lat_n, x, y, z)

        self.pixels[y0:y1, :, :3] = rgb
        self.pixels[y0:y1, :, 3] = 255
        self.urban_mask[y0:y1] = mask
        self.rows_done = max(self.rows_done, y1)

    def _apply_polar_caps(self, rgb: np.ndarray, lat: np.ndarray,
                          relative: np.ndarray, tint_noise: np.ndarray) -> None:
        cap = self.polar_cap_size
        if cap <= 0.0:
            return
        threshold = cap + (tint_noise - 0.5) * cap * POLAR_CAP_JITTER
        pole_distance = np.minimum(lat, np.pi - lat) / np.pi
        capped = (pole_distance < threshold) & (relative >= 0.0)
        rgb[capped] = POLAR_CAP_COLOR

    def _urban_mask(self, relative: np.ndarray, lat_n: np.ndarray,
                    x: np.ndarray, y: np.ndarray, z: np.ndarray) -> np.ndarray:
        level = self.development_level
        if level <= 0.0:
            return np.zeros(relative.shape, dtype=np.uint8)

        land = relative >= 0.0
        if self._excluded.size:
            land &= ~np.isin(self.classifier.dominant(relative, lat_n), self._excluded)

        # 0 at the poles, 1 at the equator
        toward_equator = 1.0 - lat_n
        near_coast = smoothstep(0.0, 0.12, np.abs(relative))
        mid_latitude = (smoothstep(0.2, 0.8, toward_equator)
                        * (1.0 - smoothstep(0.7, 1.0, toward_equator)))
        ruggedness = smoothstep(0.3, 0.7, relative)
        suitability = np.clip(0.6 * near_coast + 0.3 * mid_latitude
                              + 0.1 * (1.0 - ruggedness), 0.0, 1.0)

        urban_noise = self.field.evaluate(x * URBAN_FREQUENCY, y * URBAN_FREQUENCY,
                                          z * URBAN_FREQUENCY) * 0.5 + 0.5
        city = land & (urban_noise > 1.0 - level * suitability)
        return np.where(city, URBAN_BIT, 0).astype(np.uint8)

    def finish(self) -> SurfaceRaster:
        """Freeze the buffers into a ``SurfaceRaster``."""
        if not self.complete:
            raise RuntimeError(
                f"Raster incomplete: {self.rows_done}/{self.height} rows filled")
        self.pixels.setflags(write=False)
        self.urban_mask.setflags(write=False)
        return SurfaceRaster(
            pixels=self.pixels,
            urban_mask=self.urban_mask,
            seed=self.seed,
            development_level=self.development_level,
            planet_type=self.profile.name,
            resolution=self.resolution,
            satellite_index=self.satellite_index,
        )


class SurfaceCompositor:
    """Produces surface rasters and counts how many it has started."""

    def __init__(self, max_resolution: int = MAX_RESOLUTION):
        self.max_resolution = max_resolution
        self.calls = 0

    def begin(self, profile: PlanetTypeProfile, resolution: int, seed: int,
              satellite_index: int = 0, development_level: float = 0.0) -> RasterBuilder:
        """Start a raster that the caller fills row by row.

        Raises:
            InvalidResolutionError: If the resolution is not usable
        """
        resolution = validate_resolution(resolution, self.max_resolution)
        self.calls += 1
        logger.debug("Generating %s surface at %dx%d (seed %d)", profile.name,
                     resolution, resolution, seed)
        return RasterBuilder(profile, resolution, seed, satellite_index,
                             development_level)

    def generate(self, profile: PlanetTypeProfile, resolution: int, seed: int,
                 satellite_index: int = 0,
                 development_level: float = 0.0) -> SurfaceRaster:
        """Generate a complete raster synchronously.

        Args:
            profile: Planet type profile
            resolution: Edge length in pixels (power of two)
            seed: Surface seed
            satellite_index: Satellite index, echoed in the result
            development_level: Urbanization level in [0, 1]

        Returns:
            The finished raster
        """
        builder = self.begin(profile, resolution, seed, satellite_index,
                             development_level)
        builder.fill_rows(0, builder.height)
        return builder.finish()

    def relief_field(self, profile: PlanetTypeProfile, resolution: int,
                     seed: int) -> np.ndarray:
        """Elevation grid (before subtracting the water level) of a surface."""
        resolution = validate_resolution(resolution, self.max_resolution)
        relief = ReliefSynthesizer(CoherentNoiseField(seed), profile.relief)
        return relief.elevation_field(resolution, resolution)

    def biome_map(self, profile: PlanetTypeProfile, resolution: int, seed: int,
                  elevation: Optional[np.ndarray] = None) -> np.ndarray:
        """Grid of dominant biome band indices of a surface.

        Banded profiles are classified by latitude alone.
        """
        resolution = validate_resolution(resolution, self.max_resolution)
        classifier = BiomeClassifier(profile)
        rows = np.arange(resolution, dtype=np.float64) / resolution * np.pi
        lat_n = np.broadcast_to(normalized_latitude(rows)[:, None],
                                (resolution, resolution))
        if profile.banded:
            return classifier.latitude_band(lat_n)
        if elevation is None:
            elevation = self.relief_field(profile, resolution, seed)
        return classifier.dominant(elevation - profile.water_level, lat_n)
