"""Biome classification module.

Turns (relative elevation, normalized latitude, noise) samples into colors
using the biome table of a planet type. The two candidate bands whose
elevation midpoints are closest to the sample are blended, which keeps
transitions between neighbouring bands symmetric.
"""

from typing import Tuple

import numpy as np

from .noise import ArrayLike
from .profiles import PlanetTypeProfile


def _round_half_up(values: np.ndarray) -> np.ndarray:
    return np.floor(values + 0.5)


class BiomeClassifier:
    """Data-driven color lookup for one planet type.

    Scalar helpers (``color_at``, ``dominant_name``) wrap the array methods,
    which are what the compositor uses on whole row blocks.
    """

    def __init__(self, profile: PlanetTypeProfile):
        """Initialize the classifier from a profile's biome table.

        Args:
            profile: Planet type whose ``biome_bands`` drive the lookup
        """
        self.profile = profile
        bands = profile.biome_bands

        self.names = tuple(band.name for band in bands)
        self.band_rgb = np.array([band.color for band in bands], dtype=np.float64)
        self.tints = np.array([band.noise_tint for band in bands], dtype=np.float64)
        self.midpoints = np.array([band.midpoint for band in bands], dtype=np.float64)
        self.elevation_min = np.array([b.elevation_range[0] for b in bands])
        self.elevation_max = np.array([b.elevation_range[1] for b in bands])
        # Latitude ranges use 0 at the equator and 1 at the poles
        self.latitude_min = np.array([b.latitude_range[0] for b in bands])
        self.latitude_max = np.array([b.latitude_range[1] for b in bands])

    def _candidates(self, elevation: np.ndarray, latitude: np.ndarray) -> np.ndarray:
        """Boolean (..., bands) matrix of bands containing each sample.

        Samples matched by no band fall back to every band.
        """
        e = elevation[..., None]
        lat = latitude[..., None]
        inside = ((e >= self.elevation_min) & (e <= self.elevation_max)
                  & (lat >= self.latitude_min) & (lat <= self.latitude_max))
        unmatched = ~inside.any(axis=-1, keepdims=True)
        return inside | unmatched

    def blend(self, relative_elevation: ArrayLike,
              normalized_latitude: ArrayLike) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Pick the two nearest-by-midpoint bands and their blend weight.

        Args:
            relative_elevation: Elevation minus water level
            normalized_latitude: 0 at the equator, 1 at the poles

        Returns:
            Tuple of (first band index, second band index, weight t)
        """
        elevation = np.asarray(relative_elevation, dtype=np.float64)
        latitude = np.asarray(normalized_latitude, dtype=np.float64)
        elevation, latitude = np.broadcast_arrays(elevation, latitude)

        candidates = self._candidates(elevation, latitude)
        distance = np.abs(elevation[..., None] - self.midpoints)
        distance = np.where(candidates, distance, np.inf)

        # Stable sort keeps table order between equally distant bands
        order = np.argsort(distance, axis=-1, kind="stable")
        first = order[..., 0]
        second = order[..., 1] if order.shape[-1] > 1 else first

        d1 = np.take_along_axis(distance, first[..., None], axis=-1)[..., 0]
        d2 = np.take_along_axis(distance, second[..., None], axis=-1)[..., 0]

        # A lone candidate blends with itself
        lone = np.isinf(d2)
        second = np.where(lone, first, second)
        d2 = np.where(lone, d1, d2)

        total = d1 + d2
        safe_total = np.where(total > 0.0, total, 1.0)
        t = np.where(total > 0.0, np.clip(d2 / safe_total, 0.0, 1.0), 0.5)
        return first, second, t

    def colors(self, relative_elevation: ArrayLike, normalized_latitude: ArrayLike,
               noise_sample: ArrayLike) -> np.ndarray:
        """Blend biome colors for arrays of samples.

        Args:
            relative_elevation: Elevation minus water level
            normalized_latitude: 0 at the equator, 1 at the poles
            noise_sample: Per-pixel tint noise in [0, 1]

        Returns:
            uint8 array of shape (..., 3)
        """
        first, second, t = self.blend(relative_elevation, normalized_latitude)
        c1 = self.band_rgb[first]
        c2 = self.band_rgb[second]
        base = _round_half_up(c1 + (c2 - c1) * t[..., None])

        tint = (self.tints[first] + self.tints[second]) * 0.5
        factor = 1.0 + (np.asarray(noise_sample, dtype=np.float64) - 0.5) * tint
        rgb = _round_half_up(base * factor[..., None])
        return np.clip(rgb, 0, 255).astype(np.uint8)

    def latitude_band(self, normalized_latitude: ArrayLike) -> np.ndarray:
        """Index of the first band whose latitude range contains each sample."""
        lat = np.asarray(normalized_latitude, dtype=np.float64)[..., None]
        inside = (lat >= self.latitude_min) & (lat <= self.latitude_max)
        inside = inside | ~inside.any(axis=-1, keepdims=True)
        return np.argmax(inside, axis=-1)

    def band_colors(self, normalized_latitude: ArrayLike,
                    noise_sample: ArrayLike) -> np.ndarray:
        """Latitude-only coloring used by banded (gas giant) profiles.

        Each sample takes its latitude band color, tinted by the noise
        sample. Elevation plays no part.
        """
        band = self.latitude_band(normalized_latitude)

        factor = 1.0 + (np.asarray(noise_sample, dtype=np.float64) - 0.5) * self.tints[band]
        rgb = _round_half_up(self.band_rgb[band] * factor[..., None])
        return np.clip(rgb, 0, 255).astype(np.uint8)

    def dominant(self, relative_elevation: ArrayLike,
                 normalized_latitude: ArrayLike) -> np.ndarray:
        """Index of the dominant (nearest-by-midpoint) band per sample."""
        first, _, _ = self.blend(relative_elevation, normalized_latitude)
        return first

    def color_at(self, relative_elevation: float, normalized_latitude: float,
                 noise_sample: float) -> Tuple[int, int, int]:
        """Color of a single sample as an (r, g, b) tuple."""
        rgb = self.colors(relative_elevation, normalized_latitude, noise_sample)
        return int(rgb[0]), int(rgb[1]), int(rgb[2])

    def dominant_name(self, relative_elevation: float,
                      normalized_latitude: float) -> str:
        """Name of the dominant band at a single sample."""
        return self.names[int(self.dominant(relative_elevation, normalized_latitude))]
