"""Relief synthesis module.

Builds the elevation of a body surface from two fractal layers sampled on the
unit sphere: low-frequency continents and a ridged mountain layer that only
rises where the continents are already above zero. A small equatorial bulge
is added on top.
"""

import numpy as np

from .noise import (ArrayLike, CoherentNoiseField, fractal_sum,
                    normalized_latitude, ridge, sphere_point)
from .profiles import ReliefParams

# Approximate amplitude of the continental fBm, used to bring it into [-1, 1]
CONTINENT_NORMALIZER = 1.5
MOUNTAIN_WEIGHT = 0.9
EQUATOR_BULGE = 0.05


class ReliefSynthesizer:
    """Computes elevation in [-1, 1] at any (colatitude, longitude)."""

    def __init__(self, field: CoherentNoiseField, params: ReliefParams):
        """Initialize the synthesizer.

        Args:
            field: Seeded noise field shared with the rest of the surface
            params: Frequencies, gains and octave counts of both layers
        """
        self.field = field
        self.params = params

    def continents_at(self, x: ArrayLike, y: ArrayLike, z: ArrayLike) -> ArrayLike:
        """Normalized continental layer at a unit-sphere point."""
        p = self.params
        raw = fractal_sum(self.field, x, y, z, p.continent_frequency,
                          p.continent_octaves, p.continent_gain)
        return np.clip(raw / CONTINENT_NORMALIZER, -1.0, 1.0)

    def mountains_at(self, x: ArrayLike, y: ArrayLike, z: ArrayLike) -> ArrayLike:
        """Raw (un-ridged) mountain layer at a unit-sphere point."""
        p = self.params
        return fractal_sum(self.field, x, y, z, p.mountain_frequency,
                           p.mountain_octaves, p.mountain_gain)

    def elevation_at(self, lat: ArrayLike, lon: ArrayLike) -> ArrayLike:
        """Compute elevation at the given coordinates.

        Args:
            lat: Colatitude in radians (0 at the north pole, pi at the south pole)
            lon: Longitude in radians

        Returns:
            Elevation in [-1, 1]; a float for scalar input
        """
        x, y, z = sphere_point(lat, lon)
        continents = self.continents_at(x, y, z)
        mountains = ridge(self.mountains_at(x, y, z))

        # Mountains only rise over land, never as underwater ridges
        height = continents + mountains * MOUNTAIN_WEIGHT * np.maximum(0.0, continents)
        height = height + (1.0 - normalized_latitude(lat)) * EQUATOR_BULGE
        height = np.clip(height, -1.0, 1.0)

        if np.ndim(height) == 0:
            return float(height)
        return height

    def elevation_field(self, width: int, height: int) -> np.ndarray:
        """Elevation of a full equirectangular grid.

        Args:
            width: Number of columns (longitude samples)
            height: Number of rows (colatitude samples)

        Returns:
            ``height x width`` float array
        """
        lat = (np.arange(height, dtype=np.float64) / height * np.pi)[:, None]
        lon = (np.arange(width, dtype=np.float64) / width * 2.0 * np.pi)[None, :]
        lat, lon = np.broadcast_arrays(lat, lon)
        return self.elevation_at(lat, lon)
