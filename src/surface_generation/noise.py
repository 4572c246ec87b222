"""Coherent noise module for surface generation.

This module provides a seeded 3-D simplex gradient noise field together with
the fractal helpers used to shape relief. Surfaces are always sampled on the
unit sphere (see ``sphere_point``) so the equirectangular output has no
longitude seam and no pinching at the poles.

All functions accept either Python scalars or numpy arrays; array evaluation
is element-wise identical to scalar evaluation.
"""

from typing import Tuple, Union

import numpy as np

from .seeded_random import SeededRandom

ArrayLike = Union[float, np.ndarray]

# Skewing and unskewing factors for three dimensions
F3 = 1.0 / 3.0
G3 = 1.0 / 6.0

# Gradients are the midpoints of the 12 cube edges
GRAD3 = np.array([
    [1, 1, 0], [-1, 1, 0], [1, -1, 0], [-1, -1, 0],
    [1, 0, 1], [-1, 0, 1], [1, 0, -1], [-1, 0, -1],
    [0, 1, 1], [0, -1, 1], [0, 1, -1], [0, -1, -1],
], dtype=np.float64)

PERMUTATION_SIZE = 256


class CoherentNoiseField:
    """Seeded 3-D simplex noise.

    The permutation table is a shuffle of 0..255 drawn from a
    ``SeededRandom``, so the same seed always yields the same field.
    """

    def __init__(self, seed: int):
        """Build the permutation tables for ``seed``.

        Args:
            seed: Integer seed, reduced to 32 bits
        """
        self.seed = int(seed) & 0xFFFFFFFF
        rng = SeededRandom(self.seed)
        table = rng.shuffle(list(range(PERMUTATION_SIZE)))

        self.perm = np.array(table + table, dtype=np.int64)
        self.perm_mod12 = self.perm % 12

    def _corner(self, gi: np.ndarray, x: np.ndarray, y: np.ndarray,
                z: np.ndarray) -> np.ndarray:
        """Contribution of one simplex corner."""
        t = 0.6 - x * x - y * y - z * z
        g = GRAD3[gi]
        dot = g[..., 0] * x + g[..., 1] * y + g[..., 2] * z
        t2 = t * t
        return np.where(t < 0.0, 0.0, t2 * t2 * dot)

    def evaluate(self, x: ArrayLike, y: ArrayLike, z: ArrayLike) -> ArrayLike:
        """Sample the noise field at (x, y, z).

        Args:
            x: X coordinate(s)
            y: Y coordinate(s)
            z: Z coordinate(s)

        Returns:
            Noise value(s) roughly in [-1, 1]; a float for scalar input
        """
        scalar = np.ndim(x) == 0 and np.ndim(y) == 0 and np.ndim(z) == 0
        x, y, z = np.broadcast_arrays(np.asarray(x, dtype=np.float64),
                                      np.asarray(y, dtype=np.float64),
                                      np.asarray(z, dtype=np.float64))

        # Which simplex cell are we in?
        s = (x + y + z) * F3
        i = np.floor(x + s)
        j = np.floor(y + s)
        k = np.floor(z + s)
        t = (i + j + k) * G3
        x0 = x - (i - t)
        y0 = y - (j - t)
        z0 = z - (k - t)

        # Rank the offsets to find the simplex we are in
        xy = x0 >= y0
        yz = y0 >= z0
        xz = x0 >= z0
        a = xy & yz
        b = xy & ~yz & xz
        c = xy & ~yz & ~xz
        d = ~xy & ~yz
        e = ~xy & yz & ~xz
        f = ~xy & yz & xz

        i1 = (a | b).astype(np.int64)
        j1 = (e | f).astype(np.int64)
        k1 = (c | d).astype(np.int64)
        i2 = (a | b | c | f).astype(np.int64)
        j2 = (a | d | e | f).astype(np.int64)
        k2 = (b | c | d | e).astype(np.int64)

        x1 = x0 - i1 + G3
        y1 = y0 - j1 + G3
        z1 = z0 - k1 + G3
        x2 = x0 - i2 + 2.0 * G3
        y2 = y0 - j2 + 2.0 * G3
        z2 = z0 - k2 + 2.0 * G3
        x3 = x0 - 1.0 + 3.0 * G3
        y3 = y0 - 1.0 + 3.0 * G3
        z3 = z0 - 1.0 + 3.0 * G3

        ii = i.astype(np.int64) & 255
        jj = j.astype(np.int64) & 255
        kk = k.astype(np.int64) & 255
        perm = self.perm
        pm12 = self.perm_mod12
        gi0 = pm12[ii + perm[jj + perm[kk]]]
        gi1 = pm12[ii + i1 + perm[jj + j1 + perm[kk + k1]]]
        gi2 = pm12[ii + i2 + perm[jj + j2 + perm[kk + k2]]]
        gi3 = pm12[ii + 1 + perm[jj + 1 + perm[kk + 1]]]

        total = (self._corner(gi0, x0, y0, z0)
                 + self._corner(gi1, x1, y1, z1)
                 + self._corner(gi2, x2, y2, z2)
                 + self._corner(gi3, x3, y3, z3))
        result = 32.0 * total

        if scalar:
            return float(result)
        return result


def sphere_point(lat: ArrayLike, lon: ArrayLike) -> Tuple[ArrayLike, ArrayLike, ArrayLike]:
    """Convert colatitude/longitude to a point on the unit sphere.

    Args:
        lat: Colatitude in radians, 0 at the north pole and pi at the south pole
        lon: Longitude in radians, 0..2pi

    Returns:
        Tuple of (x, y, z) Cartesian coordinates
    """
    sin_lat = np.sin(lat)
    return sin_lat * np.cos(lon), sin_lat * np.sin(lon), np.cos(lat)


def normalized_latitude(lat: ArrayLike) -> ArrayLike:
    """Distance from the equator in [0, 1]: 0 at the equator, 1 at either pole."""
    return np.abs(np.pi / 2 - lat) / (np.pi / 2)


def fractal_sum(field: CoherentNoiseField, x: ArrayLike, y: ArrayLike, z: ArrayLike,
                frequency: float, octaves: int, gain: float,
                lacunarity: float = 2.0) -> ArrayLike:
    """Sum ``octaves`` layers of noise (fBm).

    Each octave multiplies the frequency by ``lacunarity`` and the amplitude
    by ``gain``, starting from amplitude 1 at ``frequency``.

    Args:
        field: Noise field to sample
        x: X coordinate(s)
        y: Y coordinate(s)
        z: Z coordinate(s)
        frequency: Base frequency of the first octave
        octaves: Number of layers (>= 1)
        gain: Amplitude multiplier per octave
        lacunarity: Frequency multiplier per octave

    Returns:
        Fractal noise value(s)
    """
    if octaves < 1:
        raise ValueError(f"octaves must be >= 1, got {octaves}")

    amplitude = 1.0
    freq = frequency
    total = 0.0
    for _ in range(octaves):
        total = total + amplitude * field.evaluate(x * freq, y * freq, z * freq)
        freq *= lacunarity
        amplitude *= gain
    return total


def ridge(value: ArrayLike) -> ArrayLike:
    """Ridged transform: sharp peaks where the input crosses zero."""
    v = 1.0 - np.abs(value)
    return v * v
