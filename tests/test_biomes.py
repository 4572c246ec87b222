"""Tests for biome classification."""

import numpy as np
import pytest

from src.surface_generation.biomes import BiomeClassifier
from src.surface_generation.profiles import (PLANET_TYPES, BiomeBand, PlanetTypeProfile,
                                             ReliefParams, get_profile)

RELIEF = ReliefParams(0.8, 0.5, 3, 2.0, 0.5, 2)


def make_profile(*bands, banded=False):
    return PlanetTypeProfile(name="test", water_level=0.0, polar_cap_size=0.0,
                             relief=RELIEF, biome_bands=tuple(bands), banded=banded)


def test_colors_bounded_for_every_type():
    elevation, latitude, noise = np.meshgrid(np.linspace(-2, 2, 41),
                                             np.linspace(0, 1, 11),
                                             np.array([0.0, 0.5, 1.0]), indexing="ij")
    for name, profile in PLANET_TYPES.items():
        rgb = BiomeClassifier(profile).colors(elevation, latitude, noise)
        assert rgb.shape == elevation.shape + (3,), name
        assert rgb.dtype == np.uint8


def test_color_at_returns_channels_in_range():
    classifier = BiomeClassifier(PLANET_TYPES["terran"])
    for elevation in (-2.0, -0.5, 0.0, 0.3, 2.0):
        for latitude in (0.0, 0.5, 1.0):
            color = classifier.color_at(elevation, latitude, 0.9)
            assert len(color) == 3
            assert all(isinstance(c, int) and 0 <= c <= 255 for c in color)


def test_blend_uses_nearest_midpoints():
    low = BiomeBand("low", (0, 0, 0), elevation_range=(-1.0, 0.5), noise_tint=0.0)
    high = BiomeBand("high", (200, 100, 40), elevation_range=(0.0, 1.0), noise_tint=0.0)
    classifier = BiomeClassifier(make_profile(low, high))

    # d(high)=0.25, d(low)=0.5 -> t = 0.5 / 0.75 toward the second band
    assert classifier.color_at(0.25, 0.5, 0.5) == (67, 33, 13)
    assert classifier.dominant_name(0.25, 0.5) == "high"


def test_equal_distances_blend_evenly_in_table_order():
    a = BiomeBand("a", (0, 0, 0), elevation_range=(-1.0, 0.0), noise_tint=0.0)
    b = BiomeBand("b", (200, 100, 50), elevation_range=(0.0, 1.0), noise_tint=0.0)
    classifier = BiomeClassifier(make_profile(a, b))
    assert classifier.color_at(0.0, 0.5, 0.5) == (100, 50, 25)
    assert classifier.dominant_name(0.0, 0.5) == "a"


def test_single_candidate_keeps_its_color():
    a = BiomeBand("a", (10, 20, 30), elevation_range=(-1.0, 0.0), noise_tint=0.0)
    b = BiomeBand("b", (200, 100, 50), elevation_range=(0.0, 1.0), noise_tint=0.0)
    classifier = BiomeClassifier(make_profile(a, b))
    assert classifier.color_at(0.6, 0.5, 0.5) == (200, 100, 50)
    assert classifier.color_at(-0.6, 0.5, 0.5) == (10, 20, 30)


def test_latitude_gates_candidates():
    plain = BiomeBand("plain", (50, 50, 50), elevation_range=(0.0, 1.0), noise_tint=0.0)
    snow = BiomeBand("snow", (250, 250, 250), elevation_range=(0.0, 1.0),
                     latitude_range=(0.8, 1.0), noise_tint=0.0)
    classifier = BiomeClassifier(make_profile(plain, snow))
    assert classifier.color_at(0.5, 0.2, 0.5) == (50, 50, 50)
    assert classifier.color_at(0.5, 0.9, 0.5) == (150, 150, 150)


def test_unmatched_point_falls_back_to_all_bands():
    classifier = BiomeClassifier(PLANET_TYPES["rocky"])
    assert classifier.dominant_name(-1.5, 0.5) == "cratered"
    assert classifier.dominant_name(1.8, 0.5) == "mountain"


def test_noise_tint_scales_color():
    band = BiomeBand("grey", (100, 100, 100), elevation_range=(-1.0, 1.0), noise_tint=0.2)
    classifier = BiomeClassifier(make_profile(band))
    assert classifier.color_at(0.0, 0.5, 1.0) == (110, 110, 110)
    assert classifier.color_at(0.0, 0.5, 0.0) == (90, 90, 90)
    assert classifier.color_at(0.0, 0.5, 0.5) == (100, 100, 100)


def test_terran_dominant_bands():
    classifier = BiomeClassifier(PLANET_TYPES["terran"])
    assert classifier.dominant_name(-0.5, 0.2) == "ocean"
    assert classifier.dominant_name(0.8, 0.1) == "mountain"


def test_band_colors_follow_latitude_only():
    profile = PLANET_TYPES["gas"]
    classifier = BiomeClassifier(profile)
    latitude = np.array([0.05, 0.2, 0.5, 0.9])
    rgb = classifier.band_colors(latitude, np.full(4, 0.5))
    expected = [profile.biome_bands[i].color for i in (0, 1, 3, 5)]
    assert [tuple(int(c) for c in row) for row in rgb] == expected


def test_unknown_type_falls_back_to_rocky():
    assert get_profile("no-such-world") is PLANET_TYPES["rocky"]
    assert get_profile("terran") is PLANET_TYPES["terran"]


def test_profile_requires_bands():
    with pytest.raises(ValueError):
        make_profile()


def test_band_midpoint_and_contains():
    band = BiomeBand("x", (0, 0, 0), elevation_range=(0.2, 0.6), latitude_range=(0.0, 0.5))
    assert band.midpoint == pytest.approx(0.4)
    assert band.contains(0.2, 0.5)
    assert not band.contains(0.7, 0.1)
    assert not band.contains(0.3, 0.6)
