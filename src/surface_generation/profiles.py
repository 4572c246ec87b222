"""Planet type registry.

Each planet type is a data-only profile: water level, polar cap size, relief
parameters and an ordered table of biome bands. Generation code is the same
for every type; only these tables differ.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Tuple

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]

FULL_RANGE = (-1.0, 1.0)
FULL_LATITUDE = (0.0, 1.0)
DEFAULT_PLANET_TYPE = "rocky"


@dataclass(frozen=True)
class BiomeBand:
    """A named color rule active over an elevation/latitude window.

    Elevation is relative to the water level. Latitude is normalized:
    0 at the equator, 1 at the poles.
    """

    name: str
    color: RGB
    elevation_range: Tuple[float, float] = FULL_RANGE
    latitude_range: Tuple[float, float] = FULL_LATITUDE
    noise_tint: float = 0.1

    @property
    def midpoint(self) -> float:
        """Centre of the elevation range."""
        return (self.elevation_range[0] + self.elevation_range[1]) * 0.5

    def contains(self, elevation: float, latitude: float) -> bool:
        """Whether the point lies inside both ranges (inclusive)."""
        e_min, e_max = self.elevation_range
        l_min, l_max = self.latitude_range
        return e_min <= elevation <= e_max and l_min <= latitude <= l_max


@dataclass(frozen=True)
class ReliefParams:
    """Fractal parameters of the continent and mountain layers."""

    continent_frequency: float
    continent_gain: float
    continent_octaves: int
    mountain_frequency: float
    mountain_gain: float
    mountain_octaves: int


@dataclass(frozen=True)
class PlanetTypeProfile:
    """Immutable description of one planet type."""

    name: str
    water_level: float
    polar_cap_size: float
    relief: ReliefParams
    biome_bands: Tuple[BiomeBand, ...]
    excluded_urban_biomes: FrozenSet[str] = field(default_factory=frozenset)
    banded: bool = False

    def __post_init__(self):
        if not self.biome_bands:
            raise ValueError(f"Planet type '{self.name}' has no biome bands")

    def band_names(self) -> Tuple[str, ...]:
        return tuple(band.name for band in self.biome_bands)


def _band(name: str, color: RGB, elevation: Optional[Tuple[float, float]] = None,
          latitude: Optional[Tuple[float, float]] = None,
          tint: float = 0.1) -> BiomeBand:
    return BiomeBand(name=name, color=color,
                     elevation_range=elevation or FULL_RANGE,
                     latitude_range=latitude or FULL_LATITUDE,
                     noise_tint=tint)


PLANET_TYPES: Dict[str, PlanetTypeProfile] = {
    "terran": PlanetTypeProfile(
        name="terran",
        water_level=0.0,
        polar_cap_size=0.07,
        relief=ReliefParams(0.75, 0.55, 4, 3.0, 0.6, 3),
        biome_bands=(
            _band("ocean", (40, 110, 180), (-1.0, -0.02), tint=0.15),
            _band("shore", (220, 210, 160), (-0.02, 0.02), tint=0.10),
            _band("grassland", (70, 140, 60), (0.02, 0.25), tint=0.15),
            _band("forest", (50, 110, 50), (0.08, 0.35), tint=0.20),
            _band("swamp", (70, 90, 50), (0.0, 0.15), (0.3, 0.8), tint=0.15),
            _band("desert", (210, 185, 130), (0.0, 0.2), (0.0, 0.3), tint=0.15),
            _band("highlands", (140, 120, 100), (0.25, 0.45), tint=0.10),
            _band("mountain", (110, 110, 120), (0.45, 1.0), tint=0.25),
            _band("snow", (240, 240, 255), (0.55, 1.0), (0.4, 1.0), tint=0.05),
        ),
    ),
    "desert": PlanetTypeProfile(
        name="desert",
        water_level=-0.7,
        polar_cap_size=0.05,
        relief=ReliefParams(0.8, 0.5, 4, 2.5, 0.5, 3),
        biome_bands=(
            _band("ocean", (40, 110, 160), (-1.0, -0.02), tint=0.15),
            _band("shore", (230, 210, 160), (-0.02, 0.02), tint=0.10),
            _band("dunes", (220, 190, 140), (0.02, 0.35), tint=0.2),
            _band("rock", (160, 130, 90), (0.35, 0.55), tint=0.15),
            _band("mesa", (140, 110, 80), (0.55, 1.0), tint=0.15),
        ),
        excluded_urban_biomes=frozenset({"dunes", "shore"}),
    ),
    "ice": PlanetTypeProfile(
        name="ice",
        water_level=-0.3,
        polar_cap_size=0.20,
        relief=ReliefParams(0.7, 0.5, 4, 2.0, 0.6, 3),
        biome_bands=(
            _band("ocean", (40, 120, 200), (-1.0, -0.05), tint=0.15),
            _band("ice_shelf", (220, 235, 250), (-0.05, 0.02), tint=0.05),
            _band("tundra", (180, 200, 210), (0.02, 0.25), tint=0.10),
            _band("permafrost", (210, 220, 235), (0.25, 0.6), tint=0.05),
            _band("ice_cap", (240, 245, 255), (0.15, 1.0), (0.5, 1.0), tint=0.05),
        ),
    ),
    "ocean": PlanetTypeProfile(
        name="ocean",
        water_level=0.48,
        polar_cap_size=0.07,
        relief=ReliefParams(0.6, 0.45, 3, 2.0, 0.5, 2),
        biome_bands=(
            _band("deep_ocean", (20, 70, 140), (-1.0, -0.4), tint=0.2),
            _band("mid_ocean", (30, 100, 180), (-0.4, -0.1), tint=0.2),
            _band("shallow", (60, 150, 210), (-0.1, 0.02), tint=0.15),
            _band("islands", (65, 120, 60), (0.02, 0.25), tint=0.15),
            _band("reefs", (220, 210, 160), (0.0, 0.1), tint=0.1),
        ),
    ),
    "rocky": PlanetTypeProfile(
        name="rocky",
        water_level=-0.9,
        polar_cap_size=0.06,
        relief=ReliefParams(0.9, 0.55, 4, 3.5, 0.65, 4),
        biome_bands=(
            _band("cratered", (130, 120, 110), (0.0, 0.4), tint=0.2),
            _band("highlands", (150, 130, 100), (0.4, 0.7), tint=0.15),
            _band("mountain", (160, 160, 170), (0.7, 1.0), tint=0.25),
        ),
        excluded_urban_biomes=frozenset({"mountain"}),
    ),
    "lava": PlanetTypeProfile(
        name="lava",
        water_level=-0.8,
        polar_cap_size=0.0,
        relief=ReliefParams(0.7, 0.6, 3, 2.5, 0.6, 3),
        biome_bands=(
            _band("basalt", (90, 60, 50), (0.0, 0.4), tint=0.15),
            _band("lava_flow", (200, 60, 20), (0.2, 0.6), tint=0.25),
            _band("glow", (255, 120, 60), (0.6, 1.0), tint=0.25),
        ),
        excluded_urban_biomes=frozenset({"lava_flow", "glow"}),
    ),
    "volcanic": PlanetTypeProfile(
        name="volcanic",
        water_level=-0.6,
        polar_cap_size=0.02,
        relief=ReliefParams(0.7, 0.6, 3, 3.0, 0.65, 3),
        biome_bands=(
            _band("ash", (70, 70, 70), (0.0, 0.4), tint=0.2),
            _band("lava_flow", (200, 60, 20), (0.4, 0.7), tint=0.25),
            _band("cone", (100, 100, 110), (0.7, 1.0), tint=0.2),
        ),
        excluded_urban_biomes=frozenset({"lava_flow", "cone"}),
    ),
    "toxic": PlanetTypeProfile(
        name="toxic",
        water_level=-0.4,
        polar_cap_size=0.06,
        relief=ReliefParams(0.8, 0.55, 4, 2.2, 0.5, 3),
        biome_bands=(
            _band("sludge", (80, 200, 40), (-0.1, 0.2), tint=0.2),
            _band("acid_flats", (100, 220, 60), (0.2, 0.5), tint=0.2),
            _band("fumes", (160, 230, 100), (0.5, 1.0), tint=0.15),
        ),
        excluded_urban_biomes=frozenset({"acid_flats", "fumes"}),
    ),
    "crystal": PlanetTypeProfile(
        name="crystal",
        water_level=-0.8,
        polar_cap_size=0.05,
        relief=ReliefParams(0.9, 0.55, 4, 3.0, 0.6, 3),
        biome_bands=(
            _band("plain", (150, 100, 255), (0.0, 0.5), tint=0.15),
            _band("spires", (200, 160, 255), (0.5, 1.0), tint=0.2),
        ),
        excluded_urban_biomes=frozenset({"spires"}),
    ),
    # Gas giants have no surface: color follows broad latitude bands only
    "gas": PlanetTypeProfile(
        name="gas",
        water_level=-2.0,
        polar_cap_size=0.0,
        relief=ReliefParams(0.25, 0.4, 2, 1.0, 0.2, 1),
        biome_bands=(
            _band("band1", (220, 180, 80), latitude=(0.0, 0.15)),
            _band("band2", (210, 170, 90), latitude=(0.15, 0.3)),
            _band("band3", (200, 160, 100), latitude=(0.3, 0.45)),
            _band("band4", (190, 150, 110), latitude=(0.45, 0.6)),
            _band("band5", (200, 160, 95), latitude=(0.6, 0.75)),
            _band("band6", (220, 180, 80), latitude=(0.75, 1.0)),
        ),
        banded=True,
    ),
}


def get_profile(planet_type: str, default: str = DEFAULT_PLANET_TYPE) -> PlanetTypeProfile:
    """Look up the profile of a planet type.

    Unknown types fall back to the ``default`` profile instead of raising.

    Args:
        planet_type: Type name, e.g. "terran" or "gas"
        default: Type used when ``planet_type`` is unknown

    Returns:
        The matching profile
    """
    profile = PLANET_TYPES.get(planet_type)
    if profile is None:
        logger.debug("Unknown planet type %r, using %r", planet_type, default)
        return PLANET_TYPES[default]
    return profile
