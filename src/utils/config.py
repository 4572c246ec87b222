"""Configuration for the surface generator.

Holds the defaults that are not part of any planet type profile: preview and
upgrade resolutions, chunk size of asynchronous upgrades and resolution
limits. Values can be overridden from a dictionary or a JSON file.
"""

import json
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Union


def _is_power_of_two(value: int) -> bool:
    return value > 0 and not value & (value - 1)


@dataclass(frozen=True)
class Configuration:
    """Generator settings.

    Attributes:
        preview_resolution: Edge length of the synchronous preview raster
        upgrade_resolution: Edge length of the asynchronous upgrade raster
        chunk_rows: Rows generated between two yields of an upgrade job
        satellite_resolution_divisor: Moons use the planet resolution divided by this
        max_resolution: Largest edge length the compositor accepts
        default_planet_type: Profile used for unknown type names
    """

    preview_resolution: int = 128
    upgrade_resolution: int = 512
    chunk_rows: int = 16
    satellite_resolution_divisor: int = 2
    max_resolution: int = 8192
    default_planet_type: str = "rocky"

    def __post_init__(self):
        for name in ("preview_resolution", "upgrade_resolution", "max_resolution"):
            value = getattr(self, name)
            if not isinstance(value, int) or not _is_power_of_two(value):
                raise ValueError(f"{name} must be a positive power of two, got {value!r}")
        if self.preview_resolution > self.upgrade_resolution:
            raise ValueError("preview_resolution cannot exceed upgrade_resolution")
        if self.upgrade_resolution > self.max_resolution:
            raise ValueError("upgrade_resolution cannot exceed max_resolution")
        if self.chunk_rows < 1:
            raise ValueError(f"chunk_rows must be at least 1, got {self.chunk_rows}")
        if self.satellite_resolution_divisor < 1:
            raise ValueError("satellite_resolution_divisor must be at least 1")

        from ..surface_generation.profiles import PLANET_TYPES
        if self.default_planet_type not in PLANET_TYPES:
            raise ValueError(f"Unknown default_planet_type {self.default_planet_type!r}")

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "Configuration":
        """Build a configuration from a dictionary of overrides.

        Raises:
            ValueError: On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**values)

    @classmethod
    def from_file(cls, filename: Union[str, Path]) -> "Configuration":
        """Load overrides from a JSON file."""
        with open(filename, "r", encoding="utf-8") as handle:
            return cls.from_dict(json.load(handle))

    def with_overrides(self, **values: Any) -> "Configuration":
        return replace(self, **values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
