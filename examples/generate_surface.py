#!/usr/bin/env python3
"""Example script to demonstrate procedural planet surfaces.

This script generates the surface of one body, shows its colors, urban mask
and night-side lights, and optionally saves the textures to disk.
"""

import argparse
import logging

import numpy as np
from src.surface_generation import PLANET_TYPES, SurfaceCompositor, generate_surface, get_profile
from src.utils import Visualizer


def generate_body_surface(planet_type="terran", resolution=256, star=(0.42, 1.37),
                          body_index=2, satellite_index=0, development_level=0.6):
    """Generate the surface of a single body.

    Args:
        planet_type: Name of the planet type profile
        resolution: Edge length of the texture in pixels
        star: (x, y) coordinates of the originating star
        body_index: Index of the body in its system
        satellite_index: 0 for the planet, 1.. for its moons
        development_level: Urbanization level (0.0-1.0)

    Returns:
        The generated SurfaceRaster
    """
    print(f"\n=== Generating {planet_type.title()} Surface ===")

    raster = generate_surface(star[0], star[1], body_index, planet_type, resolution,
                              satellite_index=satellite_index,
                              development_level=development_level)
    print(f"Seed: {raster.seed}")
    print(f"Texture size: {raster.width}x{raster.height}")
    return raster


def display_surface_statistics(raster):
    """Display statistics about a generated surface.

    Args:
        raster: SurfaceRaster to summarize
    """
    print("\n=== Surface Statistics ===")

    profile = get_profile(raster.planet_type)
    biomes = SurfaceCompositor().biome_map(profile, raster.resolution, raster.seed)
    names = profile.band_names()
    counts = np.bincount(biomes.ravel(), minlength=len(names))
    for name, count in sorted(zip(names, counts), key=lambda item: -item[1]):
        if count:
            print(f"{name:>14}: {count / biomes.size:.2%}")

    print(f"Urban cells: {raster.urban_count()} "
          f"({raster.urban_count() / raster.urban_mask.size:.2%})")


def main():
    """Main function to demonstrate surface generation."""
    parser = argparse.ArgumentParser(description="Generate a procedural planet surface.")
    parser.add_argument("--type", default="terran", choices=sorted(PLANET_TYPES),
                        help="Planet type")
    parser.add_argument("--resolution", type=int, default=256,
                        help="Texture edge length (power of two)")
    parser.add_argument("--body", type=int, default=2, help="Body index in its system")
    parser.add_argument("--moon", type=int, default=0,
                        help="Satellite index (0 for the planet itself)")
    parser.add_argument("--development", type=float, default=0.6,
                        help="Development level (0.0-1.0)")
    parser.add_argument("--save", metavar="PREFIX",
                        help="Save day and night textures as PREFIX_day.png / PREFIX_night.png")
    parser.add_argument("--quick", action="store_true", help="Skip visualizations")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    raster = generate_body_surface(planet_type=args.type, resolution=args.resolution,
                                   body_index=args.body, satellite_index=args.moon,
                                   development_level=args.development)
    display_surface_statistics(raster)

    visualizer = Visualizer()
    if not args.quick:
        visualizer.show_surface(raster)
        visualizer.show_urban_mask(raster)

    if args.save:
        visualizer.save_surface(raster, f"{args.save}_day.png")
        visualizer.save_surface(raster, f"{args.save}_night.png", night=True)

    print("\nSurface generation complete!")


if __name__ == "__main__":
    main()
