"""Visualization helpers for generated surfaces.

Plots rasters and urban masks with matplotlib and builds a night-side
preview that composites city lights from the urban mask, the way a renderer
would across the day/night terminator.
"""

from typing import Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np
from scipy.ndimage import gaussian_filter

CITY_LIGHT_COLOR = (255, 210, 140)
NIGHT_DIMMING = 0.15


class Visualizer:
    """Plots and previews ``SurfaceRaster`` objects."""

    def __init__(self, figsize: Tuple[float, float] = (12, 6)):
        self.figsize = figsize

    def night_lights(self, raster, sun_longitude: float = 0.0,
                     glow_sigma: float = 1.0) -> np.ndarray:
        """Composite city lights onto the night hemisphere.

        Args:
            raster: Surface raster with pixels and urban mask
            sun_longitude: Longitude (radians) of the sub-solar meridian
            glow_sigma: Gaussian glow radius in pixels; 0 disables the glow

        Returns:
            ``height x width x 3`` uint8 image
        """
        height, width = raster.urban_mask.shape
        color = raster.pixels[..., :3].astype(np.float64)

        lights = raster.urban_mask.astype(np.float64) / 255.0
        if glow_sigma > 0:
            # Wrap around the longitude seam, clamp at the poles
            lights = gaussian_filter(lights, sigma=glow_sigma, mode=("nearest", "wrap"))
            peak = lights.max()
            if peak > 0:
                lights = lights / peak

        lon = np.arange(width, dtype=np.float64) / width * 2.0 * np.pi
        night = np.broadcast_to(np.cos(lon - sun_longitude) < 0.0, (height, width))

        glow = lights[..., None] * np.array(CITY_LIGHT_COLOR, dtype=np.float64)
        night_color = color * NIGHT_DIMMING + glow
        image = np.where(night[..., None], night_color, color)
        return np.clip(image, 0, 255).astype(np.uint8)

    def show_surface(self, raster, title: Optional[str] = None) -> None:
        """Display the surface colors in equirectangular projection."""
        plt.figure(figsize=self.figsize)
        plt.imshow(raster.pixels, extent=(0, 360, -90, 90), aspect="auto")
        plt.title(title or f"{raster.planet_type.title()} surface (seed {raster.seed})")
        plt.xlabel("Longitude (°)")
        plt.ylabel("Latitude (°)")
        plt.tight_layout()
        plt.show()

    def show_urban_mask(self, raster, title: str = "Urban Mask") -> None:
        """Display the urban mask next to its night-lights preview."""
        fig, (ax_mask, ax_night) = plt.subplots(1, 2, figsize=self.figsize)
        ax_mask.imshow(raster.urban_mask, cmap="gray", vmin=0, vmax=255)
        ax_mask.set_title(f"{title} ({raster.urban_count()} cells)")
        ax_mask.axis("off")

        ax_night.imshow(self.night_lights(raster, sun_longitude=np.pi))
        ax_night.set_title("Night-side preview")
        ax_night.axis("off")

        fig.tight_layout()
        plt.show()

    def save_surface(self, raster, filename: str, night: bool = False) -> None:
        """Write the surface (or its night-lights preview) to an image file.

        Args:
            raster: Surface raster to save
            filename: Output path; the format follows the extension
            night: Save the night-lights preview instead of the day colors
        """
        image = self.night_lights(raster) if night else np.asarray(raster.pixels)
        plt.imsave(filename, image)
        print(f"Surface saved to {filename}")
