"""Tests for the matplotlib visualizer."""

import numpy as np

from src.surface_generation.compositor import SurfaceRaster
from src.utils.visualization import CITY_LIGHT_COLOR, Visualizer


def make_raster(width=8, height=4):
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[..., :3] = 100
    pixels[..., 3] = 255
    mask = np.zeros((height, width), dtype=np.uint8)
    mask[1, :] = 255
    return SurfaceRaster(pixels, mask, seed=1, development_level=1.0,
                         planet_type="terran", resolution=width)


def test_night_lights_without_glow():
    raster = make_raster()
    image = Visualizer().night_lights(raster, sun_longitude=0.0, glow_sigma=0)
    assert image.shape == (4, 8, 3)
    assert image.dtype == np.uint8

    # Column 4 sits at longitude pi, opposite the sun
    assert (image[0, 4] == 15).all()
    expected = np.clip(15 + np.array(CITY_LIGHT_COLOR), 0, 255)
    assert (image[1, 4] == expected).all()


def test_day_side_unchanged():
    raster = make_raster()
    image = Visualizer().night_lights(raster, sun_longitude=0.0)
    assert (image[:, 0] == 100).all()
    assert (image[:, 1] == 100).all()


def test_glow_spreads_to_neighbouring_rows():
    raster = make_raster()
    image = Visualizer().night_lights(raster, sun_longitude=0.0, glow_sigma=1.0)
    assert image[0, 4, 0] > 15
    assert image[1, 4, 0] == 255


def test_save_surface(tmp_path, capsys):
    raster = make_raster()
    target = tmp_path / "surface.png"
    Visualizer().save_surface(raster, str(target))
    assert target.exists()
    assert "Surface saved to" in capsys.readouterr().out

    night = tmp_path / "night.png"
    Visualizer().save_surface(raster, str(night), night=True)
    assert night.exists()
