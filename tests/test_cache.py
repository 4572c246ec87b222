"""Tests for the texture cache and the synchronous entry point."""

import pytest

from src.surface_generation import api
from src.surface_generation.api import clear_surface_cache, generate_surface
from src.surface_generation.cache import CacheKey, TextureCache
from src.surface_generation.compositor import SurfaceCompositor
from src.surface_generation.profiles import PLANET_TYPES


@pytest.fixture(autouse=True)
def empty_cache():
    clear_surface_cache()
    yield
    clear_surface_cache()


def make_raster(resolution=8):
    return SurfaceCompositor().generate(PLANET_TYPES["rocky"], resolution, 1)


def test_get_or_create_builds_once():
    cache = TextureCache()
    key = CacheKey.for_request(1.0, 2.0, 0, "rocky", 8)
    built = []

    def factory():
        built.append(1)
        return make_raster()

    first = cache.get_or_create(key, factory)
    second = cache.get_or_create(key, factory)
    assert first is second
    assert len(built) == 1
    assert cache.hits == 1 and cache.misses == 1
    assert key in cache and len(cache) == 1


def test_clear_drops_everything():
    cache = TextureCache()
    cache.put(CacheKey.for_request(1.0, 2.0, 0, "rocky", 8), make_raster())
    cache.put(CacheKey.for_request(1.0, 2.0, 1, "rocky", 8), make_raster())
    cache.clear()
    assert len(cache) == 0
    assert cache.get(CacheKey.for_request(1.0, 2.0, 0, "rocky", 8)) is None


def test_cache_key_normalizes_inputs():
    key = CacheKey.for_request(1.23456, -0.5, 2, "gas", 64, 1, 3.0)
    assert key.seed_x_milli == 1234
    assert key.seed_y_milli == -500
    assert key.development_level == 1.0
    assert key == CacheKey.for_request(1.2349, -0.5, 2, "gas", 64, 1, 1.0)


def test_cache_key_separates_parameters():
    base = CacheKey.for_request(1.0, 1.0, 0, "terran", 64)
    assert base != CacheKey.for_request(1.0, 1.0, 0, "terran", 128)
    assert base != CacheKey.for_request(1.0, 1.0, 0, "terran", 64, satellite_index=1)
    assert base != CacheKey.for_request(1.0, 1.0, 0, "terran", 64, development_level=0.5)
    assert base != CacheKey.for_request(1.0, 1.0, 0, "ice", 64)


def test_identical_requests_reuse_the_raster():
    compositor = api.default_compositor()
    before = compositor.calls
    first = generate_surface(3.5, 7.25, 2, "terran", 32, 0, 0.5)
    second = generate_surface(3.5, 7.25, 2, "terran", 32, 0, 0.5)
    assert first is second
    assert compositor.calls == before + 1


def test_different_requests_recompute():
    compositor = api.default_compositor()
    before = compositor.calls
    generate_surface(3.5, 7.25, 2, "terran", 16)
    generate_surface(3.5, 7.25, 2, "terran", 16, satellite_index=1)
    assert compositor.calls == before + 2


def test_clear_surface_cache_forces_regeneration():
    compositor = api.default_compositor()
    first = generate_surface(0.5, 0.5, 0, "desert", 16)
    clear_surface_cache()
    before = compositor.calls
    second = generate_surface(0.5, 0.5, 0, "desert", 16)
    assert compositor.calls == before + 1
    assert first is not second
    assert first.to_bytes() == second.to_bytes()
