"""
Surface generation package.

This package contains modules for coherent noise, relief synthesis, biome
classification, surface compositing, caching and scheduling of procedural
planet textures.
"""

from .api import clear_surface_cache, generate_surface, generate_surface_upgrade
from .bodies import BodyDescriptor, SurfaceRequest, request_for_body
from .biomes import BiomeClassifier
from .cache import CacheKey, TextureCache
from .compositor import SurfaceCompositor, SurfaceRaster
from .errors import InvalidResolutionError, SurfaceGenerationError, UpgradeAllocationError
from .noise import CoherentNoiseField
from .profiles import PLANET_TYPES, BiomeBand, PlanetTypeProfile, ReliefParams, get_profile
from .relief import ReliefSynthesizer
from .scheduler import GenerationScheduler, SurfaceView, UpgradeJob
from .seeded_random import SeededRandom, derive_seed

__all__ = [
    'BiomeBand', 'BiomeClassifier', 'BodyDescriptor', 'CacheKey', 'CoherentNoiseField',
    'GenerationScheduler', 'InvalidResolutionError', 'PLANET_TYPES', 'PlanetTypeProfile',
    'ReliefParams', 'ReliefSynthesizer', 'SeededRandom', 'SurfaceCompositor',
    'SurfaceGenerationError', 'SurfaceRaster', 'SurfaceRequest', 'SurfaceView',
    'TextureCache', 'UpgradeAllocationError', 'UpgradeJob', 'clear_surface_cache',
    'derive_seed', 'generate_surface', 'generate_surface_upgrade', 'get_profile',
    'request_for_body',
]
