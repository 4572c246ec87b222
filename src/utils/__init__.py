"""
Utility functions and classes for the surface generator.
"""

from .config import Configuration
from .visualization import Visualizer

__all__ = ['Configuration', 'Visualizer']
