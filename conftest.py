"""Test configuration: headless matplotlib for the visualization tests."""

import matplotlib

matplotlib.use("Agg")
