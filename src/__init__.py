"""Procedural planetary surface generation."""
