"""Noise sources for WAVEGRID."""

from wavegrid.noise.simplex import SimplexNoise, ZeroNoise

__all__ = ["SimplexNoise", "ZeroNoise"]
