"""Flixarr: resolve playable stream URLs for catalog entries via embed decoding."""

__version__ = "0.1.0"
