"""ABOUTME: Generation-aware Pokemon reference tool backed by a local PokeAPI cache.
ABOUTME: Exposes the package version used by settings and the database meta row."""

__version__ = "0.3.0"
