"""ABOUTME: Build module for converting PokeAPI data and loading it into SQLite.
ABOUTME: Exposes the setup pipeline used by the CLI."""

from dunspars.build.pipeline import run_setup_pipeline

__all__ = ["run_setup_pipeline"]
