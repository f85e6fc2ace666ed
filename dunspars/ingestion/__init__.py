"""ABOUTME: Ingestion module for fetching PokeAPI resources and converting them to rows.
ABOUTME: Exports the async fetch helpers used by the setup pipeline."""

from dunspars.ingestion.fetcher import (
    create_client,
    fetch_all,
    fetch_resource,
    fetch_resource_names,
)

__all__ = [
    "create_client",
    "fetch_all",
    "fetch_resource",
    "fetch_resource_names",
]
