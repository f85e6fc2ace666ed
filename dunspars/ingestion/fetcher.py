"""ABOUTME: Fetches PokeAPI resources as JSON with an on-disk response cache.
ABOUTME: Supports async downloading in ordered chunks with retry on rate limiting."""

import asyncio
import json
import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import httpx

from dunspars.config import PokeApiConfig

logger = logging.getLogger(__name__)

HTTP_TOO_MANY_REQUESTS = 429
RATE_LIMIT_BASE_DELAY = 1.0  # seconds
LIST_LIMIT = 100_000


def create_client(config: PokeApiConfig) -> httpx.AsyncClient:
    """Create an httpx client pointed at the configured PokeAPI base URL."""
    return httpx.AsyncClient(base_url=config.base_url, follow_redirects=True, timeout=config.timeout)


def _cache_path(cache_dir: Path, endpoint: str, identifier: str | int) -> Path:
    return cache_dir / endpoint / f"{identifier}.json"


async def _read_cache(path: Path) -> Any:
    text = await asyncio.to_thread(path.read_text, encoding="utf-8")
    return json.loads(text)


async def _write_cache(path: Path, data: Any) -> None:
    await asyncio.to_thread(path.parent.mkdir, parents=True, exist_ok=True)
    await asyncio.to_thread(path.write_text, json.dumps(data), encoding="utf-8")


async def _get_json(client: httpx.AsyncClient, url: str, max_retries: int) -> Any:
    """GET a URL and decode JSON, backing off when rate limited.

    Raises:
        httpx.HTTPStatusError: If the request fails or stays rate limited.
    """
    for attempt in range(max_retries + 1):
        response = await client.get(url)

        if response.status_code == HTTP_TOO_MANY_REQUESTS and attempt < max_retries:
            wait_time = RATE_LIMIT_BASE_DELAY * (2**attempt)  # Exponential backoff
            logger.warning(
                "Rate limited on %s. Waiting %.0fs before retry %d/%d", url, wait_time, attempt + 1, max_retries
            )
            await asyncio.sleep(wait_time)
            continue

        response.raise_for_status()
        return response.json()

    raise AssertionError("unreachable")


async def fetch_resource(
    client: httpx.AsyncClient,
    endpoint: str,
    identifier: str | int,
    cache_dir: Path,
    force: bool = False,
    max_retries: int = 3,
) -> dict[str, Any]:
    """Fetch a single resource, e.g. ``move/tackle``.

    Args:
        client: httpx client with the PokeAPI base URL.
        endpoint: API path segment (e.g. "move").
        identifier: Resource name or id.
        cache_dir: Directory for cached responses.
        force: If True, re-download even if cached.
        max_retries: Retries when rate limited.

    Returns:
        The decoded resource.

    Raises:
        httpx.HTTPStatusError: If download fails.
    """
    path = _cache_path(cache_dir, endpoint, identifier)
    if await asyncio.to_thread(path.exists) and not force:
        return await _read_cache(path)

    data = await _get_json(client, f"/{endpoint}/{identifier}/", max_retries)
    await _write_cache(path, data)
    return data


async def fetch_resource_names(
    client: httpx.AsyncClient,
    endpoint: str,
    cache_dir: Path,
    force: bool = False,
    max_retries: int = 3,
) -> list[str]:
    """Fetch the names of every resource behind a list endpoint."""
    path = _cache_path(cache_dir, endpoint, "_index")
    if await asyncio.to_thread(path.exists) and not force:
        data = await _read_cache(path)
    else:
        data = await _get_json(client, f"/{endpoint}/?limit={LIST_LIMIT}", max_retries)
        await _write_cache(path, data)
    return [entry["name"] for entry in data["results"]]


async def fetch_all(
    client: httpx.AsyncClient,
    endpoint: str,
    identifiers: Sequence[str | int],
    cache_dir: Path,
    force: bool = False,
    chunk_size: int = 100,
    max_retries: int = 3,
    progress_callback: Callable[[int, int], None] | None = None,
) -> list[dict[str, Any]]:
    """Fetch many resources concurrently, one chunk at a time.

    Args:
        client: httpx client with the PokeAPI base URL.
        endpoint: API path segment (e.g. "pokemon").
        identifiers: Resource names or ids.
        cache_dir: Directory for cached responses.
        force: If True, re-download even if cached.
        chunk_size: Number of concurrent requests per chunk.
        max_retries: Retries when rate limited.
        progress_callback: Called with (done, total) after each chunk.

    Returns:
        Resources in the same order as identifiers.
    """
    results: list[dict[str, Any]] = []
    total = len(identifiers)

    for start in range(0, total, chunk_size):
        chunk = identifiers[start : start + chunk_size]
        tasks = [fetch_resource(client, endpoint, i, cache_dir, force, max_retries) for i in chunk]
        results.extend(await asyncio.gather(*tasks))
        logger.debug("Fetched %d/%d %s resources", len(results), total, endpoint)
        if progress_callback is not None:
            progress_callback(len(results), total)

    return results
