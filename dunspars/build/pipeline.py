"""ABOUTME: Setup pipeline orchestration from PokeAPI to the local SQLite database.
ABOUTME: Coordinates fetching each resource kind, converting it to rows and loading them."""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx

from dunspars.build.database import create_database, create_indexes, insert_rows
from dunspars.build.rows import Row
from dunspars.config import PokeApiConfig, load_pokeapi_config
from dunspars.ingestion.convert import (
    convert_ability,
    convert_evolution,
    convert_game,
    convert_move,
    convert_pokemon,
    convert_species,
    convert_type,
)
from dunspars.ingestion.fetcher import create_client, fetch_all, fetch_resource_names
from dunspars.settings import settings
from dunspars.utils.generation import GenerationResolver

logger = logging.getLogger(__name__)

LogFunc = Callable[[str], None]


class _Fetcher:
    """Binds the client, cache and config shared by every fetch of one setup run."""

    def __init__(self, client: httpx.AsyncClient, config: PokeApiConfig, cache_dir: Path, force: bool, log: LogFunc):
        self.client = client
        self.config = config
        self.cache_dir = cache_dir
        self.force = force
        self.log = log

    async def names(self, resource: str) -> list[str]:
        endpoint = self.config.get_endpoint(resource)
        return await fetch_resource_names(self.client, endpoint, self.cache_dir, self.force, self.config.max_retries)

    async def resources(self, resource: str, identifiers: list[str] | list[int]) -> list[dict[str, Any]]:
        endpoint = self.config.get_endpoint(resource)
        self.log(f"Fetching {len(identifiers)} {resource}...")
        return await fetch_all(
            self.client,
            endpoint,
            identifiers,
            self.cache_dir,
            force=self.force,
            chunk_size=self.config.chunk_size,
            max_retries=self.config.max_retries,
        )

    async def all_resources(self, resource: str) -> list[dict[str, Any]]:
        return await self.resources(resource, await self.names(resource))


async def _fetch_rows(fetcher: _Fetcher) -> list[Row]:
    """Fetch every resource kind and convert it to rows, in dependency order."""
    games = [convert_game(data) for data in await fetcher.all_resources("games")]
    resolver = GenerationResolver(
        {g.name: g.generation for g in games},
        {g.name: g.sort_order for g in games},
    )
    rows: list[Row] = list(games)

    for data in await fetcher.all_resources("moves"):
        rows.extend(convert_move(data, resolver))

    for data in await fetcher.all_resources("types"):
        rows.extend(convert_type(data))

    for data in await fetcher.all_resources("abilities"):
        rows.extend(convert_ability(data, resolver))

    species = [convert_species(data) for data in await fetcher.all_resources("species")]
    rows.extend(species)

    evolution_ids = sorted({s.evolution_id for s in species if s.evolution_id is not None})
    rows.extend(convert_evolution(data) for data in await fetcher.resources("evolutions", evolution_ids))

    for data in await fetcher.all_resources("pokemon"):
        rows.extend(convert_pokemon(data, resolver))

    return rows


async def fetch_all_rows(
    config: PokeApiConfig | None = None,
    cache_dir: Path | None = None,
    force: bool = False,
    client: httpx.AsyncClient | None = None,
    verbose_callback: LogFunc | None = None,
) -> list[Row]:
    """Fetch and convert all PokeAPI resources the database is built from.

    Args:
        config: PokeAPI configuration. Loads default if not provided.
        cache_dir: Directory for cached responses. Uses settings default if not provided.
        force: If True, re-download even if responses are cached.
        client: Optional httpx client, e.g. one with a mock transport.
        verbose_callback: Optional function to log progress messages.

    Returns:
        Rows of every kind.
    """
    if config is None:
        config = load_pokeapi_config()
    if cache_dir is None:
        cache_dir = settings.cache_dir

    def log(msg: str) -> None:
        logger.info(msg)
        if verbose_callback:
            verbose_callback(msg)

    should_close_client = client is None
    if client is None:
        client = create_client(config)

    try:
        return await _fetch_rows(_Fetcher(client, config, cache_dir, force, log))
    finally:
        if should_close_client:
            await client.aclose()


def load_rows(db_path: Path, rows: list[Row], verbose_callback: LogFunc | None = None) -> Path:
    """Build the database from rows, replacing any existing database only on success.

    Args:
        db_path: Path for the SQLite database file.
        rows: Rows of every kind.
        verbose_callback: Optional function to log progress messages.

    Returns:
        Path to the created database.
    """
    tmp_path = db_path.with_suffix(".tmp")
    conn = create_database(tmp_path)
    try:
        count = insert_rows(conn, rows)
        create_indexes(conn)
    except Exception:
        conn.close()
        tmp_path.unlink(missing_ok=True)
        raise
    conn.close()

    tmp_path.replace(db_path)
    if verbose_callback:
        verbose_callback(f"Loaded {count} rows into {db_path}")
    return db_path


def run_setup_pipeline(
    db_path: Path | None = None,
    cache_dir: Path | None = None,
    force: bool = False,
    verbose_callback: LogFunc | None = None,
) -> Path:
    """Run the full setup pipeline: fetch from PokeAPI, convert and load into SQLite.

    Args:
        db_path: Path for the SQLite database. Uses settings default if not provided.
        cache_dir: Directory for cached responses. Uses settings default if not provided.
        force: If True, re-download even if responses are cached.
        verbose_callback: Optional function to log progress messages.

    Returns:
        Path to the created database.
    """
    if db_path is None:
        db_path = settings.db_path

    rows = asyncio.run(fetch_all_rows(cache_dir=cache_dir, force=force, verbose_callback=verbose_callback))
    return load_rows(db_path, rows, verbose_callback)
