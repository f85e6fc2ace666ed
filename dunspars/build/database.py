# ABOUTME: SQLite database operations for creating, loading and opening the PokeAPI cache.
# ABOUTME: Handles the schema, row insertion, index creation and the meta version check.

import dataclasses
import logging
import sqlite3
from collections import defaultdict
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from dunspars import __version__
from dunspars.build.rows import Row
from dunspars.errors import DatabaseVersionError

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS meta (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS games (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    sort_order INTEGER NOT NULL,
    generation INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS evolutions (
    id INTEGER PRIMARY KEY,
    evolution TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS species (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    is_baby BOOLEAN NOT NULL,
    is_legendary BOOLEAN NOT NULL,
    is_mythical BOOLEAN NOT NULL,
    generation INTEGER NOT NULL,
    evolution_id INTEGER REFERENCES evolutions(id)
);

CREATE TABLE IF NOT EXISTS pokemon (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    primary_type TEXT NOT NULL,
    secondary_type TEXT,
    hp INTEGER NOT NULL,
    attack INTEGER NOT NULL,
    defense INTEGER NOT NULL,
    special_attack INTEGER NOT NULL,
    special_defense INTEGER NOT NULL,
    speed INTEGER NOT NULL,
    species_id INTEGER NOT NULL REFERENCES species(id)
);

CREATE TABLE IF NOT EXISTS pokemon_moves (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    learn_method TEXT NOT NULL,
    learn_level INTEGER NOT NULL,
    generation INTEGER NOT NULL,
    pokemon_id INTEGER NOT NULL REFERENCES pokemon(id)
);

CREATE TABLE IF NOT EXISTS pokemon_abilities (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    hidden BOOLEAN NOT NULL,
    slot INTEGER NOT NULL,
    pokemon_id INTEGER NOT NULL REFERENCES pokemon(id)
);

CREATE TABLE IF NOT EXISTS pokemon_type_changes (
    id INTEGER PRIMARY KEY,
    primary_type TEXT NOT NULL,
    secondary_type TEXT,
    generation INTEGER NOT NULL,
    pokemon_id INTEGER NOT NULL REFERENCES pokemon(id)
);

CREATE TABLE IF NOT EXISTS moves (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    power INTEGER,
    accuracy INTEGER,
    pp INTEGER,
    effect_chance INTEGER,
    effect TEXT NOT NULL,
    type TEXT NOT NULL,
    damage_class TEXT NOT NULL,
    generation INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS move_changes (
    id INTEGER PRIMARY KEY,
    power INTEGER,
    accuracy INTEGER,
    pp INTEGER,
    effect_chance INTEGER,
    effect TEXT,
    type TEXT,
    generation INTEGER NOT NULL,
    move_id INTEGER NOT NULL REFERENCES moves(id)
);

CREATE TABLE IF NOT EXISTS types (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    no_damage_to TEXT NOT NULL,
    half_damage_to TEXT NOT NULL,
    double_damage_to TEXT NOT NULL,
    no_damage_from TEXT NOT NULL,
    half_damage_from TEXT NOT NULL,
    double_damage_from TEXT NOT NULL,
    generation INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS type_changes (
    id INTEGER PRIMARY KEY,
    no_damage_to TEXT NOT NULL,
    half_damage_to TEXT NOT NULL,
    double_damage_to TEXT NOT NULL,
    no_damage_from TEXT NOT NULL,
    half_damage_from TEXT NOT NULL,
    double_damage_from TEXT NOT NULL,
    generation INTEGER NOT NULL,
    type_id INTEGER NOT NULL REFERENCES types(id)
);

CREATE TABLE IF NOT EXISTS abilities (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    effect TEXT NOT NULL,
    generation INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS ability_changes (
    id INTEGER PRIMARY KEY,
    effect TEXT NOT NULL,
    generation INTEGER NOT NULL,
    ability_id INTEGER NOT NULL REFERENCES abilities(id)
);
"""

_INDEXES = {
    "pokemon_moves": "pokemon_id",
    "pokemon_abilities": "pokemon_id",
    "pokemon_type_changes": "pokemon_id",
    "move_changes": "move_id",
    "type_changes": "type_id",
    "ability_changes": "ability_id",
    "pokemon": "species_id",
}


def ensure_schema(conn: sqlite3.Connection) -> None:
    """Create all tables if they don't exist yet."""
    conn.executescript(_SCHEMA)


def create_database(db_path: Path) -> sqlite3.Connection:
    """Create a fresh database with the schema and the meta version row.

    Args:
        db_path: Path to the database file.

    Returns:
        SQLite connection.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)

    # Remove existing database to start fresh
    if db_path.exists():
        db_path.unlink()

    conn = sqlite3.connect(str(db_path))
    ensure_schema(conn)
    write_version(conn)
    return conn


def write_version(conn: sqlite3.Connection, version: str = __version__) -> None:
    """Record the package version that built the database."""
    conn.execute("INSERT OR REPLACE INTO meta (key, value) VALUES ('version', ?)", (version,))
    conn.commit()


def insert_rows(conn: sqlite3.Connection, rows: Iterable[Row]) -> int:
    """Insert rows of any kind, batching one executemany per table.

    Args:
        conn: SQLite connection with the schema applied.
        rows: Row dataclasses, any mix of tables.

    Returns:
        Number of rows inserted.
    """
    by_kind: dict[type, list[Row]] = defaultdict(list)
    for row in rows:
        by_kind[type(row)].append(row)

    count = 0
    for kind, batch in by_kind.items():
        columns = [f.name for f in dataclasses.fields(kind)]
        placeholders = ", ".join(f":{c}" for c in columns)
        # Table and column names come from the row dataclasses, not user input
        sql = f"INSERT INTO {kind.TABLE} ({', '.join(columns)}) VALUES ({placeholders})"  # noqa: S608
        conn.executemany(sql, [dataclasses.asdict(row) for row in batch])
        logger.debug("Inserted %d rows into %s", len(batch), kind.TABLE)
        count += len(batch)

    conn.commit()
    return count


def create_indexes(conn: sqlite3.Connection) -> None:
    """Create indexes on foreign key columns for efficient lookups."""
    for table_name, column in _INDEXES.items():
        conn.execute(f"CREATE INDEX IF NOT EXISTS idx_{table_name}_{column} ON {table_name}({column})")
    conn.commit()


def get_connection(db_path: Path) -> sqlite3.Connection:
    """Get a read-only connection to an existing database.

    Args:
        db_path: Path to the database file.

    Returns:
        SQLite connection.

    Raises:
        FileNotFoundError: If database doesn't exist.
    """
    if not db_path.exists():
        raise FileNotFoundError(f"Database not found: {db_path}. Run 'dunspars setup' first.")

    return sqlite3.connect(f"file:{db_path}?mode=ro", uri=True)


def fetchall_to_dicts(cursor: sqlite3.Cursor) -> list[dict[str, Any]]:
    """Convert a SQLite cursor result to a list of dictionaries.

    Args:
        cursor: Executed SQLite cursor with results.

    Returns:
        List of dicts, one per row, with column names as keys.
    """
    if cursor.description is None:
        return []

    column_names = [desc[0] for desc in cursor.description]
    rows = cursor.fetchall()

    return [dict(zip(column_names, row, strict=True)) for row in rows]


def _major_minor(version: str) -> tuple[int, int]:
    major, minor, *_ = version.split(".")
    return int(major), int(minor)


def check_database_version(conn: sqlite3.Connection, version: str = __version__) -> None:
    """Verify the database was built by a compatible dunspars version.

    Versions are compatible when major and minor match.

    Raises:
        DatabaseVersionError: If the version row is missing or incompatible.
    """
    try:
        row = conn.execute("SELECT value FROM meta WHERE key = 'version'").fetchone()
    except sqlite3.OperationalError:
        row = None

    if row is None:
        raise DatabaseVersionError("Database has no version. Run 'dunspars setup --force' to rebuild it.")

    built_with = row[0]
    if _major_minor(built_with) != _major_minor(version):
        raise DatabaseVersionError(
            f"Database was built with dunspars {built_with}, running {version}. "
            "Run 'dunspars setup --force' to rebuild it."
        )
