"""ABOUTME: Read-only query functions over the local PokeAPI database.
ABOUTME: Provides the base/change/learn-move lookups the entity resolvers are built on."""

import sqlite3
from pathlib import Path
from types import TracebackType
from typing import Any

from dunspars.build.database import check_database_version, fetchall_to_dicts, get_connection
from dunspars.models import LearnMove, PokemonAbility
from dunspars.settings import settings

BASE_TABLES = frozenset({"pokemon", "species", "moves", "types", "abilities", "games", "evolutions"})

CHANGE_TABLES: dict[str, str] = {
    "move_changes": "move_id",
    "type_changes": "type_id",
    "ability_changes": "ability_id",
    "pokemon_type_changes": "pokemon_id",
}

NAME_RESOURCES: dict[str, str] = {
    "pokemon": "pokemon",
    "moves": "moves",
    "abilities": "abilities",
    "types": "types",
    "games": "games",
}


def _check_table(table: str, allowed: frozenset[str] | dict[str, str]) -> None:
    if table not in allowed:
        raise ValueError(f"Unknown table: {table}")


class Store:
    """Read-only access to the database through a single connection.

    The connection is injected so tests can hand in an in-memory database.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def __enter__(self) -> "Store":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying connection."""
        self.conn.close()

    def _fetch(self, sql: str, params: tuple[Any, ...] = ()) -> list[dict[str, Any]]:
        return fetchall_to_dicts(self.conn.execute(sql, params))

    def select_base_by_name(self, table: str, name: str) -> dict[str, Any] | None:
        """Fetch a base record by exact name.

        Args:
            table: One of BASE_TABLES.
            name: Name as stored (lowercase, hyphenated).

        Returns:
            The row as a dict, or None if no record has that name.
        """
        _check_table(table, BASE_TABLES)
        # Table name is checked against BASE_TABLES above
        rows = self._fetch(f"SELECT * FROM {table} WHERE name = ?", (name,))  # noqa: S608
        return rows[0] if rows else None

    def select_base_by_id(self, table: str, record_id: int) -> dict[str, Any] | None:
        """Fetch a base record by id. Returns None if absent."""
        _check_table(table, BASE_TABLES)
        rows = self._fetch(f"SELECT * FROM {table} WHERE id = ?", (record_id,))  # noqa: S608
        return rows[0] if rows else None

    def select_changes_by_foreign_key(self, table: str, fk_id: int, min_generation: int) -> list[dict[str, Any]]:
        """Fetch change records of an entity that can apply at or after a generation.

        Args:
            table: One of CHANGE_TABLES.
            fk_id: Id of the base record.
            min_generation: Smallest change generation to return.

        Returns:
            Change rows ordered ascending by generation.
        """
        _check_table(table, CHANGE_TABLES)
        fk_column = CHANGE_TABLES[table]
        return self._fetch(
            f"SELECT * FROM {table} WHERE {fk_column} = ? AND generation >= ? ORDER BY generation",  # noqa: S608
            (fk_id, min_generation),
        )

    def select_learn_moves(self, pokemon_id: int, max_generation: int) -> list[LearnMove]:
        """Fetch the moves a Pokemon could learn at a generation.

        Each move is taken from the most recent generation at or before
        max_generation in which the Pokemon has entries for it.

        Args:
            pokemon_id: Id of the Pokemon.
            max_generation: Generation being queried.

        Returns:
            Learn moves ordered by method, level and name.
        """
        rows = self._fetch(
            """
            SELECT DISTINCT pm.name, pm.learn_method, pm.learn_level, pm.generation
            FROM pokemon_moves pm
            WHERE pm.pokemon_id = ?1
              AND pm.generation = (
                  SELECT MAX(latest.generation)
                  FROM pokemon_moves latest
                  WHERE latest.pokemon_id = pm.pokemon_id
                    AND latest.name = pm.name
                    AND latest.generation <= ?2
              )
            ORDER BY pm.learn_method, pm.learn_level, pm.name
            """,
            (pokemon_id, max_generation),
        )
        return [
            LearnMove(name=r["name"], method=r["learn_method"], level=r["learn_level"], generation=r["generation"])
            for r in rows
        ]

    def select_pokemon_abilities(self, pokemon_id: int) -> list[PokemonAbility]:
        """Fetch a Pokemon's ability slots in slot order."""
        rows = self._fetch(
            "SELECT name, hidden FROM pokemon_abilities WHERE pokemon_id = ? ORDER BY slot",
            (pokemon_id,),
        )
        return [PokemonAbility(name=r["name"], hidden=bool(r["hidden"])) for r in rows]

    def select_all_names(self, resource: str) -> list[str]:
        """List every name of a resource.

        Args:
            resource: One of "pokemon", "moves", "abilities", "types", "games".

        Returns:
            Names sorted alphabetically; games in release order.

        Raises:
            ValueError: If resource is unknown.
        """
        if resource not in NAME_RESOURCES:
            raise ValueError(f"Unknown resource '{resource}'. Valid resources: {', '.join(NAME_RESOURCES)}")
        table = NAME_RESOURCES[resource]
        order = "sort_order" if table == "games" else "name"
        rows = self.conn.execute(f"SELECT name FROM {table} ORDER BY {order}").fetchall()  # noqa: S608
        return [r[0] for r in rows]


def open_store(db_path: Path | None = None) -> Store:
    """Open the database read-only after checking its version.

    Raises:
        FileNotFoundError: If the database doesn't exist.
        DatabaseVersionError: If the database was built by an incompatible version.
    """
    if db_path is None:
        db_path = settings.db_path
    conn = get_connection(db_path)
    try:
        check_database_version(conn)
    except Exception:
        conn.close()
        raise
    return Store(conn)
