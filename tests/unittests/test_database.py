# ABOUTME: Unit tests for database creation, loading, version checks and queries.
# ABOUTME: Tests the schema, row insertion, the meta version row and the Store lookups.

import sqlite3
from pathlib import Path

import pytest

from dunspars import __version__
from dunspars.app.queries import Store, open_store
from dunspars.build.database import (
    check_database_version,
    create_database,
    ensure_schema,
    get_connection,
    insert_rows,
    write_version,
)
from dunspars.build.rows import GameRow, MoveRow
from dunspars.errors import DatabaseVersionError


class TestInsertRows:
    """Tests for insert_rows function."""

    def test_mixed_rows(self) -> None:
        """Rows of different kinds land in their own tables."""
        conn = sqlite3.connect(":memory:")
        ensure_schema(conn)

        count = insert_rows(
            conn,
            [
                GameRow(1, "red-blue", 1, 1),
                MoveRow(33, "tackle", 40, 100, 35, None, "Inflicts regular damage.", "normal", "physical", 1),
                GameRow(2, "gold-silver", 2, 2),
            ],
        )

        assert count == 3
        assert conn.execute("SELECT COUNT(*) FROM games").fetchone()[0] == 2
        assert conn.execute("SELECT power FROM moves WHERE name = 'tackle'").fetchone()[0] == 40
        conn.close()


class TestDatabaseVersion:
    """Tests for the meta version check."""

    def test_current_version(self) -> None:
        """A database written by this version passes."""
        conn = sqlite3.connect(":memory:")
        ensure_schema(conn)
        write_version(conn)

        check_database_version(conn)
        conn.close()

    def test_patch_difference_is_compatible(self) -> None:
        """Only major and minor versions must match."""
        conn = sqlite3.connect(":memory:")
        ensure_schema(conn)
        write_version(conn, "1.4.0")

        check_database_version(conn, "1.4.7")
        conn.close()

    def test_minor_difference(self) -> None:
        """A different minor version is rejected."""
        conn = sqlite3.connect(":memory:")
        ensure_schema(conn)
        write_version(conn, "1.3.2")

        with pytest.raises(DatabaseVersionError, match="1.3.2"):
            check_database_version(conn, "1.4.0")
        conn.close()

    def test_missing_version(self) -> None:
        """A database without a meta table is rejected."""
        conn = sqlite3.connect(":memory:")

        with pytest.raises(DatabaseVersionError):
            check_database_version(conn)
        conn.close()


class TestConnections:
    """Tests for creating and opening database files."""

    def test_missing_database(self, tmp_path: Path) -> None:
        """Opening a missing database raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="dunspars setup"):
            get_connection(tmp_path / "missing.sqlite")

    def test_create_writes_version(self, tmp_path: Path) -> None:
        """A created database records the package version."""
        db_path = tmp_path / "nested" / "dunspars.sqlite"
        create_database(db_path).close()

        conn = get_connection(db_path)
        assert conn.execute("SELECT value FROM meta WHERE key = 'version'").fetchone()[0] == __version__
        conn.close()

    def test_connection_is_read_only(self, tmp_path: Path) -> None:
        """Opened databases can't be written to."""
        db_path = tmp_path / "dunspars.sqlite"
        create_database(db_path).close()

        with open_store(db_path) as store, pytest.raises(sqlite3.OperationalError):
            store.conn.execute("INSERT INTO games VALUES (1, 'red-blue', 1, 1)")

    def test_open_store_checks_version(self, tmp_path: Path) -> None:
        """Stores are only opened on compatible databases."""
        db_path = tmp_path / "dunspars.sqlite"
        conn = create_database(db_path)
        write_version(conn, "0.0.1")
        conn.close()

        with pytest.raises(DatabaseVersionError):
            open_store(db_path)


class TestStore:
    """Tests for Store lookups."""

    def test_select_base_by_name(self, store: Store) -> None:
        """Base records come back as dicts."""
        row = store.select_base_by_name("moves", "tackle")

        assert row is not None
        assert row["power"] == 40

    def test_select_base_missing(self, store: Store) -> None:
        """Missing names give None."""
        assert store.select_base_by_name("moves", "splash") is None

    def test_unknown_table(self, store: Store) -> None:
        """Table names are checked."""
        with pytest.raises(ValueError):
            store.select_base_by_name("meta", "version")

    def test_changes_ordered_and_filtered(self, store: Store) -> None:
        """Only changes at or after the generation come back."""
        assert len(store.select_changes_by_foreign_key("move_changes", 33, 5)) == 1
        assert store.select_changes_by_foreign_key("move_changes", 33, 6) == []

    def test_pokemon_abilities_in_slot_order(self, store: Store) -> None:
        """Abilities are ordered by slot."""
        names = [a.name for a in store.select_pokemon_abilities(74)]

        assert names == ["sturdy", "rock-head"]

    @pytest.mark.parametrize(
        ("resource", "first"),
        [("pokemon", "clefairy"), ("moves", "bite"), ("abilities", "intimidate"), ("types", "bug")],
    )
    def test_all_names_sorted(self, store: Store, resource: str, first: str) -> None:
        """Names are listed alphabetically."""
        assert store.select_all_names(resource)[0] == first

    def test_games_in_release_order(self, store: Store) -> None:
        """Games are listed in release order."""
        assert store.select_all_names("games")[:2] == ["red-blue", "gold-silver"]

    def test_unknown_resource(self, store: Store) -> None:
        """Unknown resources raise ValueError."""
        with pytest.raises(ValueError, match="Valid resources"):
            store.select_all_names("items")
