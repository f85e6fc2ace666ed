# ABOUTME: Unit tests for game and generation reference lookups.
# ABOUTME: Tests URL/name parsing and the game-to-generation resolver.

import sqlite3

import pytest

from dunspars.build.database import ensure_schema, insert_rows
from dunspars.build.rows import GameRow
from dunspars.errors import NotFoundError
from dunspars.utils.generation import GenerationResolver, generation_of_reference, id_of_reference


class TestGenerationOfReference:
    """Tests for generation_of_reference function."""

    @pytest.mark.parametrize(
        ("ref", "expected"),
        [
            ("https://pokeapi.co/api/v2/generation/5/", 5),
            ("https://pokeapi.co/api/v2/generation/9", 9),
            ("generation-i", 1),
            ("generation-iv", 4),
            ("generation-viii", 8),
            ("generation-ix", 9),
        ],
    )
    def test_parses_reference(self, ref: str, expected: int) -> None:
        """URLs and roman numeral names both resolve."""
        assert generation_of_reference(ref) == expected

    def test_no_marker(self) -> None:
        """References without a generation raise ValueError."""
        with pytest.raises(ValueError):
            generation_of_reference("https://pokeapi.co/api/v2/move/33/")


class TestIdOfReference:
    """Tests for id_of_reference function."""

    def test_trailing_id(self) -> None:
        """The last path segment is the id."""
        assert id_of_reference("https://pokeapi.co/api/v2/evolution-chain/10/") == 10

    def test_no_id(self) -> None:
        """URLs without a numeric id raise ValueError."""
        with pytest.raises(ValueError):
            id_of_reference("https://pokeapi.co/api/v2/move/")


class TestGenerationResolver:
    """Tests for GenerationResolver class."""

    def test_generation_of_game(self) -> None:
        """Known games map to their generation."""
        resolver = GenerationResolver({"red-blue": 1, "x-y": 6})

        assert resolver.generation_of_game("x-y") == 6

    def test_unknown_game(self) -> None:
        """Unknown games raise NotFoundError."""
        resolver = GenerationResolver({"red-blue": 1})

        with pytest.raises(NotFoundError, match="Game 'pokemon-snap' not found."):
            resolver.generation_of_game("pokemon-snap")

    def test_latest_game_uses_release_order(self) -> None:
        """The latest game is the last one released, not the highest generation name."""
        resolver = GenerationResolver({"x-y": 6, "red-blue": 1}, {"x-y": 2, "red-blue": 1})

        assert resolver.latest_game() == "x-y"
        assert resolver.games == ["red-blue", "x-y"]

    def test_latest_game_without_games(self) -> None:
        """An empty resolver has no latest game."""
        with pytest.raises(NotFoundError):
            GenerationResolver({}).latest_game()

    def test_from_connection(self) -> None:
        """The resolver reads the games table."""
        conn = sqlite3.connect(":memory:")
        ensure_schema(conn)
        insert_rows(conn, [GameRow(2, "gold-silver", 2, 2), GameRow(1, "red-blue", 1, 1)])

        resolver = GenerationResolver.from_connection(conn)

        assert resolver.games == ["red-blue", "gold-silver"]
        assert resolver.generation_of_game("gold-silver") == 2
        conn.close()
