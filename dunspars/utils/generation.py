# ABOUTME: Maps game (version group) names and PokeAPI generation references to generation numbers.
# ABOUTME: Also extracts numeric ids from PokeAPI resource URLs.

import re
import sqlite3
from collections.abc import Mapping

from dunspars.errors import NotFoundError

_GENERATION_URL = re.compile(r"generation/(?P<gen>\d+)/?$")
_GENERATION_NAME = re.compile(r"^generation-(?P<numeral>[ivx]+)$")
_RESOURCE_ID = re.compile(r"/(?P<id>\d+)/?$")

_ROMAN = {"i": 1, "v": 5, "x": 10}


def _roman_to_int(numeral: str) -> int:
    """Convert a lowercase roman numeral to an integer.

    >>> _roman_to_int("ix")
    9
    """
    total = 0
    for current, following in zip(numeral, [*numeral[1:], ""], strict=True):
        value = _ROMAN[current]
        total += -value if following and _ROMAN[following] > value else value
    return total


def generation_of_reference(ref: str) -> int:
    """Extract the generation number from a PokeAPI generation reference.

    Args:
        ref: A generation URL (".../generation/5/") or name ("generation-v").

    Returns:
        The generation number.

    Raises:
        ValueError: If ref carries no generation marker.
    """
    if match := _GENERATION_URL.search(ref):
        return int(match.group("gen"))
    if match := _GENERATION_NAME.match(ref):
        return _roman_to_int(match.group("numeral"))
    raise ValueError(f"No generation found in reference: {ref}")


def id_of_reference(url: str) -> int:
    """Extract the trailing numeric id of a PokeAPI resource URL.

    Raises:
        ValueError: If url does not end in a numeric id.
    """
    match = _RESOURCE_ID.search(url)
    if match is None:
        raise ValueError(f"No id found in resource url: {url}")
    return int(match.group("id"))


class GenerationResolver:
    """Lookup table from game name to generation, with game release order."""

    def __init__(self, games: Mapping[str, int], order: Mapping[str, int] | None = None) -> None:
        self._games = dict(games)
        self._order = dict(order) if order is not None else {name: i for i, name in enumerate(self._games)}

    @classmethod
    def from_connection(cls, conn: sqlite3.Connection) -> "GenerationResolver":
        """Build a resolver from the games table of a database."""
        rows = conn.execute("SELECT name, generation, sort_order FROM games ORDER BY sort_order").fetchall()
        return cls({name: gen for name, gen, _ in rows}, {name: order for name, _, order in rows})

    def generation_of_game(self, game_name: str) -> int:
        """Return the generation of a game.

        Raises:
            NotFoundError: If the game is unknown.
        """
        try:
            return self._games[game_name]
        except KeyError:
            raise NotFoundError("game", game_name) from None

    generation_of_reference = staticmethod(generation_of_reference)

    def latest_game(self) -> str:
        """Return the most recent game by release order.

        Raises:
            NotFoundError: If no games are known.
        """
        if not self._order:
            raise NotFoundError("game", "latest", "No games found. Run 'dunspars setup' first.")
        return max(self._order, key=self._order.__getitem__)

    @property
    def games(self) -> list[str]:
        """Game names in release order."""
        return sorted(self._games, key=self._order.__getitem__)
