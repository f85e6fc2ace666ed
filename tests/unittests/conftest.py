"""Contains configurations for the test run."""

import json
import sqlite3
from collections.abc import Iterator
from pathlib import Path

import httpx
import pytest

from dunspars.app.queries import Store
from dunspars.build.database import create_database, ensure_schema, insert_rows, write_version
from dunspars.build.rows import (
    AbilityChangeRow,
    AbilityRow,
    EvolutionRow,
    GameRow,
    MoveChangeRow,
    MoveRow,
    PokemonAbilityRow,
    PokemonMoveRow,
    PokemonRow,
    PokemonTypeChangeRow,
    Row,
    SpeciesRow,
    TypeChangeRow,
    TypeRow,
    join_types,
)
from dunspars.models import EvolutionMethod, EvolutionStep
from dunspars.settings import settings

# Current type chart by attacking type: (double, half, none)
OFFENSE: dict[str, tuple[list[str], list[str], list[str]]] = {
    "normal": ([], ["rock", "steel"], ["ghost"]),
    "fighting": (
        ["normal", "rock", "steel", "ice", "dark"],
        ["flying", "poison", "bug", "psychic", "fairy"],
        ["ghost"],
    ),
    "flying": (["fighting", "bug", "grass"], ["rock", "steel", "electric"], []),
    "poison": (["grass", "fairy"], ["poison", "ground", "rock", "ghost"], ["steel"]),
    "ground": (["poison", "rock", "steel", "fire", "electric"], ["bug", "grass"], ["flying"]),
    "rock": (["flying", "bug", "fire", "ice"], ["fighting", "ground", "steel"], []),
    "bug": (["grass", "psychic", "dark"], ["fighting", "flying", "poison", "ghost", "steel", "fire", "fairy"], []),
    "ghost": (["ghost", "psychic"], ["dark"], ["normal"]),
    "steel": (["rock", "ice", "fairy"], ["steel", "fire", "water", "electric"], []),
    "fire": (["bug", "steel", "grass", "ice"], ["rock", "fire", "water", "dragon"], []),
    "water": (["ground", "rock", "fire"], ["water", "grass", "dragon"], []),
    "grass": (["ground", "rock", "water"], ["flying", "poison", "bug", "steel", "fire", "grass", "dragon"], []),
    "electric": (["flying", "water"], ["grass", "electric", "dragon"], ["ground"]),
    "psychic": (["fighting", "poison"], ["steel", "psychic"], ["dark"]),
    "ice": (["flying", "ground", "grass", "dragon"], ["steel", "fire", "water", "ice"], []),
    "dragon": (["dragon"], ["steel"], ["fairy"]),
    "dark": (["ghost", "psychic"], ["fighting", "dark", "fairy"], []),
    "fairy": (["fighting", "dragon", "dark"], ["poison", "steel", "fire"], []),
}

TYPE_GENERATIONS = {"steel": 2, "dark": 2, "fairy": 6}

GAMES = [
    ("red-blue", 1),
    ("gold-silver", 2),
    ("ruby-sapphire", 3),
    ("diamond-pearl", 4),
    ("black-white", 5),
    ("x-y", 6),
    ("sun-moon", 7),
    ("sword-shield", 8),
    ("scarlet-violet", 9),
]


def _relations(type_name: str, extra_half_from: tuple[str, ...] = ()) -> dict[str, str]:
    double, half, none = OFFENSE[type_name]
    return {
        "no_damage_to": join_types(none),
        "half_damage_to": join_types(half),
        "double_damage_to": join_types(double),
        "no_damage_from": join_types([a for a, (_, _, n) in OFFENSE.items() if type_name in n]),
        "half_damage_from": join_types(
            [a for a, (_, h, _) in OFFENSE.items() if type_name in h] + list(extra_half_from)
        ),
        "double_damage_from": join_types([a for a, (d, _, _) in OFFENSE.items() if type_name in d]),
    }


def _type_rows() -> list[Row]:
    rows: list[Row] = [
        TypeRow(id=i, name=name, generation=TYPE_GENERATIONS.get(name, 1), **_relations(name))
        for i, name in enumerate(OFFENSE, start=1)
    ]
    steel_id = list(OFFENSE).index("steel") + 1
    # Before generation 6 steel also resisted ghost and dark
    rows.append(TypeChangeRow(generation=5, type_id=steel_id, **_relations("steel", ("ghost", "dark"))))
    return rows


def _move_rows() -> list[Row]:
    return [
        MoveRow(33, "tackle", 40, 100, 35, None, "Inflicts regular damage.", "normal", "physical", 1),
        MoveChangeRow(35, 95, None, None, None, None, 5, 33),
        MoveRow(
            85,
            "thunderbolt",
            90,
            100,
            15,
            10,
            "Has a $effect_chance% chance to paralyze the target.",
            "electric",
            "special",
            1,
        ),
        MoveChangeRow(95, None, None, None, None, None, 5, 85),
        MoveRow(57, "surf", 90, 100, 15, None, "Inflicts regular damage.", "water", "special", 1),
        MoveRow(89, "earthquake", 100, 100, 10, None, "Inflicts regular damage.", "ground", "physical", 1),
        MoveRow(157, "rock-slide", 75, 90, 10, 30, "Has a $effect_chance% chance to flinch.", "rock", "physical", 1),
        MoveRow(14, "swords-dance", None, None, 20, None, "Raises Attack by two stages.", "normal", "status", 1),
        MoveRow(44, "bite", 60, 100, 25, 30, "Has a $effect_chance% chance to flinch.", "dark", "physical", 1),
        MoveChangeRow(None, None, None, None, None, "normal", 1, 44),
        MoveRow(585, "moonblast", 95, 100, 15, 30, "Lowers Sp. Atk.", "fairy", "special", 6),
        MoveRow(10001, "shadow-rush", 55, 100, None, None, "Inflicts regular damage.", "shadow", "physical", 3),
    ]


def _ability_rows() -> list[Row]:
    return [
        AbilityRow(9, "static", "Contact may paralyze the attacker.", 3),
        AbilityRow(5, "sturdy", "Prevents being KOed from full HP, and protects against one-hit KO moves.", 3),
        AbilityChangeRow("Protects against one-hit KO moves.", 4, 5),
        AbilityRow(69, "rock-head", "Protects against recoil damage.", 3),
        AbilityRow(22, "intimidate", "Lowers opponents' Attack on entry.", 3),
    ]


def _evolution_rows() -> list[Row]:
    pikachu_family = EvolutionStep(
        name="pichu",
        evolves_to=[
            EvolutionStep(
                name="pikachu",
                methods=[EvolutionMethod(trigger="level-up", min_happiness=220)],
                evolves_to=[
                    EvolutionStep(name="raichu", methods=[EvolutionMethod(trigger="use-item", item="thunder-stone")])
                ],
            )
        ],
    )
    return [EvolutionRow(10, pikachu_family.model_dump_json(exclude_defaults=True))]


def _pokemon(
    pokemon_id: int,
    name: str,
    types: tuple[str, str | None],
    species_id: int,
    moves: list[tuple[str, str, int, int]],
    abilities: list[tuple[str, bool]],
) -> list[Row]:
    rows: list[Row] = [PokemonRow(pokemon_id, name, types[0], types[1], 50, 60, 70, 80, 90, 100, species_id)]
    rows.extend(PokemonMoveRow(m, method, level, gen, pokemon_id) for m, method, level, gen in moves)
    rows.extend(PokemonAbilityRow(a, hidden, slot, pokemon_id) for slot, (a, hidden) in enumerate(abilities, start=1))
    return rows


def _pokemon_rows() -> list[Row]:
    rows: list[Row] = [
        SpeciesRow(74, "geodude", False, False, False, 1, None),
        SpeciesRow(25, "pikachu", False, False, False, 1, 10),
        SpeciesRow(172, "pichu", True, False, False, 2, 10),
        SpeciesRow(35, "clefairy", False, False, False, 1, None),
        SpeciesRow(130, "gyarados", False, False, False, 1, None),
        SpeciesRow(150, "mewtwo", False, True, False, 1, None),
        SpeciesRow(151, "mew", False, True, True, 1, None),
    ]
    rows += _pokemon(
        74,
        "geodude",
        ("rock", "ground"),
        74,
        [("tackle", "level-up", 1, 1), ("rock-slide", "machine", 0, 1), ("earthquake", "machine", 0, 1)],
        [("sturdy", False), ("rock-head", False)],
    )
    rows += _pokemon(
        10109,
        "geodude-alola",
        ("rock", "electric"),
        74,
        [("tackle", "level-up", 1, 7), ("thunderbolt", "machine", 0, 7)],
        [("static", False)],
    )
    rows += _pokemon(
        25,
        "pikachu",
        ("electric", None),
        25,
        [
            ("tackle", "level-up", 1, 1),
            ("thunderbolt", "machine", 0, 1),
            ("swords-dance", "machine", 0, 1),
            ("tackle", "level-up", 5, 8),
        ],
        [("static", False)],
    )
    rows += _pokemon(172, "pichu", ("electric", None), 172, [("thunderbolt", "machine", 0, 2)], [("static", False)])
    rows += _pokemon(
        35,
        "clefairy",
        ("fairy", None),
        35,
        [("tackle", "level-up", 1, 1), ("moonblast", "level-up", 45, 6)],
        [("static", True)],
    )
    rows.append(PokemonTypeChangeRow("normal", None, 5, 35))
    rows += _pokemon(
        130,
        "gyarados",
        ("water", "flying"),
        130,
        [("bite", "level-up", 1, 1), ("surf", "machine", 0, 1), ("earthquake", "machine", 0, 1)],
        [("intimidate", False)],
    )
    rows += _pokemon(150, "mewtwo", ("psychic", None), 150, [("swords-dance", "machine", 0, 1)], [])
    rows += _pokemon(151, "mew", ("psychic", None), 151, [("swords-dance", "machine", 0, 1)], [])
    return rows


def pokedex_rows() -> list[Row]:
    """A small but consistent database: every type, a few moves, abilities and Pokemon."""
    games: list[Row] = [GameRow(i, name, i, gen) for i, (name, gen) in enumerate(GAMES, start=1)]
    return games + _type_rows() + _move_rows() + _ability_rows() + _evolution_rows() + _pokemon_rows()


@pytest.fixture(scope="session")
def resources_folder() -> Path:
    """Returns the path to the test resources folder."""
    return Path(__file__).parents[1] / "resources"


@pytest.fixture
def store() -> Iterator[Store]:
    """An in-memory database loaded with the fixture Pokedex."""
    conn = sqlite3.connect(":memory:")
    ensure_schema(conn)
    write_version(conn)
    insert_rows(conn, pokedex_rows())
    with Store(conn) as s:
        yield s


@pytest.fixture
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the data and config directories at a temporary folder."""
    monkeypatch.setattr(settings, "DATA_DIR", tmp_path / "data")
    monkeypatch.setattr(settings, "CONFIG_DIR", tmp_path / "config")
    return tmp_path


@pytest.fixture
def built_database(isolated_settings: Path) -> Path:
    """A database file holding the fixture Pokedex at settings.db_path."""
    conn = create_database(settings.db_path)
    insert_rows(conn, pokedex_rows())
    conn.close()
    return settings.db_path


# Version groups served by the mock PokeAPI: (name, id, order, generation)
POKEAPI_GAMES = [
    ("red-blue", 1, 1, 1),
    ("yellow", 2, 2, 1),
    ("black-white", 11, 14, 5),
    ("sun-moon", 17, 21, 7),
    ("sword-shield", 20, 24, 8),
]

POKEAPI_INDEX = {
    "version-group": [name for name, *_ in POKEAPI_GAMES],
    "move": ["tackle"],
    "type": ["normal", "steel"],
    "ability": ["sturdy"],
    "pokemon-species": ["pikachu", "clefairy"],
    "pokemon": ["clefairy"],
}


def _version_group(name: str) -> dict:
    _, group_id, order, generation = next(g for g in POKEAPI_GAMES if g[0] == name)
    return {
        "id": group_id,
        "name": name,
        "order": order,
        "generation": {"name": "", "url": f"https://pokeapi.co/api/v2/generation/{generation}/"},
    }


@pytest.fixture
def pokeapi_transport(resources_folder: Path) -> httpx.MockTransport:
    """A mock PokeAPI serving the JSON samples in tests/resources/pokeapi."""
    folder = resources_folder / "pokeapi"

    def handler(request: httpx.Request) -> httpx.Response:
        parts = request.url.path.removeprefix("/api/v2/").strip("/").split("/")
        endpoint = parts[0]
        if len(parts) == 1:
            return httpx.Response(200, json={"results": [{"name": n} for n in POKEAPI_INDEX[endpoint]]})
        if endpoint == "version-group":
            return httpx.Response(200, json=_version_group(parts[1]))
        path = folder / endpoint / f"{parts[1]}.json"
        if not path.exists():
            return httpx.Response(404)
        return httpx.Response(200, json=json.loads(path.read_text(encoding="utf-8")))

    return httpx.MockTransport(handler)
