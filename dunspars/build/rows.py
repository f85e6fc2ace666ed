# ABOUTME: Row kinds written to the SQLite database, one dataclass per table.
# ABOUTME: The Row union lets the build pipeline insert any mix of them in one call.

from dataclasses import dataclass
from typing import ClassVar


def join_types(names: list[str] | tuple[str, ...]) -> str:
    """Join type names into the comma-separated form stored in relation columns."""
    return ",".join(names)


@dataclass(frozen=True)
class GameRow:
    TABLE: ClassVar[str] = "games"

    id: int
    name: str
    sort_order: int
    generation: int


@dataclass(frozen=True)
class EvolutionRow:
    TABLE: ClassVar[str] = "evolutions"

    id: int
    evolution: str
    """EvolutionStep tree serialized as JSON."""


@dataclass(frozen=True)
class SpeciesRow:
    TABLE: ClassVar[str] = "species"

    id: int
    name: str
    is_baby: bool
    is_legendary: bool
    is_mythical: bool
    generation: int
    evolution_id: int | None


@dataclass(frozen=True)
class PokemonRow:
    TABLE: ClassVar[str] = "pokemon"

    id: int
    name: str
    primary_type: str
    secondary_type: str | None
    hp: int
    attack: int
    defense: int
    special_attack: int
    special_defense: int
    speed: int
    species_id: int


@dataclass(frozen=True)
class PokemonMoveRow:
    TABLE: ClassVar[str] = "pokemon_moves"

    name: str
    learn_method: str
    learn_level: int
    generation: int
    pokemon_id: int


@dataclass(frozen=True)
class PokemonAbilityRow:
    TABLE: ClassVar[str] = "pokemon_abilities"

    name: str
    hidden: bool
    slot: int
    pokemon_id: int


@dataclass(frozen=True)
class PokemonTypeChangeRow:
    TABLE: ClassVar[str] = "pokemon_type_changes"

    primary_type: str
    secondary_type: str | None
    generation: int
    pokemon_id: int


@dataclass(frozen=True)
class MoveRow:
    TABLE: ClassVar[str] = "moves"

    id: int
    name: str
    power: int | None
    accuracy: int | None
    pp: int | None
    effect_chance: int | None
    effect: str
    type: str
    damage_class: str
    generation: int


@dataclass(frozen=True)
class MoveChangeRow:
    TABLE: ClassVar[str] = "move_changes"

    power: int | None
    accuracy: int | None
    pp: int | None
    effect_chance: int | None
    effect: str | None
    type: str | None
    generation: int
    move_id: int


@dataclass(frozen=True)
class TypeRow:
    TABLE: ClassVar[str] = "types"

    id: int
    name: str
    no_damage_to: str
    half_damage_to: str
    double_damage_to: str
    no_damage_from: str
    half_damage_from: str
    double_damage_from: str
    generation: int


@dataclass(frozen=True)
class TypeChangeRow:
    TABLE: ClassVar[str] = "type_changes"

    no_damage_to: str
    half_damage_to: str
    double_damage_to: str
    no_damage_from: str
    half_damage_from: str
    double_damage_from: str
    generation: int
    type_id: int


@dataclass(frozen=True)
class AbilityRow:
    TABLE: ClassVar[str] = "abilities"

    id: int
    name: str
    effect: str
    generation: int


@dataclass(frozen=True)
class AbilityChangeRow:
    TABLE: ClassVar[str] = "ability_changes"

    effect: str
    generation: int
    ability_id: int


Row = (
    GameRow
    | EvolutionRow
    | SpeciesRow
    | PokemonRow
    | PokemonMoveRow
    | PokemonAbilityRow
    | PokemonTypeChangeRow
    | MoveRow
    | MoveChangeRow
    | TypeRow
    | TypeChangeRow
    | AbilityRow
    | AbilityChangeRow
)
