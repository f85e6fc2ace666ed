"""ABOUTME: Data classes for entity snapshots resolved at a generation.
ABOUTME: Contains Move, Type, Ability, Pokemon, Stats and the evolution tree models."""

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, Field

from dunspars.utils.type_chart import TypeChart, TypeRelations

EFFECT_CHANCE_PLACEHOLDER = "$effect_chance"


@dataclass
class Move:
    """A move as it existed in a generation.

    Attributes:
        name: Move name (e.g. "thunderbolt").
        power: Base power, None for moves without fixed power.
        accuracy: Accuracy percentage, None for moves that never miss.
        pp: Power points.
        effect_chance: Percent chance of the secondary effect.
        damage_class: "physical", "special" or "status".
        type: Move type.
        effect: Effect text, possibly containing "$effect_chance".
        generation: Generation the snapshot was resolved at.
    """

    name: str
    power: int | None
    accuracy: int | None
    pp: int | None
    effect_chance: int | None
    damage_class: str
    type: str
    effect: str
    generation: int

    @property
    def effect_text(self) -> str:
        """Effect text with the effect chance filled in."""
        if self.effect_chance is None:
            return self.effect
        return self.effect.replace(EFFECT_CHANCE_PLACEHOLDER, str(self.effect_chance))

    @property
    def is_damaging(self) -> bool:
        """Whether the move deals damage (not a status move)."""
        return self.damage_class != "status"


@dataclass
class Type:
    """A type as it existed in a generation."""

    name: str
    generation: int
    relations: TypeRelations
    offense_chart: TypeChart
    defense_chart: TypeChart


@dataclass
class Ability:
    """An ability as it existed in a generation."""

    name: str
    effect: str
    generation: int


@dataclass
class Stats:
    """Base stats. Not generation dependent."""

    hp: int
    attack: int
    defense: int
    special_attack: int
    special_defense: int
    speed: int

    @property
    def total(self) -> int:
        """Base stat total."""
        return self.hp + self.attack + self.defense + self.special_attack + self.special_defense + self.speed


class PokemonGroup(Enum):
    """Species classification derived from species flags."""

    REGULAR = "regular"
    LEGENDARY = "legendary"
    MYTHICAL = "mythical"
    BABY = "baby"

    @classmethod
    def from_flags(cls, is_baby: bool, is_legendary: bool, is_mythical: bool) -> "PokemonGroup":
        """Mythical wins over legendary, legendary over baby."""
        if is_mythical:
            return cls.MYTHICAL
        if is_legendary:
            return cls.LEGENDARY
        if is_baby:
            return cls.BABY
        return cls.REGULAR


@dataclass(frozen=True)
class LearnMove:
    """A way a Pokemon learns a move.

    Attributes:
        name: Move name.
        method: Learn method (e.g. "level-up", "machine", "egg", "tutor").
        level: Level learned at, 0 when not learned by level.
        generation: Most recent generation at or before the query with this entry.
    """

    name: str
    method: str
    level: int
    generation: int


@dataclass(frozen=True)
class PokemonAbility:
    """An ability slot of a Pokemon."""

    name: str
    hidden: bool


@dataclass
class Pokemon:
    """A Pokemon as it existed in a generation.

    Attributes:
        name: Pokemon name (e.g. "dunsparce", "rotom-wash").
        species: Species name.
        generation: Generation the snapshot was resolved at.
        primary_type: Primary type at that generation.
        secondary_type: Secondary type at that generation, if any.
        stats: Base stats.
        group: Species classification.
        learn_moves: Moves learnable at or before the generation.
        abilities: Ability slots.
        defense_chart: Combined defense chart of its types.
        nickname: Nickname of a custom Pokemon.
        move_names: Chosen moves of a custom Pokemon.
    """

    name: str
    species: str
    generation: int
    primary_type: str
    secondary_type: str | None
    stats: Stats
    group: PokemonGroup
    learn_moves: list[LearnMove]
    abilities: list[PokemonAbility]
    defense_chart: TypeChart
    nickname: str | None = None
    move_names: list[str] = field(default_factory=list)

    @property
    def types(self) -> list[str]:
        """One or two types."""
        return [self.primary_type] if self.secondary_type is None else [self.primary_type, self.secondary_type]

    @property
    def display_name(self) -> str:
        """Nickname when set, otherwise the Pokemon name."""
        return self.nickname or self.name


class EvolutionMethod(BaseModel):
    """A trigger for evolving into a step, with its optional conditions."""

    trigger: str
    item: str | None = None
    gender: int | None = None
    held_item: str | None = None
    known_move: str | None = None
    known_move_type: str | None = None
    location: str | None = None
    min_level: int | None = None
    min_happiness: int | None = None
    min_beauty: int | None = None
    min_affection: int | None = None
    needs_overworld_rain: bool = False
    party_species: str | None = None
    party_type: str | None = None
    relative_physical_stats: int | None = None
    time_of_day: str | None = None
    trade_species: str | None = None
    turn_upside_down: bool = False


class EvolutionStep(BaseModel):
    """A species in an evolution family and the species it evolves into."""

    name: str
    methods: list[EvolutionMethod] = Field(default_factory=list)
    evolves_to: list["EvolutionStep"] = Field(default_factory=list)

    def species(self) -> list[str]:
        """All species names in this subtree, depth first."""
        names = [self.name]
        for child in self.evolves_to:
            names.extend(child.species())
        return names
