# ABOUTME: Resolves which historical change record applies to an as-of-generation query.
# ABOUTME: One generic matcher plus an adapter per stored change-record kind.

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, TypeVar

from dunspars.utils.type_chart import TypeRelations

V_co = TypeVar("V_co", covariant=True)
V = TypeVar("V")


class ChangeRecord(Protocol[V_co]):
    """A change record: values that apply to queries at or before its generation."""

    def generation(self) -> int: ...

    def value(self) -> V_co: ...


def resolve_override(target_generation: int, records: Iterable[ChangeRecord[V]]) -> V | None:
    """Select the value of the oldest applicable change record.

    A record applies when its generation is >= the target generation. Of the
    applicable records, the one with the smallest generation wins. Records may
    come in any order.

    Args:
        target_generation: Generation being queried.
        records: Change records of a single entity.

    Returns:
        The winning record's value, or None when the base value applies.
    """
    best: ChangeRecord[V] | None = None
    for record in records:
        gen = record.generation()
        if gen >= target_generation and (best is None or gen < best.generation()):
            best = record
    return best.value() if best is not None else None


@dataclass(frozen=True)
class MoveValues:
    """Past move values; None fields fall back to the current move."""

    power: int | None = None
    accuracy: int | None = None
    pp: int | None = None
    effect_chance: int | None = None
    effect: str | None = None
    type: str | None = None


@dataclass(frozen=True)
class MoveChange:
    """Adapter for a move_changes row."""

    generation_: int
    values: MoveValues

    def generation(self) -> int:
        return self.generation_

    def value(self) -> MoveValues:
        return self.values


@dataclass(frozen=True)
class TypeChange:
    """Adapter for a type_changes row. Replaces all six relation sets."""

    generation_: int
    relations: TypeRelations

    def generation(self) -> int:
        return self.generation_

    def value(self) -> TypeRelations:
        return self.relations


@dataclass(frozen=True)
class AbilityChange:
    """Adapter for an ability_changes row."""

    generation_: int
    effect: str

    def generation(self) -> int:
        return self.generation_

    def value(self) -> str:
        return self.effect


@dataclass(frozen=True)
class PokemonTypeChange:
    """Adapter for a pokemon_type_changes row. Replaces the type pair."""

    generation_: int
    types: tuple[str, str | None]

    def generation(self) -> int:
        return self.generation_

    def value(self) -> tuple[str, str | None]:
        return self.types
