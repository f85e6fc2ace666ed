"""ABOUTME: Resolves Pokemon, moves, types and abilities as they existed in a generation.
ABOUTME: Applies stored change records on top of base records via the override matcher."""

import dataclasses
import logging
from typing import Any

from dunspars.app.queries import CHANGE_TABLES, Store
from dunspars.config import CustomPokemon
from dunspars.errors import MalformedOverrideError, NotFoundError, NotPresentInGenerationError
from dunspars.models import Ability, EvolutionStep, Move, Pokemon, PokemonGroup, Stats, Type
from dunspars.utils.overrides import (
    AbilityChange,
    MoveChange,
    MoveValues,
    PokemonTypeChange,
    TypeChange,
    resolve_override,
)
from dunspars.utils.type_chart import TypeChart, TypeRelations, build_charts, combine

logger = logging.getLogger(__name__)


def _fetch_base(store: Store, table: str, resource: str, name: str, generation: int) -> dict[str, Any]:
    """Fetch a base record and check it exists at the generation."""
    base = store.select_base_by_name(table, name)
    if base is None:
        raise NotFoundError(resource, name)
    if generation < base["generation"]:
        raise NotPresentInGenerationError(name, generation)
    return base


def _fetch_changes(store: Store, table: str, base_id: int, generation: int) -> list[dict[str, Any]]:
    """Fetch change rows of a record, rejecting rows that don't belong to it."""
    fk_column = CHANGE_TABLES[table]
    rows = store.select_changes_by_foreign_key(table, base_id, generation)
    for row in rows:
        if row[fk_column] != base_id:
            raise MalformedOverrideError(f"{table} row {row.get('id')} references {row[fk_column]}, expected {base_id}")
        change_gen = row["generation"]
        if not isinstance(change_gen, int) or change_gen < 1:
            raise MalformedOverrideError(f"{table} row {row.get('id')} has invalid generation {change_gen!r}")
    logger.debug("Found %d %s rows for id %d at generation %d", len(rows), table, base_id, generation)
    return rows


def _pick(override: Any, base: Any) -> Any:
    return base if override is None else override


def resolve_move(name: str, generation: int, store: Store) -> Move:
    """Resolve a move as it existed in a generation.

    Each field of an applicable move change replaces the current value; unset
    fields keep the current value.

    Args:
        name: Move name as stored.
        generation: Generation to resolve at.
        store: Database access.

    Returns:
        The move snapshot.

    Raises:
        NotFoundError: If no move has that name.
        NotPresentInGenerationError: If the move was introduced after the generation.
    """
    base = _fetch_base(store, "moves", "move", name, generation)
    rows = _fetch_changes(store, "move_changes", base["id"], generation)
    records = [
        MoveChange(
            row["generation"],
            MoveValues(
                power=row["power"],
                accuracy=row["accuracy"],
                pp=row["pp"],
                effect_chance=row["effect_chance"],
                effect=row["effect"],
                type=row["type"],
            ),
        )
        for row in rows
    ]
    change = resolve_override(generation, records) or MoveValues()

    return Move(
        name=base["name"],
        power=_pick(change.power, base["power"]),
        accuracy=_pick(change.accuracy, base["accuracy"]),
        pp=_pick(change.pp, base["pp"]),
        effect_chance=_pick(change.effect_chance, base["effect_chance"]),
        damage_class=base["damage_class"],
        type=_pick(change.type, base["type"]),
        effect=_pick(change.effect, base["effect"]),
        generation=generation,
    )


def resolve_type(name: str, generation: int, store: Store) -> Type:
    """Resolve a type and its charts as they existed in a generation.

    An applicable type change replaces all six damage relations at once.

    Raises:
        NotFoundError: If no type has that name.
        NotPresentInGenerationError: If the type was introduced after the generation.
    """
    base = _fetch_base(store, "types", "type", name, generation)
    rows = _fetch_changes(store, "type_changes", base["id"], generation)
    records = [TypeChange(row["generation"], TypeRelations.from_row(row)) for row in rows]
    relations = resolve_override(generation, records) or TypeRelations.from_row(base)
    offense_chart, defense_chart = build_charts(relations)

    return Type(
        name=base["name"],
        generation=generation,
        relations=relations,
        offense_chart=offense_chart,
        defense_chart=defense_chart,
    )


def resolve_ability(name: str, generation: int, store: Store) -> Ability:
    """Resolve an ability's effect as it existed in a generation.

    Raises:
        NotFoundError: If no ability has that name.
        NotPresentInGenerationError: If the ability was introduced after the generation.
    """
    base = _fetch_base(store, "abilities", "ability", name, generation)
    rows = _fetch_changes(store, "ability_changes", base["id"], generation)
    records = [AbilityChange(row["generation"], row["effect"]) for row in rows]
    effect = resolve_override(generation, records) or base["effect"]
    return Ability(name=base["name"], effect=effect, generation=generation)


def defense_chart_for_types(types: list[str], generation: int, store: Store) -> TypeChart:
    """Combine the defense charts of one or two types resolved at a generation."""
    charts = [resolve_type(t, generation, store).defense_chart for t in types]
    return charts[0] if len(charts) == 1 else combine(*charts)


def defense_chart_of(pokemon: Pokemon, store: Store) -> TypeChart:
    """Compute the combined defense chart of a Pokemon's types at its generation."""
    return defense_chart_for_types(pokemon.types, pokemon.generation, store)


def resolve_pokemon(name: str, generation: int, store: Store) -> Pokemon:
    """Resolve a Pokemon as it existed in a generation.

    A Pokemon that can learn no moves at a generation is treated as absent from
    it, since species generations don't cover later forms.

    Args:
        name: Pokemon name as stored.
        generation: Generation to resolve at.
        store: Database access.

    Returns:
        The Pokemon snapshot, including its defense chart.

    Raises:
        NotFoundError: If no Pokemon has that name.
        NotPresentInGenerationError: If the Pokemon isn't available in the generation.
        MalformedOverrideError: If the Pokemon's stored records are inconsistent.
    """
    base = store.select_base_by_name("pokemon", name)
    if base is None:
        raise NotFoundError("pokemon", name)

    species = store.select_base_by_id("species", base["species_id"])
    if species is None:
        raise MalformedOverrideError(f"Pokemon '{name}' references missing species {base['species_id']}")
    if generation < species["generation"]:
        raise NotPresentInGenerationError(name, generation)

    learn_moves = store.select_learn_moves(base["id"], generation)
    if not learn_moves:
        raise NotPresentInGenerationError(name, generation)

    rows = _fetch_changes(store, "pokemon_type_changes", base["id"], generation)
    records = [PokemonTypeChange(row["generation"], (row["primary_type"], row["secondary_type"])) for row in rows]
    primary_type, secondary_type = resolve_override(generation, records) or (
        base["primary_type"],
        base["secondary_type"],
    )
    types = [primary_type] if secondary_type is None else [primary_type, secondary_type]

    return Pokemon(
        name=base["name"],
        species=species["name"],
        generation=generation,
        primary_type=primary_type,
        secondary_type=secondary_type,
        stats=Stats(
            hp=base["hp"],
            attack=base["attack"],
            defense=base["defense"],
            special_attack=base["special_attack"],
            special_defense=base["special_defense"],
            speed=base["speed"],
        ),
        group=PokemonGroup.from_flags(
            bool(species["is_baby"]), bool(species["is_legendary"]), bool(species["is_mythical"])
        ),
        learn_moves=learn_moves,
        abilities=store.select_pokemon_abilities(base["id"]),
        defense_chart=defense_chart_for_types(types, generation, store),
    )


def resolve_custom_pokemon(custom: CustomPokemon, store: Store) -> Pokemon:
    """Resolve a custom Pokemon: its base Pokemon with nickname, chosen moves and type override."""
    pokemon = resolve_pokemon(custom.base, custom.generation, store)
    pokemon = dataclasses.replace(pokemon, nickname=custom.nickname, move_names=list(custom.moves))
    if custom.types:
        secondary = custom.types[1] if len(custom.types) > 1 else None
        pokemon = dataclasses.replace(pokemon, primary_type=custom.types[0], secondary_type=secondary)
        pokemon.defense_chart = defense_chart_of(pokemon, store)
    return pokemon


def resolve_move_list(pokemon: Pokemon, store: Store) -> list[Move]:
    """Resolve the moves a Pokemon brings to a matchup.

    Uses the chosen moves of a custom Pokemon when it has any, otherwise every
    distinct learnable move.
    """
    names = pokemon.move_names or list(dict.fromkeys(m.name for m in pokemon.learn_moves))
    return [resolve_move(name, pokemon.generation, store) for name in names]


def evolution_tree_of(species_name: str, store: Store) -> EvolutionStep:
    """Load the full evolution family of a species.

    Raises:
        NotFoundError: If no species has that name.
        MalformedOverrideError: If the species references a missing evolution chain.
    """
    species = store.select_base_by_name("species", species_name)
    if species is None:
        raise NotFoundError("species", species_name)

    if species["evolution_id"] is None:
        return EvolutionStep(name=species["name"])

    evolution = store.select_base_by_id("evolutions", species["evolution_id"])
    if evolution is None:
        raise MalformedOverrideError(f"Species '{species_name}' references missing evolution {species['evolution_id']}")
    return EvolutionStep.model_validate_json(evolution["evolution"])
