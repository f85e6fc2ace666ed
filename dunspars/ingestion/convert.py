# ABOUTME: Converts raw PokeAPI JSON resources into database row dataclasses.
# ABOUTME: Resolves version groups and generation references to generation numbers.

from typing import Any

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
from dunspars.utils.generation import GenerationResolver, generation_of_reference, id_of_reference

LANGUAGE = "en"

_RELATIONS = (
    "no_damage_to",
    "half_damage_to",
    "double_damage_to",
    "no_damage_from",
    "half_damage_from",
    "double_damage_from",
)


def _english_effect(entries: list[dict[str, Any]]) -> str | None:
    return next((e["effect"] for e in entries if e["language"]["name"] == LANGUAGE), None)


def _name_of(resource: dict[str, Any] | None) -> str | None:
    return resource["name"] if resource else None


def _relation_columns(damage_relations: dict[str, list[dict[str, Any]]]) -> dict[str, str]:
    return {key: join_types([t["name"] for t in damage_relations.get(key, [])]) for key in _RELATIONS}


def _stopped_applying(version_group: str, resolver: GenerationResolver) -> int:
    # PokeAPI labels past move values and ability effects with the first
    # generation they no longer apply to, e.g. Tackle's 35 power is labelled
    # generation 5 although it was last used in generation 4.
    return resolver.generation_of_game(version_group) - 1


def convert_game(data: dict[str, Any]) -> GameRow:
    """Convert a version-group resource."""
    return GameRow(
        id=data["id"],
        name=data["name"],
        sort_order=data["order"],
        generation=generation_of_reference(data["generation"]["url"]),
    )


def convert_move(data: dict[str, Any], resolver: GenerationResolver) -> list[Row]:
    """Convert a move resource into its move row and past-value change rows."""
    rows: list[Row] = [
        MoveRow(
            id=data["id"],
            name=data["name"],
            power=data["power"],
            accuracy=data["accuracy"],
            pp=data["pp"],
            effect_chance=data["effect_chance"],
            effect=_english_effect(data["effect_entries"]) or "",
            type=data["type"]["name"],
            damage_class=data["damage_class"]["name"],
            generation=generation_of_reference(data["generation"]["url"]),
        )
    ]
    for past in data.get("past_values", []):
        rows.append(
            MoveChangeRow(
                power=past["power"],
                accuracy=past["accuracy"],
                pp=past["pp"],
                effect_chance=past["effect_chance"],
                effect=_english_effect(past.get("effect_entries", [])),
                type=_name_of(past.get("type")),
                generation=_stopped_applying(past["version_group"]["name"], resolver),
                move_id=data["id"],
            )
        )
    return rows


def convert_type(data: dict[str, Any]) -> list[Row]:
    """Convert a type resource into its type row and past damage-relation rows."""
    rows: list[Row] = [
        TypeRow(
            id=data["id"],
            name=data["name"],
            generation=generation_of_reference(data["generation"]["url"]),
            **_relation_columns(data["damage_relations"]),
        )
    ]
    for past in data.get("past_damage_relations", []):
        rows.append(
            TypeChangeRow(
                generation=generation_of_reference(past["generation"]["url"]),
                type_id=data["id"],
                **_relation_columns(past["damage_relations"]),
            )
        )
    return rows


def convert_ability(data: dict[str, Any], resolver: GenerationResolver) -> list[Row]:
    """Convert an ability resource into its ability row and past effect rows."""
    rows: list[Row] = [
        AbilityRow(
            id=data["id"],
            name=data["name"],
            effect=_english_effect(data["effect_entries"]) or "",
            generation=generation_of_reference(data["generation"]["url"]),
        )
    ]
    for change in data.get("effect_changes", []):
        effect = _english_effect(change["effect_entries"])
        if effect is None:
            continue
        rows.append(
            AbilityChangeRow(
                effect=effect,
                generation=_stopped_applying(change["version_group"]["name"], resolver),
                ability_id=data["id"],
            )
        )
    return rows


def convert_species(data: dict[str, Any]) -> SpeciesRow:
    """Convert a pokemon-species resource."""
    chain = data.get("evolution_chain")
    return SpeciesRow(
        id=data["id"],
        name=data["name"],
        is_baby=data["is_baby"],
        is_legendary=data["is_legendary"],
        is_mythical=data["is_mythical"],
        generation=generation_of_reference(data["generation"]["url"]),
        evolution_id=id_of_reference(chain["url"]) if chain else None,
    )


def convert_evolution_method(detail: dict[str, Any]) -> EvolutionMethod:
    """Convert a single evolution detail, keeping only populated conditions."""
    return EvolutionMethod(
        trigger=detail["trigger"]["name"],
        item=_name_of(detail.get("item")),
        gender=detail.get("gender"),
        held_item=_name_of(detail.get("held_item")),
        known_move=_name_of(detail.get("known_move")),
        known_move_type=_name_of(detail.get("known_move_type")),
        location=_name_of(detail.get("location")),
        min_level=detail.get("min_level"),
        min_happiness=detail.get("min_happiness"),
        min_beauty=detail.get("min_beauty"),
        min_affection=detail.get("min_affection"),
        needs_overworld_rain=bool(detail.get("needs_overworld_rain")),
        party_species=_name_of(detail.get("party_species")),
        party_type=_name_of(detail.get("party_type")),
        relative_physical_stats=detail.get("relative_physical_stats"),
        time_of_day=detail.get("time_of_day") or None,
        trade_species=_name_of(detail.get("trade_species")),
        turn_upside_down=bool(detail.get("turn_upside_down")),
    )


def convert_chain_link(link: dict[str, Any]) -> EvolutionStep:
    """Convert a chain link and its descendants into an EvolutionStep tree."""
    return EvolutionStep(
        name=link["species"]["name"],
        methods=[convert_evolution_method(d) for d in link.get("evolution_details", [])],
        evolves_to=[convert_chain_link(child) for child in link.get("evolves_to", [])],
    )


def convert_evolution(data: dict[str, Any]) -> EvolutionRow:
    """Convert an evolution-chain resource into a row holding the tree as JSON."""
    tree = convert_chain_link(data["chain"])
    return EvolutionRow(id=data["id"], evolution=tree.model_dump_json(exclude_defaults=True))


def _types_by_slot(types: list[dict[str, Any]]) -> tuple[str, str | None]:
    ordered = [t["type"]["name"] for t in sorted(types, key=lambda t: t["slot"])]
    return ordered[0], ordered[1] if len(ordered) > 1 else None


def _base_stat(stats: list[dict[str, Any]], name: str) -> int:
    return next(s["base_stat"] for s in stats if s["stat"]["name"] == name)


def convert_pokemon(data: dict[str, Any], resolver: GenerationResolver) -> list[Row]:
    """Convert a pokemon resource into its pokemon, learn-move, ability and past-type rows.

    Learn moves are recorded once per move, method, level and generation,
    collapsing the version groups of a generation.
    """
    pokemon_id = data["id"]
    primary_type, secondary_type = _types_by_slot(data["types"])
    stats = data["stats"]
    rows: list[Row] = [
        PokemonRow(
            id=pokemon_id,
            name=data["name"],
            primary_type=primary_type,
            secondary_type=secondary_type,
            hp=_base_stat(stats, "hp"),
            attack=_base_stat(stats, "attack"),
            defense=_base_stat(stats, "defense"),
            special_attack=_base_stat(stats, "special-attack"),
            special_defense=_base_stat(stats, "special-defense"),
            speed=_base_stat(stats, "speed"),
            species_id=id_of_reference(data["species"]["url"]),
        )
    ]

    learn_moves: dict[tuple[str, str, int, int], PokemonMoveRow] = {}
    for entry in data["moves"]:
        for detail in entry["version_group_details"]:
            row = PokemonMoveRow(
                name=entry["move"]["name"],
                learn_method=detail["move_learn_method"]["name"],
                learn_level=detail["level_learned_at"],
                generation=resolver.generation_of_game(detail["version_group"]["name"]),
                pokemon_id=pokemon_id,
            )
            learn_moves.setdefault((row.name, row.learn_method, row.learn_level, row.generation), row)
    rows.extend(learn_moves.values())

    rows.extend(
        PokemonAbilityRow(
            name=a["ability"]["name"],
            hidden=a["is_hidden"],
            slot=a["slot"],
            pokemon_id=pokemon_id,
        )
        for a in data["abilities"]
    )

    for past in data.get("past_types", []):
        past_primary, past_secondary = _types_by_slot(past["types"])
        rows.append(
            PokemonTypeChangeRow(
                primary_type=past_primary,
                secondary_type=past_secondary,
                generation=generation_of_reference(past["generation"]["url"]),
                pokemon_id=pokemon_id,
            )
        )
    return rows
