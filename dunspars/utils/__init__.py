# ABOUTME: Utils package for generation lookup, override matching and type charts.
# ABOUTME: Contains the pure computation used by the entity resolvers.

from dunspars.utils.generation import GenerationResolver, generation_of_reference, id_of_reference
from dunspars.utils.overrides import resolve_override
from dunspars.utils.type_chart import (
    TYPES,
    Tier,
    TypeChart,
    TypeRelations,
    WeaknessGroups,
    build_charts,
    classify,
    combine,
    group_by_tier,
)

__all__ = [
    "TYPES",
    "GenerationResolver",
    "Tier",
    "TypeChart",
    "TypeRelations",
    "WeaknessGroups",
    "build_charts",
    "classify",
    "combine",
    "generation_of_reference",
    "group_by_tier",
    "id_of_reference",
    "resolve_override",
]
