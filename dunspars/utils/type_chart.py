# ABOUTME: Pokemon type effectiveness charts built from a type's damage relations.
# ABOUTME: Provides chart building, dual-type combination and weakness tier grouping.

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

# Effectiveness values
SUPER_EFFECTIVE_THRESHOLD = 2.0
NEUTRAL_VALUE = 1.0
RESISTANCE_VALUE = 0.5
IMMUNITY_VALUE = 0.0

TYPES: list[str] = [
    "normal",
    "fighting",
    "flying",
    "poison",
    "ground",
    "rock",
    "bug",
    "ghost",
    "steel",
    "fire",
    "water",
    "grass",
    "electric",
    "psychic",
    "ice",
    "dragon",
    "dark",
    "fairy",
]

T = TypeVar("T")


@dataclass(frozen=True)
class TypeRelations:
    """The six damage-relation sets of a type.

    Attributes:
        no_damage_to: Types this type deals no damage to.
        half_damage_to: Types this type deals half damage to.
        double_damage_to: Types this type deals double damage to.
        no_damage_from: Types dealing no damage to this type.
        half_damage_from: Types dealing half damage to this type.
        double_damage_from: Types dealing double damage to this type.
    """

    no_damage_to: tuple[str, ...] = ()
    half_damage_to: tuple[str, ...] = ()
    double_damage_to: tuple[str, ...] = ()
    no_damage_from: tuple[str, ...] = ()
    half_damage_from: tuple[str, ...] = ()
    double_damage_from: tuple[str, ...] = ()

    @classmethod
    def from_row(cls, row: dict[str, str | None]) -> "TypeRelations":
        """Build relations from a types/type_changes row with comma-joined columns."""

        def split(column: str) -> tuple[str, ...]:
            value = row.get(column)
            return tuple(t for t in value.split(",") if t) if value else ()

        return cls(
            no_damage_to=split("no_damage_to"),
            half_damage_to=split("half_damage_to"),
            double_damage_to=split("double_damage_to"),
            no_damage_from=split("no_damage_from"),
            half_damage_from=split("half_damage_from"),
            double_damage_from=split("double_damage_from"),
        )


@dataclass(frozen=True)
class TypeChart:
    """Dense mapping from every known type to a damage multiplier.

    An offense chart holds the damage a type deals to each type; a defense chart
    holds the damage taken from each type.
    """

    multipliers: dict[str, float]

    def multiplier_of(self, type_name: str) -> float:
        """Return the multiplier for a type.

        Raises:
            KeyError: If type_name is not a known type.
        """
        try:
            return self.multipliers[type_name]
        except KeyError:
            raise KeyError(f"Type '{type_name}' not in chart") from None

    def items(self) -> Iterator[tuple[str, float]]:
        """Iterate over (type, multiplier) pairs in TYPES order."""
        return iter(self.multipliers.items())


def _build_chart(none: Iterable[str], half: Iterable[str], double: Iterable[str]) -> TypeChart:
    multipliers = dict.fromkeys(TYPES, NEUTRAL_VALUE)
    for names, value in ((none, IMMUNITY_VALUE), (half, RESISTANCE_VALUE), (double, SUPER_EFFECTIVE_THRESHOLD)):
        for name in names:
            # Skips non-battle types such as "stellar" or "unknown"
            if name in multipliers:
                multipliers[name] = value
    return TypeChart(multipliers)


def build_offense_chart(relations: TypeRelations) -> TypeChart:
    """Build the chart of damage dealt by a type."""
    return _build_chart(relations.no_damage_to, relations.half_damage_to, relations.double_damage_to)


def build_defense_chart(relations: TypeRelations) -> TypeChart:
    """Build the chart of damage taken by a type."""
    return _build_chart(relations.no_damage_from, relations.half_damage_from, relations.double_damage_from)


def build_charts(relations: TypeRelations) -> tuple[TypeChart, TypeChart]:
    """Build the offense and defense charts of a type.

    Args:
        relations: The type's six damage-relation sets.

    Returns:
        Tuple of (offense chart, defense chart).
    """
    return build_offense_chart(relations), build_defense_chart(relations)


def combine(chart: TypeChart, other: TypeChart, *more: TypeChart) -> TypeChart:
    """Multiply charts type by type, as for a dual-typed Pokemon.

    Args:
        chart: First chart.
        other: Second chart.
        *more: Further charts, combined pairwise.

    Returns:
        The combined chart. Values such as 4.0 or 0.25 can appear.
    """
    multipliers = {t: chart.multiplier_of(t) * other.multiplier_of(t) for t in chart.multipliers}
    combined = TypeChart(multipliers)
    for extra in more:
        combined = combine(combined, extra)
    return combined


class Tier(Enum):
    """Discrete effectiveness tiers, in display order."""

    QUAD = 4.0
    DOUBLE = 2.0
    NEUTRAL = 1.0
    HALF = 0.5
    QUARTER = 0.25
    ZERO = 0.0
    OTHER = None


def classify(multiplier: float) -> Tier:
    """Classify a multiplier by exact equality; anything unexpected is OTHER.

    >>> classify(0.25)
    <Tier.QUARTER: 0.25>
    >>> classify(8.0)
    <Tier.OTHER: None>
    """
    for tier in Tier:
        if tier.value is not None and multiplier == tier.value:
            return tier
    return Tier.OTHER


@dataclass
class WeaknessGroups(Generic[T]):
    """Items partitioned into effectiveness tiers.

    Attributes:
        quad: Items at 4x.
        double: Items at 2x.
        neutral: Items at 1x.
        half: Items at 0.5x.
        quarter: Items at 0.25x.
        zero: Items at 0x.
        other: Items at any other multiplier, kept with the multiplier.
    """

    quad: list[T] = field(default_factory=list)
    double: list[T] = field(default_factory=list)
    neutral: list[T] = field(default_factory=list)
    half: list[T] = field(default_factory=list)
    quarter: list[T] = field(default_factory=list)
    zero: list[T] = field(default_factory=list)
    other: list[tuple[T, float]] = field(default_factory=list)

    def bucket(self, tier: Tier) -> list[T]:
        """Return the list holding a tier's items. OTHER is not a plain bucket."""
        if tier is Tier.OTHER:
            raise ValueError("Tier.OTHER items carry their multiplier; use .other")
        return getattr(self, tier.name.lower())

    def items(self) -> Iterator[tuple[Tier, list[T]]]:
        """Iterate over the non-OTHER tiers in display order."""
        for tier in Tier:
            if tier is not Tier.OTHER:
                yield tier, self.bucket(tier)

    def is_empty(self) -> bool:
        """Whether no tier holds any item."""
        return not self.other and all(not bucket for _, bucket in self.items())


def group_by_tier(
    items: Iterable[T],
    extractor: Callable[[T], tuple[T, float] | None],
) -> WeaknessGroups[T]:
    """Partition items into effectiveness tiers.

    Args:
        items: Anything to group: types, moves, Pokemon.
        extractor: Returns the item to store and its multiplier, or None to drop it.

    Returns:
        The grouped items, input order kept within each tier.
    """
    groups: WeaknessGroups[T] = WeaknessGroups()
    for entry in items:
        extracted = extractor(entry)
        if extracted is None:
            continue
        item, multiplier = extracted
        tier = classify(multiplier)
        if tier is Tier.OTHER:
            groups.other.append((item, multiplier))
        else:
            groups.bucket(tier).append(item)
    return groups


def group_chart(chart: TypeChart) -> WeaknessGroups[str]:
    """Group a chart's types by tier."""
    return group_by_tier(chart.multipliers, lambda t: (t, chart.multiplier_of(t)))
