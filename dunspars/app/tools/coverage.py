# ABOUTME: Coverage aggregator for a roster of resolved Pokemon.
# ABOUTME: Reports which types the roster hits super-effectively and which it resists.

from dataclasses import dataclass, field

from dunspars.app.queries import Store
from dunspars.app.resolvers import resolve_type
from dunspars.models import Pokemon
from dunspars.utils.type_chart import NEUTRAL_VALUE, TYPES, TypeChart

MAX_ROSTER_SIZE = 6


@dataclass(frozen=True)
class OffenseEntry:
    """A roster member hitting a type super-effectively.

    Attributes:
        pokemon: Display name of the roster member.
        via_types: The member's own types that hit super-effectively.
    """

    pokemon: str
    via_types: tuple[str, ...]


@dataclass(frozen=True)
class DefenseEntry:
    """A roster member resisting a type, with its combined multiplier."""

    pokemon: str
    multiplier: float


@dataclass
class CoverageReport:
    """Coverage of every type by a roster.

    Attributes:
        offense: Type -> members hitting it for more than 1x.
        defense: Type -> members taking less than 1x from it.
    """

    offense: dict[str, list[OffenseEntry]] = field(default_factory=dict)
    defense: dict[str, list[DefenseEntry]] = field(default_factory=dict)


def _offense_charts(member: Pokemon, store: Store) -> dict[str, TypeChart]:
    return {t: resolve_type(t, member.generation, store).offense_chart for t in member.types}


def coverage_report(roster: list[Pokemon], store: Store) -> CoverageReport:
    """Compute the offensive and defensive type coverage of a roster.

    Every type gets a bucket, possibly empty. Types are in alphabetical order
    and members within a bucket are sorted by name. A member listed twice in
    the roster appears once per bucket.

    Args:
        roster: Resolved Pokemon, usually one to six.
        store: Database access, used to resolve each member's offense charts.

    Returns:
        The coverage report.

    Raises:
        ResolutionError: The first failure resolving any member's types.
    """
    offense: dict[str, dict[str, OffenseEntry]] = {t: {} for t in sorted(TYPES)}
    defense: dict[str, dict[str, DefenseEntry]] = {t: {} for t in sorted(TYPES)}

    for member in roster:
        name = member.display_name
        charts = _offense_charts(member, store)

        for target in offense:
            via = tuple(own for own, chart in charts.items() if chart.multiplier_of(target) > NEUTRAL_VALUE)
            if via:
                offense[target].setdefault(name, OffenseEntry(name, via))

            multiplier = member.defense_chart.multiplier_of(target)
            if multiplier < NEUTRAL_VALUE:
                defense[target].setdefault(name, DefenseEntry(name, multiplier))

    return CoverageReport(
        offense={t: sorted(entries.values(), key=lambda e: e.pokemon) for t, entries in offense.items()},
        defense={t: sorted(entries.values(), key=lambda e: e.pokemon) for t, entries in defense.items()},
    )
