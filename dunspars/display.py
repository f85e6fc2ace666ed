"""ABOUTME: Rich renderables for resolved entities and analysis reports.
ABOUTME: Formats Pokemon, moves, types, evolutions, coverage and matchups for the terminal."""

from collections.abc import Callable
from typing import TypeVar

from rich.console import Group, RenderableType
from rich.markup import escape
from rich.table import Table

from dunspars.app.tools.coverage import CoverageReport
from dunspars.app.tools.matchup import MatchupReport
from dunspars.models import Ability, EvolutionMethod, EvolutionStep, LearnMove, Move, Pokemon, Stats, Type
from dunspars.utils.type_chart import Tier, TypeChart, WeaknessGroups, combine, group_chart

T = TypeVar("T")

TYPE_COLORS: dict[str, str] = {
    "normal": "#a8a878",
    "fighting": "#c03028",
    "flying": "#a890f0",
    "poison": "#a040a0",
    "ground": "#e0c068",
    "rock": "#b8a038",
    "bug": "#a8b820",
    "ghost": "#705898",
    "steel": "#b8b8d0",
    "fire": "#f08030",
    "water": "#6890f0",
    "grass": "#78c850",
    "electric": "#f8d030",
    "psychic": "#f85888",
    "ice": "#98d8d8",
    "dragon": "#7038f8",
    "dark": "#705848",
    "fairy": "#ee99ac",
}

TIER_STYLES: dict[Tier, tuple[str, str]] = {
    Tier.QUAD: ("quad", "red"),
    Tier.DOUBLE: ("double", "dark_orange"),
    Tier.NEUTRAL: ("neutral", "green"),
    Tier.HALF: ("half", "cyan"),
    Tier.QUARTER: ("quarter", "blue"),
    Tier.ZERO: ("zero", "violet"),
    Tier.OTHER: ("other", "yellow"),
}

GENDERS = {1: "female", 2: "male"}

LEVEL_UP = "level-up"


def format_type(type_name: str) -> str:
    """Color a type name with its type color."""
    color = TYPE_COLORS.get(type_name)
    return f"[bold {color}]{type_name}[/]" if color else type_name


def format_groups(
    groups: WeaknessGroups[T],
    formatter: Callable[[T], str],
    skip: frozenset[Tier] = frozenset(),
) -> str:
    """Render tier groups as one labelled line per non-empty tier."""
    lines: list[str] = []
    for tier, items in groups.items():
        if items and tier not in skip:
            label, color = TIER_STYLES[tier]
            lines.append(f"[{color}]{label}[/]: {' '.join(formatter(i) for i in items)}")
    if groups.other and Tier.OTHER not in skip:
        label, color = TIER_STYLES[Tier.OTHER]
        lines.append(f"[{color}]{label}[/]: {' '.join(f'{formatter(i)} ({m:g}x)' for i, m in groups.other)}")
    return "\n".join(lines) if lines else "None"


def format_chart(chart: TypeChart, skip: frozenset[Tier] = frozenset()) -> str:
    """Render a type chart grouped by tier."""
    return format_groups(group_chart(chart), format_type, skip)


def render_stats(stats: Stats) -> str:
    """Render base stats on two aligned lines."""
    labels = ("hp", "atk", "def", "satk", "sdef", "spd", "total")
    values = (
        stats.hp,
        stats.attack,
        stats.defense,
        stats.special_attack,
        stats.special_defense,
        stats.speed,
        stats.total,
    )
    header = " ".join(f"{label:>5}" for label in labels)
    row = " ".join(f"{value:>5}" for value in values)
    return f"[bold]{header}[/]\n{row}"


def render_pokemon(pokemon: Pokemon) -> str:
    """Render a Pokemon's summary and its weaknesses."""
    if pokemon.nickname and pokemon.nickname != pokemon.name:
        name_header = f"[bold magenta]{escape(pokemon.nickname)}[/] ({pokemon.name})"
    else:
        name_header = f"[bold magenta]{pokemon.name}[/]"

    types = " ".join(format_type(t) for t in pokemon.types)
    abilities = " ".join(f"{a.name}(h)" if a.hidden else a.name for a in pokemon.abilities)
    weaknesses = format_chart(pokemon.defense_chart, skip=frozenset({Tier.NEUTRAL}))

    return (
        f"{name_header} {types} [yellow]{pokemon.group.value}[/]\n"
        f"{abilities}\n"
        f"{render_stats(pokemon.stats)}\n"
        f"gen-{pokemon.generation}\n\n"
        f"[bold]weaknesses[/]\n{weaknesses}"
    )


def render_move(move: Move) -> str:
    """Render a move's stats and effect."""

    def value(v: int | None) -> str:
        return "-" if v is None else str(v)

    return (
        f"[bold magenta]{move.name}[/] {format_type(move.type)} [yellow]{move.damage_class}[/]\n"
        f"power: {value(move.power)}  accuracy: {value(move.accuracy)}  pp: {value(move.pp)}\n"
        f"gen-{move.generation}\n\n"
        f"{escape(move.effect_text)}"
    )


def render_ability(ability: Ability) -> str:
    """Render an ability's effect."""
    return f"[bold magenta]{ability.name}[/]\ngen-{ability.generation}\n\n{escape(ability.effect)}"


def render_types(types: list[Type]) -> str:
    """Render the offense chart of each type and the combined defense chart."""
    sections = [
        f"[bold]offense[/] {format_type(t.name)}\n{format_chart(t.offense_chart, skip=frozenset({Tier.NEUTRAL}))}"
        for t in types
    ]
    charts = [t.defense_chart for t in types]
    defense = charts[0] if len(charts) == 1 else combine(*charts)
    names = " ".join(format_type(t.name) for t in types)
    sections.append(f"[bold]defense[/] {names}\n{format_chart(defense, skip=frozenset({Tier.NEUTRAL}))}")
    return "\n\n".join(sections)


def render_learn_moves(pokemon: Pokemon, moves: dict[str, Move]) -> str:
    """Render learnable moves: level-up moves by level first, then other methods.

    Args:
        pokemon: Pokemon whose learn moves are listed.
        moves: Resolved moves by name, for type and damage class.
    """

    def line(learn: LearnMove) -> str:
        move = moves.get(learn.name)
        details = f" {format_type(move.type)} [dim]{move.damage_class}[/]" if move else ""
        level = f"{learn.level:>3} " if learn.method == LEVEL_UP else ""
        return f"  {level}{learn.name}{details}"

    level_up = sorted((m for m in pokemon.learn_moves if m.method == LEVEL_UP), key=lambda m: (m.level, m.name))
    others: dict[str, list[LearnMove]] = {}
    for learn in pokemon.learn_moves:
        if learn.method != LEVEL_UP:
            others.setdefault(learn.method, []).append(learn)

    sections = []
    if level_up:
        sections.append(f"[bold]{LEVEL_UP}[/]\n" + "\n".join(line(m) for m in level_up))
    for method in sorted(others):
        entries = sorted(others[method], key=lambda m: m.name)
        sections.append(f"[bold]{method}[/]\n" + "\n".join(line(m) for m in entries))
    return "\n\n".join(sections) if sections else "None"


def format_method(method: EvolutionMethod) -> str:
    """Render an evolution method as its trigger followed by its conditions."""
    parts = [method.trigger]
    for name, value in method.model_dump(exclude={"trigger"}, exclude_defaults=True).items():
        if name == "gender":
            value = GENDERS.get(value, value)
        label = name.replace("_", "-")
        parts.append(label if value is True else f"{label}={value}")
    return " ".join(parts)


def render_evolution(step: EvolutionStep, depth: int = 0) -> str:
    """Render an evolution tree, one indented line per species."""
    methods = " / ".join(format_method(m) for m in step.methods)
    line = "  " * depth + (f"{step.name} ({methods})" if methods else step.name)
    return "\n".join([line, *(render_evolution(child, depth + 1) for child in step.evolves_to)])


def render_coverage(report: CoverageReport) -> RenderableType:
    """Render offense and defense coverage as a table with a row per type."""
    table = Table(title="coverage", show_lines=False)
    table.add_column("type")
    table.add_column("offense")
    table.add_column("defense")

    for type_name in report.offense:
        offense = " ".join(f"{escape(e.pokemon)}({'/'.join(e.via_types)})" for e in report.offense[type_name])
        defense = " ".join(f"{escape(e.pokemon)}({e.multiplier:g}x)" for e in report.defense[type_name])
        table.add_row(format_type(type_name), offense or "[red]-[/]", defense or "[red]-[/]")
    return table


def _format_move(move: Move) -> str:
    power = "-" if move.power is None else move.power
    return f"{move.name}({format_type(move.type)} {power})"


def render_matchup(report: MatchupReport) -> RenderableType:
    """Render both directions of a matchup."""
    attacker = escape(report.attacker.display_name)
    defender = escape(report.defender.display_name)
    return Group(
        f"[bold]{attacker}[/] vs [bold]{defender}[/]",
        format_groups(report.attacker_vs_defender, _format_move),
        "",
        f"[bold]{defender}[/] vs [bold]{attacker}[/]",
        format_groups(report.defender_vs_attacker, _format_move),
    )
