# ABOUTME: Matchup composer comparing two resolved Pokemon's moves against each other.
# ABOUTME: Groups each side's damaging moves by effectiveness against the other side.

from dataclasses import dataclass

from dunspars.app.queries import Store
from dunspars.app.resolvers import resolve_move_list
from dunspars.models import Move, Pokemon
from dunspars.utils.type_chart import SUPER_EFFECTIVE_THRESHOLD, WeaknessGroups, group_by_tier


@dataclass
class MatchupReport:
    """Both directions of a matchup, reported independently.

    Attributes:
        attacker: The attacking Pokemon.
        defender: The defending Pokemon.
        attacker_vs_defender: Attacker's moves grouped by effectiveness on the defender.
        defender_vs_attacker: Defender's moves grouped by effectiveness on the attacker.
    """

    attacker: Pokemon
    defender: Pokemon
    attacker_vs_defender: WeaknessGroups[Move]
    defender_vs_attacker: WeaknessGroups[Move]


def move_weaknesses(
    attacker: Pokemon,
    moves: list[Move],
    defender: Pokemon,
    verbose: bool = False,
    stab_only: bool = False,
) -> WeaknessGroups[Move]:
    """Group an attacker's damaging moves by effectiveness against a defender.

    Args:
        attacker: Pokemon using the moves.
        moves: The attacker's resolved moves.
        defender: Pokemon taking the hits.
        verbose: Keep every tier instead of only 2x and above.
        stab_only: Keep only moves sharing a type with the attacker.

    Returns:
        Moves grouped by the defender's multiplier for each move's type.
    """

    def extract(move: Move) -> tuple[Move, float] | None:
        if not move.is_damaging:
            return None
        if stab_only and move.type not in attacker.types:
            return None
        multiplier = defender.defense_chart.multiplier_of(move.type)
        if not verbose and multiplier < SUPER_EFFECTIVE_THRESHOLD:
            return None
        return move, multiplier

    return group_by_tier(moves, extract)


def matchup_report(
    attacker: Pokemon,
    defender: Pokemon,
    store: Store,
    verbose: bool = False,
    stab_only: bool = False,
) -> MatchupReport:
    """Run the move comparison in both directions.

    Raises:
        ResolutionError: The first failure resolving either side's moves.
    """
    attacker_moves = resolve_move_list(attacker, store)
    defender_moves = resolve_move_list(defender, store)

    return MatchupReport(
        attacker=attacker,
        defender=defender,
        attacker_vs_defender=move_weaknesses(attacker, attacker_moves, defender, verbose, stab_only),
        defender_vs_attacker=move_weaknesses(defender, defender_moves, attacker, verbose, stab_only),
    )
