# ABOUTME: Analysis tools combining several resolved Pokemon.
# ABOUTME: Exports roster coverage and head-to-head matchup reports.

from dunspars.app.tools.coverage import CoverageReport, DefenseEntry, OffenseEntry, coverage_report
from dunspars.app.tools.matchup import MatchupReport, matchup_report, move_weaknesses

__all__ = [
    "CoverageReport",
    "DefenseEntry",
    "MatchupReport",
    "OffenseEntry",
    "coverage_report",
    "matchup_report",
    "move_weaknesses",
]
