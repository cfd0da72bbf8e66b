"""Data models for courtstats."""

from courtstats.models.stat import ScoreAggregate, Stat, StatKind
from courtstats.models.game import ROSTER_SIZE, Game, Roster, Side

__all__ = [
    "ScoreAggregate",
    "Stat",
    "StatKind",
    "ROSTER_SIZE",
    "Game",
    "Roster",
    "Side",
]
