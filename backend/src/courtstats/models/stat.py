"""Stat and score models."""

from dataclasses import dataclass
from enum import Enum


class StatKind(str, Enum):
    """Closed set of stat types a user can record."""

    ONE_POINT = "1P"
    ONE_POINT_ATTEMPT = "1PA"
    TWO_POINT = "2P"
    TWO_POINT_ATTEMPT = "2PA"
    OFFENSIVE_REBOUND = "ORB"
    DEFENSIVE_REBOUND = "DRB"
    ASSIST = "A"
    STEAL = "STL"
    BLOCK = "BLK"
    TURNOVER = "TO"

    @property
    def points(self) -> int:
        """Points this kind adds to the scoring side."""
        return _POINT_VALUES.get(self, 0)


_POINT_VALUES = {
    StatKind.ONE_POINT: 1,
    StatKind.TWO_POINT: 2,
}


@dataclass
class Stat:
    """A single timestamped action attributed to one participant.

    ``id`` is None while the stat is an uncommitted candidate.
    """

    game_id: str
    participant_id: str
    kind: StatKind | None  # None until chosen on an open candidate
    timestamp: float  # Seconds into the game video
    id: int | str | None = None

    @property
    def points(self) -> int:
        return self.kind.points if self.kind else 0


@dataclass(frozen=True)
class ScoreAggregate:
    """Score of both sides at some point in the game."""

    home: int = 0
    away: int = 0
