"""Game and roster models."""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum

from courtstats.errors import RosterConflict
from courtstats.models.stat import Stat

ROSTER_SIZE = 4


class Side(str, Enum):
    """The two competing rosters in a game."""

    HOME = "home"
    AWAY = "away"


@dataclass
class Roster:
    """A team's four player slots (slots 1-4).

    An empty slot is None, which is allowed while a roster is being edited.
    """

    id: str
    name: str
    slots: list[str | None] = field(default_factory=lambda: [None] * ROSTER_SIZE)

    def __post_init__(self):
        if len(self.slots) != ROSTER_SIZE:
            raise ValueError(f"Roster {self.id} must have {ROSTER_SIZE} slots, got {len(self.slots)}")
        dupes = {pid for pid, n in Counter(self.participant_ids).items() if n > 1}
        if dupes:
            raise RosterConflict(dupes)

    @property
    def participant_ids(self) -> list[str]:
        """Assigned participant ids in slot order (empty slots skipped)."""
        return [pid for pid in self.slots if pid is not None]


@dataclass
class Game:
    """A recorded game with its two rosters and committed stats."""

    id: str
    home: Roster
    away: Roster
    video_url: str | None = None
    stats: list[Stat] = field(default_factory=list)
