"""Map participants to the side they play for."""

import logging
from collections import Counter
from collections.abc import Mapping
from typing import Iterator

from courtstats.errors import RosterConflict
from courtstats.models.game import Roster, Side

logger = logging.getLogger(__name__)


class RoleMap(Mapping):
    """Read-only participant id -> Side lookup for one game.

    Ids absent from both rosters are simply not in the map.
    """

    def __init__(self, sides: dict[str, Side]):
        self._sides = dict(sides)

    def __getitem__(self, participant_id: str) -> Side:
        return self._sides[participant_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._sides)

    def __len__(self) -> int:
        return len(self._sides)

    def side_of(self, participant_id: str) -> Side | None:
        """Side for a participant, or None if they are on neither roster."""
        return self._sides.get(participant_id)

    def __repr__(self) -> str:
        return f"RoleMap({len(self._sides)} participants)"


def resolve(home: Roster, away: Roster) -> RoleMap:
    """Build the RoleMap for a game's two rosters.

    Always rebuilt from both rosters; never patched in place.

    Raises:
        RosterConflict: If any participant fills more than one slot, on one
            roster or across both
    """
    # Slots can be edited after a Roster is built, so check again here.
    counts = Counter(home.participant_ids + away.participant_ids)
    repeated = {pid for pid, n in counts.items() if n > 1}
    if repeated:
        raise RosterConflict(repeated)

    sides: dict[str, Side] = {}
    for pid in home.participant_ids:
        sides[pid] = Side.HOME
    for pid in away.participant_ids:
        sides[pid] = Side.AWAY

    logger.debug(f"Resolved {len(sides)} participants for {home.id} vs {away.id}")
    return RoleMap(sides)
