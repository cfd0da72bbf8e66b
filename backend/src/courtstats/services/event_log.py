"""In-memory log of a game's committed stats."""

from bisect import bisect_right
from dataclasses import fields, replace
from typing import Iterator

from courtstats.errors import DuplicateId, NotFound
from courtstats.models.stat import Stat

_PATCHABLE = {f.name for f in fields(Stat)} - {"id"}


def _order_key(stat: Stat):
    # Timestamp first, then id; the bool keeps int and str ids from being compared.
    return (stat.timestamp, isinstance(stat.id, str), stat.id)


class StatRange:
    """Restartable view over the log's stats with ``timestamp <= cutoff``.

    Each iteration reads the log as it is at that moment, in canonical order.
    """

    def __init__(self, log: "EventLog", cutoff: float | None):
        self._log = log
        self.cutoff = cutoff

    def __iter__(self) -> Iterator[Stat]:
        ordered = self._log._ordered()
        if self.cutoff is None:
            end = len(ordered)
        else:
            end = bisect_right(ordered, self.cutoff, key=lambda s: s.timestamp)
        for i in range(end):
            yield ordered[i]

    def __repr__(self) -> str:
        return f"StatRange(cutoff={self.cutoff!r}, game={self._log.game_id!r})"


class EventLog:
    """Committed stats for one game, keyed by id.

    Insertion order is irrelevant: reads always come back ordered by
    timestamp, ties broken by id.
    """

    def __init__(self, game_id: str, stats: list[Stat] | None = None):
        self.game_id = game_id
        self._stats: dict[int | str, Stat] = {}
        self._sorted: list[Stat] | None = None
        self.version = 0  # Bumped on every mutation
        for stat in stats or []:
            self.insert(stat)

    def __len__(self) -> int:
        return len(self._stats)

    def __contains__(self, stat_id) -> bool:
        return stat_id in self._stats

    def _ordered(self) -> list[Stat]:
        if self._sorted is None:
            self._sorted = sorted(self._stats.values(), key=_order_key)
        return self._sorted

    def _touch(self) -> None:
        self._sorted = None
        self.version += 1

    def get(self, stat_id) -> Stat:
        try:
            return self._stats[stat_id]
        except KeyError:
            raise NotFound(stat_id) from None

    def insert(self, stat: Stat) -> None:
        """Add a committed stat.

        Raises:
            ValueError: If the stat has no id (still a candidate)
            DuplicateId: If a stat with the same id is already present
        """
        if stat.id is None:
            raise ValueError("Cannot insert a stat without an id")
        if stat.id in self._stats:
            raise DuplicateId(stat.id)
        self._stats[stat.id] = stat
        self._touch()

    def update(self, stat_id, **patch) -> Stat:
        """Replace the given fields of a committed stat.

        Args:
            stat_id: Id of the stat to change
            **patch: Field values to replace (commonly just ``timestamp``)

        Returns:
            The updated stat

        Raises:
            NotFound: If no stat has this id
            ValueError: If the patch names an unknown field or ``id``
        """
        current = self.get(stat_id)
        unknown = set(patch) - _PATCHABLE
        if unknown:
            raise ValueError(f"Cannot patch fields: {sorted(unknown)}")
        updated = replace(current, **patch)
        self._stats[stat_id] = updated
        self._touch()
        return updated

    def remove(self, stat_id) -> Stat:
        """Remove a committed stat; removing the same id twice raises NotFound."""
        stat = self.get(stat_id)
        del self._stats[stat_id]
        self._touch()
        return stat

    def events_up_to(self, cutoff: float) -> StatRange:
        """Stats with ``timestamp <= cutoff`` in canonical order."""
        return StatRange(self, cutoff)

    def all_events(self) -> StatRange:
        """Every committed stat in canonical order."""
        return StatRange(self, None)
