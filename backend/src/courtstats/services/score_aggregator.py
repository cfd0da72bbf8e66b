"""Score and timeline aggregation over a game's stat log.

All functions here are pure: they read the log and role map they are given
and return fresh values.
"""

import math
from collections import defaultdict
from typing import Iterable

from courtstats.models.game import Side
from courtstats.models.stat import ScoreAggregate, Stat
from courtstats.services.event_log import EventLog
from courtstats.services.role_resolver import RoleMap


def _tally(stats: Iterable[Stat], role_map: RoleMap) -> ScoreAggregate:
    totals = {Side.HOME: 0, Side.AWAY: 0}
    for stat in stats:
        side = role_map.side_of(stat.participant_id)
        if side is None:
            # Participant since removed from both rosters
            continue
        totals[side] += stat.points
    return ScoreAggregate(home=totals[Side.HOME], away=totals[Side.AWAY])


def score_at(log: EventLog, role_map: RoleMap, cutoff: float) -> ScoreAggregate:
    """Score of both sides counting every stat with ``timestamp <= cutoff``.

    Args:
        log: The game's committed stats
        role_map: Participant -> side lookup; unmapped participants are skipped
        cutoff: Inclusive time boundary in seconds

    Returns:
        ScoreAggregate for home and away
    """
    return _tally(log.events_up_to(cutoff), role_map)


def final_score(log: EventLog, role_map: RoleMap) -> ScoreAggregate:
    """Score of both sides over the whole game."""
    return score_at(log, role_map, math.inf)


def stats_by_participant(log: EventLog) -> dict[str, list[Stat]]:
    """Group the log into per-participant timelines in canonical order."""
    grouped: dict[str, list[Stat]] = defaultdict(list)
    for stat in log.all_events():
        grouped[stat.participant_id].append(stat)
    return dict(grouped)


def stats_for_participant(log: EventLog, participant_id: str) -> list[Stat]:
    """One participant's timeline; empty if they have no stats."""
    return [s for s in log.all_events() if s.participant_id == participant_id]


def timeline_percent(timestamp: float, duration: float | None) -> float:
    """Position of a timestamp along the video, as a percentage.

    Returns 0 while the duration is not known yet.
    """
    if not duration:
        return 0.0
    return timestamp / duration * 100
