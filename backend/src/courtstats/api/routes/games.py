"""Read-only REST endpoints for game scores and stat timelines."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel

from courtstats.errors import PersistenceFailure, RosterConflict
from courtstats.models.game import Game
from courtstats.models.stat import Stat
from courtstats.services import score_aggregator
from courtstats.services.event_log import EventLog
from courtstats.services.role_resolver import RoleMap, resolve

router = APIRouter(prefix="/api/games", tags=["games"])


class ScoreResponse(BaseModel):
    """Score of a game at a cutoff (None = whole game)."""

    game_id: str
    at: float | None
    home: int
    away: int


class StatInfo(BaseModel):
    """A committed stat."""

    id: int | str
    participant_id: str
    kind: str
    timestamp: float


class StatListResponse(BaseModel):
    """Committed stats in timeline order."""

    game_id: str
    until: float | None
    stats: list[StatInfo]


class TimelineStat(StatInfo):
    """A stat positioned along the video."""

    percent: float


class ParticipantTimeline(BaseModel):
    """One participant's stats."""

    participant_id: str
    side: str | None  # None when no longer on either roster
    stats: list[TimelineStat]


class TimelinesResponse(BaseModel):
    """Per-participant stat timelines for a game."""

    game_id: str
    duration: float | None
    timelines: list[ParticipantTimeline]


def _stat_info(stat: Stat) -> dict:
    return {
        "id": stat.id,
        "participant_id": stat.participant_id,
        "kind": stat.kind.value,
        "timestamp": stat.timestamp,
    }


async def _load(request: Request, game_id: str) -> tuple[Game, EventLog, RoleMap]:
    store = request.app.state.store
    try:
        game = await store.query(game_id, with_related=True)
    except PersistenceFailure as e:
        if e.status_code == 404:
            raise HTTPException(404, f"Game not found: {game_id}")
        raise HTTPException(502, f"Stats store unavailable: {e.payload}")
    except RosterConflict as e:
        # Raised while building the rosters from the store reply
        raise HTTPException(409, str(e))
    try:
        role_map = resolve(game.home, game.away)
    except RosterConflict as e:
        raise HTTPException(409, str(e))
    return game, EventLog(game.id, game.stats), role_map


@router.get("/{game_id}/score", response_model=ScoreResponse)
async def get_score(
    request: Request,
    game_id: str,
    at: Annotated[float | None, Query()] = None,
):
    """Score at ``at`` seconds into the video, or the final score."""
    if at is not None and at < 0:
        raise HTTPException(400, "at must be >= 0")
    _, log, role_map = await _load(request, game_id)
    if at is None:
        score = score_aggregator.final_score(log, role_map)
    else:
        score = score_aggregator.score_at(log, role_map, at)
    return ScoreResponse(game_id=game_id, at=at, home=score.home, away=score.away)


@router.get("/{game_id}/stats", response_model=StatListResponse)
async def list_stats(
    request: Request,
    game_id: str,
    until: Annotated[float | None, Query()] = None,
):
    """Committed stats, optionally only those up to ``until`` seconds."""
    _, log, _ = await _load(request, game_id)
    stats = log.all_events() if until is None else log.events_up_to(until)
    return StatListResponse(
        game_id=game_id,
        until=until,
        stats=[StatInfo(**_stat_info(s)) for s in stats],
    )


@router.get("/{game_id}/timelines", response_model=TimelinesResponse)
async def get_timelines(
    request: Request,
    game_id: str,
    duration: Annotated[float | None, Query(gt=0)] = None,
):
    """Stats grouped by participant, each placed as a percent of ``duration``."""
    game, log, role_map = await _load(request, game_id)
    grouped = score_aggregator.stats_by_participant(log)

    # Roster order first, then anyone who has since left both rosters
    order = game.home.participant_ids + game.away.participant_ids
    order += sorted(pid for pid in grouped if pid not in role_map)

    timelines = []
    for pid in order:
        side = role_map.side_of(pid)
        timelines.append(
            ParticipantTimeline(
                participant_id=pid,
                side=side.value if side else None,
                stats=[
                    TimelineStat(
                        **_stat_info(s),
                        percent=score_aggregator.timeline_percent(s.timestamp, duration),
                    )
                    for s in grouped.get(pid, [])
                ],
            )
        )
    return TimelinesResponse(game_id=game_id, duration=duration, timelines=timelines)
