"""Stats store clients.

The store is the source of truth for committed stats. Provides an HTTP
implementation for the stats REST service and an in-memory one for tests
and local development.
"""

import copy
import itertools
import logging
from dataclasses import replace
from typing import Any, Callable, Optional, Protocol, TypeVar

import httpx

from courtstats.errors import PersistenceFailure
from courtstats.models.game import ROSTER_SIZE, Game, Roster
from courtstats.models.stat import Stat, StatKind

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Relations the stats service must join in for a full game view
GAME_RELATIONS = ["stats"] + [
    f"{side}Team.player{slot}"
    for side in ("home", "away")
    for slot in range(1, ROSTER_SIZE + 1)
]


class StatsStore(Protocol):
    """Async persistence operations over stats."""

    async def create(self, stat: Stat) -> Stat: ...

    async def update(self, stat_id, **patch) -> Stat: ...

    async def delete(self, stat_id) -> None: ...

    async def query(self, game_id: str, with_related: bool = True) -> Game: ...


class InMemoryStatsStore:
    """Dict-backed store; assigns sequential integer ids.

    Use this for testing and development when no stats service is running.
    """

    def __init__(self, games: list[Game] | None = None):
        self._games: dict[str, Game] = {}
        self._stats: dict[int, Stat] = {}
        self._ids = itertools.count(1)
        for game in games or []:
            self.add_game(game)

    def add_game(self, game: Game) -> None:
        """Register a game; its stats keep their ids."""
        self._games[game.id] = replace(game, stats=[])
        for stat in game.stats:
            self._stats[stat.id] = copy.copy(stat)
        known = [s for s in self._stats if isinstance(s, int)]
        if known:
            self._ids = itertools.count(max(known) + 1)

    async def create(self, stat: Stat) -> Stat:
        if stat.game_id not in self._games:
            raise PersistenceFailure("create", f"unknown game {stat.game_id}", status_code=404)
        created = replace(stat, id=next(self._ids))
        self._stats[created.id] = created
        logger.info(f"InMemoryStatsStore: created stat {created.id} for game {created.game_id}")
        return copy.copy(created)

    async def update(self, stat_id, **patch) -> Stat:
        if stat_id not in self._stats:
            raise PersistenceFailure("update", f"unknown stat {stat_id}", status_code=404)
        updated = replace(self._stats[stat_id], **patch)
        self._stats[stat_id] = updated
        return copy.copy(updated)

    async def delete(self, stat_id) -> None:
        if stat_id not in self._stats:
            raise PersistenceFailure("delete", f"unknown stat {stat_id}", status_code=404)
        del self._stats[stat_id]

    async def query(self, game_id: str, with_related: bool = True) -> Game:
        if game_id not in self._games:
            raise PersistenceFailure("query", f"unknown game {game_id}", status_code=404)
        game = copy.deepcopy(self._games[game_id])
        if with_related:
            game.stats = [copy.copy(s) for s in self._stats.values() if s.game_id == game_id]
        return game


def _stat_to_wire(stat: Stat) -> dict[str, Any]:
    return {
        "gameId": stat.game_id,
        "playerId": stat.participant_id,
        "type": stat.kind.value if stat.kind else None,
        "time": stat.timestamp,
    }


def _stat_from_wire(data: dict[str, Any]) -> Stat:
    return Stat(
        id=data.get("id"),
        game_id=str(data["gameId"]),
        participant_id=str(data["playerId"]),
        kind=StatKind(data["type"]),
        timestamp=float(data["time"]),
    )


def _roster_from_wire(data: dict[str, Any]) -> Roster:
    slots = []
    for slot in range(1, ROSTER_SIZE + 1):
        pid = data.get(f"player{slot}Id")
        slots.append(str(pid) if pid is not None else None)
    return Roster(id=str(data["id"]), name=data.get("name", ""), slots=slots)


def _game_from_wire(data: dict[str, Any]) -> Game:
    return Game(
        id=str(data["id"]),
        home=_roster_from_wire(data["homeTeam"]),
        away=_roster_from_wire(data["awayTeam"]),
        video_url=data.get("videoUrl"),
        stats=[_stat_from_wire(s) for s in data.get("stats", [])],
    )


_WIRE_FIELDS = {"timestamp": "time", "participant_id": "playerId", "kind": "type", "game_id": "gameId"}


class HttpStatsStore:
    """Client for the stats REST service."""

    def __init__(self, base_url: str, timeout: float = 10.0):
        """Initialize the client.

        Args:
            base_url: Root URL of the stats service (e.g. http://localhost:5000)
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _request(self, operation: str, method: str, url: str, **kwargs) -> httpx.Response:
        client = await self._get_client()
        try:
            response = await client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Stats {operation} rejected ({e.response.status_code}): {e.response.text}")
            raise PersistenceFailure(operation, e.response.text, status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.error(f"Stats {operation} failed: {e}")
            raise PersistenceFailure(operation, e) from e
        return response

    @staticmethod
    def _decode(operation: str, response: httpx.Response, parse: Callable[[Any], T]) -> T:
        """Parse a successful reply; a missing or malformed body is a store failure."""
        try:
            return parse(response.json())
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Stats {operation} returned an unreadable reply: {e}")
            raise PersistenceFailure(operation, response.text) from e

    async def create(self, stat: Stat) -> Stat:
        response = await self._request("create", "POST", "/services/stats", json=_stat_to_wire(stat))
        # The service may echo only the new id
        return self._decode(
            "create",
            response,
            lambda body: _stat_from_wire(body) if "gameId" in body else replace(stat, id=body["id"]),
        )

    async def update(self, stat_id, **patch) -> Stat:
        wire = {}
        for name, value in patch.items():
            if isinstance(value, StatKind):
                value = value.value
            wire[_WIRE_FIELDS.get(name, name)] = value
        response = await self._request("update", "PUT", f"/services/stats/{stat_id}", json=wire)
        return self._decode("update", response, _stat_from_wire)

    async def delete(self, stat_id) -> None:
        await self._request("delete", "DELETE", f"/services/stats/{stat_id}")

    async def query(self, game_id: str, with_related: bool = True) -> Game:
        params = [("withRelated[]", rel) for rel in GAME_RELATIONS] if with_related else []
        response = await self._request("query", "GET", f"/services/games/{game_id}", params=params)
        return self._decode("query", response, _game_from_wire)


def get_stats_store(
    base_url: Optional[str] = None, timeout: float = 10.0
) -> InMemoryStatsStore | HttpStatsStore:
    """Factory function to get the appropriate stats store.

    Args:
        base_url: Stats service URL; empty or None selects the in-memory store
        timeout: Request timeout for the HTTP store

    Returns:
        HttpStatsStore or InMemoryStatsStore
    """
    if not base_url:
        logger.info("Using InMemoryStatsStore")
        return InMemoryStatsStore()
    logger.info(f"Using HttpStatsStore at {base_url}")
    return HttpStatsStore(base_url, timeout=timeout)
