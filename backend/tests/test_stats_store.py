"""Tests for the stats store clients."""

import json

import httpx
import pytest

from courtstats.errors import PersistenceFailure
from courtstats.models.stat import Stat, StatKind
from courtstats.services.stats_store import (
    HttpStatsStore,
    InMemoryStatsStore,
    get_stats_store,
)

pytestmark = pytest.mark.anyio


class TestInMemoryStatsStore:
    """Tests for InMemoryStatsStore."""

    async def test_create_assigns_next_id(self, game):
        store = InMemoryStatsStore([game])
        created = await store.create(
            Stat(game_id="g1", participant_id="h1", kind=StatKind.ONE_POINT, timestamp=5.0)
        )
        assert created.id == 4

    async def test_create_unknown_game(self):
        store = InMemoryStatsStore()
        with pytest.raises(PersistenceFailure) as exc:
            await store.create(Stat(game_id="g9", participant_id="h1", kind=StatKind.ONE_POINT, timestamp=1.0))
        assert exc.value.status_code == 404

    async def test_query_returns_copies(self, game):
        store = InMemoryStatsStore([game])
        first = await store.query("g1")
        first.stats[0].timestamp = 999.0
        second = await store.query("g1")
        assert sorted(s.timestamp for s in second.stats) == [10.0, 20.0, 30.0]

    async def test_query_without_related(self, game):
        store = InMemoryStatsStore([game])
        bare = await store.query("g1", with_related=False)
        assert bare.stats == []
        assert bare.home.participant_ids == ["h1", "h2", "h3", "h4"]

    async def test_update_and_delete(self, game):
        store = InMemoryStatsStore([game])
        updated = await store.update(1, timestamp=11.0)
        assert updated.timestamp == 11.0
        await store.delete(1)
        with pytest.raises(PersistenceFailure):
            await store.delete(1)


def _game_payload():
    return {
        "id": 7,
        "videoUrl": "xyz",
        "homeTeam": {"id": 1, "name": "Home", "player1Id": 11, "player2Id": 12, "player3Id": 13, "player4Id": None},
        "awayTeam": {"id": 2, "name": "Away", "player1Id": 21, "player2Id": 22, "player3Id": 23, "player4Id": 24},
        "stats": [{"id": 5, "gameId": 7, "playerId": 11, "type": "2P", "time": 14.5}],
    }


def _store_with(handler) -> HttpStatsStore:
    store = HttpStatsStore("http://stats.test/")
    store._client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url=store.base_url
    )
    return store


class TestHttpStatsStore:
    """Tests for HttpStatsStore against a mocked transport."""

    async def test_query_parses_game(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["relations"] = request.url.params.get_list("withRelated[]")
            return httpx.Response(200, json=_game_payload())

        store = _store_with(handler)
        game = await store.query("7")
        await store.close()

        assert seen["path"] == "/services/games/7"
        assert "stats" in seen["relations"]
        assert "awayTeam.player4" in seen["relations"]
        assert game.id == "7"
        assert game.home.slots == ["11", "12", "13", None]
        assert game.stats[0].kind == StatKind.TWO_POINT
        assert game.stats[0].participant_id == "11"
        assert game.stats[0].timestamp == 14.5

    async def test_create_posts_wire_format(self):
        sent = {}

        def handler(request: httpx.Request) -> httpx.Response:
            sent.update(json.loads(request.content))
            return httpx.Response(201, json={"id": 42})

        store = _store_with(handler)
        created = await store.create(
            Stat(game_id="7", participant_id="11", kind=StatKind.ONE_POINT, timestamp=3.0)
        )

        assert sent == {"gameId": "7", "playerId": "11", "type": "1P", "time": 3.0}
        assert created.id == 42
        assert created.kind == StatKind.ONE_POINT

    async def test_update_maps_field_names(self):
        sent = {}

        def handler(request: httpx.Request) -> httpx.Response:
            sent.update(json.loads(request.content))
            return httpx.Response(200, json={"id": 5, "gameId": 7, "playerId": 11, "type": "2P", "time": 16.0})

        store = _store_with(handler)
        updated = await store.update(5, timestamp=16.0)
        assert sent == {"time": 16.0}
        assert updated.timestamp == 16.0

    async def test_error_status_becomes_persistence_failure(self):
        store = _store_with(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(PersistenceFailure) as exc:
            await store.delete(5)
        assert exc.value.status_code == 500
        assert exc.value.payload == "boom"

    @pytest.mark.parametrize(
        "reply",
        [
            httpx.Response(204),
            httpx.Response(201, json={}),
            httpx.Response(200, text="<html>maintenance</html>"),
        ],
        ids=["no-content", "empty-object", "html"],
    )
    async def test_unreadable_create_reply_becomes_persistence_failure(self, reply):
        store = _store_with(lambda request: reply)
        with pytest.raises(PersistenceFailure) as exc:
            await store.create(
                Stat(game_id="7", participant_id="11", kind=StatKind.ONE_POINT, timestamp=3.0)
            )
        assert exc.value.operation == "create"

    async def test_update_reply_with_unknown_kind(self):
        body = {"id": 5, "gameId": 7, "playerId": 11, "type": "3P", "time": 16.0}
        store = _store_with(lambda request: httpx.Response(200, json=body))
        with pytest.raises(PersistenceFailure) as exc:
            await store.update(5, timestamp=16.0)
        assert exc.value.operation == "update"

    async def test_query_reply_missing_roster(self):
        payload = _game_payload()
        del payload["awayTeam"]
        store = _store_with(lambda request: httpx.Response(200, json=payload))
        with pytest.raises(PersistenceFailure) as exc:
            await store.query("7")
        assert exc.value.operation == "query"

    async def test_transport_error_becomes_persistence_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        store = _store_with(handler)
        with pytest.raises(PersistenceFailure) as exc:
            await store.query("7")
        assert exc.value.status_code is None


def test_factory_selects_store():
    assert isinstance(get_stats_store(""), InMemoryStatsStore)
    assert isinstance(get_stats_store("http://stats.test"), HttpStatsStore)
