"""Viewing context for one game: stats, rosters, clock and editor together."""

import logging
from typing import Callable

from courtstats.config import settings
from courtstats.models.game import Game, Roster
from courtstats.models.stat import ScoreAggregate, Stat
from courtstats.services import score_aggregator
from courtstats.services.event_log import EventLog
from courtstats.services.playback_clock import MediaPlayer, PlaybackClock
from courtstats.services.role_resolver import RoleMap, resolve
from courtstats.services.stat_editor import ConfirmGate, DiagnosticSink, StatEditorSession
from courtstats.services.stats_store import StatsStore

logger = logging.getLogger(__name__)

ScoreListener = Callable[[float, ScoreAggregate], None]


class GameViewer:
    """Owns a game's EventLog and RoleMap and keeps the live score current.

    Position updates from the clock are turned into score updates for
    subscribers. The score for the current position is cached and recomputed
    whenever the cutoff, the log or the rosters change.
    """

    def __init__(
        self,
        game: Game,
        player: MediaPlayer,
        store: StatsStore,
        can_edit: Callable[[], bool],
        confirm: ConfirmGate,
        diagnostics: DiagnosticSink | None = None,
        poll_interval: float = 0.1,
        duration_retry_interval: float = 0.1,
        retime_tolerance: float = 2.0,
        review_lead_in: float = 5.0,
    ):
        self.game = game
        self.review_lead_in = review_lead_in
        self.log = EventLog(game.id, game.stats)
        self.role_map: RoleMap = resolve(game.home, game.away)
        self.time = 0.0  # Cutoff for the live score
        self._roles_version = 0

        self.clock = PlaybackClock(
            player,
            poll_interval=poll_interval,
            duration_retry_interval=duration_retry_interval,
        )
        self.editor = StatEditorSession(
            game.id,
            self.log,
            self.clock,
            store,
            can_edit=can_edit,
            confirm=confirm,
            diagnostics=diagnostics,
            retime_tolerance=retime_tolerance,
        )

        self._score_key: tuple | None = None
        self._score: ScoreAggregate | None = None
        self._listeners: list[ScoreListener] = []
        self._unsubscribe = self.clock.subscribe(self._on_position)

    @classmethod
    async def load(
        cls,
        game_id: str,
        store: StatsStore,
        player: MediaPlayer,
        can_edit: Callable[[], bool],
        confirm: ConfirmGate,
        **kwargs,
    ) -> "GameViewer":
        """Fetch a game with its rosters and stats and open a viewer on it.

        Timing tunables not passed in ``kwargs`` come from settings.
        """
        kwargs.setdefault("poll_interval", settings.poll_interval_seconds)
        kwargs.setdefault("duration_retry_interval", settings.duration_retry_seconds)
        kwargs.setdefault("retime_tolerance", settings.retime_tolerance_seconds)
        kwargs.setdefault("review_lead_in", settings.review_lead_in_seconds)

        game = await store.query(game_id, with_related=True)
        logger.info(f"Loaded game {game_id} with {len(game.stats)} stats")
        return cls(game, player, store, can_edit=can_edit, confirm=confirm, **kwargs)

    # -- rosters ---------------------------------------------------------------

    def set_rosters(self, home: Roster, away: Roster) -> None:
        """Swap in new rosters and rebuild the RoleMap from scratch.

        Raises:
            RosterConflict: If a participant fills more than one slot; the previous
                rosters stay in effect
        """
        role_map = resolve(home, away)
        self.game.home = home
        self.game.away = away
        self.role_map = role_map
        self._roles_version += 1
        self._publish()

    # -- scores ----------------------------------------------------------------

    @property
    def current_score(self) -> ScoreAggregate:
        """Score at the clock's last published position."""
        key = (self.time, self.log.version, self._roles_version)
        if self._score is None or key != self._score_key:
            self._score = score_aggregator.score_at(self.log, self.role_map, self.time)
            self._score_key = key
        return self._score

    @property
    def final_score(self) -> ScoreAggregate:
        return score_aggregator.final_score(self.log, self.role_map)

    def subscribe(self, listener: ScoreListener) -> Callable[[], None]:
        """Register a (position, score) listener; returns its remover."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _on_position(self, seconds: float) -> None:
        self.time = seconds
        self._publish()

    def _publish(self) -> None:
        score = self.current_score
        for listener in list(self._listeners):
            listener(self.time, score)

    # -- timelines -------------------------------------------------------------

    def timelines(self) -> dict[str, list[Stat]]:
        return score_aggregator.stats_by_participant(self.log)

    def stats_for(self, participant_id: str) -> list[Stat]:
        return score_aggregator.stats_for_participant(self.log, participant_id)

    def stat_percent(self, stat: Stat) -> float:
        return score_aggregator.timeline_percent(stat.timestamp, self.clock.duration)

    def review(self, stat: Stat) -> None:
        """Jump to just before a stat and play from there."""
        self.clock.seek(stat.timestamp - self.review_lead_in, resume=True)
        self.clock.play()

    # -- editing ---------------------------------------------------------------

    async def commit(self) -> Stat | None:
        """Commit the editor's candidate and republish the live score."""
        created = await self.editor.commit()
        if created is not None:
            self._publish()
        return created

    async def delete(self, stat_id):
        result = await self.editor.delete_committed(stat_id)
        self._publish()
        return result

    def close(self) -> None:
        """Tear down the view: editor first, then the clock."""
        self.editor.close()
        self._unsubscribe()
        self.clock.close()
        self._listeners.clear()
        logger.info(f"Closed viewer for game {self.game.id}")
