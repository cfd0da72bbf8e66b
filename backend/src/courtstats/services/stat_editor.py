"""Stat editing session.

Coordinates pausing the video, holding an uncommitted candidate stat,
keeping the candidate's time and the playback clock in step, and writing
the result through the stats store.
"""

import logging
from enum import Enum
from typing import Awaitable, Callable, Protocol

from courtstats.errors import CapabilityDenied, InvalidTransition, PersistenceFailure
from courtstats.models.stat import Stat, StatKind
from courtstats.services.event_log import EventLog
from courtstats.services.playback_clock import PlaybackClock
from courtstats.services.stats_store import StatsStore

logger = logging.getLogger(__name__)

# Candidate/clock divergence (seconds) tolerated before the clock is re-seeked.
# Absorbs the player's sub-second reporting jitter so the two channels do not
# chase each other.
DEFAULT_RETIME_TOLERANCE = 2.0

ConfirmGate = Callable[[Stat], Awaitable[bool]]


class EditorStatus(str, Enum):
    """Status of a stat editing session."""

    IDLE = "idle"  # No candidate open
    EDITING = "editing"  # Candidate open, video paused
    COMMITTING = "committing"  # Candidate sent to the store, awaiting result


class DeleteResult(str, Enum):
    """Outcome of deleting a committed stat."""

    DELETED = "deleted"
    DECLINED = "declined"  # User said no at the confirmation prompt
    FAILED = "failed"  # Store rejected the delete; stat kept


class DiagnosticSink(Protocol):
    """Receives recovered failures for later inspection."""

    def report(self, operation: str, error: Exception) -> None: ...


class LoggingDiagnosticSink:
    """Diagnostic sink that writes failures to the module logger."""

    def report(self, operation: str, error: Exception) -> None:
        logger.error(f"Stat {operation} failed: {error}")


class StatEditorSession:
    """Editing state machine for one viewer of one game.

    Only one candidate is open at a time. The candidate belongs to the
    session until it is committed or cancelled; the shared EventLog is only
    touched after the store confirms a write.
    """

    def __init__(
        self,
        game_id: str,
        log: EventLog,
        clock: PlaybackClock,
        store: StatsStore,
        can_edit: Callable[[], bool],
        confirm: ConfirmGate,
        diagnostics: DiagnosticSink | None = None,
        retime_tolerance: float = DEFAULT_RETIME_TOLERANCE,
    ):
        """Initialize the session and start following the clock.

        Args:
            game_id: Game the candidates are recorded against
            log: The game's committed stats
            clock: Playback clock of the game video
            store: Stats store used for create/update/delete
            can_edit: Returns whether the current user may edit; read on every
                mutating call
            confirm: Asks the user to confirm a delete
            diagnostics: Sink for recovered store failures
            retime_tolerance: Seconds of candidate/clock divergence tolerated
                before the clock is re-seeked
        """
        self.game_id = game_id
        self.log = log
        self.clock = clock
        self.store = store
        self.can_edit = can_edit
        self.confirm = confirm
        self.diagnostics = diagnostics or LoggingDiagnosticSink()
        self.retime_tolerance = retime_tolerance

        self.status = EditorStatus.IDLE
        self.candidate: Stat | None = None

        self._closed = False
        self._seeking = False
        self._unsubscribe = clock.subscribe(self.live_retime)

    def _require(self, *allowed: EditorStatus) -> None:
        if self._closed:
            raise InvalidTransition("Session is closed")
        if self.status not in allowed:
            raise InvalidTransition(f"Not allowed while {self.status.value}")

    def _discard_candidate(self) -> None:
        self.candidate = None
        self.status = EditorStatus.IDLE

    # -- candidate lifecycle ---------------------------------------------------

    def begin_edit(self, participant_id: str, kind: StatKind | None = None) -> Stat | None:
        """Pause the video and open a candidate stat at the current time.

        Does nothing (returns None) for users who may not edit, and while a
        previous candidate is still being committed. An already open
        candidate is replaced.
        """
        if self._closed:
            raise InvalidTransition("Session is closed")
        if not self.can_edit():
            return None
        if self.status == EditorStatus.COMMITTING:
            logger.warning(f"Ignoring edit for {participant_id}: commit in flight")
            return None
        if self.status == EditorStatus.EDITING:
            logger.info(f"Replacing open candidate for {self.candidate.participant_id}")

        timestamp = self.clock.current_time
        self.clock.pause()
        self.candidate = Stat(
            game_id=self.game_id,
            participant_id=participant_id,
            kind=kind,
            timestamp=timestamp,
        )
        self.status = EditorStatus.EDITING
        return self.candidate

    def choose_kind(self, kind: StatKind) -> None:
        self._require(EditorStatus.EDITING)
        self.candidate.kind = kind

    def adjust_time(self, delta: float) -> float:
        """Nudge the candidate's time by ``delta`` seconds.

        The result is not clamped; a negative time is kept as-is and simply
        not mirrored to the clock.

        Returns:
            The candidate's new timestamp
        """
        self._require(EditorStatus.EDITING)
        self.candidate.timestamp += delta
        self._push_to_clock()
        return self.candidate.timestamp

    def live_retime(self, seconds: float) -> None:
        """Clock listener: the open candidate follows the playback position."""
        if self._closed or self._seeking or self.status != EditorStatus.EDITING:
            return
        self.candidate.timestamp = seconds

    def _push_to_clock(self) -> None:
        timestamp = self.candidate.timestamp
        if timestamp < 0:
            return
        if abs(timestamp - self.clock.current_time) <= self.retime_tolerance:
            return
        # Stay paused while editing: resume=False. Our own seek echoes back
        # through the clock; don't let it rewrite the candidate.
        self._seeking = True
        try:
            self.clock.seek(timestamp, resume=False)
        finally:
            self._seeking = False

    def cancel(self) -> None:
        """Discard the open candidate without touching the store."""
        self._require(EditorStatus.EDITING)
        self._discard_candidate()

    async def commit(self) -> Stat | None:
        """Write the candidate through the store, then into the log.

        A store failure is reported to the diagnostic sink and the candidate
        is dropped either way; the session always ends up idle.

        Returns:
            The committed stat with its new id, or None if the store failed
            or the session was closed meanwhile
        """
        self._require(EditorStatus.EDITING)
        if self.candidate.kind is None:
            raise InvalidTransition("Choose a stat kind before committing")

        candidate = self.candidate
        self.status = EditorStatus.COMMITTING
        created: Stat | None = None
        try:
            created = await self.store.create(candidate)
        except PersistenceFailure as e:
            if not self._closed:
                self.diagnostics.report("commit", e)
        finally:
            self._discard_candidate()

        if created is None:
            return None
        if self._closed:
            logger.info(f"Session closed during commit; not recording stat {created.id}")
            return None

        self.log.insert(created)
        logger.info(f"Committed {created.kind.value} for {created.participant_id} at {created.timestamp:.1f}s")
        return created

    # -- committed stats -------------------------------------------------------

    def _require_capability(self, action: str) -> None:
        if self._closed:
            raise InvalidTransition("Session is closed")
        if not self.can_edit():
            raise CapabilityDenied(f"Not allowed to {action} stats")

    async def delete_committed(self, stat_id) -> DeleteResult:
        """Delete a committed stat after the user confirms.

        Independent of the candidate lifecycle.

        Raises:
            CapabilityDenied: If the current user may not edit
            NotFound: If the stat is not in the log
        """
        self._require_capability("delete")
        stat = self.log.get(stat_id)

        if not await self.confirm(stat):
            return DeleteResult.DECLINED

        try:
            await self.store.delete(stat_id)
        except PersistenceFailure as e:
            self.diagnostics.report("delete", e)
            return DeleteResult.FAILED

        if not self._closed:
            self.log.remove(stat_id)
            logger.info(f"Deleted stat {stat_id}")
        return DeleteResult.DELETED

    async def correct_time(self, stat_id, timestamp: float) -> Stat | None:
        """Move a committed stat to a new time.

        Raises:
            CapabilityDenied: If the current user may not edit
            NotFound: If the stat is not in the log

        Returns:
            The updated stat, or None if the store rejected the change
        """
        self._require_capability("correct")
        self.log.get(stat_id)

        try:
            updated = await self.store.update(stat_id, timestamp=timestamp)
        except PersistenceFailure as e:
            self.diagnostics.report("correct", e)
            return None

        if self._closed:
            return None
        return self.log.update(stat_id, timestamp=updated.timestamp)

    def close(self) -> None:
        """Stop following the clock and drop any open candidate.

        A commit still in flight finishes against the store but its result
        is not applied here.
        """
        self._closed = True
        self._unsubscribe()
        self._discard_candidate()
