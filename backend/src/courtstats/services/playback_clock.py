"""Playback clock over an external video player.

The clock is the authoritative "current time" of a game view. It turns the
player's state-change notifications into a bounded-rate stream of position
updates for subscribers (score display, open stat candidate).
"""

import asyncio
import logging
from enum import IntEnum
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

PositionListener = Callable[[float], None]


class PlaybackState(IntEnum):
    """Player states as reported by the embedded video player."""

    UNSTARTED = -1
    ENDED = 0
    PLAYING = 1
    PAUSED = 2
    BUFFERING = 3
    CUED = 5


class MediaPlayer(Protocol):
    """Transport controls of the external video player."""

    def get_current_time(self) -> float: ...

    def get_duration(self) -> float | None: ...

    def seek_to(self, seconds: float, resume: bool) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...


class PlaybackClock:
    """Wraps a MediaPlayer and publishes its position while it plays."""

    def __init__(
        self,
        player: MediaPlayer,
        poll_interval: float = 0.1,
        duration_retry_interval: float = 0.1,
    ):
        """Initialize the clock.

        Args:
            player: The external player to observe and drive
            poll_interval: Seconds between position updates while playing
            duration_retry_interval: Seconds between duration lookups until
                the player reports a positive duration
        """
        self.player = player
        self.poll_interval = poll_interval
        self.duration_retry_interval = duration_retry_interval

        self.duration: float | None = None
        self.is_playing = False
        self.position: float | None = None  # Last published position

        self._listeners: list[PositionListener] = []
        self._poll_task: asyncio.Task | None = None
        self._duration_task: asyncio.Task | None = None
        self._closed = False

    # -- subscriptions -----------------------------------------------------

    def subscribe(self, listener: PositionListener) -> Callable[[], None]:
        """Register a position listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, seconds: float) -> None:
        self.position = seconds
        for listener in list(self._listeners):
            try:
                listener(seconds)
            except Exception:
                logger.exception(f"Position listener failed at {seconds:.2f}s")

    # -- player notifications ----------------------------------------------

    def on_ready(self) -> None:
        """Player finished loading; start resolving the duration."""
        if self._closed or self.duration is not None:
            return
        if self._duration_task is None or self._duration_task.done():
            self._duration_task = asyncio.create_task(self._resolve_duration())

    def on_state_change(self, state: PlaybackState | int) -> None:
        """Player changed state; start or stop position polling."""
        if self._closed:
            return
        self.is_playing = state == PlaybackState.PLAYING
        if self.is_playing:
            if self._poll_task is None or self._poll_task.done():
                self._poll_task = asyncio.create_task(self._poll_position())
        else:
            self._cancel(self._poll_task)
            self._poll_task = None

    async def _resolve_duration(self) -> None:
        # No attempt ceiling: duration may take a while after load, and the
        # loop ends when the clock is closed.
        attempts = 0
        while not self._closed:
            attempts += 1
            try:
                duration = self.player.get_duration()
            except Exception:
                logger.exception(f"Duration lookup failed on attempt {attempts}")
                duration = None
            if duration and duration > 0:
                self.duration = float(duration)
                logger.info(f"Video duration resolved: {self.duration:.1f}s after {attempts} attempt(s)")
                return
            await asyncio.sleep(self.duration_retry_interval)

    async def _poll_position(self) -> None:
        while not self._closed:
            try:
                seconds = self.player.get_current_time()
            except Exception:
                logger.exception("Position read failed; polling continues")
            else:
                self._publish(seconds)
            await asyncio.sleep(self.poll_interval)

    # -- transport -------------------------------------------------------------

    @property
    def current_time(self) -> float:
        """Position read from the player right now."""
        return self.player.get_current_time()

    def refresh(self) -> float:
        """Publish the player's current position outside the polling cadence."""
        seconds = self.current_time
        self._publish(seconds)
        return seconds

    def seek(self, seconds: float, resume: bool = True) -> float:
        """Move the player to ``seconds`` and publish the jump.

        Clamped to [0, duration] once the duration is known; before that the
        target is passed through as-is.

        Returns:
            The position actually sought to
        """
        if self.duration is not None:
            seconds = min(max(seconds, 0.0), self.duration)
        self.player.seek_to(seconds, resume)
        self._publish(seconds)
        return seconds

    def play(self) -> None:
        self.player.play()

    def pause(self) -> None:
        self.player.pause()

    # -- teardown --------------------------------------------------------------

    @staticmethod
    def _cancel(task: asyncio.Task | None) -> None:
        if task and not task.done():
            task.cancel()

    def close(self) -> None:
        """Stop polling and duration lookups and drop all listeners."""
        self._closed = True
        self.is_playing = False
        self._cancel(self._poll_task)
        self._cancel(self._duration_task)
        self._poll_task = None
        self._duration_task = None
        self._listeners.clear()
