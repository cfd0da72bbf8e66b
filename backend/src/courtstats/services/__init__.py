"""Stat log, scoring, playback and editing services."""

from courtstats.services.event_log import EventLog
from courtstats.services.game_viewer import GameViewer
from courtstats.services.playback_clock import MediaPlayer, PlaybackClock, PlaybackState
from courtstats.services.role_resolver import RoleMap, resolve
from courtstats.services.stat_editor import (
    DeleteResult,
    EditorStatus,
    LoggingDiagnosticSink,
    StatEditorSession,
)
from courtstats.services.stats_store import (
    HttpStatsStore,
    InMemoryStatsStore,
    get_stats_store,
)

__all__ = [
    "EventLog",
    "GameViewer",
    "MediaPlayer",
    "PlaybackClock",
    "PlaybackState",
    "RoleMap",
    "resolve",
    "DeleteResult",
    "EditorStatus",
    "LoggingDiagnosticSink",
    "StatEditorSession",
    "HttpStatsStore",
    "InMemoryStatsStore",
    "get_stats_store",
]
