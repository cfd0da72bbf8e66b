"""Exceptions raised by the stat log, roster resolution and editing session."""

from typing import Any


class CourtStatsError(Exception):
    """Base class for all courtstats errors."""


class DuplicateId(CourtStatsError):
    """A stat with the same id is already in the log."""

    def __init__(self, stat_id: Any):
        super().__init__(f"Stat {stat_id!r} already exists")
        self.stat_id = stat_id


class NotFound(CourtStatsError):
    """No stat with the given id is in the log."""

    def __init__(self, stat_id: Any):
        super().__init__(f"Stat {stat_id!r} not found")
        self.stat_id = stat_id


class RosterConflict(CourtStatsError):
    """A participant appears twice across (or within) a game's rosters."""

    def __init__(self, participant_ids: set):
        ids = ", ".join(sorted(str(p) for p in participant_ids))
        super().__init__(f"Participants assigned more than once: {ids}")
        self.participant_ids = participant_ids


class PersistenceFailure(CourtStatsError):
    """The stats store rejected or could not complete an operation.

    ``payload`` carries whatever the store reported (response body,
    underlying exception, ...) without interpretation.
    """

    def __init__(self, operation: str, payload: Any = None, status_code: int | None = None):
        super().__init__(f"Stats store {operation} failed: {payload}")
        self.operation = operation
        self.payload = payload
        self.status_code = status_code  # HTTP-style status when the store reports one


class CapabilityDenied(CourtStatsError):
    """The current user may not edit stats."""


class InvalidTransition(CourtStatsError):
    """An editor operation was invoked in a state that does not allow it."""
