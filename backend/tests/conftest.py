"""Shared fixtures: a scripted video player and a small two-roster game."""

import pytest

from courtstats.models.game import Game, Roster
from courtstats.models.stat import Stat, StatKind


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakePlayer:
    """Video player double whose position and duration tests set directly."""

    def __init__(self, current_time: float = 0.0, duration: float | None = None):
        self.current_time = current_time
        self.duration = duration
        self.playing = False
        self.seeks: list[tuple[float, bool]] = []

    def get_current_time(self) -> float:
        return self.current_time

    def get_duration(self) -> float | None:
        return self.duration

    def seek_to(self, seconds: float, resume: bool) -> None:
        self.seeks.append((seconds, resume))
        self.current_time = seconds

    def play(self) -> None:
        self.playing = True

    def pause(self) -> None:
        self.playing = False


@pytest.fixture
def player():
    return FakePlayer()


@pytest.fixture
def home_roster():
    return Roster(id="team-home", name="Home", slots=["h1", "h2", "h3", "h4"])


@pytest.fixture
def away_roster():
    return Roster(id="team-away", name="Away", slots=["a1", "a2", "a3", "a4"])


@pytest.fixture
def game(home_roster, away_roster):
    """Game with 1P home @10, 2P away @20, 1P home @30."""
    return Game(
        id="g1",
        home=home_roster,
        away=away_roster,
        video_url="abc123",
        stats=[
            Stat(id=1, game_id="g1", participant_id="h1", kind=StatKind.ONE_POINT, timestamp=10.0),
            Stat(id=2, game_id="g1", participant_id="a2", kind=StatKind.TWO_POINT, timestamp=20.0),
            Stat(id=3, game_id="g1", participant_id="h3", kind=StatKind.ONE_POINT, timestamp=30.0),
        ],
    )
