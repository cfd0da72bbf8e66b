"""Tests for participant -> side resolution."""

import pytest

from courtstats.errors import RosterConflict
from courtstats.models.game import Roster, Side
from courtstats.services.role_resolver import resolve


def test_disjoint_rosters_map_eight_participants(home_roster, away_roster):
    role_map = resolve(home_roster, away_roster)
    assert len(role_map) == 8
    assert role_map["h1"] == Side.HOME
    assert role_map.side_of("a4") == Side.AWAY


def test_shared_participant_raises(home_roster):
    away = Roster(id="team-away", name="Away", slots=["a1", "h2", "a3", "a4"])
    with pytest.raises(RosterConflict) as exc:
        resolve(home_roster, away)
    assert exc.value.participant_ids == {"h2"}


def test_unknown_participant_unmapped(home_roster, away_roster):
    role_map = resolve(home_roster, away_roster)
    assert role_map.side_of("stranger") is None
    assert "stranger" not in role_map


def test_empty_slots_are_skipped():
    home = Roster(id="h", name="Home", slots=["h1", None, "h3", None])
    away = Roster(id="a", name="Away", slots=[None, None, None, "a4"])
    role_map = resolve(home, away)
    assert set(role_map) == {"h1", "h3", "a4"}


def test_duplicate_within_roster_rejected():
    with pytest.raises(RosterConflict):
        Roster(id="h", name="Home", slots=["h1", "h1", "h3", "h4"])


def test_duplicate_slot_after_construction_raises(home_roster, away_roster):
    home_roster.slots[1] = "h1"
    with pytest.raises(RosterConflict) as exc:
        resolve(home_roster, away_roster)
    assert exc.value.participant_ids == {"h1"}


def test_roster_needs_four_slots():
    with pytest.raises(ValueError):
        Roster(id="h", name="Home", slots=["h1", "h2"])


def test_rebuilt_after_roster_change(home_roster, away_roster):
    before = resolve(home_roster, away_roster)
    home_roster.slots[0] = "h9"
    after = resolve(home_roster, away_roster)
    assert "h1" in before and "h1" not in after
    assert after["h9"] == Side.HOME
