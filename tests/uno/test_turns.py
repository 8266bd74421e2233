"""
Tests for turn sequencing.
"""

from unosync.uno.state import PlayerState
from unosync.uno.turns import active_count, advance, next_index


def seats(*active):
    return tuple(PlayerState(id=f"p{i}", active=flag) for i, flag in enumerate(active))


def test_active_count():
    assert active_count(seats(True, False, True)) == 2
    assert active_count(seats(False, False)) == 0


def test_next_index_wraps_forward():
    players = seats(True, True, True)
    assert next_index(players, 0, 1) == 1
    assert next_index(players, 2, 1) == 0


def test_next_index_wraps_backward():
    players = seats(True, True, True)
    assert next_index(players, 0, -1) == 2
    assert next_index(players, 1, -1) == 0


def test_next_index_steps_over_inactive_seats():
    players = seats(True, False, True, True)
    assert next_index(players, 0, 1) == 2
    assert next_index(players, 2, -1) == 0
    assert next_index(players, 0, 1, steps=2) == 3


def test_skip_counts_only_active_players():
    # Scenario: A, B(inactive), C, D; a skip from A lands on D
    players = seats(True, False, True, True)
    assert next_index(players, 0, 1, steps=2) == 3


def test_single_active_player_gets_turn_back():
    players = seats(False, True, False)
    assert next_index(players, 1, 1) == 1
    assert next_index(players, 1, -1, steps=2) == 1


def test_single_active_player_reached_from_inactive_seat():
    players = seats(False, True, False)
    assert next_index(players, 0, 1) == 1
    assert next_index(players, 2, 1) == 1


def test_no_active_players_returns_current():
    assert next_index(seats(False, False, False), 1, 1) == 1


def test_advance_uses_state_direction(make_state):
    state = make_state({"a": [], "b": [], "c": []}, current=1, direction=-1)
    assert advance(state) == 0
    assert advance(state, 2) == 2
