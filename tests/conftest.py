"""
Pytest configuration for tests at the root level.

This module contains pytest fixtures and configuration for testing components.
"""

import random

import pytest

from unosync.common.card import Card, Color, Rank
from unosync.events import EventBus
from unosync.uno.state import GameState, PlayerState, UnoRules


# Reset event bus before each test
@pytest.fixture(scope="function", autouse=True)
def reset_event_bus():
    """Reset the event bus singleton before each test."""
    EventBus._instance = None
    yield
    EventBus._instance = None


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def make_state():
    """
    Build a GameState from a mapping of player id to hand.

    The discard pile holds only ``top`` unless ``discard`` is given, and the
    current color defaults to the color of the top discard.
    """

    def _make(
        hands,
        top=Card(Color.RED, Rank.FIVE),
        draw=(),
        discard=None,
        current=0,
        direction=1,
        color=None,
        inactive=(),
        rules=None,
        **changes,
    ):
        players = tuple(
            PlayerState(id=player_id, hand=tuple(hand), active=player_id not in inactive)
            for player_id, hand in hands.items()
        )
        discard_pile = tuple(discard) if discard is not None else (top,)
        return GameState(
            players=players,
            draw_pile=tuple(draw),
            discard_pile=discard_pile,
            current_player_index=current,
            direction=direction,
            current_color=color or discard_pile[-1].color,
            rules=rules or UnoRules(),
            **changes,
        )

    return _make
