"""
Draw and discard pile operations shared by the UNO transitions.
"""

import random
from dataclasses import replace
from typing import Optional

from unosync.common.deck import shuffle_cards
from unosync.uno.state import GameState


def reshuffle_discard_pile(
    state: GameState, rng: Optional[random.Random] = None
) -> GameState:
    """
    Shuffle the discard pile, except its top card, under the draw pile.

    Wild cards lose the color they were showing. Returns the state
    unchanged when the discard pile holds only its top card.
    """
    if len(state.discard_pile) <= 1:
        return state

    recycled = [card.with_color(None) for card in state.discard_pile[:-1]]
    shuffled = tuple(shuffle_cards(recycled, rng))
    return replace(
        state,
        draw_pile=shuffled + state.draw_pile,
        discard_pile=state.discard_pile[-1:],
    )


def deal_to_player(
    state: GameState,
    player_index: int,
    count: int,
    rng: Optional[random.Random] = None,
) -> GameState:
    """
    Move up to ``count`` cards from the draw pile into a player's hand.

    Reshuffles the discard pile first when fewer than ``count`` cards are
    left to draw. The player receives min(count, available) cards.
    """
    if count <= 0:
        return state
    if len(state.draw_pile) < count:
        state = reshuffle_discard_pile(state, rng)

    dealt = min(count, len(state.draw_pile))
    if dealt == 0:
        return state

    split = len(state.draw_pile) - dealt
    drawn = tuple(reversed(state.draw_pile[split:]))
    player = state.players[player_index]
    state = replace(state, draw_pile=state.draw_pile[:split])
    return state.with_player(player_index, replace(player, hand=player.hand + drawn))
