"""
Card effects for UNO.

``resolve_play`` is the single path by which a card reaches the discard
pile: it moves the card, checks for a win, applies the card's effect and
then settles UNO vulnerability. The effect runs even on a winning play, so
a final draw two or wild draw four still delivers its cards and the current
color always agrees with the visible top card.
"""

import random
from dataclasses import replace
from typing import Optional

from unosync.common.card import Card, Color, Rank
from unosync.uno.constants import (
    DRAW_TWO_PENALTY,
    REVERSE_SKIP_SEATED,
    WILD_DRAW_FOUR_PENALTY,
)
from unosync.uno.piles import deal_to_player
from unosync.uno.referee import refresh_vulnerability
from unosync.uno.rules import hand_without
from unosync.uno.state import GameState
from unosync.uno.turns import active_count, advance

PENALTIES = {
    Rank.DRAW_TWO: DRAW_TWO_PENALTY,
    Rank.WILD_DRAW_FOUR: WILD_DRAW_FOUR_PENALTY,
}

# Ranks that end the turn by jumping over the next player
SKIPPING_RANKS = (Rank.SKIP, Rank.DRAW_TWO, Rank.WILD_DRAW_FOUR)


def reverse_acts_as_skip(state: GameState) -> bool:
    """Check whether a reverse should hand the turn straight back."""
    if state.rules.reverse_skip_basis == REVERSE_SKIP_SEATED:
        return len(state.players) == 2
    return active_count(state.players) == 2


def turn_steps(state: GameState, card: Card) -> int:
    """Number of active players the turn moves past after ``card``."""
    if card.rank in SKIPPING_RANKS:
        return 2
    if card.rank == Rank.REVERSE:
        return 2 if reverse_acts_as_skip(state) else 1
    return 1


def apply_card_effect(
    state: GameState,
    card: Card,
    chosen_color: Optional[Color] = None,
    rng: Optional[random.Random] = None,
) -> GameState:
    """
    Apply the effect of a card that is already on the discard pile.

    Updates the current color, flips direction for a reverse, deals penalty
    cards to the next active player and, unless the game just ended,
    advances the turn.

    Args:
        state: State with the card already discarded
        card: The card that was played
        chosen_color: Color named for a wild card
        rng: Random source for a reshuffle, if one is needed

    Returns:
        New game state
    """
    color = chosen_color if card.is_wild else card.color
    state = replace(state, current_color=color)

    if card.rank == Rank.REVERSE:
        state = replace(state, direction=-state.direction)

    penalty = PENALTIES.get(card.rank, 0)
    if penalty:
        state = deal_to_player(state, advance(state, 1), penalty, rng)

    if state.is_over:
        return state

    return replace(state, current_player_index=advance(state, turn_steps(state, card)))


def resolve_play(
    state: GameState,
    player_index: int,
    card: Card,
    chosen_color: Optional[Color] = None,
    rng: Optional[random.Random] = None,
    from_hand: bool = True,
) -> GameState:
    """
    Discard an already validated card and resolve everything that follows.

    Args:
        state: Current game state
        player_index: Seat of the player making the play
        card: The card being played
        chosen_color: Color named for a wild card
        rng: Random source for a reshuffle, if one is needed
        from_hand: False when the card is a pending drawn card rather than
            one held in the hand

    Returns:
        New game state
    """
    before = state
    player = state.players[player_index]

    hand = tuple(hand_without(player.hand, card)) if from_hand else player.hand
    state = state.with_player(player_index, replace(player, hand=hand))

    shown = card.with_color(chosen_color) if card.is_wild else card
    state = replace(
        state,
        discard_pile=state.discard_pile + (shown,),
        pending_draw=None,
    )

    if not hand:
        state = replace(state, is_over=True, winner=player.id)

    state = apply_card_effect(state, card, chosen_color, rng)
    return refresh_vulnerability(before, state)
