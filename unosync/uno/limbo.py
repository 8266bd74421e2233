"""
Draw-then-decide ("limbo") handling for UNO.

Drawing a card that could be played leaves the turn open: the card is held
in ``pending_draw`` instead of the hand until its owner either plays it or
keeps it. A drawn card that cannot be played goes straight into the hand
and ends the turn. While a drawn card is pending, its owner may not play a
different card from their hand.
"""

import random
from dataclasses import replace
from typing import Any, Optional

from unosync.common.card import Rank
from unosync.uno.effects import resolve_play
from unosync.uno.piles import reshuffle_discard_pile
from unosync.uno.referee import refresh_vulnerability
from unosync.uno.results import ErrorKind, Failure, Result
from unosync.uno.rules import (
    can_play_wild_draw_four,
    check_chosen_color,
    check_turn,
    is_legal,
    is_playable,
)
from unosync.uno.state import GameState, PendingDraw
from unosync.uno.turns import advance


def draw_card(
    state: GameState, player_id: str, rng: Optional[random.Random] = None
) -> Result:
    """
    Draw one card for the current player.

    Args:
        state: Current game state
        player_id: ID of the player drawing
        rng: Random source for a reshuffle, if one is needed

    Returns:
        New state in limbo (playable card) or with the card in hand and the
        turn advanced, or a Failure
    """
    failure = check_turn(state, player_id)
    if failure is not None:
        return failure
    if state.pending_draw is not None:
        return Failure(
            ErrorKind.PENDING_DRAW_BLOCKS, "Play or keep the card you already drew"
        )

    if not state.draw_pile:
        state = reshuffle_discard_pile(state, rng)
    if not state.draw_pile:
        return Failure(ErrorKind.NO_CARDS_AVAILABLE, "No cards available to draw")

    card = state.draw_pile[-1]
    state = replace(state, draw_pile=state.draw_pile[:-1])
    index = state.current_player_index
    player = state.players[index]

    if is_playable(card, player.hand, state):
        return replace(state, pending_draw=PendingDraw(card, player_id))

    before = state
    state = state.with_player(index, replace(player, hand=player.hand + (card,)))
    state = replace(state, current_player_index=advance(state, 1))
    return refresh_vulnerability(before, state)


def _check_pending(state: GameState, player_id: str) -> Optional[Failure]:
    failure = check_turn(state, player_id)
    if failure is not None:
        return failure
    if state.pending_draw is None or state.pending_draw.owner_id != player_id:
        return Failure(ErrorKind.NO_PENDING_DRAW, f"{player_id} has no drawn card pending")
    return None


def play_drawn_card(
    state: GameState,
    player_id: str,
    chosen_color: Any = None,
    rng: Optional[random.Random] = None,
) -> Result:
    """
    Play the card held in limbo.

    Legality and the wild color are checked again before the card is
    resolved exactly like a card played from the hand.
    """
    failure = _check_pending(state, player_id)
    if failure is not None:
        return failure

    card = state.pending_draw.card
    player = state.players[state.current_player_index]
    if not is_legal(card, state.top_card, state.current_color):
        return Failure(ErrorKind.ILLEGAL_MOVE, f"{card} cannot be played on {state.top_card}")
    if card.rank == Rank.WILD_DRAW_FOUR and not can_play_wild_draw_four(
        player.hand, state.current_color
    ):
        return Failure(
            ErrorKind.ILLEGAL_MOVE,
            f"Wild Draw Four needs a hand with no {state.current_color} cards",
        )

    color, failure = check_chosen_color(card, chosen_color)
    if failure is not None:
        return failure

    return resolve_play(
        state, state.current_player_index, card, color, rng, from_hand=False
    )


def pass_drawn_card(state: GameState, player_id: str) -> Result:
    """
    Keep the card held in limbo and end the turn.
    """
    failure = _check_pending(state, player_id)
    if failure is not None:
        return failure

    index = state.current_player_index
    player = state.players[index]
    before = state
    state = state.with_player(
        index, replace(player, hand=player.hand + (state.pending_draw.card,))
    )
    state = replace(state, pending_draw=None, current_player_index=advance(state, 1))
    return refresh_vulnerability(before, state)
