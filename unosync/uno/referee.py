"""
UNO call refereeing.

A player who gets down to one card is vulnerable until they call UNO
themselves. While vulnerable, any other player may call them out and they
draw a penalty. The checks here read the hand size as well as the flag, so a
call that arrives after the target's hand changed fails cleanly instead of
penalizing them twice.
"""

import random
from dataclasses import replace
from typing import Optional

from unosync.uno.piles import deal_to_player
from unosync.uno.results import ErrorKind, Failure, Result
from unosync.uno.state import GameState


def refresh_vulnerability(before: GameState, after: GameState) -> GameState:
    """
    Recompute ``vulnerable_player`` after a transition changed hand sizes.

    A player whose hand went down to exactly one card becomes vulnerable.
    Otherwise the previous vulnerable player stays flagged only while they
    still hold exactly one card. A finished game has nobody vulnerable.
    """
    if after.is_over:
        vulnerable = None
    else:
        vulnerable = after.vulnerable_player
        if vulnerable is not None:
            player = after.get_player(vulnerable)
            if player is None or player.card_count != 1:
                vulnerable = None

        previous_sizes = {p.id: p.card_count for p in before.players}
        for player in after.players:
            if player.card_count == 1 and previous_sizes.get(player.id) != 1:
                vulnerable = player.id

    if vulnerable == after.vulnerable_player:
        return after
    return replace(after, vulnerable_player=vulnerable)


def call_penalty(
    state: GameState,
    target_id: str,
    caller_id: str,
    rng: Optional[random.Random] = None,
) -> Result:
    """
    Call out a vulnerable player who has not declared UNO.

    Args:
        state: Current game state
        target_id: ID of the player being called out
        caller_id: ID of the player making the call
        rng: Random source for a reshuffle, if one is needed

    Returns:
        New state with the penalty dealt, or Failure(INVALID_CALL)
    """
    if state.is_over:
        return Failure(ErrorKind.INVALID_CALL, "Game is already over")
    if state.vulnerable_player != target_id:
        return Failure(ErrorKind.INVALID_CALL, f"{target_id} is not vulnerable")

    target_index = state.player_index(target_id)
    if target_index is None or state.players[target_index].card_count != 1:
        return Failure(ErrorKind.INVALID_CALL, f"{target_id} does not hold one card")
    if caller_id == target_id or state.player_index(caller_id) is None:
        return Failure(ErrorKind.INVALID_CALL, f"{caller_id} cannot call out {target_id}")

    new_state = deal_to_player(state, target_index, state.rules.uno_penalty_cards, rng)
    return replace(new_state, vulnerable_player=None)


def call_self(state: GameState, player_id: str) -> Result:
    """
    Declare UNO on yourself, clearing vulnerability with no penalty.

    Returns:
        New state, or Failure(INVALID_CALL) if the player is not vulnerable
    """
    if state.is_over or state.vulnerable_player != player_id:
        return Failure(ErrorKind.INVALID_CALL, f"{player_id} has nothing to declare")
    return replace(state, vulnerable_player=None)
