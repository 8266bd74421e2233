"""
Card legality checks for UNO.
"""

from typing import Any, Iterable, List, Optional, Tuple

from unosync.common.card import Card, Color, Rank, parse_color
from unosync.uno.results import ErrorKind, Failure
from unosync.uno.state import GameState


def is_legal(card: Card, top_card: Card, current_color: Optional[Color]) -> bool:
    """
    Check whether a card may be played on the current top card.

    Wild cards are always legal. Any other card must match the current
    color or the rank of the top card.
    """
    if card.is_wild:
        return True
    return card.color == current_color or card.rank == top_card.rank


def can_play_wild_draw_four(
    hand: Iterable[Card], current_color: Optional[Color]
) -> bool:
    """
    Check the hand-level precondition for a wild draw four.

    The card may only be played when the rest of the hand holds no
    non-wild card of the current color. Pass the hand without the wild
    draw four being played.
    """
    return not any(
        not card.is_wild and card.color == current_color for card in hand
    )


def hand_without(hand: Iterable[Card], card: Card) -> List[Card]:
    """Return the hand with one copy of ``card`` removed."""
    rest = list(hand)
    for i, held in enumerate(rest):
        if held.matches(card):
            del rest[i]
            break
    return rest


def is_playable(card: Card, hand: Iterable[Card], state: GameState) -> bool:
    """
    Check a card against both the top card and, for a wild draw four, the
    rest of ``hand``.
    """
    if not is_legal(card, state.top_card, state.current_color):
        return False
    if card.rank == Rank.WILD_DRAW_FOUR:
        return can_play_wild_draw_four(hand, state.current_color)
    return True


def playable_cards(state: GameState, player_id: str) -> List[Card]:
    """
    List the distinct cards in a player's hand that can be played now.

    Empty when it is not the player's turn, the game is over, or the
    player is deciding on a drawn card.
    """
    player = state.get_player(player_id)
    if (
        player is None
        or state.is_over
        or state.pending_draw is not None
        or state.current_player.id != player_id
    ):
        return []

    playable = []
    for card in player.hand:
        if card in playable:
            continue
        if is_playable(card, hand_without(player.hand, card), state):
            playable.append(card)
    return playable


def check_turn(state: GameState, player_id: str) -> Optional[Failure]:
    """Refuse actions after the game ends or out of turn."""
    if state.is_over:
        return Failure(ErrorKind.GAME_OVER, "Game is already over")
    current = state.current_player
    if current is None or current.id != player_id:
        return Failure(ErrorKind.NOT_YOUR_TURN, f"It is not {player_id}'s turn")
    return None


def check_chosen_color(
    card: Card, chosen_color: Any
) -> Tuple[Optional[Color], Optional[Failure]]:
    """
    Validate the color named for a card.

    Wild cards need one of the four colors; for other cards the choice is
    ignored.

    Returns:
        (color, None) on success or (None, failure)
    """
    if not card.is_wild:
        return None, None
    if chosen_color is None:
        return None, Failure(ErrorKind.COLOR_REQUIRED, "Must choose a color for a wild card")
    try:
        return parse_color(chosen_color), None
    except ValueError:
        return None, Failure(ErrorKind.INVALID_COLOR, f"Invalid color choice: {chosen_color!r}")
