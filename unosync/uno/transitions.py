"""
State transition functions for UNO.

This module provides pure functions for transitioning between game states,
without modifying the original state objects. Every transition returns either
a new GameState or a Failure describing why the action was refused; the input
state is never changed, so a refused action is always safe to retry.
"""

import random
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence, Union

from unosync.common.card import Card, Rank
from unosync.common.deck import Deck
from unosync.uno import limbo, referee
from unosync.uno.effects import resolve_play
from unosync.uno.results import ErrorKind, Failure, Result
from unosync.uno.rules import (
    can_play_wild_draw_four,
    check_chosen_color,
    check_turn,
    hand_without,
    is_legal,
    playable_cards,
)
from unosync.uno.state import GameState, PlayerState, UnoRules
from unosync.uno.turns import active_count, advance


class StateTransitionEngine:
    """
    Pure functions for state transitions in UNO.

    This class contains static methods that implement game state transitions.
    Each method takes a state and returns a new state, without modifying the
    original. Rule violations come back as Failure values rather than
    exceptions.

    The methods assume the caller runs at most one transition per game at a
    time and stores each result before starting the next.
    """

    @staticmethod
    def create_game_state(
        player_ids: Sequence[str],
        rules: Optional[UnoRules] = None,
        rng: Optional[random.Random] = None,
    ) -> Result:
        """
        Create a new game with a shuffled deck and dealt hands.

        Args:
            player_ids: IDs of the players in seating order
            rules: Rules for the new game (defaults if None)
            rng: Random source for shuffling

        Returns:
            New game state with the first player to act at seat 0, or a Failure
        """
        game_rules = rules or UnoRules()
        ids = list(player_ids or [])

        if not game_rules.min_players <= len(ids) <= game_rules.max_players:
            return Failure(
                ErrorKind.INVALID_PLAYER_COUNT,
                f"Game requires {game_rules.min_players}-{game_rules.max_players} "
                f"players, got {len(ids)}",
            )
        if len(set(ids)) != len(ids):
            return Failure(ErrorKind.DUPLICATE_PLAYER, "Player IDs must be unique")

        deck = Deck(rng=rng).shuffle()
        hands = deck.deal_hands(ids, game_rules.hand_size)
        opening_card = deck.draw_opening_card()

        return GameState(
            players=tuple(
                PlayerState(id=player_id, hand=hand)
                for player_id, hand in zip(ids, hands)
            ),
            draw_pile=tuple(deck.cards),
            discard_pile=(opening_card,),
            current_player_index=0,
            direction=1,
            current_color=opening_card.color,
            rules=game_rules,
        )

    @staticmethod
    def play_card(
        state: GameState,
        player_id: str,
        card: Union[Card, Dict[str, Any]],
        chosen_color: Any = None,
        rng: Optional[random.Random] = None,
    ) -> Result:
        """
        Play a card from the current player's hand.

        Args:
            state: Current game state
            player_id: ID of the player making the move
            card: The card to play, as a Card or plain card data
            chosen_color: Color named for a wild card
            rng: Random source for a reshuffle, if one is needed

        Returns:
            New game state, or a Failure
        """
        failure = check_turn(state, player_id)
        if failure is not None:
            return failure
        if state.pending_draw is not None:
            return Failure(
                ErrorKind.PENDING_DRAW_BLOCKS,
                "Play or keep the card you drew before playing from your hand",
            )

        if isinstance(card, dict):
            try:
                card = Card.from_dict(card)
            except ValueError as e:
                return Failure(ErrorKind.CARD_NOT_IN_HAND, str(e))
        if not isinstance(card, Card):
            return Failure(ErrorKind.CARD_NOT_IN_HAND, f"Not a card: {card!r}")

        player = state.players[state.current_player_index]
        held = next((c for c in player.hand if c.matches(card)), None)
        if held is None:
            return Failure(ErrorKind.CARD_NOT_IN_HAND, f"{card} is not in your hand")

        if not is_legal(held, state.top_card, state.current_color):
            return Failure(
                ErrorKind.ILLEGAL_MOVE, f"{held} cannot be played on {state.top_card}"
            )
        if held.rank == Rank.WILD_DRAW_FOUR and not can_play_wild_draw_four(
            hand_without(player.hand, held), state.current_color
        ):
            return Failure(
                ErrorKind.ILLEGAL_MOVE,
                f"Wild Draw Four needs a hand with no {state.current_color} cards",
            )

        color, failure = check_chosen_color(held, chosen_color)
        if failure is not None:
            return failure

        return resolve_play(state, state.current_player_index, held, color, rng)

    @staticmethod
    def draw_card(
        state: GameState, player_id: str, rng: Optional[random.Random] = None
    ) -> Result:
        """
        Draw a card for the current player.

        A playable card is held in limbo until play_drawn_card or
        pass_drawn_card; any other card joins the hand and ends the turn.
        """
        return limbo.draw_card(state, player_id, rng)

    @staticmethod
    def play_drawn_card(
        state: GameState,
        player_id: str,
        chosen_color: Any = None,
        rng: Optional[random.Random] = None,
    ) -> Result:
        """Play the card held in limbo."""
        return limbo.play_drawn_card(state, player_id, chosen_color, rng)

    @staticmethod
    def pass_drawn_card(state: GameState, player_id: str) -> Result:
        """Keep the card held in limbo and end the turn."""
        return limbo.pass_drawn_card(state, player_id)

    @staticmethod
    def call_penalty(
        state: GameState,
        target_id: str,
        caller_id: str,
        rng: Optional[random.Random] = None,
    ) -> Result:
        """Call out a player at one card who has not declared UNO."""
        return referee.call_penalty(state, target_id, caller_id, rng)

    @staticmethod
    def call_self(state: GameState, player_id: str) -> Result:
        """Declare UNO on yourself."""
        return referee.call_self(state, player_id)

    @staticmethod
    def deactivate_player(state: GameState, player_id: str) -> Result:
        """
        Mark a player as disconnected.

        The player keeps their seat and hand but is skipped by turn order. A
        card they were deciding on goes into their hand. If it was their turn
        the turn moves on; if the rules say so and at most one active player
        remains, the game ends with that player as winner.

        Args:
            state: Current game state
            player_id: ID of the disconnecting player

        Returns:
            New game state, or Failure(UNKNOWN_PLAYER)
        """
        index = state.player_index(player_id)
        if index is None:
            return Failure(ErrorKind.UNKNOWN_PLAYER, f"{player_id} is not seated")

        player = state.players[index]
        if not player.active:
            return state

        before = state
        hand = player.hand
        if state.pending_draw is not None and state.pending_draw.owner_id == player_id:
            hand = hand + (state.pending_draw.card,)
            state = replace(state, pending_draw=None)
        state = state.with_player(index, replace(player, hand=hand, active=False))

        if state.is_over:
            return state

        if state.current_player_index == index:
            state = replace(state, current_player_index=advance(state, 1))

        remaining = state.active_players
        if state.rules.end_when_one_active and len(remaining) <= 1:
            state = replace(
                state,
                is_over=True,
                winner=remaining[0].id if remaining else None,
            )

        return referee.refresh_vulnerability(before, state)

    @staticmethod
    def reactivate_player(state: GameState, player_id: str) -> Result:
        """
        Mark a disconnected player as active again.

        Returns:
            New game state, or a Failure
        """
        index = state.player_index(player_id)
        if index is None:
            return Failure(ErrorKind.UNKNOWN_PLAYER, f"{player_id} is not seated")
        if state.is_over:
            return Failure(ErrorKind.GAME_OVER, "Game is already over")

        player = state.players[index]
        if player.active:
            return state

        state = state.with_player(index, replace(player, active=True))
        if active_count(state.players) == 1:
            # Everyone else is gone, so the returning player holds the turn
            state = replace(state, current_player_index=index)
        return state

    @staticmethod
    def get_valid_actions(state: GameState, player_id: str) -> Dict[str, Any]:
        """
        Describe what a player may do right now.

        Args:
            state: Current game state
            player_id: ID of the player

        Returns:
            Mapping of action name to details; empty when the player can do
            nothing
        """
        actions: Dict[str, Any] = {}
        player = state.get_player(player_id)
        if player is None or state.is_over:
            return actions

        current = state.current_player
        if current is not None and current.id == player_id:
            if state.pending_draw is not None:
                actions["PLAY_DRAWN_CARD"] = state.pending_draw.card
                actions["PASS_DRAWN_CARD"] = True
            else:
                cards: List[Card] = playable_cards(state, player_id)
                if cards:
                    actions["PLAY_CARD"] = cards
                actions["DRAW_CARD"] = True

        if state.vulnerable_player == player_id:
            actions["CALL_UNO"] = True
        elif state.vulnerable_player is not None:
            actions["CALL_PENALTY"] = state.vulnerable_player

        return actions
