"""
Immutable state models for UNO.

This module provides dataclasses for representing the state of an UNO game
in an immutable manner. These classes are designed to be used with pure
transition functions that create new state instances rather than modifying
existing ones. Collections are tuples, so a transition only rebuilds the
parts it changes and shares everything else with the previous state.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple
import uuid

from unosync.common.card import Card, Color
from unosync.uno.constants import (
    HAND_SIZE,
    MAX_PLAYERS,
    MIN_PLAYERS,
    REVERSE_SKIP_ACTIVE,
    REVERSE_SKIP_BASES,
    UNO_PENALTY,
)


@dataclass(frozen=True)
class PlayerState:
    """
    Immutable representation of a seated player.

    Attributes:
        id: Unique identifier for this player
        hand: Cards in the player's hand (order carries no meaning)
        active: False once the player has disconnected
    """

    id: str
    hand: Tuple[Card, ...] = ()
    active: bool = True

    @property
    def card_count(self) -> int:
        """Get the number of cards in the player's hand."""
        return len(self.hand)


@dataclass(frozen=True)
class PendingDraw:
    """
    A drawn card waiting for its owner to play it or keep it.

    Attributes:
        card: The card that was drawn
        owner_id: ID of the player who drew it
    """

    card: Card
    owner_id: str


@dataclass(frozen=True)
class UnoRules:
    """
    Immutable representation of the rules for an UNO game.

    Attributes:
        hand_size: Cards dealt to each player at the start
        min_players: Fewest players a game can start with
        max_players: Most players a game can start with
        reverse_skip_basis: "active" to make reverse act as skip when exactly
            two connected players remain, "seated" to key off the seat count
        uno_penalty_cards: Cards dealt to a player caught without calling UNO
        end_when_one_active: End the game when disconnections leave at most
            one active player
    """

    hand_size: int = HAND_SIZE
    min_players: int = MIN_PLAYERS
    max_players: int = MAX_PLAYERS
    reverse_skip_basis: str = REVERSE_SKIP_ACTIVE
    uno_penalty_cards: int = UNO_PENALTY
    end_when_one_active: bool = True

    def __post_init__(self):
        if self.reverse_skip_basis not in REVERSE_SKIP_BASES:
            raise ValueError(
                f"reverse_skip_basis must be one of {REVERSE_SKIP_BASES}, "
                f"got {self.reverse_skip_basis!r}"
            )


@dataclass(frozen=True)
class GameState:
    """
    Immutable representation of the UNO game state.

    Attributes:
        id: Unique identifier for this game
        players: Players in fixed seating order
        draw_pile: Face-down cards; the top is the last element
        discard_pile: Face-up cards; the top is the last element
        current_player_index: Seat of the player who should act
        direction: 1 for seating order, -1 for reverse order
        current_color: The color the next card must match
        is_over: Whether the game has finished
        winner: ID of the winning player, if any
        pending_draw: Drawn card awaiting play-or-keep, if any
        vulnerable_player: ID of a player at one card who has not called UNO
        rules: Rules for this game
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    players: Tuple[PlayerState, ...] = ()
    draw_pile: Tuple[Card, ...] = ()
    discard_pile: Tuple[Card, ...] = ()
    current_player_index: int = 0
    direction: int = 1
    current_color: Optional[Color] = None
    is_over: bool = False
    winner: Optional[str] = None
    pending_draw: Optional[PendingDraw] = None
    vulnerable_player: Optional[str] = None
    rules: UnoRules = field(default_factory=UnoRules)

    @property
    def top_card(self) -> Optional[Card]:
        """Get the face-up card on the discard pile."""
        return self.discard_pile[-1] if self.discard_pile else None

    @property
    def current_player(self) -> Optional[PlayerState]:
        """Get the player who should take action now."""
        if 0 <= self.current_player_index < len(self.players):
            return self.players[self.current_player_index]
        return None

    @property
    def active_players(self) -> List[PlayerState]:
        """Get the players still connected."""
        return [p for p in self.players if p.active]

    @property
    def card_total(self) -> int:
        """Count every card in the game, including one held in limbo."""
        total = len(self.draw_pile) + len(self.discard_pile)
        total += sum(len(p.hand) for p in self.players)
        if self.pending_draw is not None:
            total += 1
        return total

    def player_index(self, player_id: str) -> Optional[int]:
        """Get the seat of a player, or None if they are not seated."""
        for i, player in enumerate(self.players):
            if player.id == player_id:
                return i
        return None

    def get_player(self, player_id: str) -> Optional[PlayerState]:
        index = self.player_index(player_id)
        return self.players[index] if index is not None else None

    def with_player(self, index: int, player: PlayerState) -> "GameState":
        """Return a copy of this state with one seat replaced."""
        players = self.players[:index] + (player,) + self.players[index + 1 :]
        return replace(self, players=players)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the full game state, hands included, to plain data.

        This is the form a persistence layer stores; never send it to clients.
        """
        return {
            "id": self.id,
            "players": [
                {
                    "id": p.id,
                    "hand": [card.to_dict() for card in p.hand],
                    "active": p.active,
                }
                for p in self.players
            ],
            "draw_pile": [card.to_dict() for card in self.draw_pile],
            "discard_pile": [card.to_dict() for card in self.discard_pile],
            "current_player_index": self.current_player_index,
            "direction": self.direction,
            "current_color": self.current_color.value if self.current_color else None,
            "is_over": self.is_over,
            "winner": self.winner,
            "pending_draw": (
                {
                    "card": self.pending_draw.card.to_dict(),
                    "owner_id": self.pending_draw.owner_id,
                }
                if self.pending_draw
                else None
            ),
            "vulnerable_player": self.vulnerable_player,
            "rules": {
                "hand_size": self.rules.hand_size,
                "min_players": self.rules.min_players,
                "max_players": self.rules.max_players,
                "reverse_skip_basis": self.rules.reverse_skip_basis,
                "uno_penalty_cards": self.rules.uno_penalty_cards,
                "end_when_one_active": self.rules.end_when_one_active,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameState":
        """Rebuild a game state from the output of to_dict()."""
        pending = data.get("pending_draw")
        color = data.get("current_color")
        return cls(
            id=data["id"],
            players=tuple(
                PlayerState(
                    id=p["id"],
                    hand=tuple(Card.from_dict(c) for c in p["hand"]),
                    active=p.get("active", True),
                )
                for p in data["players"]
            ),
            draw_pile=tuple(Card.from_dict(c) for c in data["draw_pile"]),
            discard_pile=tuple(Card.from_dict(c) for c in data["discard_pile"]),
            current_player_index=data["current_player_index"],
            direction=data["direction"],
            current_color=Color(color) if color else None,
            is_over=data["is_over"],
            winner=data.get("winner"),
            pending_draw=(
                PendingDraw(Card.from_dict(pending["card"]), pending["owner_id"])
                if pending
                else None
            ),
            vulnerable_player=data.get("vulnerable_player"),
            rules=UnoRules(**data.get("rules", {})),
        )

    def to_client_dict(self, viewer_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Convert the game state to the projection broadcast to a room.

        Only hand sizes are exposed, except that the viewer's own hand is
        included when ``viewer_id`` is given. The pending drawn card is shown
        to its owner only.

        Args:
            viewer_id: ID of the player the projection is for, if any

        Returns:
            Dictionary safe to send to clients
        """
        current = self.current_player
        view = {
            "game_id": self.id,
            "players": [
                {"id": p.id, "hand_size": len(p.hand), "is_active": p.active}
                for p in self.players
            ],
            "current_player_index": self.current_player_index,
            "current_player": current.id if current else None,
            "direction": self.direction,
            "current_color": self.current_color.value if self.current_color else None,
            "top_card": self.top_card.to_dict() if self.top_card else None,
            "draw_pile_size": len(self.draw_pile),
            "is_over": self.is_over,
            "winner": self.winner,
            "pending_draw": (
                {"owner_id": self.pending_draw.owner_id} if self.pending_draw else None
            ),
            "vulnerable_player": self.vulnerable_player,
        }
        if viewer_id is not None:
            viewer = self.get_player(viewer_id)
            if viewer is not None:
                view["hand"] = [card.to_dict() for card in viewer.hand]
            if self.pending_draw and self.pending_draw.owner_id == viewer_id:
                view["pending_draw"]["card"] = self.pending_draw.card.to_dict()
        return view
