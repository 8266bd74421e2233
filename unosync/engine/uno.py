"""
UNO room engine implementation.

This module provides the UnoEngine class, which hosts one UNO game per room.
Each room has its own asyncio lock: an action loads the room's latest state,
runs one pure transition, stores the result and publishes events before the
next action on that room may start. Actions on different rooms run freely.
"""

import asyncio
import logging
import random
import time
from typing import Any, Callable, Dict, Optional, Sequence

from unosync.engine.base import BaseEngine
from unosync.engine.store import InMemoryRoomStore, RoomStore
from unosync.events import EngineEventType
from unosync.uno.constants import (
    HAND_SIZE,
    MAX_PLAYERS,
    MIN_PLAYERS,
    REVERSE_SKIP_ACTIVE,
    UNO_PENALTY,
)
from unosync.uno.results import ErrorKind, Failure, Result, is_failure
from unosync.uno.state import GameState, UnoRules
from unosync.uno.transitions import StateTransitionEngine

logger = logging.getLogger("unosync.engine")

Transition = Callable[[GameState], Result]


class UnoEngine(BaseEngine):
    """
    Engine hosting UNO games, one per room.

    Every action method returns the new GameState on success or the Failure
    produced by the rules; rejected actions leave the stored state untouched.
    Naming a room that holds no game raises RoomNotFoundError.

    Example:
        ```python
        engine = UnoEngine(config={"reverse_skip_basis": "seated"})
        await engine.initialize()
        state = await engine.start_game("room-1", ["alice", "bob"])
        result = await engine.draw_card("room-1", "alice")
        if is_failure(result):
            print(result.message)
        ```
    """

    def __init__(
        self,
        store: Optional[RoomStore] = None,
        config: Optional[Dict[str, Any]] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the UNO engine.

        Args:
            store: Where room states live (in memory if None)
            config: Configuration options for the games
            rng: Random source for every shuffle this engine performs
        """
        super().__init__(config)

        # Apply default configuration
        default_config = {
            "hand_size": HAND_SIZE,
            "min_players": MIN_PLAYERS,
            "max_players": MAX_PLAYERS,
            "reverse_skip_basis": REVERSE_SKIP_ACTIVE,
            "uno_penalty_cards": UNO_PENALTY,
            "end_when_one_active": True,
        }

        # Merge with provided config
        if config:
            default_config.update(config)

        self.config = default_config

        # Create the rules
        self.rules = UnoRules(
            hand_size=self.config["hand_size"],
            min_players=self.config["min_players"],
            max_players=self.config["max_players"],
            reverse_skip_basis=self.config["reverse_skip_basis"],
            uno_penalty_cards=self.config["uno_penalty_cards"],
            end_when_one_active=self.config["end_when_one_active"],
        )

        self.store = store or InMemoryRoomStore()
        self.rng = rng or random.Random()
        self._locks: Dict[str, asyncio.Lock] = {}

    async def initialize(self) -> None:
        """
        Initialize the engine and prepare to host games.
        """
        self.event_bus.emit(
            EngineEventType.ENGINE_INIT,
            {
                "engine_type": "uno",
                "config": self.config,
                "timestamp": time.time(),
            },
        )
        logger.info("UNO engine initialized")

    async def shutdown(self) -> None:
        """
        Shut down the engine.
        """
        self.event_bus.emit(EngineEventType.ENGINE_SHUTDOWN, {"timestamp": time.time()})
        logger.info("UNO engine shut down")

    def _lock_for(self, room_id: str) -> asyncio.Lock:
        return self._locks.setdefault(room_id, asyncio.Lock())

    async def start_game(self, room_id: str, player_ids: Sequence[str]) -> Result:
        """
        Start a new game in a room, replacing any finished game there.

        Args:
            room_id: Key of the room
            player_ids: IDs of the seated players, in seating order

        Returns:
            The opening game state, or a Failure
        """
        async with self._lock_for(room_id):
            if room_id in await self.store.room_ids():
                previous = await self.store.load(room_id)
                if not previous.is_over:
                    return self._reject(
                        room_id,
                        "START_GAME",
                        None,
                        Failure(
                            ErrorKind.GAME_IN_PROGRESS,
                            f"Room {room_id} already has a game in progress",
                        ),
                    )

            result = StateTransitionEngine.create_game_state(
                player_ids, self.rules, self.rng
            )
            if is_failure(result):
                return self._reject(room_id, "START_GAME", None, result)

            await self.store.save(room_id, result)
            logger.info(
                f"Room {room_id}: game {result.id} started with "
                f"{', '.join(p.id for p in result.players)}"
            )
            self.event_bus.emit(
                EngineEventType.GAME_STARTED,
                {
                    "room_id": room_id,
                    "game_id": result.id,
                    "players": [p.id for p in result.players],
                    "top_card": result.top_card.to_dict(),
                    "current_player": result.current_player.id,
                    "timestamp": time.time(),
                },
            )
            self._emit_state(room_id, result)
            return result

    async def restart_game(self, room_id: str) -> Result:
        """
        Start a fresh game in a room with the same seating as the last one.

        Only allowed once the previous game has ended.
        """
        previous = await self.store.load(room_id)
        return await self.start_game(room_id, [p.id for p in previous.players])

    async def play_card(
        self,
        room_id: str,
        player_id: str,
        card: Any,
        chosen_color: Any = None,
    ) -> Result:
        """Play a card from a player's hand."""
        return await self._apply(
            room_id,
            "PLAY_CARD",
            player_id,
            lambda state: StateTransitionEngine.play_card(
                state, player_id, card, chosen_color, self.rng
            ),
        )

    async def draw_card(self, room_id: str, player_id: str) -> Result:
        """Draw a card for the current player."""
        return await self._apply(
            room_id,
            "DRAW_CARD",
            player_id,
            lambda state: StateTransitionEngine.draw_card(state, player_id, self.rng),
        )

    async def play_drawn_card(
        self, room_id: str, player_id: str, chosen_color: Any = None
    ) -> Result:
        """Play the card a player just drew."""
        return await self._apply(
            room_id,
            "PLAY_DRAWN_CARD",
            player_id,
            lambda state: StateTransitionEngine.play_drawn_card(
                state, player_id, chosen_color, self.rng
            ),
        )

    async def pass_drawn_card(self, room_id: str, player_id: str) -> Result:
        """Keep the card a player just drew."""
        return await self._apply(
            room_id,
            "PASS_DRAWN_CARD",
            player_id,
            lambda state: StateTransitionEngine.pass_drawn_card(state, player_id),
        )

    async def call_penalty(self, room_id: str, target_id: str, caller_id: str) -> Result:
        """Call out a player at one card who has not declared UNO."""
        return await self._apply(
            room_id,
            "CALL_PENALTY",
            caller_id,
            lambda state: StateTransitionEngine.call_penalty(
                state, target_id, caller_id, self.rng
            ),
            target_id=target_id,
        )

    async def call_self(self, room_id: str, player_id: str) -> Result:
        """Declare UNO for a player."""
        return await self._apply(
            room_id,
            "CALL_UNO",
            player_id,
            lambda state: StateTransitionEngine.call_self(state, player_id),
        )

    async def disconnect_player(self, room_id: str, player_id: str) -> Result:
        """Mark a player as disconnected; turn order skips them from now on."""
        return await self._apply(
            room_id,
            "DISCONNECT",
            player_id,
            lambda state: StateTransitionEngine.deactivate_player(state, player_id),
        )

    async def reconnect_player(self, room_id: str, player_id: str) -> Result:
        """Mark a disconnected player as active again."""
        return await self._apply(
            room_id,
            "RECONNECT",
            player_id,
            lambda state: StateTransitionEngine.reactivate_player(state, player_id),
        )

    async def execute_player_action(
        self, room_id: str, player_id: str, action: str, **kwargs
    ) -> Result:
        """
        Execute a player action by name.

        Args:
            room_id: Key of the room
            player_id: ID of the acting player
            action: One of PLAY_CARD, DRAW_CARD, PLAY_DRAWN_CARD,
                PASS_DRAWN_CARD, CALL_PENALTY, CALL_UNO
            **kwargs: ``card`` and ``chosen_color`` for plays,
                ``target_id`` for CALL_PENALTY

        Raises:
            ValueError: for an unknown action or missing parameter
        """
        action = action.upper()
        if action == "PLAY_CARD":
            if kwargs.get("card") is None:
                raise ValueError("Missing card")
            return await self.play_card(
                room_id, player_id, kwargs["card"], kwargs.get("chosen_color")
            )
        elif action == "DRAW_CARD":
            return await self.draw_card(room_id, player_id)
        elif action == "PLAY_DRAWN_CARD":
            return await self.play_drawn_card(
                room_id, player_id, kwargs.get("chosen_color")
            )
        elif action == "PASS_DRAWN_CARD":
            return await self.pass_drawn_card(room_id, player_id)
        elif action == "CALL_PENALTY":
            target_id = kwargs.get("target_id")
            if not target_id:
                raise ValueError("Missing target player ID")
            return await self.call_penalty(room_id, target_id, player_id)
        elif action == "CALL_UNO":
            return await self.call_self(room_id, player_id)
        else:
            raise ValueError(f"Unknown action: {action}")

    async def get_state(self, room_id: str) -> GameState:
        """Get the latest full state of a room."""
        return await self.store.load(room_id)

    async def get_client_state(
        self, room_id: str, viewer_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Get the client projection of a room, as seen by ``viewer_id``."""
        state = await self.store.load(room_id)
        return state.to_client_dict(viewer_id)

    async def get_valid_actions(self, room_id: str, player_id: str) -> Dict[str, Any]:
        """Get the actions a player may take in a room right now."""
        state = await self.store.load(room_id)
        return StateTransitionEngine.get_valid_actions(state, player_id)

    async def close_room(self, room_id: str) -> bool:
        """
        Drop a room and its game.

        Returns:
            True if the room existed
        """
        async with self._lock_for(room_id):
            existed = await self.store.delete(room_id)
        # The lock stays so actions queued on it and a new game in this room
        # still share one writer
        if existed:
            logger.info(f"Room {room_id} closed")
        return existed

    async def _apply(
        self,
        room_id: str,
        action: str,
        player_id: str,
        transition: Transition,
        **details,
    ) -> Result:
        async with self._lock_for(room_id):
            state = await self.store.load(room_id)
            result = transition(state)
            if is_failure(result):
                return self._reject(room_id, action, player_id, result)

            if result is not state:
                await self.store.save(room_id, result)
            logger.debug(f"Room {room_id}: {player_id} {action}")
            self._publish(room_id, action, player_id, state, result, details)
            return result

    def _reject(
        self,
        room_id: str,
        action: str,
        player_id: Optional[str],
        failure: Failure,
    ) -> Failure:
        logger.warning(
            f"Room {room_id}: {action} by {player_id} rejected "
            f"({failure.kind.name}: {failure.message})"
        )
        self.event_bus.emit(
            EngineEventType.ACTION_REJECTED,
            {
                "room_id": room_id,
                "action": action,
                "player_id": player_id,
                "error": failure.kind.name,
                "message": failure.message,
            },
        )
        return failure

    def _publish(
        self,
        room_id: str,
        action: str,
        player_id: str,
        before: GameState,
        after: GameState,
        details: Dict[str, Any],
    ) -> None:
        event = {"room_id": room_id, "player_id": player_id}

        if action in ("PLAY_CARD", "PLAY_DRAWN_CARD"):
            self.event_bus.emit(
                EngineEventType.CARD_PLAYED,
                {
                    **event,
                    "card": after.top_card.to_dict(),
                    "current_color": after.current_color.value,
                    "from_draw": action == "PLAY_DRAWN_CARD",
                },
            )
        elif action == "DRAW_CARD":
            self.event_bus.emit(
                EngineEventType.CARD_DRAWN,
                {**event, "pending": after.pending_draw is not None},
            )
        elif action == "PASS_DRAWN_CARD":
            self.event_bus.emit(EngineEventType.DRAWN_CARD_KEPT, event)
        elif action in ("CALL_PENALTY", "CALL_UNO"):
            target_id = details.get("target_id", player_id)
            self.event_bus.emit(
                EngineEventType.UNO_CALLED,
                {
                    **event,
                    "target_id": target_id,
                    "penalty": action == "CALL_PENALTY",
                },
            )
            if action == "CALL_PENALTY":
                logger.info(f"Room {room_id}: {player_id} caught {target_id} on UNO")
        elif action == "DISCONNECT" and after is not before:
            logger.info(f"Room {room_id}: {player_id} disconnected")
            self.event_bus.emit(EngineEventType.PLAYER_LEFT, event)
        elif action == "RECONNECT" and after is not before:
            logger.info(f"Room {room_id}: {player_id} reconnected")
            self.event_bus.emit(EngineEventType.PLAYER_RETURNED, event)

        if after.is_over and not before.is_over:
            logger.info(f"Room {room_id}: game {after.id} won by {after.winner}")
            self.event_bus.emit(
                EngineEventType.GAME_ENDED,
                {"room_id": room_id, "game_id": after.id, "winner": after.winner},
            )
        elif after.current_player_index != before.current_player_index:
            self.event_bus.emit(
                EngineEventType.TURN_CHANGED,
                {"room_id": room_id, "current_player": after.current_player.id},
            )

        self._emit_state(room_id, after)

    def _emit_state(self, room_id: str, state: GameState) -> None:
        self.event_bus.emit(
            EngineEventType.STATE_UPDATED,
            {"room_id": room_id, "state": state.to_client_dict()},
        )
