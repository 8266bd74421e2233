"""
Base engine class for unosync.

This module provides the abstract base class for room engines. It defines the
common interface the transport layer drives: lifecycle, starting games, and
routing player actions to a room.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

from unosync.events import EventBus


class BaseEngine(ABC):
    """
    Abstract base class for room engines.

    This class defines the common interface that all room engines must
    implement, providing methods for starting games, handling player actions,
    and managing per-room game state.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the engine.

        Args:
            config: Configuration options for the games this engine runs
        """
        self.config = config or {}
        self.event_bus = EventBus.get_instance()

    @abstractmethod
    async def initialize(self) -> None:
        """
        Initialize the engine and prepare to host games.
        """
        pass

    @abstractmethod
    async def shutdown(self) -> None:
        """
        Shut down the engine and clean up resources.
        """
        pass

    @abstractmethod
    async def start_game(self, room_id: str, player_ids: Sequence[str]) -> Any:
        """
        Start a new game in a room.

        Args:
            room_id: Key of the room
            player_ids: IDs of the seated players, in seating order
        """
        pass

    @abstractmethod
    async def execute_player_action(
        self, room_id: str, player_id: str, action: str, **kwargs
    ) -> Any:
        """
        Execute a player action.

        Args:
            room_id: Key of the room
            player_id: ID of the player
            action: Action to perform
            **kwargs: Action-specific parameters
        """
        pass
