"""
Room storage for the unosync engine.

The engine keeps exactly one canonical GameState per room. Where that value
lives is up to the RoomStore implementation; the engine guarantees there is
never more than one write in flight per room, so stores need no locking of
their own.
"""

from abc import ABC, abstractmethod
from typing import Dict, List

from unosync.uno.state import GameState


class RoomNotFoundError(KeyError):
    """Raised when an operation names a room that holds no game."""

    def __init__(self, room_id: str):
        super().__init__(room_id)
        self.room_id = room_id

    def __str__(self) -> str:
        return f"Room {self.room_id} not found"


class RoomStore(ABC):
    """
    Abstract storage for the latest game state of each room.
    """

    @abstractmethod
    async def load(self, room_id: str) -> GameState:
        """
        Get the latest state for a room.

        Raises:
            RoomNotFoundError: if the room holds no game
        """
        pass

    @abstractmethod
    async def save(self, room_id: str, state: GameState) -> None:
        """Replace the latest state for a room."""
        pass

    @abstractmethod
    async def delete(self, room_id: str) -> bool:
        """
        Forget a room.

        Returns:
            True if the room existed
        """
        pass

    @abstractmethod
    async def room_ids(self) -> List[str]:
        """List the rooms that hold a game."""
        pass


class InMemoryRoomStore(RoomStore):
    """
    RoomStore that keeps states in a dictionary.

    Superseded states are dropped as soon as a new one is saved.
    """

    def __init__(self):
        self._rooms: Dict[str, GameState] = {}

    async def load(self, room_id: str) -> GameState:
        try:
            return self._rooms[room_id]
        except KeyError:
            raise RoomNotFoundError(room_id) from None

    async def save(self, room_id: str, state: GameState) -> None:
        self._rooms[room_id] = state

    async def delete(self, room_id: str) -> bool:
        return self._rooms.pop(room_id, None) is not None

    async def room_ids(self) -> List[str]:
        return list(self._rooms)
