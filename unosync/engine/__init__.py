"""
Room engine for unosync.

This package hosts UNO games per room: it serializes actions on each room,
stores the resulting states, and publishes what happened on the event bus.
"""

from unosync.engine.base import BaseEngine
from unosync.engine.store import InMemoryRoomStore, RoomNotFoundError, RoomStore
from unosync.engine.uno import UnoEngine

__all__ = [
    "BaseEngine",
    "InMemoryRoomStore",
    "RoomNotFoundError",
    "RoomStore",
    "UnoEngine",
]
