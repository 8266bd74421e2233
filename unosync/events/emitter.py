"""
Event bus for the unosync room engine.

The room engine publishes what happens in each game (cards played, UNO
calls, rejected actions, state updates) here. Transport layers subscribe to
push updates to connected players; tests subscribe to watch the engine.
"""

from collections import defaultdict
from typing import Any, Callable, Dict, List, Union
import threading
import logging
from enum import Enum

logger = logging.getLogger("unosync.events")

Handler = Callable[[Any], None]


class EventEmitter:
    """
    Synchronous publish/subscribe hub.

    Handlers run on the emitting thread in subscription order. A handler
    that raises is logged and skipped; the remaining handlers still run and
    the emitter never raises into the engine.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Handler]] = defaultdict(list)
        self._global_listeners: List[Handler] = []
        self._listener_lock = threading.RLock()

    @staticmethod
    def _name(event_type: Union[str, Enum]) -> str:
        return event_type.name if isinstance(event_type, Enum) else event_type

    def on(self, event_type: Union[str, Enum], callback: Handler) -> Callable[[], None]:
        """
        Subscribe to one event type.

        Args:
            event_type: An EngineEventType or its name
            callback: Called with the event payload

        Returns:
            Function that cancels the subscription
        """
        name = self._name(event_type)
        with self._listener_lock:
            self._listeners[name].append(callback)

        def unsubscribe():
            with self._listener_lock:
                if callback in self._listeners[name]:
                    self._listeners[name].remove(callback)

        return unsubscribe

    def on_any(self, callback: Handler) -> Callable[[], None]:
        """
        Subscribe to every event.

        The callback receives an ``(event_name, payload)`` tuple.

        Returns:
            Function that cancels the subscription
        """
        with self._listener_lock:
            self._global_listeners.append(callback)

        def unsubscribe():
            with self._listener_lock:
                if callback in self._global_listeners:
                    self._global_listeners.remove(callback)

        return unsubscribe

    def emit(self, event_type: Union[str, Enum], data: Dict[str, Any]) -> None:
        """
        Publish an event.

        Args:
            event_type: An EngineEventType or its name
            data: Event payload
        """
        name = self._name(event_type)
        with self._listener_lock:
            calls = [(cb, data) for cb in self._listeners.get(name, [])]
            calls += [(cb, (name, data)) for cb in self._global_listeners]

        # Handlers may subscribe or unsubscribe, so run them outside the lock
        for callback, payload in calls:
            try:
                callback(payload)
            except Exception as e:
                logger.error(f"Error in event handler for {name}: {e}", exc_info=True)


class EventBus:
    """
    Process-wide EventEmitter shared by every engine.
    """

    _instance = None
    _lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> EventEmitter:
        """Get the shared emitter, creating it on first use."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = EventEmitter()
        return cls._instance


class EngineEventType(Enum):
    """
    Event types published by the room engine.
    """

    # Engine lifecycle
    ENGINE_INIT = "engine_init"
    ENGINE_SHUTDOWN = "engine_shutdown"

    # Game lifecycle
    GAME_STARTED = "game_started"
    GAME_ENDED = "game_ended"

    # Seats and turns
    PLAYER_LEFT = "player_left"
    PLAYER_RETURNED = "player_returned"
    TURN_CHANGED = "turn_changed"

    # Cards
    CARD_PLAYED = "card_played"
    CARD_DRAWN = "card_drawn"
    DRAWN_CARD_KEPT = "drawn_card_kept"

    # UNO calls
    UNO_CALLED = "uno_called"

    # Outcomes of every action
    STATE_UPDATED = "state_updated"
    ACTION_REJECTED = "action_rejected"
