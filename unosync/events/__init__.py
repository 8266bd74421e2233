"""
Event system for the unosync engine.

This package provides the event bus the room engine publishes game events on.
"""

from unosync.events.emitter import (
    EventEmitter,
    EventBus,
    EngineEventType,
)

__all__ = ["EventEmitter", "EventBus", "EngineEventType"]
