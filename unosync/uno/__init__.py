"""
UNO game module.

This module provides the implementation for the UNO card game, including
state models, tagged transition results, and the pure state transitions.
"""

from unosync.uno.state import (
    GameState as GameState,
    PlayerState as PlayerState,
    PendingDraw as PendingDraw,
    UnoRules as UnoRules,
)
from unosync.uno.results import (
    ErrorKind as ErrorKind,
    Failure as Failure,
    Result as Result,
    is_failure as is_failure,
)
from unosync.uno.transitions import StateTransitionEngine as StateTransitionEngine

__all__ = [
    "GameState",
    "PlayerState",
    "PendingDraw",
    "UnoRules",
    "ErrorKind",
    "Failure",
    "Result",
    "is_failure",
    "StateTransitionEngine",
]
