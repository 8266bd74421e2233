"""
Tagged results for the UNO state transitions.

Every public transition returns either a new ``GameState`` or a ``Failure``.
Rule violations are values, not exceptions, so callers can branch on
``Failure.kind`` exhaustively and retry with corrected input.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Dict, Union

if TYPE_CHECKING:
    from unosync.uno.state import GameState


class ErrorKind(Enum):
    """Reasons a transition can be refused."""

    INVALID_PLAYER_COUNT = auto()
    DUPLICATE_PLAYER = auto()
    UNKNOWN_PLAYER = auto()
    GAME_OVER = auto()
    GAME_IN_PROGRESS = auto()
    NOT_YOUR_TURN = auto()
    CARD_NOT_IN_HAND = auto()
    ILLEGAL_MOVE = auto()
    COLOR_REQUIRED = auto()
    INVALID_COLOR = auto()
    PENDING_DRAW_BLOCKS = auto()
    NO_PENDING_DRAW = auto()
    NO_CARDS_AVAILABLE = auto()
    INVALID_CALL = auto()


@dataclass(frozen=True)
class Failure:
    """
    A refused transition.

    Attributes:
        kind: Why the transition was refused
        message: Human-readable explanation for logs and clients
    """

    kind: ErrorKind
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind.name, "message": self.message}


Result = Union["GameState", Failure]


def is_failure(result: Any) -> bool:
    """Check whether a transition result is a Failure."""
    return isinstance(result, Failure)
