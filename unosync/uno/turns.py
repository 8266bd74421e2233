"""
Turn sequencing for UNO.

Seating order never changes during a game; disconnected players keep their
seat and are stepped over transparently.
"""

from typing import Sequence

from unosync.uno.state import GameState, PlayerState


def active_count(players: Sequence[PlayerState]) -> int:
    """Count the players still connected."""
    return sum(1 for p in players if p.active)


def next_index(
    players: Sequence[PlayerState], current_index: int, direction: int, steps: int = 1
) -> int:
    """
    Find the seat ``steps`` active players away from ``current_index``.

    Only seats holding an active player count as a step. With one active
    player the walk always lands on that player. If nobody is active the
    current index is returned unchanged.

    Args:
        players: Players in seating order
        current_index: Seat to count from
        direction: 1 or -1
        steps: Number of active players to advance past

    Returns:
        The seat of the player reached
    """
    if active_count(players) == 0:
        return current_index

    total = len(players)
    index = current_index
    remaining = steps
    while remaining > 0:
        index = (index + direction) % total
        if players[index].active:
            remaining -= 1
    return index


def advance(state: GameState, steps: int = 1) -> int:
    """Return the seat ``steps`` active players after the current one."""
    return next_index(state.players, state.current_player_index, state.direction, steps)
